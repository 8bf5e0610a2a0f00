# tests/handlers/test_cli.py
import json

import pytest

from a11y_auditor.app import main
from a11y_auditor.handlers.audit_handler import handle_run
from a11y_auditor.handlers.ignore_handler import handle_ignore
from a11y_auditor.handlers.rules_handler import handle_rules

CLEAN_PAGE = "<main><h1>Hello</h1><p>All good.</p></main>"
WARNING_PAGE = "<main><h1>Hello</h1><h3>Skipped</h3></main>"
ERROR_PAGE = "<main><img src='cat.png'><button>OK</button></main>"


@pytest.fixture
def site(tmp_path, monkeypatch):
    """A working directory with a few pages; ignore lists land in its cache dir."""
    monkeypatch.chdir(tmp_path)
    for name, html in (("clean.html", CLEAN_PAGE), ("warn.html", WARNING_PAGE), ("error.html", ERROR_PAGE)):
        (tmp_path / name).write_text(html, encoding="utf-8")
    return tmp_path


# --- rules ---

def test_rules_lists_catalog(capsys):
    assert handle_rules([]) == 0
    out = capsys.readouterr().out
    assert "img-alt-missing" in out
    assert "touch-target-small" in out


def test_rules_for_category(capsys):
    assert handle_rules(["--category", "contrast"]) == 0
    out = capsys.readouterr().out
    assert "contrast-ratio-low" in out
    assert "img-alt-missing" not in out


def test_rules_unknown_category(capsys):
    assert handle_rules(["--category", "colour"]) == 1
    assert "Unknown category" in capsys.readouterr().out


# --- run ---

def test_run_clean_page(site, capsys):
    assert handle_run(["clean.html"]) == 0
    assert "clean.html: 0 findings" in capsys.readouterr().out


def test_run_fails_on_errors_by_default(site):
    assert handle_run(["error.html"]) == 1
    assert handle_run(["warn.html"]) == 0


def test_fail_on_threshold(site):
    assert handle_run(["warn.html", "--fail-on", "warning"]) == 1
    assert handle_run(["error.html", "--fail-on", "never"]) == 0


def test_run_json_output(site, capsys):
    assert handle_run(["error.html", "--format", "json"]) == 1
    data = json.loads(capsys.readouterr().out)
    rules = [f["rule_id"] for f in data["error.html"]["findings"]]
    assert rules == ["img-alt-missing"]


def test_run_with_layout_data(site, capsys):
    (site / "layout.json").write_text(json.dumps({"/0/1": {"width": 20, "height": 20}}), encoding="utf-8")
    handle_run(["error.html", "--layout", "layout.json", "--format", "json"])
    data = json.loads(capsys.readouterr().out)
    assert "touch-target-small" in [f["rule_id"] for f in data["error.html"]["findings"]]


def test_layout_data_needs_single_document(site, capsys):
    (site / "layout.json").write_text("{}", encoding="utf-8")
    assert handle_run(["error.html", "warn.html", "--layout", "layout.json"]) == 1
    assert "single file" in capsys.readouterr().out


def test_unreadable_layout_file(site, capsys):
    assert handle_run(["error.html", "--colors", "nope.json"]) == 1
    assert "Could not load audit data" in capsys.readouterr().out


def test_run_directory_batch_with_summary(site, capsys):
    assert handle_run([str(site), "--fail-on", "never"]) == 0
    out = capsys.readouterr().out
    assert "AUDIT SUMMARY" in out
    assert "Files Audited:       3" in out


def test_run_filters(site, capsys):
    assert handle_run(["error.html", "--min-severity", "warning", "--categories", "structure"]) == 0
    assert "error.html: 0 findings" in capsys.readouterr().out


def test_run_invalid_options(site, capsys):
    assert handle_run(["error.html", "--min-severity", "fatal"]) == 1
    assert "❌" in capsys.readouterr().out
    assert handle_run(["error.html", "--disable", "no-such-rule"]) == 1


def test_run_missing_file(site, capsys):
    assert handle_run(["missing.html"]) == 1
    assert "❌ missing.html" in capsys.readouterr().out


def test_run_export(site, capsys):
    assert handle_run(["error.html", "--export", "out/report.csv", "--fail-on", "never"]) == 0
    assert (site / "out" / "report.csv").exists()
    assert "Report exported to" in capsys.readouterr().out


def test_run_no_html_files(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "empty").mkdir()
    assert handle_run(["empty"]) == 1
    assert "No HTML files found" in capsys.readouterr().out


# --- ignore ---

def test_ignore_rules_apply_to_runs(site, capsys):
    assert handle_ignore(["--project", "demo", "--rules", "img-alt-missing", "--list"]) == 0
    out = capsys.readouterr().out
    assert "Rule ignore list updated" in out
    assert "- img-alt-missing" in out

    assert handle_run(["error.html", "--project", "demo"]) == 0
    assert handle_run(["error.html"]) == 1


def test_ignore_messages(site, capsys):
    assert handle_ignore(["--messages", "cat.png"]) == 0
    assert handle_run(["error.html"]) == 0
    assert handle_ignore(["--messages-reset"]) == 0
    assert handle_run(["error.html"]) == 1


def test_ignore_unknown_rule(site, capsys):
    assert handle_ignore(["--rules", "made-up-rule"]) == 1
    assert "Unknown rule ids" in capsys.readouterr().out


# --- app entry point ---

def test_main_dispatches_to_commands(site, capsys):
    assert main(["--log-level", "ERROR", "rules", "--category", "icons"]) == 0
    assert "icon-button-unlabeled" in capsys.readouterr().out


def test_main_without_command(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out.lower()


def test_main_help_exits_cleanly(capsys):
    assert main(["--help"]) == 0
    assert main(["run", "--help"]) == 0
