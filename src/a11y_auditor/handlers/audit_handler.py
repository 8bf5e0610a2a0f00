# src/a11y_auditor/handlers/audit_handler.py
import argparse
import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from tqdm.auto import tqdm

from a11y_auditor.controllers.audit_controller import AuditController
from a11y_auditor.controllers.report_controller import ReportController
from a11y_auditor.errors import InvalidOptions
from a11y_auditor.managers.audit_ignore_manager import AuditIgnoreManager
from a11y_auditor.managers.config_manager import config_manager
from a11y_auditor.model import Severity
from a11y_auditor.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

HTML_SUFFIXES = (".html", ".htm", ".xhtml")
FAIL_ON_CHOICES = ["error", "warning", "advisory", "never"]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="a11y-audit run", description="Audit HTML files for accessibility issues.")
    parser.add_argument("files", nargs="+", help="HTML files or directories to audit.")
    parser.add_argument("--categories", type=str, default=None, help="Comma separated categories to run.")
    parser.add_argument("--min-severity", type=str, default=None, help="Drop findings below this severity.")
    parser.add_argument("--disable", type=str, default=None, help="Comma separated rule ids to skip.")
    parser.add_argument("--layout", type=str, default=None, help="JSON file: node locator -> {width, height}.")
    parser.add_argument("--colors", type=str, default=None, help="JSON file: node locator -> {foreground, background}.")
    parser.add_argument("--format", choices=["text", "json"], default=None, help="Console output format.")
    parser.add_argument("--export", type=str, default=None, help="Write results to .csv, .json or .xlsx.")
    parser.add_argument("--workers", type=int, default=None, help="Worker processes for batches.")
    parser.add_argument("--fail-on", choices=FAIL_ON_CHOICES, default=None, help="Lowest severity that fails the run.")
    parser.add_argument("--project", type=str, default="default", help="Project whose ignore lists apply.")
    return parser


def handle_run(args: List[str]) -> int:
    """
    Handler for 'run'. Returns 0 when no finding reaches the --fail-on
    severity and every file could be audited, 1 otherwise.
    """
    try:
        parsed_args = _build_parser().parse_args(args)
    except SystemExit as e:
        return 0 if e.code == 0 else 1

    files = _collect_files(parsed_args.files)
    if not files:
        print("❌ No HTML files found.")
        return 1

    try:
        options = _build_options(parsed_args, single_document=len(files) == 1)
    except (OSError, ValueError) as e:
        print(f"❌ Could not load audit data: {e}")
        return 1

    ignore_manager = AuditIgnoreManager(parsed_args.project, PathUtils.get_cache_root())
    controller = AuditController(ignore_manager)
    workers = parsed_args.workers or config_manager.get_nested("engine.workers", 1)
    logger.debug(f"Auditing {len(files)} file(s) with {workers} worker(s)")

    pbar = tqdm(total=len(files), desc="Auditing", unit="file", disable=len(files) < 2)

    def progress_update(current, total):
        pbar.n = current
        pbar.refresh()

    start = time.perf_counter()
    try:
        summary = controller.run_audit(files, options, workers=workers, progress_callback=progress_update)
    except InvalidOptions as e:
        print(f"❌ {e}")
        return 1
    finally:
        pbar.close()
    summary["duration"] = time.perf_counter() - start

    reports = controller.get_reports()
    report_controller = ReportController(reports)

    output_format = parsed_args.format or config_manager.get_nested("output.format", "text")
    if output_format == "json":
        print(report_controller.render_json())
    else:
        print(report_controller.render_text())
        if len(files) > 1:
            _print_summary(summary)

    for path, error in controller.get_errors().items():
        print(f"❌ {path}: {error}")

    if parsed_args.export:
        try:
            out_path = report_controller.export(Path(parsed_args.export))
            print(f"✅ Report exported to: {out_path}")
        except (OSError, ValueError) as e:
            print(f"❌ Error exporting: {e}")
            return 1

    fail_on = parsed_args.fail_on or config_manager.get_nested("output.fail_on", "error")
    if controller.get_errors() or _fails(reports.values(), fail_on):
        return 1
    return 0


def _collect_files(paths: List[str]) -> List[str]:
    """Expands directories into the HTML files beneath them."""
    files = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            files.extend(str(p) for p in sorted(path.rglob("*")) if p.suffix.lower() in HTML_SUFFIXES)
        else:
            files.append(str(path))
    return files


def _load_json(path: Optional[str]) -> Optional[Dict[str, Any]]:
    if not path:
        return None
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object keyed by node locator")
    return data


def _build_options(parsed_args: argparse.Namespace, single_document: bool) -> Dict[str, Any]:
    layout = _load_json(parsed_args.layout)
    colors = _load_json(parsed_args.colors)
    if (layout is not None or colors is not None) and not single_document:
        raise ValueError("--layout and --colors describe one document; pass a single file")

    categories = parsed_args.categories or config_manager.get_nested("engine.categories") or None
    return {
        "categories": categories,
        "min_severity": parsed_args.min_severity or config_manager.get_nested("engine.min_severity"),
        "disabled_rules": parsed_args.disable,
        "layout_data": layout,
        "color_data": colors,
        "tables": config_manager.heuristic_tables(),
    }


def _fails(reports, fail_on: str) -> bool:
    if fail_on == "never":
        return False
    threshold = Severity(fail_on)
    return any(f.severity.at_least(threshold) for r in reports for f in r.findings)


def _print_summary(summary: Dict[str, Any]) -> None:
    stats = summary.get('stats', {})

    print("\n" + "=" * 60)
    print("📊 AUDIT SUMMARY")
    print("=" * 60)
    print(f"Files Audited:       {summary.get('total_files', 0)}")
    print(f"Files With Findings: {summary.get('files_with_findings', 0)}")
    print(f"Total Findings:      {summary.get('total_findings', 0)}")
    print(f"Failed Files:        {summary.get('failed_files', 0)}")
    print(f"Analysis Duration:   {summary.get('duration', 0):.2f} seconds")
    print("-" * 60)

    if stats:
        print(f"{'CATEGORY':<15} | {'RULE':<35} | {'COUNT':>5}")
        print("-" * 60)
        for cat in sorted(stats.keys()):
            for rule, count in stats[cat].most_common():
                print(f"{cat:<15} | {rule:<35} | {count:>5}")
    print("=" * 60 + "\n")
