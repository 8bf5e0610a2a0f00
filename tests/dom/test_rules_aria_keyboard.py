# tests/dom/test_rules_aria_keyboard.py
import pytest

from a11y_auditor.model import Severity


def test_clickable_div_without_role(audit_html):
    findings = audit_html("<main><div onclick='go()'>Go</div></main>").for_rule("interactive-role-missing")

    assert len(findings) == 1
    assert findings[0].details["handler_attributes"] == ["onclick"]


def test_framework_click_attribute(audit_html):
    assert len(audit_html("<main><span data-toggle='modal'>Open</span></main>").for_rule(
        "interactive-role-missing")) == 1


def test_clickable_div_with_role(audit_html):
    html = "<main><div onclick='go()' role='button' tabindex='0'>Go</div></main>"
    assert audit_html(html).for_rule("interactive-role-missing") == []


def test_aria_hidden_focusable(audit_html):
    findings = audit_html("<main><button aria-hidden='true'>X</button></main>").for_rule("aria-hidden-focusable")
    assert len(findings) == 1
    assert findings[0].severity == Severity.ERROR


@pytest.mark.parametrize("html", [
    "<div aria-hidden='true'>decor</div>",
    "<a href='/' aria-hidden='true' tabindex='-1'>Home</a>",
    "<button aria-hidden='true' disabled>X</button>",
    "<a aria-hidden='true'>no href</a>",
])
def test_aria_hidden_not_focusable(audit_html, html):
    assert audit_html(f"<main>{html}</main>").for_rule("aria-hidden-focusable") == []


def test_aria_hidden_on_tabindex_zero_element(audit_html):
    assert len(audit_html("<main><span tabindex='0' aria-hidden='true'>x</span></main>").for_rule(
        "aria-hidden-focusable")) == 1


def test_dangling_aria_references_are_aggregated(audit_html):
    html = "<main><p id='hint'>8+ chars</p><input aria-label='pw' aria-describedby='hint gone' aria-controls='nope'></main>"
    findings = audit_html(html).for_rule("aria-reference-missing")

    assert len(findings) == 1
    assert findings[0].node_path == (0, 1)
    assert findings[0].details["missing"] == {"aria-describedby": ["gone"], "aria-controls": ["nope"]}


def test_aria_references_resolve_anywhere_in_document(audit_html):
    html = "<main><button aria-controls='menu'>Menu</button><ul id='menu'></ul></main>"
    assert audit_html(html).for_rule("aria-reference-missing") == []


def test_positive_tabindex(audit_html):
    findings = audit_html("<main><a href='/' tabindex='3'>Home</a></main>").for_rule("positive-tabindex")

    assert len(findings) == 1
    assert findings[0].severity == Severity.ADVISORY
    assert findings[0].details["tabindex"] == 3


@pytest.mark.parametrize("value, parsed", [("2abc", 2), ("1.5", 1), (" +4", 4)])
def test_tabindex_reads_leading_integer(audit_html, value, parsed):
    findings = audit_html(f"<main><div tabindex='{value}'>x</div></main>").for_rule("positive-tabindex")
    assert [f.details["tabindex"] for f in findings] == [parsed]


@pytest.mark.parametrize("value", ["0", "-1", "abc", "-3px", ""])
def test_non_positive_tabindex(audit_html, value):
    assert audit_html(f"<main><div tabindex='{value}'>x</div></main>").for_rule("positive-tabindex") == []


@pytest.mark.parametrize("style", ["outline: none", "outline:0 !important", "color: red; OUTLINE-STYLE: none"])
def test_outline_suppressed(audit_html, style):
    html = f"<main><a href='/' style='{style}'>Home</a></main>"
    assert len(audit_html(html).for_rule("focus-outline-suppressed")) == 1


def test_visible_outline(audit_html):
    html = "<main><a href='/' style='outline: 2px solid #005fcc'>Home</a></main>"
    assert audit_html(html).for_rule("focus-outline-suppressed") == []
