# src/a11y_auditor/dom/rules/keyboard_focus.py
from typing import List

from ...model import Category, Severity
from ..core import AuditContext, Hit, Node, audit_rule
from ..heuristics import parse_inline_style
from .common import describe, parse_tabindex

SUPPRESSED_OUTLINE_VALUES = frozenset({"none", "0", "0px", "0 none", "none 0"})


@audit_rule(
    "positive-tabindex",
    Category.KEYBOARD_FOCUS,
    Severity.ADVISORY,
    wcag="2.4.3",
    suggestion='Use tabindex="0" and order the markup the way it should be navigated.',
)
def positive_tabindex(node: Node, ctx: AuditContext) -> List[Hit]:
    """Positive tabindex overrides the natural focus order."""
    value = parse_tabindex(node)
    if value is None or value <= 0:
        return []
    return [Hit(f"{describe(node)} has tabindex={value}, which reorders keyboard focus", details={"tabindex": value})]


@audit_rule(
    "focus-outline-suppressed",
    Category.KEYBOARD_FOCUS,
    Severity.WARNING,
    wcag="2.4.7",
    suggestion="Keep a visible focus indicator, e.g. a :focus-visible outline with sufficient contrast.",
)
def focus_outline_suppressed(node: Node, ctx: AuditContext) -> List[Hit]:
    """Inline style removes the focus outline."""
    style = node.attribute("style")
    if not style:
        return []
    declarations = parse_inline_style(style)
    for prop in ("outline", "outline-style", "outline-width"):
        value = declarations.get(prop)
        if value is not None and " ".join(value.lower().split()) in SUPPRESSED_OUTLINE_VALUES:
            return [Hit(f"{describe(node)} sets '{prop}: {value}' inline, hiding the focus indicator")]
    return []


RULES = (positive_tabindex, focus_outline_suppressed)
