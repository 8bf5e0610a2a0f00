# src/a11y_auditor/dom/rules/touch_target.py
from typing import List

from ...model import Category, Severity
from ..core import AuditContext, Hit, Node, audit_rule
from .common import describe

# Parents whose links flow inside running text (WCAG 2.5.8 inline exception)
INLINE_TEXT_PARENTS = frozenset({"p", "td", "dd", "figcaption", "blockquote"})


def _is_inline_link(node: Node) -> bool:
    parent = node.parent
    if node.tag != "a" or parent is None or parent.tag not in INLINE_TEXT_PARENTS:
        return False
    return any(c.is_text and c.text.strip() for c in parent.children)


@audit_rule(
    "touch-target-small",
    Category.TOUCH_TARGET,
    Severity.WARNING,
    wcag="2.5.8",
    suggestion="Give the control at least 44x44 CSS px of hit area (padding or min-width/min-height).",
)
def touch_target_small(node: Node, ctx: AuditContext) -> List[Hit]:
    """Element renders smaller than the minimum touch target."""
    # Needs measured layout; without it the check is skipped, never passed or failed.
    box = ctx.layout_for(node)
    if box is None:
        return []
    if ctx.tables.touch_target_exempt_inline_links and _is_inline_link(node):
        return []

    minimum = ctx.tables.touch_target_min_px
    if box.width >= minimum and box.height >= minimum:
        return []

    return [Hit(
        f"{describe(node)} is {box.width:g}x{box.height:g}px, below the {minimum:g}px touch target minimum",
        details={"width": box.width, "height": box.height, "minimum": minimum},
    )]


RULES = (touch_target_small,)
