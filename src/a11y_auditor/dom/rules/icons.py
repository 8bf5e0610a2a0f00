# src/a11y_auditor/dom/rules/icons.py
from typing import List

from ...model import Category, Severity
from ..core import AuditContext, Hit, Node, audit_rule
from .common import describe, labelled_by_attributes, nonempty


def _is_icon(node: Node, ctx: AuditContext) -> bool:
    """Icon font glyph, inline svg, or a wrapper holding nothing but icons."""
    pending = [node]
    while pending:
        current = pending.pop()
        if current.is_text:
            return False
        if current.tag in ctx.tables.icon_tags or ctx.tables.has_icon_class(current.attribute("class")):
            continue
        content = _meaningful_children(current)
        if not content:
            return False
        pending.extend(content)
    return True


def _meaningful_children(node: Node) -> List[Node]:
    return [c for c in node.children if not (c.is_text and not c.text.strip())]


def _icon_has_name(icon: Node) -> bool:
    """An icon that names itself: aria-label, alt, or an <svg><title>."""
    for element in icon.iter_elements():
        if (element.attribute("aria-hidden") or "").strip().lower() == "true":
            continue
        if labelled_by_attributes(element) or nonempty(element.attribute("alt")):
            return True
        if element.tag == "title" and element.text_content().strip():
            return True
    return False


@audit_rule(
    "icon-button-unlabeled",
    Category.ICONS,
    Severity.ERROR,
    wcag="4.1.2",
    tags=("button", "a"),
    suggestion='Add aria-label="..." to the control and aria-hidden="true" to the icon.',
)
def icon_button_unlabeled(node: Node, ctx: AuditContext) -> List[Hit]:
    """Control shows only an icon and has no accessible name."""
    content = _meaningful_children(node)
    if not content or not all(_is_icon(c, ctx) for c in content):
        return []

    if labelled_by_attributes(node) or nonempty(node.attribute("title")):
        return []
    if any(_icon_has_name(icon) for icon in content):
        return []

    kind = "button" if node.tag == "button" else "link"
    return [Hit(f"Icon-only {kind} {describe(node)} has no accessible name")]


RULES = (icon_button_unlabeled,)
