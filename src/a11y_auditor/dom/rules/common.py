# src/a11y_auditor/dom/rules/common.py
import re
from typing import Optional

from ..core import AuditContext, Node

NATIVE_CONTROLS = frozenset({"button", "select", "textarea", "input"})

# HTML integer parsing: leading sign and digits, trailing garbage ignored
_HTML_INTEGER = re.compile(r"\s*([+-]?\d+)")


def nonempty(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def parse_tabindex(node: Node) -> Optional[int]:
    """Integer value of tabindex ("2abc" and "1.5" read as 2 and 1), or None when absent or unparsable."""
    match = _HTML_INTEGER.match(node.attribute("tabindex") or "")
    return int(match.group(1)) if match else None


def is_disabled(node: Node) -> bool:
    return node.has_attribute("disabled")


def is_focusable(node: Node) -> bool:
    """Whether the element lands in the sequential tab order."""
    tabindex = parse_tabindex(node)
    if tabindex is not None:
        return tabindex >= 0
    if node.tag in ("a", "area"):
        return node.has_attribute("href")
    if node.tag in NATIVE_CONTROLS:
        if node.tag == "input" and (node.attribute("type") or "").strip().lower() == "hidden":
            return False
        return not is_disabled(node)
    if node.tag == "summary":
        return True
    editable = node.attribute("contenteditable")
    return editable is not None and editable.strip().lower() in ("", "true")


def has_click_handler(node: Node, ctx: AuditContext) -> bool:
    return any(node.has_attribute(a) for a in ctx.tables.click_attributes)


def is_interactive(node: Node, ctx: AuditContext) -> bool:
    """Focusable, scripted, or carrying an interactive ARIA role."""
    return (
        is_focusable(node)
        or node.role in ctx.tables.interactive_roles
        or has_click_handler(node, ctx)
    )


def labelled_by_attributes(node: Node) -> bool:
    """
    True when aria-label or aria-labelledby is present and non-empty.
    Dangling aria-labelledby ids are reported by aria-reference-missing, not here.
    """
    return nonempty(node.attribute("aria-label")) or nonempty(node.attribute("aria-labelledby"))


def describe(node: Node) -> str:
    """Short human-readable element description for messages, e.g. <input name="email">."""
    for attr in ("id", "name", "href", "src", "class"):
        value = node.attribute(attr)
        if nonempty(value):
            value = value.strip()
            if len(value) > 40:
                value = value[:37] + "..."
            return f'<{node.tag} {attr}="{value}">'
    return f"<{node.tag}>"
