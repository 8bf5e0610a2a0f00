# src/a11y_auditor/dom/rules/aria.py
from typing import List

from ...model import Category, Severity
from ..core import AuditContext, Hit, Node, audit_rule
from .common import describe, is_focusable

IDREF_ATTRIBUTES = ("aria-labelledby", "aria-describedby", "aria-controls")


@audit_rule(
    "interactive-role-missing",
    Category.ARIA,
    Severity.ERROR,
    wcag="4.1.2",
    tags=("div", "span"),
    suggestion='Use a native <button>, or add role="button", tabindex="0" and Enter/Space key handling.',
)
def interactive_role_missing(node: Node, ctx: AuditContext) -> List[Hit]:
    """Scripted div/span acts as a control but exposes no interactive role."""
    handlers = [a for a in ctx.tables.click_attributes if node.has_attribute(a)]
    if not handlers:
        return []
    if node.role in ctx.tables.interactive_roles:
        return []
    return [Hit(
        f"{describe(node)} is scripted as a control ({handlers[0]}) but has no interactive role",
        details={"handler_attributes": handlers},
    )]


@audit_rule(
    "aria-hidden-focusable",
    Category.ARIA,
    Severity.ERROR,
    wcag="4.1.2",
    suggestion='Remove aria-hidden, or take the element out of the tab order (tabindex="-1", disabled).',
)
def aria_hidden_focusable(node: Node, ctx: AuditContext) -> List[Hit]:
    """Element hidden from assistive technology can still receive keyboard focus."""
    if (node.attribute("aria-hidden") or "").strip().lower() != "true":
        return []
    if not is_focusable(node):
        return []
    return [Hit(f'{describe(node)} has aria-hidden="true" but is keyboard focusable')]


@audit_rule(
    "aria-reference-missing",
    Category.ARIA,
    Severity.WARNING,
    wcag="1.3.1",
    suggestion="Point the attribute at the id of an element that exists in the page.",
)
def aria_reference_missing(node: Node, ctx: AuditContext) -> List[Hit]:
    """ARIA relationship attribute references an id that does not exist."""
    missing = {}
    for attr in IDREF_ATTRIBUTES:
        value = node.attribute(attr)
        if not value:
            continue
        dangling = [ref for ref in value.split() if ref not in ctx.elements_by_id]
        if dangling:
            missing[attr] = dangling

    if not missing:
        return []

    summary = "; ".join(f"{attr} -> {', '.join(ids)}" for attr, ids in missing.items())
    return [Hit(f"{describe(node)} references missing id(s): {summary}", details={"missing": missing})]


RULES = (interactive_role_missing, aria_hidden_focusable, aria_reference_missing)
