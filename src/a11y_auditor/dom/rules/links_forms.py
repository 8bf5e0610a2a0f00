# src/a11y_auditor/dom/rules/links_forms.py
from typing import List

from ...model import Category, Severity
from ..core import AuditContext, Hit, Node, audit_rule
from ..heuristics import normalize_phrase
from .common import describe, labelled_by_attributes, nonempty

# Inputs whose accessible name comes from their value/alt, not from a label
UNLABELED_INPUT_TYPES = frozenset({"hidden", "submit", "reset", "button", "image"})


@audit_rule(
    "link-text-vague",
    Category.LINKS_FORMS,
    Severity.WARNING,
    wcag="2.4.4",
    tags=("a",),
    suggestion="Say where the link goes, or add an aria-label such as 'Read more about our pricing'.",
)
def link_text_vague(node: Node, ctx: AuditContext) -> List[Hit]:
    """Link text only makes sense with the surrounding visual context."""
    text = node.text_content()
    if not ctx.tables.is_vague_link_text(text):
        return []

    aria_label = node.attribute("aria-label")
    if nonempty(aria_label) and not ctx.tables.is_vague_link_text(aria_label):
        return []
    if nonempty(node.attribute("aria-labelledby")):
        return []

    return [Hit(
        f"Link text '{normalize_phrase(text)}' does not describe its destination",
        details={"text": normalize_phrase(text), "href": (node.attribute("href") or "").strip()},
    )]


@audit_rule(
    "link-new-tab-unlabeled",
    Category.LINKS_FORMS,
    Severity.WARNING,
    wcag="3.2.5",
    tags=("a",),
    suggestion='Add visually hidden text such as "(opens in a new tab)" or mention it in aria-label.',
)
def link_new_tab_unlabeled(node: Node, ctx: AuditContext) -> List[Hit]:
    """Link opens a new window or tab without telling the user."""
    if (node.attribute("target") or "").strip().lower() != "_blank":
        return []

    tables = ctx.tables
    # text_content() includes visually hidden spans (.sr-only and friends)
    candidates = (
        node.text_content(),
        node.attribute("aria-label"),
        node.attribute("title"),
        ctx.text_of_ids(node.attribute("aria-labelledby")),
        ctx.text_of_ids(node.attribute("aria-describedby")),
    )
    if any(tables.mentions_new_tab(text) for text in candidates):
        return []

    return [Hit(
        f"{describe(node)} opens a new tab without warning",
        details={"href": (node.attribute("href") or "").strip()},
    )]


@audit_rule(
    "form-input-unlabeled",
    Category.LINKS_FORMS,
    Severity.ERROR,
    wcag="3.3.2",
    tags=("input", "select", "textarea"),
    suggestion='Add <label for="..."> pointing at the field id, or an aria-label.',
)
def form_input_unlabeled(node: Node, ctx: AuditContext) -> List[Hit]:
    """Form control has no programmatically associated label."""
    if node.tag == "input":
        input_type = (node.attribute("type") or "text").strip().lower()
        if input_type in UNLABELED_INPUT_TYPES:
            return []

    if labelled_by_attributes(node):
        return []

    element_id = (node.attribute("id") or "").strip()
    if element_id and element_id in ctx.label_targets:
        return []

    if any(a.tag == "label" for a in ctx.ancestors_of(node)):
        return []

    return [Hit(
        f"Form field {describe(node)} has no associated label",
        details={"has_id": bool(element_id), "placeholder": node.attribute("placeholder")},
    )]


RULES = (link_text_vague, link_new_tab_unlabeled, form_input_unlabeled)
