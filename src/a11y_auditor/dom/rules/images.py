# src/a11y_auditor/dom/rules/images.py
from typing import List

from ...model import Category, Severity
from ..core import AuditContext, Hit, Node, audit_rule


def _is_image(node: Node) -> bool:
    if node.tag == "img":
        return True
    return node.tag == "input" and (node.attribute("type") or "").strip().lower() == "image"


@audit_rule(
    "img-alt-missing",
    Category.IMAGES,
    Severity.ERROR,
    wcag="1.1.1",
    tags=("img", "input"),
    suggestion='Describe the image in alt="...", or use alt="" if it is purely decorative.',
)
def img_alt_missing(node: Node, ctx: AuditContext) -> List[Hit]:
    """Image has no alt attribute at all."""
    # alt="" is a valid decorative marker, only a missing attribute fails
    if not _is_image(node) or node.has_attribute("alt"):
        return []
    src = (node.attribute("src") or "").strip()
    return [Hit(f"Image missing alt attribute: {src or '(no src)'}", details={"src": src})]


@audit_rule(
    "img-alt-generic",
    Category.IMAGES,
    Severity.WARNING,
    wcag="1.1.1",
    tags=("img", "input"),
    suggestion="Replace the file name with a short description of what the image shows.",
)
def img_alt_generic(node: Node, ctx: AuditContext) -> List[Hit]:
    """Alt text is a file name or a placeholder word."""
    if not _is_image(node):
        return []
    alt = node.attribute("alt")
    if alt is None or not alt.strip():
        return []
    if not ctx.tables.is_generic_alt(alt):
        return []
    return [Hit(
        f"Alt text '{alt.strip()}' does not describe the image",
        details={"alt": alt.strip(), "src": (node.attribute("src") or "").strip()},
    )]


RULES = (img_alt_missing, img_alt_generic)
