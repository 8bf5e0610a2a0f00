# src/a11y_auditor/dom/rules/structure.py
from typing import List

from ...model import Category, Severity
from ..core import AuditContext, Hit, Node, audit_rule


def _is_navigation(node: Node) -> bool:
    return node.tag == "nav" or node.role == "navigation"


def _navigation_links(container: Node) -> List[Node]:
    """Links that are direct children, or direct children of the container's <li> items."""
    links = []
    for child in container.child_elements():
        if child.tag == "a":
            links.append(child)
        elif child.tag == "li":
            links.extend(child.child_elements("a"))
    return links


# --- RULES ---

@audit_rule(
    "landmark-missing-main",
    Category.STRUCTURE,
    Severity.ERROR,
    wcag="1.3.1",
    scope="document",
    suggestion="Wrap the primary page content in a single <main> element.",
)
def landmark_missing_main(node: Node, ctx: AuditContext) -> List[Hit]:
    """Document has no main landmark."""
    for element in node.iter_elements():
        if element.tag == "main" or element.role == "main":
            return []
    return [Hit("Document has no <main> landmark; assistive technology cannot jump to the primary content")]


@audit_rule(
    "nav-missing-landmark",
    Category.STRUCTURE,
    Severity.WARNING,
    wcag="1.3.1",
    suggestion="Wrap the link group in <nav> (with an aria-label when a page has several).",
)
def nav_missing_landmark(node: Node, ctx: AuditContext) -> List[Hit]:
    """A group of navigation-style links sits outside any navigation landmark."""
    if node.tag not in ctx.tables.nav_container_tags:
        return []

    links = _navigation_links(node)
    if len(links) < ctx.tables.nav_link_threshold:
        return []

    if _is_navigation(node) or any(_is_navigation(a) for a in ctx.ancestors_of(node)):
        return []

    return [Hit(
        f"<{node.tag}> groups {len(links)} links like a menu but is not inside a <nav> landmark",
        details={"link_count": len(links)},
    )]


@audit_rule(
    "heading-skip",
    Category.STRUCTURE,
    Severity.WARNING,
    wcag="1.3.1",
)
def heading_skip(node: Node, ctx: AuditContext) -> List[Hit]:
    """A heading jumps more than one level below the preceding heading."""
    level = node.level
    if level is None:
        return []

    previous = ctx.previous_heading_level
    if previous is None or level <= previous + 1:
        return []

    return [Hit(
        f"Heading level skipped from H{previous} to H{level}",
        suggestion=f"Use an <h{previous + 1}> here and adjust the visual size with CSS instead.",
        details={"previous_level": previous, "level": level},
    )]


RULES = (landmark_missing_main, nav_missing_landmark, heading_skip)
