# src/a11y_auditor/dom/builder.py
import logging
import re
from typing import Iterator, List, Optional, Tuple, Union

from bs4 import BeautifulSoup, Comment, Doctype, NavigableString, Tag
from bs4.element import CData, Declaration, ProcessingInstruction

from .core import Node

logger = logging.getLogger(__name__)

DOCUMENT_TAG = "#document"

# Elements whose content is not audited (scripts, styles, inert templates)
OPAQUE_TAGS = frozenset({"script", "style", "template", "noscript"})

# Inline contexts where whitespace between elements separates words ("Read <b>more</b>")
INLINE_CONTEXT_TAGS = frozenset({
    "a", "button", "label", "span", "p", "li", "dt", "dd", "td", "th", "caption",
    "figcaption", "legend", "summary", "option", "em", "strong", "b", "i", "small",
    "h1", "h2", "h3", "h4", "h5", "h6", "q", "cite", "abbr", "mark", "sup", "sub",
})

_SKIPPED_STRINGS = (Comment, Doctype, Declaration, ProcessingInstruction, CData)


class DOMBuilder:
    """
    Parses raw HTML into the Node tree consumed by the audit engine.

    The root is a '#document' node holding the top-level elements, so paths
    stay stable whether or not the markup carries <html>/<body> wrappers.
    Comments and the doctype are dropped; script/style content does not
    become text.
    """

    def __init__(self, features: str = "html.parser"):
        self.features = features

    def parse(self, html: Union[str, bytes]) -> Node:
        """
        Parses markup into a Node tree.

        Args:
            html: Raw HTML (str or bytes).

        Returns:
            Node: The '#document' root.
        """
        if isinstance(html, bytes):
            html = html.decode("utf-8", errors="replace")
        if not html:
            return Node(tag=DOCUMENT_TAG)

        # Basic cleanup of potentially dirty HTML (e.g., BOM)
        clean_html = html.replace('\ufeff', '').strip()
        soup = BeautifulSoup(clean_html, self.features)

        children = self._build_children(soup)
        root = Node(tag=DOCUMENT_TAG, children=children)
        logger.debug("Parsed document into %d top-level nodes", len(children))
        return root

    def parse_file(self, path) -> Node:
        with open(path, "rb") as f:
            return self.parse(f.read())

    def _build_children(self, root: Tag) -> List[Node]:
        """
        Builds the Node children of `root` without recursion. A Node is only
        created once all of its children exist, since construction links them.
        """
        top: List[Node] = []
        # (child iterator, inline context, children built so far, source tag or None for root)
        stack: List[Tuple[Iterator, bool, List[Node], Optional[Tag]]] = [(iter(root.children), False, top, None)]

        while stack:
            pending, inline, built, source = stack[-1]
            child = next(pending, None)
            if child is None:
                stack.pop()
                if source is not None:
                    stack[-1][2].append(Node(tag=(source.name or "").lower(), attrs=source.attrs, children=built))
                continue

            if isinstance(child, Tag):
                name = (child.name or "").lower()
                if name in OPAQUE_TAGS:
                    built.append(Node(tag=name, attrs=child.attrs))
                else:
                    stack.append((iter(child.children), name in INLINE_CONTEXT_TAGS, [], child))
            elif isinstance(child, NavigableString) and not isinstance(child, _SKIPPED_STRINGS):
                text_node = self._build_text(str(child), inline)
                if text_node is not None:
                    built.append(text_node)
        return top

    def _build_text(self, raw: str, inline: bool) -> Optional[Node]:
        collapsed = re.sub(r"\s+", " ", raw)
        if not collapsed.strip():
            # Indentation between block elements carries no meaning
            return Node.text_node(" ") if inline and collapsed else None
        return Node.text_node(collapsed)
