# src/a11y_auditor/dom/core.py
import weakref
from functools import cached_property
from typing import Any, Callable, Dict, FrozenSet, Iterable, Iterator, List, NamedTuple, Optional, Set

from pydantic import BaseModel, Field, PrivateAttr, field_validator

from ..model import AuditOptions, Category, Finding, LayoutBox, ColorSample, NodePath, Severity, format_locator

TEXT_TAG = "text"
HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})


class Node(BaseModel):
    """
    One element or text run of a parsed document.

    The tree is owned by the caller. Parent links are weak and only serve
    ancestor queries; rules get a read-only query surface and must never
    modify a node.
    """
    tag: str
    attrs: Dict[str, str] = Field(default_factory=dict)
    text: str = ""
    children: List["Node"] = Field(default_factory=list)

    _parent: Optional[weakref.ref] = PrivateAttr(default=None)
    _index: int = PrivateAttr(default=0)

    @field_validator("tag", mode="before")
    @classmethod
    def normalize_tag(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("attrs", mode="before")
    @classmethod
    def normalize_attrs(cls, v: Any) -> Any:
        """Lower-cases keys; joins multi-valued attributes (bs4 class lists) with a space."""
        if not v:
            return {}
        normalized = {}
        for key, value in dict(v).items():
            if isinstance(value, (list, tuple)):
                value = " ".join(str(item) for item in value)
            elif value is None:
                value = ""
            normalized[str(key).lower()] = str(value)
        return normalized

    def model_post_init(self, __context: Any) -> None:
        for i, child in enumerate(self.children):
            child._parent = weakref.ref(self)
            child._index = i

    @classmethod
    def text_node(cls, text: str) -> "Node":
        return cls(tag=TEXT_TAG, text=text)

    # --- Tree queries ---

    @property
    def is_text(self) -> bool:
        return self.tag == TEXT_TAG

    @property
    def parent(self) -> Optional["Node"]:
        return self._parent() if self._parent is not None else None

    def attribute(self, name: str) -> Optional[str]:
        return self.attrs.get(name.lower())

    def has_attribute(self, name: str) -> bool:
        return name.lower() in self.attrs

    def child_elements(self, *tags: str) -> List["Node"]:
        """Element children in document order, optionally limited to the given tags."""
        wanted = {t.lower() for t in tags}
        return [
            c for c in self.children
            if not c.is_text and (not wanted or c.tag in wanted)
        ]

    def ancestors(self) -> List["Node"]:
        """Ancestors ordered from the root down to the direct parent."""
        chain = []
        current = self.parent
        while current is not None:
            chain.append(current)
            current = current.parent
        chain.reverse()
        return chain

    def path(self) -> NodePath:
        indices = []
        node = self
        while node.parent is not None:
            indices.append(node._index)
            node = node.parent
        return tuple(reversed(indices))

    @property
    def locator(self) -> str:
        return format_locator(self.path())

    def walk(self) -> Iterator["Node"]:
        """Pre-order (document order) iteration over this node and its descendants."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def iter_elements(self) -> Iterator["Node"]:
        return (n for n in self.walk() if not n.is_text)

    def text_content(self) -> str:
        """Concatenation of all descendant text runs in document order."""
        if self.is_text:
            return self.text
        return "".join(n.text for n in self.walk() if n.is_text)

    # --- Convenience accessors used by rules ---

    @property
    def role(self) -> str:
        value = self.attribute("role") or ""
        tokens = value.strip().lower().split()
        return tokens[0] if tokens else ""

    @property
    def classes(self) -> List[str]:
        return (self.attribute("class") or "").lower().split()

    @property
    def level(self) -> Optional[int]:
        """Heading level for h1-h6 and role="heading" (aria-level, default 2)."""
        if self.tag in HEADING_TAGS:
            return int(self.tag[1])
        if self.role == "heading":
            try:
                return max(1, int((self.attribute("aria-level") or "2").strip()))
            except ValueError:
                return 2
        return None


class AuditContext:
    """
    Per-run state shared with the rules: the options, the ancestor stack and
    heading stack maintained by the engine, and lazily built document indexes.
    """

    def __init__(self, root: Node, options: AuditOptions):
        self.root = root
        self.options = options
        self.tables = options.tables
        self.ancestors: List[Node] = []
        self.heading_stack: List[int] = []
        self.current: Optional[Node] = None
        self.current_path: NodePath = ()

    @property
    def previous_heading_level(self) -> Optional[int]:
        return self.heading_stack[-1] if self.heading_stack else None

    def push_heading(self, level: int) -> None:
        """Keeps the stack as the open outline; its top is always the last heading seen."""
        while self.heading_stack and self.heading_stack[-1] >= level:
            self.heading_stack.pop()
        self.heading_stack.append(level)

    def path_of(self, node: Node) -> NodePath:
        return self.current_path if node is self.current else node.path()

    def ancestors_of(self, node: Node) -> List[Node]:
        return list(self.ancestors) if node is self.current else node.ancestors()

    @cached_property
    def elements_by_id(self) -> Dict[str, Node]:
        """First element carrying each id, in document order."""
        index: Dict[str, Node] = {}
        for n in self.root.iter_elements():
            element_id = n.attribute("id")
            if element_id and element_id not in index:
                index[element_id] = n
        return index

    @property
    def ids(self) -> Set[str]:
        return set(self.elements_by_id)

    def text_of_ids(self, id_list: Optional[str]) -> str:
        """Text referenced by an IDREFS attribute such as aria-labelledby."""
        if not id_list:
            return ""
        parts = []
        for ref in id_list.split():
            target = self.elements_by_id.get(ref)
            if target is not None:
                parts.append(target.text_content())
        return " ".join(parts)

    @cached_property
    def label_targets(self) -> Set[str]:
        """Values of every <label for=...> in the document."""
        return {
            n.attribute("for").strip()
            for n in self.root.iter_elements()
            if n.tag == "label" and n.attribute("for") and n.attribute("for").strip()
        }

    def layout_for(self, node: Node) -> Optional[LayoutBox]:
        if not self.options.layout_data:
            return None
        return self.options.layout_data.get(self.path_of(node))

    def color_for(self, node: Node) -> Optional[ColorSample]:
        if not self.options.color_data:
            return None
        return self.options.color_data.get(self.path_of(node))


class Hit(NamedTuple):
    """What a rule check reports for one node; the rule turns it into a Finding."""
    message: str
    suggestion: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


RuleCheck = Callable[[Node, AuditContext], Iterable[Hit]]


class RuleDefinition:
    """
    A single accessibility check bound to its metadata.

    scope="node" rules run for every element accepted by the tag filter
    (tags=None accepts any element); scope="document" rules run once,
    against the root.
    """

    def __init__(
            self,
            rule_id: str,
            category: Category,
            severity: Severity,
            check: RuleCheck,
            wcag: Optional[str] = None,
            tags: Optional[Iterable[str]] = None,
            scope: str = "node",
            description: str = "",
            suggestion: Optional[str] = None,
    ):
        if scope not in ("node", "document"):
            raise ValueError(f"Unknown rule scope: {scope}")
        self.rule_id = rule_id
        self.category = Category(category)
        self.severity = Severity(severity)
        self.check = check
        self.wcag = wcag
        self.tags: Optional[FrozenSet[str]] = frozenset(t.lower() for t in tags) if tags else None
        self.scope = scope
        self.description = description
        self.suggestion = suggestion

    def __repr__(self) -> str:
        return f"RuleDefinition({self.rule_id!r}, {self.category.value}, {self.severity.value})"

    def applies_to(self, node: Node) -> bool:
        if node.is_text:
            return False
        return self.tags is None or node.tag in self.tags

    def evaluate(self, node: Node, ctx: AuditContext) -> List[Finding]:
        path = ctx.path_of(node)
        findings = []
        for hit in self.check(node, ctx) or ():
            findings.append(Finding(
                rule_id=self.rule_id,
                severity=self.severity,
                category=self.category,
                wcag=self.wcag,
                node_path=path,
                tag=node.tag,
                message=hit.message,
                suggestion=hit.suggestion or self.suggestion,
                details=dict(hit.details or {}),
            ))
        return findings


def audit_rule(
        rule_id: str,
        category: Category,
        severity: Severity,
        wcag: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
        scope: str = "node",
        suggestion: Optional[str] = None,
):
    """
    Decorator turning a check function into a RuleDefinition.
    The first line of the function's docstring becomes the rule description.
    """
    def decorator(func: RuleCheck) -> RuleDefinition:
        doc = (func.__doc__ or "").strip()
        return RuleDefinition(
            rule_id=rule_id,
            category=category,
            severity=severity,
            check=func,
            wcag=wcag,
            tags=tags,
            scope=scope,
            description=doc.splitlines()[0] if doc else "",
            suggestion=suggestion,
        )
    return decorator
