# src/a11y_auditor/model.py
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .dom.heuristics import HeuristicTables

NodePath = Tuple[int, ...]


class Severity(str, Enum):
    """
    How bad a finding is. ERROR is a WCAG failure, WARNING is likely harm to
    users, ADVISORY means a human has to look at it.
    """
    ERROR = "error"
    WARNING = "warning"
    ADVISORY = "advisory"

    @property
    def rank(self) -> int:
        """Numeric rank, lower is more severe (error=0, warning=1, advisory=2)."""
        return _SEVERITY_RANK[self]

    def at_least(self, threshold: "Severity") -> bool:
        """True when this severity is as severe as `threshold` or worse."""
        return self.rank <= threshold.rank


_SEVERITY_RANK = {Severity.ERROR: 0, Severity.WARNING: 1, Severity.ADVISORY: 2}


class Category(str, Enum):
    STRUCTURE = "structure"
    IMAGES = "images"
    LINKS_FORMS = "links-forms"
    ARIA = "aria"
    KEYBOARD_FOCUS = "keyboard-focus"
    CONTRAST = "contrast"
    ICONS = "icons"
    TOUCH_TARGET = "touch-target"


def parse_locator(value: Union[str, Iterable[int]]) -> NodePath:
    """
    Normalizes a node locator into a tuple of child indices.

    Accepts tuples/lists of ints or the string form produced by `format_locator`
    ("/0/2/1", with "/" or "" for the root).
    """
    if isinstance(value, str):
        parts = [p for p in value.strip().split("/") if p.strip()]
        try:
            indices = tuple(int(p) for p in parts)
        except ValueError:
            raise ValueError(f"Invalid node locator: {value!r}")
    else:
        indices = tuple(int(p) for p in value)

    if any(i < 0 for i in indices):
        raise ValueError(f"Node locator contains a negative index: {value!r}")
    return indices


def format_locator(path: NodePath) -> str:
    """Renders a path tuple as '/0/2/1' ('/' for the root)."""
    return "/" + "/".join(str(i) for i in path)


class Finding(BaseModel):
    """
    One reported accessibility issue, tied to a node by its path locator.
    The rule metadata is copied in so the finding is self-contained.
    """
    model_config = ConfigDict(frozen=True)

    rule_id: str
    severity: Severity
    category: Category
    wcag: Optional[str] = None
    node_path: NodePath
    tag: str = ""
    message: str
    suggestion: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)

    @property
    def locator(self) -> str:
        return format_locator(self.node_path)

    def sort_key(self) -> Tuple[int, NodePath, str, str]:
        # Lexicographic order of index paths equals pre-order document order.
        return self.severity.rank, self.node_path, self.rule_id, self.message


class LayoutBox(BaseModel):
    """Rendered box size of a node in CSS pixels, reported by a layout engine."""
    width: float = Field(ge=0)
    height: float = Field(ge=0)


class ColorSample(BaseModel):
    """
    Computed colours of a node, reported by a renderer.
    Colours are CSS hex strings (#rgb or #rrggbb) or rgb()/rgba() notation.
    """
    foreground: str
    background: str
    font_size_px: float = 16.0
    bold: bool = False


def _coerce_path_map(value: Any) -> Any:
    if value is None or not isinstance(value, dict):
        return value
    return {parse_locator(k): v for k, v in value.items()}


class AuditOptions(BaseModel):
    """
    Options for one audit run.

    categories: which rule categories run (default: all).
    min_severity: findings less severe than this are dropped (default: advisory).
    layout_data: node locator -> rendered size, enables the touch-target check.
    color_data: node locator -> computed colours, enables the contrast ratio check.
    disabled_rules: rule ids that must not run.
    tables: heuristic string/regex tables used by the fuzzy rules.
    """
    model_config = ConfigDict(extra="forbid")

    categories: FrozenSet[Category] = frozenset(Category)
    min_severity: Severity = Severity.ADVISORY
    layout_data: Optional[Dict[NodePath, LayoutBox]] = None
    color_data: Optional[Dict[NodePath, ColorSample]] = None
    disabled_rules: FrozenSet[str] = frozenset()
    tables: HeuristicTables = Field(default_factory=HeuristicTables)

    @field_validator("categories", mode="before")
    @classmethod
    def parse_categories(cls, v: Any) -> Any:
        if v is None:
            return frozenset(Category)
        if isinstance(v, str):
            v = [c for c in v.split(",") if c.strip()]
        return frozenset(Category(c.strip() if isinstance(c, str) else c) for c in v)

    @field_validator("min_severity", mode="before")
    @classmethod
    def parse_severity(cls, v: Any) -> Any:
        if v is None:
            return Severity.ADVISORY
        if isinstance(v, str):
            return Severity(v.strip().lower())
        return v

    @field_validator("disabled_rules", mode="before")
    @classmethod
    def parse_disabled(cls, v: Any) -> Any:
        if v is None:
            return frozenset()
        if isinstance(v, str):
            v = v.split(",")
        return frozenset(r.strip() for r in v if r and r.strip())

    @field_validator("layout_data", "color_data", mode="before")
    @classmethod
    def parse_path_keys(cls, v: Any) -> Any:
        return _coerce_path_map(v)
