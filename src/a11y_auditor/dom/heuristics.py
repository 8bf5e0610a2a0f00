# src/a11y_auditor/dom/heuristics.py
"""
String and regex tables behind the fuzzy rules, plus the small parsing helpers
(inline styles, colours, contrast ratio) those rules share.

The tables are data, not code: extend them from settings.json ('rules.*') or
per run through AuditOptions.tables.
"""
import re
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_VAGUE_LINK_TEXTS = [
    "läs mer", "läs mer här", "klicka här", "här", "mer", "mer info",
    "click here", "click", "read more", "here", "more", "learn more",
    "link", "this link", "details", "continue",
]

DEFAULT_NEW_TAB_PHRASES = [
    "new window", "new tab", "opens in a new", "opens in new",
    "nytt fönster", "ny flik", "öppnas i ny", "öppnas i ett nytt",
]

DEFAULT_GENERIC_ALT_WORDS = [
    "image", "img", "picture", "photo", "graphic", "icon", "bild", "foto",
]

DEFAULT_CLICK_ATTRIBUTES = [
    "onclick", "data-toggle", "data-bs-toggle", "data-target", "data-bs-target",
    "data-action", "ng-click", "v-on:click", "@click", "x-on:click", "(click)",
]

DEFAULT_INTERACTIVE_ROLES = [
    "button", "link", "checkbox", "radio", "switch", "tab", "menuitem",
    "menuitemcheckbox", "menuitemradio", "option", "treeitem", "combobox",
    "slider", "spinbutton", "textbox",
]

DEFAULT_ICON_TAGS = ["i", "svg"]

DEFAULT_ICON_CLASS_PATTERN = (
    r"(?:^|\s)(?:fa[srbld]?|fa-[\w-]+|bi|bi-[\w-]+|icon|icon-[\w-]+|[\w-]+-icon|"
    r"glyphicon[\w-]*|material-icons[\w-]*|material-symbols[\w-]*)(?=\s|$)"
)

DEFAULT_NAV_CONTAINER_TAGS = ["ul", "ol", "menu", "div", "header", "footer", "section", "aside"]

IMAGE_FILENAME_PATTERN = r"\.(png|jpe?g|svg|gif)$"


def _lowered(values: List[str]) -> List[str]:
    return [v.strip().lower() for v in values if v and v.strip()]


class HeuristicTables(BaseModel):
    """Configurable pattern tables for the heuristic rules."""
    model_config = ConfigDict(extra="forbid")

    vague_link_texts: List[str] = Field(default_factory=lambda: list(DEFAULT_VAGUE_LINK_TEXTS))
    new_tab_phrases: List[str] = Field(default_factory=lambda: list(DEFAULT_NEW_TAB_PHRASES))
    generic_alt_words: List[str] = Field(default_factory=lambda: list(DEFAULT_GENERIC_ALT_WORDS))
    click_attributes: List[str] = Field(default_factory=lambda: list(DEFAULT_CLICK_ATTRIBUTES))
    interactive_roles: List[str] = Field(default_factory=lambda: list(DEFAULT_INTERACTIVE_ROLES))
    icon_tags: List[str] = Field(default_factory=lambda: list(DEFAULT_ICON_TAGS))
    icon_class_pattern: str = DEFAULT_ICON_CLASS_PATTERN
    image_filename_pattern: str = IMAGE_FILENAME_PATTERN
    nav_container_tags: List[str] = Field(default_factory=lambda: list(DEFAULT_NAV_CONTAINER_TAGS))
    nav_link_threshold: int = Field(default=3, ge=1)
    touch_target_min_px: float = Field(default=44.0, gt=0)
    touch_target_exempt_inline_links: bool = False
    contrast_normal_ratio: float = Field(default=4.5, gt=0)
    contrast_large_ratio: float = Field(default=3.0, gt=0)
    large_text_px: float = 24.0
    large_bold_text_px: float = 18.66

    @field_validator(
        "vague_link_texts", "new_tab_phrases", "generic_alt_words",
        "click_attributes", "interactive_roles",
        "icon_tags", "nav_container_tags",
    )
    @classmethod
    def lower_entries(cls, v: List[str]) -> List[str]:
        return _lowered(v)

    @field_validator("icon_class_pattern", "image_filename_pattern")
    @classmethod
    def check_pattern(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid regular expression {v!r}: {e}")
        return v

    # --- Matchers ---

    def is_vague_link_text(self, text: str) -> bool:
        normalized = normalize_phrase(text)
        return bool(normalized) and normalized in set(self.vague_link_texts)

    def mentions_new_tab(self, text: Optional[str]) -> bool:
        if not text:
            return False
        lowered = " ".join(text.lower().split())
        return any(phrase in lowered for phrase in self.new_tab_phrases)

    def is_generic_alt(self, alt: str) -> bool:
        value = alt.strip()
        if not value:
            return False
        basename = re.split(r"[\\/]", value)[-1]
        if _compile(self.image_filename_pattern).search(basename):
            return True
        return normalize_phrase(value) in set(self.generic_alt_words)

    def has_icon_class(self, class_attr: Optional[str]) -> bool:
        if not class_attr:
            return False
        return bool(_compile(self.icon_class_pattern).search(class_attr.lower()))


@lru_cache(maxsize=64)
def _compile(pattern: str) -> "re.Pattern[str]":
    return re.compile(pattern, re.IGNORECASE)


_EDGE_NOISE = " \t\r\n.,:;!?…»«›‹→←>\"'()[]"


def normalize_phrase(text: Optional[str]) -> str:
    """Lower-cases, collapses whitespace and strips edge punctuation/arrows."""
    if not text:
        return ""
    return " ".join(text.lower().split()).strip(_EDGE_NOISE)


# --- Inline style parsing ---

def parse_inline_style(style: Optional[str]) -> Dict[str, str]:
    """
    Parses a style attribute into a property -> value map.
    Later declarations win; !important flags are dropped.
    """
    declarations: Dict[str, str] = {}
    if not style:
        return declarations

    for chunk in style.split(";"):
        if ":" not in chunk:
            continue
        prop, _, value = chunk.partition(":")
        prop = prop.strip().lower()
        value = re.sub(r"\s*!important\s*$", "", value.strip(), flags=re.IGNORECASE)
        if prop and value:
            declarations[prop] = value
    return declarations


# --- Colour maths (WCAG 2.x relative luminance) ---

_NAMED_COLORS = {
    "black": (0, 0, 0),
    "white": (255, 255, 255),
    "red": (255, 0, 0),
    "green": (0, 128, 0),
    "blue": (0, 0, 255),
    "gray": (128, 128, 128),
    "grey": (128, 128, 128),
    "silver": (192, 192, 192),
    "yellow": (255, 255, 0),
    "orange": (255, 165, 0),
    "navy": (0, 0, 128),
}

_RGB_FUNC = re.compile(r"rgba?\(\s*([\d.]+)\s*[, ]\s*([\d.]+)\s*[, ]\s*([\d.]+)", re.IGNORECASE)


def parse_color(value: Optional[str]) -> Optional[Tuple[int, int, int]]:
    """Parses #rgb, #rrggbb (alpha digits ignored), rgb()/rgba() or a basic colour name."""
    if not value:
        return None
    text = value.strip().lower()

    if text in _NAMED_COLORS:
        return _NAMED_COLORS[text]

    if text.startswith("#"):
        digits = text[1:]
        if len(digits) in (3, 4):
            digits = "".join(c * 2 for c in digits[:3])
        elif len(digits) in (6, 8):
            digits = digits[:6]
        else:
            return None
        try:
            return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)
        except ValueError:
            return None

    match = _RGB_FUNC.match(text)
    if match:
        r, g, b = (min(255, int(float(c))) for c in match.groups())
        return r, g, b

    return None


def relative_luminance(rgb: Tuple[int, int, int]) -> float:
    def channel(c: int) -> float:
        s = c / 255.0
        return s / 12.92 if s <= 0.03928 else ((s + 0.055) / 1.055) ** 2.4

    r, g, b = (channel(c) for c in rgb)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(fg: Tuple[int, int, int], bg: Tuple[int, int, int]) -> float:
    """WCAG contrast ratio, from 1.0 (identical) to 21.0 (black on white)."""
    l1, l2 = relative_luminance(fg), relative_luminance(bg)
    lighter, darker = max(l1, l2), min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)
