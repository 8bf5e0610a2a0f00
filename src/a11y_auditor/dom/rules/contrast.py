# src/a11y_auditor/dom/rules/contrast.py
"""
Colour contrast rules.

The engine never renders a page, so contrast is two-tier:
contrast-needs-check flags declared colour pairs for a human to verify, and
contrast-ratio-low only runs on colours a renderer measured and handed in
through AuditOptions.color_data. Without that data nothing is computed and
nothing is assumed to pass.
"""
import logging
from typing import List, Optional, Tuple

from ...model import Category, Severity
from ..core import AuditContext, Hit, Node, audit_rule
from ..heuristics import contrast_ratio, parse_color, parse_inline_style
from .common import describe

logger = logging.getLogger(__name__)


def _declared_colors(node: Node) -> Tuple[Optional[str], Optional[str]]:
    """Foreground and background declared on the element itself (inline style or legacy attributes)."""
    declarations = parse_inline_style(node.attribute("style"))
    foreground = declarations.get("color") or node.attribute("color") or node.attribute("text")
    background = (
        declarations.get("background-color")
        or declarations.get("background")
        or node.attribute("bgcolor")
    )
    return foreground, background


@audit_rule(
    "contrast-needs-check",
    Category.CONTRAST,
    Severity.ADVISORY,
    wcag="1.4.3",
    suggestion="Verify the pair reaches 4.5:1 (3:1 for large text) with a contrast checker.",
)
def contrast_needs_check(node: Node, ctx: AuditContext) -> List[Hit]:
    """Element declares its own text and background colours."""
    if ctx.color_for(node) is not None:
        return []

    foreground, background = _declared_colors(node)
    if not foreground or not background:
        return []

    details = {"foreground": foreground, "background": background}
    fg_rgb, bg_rgb = parse_color(foreground), parse_color(background)
    if fg_rgb and bg_rgb:
        # Only an estimate: backgrounds may be gradients, images or semi-transparent.
        details["declared_ratio"] = round(contrast_ratio(fg_rgb, bg_rgb), 2)

    return [Hit(
        f"{describe(node)} declares color '{foreground}' on background '{background}'; contrast needs manual verification",
        details=details,
    )]


@audit_rule(
    "contrast-ratio-low",
    Category.CONTRAST,
    Severity.ERROR,
    wcag="1.4.3",
    suggestion="Darken the text or lighten the background until the ratio meets the minimum.",
)
def contrast_ratio_low(node: Node, ctx: AuditContext) -> List[Hit]:
    """Measured text contrast is below the WCAG AA minimum."""
    sample = ctx.color_for(node)
    if sample is None:
        return []

    fg_rgb, bg_rgb = parse_color(sample.foreground), parse_color(sample.background)
    if fg_rgb is None or bg_rgb is None:
        logger.debug("Unparsable colour sample at %s: %s / %s", node.locator, sample.foreground, sample.background)
        return []

    tables = ctx.tables
    large = sample.font_size_px >= tables.large_text_px or (
        sample.bold and sample.font_size_px >= tables.large_bold_text_px
    )
    required = tables.contrast_large_ratio if large else tables.contrast_normal_ratio
    ratio = round(contrast_ratio(fg_rgb, bg_rgb), 2)
    if ratio >= required:
        return []

    return [Hit(
        f"Contrast ratio {ratio:.2f}:1 is below the required {required:g}:1 "
        f"({sample.foreground} on {sample.background})",
        details={"ratio": ratio, "required": required, "large_text": large},
    )]


RULES = (contrast_needs_check, contrast_ratio_low)
