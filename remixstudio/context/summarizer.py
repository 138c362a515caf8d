"""
Remix Studio Context Summarizer

Renders a remix context as two plain-text blocks for the planner prompt:
one describing every contributing board and its elements, one describing the
brand. Missing values are rendered as explicit placeholder phrases, never
blanks, so the brief never looks truncated.

Rendering is deterministic: the same context always yields identical text.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from remixstudio.core.logging_config import get_logger
from remixstudio.graph.board import Board
from remixstudio.graph.elements import (
    CanvasElement,
    GroupElement,
    ImageAnalysis,
    ImageElement,
    ProductAnalysis,
    TextElement,
    VideoElement,
    unhandled_element,
)
from remixstudio.graph.resolver import BrandInfo

logger = get_logger("context.summarizer")

NO_ANALYSIS = "No analysis available."


@dataclass(frozen=True)
class WhiteboardSummary:
    """Planner-facing description of a remix context."""
    boards_text: str
    brand_text: str


def element_label(element: CanvasElement) -> str:
    """Mention token for an element: its label, else the first four id characters."""
    if element.label and element.label.strip():
        return element.label.strip()
    return element.id[:4]


def _joined(values: Optional[List[str]], placeholder: str) -> str:
    return ", ".join(values) if values else placeholder


def _describe_product(analysis: ProductAnalysis) -> str:
    features = _joined(analysis.key_features, "No key features detected")
    product_type = analysis.product_type or "Unknown category"
    return f"Analyzed as: Product: {analysis.product_name} ({product_type}), Features: {features}."


def _describe_style(analysis: ImageAnalysis) -> str:
    style = analysis.style or "Style not identified"
    mood = analysis.mood or "Mood not identified"
    colors = _joined(analysis.color_palette, "No palette identified")
    typography = analysis.typography or "No typography insight"
    return f"Analyzed as: Style: {style}, Mood: {mood}, Colors: {colors}, Typography: {typography}."


def describe_analysis(element: CanvasElement) -> str:
    """One-line, variant-specific rendering of an element's analysis."""
    if isinstance(element, ImageElement):
        analysis = element.analysis
        if isinstance(analysis, ProductAnalysis) and analysis.product_name:
            return _describe_product(analysis)
        if isinstance(analysis, ImageAnalysis) and analysis.has_style_fields():
            return _describe_style(analysis)
        return NO_ANALYSIS
    if isinstance(element, TextElement):
        analysis = element.analysis
        if analysis is None:
            return NO_ANALYSIS
        style = analysis.style or "Style not identified"
        sentiment = analysis.sentiment or "Sentiment not identified"
        keywords = _joined(analysis.keywords, "No keywords detected")
        return f"Analyzed as: Style: {style}, Sentiment: {sentiment}, Keywords: {keywords}."
    if isinstance(element, (GroupElement, VideoElement)):
        return NO_ANALYSIS
    unhandled_element(element)


def describe_board(board: Board) -> str:
    lines = [f"- Board (Type: '{board.type.value}', Title: '{board.title}') contains:"]
    for element in board.elements:
        lines.append(f"    - Element @{element_label(element)}: {describe_analysis(element)}")
    return "\n".join(lines)


def describe_brand(brand_info: Optional[BrandInfo]) -> str:
    if brand_info is None:
        return ""
    lines = []
    if brand_info.logo is not None and brand_info.logo.label:
        lines.append(f"- A Brand Board with a logo (@{brand_info.logo.label})")
    if brand_info.colors:
        lines.append(f"- Brand Colors are available: {', '.join(brand_info.colors)}")
    return "\n".join(lines)


def summarize(content_boards: Sequence[Board], brand_info: Optional[BrandInfo] = None) -> WhiteboardSummary:
    """Summarize contributing boards and brand metadata for the planner."""
    summary = WhiteboardSummary(
        boards_text="\n".join(describe_board(board) for board in content_boards),
        brand_text=describe_brand(brand_info),
    )
    logger.debug(f"Summarized {len(content_boards)} board(s) ({len(summary.boards_text)} chars)")
    return summary
