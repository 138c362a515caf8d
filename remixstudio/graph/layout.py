"""
Board layout helpers.

Sizes boards to fit their elements and places generated assets on a
two-column grid.
"""

import math
from dataclasses import replace
from typing import Tuple

from remixstudio.core.constants import (
    BOARD_PADDING,
    BoardType,
    GENERATED_TILE_SIZE,
    HEADER_BASE_HEIGHT,
    LABEL_LINE_HEIGHT,
    LABEL_MARGIN,
    MIN_BOARD_HEIGHT,
    MIN_BOARD_WIDTH,
    REMIX_HEADER_HEIGHT,
    REMIX_PROMPT_MAX_CHARS,
)
from remixstudio.graph.board import Board
from remixstudio.graph.elements import (
    CanvasElement,
    GroupElement,
    ImageElement,
    TextElement,
    VideoElement,
    unhandled_element,
)


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def estimate_text_height(element: TextElement) -> float:
    """Approximate laid-out height of a text element (1 to 8 lines)."""
    safe_width = max(12, element.width or element.font_size * 8)
    average_char_width = _clamp(element.font_size * 0.55, 7, 14)
    chars_per_line = max(8, math.floor(safe_width / average_char_width))
    line_height = element.font_size * 1.35
    normalized = " ".join((element.text or "").split())
    if not normalized:
        return line_height
    lines = max(1, math.ceil(len(normalized) / chars_per_line))
    return _clamp(lines, 1, 8) * line_height


def element_bounds(element: CanvasElement) -> Tuple[float, float]:
    """Right and bottom edge of an element in its parent's coordinates."""
    if isinstance(element, (ImageElement, VideoElement)):
        return element.x + element.width, element.y + element.height
    if isinstance(element, TextElement):
        return element.x + element.width, element.y + estimate_text_height(element)
    if isinstance(element, GroupElement):
        if not element.children:
            return element.x, element.y
        right = bottom = 0.0
        for child in element.children:
            child_right, child_bottom = element_bounds(child)
            right = max(right, element.x + child_right)
            bottom = max(bottom, element.y + child_bottom)
        return right, bottom
    unhandled_element(element)


def label_offset(element: CanvasElement) -> float:
    return LABEL_LINE_HEIGHT + LABEL_MARGIN if element.label else 0


def with_responsive_board_size(board: Board) -> Board:
    """Return a copy of ``board`` grown (never below the minimum) to fit its elements."""
    header = (
        REMIX_HEADER_HEIGHT
        if board.type is BoardType.REMIX and board.remix_prompt
        else HEADER_BASE_HEIGHT
    )

    if not board.elements:
        return replace(
            board,
            width=max(board.width, MIN_BOARD_WIDTH),
            height=max(board.height, MIN_BOARD_HEIGHT, header + 200),
        )

    max_right = max_bottom = 0.0
    for element in board.elements:
        right, bottom = element_bounds(element)
        max_right = max(max_right, right)
        max_bottom = max(max_bottom, bottom + label_offset(element))

    return replace(
        board,
        width=max(MIN_BOARD_WIDTH, math.ceil(max_right + BOARD_PADDING)),
        height=max(MIN_BOARD_HEIGHT, math.ceil(header + max_bottom + BOARD_PADDING * 0.5)),
    )


def grid_position(
    index: int,
    tile_size: int = GENERATED_TILE_SIZE,
    padding: int = BOARD_PADDING,
    columns: int = 2,
) -> Tuple[float, float]:
    """Top-left corner of tile ``index`` on a padded grid."""
    col = index % columns
    row = index // columns
    return col * (tile_size + padding) + padding, row * (tile_size + padding) + padding


def next_board_origin(board_count: int, board_width: int = 550) -> Tuple[float, float]:
    """Where a newly created board lands: three per row."""
    return 50 + (board_count % 3) * (board_width + 50), 50 + (board_count // 3) * 650


def truncate_remix_prompt(prompt: str, limit: int = REMIX_PROMPT_MAX_CHARS) -> str:
    """Prompt as shown in a remix board header."""
    prompt = " ".join(prompt.split())
    if len(prompt) <= limit:
        return prompt
    return prompt[:limit - 3].rstrip() + "..."
