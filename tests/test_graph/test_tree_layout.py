"""
Tests for element tree walks and board layout.
"""

import pytest

from remixstudio.core.constants import BoardType
from remixstudio.graph.elements import GroupElement, ImageElement, TextElement
from remixstudio.graph.layout import (
    estimate_text_height,
    grid_position,
    next_board_origin,
    truncate_remix_prompt,
    with_responsive_board_size,
)
from remixstudio.graph.tree import (
    elements_bounding_box,
    find_element,
    find_element_and_parent,
    find_element_with_absolute_position,
    image_elements,
    walk_elements,
)


def _nested():
    inner = GroupElement(id="g-inner", x=5, y=5, children=[
        ImageElement(id="deep", x=1, y=2, width=10, height=10, src="data:image/png;base64,AA=="),
    ])
    outer = GroupElement(id="g-outer", x=100, y=200, children=[inner])
    return [TextElement(id="t1", text="hi"), outer]


class TestTreeWalks:
    """Tests for the shared walk."""

    def test_walk_is_depth_first_preorder(self):
        ids = [visit.element.id for visit in walk_elements(_nested())]

        assert ids == ["t1", "g-outer", "g-inner", "deep"]

    def test_find_element_recurses(self):
        assert find_element(_nested(), "deep").id == "deep"
        assert find_element(_nested(), "missing") is None

    def test_find_element_and_parent(self):
        element, parent = find_element_and_parent(_nested(), "deep")

        assert element.id == "deep"
        assert parent.id == "g-inner"
        assert find_element_and_parent(_nested(), "t1") == (_nested()[0], None)

    def test_absolute_position_accumulates_group_offsets(self):
        element, (x, y) = find_element_with_absolute_position(_nested(), "deep")

        assert (x, y) == (106, 207)

    def test_image_elements_top_level_only(self):
        assert image_elements(_nested()) == []

    def test_bounding_box_uses_synthetic_text_height(self):
        box = elements_bounding_box([
            TextElement(id="t", x=10, y=10, width=100, text="a"),
            ImageElement(id="i", x=0, y=0, width=20, height=20, src=""),
        ])

        assert box == {"x": 0, "y": 0, "width": 110, "height": 60}

    def test_bounding_box_empty(self):
        assert elements_bounding_box([]) == {"x": 0, "y": 0, "width": 0, "height": 0}


class TestLayout:
    """Tests for responsive sizing and grid placement."""

    def test_grid_position_two_columns(self):
        assert grid_position(0) == (32, 32)
        assert grid_position(1) == (320, 32)
        assert grid_position(2) == (32, 320)

    def test_next_board_origin_three_per_row(self):
        assert next_board_origin(0) == (50, 50)
        assert next_board_origin(3) == (50, 700)

    def test_empty_board_keeps_minimums(self, make_board):
        board = with_responsive_board_size(make_board("b", width=100, height=100))

        assert board.width == 320
        assert board.height == 280

    def test_board_grows_to_fit_tiles(self, make_board):
        tiles = [
            ImageElement(id=f"i{n}", x=x, y=y, width=256, height=256, src="", label=f"Remix {n}")
            for n, (x, y) in enumerate([grid_position(i) for i in range(4)], start=1)
        ]

        board = with_responsive_board_size(make_board("b", BoardType.REMIX, tiles, remix_prompt="go"))

        assert board.width == 32 + 256 + 32 + 256 + 32
        assert board.height == 88 + 320 + 256 + 22 + 8 + 16

    def test_text_height_is_capped_at_eight_lines(self):
        element = TextElement(id="t", width=50, font_size=20, text="word " * 500)

        assert estimate_text_height(element) == pytest.approx(8 * 20 * 1.35)

    def test_truncate_remix_prompt(self):
        assert truncate_remix_prompt("short  prompt") == "short prompt"

        truncated = truncate_remix_prompt("x" * 400)
        assert len(truncated) == 160
        assert truncated.endswith("...")
