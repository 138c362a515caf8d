"""
Element tree walks.

Groups own their children recursively. Every lookup here is built on one walk
parameterized by a ``descend`` predicate that decides whether to enter an
element's children.
"""

from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from remixstudio.core.constants import TEXT_SYNTHETIC_HEIGHT
from remixstudio.graph.elements import (
    CanvasElement,
    GroupElement,
    ImageElement,
    TextElement,
    VideoElement,
    unhandled_element,
)

DescendPredicate = Callable[[CanvasElement], bool]


def descend_into_groups(element: CanvasElement) -> bool:
    return isinstance(element, GroupElement)


def never_descend(element: CanvasElement) -> bool:
    return False


@dataclass(frozen=True)
class ElementVisit:
    """One element reached by a walk, with its owner and absolute position."""
    element: CanvasElement
    parent: Optional[GroupElement]
    abs_x: float
    abs_y: float
    depth: int


def walk_elements(
    elements: Sequence[CanvasElement],
    descend: DescendPredicate = descend_into_groups,
    parent: Optional[GroupElement] = None,
    offset: Tuple[float, float] = (0.0, 0.0),
    depth: int = 0,
) -> Iterator[ElementVisit]:
    """Depth-first, pre-order walk. Child positions are relative to their group."""
    for element in elements:
        abs_x = element.x + offset[0]
        abs_y = element.y + offset[1]
        yield ElementVisit(element, parent, abs_x, abs_y, depth)
        if isinstance(element, GroupElement) and descend(element):
            yield from walk_elements(
                element.children, descend, element, (abs_x, abs_y), depth + 1
            )


def find_visit(
    elements: Sequence[CanvasElement],
    element_id: str,
    descend: DescendPredicate = descend_into_groups,
) -> Optional[ElementVisit]:
    for visit in walk_elements(elements, descend):
        if visit.element.id == element_id:
            return visit
    return None


def find_element(elements: Sequence[CanvasElement], element_id: str) -> Optional[CanvasElement]:
    visit = find_visit(elements, element_id)
    return visit.element if visit else None


def find_element_and_parent(
    elements: Sequence[CanvasElement], element_id: str
) -> Tuple[Optional[CanvasElement], Optional[GroupElement]]:
    visit = find_visit(elements, element_id)
    if visit is None:
        return None, None
    return visit.element, visit.parent


def find_element_with_absolute_position(
    elements: Sequence[CanvasElement], element_id: str
) -> Optional[Tuple[CanvasElement, Tuple[float, float]]]:
    visit = find_visit(elements, element_id)
    if visit is None:
        return None
    return visit.element, (visit.abs_x, visit.abs_y)


def collect_elements(
    elements: Sequence[CanvasElement],
    predicate: Callable[[CanvasElement], bool],
    descend: DescendPredicate = never_descend,
) -> List[CanvasElement]:
    return [v.element for v in walk_elements(elements, descend) if predicate(v.element)]


def image_elements(elements: Sequence[CanvasElement]) -> List[ImageElement]:
    """Top-level image elements, in order."""
    return collect_elements(elements, lambda el: isinstance(el, ImageElement))


def stored_height(element: CanvasElement) -> float:
    """Height used for bounding boxes; text has none stored."""
    if isinstance(element, TextElement):
        return TEXT_SYNTHETIC_HEIGHT
    if isinstance(element, (ImageElement, VideoElement, GroupElement)):
        return element.height
    unhandled_element(element)


def elements_bounding_box(elements: Sequence[CanvasElement]) -> dict:
    """Axis-aligned box around top-level elements (rotation ignored)."""
    if not elements:
        return {'x': 0, 'y': 0, 'width': 0, 'height': 0}

    min_x = min(el.x for el in elements)
    min_y = min(el.y for el in elements)
    max_x = max(el.x + el.width for el in elements)
    max_y = max(el.y + stored_height(el) for el in elements)

    return {
        'x': min_x,
        'y': min_y,
        'width': max_x - min_x,
        'height': max_y - min_y,
    }
