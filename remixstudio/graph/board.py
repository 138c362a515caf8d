"""
Remix Studio Boards and Connectors

A board owns an ordered list of top-level elements. A connector is a directed
edge from a source board to a target board, optionally scoped to a subset of
the source board's top-level element ids.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional

from remixstudio.core.constants import BoardType, DEFAULT_BOARD_HEIGHT, DEFAULT_BOARD_WIDTH
from remixstudio.core.exceptions import GraphError
from remixstudio.graph.elements import CanvasElement, element_from_dict


@dataclass
class Board:
    """A titled container of elements with a declared type."""
    id: str
    type: BoardType
    title: str
    x: float = 0.0
    y: float = 0.0
    width: float = DEFAULT_BOARD_WIDTH
    height: float = DEFAULT_BOARD_HEIGHT
    elements: List[CanvasElement] = field(default_factory=list)
    colors: Optional[List[str]] = None
    remix_prompt: Optional[str] = None

    @property
    def element_ids(self) -> List[str]:
        """Top-level element ids, in board order."""
        return [element.id for element in self.elements]

    def with_elements(self, elements: List[CanvasElement]) -> 'Board':
        """Copy of this board whose element list is replaced wholesale."""
        return replace(self, elements=list(elements))

    def to_dict(self) -> dict:
        data = {
            'id': self.id,
            'type': self.type.value,
            'title': self.title,
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'height': self.height,
            'elements': [element.to_dict() for element in self.elements],
        }
        if self.colors is not None:
            data['colors'] = list(self.colors)
        if self.remix_prompt is not None:
            data['remixPrompt'] = self.remix_prompt
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Board':
        try:
            board_type = BoardType(data['type'])
        except (KeyError, ValueError):
            raise GraphError(f"Invalid board type: {data.get('type')!r}", {"board": data.get('id')})
        return cls(
            id=data['id'],
            type=board_type,
            title=data.get('title', ""),
            x=data.get('x', 0.0),
            y=data.get('y', 0.0),
            width=data.get('width', DEFAULT_BOARD_WIDTH),
            height=data.get('height', DEFAULT_BOARD_HEIGHT),
            elements=[element_from_dict(el) for el in data.get('elements', [])],
            colors=data.get('colors'),
            remix_prompt=data.get('remixPrompt'),
        )


@dataclass
class Connector:
    """Directed edge ``from_board -> to_board``.

    ``element_ids`` is ``None`` for an "all assets" connector. Ids are not pruned
    when elements are deleted from the source board.
    """
    id: str
    from_board: str
    to_board: str
    element_ids: Optional[List[str]] = None

    @property
    def pair(self) -> tuple:
        return (self.from_board, self.to_board)

    @property
    def uses_all_elements(self) -> bool:
        return not self.element_ids

    def to_dict(self) -> dict:
        data = {'id': self.id, 'fromBoard': self.from_board, 'toBoard': self.to_board}
        if self.element_ids:
            data['elementIds'] = list(self.element_ids)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Connector':
        element_ids = data.get('elementIds')
        return cls(
            id=data['id'],
            from_board=data['fromBoard'],
            to_board=data['toBoard'],
            element_ids=list(element_ids) if element_ids else None,
        )
