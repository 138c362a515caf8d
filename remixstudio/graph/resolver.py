"""
Connector Resolver

Turns the connector topology around a remix board into the concrete set of
boards, elements and brand metadata that feed one synthesis request.

Resolution is a pure function of graph state: nothing here mutates the graph
or raises for stale data. Connectors that reference deleted elements degrade
to "use every element of that board".
"""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Set

from remixstudio.core.constants import BoardType
from remixstudio.core.logging_config import get_logger
from remixstudio.graph.board import Board
from remixstudio.graph.elements import CanvasElement, ImageElement
from remixstudio.graph.workspace_graph import WorkspaceGraph

logger = get_logger("graph.resolver")


@dataclass
class BrandInfo:
    """Logo and palette taken from the selected brand board."""
    colors: Optional[List[str]] = None
    logo: Optional[ImageElement] = None

    def to_dict(self) -> dict:
        return {
            'colors': list(self.colors) if self.colors is not None else None,
            'logo': self.logo.to_dict() if self.logo is not None else None,
        }


@dataclass
class RemixContext:
    """Resolved inputs for one remix board."""
    content_boards: List[Board] = field(default_factory=list)
    brand_board: Optional[Board] = None
    brand_info: Optional[BrandInfo] = None

    @property
    def is_empty(self) -> bool:
        return not self.content_boards

    def all_elements(self) -> List[CanvasElement]:
        """Effective elements of the content boards (the brand board is carried separately)."""
        return [element for board in self.content_boards for element in board.elements]

    def to_dict(self) -> dict:
        return {
            'contentBoards': [board.to_dict() for board in self.content_boards],
            'brandBoard': self.brand_board.to_dict() if self.brand_board else None,
            'brandInfo': self.brand_info.to_dict() if self.brand_info else None,
        }


@dataclass
class _SourceScope:
    use_all: bool = False
    element_ids: Set[str] = field(default_factory=set)


def _collect_scopes(graph: WorkspaceGraph, target_board_id: str) -> Dict[str, _SourceScope]:
    """One scope per source board, in first-connector order."""
    scopes: Dict[str, _SourceScope] = {}
    for connector in graph.inbound_connectors(target_board_id):
        scope = scopes.setdefault(connector.from_board, _SourceScope())
        if connector.uses_all_elements:
            scope.use_all = True
            scope.element_ids.clear()
        elif not scope.use_all:
            scope.element_ids.update(connector.element_ids)
    return scopes


def _effective_elements(board: Board, scope: _SourceScope) -> List[CanvasElement]:
    if scope.use_all:
        return list(board.elements)
    filtered = [el for el in board.elements if el.id in scope.element_ids]
    if not filtered and board.elements:
        logger.warning(
            f"Connector from board {board.id} references no current elements; using all {len(board.elements)}"
        )
        return list(board.elements)
    return filtered


def _effective_boards(graph: WorkspaceGraph, scopes: Dict[str, _SourceScope]) -> List[Board]:
    boards = []
    for board_id, scope in scopes.items():
        source = graph.get_board(board_id)
        if source is None:
            continue
        elements = _effective_elements(source, scope)
        if not elements:
            continue
        boards.append(replace(source, elements=elements))
    return boards


def resolve_remix_context(graph: WorkspaceGraph, target_board_id: str) -> Optional[RemixContext]:
    """
    Compute the remix context for ``target_board_id``.

    Returns ``None`` when the board does not exist or is not a remix board.
    """
    target = graph.get_board(target_board_id)
    if target is None or target.type is not BoardType.REMIX:
        return None

    scopes = _collect_scopes(graph, target_board_id)
    contributing = _effective_boards(graph, scopes)

    brand_board = next((b for b in contributing if b.type is BoardType.BRAND), None)
    if brand_board is None:
        brand_board = next(
            (b for b in graph.boards if b.type is BoardType.BRAND and b.id in scopes),
            None,
        )

    brand_info = None
    if brand_board is not None:
        logo = next((el for el in brand_board.elements if isinstance(el, ImageElement)), None)
        brand_info = BrandInfo(colors=brand_board.colors, logo=logo)

    content_boards = [
        b for b in contributing if brand_board is None or b.id != brand_board.id
    ]

    return RemixContext(
        content_boards=content_boards,
        brand_board=brand_board,
        brand_info=brand_info,
    )


def mention_suggestions(graph: WorkspaceGraph, remix_board_id: str) -> List[str]:
    """Distinct labels of every element feeding a remix board, in discovery order."""
    target = graph.get_board(remix_board_id)
    if target is None or target.type is not BoardType.REMIX:
        return []

    labels: Dict[str, None] = {}
    for board in _effective_boards(graph, _collect_scopes(graph, remix_board_id)):
        for element in board.elements:
            if element.label:
                labels.setdefault(element.label, None)
    return list(labels)
