"""
Remix Studio Workspace Graph

NetworkX-backed model of a workspace: boards are nodes, connectors are
directed edges. At most one connector exists per ordered (from, to) pair;
connecting an existing pair updates that connector in place.
"""

from __future__ import annotations

import uuid
from typing import Callable, Dict, Iterable, List, Optional

import networkx as nx

from remixstudio.core.constants import BoardType
from remixstudio.core.exceptions import (
    BoardNotFoundError,
    DuplicateBoardError,
    InvalidConnectorError,
)
from remixstudio.core.logging_config import get_logger
from remixstudio.graph.board import Board, Connector
from remixstudio.graph.elements import CanvasElement
from remixstudio.graph.layout import with_responsive_board_size

logger = get_logger("graph.workspace")

GraphListener = Callable[["WorkspaceGraph"], None]


class WorkspaceGraph:
    """
    Boards, their elements and the connectors between them.

    Features:
    - Whole-field mutation only (element lists are replaced, never patched)
    - Cascading board deletion (removes every touching connector)
    - Pair-keyed connector upsert
    - Change listeners fired after every mutation
    - Snapshot (de)serialization in the persisted ``{boards, connectors}`` shape
    """

    def __init__(self):
        self._graph = nx.DiGraph()
        self._boards: Dict[str, Board] = {}
        self._edge_seq = 0
        self._listeners: List[GraphListener] = []

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: GraphListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: GraphListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ------------------------------------------------------------------
    # Boards
    # ------------------------------------------------------------------

    @property
    def boards(self) -> List[Board]:
        return list(self._boards.values())

    @property
    def board_count(self) -> int:
        return len(self._boards)

    def has_board(self, board_id: str) -> bool:
        return board_id in self._boards

    def get_board(self, board_id: str) -> Optional[Board]:
        return self._boards.get(board_id)

    def require_board(self, board_id: str) -> Board:
        board = self._boards.get(board_id)
        if board is None:
            raise BoardNotFoundError(board_id)
        return board

    def add_board(self, board: Board) -> Board:
        if board.id in self._boards:
            raise DuplicateBoardError(board.id)
        self._boards[board.id] = board
        self._graph.add_node(board.id)
        logger.debug(f"Added board: {board.id} ({board.type.value})")
        self._notify()
        return board

    def update_board(self, board: Board) -> Board:
        """Replace a stored board with ``board`` (same id)."""
        self.require_board(board.id)
        self._boards[board.id] = board
        self._notify()
        return board

    def replace_board_elements(
        self,
        board_id: str,
        elements: List[CanvasElement],
        remix_prompt: Optional[str] = None,
        resize: bool = True,
    ) -> Board:
        """Swap a board's element list wholesale; connector id lists are left untouched."""
        board = self.require_board(board_id).with_elements(elements)
        if remix_prompt is not None:
            board.remix_prompt = remix_prompt
        if resize:
            board = with_responsive_board_size(board)
        self._boards[board_id] = board
        logger.debug(f"Replaced elements of board {board_id} ({len(elements)} elements)")
        self._notify()
        return board

    def remove_boards(self, board_ids: Iterable[str]) -> List[str]:
        """Delete boards and every connector touching them. Unknown ids are ignored."""
        removed = [bid for bid in dict.fromkeys(board_ids) if bid in self._boards]
        if not removed:
            return []
        for board_id in removed:
            del self._boards[board_id]
            self._graph.remove_node(board_id)
        logger.info(f"Removed {len(removed)} board(s) with their connectors")
        self._notify()
        return removed

    def all_elements(self, board_ids: Optional[Iterable[str]] = None) -> List[CanvasElement]:
        ids = list(board_ids) if board_ids is not None else list(self._boards)
        return [el for bid in ids if bid in self._boards for el in self._boards[bid].elements]

    # ------------------------------------------------------------------
    # Connectors
    # ------------------------------------------------------------------

    @property
    def connectors(self) -> List[Connector]:
        """All connectors in creation order."""
        edges = sorted(self._graph.edges(data=True), key=lambda e: e[2]['seq'])
        return [data['connector'] for _, _, data in edges]

    @property
    def connector_count(self) -> int:
        return self._graph.number_of_edges()

    def get_connector(self, from_board: str, to_board: str) -> Optional[Connector]:
        if not self._graph.has_edge(from_board, to_board):
            return None
        return self._graph.edges[from_board, to_board]['connector']

    def inbound_connectors(self, board_id: str) -> List[Connector]:
        """Connectors whose target is ``board_id``, in creation order."""
        if board_id not in self._graph:
            return []
        edges = sorted(self._graph.in_edges(board_id, data=True), key=lambda e: e[2]['seq'])
        return [data['connector'] for _, _, data in edges]

    def connect(
        self,
        from_board: str,
        to_board: str,
        element_ids: Optional[Iterable[str]] = None,
        require_remix_target: bool = True,
    ) -> Connector:
        """
        Create or update the connector for ``(from_board, to_board)``.

        Requested ids are filtered to the source board's current top-level
        elements and deduplicated; an empty result means "all assets".
        """
        source = self.require_board(from_board)
        target = self.require_board(to_board)
        if from_board == to_board:
            raise InvalidConnectorError(from_board, to_board, "a board cannot feed itself")
        if require_remix_target and target.type is not BoardType.REMIX:
            raise InvalidConnectorError(from_board, to_board, "only Remix boards accept connectors")

        current_ids = set(source.element_ids)
        sanitized = [eid for eid in dict.fromkeys(element_ids or []) if eid in current_ids]
        scoped_ids = sanitized or None

        existing = self.get_connector(from_board, to_board)
        if existing is not None:
            existing.element_ids = scoped_ids
            logger.debug(f"Updated connector {from_board} -> {to_board}")
            self._notify()
            return existing

        connector = Connector(
            id=str(uuid.uuid4()),
            from_board=from_board,
            to_board=to_board,
            element_ids=scoped_ids,
        )
        self._add_edge(connector)
        logger.debug(f"Connected {from_board} -> {to_board}")
        self._notify()
        return connector

    def disconnect(self, from_board: str, to_board: str) -> bool:
        if not self._graph.has_edge(from_board, to_board):
            return False
        self._graph.remove_edge(from_board, to_board)
        self._notify()
        return True

    def _add_edge(self, connector: Connector) -> None:
        self._edge_seq += 1
        self._graph.add_edge(
            connector.from_board,
            connector.to_board,
            connector=connector,
            seq=self._edge_seq,
        )

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        return {
            'boards': [board.to_dict() for board in self._boards.values()],
            'connectors': [connector.to_dict() for connector in self.connectors],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'WorkspaceGraph':
        """
        Rebuild a graph from a snapshot.

        Connectors are restored as stored (stale element ids included).
        Connectors whose endpoints are missing are dropped. Duplicate
        connectors for one pair are merged: any "all assets" connector wins,
        otherwise the id lists are unioned.
        """
        graph = cls()
        for board_data in data.get('boards', []):
            board = Board.from_dict(board_data)
            graph._boards[board.id] = board
            graph._graph.add_node(board.id)

        for connector_data in data.get('connectors', []):
            connector = Connector.from_dict(connector_data)
            if connector.from_board not in graph._boards or connector.to_board not in graph._boards:
                logger.warning(f"Dropping dangling connector {connector.id}")
                continue
            existing = graph.get_connector(connector.from_board, connector.to_board)
            if existing is None:
                graph._add_edge(connector)
                continue
            logger.warning(f"Merging duplicate connector {connector.id} into {existing.id}")
            if existing.uses_all_elements or connector.uses_all_elements:
                existing.element_ids = None
            else:
                existing.element_ids = list(dict.fromkeys(existing.element_ids + connector.element_ids))

        return graph
