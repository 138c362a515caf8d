"""
Remix Studio Board Locks

Per-board mutex for generation operations. A second operation against a busy
board is rejected immediately with BoardBusyError; it is never queued.
"""

from contextlib import asynccontextmanager
from typing import Dict, List, Optional

from remixstudio.core.exceptions import BoardBusyError
from remixstudio.core.logging_config import get_logger

logger = get_logger("pipelines.board_locks")


class BoardLockRegistry:
    """
    Tracks which boards have an operation in flight.

    Features:
    - Reject-on-contention acquisition
    - Busy flag queries for UI and API callers
    - Owner labels for diagnostics

    Acquisition never suspends, so the check-and-set is atomic under the
    single-threaded event loop.
    """

    _instance: Optional['BoardLockRegistry'] = None

    @classmethod
    def get_instance(cls) -> 'BoardLockRegistry':
        """Get singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset singleton (for testing)."""
        cls._instance = None

    def __init__(self):
        self._held: Dict[str, str] = {}

    def is_busy(self, board_id: str) -> bool:
        return board_id in self._held

    def busy_boards(self) -> List[str]:
        return list(self._held)

    def acquire(self, board_id: str, operation: str = "operation") -> None:
        if board_id in self._held:
            logger.warning(
                f"Rejected {operation} on board {board_id}: {self._held[board_id]} in progress"
            )
            raise BoardBusyError(board_id)
        self._held[board_id] = operation
        logger.debug(f"Board {board_id} locked for {operation}")

    def release(self, board_id: str) -> None:
        if self._held.pop(board_id, None) is not None:
            logger.debug(f"Board {board_id} released")

    @asynccontextmanager
    async def hold(self, board_id: str, operation: str = "operation"):
        """
        Hold the board for the duration of the block.

        Usage:
            async with registry.hold(board_id, "remix"):
                await run_remix()

        Raises:
            BoardBusyError: If the board is already held
        """
        self.acquire(board_id, operation)
        try:
            yield
        finally:
            self.release(board_id)
