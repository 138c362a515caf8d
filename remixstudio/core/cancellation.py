"""
Cooperative cancellation for long-running studio operations.

A token is handed to a pipeline and checked before every external call and
during every poll sleep.
"""

import asyncio
from typing import Awaitable, Optional, TypeVar

from .exceptions import OperationCancelledError
from .logging_config import get_logger

logger = get_logger("core.cancellation")

T = TypeVar("T")


class CancellationToken:
    """One-shot cancellation signal shared between a caller and an operation."""

    def __init__(self):
        self._event = asyncio.Event()
        self._reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: str = "cancelled by caller") -> None:
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()
        logger.info(f"Cancellation requested: {reason}")

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError(
                f"Operation cancelled: {self._reason}", {"reason": self._reason}
            )

    async def sleep(self, seconds: float) -> None:
        """Sleep for ``seconds`` unless cancelled first; raise on cancellation."""
        self.raise_if_cancelled()
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return
        self.raise_if_cancelled()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable``, aborting it if the token is cancelled first."""
        self.raise_if_cancelled()
        work = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            work.cancel()
            raise
        finally:
            waiter.cancel()
        if not work.done():
            work.cancel()
            self.raise_if_cancelled()
        return work.result()


def ensure_token(token: Optional[CancellationToken]) -> CancellationToken:
    """Return ``token`` or a fresh token that is never cancelled."""
    return token if token is not None else CancellationToken()
