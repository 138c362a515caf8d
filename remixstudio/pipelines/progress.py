"""
Remix Studio Progress Reporting

Human-readable progress messages for slow operations, and the polling
protocol for long-running model operations:

    INITIATED -> POLLING -> DONE
                         -> FAILED

While polling, every non-terminal poll emits the next message from a fixed
reassurance list (cycled in order) so callers see continuous progress without
real percentage data.
"""

from enum import Enum
from typing import Awaitable, Callable, List, Optional, Sequence

from remixstudio.core.cancellation import CancellationToken, ensure_token
from remixstudio.core.constants import POLL_INTERVAL_SECONDS, VIDEO_REASSURING_MESSAGES
from remixstudio.core.exceptions import SafetyBlock, VideoGenerationFailure
from remixstudio.core.logging_config import get_logger
from remixstudio.llm.errors import is_safety_message
from remixstudio.llm.service import GenerativeModelService, OperationHandle, OperationStatus

logger = get_logger("pipelines.progress")

ProgressCallback = Callable[[str], None]


class OperationState(Enum):
    """Lifecycle of a polled operation."""
    INITIATED = "initiated"
    POLLING = "polling"
    DONE = "done"
    FAILED = "failed"


class ProgressReporter:
    """Forwards progress messages to an optional callback and keeps a history."""

    def __init__(self, callback: Optional[ProgressCallback] = None):
        self._callback = callback
        self.messages: List[str] = []

    @property
    def last_message(self) -> Optional[str]:
        return self.messages[-1] if self.messages else None

    def report(self, message: str) -> None:
        self.messages.append(message)
        logger.info(message)
        if self._callback is not None:
            self._callback(message)


def as_reporter(progress) -> ProgressReporter:
    """Accept a reporter, a bare callback or None."""
    if isinstance(progress, ProgressReporter):
        return progress
    return ProgressReporter(progress)


class OperationPoller:
    """
    Drives one long-running operation to completion.

    Usage:
        poller = OperationPoller(service, reporter)
        status = await poller.run(lambda: service.start_video(prompt), "Starting...")
    """

    def __init__(
        self,
        service: GenerativeModelService,
        reporter: Optional[ProgressReporter] = None,
        interval: float = POLL_INTERVAL_SECONDS,
        reassurance: Sequence[str] = VIDEO_REASSURING_MESSAGES,
        failure_prefix: str = "Video generation failed",
    ):
        self.service = service
        self.reporter = reporter or ProgressReporter()
        self.interval = interval
        self.reassurance = list(reassurance)
        self.failure_prefix = failure_prefix
        self.state = OperationState.INITIATED
        self.poll_count = 0
        self._message_index = 0

    def _next_reassurance(self) -> None:
        if not self.reassurance:
            return
        self.reporter.report(self.reassurance[self._message_index % len(self.reassurance)])
        self._message_index += 1

    async def run(
        self,
        submit: Callable[[], Awaitable[OperationHandle]],
        start_message: str,
        finish_message: Optional[str] = None,
        token: Optional[CancellationToken] = None,
    ) -> OperationStatus:
        """
        Submit, poll until done, and return the terminal status.

        Raises:
            SafetyBlock: If the operation failed with a safety refusal
            VideoGenerationFailure: If the operation finished with any other error
            OperationCancelledError: If ``token`` is cancelled while waiting
        """
        token = ensure_token(token)
        self.state = OperationState.INITIATED
        self.reporter.report(start_message)
        handle = await submit()

        self.state = OperationState.POLLING
        self._next_reassurance()
        status = OperationStatus(done=False)
        while not status.done:
            await token.sleep(self.interval)
            status = await self.service.poll_operation(handle, token=token)
            self.poll_count += 1
            if not status.done:
                self._next_reassurance()

        if finish_message:
            self.reporter.report(finish_message)

        if status.error is not None:
            self.state = OperationState.FAILED
            logger.error(f"Operation {handle.name} failed: {status.error}")
            if is_safety_message(status.error):
                raise SafetyBlock(
                    f"{self.failure_prefix}: {status.error}",
                    {"operation": handle.name},
                )
            raise VideoGenerationFailure(
                f"{self.failure_prefix}: {status.error}",
                {"operation": handle.name},
            )

        self.state = OperationState.DONE
        logger.info(f"Operation {handle.name} completed after {self.poll_count} poll(s)")
        return status
