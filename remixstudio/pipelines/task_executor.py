"""
Remix Studio Task Executor

Execution phase of a remix. Every planned brief becomes one multimodal image
request; all requests run concurrently and results come back in task order.

Image scoping per task:
- ``@token`` mentions are scanned from the brief (deduplicated)
- If any mention matches a labeled image, only the mentioned images are sent
- Otherwise every available image is sent
"""

import asyncio
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from remixstudio.core.cancellation import CancellationToken, ensure_token
from remixstudio.core.constants import MENTION_PATTERN
from remixstudio.core.exceptions import (
    AssemblyFailure,
    OperationCancelledError,
    RemixStudioError,
)
from remixstudio.core.logging_config import get_logger
from remixstudio.director.creative_director import OrchestrationTask
from remixstudio.graph.elements import CanvasElement, ImageElement
from remixstudio.graph.resolver import BrandInfo
from remixstudio.graph.tree import image_elements
from remixstudio.llm.errors import classify_exception
from remixstudio.llm.media import InlineMedia
from remixstudio.llm.service import GenerativeModelService, Part
from remixstudio.pipelines.progress import ProgressReporter

logger = get_logger("pipelines.executor")

_MENTION_RE = re.compile(MENTION_PATTERN)


def extract_mentions(prompt: str) -> List[str]:
    """Mention tokens in order of first appearance, without the ``@``."""
    return list(dict.fromkeys(_MENTION_RE.findall(prompt or "")))


def select_images(prompt: str, elements: Sequence[CanvasElement]) -> List[ImageElement]:
    """Images a brief should see: the mentioned ones if any match, else all."""
    images = image_elements(elements)
    mentions = set(extract_mentions(prompt))
    if mentions:
        mentioned = [img for img in images if img.label and img.label in mentions]
        if mentioned:
            return mentioned
    return images


@dataclass
class TaskOutcome:
    """Per-task result slot for settled execution."""
    task: OrchestrationTask
    image: Optional[InlineMedia] = None
    error: Optional[RemixStudioError] = None

    @property
    def succeeded(self) -> bool:
        return self.image is not None


class TaskExecutor:
    """
    Runs planned briefs against the image model.

    Features:
    - Concurrent fan-out with order-preserving results
    - Mention-based image scoping
    - All-or-nothing ``execute`` or per-task ``execute_settled``
    """

    def __init__(self, service: GenerativeModelService, reporter: Optional[ProgressReporter] = None):
        self.service = service
        self.reporter = reporter or ProgressReporter()

    def build_parts(
        self,
        task: OrchestrationTask,
        all_elements: Sequence[CanvasElement],
        brand_info: Optional[BrandInfo] = None,
    ) -> List[Part]:
        """Brand logo, then the scoped images, then the brief text."""
        parts: List[Part] = []
        if brand_info is not None and brand_info.logo is not None:
            parts.append(InlineMedia.from_data_url(brand_info.logo.src))
        parts.extend(InlineMedia.from_data_url(img.src) for img in select_images(task.prompt, all_elements))
        parts.append(task.prompt)
        return parts

    async def execute_task(
        self,
        task: OrchestrationTask,
        all_elements: Sequence[CanvasElement],
        brand_info: Optional[BrandInfo] = None,
        token: Optional[CancellationToken] = None,
    ) -> InlineMedia:
        """
        Generate the image for one brief.

        Raises:
            AssemblyFailure: If the response carries no image
            SafetyBlock: If the model refused the request
        """
        token = ensure_token(token)
        token.raise_if_cancelled()
        parts = self.build_parts(task, all_elements, brand_info)
        logger.debug(f"Task {task.id}: sending {len(parts) - 1} image part(s)")

        try:
            images = await self.service.generate_images(parts, token=token)
        except RemixStudioError:
            raise
        except Exception as e:
            raise classify_exception(e)

        if not images:
            logger.error(f"Task {task.id} returned no image")
            raise AssemblyFailure(f"Task {task.id} returned no image", {"task_id": task.id})
        return images[0]

    def _announce(self, tasks: Sequence[OrchestrationTask]) -> None:
        for index, task in enumerate(tasks):
            self.reporter.report(f"Generating variation {index + 1} of {len(tasks)}: {task.description}...")

    async def execute(
        self,
        tasks: Sequence[OrchestrationTask],
        all_elements: Sequence[CanvasElement],
        brand_info: Optional[BrandInfo] = None,
        token: Optional[CancellationToken] = None,
    ) -> List[InlineMedia]:
        """
        Run every task concurrently; result ``i`` belongs to task ``i``.

        The first failure cancels the remaining tasks and is re-raised.
        """
        self._announce(tasks)
        jobs = [
            asyncio.ensure_future(self.execute_task(task, all_elements, brand_info, token))
            for task in tasks
        ]
        try:
            results = await asyncio.gather(*jobs)
        except BaseException:
            for job in jobs:
                job.cancel()
            await asyncio.gather(*jobs, return_exceptions=True)
            raise
        logger.info(f"Executed {len(results)} task(s)")
        return list(results)

    async def execute_settled(
        self,
        tasks: Sequence[OrchestrationTask],
        all_elements: Sequence[CanvasElement],
        brand_info: Optional[BrandInfo] = None,
        token: Optional[CancellationToken] = None,
    ) -> List[TaskOutcome]:
        """Run every task concurrently and report each outcome independently."""
        self._announce(tasks)
        results = await asyncio.gather(
            *(self.execute_task(task, all_elements, brand_info, token) for task in tasks),
            return_exceptions=True,
        )

        outcomes = []
        for task, result in zip(tasks, results):
            if isinstance(result, (OperationCancelledError, asyncio.CancelledError)):
                raise result
            if isinstance(result, RemixStudioError):
                logger.warning(f"Task {task.id} failed: {result}")
                outcomes.append(TaskOutcome(task=task, error=result))
            elif isinstance(result, BaseException):
                raise result
            else:
                outcomes.append(TaskOutcome(task=task, image=result))

        succeeded = sum(1 for outcome in outcomes if outcome.succeeded)
        logger.info(f"Settled {len(outcomes)} task(s): {succeeded} succeeded")
        return outcomes
