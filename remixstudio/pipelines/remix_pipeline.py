"""
Remix Studio Remix Pipeline

End-to-end remix of one board:

    resolve context -> summarize -> plan (Creative Director)
                    -> execute (TaskExecutor) -> replace board elements

Planning and execution are strictly sequential. The workspace graph is only
touched after every task has succeeded, so a failed remix leaves it unchanged.
"""

import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from remixstudio.core.cancellation import CancellationToken, ensure_token
from remixstudio.core.config import PipelineConfig, get_config
from remixstudio.core.exceptions import (
    EmptyRemixContextError,
    MissingPromptError,
    OrchestrationError,
)
from remixstudio.core.logging_config import get_logger
from remixstudio.context.summarizer import summarize
from remixstudio.director.creative_director import CreativeDirector, OrchestrationPlan
from remixstudio.graph.board import Board
from remixstudio.graph.elements import ImageElement
from remixstudio.graph.layout import grid_position
from remixstudio.graph.resolver import RemixContext, resolve_remix_context
from remixstudio.graph.tree import image_elements
from remixstudio.graph.workspace_graph import WorkspaceGraph
from remixstudio.llm.media import InlineMedia, fit_within, image_dimensions
from remixstudio.llm.service import GenerativeModelService
from remixstudio.pipelines.board_locks import BoardLockRegistry
from remixstudio.pipelines.progress import ProgressReporter, as_reporter
from remixstudio.pipelines.task_executor import TaskExecutor, TaskOutcome

logger = get_logger("pipelines.remix")


@dataclass
class RemixResult:
    """Outcome of a successful remix."""
    board: Board
    plan: OrchestrationPlan
    images: List[InlineMedia] = field(default_factory=list)
    failures: List[TaskOutcome] = field(default_factory=list)


def build_remix_elements(
    images: List[InlineMedia],
    prompt: str,
    tile_size: int = 256,
    padding: int = 32,
) -> List[ImageElement]:
    """Generated images as labeled tiles on a two-column grid, aspect ratio preserved."""
    elements = []
    for index, image in enumerate(images):
        x, y = grid_position(index, tile_size, padding)
        width, height = fit_within(image_dimensions(image), tile_size)
        elements.append(ImageElement(
            id=str(uuid.uuid4()),
            x=x,
            y=y,
            width=width,
            height=height,
            src=image.data_url,
            generation_prompt=prompt,
            label=f"Remix {index + 1}",
        ))
    return elements


class RemixPipeline:
    """
    Orchestrates remixes against a workspace graph.

    Features:
    - Per-board lock; overlapping remixes of one board are rejected
    - Cancellation token threaded through every model call
    - All-or-nothing execution by default, per-task slots with ``allow_partial``
    """

    def __init__(
        self,
        service: GenerativeModelService,
        config: Optional[PipelineConfig] = None,
        locks: Optional[BoardLockRegistry] = None,
    ):
        self.service = service
        self.config = config or get_config().pipeline
        self.locks = locks or BoardLockRegistry.get_instance()

    def prepare(self, graph: WorkspaceGraph, remix_board_id: str, prompt: str) -> RemixContext:
        """
        Validate a remix request before any model call.

        Raises:
            MissingPromptError: Blank prompt
            BoardNotFoundError: Unknown board
            EmptyRemixContextError: No content boards feed the remix board
        """
        if not prompt or not prompt.strip():
            raise MissingPromptError("Remix requested without a prompt", {"board_id": remix_board_id})

        graph.require_board(remix_board_id)
        context = resolve_remix_context(graph, remix_board_id)
        if context is None:
            raise OrchestrationError(
                f"Board is not a remix board: '{remix_board_id}'",
                {"board_id": remix_board_id},
                user_message="Select a Remix board to generate a remix.",
            )
        if context.is_empty:
            raise EmptyRemixContextError(
                "Remix board has no contributing boards", {"board_id": remix_board_id}
            )
        return context

    async def run(
        self,
        graph: WorkspaceGraph,
        remix_board_id: str,
        prompt: str,
        progress=None,
        token: Optional[CancellationToken] = None,
        allow_partial: bool = False,
    ) -> RemixResult:
        """
        Remix ``remix_board_id`` with ``prompt``.

        Args:
            graph: Workspace graph (mutated only on success)
            remix_board_id: Target remix board
            prompt: User's goal
            progress: ProgressReporter or ``callable(message)``
            token: Cancellation token
            allow_partial: Keep successful variations when some tasks fail

        Returns:
            RemixResult with the updated board, the plan and the generated images
        """
        context = self.prepare(graph, remix_board_id, prompt)
        reporter = as_reporter(progress)
        token = ensure_token(token)

        async with self.locks.hold(remix_board_id, "remix"):
            logger.info(f"Remix started on board {remix_board_id}")
            plan, tasks = await self._plan(context, prompt, reporter, token)

            reporter.report(f"Creative Director has prepared {len(tasks)} creative briefs. Executing...")
            executor = TaskExecutor(self.service, reporter)
            failures: List[TaskOutcome] = []
            if allow_partial:
                outcomes = await executor.execute_settled(
                    tasks, context.all_elements(), context.brand_info, token
                )
                images = [outcome.image for outcome in outcomes if outcome.succeeded]
                failures = [outcome for outcome in outcomes if not outcome.succeeded]
                if not images:
                    raise failures[0].error
            else:
                images = await executor.execute(tasks, context.all_elements(), context.brand_info, token)

            token.raise_if_cancelled()
            elements = build_remix_elements(
                images, prompt, self.config.tile_size, self.config.tile_padding
            )
            board = graph.replace_board_elements(remix_board_id, elements, remix_prompt=prompt)

        logger.info(f"Remix finished on board {remix_board_id}: {len(images)} image(s)")
        return RemixResult(board=board, plan=plan, images=images, failures=failures)

    async def _plan(self, context: RemixContext, prompt: str, reporter: ProgressReporter,
                    token: CancellationToken):
        reporter.report("Creative Director is analyzing the brief...")
        summary = summarize(context.content_boards, context.brand_info)
        image_assets = [InlineMedia.from_data_url(img.src) for img in image_elements(context.all_elements())]
        brand_logo = None
        if context.brand_info is not None and context.brand_info.logo is not None:
            brand_logo = InlineMedia.from_data_url(context.brand_info.logo.src)

        director = CreativeDirector(self.service, self.config)
        plan = await director.plan(
            prompt, summary.boards_text, summary.brand_text, image_assets, brand_logo, token=token
        )
        return plan, director.select_tasks(plan)
