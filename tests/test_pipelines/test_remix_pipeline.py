"""
Tests for the Remix Pipeline

Tests for remixstudio/pipelines/remix_pipeline.py, run end to end against the
scripted model service.
"""

import io

import pytest
from PIL import Image

from remixstudio.core.cancellation import CancellationToken
from remixstudio.core.exceptions import (
    BoardBusyError,
    BoardNotFoundError,
    EmptyRemixContextError,
    MissingPromptError,
    OperationCancelledError,
    OrchestrationError,
    PlannerFailure,
    SafetyBlock,
)
from remixstudio.llm.media import InlineMedia
from remixstudio.pipelines.board_locks import BoardLockRegistry
from remixstudio.pipelines.progress import ProgressReporter
from remixstudio.pipelines.remix_pipeline import RemixPipeline, build_remix_elements


PROMPT = "Launch campaign for summer"


def wide_png() -> InlineMedia:
    buffer = io.BytesIO()
    Image.new("RGB", (400, 200), "blue").save(buffer, format="PNG")
    return InlineMedia.from_bytes(buffer.getvalue(), "image/png")


class TestBuildRemixElements:

    def test_labels_and_grid(self):
        images = [InlineMedia.from_bytes(b"x", "image/png") for _ in range(3)]

        elements = build_remix_elements(images, PROMPT, tile_size=256, padding=32)

        assert [el.label for el in elements] == ["Remix 1", "Remix 2", "Remix 3"]
        assert [(el.x, el.y) for el in elements] == [(32, 32), (320, 32), (32, 320)]
        assert all(el.generation_prompt == PROMPT for el in elements)
        # Undecodable images get a square tile
        assert (elements[0].width, elements[0].height) == (256, 256)

    def test_keeps_aspect_ratio(self):
        wide = wide_png()

        element = build_remix_elements([wide], PROMPT, tile_size=256)[0]

        assert (element.width, element.height) == (256, 128)


class TestPrepare:

    def test_blank_prompt(self, fake_service, studio_graph):
        with pytest.raises(MissingPromptError):
            RemixPipeline(fake_service).prepare(studio_graph, "board-remix", "   ")

    def test_unknown_board(self, fake_service, studio_graph):
        with pytest.raises(BoardNotFoundError):
            RemixPipeline(fake_service).prepare(studio_graph, "missing", PROMPT)

    def test_not_a_remix_board(self, fake_service, studio_graph):
        with pytest.raises(OrchestrationError):
            RemixPipeline(fake_service).prepare(studio_graph, "board-img", PROMPT)

    def test_nothing_connected(self, fake_service, studio_graph):
        studio_graph.disconnect("board-img", "board-remix")
        studio_graph.disconnect("board-brand", "board-remix")

        with pytest.raises(EmptyRemixContextError):
            RemixPipeline(fake_service).prepare(studio_graph, "board-remix", PROMPT)

    def test_brand_only_is_empty(self, fake_service, studio_graph):
        studio_graph.disconnect("board-img", "board-remix")

        with pytest.raises(EmptyRemixContextError):
            RemixPipeline(fake_service).prepare(studio_graph, "board-remix", PROMPT)


class TestRun:

    @pytest.mark.asyncio
    async def test_successful_remix(self, fake_service, studio_graph):
        reporter = ProgressReporter()

        result = await RemixPipeline(fake_service).run(studio_graph, "board-remix", PROMPT, progress=reporter)

        board = studio_graph.get_board("board-remix")
        assert board is result.board
        assert board.remix_prompt == PROMPT
        assert [el.label for el in board.elements] == ["Remix 1", "Remix 2", "Remix 3", "Remix 4"]
        assert [img.raw_bytes.decode() for img in result.images] == [t["prompt"] for t in fake_service.plan_tasks]
        assert len(result.plan.tasks) == 4
        assert result.failures == []
        assert reporter.messages[:2] == [
            "Creative Director is analyzing the brief...",
            "Creative Director has prepared 4 creative briefs. Executing...",
        ]
        assert reporter.messages[2] == "Generating variation 1 of 4: Direction 1..."

    @pytest.mark.asyncio
    async def test_planner_sees_prompt_logo_and_content_images(self, fake_service, studio_graph):
        await RemixPipeline(fake_service).run(studio_graph, "board-remix", PROMPT)

        (_, parts, _), = fake_service.calls_of("structured")
        assert PROMPT in parts[0]
        # Logo, then the two product shots; the brand board is not content
        assert len(parts) == 4
        assert all(isinstance(part, InlineMedia) for part in parts[1:])

    @pytest.mark.asyncio
    async def test_every_brief_gets_logo_and_images(self, fake_service, studio_graph):
        await RemixPipeline(fake_service).run(studio_graph, "board-remix", PROMPT)

        image_calls = fake_service.calls_of("images")
        assert len(image_calls) == 4
        assert all(len(call[1]) == 4 for call in image_calls)

    @pytest.mark.asyncio
    async def test_progress_callback(self, fake_service, studio_graph):
        received = []

        await RemixPipeline(fake_service).run(studio_graph, "board-remix", PROMPT, progress=received.append)

        assert received[0] == "Creative Director is analyzing the brief..."

    @pytest.mark.asyncio
    async def test_failed_task_leaves_graph_untouched(self, fake_service, studio_graph):
        fake_service.image_failures = {"Brief 3": SafetyBlock("blocked")}
        before = studio_graph.to_dict()

        with pytest.raises(SafetyBlock):
            await RemixPipeline(fake_service).run(studio_graph, "board-remix", PROMPT)

        assert studio_graph.to_dict() == before
        assert not BoardLockRegistry.get_instance().is_busy("board-remix")

    @pytest.mark.asyncio
    async def test_allow_partial_keeps_successes(self, fake_service, studio_graph):
        fake_service.image_failures = {"Brief 3": SafetyBlock("blocked")}

        result = await RemixPipeline(fake_service).run(
            studio_graph, "board-remix", PROMPT, allow_partial=True
        )

        assert len(result.board.elements) == 3
        assert [failure.task.id for failure in result.failures] == ["task-3"]

    @pytest.mark.asyncio
    async def test_allow_partial_with_no_successes(self, fake_service, studio_graph):
        fake_service.image_failures = {"Brief": SafetyBlock("blocked")}

        with pytest.raises(SafetyBlock):
            await RemixPipeline(fake_service).run(studio_graph, "board-remix", PROMPT, allow_partial=True)

        assert studio_graph.get_board("board-remix").elements == []

    @pytest.mark.asyncio
    async def test_plan_without_expected_type(self, fake_service, studio_graph):
        fake_service.plan_tasks = [dict(task, type="copywriting") for task in fake_service.plan_tasks]

        with pytest.raises(PlannerFailure):
            await RemixPipeline(fake_service).run(studio_graph, "board-remix", PROMPT)

        assert fake_service.calls_of("images") == []

    @pytest.mark.asyncio
    async def test_busy_board_is_rejected(self, fake_service, studio_graph):
        locks = BoardLockRegistry()
        locks.acquire("board-remix", "video")

        with pytest.raises(BoardBusyError):
            await RemixPipeline(fake_service, locks=locks).run(studio_graph, "board-remix", PROMPT)

        assert fake_service.calls == []

    @pytest.mark.asyncio
    async def test_cancelled_before_planning(self, fake_service, studio_graph):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(OperationCancelledError):
            await RemixPipeline(fake_service).run(studio_graph, "board-remix", PROMPT, token=token)

        assert studio_graph.get_board("board-remix").elements == []
        assert not BoardLockRegistry.get_instance().is_busy("board-remix")
