"""
Tests for the Task Executor

Tests for remixstudio/pipelines/task_executor.py
"""

import pytest

from remixstudio.core.exceptions import AssemblyFailure, OperationCancelledError, SafetyBlock
from remixstudio.core.cancellation import CancellationToken
from remixstudio.director.creative_director import OrchestrationTask
from remixstudio.graph.resolver import BrandInfo
from remixstudio.llm.media import InlineMedia
from remixstudio.pipelines.progress import ProgressReporter
from remixstudio.pipelines.task_executor import TaskExecutor, extract_mentions, select_images

SHOE_SRC = "data:image/png;base64,U0hPRQ=="
BAG_SRC = "data:image/png;base64,QkFH"
LOGO_SRC = "data:image/png;base64,TE9HTw=="


def make_task(index: int, prompt: str = None) -> OrchestrationTask:
    return OrchestrationTask(
        id=f"task-{index}",
        type="socialMediaTemplate",
        description=f"Direction {index}",
        prompt=prompt or f"Brief {index}: a bold social post",
    )


@pytest.fixture
def elements(make_image, make_text):
    return [
        make_image("img-shoe", "Shoe", src=SHOE_SRC),
        make_image("img-bag", "Bag", src=BAG_SRC),
        make_text("txt-tag", "Run further", "Tagline"),
    ]


class TestMentions:

    def test_extract_mentions_dedupes_in_order(self):
        assert extract_mentions("@Bag next to @Shoe and @Bag again") == ["Bag", "Shoe"]
        assert extract_mentions("no mentions here") == []
        assert extract_mentions(None) == []

    def test_mentioned_images_only(self, elements):
        selected = select_images("Put the @Shoe on a beach", elements)

        assert [img.id for img in selected] == ["img-shoe"]

    def test_unmatched_mentions_fall_back_to_all_images(self, elements):
        selected = select_images("Feature the @Hat", elements)

        assert [img.id for img in selected] == ["img-shoe", "img-bag"]

    def test_text_labels_do_not_scope(self, elements):
        # Only image labels narrow the selection
        selected = select_images("Use the @Tagline", elements)

        assert len(selected) == 2


class TestBuildParts:

    def test_logo_then_images_then_brief(self, fake_service, elements, make_image):
        executor = TaskExecutor(fake_service)
        brand = BrandInfo(colors=["#112233"], logo=make_image("img-logo", "Logo", src=LOGO_SRC))

        parts = executor.build_parts(make_task(1, "Hero shot of @Bag"), elements, brand)

        assert parts == [
            InlineMedia.from_data_url(LOGO_SRC),
            InlineMedia.from_data_url(BAG_SRC),
            "Hero shot of @Bag",
        ]

    def test_no_brand(self, fake_service, elements):
        parts = TaskExecutor(fake_service).build_parts(make_task(1), elements)

        assert len(parts) == 3
        assert parts[-1] == "Brief 1: a bold social post"


class TestExecute:

    @pytest.mark.asyncio
    async def test_results_follow_task_order(self, fake_service, elements):
        # Task 2 finishes after tasks 0 and 1
        fake_service.image_delays = {"Brief 2": 0.05}
        tasks = [make_task(i) for i in range(4)]

        images = await TaskExecutor(fake_service).execute(tasks, elements)

        assert [img.raw_bytes.decode() for img in images] == [task.prompt for task in tasks]

    @pytest.mark.asyncio
    async def test_announces_each_variation(self, fake_service, elements):
        reporter = ProgressReporter()
        tasks = [make_task(1), make_task(2)]

        await TaskExecutor(fake_service, reporter).execute(tasks, elements)

        assert reporter.messages == [
            "Generating variation 1 of 2: Direction 1...",
            "Generating variation 2 of 2: Direction 2...",
        ]

    @pytest.mark.asyncio
    async def test_first_failure_fails_the_batch(self, fake_service, elements):
        fake_service.image_failures = {"Brief 2": SafetyBlock("blocked")}

        with pytest.raises(SafetyBlock):
            await TaskExecutor(fake_service).execute([make_task(i) for i in range(1, 4)], elements)

    @pytest.mark.asyncio
    async def test_zero_images_is_assembly_failure(self, fake_service, elements):
        async def no_images(parts, token=None):
            return []

        fake_service.generate_images = no_images

        with pytest.raises(AssemblyFailure):
            await TaskExecutor(fake_service).execute([make_task(1)], elements)

    @pytest.mark.asyncio
    async def test_foreign_errors_are_classified(self, fake_service, elements):
        fake_service.image_failures = {"Brief 1": RuntimeError("request blocked by safety system")}

        with pytest.raises(SafetyBlock):
            await TaskExecutor(fake_service).execute_task(make_task(1), elements)

    @pytest.mark.asyncio
    async def test_cancelled_token(self, fake_service, elements):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(OperationCancelledError):
            await TaskExecutor(fake_service).execute([make_task(1)], elements, token=token)
        assert fake_service.calls_of("images") == []


class TestExecuteSettled:

    @pytest.mark.asyncio
    async def test_each_task_gets_its_own_slot(self, fake_service, elements):
        fake_service.image_failures = {"Brief 2": SafetyBlock("blocked")}
        tasks = [make_task(i) for i in range(1, 4)]

        outcomes = await TaskExecutor(fake_service).execute_settled(tasks, elements)

        assert [outcome.succeeded for outcome in outcomes] == [True, False, True]
        assert isinstance(outcomes[1].error, SafetyBlock)
        assert outcomes[2].image.raw_bytes.decode() == tasks[2].prompt

    @pytest.mark.asyncio
    async def test_cancellation_is_not_settled(self, fake_service, elements):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(OperationCancelledError):
            await TaskExecutor(fake_service).execute_settled([make_task(1)], elements, token=token)
