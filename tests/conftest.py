"""
Pytest Configuration and Fixtures

Shared fixtures for all tests: a scripted in-memory model service, element
and board factories, and a small workspace with image, text, brand and remix
boards.
"""

import asyncio
import base64
import io
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from PIL import Image

from remixstudio.core.config import PipelineConfig, StudioConfig, set_config
from remixstudio.core.constants import BoardType
from remixstudio.graph.board import Board
from remixstudio.graph.elements import ImageElement, TextElement
from remixstudio.graph.workspace_graph import WorkspaceGraph
from remixstudio.llm.media import InlineMedia
from remixstudio.llm.service import GenerativeModelService, OperationHandle, OperationStatus
from remixstudio.pipelines.board_locks import BoardLockRegistry


def png_data_url(color: str = "red", size=(8, 8)) -> str:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


def default_plan_tasks(count: int = 4, task_type: str = "socialMediaTemplate") -> List[dict]:
    return [
        {
            "id": f"task-{i}",
            "type": task_type,
            "description": f"Direction {i}",
            "prompt": f"Brief {i}: a bold social post",
            "dependencies": [],
        }
        for i in range(1, count + 1)
    ]


class FakeModelService(GenerativeModelService):
    """
    Scripted GenerativeModelService.

    Structured responses are consumed from ``structured_responses`` (values,
    exceptions or callables); when the queue is empty, plan requests get
    ``plan_tasks`` and other schemas get ``{}``. Generated images encode the
    brief text so tests can check which task produced which image.
    """

    def __init__(self):
        self.calls: List[tuple] = []
        self.plan_tasks: List[dict] = default_plan_tasks()
        self.structured_responses: List[Any] = []
        self.text_responses: List[Any] = []
        self.image_delays: Dict[str, float] = {}
        self.image_failures: Dict[str, Exception] = {}
        self.imagen_results: List[Any] = []
        self.poll_statuses: List[OperationStatus] = []
        self.video_bytes = b"fake-mp4"

    def calls_of(self, method: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == method]

    @staticmethod
    def _next(queue: List[Any], *args):
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(*args)
        return item

    async def generate_structured(self, parts, schema, model=None, token=None):
        self.calls.append(("structured", list(parts), schema))
        if token is not None:
            token.raise_if_cancelled()
        if self.structured_responses:
            return self._next(self.structured_responses, parts, schema)
        if "tasks" in schema.get("properties", {}):
            return {"tasks": self.plan_tasks}
        return {}

    async def generate_text(self, prompt, temperature=0.7, model=None, token=None):
        self.calls.append(("text", prompt, temperature))
        if self.text_responses:
            return self._next(self.text_responses, prompt)
        return "Here is a sharper brief."

    async def generate_images(self, parts, token=None):
        parts = list(parts)
        prompt = parts[-1] if parts and isinstance(parts[-1], str) else ""
        self.calls.append(("images", parts))
        for key, delay in self.image_delays.items():
            if key in prompt:
                await asyncio.sleep(delay)
        if token is not None:
            token.raise_if_cancelled()
        for key, error in self.image_failures.items():
            if key in prompt:
                raise error
        return [InlineMedia.from_bytes(prompt.encode("utf-8"), "image/png")]

    async def generate_imagen(self, prompt, token=None):
        self.calls.append(("imagen", prompt))
        if self.imagen_results:
            return self._next(self.imagen_results, prompt)
        return [InlineMedia.from_bytes(f"imagen:{prompt}".encode("utf-8"), "image/png")]

    async def start_video(self, prompt, seed_image=None, token=None):
        self.calls.append(("start_video", prompt, seed_image))
        return OperationHandle(name="operations/video-1")

    async def poll_operation(self, handle, token=None):
        self.calls.append(("poll", handle.name))
        if self.poll_statuses:
            return self.poll_statuses.pop(0)
        return OperationStatus(done=True, result_uri="https://files.example/video.mp4")

    async def download(self, uri, token=None):
        self.calls.append(("download", uri))
        return InlineMedia.from_bytes(self.video_bytes, "video/mp4")


@pytest.fixture(autouse=True)
def studio_config():
    """Fresh global config (zero poll interval) and lock registry per test."""
    config = StudioConfig(pipeline=PipelineConfig(poll_interval_seconds=0.0))
    set_config(config)
    BoardLockRegistry.reset()
    yield config
    set_config(StudioConfig())
    BoardLockRegistry.reset()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def fake_service() -> FakeModelService:
    return FakeModelService()


@pytest.fixture
def png_src() -> str:
    return png_data_url()


@pytest.fixture
def make_image(png_src):
    def factory(element_id: str, label: Optional[str] = None, **kwargs) -> ImageElement:
        kwargs.setdefault("src", png_src)
        kwargs.setdefault("width", 100)
        kwargs.setdefault("height", 100)
        return ImageElement(id=element_id, label=label, **kwargs)
    return factory


@pytest.fixture
def make_text():
    def factory(element_id: str, text: str = "Launch day", label: Optional[str] = None, **kwargs) -> TextElement:
        kwargs.setdefault("width", 200)
        return TextElement(id=element_id, text=text, label=label, **kwargs)
    return factory


@pytest.fixture
def make_board():
    def factory(board_id: str, board_type: BoardType = BoardType.IMAGE, elements=None, **kwargs) -> Board:
        kwargs.setdefault("title", board_id.replace("-", " ").title())
        return Board(id=board_id, type=board_type, elements=list(elements or []), **kwargs)
    return factory


@pytest.fixture
def studio_graph(make_board, make_image, make_text) -> WorkspaceGraph:
    """
    board-img (Shoe, Bag, Tagline) --all--> board-remix <--all-- board-brand (Logo)
    board-copy (Copy) is not connected.
    """
    graph = WorkspaceGraph()
    graph.add_board(make_board("board-img", BoardType.IMAGE, [
        make_image("img-shoe", "Shoe"),
        make_image("img-bag", "Bag", x=150),
        make_text("txt-tag", "Run further", "Tagline", y=150),
    ], title="Product Shots"))
    graph.add_board(make_board("board-copy", BoardType.TEXT, [make_text("txt-copy", "Hello", "Copy")]))
    graph.add_board(make_board(
        "board-brand", BoardType.BRAND, [make_image("img-logo", "Logo")],
        colors=["#112233", "#445566"],
    ))
    graph.add_board(make_board("board-remix", BoardType.REMIX, title="Remix Stage"))
    graph.connect("board-img", "board-remix")
    graph.connect("board-brand", "board-remix")
    return graph
