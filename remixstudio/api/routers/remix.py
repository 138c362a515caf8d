"""Remix and video router for Remix Studio API."""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from remixstudio.core.config import get_config
from remixstudio.core.exceptions import MissingPromptError
from remixstudio.core.logging_config import get_logger
from remixstudio.api.dependencies import get_lock_registry, get_model_service, get_store, limiter
from remixstudio.api.routers.workspace import commit_board
from remixstudio.graph.layout import grid_position, with_responsive_board_size
from remixstudio.graph.resolver import mention_suggestions
from remixstudio.llm.service import GenerativeModelService
from remixstudio.pipelines.board_locks import BoardLockRegistry
from remixstudio.pipelines.progress import ProgressReporter
from remixstudio.pipelines.remix_pipeline import RemixPipeline
from remixstudio.pipelines.video_pipeline import VideoGenerator, build_video_element
from remixstudio.storage.workspace_store import WorkspacePersistence

logger = get_logger("api.remix")

router = APIRouter()


class RemixRequest(BaseModel):
    prompt: str
    allowPartial: bool = False


class VideoRequest(BaseModel):
    prompt: str
    seedImage: Optional[str] = None


@router.post("/{owner}/boards/{board_id}/remix")
@limiter.limit("20/minute")
async def remix_board(
    request: Request,
    owner: str,
    board_id: str,
    body: RemixRequest,
    store: WorkspacePersistence = Depends(get_store),
    service: GenerativeModelService = Depends(get_model_service),
    locks: BoardLockRegistry = Depends(get_lock_registry),
):
    """Run one remix of ``board_id`` and store the generated variations."""
    graph = await store.load_graph(owner)
    reporter = ProgressReporter()
    pipeline = RemixPipeline(service, get_config().pipeline, locks)
    result = await pipeline.run(
        graph, board_id, body.prompt, progress=reporter, allow_partial=body.allowPartial
    )
    board = await commit_board(store, owner, result.board)
    return {
        "board": board.to_dict(),
        "plan": result.plan.to_dict(),
        "progress": reporter.messages,
        "failures": [
            {"taskId": outcome.task.id, "detail": outcome.error.user_message}
            for outcome in result.failures
        ],
    }


@router.get("/{owner}/boards/{board_id}/mentions")
async def get_mentions(
    owner: str,
    board_id: str,
    store: WorkspacePersistence = Depends(get_store),
):
    """Labels that can be @mentioned in a remix prompt for this board."""
    graph = await store.load_graph(owner)
    graph.require_board(board_id)
    return {"mentions": mention_suggestions(graph, board_id)}


@router.post("/{owner}/boards/{board_id}/video")
@limiter.limit("5/minute")
async def generate_video(
    request: Request,
    owner: str,
    board_id: str,
    body: VideoRequest,
    store: WorkspacePersistence = Depends(get_store),
    service: GenerativeModelService = Depends(get_model_service),
    locks: BoardLockRegistry = Depends(get_lock_registry),
):
    """Generate a video and append it to ``board_id``."""
    if not body.prompt.strip():
        raise MissingPromptError("Video requested without a prompt", {"board_id": board_id})

    graph = await store.load_graph(owner)
    board = graph.require_board(board_id)
    reporter = ProgressReporter()

    async with locks.hold(board_id, "video"):
        video = await VideoGenerator(service, get_config().pipeline).generate(
            body.prompt, reporter, seed_image=body.seedImage
        )
        x, y = grid_position(len(board.elements))
        element = build_video_element(video, body.prompt, x, y)
        updated = with_responsive_board_size(board.with_elements([*board.elements, element]))
        await commit_board(store, owner, updated)

    logger.info(f"Video added to board {board_id}")
    return {"element": element.to_dict(), "progress": reporter.messages}
