"""Workspace router for Remix Studio API."""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from remixstudio.core.constants import BoardType
from remixstudio.core.exceptions import BoardBusyError, BoardNotFoundError
from remixstudio.core.logging_config import get_logger
from remixstudio.api.dependencies import get_lock_registry, get_model_service, get_store
from remixstudio.graph.board import Board
from remixstudio.graph.elements import element_from_dict
from remixstudio.graph.layout import with_responsive_board_size
from remixstudio.graph.workspace_graph import WorkspaceGraph
from remixstudio.llm.service import GenerativeModelService
from remixstudio.pipelines.analysis import AssetAnalyzer
from remixstudio.pipelines.board_generation import BoardGenerator, build_empty_board
from remixstudio.pipelines.board_locks import BoardLockRegistry
from remixstudio.pipelines.progress import ProgressReporter
from remixstudio.storage.workspace_store import WorkspacePersistence, normalize_owner

logger = get_logger("api.workspace")

router = APIRouter()


class WorkspacePayload(BaseModel):
    name: Optional[str] = None
    boards: list[dict] = []
    connectors: list[dict] = []


class NewBoardRequest(BaseModel):
    type: BoardType
    title: Optional[str] = None
    elements: list[dict] = []
    colors: Optional[list[str]] = None


class GenerateBoardRequest(BaseModel):
    kind: Literal["image", "text", "brand"]
    prompt: str
    title: Optional[str] = None
    palettePrompt: Optional[str] = None
    textStyle: Optional[str] = None


class ConnectorRequest(BaseModel):
    fromBoard: str
    toBoard: str
    elementIds: Optional[list[str]] = None


def empty_workspace(owner: str) -> dict:
    return {"id": normalize_owner(owner), "name": None, "boards": [], "connectors": []}


async def commit_board(store: WorkspacePersistence, owner: str, board: Board) -> Board:
    """
    Write one board back into the latest stored workspace.

    Re-reading before the write keeps changes made to other boards while a
    slow operation was running.
    """
    latest = await store.load_graph(owner)
    if not latest.has_board(board.id):
        raise BoardNotFoundError(board.id)
    latest.update_board(board)
    await store.save(owner, latest.to_dict())
    return board


@router.get("/{owner}")
async def get_workspace(owner: str, store: WorkspacePersistence = Depends(get_store)):
    """Stored workspace, or an empty one for new owners."""
    stored = await store.load(owner)
    if stored is None:
        return empty_workspace(owner)
    return stored.to_dict()


@router.put("/{owner}")
async def put_workspace(
    owner: str,
    payload: WorkspacePayload,
    store: WorkspacePersistence = Depends(get_store),
):
    """Replace the whole workspace; the snapshot is normalized through the graph first."""
    try:
        graph = WorkspaceGraph.from_dict({"boards": payload.boards, "connectors": payload.connectors})
    except (KeyError, TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid workspace snapshot: {e}")
    stored = await store.save(owner, graph.to_dict(), name=payload.name)
    return stored.to_dict()


@router.post("/{owner}/boards", status_code=201)
async def add_board(
    owner: str,
    body: NewBoardRequest,
    store: WorkspacePersistence = Depends(get_store),
):
    graph = await store.load_graph(owner)
    board = build_empty_board(body.type, body.title, graph.board_count)
    board.colors = body.colors
    board = with_responsive_board_size(
        board.with_elements([element_from_dict(el) for el in body.elements])
    )
    graph.add_board(board)
    await store.save(owner, graph.to_dict())
    logger.info(f"Added {board.type.value} board {board.id} for {normalize_owner(owner)}")
    return board.to_dict()


@router.post("/{owner}/boards/generate", status_code=201)
async def generate_board(
    owner: str,
    body: GenerateBoardRequest,
    store: WorkspacePersistence = Depends(get_store),
    service: GenerativeModelService = Depends(get_model_service),
):
    """Generate an image, text or brand board from a prompt and add it to the workspace."""
    if not body.prompt.strip():
        raise HTTPException(status_code=400, detail="Please enter a prompt.")

    graph = await store.load_graph(owner)
    reporter = ProgressReporter()
    generator = BoardGenerator(service, reporter=reporter)
    title = body.title or body.prompt.strip()[:40]

    if body.kind == "image":
        board = await generator.generate_image_board(body.prompt, title, graph.board_count)
    elif body.kind == "text":
        board = await generator.generate_text_board(body.prompt, title, graph.board_count)
    else:
        board = await generator.generate_brand_board(
            body.prompt,
            body.palettePrompt or body.prompt,
            body.textStyle or "concise",
            graph.board_count,
        )

    latest = await store.load_graph(owner)
    latest.add_board(board)
    await store.save(owner, latest.to_dict())
    return {"board": board.to_dict(), "progress": reporter.messages}


@router.post("/{owner}/boards/{board_id}/analyze")
async def analyze_board(
    owner: str,
    board_id: str,
    store: WorkspacePersistence = Depends(get_store),
    service: GenerativeModelService = Depends(get_model_service),
    locks: BoardLockRegistry = Depends(get_lock_registry),
):
    """Attach style/product/text analysis to every element of a board."""
    graph = await store.load_graph(owner)
    board = graph.require_board(board_id)
    async with locks.hold(board_id, "analysis"):
        enriched = await AssetAnalyzer(service).enrich_board(board)
        await commit_board(store, owner, enriched)
    return enriched.to_dict()


@router.delete("/{owner}/boards/{board_id}")
async def delete_board(
    owner: str,
    board_id: str,
    store: WorkspacePersistence = Depends(get_store),
    locks: BoardLockRegistry = Depends(get_lock_registry),
):
    """Delete a board and every connector touching it."""
    if locks.is_busy(board_id):
        raise BoardBusyError(board_id)
    graph = await store.load_graph(owner)
    removed = graph.remove_boards([board_id])
    if not removed:
        raise BoardNotFoundError(board_id)
    await store.save(owner, graph.to_dict())
    return {"removed": removed}


@router.put("/{owner}/connectors")
async def put_connector(
    owner: str,
    body: ConnectorRequest,
    store: WorkspacePersistence = Depends(get_store),
):
    """Create or update the connector for an ordered board pair."""
    graph = await store.load_graph(owner)
    connector = graph.connect(body.fromBoard, body.toBoard, body.elementIds)
    await store.save(owner, graph.to_dict())
    return connector.to_dict()


@router.delete("/{owner}/connectors")
async def delete_connector(
    owner: str,
    fromBoard: str,
    toBoard: str,
    store: WorkspacePersistence = Depends(get_store),
):
    graph = await store.load_graph(owner)
    if not graph.disconnect(fromBoard, toBoard):
        raise HTTPException(status_code=404, detail="Connector not found")
    await store.save(owner, graph.to_dict())
    return {"success": True}
