"""Genie router for Remix Studio API."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from remixstudio.api.dependencies import get_model_service, get_store
from remixstudio.director.genie import GenieAssistant, GenieMessage
from remixstudio.graph.resolver import resolve_remix_context
from remixstudio.llm.service import GenerativeModelService
from remixstudio.storage.workspace_store import WorkspacePersistence

router = APIRouter()


class GenieTurn(BaseModel):
    role: str  # "user" or "genie"
    text: str


class GenieRequest(BaseModel):
    message: str
    goal: str = ""
    history: list[GenieTurn] = []
    owner: Optional[str] = None
    remixBoardId: Optional[str] = None


class GenieResponse(BaseModel):
    reply: str


@router.post("", response_model=GenieResponse)
async def genie_reply(
    body: GenieRequest,
    store: WorkspacePersistence = Depends(get_store),
    service: GenerativeModelService = Depends(get_model_service),
):
    """Answer one brief-writing turn, grounded in the boards feeding a remix board."""
    boards, brand_info = [], None
    if body.remixBoardId:
        graph = await store.load_graph(body.owner)
        graph.require_board(body.remixBoardId)
        context = resolve_remix_context(graph, body.remixBoardId)
        if context is not None:
            boards, brand_info = context.content_boards, context.brand_info

    history = [GenieMessage(role=turn.role, text=turn.text) for turn in body.history]
    try:
        reply = await GenieAssistant(service).reply(
            body.goal, boards, brand_info, body.message, history
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return GenieResponse(reply=reply)
