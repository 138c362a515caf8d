"""
Shared dependencies for the Remix Studio API.

Routers depend on these providers rather than constructing collaborators
themselves, so tests can swap them through ``app.dependency_overrides``.
"""

from typing import Optional

from slowapi import Limiter
from slowapi.util import get_remote_address

from remixstudio.core.config import get_config
from remixstudio.core.logging_config import get_logger
from remixstudio.llm.gemini_client import GeminiService
from remixstudio.llm.service import GenerativeModelService
from remixstudio.pipelines.board_locks import BoardLockRegistry
from remixstudio.storage.workspace_store import JsonWorkspaceStore, WorkspacePersistence

logger = get_logger("api.dependencies")

limiter = Limiter(key_func=get_remote_address)

_store: Optional[WorkspacePersistence] = None
_service: Optional[GenerativeModelService] = None


def get_store() -> WorkspacePersistence:
    """Process-wide JSON workspace store."""
    global _store
    if _store is None:
        _store = JsonWorkspaceStore(get_config().storage.workspace_dir)
    return _store


def get_model_service() -> GenerativeModelService:
    """
    Shared Gemini service, created on first use.

    Raises:
        MissingConfigError: If no API key is configured
    """
    global _service
    if _service is None:
        _service = GeminiService(config=get_config().models)
        logger.info("Gemini service initialized")
    return _service


def get_lock_registry() -> BoardLockRegistry:
    return BoardLockRegistry.get_instance()


async def close_model_service() -> None:
    global _service
    if _service is not None:
        await _service.aclose()
        _service = None
