"""Mapping of Remix Studio errors to HTTP responses."""

from fastapi import Request
from fastapi.responses import JSONResponse

from remixstudio.core.exceptions import (
    AnalysisFailure,
    AssemblyFailure,
    BoardBusyError,
    BoardNotFoundError,
    ConfigurationError,
    DuplicateBoardError,
    EmptyRemixContextError,
    GenerationError,
    GraphError,
    MissingPromptError,
    OrchestrationError,
    PersistenceError,
    PlannerFailure,
    RateLimit,
    RemixStudioError,
    SafetyBlock,
)
from remixstudio.core.logging_config import get_logger

logger = get_logger("api.errors")

# First match wins; subclasses before their bases
STATUS_BY_ERROR = [
    (BoardNotFoundError, 404),
    (BoardBusyError, 409),
    (DuplicateBoardError, 409),
    (MissingPromptError, 400),
    (EmptyRemixContextError, 400),
    (GraphError, 400),
    (SafetyBlock, 422),
    (RateLimit, 429),
    (PlannerFailure, 502),
    (AssemblyFailure, 502),
    (OrchestrationError, 400),
    (ConfigurationError, 500),
    (PersistenceError, 500),
    (GenerationError, 502),
    (AnalysisFailure, 502),
]


def status_for(error: RemixStudioError) -> int:
    for error_type, status in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 500


async def studio_error_handler(request: Request, exc: RemixStudioError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({status}): {exc.message}")
    return JSONResponse(status_code=status, content={"detail": exc.user_message})
