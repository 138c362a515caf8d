"""Main FastAPI application for Remix Studio."""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

# Load environment variables using centralized loader
from remixstudio.core.env_loader import ensure_env_loaded
ensure_env_loaded()

from remixstudio.core.constants import PROJECT_NAME, VERSION
from remixstudio.core.exceptions import RemixStudioError
from remixstudio.core.logging_config import get_logger
from remixstudio.api.dependencies import close_model_service, get_lock_registry, limiter
from remixstudio.api.errors import studio_error_handler
from remixstudio.api.routers import genie, remix, workspace

logger = get_logger("api.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_model_service()


app = FastAPI(
    title="Remix Studio API",
    description="API for connector-driven creative remixes of workspace boards",
    version=VERSION,
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(RemixStudioError, studio_error_handler)

# CORS middleware for web UI
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(workspace.router, prefix="/api/workspaces", tags=["workspaces"])
app.include_router(remix.router, prefix="/api/workspaces", tags=["remix"])
app.include_router(genie.router, prefix="/api/genie", tags=["genie"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": f"{PROJECT_NAME} API", "version": VERSION}


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "busyBoards": get_lock_registry().busy_boards()}


def start_server(host: str = "0.0.0.0", port: int = 8000, reload: bool = False):
    """Start the FastAPI server."""
    logger.info(f"Starting {PROJECT_NAME} API on {host}:{port}")
    uvicorn.run(
        "remixstudio.api.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level="warning",
    )


if __name__ == "__main__":
    start_server()
