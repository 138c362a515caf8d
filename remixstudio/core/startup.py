"""
Startup validation and environment checks.

Validates required API keys and configuration at application startup.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .config import StudioConfig
from .env_loader import get_gemini_api_key


@dataclass
class ValidationResult:
    """Result of environment validation."""
    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def validate_environment(config: Optional[StudioConfig] = None) -> ValidationResult:
    """
    Validate the environment configuration.

    Checks:
    - A Gemini API key is configured (every generative call depends on it)
    - The workspace directory is usable

    Returns:
        ValidationResult with validation status and any errors/warnings
    """
    errors = []
    warnings = []

    if not get_gemini_api_key():
        errors.append(
            "No Gemini API key found. Set GEMINI_API_KEY (or GOOGLE_API_KEY)."
        )

    if config is not None:
        workspace_dir = config.storage.workspace_dir
        if workspace_dir.exists() and not workspace_dir.is_dir():
            errors.append(f"Workspace path is not a directory: {workspace_dir}")
        elif not workspace_dir.exists():
            warnings.append(f"Workspace directory will be created on first save: {workspace_dir}")

        if config.pipeline.poll_interval_seconds == 0:
            warnings.append("Poll interval is 0s - video polling will busy-loop")

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings
    )
