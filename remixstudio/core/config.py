"""
Remix Studio Configuration Management

Centralized configuration system with JSON loading and validation.
"""

import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional

from .exceptions import ConfigurationError, InvalidConfigError
from .constants import (
    BOARD_PADDING,
    DEFAULT_IMAGE_MODEL,
    DEFAULT_IMAGEN_MODEL,
    DEFAULT_TEXT_MODEL,
    DEFAULT_VIDEO_MODEL,
    EXPECTED_TASK_COUNT,
    GEMINI_BASE_URL,
    GENERATED_TILE_SIZE,
    POLL_INTERVAL_SECONDS,
    SOCIAL_MEDIA_TASK_TYPE,
)

DEFAULT_CONFIG_PATH = Path("config/remixstudio_config.json")


@dataclass
class ModelConfig:
    """Generative model selection and transport settings."""
    text_model: str = DEFAULT_TEXT_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL
    imagen_model: str = DEFAULT_IMAGEN_MODEL
    video_model: str = DEFAULT_VIDEO_MODEL
    base_url: str = GEMINI_BASE_URL
    timeout: float = 120.0

    @classmethod
    def from_dict(cls, data: dict) -> 'ModelConfig':
        defaults = cls()
        timeout = data.get('timeout', defaults.timeout)
        if not isinstance(timeout, (int, float)) or timeout <= 0:
            raise InvalidConfigError(f"models.timeout must be a positive number, got {timeout!r}")
        return cls(
            text_model=data.get('text_model', defaults.text_model),
            image_model=data.get('image_model', defaults.image_model),
            imagen_model=data.get('imagen_model', defaults.imagen_model),
            video_model=data.get('video_model', defaults.video_model),
            base_url=data.get('base_url', defaults.base_url),
            timeout=float(timeout),
        )


@dataclass
class PipelineConfig:
    """Remix and video pipeline settings."""
    expected_task_count: int = EXPECTED_TASK_COUNT
    task_type: str = SOCIAL_MEDIA_TASK_TYPE
    poll_interval_seconds: float = POLL_INTERVAL_SECONDS
    tile_size: int = GENERATED_TILE_SIZE
    tile_padding: int = BOARD_PADDING

    @classmethod
    def from_dict(cls, data: dict) -> 'PipelineConfig':
        defaults = cls()
        poll_interval = data.get('poll_interval_seconds', defaults.poll_interval_seconds)
        if not isinstance(poll_interval, (int, float)) or poll_interval < 0:
            raise InvalidConfigError(
                f"pipeline.poll_interval_seconds must be >= 0, got {poll_interval!r}"
            )
        return cls(
            expected_task_count=data.get('expected_task_count', defaults.expected_task_count),
            task_type=data.get('task_type', defaults.task_type),
            poll_interval_seconds=float(poll_interval),
            tile_size=data.get('tile_size', defaults.tile_size),
            tile_padding=data.get('tile_padding', defaults.tile_padding),
        )


@dataclass
class StorageConfig:
    """Workspace persistence settings."""
    workspace_dir: Path = field(default_factory=lambda: Path("workspaces"))
    save_debounce_seconds: float = 1.0

    @classmethod
    def from_dict(cls, data: dict) -> 'StorageConfig':
        defaults = cls()
        return cls(
            workspace_dir=Path(data.get('workspace_dir', defaults.workspace_dir)),
            save_debounce_seconds=float(
                data.get('save_debounce_seconds', defaults.save_debounce_seconds)
            ),
        )


@dataclass
class StudioConfig:
    """Main configuration class for Remix Studio."""

    project_name: str = "Remix Studio"
    models: ModelConfig = field(default_factory=ModelConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    verbose_logging: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> 'StudioConfig':
        """Create StudioConfig from dictionary."""
        config = cls()
        config.project_name = data.get('project_name', config.project_name)
        config.verbose_logging = data.get('verbose_logging', config.verbose_logging)

        if 'models' in data:
            config.models = ModelConfig.from_dict(data['models'])
        if 'pipeline' in data:
            config.pipeline = PipelineConfig.from_dict(data['pipeline'])
        if 'storage' in data:
            config.storage = StorageConfig.from_dict(data['storage'])

        return config

    def to_dict(self) -> dict:
        data = asdict(self)
        data['storage']['workspace_dir'] = str(self.storage.workspace_dir)
        return data


def load_config(config_path: Optional[Path] = None) -> StudioConfig:
    """
    Load configuration from JSON file.

    Args:
        config_path: Path to configuration file. If None, uses default.

    Returns:
        Loaded StudioConfig instance (defaults when the file does not exist)
    """
    config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    if not config_path.exists():
        return StudioConfig()

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return StudioConfig.from_dict(data)
    except json.JSONDecodeError as e:
        raise InvalidConfigError(f"Invalid JSON in config file: {e}")
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Failed to load config: {e}")


_config: Optional[StudioConfig] = None


def get_config() -> StudioConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: StudioConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
