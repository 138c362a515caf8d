"""
Remix Studio Constants

Global constants used throughout Remix Studio.
"""

from enum import Enum

# =============================================================================
# VERSION INFO
# =============================================================================
VERSION = "0.4.0"
PROJECT_NAME = "Remix Studio"

# =============================================================================
# WORKSPACE MODEL
# =============================================================================

class BoardType(Enum):
    """Declared board types; governs how a board takes part in a remix."""
    IMAGE = "image"
    TEXT = "text"
    REMIX = "remix"
    BRAND = "brand"
    PRODUCT = "product"


class ElementType(Enum):
    """Discriminant of the canvas element union."""
    IMAGE = "image"
    TEXT = "text"
    GROUP = "group"
    VIDEO = "video"


class VideoStatus(Enum):
    """Lifecycle of a video element."""
    PENDING = "pending"
    GENERATING = "generating"
    COMPLETE = "complete"
    ERROR = "error"


DEFAULT_WORKSPACE_NAME = "AI Studio Workspace"
GUEST_OWNER_ID = "guest"

# Text elements have no stored height; bounding boxes use this instead
TEXT_SYNTHETIC_HEIGHT = 50

# =============================================================================
# BOARD LAYOUT
# =============================================================================
HEADER_BASE_HEIGHT = 40
REMIX_HEADER_HEIGHT = 88
BOARD_PADDING = 32
LABEL_LINE_HEIGHT = 22
LABEL_MARGIN = 8
MIN_BOARD_WIDTH = 320
MIN_BOARD_HEIGHT = 280
DEFAULT_BOARD_WIDTH = 550
DEFAULT_BOARD_HEIGHT = 600
GENERATED_TILE_SIZE = 256
REMIX_PROMPT_MAX_CHARS = 160

# =============================================================================
# ORCHESTRATION
# =============================================================================
SOCIAL_MEDIA_TASK_TYPE = "socialMediaTemplate"
EXPECTED_TASK_COUNT = 4

# Mentions are "@" followed by word characters
MENTION_PATTERN = r'@(\w+)'

# =============================================================================
# LONG-RUNNING OPERATIONS
# =============================================================================
POLL_INTERVAL_SECONDS = 10.0

VIDEO_REASSURING_MESSAGES = [
    "Warming up the digital film crew...",
    "Rendering the first few frames...",
    "Applying cinematic magic...",
    "Syncing audio and video...",
    "This can take a moment, good things come to those who wait!",
    "Almost there, just polishing the final cut...",
]

# =============================================================================
# MODELS
# =============================================================================
DEFAULT_TEXT_MODEL = "gemini-2.5-flash"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image-preview"
DEFAULT_IMAGEN_MODEL = "imagen-4.0-generate-001"
DEFAULT_VIDEO_MODEL = "veo-2.0-generate-001"
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
