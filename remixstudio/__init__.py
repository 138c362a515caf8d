"""
Remix Studio - Connector-Driven Creative Remix Platform

Users arrange image, text, product and brand boards on a workspace, wire them
into Remix boards with connectors, and ask for a remix. A Creative Director
plans four creative briefs from the connected assets and a task executor turns
them into generated variations.

Version: 0.4.0
"""

__version__ = "0.4.0"
__author__ = "Remix Studio Team"
__project__ = "Remix Studio"

from pathlib import Path

# Load environment variables early - before any other imports that might need them
from remixstudio.core.env_loader import ensure_env_loaded
ensure_env_loaded()

# Package root directory
PACKAGE_ROOT = Path(__file__).parent
PROJECT_ROOT = PACKAGE_ROOT.parent

__all__ = [
    "__version__",
    "__author__",
    "__project__",
    "PACKAGE_ROOT",
    "PROJECT_ROOT",
]
