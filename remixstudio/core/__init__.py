"""
Remix Studio Core Module

Contains core systems including configuration, constants, exceptions,
logging and cancellation.
"""

from .config import StudioConfig, load_config, get_config, set_config
from .constants import *
from .exceptions import *
from .logging_config import setup_logging, get_logger
from .cancellation import CancellationToken

__all__ = [
    'StudioConfig',
    'load_config',
    'get_config',
    'set_config',
    'setup_logging',
    'get_logger',
    'CancellationToken',
]
