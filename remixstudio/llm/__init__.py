"""
Remix Studio LLM Module

Generative model collaborator: the service contract, the Gemini REST
implementation, error classification and inline media helpers.
"""

from .media import InlineMedia, fit_within, image_dimensions, inline_media_from_part
from .service import GenerativeModelService, OperationHandle, OperationStatus, Part
from .errors import (
    SAFETY_PATTERNS,
    classify_exception,
    classify_http_error,
    is_safety_message,
    raise_if_blocked,
)
from .gemini_client import GeminiService

__all__ = [
    # Media
    'InlineMedia',
    'inline_media_from_part',
    'image_dimensions',
    'fit_within',
    # Service contract
    'GenerativeModelService',
    'OperationHandle',
    'OperationStatus',
    'Part',
    'GeminiService',
    # Errors
    'SAFETY_PATTERNS',
    'classify_exception',
    'classify_http_error',
    'is_safety_message',
    'raise_if_blocked',
]
