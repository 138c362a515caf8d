"""
Generative model error classification.

Structured signals from the service are checked first: HTTP 429,
``RESOURCE_EXHAUSTED`` status, prompt block reasons and safety finish
reasons. Matching phrases in the error text is the last resort.
"""

import json
from typing import Any, Optional

from remixstudio.core.exceptions import (
    GenerationError,
    ModelServiceError,
    RateLimit,
    SafetyBlock,
)
from remixstudio.core.logging_config import get_logger

logger = get_logger("llm.errors")

SAFETY_FINISH_REASONS = frozenset({
    "SAFETY",
    "PROHIBITED_CONTENT",
    "IMAGE_SAFETY",
    "BLOCKLIST",
    "SPII",
})

# Lowercase phrases that mark a refusal in free-form error text
SAFETY_PATTERNS = (
    "safety",
    "responsible ai",
    "content policy",
)


def is_safety_message(text: Optional[str]) -> bool:
    if not text:
        return False
    lowered = text.lower()
    return any(pattern in lowered for pattern in SAFETY_PATTERNS)


def parse_error_body(body: Any) -> Optional[dict]:
    """Return the ``error`` object of a service error body, if there is one."""
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except (json.JSONDecodeError, ValueError):
            return None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"]
    return None


def _is_rate_limited(error: Optional[dict]) -> bool:
    if not error:
        return False
    return error.get("status") == "RESOURCE_EXHAUSTED" or error.get("code") == 429


def classify_http_error(status_code: int, body: Any) -> GenerationError:
    """Map a non-2xx service response to a typed error."""
    error = parse_error_body(body)
    message = (error or {}).get("message") or (body if isinstance(body, str) else "") or ""
    details = {"status_code": status_code}
    if error and error.get("status"):
        details["status"] = error["status"]

    if status_code == 429 or _is_rate_limited(error):
        return RateLimit(f"Rate limited: {message}", details, status_code=status_code)
    if is_safety_message(message):
        return SafetyBlock(f"Request blocked: {message}", details, status_code=status_code)
    return ModelServiceError(f"HTTP {status_code}: {message}", details, status_code=status_code)


def blocked_reason(result: dict) -> Optional[str]:
    """Safety block reason carried by a successful response, if any."""
    feedback = result.get("promptFeedback") or {}
    if feedback.get("blockReason"):
        return feedback["blockReason"]
    for candidate in result.get("candidates") or []:
        reason = candidate.get("finishReason")
        if reason in SAFETY_FINISH_REASONS:
            return reason
    return None


def raise_if_blocked(result: dict) -> None:
    reason = blocked_reason(result)
    if reason:
        raise SafetyBlock(f"Response blocked by the model: {reason}", {"reason": reason})


def classify_exception(exc: BaseException) -> GenerationError:
    """Best-effort classification of an arbitrary failure."""
    if isinstance(exc, GenerationError):
        return exc
    message = str(exc)
    error = parse_error_body(message)
    if _is_rate_limited(error):
        return RateLimit(f"Rate limited: {error.get('message', message)}")
    if is_safety_message(message):
        return SafetyBlock(f"Request blocked: {message}")
    return ModelServiceError(message or type(exc).__name__)
