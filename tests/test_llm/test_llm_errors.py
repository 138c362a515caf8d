"""
Tests for error classification and inline media helpers.
"""

import pytest

from remixstudio.core.exceptions import ModelServiceError, RateLimit, SafetyBlock
from remixstudio.llm.errors import (
    blocked_reason,
    classify_exception,
    classify_http_error,
    is_safety_message,
    parse_error_body,
)
from remixstudio.llm.media import (
    InlineMedia,
    fit_within,
    image_dimensions,
    inline_media_from_part,
)


class TestClassification:

    def test_structured_signals_win_over_text(self):
        # Rate limiting is decided by status even when the text mentions safety
        error = classify_http_error(429, '{"error": {"message": "safety quota"}}')

        assert isinstance(error, RateLimit)

    def test_safety_phrase_fallback(self):
        assert isinstance(classify_http_error(400, "violates content policy"), SafetyBlock)

    def test_plain_failure(self):
        error = classify_http_error(503, {"error": {"message": "unavailable", "status": "UNAVAILABLE"}})

        assert isinstance(error, ModelServiceError)
        assert error.details["status"] == "UNAVAILABLE"

    def test_parse_error_body(self):
        assert parse_error_body('{"error": {"code": 429}}') == {"code": 429}
        assert parse_error_body("not json") is None
        assert parse_error_body({"error": "flat"}) is None

    def test_blocked_reason(self):
        assert blocked_reason({"promptFeedback": {"blockReason": "OTHER"}}) == "OTHER"
        assert blocked_reason({"candidates": [{"finishReason": "PROHIBITED_CONTENT"}]}) == "PROHIBITED_CONTENT"
        assert blocked_reason({"candidates": [{"finishReason": "STOP"}]}) is None

    def test_classify_exception(self):
        assert isinstance(classify_exception(RuntimeError("blocked for safety")), SafetyBlock)
        assert isinstance(classify_exception(RuntimeError('{"error": {"status": "RESOURCE_EXHAUSTED"}}')), RateLimit)
        assert isinstance(classify_exception(RuntimeError("boom")), ModelServiceError)

    def test_is_safety_message(self):
        assert is_safety_message("Responsible AI filter triggered")
        assert not is_safety_message("")
        assert not is_safety_message(None)


class TestInlineMedia:

    def test_data_url_round_trip(self):
        media = InlineMedia.from_data_url("data:image/jpeg;base64,QUJD")

        assert media == InlineMedia(data="QUJD", mime_type="image/jpeg")
        assert media.data_url == "data:image/jpeg;base64,QUJD"
        assert media.raw_bytes == b"ABC"

    def test_invalid_data_url(self):
        with pytest.raises(ModelServiceError):
            InlineMedia.from_data_url("https://example.com/cat.png")

    def test_inline_media_from_part_accepts_both_casings(self):
        camel = inline_media_from_part({"inlineData": {"mimeType": "image/png", "data": "AA"}})
        snake = inline_media_from_part({"inline_data": {"mime_type": "image/png", "data": "AA"}})

        assert camel == snake == InlineMedia(data="AA", mime_type="image/png")
        assert inline_media_from_part({"text": "hi"}) is None

    def test_image_dimensions(self, png_src):
        assert image_dimensions(InlineMedia.from_data_url(png_src)) == (8, 8)
        assert image_dimensions(InlineMedia.from_bytes(b"not an image", "image/png")) is None

    def test_fit_within(self):
        assert fit_within((512, 256), 256) == (256, 128)
        assert fit_within(None, 256) == (256.0, 256.0)
