"""
Remix Studio Gemini Client

Async Gemini REST client built on httpx. Covers generateContent (structured
JSON, text, image+text), Imagen predict, Veo predictLongRunning with
operation polling, and result file download.

Every call takes an optional CancellationToken; a cancelled token aborts the
in-flight request and raises OperationCancelledError.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence

import httpx

from remixstudio.core.cancellation import CancellationToken, ensure_token
from remixstudio.core.config import ModelConfig, get_config
from remixstudio.core.env_loader import get_gemini_api_key
from remixstudio.core.exceptions import (
    MalformedResponseError,
    MissingConfigError,
    ModelServiceError,
    SafetyBlock,
)
from remixstudio.core.logging_config import get_logger
from remixstudio.llm.errors import classify_http_error, raise_if_blocked
from remixstudio.llm.media import InlineMedia, inline_media_from_part
from remixstudio.llm.service import GenerativeModelService, OperationHandle, OperationStatus, Part

logger = get_logger("llm.gemini")


def _part_to_wire(part: Part) -> dict:
    if isinstance(part, InlineMedia):
        return part.to_part()
    return {"text": part}


def _parse_json_from_text(text: str) -> Any:
    """Parse JSON from model text, tolerating markdown code fences."""
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    if text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return json.loads(text.strip())


def _candidate_parts(result: dict) -> List[dict]:
    parts: List[dict] = []
    for candidate in result.get("candidates") or []:
        parts.extend((candidate.get("content") or {}).get("parts") or [])
    return parts


def _response_text(result: dict) -> str:
    candidates = result.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts if "text" in part)


def _video_uri(response: dict) -> Optional[str]:
    video_response = response.get("generateVideoResponse") or response
    samples = video_response.get("generatedSamples") or video_response.get("generatedVideos") or []
    if not samples:
        return None
    return (samples[0].get("video") or {}).get("uri")


class GeminiService(GenerativeModelService):
    """GenerativeModelService backed by the Gemini REST API."""

    MODEL_DISPLAY_NAME = "Gemini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        config: Optional[ModelConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        api_key = api_key or get_gemini_api_key()
        if not api_key:
            raise MissingConfigError(
                "Gemini API key is not configured",
                {"env": ["GEMINI_API_KEY", "GOOGLE_API_KEY", "VITE_GEMINI_API_KEY"]},
                user_message="Gemini API key is not configured.",
            )
        self.api_key = api_key
        self.config = config or get_config().models
        self._client = httpx.AsyncClient(
            timeout=self.config.timeout,
            transport=transport,
            follow_redirects=True,
        )

    async def __aenter__(self) -> 'GeminiService':
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        }

    def _model_url(self, model: str, method: str) -> str:
        return f"{self.config.base_url}/models/{model}:{method}"

    async def _send(
        self,
        method: str,
        url: str,
        token: Optional[CancellationToken],
        body: Optional[dict] = None,
    ) -> httpx.Response:
        token = ensure_token(token)
        try:
            response = await token.run(
                self._client.request(method, url, json=body, headers=self._get_headers())
            )
        except httpx.TimeoutException as e:
            raise ModelServiceError(f"Request timed out: {e}", {"url": url})
        except httpx.HTTPError as e:
            raise ModelServiceError(f"Transport error: {e}", {"url": url})

        if response.status_code >= 400:
            error = classify_http_error(response.status_code, response.text)
            logger.error(f"{self.MODEL_DISPLAY_NAME} request failed: {error}")
            raise error
        return response

    async def _request_json(
        self,
        method: str,
        url: str,
        token: Optional[CancellationToken],
        body: Optional[dict] = None,
    ) -> dict:
        response = await self._send(method, url, token, body)
        try:
            return response.json()
        except ValueError as e:
            raise ModelServiceError(f"Service returned non-JSON body: {e}", {"url": url})

    async def _generate_content(
        self,
        model: str,
        parts: Sequence[Part],
        generation_config: dict,
        token: Optional[CancellationToken],
    ) -> dict:
        body = {
            "contents": [{"role": "user", "parts": [_part_to_wire(p) for p in parts]}],
            "generationConfig": generation_config,
        }
        result = await self._request_json("POST", self._model_url(model, "generateContent"), token, body)
        raise_if_blocked(result)
        return result

    # ------------------------------------------------------------------
    # GenerativeModelService
    # ------------------------------------------------------------------

    async def generate_structured(
        self,
        parts: Sequence[Part],
        schema: dict,
        model: Optional[str] = None,
        token: Optional[CancellationToken] = None,
    ) -> Any:
        model = model or self.config.text_model
        result = await self._generate_content(
            model,
            parts,
            {"responseMimeType": "application/json", "responseSchema": schema},
            token,
        )
        text = _response_text(result).strip()
        if not text:
            raise MalformedResponseError("Structured response contained no text", {"model": model})
        try:
            return _parse_json_from_text(text)
        except json.JSONDecodeError as e:
            raise MalformedResponseError(f"Structured response is not valid JSON: {e}", {"model": model})

    async def generate_text(
        self,
        prompt: str,
        temperature: float = 0.7,
        model: Optional[str] = None,
        token: Optional[CancellationToken] = None,
    ) -> str:
        model = model or self.config.text_model
        result = await self._generate_content(model, [prompt], {"temperature": temperature}, token)
        return _response_text(result).strip()

    async def generate_images(
        self,
        parts: Sequence[Part],
        token: Optional[CancellationToken] = None,
    ) -> List[InlineMedia]:
        result = await self._generate_content(
            self.config.image_model,
            parts,
            {"responseModalities": ["IMAGE", "TEXT"]},
            token,
        )
        images = []
        for part in _candidate_parts(result):
            media = inline_media_from_part(part)
            if media is not None:
                images.append(media)
        logger.debug(f"Image request returned {len(images)} image(s)")
        return images

    async def generate_imagen(
        self,
        prompt: str,
        token: Optional[CancellationToken] = None,
    ) -> List[InlineMedia]:
        body = {
            "instances": [{"prompt": prompt}],
            "parameters": {
                "sampleCount": 1,
                "aspectRatio": "1:1",
                "outputOptions": {"mimeType": "image/png"},
            },
        }
        result = await self._request_json(
            "POST", self._model_url(self.config.imagen_model, "predict"), token, body
        )
        images = []
        filtered_reason = None
        for prediction in result.get("predictions") or []:
            data = prediction.get("bytesBase64Encoded")
            if data:
                images.append(InlineMedia(data=data, mime_type=prediction.get("mimeType", "image/png")))
            elif prediction.get("raiFilteredReason"):
                filtered_reason = prediction["raiFilteredReason"]
        if not images and filtered_reason:
            raise SafetyBlock(f"Image filtered by responsible AI policy: {filtered_reason}")
        return images

    async def start_video(
        self,
        prompt: str,
        seed_image: Optional[InlineMedia] = None,
        token: Optional[CancellationToken] = None,
    ) -> OperationHandle:
        instance: Dict[str, Any] = {"prompt": prompt}
        if seed_image is not None:
            instance["image"] = {
                "bytesBase64Encoded": seed_image.data,
                "mimeType": seed_image.mime_type,
            }
        body = {"instances": [instance], "parameters": {"sampleCount": 1}}
        result = await self._request_json(
            "POST", self._model_url(self.config.video_model, "predictLongRunning"), token, body
        )
        name = result.get("name")
        if not name:
            raise ModelServiceError("Video request returned no operation name", {"response": result})
        logger.info(f"Video operation started: {name}")
        return OperationHandle(name=name)

    async def poll_operation(
        self,
        handle: OperationHandle,
        token: Optional[CancellationToken] = None,
    ) -> OperationStatus:
        result = await self._request_json("GET", f"{self.config.base_url}/{handle.name}", token)
        if not result.get("done"):
            return OperationStatus(done=False, raw=result)

        error = result.get("error")
        if error:
            return OperationStatus(done=True, error=error.get("message") or str(error), raw=result)

        response = result.get("response") or {}
        uri = _video_uri(response)
        if uri is None:
            reasons = (response.get("generateVideoResponse") or {}).get("raiMediaFilteredReasons") or []
            if reasons:
                return OperationStatus(done=True, error="; ".join(reasons), raw=result)
        return OperationStatus(done=True, result_uri=uri, raw=result)

    async def download(
        self,
        uri: str,
        token: Optional[CancellationToken] = None,
    ) -> InlineMedia:
        response = await self._send("GET", uri, token)
        mime_type = response.headers.get("content-type", "application/octet-stream").split(";")[0]
        return InlineMedia.from_bytes(response.content, mime_type)

