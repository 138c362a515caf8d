"""
Remix Studio Asset Analysis

Enriches board elements with structured analysis (style, product or text
attributes) that the Creative Director later reads through the summarizer.

Analysis is best-effort: a failed call is logged as an AnalysisFailure and the
element gets an empty analysis object. It never blocks the caller.
"""

import asyncio
from dataclasses import replace
from typing import Optional

from remixstudio.core.cancellation import CancellationToken
from remixstudio.core.constants import BoardType
from remixstudio.core.exceptions import AnalysisFailure, OperationCancelledError, RemixStudioError
from remixstudio.core.logging_config import get_logger
from remixstudio.director.prompts import StudioPromptLibrary
from remixstudio.graph.board import Board
from remixstudio.graph.elements import (
    CanvasElement,
    ImageAnalysis,
    ImageElement,
    ProductAnalysis,
    TextAnalysis,
    TextElement,
)
from remixstudio.llm.media import InlineMedia
from remixstudio.llm.service import GenerativeModelService

logger = get_logger("pipelines.analysis")


IMAGE_ANALYSIS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "style": {"type": "STRING", "description": "e.g., Minimalist, futuristic, vintage, bohemian."},
        "mood": {"type": "STRING", "description": "e.g., Luxurious, energetic, calm, mysterious."},
        "colorPalette": {"type": "ARRAY", "items": {"type": "STRING"}, "description": "Array of dominant hex codes."},
        "typography": {"type": "STRING", "description": "e.g., elegant serif, bold sans-serif, handwritten script."},
        "composition": {"type": "STRING", "description": "e.g., Rule of thirds, symmetrical, asymmetrical, negative space."},
        "objects": {"type": "ARRAY", "items": {"type": "STRING"}, "description": "Key objects in the image."},
    },
}

PRODUCT_ANALYSIS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "productName": {
            "type": "STRING",
            "description": "The specific name of the product if identifiable, otherwise a general name.",
        },
        "productType": {
            "type": "STRING",
            "description": "The category of the product, e.g., 'sneaker', 'chair', 'handbag'.",
        },
        "keyFeatures": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "A list of key visual features of the product.",
        },
    },
    "required": ["productName", "productType", "keyFeatures"],
}

TEXT_ANALYSIS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "sentiment": {"type": "STRING", "description": "e.g., Positive, urgent, professional."},
        "keywords": {"type": "ARRAY", "items": {"type": "STRING"}, "description": "Array of key keywords."},
        "style": {"type": "STRING", "description": "e.g., Formal, casual, witty, technical."},
    },
}


class AssetAnalyzer:
    """Per-element analysis calls with local recovery."""

    def __init__(self, service: GenerativeModelService):
        self.service = service

    async def _structured(self, parts, schema: dict, what: str, token: Optional[CancellationToken]) -> dict:
        try:
            payload = await self.service.generate_structured(parts, schema, token=token)
        except OperationCancelledError:
            raise
        except RemixStudioError as e:
            raise AnalysisFailure(f"{what} analysis failed: {e.message}", e.details)
        except Exception as e:
            raise AnalysisFailure(f"{what} analysis failed: {e}", {"error_type": type(e).__name__})
        if not isinstance(payload, dict):
            raise AnalysisFailure(f"{what} analysis returned {type(payload).__name__}, expected an object")
        return payload

    async def analyze_image(self, image: ImageElement, token: Optional[CancellationToken] = None) -> ImageAnalysis:
        try:
            parts = [InlineMedia.from_data_url(image.src), StudioPromptLibrary.ANALYZE_IMAGE]
            return ImageAnalysis.from_dict(await self._structured(parts, IMAGE_ANALYSIS_SCHEMA, "Image", token))
        except RemixStudioError as e:
            if isinstance(e, OperationCancelledError):
                raise
            logger.warning(f"Error analyzing image {image.id}: {e}")
            return ImageAnalysis()

    async def analyze_product_image(
        self, image: ImageElement, token: Optional[CancellationToken] = None
    ) -> ProductAnalysis:
        try:
            parts = [InlineMedia.from_data_url(image.src), StudioPromptLibrary.ANALYZE_PRODUCT]
            return ProductAnalysis.from_dict(await self._structured(parts, PRODUCT_ANALYSIS_SCHEMA, "Product", token))
        except RemixStudioError as e:
            if isinstance(e, OperationCancelledError):
                raise
            logger.warning(f"Error analyzing product image {image.id}: {e}")
            return ProductAnalysis()

    async def analyze_text(self, text: str, token: Optional[CancellationToken] = None) -> TextAnalysis:
        try:
            prompt = StudioPromptLibrary.render(StudioPromptLibrary.ANALYZE_TEXT, text=text)
            return TextAnalysis.from_dict(await self._structured([prompt], TEXT_ANALYSIS_SCHEMA, "Text", token))
        except RemixStudioError as e:
            if isinstance(e, OperationCancelledError):
                raise
            logger.warning(f"Error analyzing text: {e}")
            return TextAnalysis()

    async def analyze_element(
        self,
        element: CanvasElement,
        product: bool = False,
        token: Optional[CancellationToken] = None,
    ) -> CanvasElement:
        """Copy of ``element`` carrying its analysis; other variants pass through."""
        if isinstance(element, ImageElement):
            if product:
                analysis = await self.analyze_product_image(element, token)
            else:
                analysis = await self.analyze_image(element, token)
            return replace(element, analysis=analysis)
        if isinstance(element, TextElement):
            return replace(element, analysis=await self.analyze_text(element.text, token))
        return element

    async def enrich_board(self, board: Board, token: Optional[CancellationToken] = None) -> Board:
        """Analyze every top-level element concurrently and return the enriched board."""
        product = board.type is BoardType.PRODUCT
        elements = await asyncio.gather(
            *(self.analyze_element(el, product, token) for el in board.elements)
        )
        logger.info(f"Analyzed {len(elements)} element(s) on board {board.id}")
        return board.with_elements(list(elements))
