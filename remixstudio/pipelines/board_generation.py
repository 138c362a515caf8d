"""
Remix Studio Board Generation

Generation helpers for content boards and brand kits, plus the board builders
that lay generated assets out on a board.

Board builders are pure: they return new Board objects sized to fit their
elements. Adding them to a workspace is the caller's job.
"""

import asyncio
import re
import uuid
from dataclasses import dataclass
from typing import List, Optional

from remixstudio.core.cancellation import CancellationToken, ensure_token
from remixstudio.core.config import PipelineConfig, get_config
from remixstudio.core.constants import BoardType, DEFAULT_BOARD_WIDTH
from remixstudio.core.exceptions import AssemblyFailure, MalformedResponseError
from remixstudio.core.logging_config import get_logger
from remixstudio.director.prompts import StudioPromptLibrary
from remixstudio.graph.board import Board
from remixstudio.graph.elements import CanvasElement, ImageElement, TextElement
from remixstudio.graph.layout import grid_position, next_board_origin, with_responsive_board_size
from remixstudio.llm.service import GenerativeModelService
from remixstudio.pipelines.progress import ProgressReporter

logger = get_logger("pipelines.board_generation")

SOCIAL_MEDIA_KEYWORDS = ('social media', 'instagram post', 'facebook ad', 'creative', 'post', 'ad')

BOARD_ASSET_COUNT = 4
PALETTE_SIZE = 5

DEFAULT_BOARD_TITLES = {
    BoardType.REMIX: "Remix Stage",
}


def wrap_social_prompt(prompt: str) -> str:
    """Ask for one finished post when the prompt reads like a social creative."""
    lowered = prompt.lower()
    if any(keyword in lowered for keyword in SOCIAL_MEDIA_KEYWORDS):
        return StudioPromptLibrary.render(StudioPromptLibrary.SOCIAL_MEDIA_POST, prompt=prompt)
    return prompt


def label_prefix(title: str) -> str:
    return re.sub(r'[^a-zA-Z0-9]', '', title)


def _new_id() -> str:
    return str(uuid.uuid4())


def _new_board(board_type: BoardType, title: str, board_count: int, elements: List[CanvasElement],
               colors: Optional[List[str]] = None) -> Board:
    x, y = next_board_origin(board_count, DEFAULT_BOARD_WIDTH)
    return with_responsive_board_size(Board(
        id=_new_id(),
        type=board_type,
        title=title,
        x=x,
        y=y,
        elements=elements,
        colors=colors,
    ))


# =============================================================================
# BOARD BUILDERS
# =============================================================================

def build_empty_board(board_type: BoardType, title: Optional[str], board_count: int) -> Board:
    title = title or DEFAULT_BOARD_TITLES.get(board_type, f"{board_type.value.title()} Board")
    return _new_board(board_type, title, board_count, [])


def build_image_board(
    title: str,
    image_srcs: List[str],
    board_count: int,
    prompt: Optional[str] = None,
    tile_size: int = 256,
    padding: int = 32,
) -> Board:
    prefix = label_prefix(title)
    elements: List[CanvasElement] = []
    for index, src in enumerate(image_srcs):
        x, y = grid_position(index, tile_size, padding)
        elements.append(ImageElement(
            id=_new_id(), x=x, y=y, width=tile_size, height=tile_size,
            src=src, generation_prompt=prompt, label=f"{prefix}{index + 1}",
        ))
    return _new_board(BoardType.IMAGE, title, board_count, elements)


def build_text_board(
    title: str,
    texts: List[str],
    board_count: int,
    tile_size: int = 256,
    padding: int = 32,
) -> Board:
    prefix = label_prefix(title)
    elements: List[CanvasElement] = []
    for index, text in enumerate(texts):
        x, y = grid_position(index, tile_size, padding)
        elements.append(TextElement(
            id=_new_id(), x=x, y=y, width=tile_size,
            text=text, font_size=24, label=f"{prefix}{index + 1}",
        ))
    return _new_board(BoardType.TEXT, title, board_count, elements)


@dataclass
class BrandIdentity:
    """Generated brand kit contents."""
    logo_src: str
    colors: List[str]
    texts: List[str]


def build_brand_board(concept: str, identity: BrandIdentity, board_count: int) -> Board:
    logo = ImageElement(
        id=_new_id(), x=20, y=20, width=128, height=128,
        src=identity.logo_src, label="Logo",
    )
    copies: List[CanvasElement] = [
        TextElement(
            id=_new_id(), x=170, y=20 + index * 45, width=360,
            text=text, font_size=20, label=f"Copy{index + 1}",
        )
        for index, text in enumerate(identity.texts)
    ]
    return _new_board(BoardType.BRAND, f"{concept} - Brand Kit", board_count, [logo, *copies], identity.colors)


def build_brand_board_from_upload(
    brand_name: str,
    board_count: int,
    logo_src: Optional[str] = None,
    text_style: Optional[str] = None,
    colors: Optional[List[str]] = None,
) -> Board:
    """Brand board from user-supplied assets; no model calls."""
    elements: List[CanvasElement] = []
    if logo_src:
        elements.append(ImageElement(
            id=_new_id(), x=20, y=20, width=128, height=128, src=logo_src, label="Logo",
        ))
    if text_style:
        elements.append(TextElement(
            id=_new_id(), x=170, y=20, width=360, text=text_style,
            font_size=18, fill="#ffffff", label="BrandCopy",
        ))
    return _new_board(BoardType.BRAND, f"{brand_name} - Brand Kit", board_count, elements, colors)


# =============================================================================
# GENERATION
# =============================================================================

class BoardGenerator:
    """Model-backed generation of images, copy, palettes and whole boards."""

    def __init__(
        self,
        service: GenerativeModelService,
        config: Optional[PipelineConfig] = None,
        reporter: Optional[ProgressReporter] = None,
    ):
        self.service = service
        self.config = config or get_config().pipeline
        self.reporter = reporter or ProgressReporter()

    async def generate_image(self, prompt: str, token: Optional[CancellationToken] = None) -> str:
        """
        One square image as a data URL.

        Raises:
            AssemblyFailure: If the model returns no image
        """
        images = await self.service.generate_imagen(wrap_social_prompt(prompt), token=token)
        if not images:
            raise AssemblyFailure(
                "Image model returned no images",
                {"prompt": prompt[:80]},
                user_message=(
                    "The AI returned no images. This can happen due to safety filters. "
                    "Please try rephrasing your prompt."
                ),
            )
        return images[0].data_url

    async def _structured_list(self, prompt: str, key: str, token: Optional[CancellationToken]) -> List[str]:
        schema = {
            "type": "OBJECT",
            "properties": {key: {"type": "ARRAY", "items": {"type": "STRING"}}},
            "required": [key],
        }
        payload = await self.service.generate_structured([prompt], schema, token=token)
        values = payload.get(key) if isinstance(payload, dict) else None
        if not isinstance(values, list):
            raise MalformedResponseError(f"Response is missing the '{key}' array")
        return [str(value) for value in values]

    async def generate_text_variations(
        self,
        prompt: str,
        style: Optional[str] = None,
        token: Optional[CancellationToken] = None,
    ) -> List[str]:
        full_prompt = StudioPromptLibrary.render(
            StudioPromptLibrary.TEXT_VARIATIONS,
            prompt=prompt,
            style_clause=f' and the desired style "{style}"' if style else "",
            count=BOARD_ASSET_COUNT,
        )
        return await self._structured_list(full_prompt, "variations", token)

    async def generate_color_palette(self, prompt: str, token: Optional[CancellationToken] = None) -> List[str]:
        full_prompt = StudioPromptLibrary.render(
            StudioPromptLibrary.COLOR_PALETTE, prompt=prompt, count=PALETTE_SIZE
        )
        return await self._structured_list(full_prompt, "palette", token)

    async def generate_brand_identity(
        self,
        concept: str,
        palette_prompt: str,
        text_style: str,
        token: Optional[CancellationToken] = None,
    ) -> BrandIdentity:
        """Logo, palette and copy, generated concurrently."""
        logo_prompt = StudioPromptLibrary.render(StudioPromptLibrary.BRAND_LOGO, concept=concept)
        logo_src, colors, texts = await asyncio.gather(
            self.generate_image(logo_prompt, token),
            self.generate_color_palette(palette_prompt, token),
            self.generate_text_variations(concept, text_style, token),
        )
        return BrandIdentity(logo_src=logo_src, colors=colors, texts=texts)

    async def generate_brand_board(
        self,
        concept: str,
        palette_prompt: str,
        text_style: str,
        board_count: int,
        token: Optional[CancellationToken] = None,
    ) -> Board:
        self.reporter.report("Generating brand identity...")
        identity = await self.generate_brand_identity(concept, palette_prompt, text_style, token)
        return build_brand_board(concept, identity, board_count)

    async def generate_image_board(
        self,
        prompt: str,
        title: str,
        board_count: int,
        token: Optional[CancellationToken] = None,
    ) -> Board:
        """Four images generated one after another."""
        token = ensure_token(token)
        srcs = []
        for index in range(BOARD_ASSET_COUNT):
            token.raise_if_cancelled()
            self.reporter.report(f"Generating image {index + 1} of {BOARD_ASSET_COUNT}...")
            srcs.append(await self.generate_image(prompt, token))
        return build_image_board(
            title, srcs, board_count, prompt,
            tile_size=self.config.tile_size, padding=self.config.tile_padding,
        )

    async def generate_text_board(
        self,
        prompt: str,
        title: str,
        board_count: int,
        token: Optional[CancellationToken] = None,
    ) -> Board:
        texts = await self.generate_text_variations(prompt, token=token)
        return build_text_board(
            title, texts, board_count,
            tile_size=self.config.tile_size, padding=self.config.tile_padding,
        )
