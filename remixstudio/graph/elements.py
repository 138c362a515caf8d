"""
Remix Studio Canvas Elements

Closed sum type for everything that can sit on a board: images, text, groups
(which own further elements) and videos. The ``type`` discriminant is explicit
and required in the serialized form.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, NoReturn, Optional, Union

from remixstudio.core.constants import ElementType, VideoStatus
from remixstudio.core.exceptions import GraphError


# =============================================================================
# ANALYSIS METADATA
# =============================================================================

@dataclass
class ImageAnalysis:
    """Style-oriented analysis of an image."""
    style: Optional[str] = None
    mood: Optional[str] = None
    color_palette: Optional[List[str]] = None
    typography: Optional[str] = None
    composition: Optional[str] = None
    objects: Optional[List[str]] = None

    def has_style_fields(self) -> bool:
        return any(v is not None for v in (self.style, self.mood, self.color_palette, self.typography))

    def to_dict(self) -> dict:
        return _compact({
            'style': self.style,
            'mood': self.mood,
            'colorPalette': self.color_palette,
            'typography': self.typography,
            'composition': self.composition,
            'objects': self.objects,
        })

    @classmethod
    def from_dict(cls, data: dict) -> 'ImageAnalysis':
        return cls(
            style=data.get('style'),
            mood=data.get('mood'),
            color_palette=data.get('colorPalette'),
            typography=data.get('typography'),
            composition=data.get('composition'),
            objects=data.get('objects'),
        )


@dataclass
class ProductAnalysis:
    """Product-oriented analysis of an image."""
    product_name: Optional[str] = None
    product_type: Optional[str] = None
    key_features: Optional[List[str]] = None

    def to_dict(self) -> dict:
        return _compact({
            'productName': self.product_name,
            'productType': self.product_type,
            'keyFeatures': self.key_features,
        })

    @classmethod
    def from_dict(cls, data: dict) -> 'ProductAnalysis':
        return cls(
            product_name=data.get('productName'),
            product_type=data.get('productType'),
            key_features=data.get('keyFeatures'),
        )


@dataclass
class TextAnalysis:
    """Analysis of a text element."""
    sentiment: Optional[str] = None
    keywords: Optional[List[str]] = None
    style: Optional[str] = None

    def to_dict(self) -> dict:
        return _compact({
            'sentiment': self.sentiment,
            'keywords': self.keywords,
            'style': self.style,
        })

    @classmethod
    def from_dict(cls, data: dict) -> 'TextAnalysis':
        return cls(
            sentiment=data.get('sentiment'),
            keywords=data.get('keywords'),
            style=data.get('style'),
        )


PRODUCT_ANALYSIS_KEYS = ('productName', 'productType', 'keyFeatures')


def image_analysis_from_dict(data: Optional[dict]) -> Optional[Union[ImageAnalysis, ProductAnalysis]]:
    """Pick the analysis variant from the keys present."""
    if data is None:
        return None
    if any(key in data for key in PRODUCT_ANALYSIS_KEYS):
        return ProductAnalysis.from_dict(data)
    return ImageAnalysis.from_dict(data)


def _compact(data: dict) -> dict:
    return {k: v for k, v in data.items() if v is not None}


# =============================================================================
# ELEMENTS
# =============================================================================

@dataclass
class Element:
    """Fields shared by every element variant."""
    element_type: ClassVar[ElementType]

    id: str
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    rotation: float = 0.0
    label: Optional[str] = None

    @property
    def type(self) -> ElementType:
        return self.element_type

    def _base_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'type': self.element_type.value,
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'rotation': self.rotation,
        }
        if self.label is not None:
            data['label'] = self.label
        return data

    def to_dict(self) -> dict:
        raise NotImplementedError


@dataclass
class ImageElement(Element):
    element_type: ClassVar[ElementType] = ElementType.IMAGE

    src: str = ""
    height: float = 0.0
    generation_prompt: Optional[str] = None
    analysis: Optional[Union[ImageAnalysis, ProductAnalysis]] = None
    original_src: Optional[str] = None

    def to_dict(self) -> dict:
        data = self._base_dict()
        data['src'] = self.src
        data['height'] = self.height
        if self.generation_prompt is not None:
            data['generationPrompt'] = self.generation_prompt
        if self.analysis is not None:
            data['analysis'] = self.analysis.to_dict()
        if self.original_src is not None:
            data['originalSrc'] = self.original_src
        return data


@dataclass
class TextElement(Element):
    element_type: ClassVar[ElementType] = ElementType.TEXT

    text: str = ""
    font_size: float = 24.0
    font_family: str = "Inter"
    fill: str = "#0f172a"
    analysis: Optional[TextAnalysis] = None

    def to_dict(self) -> dict:
        data = self._base_dict()
        data.update({
            'text': self.text,
            'fontSize': self.font_size,
            'fontFamily': self.font_family,
            'fill': self.fill,
        })
        if self.analysis is not None:
            data['analysis'] = self.analysis.to_dict()
        return data


@dataclass
class GroupElement(Element):
    """Exclusive owner of an ordered list of child elements."""
    element_type: ClassVar[ElementType] = ElementType.GROUP

    children: List[Element] = field(default_factory=list)
    height: float = 0.0

    def to_dict(self) -> dict:
        data = self._base_dict()
        data['children'] = [child.to_dict() for child in self.children]
        data['height'] = self.height
        return data


@dataclass
class VideoElement(Element):
    element_type: ClassVar[ElementType] = ElementType.VIDEO

    src: Optional[str] = None
    poster: Optional[str] = None
    height: float = 0.0
    generation_prompt: str = ""
    status: VideoStatus = VideoStatus.PENDING
    status_message: Optional[str] = None

    def to_dict(self) -> dict:
        data = self._base_dict()
        data.update({
            'height': self.height,
            'generationPrompt': self.generation_prompt,
            'status': self.status.value,
        })
        if self.src is not None:
            data['src'] = self.src
        if self.poster is not None:
            data['poster'] = self.poster
        if self.status_message is not None:
            data['statusMessage'] = self.status_message
        return data


CanvasElement = Union[ImageElement, TextElement, GroupElement, VideoElement]


def element_from_dict(data: dict) -> CanvasElement:
    """Deserialize one element; the ``type`` key is mandatory."""
    if 'type' not in data:
        raise GraphError("Element is missing its 'type' discriminant", {"element": data.get('id')})
    try:
        element_type = ElementType(data['type'])
    except ValueError:
        raise GraphError(f"Unknown element type: {data['type']!r}", {"element": data.get('id')})

    base = dict(
        id=data['id'],
        x=data.get('x', 0.0),
        y=data.get('y', 0.0),
        width=data.get('width', 0.0),
        rotation=data.get('rotation', 0.0),
        label=data.get('label'),
    )

    if element_type is ElementType.IMAGE:
        return ImageElement(
            **base,
            src=data.get('src', ""),
            height=data.get('height', 0.0),
            generation_prompt=data.get('generationPrompt'),
            analysis=image_analysis_from_dict(data.get('analysis')),
            original_src=data.get('originalSrc'),
        )
    if element_type is ElementType.TEXT:
        analysis = data.get('analysis')
        return TextElement(
            **base,
            text=data.get('text', ""),
            font_size=data.get('fontSize', 24.0),
            font_family=data.get('fontFamily', "Inter"),
            fill=data.get('fill', "#0f172a"),
            analysis=TextAnalysis.from_dict(analysis) if analysis is not None else None,
        )
    if element_type is ElementType.GROUP:
        return GroupElement(
            **base,
            children=[element_from_dict(child) for child in data.get('children', [])],
            height=data.get('height', 0.0),
        )
    if element_type is ElementType.VIDEO:
        return VideoElement(
            **base,
            src=data.get('src'),
            poster=data.get('poster'),
            height=data.get('height', 0.0),
            generation_prompt=data.get('generationPrompt', ""),
            status=VideoStatus(data.get('status', VideoStatus.PENDING.value)),
            status_message=data.get('statusMessage'),
        )
    raise GraphError(f"Unhandled element type: {element_type}")


def unhandled_element(element: Element) -> NoReturn:
    """Raise for an element variant a match site does not cover."""
    raise TypeError(f"Unhandled element variant: {type(element).__name__}")
