"""
Remix Studio Graph Module

Workspace graph of boards, elements and connectors, plus the connector
resolution that turns the graph into per-request asset sets.
"""

from .elements import (
    CanvasElement,
    GroupElement,
    ImageAnalysis,
    ImageElement,
    ProductAnalysis,
    TextAnalysis,
    TextElement,
    VideoElement,
    element_from_dict,
)
from .board import Board, Connector
from .workspace_graph import WorkspaceGraph
from .resolver import BrandInfo, RemixContext, mention_suggestions, resolve_remix_context

__all__ = [
    # Elements
    'CanvasElement',
    'ImageElement',
    'TextElement',
    'GroupElement',
    'VideoElement',
    'ImageAnalysis',
    'ProductAnalysis',
    'TextAnalysis',
    'element_from_dict',
    # Graph
    'Board',
    'Connector',
    'WorkspaceGraph',
    # Resolution
    'BrandInfo',
    'RemixContext',
    'resolve_remix_context',
    'mention_suggestions',
]
