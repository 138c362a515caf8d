"""
Remix Studio Context Module

Plain-text summaries of remix contexts for prompt building.
"""

from .summarizer import WhiteboardSummary, describe_analysis, element_label, summarize

__all__ = [
    'WhiteboardSummary',
    'summarize',
    'describe_analysis',
    'element_label',
]
