"""
Remix Studio Pipelines Module

Generation pipelines built on the workspace graph and the model service.

Main Pipeline:
- RemixPipeline: resolve -> summarize -> plan -> execute -> replace board elements

Support Pipelines:
- TaskExecutor: concurrent, order-preserving execution of planned briefs
- AssetAnalyzer: best-effort element analysis
- BoardGenerator: image/text boards and brand kits
- VideoGenerator: poll-based video generation
"""

# Main Pipeline
from .remix_pipeline import RemixPipeline, RemixResult, build_remix_elements

# Execution
from .task_executor import TaskExecutor, TaskOutcome, extract_mentions, select_images

# Progress and locking
from .progress import OperationPoller, OperationState, ProgressReporter
from .board_locks import BoardLockRegistry

# Support pipelines
from .analysis import AssetAnalyzer
from .board_generation import (
    BoardGenerator,
    BrandIdentity,
    build_brand_board,
    build_brand_board_from_upload,
    build_empty_board,
    build_image_board,
    build_text_board,
)
from .video_pipeline import VideoGenerator, VideoResult, build_video_element

__all__ = [
    # Main Pipeline
    'RemixPipeline',
    'RemixResult',
    'build_remix_elements',
    # Execution
    'TaskExecutor',
    'TaskOutcome',
    'extract_mentions',
    'select_images',
    # Progress and locking
    'OperationPoller',
    'OperationState',
    'ProgressReporter',
    'BoardLockRegistry',
    # Support pipelines
    'AssetAnalyzer',
    'BoardGenerator',
    'BrandIdentity',
    'build_brand_board',
    'build_brand_board_from_upload',
    'build_empty_board',
    'build_image_board',
    'build_text_board',
    'VideoGenerator',
    'VideoResult',
    'build_video_element',
]
