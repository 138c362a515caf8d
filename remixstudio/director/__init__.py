"""
Remix Studio Director Module

Planning phase of a remix (Creative Director), the prompt library and the
Genie brief assistant.
"""

from .prompts import StudioPromptLibrary
from .creative_director import (
    PLAN_SCHEMA,
    CreativeDirector,
    OrchestrationPlan,
    OrchestrationTask,
    parse_plan,
)
from .genie import GenieAssistant, GenieMessage

__all__ = [
    'StudioPromptLibrary',
    'PLAN_SCHEMA',
    'CreativeDirector',
    'OrchestrationPlan',
    'OrchestrationTask',
    'parse_plan',
    'GenieAssistant',
    'GenieMessage',
]
