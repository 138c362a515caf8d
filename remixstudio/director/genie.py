"""
Remix Studio Genie

Conversational brief assistant. Genie sees the same whiteboard summary the
Creative Director does and helps the user converge on one final prompt.

History handling:
- The last 12 turns are sent verbatim
- Earlier turns are condensed into a short model-written summary
- If the prompt exceeds the token budget, only the summary and the last
  4 turns are sent, then only the last 2
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from remixstudio.context.summarizer import summarize
from remixstudio.core.cancellation import CancellationToken
from remixstudio.core.exceptions import GenerationError, ModelServiceError
from remixstudio.core.logging_config import get_logger
from remixstudio.director.prompts import StudioPromptLibrary
from remixstudio.graph.board import Board
from remixstudio.graph.resolver import BrandInfo
from remixstudio.llm.service import GenerativeModelService

logger = get_logger("director.genie")

MAX_PROMPT_TOKENS = 6000
HISTORY_WINDOW_SIZE = 12
HISTORY_SUMMARY_MAX_CHARS = 4000


@dataclass
class GenieMessage:
    """One chat turn; ``role`` is 'user' or 'genie'."""
    role: str
    text: str

    @classmethod
    def from_dict(cls, data: dict) -> 'GenieMessage':
        return cls(role=data.get('role', 'user'), text=data.get('text', ""))


def approximate_token_count(text: str) -> int:
    """Roughly four characters per token."""
    return math.ceil(len(text) / 4)


def format_history(history: Sequence[GenieMessage]) -> str:
    if not history:
        return "No prior conversation."
    return "\n".join(
        f"{'Genie' if entry.role == 'genie' else 'User'}: {entry.text}" for entry in history
    )


def build_system_prompt(goal: str, boards_text: str, brand_text: str) -> str:
    return StudioPromptLibrary.render(
        StudioPromptLibrary.GENIE_SYSTEM,
        goal=goal or "Goal not provided yet.",
        boards_text=boards_text or "No content boards provided.",
        brand_section=f"\n{brand_text}" if brand_text else "",
    )


def build_turn_prompt(system_prompt: str, history_text: str, message: str) -> str:
    return StudioPromptLibrary.render(
        StudioPromptLibrary.GENIE_TURN,
        system_prompt=system_prompt,
        history_text=history_text,
        message=message,
    )


class GenieAssistant:
    """Answers one Genie chat turn."""

    def __init__(self, service: GenerativeModelService):
        self.service = service

    async def summarize_history(
        self,
        history: Sequence[GenieMessage],
        token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        """Condense earlier turns; returns None on empty input or any model failure."""
        if not history:
            return None
        text = format_history(history)[-HISTORY_SUMMARY_MAX_CHARS:]
        prompt = StudioPromptLibrary.render(StudioPromptLibrary.GENIE_HISTORY_SUMMARY, history_text=text)
        try:
            summary = await self.service.generate_text(prompt, temperature=0.3, token=token)
        except GenerationError as e:
            logger.warning(f"Failed to summarize Genie history; using the raw window: {e}")
            return None
        return summary.strip() or None

    def fit_history(
        self,
        system_prompt: str,
        message: str,
        recent: List[GenieMessage],
        summary: Optional[str],
    ) -> str:
        """Full prompt for this turn, trimmed to the token budget."""
        sections = []
        if summary:
            sections.append(f"Summary of earlier conversation:\n{summary}")
        sections.append(format_history(recent))
        prompt = build_turn_prompt(system_prompt, "\n\n".join(sections), message)
        if approximate_token_count(prompt) <= MAX_PROMPT_TOKENS:
            return prompt

        minimal = recent[-4:]
        sections = []
        if summary:
            sections.append(f"Conversation summary:\n{summary}")
        sections.append(f"Most recent exchanges:\n{format_history(minimal)}")
        prompt = build_turn_prompt(system_prompt, "\n\n".join(sections), message)
        if approximate_token_count(prompt) <= MAX_PROMPT_TOKENS:
            logger.debug("Genie prompt trimmed to summary and last 4 turns")
            return prompt

        logger.debug("Genie prompt trimmed to last 2 turns")
        return build_turn_prompt(system_prompt, format_history(minimal[-2:]), message)

    async def reply(
        self,
        goal: str,
        boards: Sequence[Board],
        brand_info: Optional[BrandInfo],
        message: str,
        history: Sequence[GenieMessage] = (),
        token: Optional[CancellationToken] = None,
    ) -> str:
        """
        Produce Genie's next message.

        Raises:
            ValueError: If ``message`` is blank
            ModelServiceError: If the model returns an empty reply
        """
        message = (message or "").strip()
        if not message:
            raise ValueError("Message is required.")

        summary = summarize(boards, brand_info)
        system_prompt = build_system_prompt((goal or "").strip(), summary.boards_text, summary.brand_text)

        history = list(history)
        recent = history[-HISTORY_WINDOW_SIZE:]
        earlier = history[:len(history) - len(recent)]
        history_summary = await self.summarize_history(earlier, token=token)

        prompt = self.fit_history(system_prompt, message, recent, history_summary)
        reply = (await self.service.generate_text(prompt, temperature=0.7, token=token)).strip()
        if not reply:
            raise ModelServiceError("Genie returned an empty response.")
        return reply
