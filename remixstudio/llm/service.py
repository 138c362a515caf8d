"""
Remix Studio Generative Model Service

Abstract contract for the external generative model. Pipelines depend on this
interface only; the Gemini REST client is one implementation and tests supply
fakes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Union

from remixstudio.core.cancellation import CancellationToken
from remixstudio.llm.media import InlineMedia

# A request part: literal text or an inline image
Part = Union[str, InlineMedia]


@dataclass(frozen=True)
class OperationHandle:
    """Opaque reference to a long-running operation."""
    name: str


@dataclass
class OperationStatus:
    """One poll result for a long-running operation."""
    done: bool
    error: Optional[str] = None
    result_uri: Optional[str] = None
    raw: Optional[dict] = None

    @property
    def failed(self) -> bool:
        return self.done and self.error is not None


class GenerativeModelService(ABC):
    """Request/response contract of the generative model collaborator."""

    @abstractmethod
    async def generate_structured(
        self,
        parts: Sequence[Part],
        schema: dict,
        model: Optional[str] = None,
        token: Optional[CancellationToken] = None,
    ) -> Any:
        """Single round-trip returning a JSON value that matches ``schema``."""

    @abstractmethod
    async def generate_text(
        self,
        prompt: str,
        temperature: float = 0.7,
        model: Optional[str] = None,
        token: Optional[CancellationToken] = None,
    ) -> str:
        """Plain-text completion."""

    @abstractmethod
    async def generate_images(
        self,
        parts: Sequence[Part],
        token: Optional[CancellationToken] = None,
    ) -> List[InlineMedia]:
        """Multimodal request answered with zero or more inline images."""

    @abstractmethod
    async def generate_imagen(
        self,
        prompt: str,
        token: Optional[CancellationToken] = None,
    ) -> List[InlineMedia]:
        """Text-to-image request (square, PNG)."""

    @abstractmethod
    async def start_video(
        self,
        prompt: str,
        seed_image: Optional[InlineMedia] = None,
        token: Optional[CancellationToken] = None,
    ) -> OperationHandle:
        """Submit a video generation and return its operation handle."""

    @abstractmethod
    async def poll_operation(
        self,
        handle: OperationHandle,
        token: Optional[CancellationToken] = None,
    ) -> OperationStatus:
        """Re-query a long-running operation."""

    @abstractmethod
    async def download(
        self,
        uri: str,
        token: Optional[CancellationToken] = None,
    ) -> InlineMedia:
        """Fetch a result file produced by the service."""

    async def aclose(self) -> None:
        """Release transport resources."""
