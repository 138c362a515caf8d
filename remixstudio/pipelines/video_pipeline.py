"""
Remix Studio Video Pipeline

Slow, poll-based video generation:
1. Submit the prompt (and optional seed image)
2. Poll the operation, emitting reassurance messages
3. Download the video and prepare a poster concurrently
"""

import asyncio
import uuid
from dataclasses import dataclass
from typing import Optional

from remixstudio.core.cancellation import CancellationToken, ensure_token
from remixstudio.core.config import PipelineConfig, get_config
from remixstudio.core.constants import VideoStatus
from remixstudio.core.exceptions import SafetyBlock, VideoGenerationFailure
from remixstudio.core.logging_config import get_logger
from remixstudio.graph.elements import VideoElement
from remixstudio.llm.media import InlineMedia
from remixstudio.llm.service import GenerativeModelService
from remixstudio.pipelines.board_generation import BoardGenerator
from remixstudio.pipelines.progress import OperationPoller, as_reporter

logger = get_logger("pipelines.video")

VIDEO_SAFETY_MESSAGE = "Video generation was blocked for safety reasons. Please try a different prompt."


@dataclass
class VideoResult:
    """Data URLs of a finished video and its poster frame."""
    video_src: str
    poster_src: str


def build_video_element(
    result: VideoResult,
    prompt: str,
    x: float = 0.0,
    y: float = 0.0,
    width: float = 320.0,
    height: float = 180.0,
    label: Optional[str] = None,
) -> VideoElement:
    return VideoElement(
        id=str(uuid.uuid4()),
        x=x,
        y=y,
        width=width,
        height=height,
        label=label,
        src=result.video_src,
        poster=result.poster_src,
        generation_prompt=prompt,
        status=VideoStatus.COMPLETE,
    )


class VideoGenerator:
    """Drives one video generation from prompt to downloadable result."""

    def __init__(self, service: GenerativeModelService, config: Optional[PipelineConfig] = None):
        self.service = service
        self.config = config or get_config().pipeline

    async def _poster(self, prompt: str, seed_image: Optional[str], token: CancellationToken) -> str:
        if seed_image:
            return seed_image
        return await BoardGenerator(self.service, self.config).generate_image(prompt, token)

    async def generate(
        self,
        prompt: str,
        progress=None,
        seed_image: Optional[str] = None,
        token: Optional[CancellationToken] = None,
    ) -> VideoResult:
        """
        Generate a video for ``prompt``.

        Args:
            prompt: Video description
            progress: ProgressReporter or ``callable(message)``
            seed_image: Optional data URL used as the first frame and poster
            token: Cancellation token checked before each request and during polling

        Raises:
            SafetyBlock: If the request was refused on safety grounds
            VideoGenerationFailure: If the operation failed or returned no video
        """
        token = ensure_token(token)
        reporter = as_reporter(progress)
        seed = InlineMedia.from_data_url(seed_image) if seed_image else None
        poller = OperationPoller(self.service, reporter, interval=self.config.poll_interval_seconds)

        try:
            status = await poller.run(
                lambda: self.service.start_video(prompt, seed, token=token),
                "Initiating video generation...",
                "Finalizing video...",
                token=token,
            )
        except SafetyBlock as e:
            raise SafetyBlock(e.message, e.details, user_message=VIDEO_SAFETY_MESSAGE)

        if not status.result_uri:
            raise VideoGenerationFailure("Video generation completed, but no video data was returned.")

        reporter.report("Downloading video and preparing poster...")
        jobs = [
            asyncio.ensure_future(self.service.download(status.result_uri, token=token)),
            asyncio.ensure_future(self._poster(prompt, seed_image, token)),
        ]
        try:
            video, poster_src = await asyncio.gather(*jobs)
        except BaseException:
            for job in jobs:
                job.cancel()
            await asyncio.gather(*jobs, return_exceptions=True)
            raise
        logger.info(f"Video ready ({video.mime_type}, {len(video.data)} base64 chars)")
        return VideoResult(video_src=video.data_url, poster_src=poster_src)
