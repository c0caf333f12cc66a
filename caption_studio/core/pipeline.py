"""Caption generation pipeline: provider → normalizer → segmenter.

WHY: The CLI and the HTTP server both turn uploaded media into cues the
same way. Keeping that sequence in one place means the placeholder
fallback and the duration estimate behave identically everywhere.

HOW: CaptionPipeline is constructed with a TranscriptionProvider (built
once per process and passed in, never a module global). generate()
opens the provider, transcribes, then normalizes and segments the
response. An EmptyTranscript is logged and replaced by placeholder cues.

RULES:
- Untimed text responses are spread over duration_s, estimated from the
  upload size when the caller does not know it
- EmptyTranscript never escapes generate(); result.placeholder is set
- MalformedProviderResponse, ProviderUnavailable and ProviderAPIError
  propagate to the caller
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from caption_studio.api.base import TranscriptionProvider
from caption_studio.config import MAX_WORDS_PER_CUE
from caption_studio.core.errors import EmptyTranscript
from caption_studio.core.ir import Cue, placeholder_cues
from caption_studio.core.normalizer import estimate_duration_from_size
from caption_studio.core.segmenter import segment_response

logger = logging.getLogger(__name__)


@dataclass
class CaptionResult:
    """Cues produced for one media file, with where they came from."""

    cues: List[Cue] = field(default_factory=list)
    provider: str = ""
    transcript_text: Optional[str] = None
    placeholder: bool = False
    mock: bool = False


class CaptionPipeline:
    """Generate caption cues for uploaded media with a given provider."""

    def __init__(
        self,
        provider: TranscriptionProvider,
        max_words: int = MAX_WORDS_PER_CUE,
    ) -> None:
        self._provider = provider
        self._max_words = max_words

    @property
    def provider_name(self) -> str:
        return self._provider.name

    async def generate(
        self,
        media: bytes,
        filename: str = "upload.mp4",
        content_type: str = "application/octet-stream",
        duration_s: Optional[float] = None,
    ) -> CaptionResult:
        """Transcribe media and segment the transcript into cues.

        Args:
            media: Raw uploaded file content.
            filename: Original filename, forwarded to the provider.
            content_type: MIME type of the upload.
            duration_s: Media duration if known; used for untimed text.

        Returns:
            CaptionResult with cues (placeholder cues when the transcript
            was empty).
        """
        async with self._provider:
            response = await self._provider.transcribe(media, filename, content_type)

        if duration_s is None:
            duration_s = estimate_duration_from_size(len(media))

        try:
            cues = segment_response(response, duration_s=duration_s, max_words=self._max_words)
        except EmptyTranscript:
            logger.warning("Empty transcript from %s for %s; using placeholder captions",
                           response.provider, filename)
            return CaptionResult(
                cues=placeholder_cues(),
                provider=response.provider,
                transcript_text=response.text,
                placeholder=True,
                mock=response.mock,
            )

        logger.info("Generated %d cues for %s via %s", len(cues), filename, response.provider)
        return CaptionResult(
            cues=cues,
            provider=response.provider,
            transcript_text=response.text,
            mock=response.mock,
        )
