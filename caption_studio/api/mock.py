"""Canned transcription provider for demos and offline testing.

WHY: Developers and CI need the full upload → captions → export flow
without an API key or network access (USE_MOCK_CAPTIONS=true).

HOW: Returns the placeholder captions as a segment-level response,
flagged mock=True so clients can show that the captions are not real.
"""

from __future__ import annotations

from caption_studio.api.base import TranscriptionProvider
from caption_studio.api.models import ProviderResponse
from caption_studio.core.ir import placeholder_cues


class MockProvider(TranscriptionProvider):
    """Provider that ignores the audio and returns fixed segments."""

    name = "mock"
    requires_api_key = False

    async def _transcribe(
        self,
        audio: bytes,
        filename: str,
        content_type: str,
    ) -> ProviderResponse:
        return ProviderResponse(
            segments=[
                {"start": cue.start, "end": cue.end, "text": cue.text}
                for cue in placeholder_cues()
            ],
            text="Mock transcription for testing",
            provider=self.name,
            mock=True,
        )
