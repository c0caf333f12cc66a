"""OpenAI Whisper transcription adapter.

WHY: Whisper returns word-level timestamps in seconds, the best input
for caption segmentation, and handles mixed Hindi/English speech.

HOW: One multipart POST to /audio/transcriptions with
response_format=verbose_json and word timestamp granularity. The JSON
body's ``words`` (or, on older models, only ``segments``) and ``text``
go straight into a ProviderResponse.

RULES:
- Model defaults to whisper-1 (config.WHISPER_MODEL)
- Times are already in seconds
- The video file is sent as-is; no audio extraction
"""

from __future__ import annotations

from typing import Optional

from caption_studio.api.base import TranscriptionProvider
from caption_studio.api.models import ProviderResponse
from caption_studio.config import OPENAI_BASE_URL, WHISPER_MODEL


class WhisperProvider(TranscriptionProvider):
    """Transcribe through the OpenAI audio transcription endpoint."""

    name = "whisper"
    default_base_url = OPENAI_BASE_URL

    def __init__(self, *args, model: Optional[str] = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._model = model or WHISPER_MODEL

    async def _transcribe(
        self,
        audio: bytes,
        filename: str,
        content_type: str,
    ) -> ProviderResponse:
        client = self._ensure_client()
        resp = await client.post(
            "/audio/transcriptions",
            files={"file": (filename, audio, content_type)},
            data={
                "model": self._model,
                "response_format": "verbose_json",
                "timestamp_granularities[]": "word",
            },
        )
        self._check(resp)
        return ProviderResponse.from_dict(resp.json(), time_unit="s", provider=self.name)
