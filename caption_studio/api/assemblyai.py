"""AssemblyAI transcription adapter.

WHY: AssemblyAI is an alternative hosted provider with word timestamps,
used when OpenAI is unreachable from the deployment network.

HOW: Three steps, all over the same authenticated client:
upload bytes → create transcript job → poll until complete. Polling uses
exponential backoff: 1s initial, 1.5x factor, 10s max, 10 min timeout.

RULES:
- Auth header is the raw key ("authorization: <key>"), not Bearer
- Word times are milliseconds; the response declares time_unit="ms"
- status "error" raises ProviderAPIError with the job's error text
- Exceeding the poll timeout raises TranscriptionTimeoutError
"""

from __future__ import annotations

import asyncio
import time
from typing import Dict

from caption_studio.api.base import TranscriptionProvider
from caption_studio.api.models import ProviderResponse
from caption_studio.config import ASSEMBLYAI_BASE_URL
from caption_studio.core.errors import ProviderAPIError

_POLL_INITIAL_INTERVAL_S = 1.0
_POLL_BACKOFF_FACTOR = 1.5
_POLL_MAX_INTERVAL_S = 10.0
_POLL_TIMEOUT_S = 10 * 60


class TranscriptionTimeoutError(TimeoutError):
    """Raised when an AssemblyAI job does not finish within the poll timeout."""


class AssemblyAIProvider(TranscriptionProvider):
    """Transcribe through AssemblyAI's upload/transcript/poll workflow."""

    name = "assemblyai"
    default_base_url = ASSEMBLYAI_BASE_URL

    def __init__(self, *args, poll_interval_s: float = _POLL_INITIAL_INTERVAL_S, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._poll_interval_s = poll_interval_s

    def _auth_headers(self) -> Dict[str, str]:
        return {"authorization": str(self._api_key)}

    async def _transcribe(
        self,
        audio: bytes,
        filename: str,
        content_type: str,
    ) -> ProviderResponse:
        client = self._ensure_client()

        resp = await client.post("/upload", content=audio)
        self._check(resp)
        upload_url = resp.json()["upload_url"]

        resp = await client.post("/transcript", json={"audio_url": upload_url})
        self._check(resp)
        transcript_id = resp.json()["id"]

        data = await self._poll_until_complete(transcript_id)
        return ProviderResponse.from_dict(data, time_unit="ms", provider=self.name)

    async def _poll_until_complete(self, transcript_id: str) -> dict:
        client = self._ensure_client()
        interval = self._poll_interval_s
        start_time = time.monotonic()

        while True:
            elapsed = time.monotonic() - start_time
            if elapsed > _POLL_TIMEOUT_S:
                raise TranscriptionTimeoutError(
                    "Transcript {} timed out after {:.0f}s (limit: {}s)".format(
                        transcript_id, elapsed, _POLL_TIMEOUT_S
                    )
                )

            resp = await client.get("/transcript/{}".format(transcript_id))
            self._check(resp)
            data = resp.json()

            status = data.get("status")
            if status == "completed":
                return data
            if status == "error":
                raise ProviderAPIError(self.name, 422, data.get("error") or "transcription failed")

            await asyncio.sleep(interval)
            interval = min(interval * _POLL_BACKOFF_FACTOR, _POLL_MAX_INTERVAL_S)
