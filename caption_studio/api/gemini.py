"""Google Gemini transcription adapter.

WHY: Gemini accepts video directly and copes well with Hinglish, but it
is a general model: it returns whatever text it generates, not a
transcription schema.

HOW: One generateContent call with the media inlined as base64 and a
prompt asking for JSON sentence segments. The reply text is parsed as
JSON; if the model ignored the format, the reply is kept as untimed
text and the normalizer spreads it over the estimated duration.

RULES:
- The API key travels as the ``key`` query parameter
- A {"segments": [...]} reply becomes a segment-level response (seconds)
- A bare JSON list is treated as the segments list
- Anything else becomes a text-only response
- No candidates in the reply → empty text (EmptyTranscript downstream)
"""

from __future__ import annotations

import base64
import json
from typing import Any, Dict, Optional

from caption_studio.api.base import TranscriptionProvider
from caption_studio.api.models import ProviderResponse
from caption_studio.config import GEMINI_BASE_URL, GEMINI_MODEL

TRANSCRIBE_PROMPT = (
    "Transcribe the speech in this media exactly as spoken, keeping Hindi "
    "and English words in the script they were spoken in. Respond with JSON "
    'of the form {"segments": [{"start": <seconds>, "end": <seconds>, '
    '"text": "<sentence>"}]}.'
)


class GeminiProvider(TranscriptionProvider):
    """Transcribe through the Gemini generateContent endpoint."""

    name = "gemini"
    default_base_url = GEMINI_BASE_URL

    def __init__(self, *args, model: Optional[str] = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._model = model or GEMINI_MODEL

    def _auth_headers(self) -> Dict[str, str]:
        return {}

    async def _transcribe(
        self,
        audio: bytes,
        filename: str,
        content_type: str,
    ) -> ProviderResponse:
        client = self._ensure_client()
        body = {
            "contents": [{
                "parts": [
                    {"text": TRANSCRIBE_PROMPT},
                    {"inline_data": {
                        "mime_type": content_type,
                        "data": base64.b64encode(audio).decode("ascii"),
                    }},
                ],
            }],
            "generationConfig": {"response_mime_type": "application/json"},
        }
        resp = await client.post(
            "/models/{}:generateContent".format(self._model),
            params={"key": self._api_key},
            json=body,
        )
        self._check(resp)
        return parse_reply(_reply_text(resp.json()), provider=self.name)


def _reply_text(data: Dict[str, Any]) -> str:
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(p.get("text", "") for p in parts if isinstance(p, dict))


def parse_reply(reply: str, provider: str = "gemini") -> ProviderResponse:
    """Interpret model output as segments when it is JSON, else as plain text."""
    try:
        payload = json.loads(reply)
    except ValueError:
        return ProviderResponse(text=reply, provider=provider)

    if isinstance(payload, list):
        payload = {"segments": payload}
    if isinstance(payload, dict) and isinstance(payload.get("segments"), list):
        return ProviderResponse(
            segments=payload["segments"],
            text=payload.get("text"),
            provider=provider,
        )
    return ProviderResponse(text=reply, provider=provider)
