"""Abstract transcription provider — one interface, several adapters.

WHY: Whisper, AssemblyAI, Gemini and the mock provider differ only in
how they are called and what their JSON looks like. The pipeline should
hold one explicitly constructed provider and never branch on which one
it is.

HOW: TranscriptionProvider wraps an httpx.AsyncClient and is used as an
async context manager. Subclasses implement ``_transcribe()``; the public
``transcribe()`` runs it through retry_with_backoff so every adapter
shares the same retry policy.

RULES:
- Use as: async with provider: response = await provider.transcribe(...)
- api_key defaults to the provider's environment variable from config
- Non-2xx responses raise ProviderAPIError via _check()
- transport is for tests (httpx.MockTransport); production passes None
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Optional

import httpx

from caption_studio.api.models import ProviderResponse
from caption_studio.api.retry import retry_with_backoff
from caption_studio.config import (
    API_KEY_ENV,
    PROVIDER_MAX_RETRIES,
    PROVIDER_RETRY_BASE_DELAY_S,
    PROVIDER_TIMEOUT_S,
    load_api_key,
)
from caption_studio.core.errors import ProviderAPIError


class TranscriptionProvider(ABC):
    """Async client for one speech-to-text service.

    To add a provider:
    1. Subclass TranscriptionProvider in api/
    2. Set ``name`` and ``default_base_url``
    3. Implement _transcribe() returning a ProviderResponse
    4. Register it in PROVIDERS in api/__init__.py
    """

    name = "base"
    default_base_url = ""
    requires_api_key = True

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_base_delay_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if self.requires_api_key:
            api_key = api_key or load_api_key(API_KEY_ENV[self.name])
        self._api_key = api_key
        self._base_url = (base_url or self.default_base_url).rstrip("/")
        self._timeout_s = PROVIDER_TIMEOUT_S if timeout_s is None else timeout_s
        self._max_retries = PROVIDER_MAX_RETRIES if max_retries is None else max_retries
        self._retry_base_delay_s = (
            PROVIDER_RETRY_BASE_DELAY_S if retry_base_delay_s is None else retry_base_delay_s
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "TranscriptionProvider":
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._auth_headers(),
            timeout=httpx.Timeout(self._timeout_s, connect=10.0),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "{} must be used as an async context manager: "
                "async with provider: ...".format(type(self).__name__)
            )
        return self._client

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": "Bearer {}".format(self._api_key)}

    def _check(self, resp: httpx.Response) -> None:
        if not 200 <= resp.status_code < 300:
            raise ProviderAPIError(self.name, resp.status_code, resp.text)

    async def transcribe(
        self,
        audio: bytes,
        filename: str = "upload.mp4",
        content_type: str = "application/octet-stream",
    ) -> ProviderResponse:
        """Transcribe audio bytes, retrying transient failures.

        Raises:
            ProviderUnavailable: Retries exhausted on network/5xx errors.
            ProviderAPIError: Non-retryable API error (401, 403, 429, ...).
        """
        self._ensure_client()
        return await retry_with_backoff(
            lambda: self._transcribe(audio, filename, content_type),
            provider=self.name,
            max_attempts=self._max_retries,
            base_delay_s=self._retry_base_delay_s,
        )

    @abstractmethod
    async def _transcribe(
        self,
        audio: bytes,
        filename: str,
        content_type: str,
    ) -> ProviderResponse:
        """Make one transcription attempt."""
