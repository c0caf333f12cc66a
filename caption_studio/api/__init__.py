"""Transcription provider package — async adapters for hosted speech-to-text.

WHY: The caption pipeline needs a transcript from whichever provider is
configured. This package hides each provider's HTTP workflow behind one
TranscriptionProvider interface.

HOW: Each adapter subclasses TranscriptionProvider and returns a
ProviderResponse. PROVIDERS maps config names to adapter classes;
create_provider() instantiates one, honoring USE_MOCK_CAPTIONS.

RULES:
- All HTTP calls go through a provider (no direct httpx usage elsewhere)
- Providers are constructed explicitly and passed to the pipeline
- Unknown provider names raise ValueError
"""

from __future__ import annotations

from typing import Dict, Optional, Type

from caption_studio.api.assemblyai import AssemblyAIProvider
from caption_studio.api.base import TranscriptionProvider
from caption_studio.api.gemini import GeminiProvider
from caption_studio.api.mock import MockProvider
from caption_studio.api.models import ProviderResponse
from caption_studio.api.whisper import WhisperProvider
from caption_studio.config import DEFAULT_PROVIDER, USE_MOCK_CAPTIONS

PROVIDERS: Dict[str, Type[TranscriptionProvider]] = {
    "whisper": WhisperProvider,
    "assemblyai": AssemblyAIProvider,
    "gemini": GeminiProvider,
    "mock": MockProvider,
}


def create_provider(name: Optional[str] = None, **kwargs) -> TranscriptionProvider:
    """Instantiate a provider by name (default from config).

    USE_MOCK_CAPTIONS=true forces the mock provider regardless of name.
    """
    if USE_MOCK_CAPTIONS:
        name = "mock"
    key = (name or DEFAULT_PROVIDER).strip().lower()
    if key not in PROVIDERS:
        raise ValueError(
            "Unknown provider '{}'. Available: {}".format(key, ", ".join(sorted(PROVIDERS)))
        )
    return PROVIDERS[key](**kwargs)


__all__ = [
    "PROVIDERS",
    "AssemblyAIProvider",
    "GeminiProvider",
    "MockProvider",
    "ProviderResponse",
    "TranscriptionProvider",
    "WhisperProvider",
    "create_provider",
]
