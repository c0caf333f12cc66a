"""Configuration constants, provider defaults, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. Segmentation limits, upload limits, provider
endpoints and retry policy are plain data — not buried in logic — so the
pipeline, CLI and server all agree on the same defaults.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level values read from the environment with sensible defaults.
The load_api_key() function provides a clear error when a provider key
is missing.

RULES:
- API keys are loaded from .env via python-dotenv, never hardcoded
- All defaults can be overridden via environment variables
- MAX_WORDS_PER_CUE defaults to 7 (caption readability limit)
- SUPPORTED_VIDEO_FORMATS lists accepted upload extensions (lowercase, with dot)
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Caption segmentation and editing
# ---------------------------------------------------------------------------

MAX_WORDS_PER_CUE = int(os.getenv("MAX_WORDS_PER_CUE", "7"))
"""Maximum number of words per caption cue before a forced break."""

DEFAULT_INSERT_SPAN_S = 3.0
"""Duration of a cue added manually in the caption editor."""

DEFAULT_INSERT_TEXT = "New caption"

# ---------------------------------------------------------------------------
# Playback / render
# ---------------------------------------------------------------------------

RENDER_FPS = 30
RENDER_WIDTH = 1920
RENDER_HEIGHT = 1080
RENDER_COMPOSITION_ID = "CaptionedVideo"
DEFAULT_RENDER_DURATION_S = 30.0
"""Fallback duration for render configs when the client sends none."""

# ---------------------------------------------------------------------------
# Uploads
# ---------------------------------------------------------------------------

MAX_UPLOAD_BYTES = 100 * 1024 * 1024  # 100 MB

SUPPORTED_VIDEO_FORMATS: set[str] = {
    ".mp4", ".mov", ".avi", ".webm", ".m4a", ".mp3", ".wav",
}
"""Upload file extensions accepted by the caption pipeline."""

BYTES_PER_SECOND_ESTIMATE = 100 * 1024
"""Rough upload bitrate used to estimate duration when a provider returns untimed text."""

# ---------------------------------------------------------------------------
# Provider configuration defaults
# ---------------------------------------------------------------------------

DEFAULT_PROVIDER = os.getenv("CAPTION_PROVIDER", "whisper")
USE_MOCK_CAPTIONS = os.getenv("USE_MOCK_CAPTIONS", "false").lower() == "true"

OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
WHISPER_MODEL = os.getenv("WHISPER_MODEL", "whisper-1")

ASSEMBLYAI_BASE_URL = os.getenv("ASSEMBLYAI_BASE_URL", "https://api.assemblyai.com/v2")

GEMINI_BASE_URL = os.getenv(
    "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
)
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")

PROVIDER_TIMEOUT_S = float(os.getenv("PROVIDER_TIMEOUT_S", "50"))
PROVIDER_MAX_RETRIES = int(os.getenv("PROVIDER_MAX_RETRIES", "3"))
PROVIDER_RETRY_BASE_DELAY_S = float(os.getenv("PROVIDER_RETRY_BASE_DELAY_S", "1.0"))

API_KEY_ENV = {
    "whisper": "OPENAI_API_KEY",
    "assemblyai": "ASSEMBLYAI_API_KEY",
    "gemini": "GEMINI_API_KEY",
}
"""Environment variable holding each provider's API key."""


def load_api_key(env_name: str) -> str:
    """Load a provider API key from the environment.

    WHY: Every hosted provider needs a key. Loading it from the
    environment (via .env) keeps it out of source code.

    HOW: Reads env_name from os.environ (populated by python-dotenv).

    RULES:
    - Raises ValueError if the key is missing or empty
    - Never returns a default/placeholder value
    """
    key = os.getenv(env_name, "").strip()
    if not key:
        raise ValueError(
            "{} not configured. Add it to the .env file in the app folder.".format(env_name)
        )
    return key
