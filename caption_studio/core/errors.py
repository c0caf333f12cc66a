"""Typed error kinds raised by the caption core.

WHY: Callers need to tell a recoverable condition (an empty transcript,
which falls back to placeholder captions) from a hard failure (an
unparseable provider response, an unsupported export format). Distinct
exception classes make that decision a plain ``except`` clause.

HOW: All errors derive from CaptionError. Input-validation errors also
derive from ValueError so generic callers that already catch ValueError
keep working.

RULES:
- EmptyTranscript is recoverable — the pipeline substitutes PLACEHOLDER_CUES
- InvalidTiming leaves the original cue list untouched
- MalformedProviderResponse and UnsupportedExportFormat surface to the user
- ProviderUnavailable is raised only after retries are exhausted
"""

from __future__ import annotations


class CaptionError(Exception):
    """Base class for every error raised by caption_studio."""


class EmptyTranscript(CaptionError):
    """Raised when normalization yields zero words."""


class InvalidTiming(CaptionError, ValueError):
    """Raised when an edit would leave a cue with ``end <= start``.

    RULES:
    - Message includes the cue index and the offending times
    """


class MalformedProviderResponse(CaptionError, ValueError):
    """Raised when a provider response matches none of the known shapes."""


class UnsupportedExportFormat(CaptionError, ValueError):
    """Raised when a subtitle format other than SRT or WebVTT is requested."""

    def __init__(self, fmt: str) -> None:
        self.fmt = fmt
        super().__init__(
            "Unsupported export format '{}'. Available formats: srt, vtt".format(fmt)
        )


class SubtitleParseError(CaptionError, ValueError):
    """Raised when SRT/WebVTT text cannot be parsed back into cues."""


class ProviderUnavailable(CaptionError):
    """Raised when a transcription provider stays unreachable after retries.

    WHY: Transient network errors are retried inside the adapter. Once the
    retry budget is spent the caller needs a single typed signal it can
    map to a "service unavailable" response.

    RULES:
    - attempts is the number of calls made before giving up
    """

    def __init__(self, provider: str, attempts: int, cause: str) -> None:
        self.provider = provider
        self.attempts = attempts
        super().__init__(
            "{} unreachable after {} attempt(s): {}".format(provider, attempts, cause)
        )


class ProviderAPIError(CaptionError):
    """Raised when a provider returns a non-2xx response.

    HOW: Wraps the HTTP status code and response body.

    RULES:
    - Always include status_code and message
    - 401/403 mean a bad API key, 429 means rate limited; neither is retried
    """

    def __init__(self, provider: str, status_code: int, message: str) -> None:
        self.provider = provider
        self.status_code = status_code
        self.message = message
        super().__init__("{} API error {}: {}".format(provider, status_code, message))
