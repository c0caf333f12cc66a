"""Provider response normalization into one canonical word sequence.

WHY: Providers differ in granularity. Whisper and AssemblyAI return
per-word timestamps (seconds and milliseconds respectively), the Whisper
fallback path returns sentence segments, and Gemini may return only text.
The segmenter must not care which one it got.

HOW: normalize() inspects the ProviderResponse shape:
  words    — one Word per item, ms values divided by 1000
  segments — one synthetic Word per segment spanning its full duration
  text     — whitespace split, caller's duration D divided evenly:
             word i of N gets [i*D/N, (i+1)*D/N]
The result is stably sorted by start time with empty words dropped.

RULES:
- Output start times are non-decreasing
- Empty (after strip) words are dropped
- Negative times clamp to 0; an end before its start is raised to start
- Zero resulting words → EmptyTranscript (recoverable)
- Unknown shape, or text without a positive duration → MalformedProviderResponse
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from caption_studio.api.models import ProviderResponse
from caption_studio.config import BYTES_PER_SECOND_ESTIMATE
from caption_studio.core.errors import EmptyTranscript, MalformedProviderResponse
from caption_studio.core.ir import Word

logger = logging.getLogger(__name__)


def normalize(
    response: Union[ProviderResponse, Dict[str, Any]],
    duration_s: Optional[float] = None,
) -> List[Word]:
    """Convert a provider response into an ordered list of Words.

    Args:
        response: A ProviderResponse, or a raw dict in one of the three
                  shapes ({words}, {segments}, {text}).
        duration_s: Estimated media duration, required for the text shape.

    Returns:
        Time-ordered list of Word objects.

    Raises:
        MalformedProviderResponse: No recognized shape, bad timing values,
            or untimed text without a usable duration.
        EmptyTranscript: The response contained no non-empty words.
    """
    response = coerce_response(response)

    shape = response.shape
    if shape == "words":
        scale = 1000.0 if response.time_unit == "ms" else 1.0
        words = _timed_items(response.words, scale, "words")
    elif shape == "segments":
        scale = 1000.0 if response.time_unit == "ms" else 1.0
        words = _timed_items(response.segments, scale, "segments")
    elif shape == "text":
        words = _evenly_timed(response.text, duration_s)
    elif _is_empty_but_recognized(response):
        raise EmptyTranscript("Provider {} returned no words".format(response.provider))
    else:
        raise MalformedProviderResponse(
            "Response from {} has none of 'words', 'segments' or 'text'".format(
                response.provider
            )
        )

    if not words:
        raise EmptyTranscript("Provider {} returned no words".format(response.provider))

    # sorted() is stable, so words with equal starts keep provider order
    words = sorted(words, key=lambda w: w.start)
    logger.debug("Normalized %d %s from %s", len(words), shape, response.provider)
    return words


def coerce_response(response: Union[ProviderResponse, Dict[str, Any]]) -> ProviderResponse:
    """Return response as a ProviderResponse, building it from a raw dict.

    Raises:
        MalformedProviderResponse: Not a dict/ProviderResponse, or the dict
            carries an unknown time_unit.
    """
    if isinstance(response, ProviderResponse):
        return response
    if not isinstance(response, dict):
        raise MalformedProviderResponse(
            "Expected a provider response dict, got {}".format(type(response).__name__)
        )
    try:
        return ProviderResponse.from_dict(response)
    except ValueError as e:
        raise MalformedProviderResponse(str(e))


def estimate_duration_from_size(num_bytes: int) -> float:
    """Estimate media duration from upload size.

    Used when a provider returns untimed text. The estimate only has to
    be plausible: captions are spread evenly across it.
    """
    return max(1.0, num_bytes / float(BYTES_PER_SECOND_ESTIMATE))


def _is_empty_but_recognized(response: ProviderResponse) -> bool:
    """True when a known key is present but holds nothing (e.g. silent audio)."""
    return (
        response.words is not None
        or response.segments is not None
        or response.text is not None
    )


def _timed_items(items: List[Dict[str, Any]], scale: float, kind: str) -> List[Word]:
    words: List[Word] = []
    for item in items:
        if not isinstance(item, dict):
            raise MalformedProviderResponse("{} entries must be objects".format(kind))
        text = str(item.get("text") or item.get("word") or "").strip()
        if not text:
            continue
        try:
            start = float(item["start"]) / scale
            end = float(item["end"]) / scale
        except (KeyError, TypeError, ValueError):
            raise MalformedProviderResponse(
                "{} entry '{}' has missing or non-numeric start/end".format(kind, text)
            )
        start = max(0.0, start)
        end = max(start, end)
        words.append(Word(text=text, start=start, end=end))
    return words


def _evenly_timed(text: str, duration_s: Optional[float]) -> List[Word]:
    if duration_s is None or duration_s <= 0:
        raise MalformedProviderResponse(
            "Untimed transcript text requires a positive duration estimate"
        )
    tokens = text.split()
    if not tokens:
        return []
    step = duration_s / len(tokens)
    return [
        Word(text=token, start=i * step, end=(i + 1) * step)
        for i, token in enumerate(tokens)
    ]
