"""Subtitle formatter registry — SRT and WebVTT export and import.

WHY: The CLI and API layers need a single lookup to find the right
formatter by name, and a single place that rejects unknown formats.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
export() and parse() resolve a key, instantiate, and delegate.

RULES:
- Keys are lowercase file extensions without the dot ("srt", "vtt")
- Lookup is case-insensitive and tolerates a leading dot (".VTT")
- Unknown keys raise UnsupportedExportFormat
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import Dict, List, Type

from caption_studio.core.errors import UnsupportedExportFormat
from caption_studio.core.ir import Cue
from caption_studio.formatters.base import BaseFormatter, FormatterOutput
from caption_studio.formatters.srt_captions import SRTFormatter, parse_srt, to_srt
from caption_studio.formatters.webvtt import WebVTTFormatter, parse_vtt, to_vtt

FORMATTERS: Dict[str, Type[BaseFormatter]] = {
    "srt": SRTFormatter,
    "vtt": WebVTTFormatter,
}


def get_formatter(fmt: str) -> BaseFormatter:
    """Instantiate the formatter registered under fmt."""
    key = (fmt or "").strip().lower().lstrip(".")
    if key not in FORMATTERS:
        raise UnsupportedExportFormat(fmt)
    return FORMATTERS[key]()


def export(cues: List[Cue], fmt: str) -> FormatterOutput:
    """Serialize cues into the named subtitle format."""
    return get_formatter(fmt).format(cues)


def parse(content: str, fmt: str) -> List[Cue]:
    """Parse subtitle text in the named format back into cues."""
    return get_formatter(fmt).parse(content)


__all__ = [
    "FORMATTERS",
    "BaseFormatter",
    "FormatterOutput",
    "SRTFormatter",
    "WebVTTFormatter",
    "export",
    "get_formatter",
    "parse",
    "parse_srt",
    "parse_vtt",
    "to_srt",
    "to_vtt",
]
