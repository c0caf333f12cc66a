"""Shared timestamp formatting for SRT and WebVTT, and WebVTT block parsing.

WHY: SRT and WebVTT differ only in their header and the fractional
separator of timestamps ("," vs "."). Both formatters share the block
layout, so rendering lives here once. WebVTT import also uses the
block parser here (SRT import goes through the srt library).

HOW: format_timestamp() rounds to whole milliseconds before splitting
into hours/minutes/seconds, so 1.9999s becomes 00:00:02,000 rather than
00:00:01,1000. parse_blocks() walks blank-line separated blocks, finds
the "A --> B" line, and collects the text lines after it.

RULES:
- Hours are unbounded, zero-padded to at least 2 digits
- Minutes and seconds are 2 digits, milliseconds 3 digits
- Parsing accepts either separator, "\\r\\n" line endings, an optional
  cue identifier line, and cue settings after the end timestamp
- Multi-line cue text is joined with "\\n"
- A block without a "-->" line, or with an unreadable timestamp,
  raises SubtitleParseError
"""

from __future__ import annotations

import re
from typing import List

from caption_studio.core.errors import SubtitleParseError
from caption_studio.core.ir import Cue

ARROW = " --> "

_TIMESTAMP_RE = re.compile(r"^(?:(\d+):)?(\d{1,2}):(\d{2})[,.](\d{1,3})$")


def format_timestamp(seconds: float, separator: str = ",") -> str:
    """Format seconds as HH:MM:SS<separator>mmm."""
    total_ms = int(round(max(0.0, seconds) * 1000))
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, millis = divmod(rest, 1000)
    return "{:02d}:{:02d}:{:02d}{}{:03d}".format(hours, minutes, secs, separator, millis)


def parse_timestamp(value: str) -> float:
    """Parse HH:MM:SS,mmm / HH:MM:SS.mmm (hours optional) into seconds."""
    match = _TIMESTAMP_RE.match(value.strip())
    if not match:
        raise SubtitleParseError("Invalid timestamp '{}'".format(value))
    hours, minutes, secs, millis = match.groups()
    return (
        int(hours or 0) * 3600
        + int(minutes) * 60
        + int(secs)
        + int(millis.ljust(3, "0")) / 1000.0
    )


def render_blocks(cues: List[Cue], separator: str) -> str:
    """Render numbered cue blocks, each terminated by a blank line."""
    parts = []
    for i, cue in enumerate(cues, start=1):
        parts.append(
            "{}\n{}{}{}\n{}\n\n".format(
                i,
                format_timestamp(cue.start, separator),
                ARROW,
                format_timestamp(cue.end, separator),
                cue.text,
            )
        )
    return "".join(parts)


def split_blocks(content: str) -> List[List[str]]:
    """Split subtitle text into blocks of non-blank lines."""
    content = content.replace("\r\n", "\n").replace("\r", "\n").lstrip("\ufeff")
    blocks: List[List[str]] = []
    current: List[str] = []
    for line in content.split("\n"):
        if line.strip():
            current.append(line)
        elif current:
            blocks.append(current)
            current = []
    if current:
        blocks.append(current)
    return blocks


def parse_blocks(blocks: List[List[str]]) -> List[Cue]:
    """Turn cue blocks into Cue objects.

    The timing line is the first line containing "-->"; any lines before
    it (an SRT index or a VTT identifier) are ignored.
    """
    cues: List[Cue] = []
    for block in blocks:
        timing_at = next((i for i, line in enumerate(block) if "-->" in line), None)
        if timing_at is None:
            raise SubtitleParseError(
                "Cue block without a timing line: '{}'".format(block[0])
            )
        start_raw, _, end_raw = block[timing_at].partition("-->")
        # WebVTT cue settings ("align:start ...") follow the end timestamp
        end_fields = end_raw.split()
        if not end_fields:
            raise SubtitleParseError("Missing end timestamp in '{}'".format(block[timing_at]))
        cues.append(Cue(
            text="\n".join(block[timing_at + 1:]),
            start=parse_timestamp(start_raw),
            end=parse_timestamp(end_fields[0]),
        ))
    return cues
