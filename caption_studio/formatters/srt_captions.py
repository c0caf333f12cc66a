"""SubRip (SRT) subtitle formatter.

WHY: SRT is the most widely accepted subtitle file — every editor and
video platform imports it.

HOW: Numbered blocks ``i\\nHH:MM:SS,mmm --> HH:MM:SS,mmm\\ntext\\n\\n``
rendered through the shared timecode helpers. Parsing is delegated to
the ``srt`` library; its timedelta timestamps become float seconds.

RULES:
- 1-based cue numbering, comma as the millisecond separator
- An empty cue list renders as an empty string
- Parsing tolerates "\\r\\n" line endings and a leading BOM
- Unparseable content raises SubtitleParseError
- Media type: "application/x-subrip"
- Registered as "srt" in the FORMATTERS dict
"""

from __future__ import annotations

from typing import List

import srt

from caption_studio.core.errors import SubtitleParseError
from caption_studio.core.ir import Cue
from caption_studio.formatters.base import BaseFormatter
from caption_studio.formatters.timecodes import render_blocks


def to_srt(cues: List[Cue]) -> str:
    return render_blocks(cues, ",")


def parse_srt(content: str) -> List[Cue]:
    content = content.replace("\r\n", "\n").replace("\r", "\n").lstrip("\ufeff")
    try:
        subtitles = list(srt.parse(content))
    except (srt.SRTParseError, srt.TimestampParseError) as e:
        raise SubtitleParseError("Invalid SRT content: {}".format(e))

    return [
        Cue(
            text=sub.content.strip("\n"),
            start=sub.start.total_seconds(),
            end=sub.end.total_seconds(),
        )
        for sub in subtitles
    ]


class SRTFormatter(BaseFormatter):
    """Formatter that produces SubRip caption files."""

    suffix = ".srt"
    media_type = "application/x-subrip"

    @property
    def name(self) -> str:
        return "SubRip (SRT)"

    def render(self, cues: List[Cue]) -> str:
        return to_srt(cues)

    def parse(self, content: str) -> List[Cue]:
        return parse_srt(content)
