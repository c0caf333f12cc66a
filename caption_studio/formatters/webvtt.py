"""WebVTT subtitle formatter.

WHY: Browsers only load WebVTT into ``<track>`` elements, so the preview
player and web embeds need captions in this format.

HOW: A literal ``WEBVTT`` header line and a blank line, followed by the
same numbered blocks as SRT with "." as the millisecond separator.

RULES:
- Output always begins with "WEBVTT\\n\\n", even for an empty cue list
- Parsing skips the header block (including any header metadata lines)
  and NOTE / STYLE / REGION blocks
- Media type: "text/vtt"
- Registered as "vtt" in the FORMATTERS dict
"""

from __future__ import annotations

from typing import List

from caption_studio.core.errors import SubtitleParseError
from caption_studio.core.ir import Cue
from caption_studio.formatters.base import BaseFormatter
from caption_studio.formatters.timecodes import parse_blocks, render_blocks, split_blocks

VTT_HEADER = "WEBVTT"

_NON_CUE_BLOCKS = ("NOTE", "STYLE", "REGION")


def to_vtt(cues: List[Cue]) -> str:
    return "{}\n\n{}".format(VTT_HEADER, render_blocks(cues, "."))


def parse_vtt(content: str) -> List[Cue]:
    blocks = split_blocks(content)
    if not blocks or not blocks[0][0].startswith(VTT_HEADER):
        raise SubtitleParseError("WebVTT content must start with a WEBVTT header")

    header = blocks[0]
    cue_blocks = blocks[1:]
    # Header and first cue separated by a single newline only: the cue
    # lines were folded into the header block
    timing_at = next((i for i, line in enumerate(header) if "-->" in line), None)
    if timing_at is not None:
        cue_blocks.insert(0, header[max(1, timing_at - 1):])

    cue_blocks = [b for b in cue_blocks if not b[0].startswith(_NON_CUE_BLOCKS)]
    return parse_blocks(cue_blocks)


class WebVTTFormatter(BaseFormatter):
    """Formatter that produces WebVTT caption files."""

    suffix = ".vtt"
    media_type = "text/vtt"

    @property
    def name(self) -> str:
        return "WebVTT"

    def render(self, cues: List[Cue]) -> str:
        return to_vtt(cues)

    def parse(self, content: str) -> List[Cue]:
        return parse_vtt(content)
