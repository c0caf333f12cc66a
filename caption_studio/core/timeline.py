"""Playback-time lookup: active cue, active karaoke word, frame state.

WHY: The renderer re-evaluates captions once per frame (30 fps). For each
frame it needs the cue on screen, and in karaoke mode which word to
highlight. Each call is independent and idempotent for a given
(cues, t) pair.

HOW: active_cue() binary-searches the cue starts when the cues are sorted
and non-overlapping, then checks the half-open span [start, end). Edited
lists that overlap or are out of order fall back to a first-match scan.
active_word_index() divides the cue span into n equal slots, one per
whitespace-separated word of the cue text, and returns the slot that t
falls into.

RULES:
- A cue is active for start <= t < end; gaps and t past the end → None
- Karaoke timing uses even subdivision of the cue span, never the
  per-word timestamps (matches the visible behavior users already know)
- The word index is clamped to [0, n-1]
- Words before the active index are "past", after it "pending"
"""

from __future__ import annotations

import bisect
import enum
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from caption_studio.config import RENDER_FPS
from caption_studio.core.ir import CaptionStyle, Cue


class WordState(str, enum.Enum):
    """Karaoke display state of one word within the active cue."""

    PAST = "past"
    ACTIVE = "active"
    PENDING = "pending"


@dataclass
class CaptionFrame:
    """What the renderer draws for one frame.

    RULES:
    - active_word_index is set only for the karaoke style
    - words is the whitespace-split cue text used for karaoke display
    """

    text: str
    style: CaptionStyle
    start: float
    end: float
    words: List[str]
    active_word_index: Optional[int] = None


def active_cue_index(cues: List[Cue], t: float) -> Optional[int]:
    """Return the index of the cue covering t, or None.

    Segmented cues are ordered and non-overlapping, so a binary search
    over starts is enough. Edited lists may be out of order or overlap;
    those get the first cue covering t, scanning from the front.
    """
    if not cues:
        return None
    if any(a.end > b.start for a, b in zip(cues, cues[1:])):
        return next((i for i, cue in enumerate(cues) if cue.start <= t < cue.end), None)

    starts = [cue.start for cue in cues]
    i = bisect.bisect_right(starts, t) - 1
    if i < 0:
        return None
    if t < cues[i].end:
        return i
    return None


def active_cue(cues: List[Cue], t: float) -> Optional[Cue]:
    """Return the cue with start <= t < end, or None in a gap / outside the list."""
    i = active_cue_index(cues, t)
    return cues[i] if i is not None else None


def display_words(cue: Cue) -> List[str]:
    """The words karaoke mode highlights: the cue text split on whitespace."""
    return cue.text.split()


def active_word_index(cue: Cue, t: float) -> Optional[int]:
    """Return the karaoke word index for time t within cue.

    The span is cut into n equal slots:
    floor((t - start) / ((end - start) / n)), clamped to [0, n-1].
    Returns None when t is outside the cue or the cue has no words.
    """
    n = len(display_words(cue))
    if n == 0 or not (cue.start <= t < cue.end):
        return None
    slot = (cue.end - cue.start) / n
    index = int(math.floor((t - cue.start) / slot))
    return max(0, min(index, n - 1))


def word_states(cue: Cue, t: float) -> List[Tuple[str, WordState]]:
    """Pair every display word of cue with its karaoke state at time t."""
    words = display_words(cue)
    current = active_word_index(cue, t)
    if current is None:
        # Before or after the cue everything is pending / past respectively
        state = WordState.PAST if t >= cue.end else WordState.PENDING
        return [(w, state) for w in words]

    states = []
    for i, w in enumerate(words):
        if i < current:
            states.append((w, WordState.PAST))
        elif i == current:
            states.append((w, WordState.ACTIVE))
        else:
            states.append((w, WordState.PENDING))
    return states


def frame_to_seconds(frame: int, fps: int = RENDER_FPS) -> float:
    return frame / float(fps)


def duration_from_cues(cues: List[Cue]) -> float:
    """Latest cue end, or 0 for an empty list."""
    if not cues:
        return 0.0
    return max(cue.end for cue in cues)


def render_frame(cues: List[Cue], t: float, style=CaptionStyle.BOTTOM) -> Optional[CaptionFrame]:
    """Resolve the caption to draw at playback time t.

    Args:
        cues: Cue list, normally sorted and non-overlapping.
        t: Current playback time in seconds.
        style: CaptionStyle or its string value; unknown values draw as bottom.

    Returns:
        CaptionFrame for the active cue, or None when no cue is active.
    """
    cue = active_cue(cues, t)
    if cue is None:
        return None
    style = CaptionStyle.coerce(style)
    return CaptionFrame(
        text=cue.text,
        style=style,
        start=cue.start,
        end=cue.end,
        words=display_words(cue),
        active_word_index=active_word_index(cue, t) if style is CaptionStyle.KARAOKE else None,
    )
