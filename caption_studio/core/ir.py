"""Intermediate representation dataclasses for timed captions.

WHY: Providers return words, sentence segments, or bare text. The
segmenter, timeline cursor, editor and subtitle formatters all need the
same two shapes: timed words, and caption cues built from them. The IR
provides a single, well-typed form that every stage consumes.

HOW: Three types form the model:
  Word         — one transcribed token with start/end in seconds
  Cue          — one displayed caption with its words
  CaptionStyle — rendering-mode selector (bottom, top, karaoke)

RULES:
- All times are in float seconds (providers in ms are converted first)
- Word is immutable; end >= start >= 0
- Cue.end > Cue.start; cues in a list never overlap and are time-ordered
- Cue.text is the space-joined word text whenever words is non-empty
- CaptionStyle never affects cue data, only how a cue is drawn
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Word:
    """A single transcribed word with timing.

    WHY: Word-level timestamps are the raw material for segmentation.
    When a provider only returns sentence segments or untimed text, the
    normalizer synthesizes Words so downstream code sees one shape.

    RULES:
    - text: stripped, never empty
    - start / end: float seconds, end >= start >= 0
    """

    text: str
    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass
class Cue:
    """A single timed caption unit.

    WHY: The cue list is the unit exchanged between segmentation,
    playback, editing and export.

    HOW: Built by the segmenter from buffered words, or by the editor
    for manual insertions (words empty). Parsed SRT/VTT cues carry no
    words since neither format stores per-word timing.

    RULES:
    - end > start
    - words may be empty; when not, text == " ".join(w.text for w in words)
    """

    text: str
    start: float
    end: float
    words: List[Word] = field(default_factory=list)

    @property
    def duration(self) -> float:
        return self.end - self.start

    @classmethod
    def from_words(cls, words: List[Word]) -> "Cue":
        """Build a cue spanning the given (non-empty) words."""
        return cls(
            text=" ".join(w.text for w in words),
            start=words[0].start,
            end=words[-1].end,
            words=list(words),
        )

    def to_dict(self) -> dict:
        return {
            "start": self.start,
            "end": self.end,
            "text": self.text,
            "words": [
                {"text": w.text, "start": w.start, "end": w.end} for w in self.words
            ],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Cue":
        return cls(
            text=str(data["text"]),
            start=float(data["start"]),
            end=float(data["end"]),
            words=[
                Word(text=w["text"], start=float(w["start"]), end=float(w["end"]))
                for w in data.get("words") or []
            ],
        )


class CaptionStyle(str, enum.Enum):
    """Caption rendering modes.

    RULES:
    - bottom: classic centered subtitle (default)
    - top: breaking-news bar
    - karaoke: word-by-word highlight
    """

    BOTTOM = "bottom"
    TOP = "top"
    KARAOKE = "karaoke"

    @classmethod
    def coerce(cls, value) -> "CaptionStyle":
        """Return the matching style, falling back to BOTTOM for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.BOTTOM


CAPTION_STYLE_DESCRIPTIONS = {
    CaptionStyle.BOTTOM: ("Bottom Centered", "Classic subtitle style"),
    CaptionStyle.TOP: ("Top News Bar", "Breaking news style"),
    CaptionStyle.KARAOKE: ("Karaoke", "Word-by-word highlight"),
}


def placeholder_cues() -> List[Cue]:
    """Static captions shown when no transcript could be derived.

    Returns a fresh list each call so callers may edit it freely.
    """
    return [
        Cue(text="Welcome to the Remotion Captioning Platform", start=0.0, end=2.5),
        Cue(text="This is a demo caption", start=2.5, end=5.0),
        Cue(text="Upload your video to get started", start=5.0, end=7.5),
        Cue(text="AI-powered captions in Hinglish", start=7.5, end=10.0),
    ]


def fallback_cues() -> List[Cue]:
    """Captions offered when the transcription provider could not be reached."""
    return [
        Cue(text="Welcome to the Remotion Captioning Platform", start=0.0, end=2.5),
        Cue(text="The transcription service is currently unavailable", start=2.5, end=5.0),
        Cue(text="These are fallback captions", start=5.0, end=7.5),
        Cue(text="Please try again later or contact support", start=7.5, end=10.0),
    ]
