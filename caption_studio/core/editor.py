"""Manual caption editing: insert, delete, retime, and set text.

WHY: Generated captions are never perfect. Users fix wording, nudge
timings, remove stray cues and add missing ones before exporting.

HOW: Every operation is a pure function: it copies the cue list, applies
one change, and returns the new list. The input list is never mutated,
so a rejected edit leaves the caller's cues exactly as they were.

RULES:
- insert(): new cue starts at the previous cue's end (0 for an empty
  list) and lasts DEFAULT_INSERT_SPAN_S seconds, with no words
- retime(): values are coerced like a form field (non-numeric → 0);
  end <= start raises InvalidTiming
- retime() does not enforce non-overlap with neighbours; validate()
  reports such problems for tooling that wants to check
- Editing text or timing clears per-word timing, which no longer matches
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, List, Optional

from caption_studio.config import DEFAULT_INSERT_SPAN_S, DEFAULT_INSERT_TEXT
from caption_studio.core.errors import InvalidTiming
from caption_studio.core.ir import Cue

TIMING_FIELDS = ("start", "end")


def insert(
    cues: List[Cue],
    after_index: Optional[int] = None,
    new_cue: Optional[Cue] = None,
    text: str = DEFAULT_INSERT_TEXT,
) -> List[Cue]:
    """Insert a cue after after_index (append when None, front when -1).

    When new_cue is omitted a default cue is built: it starts where the
    preceding cue ends (0 when there is none) and lasts 3 seconds.

    Raises:
        IndexError: after_index is outside [-1, len(cues) - 1].
        InvalidTiming: new_cue has end <= start.
    """
    if after_index is None:
        after_index = len(cues) - 1
    if after_index < -1 or after_index >= len(cues):
        raise IndexError("after_index {} out of range for {} cues".format(after_index, len(cues)))

    if new_cue is None:
        start = cues[after_index].end if after_index >= 0 else 0.0
        new_cue = Cue(text=text, start=start, end=start + DEFAULT_INSERT_SPAN_S)
    else:
        _check_span(new_cue.start, new_cue.end, after_index + 1)

    updated = list(cues)
    updated.insert(after_index + 1, new_cue)
    return updated


def delete(cues: List[Cue], index: int) -> List[Cue]:
    """Remove the cue at index; the remaining cues keep their order."""
    _check_index(cues, index)
    return cues[:index] + cues[index + 1:]


def retime(cues: List[Cue], index: int, field: str, value: Any) -> List[Cue]:
    """Set a cue's start or end time.

    Args:
        cues: Cue list to edit (not modified).
        index: Position of the cue.
        field: "start" or "end".
        value: New time in seconds; strings are parsed, junk becomes 0.

    Raises:
        ValueError: field is not "start" or "end".
        InvalidTiming: the edit would leave end <= start.
    """
    if field not in TIMING_FIELDS:
        raise ValueError("field must be 'start' or 'end', got '{}'".format(field))
    _check_index(cues, index)

    cue = cues[index]
    if field == "start":
        return retime_span(cues, index, value, cue.end)
    return retime_span(cues, index, cue.start, value)


def retime_span(cues: List[Cue], index: int, start: Any, end: Any) -> List[Cue]:
    """Set both times of a cue in one step, coercing values like retime()."""
    _check_index(cues, index)
    start = _coerce_seconds(start)
    end = _coerce_seconds(end)
    _check_span(start, end, index)

    updated = list(cues)
    updated[index] = replace(cues[index], start=start, end=end, words=[])
    return updated


def set_text(cues: List[Cue], index: int, text: str) -> List[Cue]:
    _check_index(cues, index)
    updated = list(cues)
    updated[index] = replace(cues[index], text=text, words=[])
    return updated


def validate(cues: List[Cue]) -> List[str]:
    """Return human-readable problems with a cue list (empty when valid).

    Checks each cue's span and that consecutive cues neither overlap nor
    run out of order.
    """
    problems: List[str] = []
    for i, cue in enumerate(cues):
        label = "Caption {}".format(i + 1)
        if cue.start < 0:
            problems.append("{}: start {:.3f}s is negative".format(label, cue.start))
        if cue.end <= cue.start:
            problems.append(
                "{}: end {:.3f}s is not after start {:.3f}s".format(label, cue.end, cue.start)
            )
        if i > 0 and cues[i - 1].end > cue.start:
            problems.append(
                "{}: starts at {:.3f}s before caption {} ends at {:.3f}s".format(
                    label, cue.start, i, cues[i - 1].end
                )
            )
    return problems


def is_valid(cues: List[Cue]) -> bool:
    return not validate(cues)


def check_spans(cues: List[Cue]) -> List[Cue]:
    """Return cues unchanged, or raise InvalidTiming for the first end <= start."""
    for i, cue in enumerate(cues):
        _check_span(cue.start, cue.end, i)
    return cues


def _coerce_seconds(value: Any) -> float:
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return 0.0
    # NaN behaves like an unparseable field
    if seconds != seconds:
        return 0.0
    return seconds


def _check_index(cues: List[Cue], index: int) -> None:
    if index < 0 or index >= len(cues):
        raise IndexError("index {} out of range for {} cues".format(index, len(cues)))


def _check_span(start: float, end: float, index: int) -> None:
    if end <= start:
        raise InvalidTiming(
            "Caption {}: end {:.3f}s must be after start {:.3f}s".format(index + 1, end, start)
        )
