"""Greedy word-to-caption segmentation.

WHY: A transcript is a long run of words; viewers need short captions
that break at natural points. The segmenter groups words into cues of at
most a handful of words, ending early at sentence boundaries.

HOW: Single forward pass with an accumulating buffer. Each word is
appended; the pending cue is closed when any of these holds:
  (a) the buffer reached max_words
  (b) the word's raw text ends in ".", "!" or "?"
  (c) it is the last word of the transcript
Closing emits a Cue spanning the first buffered start to the last
buffered end, with the words space-joined, then clears the buffer.

RULES:
- Every input word appears in exactly one cue, in input order
- Cues hold 1..max_words words, plus any words merged in from a
  zero-length cue that could not be widened
- Only the final character is checked: 'word."' does not end a sentence
- A word containing internal spaces is one token for counting purposes
- Segment-level input uses max_words=1 with punctuation splitting off,
  so each synthetic sentence word becomes its own cue
- A cue whose words have zero total span is widened by MIN_CUE_SPAN_S,
  never past the next cue's start; when the next cue starts at the same
  instant, the zero-length cue's words are merged into it instead
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from caption_studio.api.models import ProviderResponse
from caption_studio.config import MAX_WORDS_PER_CUE
from caption_studio.core.ir import Cue, Word
from caption_studio.core.normalizer import coerce_response, normalize

SENTENCE_TERMINALS = (".", "!", "?")

MIN_CUE_SPAN_S = 0.001


def segment(
    words: List[Word],
    max_words: int = MAX_WORDS_PER_CUE,
    split_on_punctuation: bool = True,
) -> List[Cue]:
    """Group an ordered word sequence into caption cues.

    Args:
        words: Time-ordered words from the normalizer.
        max_words: Buffer length that forces a cue break.
        split_on_punctuation: Close a cue after sentence-terminal punctuation.

    Returns:
        Ordered, non-overlapping cue list. Empty when words is empty.

    Raises:
        ValueError: If max_words is less than 1.
    """
    if max_words < 1:
        raise ValueError("max_words must be at least 1, got {}".format(max_words))

    cues: List[Cue] = []
    buffer: List[Word] = []
    last_index = len(words) - 1

    for index, word in enumerate(words):
        buffer.append(word)

        should_close = (
            len(buffer) >= max_words
            or (split_on_punctuation and ends_sentence(word.text))
            or index == last_index
        )
        if should_close:
            cues.append(Cue.from_words(buffer))
            buffer = []

    return _widen_zero_length(cues)


def segment_coarse(words: List[Word]) -> List[Cue]:
    """One cue per word; used when each word is already a whole sentence."""
    return segment(words, max_words=1, split_on_punctuation=False)


def segment_response(
    response: Union[ProviderResponse, Dict[str, Any]],
    duration_s: Optional[float] = None,
    max_words: int = MAX_WORDS_PER_CUE,
) -> List[Cue]:
    """Normalize a provider response and segment it in one step.

    Segment-level responses keep their sentence boundaries (coarse
    configuration); word-level and untimed-text responses use the
    default greedy configuration.
    """
    response = coerce_response(response)
    words = normalize(response, duration_s=duration_s)
    if response.shape == "segments":
        return segment_coarse(words)
    return segment(words, max_words=max_words)


def ends_sentence(text: str) -> bool:
    """True if the raw text's last character is sentence-terminal punctuation."""
    return text.endswith(SENTENCE_TERMINALS)


def _widen_zero_length(cues: List[Cue]) -> List[Cue]:
    widened: List[Cue] = []
    carried: List[Word] = []
    for i, cue in enumerate(cues):
        if carried:
            cue = Cue.from_words(carried + cue.words)
            carried = []
        if cue.end > cue.start:
            widened.append(cue)
            continue
        end = cue.start + MIN_CUE_SPAN_S
        if i + 1 < len(cues):
            end = min(end, cues[i + 1].start)
        if end > cue.start:
            cue.end = end
            widened.append(cue)
        else:
            carried = cue.words
    return widened
