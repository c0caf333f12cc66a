"""Shared test fixtures for the caption_studio test suite.

WHY: Several test modules need the same sample transcripts — a short
word-timed sentence, a run of unpunctuated words, segment-level and
millisecond responses. Centralizing them here keeps every test on the
same data.

HOW: Pytest fixtures return fresh copies of the sample dicts and Word
lists so tests may mutate them freely.

RULES:
- Times are seconds unless the fixture name says ms
- SENTENCE_WORDS ends with a period so it forms exactly one cue
- RUN_ON_WORDS has no punctuation and is longer than MAX_WORDS_PER_CUE
"""

from typing import Any, Dict, List

import pytest

from caption_studio.core.ir import Cue, Word


# ---------------------------------------------------------------------------
# Sample word-level transcript
# ---------------------------------------------------------------------------

SENTENCE_WORDS: List[Dict[str, Any]] = [
    {"word": "Hello",   "start": 0.0, "end": 0.4},
    {"word": "doston",  "start": 0.5, "end": 0.9},
    {"word": "aaj",     "start": 1.0, "end": 1.2},
    {"word": "hum",     "start": 1.3, "end": 1.5},
    {"word": "captions", "start": 1.6, "end": 2.1},
    {"word": "banayenge", "start": 2.2, "end": 2.8},
    {"word": "today.",  "start": 2.9, "end": 3.4},
]

RUN_ON_WORDS: List[Dict[str, Any]] = [
    {"word": "w{}".format(i), "start": i * 0.5, "end": i * 0.5 + 0.4} for i in range(10)
]


@pytest.fixture
def sentence_response():
    """Whisper-style verbose response: one 7-word sentence ending in a period."""
    return {
        "text": "Hello doston aaj hum captions banayenge today.",
        "words": [dict(w) for w in SENTENCE_WORDS],
    }


@pytest.fixture
def run_on_response():
    """Ten unpunctuated words, 0.5 s apart."""
    return {"words": [dict(w) for w in RUN_ON_WORDS]}


@pytest.fixture
def ms_response():
    """AssemblyAI-style response with millisecond timestamps."""
    return {
        "text": "Kaise ho aap?",
        "time_unit": "ms",
        "words": [
            {"text": "Kaise", "start": 1200, "end": 1500},
            {"text": "ho",    "start": 1550, "end": 1700},
            {"text": "aap?",  "start": 1750, "end": 2100},
        ],
    }


@pytest.fixture
def segments_response():
    """Segment-level response without per-word timing."""
    return {
        "segments": [
            {"start": 0.0, "end": 2.0, "text": "First line of the video"},
            {"start": 2.0, "end": 4.5, "text": "Second line"},
        ],
    }


@pytest.fixture
def sentence_words():
    """SENTENCE_WORDS as IR Words."""
    return [Word(text=w["word"], start=w["start"], end=w["end"]) for w in SENTENCE_WORDS]


@pytest.fixture
def sample_cues():
    """Three sorted, non-overlapping cues with a gap between the 2nd and 3rd."""
    return [
        Cue(text="a b c", start=0.0, end=3.0),
        Cue(text="Namaste", start=3.0, end=4.0),
        Cue(text="Phir milenge", start=5.0, end=6.5),
    ]
