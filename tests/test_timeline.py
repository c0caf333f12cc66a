"""Tests for playback-time lookup (active cue, karaoke word, frames)."""

from __future__ import annotations

import pytest

from caption_studio.core import editor
from caption_studio.core.ir import CaptionStyle, Cue
from caption_studio.core.timeline import (
    WordState,
    active_cue,
    active_cue_index,
    active_word_index,
    duration_from_cues,
    frame_to_seconds,
    render_frame,
    word_states,
)


class TestActiveCue:
    def test_cue_found_inside_span(self, sample_cues):
        assert active_cue(sample_cues, 1.0).text == "a b c"
        assert active_cue(sample_cues, 3.5).text == "Namaste"

    def test_start_inclusive_end_exclusive(self, sample_cues):
        assert active_cue_index(sample_cues, 3.0) == 1
        assert active_cue_index(sample_cues, 0.0) == 0

    def test_gap_returns_none(self, sample_cues):
        assert active_cue(sample_cues, 4.5) is None

    def test_before_first_and_after_last(self, sample_cues):
        assert active_cue(sample_cues, -0.1) is None
        assert active_cue(sample_cues, 6.5) is None
        assert active_cue(sample_cues, 100.0) is None

    def test_empty_list(self):
        assert active_cue([], 1.0) is None

    def test_matches_linear_scan(self, sample_cues):
        for step in range(0, 80):
            t = step * 0.1
            expected = next(
                (i for i, c in enumerate(sample_cues) if c.start <= t < c.end), None
            )
            assert active_cue_index(sample_cues, t) == expected

    def test_retimed_out_of_order_list(self):
        cues = [
            Cue(text="A", start=0.0, end=2.0),
            Cue(text="B", start=5.0, end=8.0),
            Cue(text="C", start=9.0, end=10.0),
        ]
        edited = editor.retime_span(cues, 2, 1.0, 1.5)
        assert active_cue(edited, 6.0).text == "B"
        assert active_cue(edited, 1.2).text == "A"
        assert active_cue(edited, 3.0) is None

    def test_overlapping_list_returns_first_match(self):
        cues = [
            Cue(text="long", start=0.0, end=10.0),
            Cue(text="short", start=2.0, end=3.0),
        ]
        assert active_cue_index(cues, 5.0) == 0
        assert active_cue_index(cues, 2.5) == 0


class TestKaraokeWord:
    def test_even_subdivision_scenario(self):
        cue = Cue(text="a b c", start=0.0, end=3.0)
        assert active_word_index(cue, 1.5) == 1

    def test_first_and_last_slots(self):
        cue = Cue(text="a b c", start=0.0, end=3.0)
        assert active_word_index(cue, 0.0) == 0
        assert active_word_index(cue, 2.999) == 2

    def test_outside_cue_is_none(self):
        cue = Cue(text="a b c", start=1.0, end=4.0)
        assert active_word_index(cue, 0.5) is None
        assert active_word_index(cue, 4.0) is None

    def test_blank_text_has_no_word(self):
        assert active_word_index(Cue(text="   ", start=0.0, end=1.0), 0.5) is None

    def test_word_states(self):
        cue = Cue(text="a b c", start=0.0, end=3.0)
        states = [state for _word, state in word_states(cue, 1.5)]
        assert states == [WordState.PAST, WordState.ACTIVE, WordState.PENDING]

    def test_word_states_outside_cue(self):
        cue = Cue(text="a b", start=1.0, end=2.0)
        assert {s for _w, s in word_states(cue, 0.5)} == {WordState.PENDING}
        assert {s for _w, s in word_states(cue, 2.5)} == {WordState.PAST}


class TestRenderFrame:
    def test_karaoke_frame_has_word_index(self, sample_cues):
        frame = render_frame(sample_cues, 1.5, "karaoke")
        assert frame.style is CaptionStyle.KARAOKE
        assert frame.words == ["a", "b", "c"]
        assert frame.active_word_index == 1

    def test_bottom_frame_has_no_word_index(self, sample_cues):
        frame = render_frame(sample_cues, 1.5, CaptionStyle.BOTTOM)
        assert frame.text == "a b c"
        assert frame.active_word_index is None

    def test_unknown_style_draws_as_bottom(self, sample_cues):
        assert render_frame(sample_cues, 1.5, "sparkles").style is CaptionStyle.BOTTOM

    def test_gap_has_no_frame(self, sample_cues):
        assert render_frame(sample_cues, 4.2, "top") is None

    def test_repeated_calls_are_identical(self, sample_cues):
        assert render_frame(sample_cues, 5.5, "karaoke") == render_frame(sample_cues, 5.5, "karaoke")


class TestFrameHelpers:
    def test_frame_to_seconds_at_30_fps(self):
        assert frame_to_seconds(45) == pytest.approx(1.5)
        assert frame_to_seconds(50, fps=25) == pytest.approx(2.0)

    def test_duration_from_cues(self, sample_cues):
        assert duration_from_cues(sample_cues) == pytest.approx(6.5)
        assert duration_from_cues([]) == 0.0
