"""Tests for manual caption editing.

WHY: Edits come straight from a user's form fields. Each operation must
return a new list, leave the input untouched, and reject timings that
would produce a cue ending at or before its start.
"""

from __future__ import annotations

import pytest

from caption_studio.core import editor
from caption_studio.core.errors import InvalidTiming
from caption_studio.core.ir import Cue, Word


class TestInsert:
    def test_append_starts_at_previous_end(self, sample_cues):
        updated = editor.insert(sample_cues)
        assert len(updated) == 4
        assert updated[-1].start == pytest.approx(6.5)
        assert updated[-1].end == pytest.approx(9.5)
        assert updated[-1].text == "New caption"
        assert updated[-1].words == []

    def test_insert_into_empty_list_starts_at_zero(self):
        updated = editor.insert([])
        assert (updated[0].start, updated[0].end) == (0.0, 3.0)

    def test_insert_after_index(self, sample_cues):
        updated = editor.insert(sample_cues, after_index=0, text="Beech mein")
        assert updated[1].text == "Beech mein"
        assert updated[1].start == pytest.approx(3.0)

    def test_insert_at_front(self, sample_cues):
        updated = editor.insert(sample_cues, after_index=-1)
        assert updated[0].start == 0.0
        assert updated[1] is sample_cues[0]

    def test_insert_explicit_cue(self, sample_cues):
        cue = Cue(text="Gap filler", start=4.0, end=5.0)
        updated = editor.insert(sample_cues, after_index=1, new_cue=cue)
        assert updated[2] is cue
        assert editor.is_valid(updated)

    def test_explicit_cue_with_bad_span_rejected(self, sample_cues):
        with pytest.raises(InvalidTiming):
            editor.insert(sample_cues, new_cue=Cue(text="x", start=9.0, end=9.0))

    def test_index_out_of_range(self, sample_cues):
        with pytest.raises(IndexError):
            editor.insert(sample_cues, after_index=3)

    def test_input_not_mutated(self, sample_cues):
        before = list(sample_cues)
        editor.insert(sample_cues)
        assert sample_cues == before


class TestDelete:
    def test_delete_keeps_order(self, sample_cues):
        updated = editor.delete(sample_cues, 1)
        assert [c.text for c in updated] == ["a b c", "Phir milenge"]
        assert len(sample_cues) == 3

    def test_delete_bad_index(self, sample_cues):
        with pytest.raises(IndexError):
            editor.delete(sample_cues, 5)


class TestRetime:
    def test_set_end(self, sample_cues):
        updated = editor.retime(sample_cues, 1, "end", 4.5)
        assert updated[1].end == pytest.approx(4.5)
        assert sample_cues[1].end == pytest.approx(4.0)

    def test_string_value_is_parsed(self, sample_cues):
        updated = editor.retime(sample_cues, 2, "start", "5.25")
        assert updated[2].start == pytest.approx(5.25)

    def test_junk_value_becomes_zero(self, sample_cues):
        updated = editor.retime(sample_cues, 0, "start", "abc")
        assert updated[0].start == 0.0

    def test_nan_becomes_zero(self, sample_cues):
        updated = editor.retime(sample_cues, 0, "start", float("nan"))
        assert updated[0].start == 0.0

    def test_end_not_after_start_rejected(self, sample_cues):
        with pytest.raises(InvalidTiming):
            editor.retime(sample_cues, 1, "end", 3.0)
        assert sample_cues[1].end == pytest.approx(4.0)

    def test_start_past_end_rejected(self, sample_cues):
        with pytest.raises(InvalidTiming) as excinfo:
            editor.retime(sample_cues, 0, "start", 3.5)
        assert "Caption 1" in str(excinfo.value)

    def test_unknown_field_rejected(self, sample_cues):
        with pytest.raises(ValueError):
            editor.retime(sample_cues, 0, "duration", 2.0)

    def test_retime_clears_word_timing(self):
        cues = [Cue.from_words([Word("ek", 0.0, 0.5), Word("do", 0.6, 1.0)])]
        assert editor.retime(cues, 0, "end", 2.0)[0].words == []

    def test_retime_span_moves_both_times(self, sample_cues):
        updated = editor.retime_span(sample_cues, 1, 10.0, 11.0)
        assert (updated[1].start, updated[1].end) == (10.0, 11.0)


class TestSetText:
    def test_set_text(self, sample_cues):
        updated = editor.set_text(sample_cues, 1, "Namaskar")
        assert updated[1].text == "Namaskar"
        assert sample_cues[1].text == "Namaste"


class TestValidate:
    def test_clean_list(self, sample_cues):
        assert editor.validate(sample_cues) == []

    def test_overlap_reported(self):
        cues = [Cue(text="a", start=0.0, end=2.0), Cue(text="b", start=1.5, end=3.0)]
        problems = editor.validate(cues)
        assert len(problems) == 1
        assert problems[0].startswith("Caption 2")

    def test_bad_span_reported(self):
        problems = editor.validate([Cue(text="a", start=2.0, end=1.0)])
        assert "not after start" in problems[0]

    def test_check_spans(self, sample_cues):
        assert editor.check_spans(sample_cues) is sample_cues
        with pytest.raises(InvalidTiming):
            editor.check_spans([Cue(text="a", start=1.0, end=1.0)])
