"""Tests for SRT and WebVTT export and import.

WHY: Subtitle files leave the system and are read by other tools, so
the exact text matters: block numbering, timestamp formatting (comma vs
dot), the WEBVTT header, and the blank line after every block. Parsing
must read back what we write and tolerate common variations.
"""

from __future__ import annotations

import pytest

from caption_studio.core.errors import SubtitleParseError, UnsupportedExportFormat
from caption_studio.core.ir import Cue
from caption_studio.formatters import (
    FORMATTERS,
    export,
    get_formatter,
    parse,
    parse_srt,
    parse_vtt,
    to_srt,
    to_vtt,
)
from caption_studio.formatters.timecodes import format_timestamp, parse_timestamp


class TestTimestamps:
    def test_srt_separator(self):
        assert format_timestamp(1.5) == "00:00:01,500"

    def test_vtt_separator(self):
        assert format_timestamp(3.25, ".") == "00:00:03.250"

    def test_hours_and_minutes(self):
        assert format_timestamp(3723.004) == "01:02:03,004"

    def test_rounding_carries_into_seconds(self):
        assert format_timestamp(59.9996) == "00:01:00,000"

    def test_parse_both_separators(self):
        assert parse_timestamp("00:00:01,500") == pytest.approx(1.5)
        assert parse_timestamp("01:02:03.004") == pytest.approx(3723.004)

    def test_parse_vtt_short_form(self):
        assert parse_timestamp("02:03.500") == pytest.approx(123.5)

    def test_parse_garbage_rejected(self):
        with pytest.raises(SubtitleParseError):
            parse_timestamp("1.5 seconds")


class TestSRT:
    def test_single_cue_exact_text(self):
        assert to_srt([Cue(text="Hi", start=1.5, end=3.25)]) == (
            "1\n00:00:01,500 --> 00:00:03,250\nHi\n\n"
        )

    def test_numbering_starts_at_one(self, sample_cues):
        blocks = to_srt(sample_cues).strip().split("\n\n")
        assert [b.split("\n")[0] for b in blocks] == ["1", "2", "3"]

    def test_empty_list_gives_empty_file(self):
        assert to_srt([]) == ""

    def test_round_trip(self, sample_cues):
        parsed = parse_srt(to_srt(sample_cues))
        assert [c.text for c in parsed] == [c.text for c in sample_cues]
        assert [c.start for c in parsed] == pytest.approx([c.start for c in sample_cues])
        assert [c.end for c in parsed] == pytest.approx([c.end for c in sample_cues])

    def test_parse_crlf_and_bom(self):
        content = "\ufeff1\r\n00:00:00,000 --> 00:00:01,000\r\nPehla\r\n\r\n"
        cues = parse_srt(content)
        assert len(cues) == 1
        assert cues[0].text == "Pehla"

    def test_parse_multiline_text(self):
        content = "1\n00:00:00,000 --> 00:00:02,000\nline one\nline two\n\n"
        assert parse_srt(content)[0].text == "line one\nline two"

    def test_parse_block_without_timing_rejected(self):
        with pytest.raises(SubtitleParseError):
            parse_srt("1\nno timing line\n\n")

    def test_parse_bad_timestamp_rejected(self):
        with pytest.raises(SubtitleParseError):
            parse_srt("1\n00:00:xx,000 --> 00:00:01,000\nKuch bhi\n\n")

    def test_empty_file_round_trip(self):
        assert parse_srt(to_srt([])) == []


class TestWebVTT:
    def test_header_and_dot_separator(self):
        out = to_vtt([Cue(text="Hi", start=1.5, end=3.25)])
        assert out == "WEBVTT\n\n1\n00:00:01.500 --> 00:00:03.250\nHi\n\n"

    def test_empty_list_is_header_only(self):
        assert to_vtt([]) == "WEBVTT\n\n"

    def test_round_trip(self, sample_cues):
        parsed = parse_vtt(to_vtt(sample_cues))
        assert [c.text for c in parsed] == [c.text for c in sample_cues]
        assert [c.end for c in parsed] == pytest.approx([c.end for c in sample_cues])

    def test_parse_ignores_cue_settings_and_notes(self):
        content = (
            "WEBVTT\n\n"
            "NOTE written by hand\n\n"
            "00:00:01.000 --> 00:00:02.000 align:start position:10%\n"
            "Settings ignored\n\n"
        )
        cues = parse_vtt(content)
        assert len(cues) == 1
        assert cues[0].end == pytest.approx(2.0)
        assert cues[0].text == "Settings ignored"

    def test_empty_file_round_trip(self):
        assert parse_vtt(to_vtt([])) == []

    def test_missing_header_rejected(self):
        with pytest.raises(SubtitleParseError):
            parse_vtt("00:00:01.000 --> 00:00:02.000\nNo header\n\n")


class TestRegistry:
    def test_registered_formats(self):
        assert sorted(FORMATTERS) == ["srt", "vtt"]

    def test_export_returns_suffix_and_media_type(self, sample_cues):
        output = export(sample_cues, "vtt")
        assert output.suffix == ".vtt"
        assert output.media_type == "text/vtt"
        assert output.content.startswith("WEBVTT")

    def test_lookup_is_case_insensitive_and_accepts_dot(self):
        assert get_formatter(".SRT").suffix == ".srt"

    def test_unsupported_format_rejected(self, sample_cues):
        with pytest.raises(UnsupportedExportFormat) as excinfo:
            export(sample_cues, "ass")
        assert "srt, vtt" in str(excinfo.value)

    def test_parse_via_registry(self):
        cues = parse("1\n00:00:00,000 --> 00:00:01,000\nx\n\n", "srt")
        assert cues[0].text == "x"
