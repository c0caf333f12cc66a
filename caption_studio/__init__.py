"""Caption Studio — timed captions and subtitle export for uploaded video.

WHY: Speech-to-text providers return transcripts at different
granularities (word timestamps, sentence segments, bare text). Video
captions need short, non-overlapping cues, a way to find the cue on
screen at any playback time, and SRT/WebVTT files for other tools.

HOW: Three-stage pipeline — transcribe (provider adapters), segment
(core normalizer + segmenter), and use (timeline cursor for playback,
editor for manual fixes, formatters for export). Each stage is
independently testable.

RULES:
- All stages exchange the same Cue list
- Adding a new subtitle format = one new formatter module, no core changes
- Adding a new provider = one new adapter module, no core changes
"""

__version__ = "0.1.0"
