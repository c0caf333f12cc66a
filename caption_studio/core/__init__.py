"""Core caption modules: IR, normalization, segmentation, timeline, editing.

WHY: The core package holds the only parts of the system with real
invariants — turning transcripts into non-overlapping cues, resolving
the active cue during playback, and editing cue lists safely. These are
consumed by the formatters, CLI and server.

HOW: ir.py defines the data structures, normalizer.py converts provider
responses into words, segmenter.py groups words into cues, timeline.py
answers playback queries, editor.py edits cue lists, and pipeline.py
wires a provider through normalization and segmentation.

RULES:
- Everything except pipeline.py is synchronous and free of I/O
- IR dataclasses are the contract — change with care
- Errors are the typed classes in errors.py
"""
