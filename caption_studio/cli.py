"""Command-line interface for Caption Studio.

WHY: Users need a simple way to caption a video from the terminal. The
CLI wires together the full pipeline — file validation, provider
transcription, segmentation into cues, subtitle export, and file saving —
behind a single command. It also converts existing subtitle files
between SRT and WebVTT without calling any provider.

HOW: Uses argparse to accept an input file, provider choice, output
format selection, segmentation limit, and output directory. Runs the
async pipeline via asyncio.run(). Status messages go to stderr; output
files are saved next to the source (or to --output-dir).

RULES:
- Positional argument: input media file, or an .srt/.vtt file to convert
- Validates media extension against SUPPORTED_VIDEO_FORMATS before any API call
- --formats: comma-separated formatter keys (default: srt,vtt)
- Output naming: {stem}{suffix}, numeric suffix for conflicts (clip-2.srt)
- Status output goes to stderr (not stdout)
- Exit codes: 0 success, 1 error, 130 cancelled
"""

from __future__ import annotations

import argparse
import asyncio
import mimetypes
import sys
from pathlib import Path
from typing import List, Optional

from caption_studio.api import PROVIDERS, create_provider
from caption_studio.config import (
    DEFAULT_PROVIDER,
    MAX_UPLOAD_BYTES,
    MAX_WORDS_PER_CUE,
    SUPPORTED_VIDEO_FORMATS,
)
from caption_studio.core.errors import CaptionError
from caption_studio.core.ir import Cue
from caption_studio.core.pipeline import CaptionPipeline
from caption_studio.formatters import FORMATTERS, export, parse
from caption_studio.formatters.base import FormatterOutput


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _resolve_output_path(stem: str, suffix: str, output_dir: Path) -> Path:
    """Resolve the output file path, adding numeric suffix on conflict.

    RULES:
    - First attempt: {stem}{suffix} (e.g. clip.srt)
    - Conflict: counter inserted before the extension (clip-2.srt)
    - Counter starts at 2 and increments
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    counter = 2
    while True:
        candidate = output_dir / "{}-{}{}".format(stem, counter, suffix)
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(output: FormatterOutput, stem: str, output_dir: Path) -> Path:
    path = _resolve_output_path(stem, output.suffix, output_dir)
    path.write_text(output.content, encoding="utf-8")
    return path


def _write_all(cues: List[Cue], format_keys: List[str], stem: str, output_dir: Path) -> List[Path]:
    saved: List[Path] = []
    for key in format_keys:
        path = _save_output(export(cues, key), stem, output_dir)
        saved.append(path)
        _status("  Saved: {}".format(path.name))
    return saved


def _parse_format_keys(raw: Optional[str]) -> List[str]:
    if not raw:
        return list(FORMATTERS.keys())
    keys = [f.strip().lower() for f in raw.split(",") if f.strip()]
    for key in keys:
        if key not in FORMATTERS:
            _fail("Unknown format '{}'. Available formats: {}".format(
                key, ", ".join(sorted(FORMATTERS.keys()))
            ))
    return keys


async def _generate_cues(args: argparse.Namespace, input_path: Path) -> List[Cue]:
    media = input_path.read_bytes()
    if len(media) > MAX_UPLOAD_BYTES:
        _fail("File is larger than {} MB".format(MAX_UPLOAD_BYTES // (1024 * 1024)))

    provider = create_provider(args.provider)
    pipeline = CaptionPipeline(provider, max_words=args.max_words)
    content_type = mimetypes.guess_type(input_path.name)[0] or "application/octet-stream"

    _status("Transcribing {} with {}...".format(input_path.name, pipeline.provider_name))
    result = await pipeline.generate(
        media,
        filename=input_path.name,
        content_type=content_type,
        duration_s=args.duration,
    )
    if result.placeholder:
        _status("  Transcript was empty; wrote placeholder captions.")
    elif result.mock:
        _status("  Using mock captions.")
    _status("  {} captions".format(len(result.cues)))
    return result.cues


def _run(args: argparse.Namespace) -> None:
    input_path = Path(args.input_file).resolve()
    if not input_path.is_file():
        _fail("File not found: {}".format(input_path))

    output_dir = Path(args.output_dir).resolve() if args.output_dir else input_path.parent
    if not output_dir.is_dir():
        _fail("Output directory does not exist: {}".format(output_dir))

    format_keys = _parse_format_keys(args.formats)
    ext = input_path.suffix.lower()

    try:
        if ext.lstrip(".") in FORMATTERS:
            # Do not overwrite the source with its own format
            format_keys = [k for k in format_keys if k != ext.lstrip(".")]
            if not format_keys:
                _fail("Nothing to convert: {} is already {}".format(
                    input_path.name, ext.lstrip(".").upper()
                ))
                return
            _status("Converting {}...".format(input_path.name))
            cues = parse(input_path.read_text(encoding="utf-8"), ext)
        elif ext in SUPPORTED_VIDEO_FORMATS:
            cues = asyncio.run(_generate_cues(args, input_path))
        else:
            _fail("Unsupported file type '{}'. Supported formats: {}".format(
                ext, ", ".join(sorted(SUPPORTED_VIDEO_FORMATS | {".srt", ".vtt"}))
            ))
            return
    except (CaptionError, ValueError, TimeoutError) as e:
        _fail(str(e))
        return

    saved = _write_all(cues, format_keys, input_path.stem, output_dir)
    _status("")
    _status("Done! Saved {} file(s) to {}".format(len(saved), output_dir))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable — tests can inspect the parser without running the pipeline.
    """
    parser = argparse.ArgumentParser(
        prog="caption_studio",
        description="Generate timed captions for a video and export SRT/WebVTT subtitles.",
    )

    parser.add_argument(
        "input_file",
        help="Video/audio file to caption, or an .srt/.vtt file to convert.",
    )

    parser.add_argument(
        "--provider",
        choices=sorted(PROVIDERS.keys()),
        default=DEFAULT_PROVIDER,
        help="Transcription provider (default: %(default)s).",
    )

    parser.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of subtitle formats. "
             "Available: {}. Default: all.".format(", ".join(sorted(FORMATTERS.keys()))),
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save subtitle files (default: same as input file).",
    )

    parser.add_argument(
        "--max-words",
        type=int,
        default=MAX_WORDS_PER_CUE,
        help="Maximum words per caption (default: %(default)s).",
    )

    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Media duration in seconds, used when the provider returns untimed text. "
             "Estimated from file size when omitted.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.max_words < 1:
        parser.error("--max-words must be at least 1")
    try:
        _run(args)
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)


if __name__ == "__main__":
    main()
