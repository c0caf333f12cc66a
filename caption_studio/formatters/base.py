"""Abstract base formatter and output container.

WHY: Every subtitle format consumes the same cue list but produces
different file content. This base class enforces a consistent interface
so the CLI and API layers can export to any format generically.

HOW: BaseFormatter is an ABC with three requirements — a ``name``
property, a ``format()`` method, and a ``parse()`` method for reading a
file back into cues. FormatterOutput is a plain dataclass that bundles a
file suffix with its content and MIME type.

RULES:
- Subclasses MUST implement ``name``, ``format()`` and ``parse()``
- ``format()`` is pure and total: any valid cue list, including []
- ``suffix`` starts with a dot, e.g. ``".srt"``
- The caller is responsible for prepending the source filename stem
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from caption_studio.core.ir import Cue


@dataclass
class FormatterOutput:
    """One subtitle file produced by a formatter.

    Attributes:
        suffix: File suffix appended to the source stem,
                e.g. ``".vtt"`` → ``"interview.vtt"``.
        content: The file content.
        media_type: MIME type for the content, e.g. ``"text/vtt"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all subtitle formatters.

    To add a new subtitle format:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement name, format() and parse()
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    suffix = ""
    media_type = "text/plain"

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'SubRip (SRT)'."""

    @abstractmethod
    def render(self, cues: List[Cue]) -> str:
        """Serialize cues to the format's text."""

    @abstractmethod
    def parse(self, content: str) -> List[Cue]:
        """Parse the format's text back into cues (without per-word timing)."""

    def format(self, cues: List[Cue]) -> FormatterOutput:
        """Render cues and wrap them with this format's suffix and MIME type."""
        return FormatterOutput(
            suffix=self.suffix,
            content=self.render(cues),
            media_type=self.media_type,
        )
