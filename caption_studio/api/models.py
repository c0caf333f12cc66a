"""Provider response dataclasses.

WHY: Whisper, AssemblyAI, Gemini and the mock provider all return JSON
with different field names and time units. A typed ProviderResponse makes
the three shapes the normalizer understands explicit, and records the
time unit so millisecond providers are converted exactly once.

HOW: ProviderResponse holds optional ``words``, ``segments`` and ``text``
fields. Factory method from_dict() parses raw provider JSON, accepting
``word`` or ``text`` as the word text key.

RULES:
- words: list of {"text", "start", "end"} dicts (provider units)
- segments: list of {"text", "start", "end"} dicts (provider units)
- text: full untimed transcript, used only when neither list is present
- time_unit is "s" or "ms"; the normalizer divides ms values by 1000
- provider names the adapter that produced the response (for logging)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

TIME_UNITS = ("s", "ms")


@dataclass
class ProviderResponse:
    """One transcription result in any of the three supported shapes.

    RULES:
    - At most one of words/segments is used: words take priority
    - text is informational when words or segments are present
    - mock is True for canned responses (surfaced to API clients)
    """

    words: Optional[List[Dict[str, Any]]] = None
    segments: Optional[List[Dict[str, Any]]] = None
    text: Optional[str] = None
    time_unit: str = "s"
    provider: str = "unknown"
    mock: bool = False

    def __post_init__(self) -> None:
        if self.time_unit not in TIME_UNITS:
            raise ValueError(
                "time_unit must be one of {}, got '{}'".format(TIME_UNITS, self.time_unit)
            )

    @property
    def shape(self) -> Optional[str]:
        """Return "words", "segments", "text", or None when nothing usable is present."""
        if self.words:
            return "words"
        if self.segments:
            return "segments"
        if self.text and self.text.strip():
            return "text"
        return None

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        time_unit: str = "s",
        provider: str = "unknown",
    ) -> ProviderResponse:
        """Parse a raw provider JSON dict.

        RULES:
        - Word items may use "word" (Whisper) or "text" (AssemblyAI) keys
        - Non-list words/segments values are ignored
        - A "mock" key in the payload is carried through
        """
        words = data.get("words")
        segments = data.get("segments")
        text = data.get("text")
        return cls(
            words=[_word_item(w) for w in words] if isinstance(words, list) else None,
            segments=list(segments) if isinstance(segments, list) else None,
            text=text if isinstance(text, str) else None,
            time_unit=data.get("time_unit", time_unit),
            provider=data.get("provider", provider),
            mock=bool(data.get("mock", False)),
        )


def _word_item(item: Any) -> Dict[str, Any]:
    if not isinstance(item, dict):
        return {}
    text = item.get("word", item.get("text", ""))
    return {"text": text, "start": item.get("start"), "end": item.get("end")}
