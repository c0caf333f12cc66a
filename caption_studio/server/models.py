"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation. Pydantic
models enforce field types at runtime and generate JSON Schema that
appears in the /docs UI.

HOW: Cues travel as CueModel (with optional WordModel timing) and are
converted to and from the core IR at the endpoint boundary. Each
endpoint pair (request + response) has its own model. Subtitle
format keys and caption styles are plain strings checked by the core, so
unknown values get the same errors as the CLI.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Format keys and style values match internal constants exactly
- Response models never expose internal implementation details
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from caption_studio.config import DEFAULT_INSERT_TEXT
from caption_studio.core.ir import Cue, Word


# ---------------------------------------------------------------------------
# Cue payloads
# ---------------------------------------------------------------------------


class WordModel(BaseModel):
    """A single word with timing in seconds."""

    text: str = Field(description="Word text.")
    start: float = Field(ge=0, description="Start time in seconds.")
    end: float = Field(ge=0, description="End time in seconds.")


class CueModel(BaseModel):
    """A single timed caption.

    RULES:
    - start/end are seconds; end > start is checked by the endpoints so
      a bad edit yields a readable 422 naming the caption
    - words is optional; edited and imported cues carry none
    """

    start: float = Field(description="Start time in seconds.")
    end: float = Field(description="End time in seconds.")
    text: str = Field(description="Caption text shown on screen.")
    words: List[WordModel] = Field(
        default_factory=list,
        description="Per-word timing, when the provider supplied it.",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "start": 1.5,
                "end": 3.25,
                "text": "Namaste doston",
                "words": [
                    {"text": "Namaste", "start": 1.5, "end": 2.2},
                    {"text": "doston", "start": 2.3, "end": 3.25},
                ],
            }
        ]
    }}

    @classmethod
    def from_cue(cls, cue: Cue) -> "CueModel":
        return cls(
            start=cue.start,
            end=cue.end,
            text=cue.text,
            words=[WordModel(text=w.text, start=w.start, end=w.end) for w in cue.words],
        )

    def to_cue(self) -> Cue:
        return Cue(
            text=self.text,
            start=self.start,
            end=self.end,
            words=[Word(text=w.text, start=w.start, end=w.end) for w in self.words],
        )


def cues_to_models(cues: List[Cue]) -> List[CueModel]:
    return [CueModel.from_cue(cue) for cue in cues]


def models_to_cues(models: List[CueModel]) -> List[Cue]:
    return [m.to_cue() for m in models]


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class CueListRequest(BaseModel):
    """An edited cue list submitted to replace a job's cues."""

    cues: List[CueModel] = Field(description="Complete, time-ordered cue list.")


class InsertCueRequest(BaseModel):
    """Add one cue to a job's list.

    RULES:
    - after_index None appends, -1 inserts at the front
    - without cue, a 3-second cue starting at the previous cue's end is added
    """

    after_index: Optional[int] = Field(default=None, description="Insert after this index.")
    cue: Optional[CueModel] = Field(default=None, description="Explicit cue to insert.")
    text: str = Field(default=DEFAULT_INSERT_TEXT, description="Text for a default cue.")


class UpdateCueRequest(BaseModel):
    """Change one cue's timing and/or text.

    RULES:
    - Time values are coerced like a form field; non-numeric becomes 0
    - The result must keep end > start, otherwise 422 and no change
    """

    start: Optional[Union[float, str]] = Field(default=None, description="New start (seconds).")
    end: Optional[Union[float, str]] = Field(default=None, description="New end (seconds).")
    text: Optional[str] = Field(default=None, description="New caption text.")


class ExportRequest(BaseModel):
    """Stateless export: serialize the given cues as a subtitle file.

    RULES:
    - format is checked by the formatter registry, so unknown values
      yield 400 with the list of available formats (not a 422)
    """

    cues: List[CueModel] = Field(description="Cues to export.")
    format: str = Field(default="srt", description="Subtitle format key: 'srt' or 'vtt'.")
    filename: Optional[str] = Field(
        default=None,
        description="Download filename stem (default: 'captions').",
    )


class RenderRequest(BaseModel):
    """Inputs for preparing a client-side video render.

    RULES:
    - video_url, captions and caption_style are required; a missing one
      is reported as 400 "Missing required parameters"
    - duration defaults to 30 seconds when omitted or zero
    """

    video_url: Optional[str] = Field(default=None, description="URL of the source video.")
    captions: Optional[List[CueModel]] = Field(default=None, description="Cues to burn in.")
    caption_style: Optional[str] = Field(
        default=None,
        description="Caption style: 'bottom', 'top' or 'karaoke'.",
    )
    duration: Optional[float] = Field(default=None, description="Video duration in seconds.")


class FrameRequest(BaseModel):
    """Playback lookup: which caption shows at a given time."""

    cues: List[CueModel] = Field(description="Sorted, non-overlapping cue list.")
    time: Optional[float] = Field(default=None, description="Playback time in seconds.")
    frame: Optional[int] = Field(
        default=None,
        ge=0,
        description="Frame number at 30 fps; used when time is omitted.",
    )
    style: str = Field(default="bottom", description="Caption style; unknown values draw as bottom.")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class JobResponse(BaseModel):
    """Caption job status response.

    RULES:
    - cues is only populated when status is 'completed'
    - fallback_cues is only populated when the provider was unreachable
    - error is only set when status is 'failed'
    """

    id: str = Field(description="Unique job identifier (UUID).")
    status: str = Field(description="Current job status.")
    filename: str = Field(description="Original uploaded filename.")
    provider: str = Field(description="Transcription provider used for this job.")
    created_at: float = Field(description="Job creation timestamp (Unix epoch seconds).")
    cues: List[CueModel] = Field(default_factory=list, description="Generated or edited cues.")
    fallback_cues: List[CueModel] = Field(
        default_factory=list,
        description="Placeholder cues offered when the provider could not be reached.",
    )
    transcript_text: Optional[str] = Field(default=None, description="Full transcript text.")
    mock: bool = Field(default=False, description="True when the cues come from the mock provider.")
    placeholder: bool = Field(
        default=False,
        description="True when the transcript was empty and placeholder cues were used.",
    )
    error: Optional[str] = Field(
        default=None,
        description="Error message, only present when status is 'failed'.",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "id": "550e8400e29b41d4a716446655440000",
                "status": "completed",
                "filename": "vlog.mp4",
                "provider": "whisper",
                "created_at": 1739959200.0,
                "cues": [{"start": 0.0, "end": 2.5, "text": "Hello doston kaise ho", "words": []}],
                "fallback_cues": [],
                "transcript_text": "Hello doston kaise ho",
                "mock": False,
                "placeholder": False,
                "error": None,
            }
        ]
    }}


class JobCreatedResponse(BaseModel):
    """Response returned when a new caption job is submitted."""

    id: str = Field(description="Unique job identifier (UUID) for polling status.")
    status: str = Field(description="Initial job status (always 'pending').")
    filename: str = Field(description="Original uploaded filename.")
    provider: str = Field(description="Transcription provider that will run.")


class ValidationResponse(BaseModel):
    """Result of replacing a job's cues."""

    id: str = Field(description="The job ID the cues belong to.")
    cues: List[CueModel] = Field(description="The stored cue list.")
    problems: List[str] = Field(
        default_factory=list,
        description="Ordering or overlap warnings; empty when the list is clean.",
    )


class RenderConfig(BaseModel):
    """Composition settings for a client-side render."""

    composition_id: str = Field(description="Video composition identifier.")
    input_props: Dict[str, Any] = Field(description="Props passed to the composition.")
    fps: int = Field(description="Frames per second.")
    duration_in_frames: int = Field(description="ceil(duration * fps).")


class RenderResponse(BaseModel):
    success: bool = Field(description="Always true when a config is returned.")
    message: str = Field(description="Human-readable status.")
    render_config: RenderConfig = Field(description="Composition settings.")


class FrameResponse(BaseModel):
    """What to draw at the requested playback time.

    RULES:
    - active is False (and the other fields empty) in gaps between cues
    - active_word_index is only set for the karaoke style
    """

    time: float = Field(description="Resolved playback time in seconds.")
    active: bool = Field(description="Whether a caption is on screen.")
    cue_index: Optional[int] = Field(default=None, description="Index of the active cue.")
    text: Optional[str] = Field(default=None, description="Caption text.")
    style: Optional[str] = Field(default=None, description="Resolved caption style.")
    start: Optional[float] = Field(default=None, description="Active cue start (seconds).")
    end: Optional[float] = Field(default=None, description="Active cue end (seconds).")
    words: List[str] = Field(default_factory=list, description="Display words of the cue.")
    active_word_index: Optional[int] = Field(
        default=None,
        description="Highlighted word (karaoke only).",
    )
    word_states: List[str] = Field(
        default_factory=list,
        description="'past', 'active' or 'pending' per display word (karaoke only).",
    )


class FormatInfo(BaseModel):
    """Description of an available subtitle format."""

    key: str = Field(description="Format identifier used in API requests.")
    name: str = Field(description="Human-readable format name.")
    suffix: str = Field(description="File suffix produced (e.g. '.srt').")
    media_type: str = Field(description="MIME type of the file content.")


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is always a human-readable error message
    """

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
    provider: str = Field(description="Default transcription provider.")
    mock: bool = Field(description="Whether mock captions are forced by configuration.")
