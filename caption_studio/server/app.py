"""FastAPI application with caption API routes and OpenAPI docs.

WHY: The browser editor (and curl, n8n, future tools) needs an HTTP API
to upload a video for captioning, poll for cues, edit them, export
SRT/WebVTT, and ask which caption to draw at a playback time. FastAPI
provides automatic OpenAPI documentation, request validation, and
background task support.

HOW: A single FastAPI app exposes endpoints grouped by tags. POST
/captions accepts a multipart video upload, builds the requested
provider, creates a job, and runs the caption pipeline in the
background. Job endpoints poll, edit cues, export, and delete. The
stateless endpoints (/export, /render, /frame) work on cues sent in the
request body.

RULES:
- All endpoints have OpenAPI descriptions on every parameter and response
- Error responses use a consistent ErrorResponse schema
- Background captioning uses FastAPI BackgroundTasks
- The job store is a singleton created at import time
- Uploads are validated by extension and size before a job is created
- Cue edits go through the pure editor functions under the store lock
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import asyncio
import logging
import math
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated, Callable, List, Optional

from fastapi import BackgroundTasks, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from caption_studio import __version__
from caption_studio.api import PROVIDERS, create_provider
from caption_studio.api.base import TranscriptionProvider
from caption_studio.config import (
    DEFAULT_PROVIDER,
    DEFAULT_RENDER_DURATION_S,
    MAX_UPLOAD_BYTES,
    MAX_WORDS_PER_CUE,
    RENDER_COMPOSITION_ID,
    RENDER_FPS,
    SUPPORTED_VIDEO_FORMATS,
    USE_MOCK_CAPTIONS,
)
from caption_studio.core import editor
from caption_studio.core.errors import (
    InvalidTiming,
    ProviderAPIError,
    ProviderUnavailable,
    UnsupportedExportFormat,
)
from caption_studio.core.ir import CaptionStyle, Cue, fallback_cues
from caption_studio.core.pipeline import CaptionPipeline
from caption_studio.core.timeline import (
    active_cue_index,
    frame_to_seconds,
    render_frame,
    word_states,
)
from caption_studio.formatters import FORMATTERS, export
from caption_studio.server.jobs import Job, JobNotReady, JobStatus, JobStore
from caption_studio.server.models import (
    CueListRequest,
    ErrorResponse,
    ExportRequest,
    FormatInfo,
    FrameRequest,
    FrameResponse,
    HealthResponse,
    InsertCueRequest,
    JobCreatedResponse,
    JobResponse,
    RenderConfig,
    RenderRequest,
    RenderResponse,
    UpdateCueRequest,
    ValidationResponse,
    cues_to_models,
    models_to_cues,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and store setup
# ---------------------------------------------------------------------------

job_store = JobStore()


async def _periodic_cleanup() -> None:
    """Run job cleanup every 5 minutes."""
    while True:
        await asyncio.sleep(300)
        job_store.cleanup_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start periodic cleanup on startup; cancel it and drop jobs on shutdown."""
    task = asyncio.create_task(_periodic_cleanup())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
    job_store.clear()


app = FastAPI(
    lifespan=lifespan,
    title="Caption Studio API",
    description=(
        "REST API for generating timed captions from uploaded video "
        "(Whisper, AssemblyAI, Gemini or mock), editing them, previewing "
        "karaoke/bottom/top styles frame by frame, and exporting SRT or "
        "WebVTT subtitles. Submit a video, poll for cues, then edit and export."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _job_to_response(job: Job) -> JobResponse:
    """Convert an internal Job dataclass to a JobResponse Pydantic model."""
    return JobResponse(
        id=job.id,
        status=job.status.value,
        filename=job.filename,
        provider=job.provider,
        created_at=job.created_at,
        cues=cues_to_models(job.cues),
        fallback_cues=cues_to_models(job.fallback_cues),
        transcript_text=job.transcript_text,
        mock=job.mock,
        placeholder=job.placeholder,
        error=job.error,
    )


def _validate_file_extension(filename: str) -> None:
    """Raise HTTPException if the file extension is not supported."""
    ext = Path(filename).suffix.lower()
    if ext not in SUPPORTED_VIDEO_FORMATS:
        raise HTTPException(
            status_code=400,
            detail="Unsupported file type '{}'. Supported formats: {}".format(
                ext, ", ".join(sorted(SUPPORTED_VIDEO_FORMATS))
            ),
        )


def _get_job_or_404(job_id: str) -> Job:
    job = job_store.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found: {}".format(job_id))
    return job


def _edit_job_cues(job_id: str, edit: Callable[[List[Cue]], List[Cue]]) -> Job:
    """Apply an editor function to a job's cues, mapping errors to HTTP codes.

    RULES:
    - 404 unknown job or cue index, 409 job not completed
    - 422 when the edit would leave a cue with end <= start
    - On any error the stored cues are unchanged
    """
    try:
        job = job_store.edit_cues(job_id, edit)
    except JobNotReady as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except InvalidTiming as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except IndexError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found: {}".format(job_id))
    return job


def _subtitle_response(cues: List[Cue], fmt: str, stem: str) -> Response:
    try:
        output = export(cues, fmt)
    except UnsupportedExportFormat as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    filename = "{}{}".format(stem, output.suffix)
    return Response(
        content=output.content,
        media_type=output.media_type,
        headers={"Content-Disposition": 'attachment; filename="{}"'.format(filename)},
    )


def _describe_api_error(exc: ProviderAPIError) -> str:
    """Turn a provider's HTTP error into the message shown to the user."""
    if exc.status_code in (401, 403):
        return "Invalid API key: your {} API key is invalid or expired.".format(exc.provider)
    if exc.status_code == 429:
        return "Rate limit exceeded: {} API rate limit reached. Please try again later.".format(
            exc.provider
        )
    return "{} API error: {}".format(exc.provider, exc.message)


async def _run_caption_pipeline(
    job_id: str,
    store: JobStore,
    provider: TranscriptionProvider,
    max_words: int = MAX_WORDS_PER_CUE,
) -> None:
    """Run the caption pipeline for a job.

    WHY: This is the background task that turns an uploaded file into
    cues: provider transcription → normalization → segmentation.

    HOW: Reads the uploaded file from the job's media_dir, runs the
    pipeline, and stores the cues on the job. Provider failures are
    translated into user-facing messages on the failed job.

    RULES:
    - Updates job status at each pipeline stage
    - ProviderUnavailable marks the job failed and attaches fallback cues
    - Any other exception marks the job failed with its message
    """
    job = store.get_job(job_id)
    if job is None:
        return

    try:
        store.update_job(job_id, status=JobStatus.TRANSCRIBING)
        media = job.media_path.read_bytes()

        pipeline = CaptionPipeline(provider, max_words=max_words)
        result = await pipeline.generate(
            media,
            filename=job.filename,
            content_type=job.content_type,
            duration_s=job.duration_s,
        )

        store.update_job(
            job_id,
            status=JobStatus.COMPLETED,
            cues=result.cues,
            transcript_text=result.transcript_text,
            placeholder=result.placeholder,
            mock=result.mock,
        )

    except ProviderUnavailable as exc:
        logger.error("Network error for job %s, offering fallback captions: %s", job_id, exc)
        store.update_job(
            job_id,
            status=JobStatus.FAILED,
            error="Network connection error to {}: {}".format(exc.provider, exc),
            fallback_cues=fallback_cues(),
            mock=True,
        )
    except ProviderAPIError as exc:
        logger.error("Provider error for job %s: %s", job_id, exc)
        store.update_job(job_id, status=JobStatus.FAILED, error=_describe_api_error(exc))
    except Exception as exc:
        logger.exception("Caption pipeline failed for job %s", job_id)
        store.update_job(job_id, status=JobStatus.FAILED, error=str(exc))


def _run_caption_sync(
    job_id: str,
    store: JobStore,
    provider: TranscriptionProvider,
    max_words: int = MAX_WORDS_PER_CUE,
) -> None:
    """Synchronous wrapper for the async caption pipeline.

    WHY: FastAPI BackgroundTasks run synchronous callables in a worker
    thread. This wraps the async pipeline with asyncio.run().
    """
    asyncio.run(_run_caption_pipeline(job_id, store, provider, max_words))


# ---------------------------------------------------------------------------
# Endpoints: Caption jobs
# ---------------------------------------------------------------------------


@app.post(
    "/captions",
    response_model=JobCreatedResponse,
    status_code=201,
    tags=["captions"],
    summary="Submit a video for captioning",
    description=(
        "Upload a video or audio file. Returns a job ID immediately; "
        "transcription and segmentation run in the background. "
        "Poll GET /captions/{id} for the cues."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Invalid file type, provider or settings"},
        413: {"model": ErrorResponse, "description": "File too large"},
        429: {"model": ErrorResponse, "description": "Too many concurrent jobs"},
        500: {"model": ErrorResponse, "description": "Provider API key not configured"},
    },
)
async def create_captions(
    background_tasks: BackgroundTasks,
    video: Annotated[
        UploadFile,
        File(description="Video or audio file to caption"),
    ],
    provider: Annotated[
        Optional[str],
        Form(description="Transcription provider: whisper, assemblyai, gemini or mock."),
    ] = None,
    duration: Annotated[
        Optional[float],
        Form(description="Media duration in seconds, used when the provider returns untimed text."),
    ] = None,
    max_words: Annotated[
        int,
        Form(description="Maximum words per caption."),
    ] = MAX_WORDS_PER_CUE,
) -> JobCreatedResponse:
    # Sanitize filename to prevent path traversal
    raw_filename = video.filename or "upload.mp4"
    filename = Path(raw_filename).name
    _validate_file_extension(filename)

    if max_words < 1:
        raise HTTPException(status_code=400, detail="max_words must be at least 1")

    provider_name = "mock" if USE_MOCK_CAPTIONS else (provider or DEFAULT_PROVIDER).strip().lower()
    if provider_name not in PROVIDERS:
        raise HTTPException(
            status_code=400,
            detail="Unknown provider '{}'. Available: {}".format(
                provider_name, ", ".join(sorted(PROVIDERS))
            ),
        )

    content = await video.read()
    if len(content) > MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail="File too large: {:.2f}MB exceeds the limit of {}MB".format(
                len(content) / 1024 / 1024, MAX_UPLOAD_BYTES // (1024 * 1024)
            ),
        )

    # Missing API keys surface here, before any job exists
    try:
        caption_provider = create_provider(provider_name)
    except ValueError as exc:
        raise HTTPException(status_code=500, detail=str(exc))

    try:
        job = job_store.create_job(
            filename=filename,
            provider=caption_provider.name,
            content_type=video.content_type or "application/octet-stream",
            duration_s=duration,
        )
    except ValueError as exc:
        raise HTTPException(status_code=429, detail=str(exc))

    job.media_path.write_bytes(content)

    background_tasks.add_task(_run_caption_sync, job.id, job_store, caption_provider, max_words)

    return JobCreatedResponse(
        id=job.id,
        status=job.status.value,
        filename=job.filename,
        provider=job.provider,
    )


@app.get(
    "/captions/{job_id}",
    response_model=JobResponse,
    tags=["captions"],
    summary="Get caption job status and cues",
    description=(
        "Poll this endpoint to track a caption job. Returns the cues once "
        "the job has completed, or the error (and fallback cues) if it failed."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Job not found"},
    },
)
async def get_captions(
    job_id: str,
) -> JobResponse:
    return _job_to_response(_get_job_or_404(job_id))


@app.put(
    "/captions/{job_id}/cues",
    response_model=ValidationResponse,
    tags=["editing"],
    summary="Replace a job's cues with an edited list",
    description=(
        "Store the cue list produced by the caption editor. Each cue must "
        "end after it starts; overlaps are accepted but reported in 'problems'."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Job not found"},
        409: {"model": ErrorResponse, "description": "Job not yet completed"},
        422: {"model": ErrorResponse, "description": "A cue ends before it starts"},
    },
)
async def replace_cues(
    job_id: str,
    body: CueListRequest,
) -> ValidationResponse:
    new_cues = models_to_cues(body.cues)
    job = _edit_job_cues(job_id, lambda _current: editor.check_spans(new_cues))
    return ValidationResponse(
        id=job.id,
        cues=cues_to_models(job.cues),
        problems=editor.validate(job.cues),
    )


@app.post(
    "/captions/{job_id}/cues",
    response_model=ValidationResponse,
    status_code=201,
    tags=["editing"],
    summary="Insert a cue",
    description=(
        "Add a cue after the given index (append when omitted, front when -1). "
        "Without an explicit cue, a 3-second cue starting where the previous "
        "caption ends is added."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Job or index not found"},
        409: {"model": ErrorResponse, "description": "Job not yet completed"},
        422: {"model": ErrorResponse, "description": "The cue ends before it starts"},
    },
)
async def insert_cue(
    job_id: str,
    body: InsertCueRequest,
) -> ValidationResponse:
    new_cue = body.cue.to_cue() if body.cue is not None else None
    job = _edit_job_cues(
        job_id,
        lambda cues: editor.insert(cues, after_index=body.after_index, new_cue=new_cue, text=body.text),
    )
    return ValidationResponse(
        id=job.id,
        cues=cues_to_models(job.cues),
        problems=editor.validate(job.cues),
    )


@app.patch(
    "/captions/{job_id}/cues/{index}",
    response_model=ValidationResponse,
    tags=["editing"],
    summary="Update one cue's timing or text",
    description=(
        "Change start, end and/or text of the cue at index. Times are coerced "
        "like form input (non-numeric becomes 0). Per-word timing is cleared."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Job or index not found"},
        409: {"model": ErrorResponse, "description": "Job not yet completed"},
        422: {"model": ErrorResponse, "description": "The cue would end before it starts"},
    },
)
async def update_cue(
    job_id: str,
    index: int,
    body: UpdateCueRequest,
) -> ValidationResponse:
    def apply(cues: List[Cue]) -> List[Cue]:
        if body.start is not None and body.end is not None:
            cues = editor.retime_span(cues, index, body.start, body.end)
        elif body.start is not None:
            cues = editor.retime(cues, index, "start", body.start)
        elif body.end is not None:
            cues = editor.retime(cues, index, "end", body.end)
        if body.text is not None:
            cues = editor.set_text(cues, index, body.text)
        return cues

    job = _edit_job_cues(job_id, apply)
    return ValidationResponse(
        id=job.id,
        cues=cues_to_models(job.cues),
        problems=editor.validate(job.cues),
    )


@app.delete(
    "/captions/{job_id}/cues/{index}",
    response_model=ValidationResponse,
    tags=["editing"],
    summary="Delete one cue",
    responses={
        404: {"model": ErrorResponse, "description": "Job or index not found"},
        409: {"model": ErrorResponse, "description": "Job not yet completed"},
    },
)
async def delete_cue(
    job_id: str,
    index: int,
) -> ValidationResponse:
    job = _edit_job_cues(job_id, lambda cues: editor.delete(cues, index))
    return ValidationResponse(
        id=job.id,
        cues=cues_to_models(job.cues),
        problems=editor.validate(job.cues),
    )


@app.get(
    "/captions/{job_id}/export/{fmt}",
    tags=["export"],
    summary="Download a job's cues as a subtitle file",
    description="Serialize the job's current (possibly edited) cues as SRT or WebVTT.",
    responses={
        400: {"model": ErrorResponse, "description": "Unsupported subtitle format"},
        404: {"model": ErrorResponse, "description": "Job not found"},
        409: {"model": ErrorResponse, "description": "Job not yet completed"},
    },
)
async def export_job_captions(
    job_id: str,
    fmt: str,
) -> Response:
    job = _get_job_or_404(job_id)
    if job.status != JobStatus.COMPLETED:
        raise HTTPException(status_code=409, detail=str(JobNotReady(job.status)))
    return _subtitle_response(job.cues, fmt, Path(job.filename).stem)


@app.delete(
    "/captions/{job_id}",
    status_code=204,
    tags=["captions"],
    summary="Delete a caption job",
    description="Delete a caption job and its uploaded media.",
    responses={
        404: {"model": ErrorResponse, "description": "Job not found"},
    },
)
async def delete_captions(
    job_id: str,
) -> Response:
    deleted = job_store.delete_job(job_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Job not found: {}".format(job_id))
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Endpoints: Stateless export, render and playback
# ---------------------------------------------------------------------------


@app.post(
    "/export",
    tags=["export"],
    summary="Export cues as a subtitle file",
    description="Serialize the cues in the request body as SRT or WebVTT.",
    responses={
        400: {"model": ErrorResponse, "description": "Unsupported subtitle format"},
    },
)
async def export_captions(body: ExportRequest) -> Response:
    stem = Path(body.filename).stem if body.filename else "captions"
    return _subtitle_response(models_to_cues(body.cues), body.format, stem)


@app.post(
    "/render",
    response_model=RenderResponse,
    tags=["render"],
    summary="Prepare a client-side render",
    description=(
        "Return the composition settings for rendering the captioned video "
        "in the browser: composition id, 30 fps, and the frame count for the "
        "video duration (30 seconds when not given)."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Missing required parameters"},
    },
)
async def render_config(body: RenderRequest) -> RenderResponse:
    if not body.video_url or body.captions is None or not body.caption_style:
        raise HTTPException(status_code=400, detail="Missing required parameters")

    duration = body.duration or DEFAULT_RENDER_DURATION_S
    style = CaptionStyle.coerce(body.caption_style)
    return RenderResponse(
        success=True,
        message="Ready for client-side rendering",
        render_config=RenderConfig(
            composition_id=RENDER_COMPOSITION_ID,
            input_props={
                "videoUrl": body.video_url,
                "captions": [c.model_dump(exclude={"words"}) for c in body.captions],
                "captionStyle": style.value,
            },
            fps=RENDER_FPS,
            duration_in_frames=int(math.ceil(duration * RENDER_FPS)),
        ),
    )


@app.post(
    "/frame",
    response_model=FrameResponse,
    tags=["render"],
    summary="Resolve the caption shown at a playback time",
    description=(
        "Given sorted cues and a time (or frame number at 30 fps), return the "
        "active caption and, for the karaoke style, the highlighted word."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Neither time nor frame given"},
    },
)
async def caption_frame(body: FrameRequest) -> FrameResponse:
    if body.time is not None:
        t = body.time
    elif body.frame is not None:
        t = frame_to_seconds(body.frame)
    else:
        raise HTTPException(status_code=400, detail="Either time or frame is required")

    cues = models_to_cues(body.cues)
    frame = render_frame(cues, t, body.style)
    if frame is None:
        return FrameResponse(time=t, active=False)

    index = active_cue_index(cues, t)
    states = []  # type: List[str]
    if frame.style is CaptionStyle.KARAOKE:
        states = [state.value for _word, state in word_states(cues[index], t)]

    return FrameResponse(
        time=t,
        active=True,
        cue_index=index,
        text=frame.text,
        style=frame.style.value,
        start=frame.start,
        end=frame.end,
        words=frame.words,
        active_word_index=frame.active_word_index,
        word_states=states,
    )


# ---------------------------------------------------------------------------
# Endpoints: Formats and health
# ---------------------------------------------------------------------------


@app.get(
    "/formats",
    response_model=List[FormatInfo],
    tags=["formats"],
    summary="List available subtitle formats",
    description="Returns all supported subtitle formats with their keys, names and suffixes.",
)
async def list_formats() -> List[FormatInfo]:
    result = []
    for key, formatter_cls in sorted(FORMATTERS.items()):
        formatter = formatter_cls()
        result.append(FormatInfo(
            key=key,
            name=formatter.name,
            suffix=formatter.suffix,
            media_type=formatter.media_type,
        ))
    return result


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness and readiness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        provider="mock" if USE_MOCK_CAPTIONS else DEFAULT_PROVIDER,
        mock=USE_MOCK_CAPTIONS,
    )


def run_api():
    """Entry point for the caption-studio-api console script."""
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
