"""In-memory caption job store with TTL cleanup.

WHY: Transcription takes from seconds to minutes, so the HTTP API returns
a job ID immediately and generates captions in the background. Users
then poll for cues, edit them, and export subtitle files. An in-memory
store is sufficient: there is no persistence or multi-user requirement.

HOW: Three components work together:
  JobStatus — enum of valid job states
  Job       — dataclass holding job metadata, cues, and temp directory
  JobStore  — thread-safe dict-based store with create/update/get/delete,
              cue replacement, and TTL cleanup

RULES:
- All store mutations are protected by threading.Lock
- Cue edits go through edit_cues() so there is a single writer per job
- Each job gets a dedicated temp directory holding the uploaded media
- TTL-based expiry removes stale jobs and cleans up their temp directories
- Job IDs are UUID4 hex strings generated at creation time
- Default TTL is 1 hour (3600 seconds)
"""

from __future__ import annotations

import enum
import logging
import shutil
import tempfile
import threading
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from caption_studio.core.ir import Cue

logger = logging.getLogger(__name__)

# Default time-to-live for completed/failed jobs (seconds)
DEFAULT_TTL_SECONDS = 3600


class JobStatus(str, enum.Enum):
    """Valid states for a caption job.

    RULES:
    - pending: job created, not yet started
    - transcribing: provider processing the media
    - completed: cues ready for preview, editing and export
    - failed: unrecoverable error; fallback cues may still be attached
    """

    PENDING = "pending"
    TRANSCRIBING = "transcribing"
    COMPLETED = "completed"
    FAILED = "failed"


class JobNotReady(Exception):
    """Raised when cues are edited or exported before the job completed."""

    def __init__(self, status: JobStatus) -> None:
        self.status = status
        super().__init__("Job is not completed (current status: {}).".format(status.value))


@dataclass
class Job:
    """Metadata, state, and cues for a single caption job.

    RULES:
    - id: UUID4 hex string, unique and immutable after creation
    - media_dir: temp directory holding the uploaded file
    - cues: generated (then possibly edited) cue list, empty until completed
    - fallback_cues: placeholder cues offered when the provider was unreachable
    - placeholder/mock: where the cues came from
    """

    id: str
    status: JobStatus
    filename: str
    provider: str
    media_dir: Path
    created_at: float
    updated_at: float
    content_type: str = "application/octet-stream"
    duration_s: Optional[float] = None
    completed_at: Optional[float] = None
    error: Optional[str] = None
    cues: List[Cue] = field(default_factory=list)
    fallback_cues: List[Cue] = field(default_factory=list)
    transcript_text: Optional[str] = None
    placeholder: bool = False
    mock: bool = False

    @property
    def media_path(self) -> Path:
        return self.media_dir / self.filename


class JobStore:
    """Thread-safe in-memory store for caption jobs.

    RULES:
    - All public methods that mutate state acquire self._lock
    - get_job() returns None for missing job IDs (no exceptions)
    - update_job() only applies the keyword arguments it is given
    - delete_job() removes the job and cleans up its temp directory
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_jobs: int = 100,
    ) -> None:
        self._jobs = {}  # type: dict
        self._lock = threading.Lock()
        self._ttl_seconds = ttl_seconds
        self.max_jobs = max_jobs

    def create_job(
        self,
        filename: str,
        provider: str,
        content_type: str = "application/octet-stream",
        duration_s: Optional[float] = None,
    ) -> Job:
        """Create a new job in PENDING state with a dedicated temp directory.

        Raises:
            ValueError: The store already holds max_jobs jobs.
        """
        with self._lock:
            if len(self._jobs) >= self.max_jobs:
                raise ValueError(
                    "Maximum number of concurrent jobs ({}) reached".format(self.max_jobs)
                )

            job_id = uuid.uuid4().hex
            now = time.time()
            job = Job(
                id=job_id,
                status=JobStatus.PENDING,
                filename=filename,
                provider=provider,
                media_dir=Path(tempfile.mkdtemp(prefix="caption_job_")),
                created_at=now,
                updated_at=now,
                content_type=content_type,
                duration_s=duration_s,
            )
            self._jobs[job_id] = job

        logger.info("Created job %s for file %s (%s)", job_id, filename, provider)
        return job

    def get_job(self, job_id: str) -> Optional[Job]:
        with self._lock:
            return self._jobs.get(job_id)

    def list_jobs(self) -> List[Job]:
        """Return all jobs, oldest first."""
        with self._lock:
            return sorted(self._jobs.values(), key=lambda j: j.created_at)

    def update_job(self, job_id: str, **changes) -> Optional[Job]:
        """Update a job's mutable fields.

        RULES:
        - Returns the updated Job, or None if job_id not found
        - Unknown field names raise AttributeError
        - completed_at is set when status becomes COMPLETED or FAILED
        """
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None

            for name, value in changes.items():
                if not hasattr(job, name):
                    raise AttributeError("Job has no field '{}'".format(name))
                setattr(job, name, value)

            now = time.time()
            job.updated_at = now
            if "status" in changes and job.status in (JobStatus.COMPLETED, JobStatus.FAILED):
                job.completed_at = now
            return job

    def edit_cues(self, job_id: str, edit: Callable[[List[Cue]], List[Cue]]) -> Optional[Job]:
        """Apply an editor function to a completed job's cues under the lock.

        HOW: edit receives the current cue list and returns the new one.
        Editor functions never mutate their input, so an exception from
        edit leaves the stored cues unchanged and propagates to the caller.

        Raises:
            JobNotReady: The job has not completed yet.
        """
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            if job.status != JobStatus.COMPLETED:
                raise JobNotReady(job.status)
            job.cues = list(edit(job.cues))
            job.updated_at = time.time()
            return job

    def delete_job(self, job_id: str) -> bool:
        """Delete a job and clean up its temp directory.

        The directory is removed outside the lock (I/O should not hold it).
        """
        with self._lock:
            job = self._jobs.pop(job_id, None)

        if job is None:
            return False

        self._cleanup_media_dir(job.media_dir)
        logger.info("Deleted job %s", job_id)
        return True

    def clear(self) -> None:
        """Delete every job (used on shutdown and in tests)."""
        for job in self.list_jobs():
            self.delete_job(job.id)

    def cleanup_expired(self) -> int:
        """Remove terminal jobs whose completed_at is older than the TTL.

        Returns the count of removed jobs.
        """
        now = time.time()
        expired_jobs: List[Job] = []

        with self._lock:
            for job_id, job in list(self._jobs.items()):
                if job.status not in (JobStatus.COMPLETED, JobStatus.FAILED):
                    continue
                if job.completed_at is None:
                    continue
                if now - job.completed_at > self._ttl_seconds:
                    expired_jobs.append(self._jobs.pop(job_id))

        for job in expired_jobs:
            self._cleanup_media_dir(job.media_dir)
            logger.info("Expired job %s (completed %.0fs ago)", job.id, now - job.completed_at)

        return len(expired_jobs)

    @staticmethod
    def _cleanup_media_dir(media_dir: Path) -> None:
        """Remove a job's temp directory tree; logs instead of raising."""
        if media_dir.exists():
            try:
                shutil.rmtree(media_dir)
            except OSError:
                logger.warning("Failed to clean up temp dir: %s", media_dir)
