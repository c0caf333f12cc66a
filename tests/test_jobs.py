"""Unit tests for the in-memory caption job store.

WHY: The job store holds every caption job between upload and export.
Wrong status transitions, lost edits or leaked temp directories would
break polling and editing in the API.

HOW: Tests are organized by class, one per JobStore concern:
  - TestJobCreation: create_job basics, capacity limit
  - TestJobUpdate: field updates and terminal timestamps
  - TestEditCues: single-writer cue edits
  - TestJobDeletion: delete and temp dir cleanup
  - TestTTLCleanup: expiry logic

RULES:
- Each test creates its own JobStore instance (no shared mutable state)
- Time-dependent tests use monkeypatch to control time.time()
"""

from __future__ import annotations

import threading
import time

import pytest

from caption_studio.core import editor
from caption_studio.core.errors import InvalidTiming
from caption_studio.core.ir import Cue
from caption_studio.server.jobs import DEFAULT_TTL_SECONDS, JobNotReady, JobStatus, JobStore


def _completed(store, cues):
    job = store.create_job("clip.mp4", "mock")
    store.update_job(job.id, status=JobStatus.COMPLETED, cues=list(cues))
    return job


class TestJobCreation:
    def test_new_job_is_pending(self):
        store = JobStore()
        job = store.create_job("clip.mp4", "whisper", content_type="video/mp4", duration_s=12.0)
        assert job.status == JobStatus.PENDING
        assert job.provider == "whisper"
        assert job.duration_s == 12.0
        assert job.cues == []
        assert job.media_dir.is_dir()
        assert job.media_path.name == "clip.mp4"
        store.clear()

    def test_unique_ids(self):
        store = JobStore()
        assert store.create_job("a.mp4", "mock").id != store.create_job("b.mp4", "mock").id
        store.clear()

    def test_capacity_limit(self):
        store = JobStore(max_jobs=1)
        store.create_job("a.mp4", "mock")
        with pytest.raises(ValueError, match="Maximum"):
            store.create_job("b.mp4", "mock")
        store.clear()

    def test_list_jobs_oldest_first(self, monkeypatch):
        store = JobStore()
        monkeypatch.setattr(time, "time", lambda: 200.0)
        later = store.create_job("later.mp4", "mock")
        monkeypatch.setattr(time, "time", lambda: 100.0)
        earlier = store.create_job("earlier.mp4", "mock")
        assert [j.id for j in store.list_jobs()] == [earlier.id, later.id]
        store.clear()


class TestJobUpdate:
    def test_terminal_status_sets_completed_at(self):
        store = JobStore()
        job = store.create_job("a.mp4", "mock")
        store.update_job(job.id, status=JobStatus.TRANSCRIBING)
        assert job.completed_at is None
        store.update_job(job.id, status=JobStatus.FAILED, error="boom")
        assert job.completed_at is not None
        assert job.error == "boom"
        store.clear()

    def test_unknown_field_rejected(self):
        store = JobStore()
        job = store.create_job("a.mp4", "mock")
        with pytest.raises(AttributeError):
            store.update_job(job.id, progress=50)
        store.clear()

    def test_missing_job_returns_none(self):
        assert JobStore().update_job("nope", status=JobStatus.FAILED) is None


class TestEditCues:
    def test_edit_replaces_cues(self, sample_cues):
        store = JobStore()
        job = _completed(store, sample_cues)
        store.edit_cues(job.id, lambda cues: editor.delete(cues, 0))
        assert [c.text for c in store.get_job(job.id).cues] == ["Namaste", "Phir milenge"]
        store.clear()

    def test_failed_edit_leaves_cues(self, sample_cues):
        store = JobStore()
        job = _completed(store, sample_cues)
        with pytest.raises(InvalidTiming):
            store.edit_cues(job.id, lambda cues: editor.retime(cues, 0, "end", 0.0))
        assert store.get_job(job.id).cues[0].end == pytest.approx(3.0)
        store.clear()

    def test_pending_job_not_editable(self):
        store = JobStore()
        job = store.create_job("a.mp4", "mock")
        with pytest.raises(JobNotReady, match="pending"):
            store.edit_cues(job.id, lambda cues: cues)
        store.clear()

    def test_missing_job_returns_none(self):
        assert JobStore().edit_cues("nope", lambda cues: cues) is None

    def test_concurrent_inserts_are_not_lost(self):
        store = JobStore()
        job = _completed(store, [Cue(text="start", start=0.0, end=1.0)])

        def worker():
            for _ in range(25):
                store.edit_cues(job.id, editor.insert)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        cues = store.get_job(job.id).cues
        assert len(cues) == 101
        assert editor.is_valid(cues)
        store.clear()


class TestJobDeletion:
    def test_delete_removes_media_dir(self):
        store = JobStore()
        job = store.create_job("a.mp4", "mock")
        job.media_path.write_bytes(b"video")
        assert store.delete_job(job.id) is True
        assert not job.media_dir.exists()
        assert store.get_job(job.id) is None

    def test_delete_missing_job(self):
        assert JobStore().delete_job("nope") is False


class TestTTLCleanup:
    def test_expired_terminal_job_removed(self, monkeypatch):
        store = JobStore(ttl_seconds=60)
        job = store.create_job("a.mp4", "mock")
        monkeypatch.setattr(time, "time", lambda: 100.0)
        store.update_job(job.id, status=JobStatus.COMPLETED)

        monkeypatch.setattr(time, "time", lambda: 161.0)
        assert store.cleanup_expired() == 1
        assert store.get_job(job.id) is None
        assert not job.media_dir.exists()

    def test_fresh_job_kept(self, monkeypatch):
        store = JobStore(ttl_seconds=60)
        job = store.create_job("a.mp4", "mock")
        monkeypatch.setattr(time, "time", lambda: 100.0)
        store.update_job(job.id, status=JobStatus.FAILED)

        monkeypatch.setattr(time, "time", lambda: 159.0)
        assert store.cleanup_expired() == 0
        store.clear()

    def test_in_progress_jobs_ignored(self, monkeypatch):
        store = JobStore(ttl_seconds=60)
        store.create_job("a.mp4", "mock")
        monkeypatch.setattr(time, "time", lambda: 10.0 ** 10)
        assert store.cleanup_expired() == 0
        store.clear()

    def test_default_ttl_is_one_hour(self):
        assert DEFAULT_TTL_SECONDS == 3600
