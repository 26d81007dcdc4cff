"""
Job stores: in-memory and one-JSON-file-per-job on disk.
"""

import asyncio
import json
import logging
import os
import tempfile
import uuid
from dataclasses import replace
from pathlib import Path
from typing import Optional, Protocol

from .errors import not_found
from .models import (
    Blueprint,
    HealthStatus,
    JobStatus,
    TranslationJob,
    TranslationSettings,
    utcnow,
)

logger = logging.getLogger("transcreator")


class JobRepository(Protocol):
    async def create_job(self, subtitle_content: str, settings: TranslationSettings) -> str: ...

    async def get_job_by_id(self, job_id: str) -> Optional[TranslationJob]: ...

    async def save_blueprint(self, job_id: str, blueprint: Blueprint) -> None: ...

    async def save_final_text(self, job_id: str, final_text: str) -> None: ...

    async def upsert_glossary(self, job_id: str, glossary: list) -> None: ...

    async def status(self) -> HealthStatus: ...


class InMemoryJobRepository:
    """Keeps jobs in a dict. Used by tests and one-shot CLI runs."""

    def __init__(self) -> None:
        self.jobs: dict[str, TranslationJob] = {}
        self.glossaries: dict[str, list] = {}

    async def create_job(self, subtitle_content: str, settings: TranslationSettings) -> str:
        job_id = uuid.uuid4().hex
        self.jobs[job_id] = TranslationJob(id=job_id, subtitle_content=subtitle_content, settings=settings)
        logger.info(f"Created translation job {job_id}")
        return job_id

    async def get_job_by_id(self, job_id: str) -> Optional[TranslationJob]:
        job = self.jobs.get(job_id)
        if job is None:
            logger.warning(f"Job {job_id} not found")
        return job

    def _require(self, job_id: str) -> TranslationJob:
        job = self.jobs.get(job_id)
        if job is None:
            raise not_found(f"Job with ID {job_id} not found.", job_id=job_id)
        return job

    async def save_blueprint(self, job_id: str, blueprint: Blueprint) -> None:
        job = self._require(job_id)
        self.jobs[job_id] = replace(
            job, blueprint=blueprint, status=JobStatus.PENDING_APPROVAL, updated_at=utcnow()
        )

    async def save_final_text(self, job_id: str, final_text: str) -> None:
        job = self._require(job_id)
        self.jobs[job_id] = replace(
            job, final_text=final_text, status=JobStatus.COMPLETE, updated_at=utcnow()
        )

    async def upsert_glossary(self, job_id: str, glossary: list) -> None:
        self._require(job_id)
        self.glossaries[job_id] = list(glossary)

    async def status(self) -> HealthStatus:
        return HealthStatus(name="InMemoryJobRepository", is_healthy=True, message=f"{len(self.jobs)} jobs")


class JsonJobRepository:
    """
    Stores each job as `<root>/<job_id>.json`; glossaries as `<job_id>.glossary.json`.

    File I/O runs in a worker thread via `asyncio.to_thread`.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, job_id: str) -> Path:
        if not job_id or Path(job_id).name != job_id:
            raise not_found(f"Job with ID {job_id} not found.", job_id=job_id)
        return self.root / f"{job_id}.json"

    def _write(self, path: Path, data) -> None:
        fd, tmp = tempfile.mkstemp(dir=self.root, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def _load(self, job_id: str) -> Optional[TranslationJob]:
        path = self._path(job_id)
        if not path.exists():
            return None
        return TranslationJob.from_dict(json.loads(path.read_text(encoding="utf-8")))

    def _require(self, job_id: str) -> TranslationJob:
        job = self._load(job_id)
        if job is None:
            raise not_found(f"Job with ID {job_id} not found.", job_id=job_id)
        return job

    async def create_job(self, subtitle_content: str, settings: TranslationSettings) -> str:
        job = TranslationJob(id=uuid.uuid4().hex, subtitle_content=subtitle_content, settings=settings)
        await asyncio.to_thread(self._write, self._path(job.id), job.to_dict())
        logger.info(f"Created translation job {job.id} -> {self._path(job.id)}")
        return job.id

    async def get_job_by_id(self, job_id: str) -> Optional[TranslationJob]:
        job = await asyncio.to_thread(self._load, job_id)
        if job is None:
            logger.warning(f"Job {job_id} not found in {self.root}")
        return job

    async def save_blueprint(self, job_id: str, blueprint: Blueprint) -> None:
        job = await asyncio.to_thread(self._require, job_id)
        job.blueprint = blueprint
        job.status = JobStatus.PENDING_APPROVAL
        job.updated_at = utcnow()
        await asyncio.to_thread(self._write, self._path(job_id), job.to_dict())
        logger.info(f"Saved blueprint for job {job_id}")

    async def save_final_text(self, job_id: str, final_text: str) -> None:
        job = await asyncio.to_thread(self._require, job_id)
        job.final_text = final_text
        job.status = JobStatus.COMPLETE
        job.updated_at = utcnow()
        await asyncio.to_thread(self._write, self._path(job_id), job.to_dict())
        logger.info(f"Saved final text for job {job_id}")

    async def upsert_glossary(self, job_id: str, glossary: list) -> None:
        await asyncio.to_thread(self._require, job_id)
        await asyncio.to_thread(self._write, self.root / f"{job_id}.glossary.json", glossary)
        logger.info(f"Stored {len(glossary)} glossary terms for job {job_id}")

    async def status(self) -> HealthStatus:
        writable = os.access(self.root, os.W_OK)
        message = f"{self.root} writable" if writable else f"{self.root} is not writable"
        return HealthStatus(name="JsonJobRepository", is_healthy=writable, message=message)
