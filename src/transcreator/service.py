"""
Translation service: blueprint generation and the batch translation chain.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Optional

from . import srt_utils
from .agents import AgentService
from .batching import BATCH_SIZE, split_into_batches
from .errors import bad_request, not_found
from .models import Blueprint, TimedLine, TranslationOutcome, TranslationSettings
from .pacing import has_marker
from .pipeline import process_batch
from .repository import JobRepository
from .scheduler import CONCURRENT_BATCHES, run_in_chunks

logger = logging.getLogger("transcreator")


def reassemble(lines: list[TimedLine], translated: list[Optional[str]]) -> list[TimedLine]:
    """
    Put translated text back onto the original cues.

    A missing, blank or out-of-range translation falls back to the line's
    original text; no cue is dropped or left blank.
    """
    out: list[TimedLine] = []
    for i, line in enumerate(lines):
        text = translated[i] if i < len(translated) else None
        if not text or not text.strip():
            logger.warning(f"Line {line.sequence}: missing translation, keeping original text")
            out.append(line)
        else:
            out.append(
                TimedLine(
                    sequence=line.sequence,
                    start_time=line.start_time,
                    end_time=line.end_time,
                    duration=line.duration,
                    text=text,
                )
            )
    return out


class TranslationService:
    """Orchestrates the job store and the LLM agents."""

    def __init__(
        self,
        repository: JobRepository,
        agents: AgentService,
        batch_size: int = BATCH_SIZE,
        concurrency: int = CONCURRENT_BATCHES,
        show_progress: bool = True,
    ):
        self.repository = repository
        self.agents = agents
        self.batch_size = batch_size
        self.concurrency = concurrency
        self.show_progress = show_progress
        self._background: set[asyncio.Task] = set()

    def run_in_background(self, task_factory: Callable[[], Awaitable[Any]], task_name: str) -> asyncio.Task:
        """Start a best-effort task. Its failure is logged and never reaches the caller."""
        logger.info(f"Starting background task: [{task_name}]")

        async def runner() -> None:
            try:
                await task_factory()
            except Exception:
                logger.exception(f"Background task failed: [{task_name}]")
            else:
                logger.info(f"Background task completed successfully: [{task_name}]")

        task = asyncio.create_task(runner(), name=task_name)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def drain_background_tasks(self) -> None:
        """Wait for every outstanding background task."""
        if self._background:
            await asyncio.gather(*list(self._background))

    async def generate_translation_blueprint(
        self, subtitle_content: str, settings: TranslationSettings
    ) -> tuple[str, Blueprint]:
        """Create a job and build its blueprint (keywords -> grounding -> assembly)."""
        logger.info("--- Starting blueprint generation ---")
        text = srt_utils.plain_text(subtitle_content)
        job_id = await self.repository.create_job(subtitle_content, settings)

        keywords = await self.agents.extract_keywords(text)
        grounded = await self.agents.ground_translations(keywords)
        blueprint = await self.agents.assemble_blueprint(text, settings.tone, grounded)

        await self.repository.save_blueprint(job_id, blueprint)
        logger.info(f"Blueprint saved for job {job_id}")

        glossary = blueprint.get("glossary") or []
        if isinstance(glossary, list) and glossary:
            logger.info(f"Scheduling glossary upsert for job {job_id} ({len(glossary)} terms)")
            self.run_in_background(
                lambda: self.repository.upsert_glossary(job_id, glossary),
                f"UpsertGlossary for job {job_id}",
            )

        logger.info(f"--- Blueprint generation complete for job {job_id} ---")
        return job_id, blueprint

    async def execute_translation_chain(
        self,
        job_id: str,
        confirmed_blueprint: Optional[Blueprint] = None,
        settings: Optional[TranslationSettings] = None,
    ) -> TranslationOutcome:
        """Translate every line of a job and persist the final SRT."""
        logger.info(f"--- Starting translation chain for job {job_id} ---")

        job = await self.repository.get_job_by_id(job_id)
        if job is None:
            raise not_found(f"Job with ID {job_id} not found.", job_id=job_id)

        blueprint = confirmed_blueprint if confirmed_blueprint is not None else job.blueprint
        if blueprint is None:
            raise bad_request(f"Job {job_id} has no blueprint to translate with.", job_id=job_id)
        settings = settings or job.settings

        lines = srt_utils.decode(job.subtitle_content)
        batches = split_into_batches(lines, self.batch_size)
        logger.info(f"Job {job_id}: {len(lines)} lines split into {len(batches)} batches of {self.batch_size}")

        translated = await run_in_chunks(
            batches,
            lambda batch: process_batch(self.agents, batch, blueprint, settings),
            concurrency=self.concurrency,
            show_progress=self.show_progress,
        )

        final_lines = reassemble(lines, translated)
        final_text = srt_utils.encode(final_lines)
        await self.repository.save_final_text(job_id, final_text)
        logger.info(f"Final SRT saved for job {job_id}")

        return TranslationOutcome(
            job_id=job_id,
            final_text=final_text,
            lines=final_lines,
            sync_suggestions=[ln.sequence for ln in final_lines if has_marker(ln.text)],
        )
