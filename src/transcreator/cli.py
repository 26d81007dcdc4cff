"""
Command-line interface for the subtitle translation pipeline.
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from .agents import AgentService
from .config import PipelineConfig
from .errors import PipelineError
from .llm_client import OpenAITextGenerator
from .models import TranslationSettings
from .repository import JsonJobRepository
from .service import TranslationService

logger = logging.getLogger("transcreator")

EXIT_PIPELINE_ERROR = 2


def setup_logging(verbose: bool = False, level: Optional[str] = None) -> None:
    """Setup logging configuration."""
    if verbose:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, (level or "INFO").upper(), logging.INFO)
    logging.basicConfig(level=log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    ap = argparse.ArgumentParser(description="Multi-stage LLM subtitle translation")

    ap.add_argument(
        "--stage",
        choices=["blueprint", "translate", "all", "health"],
        default="all",
        help="blueprint: create job + blueprint; translate: run batch chain for --job-id; "
        "all: both back to back; health: check backend and store",
    )

    # IO
    ap.add_argument("--input-srt", default=None, help="Source subtitle file (SRT or plain text)")
    ap.add_argument("--output", default=None, help="Where to write the translated SRT")
    ap.add_argument("--workdir", default=None, help="Job store directory (default: TRANSCREATOR_JOBS_DIR)")
    ap.add_argument("--job-id", default=None, help="Existing job for --stage translate")
    ap.add_argument("--blueprint", default=None, help="Edited blueprint JSON to confirm (translate stage)")

    # Translation
    ap.add_argument("--tone", default="neutral", help="Requested tone of the translation")

    # Logging
    ap.add_argument("--no-progress", action="store_true", help="Disable progress bars")
    ap.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    return ap.parse_args(argv)


def _read_text(path: str) -> str:
    if not os.path.exists(path):
        raise RuntimeError(f"File not found: {path}")
    return Path(path).read_text(encoding="utf-8")


async def main_async(argv: Optional[list[str]] = None) -> int:
    """Main async CLI entry point."""
    config = PipelineConfig.from_env()
    args = parse_args(argv)
    setup_logging(args.verbose, config.log_level)

    repository = JsonJobRepository(args.workdir or config.jobs_dir)
    generator = OpenAITextGenerator(config)
    service = TranslationService(
        repository,
        AgentService(generator, config),
        show_progress=not args.no_progress,
    )

    if args.stage == "health":
        healthy = True
        for status in (await generator.status(), await repository.status()):
            logger.info(f"[health] {status.name}: {'ok' if status.is_healthy else 'FAIL'} ({status.message})")
            healthy = healthy and status.is_healthy
        return 0 if healthy else 1

    try:
        job_id = args.job_id
        blueprint = None
        if args.stage in ("blueprint", "all"):
            if not args.input_srt:
                raise RuntimeError("--input-srt is required for the blueprint stage")
            settings = TranslationSettings(tone=args.tone)
            job_id, blueprint = await service.generate_translation_blueprint(_read_text(args.input_srt), settings)
            print(job_id)
            if args.stage == "blueprint":
                logger.info(
                    f"Stage 'blueprint' complete. Review the blueprint in {repository.root}, "
                    f"then run --stage translate --job-id {job_id}"
                )
                return 0

        if not job_id:
            raise RuntimeError("--job-id is required for the translate stage")
        if args.blueprint:
            blueprint = json.loads(_read_text(args.blueprint))

        outcome = await service.execute_translation_chain(job_id, blueprint)
        if args.output:
            Path(args.output).write_text(outcome.final_text, encoding="utf-8")
            logger.info(f"Saved SRT -> {args.output}")
        else:
            sys.stdout.write(outcome.final_text)
        if outcome.sync_suggestions:
            logger.info(f"Compressed for reading pace: lines {outcome.sync_suggestions}")
        return 0
    except PipelineError as e:
        logger.error(f"[{e.code}] {e.message} {e.context}")
        return EXIT_PIPELINE_ERROR
    finally:
        await service.drain_background_tasks()


def main() -> None:
    """Main CLI entry point."""
    sys.exit(asyncio.run(main_async()))


if __name__ == "__main__":
    main()
