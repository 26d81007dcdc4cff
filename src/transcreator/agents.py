"""
LLM agents: blueprint generation and the per-batch translation stages.

Every agent reply must be a JSON object. Batch stages must additionally
return exactly one translation per input line; anything else is fatal for
the call and never retried.
"""

import json
import logging
import re
from typing import Any

from . import prompts
from .config import PipelineConfig
from .errors import length_mismatch, malformed_response
from .llm_client import TextGenerator
from .models import Batch, Blueprint
from .pacing import annotate, needs_compression, strip_marker

logger = logging.getLogger("transcreator")

TRANSCREATE = "transcreateBatch"
EDIT = "editBatch"
QA = "qaBatch"
PACING_SYNC = "phantomSync"

_CODE_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n?(.*?)\n?\s*```$", re.DOTALL)


def strip_code_fence(text: str) -> str:
    """Remove a ```json ... ``` wrapper if the whole reply is fenced."""
    cleaned = text.strip()
    m = _CODE_FENCE_RE.match(cleaned)
    return m.group(1).strip() if m else cleaned


def parse_agent_response(response_text: str, agent_name: str) -> dict[str, Any]:
    """Parse an agent reply into a JSON object."""
    try:
        parsed = json.loads(strip_code_fence(response_text))
    except json.JSONDecodeError:
        raise malformed_response(agent_name, response_text) from None
    if not isinstance(parsed, dict):
        raise malformed_response(agent_name, response_text)
    return parsed


def _list_field(parsed: dict, key: str, agent_name: str, raw: str) -> list:
    value = parsed.get(key, [])
    if not isinstance(value, list):
        raise malformed_response(agent_name, raw)
    return value


class AgentService:
    """Wraps a text generator with prompt building and response contracts."""

    def __init__(self, generator: TextGenerator, config: PipelineConfig):
        self.generator = generator
        self.config = config

    # --- blueprint agents ---

    async def extract_keywords(self, text: str) -> list:
        logger.info("Agent [extractKeywords] activated.")
        raw = await self.generator.generate(
            prompts.extract_keywords_prompt(text), self.config.blueprint_model
        )
        parsed = parse_agent_response(raw, "extractKeywords")
        return _list_field(parsed, "keywords", "extractKeywords", raw)

    async def ground_translations(self, keywords: list) -> list:
        logger.info(f"Agent [groundTranslations] activated ({len(keywords)} keywords).")
        raw = await self.generator.generate(
            prompts.ground_translations_prompt(keywords, self.config.target_language),
            self.config.blueprint_model,
        )
        parsed = parse_agent_response(raw, "groundTranslations")
        return _list_field(parsed, "grounded_keywords", "groundTranslations", raw)

    async def assemble_blueprint(self, text: str, tone: str, grounded_keywords: list) -> Blueprint:
        logger.info("Agent [assembleBlueprint] activated.")
        raw = await self.generator.generate(
            prompts.assemble_blueprint_prompt(text, tone, grounded_keywords, self.config.target_language),
            self.config.blueprint_model,
        )
        return parse_agent_response(raw, "assembleBlueprint")

    # --- batch stages ---

    async def call_batch_stage(self, stage: str, prompt: str, batch: Batch, model: str) -> list[str]:
        """Run one stage for a batch and enforce the one-translation-per-line contract."""
        logger.info(f"Agent [{stage}] activated ({len(batch)} lines).")
        raw = await self.generator.generate(prompt, model)
        parsed = parse_agent_response(raw, stage)
        translations = parsed.get("translations")

        if not isinstance(translations, list) or len(translations) != len(batch):
            received = len(translations) if isinstance(translations, list) else None
            logger.error(
                f"FATAL BATCH MISMATCH in [{stage}]: expected {len(batch)} lines, received {received}."
            )
            raise length_mismatch(stage, len(batch), received)
        return ["" if t is None else str(t) for t in translations]

    async def transcreate_batch(self, batch: Batch, blueprint: Blueprint, tone: str) -> list[str]:
        prompt = prompts.transcreate_prompt(batch, blueprint, tone, self.config.target_language)
        return await self.call_batch_stage(TRANSCREATE, prompt, batch, self.config.translation_model)

    async def edit_batch(self, batch: Batch, draft: list[str], blueprint: Blueprint) -> list[str]:
        prompt = prompts.edit_prompt(batch, draft, blueprint, self.config.target_language)
        return await self.call_batch_stage(EDIT, prompt, batch, self.config.translation_model)

    async def qa_batch(self, batch: Batch, edited: list[str], blueprint: Blueprint) -> list[str]:
        prompt = prompts.qa_prompt(batch, edited, blueprint, self.config.target_language)
        return await self.call_batch_stage(QA, prompt, batch, self.config.translation_model)

    async def phantom_sync(self, batch: Batch, reviewed: list[str]) -> list[str]:
        """
        Compress lines that read faster than the CPS threshold.

        Lines within the threshold are kept verbatim whatever the model
        returns for them. When no line is too fast the remote call is skipped.
        """
        flagged = [needs_compression(text, line.duration) for line, text in zip(batch, reviewed)]
        if not any(flagged):
            logger.info(f"Agent [{PACING_SYNC}] skipped: all {len(batch)} lines within reading pace.")
            return list(reviewed)

        prompt = prompts.pacing_sync_prompt(batch, reviewed, self.config.target_language)
        synced = await self.call_batch_stage(PACING_SYNC, prompt, batch, self.config.sync_model)

        out: list[str] = []
        for line, before, after, too_fast in zip(batch, reviewed, synced, flagged):
            if not too_fast:
                out.append(before)
                continue
            if not strip_marker(after).strip():
                logger.warning(f"Line {line.sequence}: pacing rewrite came back empty, keeping the reviewed text.")
                out.append(before)
                continue
            if len(strip_marker(after)) >= len(before.strip()):
                logger.warning(f"Line {line.sequence}: pacing rewrite is not shorter than the original.")
            out.append(annotate(after))
        return out
