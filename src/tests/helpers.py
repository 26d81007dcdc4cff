"""
Test helpers: a scripted text generator and SRT builders.
"""

import asyncio
import json
import re
from collections.abc import Callable
from typing import Optional


_STAGE_MARKERS = {
    "Lexical Analyst": "extractKeywords",
    "Lexicographer": "groundTranslations",
    "Pre-production Strategist": "assembleBlueprint",
    "Master Transcreator": "transcreateBatch",
    "Senior Editor": "editBatch",
    "Head of QA": "qaBatch",
    "Pacing & Readability": "phantomSync",
}
_BATCH_LINE_RE = re.compile(r"^(\d+) \| ", re.M)
_SYNC_LINE_RE = re.compile(r"^L(\d+): .*action=(\w+)\n  text: (.*)$", re.M)

BLUEPRINT = {
    "summary": "A blacksmith forges a sword.",
    "keyPoints": ["craft"],
    "characterProfiles": [],
    "culturalAdaptations": [],
    "glossary": [{"term": "anvil", "proposedTranslation": "سندان", "justification": "standard term"}],
}


def detect_stage(prompt: str) -> str:
    for marker, stage in _STAGE_MARKERS.items():
        if marker in prompt:
            return stage
    raise AssertionError(f"Unknown prompt: {prompt[:80]}")


def prompt_sequences(prompt: str) -> list[int]:
    seqs = [int(s) for s in _BATCH_LINE_RE.findall(prompt)]
    return seqs or [int(m[0]) for m in _SYNC_LINE_RE.findall(prompt)]


def sync_rows(prompt: str) -> list[tuple[int, str, str]]:
    """(sequence, action, text) for every line of a pacing-sync prompt."""
    return [(int(s), action, json.loads(text)) for s, action, text in _SYNC_LINE_RE.findall(prompt)]


def default_reply(stage: str, prompt: str) -> str:
    if stage == "extractKeywords":
        return json.dumps({"keywords": [{"term": "anvil", "definition": "a forging block"}]})
    if stage == "groundTranslations":
        return json.dumps({"grounded_keywords": [{"term": "anvil", "translations": ["سندان", "a", "b"]}]})
    if stage == "assembleBlueprint":
        return json.dumps(BLUEPRINT)
    return json.dumps({"translations": [f"{stage} {seq}" for seq in prompt_sequences(prompt)]})


class ScriptedGenerator:
    """Text generator that answers each stage from a handler, optionally after a delay."""

    def __init__(
        self,
        handlers: Optional[dict[str, Callable[[str], str]]] = None,
        delay: Optional[Callable[[str, list[int]], float]] = None,
    ):
        self.handlers = handlers or {}
        self.delay = delay
        self.calls: list[tuple[str, str, list[int]]] = []

    async def generate(self, prompt: str, model: str) -> str:
        stage = detect_stage(prompt)
        seqs = prompt_sequences(prompt)
        self.calls.append((stage, model, seqs))
        if self.delay is not None:
            await asyncio.sleep(self.delay(stage, seqs))
        handler = self.handlers.get(stage)
        return handler(prompt) if handler else default_reply(stage, prompt)

    def stage_calls(self, stage: str) -> list[list[int]]:
        return [seqs for s, _, seqs in self.calls if s == stage]


def _ts(seconds: float) -> str:
    ms = int(round(seconds * 1000))
    h, rem = divmod(ms, 3_600_000)
    m, rem = divmod(rem, 60_000)
    s, ms = divmod(rem, 1000)
    return f"{h:02}:{m:02}:{s:02},{ms:03}"


def build_srt(texts: list[str], duration: float = 3.0) -> str:
    blocks = []
    for i, text in enumerate(texts, 1):
        start = (i - 1) * duration
        blocks.append(f"{i}\n{_ts(start)} --> {_ts(start + duration)}\n{text}\n")
    return "\n".join(blocks)


