"""
Prompt builders for the blueprint and batch translation agents.
"""

import json

from .models import Batch, Blueprint
from .pacing import CPS_THRESHOLD, chars_per_second, needs_compression
from .srt_utils import to_prompt_format

_TRANSLATIONS_CONTRACT = (
    'Your output MUST be a single JSON object with this exact structure: '
    '{ "translations": ["...", "..."] }. '
    "The number of strings in the array must exactly match the number of input entries."
)


def _dump(obj) -> str:
    return json.dumps(obj, ensure_ascii=False, indent=2)


def extract_keywords_prompt(text: str) -> str:
    return f"""You are a Lexical Analyst. Extract technical terms, specialist jargon, named entities and culturally specific idioms from the text.
Your output MUST be a single JSON object with this exact structure: {{ "keywords": [{{ "term": "...", "definition": "..." }}] }}.
If no keywords are found, return {{ "keywords": [] }}.

Source text:
---
{text}
---"""


def ground_translations_prompt(keywords: list, language: str) -> str:
    return f"""You are a professional Lexicographer. For each term, give at least 3 distinct, high-quality {language} translations.
Your output MUST be a single JSON object with this exact structure: {{ "grounded_keywords": [{{ "term": "...", "translations": ["...", "..."] }}] }}.

Terms (with definitions):
---
{_dump(keywords)}
---"""


def assemble_blueprint_prompt(text: str, tone: str, grounded_keywords: list, language: str) -> str:
    return f"""You are a Pre-production Strategist. Build a Translation Blueprint JSON object for translating the script into {language}.
The JSON MUST include:
1. "summary": a concise plot summary.
2. "keyPoints": an array of key themes.
3. "characterProfiles": an array of objects describing each character's speaking style.
4. "culturalAdaptations": an array of idioms with culturally equivalent {language} adaptations.
5. "glossary": for each keyword, the single best "proposedTranslation" chosen from the candidates, with a "justification" grounded in the text and the requested "{tone}" tone.

Pre-verified keywords (with translation candidates):
---
{_dump(grounded_keywords)}
---
Full script:
---
{text}
---"""


def transcreate_prompt(batch: Batch, blueprint: Blueprint, tone: str, language: str) -> str:
    return f"""You are a Master Transcreator. Following the Blueprint strictly, transcreate the subtitle batch into fluent {language}.
{_TRANSLATIONS_CONTRACT}
Blueprint: {json.dumps(blueprint, ensure_ascii=False)}
Tone: {tone}

Batch (format "sequence | text"):
---
{to_prompt_format(batch)}
---"""


def edit_prompt(batch: Batch, draft: list[str], blueprint: Blueprint, language: str) -> str:
    return f"""You are a Senior Editor. Polish the {language} translation so it is faithful to the original and to the Blueprint (glossary, personas, tone).
{_TRANSLATIONS_CONTRACT}

Original batch:
---
{to_prompt_format(batch)}
---
Initial translation (one entry per line):
---
{_dump(draft)}
---
Blueprint: {json.dumps(blueprint, ensure_ascii=False)}"""


def qa_prompt(batch: Batch, edited: list[str], blueprint: Blueprint, language: str) -> str:
    return f"""You are Head of QA. Review the edited {language} translation for accuracy and compliance with the Blueprint.
{_TRANSLATIONS_CONTRACT}

Original batch:
---
{to_prompt_format(batch)}
---
Edited translation (one entry per line):
---
{_dump(edited)}
---
Blueprint: {json.dumps(blueprint, ensure_ascii=False)}"""


def pacing_sync_prompt(batch: Batch, reviewed: list[str], language: str) -> str:
    rows = []
    for line, text in zip(batch, reviewed):
        cps = chars_per_second(text, line.duration)
        action = "REWRITE" if needs_compression(text, line.duration) else "KEEP"
        rows.append(
            f"L{line.sequence}: duration={line.duration:.2f}s cps={cps:.1f} action={action}\n"
            f"  text: {json.dumps(text, ensure_ascii=False)}"
        )
    data = "\n".join(rows)
    return f"""You are a subtitle Pacing & Readability Analyst for {language}.
Rules:
1. The professional reading pace threshold is {CPS_THRESHOLD:g} characters per second.
2. Lines marked action=REWRITE are too fast: rewrite them shorter while preserving their full meaning. Return only the rewritten text.
3. Lines marked action=KEEP must be returned exactly as given.
4. {_TRANSLATIONS_CONTRACT}

Lines:
---
{data}
---"""
