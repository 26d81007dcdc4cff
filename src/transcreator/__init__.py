"""
Transcreator - Multi-stage subtitle translation with LLM agents.

A pipeline for:
- Parsing and writing SRT subtitle documents
- Building a translation blueprint (keywords, grounding, glossary)
- Translating subtitles in fixed-size batches through
  transcreate, edit, QA and pacing-sync stages
- Running batches concurrently while preserving document order
"""

__version__ = "0.1.0"
