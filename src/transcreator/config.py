"""
Environment-driven configuration.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_BLUEPRINT_MODEL = "gpt-4o-mini"
DEFAULT_TRANSLATION_MODEL = "gpt-4o-mini"
DEFAULT_SYNC_MODEL = "gpt-4o"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass
class PipelineConfig:
    """Settings shared by the text generator, the store and the CLI."""

    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    blueprint_model: str = DEFAULT_BLUEPRINT_MODEL
    translation_model: str = DEFAULT_TRANSLATION_MODEL
    sync_model: str = DEFAULT_SYNC_MODEL
    max_retries: int = 3
    backoff_ms: int = 1000
    request_timeout: float = 120.0
    target_language: str = "Persian"
    jobs_dir: str = ".work/jobs"
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {self.max_retries}")
        if self.backoff_ms < 0:
            raise ValueError(f"backoff_ms must not be negative, got {self.backoff_ms}")

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "PipelineConfig":
        """Load settings from the environment, reading `.env` first if present."""
        if env_file is not None and env_file.exists():
            load_dotenv(env_file)
        else:
            load_dotenv()

        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            openai_base_url=os.getenv("OPENAI_BASE_URL") or None,
            blueprint_model=os.getenv("TRANSCREATOR_BLUEPRINT_MODEL", DEFAULT_BLUEPRINT_MODEL),
            translation_model=os.getenv("TRANSCREATOR_TRANSLATION_MODEL", DEFAULT_TRANSLATION_MODEL),
            sync_model=os.getenv("TRANSCREATOR_SYNC_MODEL", DEFAULT_SYNC_MODEL),
            max_retries=_env_int("TRANSCREATOR_MAX_RETRIES", 3),
            backoff_ms=_env_int("TRANSCREATOR_BACKOFF_MS", 1000),
            request_timeout=_env_float("TRANSCREATOR_REQUEST_TIMEOUT", 120.0),
            target_language=os.getenv("TRANSCREATOR_TARGET_LANGUAGE", "Persian"),
            jobs_dir=os.getenv("TRANSCREATOR_JOBS_DIR", ".work/jobs"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
