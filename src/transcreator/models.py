"""
Data models for the subtitle translation pipeline.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

Blueprint = dict[str, Any]


@dataclass(frozen=True)
class TimedLine:
    """A single subtitle cue with timing and text."""

    sequence: int
    start_time: str  # HH:MM:SS,mmm
    end_time: str  # HH:MM:SS,mmm
    duration: float  # seconds
    text: str


Batch = list[TimedLine]


class JobStatus(str, Enum):
    """Lifecycle of a translation job. Transitions only move forward."""

    PROCESSING_BLUEPRINT = "processing_blueprint"
    PENDING_APPROVAL = "pending_approval"
    COMPLETE = "complete"


@dataclass
class TranslationSettings:
    """User-facing translation options."""

    tone: str = "neutral"

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "TranslationSettings":
        data = data or {}
        return cls(tone=str(data.get("tone") or "neutral"))

    def to_dict(self) -> dict:
        return {"tone": self.tone}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TranslationJob:
    """A persisted translation request."""

    id: str
    subtitle_content: str
    settings: TranslationSettings
    status: JobStatus = JobStatus.PROCESSING_BLUEPRINT
    blueprint: Optional[Blueprint] = None
    final_text: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "subtitleContent": self.subtitle_content,
            "settings": self.settings.to_dict(),
            "status": self.status.value,
            "blueprint": self.blueprint,
            "finalText": self.final_text,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TranslationJob":
        return cls(
            id=data["id"],
            subtitle_content=data["subtitleContent"],
            settings=TranslationSettings.from_dict(data.get("settings")),
            status=JobStatus(data.get("status", JobStatus.PROCESSING_BLUEPRINT.value)),
            blueprint=data.get("blueprint"),
            final_text=data.get("finalText"),
            created_at=datetime.fromisoformat(data["createdAt"]),
            updated_at=datetime.fromisoformat(data["updatedAt"]),
        )


@dataclass
class TranslationOutcome:
    """Result of a completed translation chain run."""

    job_id: str
    final_text: str
    lines: list[TimedLine]
    sync_suggestions: list[int] = field(default_factory=list)


@dataclass
class HealthStatus:
    """Liveness report for a shared client."""

    name: str
    is_healthy: bool
    message: str
