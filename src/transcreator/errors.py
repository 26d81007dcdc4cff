"""
Error kinds raised by the translation pipeline.

Every expected failure is a ``PipelineError`` tagged with one ``ErrorKind``.
Anything else that escapes the pipeline is an unexpected internal fault.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    """Closed set of operational failures: (code, status hint)."""

    NOT_FOUND = ("NOT_FOUND", 404)
    BAD_REQUEST = ("BAD_REQUEST", 400)
    MALFORMED_RESPONSE = ("AGENT_JSON_ERROR", 500)
    LENGTH_MISMATCH = ("AGENT_LENGTH_MISMATCH", 500)
    BACKEND_UNAVAILABLE = ("BACKEND_UNAVAILABLE", 503)

    @property
    def code(self) -> str:
        return self.value[0]

    @property
    def status_hint(self) -> int:
        return self.value[1]


class PipelineError(Exception):
    """An expected, operational failure of the translation pipeline."""

    is_operational = True

    def __init__(self, kind: ErrorKind, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.context = dict(context or {})

    @property
    def code(self) -> str:
        return self.kind.code

    @property
    def status_hint(self) -> int:
        return self.kind.status_hint

    def __repr__(self) -> str:
        return f"PipelineError(kind={self.kind.name}, message={self.message!r}, context={self.context!r})"


def not_found(message: str, **context: Any) -> PipelineError:
    return PipelineError(ErrorKind.NOT_FOUND, message, context)


def bad_request(message: str, **context: Any) -> PipelineError:
    return PipelineError(ErrorKind.BAD_REQUEST, message, context)


def malformed_response(stage: str, response_text: str) -> PipelineError:
    return PipelineError(
        ErrorKind.MALFORMED_RESPONSE,
        f"Agent [{stage}] returned malformed JSON.",
        {"stage": stage, "response_text": response_text},
    )


def length_mismatch(stage: str, expected: int, received: Optional[int]) -> PipelineError:
    return PipelineError(
        ErrorKind.LENGTH_MISMATCH,
        f"Agent [{stage}] returned a mismatched number of translations "
        f"(expected {expected}, received {received}).",
        {"stage": stage, "expected": expected, "received": received},
    )


def backend_unavailable(message: str, **context: Any) -> PipelineError:
    return PipelineError(ErrorKind.BACKEND_UNAVAILABLE, message, context)
