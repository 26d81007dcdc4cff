"""
Reading-pace policy for the pacing-sync stage.

A line whose characters-per-second rate exceeds the threshold must be
rewritten shorter and annotated; every other line passes through verbatim.
"""

CPS_THRESHOLD = 22.0
COMPRESSION_MARKER = "[PS Sync]"


def chars_per_second(text: str, duration: float) -> float:
    """Reading pace of `text` shown for `duration` seconds. 0.0 without timing."""
    if duration <= 0:
        return 0.0
    return len(text.strip()) / duration


def needs_compression(text: str, duration: float, threshold: float = CPS_THRESHOLD) -> bool:
    return chars_per_second(text, duration) > threshold


def has_marker(text: str) -> bool:
    return COMPRESSION_MARKER in text


def strip_marker(text: str) -> str:
    return text.replace(COMPRESSION_MARKER, "").strip()


def annotate(text: str) -> str:
    """Append the compression marker once."""
    if has_marker(text):
        return text
    return f"{text.strip()} {COMPRESSION_MARKER}"
