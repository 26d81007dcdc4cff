"""
SRT parsing, writing, and prompt formatting utilities.
"""

import logging
import re
from dataclasses import replace

from .errors import bad_request
from .models import TimedLine

logger = logging.getLogger("transcreator")

_TIMING_RE = re.compile(
    r"^\s*(\d{1,2}:\d{2}:\d{2}[,.]\d{1,3})\s*-->\s*(\d{1,2}:\d{2}:\d{2}[,.]\d{1,3})"
)
_TS_RE = re.compile(r"(\d{1,2}):(\d{2}):(\d{2})[,.](\d{1,3})")
_TAG_RE = re.compile(r"<[^>]*>")


def timestamp_to_seconds(ts: str) -> float:
    """Convert an SRT timestamp token to seconds."""
    m = _TS_RE.match(ts.strip())
    if not m:
        raise bad_request(f"Invalid SRT timestamp: {ts!r}", timestamp=ts)
    h, mi, s, ms = m.groups()
    return int(h) * 3600 + int(mi) * 60 + int(s) + int(ms.ljust(3, "0")) / 1000.0


def looks_like_srt(content: str) -> bool:
    """Whether raw content is SRT rather than plain text."""
    return "-->" in content


def decode(raw: str) -> list[TimedLine]:
    """Parse raw SRT text into ordered timed lines."""
    if not isinstance(raw, str) or not raw.strip():
        raise bad_request("SRT content must be a non-empty string.")

    blocks = re.split(r"\n\s*\n", raw.replace("\r\n", "\n").strip())
    out: list[TimedLine] = []
    for b in blocks:
        lines = [ln for ln in b.splitlines() if ln.strip()]
        if not lines:
            continue
        sequence = out[-1].sequence + 1 if out else 1
        if re.match(r"^\d+$", lines[0].strip()):
            sequence = int(lines[0].strip())
            lines = lines[1:]
        if not lines:
            continue
        m = _TIMING_RE.match(lines[0])
        if not m:
            logger.warning(f"Skipping SRT block without timing line: {b[:60]!r}")
            continue
        start_time, end_time = m.group(1), m.group(2)
        duration = timestamp_to_seconds(end_time) - timestamp_to_seconds(start_time)
        text = "\n".join(ln.strip() for ln in lines[1:])
        out.append(
            TimedLine(
                sequence=sequence,
                start_time=start_time,
                end_time=end_time,
                duration=max(0.0, round(duration, 3)),
                text=_TAG_RE.sub("", text).strip(),
            )
        )

    if not out:
        raise bad_request("Failed to parse malformed SRT content.", preview=raw[:200])
    if out[0].sequence < 1 or any(b.sequence <= a.sequence for a, b in zip(out, out[1:])):
        logger.warning("SRT cue numbers are not strictly ascending, renumbering by position")
        out = [replace(line, sequence=i) for i, line in enumerate(out, start=1)]
    return out


def encode(lines: list[TimedLine]) -> str:
    """Write timed lines back to an SRT string."""
    return "".join(
        f"{ln.sequence}\n{ln.start_time} --> {ln.end_time}\n{ln.text}\n\n" for ln in lines
    )


def to_prompt_format(batch: list[TimedLine]) -> str:
    """Format a batch as "sequence | text" lines for an agent prompt."""
    return "\n".join(f"{ln.sequence} | {ln.text}" for ln in batch)


def plain_text(raw: str) -> str:
    """Text to analyse for the blueprint: cue text for SRT, raw content otherwise."""
    if looks_like_srt(raw):
        return "\n".join(ln.text for ln in decode(raw))
    return raw
