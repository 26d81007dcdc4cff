"""
Tests for SRT utilities.
"""

import pytest

from transcreator.errors import ErrorKind, PipelineError
from transcreator.models import TimedLine
from transcreator.srt_utils import decode, encode, looks_like_srt, plain_text, to_prompt_format

SAMPLE = """1
00:00:20,490 --> 00:00:22,490
<i>Hello</i> world.

2
00:00:23,000 --> 00:00:25,500
This is a test.
Second row.

3
00:00:26,000 --> 00:00:27,000
Goodbye!
"""


def test_decode_srt():
    """Test cue parsing, tag stripping and durations."""
    lines = decode(SAMPLE)

    assert [ln.sequence for ln in lines] == [1, 2, 3]
    assert lines[0].text == "Hello world."
    assert lines[0].start_time == "00:00:20,490"
    assert lines[0].end_time == "00:00:22,490"
    assert lines[0].duration == 2.0
    assert lines[1].text == "This is a test.\nSecond row."
    assert lines[1].duration == 2.5


def test_encode_and_decode_srt():
    """Test that encoded lines parse back to the same cues."""
    lines = decode(SAMPLE)
    assert decode(encode(lines)) == lines


def test_encode_format():
    line = TimedLine(sequence=7, start_time="00:00:01,000", end_time="00:00:02,000", duration=1.0, text="Hi")
    assert encode([line]) == "7\n00:00:01,000 --> 00:00:02,000\nHi\n\n"


def test_decode_handles_crlf_and_missing_index():
    raw = "00:00:01,000 --> 00:00:02,000\r\nFirst\r\n\r\n00:00:03,000 --> 00:00:05,000\r\nSecond\r\n"
    lines = decode(raw)
    assert [ln.sequence for ln in lines] == [1, 2]
    assert lines[1].duration == 2.0


def test_decode_keeps_cue_numbers_unique():
    """A missing index continues from the previous cue; collisions are renumbered by position."""
    raw = "5\n00:00:01,000 --> 00:00:02,000\nA\n\n00:00:02,000 --> 00:00:03,000\nB\n"
    assert [ln.sequence for ln in decode(raw)] == [5, 6]

    raw = (
        "00:00:01,000 --> 00:00:02,000\nA\n\n"
        "1\n00:00:02,000 --> 00:00:03,000\nB\n\n"
        "1\n00:00:03,000 --> 00:00:04,000\nC\n"
    )
    lines = decode(raw)
    assert [ln.sequence for ln in lines] == [1, 2, 3]
    assert [ln.text for ln in lines] == ["A", "B", "C"]


@pytest.mark.parametrize("raw", ["", "   \n", None])
def test_decode_rejects_empty_content(raw):
    with pytest.raises(PipelineError) as exc:
        decode(raw)
    assert exc.value.kind is ErrorKind.BAD_REQUEST


def test_decode_rejects_content_without_cues():
    with pytest.raises(PipelineError) as exc:
        decode("just some text\n\nwith no timing")
    assert exc.value.kind is ErrorKind.BAD_REQUEST
    assert exc.value.status_hint == 400


def test_prompt_format_and_plain_text():
    lines = decode(SAMPLE)
    assert to_prompt_format(lines[:2]) == "1 | Hello world.\n2 | This is a test.\nSecond row."
    assert looks_like_srt(SAMPLE)
    assert plain_text(SAMPLE).splitlines()[0] == "Hello world."
    assert plain_text("Plain script text") == "Plain script text"
