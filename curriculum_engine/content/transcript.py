"""
Transcript segment lookup and audio windows.

Segments are looked up either through their related-id sets or by matching
an item's text. Segments with broken boundaries are reported with a warning
and skipped; when no well-formed segment matches, the compiler falls through
to its next option.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from loguru import logger

from curriculum_engine.errors import MalformedTranscript

from .models import TranscriptSegment

DEFAULT_SHORT_SEGMENT_SECONDS = 3.0

# "38:15 - 43:20", "1:05-1:30"
TIME_RANGE_PATTERN = re.compile(r"(\d+):(\d+)\s*-\s*(\d+):(\d+)")


@dataclass(frozen=True)
class AudioWindow:
    """Slice of the lesson audio to play with a practice item (seconds)."""

    start: float
    end: float
    url: str = ""


def word_pattern(text: str) -> re.Pattern[str]:
    """Case-insensitive whole-word pattern for a literal piece of text."""
    return re.compile(rf"\b{re.escape(text.strip())}\b", re.IGNORECASE)


def validate_segment(segments: Sequence[TranscriptSegment], index: int) -> None:
    """
    Check that a segment has sane boundaries relative to its neighbours.

    Raises:
        MalformedTranscript: boundary missing, inverted, or overlapping a neighbour
    """
    segment = segments[index]
    if segment.start is None or segment.end is None:
        raise MalformedTranscript(f"Segment {index} is missing a boundary")
    if segment.start < 0 or segment.end < segment.start:
        raise MalformedTranscript(
            f"Segment {index} has inverted boundaries ({segment.start} -> {segment.end})"
        )
    if index > 0:
        prev = segments[index - 1]
        if prev.end is not None and segment.start < prev.end:
            raise MalformedTranscript(f"Segment {index} overlaps segment {index - 1}")
    if index + 1 < len(segments):
        nxt = segments[index + 1]
        if nxt.start is not None and segment.end > nxt.start:
            raise MalformedTranscript(f"Segment {index} overlaps segment {index + 1}")


def find_segment(
    segments: Sequence[TranscriptSegment],
    predicate: Callable[[TranscriptSegment], bool],
) -> int | None:
    """
    Index of the first well-formed segment matching the predicate.

    Malformed matches are logged and skipped.
    """
    for index, segment in enumerate(segments):
        if not predicate(segment):
            continue
        try:
            validate_segment(segments, index)
        except MalformedTranscript as e:
            logger.warning(f"Ignoring transcript segment: {e}")
            continue
        return index
    return None


def find_segment_for_id(segments: Sequence[TranscriptSegment], item_id: str) -> int | None:
    return find_segment(segments, lambda s: s.references(item_id))


def find_segment_for_text(segments: Sequence[TranscriptSegment], text: str) -> int | None:
    if not text.strip():
        return None
    pattern = word_pattern(text)
    return find_segment(segments, lambda s: bool(pattern.search(s.text)))


def audio_window(
    segments: Sequence[TranscriptSegment],
    index: int,
    url: str = "",
    short_segment_seconds: float = DEFAULT_SHORT_SEGMENT_SECONDS,
) -> AudioWindow:
    """
    Audio window for a segment.

    Clips shorter than short_segment_seconds are hard to understand on their
    own, so they borrow the previous segment's start and the next segment's end.
    """
    segment = segments[index]
    start, end = segment.start, segment.end
    if segment.duration < short_segment_seconds:
        if index > 0 and segments[index - 1].start is not None:
            start = segments[index - 1].start
        if index + 1 < len(segments) and segments[index + 1].end is not None:
            end = segments[index + 1].end
    return AudioWindow(start=start, end=end, url=url)


def parse_time_range(text: str) -> tuple[float, float] | None:
    """Parse an inline "mm:ss - mm:ss" range into (start, end) seconds."""
    match = TIME_RANGE_PATTERN.search(text)
    if not match:
        return None
    start_min, start_sec, end_min, end_sec = (int(g) for g in match.groups())
    start = float(start_min * 60 + start_sec)
    end = float(end_min * 60 + end_sec)
    if end < start:
        logger.warning(f"Inverted inline time range in question: {match.group(0)!r}")
        return None
    return start, end
