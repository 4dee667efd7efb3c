"""
Base protocol and types for practice payload compilers.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Literal, Protocol, Union

from curriculum_engine.content.models import ContentRecord, ItemType, LessonContent
from curriculum_engine.content.transcript import DEFAULT_SHORT_SEGMENT_SECONDS, AudioWindow
from curriculum_engine.core.modes import Modality
from curriculum_engine.plan.models import SchedulingState

STRUCTURE_BACK_TEXT = "Structure practice"
BLANK_MARKER = "___"


@dataclass(frozen=True)
class FlashcardPayload:
    front: str
    back: str
    image_url: str | None = None
    phonetic: str | None = None
    kind: Literal["flashcard"] = field(default="flashcard", init=False)


@dataclass(frozen=True)
class GapFillPayload:
    sentence: str  # segment text with the answer replaced by BLANK_MARKER
    answer: str
    audio: AudioWindow
    kind: Literal["gap_fill"] = field(default="gap_fill", init=False)


@dataclass(frozen=True)
class ScramblePayload:
    correct_order: tuple[str, ...]
    scrambled: tuple[str, ...]
    kind: Literal["scramble"] = field(default="scramble", init=False)


@dataclass(frozen=True)
class MultipleChoicePayload:
    question: str
    options: tuple[str, ...]
    correct_index: int
    explanation: str = ""
    section: str = ""
    audio: AudioWindow | None = None
    kind: Literal["multiple_choice"] = field(default="multiple_choice", init=False)


@dataclass(frozen=True)
class PendingPayload:
    """No payload compiled yet."""

    kind: Literal["pending"] = field(default="pending", init=False)


Payload = Union[FlashcardPayload, GapFillPayload, ScramblePayload, MultipleChoicePayload, PendingPayload]


@dataclass(frozen=True)
class PracticeItem:
    """A compiled, renderable practice unit."""

    id: str
    item_type: ItemType
    modality: Modality
    text: str
    payload: Payload = field(default_factory=PendingPayload)
    state: SchedulingState | None = None


@dataclass
class CompileContext:
    """Lesson context and knobs shared by every compiler call."""

    lesson: LessonContent | None = None
    rng: random.Random = field(default_factory=random.Random)
    short_segment_seconds: float = DEFAULT_SHORT_SEGMENT_SECONDS

    @property
    def audio_url(self) -> str:
        return (self.lesson.audio_url or "") if self.lesson else ""


class PayloadCompiler(Protocol):
    """Protocol for modality compilers."""

    def compile(self, record: ContentRecord, item: PracticeItem, ctx: CompileContext) -> PracticeItem:
        """Return the item with its payload (and possibly a fallback modality) filled in."""
        ...
