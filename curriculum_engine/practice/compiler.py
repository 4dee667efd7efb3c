"""
Content compiler entry points.
"""

from __future__ import annotations

import random

from curriculum_engine.content.models import ContentRecord, GrammarStructure, LessonContent
from curriculum_engine.content.transcript import DEFAULT_SHORT_SEGMENT_SECONDS
from curriculum_engine.core.modes import Modality
from curriculum_engine.errors import MissingPrimaryContent
from curriculum_engine.plan.models import SchedulingState

from . import COMPILERS
from .base import CompileContext, PracticeItem
from .quiz import compile_quiz


def primary_text(record: ContentRecord | None) -> str:
    """
    The text a record is practiced by.

    Raises:
        MissingPrimaryContent: record absent, empty text, or a structure
            without example sentences
    """
    if record is None:
        raise MissingPrimaryContent("Content record not found")
    if isinstance(record, GrammarStructure):
        example = record.first_example
        if example is None or not example.text.strip():
            raise MissingPrimaryContent(f"Structure {record.id} has no example sentence")
        return example.text
    if not record.text.strip():
        raise MissingPrimaryContent(f"Vocabulary item {record.id} has no text")
    return record.text


def compile_item(
    record: ContentRecord | None,
    modality: Modality,
    lesson: LessonContent | None = None,
    rng: random.Random | None = None,
    state: SchedulingState | None = None,
    short_segment_seconds: float = DEFAULT_SHORT_SEGMENT_SECONDS,
) -> PracticeItem:
    """
    Compile one record into a practice item for a modality.

    Never fails for missing optional content; the item's modality may come
    back different from the requested one when a fallback applied.
    """
    text = primary_text(record)
    item = PracticeItem(id=record.id, item_type=record.item_type, modality=modality, text=text, state=state)
    ctx = CompileContext(
        lesson=lesson,
        rng=rng or random.Random(),
        short_segment_seconds=short_segment_seconds,
    )
    return COMPILERS[modality].compile(record, item, ctx)


__all__ = ["compile_item", "compile_quiz", "primary_text"]
