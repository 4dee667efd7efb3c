"""
Flashcard compiler.

Vocabulary: front is the word, back its first translation (or definition).
Structures: front is the first example sentence with a generic back.
The illustration is only attached on the image flashcard day.
"""

from __future__ import annotations

from dataclasses import replace

from curriculum_engine.content.models import ContentRecord, GrammarStructure, VocabularyItem
from curriculum_engine.core.modes import Modality

from . import register
from .base import STRUCTURE_BACK_TEXT, CompileContext, FlashcardPayload, PracticeItem


def vocabulary_back(item: VocabularyItem) -> str:
    """First sense's translation, else its definition, else empty."""
    sense = item.first_sense
    if sense is None:
        return ""
    return sense.translation or sense.definition or ""


def flashcard_payload(record: ContentRecord, with_image: bool) -> FlashcardPayload:
    if isinstance(record, GrammarStructure):
        example = record.first_example
        return FlashcardPayload(front=example.text if example else "", back=STRUCTURE_BACK_TEXT)
    return FlashcardPayload(
        front=record.text,
        back=vocabulary_back(record),
        image_url=record.image_url if with_image else None,
        phonetic=record.phonetic,
    )


@register(Modality.FLASHCARD_IMAGE)
@register(Modality.FLASHCARD_RECALL)
@register(Modality.REVIEW)
class FlashcardCompiler:
    """Compiler for flashcard days and plain review."""

    def compile(self, record: ContentRecord, item: PracticeItem, ctx: CompileContext) -> PracticeItem:
        with_image = item.modality == Modality.FLASHCARD_IMAGE
        return replace(item, payload=flashcard_payload(record, with_image))
