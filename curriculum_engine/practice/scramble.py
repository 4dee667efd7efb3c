"""
Sentence scramble compiler.

The learner rebuilds a sentence from shuffled words. Structures use their
first example's tokens in position order; vocabulary items use the example
sentence of their first sense, or fall back to a flashcard.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import replace

from curriculum_engine.content.models import ContentRecord, GrammarStructure
from curriculum_engine.core.modes import Modality

from . import fallback, register
from .base import CompileContext, PracticeItem, ScramblePayload


def scramble_words(words: Sequence[str], rng: random.Random) -> tuple[str, ...]:
    """Uniform random permutation of the words (may equal the original order)."""
    return tuple(rng.sample(list(words), len(words)))


def correct_order(record: ContentRecord) -> list[str]:
    if isinstance(record, GrammarStructure):
        example = record.first_example
        return example.ordered_words() if example else []
    sense = record.first_sense
    if sense and sense.example.strip():
        return sense.example.split()
    return []


@register(Modality.SENTENCE_SCRAMBLE)
class ScrambleCompiler:
    """Compiler for sentence scramble day."""

    def compile(self, record: ContentRecord, item: PracticeItem, ctx: CompileContext) -> PracticeItem:
        words = correct_order(record)
        if not words:
            return fallback(record, item, ctx, Modality.FLASHCARD_IMAGE)
        return replace(
            item,
            payload=ScramblePayload(correct_order=tuple(words), scrambled=scramble_words(words, ctx.rng)),
        )
