"""
Listening fill-in-the-blank compiler.

Finds the transcript segment where the item is spoken, blanks the word out
and attaches the audio window. Lookup order:

1. A segment whose related-id set contains the item id
2. A segment whose text contains the item's text as a whole word

A linked segment may carry an inflected form ("went" for "go"): the token
sharing the longest prefix with the word is blanked instead, and with no
such token the segment is kept whole with the word itself as the answer.

Without a usable segment vocabulary falls back to an image flashcard and
structures fall back to sentence scramble (a structure has no single
translation to put on a flashcard back).
"""

from __future__ import annotations

import os
import re
from collections.abc import Sequence
from dataclasses import replace

from loguru import logger

from curriculum_engine.content.models import (
    ContentRecord,
    GrammarStructure,
    TranscriptSegment,
    VocabularyItem,
)
from curriculum_engine.content.transcript import (
    audio_window,
    find_segment_for_id,
    find_segment_for_text,
    word_pattern,
)
from curriculum_engine.core.modes import Modality

from . import fallback, register
from .base import BLANK_MARKER, CompileContext, GapFillPayload, PracticeItem

TOKEN_PATTERN = re.compile(r"[\w']+")
MIN_SHARED_PREFIX = 2


def pivot_word(structure: GrammarStructure, segment_text: str) -> str | None:
    """
    Word of a structure's first example to blank out in a segment.

    Prefers the verb; otherwise the first token (in sentence order) spoken
    in the segment.
    """
    example = structure.first_example
    if example is None:
        return None
    tokens = sorted(example.tokens, key=lambda t: t.position)
    spoken = [t for t in tokens if t.word.strip() and word_pattern(t.word).search(segment_text)]
    for token in spoken:
        if token.role == "verb":
            return token.word
    return spoken[0].word if spoken else None


def spoken_form(word: str, segment_text: str) -> str:
    """
    Form of a vocabulary word as heard in a segment linked to it.

    The word itself when spoken verbatim, else the segment token sharing the
    longest prefix with it ("apples" for "apple"), else the word unchanged.
    """
    if word_pattern(word).search(segment_text):
        return word
    best, best_len = word, MIN_SHARED_PREFIX - 1
    for token in TOKEN_PATTERN.findall(segment_text):
        shared = len(os.path.commonprefix([word.lower(), token.lower()]))
        if shared > best_len:
            best, best_len = token, shared
    return best


@register(Modality.GAP_FILL_LISTENING)
class GapFillCompiler:
    """Compiler for listening gap-fill day."""

    def compile(self, record: ContentRecord, item: PracticeItem, ctx: CompileContext) -> PracticeItem:
        payload = self._build(record, ctx)
        if payload is not None:
            return replace(item, payload=payload)

        if isinstance(record, GrammarStructure):
            logger.debug(f"No transcript segment for structure {record.id}, using scramble")
            return fallback(record, item, ctx, Modality.SENTENCE_SCRAMBLE)
        logger.debug(f"No transcript segment for item {record.id}, using flashcard")
        return fallback(record, item, ctx, Modality.FLASHCARD_IMAGE)

    def _build(self, record: ContentRecord, ctx: CompileContext) -> GapFillPayload | None:
        segments = ctx.lesson.transcript if ctx.lesson else ()
        if not segments:
            return None

        found = self._locate(record, segments)
        if found is None:
            return None
        index, answer = found

        segment = segments[index]
        return GapFillPayload(
            sentence=word_pattern(answer).sub(BLANK_MARKER, segment.text),
            answer=answer,
            audio=audio_window(segments, index, ctx.audio_url, ctx.short_segment_seconds),
        )

    def _locate(
        self, record: ContentRecord, segments: Sequence[TranscriptSegment]
    ) -> tuple[int, str] | None:
        """Segment index plus the word to blank, or None."""
        if isinstance(record, VocabularyItem):
            answer = record.text.strip()
            index = find_segment_for_id(segments, record.id)
            if index is not None:
                return index, spoken_form(answer, segments[index].text)
            index = find_segment_for_text(segments, answer)
            return (index, answer) if index is not None else None

        example = record.first_example
        candidates = [find_segment_for_id(segments, record.id)]
        if example is not None:
            candidates.append(find_segment_for_text(segments, example.text))
        for index in candidates:
            if index is None:
                continue
            word = pivot_word(record, segments[index].text)
            if word:
                return index, word
        return None
