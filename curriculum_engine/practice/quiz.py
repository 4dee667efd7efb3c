"""
Quiz compilers for the comprehensive quiz and listening multiple-choice days.

Quiz days practice the lesson's quiz questions rather than the raw records:
one PracticeItem per question. An audio window is attached when a transcript
segment is linked to the question's related item, or when the question text
carries an inline "mm:ss - mm:ss" range.

Listening multiple choice needs the lesson audio; a lesson without an audio
URL runs the comprehensive quiz instead.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace

from loguru import logger

from curriculum_engine.content.models import (
    ContentRecord,
    GrammarStructure,
    ItemType,
    LessonContent,
    QuizQuestion,
)
from curriculum_engine.content.transcript import (
    AudioWindow,
    find_segment_for_id,
    parse_time_range,
)
from curriculum_engine.core.modes import Modality
from curriculum_engine.plan.models import SchedulingState

from . import fallback, register
from .base import CompileContext, MultipleChoicePayload, PracticeItem


def effective_modality(modality: Modality, lesson: LessonContent | None) -> Modality:
    """The modality a quiz day actually runs for a lesson."""
    if modality == Modality.LISTENING_CHOICE and (lesson is None or not lesson.audio_url):
        lesson_id = lesson.id if lesson else None
        logger.debug(f"Lesson {lesson_id} has no audio, listening choice falls back to the comprehensive quiz")
        return Modality.QUIZ_COMPREHENSIVE
    return modality


def question_audio(question: QuizQuestion, lesson: LessonContent | None) -> AudioWindow | None:
    """Audio window for a question, or None when nothing resolves."""
    if lesson is None or not lesson.audio_url:
        return None

    related_id = question.related_id
    if related_id and lesson.transcript:
        index = find_segment_for_id(lesson.transcript, related_id)
        if index is not None:
            segment = lesson.transcript[index]
            return AudioWindow(start=segment.start, end=segment.end, url=lesson.audio_url)

    time_range = parse_time_range(question.text)
    if time_range:
        start, end = time_range
        return AudioWindow(start=start, end=end, url=lesson.audio_url)
    return None


def question_payload(
    question: QuizQuestion, lesson: LessonContent | None, section: str = ""
) -> MultipleChoicePayload:
    return MultipleChoicePayload(
        question=question.text,
        options=tuple(question.options),
        correct_index=question.correct_index,
        explanation=question.explanation,
        section=section,
        audio=question_audio(question, lesson),
    )


def compile_quiz(
    lesson: LessonContent,
    modality: Modality,
    states: Mapping[str, SchedulingState] | None = None,
) -> list[PracticeItem]:
    """One practice item per question in the lesson's quiz sections."""
    modality = effective_modality(modality, lesson)
    states = states or {}
    items: list[PracticeItem] = []
    for s_idx, section in enumerate(lesson.quiz):
        for q_idx, question in enumerate(section.questions):
            item_id = question.related_id or f"quiz-{s_idx}-{q_idx}"
            item_type = ItemType.STRUCTURE if question.structure_id else ItemType.VOCABULARY
            items.append(
                PracticeItem(
                    id=item_id,
                    item_type=item_type,
                    modality=modality,
                    text=question.text,
                    payload=question_payload(question, lesson, section.kind),
                    state=states.get(item_id),
                )
            )
    return items


@register(Modality.QUIZ_COMPREHENSIVE)
@register(Modality.LISTENING_CHOICE)
class QuizCompiler:
    """Compiles a single record on a quiz day using its related question."""

    def compile(self, record: ContentRecord, item: PracticeItem, ctx: CompileContext) -> PracticeItem:
        lesson = ctx.lesson
        item = replace(item, modality=effective_modality(item.modality, lesson))
        if lesson is not None:
            for section in lesson.quiz:
                for question in section.questions:
                    if question.related_id == record.id:
                        return replace(item, payload=question_payload(question, lesson, section.kind))

        if isinstance(record, GrammarStructure):
            return fallback(record, item, ctx, Modality.SENTENCE_SCRAMBLE)
        return fallback(record, item, ctx, Modality.FLASHCARD_RECALL)
