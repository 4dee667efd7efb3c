"""
Session Assembler.

Builds one day's practice session for a plan:

1. Resolve the cycle day and active lesson
2. Pick the day's modality (listening choice without lesson audio runs as the
   comprehensive quiz)
3. Compile the active lesson (quiz days: its quiz questions)
4. Append review items whose due date has arrived, as plain review, plus
   anything still left in a finished lesson
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger

from curriculum_engine.content.loader import ContentStore, get_record
from curriculum_engine.content.models import LessonContent
from curriculum_engine.content.transcript import DEFAULT_SHORT_SEGMENT_SECONDS
from curriculum_engine.core.modes import Modality, mode_for_day
from curriculum_engine.errors import ContentUnavailable, MissingPrimaryContent
from curriculum_engine.plan.models import CurriculumPlan, PlanLesson, QueueEntry
from curriculum_engine.practice import PracticeItem, compile_item, compile_quiz, effective_modality

from .cycle import is_finished, resolve_cycle, student_today


@dataclass
class DailyPracticeSession:
    """A prepared practice session."""

    modality: Modality
    day_index: int
    lesson_id: str | None = None
    items: list[PracticeItem] = field(default_factory=list)
    error: str | None = None

    @property
    def total_items(self) -> int:
        return len(self.items)

    @property
    def review_count(self) -> int:
        return sum(1 for item in self.items if item.modality == Modality.REVIEW)


class SessionAssembler:
    """Compiles today's practice items for a plan."""

    def __init__(
        self,
        contents: ContentStore,
        rng: random.Random | None = None,
        short_segment_seconds: float = DEFAULT_SHORT_SEGMENT_SECONDS,
    ):
        self.contents = contents
        self.rng = rng or random.Random()
        self.short_segment_seconds = short_segment_seconds

    def build_session(self, plan: CurriculumPlan, now: datetime) -> DailyPracticeSession:
        """
        Build today's session.

        Raises:
            ContentUnavailable: today's modality needs lesson content and the
                active lesson has none
        """
        cycle = resolve_cycle(plan, now)
        modality = mode_for_day(cycle.day_index)
        lesson_ref = cycle.lesson
        if lesson_ref is not None and modality.is_quiz:
            modality = effective_modality(modality, self.contents.get_lesson(lesson_ref.lesson_id))
        session = DailyPracticeSession(
            modality=modality,
            day_index=cycle.day_index,
            lesson_id=lesson_ref.lesson_id if lesson_ref else None,
        )
        logger.debug(
            f"Plan {plan.id}: day {cycle.day_index}, modality {modality.value}, "
            f"lesson {session.lesson_id}"
        )

        if lesson_ref is not None and modality.requires_lesson_content:
            session.items.extend(self._lesson_items(plan, lesson_ref, modality))

        seen = {item.id for item in session.items}
        if lesson_ref is not None:
            seen.update(entry.item_id for entry in lesson_ref.active_entries())
        session.items.extend(self._review_items(plan, now, seen))

        logger.info(
            f"Plan {plan.id}: session with {session.total_items} items "
            f"({session.review_count} review)"
        )
        return session

    def _lesson_items(
        self, plan: CurriculumPlan, lesson_ref: PlanLesson, modality: Modality
    ) -> list[PracticeItem]:
        if not lesson_ref.has_active_items:
            raise ContentUnavailable(plan.id, lesson_ref.lesson_id, modality.value)

        lesson = self.contents.get_lesson(lesson_ref.lesson_id)
        if lesson is None:
            raise ContentUnavailable(
                plan.id, lesson_ref.lesson_id, modality.value, reason="lesson content not found"
            )

        if modality.is_quiz and lesson.questions:
            states = {e.item_id: e.state for e in lesson_ref.active_entries() if e.state}
            return compile_quiz(lesson, modality, states)

        items = []
        # Active items are exempt from the reviewed-today check so a student can catch up
        for entry in lesson_ref.active_entries():
            item = self._compile_entry(entry, modality, lesson)
            if item is not None:
                items.append(item)
        if not items:
            raise ContentUnavailable(
                plan.id, lesson_ref.lesson_id, modality.value, reason="no active item could be compiled"
            )
        return items

    def _review_items(self, plan: CurriculumPlan, now: datetime, seen: set[str]) -> list[PracticeItem]:
        today = student_today(now)
        items = []
        for entry in self._review_entries(plan):
            if entry.item_id in seen:
                continue
            if entry.state is not None and not entry.state.is_due(today):
                continue
            if entry.reviewed_on(today):
                continue
            item = self._compile_entry(entry, Modality.REVIEW, None)
            if item is not None:
                items.append(item)
        return items

    @staticmethod
    def _review_entries(plan: CurriculumPlan) -> list[QueueEntry]:
        entries = list(plan.review.values())
        # finished lessons are emptied by the next sweep; until then their items count as review
        for lesson in plan.lessons:
            if is_finished(lesson):
                entries.extend(lesson.active_entries())
        return entries

    def _compile_entry(
        self, entry: QueueEntry, modality: Modality, lesson: LessonContent | None
    ) -> PracticeItem | None:
        record = get_record(self.contents, entry.item_id, entry.item_type)
        try:
            return compile_item(
                record,
                modality,
                lesson,
                rng=self.rng,
                state=entry.state,
                short_segment_seconds=self.short_segment_seconds,
            )
        except MissingPrimaryContent as e:
            logger.warning(f"Skipping {entry.item_type.value} {entry.item_id}: {e}")
            return None


def build_session(
    plan: CurriculumPlan,
    contents: ContentStore,
    now: datetime,
    rng: random.Random | None = None,
    short_segment_seconds: float = DEFAULT_SHORT_SEGMENT_SECONDS,
) -> DailyPracticeSession:
    """One-shot form of SessionAssembler.build_session()."""
    return SessionAssembler(contents, rng, short_segment_seconds).build_session(plan, now)
