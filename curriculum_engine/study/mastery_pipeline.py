"""
Mastery Pipeline.

Moves items between the three stages of a plan:

    ACTIVE  --(cycle complete, repetition >= threshold)-->  LEARNED
    ACTIVE  --(cycle complete, below threshold)---------->  ACTIVE of the next lesson
    LEARNED --(due date arrived, periodic sweep)----------> REVIEW
    REVIEW  --(pass)--> REVIEW        (interval extended)
    REVIEW  --(fail)--> ACTIVE        (re-taught in the current lesson)

A finished lesson's active queue is never practiced again, so nothing stays
there: items go to the next lesson with a cycle left to run, or to REVIEW
due tomorrow when the plan has no such lesson.

Every transition writes the new scheduling state together with the queue
move, through CurriculumPlan.move().
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta

from loguru import logger

from curriculum_engine.content.models import ItemType
from curriculum_engine.core.modes import CYCLE_LENGTH
from curriculum_engine.errors import ItemNotInPlan
from curriculum_engine.plan.models import (
    LEARNED,
    REVIEW,
    CurriculumPlan,
    PlanLesson,
    QueueEntry,
    QueueKind,
    QueueRef,
    SchedulingState,
)

from .cycle import current_lesson, is_finished, resolve_cycle, student_today
from .retention_engine import DEFAULT_CONFIG, SM2Config, advance, is_passing


@dataclass(frozen=True)
class MasteryPolicy:
    """Tunable promotion rules."""

    promotion_min_repetitions: int = 2
    sm2: SM2Config = DEFAULT_CONFIG


DEFAULT_POLICY = MasteryPolicy()


@dataclass(frozen=True)
class GradedResponse:
    """A graded answer for one item."""

    item_id: str
    grade: int
    item_type: ItemType = ItemType.VOCABULARY
    timestamp: datetime | None = None


@dataclass(frozen=True)
class Transition:
    """Result of applying a pipeline step to one item."""

    item_id: str
    source: QueueRef
    target: QueueRef
    state: SchedulingState | None = None

    @property
    def moved(self) -> bool:
        return self.source != self.target

    @property
    def promoted(self) -> bool:
        return self.target.kind == QueueKind.LEARNED and self.moved


def _teaching_queue(plan: CurriculumPlan, now: datetime | date) -> QueueRef:
    """Active queue of the lesson that will teach an item next, else REVIEW."""
    lesson = current_lesson(plan, now)
    if lesson is None:
        return REVIEW
    return QueueRef.active(lesson.lesson_id)


def _due_tomorrow(entry: QueueEntry, now: datetime | date) -> QueueEntry:
    tomorrow = student_today(now) + timedelta(days=1)
    state = replace(entry.state, due_date=tomorrow) if entry.state else SchedulingState(due_date=tomorrow)
    return replace(entry, state=state)


def apply_grade(
    plan: CurriculumPlan,
    response: GradedResponse,
    now: datetime,
    policy: MasteryPolicy = DEFAULT_POLICY,
) -> Transition:
    """
    Apply one graded response to a plan in place.

    Raises:
        ItemNotInPlan: the item is in none of the plan's queues
    """
    found = plan.find(response.item_id)
    if found is None:
        raise ItemNotInPlan(plan.id, response.item_id)
    source, entry = found

    if response.item_type != entry.item_type:
        logger.warning(
            f"Response for {response.item_id} says {response.item_type.value}, "
            f"plan says {entry.item_type.value}; keeping plan type"
        )

    reviewed_at = response.timestamp or now
    new_state = advance(entry.state, response.grade, reviewed_at, policy.sm2)
    new_entry = replace(entry, state=new_state, updated_at=now, last_reviewed_at=reviewed_at)

    target = source
    if source.kind in (QueueKind.LEARNED, QueueKind.REVIEW) and not is_passing(response.grade):
        target = _teaching_queue(plan, now)
        if target == REVIEW:
            # the failing grade already set the due date to tomorrow
            logger.warning(f"Plan {plan.id} has no lesson cycle left; {response.item_id} stays in review")
    elif source.kind == QueueKind.ACTIVE:
        lesson = plan.get_lesson(source.lesson_id or "")
        if lesson is not None and is_finished(lesson):
            target = _teaching_queue(plan, now)

    plan.move(response.item_id, target, new_entry)
    transition = Transition(response.item_id, source, target, new_state)
    if transition.moved:
        logger.info(
            f"Plan {plan.id}: {response.item_id} {source.kind.value} -> {target.kind.value} "
            f"(grade {response.grade})"
        )
    return transition


def promote_lesson(
    plan: CurriculumPlan,
    lesson: PlanLesson,
    policy: MasteryPolicy = DEFAULT_POLICY,
) -> list[Transition]:
    """
    Move a finished lesson's well-known items to the learned queue.

    Items below the repetition threshold are left for carry_over_lesson().
    """
    if lesson.completed_days < CYCLE_LENGTH:
        return []

    transitions = []
    source = QueueRef.active(lesson.lesson_id)
    for entry in lesson.active_entries():
        state = entry.state
        if state is None or state.repetition < policy.promotion_min_repetitions:
            continue
        plan.move(entry.item_id, LEARNED)
        transitions.append(Transition(entry.item_id, source, LEARNED, state))

    if transitions:
        logger.info(f"Plan {plan.id}: promoted {len(transitions)} items from lesson {lesson.lesson_id}")
    return transitions


def carry_over_lesson(plan: CurriculumPlan, lesson: PlanLesson, now: datetime | date) -> list[Transition]:
    """
    Empty a finished lesson's active queues.

    Leftovers join the next lesson that still has a cycle to run; without
    one they go to REVIEW, due tomorrow.
    """
    if not is_finished(lesson) or not lesson.has_active_items:
        return []

    source = QueueRef.active(lesson.lesson_id)
    target = _teaching_queue(plan, now)
    transitions = []
    for entry in lesson.active_entries():
        new_entry = _due_tomorrow(entry, now) if target == REVIEW else entry
        plan.move(entry.item_id, target, new_entry)
        transitions.append(Transition(entry.item_id, source, target, new_entry.state))

    where = target.lesson_id or target.kind.value
    logger.info(f"Plan {plan.id}: carried {len(transitions)} items from lesson {lesson.lesson_id} to {where}")
    return transitions


def release_finished_lessons(plan: CurriculumPlan, now: datetime | date) -> list[Transition]:
    """Run carry_over_lesson() on every finished lesson still holding items."""
    transitions = []
    for lesson in plan.lessons:
        transitions.extend(carry_over_lesson(plan, lesson, now))
    return transitions


def complete_practice_day(
    plan: CurriculumPlan,
    now: datetime,
    policy: MasteryPolicy = DEFAULT_POLICY,
) -> list[Transition]:
    """
    Mark today's cycle day as done for the active lesson.

    Reaching the last cycle day runs promotion, then carries the rest of the
    lesson over. A plan with no active cycle is left untouched.
    """
    lesson = resolve_cycle(plan, now).lesson
    if lesson is None or lesson.completed_days >= CYCLE_LENGTH:
        return []
    lesson.completed_days += 1
    logger.debug(f"Plan {plan.id}: lesson {lesson.lesson_id} day {lesson.completed_days} done")
    transitions = promote_lesson(plan, lesson, policy)
    transitions.extend(carry_over_lesson(plan, lesson, now))
    return transitions


def sweep_plan(plan: CurriculumPlan, now: datetime | date) -> list[str]:
    """
    Move learned items whose due date has arrived to the review queue, and
    carry over anything left in finished lessons.

    Returns the ids that moved.

    Safe to run repeatedly: membership is checked before each move, so an
    item is never moved twice.
    """
    today = student_today(now)
    moved = [t.item_id for t in release_finished_lessons(plan, today)]
    due = []
    for item_id, entry in list(plan.learned.items()):
        if entry.state is not None and not entry.state.is_due(today):
            continue
        source, _ = plan.locate(item_id)
        if source.kind != QueueKind.LEARNED:
            continue
        plan.move(item_id, REVIEW)
        due.append(item_id)
    if due:
        logger.info(f"Plan {plan.id}: {len(due)} learned items due for review")
    return moved + due
