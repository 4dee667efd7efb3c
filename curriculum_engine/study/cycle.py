"""
Practice-cycle resolution.

Each class opens a six day practice cycle for its lesson. The cycle day is
driven by how many practice days the student has completed, capped by the
calendar: a student who skipped days can catch up, but cannot practice a day
that has not arrived yet.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from curriculum_engine.core.modes import CYCLE_LENGTH
from curriculum_engine.plan.models import CurriculumPlan, PlanLesson

CLASS_DAY = 0
NO_ACTIVE_CYCLE = CYCLE_LENGTH + 1


@dataclass(frozen=True)
class PracticeCycle:
    """Where a plan stands on a given calendar day."""

    day_index: int
    lesson: PlanLesson | None = None
    is_class_day: bool = False


def student_today(now: datetime | date) -> date:
    return now.date() if isinstance(now, datetime) else now


def _dated_lessons(plan: CurriculumPlan) -> list[PlanLesson]:
    """Lessons with a schedule date, newest first."""
    dated = [lesson for lesson in plan.lessons if lesson.scheduled_date is not None]
    return sorted(dated, key=lambda lesson: lesson.scheduled_date, reverse=True)


def resolve_cycle(plan: CurriculumPlan, now: datetime | date) -> PracticeCycle:
    """
    Resolve today's cycle day and active lesson.

    - A class today: day 0, no practice lesson
    - Otherwise the most recent past class drives the cycle if its next day
      (completed + 1) is within 1-6 and has already arrived
    - Anything else: day 7, no active lesson
    """
    today = student_today(now)
    lessons = _dated_lessons(plan)

    if any(lesson.scheduled_date == today for lesson in lessons):
        return PracticeCycle(day_index=CLASS_DAY, is_class_day=True)

    last_class = next((lesson for lesson in lessons if lesson.scheduled_date < today), None)
    if last_class is not None:
        days_since = (today - last_class.scheduled_date).days
        next_day = last_class.completed_days + 1
        if next_day <= CYCLE_LENGTH and next_day <= days_since:
            return PracticeCycle(day_index=next_day, lesson=last_class)

    return PracticeCycle(day_index=NO_ACTIVE_CYCLE)


def is_finished(lesson: PlanLesson) -> bool:
    return lesson.completed_days >= CYCLE_LENGTH


def current_lesson(plan: CurriculumPlan, now: datetime | date) -> PlanLesson | None:
    """
    Lesson that receives remediated and carried-over items.

    Only a lesson whose cycle is still to run qualifies: the active cycle
    lesson if any, else the latest lesson scheduled on or before today while
    its cycle is unfinished, else the nearest upcoming lesson. None when no
    dated lesson has a cycle left.
    """
    cycle = resolve_cycle(plan, now)
    if cycle.lesson is not None:
        return cycle.lesson
    today = student_today(now)
    lessons = _dated_lessons(plan)
    last_class = next((lesson for lesson in lessons if lesson.scheduled_date <= today), None)
    if last_class is not None and not is_finished(last_class):
        return last_class
    upcoming = [lesson for lesson in lessons if lesson.scheduled_date > today and not is_finished(lesson)]
    # newest first, so the nearest upcoming lesson is last
    return upcoming[-1] if upcoming else None
