"""
Tests for practice-cycle resolution.
"""

from datetime import date

import pytest

from curriculum_engine.plan.models import CurriculumPlan, PlanLesson
from curriculum_engine.study.cycle import CLASS_DAY, NO_ACTIVE_CYCLE, current_lesson, resolve_cycle


def plan_with(*lessons):
    return CurriculumPlan(id="p", lessons=list(lessons))


class TestResolveCycle:
    def test_class_day(self):
        plan = plan_with(PlanLesson("L1", scheduled_date=date(2024, 3, 1)))

        cycle = resolve_cycle(plan, date(2024, 3, 1))

        assert cycle.day_index == CLASS_DAY
        assert cycle.is_class_day
        assert cycle.lesson is None

    @pytest.mark.parametrize("completed", range(6))
    def test_next_day_follows_completed_days(self, completed):
        lesson = PlanLesson("L1", scheduled_date=date(2024, 3, 1), completed_days=completed)

        cycle = resolve_cycle(plan_with(lesson), date(2024, 3, 10))

        assert cycle.day_index == completed + 1
        assert cycle.lesson is lesson

    def test_cannot_get_ahead_of_the_calendar(self):
        lesson = PlanLesson("L1", scheduled_date=date(2024, 3, 1), completed_days=2)
        assert resolve_cycle(plan_with(lesson), date(2024, 3, 3)).day_index == NO_ACTIVE_CYCLE

    def test_finished_cycle(self):
        lesson = PlanLesson("L1", scheduled_date=date(2024, 3, 1), completed_days=6)
        assert resolve_cycle(plan_with(lesson), date(2024, 3, 20)).day_index == NO_ACTIVE_CYCLE

    def test_most_recent_class_drives_cycle(self):
        old = PlanLesson("L1", scheduled_date=date(2024, 3, 1), completed_days=1)
        new = PlanLesson("L2", scheduled_date=date(2024, 3, 8))

        cycle = resolve_cycle(plan_with(old, new), date(2024, 3, 9))

        assert cycle.lesson is new
        assert cycle.day_index == 1

    def test_no_dated_lessons(self):
        assert resolve_cycle(plan_with(PlanLesson("L1")), date(2024, 3, 9)).day_index == NO_ACTIVE_CYCLE


class TestCurrentLesson:
    def test_active_cycle_lesson(self):
        lesson = PlanLesson("L1", scheduled_date=date(2024, 3, 1))
        assert current_lesson(plan_with(lesson), date(2024, 3, 2)) is lesson

    def test_unfinished_lesson_ahead_of_the_calendar(self):
        lesson = PlanLesson("L1", scheduled_date=date(2024, 3, 1), completed_days=2)
        assert current_lesson(plan_with(lesson), date(2024, 3, 2)) is lesson

    def test_class_day_lesson(self):
        old = PlanLesson("L1", scheduled_date=date(2024, 3, 1), completed_days=6)
        new = PlanLesson("L2", scheduled_date=date(2024, 3, 8))
        assert current_lesson(plan_with(old, new), date(2024, 3, 8)) is new

    def test_finished_lesson_hands_over_to_nearest_upcoming(self):
        old = PlanLesson("L1", scheduled_date=date(2024, 3, 1), completed_days=6)
        later = PlanLesson("L3", scheduled_date=date(2024, 5, 1))
        sooner = PlanLesson("L2", scheduled_date=date(2024, 4, 1))
        assert current_lesson(plan_with(old, later, sooner), date(2024, 3, 20)) is sooner

    def test_finished_lesson_without_successor(self):
        old = PlanLesson("L1", scheduled_date=date(2024, 3, 1), completed_days=6)
        assert current_lesson(plan_with(old), date(2024, 3, 20)) is None

    def test_undated_lessons_never_receive_items(self):
        first, second = PlanLesson("L1"), PlanLesson("L2")
        assert current_lesson(plan_with(first, second), date(2024, 3, 20)) is None

    def test_empty_plan(self):
        assert current_lesson(plan_with(), date(2024, 3, 20)) is None
