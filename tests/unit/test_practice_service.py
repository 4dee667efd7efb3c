"""
Tests for the practice service read-modify-write flow and the review sweep.
"""

import random
from datetime import datetime

import pytest

from curriculum_engine.content.loader import InMemoryContentStore
from curriculum_engine.content.models import ItemType
from curriculum_engine.errors import (
    ConcurrentUpdateConflict,
    InvalidGrade,
    ItemNotInPlan,
    PlanNotFound,
    VersionConflict,
)
from curriculum_engine.plan.models import QueueKind, SavedProgress, SchedulingState
from curriculum_engine.plan.store import InMemoryPlanStore
from curriculum_engine.study.mastery_pipeline import GradedResponse
from curriculum_engine.study.practice_service import PracticeService
from curriculum_engine.study.review_sweep import run_review_sweep, watch_review_sweep


class FlakyPlanStore(InMemoryPlanStore):
    """Loses the first `conflicts` saves to a simulated concurrent writer."""

    def __init__(self, plans, conflicts):
        super().__init__(plans)
        self.conflicts = conflicts
        self.save_calls = 0

    def save(self, plan):
        self.save_calls += 1
        if self.conflicts > 0:
            self.conflicts -= 1
            raise VersionConflict(plan.id, plan.version, plan.version + 1)
        return super().save(plan)


@pytest.fixture
def service(plan_store, content_store, settings):
    return PracticeService(plan_store, content_store, settings, rng=random.Random(3))


class TestGetSession:
    def test_session(self, service, day_one):
        session = service.get_session("plan-1", day_one)
        assert session.total_items == 4
        assert session.error is None

    def test_missing_content_becomes_session_error(self, plan_store, settings, day_one):
        service = PracticeService(plan_store, InMemoryContentStore(), settings)

        session = service.get_session("plan-1", day_one)

        assert session.items == []
        assert session.day_index == 1
        assert "L1" in session.error

    def test_unknown_plan(self, service, day_one):
        with pytest.raises(PlanNotFound):
            service.get_session("nope", day_one)


class TestSubmitResponse:
    def test_persists_new_state(self, service, plan_store, day_one):
        result = service.submit_response("plan-1", "L1", "v-apple", ItemType.VOCABULARY, 5, day_one)

        assert result.queue == QueueKind.ACTIVE
        assert result.state.repetition == 1
        stored = plan_store.get("plan-1")
        assert stored.version == 1
        assert stored.lessons[0].active_vocabulary["v-apple"].state == result.state

    def test_failed_review_moves_to_active(self, service, plan_store, day_one):
        result = service.submit_response("plan-1", "L1", "v-dog", ItemType.VOCABULARY, 0, day_one)

        assert result.moved
        assert result.queue == QueueKind.ACTIVE
        assert "v-dog" in plan_store.get("plan-1").lessons[0].active_vocabulary

    @pytest.mark.parametrize("grade", [-1, 6])
    def test_invalid_grade_writes_nothing(self, service, plan_store, day_one, grade):
        with pytest.raises(InvalidGrade):
            service.submit_response("plan-1", "L1", "v-apple", ItemType.VOCABULARY, grade, day_one)
        assert plan_store.get("plan-1").version == 0

    def test_unknown_item(self, service, day_one):
        with pytest.raises(ItemNotInPlan):
            service.submit_response("plan-1", "L1", "v-nope", ItemType.VOCABULARY, 4, day_one)

    def test_retries_after_conflict(self, plan, content_store, settings, day_one):
        store = FlakyPlanStore([plan], conflicts=2)
        service = PracticeService(store, content_store, settings)

        result = service.submit_response("plan-1", "L1", "v-apple", ItemType.VOCABULARY, 4, day_one)

        assert store.save_calls == 3
        assert result.state.repetition == 1
        # Only the winning attempt is applied
        assert store.get("plan-1").lessons[0].active_vocabulary["v-apple"].state.repetition == 1

    def test_gives_up_after_max_retries(self, plan, content_store, settings, day_one):
        store = FlakyPlanStore([plan], conflicts=10)
        service = PracticeService(store, content_store, settings)

        with pytest.raises(ConcurrentUpdateConflict) as exc:
            service.submit_response("plan-1", "L1", "v-apple", ItemType.VOCABULARY, 4, day_one)

        assert exc.value.attempts == settings.max_update_retries
        assert store.get("plan-1").version == 0
        assert store.get("plan-1").lessons[0].active_vocabulary["v-apple"].state is None


class TestSubmitResults:
    def test_batch_advances_cycle_and_clears_progress(self, service, plan_store, day_one):
        service.save_progress("plan-1", SavedProgress(day_index=1, current_index=1), day_one)

        result = service.submit_results(
            "plan-1",
            [
                GradedResponse("v-apple", 4),
                GradedResponse("s-svo", 3, ItemType.STRUCTURE),
                GradedResponse("quiz-1-0", 5),
            ],
            day_one,
        )

        assert len(result.transitions) == 2
        assert result.skipped == ["quiz-1-0"]
        assert result.completed_days == 1
        stored = plan_store.get("plan-1")
        assert stored.lessons[0].completed_days == 1
        assert stored.saved_progress is None
        assert stored.version == 2

    def test_invalid_grade_rejects_whole_batch(self, service, plan_store, day_one):
        with pytest.raises(InvalidGrade):
            service.submit_results("plan-1", [GradedResponse("v-apple", 4), GradedResponse("v-run", 9)], day_one)
        assert plan_store.get("plan-1").version == 0

    def test_final_day_promotes(self, make_plan, content_store, settings):
        plan = make_plan(completed_days=5, states={"v-apple": SchedulingState(interval=1, repetition=1)})
        service = PracticeService(InMemoryPlanStore([plan]), content_store, settings)

        result = service.submit_results("plan-1", [GradedResponse("v-apple", 5)], datetime(2024, 3, 7))

        assert result.promoted == ["v-apple"]
        assert result.completed_days == 6

    def test_complete_practice_day_alone(self, service, plan_store, day_one):
        service.complete_practice_day("plan-1", day_one)
        assert plan_store.get("plan-1").lessons[0].completed_days == 1


class TestProgress:
    def test_save_load_clear(self, service, day_one):
        assert service.load_progress("plan-1") is None

        service.save_progress("plan-1", SavedProgress(day_index=1, current_index=2, answered_ids=["v-apple"]), day_one)
        loaded = service.load_progress("plan-1")

        assert loaded.current_index == 2
        assert loaded.answered_ids == ["v-apple"]
        assert loaded.saved_at == day_one

        service.clear_progress("plan-1")
        assert service.load_progress("plan-1") is None


class TestReviewSweep:
    def test_moves_due_items_once(self, plan_store):
        now = datetime(2024, 3, 10, 3, 0)

        report = run_review_sweep(plan_store, now)
        again = run_review_sweep(plan_store, now)

        assert report.moved == {"plan-1": ["v-cat"]}
        assert again.total_moved == 0
        assert "v-cat" in plan_store.get("plan-1").review

    def test_conflicting_plan_is_reported(self, plan):
        store = FlakyPlanStore([plan], conflicts=10)

        report = run_review_sweep(store, datetime(2024, 3, 10), max_attempts=2)

        assert report.failed == ["plan-1"]
        assert store.save_calls == 2

    def test_watch_runs_on_cadence(self, plan_store):
        sleeps = []

        reports = watch_review_sweep(
            plan_store,
            interval_minutes=15,
            iterations=2,
            clock=lambda: datetime(2024, 3, 10),
            sleep=sleeps.append,
        )

        assert len(reports) == 2
        assert sleeps == [900]
