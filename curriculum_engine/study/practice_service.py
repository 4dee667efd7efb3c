"""
Practice Service.

Entry point used by the API and the CLI. Reads a plan, applies the retention
engine and mastery pipeline, and writes the plan back with an optimistic
version check, retrying when another writer got there first.
"""

from __future__ import annotations

import random
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import TypeVar

from loguru import logger

from curriculum_engine.config import Settings, get_settings
from curriculum_engine.content.loader import ContentStore
from curriculum_engine.content.models import ItemType
from curriculum_engine.core.modes import mode_for_day
from curriculum_engine.errors import (
    ConcurrentUpdateConflict,
    ContentUnavailable,
    ItemNotInPlan,
    VersionConflict,
)
from curriculum_engine.plan.models import CurriculumPlan, QueueKind, SavedProgress, SchedulingState
from curriculum_engine.plan.store import PlanStore

from .cycle import resolve_cycle
from .mastery_pipeline import (
    GradedResponse,
    MasteryPolicy,
    Transition,
    apply_grade,
    complete_practice_day,
)
from .retention_engine import validate_grade
from .session_assembler import DailyPracticeSession, SessionAssembler

T = TypeVar("T")


def update_plan(
    store: PlanStore,
    plan_id: str,
    mutate: Callable[[CurriculumPlan], T],
    max_attempts: int = 3,
) -> tuple[CurriculumPlan, T]:
    """
    Optimistic read-modify-write of one plan.

    mutate() runs against a fresh copy on every attempt, so it must not keep
    side effects outside the plan it is given.

    Raises:
        ConcurrentUpdateConflict: every attempt lost the race
        PlanNotFound: no such plan
    """
    for attempt in range(1, max_attempts + 1):
        plan = store.get(plan_id)
        result = mutate(plan)
        try:
            return store.save(plan), result
        except VersionConflict as e:
            logger.warning(f"{e} (attempt {attempt}/{max_attempts})")
    raise ConcurrentUpdateConflict(plan_id, max_attempts)


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of one graded response."""

    state: SchedulingState
    queue: QueueKind
    moved: bool = False


@dataclass
class BatchResult:
    """Outcome of a whole practice session's results."""

    transitions: list[Transition] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    promoted: list[str] = field(default_factory=list)
    carried: list[str] = field(default_factory=list)
    completed_days: int | None = None


class PracticeService:
    """Daily practice sessions and graded-response handling for plans."""

    def __init__(
        self,
        plans: PlanStore,
        contents: ContentStore,
        settings: Settings | None = None,
        rng: random.Random | None = None,
    ):
        self.plans = plans
        self.contents = contents
        self.settings = settings or get_settings()
        self.policy = MasteryPolicy(promotion_min_repetitions=self.settings.promotion_min_repetitions)
        self.assembler = SessionAssembler(
            contents,
            rng=rng,
            short_segment_seconds=self.settings.short_segment_seconds,
        )

    def _update(self, plan_id: str, mutate: Callable[[CurriculumPlan], T]) -> tuple[CurriculumPlan, T]:
        return update_plan(self.plans, plan_id, mutate, self.settings.max_update_retries)

    # ========================================
    # Sessions
    # ========================================

    def get_session(self, plan_id: str, now: datetime) -> DailyPracticeSession:
        """
        Build today's practice session.

        Missing lesson content does not raise: the session comes back empty
        with ``error`` set so the caller can show it.
        """
        plan = self.plans.get(plan_id)
        try:
            return self.assembler.build_session(plan, now)
        except ContentUnavailable as e:
            logger.warning(str(e))
            cycle = resolve_cycle(plan, now)
            return DailyPracticeSession(
                modality=mode_for_day(cycle.day_index),
                day_index=cycle.day_index,
                lesson_id=e.lesson_id,
                error=str(e),
            )

    # ========================================
    # Responses
    # ========================================

    def submit_response(
        self,
        plan_id: str,
        lesson_id: str | None,
        item_id: str,
        item_type: ItemType,
        grade: int,
        now: datetime,
    ) -> SubmitResult:
        """
        Grade one item and persist the new state and queue.

        Raises:
            InvalidGrade: grade outside 0-5 (nothing is read or written)
            ItemNotInPlan: the item is in none of the plan's queues
            ConcurrentUpdateConflict: retries exhausted, plan untouched
        """
        validate_grade(grade)
        response = GradedResponse(item_id=item_id, grade=grade, item_type=ItemType(item_type), timestamp=now)

        def mutate(plan: CurriculumPlan) -> Transition:
            return apply_grade(plan, response, now, self.policy)

        _, transition = self._update(plan_id, mutate)
        if lesson_id and transition.source.lesson_id not in (None, lesson_id):
            logger.debug(
                f"Response for {item_id} named lesson {lesson_id}, item lives in {transition.source.lesson_id}"
            )
        return SubmitResult(state=transition.state, queue=transition.target.kind, moved=transition.moved)

    def submit_results(
        self,
        plan_id: str,
        responses: Iterable[GradedResponse],
        now: datetime,
    ) -> BatchResult:
        """
        Apply a finished session's responses and advance the cycle day.

        Everything lands in one write. Responses for ids outside the plan
        (for example synthetic quiz question ids) are skipped.
        """
        responses = list(responses)
        for response in responses:
            validate_grade(response.grade)

        def mutate(plan: CurriculumPlan) -> BatchResult:
            result = BatchResult()
            practiced = resolve_cycle(plan, now).lesson
            for response in responses:
                try:
                    result.transitions.append(apply_grade(plan, response, now, self.policy))
                except ItemNotInPlan as e:
                    logger.warning(f"Skipping response: {e}")
                    result.skipped.append(response.item_id)
            for transition in complete_practice_day(plan, now, self.policy):
                if transition.promoted:
                    result.promoted.append(transition.item_id)
                else:
                    result.carried.append(transition.item_id)
            if practiced is not None:
                result.completed_days = practiced.completed_days
            plan.saved_progress = None
            return result

        _, result = self._update(plan_id, mutate)
        logger.info(
            f"Plan {plan_id}: {len(result.transitions)} responses applied, "
            f"{len(result.skipped)} skipped, {len(result.promoted)} promoted, {len(result.carried)} carried over"
        )
        return result

    def complete_practice_day(self, plan_id: str, now: datetime) -> list[Transition]:
        """Advance the active lesson's completed-day counter without grading."""
        _, transitions = self._update(plan_id, lambda plan: complete_practice_day(plan, now, self.policy))
        return transitions

    # ========================================
    # Saved progress
    # ========================================

    def save_progress(self, plan_id: str, progress: SavedProgress, now: datetime | None = None) -> SavedProgress:
        progress = replace(progress, saved_at=progress.saved_at or now)

        def mutate(plan: CurriculumPlan) -> SavedProgress:
            plan.saved_progress = progress
            return progress

        _, saved = self._update(plan_id, mutate)
        return saved

    def load_progress(self, plan_id: str) -> SavedProgress | None:
        return self.plans.get(plan_id).saved_progress

    def clear_progress(self, plan_id: str) -> None:
        def mutate(plan: CurriculumPlan) -> None:
            plan.saved_progress = None

        self._update(plan_id, mutate)
