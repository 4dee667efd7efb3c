"""
Curriculum plans: queues, scheduling state and plan stores.
"""

from curriculum_engine.plan.models import (
    LEARNED,
    REVIEW,
    CurriculumPlan,
    PlanLesson,
    QueueEntry,
    QueueKind,
    QueueRef,
    SavedProgress,
    SchedulingState,
)
from curriculum_engine.plan.store import (
    InMemoryPlanStore,
    PlanStore,
    plan_from_document,
    plan_to_document,
)

__all__ = [
    "LEARNED",
    "REVIEW",
    "CurriculumPlan",
    "InMemoryPlanStore",
    "PlanLesson",
    "PlanStore",
    "QueueEntry",
    "QueueKind",
    "QueueRef",
    "SavedProgress",
    "SchedulingState",
    "plan_from_document",
    "plan_to_document",
]
