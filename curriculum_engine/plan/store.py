"""
Plan store interface and in-memory implementation.

Plans are written with optimistic concurrency: every plan carries a version,
and save() only succeeds if the stored version still matches the one the
caller read. The loser of a race gets VersionConflict and must re-read.
"""

from __future__ import annotations

import copy
import threading
from typing import Any, Protocol

from pydantic import TypeAdapter

from curriculum_engine.errors import PlanNotFound, VersionConflict

from .models import CurriculumPlan

_PLAN_ADAPTER = TypeAdapter(CurriculumPlan)


def plan_to_document(plan: CurriculumPlan) -> dict[str, Any]:
    """JSON-compatible dict for a plan."""
    return _PLAN_ADAPTER.dump_python(plan, mode="json")


def plan_from_document(document: dict[str, Any]) -> CurriculumPlan:
    return _PLAN_ADAPTER.validate_python(document)


class PlanStore(Protocol):
    """Transactional read and read-modify-write of curriculum plans."""

    def get(self, plan_id: str) -> CurriculumPlan:
        """Return a private copy of the plan. Raises PlanNotFound."""
        ...

    def save(self, plan: CurriculumPlan) -> CurriculumPlan:
        """Write the plan if nobody else did since it was read. Raises VersionConflict."""
        ...

    def add(self, plan: CurriculumPlan) -> CurriculumPlan:
        ...

    def list_ids(self) -> list[str]:
        ...


class InMemoryPlanStore:
    """Thread-safe dict-backed plan store, used in tests and the CLI demo."""

    def __init__(self, plans: list[CurriculumPlan] | None = None):
        self._plans: dict[str, CurriculumPlan] = {}
        self._lock = threading.Lock()
        for plan in plans or []:
            self.add(plan)

    def get(self, plan_id: str) -> CurriculumPlan:
        with self._lock:
            plan = self._plans.get(plan_id)
            if plan is None:
                raise PlanNotFound(plan_id)
            return copy.deepcopy(plan)

    def add(self, plan: CurriculumPlan) -> CurriculumPlan:
        with self._lock:
            if plan.id in self._plans:
                raise ValueError(f"Plan {plan.id} already exists")
            self._plans[plan.id] = copy.deepcopy(plan)
            return copy.deepcopy(plan)

    def save(self, plan: CurriculumPlan) -> CurriculumPlan:
        with self._lock:
            stored = self._plans.get(plan.id)
            if stored is None:
                raise PlanNotFound(plan.id)
            if stored.version != plan.version:
                raise VersionConflict(plan.id, plan.version, stored.version)
            saved = copy.deepcopy(plan)
            saved.version += 1
            self._plans[plan.id] = saved
            return copy.deepcopy(saved)

    def list_ids(self) -> list[str]:
        with self._lock:
            return list(self._plans)
