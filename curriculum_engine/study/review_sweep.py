"""
Review Sweep.

Periodic job that moves learned items whose due date has arrived into each
plan's review queue. Every plan is written through the same optimistic
read-modify-write as graded responses; a plan that keeps losing the race is
logged and left for the next run.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger

from curriculum_engine.errors import ConcurrentUpdateConflict, PlanNotFound
from curriculum_engine.plan.store import PlanStore

from .mastery_pipeline import sweep_plan
from .practice_service import update_plan


@dataclass
class SweepReport:
    """Summary of one sweep over every plan."""

    plans_checked: int = 0
    moved: dict[str, list[str]] = field(default_factory=dict)
    failed: list[str] = field(default_factory=list)

    @property
    def total_moved(self) -> int:
        return sum(len(ids) for ids in self.moved.values())


def run_review_sweep(store: PlanStore, now: datetime, max_attempts: int = 3) -> SweepReport:
    """Sweep every plan in the store once."""
    report = SweepReport()
    for plan_id in store.list_ids():
        report.plans_checked += 1
        try:
            _, moved = update_plan(store, plan_id, lambda plan: sweep_plan(plan, now), max_attempts)
        except ConcurrentUpdateConflict as e:
            logger.error(f"Review sweep skipped plan: {e}")
            report.failed.append(plan_id)
            continue
        except PlanNotFound:
            logger.debug(f"Plan {plan_id} disappeared during the sweep")
            continue
        if moved:
            report.moved[plan_id] = moved

    logger.info(
        f"Review sweep: {report.plans_checked} plans, {report.total_moved} items moved, "
        f"{len(report.failed)} failed"
    )
    return report


def watch_review_sweep(
    store: PlanStore,
    interval_minutes: int,
    max_attempts: int = 3,
    iterations: int | None = None,
    clock=datetime.now,
    sleep=time.sleep,
) -> list[SweepReport]:
    """
    Run the sweep every interval_minutes.

    Runs forever unless iterations is given.
    """
    reports = []
    count = 0
    while iterations is None or count < iterations:
        reports.append(run_review_sweep(store, clock(), max_attempts))
        count += 1
        if iterations is not None and count >= iterations:
            break
        sleep(interval_minutes * 60)
    return reports
