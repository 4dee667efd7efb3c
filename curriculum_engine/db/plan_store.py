"""
SQLAlchemy-backed plan store.

save() issues UPDATE ... WHERE version = :expected and treats an unchanged
row count as a lost race.
"""

from __future__ import annotations

from loguru import logger
from sqlalchemy import Engine, func, select, update
from sqlalchemy.orm import sessionmaker

from curriculum_engine.errors import PlanNotFound, VersionConflict
from curriculum_engine.plan.models import CurriculumPlan
from curriculum_engine.plan.store import plan_from_document, plan_to_document

from .database import get_engine, session_scope
from .models import PlanRecord


class SqlPlanStore:
    """Plan store on any SQLAlchemy-supported database."""

    def __init__(self, engine: Engine | None = None):
        self.engine = engine or get_engine()
        self._factory = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

    def get(self, plan_id: str) -> CurriculumPlan:
        with session_scope(self._factory) as session:
            record = session.get(PlanRecord, plan_id)
            if record is None:
                raise PlanNotFound(plan_id)
            plan = plan_from_document(record.document)
            plan.version = record.version
            return plan

    def add(self, plan: CurriculumPlan) -> CurriculumPlan:
        with session_scope(self._factory) as session:
            if session.get(PlanRecord, plan.id) is not None:
                raise ValueError(f"Plan {plan.id} already exists")
            session.add(
                PlanRecord(
                    id=plan.id,
                    student_id=plan.student_id,
                    document=plan_to_document(plan),
                    version=plan.version,
                )
            )
        logger.debug(f"Created plan {plan.id}")
        return plan

    def save(self, plan: CurriculumPlan) -> CurriculumPlan:
        new_version = plan.version + 1
        document = plan_to_document(plan)
        document["version"] = new_version

        with session_scope(self._factory) as session:
            result = session.execute(
                update(PlanRecord)
                .where(PlanRecord.id == plan.id, PlanRecord.version == plan.version)
                .values(document=document, version=new_version, updated_at=func.now())
            )
            if result.rowcount == 0:
                current = session.execute(
                    select(PlanRecord.version).where(PlanRecord.id == plan.id)
                ).scalar_one_or_none()
                if current is None:
                    raise PlanNotFound(plan.id)
                raise VersionConflict(plan.id, plan.version, current)

        return plan_from_document(document)

    def list_ids(self) -> list[str]:
        with session_scope(self._factory) as session:
            return list(session.execute(select(PlanRecord.id).order_by(PlanRecord.id)).scalars())
