"""
Database access for plan persistence.
"""

from curriculum_engine.db.database import check_database, get_engine, init_db, make_engine, session_scope
from curriculum_engine.db.models import Base, PlanRecord
from curriculum_engine.db.plan_store import SqlPlanStore

__all__ = [
    "Base",
    "PlanRecord",
    "SqlPlanStore",
    "check_database",
    "get_engine",
    "init_db",
    "make_engine",
    "session_scope",
]
