"""
FastAPI dependency providers.

Tests swap the service with app.dependency_overrides[get_service].
"""

from __future__ import annotations

from functools import lru_cache

from curriculum_engine.config import get_settings
from curriculum_engine.content.loader import ContentLoader
from curriculum_engine.study.practice_service import PracticeService


@lru_cache(maxsize=1)
def get_service() -> PracticeService:
    """Practice service backed by the configured database and content directory."""
    from curriculum_engine.db.plan_store import SqlPlanStore

    settings = get_settings()
    contents = ContentLoader(settings.content_dir).load()
    return PracticeService(SqlPlanStore(), contents, settings)
