"""
API routers for the curriculum engine.
"""

from curriculum_engine.api.routers.practice_router import router as practice_router

__all__ = ["practice_router"]
