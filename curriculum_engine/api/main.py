"""
FastAPI application for the curriculum engine.

Provides REST API for:
- Daily practice sessions
- Graded responses and batch session results
- Saved session progress
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from curriculum_engine import __version__
from curriculum_engine.config import get_settings
from curriculum_engine.db.database import check_database, init_db

from .routers import practice_router

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    logger.info("Starting curriculum engine service...")
    init_db()
    logger.info(f"Service started on {settings.api_host}:{settings.api_port}")

    yield

    # Shutdown
    logger.info("Shutting down curriculum engine service...")


app = FastAPI(
    title="Curriculum Engine",
    description="""
    Adaptive spaced-repetition practice engine.

    ## Data Flow

    ```
    Plan (active / learned / review queues)
        ↓ cycle day -> modality
    Daily practice session (compiled payloads)
        ↓ graded responses
    SM-2 scheduling + queue transitions
    ```
    """,
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ========================================
# Health & Status Endpoints
# ========================================


@app.get("/", tags=["Health"])
def root() -> dict[str, str]:
    """Root endpoint returning service info."""
    return {
        "service": "curriculum-engine",
        "version": __version__,
        "status": "ok",
    }


@app.get("/health", tags=["Health"])
def health_check() -> dict[str, Any]:
    """Health check with a real database round trip."""
    db_status, db_error = check_database()

    result: dict[str, Any] = {
        "status": "healthy" if db_status == "ok" else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "components": {
            "database": db_status,
            "content_dir": str(settings.content_dir),
        },
    }
    if db_error:
        result["errors"] = {"database": db_error}
    return result


# ========================================
# Routers
# ========================================

app.include_router(practice_router, prefix="/api/plans", tags=["Practice"])
