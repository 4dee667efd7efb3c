"""
Practice router.

Endpoints for daily sessions, graded responses and saved session progress.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Response
from loguru import logger

from curriculum_engine.api.dependencies import get_service
from curriculum_engine.api.schemas import (
    BatchResponse,
    ProgressModel,
    ResponseSubmission,
    ResultsSubmission,
    SessionResponse,
    SubmitResponse,
    batch_response,
    graded_response,
    progress_from_model,
    progress_model,
    session_response,
    submit_response,
)
from curriculum_engine.errors import (
    ConcurrentUpdateConflict,
    InvalidGrade,
    ItemNotInPlan,
    PlanNotFound,
    QueueInvariantError,
)
from curriculum_engine.study.practice_service import PracticeService

router = APIRouter()


def _not_found(e: PlanNotFound | ItemNotInPlan) -> HTTPException:
    return HTTPException(status_code=404, detail=str(e))


def _inconsistent_plan(plan_id: str, e: QueueInvariantError) -> HTTPException:
    logger.exception(f"Plan {plan_id} failed a queue membership check")
    return HTTPException(status_code=500, detail=f"Plan {plan_id} is inconsistent: {e}")


# ========================================
# Session Endpoints
# ========================================


@router.get("/{plan_id}/session", response_model=SessionResponse, summary="Get today's practice session")
def get_session(
    plan_id: str,
    now: datetime | None = None,
    service: PracticeService = Depends(get_service),
) -> SessionResponse:
    """
    Build the practice session for the plan's current cycle day.

    A lesson without practice content returns an empty session with `error`
    set rather than failing.
    """
    try:
        session = service.get_session(plan_id, now or datetime.now())
    except PlanNotFound as e:
        raise _not_found(e)
    except QueueInvariantError as e:
        raise _inconsistent_plan(plan_id, e)
    return session_response(session)


# ========================================
# Response Endpoints
# ========================================


@router.post("/{plan_id}/responses", response_model=SubmitResponse, summary="Submit one graded response")
def post_response(
    plan_id: str,
    submission: ResponseSubmission,
    now: datetime | None = None,
    service: PracticeService = Depends(get_service),
) -> SubmitResponse:
    """
    Grade one item.

    - 404: unknown plan or item
    - 409: the plan kept changing underneath the write; retry later
    - 422: grade outside 0-5
    - 500: the stored plan breaks single queue membership
    """
    try:
        result = service.submit_response(
            plan_id,
            submission.lesson_id,
            submission.item_id,
            submission.item_type,
            submission.grade,
            now or datetime.now(),
        )
    except InvalidGrade as e:
        raise HTTPException(status_code=422, detail=str(e))
    except (PlanNotFound, ItemNotInPlan) as e:
        raise _not_found(e)
    except ConcurrentUpdateConflict as e:
        logger.warning(str(e))
        raise HTTPException(status_code=409, detail=str(e))
    except QueueInvariantError as e:
        raise _inconsistent_plan(plan_id, e)
    return submit_response(result)


@router.post("/{plan_id}/results", response_model=BatchResponse, summary="Submit a finished session")
def post_results(
    plan_id: str,
    submission: ResultsSubmission,
    now: datetime | None = None,
    service: PracticeService = Depends(get_service),
) -> BatchResponse:
    """Apply every response of a session and advance the cycle day."""
    now = now or datetime.now()
    try:
        result = service.submit_results(
            plan_id, [graded_response(r, now) for r in submission.responses], now
        )
    except InvalidGrade as e:
        raise HTTPException(status_code=422, detail=str(e))
    except PlanNotFound as e:
        raise _not_found(e)
    except ConcurrentUpdateConflict as e:
        logger.warning(str(e))
        raise HTTPException(status_code=409, detail=str(e))
    except QueueInvariantError as e:
        raise _inconsistent_plan(plan_id, e)
    return batch_response(result)


# ========================================
# Saved Progress Endpoints
# ========================================


@router.get("/{plan_id}/progress", response_model=ProgressModel, summary="Get saved session progress")
def get_progress(plan_id: str, service: PracticeService = Depends(get_service)) -> ProgressModel:
    try:
        progress = service.load_progress(plan_id)
    except PlanNotFound as e:
        raise _not_found(e)
    if progress is None:
        raise HTTPException(status_code=404, detail=f"No saved progress for plan {plan_id}")
    return progress_model(progress)


@router.put("/{plan_id}/progress", response_model=ProgressModel, summary="Save session progress")
def put_progress(
    plan_id: str,
    progress: ProgressModel,
    service: PracticeService = Depends(get_service),
) -> ProgressModel:
    try:
        saved = service.save_progress(plan_id, progress_from_model(progress), datetime.now())
    except PlanNotFound as e:
        raise _not_found(e)
    except ConcurrentUpdateConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    return progress_model(saved)


@router.delete("/{plan_id}/progress", status_code=204, summary="Clear session progress")
def delete_progress(plan_id: str, service: PracticeService = Depends(get_service)) -> Response:
    try:
        service.clear_progress(plan_id)
    except PlanNotFound as e:
        raise _not_found(e)
    except ConcurrentUpdateConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    return Response(status_code=204)
