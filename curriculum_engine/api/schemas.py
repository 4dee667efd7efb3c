"""
Request/response models for the practice API.

Engine types are plain dataclasses; these pydantic models are the wire shape
and the converters below map one onto the other.
"""

from __future__ import annotations

import dataclasses
from datetime import date, datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, model_validator

from curriculum_engine.content.models import ItemType
from curriculum_engine.plan.models import SavedProgress, SchedulingState
from curriculum_engine.practice import PracticeItem
from curriculum_engine.study.mastery_pipeline import GradedResponse
from curriculum_engine.study.practice_service import BatchResult, SubmitResult
from curriculum_engine.study.retention_engine import grade_from_response
from curriculum_engine.study.session_assembler import DailyPracticeSession

# ========================================
# Payloads
# ========================================


class AudioWindowModel(BaseModel):
    start: float
    end: float
    url: str


class FlashcardPayloadModel(BaseModel):
    kind: Literal["flashcard"] = "flashcard"
    front: str
    back: str
    image_url: str | None = None
    phonetic: str | None = None


class GapFillPayloadModel(BaseModel):
    kind: Literal["gap_fill"] = "gap_fill"
    sentence: str
    answer: str
    audio: AudioWindowModel


class ScramblePayloadModel(BaseModel):
    kind: Literal["scramble"] = "scramble"
    correct_order: list[str]
    scrambled: list[str]


class MultipleChoicePayloadModel(BaseModel):
    kind: Literal["multiple_choice"] = "multiple_choice"
    question: str
    options: list[str]
    correct_index: int
    explanation: str = ""
    section: str = ""
    audio: AudioWindowModel | None = None


class PendingPayloadModel(BaseModel):
    kind: Literal["pending"] = "pending"


PayloadModel = Annotated[
    Union[
        FlashcardPayloadModel,
        GapFillPayloadModel,
        ScramblePayloadModel,
        MultipleChoicePayloadModel,
        PendingPayloadModel,
    ],
    Field(discriminator="kind"),
]

_PAYLOAD_ADAPTER = TypeAdapter(PayloadModel)


# ========================================
# Sessions
# ========================================


class SchedulingStateModel(BaseModel):
    interval: int
    repetition: int
    ease_factor: float
    due_date: date | None = None


class PracticeItemModel(BaseModel):
    id: str
    item_type: str
    modality: str
    text: str
    payload: PayloadModel
    state: SchedulingStateModel | None = None


class SessionResponse(BaseModel):
    """Today's practice session."""

    modality: str
    day_index: int
    lesson_id: str | None = None
    items: list[PracticeItemModel]
    total_items: int
    review_count: int
    error: str | None = None


# ========================================
# Responses
# ========================================


class ResponseSubmission(BaseModel):
    """
    One answer.

    Either an explicit SM-2 grade, or a right/wrong answer with its response
    time, which is converted with grade_from_response().
    """

    lesson_id: str | None = None
    item_id: str
    item_type: ItemType = ItemType.VOCABULARY
    grade: int | None = Field(None, ge=0, le=5, description="SM-2 grade, 0 (blackout) to 5 (perfect)")
    is_correct: bool | None = Field(None, description="Answer was right (used when grade is omitted)")
    response_ms: int | None = Field(None, ge=0, description="Time taken to answer, in milliseconds")

    @model_validator(mode="after")
    def resolve_grade(self) -> ResponseSubmission:
        if self.grade is None:
            if self.is_correct is None or self.response_ms is None:
                raise ValueError("Either grade or both is_correct and response_ms are required")
            self.grade = grade_from_response(self.is_correct, self.response_ms)
        return self


class SubmitResponse(BaseModel):
    state: SchedulingStateModel
    queue: str
    moved: bool


class ResultsSubmission(BaseModel):
    """Every answer from a finished session."""

    responses: list[ResponseSubmission]


class BatchResponse(BaseModel):
    applied: int
    skipped: list[str]
    promoted: list[str]
    carried: list[str] = Field(default_factory=list)
    completed_days: int | None = None


class ProgressModel(BaseModel):
    day_index: int
    current_index: int = 0
    answered_ids: list[str] = Field(default_factory=list)
    saved_at: datetime | None = None


# ========================================
# Converters
# ========================================


def state_model(state: SchedulingState) -> SchedulingStateModel:
    return SchedulingStateModel(
        interval=state.interval,
        repetition=state.repetition,
        ease_factor=state.ease_factor,
        due_date=state.due_date,
    )


def item_model(item: PracticeItem) -> PracticeItemModel:
    return PracticeItemModel(
        id=item.id,
        item_type=item.item_type.value,
        modality=item.modality.value,
        text=item.text,
        payload=_PAYLOAD_ADAPTER.validate_python(dataclasses.asdict(item.payload)),
        state=state_model(item.state) if item.state else None,
    )


def session_response(session: DailyPracticeSession) -> SessionResponse:
    return SessionResponse(
        modality=session.modality.value,
        day_index=session.day_index,
        lesson_id=session.lesson_id,
        items=[item_model(item) for item in session.items],
        total_items=session.total_items,
        review_count=session.review_count,
        error=session.error,
    )


def submit_response(result: SubmitResult) -> SubmitResponse:
    return SubmitResponse(state=state_model(result.state), queue=result.queue.value, moved=result.moved)


def batch_response(result: BatchResult) -> BatchResponse:
    return BatchResponse(
        applied=len(result.transitions),
        skipped=result.skipped,
        promoted=result.promoted,
        carried=result.carried,
        completed_days=result.completed_days,
    )


def graded_response(submission: ResponseSubmission, now: datetime) -> GradedResponse:
    return GradedResponse(
        item_id=submission.item_id,
        grade=submission.grade,
        item_type=submission.item_type,
        timestamp=now,
    )


def progress_model(progress: SavedProgress) -> ProgressModel:
    return ProgressModel(
        day_index=progress.day_index,
        current_index=progress.current_index,
        answered_ids=list(progress.answered_ids),
        saved_at=progress.saved_at,
    )


def progress_from_model(model: ProgressModel) -> SavedProgress:
    return SavedProgress(
        day_index=model.day_index,
        current_index=model.current_index,
        answered_ids=list(model.answered_ids),
        saved_at=model.saved_at,
    )
