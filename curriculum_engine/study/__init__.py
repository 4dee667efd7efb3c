"""
Study engine: retention scheduling, mastery pipeline, session assembly and
the practice service that persists it all.
"""

from curriculum_engine.study.cycle import (
    CLASS_DAY,
    NO_ACTIVE_CYCLE,
    PracticeCycle,
    current_lesson,
    is_finished,
    resolve_cycle,
)
from curriculum_engine.study.mastery_pipeline import (
    DEFAULT_POLICY,
    GradedResponse,
    MasteryPolicy,
    Transition,
    apply_grade,
    carry_over_lesson,
    complete_practice_day,
    promote_lesson,
    release_finished_lessons,
    sweep_plan,
)
from curriculum_engine.study.practice_service import (
    BatchResult,
    PracticeService,
    SubmitResult,
    update_plan,
)
from curriculum_engine.study.retention_engine import (
    SM2Config,
    advance,
    grade_from_response,
    is_passing,
    validate_grade,
)
from curriculum_engine.study.review_sweep import SweepReport, run_review_sweep, watch_review_sweep
from curriculum_engine.study.session_assembler import DailyPracticeSession, SessionAssembler, build_session

__all__ = [
    "CLASS_DAY",
    "DEFAULT_POLICY",
    "NO_ACTIVE_CYCLE",
    "BatchResult",
    "DailyPracticeSession",
    "GradedResponse",
    "MasteryPolicy",
    "PracticeCycle",
    "PracticeService",
    "SM2Config",
    "SessionAssembler",
    "SubmitResult",
    "SweepReport",
    "Transition",
    "advance",
    "apply_grade",
    "build_session",
    "carry_over_lesson",
    "complete_practice_day",
    "current_lesson",
    "grade_from_response",
    "is_finished",
    "is_passing",
    "promote_lesson",
    "release_finished_lessons",
    "resolve_cycle",
    "run_review_sweep",
    "sweep_plan",
    "update_plan",
    "validate_grade",
    "watch_review_sweep",
]
