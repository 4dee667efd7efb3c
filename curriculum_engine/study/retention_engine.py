"""
SM-2 Retention Engine.

Updates an item's scheduling state from a graded response.

SM-2 Grade Scale:
0 - Complete blackout, wrong response
1 - Incorrect, but upon seeing answer remembered
2 - Incorrect, but answer seemed easy to recall
3 - Correct, but with significant difficulty
4 - Correct, with some hesitation
5 - Correct, with perfect recall

Grades below 3 are failures: the item restarts at a one day interval and its
ease factor is left alone. Passing grades grow the interval 1 -> 6 ->
previous interval x ease factor, and move the ease factor by the SM-2 delta.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from curriculum_engine.errors import InvalidGrade
from curriculum_engine.plan.models import (
    INITIAL_EASE_FACTOR,
    MINIMUM_EASE_FACTOR,
    SchedulingState,
)

MIN_GRADE = 0
MAX_GRADE = 5
PASSING_GRADE = 3


@dataclass(frozen=True)
class SM2Config:
    """Configuration for SM-2 algorithm."""

    initial_easiness: float = INITIAL_EASE_FACTOR
    minimum_easiness: float = MINIMUM_EASE_FACTOR
    first_interval: int = 1  # Days after the first pass
    second_interval: int = 6  # Days after the second pass
    fail_interval: int = 1


DEFAULT_CONFIG = SM2Config()


def validate_grade(grade: object) -> int:
    """
    Check a grade at the API boundary.

    Raises:
        InvalidGrade: not an integer in 0..5
    """
    if isinstance(grade, bool) or not isinstance(grade, int):
        raise InvalidGrade(grade)
    if not MIN_GRADE <= grade <= MAX_GRADE:
        raise InvalidGrade(grade)
    return grade


def is_passing(grade: int) -> bool:
    return grade >= PASSING_GRADE


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _today(now: datetime | date) -> date:
    return now.date() if isinstance(now, datetime) else now


def ease_delta(grade: int) -> float:
    # EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
    miss = MAX_GRADE - grade
    return 0.1 - miss * (0.08 + miss * 0.02)


def advance(
    state: SchedulingState | None,
    grade: int,
    now: datetime | date,
    config: SM2Config = DEFAULT_CONFIG,
) -> SchedulingState:
    """
    Compute the next scheduling state for a graded response.

    Args:
        state: Current state, or None for an item never practiced
        grade: SM-2 grade (0-5)
        now: Response time; only its calendar date is used

    Returns:
        New SchedulingState (the input is not modified)
    """
    validate_grade(grade)
    today = _today(now)
    if state is None:
        state = SchedulingState(ease_factor=config.initial_easiness, due_date=today)

    if not is_passing(grade):
        return SchedulingState(
            interval=config.fail_interval,
            repetition=0,
            ease_factor=state.ease_factor,
            due_date=today + timedelta(days=config.fail_interval),
        )

    repetition = state.repetition + 1
    if repetition == 1:
        interval = config.first_interval
    elif repetition == 2:
        interval = config.second_interval
    else:
        interval = max(1, _round_half_up(state.interval * state.ease_factor))

    ease_factor = max(config.minimum_easiness, state.ease_factor + ease_delta(grade))

    return SchedulingState(
        interval=interval,
        repetition=repetition,
        ease_factor=ease_factor,
        due_date=today + timedelta(days=interval),
    )


def grade_from_response(
    is_correct: bool,
    response_ms: int,
    expected_ms: int = 10000,
) -> int:
    """
    Convert a timed right/wrong answer to an SM-2 grade.

    Args:
        is_correct: Whether the answer was correct
        response_ms: Time taken to respond
        expected_ms: Expected response time

    Returns:
        Grade 0-5
    """
    if not is_correct:
        # Incorrect responses: 0-2
        if response_ms < expected_ms * 0.5:
            return 2  # Quick wrong = almost knew it
        elif response_ms < expected_ms:
            return 1  # Wrong but remembered when shown
        else:
            return 0  # Complete blackout

    # Correct responses: 3-5
    if response_ms < expected_ms * 0.5:
        return 5  # Quick and correct = perfect recall
    elif response_ms < expected_ms:
        return 4  # Correct with some hesitation
    else:
        return 3  # Correct but struggled
