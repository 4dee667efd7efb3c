"""
Error taxonomy for the practice engine.

Pure components (mode scheduler, content compiler, retention engine) degrade
instead of raising for missing optional data. Only the session assembler and
the plan store layer raise, for missing required content or write contention.
"""

from __future__ import annotations


class CurriculumError(Exception):
    """Base class for every error raised by the engine."""


class ContentUnavailable(CurriculumError):
    """The current lesson has nothing to practice for a content modality."""

    def __init__(self, plan_id: str, lesson_id: str | None, modality: str, reason: str = ""):
        self.plan_id = plan_id
        self.lesson_id = lesson_id
        self.modality = modality
        self.reason = reason or "no active items for this lesson"
        super().__init__(
            f"No practice content for plan {plan_id} "
            f"(lesson={lesson_id}, modality={modality}): {self.reason}"
        )


class VersionConflict(CurriculumError):
    """A plan save lost the race against another writer."""

    def __init__(self, plan_id: str, expected: int, actual: int | None = None):
        self.plan_id = plan_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Plan {plan_id} changed underneath us (expected version {expected}, found {actual})"
        )


class ConcurrentUpdateConflict(CurriculumError):
    """Optimistic write retries were exhausted. Safe to retry later."""

    def __init__(self, plan_id: str, attempts: int):
        self.plan_id = plan_id
        self.attempts = attempts
        super().__init__(f"Plan {plan_id} could not be updated after {attempts} attempts")


class MalformedTranscript(CurriculumError):
    """Transcript segment boundaries are missing, inverted or overlapping."""


class InvalidGrade(CurriculumError, ValueError):
    """Grade outside the 0-5 scale."""

    def __init__(self, grade: object):
        self.grade = grade
        super().__init__(f"Grade must be an integer between 0 and 5, got {grade!r}")


class MissingPrimaryContent(CurriculumError):
    """A record, or the primary text it must carry, is absent."""


class PlanNotFound(CurriculumError, KeyError):
    """No plan with the requested id."""

    def __init__(self, plan_id: str):
        self.plan_id = plan_id
        super().__init__(plan_id)

    def __str__(self) -> str:
        return f"Plan not found: {self.plan_id}"


class QueueInvariantError(CurriculumError):
    """An item id is in zero or several of {active, learned, review}."""


class ItemNotInPlan(CurriculumError, KeyError):
    """A graded item is not in any queue of the plan."""

    def __init__(self, plan_id: str, item_id: str):
        self.plan_id = plan_id
        self.item_id = item_id
        super().__init__(item_id)

    def __str__(self) -> str:
        return f"Item {self.item_id} is not part of plan {self.plan_id}"
