"""
Practice modalities and the day-to-modality schedule.

After each class a lesson is practiced over a six day cycle, one fixed
interaction format per day:

1. Flashcard with illustration
2. Listening fill-in-the-blank
3. Sentence scramble
4. Text-only flashcard recall
5. Comprehensive quiz
6. Listening multiple choice

Anything outside the cycle (class day, finished cycle) is a plain review day.
"""

from __future__ import annotations

from enum import Enum


class Modality(str, Enum):
    """Interaction format used to practice an item."""

    FLASHCARD_IMAGE = "flashcard_image"
    GAP_FILL_LISTENING = "gap_fill_listening"
    SENTENCE_SCRAMBLE = "sentence_scramble"
    FLASHCARD_RECALL = "flashcard_recall"
    QUIZ_COMPREHENSIVE = "quiz_comprehensive"
    LISTENING_CHOICE = "listening_choice"
    REVIEW = "review"

    @property
    def requires_lesson_content(self) -> bool:
        """Every modality except plain review needs the lesson's active items."""
        return self is not Modality.REVIEW

    @property
    def is_quiz(self) -> bool:
        return self in (Modality.QUIZ_COMPREHENSIVE, Modality.LISTENING_CHOICE)

    @property
    def is_flashcard(self) -> bool:
        return self in (Modality.FLASHCARD_IMAGE, Modality.FLASHCARD_RECALL)


CYCLE_LENGTH = 6

DAY_SEQUENCE: tuple[Modality, ...] = (
    Modality.FLASHCARD_IMAGE,
    Modality.GAP_FILL_LISTENING,
    Modality.SENTENCE_SCRAMBLE,
    Modality.FLASHCARD_RECALL,
    Modality.QUIZ_COMPREHENSIVE,
    Modality.LISTENING_CHOICE,
)


def mode_for_day(day: int) -> Modality:
    """
    Map a cycle-day index to its modality.

    Args:
        day: Cycle day (1-6 are practice days)

    Returns:
        The fixed modality for that day, or Modality.REVIEW outside 1-6
    """
    if 1 <= day <= CYCLE_LENGTH:
        return DAY_SEQUENCE[day - 1]
    return Modality.REVIEW
