"""
Curriculum plan state.

A plan is a student's ordered list of lessons. Each lesson owns two active
queues (vocabulary, structures); the plan owns the learned and review queues.
Queues are insertion-ordered mappings of item id -> QueueEntry, and an item id
lives in exactly one of them. All membership changes go through
CurriculumPlan.move(), which checks that invariant.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum

from curriculum_engine.content.models import ItemType
from curriculum_engine.errors import QueueInvariantError

INITIAL_EASE_FACTOR = 2.5
MINIMUM_EASE_FACTOR = 1.3


@dataclass(frozen=True)
class SchedulingState:
    """SM-2 retention record for one item in one plan."""

    interval: int = 0  # Days until next review
    repetition: int = 0  # Consecutive passing grades
    ease_factor: float = INITIAL_EASE_FACTOR
    due_date: date | None = None

    def __post_init__(self):
        if self.interval < 0:
            raise ValueError(f"interval must be >= 0, got {self.interval}")
        if self.repetition < 0:
            raise ValueError(f"repetition must be >= 0, got {self.repetition}")

    @classmethod
    def initial(cls, now: datetime | date) -> SchedulingState:
        """Identity state for an item that has never been practiced."""
        today = now.date() if isinstance(now, datetime) else now
        return cls(due_date=today)

    def is_due(self, today: date) -> bool:
        return self.due_date is None or self.due_date <= today


class QueueKind(str, Enum):
    """Mastery stage, i.e. which kind of queue holds the item."""

    ACTIVE = "active"
    LEARNED = "learned"
    REVIEW = "review"


@dataclass
class QueueEntry:
    """An item reference inside one of the plan's queues."""

    item_id: str
    item_type: ItemType = ItemType.VOCABULARY
    state: SchedulingState | None = None
    updated_at: datetime | None = None
    last_reviewed_at: datetime | None = None

    def reviewed_on(self, day: date) -> bool:
        return self.last_reviewed_at is not None and self.last_reviewed_at.date() == day


@dataclass(frozen=True)
class QueueRef:
    """Address of a queue: kind plus the owning lesson for active queues."""

    kind: QueueKind
    lesson_id: str | None = None

    @classmethod
    def active(cls, lesson_id: str) -> QueueRef:
        return cls(QueueKind.ACTIVE, lesson_id)


LEARNED = QueueRef(QueueKind.LEARNED)
REVIEW = QueueRef(QueueKind.REVIEW)


@dataclass
class PlanLesson:
    """A lesson reference inside a plan."""

    lesson_id: str
    scheduled_date: date | None = None
    class_id: str | None = None
    completed_days: int = 0  # 0-6
    active_vocabulary: dict[str, QueueEntry] = field(default_factory=dict)
    active_structures: dict[str, QueueEntry] = field(default_factory=dict)

    def active_queue(self, item_type: ItemType) -> dict[str, QueueEntry]:
        if item_type == ItemType.STRUCTURE:
            return self.active_structures
        return self.active_vocabulary

    def active_entries(self) -> list[QueueEntry]:
        return list(self.active_vocabulary.values()) + list(self.active_structures.values())

    @property
    def has_active_items(self) -> bool:
        return bool(self.active_vocabulary or self.active_structures)


@dataclass
class SavedProgress:
    """In-flight practice session, kept so a student can resume it."""

    day_index: int
    current_index: int = 0
    answered_ids: list[str] = field(default_factory=list)
    saved_at: datetime | None = None


@dataclass
class CurriculumPlan:
    """Per-student curriculum plan."""

    id: str
    student_id: str = ""
    lessons: list[PlanLesson] = field(default_factory=list)
    learned: dict[str, QueueEntry] = field(default_factory=dict)
    review: dict[str, QueueEntry] = field(default_factory=dict)
    version: int = 0
    saved_progress: SavedProgress | None = None

    def get_lesson(self, lesson_id: str) -> PlanLesson | None:
        for lesson in self.lessons:
            if lesson.lesson_id == lesson_id:
                return lesson
        return None

    # ------------------------------------------------------------------
    # Queue membership
    # ------------------------------------------------------------------

    def _memberships(self, item_id: str) -> list[tuple[QueueRef, dict[str, QueueEntry]]]:
        found = []
        for lesson in self.lessons:
            for queue in (lesson.active_vocabulary, lesson.active_structures):
                if item_id in queue:
                    found.append((QueueRef.active(lesson.lesson_id), queue))
        if item_id in self.learned:
            found.append((LEARNED, self.learned))
        if item_id in self.review:
            found.append((REVIEW, self.review))
        return found

    def locate(self, item_id: str) -> tuple[QueueRef, QueueEntry]:
        """
        Find the single queue holding an item.

        Raises:
            QueueInvariantError: the id is in no queue or in several
        """
        found = self._memberships(item_id)
        if len(found) != 1:
            where = [ref.kind.value for ref, _ in found]
            raise QueueInvariantError(
                f"Item {item_id} must be in exactly one queue of plan {self.id}, found {where or 'none'}"
            )
        ref, queue = found[0]
        return ref, queue[item_id]

    def find(self, item_id: str) -> tuple[QueueRef, QueueEntry] | None:
        """Like locate(), but None when the item is not in the plan."""
        if not self._memberships(item_id):
            return None
        return self.locate(item_id)

    def _queue(self, ref: QueueRef, item_type: ItemType) -> dict[str, QueueEntry]:
        if ref.kind == QueueKind.LEARNED:
            return self.learned
        if ref.kind == QueueKind.REVIEW:
            return self.review
        lesson = self.get_lesson(ref.lesson_id or "")
        if lesson is None:
            raise QueueInvariantError(f"Plan {self.id} has no lesson {ref.lesson_id}")
        return lesson.active_queue(item_type)

    def move(self, item_id: str, target: QueueRef, entry: QueueEntry | None = None) -> QueueEntry:
        """
        Move an item into the target queue, optionally replacing its entry.

        The entry leaves its source queue and enters the target in one step,
        so the item is never in two queues or none. Moving an item to the
        queue it already occupies only updates the entry.
        """
        source_ref, current = self.locate(item_id)
        new_entry = entry or current
        if new_entry.item_id != item_id:
            raise QueueInvariantError(f"Entry for {new_entry.item_id} cannot replace {item_id}")
        target_queue = self._queue(target, new_entry.item_type)
        source_queue = self._queue(source_ref, current.item_type)
        if source_queue is target_queue:
            source_queue[item_id] = new_entry
            return new_entry
        del source_queue[item_id]
        target_queue[item_id] = new_entry
        return new_entry

    def update_entry(self, item_id: str, **changes) -> QueueEntry:
        """Replace fields of an entry in place, keeping its queue."""
        ref, entry = self.locate(item_id)
        return self.move(item_id, ref, replace(entry, **changes))

    def all_item_ids(self) -> list[str]:
        ids: list[str] = []
        for lesson in self.lessons:
            ids.extend(lesson.active_vocabulary)
            ids.extend(lesson.active_structures)
        ids.extend(self.learned)
        ids.extend(self.review)
        return ids

    def duplicate_ids(self) -> set[str]:
        """Ids present in more than one queue (empty for a healthy plan)."""
        seen: set[str] = set()
        dupes: set[str] = set()
        for item_id in self.all_item_ids():
            if item_id in seen:
                dupes.add(item_id)
            seen.add(item_id)
        return dupes
