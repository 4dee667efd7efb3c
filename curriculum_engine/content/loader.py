"""
Content store adapters.

The content pipeline owns vocabulary, structures and lessons; the engine only
reads them by id. ContentLoader fills an in-memory store from a directory of
JSON exports:

    data/content/
      vocabulary.json   [VocabularyItem, ...]
      structures.json   [GrammarStructure, ...]
      lessons.json      [LessonContent, ...]
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from loguru import logger
from pydantic import TypeAdapter

from .models import ContentRecord, GrammarStructure, ItemType, LessonContent, VocabularyItem


class ContentStore(Protocol):
    """Read-only lookup of content records by id."""

    def get_vocabulary(self, item_id: str) -> VocabularyItem | None:
        ...

    def get_structure(self, structure_id: str) -> GrammarStructure | None:
        ...

    def get_lesson(self, lesson_id: str) -> LessonContent | None:
        ...


class InMemoryContentStore:
    """Id-indexed lookup tables for content records."""

    def __init__(
        self,
        vocabulary: Iterable[VocabularyItem] = (),
        structures: Iterable[GrammarStructure] = (),
        lessons: Iterable[LessonContent] = (),
    ):
        self.vocabulary: dict[str, VocabularyItem] = {v.id: v for v in vocabulary}
        self.structures: dict[str, GrammarStructure] = {s.id: s for s in structures}
        self.lessons: dict[str, LessonContent] = {lesson.id: lesson for lesson in lessons}

    def get_vocabulary(self, item_id: str) -> VocabularyItem | None:
        return self.vocabulary.get(item_id)

    def get_structure(self, structure_id: str) -> GrammarStructure | None:
        return self.structures.get(structure_id)

    def get_lesson(self, lesson_id: str) -> LessonContent | None:
        return self.lessons.get(lesson_id)

    def get_stats(self) -> dict:
        return {
            "vocabulary": len(self.vocabulary),
            "structures": len(self.structures),
            "lessons": len(self.lessons),
        }


def get_record(store: ContentStore, item_id: str, item_type: ItemType) -> ContentRecord | None:
    """Look up a vocabulary item or structure depending on the entry type."""
    if item_type == ItemType.STRUCTURE:
        return store.get_structure(item_id)
    return store.get_vocabulary(item_id)


_VOCABULARY = TypeAdapter(list[VocabularyItem])
_STRUCTURES = TypeAdapter(list[GrammarStructure])
_LESSONS = TypeAdapter(list[LessonContent])


class ContentLoader:
    """Load content exports from a directory into an InMemoryContentStore."""

    VOCABULARY_FILE = "vocabulary.json"
    STRUCTURES_FILE = "structures.json"
    LESSONS_FILE = "lessons.json"

    def __init__(self, base_path: Path | str):
        self.base_path = Path(base_path)

    def load(self) -> InMemoryContentStore:
        """
        Read every export file that exists.

        Missing files are treated as empty collections; a file that exists
        but does not validate raises pydantic's ValidationError.
        """
        if not self.base_path.exists():
            logger.warning(f"Content directory not found: {self.base_path}")
            return InMemoryContentStore()

        store = InMemoryContentStore(
            vocabulary=_VOCABULARY.validate_python(self._read(self.VOCABULARY_FILE)),
            structures=_STRUCTURES.validate_python(self._read(self.STRUCTURES_FILE)),
            lessons=_LESSONS.validate_python(self._read(self.LESSONS_FILE)),
        )
        logger.info(f"Loaded content from {self.base_path}: {store.get_stats()}")
        return store

    def _read(self, name: str) -> list:
        path = self.base_path / name
        if not path.exists():
            logger.debug(f"No {name} in {self.base_path}")
            return []
        return json.loads(path.read_text(encoding="utf-8"))
