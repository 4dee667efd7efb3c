"""
Content records consumed by the practice engine.

These are owned by the content pipeline and read-only here. Lessons reference
vocabulary and structures by id only; the records themselves are looked up in
a ContentStore.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Union

CEFRLevel = Literal["A1", "A2", "B1", "B2", "C1", "C2"]


class ItemType(str, Enum):
    """Kind of record a queue entry or practice item points at."""

    VOCABULARY = "vocabulary"
    STRUCTURE = "structure"


@dataclass(frozen=True)
class Sense:
    """One meaning of a vocabulary item."""

    context: str = ""
    definition: str = ""
    translation: str = ""
    example: str = ""
    example_translation: str = ""


@dataclass(frozen=True)
class VocabularyItem:
    """A word or expression."""

    id: str
    text: str
    language: str = "en"
    level: CEFRLevel = "A1"
    category: str = "noun"  # noun, verb, phrasal_verb, idiom, ...
    phonetic: str | None = None
    image_url: str | None = None
    senses: tuple[Sense, ...] = ()

    @property
    def item_type(self) -> ItemType:
        return ItemType.VOCABULARY

    @property
    def first_sense(self) -> Sense | None:
        return self.senses[0] if self.senses else None


@dataclass(frozen=True)
class Token:
    """A word of an example sentence, with its place and role."""

    word: str
    position: int
    role: str = "other"  # subject, verb, object, article, ...
    vocabulary_id: str | None = None


@dataclass(frozen=True)
class ExampleSentence:
    """Raw sentence plus its token decomposition."""

    text: str
    tokens: tuple[Token, ...] = ()

    def ordered_words(self) -> list[str]:
        """Words in correct order; falls back to whitespace split without tokens."""
        if self.tokens:
            return [t.word for t in sorted(self.tokens, key=lambda t: t.position)]
        return self.text.split()


@dataclass(frozen=True)
class GrammarStructure:
    """A syntactic pattern illustrated by example sentences."""

    id: str
    pattern: str  # s-v-o, conditional-first, ...
    examples: tuple[ExampleSentence, ...] = ()
    language: str = "en"
    level: CEFRLevel = "A1"

    @property
    def item_type(self) -> ItemType:
        return ItemType.STRUCTURE

    @property
    def first_example(self) -> ExampleSentence | None:
        return self.examples[0] if self.examples else None


ContentRecord = Union[VocabularyItem, GrammarStructure]


@dataclass(frozen=True)
class TranscriptSegment:
    """Timestamped slice of the lesson audio (seconds)."""

    start: float | None
    end: float | None
    text: str
    speaker: str | None = None
    vocabulary_ids: frozenset[str] = frozenset()
    structure_ids: frozenset[str] = frozenset()

    @property
    def duration(self) -> float:
        if self.start is None or self.end is None:
            return 0.0
        return self.end - self.start

    def references(self, item_id: str) -> bool:
        """True if the segment is linked to this vocabulary or structure id."""
        return item_id in self.vocabulary_ids or item_id in self.structure_ids


@dataclass(frozen=True)
class QuizQuestion:
    """Multiple-choice question supplied by the content pipeline."""

    text: str
    options: tuple[str, ...]
    correct_index: int
    explanation: str = ""
    vocabulary_id: str | None = None
    structure_id: str | None = None

    @property
    def related_id(self) -> str | None:
        return self.vocabulary_id or self.structure_id


@dataclass(frozen=True)
class QuizSection:
    kind: str  # comprehension, vocabulary, grammar, listening
    questions: tuple[QuizQuestion, ...] = ()


@dataclass(frozen=True)
class LessonContent:
    """A lesson and everything the compiler may draw practice material from."""

    id: str
    title: str = ""
    vocabulary_ids: tuple[str, ...] = ()
    structure_ids: tuple[str, ...] = ()
    audio_url: str | None = None
    transcript: tuple[TranscriptSegment, ...] = ()
    quiz: tuple[QuizSection, ...] = ()

    @property
    def questions(self) -> list[QuizQuestion]:
        return [q for section in self.quiz for q in section.questions]
