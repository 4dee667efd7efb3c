"""
Content records and stores.

Vocabulary items, grammar structures and lessons are produced by the content
pipeline and looked up here by id.
"""

from curriculum_engine.content.loader import (
    ContentLoader,
    ContentStore,
    InMemoryContentStore,
    get_record,
)
from curriculum_engine.content.models import (
    ContentRecord,
    ExampleSentence,
    GrammarStructure,
    ItemType,
    LessonContent,
    QuizQuestion,
    QuizSection,
    Sense,
    Token,
    TranscriptSegment,
    VocabularyItem,
)

__all__ = [
    "ContentLoader",
    "ContentRecord",
    "ContentStore",
    "ExampleSentence",
    "GrammarStructure",
    "InMemoryContentStore",
    "ItemType",
    "LessonContent",
    "QuizQuestion",
    "QuizSection",
    "Sense",
    "Token",
    "TranscriptSegment",
    "VocabularyItem",
    "get_record",
]
