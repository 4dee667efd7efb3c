"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from datetime import date, datetime
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from curriculum_engine.config import Settings
from curriculum_engine.content.loader import InMemoryContentStore
from curriculum_engine.content.models import (
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
from curriculum_engine.plan.models import (
    CurriculumPlan,
    PlanLesson,
    QueueEntry,
    SchedulingState,
)
from curriculum_engine.plan.store import InMemoryPlanStore

CLASS_DATE = date(2024, 3, 1)
AUDIO_URL = "https://cdn.example.com/lessons/l1.mp3"


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (SQLite, ASGI app)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


# ========================================
# Content
# ========================================


@pytest.fixture
def apple():
    return VocabularyItem(
        id="v-apple",
        text="apple",
        phonetic="/ˈæp.əl/",
        image_url="https://cdn.example.com/img/apple.png",
        senses=(
            Sense(
                definition="a round fruit",
                translation="manzana",
                example="I eat an apple every day",
            ),
        ),
    )


@pytest.fixture
def run_verb():
    return VocabularyItem(
        id="v-run",
        text="run",
        category="verb",
        senses=(Sense(translation="correr", example="They run in the park"),),
    )


@pytest.fixture
def bare_word():
    """Vocabulary item without senses."""
    return VocabularyItem(id="v-book", text="book")


@pytest.fixture
def svo():
    return GrammarStructure(
        id="s-svo",
        pattern="s-v-o",
        examples=(
            ExampleSentence(
                text="She reads books",
                tokens=(
                    Token(word="books", position=2, role="object"),
                    Token(word="She", position=0, role="subject"),
                    Token(word="reads", position=1, role="verb"),
                ),
            ),
        ),
    )


@pytest.fixture
def transcript():
    return (
        TranscriptSegment(start=8.0, end=10.0, text="Good morning everyone"),
        TranscriptSegment(start=10.0, end=11.5, text="An apple", vocabulary_ids=frozenset({"v-apple"})),
        TranscriptSegment(
            start=11.5, end=14.0, text="She reads books every night", structure_ids=frozenset({"s-svo"})
        ),
        TranscriptSegment(start=14.0, end=20.0, text="We like to run after school"),
    )


@pytest.fixture
def lesson(transcript):
    return LessonContent(
        id="L1",
        title="Daily routines",
        vocabulary_ids=("v-apple", "v-run", "v-book"),
        structure_ids=("s-svo",),
        audio_url=AUDIO_URL,
        transcript=transcript,
        quiz=(
            QuizSection(
                kind="vocabulary",
                questions=(
                    QuizQuestion(
                        text="What is 'manzana' in English?",
                        options=("apple", "pear", "plum"),
                        correct_index=0,
                        vocabulary_id="v-apple",
                    ),
                ),
            ),
            QuizSection(
                kind="listening",
                questions=(
                    QuizQuestion(
                        text="Listen to 00:14 - 00:20. What do they like to do?",
                        options=("run", "swim"),
                        correct_index=0,
                        explanation="They like to run after school.",
                    ),
                ),
            ),
        ),
    )


@pytest.fixture
def content_store(apple, run_verb, bare_word, svo, lesson):
    return InMemoryContentStore(
        vocabulary=[
            apple,
            run_verb,
            bare_word,
            VocabularyItem(id="v-cat", text="cat", senses=(Sense(translation="gato"),)),
            VocabularyItem(id="v-dog", text="dog", senses=(Sense(translation="perro"),)),
        ],
        structures=[svo],
        lessons=[lesson],
    )


# ========================================
# Plans
# ========================================


def entry(item_id, item_type=ItemType.VOCABULARY, state=None, last_reviewed_at=None):
    return QueueEntry(item_id=item_id, item_type=item_type, state=state, last_reviewed_at=last_reviewed_at)


@pytest.fixture
def make_plan():
    """
    Factory for a plan with one lesson taught on CLASS_DATE.

    Active: v-apple, v-run (vocabulary), s-svo (structure)
    Learned: v-cat (due 2024-03-10)
    Review: v-dog (due 2024-03-02)
    """

    def _make(plan_id="plan-1", completed_days=0, states=None, scheduled_date=CLASS_DATE):
        states = states or {}
        lesson = PlanLesson(
            lesson_id="L1",
            scheduled_date=scheduled_date,
            completed_days=completed_days,
            active_vocabulary={
                "v-apple": entry("v-apple", state=states.get("v-apple")),
                "v-run": entry("v-run", state=states.get("v-run")),
            },
            active_structures={
                "s-svo": entry("s-svo", ItemType.STRUCTURE, state=states.get("s-svo")),
            },
        )
        return CurriculumPlan(
            id=plan_id,
            student_id="student-1",
            lessons=[lesson],
            learned={
                "v-cat": entry(
                    "v-cat",
                    state=states.get(
                        "v-cat", SchedulingState(interval=6, repetition=2, due_date=date(2024, 3, 10))
                    ),
                )
            },
            review={
                "v-dog": entry(
                    "v-dog",
                    state=states.get(
                        "v-dog", SchedulingState(interval=1, repetition=1, due_date=date(2024, 3, 2))
                    ),
                )
            },
        )

    return _make


@pytest.fixture
def plan(make_plan):
    return make_plan()


@pytest.fixture
def plan_store(plan):
    return InMemoryPlanStore([plan])


@pytest.fixture
def day_one():
    """First practice day after the class."""
    return datetime(2024, 3, 2, 9, 0)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'plans.db'}",
        content_dir=tmp_path / "content",
        max_update_retries=3,
        promotion_min_repetitions=2,
    )
