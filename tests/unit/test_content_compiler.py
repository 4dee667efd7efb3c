"""
Tests for the practice payload compilers and their fallback chains.
"""

import random

import pytest

from curriculum_engine.content.models import (
    GrammarStructure,
    ItemType,
    LessonContent,
    TranscriptSegment,
    VocabularyItem,
)
from curriculum_engine.content.transcript import AudioWindow
from curriculum_engine.core.modes import Modality
from curriculum_engine.errors import MissingPrimaryContent
from curriculum_engine.practice import (
    COMPILERS,
    FlashcardPayload,
    GapFillPayload,
    MultipleChoicePayload,
    PendingPayload,
    PracticeItem,
    ScramblePayload,
    compile_item,
    compile_quiz,
    get_compiler,
)
from curriculum_engine.practice.base import STRUCTURE_BACK_TEXT
from curriculum_engine.practice.gap_fill import pivot_word, spoken_form
from curriculum_engine.practice.quiz import effective_modality, question_audio

AUDIO_URL = "https://cdn.example.com/lessons/l1.mp3"


class TestRegistry:
    def test_every_modality_has_a_compiler(self):
        assert set(COMPILERS) == set(Modality)

    def test_lookup_by_name(self):
        assert get_compiler("REVIEW") is COMPILERS[Modality.REVIEW]
        assert get_compiler("not-a-mode") is None

    def test_uncompiled_item_is_pending(self):
        item = PracticeItem(id="x", item_type=ItemType.VOCABULARY, modality=Modality.REVIEW, text="x")
        assert item.payload == PendingPayload()


class TestFlashcard:
    def test_image_day_attaches_illustration(self, apple):
        item = compile_item(apple, Modality.FLASHCARD_IMAGE)

        assert item.modality == Modality.FLASHCARD_IMAGE
        assert item.payload == FlashcardPayload(
            front="apple", back="manzana", image_url=apple.image_url, phonetic=apple.phonetic
        )

    def test_recall_day_has_no_image(self, apple):
        assert compile_item(apple, Modality.FLASHCARD_RECALL).payload.image_url is None

    def test_word_without_senses_has_empty_back(self, bare_word):
        payload = compile_item(bare_word, Modality.FLASHCARD_RECALL).payload
        assert payload.front == "book"
        assert payload.back == ""

    def test_structure_card(self, svo):
        item = compile_item(svo, Modality.REVIEW)
        assert item.text == "She reads books"
        assert item.payload == FlashcardPayload(front="She reads books", back=STRUCTURE_BACK_TEXT)

    def test_scheduling_state_attached(self, apple):
        from curriculum_engine.plan.models import SchedulingState

        state = SchedulingState(interval=6, repetition=2)
        assert compile_item(apple, Modality.REVIEW, state=state).state is state


class TestGapFill:
    def test_vocabulary_from_linked_segment(self, apple, lesson):
        item = compile_item(apple, Modality.GAP_FILL_LISTENING, lesson)

        assert item.modality == Modality.GAP_FILL_LISTENING
        assert item.payload == GapFillPayload(
            sentence="An ___",
            answer="apple",
            audio=AudioWindow(start=8.0, end=14.0, url=AUDIO_URL),
        )

    def test_vocabulary_found_by_text(self, run_verb, lesson):
        payload = compile_item(run_verb, Modality.GAP_FILL_LISTENING, lesson).payload

        assert payload.sentence == "We like to ___ after school"
        assert (payload.audio.start, payload.audio.end) == (14.0, 20.0)

    def test_structure_blanks_the_verb(self, svo, lesson):
        payload = compile_item(svo, Modality.GAP_FILL_LISTENING, lesson).payload

        assert isinstance(payload, GapFillPayload)
        assert payload.answer == "reads"
        assert payload.sentence == "She ___ books every night"
        assert (payload.audio.start, payload.audio.end) == (10.0, 20.0)

    def test_vocabulary_not_spoken_falls_back_to_image_flashcard(self, bare_word, lesson):
        item = compile_item(bare_word, Modality.GAP_FILL_LISTENING, lesson)

        assert item.modality == Modality.FLASHCARD_IMAGE
        assert isinstance(item.payload, FlashcardPayload)

    def test_structure_without_segment_falls_back_to_scramble(self, svo):
        item = compile_item(svo, Modality.GAP_FILL_LISTENING, LessonContent(id="L2"))

        assert item.modality == Modality.SENTENCE_SCRAMBLE
        assert isinstance(item.payload, ScramblePayload)

    def test_no_lesson_falls_back(self, apple):
        assert compile_item(apple, Modality.GAP_FILL_LISTENING).modality == Modality.FLASHCARD_IMAGE

    def test_malformed_segment_is_skipped(self, apple):
        lesson = LessonContent(
            id="L3",
            transcript=(
                TranscriptSegment(start=0.0, end=5.0, text="Hello"),
                TranscriptSegment(start=4.0, end=6.0, text="An apple", vocabulary_ids=frozenset({"v-apple"})),
            ),
        )

        item = compile_item(apple, Modality.GAP_FILL_LISTENING, lesson)

        assert item.modality == Modality.FLASHCARD_IMAGE

    def test_pivot_word_without_verb_uses_first_spoken_token(self, svo):
        assert pivot_word(svo, "books and more books") == "books"
        assert pivot_word(svo, "nothing relevant") is None

    def test_linked_segment_with_inflected_form(self):
        go = VocabularyItem(id="v-go", text="go")
        lesson = LessonContent(
            id="L4",
            audio_url=AUDIO_URL,
            transcript=(
                TranscriptSegment(
                    start=0.0, end=5.0, text="Yesterday we went to the beach", vocabulary_ids=frozenset({"v-go"})
                ),
            ),
        )

        item = compile_item(go, Modality.GAP_FILL_LISTENING, lesson)

        assert item.modality == Modality.GAP_FILL_LISTENING
        assert item.payload == GapFillPayload(
            sentence="Yesterday we went to the beach",
            answer="go",
            audio=AudioWindow(start=0.0, end=5.0, url=AUDIO_URL),
        )

    def test_linked_segment_blanks_closest_token(self, apple):
        lesson = LessonContent(
            id="L5",
            transcript=(
                TranscriptSegment(
                    start=0.0, end=4.0, text="I bought two apples", vocabulary_ids=frozenset({"v-apple"})
                ),
            ),
        )

        payload = compile_item(apple, Modality.GAP_FILL_LISTENING, lesson).payload

        assert payload.sentence == "I bought two ___"
        assert payload.answer == "apples"

    @pytest.mark.parametrize(
        "word, text, expected",
        [
            ("apple", "An apple a day", "apple"),
            ("run", "She was running late", "running"),
            ("go", "We went home", "go"),
        ],
    )
    def test_spoken_form(self, word, text, expected):
        assert spoken_form(word, text) == expected


class TestQuiz:
    def test_record_with_question(self, apple, lesson):
        item = compile_item(apple, Modality.QUIZ_COMPREHENSIVE, lesson)

        assert isinstance(item.payload, MultipleChoicePayload)
        assert item.payload.options == ("apple", "pear", "plum")
        assert item.payload.section == "vocabulary"
        # Linked segment is used as-is, without widening
        assert item.payload.audio == AudioWindow(start=10.0, end=11.5, url=AUDIO_URL)

    def test_vocabulary_without_question_falls_back_to_recall(self, run_verb, lesson):
        item = compile_item(run_verb, Modality.LISTENING_CHOICE, lesson)

        assert item.modality == Modality.FLASHCARD_RECALL
        assert item.payload.back == "correr"

    def test_structure_without_question_falls_back_to_scramble(self, svo, lesson):
        assert compile_item(svo, Modality.QUIZ_COMPREHENSIVE, lesson).modality == Modality.SENTENCE_SCRAMBLE

    def test_compile_quiz_one_item_per_question(self, lesson):
        items = compile_quiz(lesson, Modality.LISTENING_CHOICE)

        assert [i.id for i in items] == ["v-apple", "quiz-1-0"]
        assert all(i.modality == Modality.LISTENING_CHOICE for i in items)
        assert items[1].payload.audio == AudioWindow(start=14.0, end=20.0, url=AUDIO_URL)

    def test_no_audio_without_lesson_audio(self, lesson):
        from dataclasses import replace

        silent = replace(lesson, audio_url=None)
        assert question_audio(lesson.questions[1], silent) is None

    def test_listening_choice_without_audio_runs_comprehensive_quiz(self, lesson):
        from dataclasses import replace

        silent = replace(lesson, audio_url=None)

        items = compile_quiz(silent, Modality.LISTENING_CHOICE)

        assert [i.id for i in items] == ["v-apple", "quiz-1-0"]
        assert all(i.modality == Modality.QUIZ_COMPREHENSIVE for i in items)

    def test_effective_modality(self, lesson):
        from dataclasses import replace

        assert effective_modality(Modality.LISTENING_CHOICE, lesson) == Modality.LISTENING_CHOICE
        assert effective_modality(Modality.LISTENING_CHOICE, replace(lesson, audio_url="")) == Modality.QUIZ_COMPREHENSIVE
        assert effective_modality(Modality.LISTENING_CHOICE, None) == Modality.QUIZ_COMPREHENSIVE
        assert effective_modality(Modality.FLASHCARD_IMAGE, None) == Modality.FLASHCARD_IMAGE


class TestPrimaryContent:
    def test_missing_record(self):
        with pytest.raises(MissingPrimaryContent):
            compile_item(None, Modality.REVIEW)

    def test_structure_without_examples(self):
        with pytest.raises(MissingPrimaryContent):
            compile_item(GrammarStructure(id="s-empty", pattern="s-v"), Modality.SENTENCE_SCRAMBLE)

    def test_compilation_is_deterministic_for_a_seed(self, svo, lesson):
        a = compile_item(svo, Modality.SENTENCE_SCRAMBLE, lesson, rng=random.Random(7))
        b = compile_item(svo, Modality.SENTENCE_SCRAMBLE, lesson, rng=random.Random(7))
        assert a == b
