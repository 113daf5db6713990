"""
Quiz agent - Generates quiz questions from document chunks and grades answers.

Generation:
1. Filter chunks by topic (fall back to all chunks when none match)
2. Sample one chunk per question
3. Cycle question types: multiple-choice, true/false, open-ended
4. Ask the model for each question concurrently
5. Parse the output, or build a simple question from the chunk text
   when the model fails

Grading:
- Multiple-choice and true/false: case-insensitive exact match, 100 or 0
- Open-ended: the model scores the answer; 50 when that fails
"""

import logging
import random
from concurrent.futures import ThreadPoolExecutor

from netsec_tutor.config import (
    DEFAULT_DIFFICULTY,
    DEFAULT_QUIZ_SIZE,
    NEUTRAL_SCORE,
    PASSING_SCORE,
    QUIZ_MAX_WORKERS,
)
from netsec_tutor.models import QUESTION_TYPES, Chunk, Citation, GradeResult, Quiz, QuizQuestion
from netsec_tutor.quiz.parser import (
    DEFAULT_OPTIONS,
    SEE_DOCUMENT,
    parse_grade,
    parse_question,
    split_sentences,
)
from netsec_tutor.rag.generator import (
    GenerationService,
    generate_grading_text,
    generate_question_text,
)

logger = logging.getLogger(__name__)

ID_PREFIXES = {
    "multiple-choice": "mcq",
    "true-false": "tf",
    "open-ended": "oe",
}

CLOSED_FORM_TYPES = ("multiple-choice", "true-false")

GRADING_UNAVAILABLE_FEEDBACK = "Unable to grade automatically. Please review your answer."


def question_type_for_index(index: int) -> str:
    return QUESTION_TYPES[index % len(QUESTION_TYPES)]


def filter_chunks_by_topic(chunks: list[Chunk], topic: str | None) -> list[Chunk]:
    """Chunks tagged exactly with `topic`; all chunks when none are."""
    if not topic:
        return list(chunks)
    filtered = [chunk for chunk in chunks if topic in chunk.topics]
    return filtered or list(chunks)


class QuizAgent:
    """
    Builds and grades quizzes.

    Example:
        agent = QuizAgent(generator)
        quiz = agent.generate_quiz(store.get_all_chunks(), count=5, topic="Firewalls")
        result = agent.grade_answer(
            question=quiz.questions[0].question,
            user_answer="b",
            correct_answer=quiz.questions[0].correct_answer,
            question_type=quiz.questions[0].type,
        )
    """

    def __init__(
        self,
        generator: GenerationService,
        max_workers: int = QUIZ_MAX_WORKERS,
        rng: random.Random | None = None,
    ):
        self.generator = generator
        self.max_workers = max_workers
        self.rng = rng or random.Random()

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate_quiz(
        self,
        chunks: list[Chunk],
        count: int = DEFAULT_QUIZ_SIZE,
        topic: str | None = None,
        difficulty: str = DEFAULT_DIFFICULTY,
    ) -> Quiz:
        """
        Generate up to `count` questions from the given chunks.

        Returns fewer questions when there are fewer chunks than `count`
        and none at all for an empty chunk list.
        """
        pool = filter_chunks_by_topic(chunks, topic)
        selected = self.rng.sample(pool, min(max(count, 0), len(pool)))
        logger.info(
            "Generating %d questions from %d chunks (topic=%s, difficulty=%s)",
            len(selected),
            len(pool),
            topic,
            difficulty,
        )
        if not selected:
            return Quiz(questions=[], topic=topic)

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(
                    self.generate_question, chunk, question_type_for_index(i), i, difficulty
                )
                for i, chunk in enumerate(selected)
            ]
            questions = [future.result() for future in futures]

        logger.info("Generated %d questions", len(questions))
        return Quiz(questions=questions, topic=topic)

    def generate_question(
        self,
        chunk: Chunk,
        question_type: str,
        index: int = 0,
        difficulty: str = DEFAULT_DIFFICULTY,
    ) -> QuizQuestion:
        """
        One question of `question_type` from a chunk.

        Never raises for model problems: any failure to generate or parse
        yields a fallback question built from the chunk text.
        """
        if question_type not in ID_PREFIXES:
            raise ValueError(f"Unknown question type: {question_type}")

        try:
            text = generate_question_text(self.generator, chunk.text, question_type, difficulty)
            parsed = parse_question(text, question_type)
        except Exception as e:
            logger.warning(
                "Falling back to a simple %s question for chunk %s: %s",
                question_type,
                chunk.id,
                e,
            )
            return self.fallback_question(chunk, question_type, index, difficulty)

        return QuizQuestion(
            id=f"{ID_PREFIXES[question_type]}-{chunk.id}-{index}",
            type=question_type,
            question=parsed.question,
            correct_answer=parsed.correct_answer,
            options=parsed.options,
            topic=chunk.primary_topic,
            difficulty=difficulty,
            citations=[Citation.from_chunk(chunk)],
        )

    def fallback_question(
        self,
        chunk: Chunk,
        question_type: str,
        index: int = 0,
        difficulty: str = DEFAULT_DIFFICULTY,
    ) -> QuizQuestion:
        """Question built directly from the first two sentences of a chunk."""
        sentences = split_sentences(chunk.text)
        first = sentences[0] if sentences else chunk.text
        options = None

        if question_type == "multiple-choice":
            question = first
            correct_answer = sentences[1] if len(sentences) > 1 else SEE_DOCUMENT
            options = [correct_answer] + DEFAULT_OPTIONS[:3]
            self.rng.shuffle(options)
        elif question_type == "true-false":
            question = f"True or False: {first}"
            correct_answer = "True" if self.rng.random() > 0.5 else "False"
        else:
            question = f"Explain: {first}"
            correct_answer = SEE_DOCUMENT

        return QuizQuestion(
            id=f"{ID_PREFIXES[question_type]}-{chunk.id}-{index}",
            type=question_type,
            question=question,
            correct_answer=correct_answer,
            options=options,
            topic=chunk.primary_topic,
            difficulty=difficulty,
            citations=[Citation.from_chunk(chunk)],
        )

    # ------------------------------------------------------------------
    # Grading
    # ------------------------------------------------------------------

    def grade_answer(
        self,
        question: str,
        user_answer: str,
        correct_answer: str,
        question_type: str,
    ) -> GradeResult:
        """
        Grade one answer.

        Raises:
            ValueError: For an unknown question type
        """
        if question_type in CLOSED_FORM_TYPES:
            return grade_closed_form(user_answer, correct_answer)
        if question_type == "open-ended":
            return self.grade_open_ended(question, user_answer, correct_answer)
        raise ValueError(f"Invalid question type: {question_type}")

    def grade_open_ended(self, question: str, user_answer: str, correct_answer: str) -> GradeResult:
        try:
            text = generate_grading_text(self.generator, question, user_answer, correct_answer)
        except Exception as e:
            logger.error("Error grading with LLM: %s", e)
            return GradeResult(
                score=NEUTRAL_SCORE,
                is_correct=False,
                feedback=GRADING_UNAVAILABLE_FEEDBACK,
            )

        parsed = parse_grade(text)
        return GradeResult(
            score=parsed.score,
            is_correct=parsed.score >= PASSING_SCORE,
            feedback=parsed.feedback,
        )


def grade_closed_form(user_answer: str, correct_answer: str) -> GradeResult:
    """Case-insensitive exact match, ignoring surrounding whitespace."""
    is_correct = user_answer.strip().lower() == correct_answer.strip().lower()
    return GradeResult(
        score=100 if is_correct else 0,
        is_correct=is_correct,
        feedback="Correct! Well done." if is_correct else f"Incorrect. The correct answer is: {correct_answer}",
    )
