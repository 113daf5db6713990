"""
Tutor agent - Answers free-text questions about the course documents.

Pipeline: embed question -> search -> filter -> prompt the model with the
retrieved context -> attach citations and a confidence score.

Failures never reach the caller as exceptions: an empty retrieval or a
broken model call produces a fixed answer with zero confidence.
"""

import logging
import time

from netsec_tutor.config import (
    CONFIDENCE_SATURATION,
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    ERROR_ANSWER,
    NO_CONTEXT_ANSWER,
    SAMPLE_QUESTIONS,
    TOP_K_CHUNKS,
    TUTOR_TOPICS,
)
from netsec_tutor.models import SearchResult, TutorResponse
from netsec_tutor.rag.generator import GenerationService, build_context_prompt
from netsec_tutor.rag.retriever import Retriever

logger = logging.getLogger(__name__)


def calculate_confidence(results: list[SearchResult]) -> int:
    """
    Confidence (0-100) from the retrieved results.

    Average similarity scaled down when fewer than three chunks were found.
    """
    if not results:
        return 0
    avg_similarity = sum(r.score for r in results) / len(results)
    result_count_factor = min(len(results) / CONFIDENCE_SATURATION, 1.0)
    return round(avg_similarity * result_count_factor * 100)


class TutorAgent:
    """
    Answers questions with retrieval-augmented generation.

    Example:
        agent = TutorAgent(retriever, generator)
        response = agent.answer_question("How does TLS work?")
        print(response.answer, response.confidence)
    """

    def __init__(self, retriever: Retriever, generator: GenerationService):
        self.retriever = retriever
        self.generator = generator

    def answer_question(self, question: str, max_results: int | None = None) -> TutorResponse:
        start = time.perf_counter()

        def elapsed_ms() -> int:
            return int((time.perf_counter() - start) * 1000)

        try:
            retrieval = self.retriever.retrieve(question, top_k=max_results or TOP_K_CHUNKS)

            if not retrieval.has_results:
                return TutorResponse(
                    answer=NO_CONTEXT_ANSWER,
                    citations=[],
                    confidence=0,
                    processing_time_ms=elapsed_ms(),
                )

            response = self.generator.generate(
                build_context_prompt(question, retrieval.chunks),
                temperature=DEFAULT_TEMPERATURE,
                max_tokens=DEFAULT_MAX_TOKENS,
            )

            return TutorResponse(
                answer=response.text,
                citations=retrieval.citations(),
                confidence=calculate_confidence(retrieval.results),
                processing_time_ms=elapsed_ms(),
            )
        except Exception:
            logger.exception("Error answering question")
            return TutorResponse(
                answer=ERROR_ANSWER,
                citations=[],
                confidence=0,
                processing_time_ms=elapsed_ms(),
            )

    def get_topics(self) -> list[str]:
        return list(TUTOR_TOPICS)

    def get_sample_questions(self) -> list[str]:
        return list(SAMPLE_QUESTIONS)
