"""
Web interface - FastAPI application for the tutor and quiz pages.

Endpoints:
- GET  /health      liveness plus Ollama availability
- GET  /api/init    corpus ingestion status
- POST /api/init    ingest the documents directory
- DELETE /api/init  clear the vector store
- GET  /api/tutor   topics and sample questions
- POST /api/tutor   answer a question
- GET  /api/quiz    topics and corpus stats
- POST /api/quiz    generate questions or grade an answer (by "action")

Run with:
    python -m netsec_tutor serve
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Literal

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from netsec_tutor.config import DEFAULT_DIFFICULTY, DEFAULT_QUIZ_SIZE, DOCS_DIR
from netsec_tutor.embeddings.embedder import Embedder, EmbeddingService
from netsec_tutor.embeddings.vector_store import VectorStore
from netsec_tutor.ingestion.processor import DocumentProcessor, ingest_directory
from netsec_tutor.quiz.agent import CLOSED_FORM_TYPES, QuizAgent
from netsec_tutor.rag.generator import GenerationService, Generator
from netsec_tutor.rag.retriever import Retriever
from netsec_tutor.rag.tutor import TutorAgent
from netsec_tutor.sanitize import sanitize_input

logger = logging.getLogger(__name__)


# =============================================================================
# REQUEST MODELS
# =============================================================================


class TutorRequest(BaseModel):
    question: str
    max_results: int | None = Field(default=None, ge=1, le=20)


class QuizRequest(BaseModel):
    action: str

    # action == "generate"
    topic: str | None = None
    count: int = Field(default=DEFAULT_QUIZ_SIZE, ge=1, le=20)
    difficulty: Literal["easy", "medium", "hard"] = DEFAULT_DIFFICULTY

    # action == "grade"
    question: str | None = None
    user_answer: str | None = None
    correct_answer: str | None = None
    question_type: str | None = None


# =============================================================================
# ERROR HANDLERS
# =============================================================================


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are client errors (400)."""
    logger.info("Rejected malformed request to %s: %s", request.url.path, exc.errors())
    return _error(400, "Invalid request", details=jsonable_errors(exc))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the traceback, return a generic 500."""
    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return _error(500, "Internal server error")


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [{"loc": list(err["loc"]), "msg": err["msg"]} for err in exc.errors()]


# =============================================================================
# APPLICATION FACTORY
# =============================================================================


def create_app(
    store: VectorStore | None = None,
    embedder: EmbeddingService | None = None,
    generator: GenerationService | None = None,
    docs_dir: str | Path | None = None,
    ingest_on_startup: bool = False,
) -> FastAPI:
    """
    Build the FastAPI application.

    Every collaborator can be injected, which is how the tests swap in a
    fake embedder and generator. The vector store is owned by the app for
    its lifetime.
    """
    store = store if store is not None else VectorStore()
    embedder = embedder or Embedder()
    generator = generator or Generator()
    docs_dir = Path(docs_dir or DOCS_DIR)

    processor = DocumentProcessor(embedder=embedder)
    retriever = Retriever(embedder=embedder, vector_store=store)
    tutor = TutorAgent(retriever=retriever, generator=generator)
    quiz_agent = QuizAgent(generator=generator)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Network Security Tutor")
        if ingest_on_startup:
            try:
                ingest_directory(docs_dir, processor, store)
            except FileNotFoundError as e:
                logger.warning("Skipping startup ingestion: %s", e)
        yield
        logger.info("Shutting down Network Security Tutor")

    app = FastAPI(title="Network Security Tutor", version="0.1.0", lifespan=lifespan)
    app.state.store = store
    app.state.tutor = tutor
    app.state.quiz_agent = quiz_agent

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # ── Health ───────────────────────────────────────────────────────────

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "ollama_available": generator.is_available(),
            "total_chunks": store.count,
        }

    # ── Corpus initialization ────────────────────────────────────────────

    @app.get("/api/init")
    def init_status():
        stats = store.get_stats()
        return {"success": True, "initialized": stats["total_chunks"] > 0, "stats": stats}

    @app.post("/api/init")
    def init_corpus():
        if store.count > 0:
            return {
                "success": True,
                "message": "Vector database already initialized",
                "stats": store.get_stats(),
            }
        try:
            report = ingest_directory(docs_dir, processor, store)
        except FileNotFoundError as e:
            logger.error("Error initializing vector database: %s", e)
            return JSONResponse(status_code=500, content={"success": False, "message": str(e)})

        return {
            "success": True,
            "message": "Vector database initialized successfully",
            "stats": store.get_stats(),
            "processed": report.processed_count,
            "failed": report.failed_count,
        }

    @app.delete("/api/init")
    def clear_corpus():
        store.clear()
        return {"success": True, "message": "Vector database cleared successfully"}

    # ── Tutor ────────────────────────────────────────────────────────────

    @app.get("/api/tutor")
    def tutor_info():
        return {"topics": tutor.get_topics(), "sample_questions": tutor.get_sample_questions()}

    @app.post("/api/tutor")
    def ask(req: TutorRequest):
        question = sanitize_input(req.question)
        if not question:
            return _error(400, "Invalid or empty question after sanitization")

        response = tutor.answer_question(question, max_results=req.max_results)
        return response.to_dict()

    # ── Quiz ─────────────────────────────────────────────────────────────

    @app.get("/api/quiz")
    def quiz_info():
        stats = store.get_stats()
        return {
            "topics": stats["topics"],
            "stats": {
                "total_questions": stats["total_chunks"],
                "total_topics": len(stats["topics"]),
                "total_documents": stats["total_documents"],
            },
        }

    @app.post("/api/quiz")
    def quiz(req: QuizRequest):
        if req.action == "generate":
            return _generate_quiz(req)
        if req.action == "grade":
            return _grade(req)
        return _error(400, "Invalid action")

    def _generate_quiz(req: QuizRequest):
        topic = req.topic if req.topic and req.topic != "all" else None
        chunks = store.get_chunks_by_topic(topic) if topic else store.get_all_chunks()
        if topic and not chunks:
            logger.info("No chunks matched topic %r, falling back to all chunks", topic)
            chunks = store.get_all_chunks()

        if not chunks:
            return _error(404, "No documents found. Please upload documents first.", questions=[])

        result = quiz_agent.generate_quiz(chunks, count=req.count, topic=topic, difficulty=req.difficulty)
        return {"questions": [q.to_dict() for q in result.questions]}

    def _grade(req: QuizRequest):
        if not req.question or req.user_answer is None:
            return _error(400, "Missing required fields")
        if req.correct_answer is None and req.question_type in CLOSED_FORM_TYPES:
            return _error(400, "Missing required fields")
        try:
            result = quiz_agent.grade_answer(
                question=req.question,
                user_answer=req.user_answer,
                correct_answer=req.correct_answer or "",
                question_type=req.question_type or "",
            )
        except ValueError:
            return _error(400, "Invalid question type")
        return result.to_dict()

    return app
