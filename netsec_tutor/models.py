"""
Core data types shared by ingestion, retrieval and the quiz agent.

Key Concepts:
- Chunk: a stored excerpt of a course document with its embedding
- SearchResult: a chunk paired with its similarity to a query
- Citation: where an answer or question came from
- QuizQuestion / GradeResult: quiz artifacts handed to the caller
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Literal

QuestionType = Literal["multiple-choice", "true-false", "open-ended"]
Difficulty = Literal["easy", "medium", "hard"]

QUESTION_TYPES: tuple[str, ...] = ("multiple-choice", "true-false", "open-ended")
DIFFICULTIES: tuple[str, ...] = ("easy", "medium", "hard")


@dataclass(frozen=True)
class Chunk:
    """
    An immutable excerpt of a course document.

    Attributes:
        id: Unique identifier, "<document_id>_chunk_<n>"
        document_id: The document this chunk belongs to
        text: The chunk content
        filename: Source file name
        page_number: 1-indexed page of the first word (None for plain text)
        topics: Topic tags matched from the keyword dictionary
        embedding: Fixed-length embedding vector
        chunk_index: Position of the chunk within its document
    """

    id: str
    document_id: str
    text: str
    filename: str
    page_number: int | None = None
    topics: tuple[str, ...] = ()
    embedding: tuple[float, ...] = ()
    chunk_index: int = 0

    @property
    def dimension(self) -> int:
        return len(self.embedding)

    @property
    def primary_topic(self) -> str:
        """First topic tag, or "General" when the chunk has none."""
        return self.topics[0] if self.topics else "General"


@dataclass
class SearchResult:
    """A chunk ranked by cosine similarity (higher = more similar)."""

    chunk: Chunk
    score: float

    @property
    def text(self) -> str:
        return self.chunk.text

    @property
    def source_file(self) -> str:
        return self.chunk.filename

    @property
    def page_number(self) -> int | None:
        return self.chunk.page_number


@dataclass
class Citation:
    """Reference back to a source document."""

    source: str
    page: int | None = None
    relevance: float = 1.0
    type: str = "document"

    @classmethod
    def from_chunk(cls, chunk: Chunk, relevance: float = 1.0) -> "Citation":
        return cls(source=chunk.filename or "Unknown", page=chunk.page_number, relevance=relevance)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class QuizQuestion:
    """
    A generated quiz question.

    For multiple-choice questions `options` holds the four choices and
    `correct_answer` is the text of the right one (not its letter).
    """

    id: str
    type: str
    question: str
    correct_answer: str
    topic: str
    difficulty: str
    options: list[str] | None = None
    citations: list[Citation] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Quiz:
    """A batch of questions generated for one quiz session."""

    questions: list[QuizQuestion]
    topic: str | None = None


@dataclass
class GradeResult:
    """Outcome of grading one answer."""

    score: int
    is_correct: bool
    feedback: str
    citations: list[Citation] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class TutorResponse:
    """Answer returned by the tutor agent."""

    answer: str
    citations: list[Citation]
    confidence: int
    processing_time_ms: int = 0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data
