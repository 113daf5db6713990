"""Shared fixtures for the Network Security Tutor test suite."""

import re

import pytest
from fastapi.testclient import TestClient

from netsec_tutor.embeddings.vector_store import VectorStore
from netsec_tutor.models import Chunk
from netsec_tutor.rag.generator import GenerationError, LLMResponse

# ---------------------------------------------------------------------------
# Fake embedding service: one dimension per vocabulary word
# ---------------------------------------------------------------------------

VOCABULARY = ["firewall", "packet", "encryption", "key", "malware", "virus", "password", "network"]


class FakeEmbedder:
    """Counts vocabulary words; deterministic and instant."""

    dimension = len(VOCABULARY)

    def __init__(self):
        self.calls = 0

    def embed(self, text: str) -> list[float]:
        self.calls += 1
        words = re.findall(r"[a-z]+", text.lower())
        return [float(sum(1 for w in words if w.startswith(v))) for v in VOCABULARY]

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        return [self.embed(text) for text in texts]


# ---------------------------------------------------------------------------
# Fake generation service: scripted replies keyed by prompt content
# ---------------------------------------------------------------------------

MCQ_REPLY = """Here is your question:
Question: What does a firewall filter?
A) Network packets
B) Printer jobs
C) Keyboard input
D) Screen output
Correct Answer: A"""

TF_REPLY = """Question: A firewall can only filter traffic based on IP addresses.
Correct Answer: False"""

OE_REPLY = """Question: Explain how packet filtering protects a network.
Expected Answer: It inspects packet headers and drops traffic that violates the rule set."""

GRADE_REPLY = """Score: 85
Feedback: Good answer, but mention stateful inspection."""

ANSWER_REPLY = "A firewall filters packets according to a rule set."


class FakeGenerator:
    """Returns canned text without calling Ollama; records every prompt."""

    def __init__(self, fail: bool = False, replies: dict[str, str] | None = None):
        self.fail = fail
        self.prompts: list[str] = []
        self.calls: list[tuple[str, float, int]] = []
        self.replies = replies or {}
        self.model = "fake-model"

    def generate(self, prompt: str, temperature: float = 0.7, max_tokens: int = 500) -> LLMResponse:
        self.prompts.append(prompt)
        self.calls.append((prompt, temperature, max_tokens))
        if self.fail:
            raise GenerationError("Failed to generate response from local LLM")
        return LLMResponse(text=self._reply_for(prompt), model=self.model)

    def _reply_for(self, prompt: str) -> str:
        for marker, reply in self.replies.items():
            if marker in prompt:
                return reply
        if "multiple-choice question" in prompt:
            return MCQ_REPLY
        if "true/false question" in prompt:
            return TF_REPLY
        if "open-ended question" in prompt:
            return OE_REPLY
        if "You are grading" in prompt:
            return GRADE_REPLY
        return ANSWER_REPLY

    def is_available(self) -> bool:
        return not self.fail


# ---------------------------------------------------------------------------
# Chunk helpers
# ---------------------------------------------------------------------------


def make_chunk(
    text: str,
    embedding=None,
    filename: str = "lecture1.pdf",
    page_number: int | None = 1,
    topics=("Firewalls",),
    chunk_id: str = "c",
) -> Chunk:
    if embedding is None:
        embedding = FakeEmbedder().embed(text)
    return Chunk(
        id=chunk_id,
        document_id="doc",
        text=text,
        filename=filename,
        page_number=page_number,
        topics=tuple(topics),
        embedding=tuple(embedding),
    )


CORPUS = [
    make_chunk(
        "A firewall filters network packets. Packet filtering uses a rule set.",
        filename="lecture1.pdf",
        page_number=3,
        topics=("Lecture", "Firewalls"),
    ),
    make_chunk(
        "Encryption protects data with a key. Symmetric encryption uses one key.",
        filename="lecture2.pdf",
        page_number=5,
        topics=("Lecture", "Encryption"),
    ),
    make_chunk(
        "Malware includes every virus and worm. A virus attaches to programs.",
        filename="hw1.pdf",
        page_number=None,
        topics=("Homework", "Malware"),
    ),
]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def fake_embedder():
    return FakeEmbedder()


@pytest.fixture()
def fake_generator():
    return FakeGenerator()


@pytest.fixture()
def failing_generator():
    return FakeGenerator(fail=True)


@pytest.fixture()
def store():
    return VectorStore()


@pytest.fixture()
def populated_store():
    store = VectorStore()
    for i, chunk in enumerate(CORPUS):
        store.add_document(f"doc{i}", [chunk])
    return store


@pytest.fixture()
def docs_dir(tmp_path):
    """Two readable text files, one corrupt PDF and one file of an ignored type."""
    (tmp_path / "lecture_firewalls.txt").write_text(
        "A firewall filters network packets. Packet filtering uses a rule set. " * 20
    )
    (tmp_path / "hw_crypto.txt").write_text(
        "Encryption protects data with a key. Every password must be hashed. " * 20
    )
    (tmp_path / "broken.pdf").write_bytes(b"this is not a pdf")
    (tmp_path / "notes.md").write_text("ignored")
    return tmp_path


@pytest.fixture()
def test_client(populated_store, fake_embedder, fake_generator, docs_dir):
    """TestClient over create_app() with every external service faked out."""
    from netsec_tutor.interfaces.web_app import create_app

    app = create_app(
        store=populated_store,
        embedder=fake_embedder,
        generator=fake_generator,
        docs_dir=docs_dir,
    )
    with TestClient(app) as client:
        yield client
