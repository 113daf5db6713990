"""Tests for the FastAPI web interface."""

from fastapi.testclient import TestClient

from netsec_tutor.config import ERROR_ANSWER, NO_CONTEXT_ANSWER, SAMPLE_QUESTIONS, TUTOR_TOPICS
from netsec_tutor.embeddings.vector_store import VectorStore
from netsec_tutor.interfaces.web_app import create_app


# ── Health ───────────────────────────────────────────────────────────────────


class TestHealth:
    def test_health_ok(self, test_client):
        resp = test_client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["ollama_available"] is True
        assert body["total_chunks"] == 3

    def test_reports_unreachable_model(self, populated_store, fake_embedder, failing_generator, tmp_path):
        app = create_app(
            store=populated_store, embedder=fake_embedder, generator=failing_generator, docs_dir=tmp_path
        )
        with TestClient(app) as client:
            assert client.get("/health").json()["ollama_available"] is False


# ── /api/init ────────────────────────────────────────────────────────────────


class TestInit:
    def test_status_of_populated_store(self, test_client):
        resp = test_client.get("/api/init")
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["initialized"] is True
        assert body["stats"]["total_chunks"] == 3
        assert body["stats"]["total_documents"] == 3

    def test_post_is_noop_when_already_initialized(self, test_client):
        resp = test_client.post("/api/init")
        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Vector database already initialized"
        assert body["stats"]["total_chunks"] == 3

    def test_delete_clears_store(self, test_client):
        resp = test_client.delete("/api/init")
        assert resp.status_code == 200
        assert resp.json()["success"] is True

        status = test_client.get("/api/init").json()
        assert status["initialized"] is False
        assert status["stats"] == {"total_documents": 0, "total_chunks": 0, "topics": []}

    def test_post_ingests_documents_directory(self, test_client):
        test_client.delete("/api/init")

        resp = test_client.post("/api/init")
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "Vector database initialized successfully"
        # broken.pdf fails, the two text files succeed, notes.md is ignored
        assert body["processed"] == 2
        assert body["failed"] == 1
        assert body["stats"]["total_documents"] == 2
        assert "Firewalls" in body["stats"]["topics"]
        assert "Homework" in body["stats"]["topics"]

    def test_post_missing_directory(self, fake_embedder, fake_generator, tmp_path):
        app = create_app(
            store=VectorStore(),
            embedder=fake_embedder,
            generator=fake_generator,
            docs_dir=tmp_path / "missing",
        )
        with TestClient(app) as client:
            resp = client.post("/api/init")
        assert resp.status_code == 500
        assert resp.json()["success"] is False
        assert "Directory not found" in resp.json()["message"]

    def test_ingest_on_startup(self, fake_embedder, fake_generator, docs_dir):
        store = VectorStore()
        app = create_app(
            store=store,
            embedder=fake_embedder,
            generator=fake_generator,
            docs_dir=docs_dir,
            ingest_on_startup=True,
        )
        with TestClient(app) as client:
            assert client.get("/api/init").json()["initialized"] is True
        assert store.count == 2


# ── /api/tutor ───────────────────────────────────────────────────────────────


class TestTutor:
    def test_info(self, test_client):
        resp = test_client.get("/api/tutor")
        assert resp.status_code == 200
        body = resp.json()
        assert body["topics"] == TUTOR_TOPICS
        assert body["sample_questions"] == SAMPLE_QUESTIONS

    def test_returns_answer_with_citations(self, test_client):
        resp = test_client.post("/api/tutor", json={"question": "How does a firewall filter packets?"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["answer"] == "A firewall filters packets according to a rule set."
        assert len(body["citations"]) == 1
        citation = body["citations"][0]
        assert citation["source"] == "lecture1.pdf"
        assert citation["page"] == 3
        assert citation["type"] == "document"
        assert 0 < body["confidence"] <= 100
        assert "processing_time_ms" in body
        assert "timestamp" in body

    def test_max_results_limits_citations(self, test_client):
        resp = test_client.post(
            "/api/tutor", json={"question": "firewall encryption malware", "max_results": 1}
        )
        assert resp.status_code == 200
        assert len(resp.json()["citations"]) <= 1

    def test_response_keys_are_snake_case(self, test_client):
        resp = test_client.post("/api/tutor", json={"question": "How does a firewall filter packets?"})
        assert set(resp.json()) == {"answer", "citations", "confidence", "processing_time_ms", "timestamp"}

    def test_no_relevant_context(self, test_client):
        resp = test_client.post("/api/tutor", json={"question": "What is the capital of France?"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["answer"] == NO_CONTEXT_ANSWER
        assert body["citations"] == []
        assert body["confidence"] == 0

    def test_model_failure_returns_apology(self, populated_store, fake_embedder, failing_generator, tmp_path):
        app = create_app(
            store=populated_store, embedder=fake_embedder, generator=failing_generator, docs_dir=tmp_path
        )
        with TestClient(app) as client:
            resp = client.post("/api/tutor", json={"question": "What does a firewall do?"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["answer"] == ERROR_ANSWER
        assert body["confidence"] == 0
        assert body["citations"] == []

    def test_rejects_question_that_sanitizes_to_nothing(self, test_client):
        resp = test_client.post("/api/tutor", json={"question": "<script>alert(1)</script>"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid or empty question after sanitization"

    def test_rejects_missing_question(self, test_client):
        resp = test_client.post("/api/tutor", json={})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid request"

    def test_rejects_out_of_range_max_results(self, test_client):
        resp = test_client.post("/api/tutor", json={"question": "firewall", "max_results": 0})
        assert resp.status_code == 400


# ── /api/quiz ────────────────────────────────────────────────────────────────


class TestQuizInfo:
    def test_topics_and_stats(self, test_client):
        resp = test_client.get("/api/quiz")
        assert resp.status_code == 200
        body = resp.json()
        assert body["topics"] == ["Encryption", "Firewalls", "Homework", "Lecture", "Malware"]
        assert body["stats"] == {"total_questions": 3, "total_topics": 5, "total_documents": 3}


class TestQuizGenerate:
    def test_generates_one_question_per_chunk(self, test_client):
        resp = test_client.post("/api/quiz", json={"action": "generate", "count": 3})
        assert resp.status_code == 200
        questions = resp.json()["questions"]
        assert len(questions) == 3
        assert {q["type"] for q in questions} == {"multiple-choice", "true-false", "open-ended"}
        for q in questions:
            assert q["difficulty"] == "medium"
            assert len(q["citations"]) == 1

    def test_multiple_choice_shape(self, test_client):
        resp = test_client.post("/api/quiz", json={"action": "generate", "count": 1})
        question = resp.json()["questions"][0]
        assert question["type"] == "multiple-choice"
        assert question["id"].startswith("mcq-")
        assert question["options"] == ["Network packets", "Printer jobs", "Keyboard input", "Screen output"]
        assert question["correct_answer"] == "Network packets"

    def test_topic_filter(self, test_client):
        resp = test_client.post(
            "/api/quiz", json={"action": "generate", "topic": "Encryption", "count": 5, "difficulty": "hard"}
        )
        assert resp.status_code == 200
        questions = resp.json()["questions"]
        assert len(questions) == 1
        assert questions[0]["topic"] == "Lecture"
        assert questions[0]["difficulty"] == "hard"
        assert questions[0]["citations"][0]["source"] == "lecture2.pdf"

    def test_unknown_topic_falls_back_to_all_chunks(self, test_client):
        resp = test_client.post("/api/quiz", json={"action": "generate", "topic": "Quantum", "count": 5})
        assert resp.status_code == 200
        assert len(resp.json()["questions"]) == 3

    def test_topic_all_means_every_chunk(self, test_client):
        resp = test_client.post("/api/quiz", json={"action": "generate", "topic": "all", "count": 2})
        assert len(resp.json()["questions"]) == 2

    def test_empty_store(self, test_client):
        test_client.delete("/api/init")
        resp = test_client.post("/api/quiz", json={"action": "generate"})
        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "No documents found. Please upload documents first."
        assert body["questions"] == []

    def test_rejects_invalid_difficulty(self, test_client):
        resp = test_client.post("/api/quiz", json={"action": "generate", "difficulty": "extreme"})
        assert resp.status_code == 400


class TestQuizGrade:
    def test_multiple_choice_case_insensitive(self, test_client):
        resp = test_client.post(
            "/api/quiz",
            json={
                "action": "grade",
                "question": "What does a firewall filter?",
                "user_answer": "  network PACKETS ",
                "correct_answer": "Network packets",
                "question_type": "multiple-choice",
            },
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["score"] == 100
        assert body["is_correct"] is True
        assert body["feedback"] == "Correct! Well done."

    def test_true_false_wrong(self, test_client):
        resp = test_client.post(
            "/api/quiz",
            json={
                "action": "grade",
                "question": "Firewalls only inspect IP addresses.",
                "user_answer": "True",
                "correct_answer": "FALSE",
                "question_type": "true-false",
            },
        )
        body = resp.json()
        assert body["score"] == 0
        assert body["is_correct"] is False
        assert body["feedback"] == "Incorrect. The correct answer is: FALSE"

    def test_open_ended_uses_model(self, test_client):
        resp = test_client.post(
            "/api/quiz",
            json={
                "action": "grade",
                "question": "Explain packet filtering.",
                "user_answer": "It drops packets that break the rules.",
                "correct_answer": "Inspects headers against a rule set.",
                "question_type": "open-ended",
            },
        )
        body = resp.json()
        assert body["score"] == 85
        assert body["is_correct"] is True
        assert body["feedback"] == "Good answer, but mention stateful inspection."

    def test_missing_fields(self, test_client):
        resp = test_client.post(
            "/api/quiz", json={"action": "grade", "question": "Q?", "question_type": "true-false"}
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "Missing required fields"

    def test_closed_form_requires_correct_answer(self, test_client):
        for question_type in ("multiple-choice", "true-false"):
            resp = test_client.post(
                "/api/quiz",
                json={"action": "grade", "question": "Q?", "user_answer": "", "question_type": question_type},
            )
            assert resp.status_code == 400
            assert resp.json()["error"] == "Missing required fields"

    def test_camel_case_fields_are_not_read(self, test_client):
        resp = test_client.post(
            "/api/quiz",
            json={
                "action": "grade",
                "question": "Q?",
                "userAnswer": "True",
                "correctAnswer": "True",
                "questionType": "true-false",
            },
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "Missing required fields"

    def test_grade_response_keys_are_snake_case(self, test_client):
        resp = test_client.post(
            "/api/quiz",
            json={
                "action": "grade",
                "question": "Q?",
                "user_answer": "True",
                "correct_answer": "True",
                "question_type": "true-false",
            },
        )
        assert set(resp.json()) == {"score", "is_correct", "feedback", "citations"}

    def test_invalid_question_type(self, test_client):
        resp = test_client.post(
            "/api/quiz",
            json={"action": "grade", "question": "Q?", "user_answer": "a", "question_type": "essay"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid question type"


class TestQuizErrors:
    def test_invalid_action(self, test_client):
        resp = test_client.post("/api/quiz", json={"action": "explode"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid action"

    def test_missing_action(self, test_client):
        resp = test_client.post("/api/quiz", json={})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid request"

    def test_count_out_of_range(self, test_client):
        resp = test_client.post("/api/quiz", json={"action": "generate", "count": 0})
        assert resp.status_code == 400


# ── Unhandled errors ─────────────────────────────────────────────────────────


class BrokenStore(VectorStore):
    def get_stats(self):
        raise RuntimeError("boom")


class TestUnhandledErrors:
    def test_returns_generic_500(self, fake_embedder, fake_generator, tmp_path):
        app = create_app(
            store=BrokenStore(), embedder=fake_embedder, generator=fake_generator, docs_dir=tmp_path
        )
        with TestClient(app, raise_server_exceptions=False) as client:
            resp = client.get("/api/init")
        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal server error"}
