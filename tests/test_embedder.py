"""Tests for the sentence-transformers embedder (model replaced by a stub)."""

import numpy as np
import pytest

from netsec_tutor.embeddings import embedder as embedder_module
from netsec_tutor.embeddings.embedder import Embedder, EmbeddingService


class StubModel:
    """Maps each text to [len(text), 1, 0] so results are predictable."""

    loads = 0

    def __init__(self, name):
        StubModel.loads += 1
        self.name = name
        self.encoded = []

    def get_sentence_embedding_dimension(self):
        return 3

    def encode(self, texts, convert_to_numpy=True, **kwargs):
        self.encoded.append(texts)
        if isinstance(texts, str):
            return np.array([len(texts), 1.0, 0.0])
        return np.array([[len(t), 1.0, 0.0] for t in texts])


@pytest.fixture()
def stub_model(monkeypatch):
    StubModel.loads = 0
    monkeypatch.setattr(embedder_module, "SentenceTransformer", StubModel)
    return StubModel


class TestEmbedder:
    def test_model_loads_lazily(self, stub_model):
        embedder = Embedder("stub-model")
        assert stub_model.loads == 0
        assert embedder.dimension == 384
        embedder.embed("firewall")
        assert stub_model.loads == 1
        embedder.embed("again")
        assert stub_model.loads == 1
        assert embedder.dimension == 3

    def test_embed(self, stub_model):
        assert Embedder().embed("abcd") == [4.0, 1.0, 0.0]

    def test_empty_text_is_zero_vector_without_loading(self, stub_model):
        embedder = Embedder()
        assert embedder.embed("   ") == [0.0] * 384
        assert stub_model.loads == 0

    def test_embed_batch_keeps_positions(self, stub_model):
        embedder = Embedder()
        embedder.embed("warm up")
        vectors = embedder.embed_batch(["ab", "", "abcde"])
        assert vectors == [[2.0, 1.0, 0.0], [0.0, 0.0, 0.0], [5.0, 1.0, 0.0]]
        # Empty text never reaches the model
        assert embedder.model.encoded[-1] == ["ab", "abcde"]

    def test_embed_batch_empty_list(self, stub_model):
        assert Embedder().embed_batch([]) == []
        assert stub_model.loads == 0

    def test_similarity(self, stub_model):
        embedder = Embedder()
        assert embedder.similarity("abc", "abc") == pytest.approx(1.0)

    def test_satisfies_protocol(self, stub_model):
        assert isinstance(Embedder(), EmbeddingService)
