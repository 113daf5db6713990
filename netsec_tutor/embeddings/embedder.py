"""
Embedder - Converts text to vector embeddings.

This module wraps sentence-transformers behind the small
`EmbeddingService` interface the rest of the package depends on, so the
retrieval code never cares how vectors are actually produced.

Example:
    embedder = Embedder()
    vector = embedder.embed("What is a firewall?")
    vectors = embedder.embed_batch(["text1", "text2", "text3"])
"""

import logging
from typing import Protocol, runtime_checkable

import numpy as np
from sentence_transformers import SentenceTransformer

from netsec_tutor.config import EMBEDDING_DIMENSION, EMBEDDING_MODEL
from netsec_tutor.embeddings.vector_store import cosine_similarity

logger = logging.getLogger(__name__)


@runtime_checkable
class EmbeddingService(Protocol):
    """Anything that turns text into fixed-dimensionality vectors."""

    def embed(self, text: str) -> list[float]: ...

    def embed_batch(self, texts: list[str]) -> list[list[float]]: ...


class Embedder:
    """
    Converts text to vector embeddings using sentence-transformers.

    IMPORTANT: Always use the same model for indexing and querying!
    Vectors from different models live in different spaces and cannot be
    compared.
    """

    def __init__(self, model_name: str | None = None):
        """
        Args:
            model_name: Name of the sentence-transformer model to use.
                        Defaults to the model specified in config.
        """
        self.model_name = model_name or EMBEDDING_MODEL
        self._model = None  # Lazy loading

    @property
    def model(self) -> SentenceTransformer:
        """Load the model on first use."""
        if self._model is None:
            logger.info("Loading embedding model: %s", self.model_name)
            self._model = SentenceTransformer(self.model_name)
            logger.info("Model loaded, embedding dimension: %s", self.dimension)
        return self._model

    @property
    def dimension(self) -> int:
        if self._model is None:
            return EMBEDDING_DIMENSION
        return self._model.get_sentence_embedding_dimension() or EMBEDDING_DIMENSION

    def embed(self, text: str) -> list[float]:
        """
        Convert a single text to an embedding vector.

        Empty text maps to the zero vector, which scores 0.0 against
        everything in the store.
        """
        if not text or not text.strip():
            return [0.0] * self.dimension

        embedding = self.model.encode(text, convert_to_numpy=True)
        return embedding.tolist()

    def embed_batch(
        self,
        texts: list[str],
        show_progress: bool = False,
        batch_size: int = 32,
    ) -> list[list[float]]:
        """
        Convert multiple texts to embeddings in one model call.

        Returns one vector per input text, in order.
        """
        if not texts:
            return []

        # Filter out empty texts but remember their positions
        non_empty_indices = []
        non_empty_texts = []
        for i, text in enumerate(texts):
            if text and text.strip():
                non_empty_indices.append(i)
                non_empty_texts.append(text)

        if not non_empty_texts:
            return [[0.0] * self.dimension for _ in texts]

        embeddings = self.model.encode(
            non_empty_texts,
            convert_to_numpy=True,
            show_progress_bar=show_progress,
            batch_size=batch_size,
        )

        result = [[0.0] * self.dimension for _ in texts]
        for idx, embedding in zip(non_empty_indices, embeddings):
            result[idx] = embedding.tolist()

        return result

    def similarity(self, text1: str, text2: str) -> float:
        """Cosine similarity between the embeddings of two texts."""
        return cosine_similarity(np.asarray(self.embed(text1)), np.asarray(self.embed(text2)))
