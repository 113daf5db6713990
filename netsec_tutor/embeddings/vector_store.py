"""
Vector Store - Keeps chunk embeddings in memory and searches them.

The corpus is a few dozen chunks, so search is a brute-force cosine
similarity scan over every stored vector. Nothing is persisted: the store
is filled at startup and lives as long as the process.

How it works:
1. Store: document chunks (text + embedding + metadata) are appended
2. Query: question embedding -> score every chunk -> sort -> top K above the floor
"""

import logging
from collections.abc import Iterable, Sequence

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity as _pairwise_cosine

from netsec_tutor.config import MIN_SIMILARITY_SCORE, TOP_K_CHUNKS
from netsec_tutor.models import Chunk, SearchResult

logger = logging.getLogger(__name__)


class DimensionMismatchError(ValueError):
    """Raised when two vectors of different lengths are compared or stored together."""


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """
    Cosine similarity between two vectors.

    Returns a value in [-1, 1]. A zero-magnitude vector scores 0.0.

    Raises:
        DimensionMismatchError: If the vectors have different lengths
    """
    a = np.asarray(vec_a, dtype=float)
    b = np.asarray(vec_b, dtype=float)
    if a.shape != b.shape:
        raise DimensionMismatchError(
            f"Vectors must have the same length for cosine similarity "
            f"({a.size} != {b.size})"
        )

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.dot(a, b) / (norm_a * norm_b))


class VectorStore:
    """
    In-memory vector store for document chunks.

    One instance is created by the application entry point and handed to
    everything that needs it. Additions are append-only.

    Example:
        store = VectorStore()
        store.add_document("doc1", chunks)
        results = store.search(query_embedding, top_k=5)
        for result in results:
            print(f"Score: {result.score:.3f}, Text: {result.text[:50]}...")
    """

    def __init__(self):
        self._chunks: list[Chunk] = []
        self._matrix: np.ndarray | None = None
        self._dimension: int | None = None

    @property
    def count(self) -> int:
        """Number of chunks in the store."""
        return len(self._chunks)

    @property
    def dimension(self) -> int | None:
        """Embedding dimension, fixed by the first stored chunk."""
        return self._dimension

    def add_document(self, document_id: str, chunks: Iterable[Chunk]) -> int:
        """
        Add the chunks of one document.

        Chunks without an embedding are skipped with a warning. Chunk ids
        are re-assigned as "<document_id>_chunk_<n>" in stored order. Adding
        more chunks under an existing document id continues its numbering.

        Returns:
            Number of chunks stored

        Raises:
            ValueError: If none of the chunks carries an embedding
            DimensionMismatchError: If an embedding's length differs from the store's
        """
        chunks = list(chunks)
        valid = [chunk for chunk in chunks if chunk.embedding]

        if len(valid) < len(chunks):
            logger.warning(
                "Document %s: %d chunk(s) missing embeddings, skipping them",
                document_id,
                len(chunks) - len(valid),
            )
        if not valid:
            raise ValueError(f"No valid embeddings found for document {document_id}")

        dimension = self._dimension or valid[0].dimension
        for chunk in valid:
            if chunk.dimension != dimension:
                raise DimensionMismatchError(
                    f"Chunk embedding has {chunk.dimension} dimensions, store expects {dimension}"
                )

        offset = sum(1 for c in self._chunks if c.document_id == document_id)
        stored = [
            Chunk(
                id=f"{document_id}_chunk_{offset + i}",
                document_id=document_id,
                text=chunk.text,
                filename=chunk.filename or "unknown",
                page_number=chunk.page_number,
                topics=tuple(chunk.topics),
                embedding=tuple(float(x) for x in chunk.embedding),
                chunk_index=offset + i,
            )
            for i, chunk in enumerate(valid)
        ]

        self._dimension = dimension
        self._chunks.extend(stored)
        self._matrix = None  # rebuilt lazily on next search

        logger.info(
            "Added document %s with %d chunks (store now holds %d)",
            document_id,
            len(stored),
            self.count,
        )
        return len(stored)

    def _embedding_matrix(self) -> np.ndarray:
        if self._matrix is None:
            self._matrix = np.asarray([chunk.embedding for chunk in self._chunks], dtype=float)
        return self._matrix

    def search(
        self,
        query_embedding: Sequence[float],
        top_k: int | None = None,
        min_score: float | None = None,
    ) -> list[SearchResult]:
        """
        Find the chunks most similar to a query vector.

        Args:
            query_embedding: The embedding vector to search with
            top_k: Maximum number of results (default from config)
            min_score: Similarity floor (default from config)

        Returns:
            At most `top_k` SearchResult objects, highest score first, none
            below `min_score`. Equal scores keep insertion order.

        Raises:
            ValueError: If top_k is not positive
            DimensionMismatchError: If the query length differs from the stored vectors
        """
        top_k = TOP_K_CHUNKS if top_k is None else top_k
        min_score = MIN_SIMILARITY_SCORE if min_score is None else min_score
        if top_k < 1:
            raise ValueError(f"top_k must be a positive integer, got {top_k}")

        if not self._chunks:
            logger.debug("Vector store is empty, no results to return")
            return []

        query = np.asarray(query_embedding, dtype=float)
        if query.ndim != 1 or query.shape[0] != self._dimension:
            raise DimensionMismatchError(
                f"Query has {query.size} dimensions, store expects {self._dimension}"
            )

        # sklearn normalizes rows and leaves zero-magnitude rows at 0.0
        scores = _pairwise_cosine(query.reshape(1, -1), self._embedding_matrix())[0]

        # Stable sort on negated scores keeps insertion order for ties
        order = np.argsort(-scores, kind="stable")

        results = []
        for idx in order[:top_k]:
            score = float(scores[idx])
            if score < min_score:
                continue
            results.append(SearchResult(chunk=self._chunks[idx], score=score))
        return results

    def get_all_chunks(self) -> list[Chunk]:
        """All stored chunks, in insertion order."""
        return list(self._chunks)

    def get_chunks_by_topic(self, topic: str) -> list[Chunk]:
        """
        Chunks related to a topic.

        Matches case-insensitively against the chunk's topic tags, its text
        and its filename.
        """
        needle = topic.lower()
        return [
            chunk
            for chunk in self._chunks
            if any(needle in t.lower() for t in chunk.topics)
            or needle in chunk.text.lower()
            or needle in chunk.filename.lower()
        ]

    def get_stats(self) -> dict:
        """Document count, chunk count and the sorted set of topic tags."""
        documents = {chunk.document_id for chunk in self._chunks}
        topics = {topic for chunk in self._chunks for topic in chunk.topics}
        return {
            "total_documents": len(documents),
            "total_chunks": self.count,
            "topics": sorted(topics),
        }

    def clear(self) -> None:
        """Remove every chunk."""
        self._chunks = []
        self._matrix = None
        self._dimension = None
        logger.info("Vector store cleared")
