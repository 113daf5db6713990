"""
Embeddings module - Handles embedding generation and vector storage.

This module is responsible for:
1. Converting text chunks to embeddings
2. Storing and searching embeddings in memory
"""

from .vector_store import DimensionMismatchError, VectorStore, cosine_similarity
from .embedder import Embedder, EmbeddingService

__all__ = [
    "DimensionMismatchError",
    "Embedder",
    "EmbeddingService",
    "VectorStore",
    "cosine_similarity",
]
