"""
Retriever - Finds relevant chunks for a given query.

This module handles the retrieval part of RAG:
1. Takes a user question
2. Converts it to an embedding
3. Searches the vector store for similar chunks
4. Keeps the top K results above the similarity floor
5. Returns them with citation helpers
"""

from dataclasses import dataclass

from netsec_tutor.config import MAX_CITATIONS, MIN_SIMILARITY_SCORE, TOP_K_CHUNKS
from netsec_tutor.embeddings.embedder import EmbeddingService
from netsec_tutor.embeddings.vector_store import VectorStore
from netsec_tutor.models import Citation, SearchResult


@dataclass
class RetrievalResult:
    """
    Ranked search results for one query.

    Attributes:
        query: The original query
        results: SearchResult objects, highest score first
    """

    query: str
    results: list[SearchResult]

    @property
    def chunks(self) -> list[str]:
        return [r.text for r in self.results]

    @property
    def scores(self) -> list[float]:
        return [r.score for r in self.results]

    @property
    def has_results(self) -> bool:
        return len(self.results) > 0

    @property
    def context(self) -> str:
        """The combined context as a single string."""
        return "\n\n---\n\n".join(self.chunks)

    def citations(self, limit: int = MAX_CITATIONS) -> list[Citation]:
        """
        One citation per distinct (file, page), in rank order.

        The relevance of each citation is the score of its best chunk.
        """
        citations = []
        seen = set()
        for result in self.results:
            key = (result.source_file, result.page_number)
            if key in seen:
                continue
            seen.add(key)
            citations.append(Citation.from_chunk(result.chunk, relevance=result.score))
        return citations[:limit]

    def format_for_prompt(self) -> str:
        """Context with a source label above each chunk."""
        if not self.has_results:
            return "No relevant information found in the course documents."

        parts = []
        for result in self.results:
            label = result.source_file
            if result.page_number is not None:
                label = f"{label}, page {result.page_number}"
            parts.append(f"--- {label} ---\n{result.text}")
        return "\n\n".join(parts)


class Retriever:
    """
    Retrieves relevant context from the vector store.

    Example:
        retriever = Retriever(embedder, store)
        result = retriever.retrieve("What is a DDoS attack?")
        print(f"Found {len(result.results)} relevant chunks")
    """

    def __init__(
        self,
        embedder: EmbeddingService,
        vector_store: VectorStore,
        top_k: int = TOP_K_CHUNKS,
        min_score: float = MIN_SIMILARITY_SCORE,
    ):
        self.embedder = embedder
        self.vector_store = vector_store
        self.top_k = top_k
        self.min_score = min_score

    def retrieve(
        self,
        query: str,
        top_k: int | None = None,
        min_score: float | None = None,
    ) -> RetrievalResult:
        """
        Retrieve relevant chunks for a query.

        Args:
            query: The user's question
            top_k: Override default number of results
            min_score: Override minimum score threshold
        """
        top_k = top_k or self.top_k
        min_score = self.min_score if min_score is None else min_score

        # Skip the embedding call entirely on an empty store
        if self.vector_store.count == 0:
            return RetrievalResult(query=query, results=[])

        query_embedding = self.embedder.embed(query)
        results = self.vector_store.search(query_embedding, top_k=top_k, min_score=min_score)
        return RetrievalResult(query=query, results=results)
