"""
RAG module - Retrieval-Augmented Generation pipeline.

This module is responsible for:
1. Retrieving relevant chunks for a query
2. Generating responses using Ollama
3. Answering tutor questions with citations
"""

from .generator import GenerationError, GenerationService, Generator, LLMResponse
from .retriever import RetrievalResult, Retriever
from .tutor import TutorAgent

__all__ = [
    "GenerationError",
    "GenerationService",
    "Generator",
    "LLMResponse",
    "RetrievalResult",
    "Retriever",
    "TutorAgent",
]
