"""
Network Security Tutor - A RAG-based tutor and quiz generator for course documents.

This package provides:
- Text extraction and word-window chunking of course documents
- Embedding generation using sentence-transformers
- In-memory cosine-similarity search
- Question answering and quiz generation/grading with a local Ollama model
- CLI and Web interfaces
"""

__version__ = "0.1.0"
