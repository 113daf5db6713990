"""
Ingestion module - Handles text extraction, chunking and document processing.

This module is responsible for:
1. Extracting text from PDF and text files
2. Splitting text into word chunks tagged with topics
3. Embedding chunks and loading them into the vector store
"""

from .pdf_parser import TextExtractor, UnsupportedFileTypeError
from .chunker import WordChunker, extract_topics
from .processor import DocumentProcessor, IngestReport, ingest_directory

__all__ = [
    "DocumentProcessor",
    "IngestReport",
    "TextExtractor",
    "UnsupportedFileTypeError",
    "WordChunker",
    "extract_topics",
    "ingest_directory",
]
