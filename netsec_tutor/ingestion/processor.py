"""
Document processing - extraction, chunking, tagging and embedding.

This is the ingestion pipeline:
1. Extract page text from the raw document bytes
2. Split text into overlapping word chunks
3. Tag each chunk with topics
4. Embed every chunk in one batch
5. Hand the chunks to the vector store
"""

import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path

from netsec_tutor.config import SUPPORTED_EXTENSIONS
from netsec_tutor.embeddings.embedder import EmbeddingService
from netsec_tutor.embeddings.vector_store import VectorStore
from netsec_tutor.ingestion.chunker import WordChunker, extract_topics
from netsec_tutor.ingestion.pdf_parser import TextExtractor
from netsec_tutor.models import Chunk

logger = logging.getLogger(__name__)


@dataclass
class ProcessedDocument:
    """A document ready to be added to the vector store."""

    id: str
    title: str
    filename: str
    file_type: str
    page_count: int
    word_count: int
    topics: list[str]
    chunks: list[Chunk]


@dataclass
class IngestReport:
    """Summary of a directory ingestion run."""

    processed: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    skipped: bool = False

    @property
    def processed_count(self) -> int:
        return len(self.processed)

    @property
    def failed_count(self) -> int:
        return len(self.failed)


def generate_document_id() -> str:
    return uuid.uuid4().hex[:9]


class DocumentProcessor:
    """
    Converts raw document bytes into embedded chunks.

    Example:
        processor = DocumentProcessor(embedder=Embedder())
        doc = processor.process_document(path.read_bytes(), path.name)
        store.add_document(doc.id, doc.chunks)
    """

    def __init__(
        self,
        embedder: EmbeddingService,
        extractor: TextExtractor | None = None,
        chunker: WordChunker | None = None,
    ):
        self.embedder = embedder
        self.extractor = extractor or TextExtractor()
        self.chunker = chunker or WordChunker()

    def process_document(self, data: bytes, filename: str) -> ProcessedDocument:
        """
        Run the full pipeline on one document.

        Raises:
            UnsupportedFileTypeError: For formats the extractor cannot read
            ValueError: If the document contains no text
        """
        extracted = self.extractor.extract(data, filename)
        text_chunks = self.chunker.chunk_pages(extracted.pages, filename=filename)
        if not text_chunks:
            raise ValueError(f"No text could be extracted from {filename}")

        logger.info("Generating embeddings for %d chunks of %s", len(text_chunks), filename)
        embeddings = self.embedder.embed_batch([chunk.text for chunk in text_chunks])
        if len(embeddings) != len(text_chunks):
            raise ValueError(
                f"Embedding service returned {len(embeddings)} vectors for {len(text_chunks)} chunks"
            )

        document_id = generate_document_id()
        chunks = [
            Chunk(
                id=f"{document_id}_chunk_{chunk.chunk_index}",
                document_id=document_id,
                text=chunk.text,
                filename=filename,
                page_number=chunk.page_number,
                topics=tuple(chunk.topics),
                embedding=tuple(embedding),
                chunk_index=chunk.chunk_index,
            )
            for chunk, embedding in zip(text_chunks, embeddings)
        ]

        full_text = extracted.full_text
        return ProcessedDocument(
            id=document_id,
            title=Path(filename).stem,
            filename=filename,
            file_type=extracted.file_type,
            page_count=extracted.total_pages,
            word_count=len(full_text.split()),
            topics=extract_topics(full_text, filename),
            chunks=chunks,
        )


def ingest_directory(
    directory: str | Path,
    processor: DocumentProcessor,
    store: VectorStore,
    force: bool = False,
) -> IngestReport:
    """
    Process every supported document in a directory into the store.

    A failing document is logged and recorded in the report; it never
    aborts the run. When the store already holds chunks the run is skipped
    unless `force` is set.

    Raises:
        FileNotFoundError: If the directory does not exist
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Directory not found: {directory}")

    report = IngestReport()
    if store.count > 0 and not force:
        logger.info("Vector store already initialized with %d chunks", store.count)
        report.skipped = True
        return report

    files = sorted(
        path for path in directory.iterdir() if path.suffix.lower() in SUPPORTED_EXTENSIONS
    )
    logger.info("Found %d documents in %s", len(files), directory)

    for path in files:
        try:
            document = processor.process_document(path.read_bytes(), path.name)
            store.add_document(document.id, document.chunks)
        except Exception as e:
            logger.error("Failed to process %s: %s", path.name, e)
            report.failed[path.name] = str(e)
            continue
        report.processed.append(path.name)
        logger.info(
            "Processed %s (%d chunks, topics: %s)",
            path.name,
            len(document.chunks),
            ", ".join(document.topics),
        )

    logger.info(
        "Ingestion complete: %d succeeded, %d failed",
        report.processed_count,
        report.failed_count,
    )
    return report
