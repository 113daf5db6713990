"""
Text Chunker - Splits document text into overlapping word windows.

Key Concepts:
- Chunk Size: How many WORDS per chunk (default: 500)
- Overlap: How many words the next chunk repeats (default: 50)
- Topics: Each chunk is tagged by matching a fixed keyword dictionary

Example:
    Words: w0 .. w9
    Chunk size: 5, Overlap: 2

    Chunk 0: w0 w1 w2 w3 w4
    Chunk 1: w3 w4 w5 w6 w7   <- 'w3 w4' overlaps with chunk 0
    Chunk 2: w6 w7 w8 w9
"""

from dataclasses import dataclass, field

from netsec_tutor.config import CHUNK_OVERLAP, CHUNK_SIZE, DEFAULT_TOPIC, TOPIC_KEYWORDS
from netsec_tutor.ingestion.pdf_parser import PageContent


@dataclass
class TextChunk:
    """
    A chunk of text before it is embedded and stored.

    Attributes:
        text: The chunk content (words joined by single spaces)
        chunk_index: Position of this chunk (0-indexed)
        start_word: Index of the first word in the document
        end_word: Index one past the last word
        page_number: Page of the first word, if known
        topics: Topic tags for this chunk
    """

    text: str
    chunk_index: int
    start_word: int
    end_word: int
    page_number: int | None = None
    topics: list[str] = field(default_factory=list)

    @property
    def word_count(self) -> int:
        return self.end_word - self.start_word


def extract_topics(
    text: str,
    filename: str = "",
    keywords: dict[str, list[str]] | None = None,
) -> list[str]:
    """
    Tag text with topics from the keyword dictionary.

    A topic matches when any of its keywords appears (case-insensitive
    substring). Filenames containing "lecture" or "homework"/"hw" add the
    "Lecture"/"Homework" tags. Text matching nothing gets the default topic.
    """
    keywords = TOPIC_KEYWORDS if keywords is None else keywords
    lower_text = text.lower()
    lower_filename = filename.lower()

    topics: list[str] = []
    if "lecture" in lower_filename:
        topics.append("Lecture")
    if "homework" in lower_filename or "hw" in lower_filename:
        topics.append("Homework")

    for topic, words in keywords.items():
        if any(word in lower_text for word in words):
            topics.append(topic)

    if not topics:
        topics.append(DEFAULT_TOPIC)
    return topics


class WordChunker:
    """
    Splits text into overlapping chunks of whole words.

    Example:
        chunker = WordChunker(chunk_size=500, chunk_overlap=50)
        chunks = chunker.chunk_pages(extracted.pages)
        for chunk in chunks:
            print(f"Chunk {chunk.chunk_index}: {chunk.word_count} words, page {chunk.page_number}")
    """

    def __init__(self, chunk_size: int = CHUNK_SIZE, chunk_overlap: int = CHUNK_OVERLAP):
        """
        Raises:
            ValueError: If overlap >= chunk_size or sizes are invalid
        """
        if chunk_size < 1:
            raise ValueError("Chunk size must be at least 1 word")
        if chunk_overlap < 0:
            raise ValueError("Overlap cannot be negative")
        if chunk_overlap >= chunk_size:
            raise ValueError("Overlap must be less than chunk size")

        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    def chunk_text(self, text: str) -> list[TextChunk]:
        """Chunk a single block of text with no page information."""
        return self.chunk_pages([PageContent(page_number=None, text=text)])

    def chunk_pages(self, pages: list[PageContent], filename: str = "") -> list[TextChunk]:
        """
        Chunk a document while tracking which page each chunk starts on.

        Pages are concatenated, so a chunk may span a page break; it is
        attributed to the page of its first word.
        """
        words: list[str] = []
        word_pages: list[int | None] = []
        for page in pages:
            page_words = page.text.split()
            words.extend(page_words)
            word_pages.extend([page.page_number] * len(page_words))

        chunks: list[TextChunk] = []
        step = self.chunk_size - self.chunk_overlap
        start = 0
        while start < len(words):
            end = min(start + self.chunk_size, len(words))
            text = " ".join(words[start:end])
            chunks.append(
                TextChunk(
                    text=text,
                    chunk_index=len(chunks),
                    start_word=start,
                    end_word=end,
                    page_number=word_pages[start],
                    topics=extract_topics(text, filename),
                )
            )
            if end == len(words):
                break
            start += step

        return chunks


def estimate_chunks(word_count: int, chunk_size: int = CHUNK_SIZE, overlap: int = CHUNK_OVERLAP) -> int:
    """Number of chunks `WordChunker` produces for a document of `word_count` words."""
    if word_count <= 0:
        return 0
    if word_count <= chunk_size:
        return 1
    step = chunk_size - overlap
    return -(-(word_count - chunk_size) // step) + 1
