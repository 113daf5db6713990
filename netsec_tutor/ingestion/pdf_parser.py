"""
Text extraction - Turns raw document bytes into page-by-page text.

PDFs go through pymupdf (fitz); plain text is decoded as UTF-8. Pages that
fail to extract are skipped rather than failing the whole document.
Other formats (DOCX, PPTX) are not supported.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

import fitz  # pymupdf - the library is called 'fitz' historically

logger = logging.getLogger(__name__)


class UnsupportedFileTypeError(ValueError):
    """Raised for document formats the extractor cannot read."""


@dataclass
class PageContent:
    """
    Text of a single page.

    Attributes:
        page_number: 1-indexed page number (None for formats without pages)
        text: Extracted text content
    """

    page_number: int | None
    text: str


@dataclass
class ExtractedText:
    """
    The full extracted content of one document.

    Attributes:
        filename: Name of the source file
        file_type: 'pdf' or 'txt'
        total_pages: Page count of the source (0 for plain text)
        pages: Non-empty pages in order
    """

    filename: str
    file_type: str
    total_pages: int
    pages: list[PageContent]

    @property
    def full_text(self) -> str:
        return "\n\n".join(page.text for page in self.pages)


def get_file_type(filename: str) -> str:
    """Map a filename to 'pdf', 'docx', 'pptx' or 'txt' by extension."""
    extension = Path(filename).suffix.lower().lstrip(".")
    if extension == "pdf":
        return "pdf"
    if extension in ("docx", "doc"):
        return "docx"
    if extension in ("pptx", "ppt"):
        return "pptx"
    return "txt"


class TextExtractor:
    """
    Extracts text from document bytes.

    Example:
        extractor = TextExtractor()
        content = extractor.extract(Path("lecture1.pdf").read_bytes(), "lecture1.pdf")
        print(content.full_text)
    """

    def __init__(self, clean_text: bool = True):
        """
        Args:
            clean_text: If True, collapse extra whitespace and drop page-number lines
        """
        self.clean_text = clean_text

    def _clean_extracted_text(self, text: str) -> str:
        if not self.clean_text:
            return text

        text = re.sub(r"\n{3,}", "\n\n", text)
        text = re.sub(r" {2,}", " ", text)

        # Remove lines that are just numbers (likely page numbers)
        lines = text.split("\n")
        cleaned_lines = [
            line for line in lines if not (line.strip().isdigit() and len(line.strip()) < 4)
        ]
        return "\n".join(cleaned_lines).strip()

    def extract(self, data: bytes, filename: str) -> ExtractedText:
        """
        Extract text from a document.

        Args:
            data: Raw file contents
            filename: Original file name (used to pick the format)

        Raises:
            UnsupportedFileTypeError: For DOCX/PPTX input
            RuntimeError: If a PDF cannot be opened
        """
        file_type = get_file_type(filename)
        if file_type == "pdf":
            return self._extract_pdf(data, filename)
        if file_type == "txt":
            text = self._clean_extracted_text(data.decode("utf-8", errors="replace"))
            pages = [PageContent(page_number=None, text=text)] if text else []
            return ExtractedText(filename=filename, file_type="txt", total_pages=0, pages=pages)
        raise UnsupportedFileTypeError(f"Unsupported file type: {file_type}")

    def _extract_pdf(self, data: bytes, filename: str) -> ExtractedText:
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise RuntimeError(f"Failed to open PDF {filename}: {e}") from e

        pages = []
        with doc:
            total_pages = len(doc)
            for page_num in range(total_pages):
                try:
                    text = doc[page_num].get_text()
                except Exception as e:
                    logger.warning("Skipping page %d of %s: %s", page_num + 1, filename, e)
                    continue
                cleaned = self._clean_extracted_text(text)
                if cleaned:
                    pages.append(PageContent(page_number=page_num + 1, text=cleaned))

        return ExtractedText(filename=filename, file_type="pdf", total_pages=total_pages, pages=pages)

    def extract_file(self, path: str | Path) -> ExtractedText:
        """Read a file from disk and extract it."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Document not found: {path}")
        return self.extract(path.read_bytes(), path.name)
