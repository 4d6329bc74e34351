"""Document text source: plain text files and native PDF text layers."""
import asyncio
from enum import Enum
from pathlib import Path
from typing import List

import aiofiles
import fitz  # PyMuPDF

from utils.logger import setup_logger
from ingestion.errors import UnreadableFileError
from ingestion.models import PDFFragments, TextFragment
import config

logger = setup_logger(__name__)


class DocumentKind(str, Enum):
    PDF = "pdf"
    TEXT = "text"


def detect_kind(path: Path) -> DocumentKind:
    """Classify a file by its declared extension.

    Raises:
        UnreadableFileError: If the extension is not an accepted input type
    """
    suffix = Path(path).suffix.lower()
    if suffix in config.PDF_EXTENSIONS:
        return DocumentKind.PDF
    if suffix in config.TEXT_EXTENSIONS:
        return DocumentKind.TEXT
    raise UnreadableFileError(
        f"Unsupported file type: {suffix or '(no extension)'}",
        suggestion="Upload a PDF or a plain text / .fountain screenplay."
    )


async def read_text_file(path: Path) -> str:
    """Read a plain text script as-is.

    Raises:
        UnreadableFileError: If the file cannot be read
    """
    try:
        async with aiofiles.open(path, "r", encoding="utf-8", errors="replace") as f:
            text = await f.read()
    except OSError as e:
        raise UnreadableFileError("Failed to read file", details=str(e))

    logger.info(f"Read {len(text)} characters from {Path(path).name}")
    return text


def open_pdf(path: Path) -> "fitz.Document":
    """Open a PDF, refusing encrypted or corrupted documents.

    Raises:
        UnreadableFileError: If the PDF cannot be opened or needs a password
    """
    path = Path(path)
    if not path.exists():
        raise UnreadableFileError(f"File not found: {path}")

    try:
        doc = fitz.open(path)
    except Exception as e:
        raise UnreadableFileError(
            "Failed to open PDF. It may be corrupted.",
            details=str(e)
        )

    if doc.needs_pass:
        doc.close()
        raise UnreadableFileError(
            "PDF is password-protected",
            suggestion=config.PASSWORD_SUGGESTION
        )

    if doc.page_count == 0:
        doc.close()
        raise UnreadableFileError("PDF has no pages")

    return doc


class PDFTextSource:
    """Extracts positioned text fragments from a PDF's text layer."""

    async def extract_fragments(self, pdf_path: str) -> PDFFragments:
        """Collect fragments page by page, in page order.

        Args:
            pdf_path: Path to PDF file

        Returns:
            PDFFragments with every non-blank span and the page count
        """
        doc = open_pdf(Path(pdf_path))
        fragments: List[TextFragment] = []

        try:
            for page_index in range(doc.page_count):
                page_fragments = await asyncio.to_thread(self._read_page, doc, page_index)
                fragments.extend(page_fragments)
            page_count = doc.page_count
        finally:
            doc.close()

        logger.info(f"Extracted {len(fragments)} fragments from {page_count} pages")
        return PDFFragments(fragments=fragments, page_count=page_count)

    def _read_page(self, doc: "fitz.Document", page_index: int) -> List[TextFragment]:
        """Convert the spans of one page into fragments.

        PyMuPDF already reports top-down coordinates, so span origins are
        used directly as the fragment position.
        """
        page = doc[page_index]
        content = page.get_text("dict")
        fragments = []

        for block in content.get("blocks", []):
            if block.get("type", 0) != 0:
                continue  # Image block
            for line in block.get("lines", []):
                for span in line.get("spans", []):
                    text = span.get("text", "")
                    if not text.strip():
                        continue
                    x0, y0, x1, y1 = span["bbox"]
                    origin_x, origin_y = span.get("origin", (x0, y1))
                    width = x1 - x0
                    height = y1 - y0
                    fragments.append(TextFragment(
                        text=text,
                        x=round(origin_x),
                        y=round(origin_y),
                        page=page_index + 1,
                        width=width if width > 0 else len(text) * 6,
                        height=height if height > 0 else 12
                    ))

        return fragments
