"""OCR fallback for scanned and image-based PDFs."""
import asyncio
import importlib
from pathlib import Path
from typing import Callable, Optional, Tuple

import fitz  # PyMuPDF
from PIL import Image

from utils.logger import setup_logger
from ingestion.cleaner import clean_ocr_text
from ingestion.errors import OCREngineUnavailableError
from ingestion.models import ProgressEvent
from ingestion.text_source import open_pdf
import config

logger = setup_logger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]
OCR_INIT_STEP = 5  # Progress points between engine loading and the first page


class TesseractEngine:
    """Tesseract wrapper, loaded on first use."""

    def __init__(
        self,
        psm: int = config.OCR_PAGE_SEG_MODE,
        lang: str = config.OCR_LANGUAGE,
        tesseract_cmd: Optional[str] = config.TESSERACT_CMD
    ):
        self.psm = psm
        self.lang = lang
        self.tesseract_cmd = tesseract_cmd
        self._pytesseract = None

    @property
    def loaded(self) -> bool:
        return self._pytesseract is not None

    def load(self):
        """Import pytesseract and check the tesseract binary responds.

        Raises:
            OCREngineUnavailableError: If either the package or the binary is missing
        """
        if self._pytesseract is not None:
            return

        try:
            pytesseract = importlib.import_module("pytesseract")
        except ImportError as e:
            raise OCREngineUnavailableError("OCR engine could not be loaded", details=str(e))

        if self.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.tesseract_cmd

        try:
            version = pytesseract.get_tesseract_version()
        except (pytesseract.TesseractNotFoundError, OSError) as e:
            raise OCREngineUnavailableError("Tesseract binary not found", details=str(e))

        logger.info(f"Loaded Tesseract {version}")
        self._pytesseract = pytesseract

    def recognize(self, image: Image.Image) -> str:
        """Run recognition on one rendered page."""
        if self._pytesseract is None:
            self.load()

        return self._pytesseract.image_to_string(
            image,
            lang=self.lang,
            config=f"--psm {self.psm} -c preserve_interword_spaces=1"
        )


class OCRFallback:
    """Renders PDF pages to images and recognises their text, one page at a time."""

    def __init__(
        self,
        engine=None,
        render_scale: float = config.OCR_RENDER_SCALE,
        progress_range: Tuple[int, int] = (30, 90)
    ):
        """Initialize OCR fallback.

        Args:
            engine: Object with load() and recognize(image) (defaults to Tesseract)
            render_scale: Zoom factor applied when rendering pages
            progress_range: Overall progress span the OCR events are reported in
        """
        self.engine = engine if engine is not None else TesseractEngine()
        self.render_scale = render_scale
        self.progress_start, self.progress_end = progress_range

    async def extract_text(
        self,
        pdf_path: str,
        on_progress: Optional[ProgressCallback] = None
    ) -> str:
        """OCR every page of a PDF in page order.

        Args:
            pdf_path: Path to PDF file
            on_progress: Receives ocr_loading, ocr_init and ocr_page events

        Returns:
            Cleaned OCR text of the whole document

        Raises:
            OCREngineUnavailableError: If the OCR engine cannot be loaded
            UnreadableFileError: If the PDF cannot be opened
        """
        emit = on_progress or (lambda event: None)

        emit(ProgressEvent(step="ocr_loading", message="Loading OCR engine...", progress=self.progress_start))
        await asyncio.to_thread(self.engine.load)

        emit(ProgressEvent(
            step="ocr_init",
            message="Initializing OCR...",
            progress=self.progress_start + OCR_INIT_STEP
        ))
        doc = open_pdf(Path(pdf_path))
        page_texts = []

        try:
            total_pages = doc.page_count
            for page_index in range(total_pages):
                emit(ProgressEvent(
                    step="ocr_page",
                    message=f"OCR processing page {page_index + 1} of {total_pages}...",
                    progress=self._page_progress(page_index, total_pages),
                    current_page=page_index + 1,
                    total_pages=total_pages
                ))
                text = await asyncio.to_thread(self._ocr_page, doc, page_index)
                page_texts.append(text)
                logger.info(f"OCR page {page_index + 1}/{total_pages}: {len(text)} characters")
        finally:
            doc.close()

        return clean_ocr_text("\n\n".join(page_texts))

    def _page_progress(self, page_index: int, total_pages: int) -> int:
        first_page = self.progress_start + OCR_INIT_STEP
        return first_page + int(page_index / total_pages * (self.progress_end - first_page))

    def _ocr_page(self, doc: "fitz.Document", page_index: int) -> str:
        """Render one page and recognise it, releasing the raster afterwards."""
        page = doc[page_index]
        pix = page.get_pixmap(matrix=fitz.Matrix(self.render_scale, self.render_scale))
        image = None

        try:
            image = Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
            return self.engine.recognize(image)
        finally:
            if image is not None:
                image.close()
            del pix
