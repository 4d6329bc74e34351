"""Error kinds raised by the ingestion stages."""
from enum import Enum
from typing import Optional

import config


class ErrorType(str, Enum):
    """Distinguishable failure kinds reported in a failed result."""
    UNREADABLE_FILE = "unreadable_file"
    SCANNED_OR_IMAGE_PDF = "scanned_or_image_pdf"
    NO_SCENES_DETECTED = "no_scenes_detected"
    EXTRACTION_QUALITY_INSUFFICIENT = "extraction_quality_insufficient"
    OCR_ENGINE_UNAVAILABLE = "ocr_engine_unavailable"
    UNEXPECTED = "unexpected"


class IngestionError(Exception):
    """Base class for pipeline stage failures."""

    error_type = ErrorType.UNEXPECTED
    suggestion = config.DEFAULT_SUGGESTION

    def __init__(self, message: str, details: Optional[str] = None, suggestion: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if suggestion is not None:
            self.suggestion = suggestion


class UnreadableFileError(IngestionError):
    """Raised when the file bytes cannot be read or opened."""
    error_type = ErrorType.UNREADABLE_FILE


class ScannedPDFError(IngestionError):
    """Raised when a PDF carries too little native text to be usable."""
    error_type = ErrorType.SCANNED_OR_IMAGE_PDF


class NoScenesDetectedError(IngestionError):
    """Raised when no scene headings can be found."""
    error_type = ErrorType.NO_SCENES_DETECTED
    suggestion = config.NO_SCENES_SUGGESTION


class ExtractionQualityError(IngestionError):
    """Raised when extracted text fails the quality gate."""
    error_type = ErrorType.EXTRACTION_QUALITY_INSUFFICIENT


class OCREngineUnavailableError(IngestionError):
    """Raised when the OCR engine cannot be loaded."""
    error_type = ErrorType.OCR_ENGINE_UNAVAILABLE
    suggestion = (
        "OCR is not available on this machine. Install Tesseract, or use a "
        "text-based PDF exported from your screenwriting software."
    )
