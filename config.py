"""Configuration module for the screenplay ingestion pipeline."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Accepted input types (declared by extension, never sniffed)
PDF_EXTENSIONS = {".pdf"}
TEXT_EXTENSIONS = {
    ext.strip().lower()
    for ext in os.getenv("TEXT_EXTENSIONS", ".txt,.text,.fountain,.md").split(",")
    if ext.strip()
}

# Extraction quality gate
MIN_TEXT_LENGTH = int(os.getenv("MIN_TEXT_LENGTH", "500"))
MIN_SCENE_CONTENT_LENGTH = 100  # Average characters of content per scene
MIN_ALPHA_RATIO = 0.5  # Below this the text is treated as garbled
QUALITY_ACCEPT_THRESHOLD = float(os.getenv("QUALITY_ACCEPT_THRESHOLD", "0.6"))
MIN_WORDS_PER_PAGE = int(os.getenv("MIN_WORDS_PER_PAGE", "50"))  # Normal script page has 200+ words

# Line reconstruction (PDF user-space units)
LINE_BREAK_TOLERANCE = 8
WORD_GAP = 3
TAB_GAP = 20

# OCR fallback
OCR_ENABLED = os.getenv("OCR_ENABLED", "true").lower() in ("1", "true", "yes")
OCR_RENDER_SCALE = float(os.getenv("OCR_RENDER_SCALE", "2.0"))  # Higher scale = better accuracy
OCR_PAGE_SEG_MODE = int(os.getenv("OCR_PAGE_SEG_MODE", "6"))  # Assume uniform block of text
OCR_LANGUAGE = os.getenv("OCR_LANGUAGE", "eng")
TESSERACT_CMD = os.getenv("TESSERACT_CMD")

# Character detection
MIN_CHARACTER_OCCURRENCES = int(os.getenv("MIN_CHARACTER_OCCURRENCES", "2"))
LOW_CONFIDENCE_THRESHOLD = 0.6
SUSPICIOUS_CONFIDENCE_THRESHOLD = 0.4
HIGH_CONFIDENCE_THRESHOLD = 0.7

# Duplicate detection
DUPLICATE_SIMILARITY_THRESHOLD = float(os.getenv("DUPLICATE_SIMILARITY_THRESHOLD", "0.75"))
SUGGESTED_NAME_CONFIDENCE_MARGIN = 0.1

# User-facing suggestions
DEFAULT_SUGGESTION = (
    "Try pasting the script text directly, or export as .fountain "
    "from your screenwriting software."
)
PASSWORD_SUGGESTION = (
    "This PDF may be password-protected. Please remove the password "
    "protection and try again."
)
NO_SCENES_SUGGESTION = (
    'Ensure your script uses standard scene headings like "INT. LOCATION - DAY" '
    'or "EXT. LOCATION - NIGHT".'
)
