"""Pydantic models for ingestion module."""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional


class TextFragment(BaseModel):
    """One positioned run of glyphs reported by the PDF text layer."""
    model_config = ConfigDict(frozen=True)

    text: str
    x: float
    y: float  # Top-down, baseline of the run
    page: int  # 1-indexed
    width: float
    height: float


class PDFFragments(BaseModel):
    """Native text layer of a whole PDF."""
    fragments: List[TextFragment] = Field(default_factory=list)
    page_count: int

    @property
    def word_count(self) -> int:
        """Whitespace-separated words across all fragments (spans hold whole lines)."""
        return sum(len(fragment.text.split()) for fragment in self.fragments)


class ReconstructedLine(BaseModel):
    """A logical line assembled from fragments sharing a Y band."""
    text: str
    x: float  # Leftmost fragment
    avg_x: float  # Mean fragment x, helps spot centered cues
    y: float
    page: int


class ExtractionStats(BaseModel):
    """Counters describing one extraction attempt."""
    pages: Optional[int] = None
    fragments: Optional[int] = None
    lines: Optional[int] = None
    left_margin: Optional[float] = None


class ValidationReport(BaseModel):
    """Quality gate verdict for a piece of extracted text."""
    is_valid: bool
    confidence: float = Field(ge=0.0, le=1.0)
    issues: List[str] = Field(default_factory=list)


class ExtractionResult(BaseModel):
    """Text accepted (or rejected) by the quality gate."""
    success: bool
    text: str = ""
    method: Literal["text", "ocr"]
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    issues: List[str] = Field(default_factory=list)
    stats: ExtractionStats = Field(default_factory=ExtractionStats)


class ProgressEvent(BaseModel):
    """Stage transition reported to the caller's progress callback."""
    step: str
    message: str
    progress: int = Field(default=0, ge=0, le=100)
    current_page: Optional[int] = None
    total_pages: Optional[int] = None
