"""Result shapes returned by the processing pipeline."""
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from ingestion.errors import ErrorType
from screenplay.models import CharacterCandidate, DuplicateGroup, Scene


class ProcessingStats(BaseModel):
    """Summary counters for a processed script."""
    total_scenes: int
    total_characters: int
    high_confidence: int
    medium_confidence: int
    low_confidence: int
    duplicate_groups: int
    pages: Optional[int] = None
    fragments: Optional[int] = None
    lines: Optional[int] = None
    left_margin: Optional[float] = None


class ProcessingSuccess(BaseModel):
    success: Literal[True] = True
    scenes: List[Scene] = Field(default_factory=list)
    characters: List[CharacterCandidate] = Field(default_factory=list)
    duplicates: List[DuplicateGroup] = Field(default_factory=list)
    raw_text: str
    method: Literal["text", "ocr"]
    confidence: float = Field(ge=0.0, le=1.0)
    processing_time: float  # Seconds
    stats: ProcessingStats
    warnings: Optional[List[str]] = None  # Advisory only


class ProcessingFailure(BaseModel):
    success: Literal[False] = False
    error: str
    details: Optional[str] = None
    suggestion: Optional[str] = None
    error_type: ErrorType
    processing_time: float
    raw_text: Optional[str] = None


ProcessingResult = Union[ProcessingSuccess, ProcessingFailure]
