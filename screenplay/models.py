"""Pydantic models for scene and character detection."""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

IntExt = Literal["INT", "EXT", "INT/EXT"]
TimeOfDay = str  # One of the vocabulary's canonical values


class SceneHeading(BaseModel):
    """Components parsed from a single scene heading line."""
    heading: str
    number: Optional[str] = None  # Scene number printed in the heading, if any
    interior_exterior: IntExt
    location: str
    time_of_day: TimeOfDay


class Scene(BaseModel):
    """A scene discovered in the script text.

    ``index`` is the identity used by every later stage. ``number`` is only a
    display label and may repeat.
    """
    index: int
    number: str
    heading: str
    interior_exterior: IntExt
    time_of_day: TimeOfDay
    location: str
    characters: List[str] = Field(default_factory=list)
    start_line: int
    end_line: int
    content: List[str] = Field(default_factory=list)


class CueMatch(BaseModel):
    """A line recognised as a character cue."""
    name: str
    has_dialogue: bool = True


class CharacterCandidate(BaseModel):
    """A speaking character detected from dialogue cues."""
    name: str
    normalized_name: str
    occurrences: int
    dialogue_count: int
    scene_indices: List[int] = Field(default_factory=list)
    scene_count: int
    confidence: float = Field(ge=0.0, le=1.0)
    is_low_confidence: bool = False
    is_suspicious: bool = False
    merged_from: List[str] = Field(default_factory=list)  # Raw names absorbed by a merge


class CharacterExtraction(BaseModel):
    """Characters plus the scenes with their character lists filled in."""
    characters: List[CharacterCandidate] = Field(default_factory=list)
    scenes: List[Scene] = Field(default_factory=list)


class DuplicateGroup(BaseModel):
    """Candidates believed to denote the same person."""
    characters: List[CharacterCandidate] = Field(min_length=2)
    suggested_name: str
    total_scenes: int
    total_occurrences: int
