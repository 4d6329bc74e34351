"""Screenplay vocabulary used by scene and character detection.

Kept as immutable data so a pipeline can be built with a custom vocabulary
(e.g. in tests, or for non-English scripts) without touching module state.
"""
from typing import Dict, FrozenSet, Tuple

from pydantic import BaseModel, ConfigDict, Field

# INT/EXT prefix alternatives, uppercase only. Combined forms must come before
# single ones.
INT_EXT_ABBREVIATED = (
    r"(?-i:INT\.?\s*/\s*EXT\.?|EXT\.?\s*/\s*INT\.?|I\s*/\s*E\.?|E\s*/\s*I\.?"
    r"|INT\.|EXT\.|INT(?=\s)|EXT(?=\s))"
)
INT_EXT_SPELLED = (
    r"(?-i:INTERIOR\s*/\s*EXTERIOR|EXTERIOR\s*/\s*INTERIOR|INTERIOR|EXTERIOR)"
)

DEFAULT_HEADING_PATTERNS = (
    # Numbered: 12A. INT. LOCATION - NIGHT 12A
    rf"^(?P<number>\d+[A-Z]{{0,2}})\.?\s+(?P<prefix>{INT_EXT_ABBREVIATED}|{INT_EXT_SPELLED}\b)"
    rf"\s*(?P<rest>.*?)(?:\s+(?P=number)\.?)?$",
    # Standard: INT. LOCATION - DAY / INT. LOCATION
    rf"^(?P<prefix>{INT_EXT_ABBREVIATED})\s*(?P<rest>.+)$",
    # Full words: INTERIOR LOCATION - DAY
    rf"^(?P<prefix>{INT_EXT_SPELLED})\b[\s.]*(?P<rest>.+)$",
)

# Checked in order; the first canonical value with a matching synonym wins
DEFAULT_TIME_OF_DAY = {
    "CONTINUOUS": ("CONTINUOUS", "CONT'D", "CONTD", "SAME"),
    "LATER": ("MOMENTS LATER", "LATER"),
    "NIGHT": ("NIGHT", "DUSK", "EVENING", "SUNSET", "TWILIGHT"),
    "DAY": ("DAY", "MORNING", "DAWN", "SUNRISE", "AFTERNOON", "NOON"),
}

DEFAULT_CHARACTER_PATTERN = (
    r"^(?P<name>[A-Z][A-Z\s\-'\.]+?)(?:\s*\([^)]*\))*$"
)

DEFAULT_EXCLUDE_PATTERNS = (
    r"^(INT|EXT|INTERIOR|EXTERIOR|FADE|CUT|DISSOLVE|TITLE|SUPER|INTERCUT|FLASHBACK|END|THE END|CONTINUED|MORE)\b",
    r"^(MORNING|EVENING|NIGHT|DAY|LATER|CONTINUOUS|SAME|DAWN|DUSK|AFTERNOON)\b",
    r"^\d",
    r"^(A|AN|THE)\s",
    r"^(ANGLE|CLOSE|WIDE|INSERT|POV|ESTABLISHING|STOCK|ARCHIVE|FREEZE|SPLIT|BEGIN)\b",
    r"^(ACT|SCENE|PAGE|REVISION|DRAFT|FINAL|SHOOTING|COLD OPEN|TEASER)\b",
    r"^(BACK TO|TIME CUT|MATCH CUT|JUMP CUT|SMASH CUT|PRE-LAP)\b",
    r"^(MONTAGE|SERIES OF|DREAM SEQUENCE)\b",
)

DEFAULT_EXCLUDED_NAMES = frozenset({
    "INT", "EXT", "INTERIOR", "EXTERIOR", "FADE IN", "FADE OUT", "FADE TO BLACK",
    "CUT TO", "DISSOLVE TO", "SMASH CUT", "MATCH CUT", "JUMP CUT", "HARD CUT",
    "THE END", "CONTINUED", "CONT", "CONTD", "MORE", "PRE-LAP", "PRELAP",
    "V.O", "V.O.", "VO", "O.S", "O.S.", "OS", "O.C", "O.C.", "OC",
    "SUPER", "SUPERIMPOSE", "TITLE", "SUBTITLE", "CHYRON", "TITLE CARD",
    "FLASHBACK", "FLASH BACK", "END FLASHBACK", "DREAM SEQUENCE", "END DREAM",
    "MONTAGE", "END MONTAGE", "SERIES OF SHOTS", "END SERIES", "INTERCUT",
    "BACK TO SCENE", "BACK TO", "ANGLE ON", "CLOSE ON", "WIDE ON", "TIGHT ON",
    "INSERT", "ESTABLISHING", "STOCK SHOT", "ARCHIVE FOOTAGE", "NEWS FOOTAGE",
    "TIME CUT", "FREEZE FRAME", "SPLIT SCREEN", "BEGIN", "END",
    "ACT ONE", "ACT TWO", "ACT THREE", "ACT FOUR", "ACT FIVE",
    "COLD OPEN", "TEASER", "TAG", "EPILOGUE", "PROLOGUE",
    "SCENE", "PAGE", "REVISION", "DRAFT", "FINAL", "SHOOTING",
    "LATER", "MOMENTS LATER", "CONTINUOUS", "SAME TIME",
    "DAY", "NIGHT", "MORNING", "EVENING", "AFTERNOON", "DAWN", "DUSK",
})

DEFAULT_STRUCTURE_MARKERS = r"INT\.|EXT\.|FADE IN|CUT TO"


class ScreenplayVocabulary(BaseModel):
    """Patterns and word lists describing screenplay scaffolding.

    Regular expressions are stored as source strings and compiled by the
    components that use them, always case-insensitively except for the
    character cue pattern, which relies on case.
    """
    model_config = ConfigDict(frozen=True)

    heading_patterns: Tuple[str, ...] = DEFAULT_HEADING_PATTERNS
    time_of_day: Dict[str, Tuple[str, ...]] = Field(
        default_factory=lambda: dict(DEFAULT_TIME_OF_DAY)
    )
    default_time_of_day: str = "DAY"
    character_pattern: str = DEFAULT_CHARACTER_PATTERN
    exclude_patterns: Tuple[str, ...] = DEFAULT_EXCLUDE_PATTERNS
    excluded_names: FrozenSet[str] = DEFAULT_EXCLUDED_NAMES
    structure_markers: str = DEFAULT_STRUCTURE_MARKERS

    def time_synonyms(self) -> Tuple[str, ...]:
        """Every known time-of-day word, longest first."""
        words = {w for synonyms in self.time_of_day.values() for w in synonyms}
        return tuple(sorted(words, key=len, reverse=True))


DEFAULT_VOCABULARY = ScreenplayVocabulary()
