"""Scene segmentation by scene-heading pattern matching."""
import re
from typing import List, Optional

from utils.logger import setup_logger
from screenplay.models import IntExt, Scene, SceneHeading
from screenplay.vocabulary import DEFAULT_VOCABULARY, ScreenplayVocabulary

logger = setup_logger(__name__)

# A hyphen needs a space on one side so ALL-NIGHT stays one word
TIME_SEPARATOR = re.compile(r"\s+[-–—]+\s*|[-–—]+\s+|[–—]+")
MIN_HEADING_LENGTH = 5


class SceneSegmenter:
    """Splits script text into scenes at each scene heading."""

    def __init__(self, vocabulary: ScreenplayVocabulary = DEFAULT_VOCABULARY):
        """Initialize segmenter.

        Args:
            vocabulary: Heading patterns and time-of-day synonyms
        """
        self.vocabulary = vocabulary
        self.heading_patterns = [
            re.compile(pattern, re.IGNORECASE) for pattern in vocabulary.heading_patterns
        ]
        self.time_words = vocabulary.time_synonyms()

    def parse_heading(self, line: str) -> Optional[SceneHeading]:
        """Parse a line as a scene heading.

        Args:
            line: One line of script text

        Returns:
            SceneHeading, or None if the line is not a heading
        """
        trimmed = line.strip()
        if len(trimmed) < MIN_HEADING_LENGTH:
            return None

        for pattern in self.heading_patterns:
            match = pattern.match(trimmed)
            if not match:
                continue

            groups = match.groupdict()
            location, time_of_day = self._split_time_suffix(groups.get("rest") or "")
            return SceneHeading(
                heading=trimmed,
                number=groups.get("number"),
                interior_exterior=self.normalize_int_ext(groups["prefix"]),
                location=location,
                time_of_day=time_of_day
            )

        return None

    def _split_time_suffix(self, rest: str) -> tuple:
        """Separate the location from a trailing "- TIME" suffix."""
        rest = rest.strip().lstrip(".").strip()

        parts = TIME_SEPARATOR.split(rest)
        if len(parts) > 1:
            suffix = parts[-1].upper()
            if any(word in suffix for word in self.time_words):
                # Keep the location as written, minus the final separator
                cut = list(TIME_SEPARATOR.finditer(rest))[-1].start()
                return rest[:cut].strip(), self.normalize_time_of_day(suffix)

        return rest, self.vocabulary.default_time_of_day

    def normalize_time_of_day(self, token: str) -> str:
        """Map a time-of-day token onto the canonical set."""
        upper = token.upper()
        for canonical, synonyms in self.vocabulary.time_of_day.items():
            if any(synonym in upper for synonym in synonyms):
                return canonical
        return self.vocabulary.default_time_of_day

    @staticmethod
    def normalize_int_ext(indicator: str) -> IntExt:
        """Normalize an INT/EXT indicator to INT, EXT or INT/EXT."""
        upper = re.sub(r"[.\s]", "", indicator.upper())
        if "/" in upper or upper in ("IE", "EI"):
            return "INT/EXT"
        if upper.startswith("EXT"):
            return "EXT"
        return "INT"

    def segment(self, text: str) -> List[Scene]:
        """Detect all scenes in the script text.

        Args:
            text: Full script text

        Returns:
            Scenes in order of appearance; empty if no heading is found
        """
        lines = re.split(r"\r?\n", text)
        headings = []

        for line_index, line in enumerate(lines):
            heading = self.parse_heading(line)
            if heading:
                headings.append((line_index, heading))

        scenes = []
        for position, (start_line, heading) in enumerate(headings):
            if position + 1 < len(headings):
                next_start = headings[position + 1][0]
            else:
                next_start = len(lines)

            scenes.append(Scene(
                index=position,
                number=heading.number or str(position + 1),
                heading=heading.heading,
                interior_exterior=heading.interior_exterior,
                time_of_day=heading.time_of_day,
                location=heading.location,
                start_line=start_line,
                end_line=next_start - 1,
                content=lines[start_line + 1:next_start]
            ))

        logger.info(f"Detected {len(scenes)} scenes in {len(lines)} lines")
        return scenes
