"""Rebuild logical lines from positioned PDF text fragments."""
import re
from collections import Counter
from typing import List

from pydantic import BaseModel

from utils.logger import setup_logger
from ingestion.models import ReconstructedLine, TextFragment
import config

logger = setup_logger(__name__)

CUE_SHAPE = re.compile(r"^[A-Z][A-Z\s\-'\.]+(\s*\(.*\))?$")
HEADING_START = re.compile(r"^(INT\.|EXT\.|INT\./EXT\.|I/E\.)")


class LayoutProfile(BaseModel):
    """Indentation profile of a screenplay page layout."""
    left_margin: float

    def is_character_cue(self, line: ReconstructedLine) -> bool:
        """Character cues are indented well past the action margin."""
        return line.x > self.left_margin + 80 and bool(CUE_SHAPE.match(line.text))

    def is_scene_heading(self, line: ReconstructedLine) -> bool:
        """Scene headings start with INT./EXT. at the left margin."""
        return line.x < self.left_margin + 30 and bool(HEADING_START.match(line.text))


class LineReconstructor:
    """Merges fragments that share a Y band into ordered lines."""

    def __init__(
        self,
        line_tolerance: float = config.LINE_BREAK_TOLERANCE,
        word_gap: float = config.WORD_GAP,
        tab_gap: float = config.TAB_GAP
    ):
        """Initialize reconstructor.

        Args:
            line_tolerance: Y jump that starts a new line
            word_gap: Horizontal gap above which a space is inserted
            tab_gap: Horizontal gap above which a wide (tab-like) gap is inserted
        """
        self.line_tolerance = line_tolerance
        self.word_gap = word_gap
        self.tab_gap = tab_gap

    def reconstruct(self, fragments: List[TextFragment]) -> List[ReconstructedLine]:
        """Rebuild lines from an unordered bag of fragments.

        Args:
            fragments: Fragments from any number of pages

        Returns:
            Lines in reading order (page, top to bottom)
        """
        ordered = sorted(fragments, key=lambda f: (f.page, f.y, f.x))

        lines: List[ReconstructedLine] = []
        current: List[TextFragment] = []
        last_y = None
        last_page = None

        for fragment in ordered:
            if last_page is not None and (
                fragment.page != last_page or abs(fragment.y - last_y) > self.line_tolerance
            ):
                if current:
                    lines.append(self.build_line(current))
                current = []

            current.append(fragment)
            last_y = fragment.y
            last_page = fragment.page

        if current:
            lines.append(self.build_line(current))

        logger.debug(f"Reconstructed {len(lines)} lines from {len(fragments)} fragments")
        return lines

    def build_line(self, fragments: List[TextFragment]) -> ReconstructedLine:
        """Join one line's fragments left to right with gap-aware spacing."""
        items = sorted(fragments, key=lambda f: f.x)
        avg_x = sum(f.x for f in items) / len(items)

        parts = []
        last_end_x = 0.0
        for idx, item in enumerate(items):
            if idx > 0:
                gap = item.x - last_end_x
                if gap > self.tab_gap:
                    parts.append("   ")
                elif gap > self.word_gap:
                    parts.append(" ")
                # else: fragments of the same word
            parts.append(item.text)
            last_end_x = item.x + item.width

        return ReconstructedLine(
            text="".join(parts).strip(),
            x=items[0].x,
            avg_x=avg_x,
            y=items[0].y,
            page=items[0].page
        )

    def analyze_structure(self, lines: List[ReconstructedLine]) -> LayoutProfile:
        """Find the action margin as the most common (rounded) X position."""
        x_counts = Counter(round(line.x / 10) * 10 for line in lines)
        if not x_counts:
            return LayoutProfile(left_margin=70)
        left_margin, _ = x_counts.most_common(1)[0]
        return LayoutProfile(left_margin=left_margin)

    @staticmethod
    def to_clean_text(lines: List[ReconstructedLine]) -> str:
        """Flatten lines to newline separated text."""
        return "\n".join(line.text for line in lines)
