"""Extraction quality checks deciding between native text and OCR."""
import re
from typing import List

from utils.logger import setup_logger
from ingestion.models import ValidationReport
from screenplay.models import Scene
from screenplay.vocabulary import DEFAULT_VOCABULARY, ScreenplayVocabulary
import config

logger = setup_logger(__name__)

ISSUE_PENALTY = 20  # Confidence points lost per issue (out of 100)


class QualityGate:
    """Scores extracted text and decides whether it is good enough to use."""

    def __init__(
        self,
        vocabulary: ScreenplayVocabulary = DEFAULT_VOCABULARY,
        min_text_length: int = config.MIN_TEXT_LENGTH,
        min_scene_content: int = config.MIN_SCENE_CONTENT_LENGTH,
        min_alpha_ratio: float = config.MIN_ALPHA_RATIO,
        accept_threshold: float = config.QUALITY_ACCEPT_THRESHOLD,
        min_words_per_page: int = config.MIN_WORDS_PER_PAGE
    ):
        self.min_text_length = min_text_length
        self.min_scene_content = min_scene_content
        self.min_alpha_ratio = min_alpha_ratio
        self.accept_threshold = accept_threshold
        self.min_words_per_page = min_words_per_page
        self.structure_markers = re.compile(vocabulary.structure_markers, re.IGNORECASE)

    def validate(self, text: str, scenes: List[Scene]) -> ValidationReport:
        """Run every quality check against extracted text.

        Args:
            text: Extracted script text
            scenes: Scenes detected in the text, with characters assigned

        Returns:
            ValidationReport listing the issues found
        """
        issues = []

        if not text or len(text) < self.min_text_length:
            issues.append("Very little text extracted")

        if not scenes:
            issues.append("No scene headings found")
        else:
            total_content = sum(len("\n".join(scene.content)) for scene in scenes)
            if total_content / len(scenes) < self.min_scene_content:
                issues.append("Scenes have very little content")

            if not {name for scene in scenes for name in scene.characters}:
                issues.append("No characters detected")

        if text:
            alpha_ratio = len(re.findall(r"[a-zA-Z]", text)) / len(text)
            if alpha_ratio < self.min_alpha_ratio:
                issues.append("Text appears garbled")

            if not self.structure_markers.search(text):
                issues.append("No screenplay formatting detected")

        confidence = max(0, 100 - ISSUE_PENALTY * len(issues)) / 100
        if issues:
            logger.info(f"Validation issues ({confidence:.0%}): {', '.join(issues)}")

        return ValidationReport(
            is_valid=not issues,
            confidence=confidence,
            issues=issues
        )

    def accepts(self, report: ValidationReport) -> bool:
        """Whether extraction is good enough to skip OCR."""
        return report.is_valid or report.confidence >= self.accept_threshold

    def has_minimum_text(self, text: str) -> bool:
        """Native text shorter than the minimum is treated as unusable."""
        return len(text.strip()) >= self.min_text_length

    def is_low_density(self, word_count: int, page_count: int) -> bool:
        """Few words per page means a scanned or image-based PDF."""
        if page_count <= 0:
            return True
        return word_count / page_count < self.min_words_per_page
