"""Character detection from dialogue cues with confidence scoring."""
import re
from functools import cmp_to_key
from typing import Dict, List, Optional

from utils.logger import setup_logger
from screenplay.duplicate_resolver import compare_candidates, normalize_name
from screenplay.models import CharacterCandidate, CharacterExtraction, CueMatch, Scene
from screenplay.vocabulary import DEFAULT_VOCABULARY, ScreenplayVocabulary
import config

logger = setup_logger(__name__)

MIN_CUE_LENGTH = 2
MAX_CUE_LENGTH = 40
MIN_UPPERCASE_RATIO = 0.8
MAX_EMPHASIS_LENGTH = 20  # All-caps dialogue shorter than this is emphasis
ABBREVIATION = re.compile(r"^[A-Z]{2,4}$")
CONTD_SUFFIX = re.compile(r"\s*(CONT'?D?|CONTINUED)$", re.IGNORECASE)


class CharacterExtractor:
    """Finds speaking characters by scanning scene lines for dialogue cues."""

    def __init__(
        self,
        vocabulary: ScreenplayVocabulary = DEFAULT_VOCABULARY,
        min_occurrences: int = config.MIN_CHARACTER_OCCURRENCES
    ):
        """Initialize extractor.

        Args:
            vocabulary: Cue pattern and exclusion lists
            min_occurrences: Cues a name needs before it is reported
        """
        self.vocabulary = vocabulary
        self.min_occurrences = min_occurrences
        self.character_pattern = re.compile(vocabulary.character_pattern)
        self.exclude_patterns = [
            re.compile(pattern, re.IGNORECASE) for pattern in vocabulary.exclude_patterns
        ]

    def is_excluded_name(self, name: str) -> bool:
        """Check a name against screenplay scaffolding that looks like a cue."""
        normalized = name.strip().upper()
        if normalized in self.vocabulary.excluded_names:
            return True
        return any(pattern.search(normalized) for pattern in self.exclude_patterns)

    @staticmethod
    def looks_like_dialogue(line: str) -> bool:
        """Dialogue has lowercase letters, or is short all-caps emphasis."""
        trimmed = line.strip()
        if not trimmed:
            return False

        has_lowercase = bool(re.search(r"[a-z]", trimmed))
        is_all_caps = trimmed == trimmed.upper()
        return has_lowercase or (is_all_caps and len(trimmed) < MAX_EMPHASIS_LENGTH)

    def extract_character_name(self, line: str, next_line: str = "") -> Optional[CueMatch]:
        """Recognise a character cue line.

        Args:
            line: Candidate cue line
            next_line: Next non-empty line, used to verify dialogue follows

        Returns:
            CueMatch, or None if the line is not a cue
        """
        trimmed = line.strip()
        if len(trimmed) < MIN_CUE_LENGTH or len(trimmed) > MAX_CUE_LENGTH:
            return None

        upper_count = len(re.findall(r"[A-Z]", trimmed))
        letter_count = len(re.findall(r"[A-Za-z]", trimmed))
        if letter_count == 0 or upper_count / letter_count < MIN_UPPERCASE_RATIO:
            return None

        match = self.character_pattern.match(trimmed)
        if not match:
            return None

        name = CONTD_SUFFIX.sub("", match.group("name").strip()).strip()

        if self.is_excluded_name(name):
            return None

        if len(re.sub(r"[^A-Za-z]", "", name)) < 2:
            return None

        if next_line and not self.looks_like_dialogue(next_line):
            # Kept for review, but with reduced confidence
            return CueMatch(name=name, has_dialogue=False)

        return CueMatch(name=name, has_dialogue=True)

    @staticmethod
    def calculate_confidence(
        name: str,
        dialogue_count: int,
        scene_count: int,
        verified_dialogue: int
    ) -> float:
        """Score how likely a detected name is a real speaking character."""
        confidence = 0.5

        if dialogue_count > 10:
            confidence += 0.25
        elif dialogue_count > 5:
            confidence += 0.15
        elif dialogue_count > 2:
            confidence += 0.1

        if scene_count > 5:
            confidence += 0.15
        elif scene_count > 2:
            confidence += 0.1

        # Looks like a real name rather than an abbreviation
        if len(name) > 3 and not ABBREVIATION.match(name):
            confidence += 0.1

        # Full name
        if " " in name:
            confidence += 0.05

        if verified_dialogue == 0:
            confidence -= 0.2

        return round(max(0.0, min(confidence, 1.0)), 4)

    def extract(self, text: str, scenes: List[Scene]) -> CharacterExtraction:
        """Extract speaking characters and attach them to their scenes.

        Args:
            text: The script text the scenes were detected in
            scenes: Scenes from the segmenter; their start lines are the only
                scene boundaries used

        Returns:
            CharacterExtraction with candidates and updated scene copies
        """
        lines = re.split(r"\r?\n", text)
        scene_starts = {scene.start_line: scene.index for scene in scenes}
        stats: Dict[str, dict] = {}

        current_scene = -1
        for i, line in enumerate(lines):
            current_scene = scene_starts.get(i, current_scene)
            if i in scene_starts:
                continue  # Heading line

            if not line.strip():
                continue

            cue = self.extract_character_name(line, self._next_non_empty(lines, i))
            if cue is None:
                continue

            data = stats.setdefault(cue.name, {"count": 0, "dialogue": 0, "scenes": set()})
            data["count"] += 1
            if cue.has_dialogue:
                data["dialogue"] += 1
            if current_scene >= 0:
                data["scenes"].add(current_scene)

        characters = []
        for name, data in stats.items():
            if data["count"] < self.min_occurrences:
                continue

            scene_indices = sorted(data["scenes"])
            confidence = self.calculate_confidence(
                name,
                dialogue_count=data["dialogue"],
                scene_count=len(scene_indices),
                verified_dialogue=data["dialogue"]
            )
            characters.append(CharacterCandidate(
                name=name,
                normalized_name=normalize_name(name),
                occurrences=data["count"],
                dialogue_count=data["dialogue"],
                scene_indices=scene_indices,
                scene_count=len(scene_indices),
                confidence=confidence,
                is_low_confidence=confidence < config.LOW_CONFIDENCE_THRESHOLD,
                is_suspicious=confidence < config.SUSPICIOUS_CONFIDENCE_THRESHOLD
            ))

        characters.sort(key=cmp_to_key(compare_candidates))

        logger.info(
            f"Found {len(characters)} characters "
            f"({len(stats) - len(characters)} below {self.min_occurrences} occurrences)"
        )
        return CharacterExtraction(
            characters=characters,
            scenes=self.assign_to_scenes(scenes, characters)
        )

    @staticmethod
    def _next_non_empty(lines: List[str], index: int) -> str:
        for line in lines[index + 1:]:
            if line.strip():
                return line
        return ""

    @staticmethod
    def assign_to_scenes(
        scenes: List[Scene],
        characters: List[CharacterCandidate]
    ) -> List[Scene]:
        """Return scene copies listing the characters that speak in them."""
        by_scene: Dict[int, List[str]] = {scene.index: list(scene.characters) for scene in scenes}
        for character in characters:
            for scene_index in character.scene_indices:
                names = by_scene.get(scene_index)
                if names is not None and character.name not in names:
                    names.append(character.name)

        return [
            scene.model_copy(update={"characters": by_scene[scene.index]})
            for scene in scenes
        ]

