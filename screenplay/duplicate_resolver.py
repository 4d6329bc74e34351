"""Near-duplicate character detection and explicit merging."""
import re
from functools import cmp_to_key
from typing import Callable, List, Mapping, Optional

from utils.logger import setup_logger
from screenplay.models import CharacterCandidate, DuplicateGroup
import config

logger = setup_logger(__name__)


def normalize_name(name: str) -> str:
    """Uppercase, keep only letters and spaces, collapse whitespace."""
    upper = name.upper()
    letters = re.sub(r"[^A-Z\s]", "", upper)
    return re.sub(r"\s+", " ", letters).strip()


def levenshtein_distance(s1: str, s2: str) -> int:
    """Edit distance between two strings (single-row dynamic programming)."""
    if len(s1) < len(s2):
        s1, s2 = s2, s1
    previous = list(range(len(s2) + 1))

    for i, c1 in enumerate(s1, start=1):
        current = [i]
        for j, c2 in enumerate(s2, start=1):
            insert = current[j - 1] + 1
            delete = previous[j] + 1
            replace = previous[j - 1] + (c1 != c2)
            current.append(min(insert, delete, replace))
        previous = current

    return previous[-1]


def similarity(s1: str, s2: str) -> float:
    """(maxLen - editDistance) / maxLen; two empty strings are identical."""
    longest = max(len(s1), len(s2))
    if longest == 0:
        return 1.0
    return (longest - levenshtein_distance(s1, s2)) / longest


def is_name_contained(name1: str, name2: str) -> bool:
    """Check whether one name contains the other or they share a component."""
    n1 = normalize_name(name1)
    n2 = normalize_name(name2)

    if n1 == n2:
        return True

    if n1 in n2 or n2 in n1:
        return True

    parts1 = n1.split(" ")
    parts2 = n2.split(" ")

    # A lone name matching part of the other ("SARAH" / "SARAH CHEN")
    if len(parts1) == 1 and parts1[0] in parts2:
        return True
    if len(parts2) == 1 and parts2[0] in parts1:
        return True

    # Same first name
    if parts1[0] == parts2[0] and len(parts1[0]) > 2:
        return True

    return False


def compare_candidates(a: CharacterCandidate, b: CharacterCandidate) -> int:
    """Higher confidence first; within 0.1 confidence, more occurrences first."""
    if abs(a.confidence - b.confidence) > 0.1:
        return -1 if a.confidence > b.confidence else 1
    return b.occurrences - a.occurrences


class DuplicateResolver:
    """Groups character name variants and merges them on request.

    Grouping is a single greedy pass: each unprocessed candidate, in input
    order, absorbs every later unprocessed candidate that matches it. The
    result depends on input order and is not a globally optimal clustering.
    """

    def __init__(
        self,
        threshold: float = config.DUPLICATE_SIMILARITY_THRESHOLD,
        confidence_margin: float = config.SUGGESTED_NAME_CONFIDENCE_MARGIN,
        order_key: Optional[Callable[[CharacterCandidate], object]] = None
    ):
        """Initialize resolver.

        Args:
            threshold: Minimum name similarity to treat two names as one person
            confidence_margin: Confidence lead needed to win the suggested name
            order_key: Optional sort key applied before grouping
        """
        self.threshold = threshold
        self.confidence_margin = confidence_margin
        self.order_key = order_key

    def is_duplicate(self, a: CharacterCandidate, b: CharacterCandidate) -> bool:
        score = similarity(a.normalized_name, b.normalized_name)
        return score >= self.threshold or is_name_contained(a.name, b.name)

    def find_duplicates(self, characters: List[CharacterCandidate]) -> List[DuplicateGroup]:
        """Partition candidates into groups of likely duplicates.

        Args:
            characters: Candidates in the order grouping should consider them

        Returns:
            Groups of two or more candidates; no candidate is in two groups
        """
        ordered = list(characters)
        if self.order_key is not None:
            ordered.sort(key=self.order_key)

        groups = []
        processed = set()

        for i, pivot in enumerate(ordered):
            if i in processed:
                continue

            members = [pivot]
            for j in range(i + 1, len(ordered)):
                if j in processed:
                    continue
                if self.is_duplicate(pivot, ordered[j]):
                    members.append(ordered[j])
                    processed.add(j)

            if len(members) > 1:
                processed.add(i)
                groups.append(DuplicateGroup(
                    characters=members,
                    suggested_name=self.suggest_name(members),
                    total_scenes=len({s for c in members for s in c.scene_indices}),
                    total_occurrences=sum(c.occurrences for c in members)
                ))

        logger.info(f"Found {len(groups)} potential duplicate groups")
        return groups

    def suggest_name(self, members: List[CharacterCandidate]) -> str:
        """Pick the canonical name of a group.

        Higher confidence wins by more than the margin; otherwise more name
        parts win; otherwise the longer name wins.
        """
        best = members[0]
        for candidate in members:
            if candidate.confidence > best.confidence + self.confidence_margin:
                best = candidate
                continue
            if best.confidence > candidate.confidence + self.confidence_margin:
                continue

            best_parts = len(best.name.split())
            candidate_parts = len(candidate.name.split())
            if candidate_parts > best_parts:
                best = candidate
            elif candidate_parts == best_parts and len(candidate.name) > len(best.name):
                best = candidate

        return best.name

    def merge(
        self,
        characters: List[CharacterCandidate],
        groups: List[DuplicateGroup],
        decisions: Mapping[int, Optional[str]]
    ) -> List[CharacterCandidate]:
        """Merge the groups a caller has confirmed.

        Args:
            characters: Every candidate from the extraction
            groups: Groups from find_duplicates
            decisions: Group index -> canonical name (None keeps the suggestion).
                Groups without a decision are left untouched.

        Returns:
            Candidates with confirmed groups replaced by one merged candidate

        Raises:
            ValueError: If a decision names a group that does not exist
        """
        for index in decisions:
            if not 0 <= index < len(groups):
                raise ValueError(f"No duplicate group with index {index}")

        absorbed = set()
        merged = []
        for index, group in enumerate(groups):
            if index not in decisions:
                continue
            absorbed.update(c.name for c in group.characters)
            merged.append(self._merge_group(group, decisions[index] or group.suggested_name))

        result = [c for c in characters if c.name not in absorbed] + merged
        result.sort(key=cmp_to_key(compare_candidates))

        logger.info(f"Merged {len(merged)} groups ({len(absorbed)} names) into {len(result)} characters")
        return result

    def _merge_group(self, group: DuplicateGroup, name: str) -> CharacterCandidate:
        members = group.characters
        scene_indices = sorted({s for c in members for s in c.scene_indices})
        confidence = max(c.confidence for c in members)

        return CharacterCandidate(
            name=name,
            normalized_name=normalize_name(name),
            occurrences=sum(c.occurrences for c in members),
            dialogue_count=sum(c.dialogue_count for c in members),
            scene_indices=scene_indices,
            scene_count=len(scene_indices),
            confidence=confidence,
            is_low_confidence=confidence < config.LOW_CONFIDENCE_THRESHOLD,
            is_suspicious=confidence < config.SUSPICIOUS_CONFIDENCE_THRESHOLD,
            merged_from=[c.name for c in members]
        )
