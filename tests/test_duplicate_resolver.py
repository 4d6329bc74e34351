"""Test duplicate character detection and merging."""
import pytest

from screenplay.duplicate_resolver import (
    DuplicateResolver,
    is_name_contained,
    levenshtein_distance,
    normalize_name,
    similarity
)
from screenplay.models import CharacterCandidate


def make_candidate(name, occurrences=3, confidence=0.6, scenes=(0,), dialogue=None):
    return CharacterCandidate(
        name=name,
        normalized_name=normalize_name(name),
        occurrences=occurrences,
        dialogue_count=occurrences if dialogue is None else dialogue,
        scene_indices=list(scenes),
        scene_count=len(scenes),
        confidence=confidence
    )


@pytest.mark.parametrize("name", ["Sarah  Chen", "DR. HOLLAND", "o'brien", "  MARY-JANE "])
def test_normalize_name_is_idempotent(name):
    """Test normalization is stable when applied twice."""
    once = normalize_name(name)
    assert normalize_name(once) == once
    assert once == once.upper()


def test_normalize_name_strips_punctuation():
    """Test punctuation and extra spaces are removed."""
    assert normalize_name("Dr.  Holland") == "DR HOLLAND"
    assert normalize_name("O'Brien") == "OBRIEN"


def test_levenshtein_distance():
    """Test edit distance basics."""
    assert levenshtein_distance("KITTEN", "SITTING") == 3
    assert levenshtein_distance("", "ABC") == 3
    assert levenshtein_distance("SAME", "SAME") == 0


def test_similarity_bounds():
    """Test similarity range and the empty-string case."""
    assert similarity("", "") == 1.0
    assert similarity("JOHN", "JOHN") == 1.0
    assert similarity("ABC", "XYZ") == 0.0
    assert similarity("MICHAEL", "MICHEAL") == pytest.approx(5 / 7)


def test_name_containment():
    """Test containment and shared-component rules."""
    assert is_name_contained("SARAH", "SARAH CHEN")
    assert is_name_contained("CHEN", "SARAH CHEN")
    assert is_name_contained("MARY JANE", "MARY WATSON")
    assert not is_name_contained("AL SMITH", "AL JONES")
    assert not is_name_contained("JOHN", "PETER")


def test_sarah_and_sarah_chen_are_grouped():
    """Test the canonical full-name grouping."""
    characters = [
        make_candidate("SARAH", occurrences=10, confidence=0.7, scenes=(0, 1, 2)),
        make_candidate("SARAH CHEN", occurrences=3, confidence=0.65, scenes=(2, 3)),
        make_candidate("JOHN", occurrences=5, confidence=0.6, scenes=(1,)),
    ]

    groups = DuplicateResolver().find_duplicates(characters)

    assert len(groups) == 1
    group = groups[0]
    assert {c.name for c in group.characters} == {"SARAH", "SARAH CHEN"}
    assert group.suggested_name == "SARAH CHEN"
    assert group.total_scenes == 4
    assert group.total_occurrences == 13


def test_typo_variants_are_grouped():
    """Test similarity-based grouping."""
    characters = [make_candidate("MICHAEL"), make_candidate("MICHAL")]
    groups = DuplicateResolver().find_duplicates(characters)

    assert len(groups) == 1


def test_groups_partition_candidates():
    """Test no candidate appears in more than one group."""
    characters = [
        make_candidate("SARAH"),
        make_candidate("SARAH CHEN"),
        make_candidate("SARAH CONNOR"),
        make_candidate("JOHN"),
        make_candidate("JON"),
        make_candidate("PETER"),
    ]

    groups = DuplicateResolver().find_duplicates(characters)
    seen = [c.name for g in groups for c in g.characters]

    assert len(seen) == len(set(seen))
    assert all(len(g.characters) >= 2 for g in groups)


def test_suggested_name_prefers_clear_confidence_lead():
    """Test that a much more confident variant wins the suggestion."""
    resolver = DuplicateResolver()
    members = [make_candidate("SARAH", confidence=0.9), make_candidate("SARAH CHEN", confidence=0.5)]

    assert resolver.suggest_name(members) == "SARAH"


def test_order_key_changes_grouping_order():
    """Test the optional ordering applied before grouping."""
    characters = [make_candidate("JON", occurrences=1), make_candidate("JOHN", occurrences=9)]
    resolver = DuplicateResolver(order_key=lambda c: -c.occurrences)

    groups = resolver.find_duplicates(characters)

    assert groups[0].characters[0].name == "JOHN"


def test_merge_conserves_candidates():
    """Test merged_from plus untouched names equals the original set."""
    characters = [
        make_candidate("SARAH", occurrences=10, confidence=0.7, scenes=(0, 1)),
        make_candidate("SARAH CHEN", occurrences=3, confidence=0.65, scenes=(1, 3)),
        make_candidate("PETER", occurrences=4, confidence=0.6, scenes=(2,)),
    ]
    resolver = DuplicateResolver()
    groups = resolver.find_duplicates(characters)

    merged = resolver.merge(characters, groups, {0: None})

    names = set()
    for character in merged:
        names.update(character.merged_from or [character.name])
    assert names == {c.name for c in characters}

    sarah = next(c for c in merged if c.merged_from)
    assert sarah.name == "SARAH CHEN"
    assert sarah.occurrences == 13
    assert sarah.dialogue_count == 13
    assert sarah.scene_indices == [0, 1, 3]
    assert sarah.scene_count == 3
    assert sarah.confidence == 0.7


def test_merge_with_chosen_name():
    """Test a caller-chosen canonical name."""
    characters = [make_candidate("SARAH"), make_candidate("SARAH CHEN")]
    resolver = DuplicateResolver()
    groups = resolver.find_duplicates(characters)

    merged = resolver.merge(characters, groups, {0: "SARAH"})

    assert [c.name for c in merged] == ["SARAH"]


def test_merge_without_decisions_changes_nothing():
    """Test that unconfirmed groups are left alone."""
    characters = [make_candidate("SARAH"), make_candidate("SARAH CHEN")]
    resolver = DuplicateResolver()
    groups = resolver.find_duplicates(characters)

    merged = resolver.merge(characters, groups, {})

    assert {c.name for c in merged} == {"SARAH", "SARAH CHEN"}


def test_merge_rejects_unknown_group():
    """Test a decision for a group that does not exist."""
    characters = [make_candidate("SARAH"), make_candidate("SARAH CHEN")]
    resolver = DuplicateResolver()
    groups = resolver.find_duplicates(characters)

    with pytest.raises(ValueError):
        resolver.merge(characters, groups, {5: None})


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
