"""Test text cleanup for native and OCR text."""
import pytest

from ingestion.cleaner import clean_ocr_text, normalize_script_text


def test_split_headings_are_repaired():
    """Test INT/EXT tokens broken up by extraction."""
    text = "I N T. KITCHEN - DAY\nE XT. PARK - NIGHT\nI NT. CAR - DAY"

    assert normalize_script_text(text) == "INT. KITCHEN - DAY\nEXT. PARK - NIGHT\nINT. CAR - DAY"


def test_split_continuous_is_repaired():
    """Test CONTINUOUS split by letter spacing or a stray space."""
    assert normalize_script_text("INT. HALL - CONTIN UOUS") == "INT. HALL - CONTINUOUS"
    assert "CONTINUOUS" in normalize_script_text("INT. HALL - C O N T I N U O U S")


def test_letter_spaced_lines_are_merged():
    """Test names exported one letter at a time."""
    assert normalize_script_text("S A R A H") == "SARAH"
    assert normalize_script_text("S A R A H   C H E N") == "SARAH CHEN"


def test_normal_prose_is_untouched():
    """Test ordinary lines are not merged."""
    text = "Sarah walks in. She is a bit tired."
    assert normalize_script_text(text) == text


def test_long_blank_runs_are_capped():
    """Test excessive blank lines are reduced."""
    assert normalize_script_text("A\n\n\n\n\n\nB") == "A\n\n\nB"


@pytest.mark.parametrize("raw,expected", [
    ("lNT. KITCHEN - DAY", "INT. KITCHEN - DAY"),
    ("1NT. KITCHEN - DAY", "INT. KITCHEN - DAY"),
    ("EX T. PARK - NIGHT", "EXT. PARK - NIGHT"),
    ("EXT . PARK - NIGHT", "EXT. PARK - NIGHT"),
    ("| am here.", "I am here."),
])
def test_ocr_misreads(raw, expected):
    """Test screenplay vocabulary misread by OCR."""
    assert clean_ocr_text(raw) == expected


def test_ocr_whitespace_cleanup():
    """Test horizontal whitespace and blank lines collapse."""
    assert clean_ocr_text("  SARAH   \t  speaks\n\n\n\n\nlater  ") == "SARAH speaks\n\nlater"


def test_ocr_broken_names_are_rejoined():
    """Test an all-caps name split across two lines."""
    assert clean_ocr_text("Action.\nSARAH\nCHEN\nHello.") == "Action.\nSARAH CHEN\nHello."


def test_ocr_heading_is_not_joined_to_cue():
    """Test a heading's last word is not merged with the next cue."""
    text = "INT. KITCHEN - DAY\nSARAH\nHello."
    assert clean_ocr_text(text) == text


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
