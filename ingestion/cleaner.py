"""Text cleaning utilities."""
import re

# Letter-spaced lines like "S A R A H" left behind by some PDF exporters
LETTER_SPACED = re.compile(r"^\s*\w(?: \w){2,}(?:\s{2,}\w(?: \w)*)*\s*$")


def normalize_script_text(text: str) -> str:
    """Repair screenplay tokens split apart by native PDF extraction.

    Args:
        text: Text rebuilt from the PDF text layer

    Returns:
        Normalized text
    """
    # Fix split INT/EXT
    text = re.sub(r"\bI\s+N\s+T\s*\.", "INT.", text)
    text = re.sub(r"\bE\s+X\s+T\s*\.", "EXT.", text)
    text = re.sub(r"\bI\s+NT\s*\.", "INT.", text)
    text = re.sub(r"\bE\s+XT\s*\.", "EXT.", text)

    # Fix CONTINUOUS split
    text = re.sub(r"C\s+O\s+N\s+T\s+I\s+N\s+U\s+O\s+U\s+S", "CONTINUOUS", text)
    text = re.sub(r"CONTIN\s+UOUS", "CONTINUOUS", text)

    # Merge letter-spaced lines
    lines = []
    for line in text.split("\n"):
        if LETTER_SPACED.match(line):
            line = re.sub(r"(?<=\w) (?=\w)", "", line.strip())
            line = re.sub(r"\s{2,}", " ", line)
        lines.append(line)
    text = "\n".join(lines)

    # Clean up excessive line breaks
    text = re.sub(r"\n{4,}", "\n\n\n", text)

    return text


def clean_ocr_text(text: str) -> str:
    """Fix common OCR misreads of screenplay vocabulary.

    Args:
        text: Raw OCR output

    Returns:
        Cleaned text
    """
    text = text.replace("lNT.", "INT.")
    text = text.replace("1NT.", "INT.")
    text = text.replace("EX T.", "EXT.")
    text = re.sub(r"EXT\s*\.", "EXT.", text)
    text = text.replace("|", "I")

    # Fix spacing issues
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n{3,}", "\n\n", text)

    # Re-join all-caps names broken across lines
    text = re.sub(r"^([A-Z]{2,})[ \t]*\n[ \t]*([A-Z]{2,})[ \t]*$", r"\1 \2", text, flags=re.MULTILINE)

    return text.strip()
