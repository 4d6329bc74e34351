"""Shared fixtures for pipeline tests."""
import fitz  # PyMuPDF
import pytest

SAMPLE_SCRIPT = """FADE IN:

INT. COFFEE SHOP - DAY

Sarah sits alone at a corner table, nursing a cold latte.

SARAH
Where is he? He said noon.

JOHN (O.S.)
Right behind you.

EXT. PARK - NIGHT

John and Sarah walk along the path under the streetlights.

JOHN
I'm sorry I was late.

SARAH
You're always late.

INT. SARAH'S APARTMENT - CONTINUOUS

She closes the door and leans against it.
"""


@pytest.fixture
def sample_script():
    return SAMPLE_SCRIPT


class FakeOCREngine:
    """Stands in for Tesseract: returns canned text per page."""

    def __init__(self, pages):
        self.pages = list(pages)
        self.loaded = False
        self.calls = 0

    def load(self):
        self.loaded = True

    def recognize(self, image):
        assert image.size[0] > 0 and image.size[1] > 0
        text = self.pages[self.calls % len(self.pages)]
        self.calls += 1
        return text


@pytest.fixture
def fake_engine():
    return FakeOCREngine


def _layout_x(line):
    """Rough screenplay indentation for synthetic pages."""
    stripped = line.strip()
    if stripped.startswith(("INT.", "EXT.")):
        return 72
    if stripped and stripped == stripped.upper() and len(stripped) < 30:
        return 250
    return 72


@pytest.fixture
def make_pdf(tmp_path):
    """Write script lines onto PDF pages as real text, one span per line."""
    def _make(name, pages, fontsize=10, line_step=14):
        path = tmp_path / name
        doc = fitz.open()
        for page_text in pages:
            page = doc.new_page()
            y = 50
            for line in page_text.split("\n"):
                if line.strip():
                    page.insert_text((_layout_x(line), y), line, fontsize=fontsize)
                y += line_step
        doc.save(str(path))
        doc.close()
        return path

    return _make
