"""Test the OCR fallback with a stand-in engine."""
import asyncio

import pytest

from ingestion.errors import OCREngineUnavailableError, UnreadableFileError
from ingestion.ocr import OCRFallback, TesseractEngine


def test_pages_are_recognized_in_order(make_pdf, fake_engine):
    """Test every page is rendered and recognised once, in order."""
    pdf = make_pdf("scan.pdf", ["page one", "page two", "page three"])
    engine = fake_engine(["lNT. KITCHEN - DAY", "SARAH\nHello.", "| am done."])
    events = []

    text = asyncio.run(OCRFallback(engine=engine).extract_text(str(pdf), on_progress=events.append))

    assert engine.loaded
    assert engine.calls == 3
    assert text == "INT. KITCHEN - DAY\n\nSARAH\nHello.\n\nI am done."

    steps = [e.step for e in events]
    assert steps[:2] == ["ocr_loading", "ocr_init"]
    page_events = [e for e in events if e.step == "ocr_page"]
    assert [e.current_page for e in page_events] == [1, 2, 3]
    assert all(e.total_pages == 3 for e in page_events)


def test_progress_stays_inside_range(make_pdf, fake_engine):
    """Test OCR progress climbs within its share of the overall run."""
    pdf = make_pdf("scan.pdf", ["one", "two", "three", "four"])
    events = []

    asyncio.run(OCRFallback(engine=fake_engine(["text"])).extract_text(str(pdf), on_progress=events.append))

    progress = [e.progress for e in events]
    assert progress == [30, 35, 35, 48, 62, 76]

    events.clear()
    ocr = OCRFallback(engine=fake_engine(["text"]), progress_range=(0, 100))
    asyncio.run(ocr.extract_text(str(pdf), on_progress=events.append))

    assert [e.progress for e in events] == [0, 5, 5, 28, 52, 76]


def test_render_scale_controls_image_size(make_pdf):
    """Test pages are rendered at the configured zoom."""
    sizes = []

    class SizeEngine:
        def load(self):
            pass

        def recognize(self, image):
            sizes.append(image.size)
            return ""

    pdf = make_pdf("scale.pdf", ["text"])
    asyncio.run(OCRFallback(engine=SizeEngine(), render_scale=1.0).extract_text(str(pdf)))
    asyncio.run(OCRFallback(engine=SizeEngine(), render_scale=2.0).extract_text(str(pdf)))

    assert sizes[1][0] == pytest.approx(sizes[0][0] * 2, abs=2)


def test_engine_failure_propagates(make_pdf):
    """Test an engine that cannot load stops the fallback."""
    class BrokenEngine:
        def load(self):
            raise OCREngineUnavailableError("OCR engine could not be loaded")

        def recognize(self, image):
            raise AssertionError("should not be called")

    pdf = make_pdf("broken.pdf", ["text"])

    with pytest.raises(OCREngineUnavailableError):
        asyncio.run(OCRFallback(engine=BrokenEngine()).extract_text(str(pdf)))


def test_missing_file(fake_engine, tmp_path):
    """Test a missing PDF."""
    with pytest.raises(UnreadableFileError):
        asyncio.run(OCRFallback(engine=fake_engine([""])).extract_text(str(tmp_path / "missing.pdf")))


def test_tesseract_missing_package(monkeypatch):
    """Test lazy loading when pytesseract is not importable."""
    def fail_import(name):
        raise ImportError(f"No module named '{name}'")

    monkeypatch.setattr("ingestion.ocr.importlib.import_module", fail_import)
    engine = TesseractEngine()

    with pytest.raises(OCREngineUnavailableError) as exc_info:
        engine.load()

    assert "pytesseract" in exc_info.value.details
    assert not engine.loaded


def test_tesseract_missing_binary(monkeypatch):
    """Test lazy loading when the tesseract binary is not installed."""
    class FakeTesseract:
        class TesseractNotFoundError(EnvironmentError):
            pass

        class pytesseract:
            tesseract_cmd = "tesseract"

        @classmethod
        def get_tesseract_version(cls):
            raise cls.TesseractNotFoundError("tesseract is not installed")

    monkeypatch.setattr("ingestion.ocr.importlib.import_module", lambda name: FakeTesseract)
    engine = TesseractEngine(tesseract_cmd="/opt/tesseract")

    with pytest.raises(OCREngineUnavailableError):
        engine.load()

    assert FakeTesseract.pytesseract.tesseract_cmd == "/opt/tesseract"


def test_tesseract_recognize_options(monkeypatch):
    """Test page segmentation mode and language reach pytesseract."""
    calls = {}

    class FakeTesseract:
        TesseractNotFoundError = OSError

        class pytesseract:
            tesseract_cmd = "tesseract"

        @staticmethod
        def get_tesseract_version():
            return "5.3.0"

        @staticmethod
        def image_to_string(image, lang, config):
            calls.update(lang=lang, config=config)
            return "INT. HOUSE - DAY"

    monkeypatch.setattr("ingestion.ocr.importlib.import_module", lambda name: FakeTesseract)
    engine = TesseractEngine(psm=4, lang="fra")

    assert engine.recognize(object()) == "INT. HOUSE - DAY"
    assert engine.loaded
    assert calls["lang"] == "fra"
    assert calls["config"] == "--psm 4 -c preserve_interword_spaces=1"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
