"""End-to-end screenplay processing pipeline."""
import time
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Tuple

from utils.logger import setup_logger
from ingestion.cleaner import normalize_script_text
from ingestion.errors import (
    ErrorType,
    ExtractionQualityError,
    IngestionError,
    NoScenesDetectedError,
    ScannedPDFError
)
from ingestion.line_reconstructor import LineReconstructor
from ingestion.models import ExtractionResult, ExtractionStats, ProgressEvent
from ingestion.ocr import OCRFallback
from ingestion.quality_gate import QualityGate
from ingestion.text_source import DocumentKind, PDFTextSource, detect_kind, read_text_file
from pipeline.results import (
    ProcessingFailure,
    ProcessingResult,
    ProcessingStats,
    ProcessingSuccess
)
from screenplay.character_extractor import CharacterExtractor
from screenplay.duplicate_resolver import DuplicateResolver
from screenplay.models import CharacterCandidate, CharacterExtraction
from screenplay.scene_segmenter import SceneSegmenter
from screenplay.vocabulary import DEFAULT_VOCABULARY, ScreenplayVocabulary
import config

logger = setup_logger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]

OCR_WARNING = "OCR was used - please review for any misread text."
NO_CHARACTERS_WARNING = "No characters were detected. You may need to add them manually."
LOW_CONFIDENCE_WARNING = "Many low-confidence character detections. Review the list carefully."
FEW_CHARACTERS_LIMIT = 3


class ScriptProcessor:
    """Turns a screenplay document into scenes, characters and duplicate groups.

    Every stage is injectable; defaults are built from config. The public
    coroutines always return a ProcessingResult and never raise.
    """

    def __init__(
        self,
        vocabulary: ScreenplayVocabulary = DEFAULT_VOCABULARY,
        text_source: Optional[PDFTextSource] = None,
        reconstructor: Optional[LineReconstructor] = None,
        quality_gate: Optional[QualityGate] = None,
        ocr: Optional[OCRFallback] = None,
        segmenter: Optional[SceneSegmenter] = None,
        extractor: Optional[CharacterExtractor] = None,
        resolver: Optional[DuplicateResolver] = None,
        enable_ocr: bool = config.OCR_ENABLED
    ):
        self.text_source = text_source or PDFTextSource()
        self.reconstructor = reconstructor or LineReconstructor()
        self.quality_gate = quality_gate or QualityGate(vocabulary)
        self.ocr = ocr or OCRFallback()
        self.segmenter = segmenter or SceneSegmenter(vocabulary)
        self.extractor = extractor or CharacterExtractor(vocabulary)
        self.resolver = resolver or DuplicateResolver()
        self.enable_ocr = enable_ocr

    async def process(
        self,
        path: str,
        on_progress: Optional[ProgressCallback] = None
    ) -> ProcessingResult:
        """Process a PDF or plain text screenplay file.

        Args:
            path: Path to the script file
            on_progress: Optional callback receiving ProgressEvent updates

        Returns:
            ProcessingSuccess or ProcessingFailure
        """
        start_time = time.time()
        raw_text = None
        logger.info(f"Processing script: {path}")

        try:
            kind = detect_kind(Path(path))
            if kind == DocumentKind.TEXT:
                self._emit(on_progress, "extracting", "Reading text file...", 10)
                raw_text = await read_text_file(Path(path))
                extraction = ExtractionResult(
                    success=True,
                    text=raw_text,
                    method="text",
                    confidence=1.0
                )
                warnings = []
            else:
                extraction, warnings = await self._extract_pdf(path, on_progress)
                raw_text = extraction.text

            return self._analyze(extraction, warnings, start_time, on_progress)

        except IngestionError as e:
            logger.error(f"Processing failed ({e.error_type.value}): {e.message}")
            return self._failure(e, start_time, raw_text)
        except Exception as e:
            logger.exception(f"Unexpected error processing {path}")
            return self._failure(
                IngestionError("Failed to process script", details=str(e)),
                start_time,
                raw_text
            )

    async def process_text(
        self,
        text: str,
        on_progress: Optional[ProgressCallback] = None
    ) -> ProcessingResult:
        """Process script text pasted directly by the user."""
        start_time = time.time()

        try:
            extraction = ExtractionResult(success=True, text=text, method="text", confidence=1.0)
            return self._analyze(extraction, [], start_time, on_progress)
        except IngestionError as e:
            logger.error(f"Processing failed ({e.error_type.value}): {e.message}")
            return self._failure(e, start_time, text)
        except Exception as e:
            logger.exception("Unexpected error processing pasted text")
            return self._failure(
                IngestionError("Failed to process script", details=str(e)),
                start_time,
                text
            )

    def merge_characters(
        self,
        result: ProcessingSuccess,
        decisions: Mapping[int, Optional[str]]
    ) -> List[CharacterCandidate]:
        """Apply confirmed duplicate merges to a successful result.

        Args:
            result: Result from process() or process_text()
            decisions: Duplicate group index -> chosen name (None keeps the suggestion)

        Returns:
            Character list with the confirmed groups merged
        """
        return self.resolver.merge(result.characters, result.duplicates, decisions)

    async def _extract_pdf(
        self,
        path: str,
        on_progress: Optional[ProgressCallback]
    ) -> Tuple[ExtractionResult, List[str]]:
        """Native text first, OCR when the native text is not usable."""
        self._emit(on_progress, "extracting", "Extracting text from PDF...", 10)
        pdf = await self.text_source.extract_fragments(path)
        stats = ExtractionStats(pages=pdf.page_count, fragments=len(pdf.fragments))

        native = self._extract_native(pdf, stats, on_progress)
        if native.success:
            return native, list(native.issues)

        logger.info(f"Native text rejected: {', '.join(native.issues)}")
        if not self.enable_ocr:
            if "No scene headings found" in native.issues:
                raise NoScenesDetectedError("No scenes detected in script", details="; ".join(native.issues))
            raise ExtractionQualityError(
                "Could not extract usable text from PDF",
                details="; ".join(native.issues)
            )

        self._emit(on_progress, "ocr", "Text extraction failed, trying OCR...", 30)
        try:
            text = await self.ocr.extract_text(path, on_progress=lambda event: self._forward(on_progress, event))
        except IngestionError:
            raise
        except Exception as e:
            logger.exception("OCR failed")
            raise ExtractionQualityError("Could not extract text from PDF", details=f"OCR failed: {e}")

        scenes = self.segmenter.segment(text)
        if not scenes:
            raise ScannedPDFError(
                "No scenes detected in script",
                details="OCR completed but could not find scene headings. The PDF quality may be too low."
            )

        characters = self.extractor.extract(text, scenes)
        report = self.quality_gate.validate(text, characters.scenes)
        logger.info(f"OCR extraction confidence: {report.confidence:.0%}")

        extraction = ExtractionResult(
            success=True,
            text=text,
            method="ocr",
            confidence=report.confidence,
            issues=report.issues,
            stats=ExtractionStats(pages=pdf.page_count)
        )
        return extraction, list(report.issues)

    def _extract_native(self, pdf, stats: ExtractionStats, on_progress) -> ExtractionResult:
        if not pdf.fragments:
            return ExtractionResult(success=False, method="text", issues=["No text found in PDF"], stats=stats)

        if self.quality_gate.is_low_density(pdf.word_count, pdf.page_count):
            logger.info(f"Low text density ({pdf.word_count} words / {pdf.page_count} pages)")
            return ExtractionResult(
                success=False,
                method="text",
                issues=["Low text density - PDF may be scanned"],
                stats=stats
            )

        lines = self.reconstructor.reconstruct(pdf.fragments)
        layout = self.reconstructor.analyze_structure(lines)
        text = normalize_script_text(self.reconstructor.to_clean_text(lines))
        stats = stats.model_copy(update={"lines": len(lines), "left_margin": layout.left_margin})

        if not self.quality_gate.has_minimum_text(text):
            return ExtractionResult(
                success=False,
                text=text,
                method="text",
                issues=["Very little text extracted"],
                stats=stats
            )

        self._emit(on_progress, "validating", "Validating extraction...", 20)
        scenes = self.segmenter.segment(text)
        characters = self.extractor.extract(text, scenes)
        report = self.quality_gate.validate(text, characters.scenes)

        # A PDF with no scene headings is treated as a broken text layer
        accepted = bool(scenes) and self.quality_gate.accepts(report)
        return ExtractionResult(
            success=accepted,
            text=text,
            method="text",
            confidence=report.confidence,
            issues=report.issues,
            stats=stats
        )

    def _analyze(
        self,
        extraction: ExtractionResult,
        warnings: List[str],
        start_time: float,
        on_progress: Optional[ProgressCallback]
    ) -> ProcessingSuccess:
        text = extraction.text

        self._emit(on_progress, "scenes", "Detecting scenes...", 92)
        scenes = self.segmenter.segment(text)
        if not scenes:
            raise NoScenesDetectedError(
                "No scenes detected in script",
                details="Could not find any scene headings (INT./EXT.) in the text."
            )

        self._emit(on_progress, "characters", "Extracting characters...", 95)
        result: CharacterExtraction = self.extractor.extract(text, scenes)

        self._emit(on_progress, "duplicates", "Checking for duplicate characters...", 98)
        duplicates = self.resolver.find_duplicates(result.characters)

        stats = ProcessingStats(
            total_scenes=len(result.scenes),
            total_characters=len(result.characters),
            high_confidence=sum(1 for c in result.characters if c.confidence >= config.HIGH_CONFIDENCE_THRESHOLD),
            medium_confidence=sum(
                1 for c in result.characters
                if config.SUSPICIOUS_CONFIDENCE_THRESHOLD <= c.confidence < config.HIGH_CONFIDENCE_THRESHOLD
            ),
            low_confidence=sum(1 for c in result.characters if c.confidence < config.SUSPICIOUS_CONFIDENCE_THRESHOLD),
            duplicate_groups=len(duplicates),
            pages=extraction.stats.pages,
            fragments=extraction.stats.fragments,
            lines=extraction.stats.lines,
            left_margin=extraction.stats.left_margin
        )

        warnings = list(warnings) + self._character_warnings(stats)
        if extraction.method == "ocr":
            warnings.append(OCR_WARNING)

        processing_time = time.time() - start_time
        self._emit(on_progress, "complete", "Processing complete", 100)
        logger.info(
            f"Processed script via {extraction.method}: {stats.total_scenes} scenes, "
            f"{stats.total_characters} characters, {stats.duplicate_groups} duplicate groups "
            f"in {processing_time:.2f}s"
        )

        return ProcessingSuccess(
            scenes=result.scenes,
            characters=result.characters,
            duplicates=duplicates,
            raw_text=text,
            method=extraction.method,
            confidence=extraction.confidence,
            processing_time=processing_time,
            stats=stats,
            warnings=warnings or None
        )

    @staticmethod
    def _character_warnings(stats: ProcessingStats) -> List[str]:
        warnings = []
        if stats.total_characters == 0:
            warnings.append(NO_CHARACTERS_WARNING)
        elif stats.total_characters < FEW_CHARACTERS_LIMIT:
            warnings.append(f"Only {stats.total_characters} character(s) found. Some may have been missed.")

        if stats.low_confidence > stats.high_confidence:
            warnings.append(LOW_CONFIDENCE_WARNING)

        return warnings

    @staticmethod
    def _failure(error: IngestionError, start_time: float, raw_text: Optional[str]) -> ProcessingFailure:
        return ProcessingFailure(
            error=error.message,
            details=error.details,
            suggestion=error.suggestion,
            error_type=error.error_type,
            processing_time=time.time() - start_time,
            raw_text=raw_text if error.error_type == ErrorType.NO_SCENES_DETECTED else None
        )

    def _emit(self, on_progress: Optional[ProgressCallback], step: str, message: str, progress: int):
        self._forward(on_progress, ProgressEvent(step=step, message=message, progress=progress))

    @staticmethod
    def _forward(on_progress: Optional[ProgressCallback], event: ProgressEvent):
        """Deliver a progress event; a failing callback never affects the run."""
        if on_progress is None:
            return
        try:
            on_progress(event)
        except Exception as e:
            logger.warning(f"Progress callback failed on {event.step}: {e}")
