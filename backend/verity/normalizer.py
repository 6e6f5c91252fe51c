"""
Verity Document Normalizer Module
=================================
Turns an uploaded file into a single trusted plain-text document.

Pipeline:
    ExtractText -> Validate -> (Accept | Escalate) -> [OCR -> Accept] -> Done

Escalation is conservative (direct extraction is preferred whenever it is
plausible) but decisive once triggered: OCR output replaces the direct text
wholesale instead of being merged with it.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from verity.config import Settings, get_settings
from verity.errors import (
    ExtractionTimeoutError,
    LowConfidenceError,
    UnreadableDocumentError,
)
from verity.extractors import (
    DocumentFormat,
    RawExtraction,
    count_words,
    detect_format,
    get_extractor,
)
from verity.ocr import OCREngine, OCRResult, ProgressCallback, notify
from verity.scripts import ScriptCode, classify_script, has_classifiable_text
from verity.validation import ExtractionValidator

logger = logging.getLogger(__name__)


class ExtractionMethod(str, Enum):
    """How the final text was obtained."""
    DIRECT_TEXT = "direct_text"
    OCR = "ocr"


@dataclass(frozen=True)
class NormalizedDocument:
    """Normalized text plus provenance. Immutable once created."""
    text: str
    page_count: int
    word_count: int
    extraction_method: ExtractionMethod
    script_hint: ScriptCode
    source_format: DocumentFormat
    ocr_confidence: float | None = None  # 0-100
    structure: tuple[str, ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    warnings: tuple[str, ...] = ()

    def provenance(self) -> dict[str, Any]:
        """The 'how we read your document' fields."""
        return {
            "extraction_method": self.extraction_method.value,
            "ocr_confidence": round(self.ocr_confidence, 2) if self.ocr_confidence is not None else None,
            "page_count": self.page_count,
            "word_count": self.word_count,
            "script_hint": self.script_hint.value,
            "source_format": self.source_format.value,
            "warnings": list(self.warnings),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            **self.provenance(),
            "structure": list(self.structure),
            "metadata": dict(self.metadata),
        }


@dataclass
class _Escalation:
    triggered: bool
    reason: str | None = None


class DocumentNormalizer:
    """
    Orchestrates FormatExtractor -> ExtractionValidator -> OCREngine.

    Each call is independent: no state is kept between documents.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        ocr_engine: OCREngine | None = None,
        validator: ExtractionValidator | None = None,
    ):
        self.settings = settings or get_settings()
        self._ocr_engine = ocr_engine
        self.validator = validator or ExtractionValidator()

    @property
    def ocr_engine(self) -> OCREngine:
        # Created lazily so text-only deployments never touch Tesseract
        if self._ocr_engine is None:
            self._ocr_engine = OCREngine(self.settings)
        return self._ocr_engine

    async def normalize(
        self,
        content: bytes,
        filename: str | None = None,
        content_type: str | None = None,
        script: ScriptCode = ScriptCode.AUTO,
        force_ocr: bool = False,
        progress: ProgressCallback | None = None,
    ) -> NormalizedDocument:
        """
        Normalize an uploaded document.

        Args:
            content: Raw file bytes
            filename: Original filename, used for format inference
            content_type: Declared MIME type
            script: Expected script, or AUTO to detect
            force_ocr: Escalate to OCR regardless of validation
            progress: Optional OCR progress callback

        Returns:
            NormalizedDocument with text and provenance

        Raises:
            DocumentError: Any terminal failure (see verity.errors)
        """
        fmt = detect_format(filename, content_type)
        logger.info(f"Normalizing {filename or 'upload'} as {fmt.value} (script={script.value})")

        if fmt == DocumentFormat.IMAGE:
            return await self._normalize_image(content, script, progress)

        raw = await self._extract(fmt, content)
        hypothesis = self._working_hypothesis(raw.text, script)
        escalation = self._check_escalation(raw, hypothesis, force_ocr)

        text = raw.text
        method = ExtractionMethod.DIRECT_TEXT
        confidence: float | None = None
        warnings: list[str] = []

        if escalation.triggered:
            logger.info(f"Escalating to OCR: {escalation.reason}")
            if fmt == DocumentFormat.PDF:
                ocr = await self._ocr_pdf(content, hypothesis, progress)
                # OCR replaces the text layer only when asked to or when it reads more
                if force_ocr or ocr.word_count > raw.word_count:
                    text = ocr.text
                    method = ExtractionMethod.OCR
                    confidence = ocr.confidence
                    if confidence < self.settings.ocr_confidence_threshold:
                        warnings.append(
                            f"OCR confidence is low ({round(confidence)}%). "
                            "Some text may have been misread."
                        )
                else:
                    logger.info(
                        f"OCR yielded {ocr.word_count} words vs {raw.word_count} direct; "
                        "keeping direct extraction"
                    )
                    warnings.append("OCR did not improve on the embedded text layer.")
            else:
                # Nothing to rasterize for DOCX/TXT
                warnings.append(f"Extraction looked unreliable: {escalation.reason}")

        return self._finalize(
            text=text,
            page_count=raw.page_count,
            method=method,
            hypothesis=hypothesis,
            fmt=fmt,
            confidence=confidence,
            structure=raw.structure,
            metadata=raw.metadata,
            warnings=warnings,
        )

    async def _extract(self, fmt: DocumentFormat, content: bytes) -> RawExtraction:
        extractor = get_extractor(fmt)
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(extractor.extract, content),
                timeout=self.settings.extraction_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise ExtractionTimeoutError(
                f"{fmt.value.upper()} loading timed out. The file may be too large or corrupted."
            ) from e

    @staticmethod
    def _working_hypothesis(text: str, script: ScriptCode) -> ScriptCode:
        if script not in (ScriptCode.AUTO, ScriptCode.UNKNOWN):
            return script
        if has_classifiable_text(text):
            return classify_script(text)
        return ScriptCode.AUTO

    def _check_escalation(self, raw: RawExtraction, hypothesis: ScriptCode, force_ocr: bool) -> _Escalation:
        if force_ocr:
            return _Escalation(True, "OCR requested by caller")
        if raw.word_count < self.settings.min_direct_words:
            return _Escalation(True, f"only {raw.word_count} words in text layer")
        outcome = self.validator.check(raw.text, hypothesis)
        if not outcome.passed:
            return _Escalation(True, outcome.reason)
        return _Escalation(False)

    async def _ocr_pdf(
        self,
        content: bytes,
        script: ScriptCode,
        progress: ProgressCallback | None,
    ) -> OCRResult:
        budget = self.settings.ocr_timeout_seconds
        deadline = time.monotonic() + budget
        engine = self.ocr_engine

        def run() -> OCRResult:
            notify(progress, "Detected image-based PDF, starting OCR...", 0.0)
            images = engine.rasterize_pdf(content, timeout=max(1, int(budget)))
            return engine.recognize_pages(images, script, progress=progress, deadline=deadline)

        try:
            return await asyncio.wait_for(asyncio.to_thread(run), timeout=budget)
        except asyncio.TimeoutError as e:
            raise ExtractionTimeoutError(
                f"OCR did not finish within {budget:.0f} seconds."
            ) from e

    async def _normalize_image(
        self,
        content: bytes,
        script: ScriptCode,
        progress: ProgressCallback | None,
    ) -> NormalizedDocument:
        engine = self.ocr_engine
        budget = self.settings.ocr_timeout_seconds
        deadline = time.monotonic() + budget
        hypothesis = ScriptCode.AUTO if script == ScriptCode.UNKNOWN else script

        def run() -> OCRResult:
            notify(progress, "Initializing OCR engine...", 0.0)
            image = engine.load_image(content)
            return engine.recognize_pages([image], hypothesis, progress=progress, deadline=deadline)

        try:
            ocr = await asyncio.wait_for(asyncio.to_thread(run), timeout=budget)
        except asyncio.TimeoutError as e:
            raise ExtractionTimeoutError(
                f"OCR did not finish within {budget:.0f} seconds."
            ) from e

        if ocr.confidence < self.settings.ocr_confidence_threshold:
            raise LowConfidenceError(
                f"OCR confidence too low ({round(ocr.confidence)}%). "
                "Please ensure the image is clear, well-lit, and properly aligned."
            )

        return self._finalize(
            text=ocr.text,
            page_count=1,
            method=ExtractionMethod.OCR,
            hypothesis=hypothesis,
            fmt=DocumentFormat.IMAGE,
            confidence=ocr.confidence,
        )

    def _finalize(
        self,
        text: str,
        page_count: int,
        method: ExtractionMethod,
        hypothesis: ScriptCode,
        fmt: DocumentFormat,
        confidence: float | None = None,
        structure: list[str] | None = None,
        metadata: dict[str, Any] | None = None,
        warnings: list[str] | None = None,
    ) -> NormalizedDocument:
        text = text.strip()
        word_count = count_words(text)
        if word_count < self.settings.min_viable_words:
            raise UnreadableDocumentError(
                "Could not extract readable text from this document. It may be empty, "
                "corrupted, or contain only images that could not be processed."
            )

        # OCR text or an unresolved hypothesis gets re-read from the final text
        if method == ExtractionMethod.OCR or hypothesis == ScriptCode.AUTO:
            script_hint = classify_script(text) if has_classifiable_text(text) else ScriptCode.UNKNOWN
        else:
            script_hint = hypothesis

        return NormalizedDocument(
            text=text,
            page_count=page_count,
            word_count=word_count,
            extraction_method=method,
            script_hint=script_hint,
            source_format=fmt,
            ocr_confidence=confidence,
            structure=tuple(structure or ()),
            metadata=MappingProxyType(dict(metadata or {})),
            warnings=tuple(warnings or ()),
        )
