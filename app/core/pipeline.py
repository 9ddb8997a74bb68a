"""
End-to-end résumé structuring.

    bytes -> ExtractedDocument -> [OCR gate] -> sections -> [semantic corrector]
          -> StructuredResume + confidence + warnings

Extraction runs in a worker thread; the optional OCR provider and semantic
classifier are awaited on the event loop. Both collaborators are injected by
the caller and the pipeline is complete without either of them.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

from fastapi.concurrency import run_in_threadpool

from app.config import get_settings
from app.core.confidence_calculator import build_confidence_scores, collect_warnings, parse_quality
from app.core.document_extractor import detect_format, extract_document
from app.core.errors import NoExtractableText
from app.core.layout import ExtractedDocument, FlatLayout, SectionBlock
from app.core.resume_builder import build_resume
from app.core.schemas import ParseMeta, ParseResponse
from app.core.sectionizer import merge_duplicate_sections, sectionize_layout
from app.core.semantic import SemanticClassifier, enhance_section_detection, find_name_semantically

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OcrResult:
    text: str
    page_count: int = 0


class OcrProvider(Protocol):
    async def recognize(self, data: bytes) -> OcrResult:
        """Recognize the text of a scanned PDF."""
        ...


def needs_ocr(text: str) -> bool:
    """
    Quality gate for a PDF text layer.

    True when the text is empty, shorter than the configured minimum, or has
    too many non-ASCII characters (garbled font encodings).
    """
    settings = get_settings()
    if not text:
        return True
    if len(text) < settings.min_text_length_for_ocr:
        return True
    non_ascii = sum(1 for char in text if ord(char) > 126)
    return non_ascii / len(text) > settings.non_ascii_ratio_threshold


async def _apply_ocr(
    data: bytes,
    document: ExtractedDocument,
    ocr: Optional[OcrProvider],
    warnings: List[str],
) -> ExtractedDocument:
    if ocr is None:
        if not document.text.strip():
            raise NoExtractableText("pdf")
        warnings.append("PDF text layer looks incomplete and OCR is not available; results may be partial.")
        logger.warning("PDF text failed the quality gate (%d chars), no OCR provider", len(document.text))
        return document

    logger.info("PDF text failed the quality gate (%d chars), re-routing to OCR", len(document.text))
    try:
        result = await ocr.recognize(data)
    except Exception as exc:
        logger.warning("OCR failed: %s", exc)
        if not document.text.strip():
            raise NoExtractableText("pdf") from exc
        warnings.append("OCR failed; using the PDF text layer.")
        return document

    return ExtractedDocument(
        layout=FlatLayout(text=result.text),
        parser="ocr",
        page_count=result.page_count or document.page_count,
    )


async def _correct_sections(
    sections: List[SectionBlock],
    text: str,
    classifier: Optional[SemanticClassifier],
):
    if classifier is None or len(text) <= get_settings().semantic_min_text_length:
        return sections, False
    enhanced, changed = await enhance_section_detection(sections, classifier)
    if changed:
        enhanced = merge_duplicate_sections(enhanced)
    return enhanced, changed


async def parse_resume(
    data: bytes,
    filename: str = "",
    content_type: str = "",
    ocr: Optional[OcrProvider] = None,
    classifier: Optional[SemanticClassifier] = None,
) -> ParseResponse:
    """
    Parse one uploaded résumé into a structured record.

    Args:
        data: Raw document bytes
        filename: Upload filename, used for format detection
        content_type: Upload MIME type, used for format detection
        ocr: Optional OCR provider for PDFs failing the text quality gate
        classifier: Optional semantic section corrector

    Returns:
        ParseResponse with the resume, extraction metadata, basics confidence and warnings

    Raises:
        UnsupportedFormat: unknown file type
        CorruptDocument: the decoder rejected the bytes
        NoExtractableText: PDF without text and without OCR
    """
    fmt = detect_format(filename, content_type)
    logger.info("Parsing %r as %s (%d bytes)", filename, fmt, len(data))

    document = await run_in_threadpool(extract_document, data, fmt)
    warnings: List[str] = []

    ocr_applied = False
    if fmt == "pdf" and needs_ocr(document.text):
        document = await _apply_ocr(data, document, ocr, warnings)
        ocr_applied = document.parser == "ocr"

    text = document.text
    sections = sectionize_layout(document.layout)
    sections, semantic_enhanced = await _correct_sections(sections, text, classifier)

    resume, basics = build_resume(sections, text)

    if not resume.basics.name and classifier is not None:
        name = await find_name_semantically(text, classifier)
        if name:
            resume.basics.name = name
            basics.basics = resume.basics
            basics.name_method = "semantic"

    scores = build_confidence_scores(basics, text)
    warnings.extend(collect_warnings(resume))

    return ParseResponse(
        resume=resume,
        meta=ParseMeta(
            parser=document.parser,
            page_count=document.page_count,
            char_count=len(text),
            ocr_applied=ocr_applied,
            semantic_enhanced=semantic_enhanced,
        ),
        confidence_scores=scores,
        parse_quality=parse_quality(scores),
        warnings=warnings,
    )
