import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from app.core.errors import CorruptDocument, NoExtractableText, UnsupportedFormat
from app.core.pipeline import OcrProvider, parse_resume as run_pipeline
from app.core.schemas import ParseResponse
from app.core.semantic import SemanticClassifier

logger = logging.getLogger(__name__)

router = APIRouter(tags=["parse"])


def get_ocr_provider() -> Optional[OcrProvider]:
    """No OCR engine ships with the service; deployments override this dependency."""
    return None


def get_semantic_classifier() -> Optional[SemanticClassifier]:
    """Semantic section correction is opt-in; override this dependency to enable it."""
    return None


@router.post(
    "/parse",
    response_model=ParseResponse,
    response_model_exclude_none=True,
    response_model_by_alias=True,
    summary="Parse Resume",
    description="Structure a resume file (PDF, DOCX, DOC or TXT) into a JSON Resume document with per-field confidence for the contact basics.",
    responses={
        200: {
            "description": "Successfully parsed resume",
            "content": {
                "application/json": {
                    "example": {
                        "resume": {
                            "basics": {
                                "name": "Jane Doe",
                                "email": "jane.doe@example.com",
                                "phone": "(555) 123-4567",
                                "location": {"city": "Austin", "region": "TX"},
                            },
                            "work": [
                                {
                                    "name": "Acme Corp",
                                    "position": "Software Engineer",
                                    "startDate": "2020-01",
                                    "highlights": ["Built X", "Built Y"],
                                }
                            ],
                            "education": [
                                {
                                    "institution": "State University",
                                    "studyType": "B.S. Computer Science",
                                    "area": "Computer Science",
                                    "startDate": "2016-01",
                                    "endDate": "2020-01",
                                }
                            ],
                            "skills": [{"name": "Python"}],
                            "projects": [],
                            "certificates": [],
                            "languages": [],
                        },
                        "meta": {
                            "parser": "pdf",
                            "pageCount": 1,
                            "charCount": 1834,
                            "ocrApplied": False,
                            "semanticEnhanced": False,
                        },
                        "confidence_scores": {},
                        "parse_quality": "high",
                        "warnings": [],
                    }
                }
            }
        },
        400: {"description": "Empty file uploaded"},
        415: {"description": "Unsupported file format"},
        422: {"description": "File could not be decoded or has no extractable text"}
    }
)
async def parse_resume(
    file: UploadFile = File(..., description="Resume file (PDF, DOCX, DOC or TXT format)"),
    ocr: Optional[OcrProvider] = Depends(get_ocr_provider),
    classifier: Optional[SemanticClassifier] = Depends(get_semantic_classifier),
):
    """
    Parse a resume file into a structured JSON Resume record.

    **Supported formats:**
    - PDF (.pdf) - text layer; scanned PDFs need an OCR provider
    - DOCX / DOC (.docx, .doc)
    - TXT / Markdown (.txt, .md)

    **Returns:**
    - **resume**: basics, work, education, skills, projects, certificates, languages
    - **meta**: which decoder ran, page and character counts, OCR and semantic flags
    - **confidence_scores**: Per-field confidence for the basics
    - **parse_quality**: Overall quality assessment (high/medium/low)
    - **warnings**: Any warnings during parsing
    """
    raw = await file.read()
    if not raw:
        raise HTTPException(status_code=400, detail="Empty file uploaded.")

    try:
        return await run_pipeline(
            raw,
            filename=file.filename or "",
            content_type=file.content_type or "",
            ocr=ocr,
            classifier=classifier,
        )
    except UnsupportedFormat as exc:
        raise HTTPException(status_code=415, detail=f"Unsupported content type: {exc.content_type or exc.filename}")
    except CorruptDocument as exc:
        logger.warning("Rejected %r: %s", file.filename, exc)
        raise HTTPException(status_code=422, detail=str(exc))
    except NoExtractableText:
        raise HTTPException(
            status_code=422,
            detail="PDF appears to have no extractable text. OCR is not enabled for this deployment."
        )
