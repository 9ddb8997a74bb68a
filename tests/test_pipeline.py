"""
End-to-end pipeline: format dispatch, OCR gate, semantic hook and output record.
"""

import asyncio

import pytest

from app.core.errors import NoExtractableText, UnsupportedFormat
from app.core.pipeline import OcrResult, needs_ocr, parse_resume
from app.core.semantic import NullClassifier


class FakeOcr:

    def __init__(self, text):
        self.text = text
        self.calls = 0

    async def recognize(self, data):
        self.calls += 1
        return OcrResult(text=self.text, page_count=1)


class FailingOcr:

    async def recognize(self, data):
        raise RuntimeError("ocr engine crashed")


def run(data, filename, content_type="", **kwargs):
    return asyncio.run(parse_resume(data, filename, content_type, **kwargs))


def test_text_resume(resume_text):
    response = run(resume_text.encode(), "resume.txt", "text/plain")
    resume = response.resume

    assert response.meta.parser == "text"
    assert response.meta.char_count == len(resume_text)
    assert resume.basics.name == "Jane Doe"
    assert resume.basics.email == "jane.doe@example.com"
    assert resume.basics.phone == "(555) 123-4567"
    assert resume.basics.label == "Senior software engineer"

    [job] = resume.work
    assert (job.position, job.name, job.start_date, job.end_date) == ("Software Engineer", "Acme Corp", "2020-01", None)
    assert job.highlights == ["Built X", "Built Y"]

    [school] = resume.education
    assert (school.institution, school.area) == ("State University", "Computer Science")
    assert [s.name for s in resume.skills] == ["Python", "FastAPI", "PostgreSQL"]

    assert response.parse_quality == "high"
    assert response.warnings == []


def test_one_skill_per_line_resume():
    text = "Jane Doe\njane.doe@example.com\nSKILLS\nPython\nAWS\nDocker\nSQL\nKubernetes"
    response = run(text.encode(), "resume.txt")
    assert [s.name for s in response.resume.skills] == ["Python", "AWS", "Docker", "SQL", "Kubernetes"]


def test_output_is_deterministic(resume_text):
    first = run(resume_text.encode(), "resume.txt")
    second = run(resume_text.encode(), "resume.txt")
    assert first.model_dump() == second.model_dump()


def test_null_classifier_matches_no_classifier(resume_text):
    text = resume_text + "\nPROJECTS\nResume Parser Tool\n" + "\n".join(
        f"- Improved parsing accuracy for template {i}" for i in range(10)
    )
    assert len(text) > 500
    plain = run(text.encode(), "resume.txt")
    with_null = run(text.encode(), "resume.txt", classifier=NullClassifier())
    assert plain.model_dump() == with_null.model_dump()
    assert with_null.meta.semantic_enhanced is False


def test_docx_resume(resume_docx):
    response = run(resume_docx, "resume.docx")
    assert response.meta.parser == "docx"
    assert response.resume.basics.email == "jane.doe@example.com"
    assert response.resume.work[0].highlights == ["Built X", "Built Y"]
    assert [s.name for s in response.resume.skills] == ["Python", "Go", "Docker"]


def test_pdf_without_ocr_keeps_text_layer(resume_pdf):
    response = run(resume_pdf, "resume.pdf", "application/pdf")
    resume = response.resume

    assert response.meta.parser == "pdf"
    assert response.meta.page_count == 1
    assert response.meta.ocr_applied is False
    assert any("OCR" in warning for warning in response.warnings)

    assert resume.basics.name == "Jane Doe"
    assert resume.basics.location.city == "Austin"
    [job] = resume.work
    assert (job.position, job.name) == ("Software Engineer", "Acme Corp")
    assert job.highlights == ["Built X", "Built Y"]
    assert resume.education[0].institution == "State University"


def test_short_pdf_is_rerouted_to_ocr(resume_pdf, resume_text):
    ocr = FakeOcr(resume_text)
    response = run(resume_pdf, "resume.pdf", ocr=ocr)
    assert ocr.calls == 1
    assert response.meta.parser == "ocr"
    assert response.meta.ocr_applied is True
    assert [s.name for s in response.resume.skills] == ["Python", "FastAPI", "PostgreSQL"]


def test_ocr_not_used_for_text_documents(resume_text):
    ocr = FakeOcr("ignored")
    run(resume_text.encode(), "resume.txt", ocr=ocr)
    assert ocr.calls == 0


def test_empty_pdf_without_ocr(empty_pdf):
    with pytest.raises(NoExtractableText):
        run(empty_pdf, "scan.pdf")


def test_empty_pdf_with_failing_ocr(empty_pdf):
    with pytest.raises(NoExtractableText):
        run(empty_pdf, "scan.pdf", ocr=FailingOcr())


def test_failing_ocr_falls_back_to_text_layer(resume_pdf):
    response = run(resume_pdf, "resume.pdf", ocr=FailingOcr())
    assert response.meta.parser == "pdf"
    assert "OCR failed; using the PDF text layer." in response.warnings


def test_unsupported_format():
    with pytest.raises(UnsupportedFormat):
        run(b"\x89PNG", "photo.png", "image/png")


class TestOcrGate:

    def test_empty(self):
        assert needs_ocr("")

    def test_length_threshold(self):
        assert needs_ocr("a" * 599)
        assert not needs_ocr("a" * 600)

    def test_garbled_encoding(self):
        assert needs_ocr("a" * 700 + "é" * 200)
        assert not needs_ocr("a" * 900 + "é" * 100)
