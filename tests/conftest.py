from io import BytesIO

import pytest
from docx import Document


RESUME_TEXT = """Jane Doe
Senior Software Engineer
jane.doe@example.com | (555) 123-4567
Austin, TX

EXPERIENCE
Software Engineer, Acme Corp
Jan 2020 - Present
• Built X
• Built Y

EDUCATION
B.S. Computer Science, State University
2016 - 2020

SKILLS
Python, FastAPI, PostgreSQL
"""

# (text, font, size, y)
RESUME_PDF_LINES = [
    ("Jane Doe", "F2", 16, 740),
    ("jane.doe@example.com", "F1", 11, 720),
    ("(555) 123-4567", "F1", 11, 706),
    ("Austin, TX", "F1", 11, 692),
    ("EXPERIENCE", "F2", 12, 664),
    ("Software Engineer, Acme Corp", "F1", 11, 646),
    ("Jan 2020 - Present", "F1", 11, 632),
    ("- Built X", "F1", 11, 618),
    ("- Built Y", "F1", 11, 604),
    ("EDUCATION", "F2", 12, 576),
    ("B.S. Computer Science, State University", "F1", 11, 558),
    ("2016 - 2020", "F1", 11, 544),
]


def _pdf_string(text):
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_pdf(lines, x=72):
    """Minimal one-page PDF using the standard Helvetica fonts (F1 regular, F2 bold)."""
    content = "\n".join(
        f"BT /{font} {size} Tf {x} {y} Td ({_pdf_string(text)}) Tj ET"
        for text, font, size, y in lines
    ).encode("latin-1")

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Resources << /Font << /F1 4 0 R /F2 5 0 R >> >> /Contents 6 0 R >>",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica /Encoding /WinAnsiEncoding >>",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica-Bold /Encoding /WinAnsiEncoding >>",
        b"<< /Length " + str(len(content)).encode() + b" >>\nstream\n" + content + b"\nendstream",
    ]

    out = BytesIO()
    out.write(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(out.tell())
        out.write(f"{number} 0 obj\n".encode() + body + b"\nendobj\n")

    xref_at = out.tell()
    out.write(f"xref\n0 {len(objects) + 1}\n".encode())
    out.write(b"0000000000 65535 f \n")
    for offset in offsets:
        out.write(f"{offset:010d} 00000 n \n".encode())
    out.write(f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref_at}\n%%EOF\n".encode())
    return out.getvalue()


def build_docx():
    doc = Document()
    doc.add_paragraph("Jane Doe")
    doc.add_paragraph("jane.doe@example.com")
    doc.add_paragraph("(555) 123-4567")
    doc.add_heading("Experience", level=1)
    doc.add_paragraph("Software Engineer, Acme Corp")
    doc.add_paragraph("Jan 2020 - Present")
    doc.add_paragraph("Built X", style="List Bullet")
    doc.add_paragraph("Built Y", style="List Bullet")
    doc.add_heading("Skills", level=1)
    table = doc.add_table(rows=2, cols=2)
    table.cell(0, 0).text = "Languages"
    table.cell(0, 1).text = "Python, Go"
    table.cell(1, 0).text = "Tools"
    table.cell(1, 1).text = "Docker"

    buf = BytesIO()
    doc.save(buf)
    return buf.getvalue()


@pytest.fixture
def resume_text():
    return RESUME_TEXT


@pytest.fixture
def resume_pdf():
    return build_pdf(RESUME_PDF_LINES)


@pytest.fixture
def empty_pdf():
    return build_pdf([])


@pytest.fixture
def resume_docx():
    return build_docx()


@pytest.fixture
def resume_pdf_lines():
    return list(RESUME_PDF_LINES)


@pytest.fixture
def pdf_builder():
    return build_pdf
