"""
Test suite for per-field confidence scoring.

Demonstrates how confidence scores guide downstream decision-making about
whether extraction requires user clarification.
"""

import pytest
from fastapi.testclient import TestClient

from app.core.basics_parser import extract_basics
from app.core.confidence_calculator import (
    ConfidenceCalculator,
    build_confidence_scores,
    collect_warnings,
    parse_quality,
)
from app.core.schemas import Basics, Location, StructuredResume, WorkEntry
from app.main import app

client = TestClient(app)


def post_text(resume_text):
    response = client.post(
        "/parse",
        files={"file": ("resume.txt", resume_text.encode(), "text/plain")}
    )
    assert response.status_code == 200
    return response.json()


def scores_for(resume_text):
    return build_confidence_scores(extract_basics([], resume_text), resume_text)


def test_confidence_scores_present_in_response():
    """Verify that all responses include confidence_scores for the basics."""
    data = post_text("""JOHN DOE
john.doe@example.com
(555) 123-4567
New York, NY
""")

    assert set(data["confidence_scores"]) == {"name", "email", "phone", "location", "url"}
    assert data["parse_quality"] == "high"


def test_confidence_scores_structure():
    """Confidence scores should have required metadata fields."""
    data = post_text("""
Bob Johnson
bob@work.com
415-555-1234
""")

    for field_name, conf_obj in data["confidence_scores"].items():
        assert conf_obj["field_name"] == field_name
        assert 0.0 <= conf_obj["confidence"] <= 1.0
        assert isinstance(conf_obj["reasons"], list)
        assert conf_obj["required"] is (field_name in ("name", "email", "phone"))


def test_email_confidence_high_when_found():
    email_conf = scores_for("John Doe\njohn.doe@example.com\n555-123-4567")["email"]
    assert email_conf.confidence == 1.0
    assert email_conf.extraction_method == "feature_score"
    assert email_conf.reasons == ["regex_exact_single"]
    assert email_conf.threshold == 3
    assert email_conf.score >= 3


def test_email_confidence_zero_when_not_found():
    email_conf = scores_for("John Doe\nSome Company\nSan Francisco, CA")["email"]
    assert email_conf.confidence == 0.0
    assert email_conf.reasons == ["no_email_found"]
    assert email_conf.score is None


def test_name_confidence_signals():
    name_conf = scores_for("Jane Smith\njane.smith@company.com\n503-804-0032\nPortland, OR")["name"]
    assert name_conf.confidence == 1.0
    assert name_conf.extraction_method == "feature_score"
    assert name_conf.reasons == ["resolved_by_feature_score", "near_email", "at_resume_top"]


def test_location_confidence_with_region():
    loc_conf = scores_for("Sarah Williams\nsarah.w@example.com\n555-222-3333\nAustin, TX")["location"]
    assert loc_conf.confidence == 0.95
    assert loc_conf.reasons == ["city_region_pattern"]


def test_parse_quality_drops_without_phone():
    data = post_text("""
John Smith
john.smith@example.com
San Francisco, CA
""")
    assert data["parse_quality"] in ["medium", "low"]
    assert data["confidence_scores"]["phone"]["confidence"] == 0.0
    assert "No phone number found." in data["warnings"]


class TestConfidenceCalculator:

    def test_email(self):
        assert ConfidenceCalculator.email("a@b.com", 1) == (1.0, "regex_exact_single")
        assert ConfidenceCalculator.email("a@b.com", 2) == (0.85, "regex_exact_multiple_occurrences")
        assert ConfidenceCalculator.email("a@b.com", 5) == (0.6, "too_many_email_candidates")
        assert ConfidenceCalculator.email("not-an-email", 1) == (0.4, "invalid_email_format")

    def test_phone(self):
        assert ConfidenceCalculator.phone("(555) 123-4567", 1) == (1.0, "regex_exact_single")
        assert ConfidenceCalculator.phone("(555) 123-4567", 3) == (0.6, "ambiguous_multiple_phones")
        assert ConfidenceCalculator.phone("12-34", 1) == (0.3, "too_few_digits")
        assert ConfidenceCalculator.phone(None) == (0.0, "no_phone_found")

    def test_full_name(self):
        confidence, reasons = ConfidenceCalculator.full_name("Jane Doe", method="pattern_scan")
        assert confidence == 0.45
        assert reasons == ["resolved_by_pattern_scan"]

        confidence, _ = ConfidenceCalculator.full_name(
            "Timothy M. Barani", near_email=True, is_top_of_resume=False, has_middle_initial=True,
        )
        assert confidence == pytest.approx(0.8)

        assert ConfidenceCalculator.full_name("Cher") == (0.2, ["no_space_in_name"])
        assert ConfidenceCalculator.full_name(None) == (0.0, ["no_name_found"])

    def test_location(self):
        assert ConfidenceCalculator.location(Location(city="Remote"))[0] == 0.8
        assert ConfidenceCalculator.location(Location(city="Austin"))[0] == 0.6
        assert ConfidenceCalculator.location(None)[0] == 0.0

    def test_url(self):
        assert ConfidenceCalculator.url("https://janedoe.dev") == (0.9, "url_valid")
        assert ConfidenceCalculator.url("janedoe.dev") == (0.7, "missing_protocol")

    def test_overall_quality(self):
        assert ConfidenceCalculator.calculate_overall_parse_quality({"name": 1.0, "email": 1.0, "phone": 0.6}) == "high"
        assert ConfidenceCalculator.calculate_overall_parse_quality({"name": 0.8, "email": 1.0, "phone": 0.3}) == "medium"
        assert ConfidenceCalculator.calculate_overall_parse_quality({"email": 1.0}) == "low"


def test_parse_quality_from_scores():
    assert parse_quality(scores_for("Jane Smith\njane.smith@company.com\n503-804-0032")) == "high"


def test_collect_warnings():
    warnings = collect_warnings(StructuredResume())
    assert warnings == [
        "Could not confidently extract candidate name.",
        "No email address found.",
        "No phone number found.",
        "No work experience or education entries were recognized.",
    ]

    resume = StructuredResume(
        basics=Basics(name="Jane Doe", email="jane@example.com", phone="555-123-4567"),
        work=[WorkEntry(name="Acme Corp")],
    )
    assert collect_warnings(resume) == []
