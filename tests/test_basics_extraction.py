"""
Contact basics: name, label, email, phone, location, url and profiles.
"""

from app.core.basics_parser import (
    extract_basics,
    find_name_in_full_text,
    gather_contact_lines,
    is_plausible_name,
    normalize_location,
)
from app.core.layout import SectionBlock
from app.core.sectionizer import sectionize_text


def basics_for(text):
    return extract_basics(sectionize_text(text), text)


RESUME_HEADER = """Jane Doe
Senior Software Engineer
jane.doe@example.com | (555) 123-4567
Austin, TX 78701
linkedin.com/in/janedoe | https://github.com/janedoe

SUMMARY
Backend engineer focused on data platforms.
"""


def test_full_header():
    result = basics_for(RESUME_HEADER)
    basics = result.basics
    assert basics.name == "Jane Doe"
    assert basics.label == "Senior software engineer"
    assert basics.email == "jane.doe@example.com"
    assert basics.phone == "(555) 123-4567"
    assert basics.location.city == "Austin"
    assert basics.location.region == "TX"
    assert basics.summary == "Backend engineer focused on data platforms."
    assert result.name_method == "feature_score"


def test_profiles_from_social_links():
    basics = basics_for(RESUME_HEADER).basics
    networks = {profile.network: profile for profile in basics.profiles}
    assert networks["linkedin"].username == "janedoe"
    assert networks["linkedin"].url == "https://linkedin.com/in/janedoe"
    assert networks["github"].url == "https://github.com/janedoe"


def test_url_is_captured_not_whole_line():
    basics = basics_for(RESUME_HEADER).basics
    assert basics.url == "https://github.com/janedoe"


def test_certification_id_is_not_a_phone():
    basics = basics_for("Jane Doe\nCertification ID: 123456789012\njane@example.com")
    assert basics.basics.phone is None
    assert basics.candidates["phone"] is None


def test_labelled_email_is_captured():
    result = basics_for("Jane Doe\nContact: jane.doe@example.com")
    assert result.basics.email == "jane.doe@example.com"
    assert result.candidates["email"].score == 4


def test_remote_location():
    basics = basics_for("Jane Doe\nRemote\njane@example.com").basics
    assert basics.location.city == "Remote"


def test_missing_fields_stay_empty():
    basics = basics_for("SKILLS\nPython, Go").basics
    assert basics.email is None
    assert basics.phone is None
    assert basics.location is None
    assert basics.url is None


def test_middle_initial_name():
    basics = basics_for("Timothy M. Barani\ntim@example.com\n555-123-4567").basics
    assert basics.name == "Timothy M. Barani"


def test_contact_lines_include_profile_and_late_contacts():
    raw_lines = [f"filler line {i}" for i in range(40)] + ["Email: late@example.com"]
    profile = SectionBlock(id="profile", heading="Profile", lines=["Jane Doe"])
    lines = gather_contact_lines(profile, "\n".join(raw_lines))
    assert lines[:30] == raw_lines[:30]
    assert "Jane Doe" in lines
    assert lines[-1] == "Email: late@example.com"
    assert "filler line 35" not in lines


class TestNameHelpers:

    def test_plausible_names(self):
        assert is_plausible_name("Jane Doe")
        assert not is_plausible_name("EXPERIENCE")
        assert not is_plausible_name("jane@example.com")
        assert not is_plausible_name("2020 Annual Report")
        assert not is_plausible_name(None)

    def test_full_text_scan(self):
        text = "RESUME\nEXPERIENCE\nJohn Smith\njohn@example.com"
        assert find_name_in_full_text(text) == "John Smith"

    def test_full_text_scan_skips_contact_lines(self):
        assert find_name_in_full_text("Call 555 123 4567\nno names here") is None


class TestNormalizeLocation:

    def test_city_region_zip(self):
        location = normalize_location("Austin, TX 78701")
        assert (location.city, location.region) == ("Austin", "TX")

    def test_remote(self):
        assert normalize_location("Location: Remote").city == "Remote"

    def test_unparseable(self):
        assert normalize_location("somewhere nice") is None
        assert normalize_location(None) is None
