from app.core.layout import TextFragment
from app.core.subsections import (
    divide_section_into_subsections,
    modal_line_gap,
    split_text_subsections,
    subsection_texts,
)


def line(text, y, bold=False):
    font = "Helvetica-Bold" if bold else "Helvetica"
    return [TextFragment(text=text, x=72.0, y=y, width=50.0, height=11.0, font_name=font, end_of_line=True)]


def gap_lines():
    return [
        line("Software Engineer, Acme Corp", 100),
        line("Jan 2020 - Present", 88),
        line("• Built X", 76),
        line("Data Analyst, Globex", 46),
        line("2018 - 2019", 34),
    ]


def test_modal_gap():
    assert modal_line_gap(gap_lines()) == 12


def test_large_gap_opens_subsection():
    groups = divide_section_into_subsections(gap_lines(), multiplier=1.4)
    assert [len(g) for g in groups] == [3, 2]


def test_groups_partition_the_input():
    lines = gap_lines()
    groups = divide_section_into_subsections(lines)
    assert [l for group in groups for l in group] == lines


def test_bold_transition_fallback():
    lines = [
        line("Acme Corp", 100, bold=True),
        line("Software Engineer", 88),
        line("Built X", 76),
        line("Globex", 64, bold=True),
        line("Analyst", 52),
    ]
    groups = divide_section_into_subsections(lines)
    assert [len(g) for g in groups] == [3, 2]
    assert groups[1][0][0].text == "Globex"


def test_bold_bullet_does_not_split():
    lines = [
        line("Acme Corp", 100, bold=True),
        line("Software Engineer", 88),
        line("• Shipped", 76, bold=True),
    ]
    assert len(divide_section_into_subsections(lines)) == 1


def test_single_line_and_empty():
    assert divide_section_into_subsections([]) == []
    assert len(divide_section_into_subsections(gap_lines()[:1])) == 1


def test_subsection_texts():
    assert subsection_texts(gap_lines()) == [
        ["Software Engineer, Acme Corp", "Jan 2020 - Present", "• Built X"],
        ["Data Analyst, Globex", "2018 - 2019"],
    ]


def test_text_split_on_blank_and_header():
    lines = ["Header A", "detail", "", "Header B", "detail", "Header C"]
    groups = split_text_subsections(lines, lambda l, current: l.startswith("Header"))
    assert groups == [["Header A", "detail"], ["Header B", "detail"], ["Header C"]]
