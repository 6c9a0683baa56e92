from pd_sections.normalizer import normalize
from pd_sections.section_patterns import FULL_DOCUMENT, HEADER
from pd_sections.splitter import clean_title, split, split_plain_headers


def test_end_to_end_sections(sample_pd: str) -> None:
    doc = split(normalize(sample_pd))
    assert list(doc) == [
        "HEADER",
        "Factor 1 - Knowledge Required Level 1-7, 1250 Points",
        "Total Points: 1250",
        "Final Grade: GS-9",
        "Grade Range: 9-9",
    ]
    assert doc.content("HEADER") == "Job Series: GS-0301"
    assert doc.content("Factor 1 - Knowledge Required Level 1-7, 1250 Points") == (
        "Rationale text."
    )
    assert all(doc.content(t) == "" for t in list(doc)[2:])


def test_fused_factor_header_round_trips() -> None:
    text = normalize("**HEADER**\nAgency: DOE\n\nFactor3GuidelinesLevel3-2275Points\nUses guides.")
    doc = split(text)
    assert "Factor 3 Guidelines Level 3-2, 275 Points" in doc
    assert doc.content("Factor 3 Guidelines Level 3-2, 275 Points") == "Uses guides."


def test_factor_sub_titles_are_canonical() -> None:
    text = normalize(
        "**HEADER**\nAgency: DOE\n\n"
        "**Factor 4A Personal Contacts Level 4-2, 25 Points**\nPeers.\n\n"
        "**Factor 4B Purpose of Contacts**\nExchange information."
    )
    doc = split(text)
    assert list(doc)[1:] == [
        "Factor 4A \u2013 PERSONAL CONTACTS (NATURE OF CONTACTS) Level 4-2, 25 Points",
        "Factor 4B \u2013 PURPOSE OF CONTACTS",
    ]
    assert doc[list(doc)[2]].sub == "B"


def test_loose_summary_is_synthesized() -> None:
    text = normalize(
        "**HEADER**\nAgency: DOE\n\n**Factor 1 - Knowledge Level 1-7, 1250 Points**\n"
        "The position totals Total Points: 1250 overall."
    )
    doc = split(text)
    assert "Total Points: 1250" in doc
    assert doc.content("Total Points: 1250") == ""
    assert list(doc)[-1] == "Total Points: 1250"


def test_header_fallback_from_preamble() -> None:
    text = normalize(
        "Department of Energy\nManagement Analyst\nGS-0343-09\n\n"
        "**INTRODUCTION**\nThe incumbent serves as an analyst."
    )
    doc = split(text)
    assert list(doc) == [HEADER, "INTRODUCTION"]
    assert doc.content(HEADER) == "Department of Energy\nManagement Analyst\nGS-0343-09"


def test_header_fallback_limit() -> None:
    preamble = "\n".join(f"line {n}" for n in range(12))
    doc = split(f"{preamble}\n\n**INTRODUCTION**\nBody.", header_fallback_lines=3)
    assert doc.content(HEADER) == "line 0\nline 1\nline 2"


def test_text_without_headers_is_full_document() -> None:
    doc = split("Just some prose without any section markers.")
    assert list(doc) == [FULL_DOCUMENT]
    assert doc.content(FULL_DOCUMENT) == "Just some prose without any section markers."


def test_later_duplicate_titles_overwrite_earlier() -> None:
    doc = split("**HEADER**\nA\n\n**INTRODUCTION**\nfirst\n\n**INTRODUCTION**\nsecond")
    assert doc.content("INTRODUCTION") == "second"
    assert list(doc) == [HEADER, "INTRODUCTION"]


def test_bold_header_with_colon() -> None:
    doc = split("**HEADER**\nA\n\n**MAJOR DUTIES:**\n1. Plans work.")
    assert doc.content("MAJOR DUTIES") == "1. Plans work."


def test_clean_title() -> None:
    assert clean_title("**MAJOR   DUTIES**:") == "MAJOR DUTIES"


def test_factor_sub_title_keeps_lettered_level() -> None:
    text = normalize(
        "**HEADER**\nAgency: DOE\n\n"
        "**Factor 4A \u2013 PERSONAL CONTACTS (NATURE OF CONTACTS) Level 4a-2, 50 Points**\n"
        "Peers."
    )
    doc = split(text)
    title = "Factor 4A \u2013 PERSONAL CONTACTS (NATURE OF CONTACTS) Level 4A-2, 50 Points"
    assert list(doc) == ["HEADER", title]
    assert doc.content(title) == "Peers."


def test_split_plain_headers() -> None:
    doc = split_plain_headers(
        "U.S. Department of Energy\nGS-0301-12\n\n"
        "Introduction:\nThe incumbent serves as an analyst.\n\n"
        "MAJOR DUTIES\n1. Plans programs.\n2. Reviews work.\n\n"
        "Major Duties\n1. Repeated list.\n\n"
        "Conditions of Employment\nMust pass a background check."
    )
    assert list(doc) == ["HEADER", "INTRODUCTION", "MAJOR DUTIES", "CONDITIONS OF EMPLOYMENT"]
    assert doc.content("HEADER") == "U.S. Department of Energy\nGS-0301-12"
    assert doc.content("MAJOR DUTIES") == "1. Plans programs.\n2. Reviews work."
    assert doc.content("CONDITIONS OF EMPLOYMENT") == "Must pass a background check."


def test_plain_header_needs_whole_line() -> None:
    assert not split_plain_headers("Introduction to the office and its mission.")
