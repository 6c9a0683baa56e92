import pytest

from pd_sections.core import parse_document, run_format
from pd_sections.config import PipelineSpec
from pd_sections.document import Document, Section
from pd_sections.serializer import (
    GENERATED,
    UPDATED,
    explode_header_fields,
    render_block,
    serialize,
)

SAMPLE_CANONICAL = (
    "**HEADER**\n\nJob Series: GS-0301\n\n"
    "**Factor 1 - Knowledge Required Level 1-7, 1250 Points**\n\nRationale text.\n\n"
    "**Total Points: 1250**\n\n**Final Grade: GS-9**\n\n**Grade Range: 9-9**"
)


def test_end_to_end_canonical_text(sample_pd: str) -> None:
    a, _ = run_format(sample_pd, PipelineSpec())
    assert a.payload == SAMPLE_CANONICAL


def test_summary_section_is_header_only() -> None:
    doc = Document({"Total Points: 1745": ""})
    assert serialize(doc, GENERATED) == "**Total Points: 1745**"
    assert serialize(doc, UPDATED) == "**Total Points: 1745**"


def test_summary_content_is_not_emitted() -> None:
    assert render_block(Section("Final Grade: GS-11", "stale")) == "**Final Grade: GS-11**"


def test_header_fields_are_exploded() -> None:
    content = "Job Series: GS-0343Position Title: AnalystLowest Organization: Division B"
    assert explode_header_fields(content) == (
        "Job Series: GS-0343\nPosition Title: Analyst\nLowest Organization: Division B"
    )


def test_empty_sections_by_mode() -> None:
    doc = Document({"HEADER": "Agency: DOE", "INTRODUCTION": ""})
    assert serialize(doc, GENERATED) == "**HEADER**\n\nAgency: DOE\n\n**INTRODUCTION**"
    assert serialize(doc, UPDATED) == "**HEADER**\n\nAgency: DOE"


def test_full_document_is_emitted_raw() -> None:
    doc = Document({"Full Document": "Plain text only."})
    assert serialize(doc) == "Plain text only."


def test_duty_items_get_their_own_paragraph() -> None:
    doc = Document({"MAJOR DUTIES": "1. Plans work. 2. Reviews work."})
    assert serialize(doc) == "**MAJOR DUTIES**\n\n1. Plans work.\n\n2. Reviews work."


def test_sections_are_reordered_canonically() -> None:
    doc = Document(
        {
            "Total Points: 1250": "",
            "Factor 1 - Knowledge": "Text.",
            "HEADER": "Agency: DOE",
        }
    )
    assert serialize(doc).split("\n\n")[0] == "**HEADER**"
    assert serialize(doc).endswith("**Total Points: 1250**")


def test_unknown_mode_raises() -> None:
    with pytest.raises(ValueError):
        serialize(Document(), "draft")


def test_serialized_text_is_a_fixed_point(full_pd: str) -> None:
    spec = PipelineSpec()
    first, _ = run_format(full_pd, spec)
    second, _ = run_format(first.payload, spec)
    assert second.payload == first.payload
    assert parse_document(first.payload, spec) == parse_document(second.payload, spec)


def test_full_pd_layout(full_pd: str) -> None:
    a, _ = run_format(full_pd, PipelineSpec())
    blocks = a.payload.split("\n\n")
    assert blocks[:2] == [
        "**HEADER**",
        "Job Series: GS-0343\nPosition Title: Management Analyst\n"
        "Agency: Department of Energy",
    ]
    assert "1. Conducts studies of program operations." in blocks
    assert "2. Prepares reports for management." in blocks
    assert blocks[-3:] == [
        "**Grade Range: 1601-2100**",
        "**CONDITIONS OF EMPLOYMENT**",
        "Must pass a background investigation.",
    ]


def test_serialize_accepts_plain_mapping() -> None:
    text = serialize({"INTRODUCTION": {"content": "Serves as analyst."}, "HEADER": "Agency: DOE"})
    assert text == "**HEADER**\n\nAgency: DOE\n\n**INTRODUCTION**\n\nServes as analyst."
