import pytest

from pd_sections.config import PipelineSpec
from pd_sections.core import parse_document
from pd_sections.document import Document
from pd_sections.errors import CascadeError, RecomputeError, RegistryError, SaveError
from pd_sections.registry import (
    EditingSession,
    SectionRegistry,
    State,
    apply_recompute,
    clean_saved_content,
    section_id,
)
from pd_sections.grading import score_factors

FACTOR_1 = "Factor 1 - Knowledge Required by the Position Level 1-7, 1250 Points"
FACTOR_2 = "Factor 2 - Supervisory Controls Level 2-4, 450 Points"
FACTOR_4A = "Factor 4A \u2013 PERSONAL CONTACTS (NATURE OF CONTACTS) Level 4A-2, 50 Points"
FACTOR_4B = "Factor 4B \u2013 PURPOSE OF CONTACTS"


def _parse(text: str):
    return parse_document(text, PipelineSpec())


@pytest.fixture
def registry(full_pd, fixed_recompute):
    return SectionRegistry(_parse(full_pd), fixed_recompute, clock=lambda: 100.0)


def test_resolve_title_forms(registry: SectionRegistry) -> None:
    assert registry.resolve_title("INTRODUCTION") == "INTRODUCTION"
    assert registry.resolve_title("introduction") == "INTRODUCTION"
    assert registry.resolve_title("majorduties") == "MAJOR DUTIES"
    assert registry.resolve_title("Factor 2") == FACTOR_2
    assert registry.resolve_title("Total Points") == "Total Points: 1700"
    assert registry.resolve_title("Factor 7") is None


def test_edit_undo_and_reset(registry: SectionRegistry) -> None:
    original = registry.begin_edit("INTRODUCTION")
    assert registry.state("INTRODUCTION") is State.EDITING
    registry.stage("INTRODUCTION", "draft one")
    registry.stage("INTRODUCTION", "draft two")
    assert registry.undo("INTRODUCTION") == "draft one"
    assert registry.state("INTRODUCTION") is State.VIEWING
    assert registry.undo("INTRODUCTION") == original
    assert registry.undo("INTRODUCTION") == original
    registry.stage("INTRODUCTION", "draft three")
    assert registry.reset_section("INTRODUCTION") == original
    assert registry.stacks["INTRODUCTION"] == [original]


def test_cancel_returns_saved_content(registry: SectionRegistry) -> None:
    saved = registry.document.content("INTRODUCTION")
    registry.begin_edit("INTRODUCTION")
    registry.stage("INTRODUCTION", "unsaved")
    assert registry.cancel("INTRODUCTION") == saved
    assert registry.state("INTRODUCTION") is State.VIEWING


def test_save_non_cascading_section(registry: SectionRegistry) -> None:
    title = registry.save("INTRODUCTION", "  New intro.\r\n\r\n\r\n\r\nSecond.  ")
    assert title == "INTRODUCTION"
    assert registry.document.content("INTRODUCTION") == "New intro.\n\nSecond."
    entry = registry.history["INTRODUCTION"][-1]
    assert (entry.content, entry.header, entry.timestamp) == (
        "New intro.\n\nSecond.",
        "INTRODUCTION",
        100.0,
    )
    assert "Total Points: 1700" in registry.document


def test_save_factor_cascades(registry: SectionRegistry) -> None:
    new_title = registry.save("Factor 1", "Requires broad knowledge.")
    assert new_title == "Factor 1 - Knowledge Required by the Position Level 1-3, 350 Points"
    doc = registry.document
    assert doc.content(new_title) == "Requires broad knowledge."
    assert FACTOR_1 not in doc
    assert "Factor 2 - Supervisory Controls Level 2-3, 275 Points" in doc
    summaries = [t for t in doc if doc[t].kind == "summary"]
    assert summaries == ["Total Points: 625", "Final Grade: Unknown", "Grade Range: Unknown"]
    assert registry.stacks[new_title] == ["Requires broad knowledge."]
    assert registry.history[new_title][-1].header == FACTOR_1
    assert FACTOR_1 not in registry.history


def test_cascade_keeps_section_positions(registry: SectionRegistry) -> None:
    before = list(registry.document)
    registry.save("MAJOR DUTIES", "1. Plans work. 2. Reviews work.")
    after = list(registry.document)
    assert len(after) == len(before)
    assert after.index("MAJOR DUTIES") == before.index("MAJOR DUTIES")
    assert after[-1] == "CONDITIONS OF EMPLOYMENT"


def test_summary_sections_are_read_only(registry: SectionRegistry) -> None:
    with pytest.raises(SaveError):
        registry.save("Total Points", "9999")
    assert registry.document.content("Total Points: 1700") == ""


def test_cascade_failure_keeps_saved_edit(full_pd) -> None:
    def failing(_factors):
        raise RecomputeError("service unavailable")

    registry = SectionRegistry(_parse(full_pd), failing)
    with pytest.raises(CascadeError) as info:
        registry.save("Factor 2", "Works independently.")
    assert info.value.title == FACTOR_2
    assert isinstance(info.value.__cause__, RecomputeError)
    assert registry.document.content(FACTOR_2) == "Works independently."
    assert "Total Points: 1700" in registry.document


def test_unknown_title_raises(registry: SectionRegistry) -> None:
    with pytest.raises(RegistryError):
        registry.begin_edit("Nonexistent Section")


def test_apply_recompute_adds_missing_sections() -> None:
    doc = _parse("**HEADER**\nAgency: DOE\n\n**Factor 1 - Knowledge**\nText.")
    result = score_factors({"Factor 1": "1-7", "Factor 3": "3-2"})
    updated, renamed = apply_recompute(doc, result)
    assert list(updated) == [
        "HEADER",
        "Factor 1 - Knowledge Required by the Position Level 1-7, 1250 Points",
        "Factor 3 - Guidelines Level 3-2, 125 Points",
        "Total Points: 1375",
        "Final Grade: GS-07",
        "Grade Range: 1101-1600",
    ]
    assert renamed == {
        "Factor 1 - Knowledge": "Factor 1 - Knowledge Required by the Position Level 1-7, 1250 Points"
    }
    assert list(doc) == ["HEADER", "Factor 1 - Knowledge"]


def test_helpers() -> None:
    assert section_id("Factor 1 - Knowledge") == "factor1knowledge"
    assert clean_saved_content("a\r\nb\r\n\r\n\r\nc") == "a\nb\n\nc"


def test_editing_session_reset(full_pd) -> None:
    session = EditingSession(full_pd, _parse)
    session.registry.save("INTRODUCTION", "Edited.")
    assert session.document.content("INTRODUCTION") == "Edited."
    doc = session.reset()
    assert doc.content("INTRODUCTION") != "Edited."
    assert session.registry.history == {}
    session.reset("**HEADER**\nAgency: DOE")
    assert list(session.document) == ["HEADER"]


def test_cascade_keeps_contacts_factors_apart(fixed_recompute) -> None:
    sent = []

    def recording(factors):
        sent.append(dict(factors))
        return fixed_recompute(factors)

    doc = Document(
        {
            "HEADER": "Agency: DOE",
            FACTOR_1: "Requires knowledge.",
            FACTOR_4A: "Contacts with peers.",
            FACTOR_4B: "To exchange information.",
        }
    )
    registry = SectionRegistry(doc, recording)
    assert registry.resolve_title("Factor 4B") == FACTOR_4B
    assert registry.resolve_title("Factor 4") is None

    registry.save("Factor 1", "New knowledge.")
    assert sent == [
        {
            "Factor 1": "New knowledge.",
            "Factor 4A": "Contacts with peers.",
            "Factor 4B": "To exchange information.",
        }
    ]
    new_4a = "Factor 4A \u2013 PERSONAL CONTACTS (NATURE OF CONTACTS) Level 4A-3, 75 Points"
    new_4b = "Factor 4B \u2013 PURPOSE OF CONTACTS Level 4B-3, 100 Points"
    assert list(registry.document) == [
        "HEADER",
        "Factor 1 - Knowledge Required by the Position Level 1-3, 350 Points",
        new_4a,
        new_4b,
        "Total Points: 525",
        "Final Grade: Unknown",
        "Grade Range: Unknown",
    ]
    assert registry.document.content(new_4a) == "Contacts with peers."
    assert registry.document.content(new_4b) == "To exchange information."
