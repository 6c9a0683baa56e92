from pd_sections.lookup import (
    MATCHERS,
    canonical_order,
    canonical_slots,
    find_title,
    punctuation_insensitive,
    same_class,
    substring,
)


def test_exact_match_beats_earlier_weak_match() -> None:
    titles = ["Major Duties Overview", "MAJOR DUTIES"]
    assert find_title("MAJOR DUTIES", titles) == "MAJOR DUTIES"


def test_same_class_matches_factor_number() -> None:
    assert same_class("Factor 3", "Factor 3 - Guidelines Level 3-2, 275 Points")
    assert not same_class("Factor 3", "Factor 4 - Complexity")
    assert not same_class("Factor 4", "Factor 4A Personal Contacts")


def test_same_class_matches_summary_label() -> None:
    assert same_class("Total Points", "Total Points: 1250")
    assert not same_class("Total Points", "Final Grade: GS-09")


def test_weak_matchers_stay_within_family() -> None:
    assert not substring("Total Points", "Factor 1 Level 1-7, 1250 Total Points")
    assert substring("INTRODUCTION", "Introduction and Background")
    assert not punctuation_insensitive(
        "TITLE AND SERIES DETERMINATION", "Title & Series Determination"
    )
    assert punctuation_insensitive("CONDITIONS OF EMPLOYMENT", "Conditions-of-Employment")


def test_matcher_names_are_ranked() -> None:
    assert [m.name for m in MATCHERS] == [
        "exact",
        "case_insensitive",
        "same_class",
        "punctuation_insensitive",
        "substring",
    ]


def test_canonical_slots_size_major_duties() -> None:
    slots = canonical_slots(["MAJOR DUTY 3", "INTRODUCTION"])
    assert slots[slots.index("MAJOR DUTIES") + 1 : slots.index("MAJOR DUTIES") + 4] == [
        "MAJOR DUTY 1",
        "MAJOR DUTY 2",
        "MAJOR DUTY 3",
    ]


def test_canonical_order_with_unmatched_tail() -> None:
    titles = [
        "Grade Range: 1601-2100",
        "Factor 2 - Supervisory Controls",
        "Custom Notes",
        "HEADER",
        "Total Points: 1700",
        "Factor 1 - Knowledge",
        "MAJOR DUTY 2",
        "MAJOR DUTY 1",
        "Appendix",
    ]
    assert canonical_order(titles) == [
        "HEADER",
        "MAJOR DUTY 1",
        "MAJOR DUTY 2",
        "Factor 1 - Knowledge",
        "Factor 2 - Supervisory Controls",
        "Total Points: 1700",
        "Grade Range: 1601-2100",
        "Custom Notes",
        "Appendix",
    ]
