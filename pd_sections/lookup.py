"""Ranked title lookup used to place document sections into canonical slots.

A matcher is a predicate ``(slot, title) -> bool``. :data:`MATCHERS` lists
them strongest first; :func:`find_title` tries each matcher against every
candidate before falling through to the next, so a weak substring match never
beats an exact match further down the document.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Sequence

from pd_sections.section_patterns import (
    FACTOR_EVALUATION,
    HEADER,
    INTRODUCTION,
    MAJOR_DUTIES,
    SUMMARY_LABELS,
    TRAILING_SECTIONS,
    factor_key,
    is_major_duty_title,
    major_duty_number,
    summary_label,
)

MatchFn = Callable[[str, str], bool]

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")

FACTOR_SLOTS = (
    "Factor 1",
    "Factor 2",
    "Factor 3",
    "Factor 4",
    "Factor 4A",
    "Factor 4B",
    "Factor 5",
    "Factor 6",
    "Factor 7",
    "Factor 8",
    "Factor 9",
)


@dataclass(frozen=True)
class Matcher:
    name: str
    match: MatchFn

    def __call__(self, slot: str, title: str) -> bool:
        return self.match(slot, title)


def _squash(text: str) -> str:
    return _NON_ALNUM_RE.sub("", text.casefold())


def _words(text: str) -> str:
    return _NON_ALNUM_RE.sub(" ", text.casefold()).strip()


def exact(slot: str, title: str) -> bool:
    return slot == title


def case_insensitive(slot: str, title: str) -> bool:
    return slot.casefold() == title.strip().casefold()


def same_class(slot: str, title: str) -> bool:
    """Factor number, duty number or summary label agree."""
    if slot in SUMMARY_LABELS:
        return summary_label(title) == slot
    slot_factor = factor_key(slot)
    if slot_factor:
        return factor_key(title) == slot_factor
    if is_major_duty_title(slot):
        return is_major_duty_title(title) and major_duty_number(title) == major_duty_number(slot)
    return False


def _title_class(text: str) -> str | None:
    if text in SUMMARY_LABELS or summary_label(text):
        return "summary"
    if factor_key(text):
        return "factor"
    if is_major_duty_title(text):
        return "duty"
    return None


def _same_family(slot: str, title: str) -> bool:
    return _title_class(slot) == _title_class(title)


def punctuation_insensitive(slot: str, title: str) -> bool:
    squashed = _squash(title)
    return bool(squashed) and squashed == _squash(slot) and _same_family(slot, title)


def _contains_words(haystack: str, needle: str) -> bool:
    pattern = rf"(?<![a-z0-9]){re.escape(needle)}(?![a-z0-9])"
    return bool(needle) and re.search(pattern, haystack) is not None


def substring(slot: str, title: str) -> bool:
    """Word-bounded containment in either direction."""
    if not _same_family(slot, title):
        return False
    a, b = _words(slot), _words(title)
    return _contains_words(b, a) or _contains_words(a, b)


MATCHERS: Sequence[Matcher] = (
    Matcher("exact", exact),
    Matcher("case_insensitive", case_insensitive),
    Matcher("same_class", same_class),
    Matcher("punctuation_insensitive", punctuation_insensitive),
    Matcher("substring", substring),
)


def find_title(
    slot: str, titles: Iterable[str], matchers: Sequence[Matcher] = MATCHERS
) -> str | None:
    """Return the first title matched by the strongest matcher, if any."""
    candidates = list(titles)
    return next(
        (title for matcher in matchers for title in candidates if matcher(slot, title)),
        None,
    )


def canonical_slots(titles: Iterable[str]) -> List[str]:
    """Canonical slot names, with ``MAJOR DUTY 1..N`` sized to ``titles``."""
    numbers = [n for n in (major_duty_number(t) for t in titles) if n is not None]
    duties = [f"MAJOR DUTY {n}" for n in range(1, max(numbers, default=0) + 1)]
    return [
        HEADER,
        INTRODUCTION,
        MAJOR_DUTIES,
        *duties,
        FACTOR_EVALUATION,
        *FACTOR_SLOTS,
        *SUMMARY_LABELS,
        *TRAILING_SECTIONS,
    ]


def canonical_order(titles: Sequence[str]) -> List[str]:
    """Order ``titles`` by canonical slot; unmatched titles keep their order at the end."""
    remaining = list(titles)
    ordered: List[str] = []
    for slot in canonical_slots(titles):
        found = find_title(slot, remaining)
        if found is not None:
            ordered.append(found)
            remaining.remove(found)
    return ordered + remaining
