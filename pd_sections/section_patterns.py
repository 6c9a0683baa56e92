"""Header vocabulary shared by the splitter, resolver, serializer and registry.

Patterns are data: every module that needs to recognise a factor title, a
summary line or a major duty heading imports the compiled expression from
here instead of carrying its own variant.
"""

from __future__ import annotations

import re
from typing import Final, Mapping

HEADER: Final = "HEADER"
INTRODUCTION: Final = "INTRODUCTION"
MAJOR_DUTIES: Final = "MAJOR DUTIES"
FACTOR_EVALUATION: Final = "FACTOR EVALUATION - COMPLETE ANALYSIS"
FULL_DOCUMENT: Final = "Full Document"
ADDITIONAL_INFORMATION: Final = "ADDITIONAL INFORMATION"

SUMMARY_LABELS: Final = ("Total Points", "Final Grade", "Grade Range")
SUMMARY_PREFIXES: Final = tuple(f"{label}:" for label in SUMMARY_LABELS)

TRAILING_SECTIONS: Final = (
    "CONDITIONS OF EMPLOYMENT",
    "TITLE AND SERIES DETERMINATION",
    "FAIR LABOR STANDARDS ACT DETERMINATION",
)

HEADER_FIELD_LABELS: Final = (
    "Job Series",
    "Position Title",
    "Agency",
    "Lowest Organization",
    "Organization",
    "Supervisory Level",
)

FACTOR_NAMES: Final[Mapping[str, str]] = {
    "1": "Knowledge Required by the Position",
    "2": "Supervisory Controls",
    "3": "Guidelines",
    "4": "Complexity",
    "5": "Scope and Effect",
    "6": "Personal Contacts",
    "7": "Purpose of Contacts",
    "8": "Physical Demands",
    "9": "Work Environment",
}

FACTOR_SUB_NAMES: Final[Mapping[str, str]] = {
    "A": "Personal Contacts (Nature of Contacts)",
    "B": "Purpose of Contacts",
}

FACTOR_SUB_LABELS: Final[Mapping[str, str]] = {
    sub: f"Factor 4{sub} – {name.upper()}" for sub, name in FACTOR_SUB_NAMES.items()
}

# ---------------------------------------------------------------------------
# Title classification
# ---------------------------------------------------------------------------

FACTOR_TITLE_RE: Final = re.compile(
    r"^\s*\**\s*factor\s*([1-9])(?:([AB])(?![a-z]))?(?!\d)", re.IGNORECASE
)
MAJOR_DUTY_TITLE_RE: Final = re.compile(
    r"^\s*major\s*dut(?:y|ies)\s*(\d+)?(?!\d)", re.IGNORECASE
)
SUMMARY_TITLE_RE: Final = re.compile(
    r"^\s*(total\s*points|final\s*grade|grade\s*range)\s*:", re.IGNORECASE
)

# ---------------------------------------------------------------------------
# Header shapes found in document text
# ---------------------------------------------------------------------------

_BOLD = r"\*\*[ \t]*(?P<bold>[A-Z0-9][A-Z0-9 \-:&(),%/]*?)[ \t]*\*\*(?:[ \t]*:)?"

_FACTOR = (
    r"^[ \t]*(?:\*\*)?[ \t]*"
    r"(?P<factor>Factor[ \t]*(?P<fnum>[1-9])(?P<fsub>[AB])?(?![0-9a-z])"
    r"(?:[^\n*]*?Level[ \t]*(?P<la>\d[AB]?)-(?P<lb>\d),[ \t]*(?P<pts>\d+)[ \t]*Points"
    r"|(?<=[AB])[^\n*]*"
    r"|[ \t]*-[ \t]*[^\n*]+))"
    r"[ \t]*(?:\*\*)?[ \t]*:?[ \t]*$"
)

_SUMMARY = (
    r"^[ \t]*(?:\*\*)?[ \t]*"
    r"(?P<summary>(?P<slabel>Total[ \t]+Points|Final[ \t]+Grade|Grade[ \t]+Range)"
    r"[ \t]*:[ \t]*(?:\*\*)?[ \t]*"
    r"(?P<svalue>GS-?\d+|\d+(?:-\d+|\+)?|Unknown))"
    r"[ \t]*(?:\*\*)?[ \t]*$"
)

SECTION_HEADER_RE: Final = re.compile(
    "|".join((f"(?i:{_SUMMARY})", f"(?i:{_FACTOR})", _BOLD)), re.MULTILINE
)
"""Single left-to-right header scanner.

Alternatives are tried in summary, factor, bold order at each position. Bold
headers stay case-sensitive (uppercase only).
"""

PLAIN_SECTION_TITLES: Final = (
    HEADER,
    INTRODUCTION,
    MAJOR_DUTIES,
    FACTOR_EVALUATION,
    *TRAILING_SECTIONS,
)

PLAIN_HEADER_RE: Final = re.compile(
    r"^[ \t]*(?P<plain>"
    + "|".join("[ \t]+".join(map(re.escape, t.split())) for t in PLAIN_SECTION_TITLES)
    + r")[ \t]*:?[ \t]*$",
    re.IGNORECASE | re.MULTILINE,
)
"""Un-emphasized header lines (``MAJOR DUTIES``, ``Conditions of Employment``).

Uploaded PDF/DOCX text loses its ``**`` markup; only whole lines naming a
standard section count.
"""

LOOSE_SUMMARY_RES: Final[Mapping[str, re.Pattern[str]]] = {
    "Total Points": re.compile(r"Total\s*Points[:\s]*(\d+)", re.IGNORECASE),
    "Final Grade": re.compile(r"Final\s*Grade[:\s]*(GS-?\d+)", re.IGNORECASE),
    "Grade Range": re.compile(r"Grade\s*Range[:\s]*(\d+-\d+|\d+\+)", re.IGNORECASE),
}

_FACTOR_ID_RE: Final = re.compile(r"^\s*(?:factor\s*)?([1-9])([AB])?\s*$", re.IGNORECASE)

NUMBERED_ITEM_RE: Final = re.compile(r"^\d+\.\s")
BULLET_ITEM_RE: Final = re.compile(r"^[*-]\s")


def summary_label(title: str) -> str | None:
    """Return the canonical summary label for ``title`` or ``None``."""
    match = SUMMARY_TITLE_RE.match(title)
    if not match:
        return None
    squashed = re.sub(r"\s+", "", match.group(1)).lower()
    return next(
        (label for label in SUMMARY_LABELS if label.replace(" ", "").lower() == squashed),
        None,
    )


def summary_title(label: str, value: str) -> str:
    """Render ``Total Points: 1745`` style titles with canonical spacing."""
    value = value.strip()
    if label == "Final Grade":
        grade = re.match(r"GS-?(\d+)$", value, re.IGNORECASE)
        value = f"GS-{grade.group(1)}" if grade else value
    return f"{label}: {value}"


def factor_key(title: str) -> tuple[str, str] | None:
    """Return ``(number, sub_letter)`` for factor titles, ``None`` otherwise."""
    match = FACTOR_TITLE_RE.match(title)
    if not match:
        return None
    return match.group(1), (match.group(2) or "").upper()


def factor_id(key: tuple[str, str]) -> str:
    """``("4", "A")`` -> ``"4A"``; plain factors keep the bare number."""
    return "".join(key)


def parse_factor_id(value: str) -> tuple[str, str] | None:
    """Inverse of :func:`factor_id`; accepts ``"Factor 4A"`` as well as ``"4A"``."""
    match = _FACTOR_ID_RE.match(value)
    if not match:
        return None
    return match.group(1), (match.group(2) or "").upper()


def plain_title(raw: str) -> str:
    """Canonical title for a :data:`PLAIN_HEADER_RE` match."""
    return " ".join(raw.split()).upper()


def is_major_duty_title(title: str) -> bool:
    return MAJOR_DUTY_TITLE_RE.match(title) is not None


def major_duty_number(title: str) -> int | None:
    """Return the duty number of ``MAJOR DUTY 3`` style titles."""
    match = MAJOR_DUTY_TITLE_RE.match(title)
    return int(match.group(1)) if match and match.group(1) else None


def level_suffix(level: str | None, points: str | int | None) -> str:
    """Return `` Level 1-7, 1250 Points`` or the shorter forms when parts are missing."""
    parts = []
    if level:
        parts.append(f" Level {level}")
    if points not in (None, ""):
        parts.append(f"{',' if level else ''} {points} Points")
    return "".join(parts)


def factor_sub_title(sub: str, level: str | None = None, points: str | int | None = None) -> str:
    """Canonical Factor 4A/4B title, keeping any detected level and points."""
    return FACTOR_SUB_LABELS[sub.upper()] + level_suffix(level, points)
