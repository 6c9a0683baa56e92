"""OPM factor evaluation tables: level points, level correction and grade mapping.

AI evaluators return factor levels in loose shapes (``"3"``, ``"3-4"`` for
factor 2, ``"1-12"``). :func:`correct_level` coerces them into a level that
exists for the factor before points are looked up.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Final, Mapping, Tuple

from pd_sections.section_patterns import FACTOR_NAMES

logger = logging.getLogger(__name__)

FACTOR_POINTS: Final[Mapping[str, Tuple[int, ...]]] = {
    "1": (50, 200, 350, 550, 750, 950, 1250, 1550, 1850),
    "2": (25, 125, 275, 450, 650),
    "3": (25, 125, 275, 450, 650),
    "4": (25, 75, 150, 225, 325, 450),
    "5": (25, 75, 150, 225, 325, 450),
    "6": (10, 25, 60, 110),
    "7": (20, 50, 120, 220),
    "8": (5, 20, 50),
    "9": (5, 20, 50),
    # supervisory guide contacts factors
    "4A": (25, 50, 75, 100),
    "4B": (30, 75, 100, 125),
}

# (low, high, grade); high of None is open-ended
GRADE_BANDS: Final = (
    (855, 1100, "GS-05"),
    (1101, 1600, "GS-07"),
    (1601, 2100, "GS-09"),
    (2101, 2750, "GS-11"),
    (2751, 3150, "GS-12"),
    (3151, 3600, "GS-13"),
    (3601, 4050, "GS-14"),
    (4051, None, "GS-15"),
)

UNKNOWN: Final = "Unknown"

_INT_RE = re.compile(r"^-?\d+$")
_FACTOR_RE = re.compile(r"^\d+[AB]?$", re.IGNORECASE)


def max_level(factor: str) -> int:
    points = FACTOR_POINTS.get(str(factor))
    if points is None:
        logger.warning("unknown factor number: %s", factor)
        return 1
    return len(points)


def _clamp(factor: str, level: int) -> str:
    return f"{factor}-{max(1, min(level, max_level(factor)))}"


def correct_level(factor: str | int, level: str | None) -> str:
    """Return a valid ``F-L`` level for ``factor`` from an AI-provided ``level``.

    Empty or unparsable input falls back to the lowest level. A bare number is
    treated as the level. A mismatched factor prefix keeps the level number.
    Out-of-range levels are clamped.
    """
    f = str(factor).upper()
    raw = (level or "").strip()
    if not raw:
        return f"{f}-1"
    if "-" not in raw:
        return _clamp(f, int(raw)) if _INT_RE.match(raw) else f"{f}-1"
    parts = [p.strip() for p in raw.split("-")]
    if len(parts) != 2 or not _FACTOR_RE.match(parts[0]) or not _INT_RE.match(parts[1]):
        logger.debug("invalid level format %r for factor %s", raw, f)
        return f"{f}-1"
    given, number = parts[0].upper(), int(parts[1])
    if given != f:
        logger.debug("factor prefix mismatch: %r for factor %s", raw, f)
    return _clamp(f, number)


def points_for(level: str) -> int | None:
    """Points for a corrected ``F-L`` level, ``None`` when it does not exist."""
    factor, _, number = level.partition("-")
    table = FACTOR_POINTS.get(factor)
    if table is None or not number.isdigit() or not 1 <= int(number) <= len(table):
        return None
    return table[int(number) - 1]


def _band(points: int) -> Tuple[int, int | None, str] | None:
    return next(
        (b for b in GRADE_BANDS if points >= b[0] and (b[1] is None or points <= b[1])),
        None,
    )


def final_grade(points: int) -> str:
    band = _band(points)
    return band[2] if band else UNKNOWN


def grade_range(points: int) -> str:
    band = _band(points)
    if band is None:
        return UNKNOWN
    low, high, _ = band
    return f"{low}+" if high is None else f"{low}-{high}"


def factor_title(number: str | int, level: str | None = None, points: int | None = None) -> str:
    """Canonical factor header: ``Factor 3 - Guidelines Level 3-2, 125 Points``."""
    n = str(number)
    title = f"Factor {n}"
    name = FACTOR_NAMES.get(n)
    if name:
        title += f" - {name}"
    if level:
        title += f" Level {level}"
    if points:
        title += f", {points} Points"
    return title


@dataclass(frozen=True)
class FactorScore:
    level: str
    points: int
    rationale: str = ""
    content: str | None = None


@dataclass(frozen=True)
class RecomputeResult:
    """Outcome of a factor recompute: per-factor scores plus summary values."""

    factors: Mapping[str, FactorScore]
    total_points: int
    final_grade: str
    grade_range: str
    warnings: Tuple[str, ...] = field(default_factory=tuple)


def score_factors(
    levels: Mapping[str, Mapping[str, str] | str],
    contents: Mapping[str, str] | None = None,
) -> RecomputeResult:
    """Score ``{"Factor N": {"level": ..., "rationale": ...}}`` into a result.

    Factors without a level or with an unknown number are skipped with a
    warning, as are levels that still have no points after correction.
    """
    factors: Dict[str, FactorScore] = {}
    warnings = []
    for key, data in levels.items():
        number = key.replace("Factor", "").strip().upper()
        entry = data if isinstance(data, Mapping) else {"level": data}
        given = str(entry.get("level") or "").strip()
        if not given:
            warnings.append(f"No level provided for factor {number}")
            continue
        if number not in FACTOR_POINTS:
            warnings.append(f"Unknown factor number: {number}")
            continue
        level = correct_level(number, given)
        if level != given:
            warnings.append(f"Corrected level for factor {number}: {given} -> {level}")
        points = points_for(level)
        if points is None:
            warnings.append(f"Invalid level '{level}' for factor {number} after correction")
            continue
        factors[f"Factor {number}"] = FactorScore(
            level=level,
            points=points,
            rationale=str(entry.get("rationale") or ""),
            content=(contents or {}).get(f"Factor {number}"),
        )
    total = sum(score.points for score in factors.values())
    for warning in warnings:
        logger.info("score_factors: %s", warning)
    return RecomputeResult(
        factors=factors,
        total_points=total,
        final_grade=final_grade(total),
        grade_range=grade_range(total),
        warnings=tuple(warnings),
    )
