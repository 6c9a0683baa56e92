"""normalizer

Public API:
- normalize
- normalize_newlines
- normalize_whitespace_chars
- normalize_dashes
- repair_factor_tokens
- repair_level_tokens
- collapse_spaces
- collapse_blank_lines

Notes:
- Functions are pure and never raise; unrecognised text passes through.
- Composition uses `pipe()` so the order of repairs reads top to bottom.
- ``normalize`` is idempotent: every repair produces text its own pattern
  no longer matches.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, TypeVar

import ftfy

logger = logging.getLogger(__name__)

T = TypeVar("T")

PREVIEW_LEN = 100


def pipe(value: T, *funcs: Callable[[T], T]) -> T:
    """Left-to-right function composition for a single value."""
    for fn in funcs:
        value = fn(value)
    return value


def _preview(s: str, n: int = PREVIEW_LEN) -> str:
    """Safe preview for logs."""
    return repr(s[:n])


# ---------------------------------------------------------------------------
# Character tables
# ---------------------------------------------------------------------------

_SPACE_TRANSLATION = {
    ord("\u00a0"): " ",  # non-breaking space
    ord("\u2002"): " ",  # en space
    ord("\u2003"): " ",  # em space
    ord("\u2007"): " ",  # figure space
    ord("\u2009"): " ",  # thin space
    ord("\u202f"): " ",  # narrow no-break space
    ord("\ufeff"): "",  # zero-width no-break space
    ord("\u200b"): "",  # zero-width space
    ord("\u200c"): "",  # zero-width non-joiner
    ord("\u200d"): "",  # zero-width joiner
    ord("\u2060"): "",  # word joiner
}

_DASH_TRANSLATION = {
    ord("\u2012"): "-",  # figure dash
    ord("\u2013"): "-",  # en dash
    ord("\u2014"): "-",  # em dash
    ord("\u2015"): "-",  # horizontal bar
    ord("\u2212"): "-",  # minus sign
}

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

SPACE_RUN_RE = re.compile(r"[ \t]+")
TRAILING_SPACE_RE = re.compile(r"[ \t]+$", re.MULTILINE)
BLANK_RUN_RE = re.compile(r"\n{3,}")

# Factor4A -> Factor 4A
FACTOR_DIGIT_RE = re.compile(r"\b((?i:factor))(?=[1-9])")
# Factor 3Guidelines -> Factor 3 Guidelines; keeps the 4A/4B sub letter
FACTOR_WORD_RE = re.compile(
    r"\b((?i:factor) [1-9])([AB](?![a-z])|(?![AB](?![a-z])))(?=[A-Za-z])"
)
# GuidelinesLevel3 -> Guidelines Level3
LEVEL_GLUE_RE = re.compile(r"(?<=[a-z)])(?=Level ?\d)")
# Level3 -> Level 3
LEVEL_DIGIT_RE = re.compile(r"(?<![A-Za-z])(Level)(?=\d)")
# 1250Points -> 1250 Points
POINTS_GLUE_RE = re.compile(r"(\d)(?=Points\b)")
# Level 1-71250, 0 Points -> Level 1-7, 1250 Points (3-4 digit totals only)
FUSED_LEVEL_RE = re.compile(
    r"\bLevel ?(\d)-(\d)(\d{3,4})(?!\d)(?: ?, ?0+)? ?Points\b"
)
# Level1-7,1250 Points / Level 1-7 1250 Points -> Level 1-7, 1250 Points
LEVEL_COMMA_RE = re.compile(r"\bLevel ?(\d)-(\d)(?: ?, ?| )(\d+) ?Points\b")


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------


def fix_mojibake(text: str) -> str:
    """Repair encoding damage (``â€“`` and friends) before pattern matching."""
    return ftfy.fix_text(text)


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def normalize_whitespace_chars(text: str) -> str:
    """Map NBSP-like spaces to ``' '`` and drop zero-width characters."""
    return text.translate(_SPACE_TRANSLATION)


def normalize_dashes(text: str) -> str:
    return text.translate(_DASH_TRANSLATION)


def collapse_spaces(text: str) -> str:
    """Collapse space/tab runs and drop trailing spaces on every line."""
    return TRAILING_SPACE_RE.sub("", SPACE_RUN_RE.sub(" ", text))


def collapse_blank_lines(text: str) -> str:
    return BLANK_RUN_RE.sub("\n\n", text)


def repair_factor_tokens(text: str) -> str:
    """Split ``Factor`` from a fused number and the number from a fused word."""
    return pipe(
        text,
        lambda t: FACTOR_DIGIT_RE.sub(r"\1 ", t),
        lambda t: FACTOR_WORD_RE.sub(r"\1\2 ", t),
    )


def _canonical_level(a: str, b: str, points: str) -> str:
    return f"Level {a}-{b}, {points} Points"


def _unfuse_level(match: re.Match[str]) -> str:
    a, b, points = match.groups()
    logger.debug("unfused level declaration %s", _preview(match.group(0)))
    return _canonical_level(a, b, points)


def repair_level_tokens(text: str) -> str:
    """Repair ``Level``/``Points`` declarations damaged by generation or extraction."""
    return pipe(
        text,
        lambda t: LEVEL_GLUE_RE.sub(" ", t),
        lambda t: LEVEL_DIGIT_RE.sub(r"\1 ", t),
        lambda t: POINTS_GLUE_RE.sub(r"\1 ", t),
        lambda t: FUSED_LEVEL_RE.sub(_unfuse_level, t),
        lambda t: LEVEL_COMMA_RE.sub(lambda m: _canonical_level(*m.groups()), t),
    )


def normalize(raw: str) -> str:
    """Return ``raw`` with whitespace, dashes and fused tokens repaired."""
    if not raw:
        return ""
    logger.debug("normalize input: %s", _preview(raw))
    result = pipe(
        raw,
        fix_mojibake,
        normalize_newlines,
        normalize_whitespace_chars,
        normalize_dashes,
        collapse_spaces,
        repair_factor_tokens,
        repair_level_tokens,
        collapse_spaces,
        collapse_blank_lines,
    )
    logger.debug("normalize output: %s", _preview(result))
    return result
