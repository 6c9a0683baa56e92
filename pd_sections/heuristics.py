"""Keyword heuristics for text that carries no recognisable headers."""

from __future__ import annotations

import logging
import re
from typing import List, Sequence, Tuple

from pd_sections.document import Document
from pd_sections.section_patterns import (
    ADDITIONAL_INFORMATION,
    FULL_DOCUMENT,
    HEADER,
    INTRODUCTION,
    MAJOR_DUTIES,
)
from pd_sections.splitter import split_plain_headers

logger = logging.getLogger(__name__)

HEADER_SCAN_LINES = 10
INTRO_SCAN_LINES = 10
SHORT_LINE = 50

INTRO_KEYWORDS = ("incumbent", "serves as", "responsible for", "position")
DUTY_KEYWORDS = ("major duties", "duties", "responsibilities", "performs", "provides")
DUTY_MARKERS = ("duty", "responsible")
DUTY_STOP_WORDS = ("factor", "condition", "title and series")

_WORD_DASH_WORD_RE = re.compile(r"^\w+\s*-\s*\w+")
_NUMBERED_RE = re.compile(r"^\d+\.")
_DUTY_ITEM_RE = re.compile(r"^\s*\d+\.\s", re.MULTILINE)
_DUTY_SPLIT_RE = re.compile(r"(?:^|\n)(\d+\.\s*.*?)(?=\n\d+\.\s*|$)", re.DOTALL)
_MAJOR_DUTY_KEY_RE = re.compile(r"^MAJORDUT(?:Y|IES)\d*$")
_SPLIT_DUTY_KEY_RE = re.compile(r"^MAJOR DUTY\s+\d+$", re.IGNORECASE)


def _is_header_line(line: str) -> bool:
    return (
        "Department" in line
        or "GS-" in line
        or bool(_WORD_DASH_WORD_RE.match(line))
        or (len(line) < SHORT_LINE and "." not in line)
    )


def _header_block(lines: Sequence[str]) -> List[int]:
    taken: List[int] = []
    for i, line in enumerate(lines[:HEADER_SCAN_LINES]):
        if not _is_header_line(line):
            break
        taken.append(i)
    return taken


def _intro_block(lines: Sequence[str], start: int) -> List[int]:
    taken: List[int] = []
    for i in range(start, min(start + INTRO_SCAN_LINES, len(lines))):
        line = lines[i]
        if any(k in line for k in INTRO_KEYWORDS):
            taken.append(i)
            if line.endswith("."):
                break
        elif taken:
            break
    return taken


def _starts_duties(line: str) -> bool:
    lower = line.lower()
    return any(k in lower for k in DUTY_KEYWORDS) and (
        bool(_NUMBERED_RE.match(lower)) or any(m in lower for m in DUTY_MARKERS)
    )


def _duties_block(lines: Sequence[str]) -> List[int]:
    start = next((i for i, line in enumerate(lines) if _starts_duties(line)), None)
    if start is None:
        return []
    taken: List[int] = []
    for i in range(start, len(lines)):
        if any(w in lines[i].lower() for w in DUTY_STOP_WORDS):
            break
        taken.append(i)
    return taken


def _identify(text: str) -> Tuple[Document, List[str]]:
    """Heuristic sections plus the lines none of them claimed."""
    lines = [line.strip() for line in text.split("\n") if line.strip()]
    header = _header_block(lines)
    intro = _intro_block(lines, len(header))
    duties = _duties_block(lines)

    doc = Document()
    if header:
        doc[HEADER] = "\n".join(lines[i] for i in header)
    if intro:
        doc[INTRODUCTION] = " ".join(lines[i] for i in intro)
    if duties:
        doc[MAJOR_DUTIES] = "\n".join(lines[i] for i in duties)
    claimed = {*header, *intro, *duties}
    return doc, [line for i, line in enumerate(lines) if i not in claimed]


def identify_basic_sections(text: str) -> Document:
    """Recover HEADER, INTRODUCTION and MAJOR DUTIES from unmarked text.

    Returns ``{"Full Document": text}`` when none of them can be found.
    """
    doc, _ = _identify(text)
    if not doc:
        return Document({FULL_DOCUMENT: text.strip()})
    logger.debug("heuristics identified %s", list(doc))
    return doc


def ensure_basic_sections(doc: Document) -> Document:
    """Replace a lone ``Full Document`` fallback with a real split.

    Plain (un-emphasized) header lines are tried first. Otherwise the keyword
    heuristics run, and lines they leave unclaimed are kept under
    ``ADDITIONAL INFORMATION``.
    """
    if FULL_DOCUMENT not in doc or HEADER in doc or INTRODUCTION in doc:
        return doc
    text = doc.content(FULL_DOCUMENT)
    identified = split_plain_headers(text)
    if identified:
        logger.debug("plain headers recovered %s", list(identified))
    else:
        identified, rest_lines = _identify(text)
        if not identified:
            return doc
        if rest_lines:
            identified[ADDITIONAL_INFORMATION] = "\n".join(rest_lines)
        logger.debug("heuristics identified %s", list(identified))
    rest = {t: s for t, s in doc.items() if t != FULL_DOCUMENT}
    return Document({**rest, **identified})


def _major_duty_keys(doc: Document) -> List[str]:
    return [
        t for t in doc if _MAJOR_DUTY_KEY_RE.match(re.sub(r"[^a-zA-Z0-9]", "", t).upper())
    ]


def should_split_major_duties(doc: Document) -> bool:
    """True when a combined duties section holds a numbered list to explode."""
    keys = _major_duty_keys(doc)
    if not keys or any(_SPLIT_DUTY_KEY_RE.match(t.strip()) for t in doc):
        return False
    return any(_DUTY_ITEM_RE.search(doc.content(k)) for k in keys)


def split_major_duties(doc: Document) -> Document:
    """Explode the first duties section into ``MAJOR DUTY 1..N``.

    Every duties-titled section is replaced, at the position of the first,
    when the list holds at least two numbered items.
    """
    keys = _major_duty_keys(doc)
    if not keys or not doc.content(keys[0]):
        return doc
    items = [m.group(1).strip() for m in _DUTY_SPLIT_RE.finditer(doc.content(keys[0]))]
    if len(items) < 2:
        return doc
    out = Document()
    for title, section in doc.items():
        if title == keys[0]:
            for n, item in enumerate(items, start=1):
                out[f"MAJOR DUTY {n}"] = item
        elif title not in keys:
            out[title] = section
    return out
