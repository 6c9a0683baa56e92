"""Partition normalized PD text into an ordered :class:`Document`.

Header detection is a single left-to-right scan with
:data:`~pd_sections.section_patterns.SECTION_HEADER_RE`; content for each
header runs up to the next header. Canonicalization of factor sub-titles,
loose summary extraction and the HEADER fallback run afterwards on the
resulting mapping. :func:`split_plain_headers` is the fallback scan for
uploads whose headers carry no emphasis.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator, List, Tuple

from pd_sections.document import Document
from pd_sections.section_patterns import (
    FULL_DOCUMENT,
    HEADER,
    LOOSE_SUMMARY_RES,
    PLAIN_HEADER_RE,
    SECTION_HEADER_RE,
    SUMMARY_LABELS,
    factor_sub_title,
    plain_title,
    summary_label,
    summary_title,
)

logger = logging.getLogger(__name__)

HEADER_FALLBACK_LINES = 8

_STRAY_EMPHASIS_RE = re.compile(r"^[ \t]*\*\*[ \t]*|[ \t]*\*\*[ \t]*$", re.MULTILINE)
_SPACE_RUN_RE = re.compile(r"\s+")


def _preview(s: str, n: int = 60) -> str:
    return repr(s[:n])


def clean_title(raw: str) -> str:
    """Strip emphasis and a trailing colon; collapse inner whitespace."""
    title = _SPACE_RUN_RE.sub(" ", raw.replace("*", "")).strip()
    return title[:-1].rstrip() if title.endswith(":") else title


def clean_content(raw: str) -> str:
    """Trim ``raw`` and drop stray ``**`` at line starts and ends."""
    return _STRAY_EMPHASIS_RE.sub("", raw.strip()).strip()


def _level(match: re.Match[str]) -> str | None:
    a, b = match.group("la"), match.group("lb")
    return f"{a.upper()}-{b}" if a and b else None


def title_for(match: re.Match[str]) -> str:
    """Return the canonical section title for one header match."""
    if match.group("summary"):
        label = summary_label(f"{match.group('slabel')}:") or match.group("slabel")
        return summary_title(label, match.group("svalue"))
    if match.group("factor"):
        sub = match.group("fsub")
        if sub:
            return factor_sub_title(sub, _level(match), match.group("pts"))
        return clean_title(match.group("factor"))
    return clean_title(match.group("bold"))


def iter_headers(text: str) -> Iterator[Tuple[str, re.Match[str]]]:
    """Yield ``(title, match)`` for every header in ``text``, in order."""
    for match in SECTION_HEADER_RE.finditer(text):
        title = title_for(match)
        if title:
            yield title, match


def _non_blank_lines(text: str) -> List[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def _header_fallback(text: str, first_header_at: int | None, limit: int) -> str:
    """First ``limit`` non-blank lines of the preamble, else of the text.

    When the text opens with a header, header lines are skipped and emphasis
    is stripped so the fallback never repeats markup.
    """
    preamble = text[:first_header_at] if first_header_at is not None else text
    lines = _non_blank_lines(preamble)
    if not lines:
        lines = [
            clean_content(line)
            for line in _non_blank_lines(text)
            if not SECTION_HEADER_RE.fullmatch(line.strip())
        ]
        lines = [line for line in lines if line]
    return "\n".join(lines[:limit])


def _add_loose_summaries(doc: Document, text: str) -> None:
    """Synthesize summary sections found only as loose phrases."""
    present = {summary_label(title) for title in doc}
    for label in SUMMARY_LABELS:
        if label in present:
            continue
        match = LOOSE_SUMMARY_RES[label].search(text)
        if match:
            title = summary_title(label, match.group(1))
            logger.debug("loose summary synthesized: %s", title)
            doc[title] = ""


def split(normalized: str, *, header_fallback_lines: int = HEADER_FALLBACK_LINES) -> Document:
    """Partition ``normalized`` text into a :class:`Document`.

    Never raises: text without any header becomes a single
    ``"Full Document"`` section.
    """
    text = normalized.strip()
    headers = list(iter_headers(text))
    if not headers:
        logger.debug("no headers found in %s", _preview(text))
        return Document({FULL_DOCUMENT: text})

    doc = Document()
    bounds = [m.start() for _, m in headers[1:]] + [len(text)]
    for (title, match), end in zip(headers, bounds):
        doc[title] = clean_content(text[match.end() : end])

    _add_loose_summaries(doc, text)
    if HEADER not in doc:
        fallback = _header_fallback(text, headers[0][1].start(), header_fallback_lines)
        if fallback:
            doc = Document({HEADER: fallback, **doc})
    logger.debug("split produced %d sections: %s", len(doc), list(doc))
    return doc


def split_plain_headers(text: str) -> Document:
    """Partition text whose header lines lost their emphasis.

    Only whole lines naming a standard section count as headers. Text ahead
    of the first one becomes ``HEADER``; the first non-empty body wins when a
    title repeats. Returns an empty :class:`Document` when no header is found.
    """
    text = text.strip()
    matches = list(PLAIN_HEADER_RE.finditer(text))
    doc = Document()
    if not matches:
        return doc
    preamble = clean_content(text[: matches[0].start()])
    if preamble:
        doc[HEADER] = preamble
    bounds = [m.start() for m in matches[1:]] + [len(text)]
    for match, end in zip(matches, bounds):
        title = plain_title(match.group("plain"))
        content = clean_content(text[match.end() : end])
        if content and title not in doc:
            doc[title] = content
    logger.debug("plain headers produced %d sections: %s", len(doc), list(doc))
    return doc
