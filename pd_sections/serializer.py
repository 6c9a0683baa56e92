"""Reassemble a :class:`Document` into canonical PD text.

Blocks are ``**TITLE**`` followed by a blank line and the content, with one
blank line between blocks. Summary sections carry their value in the title
and are always emitted header-only.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Final, Iterable, List, Mapping

from pd_sections.document import Document, Section
from pd_sections.lookup import canonical_order
from pd_sections.section_patterns import FULL_DOCUMENT, HEADER_FIELD_LABELS

logger = logging.getLogger(__name__)

GENERATED: Final = "generated"
UPDATED: Final = "updated"
MODES: Final = (GENERATED, UPDATED)

_FIELD_BREAK_RE = re.compile(
    r"(?:\s+|(?<=\S))(?<!Lowest )(?=(?:"
    + "|".join(re.escape(label) for label in HEADER_FIELD_LABELS)
    + r"):)"
)
_DUTY_ITEM_BREAK_RE = re.compile(r"(?<=\S)\s+(?=\d{1,2}\.\s)")
_TRAILING_SPACE_RE = re.compile(r"[ \t]+$", re.MULTILINE)
_BLANK_RUN_RE = re.compile(r"\n{3,}")


def explode_header_fields(content: str) -> str:
    """Start every known header field label on its own line.

    >>> explode_header_fields("Job Series: GS-0301Position Title: AnalystAgency: DOD")
    'Job Series: GS-0301\\nPosition Title: Analyst\\nAgency: DOD'
    """
    return _FIELD_BREAK_RE.sub("\n", content).strip()


def break_duty_items(content: str) -> str:
    """Force ``N. `` list markers onto their own paragraph."""
    return _DUTY_ITEM_BREAK_RE.sub("\n\n", content)


def _body(section: Section) -> str:
    content = section.content.strip()
    kind = section.kind
    if kind == "header":
        return explode_header_fields(content)
    if kind in ("major_duties", "major_duty"):
        return break_duty_items(content)
    return content


def render_block(section: Section, mode: str = GENERATED) -> str | None:
    """Render one section; ``None`` when the section is omitted in ``mode``."""
    if section.kind == "summary":
        return f"**{section.title}**"
    if section.title == FULL_DOCUMENT:
        return section.content.strip() or None
    body = _body(section)
    if not body:
        return f"**{section.title}**" if mode == GENERATED else None
    return f"**{section.title}**\n\n{body}"


def _final_whitespace(text: str) -> str:
    return _BLANK_RUN_RE.sub("\n\n", _TRAILING_SPACE_RE.sub("", text)).strip()


def _blocks(doc: Document, titles: Iterable[str], mode: str) -> List[str]:
    rendered = (render_block(doc[t], mode) for t in titles)
    return [block for block in rendered if block]


def serialize(doc: Document | Mapping[str, Any], mode: str = GENERATED) -> str:
    """Return canonical text for ``doc``; ``mode`` is ``generated`` or ``updated``.

    Plain mappings (bare strings or ``{"content", "header"}`` values) are
    accepted and converted with :meth:`Document.from_mapping`.

    ``generated`` keeps empty sections as bare headers, ``updated`` drops
    them. Output is stable: serializing an unchanged document twice gives
    identical text.
    """
    if mode not in MODES:
        raise ValueError(f"unknown serialize mode: {mode!r} (expected one of {MODES})")
    if not isinstance(doc, Document):
        doc = Document.from_mapping(doc)
    titles = canonical_order(list(doc))
    logger.debug("serialize order: %s", titles)
    return _final_whitespace("\n\n".join(_blocks(doc, titles, mode)))
