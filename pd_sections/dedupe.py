"""Collapse stale duplicates left behind by repeated section regeneration."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, List, Set

from pd_sections.document import Document, Section
from pd_sections.section_patterns import (
    factor_id,
    factor_key,
    summary_label,
)

logger = logging.getLogger(__name__)


def _dedupe_key(section: Section) -> tuple[str, object] | None:
    """Group key for sections where only the first occurrence survives."""
    if section.kind in ("major_duties", "major_duty"):
        return "duty", section.number
    label = summary_label(section.title)
    if label:
        return "summary", label
    return None


def dedupe(doc: Document) -> Document:
    """Return a copy of ``doc`` keeping the first title of each duty/summary group.

    Later major duty titles with the same number (or none) and later summary
    titles with the same prefix are dropped with their content. Factor
    sections are never removed; see :func:`duplicate_factors`.
    """
    seen: Set[tuple[str, object]] = set()
    out = Document()
    for title, section in doc.items():
        key = _dedupe_key(section)
        if key is not None and key in seen:
            logger.debug("dedupe dropped %r", title)
            continue
        if key is not None:
            seen.add(key)
        out[title] = section
    return out


def duplicate_factors(doc: Document) -> Dict[str, List[str]]:
    """Return ``{"Factor N": [titles...]}`` for factors titled more than once."""
    groups: Dict[str, List[str]] = defaultdict(list)
    for title in doc:
        key = factor_key(title)
        if key:
            groups[f"Factor {factor_id(key)}"].append(title)
    return {k: titles for k, titles in groups.items() if len(titles) > 1}
