from __future__ import annotations

from functools import reduce
from typing import List

from pd_sections.section_patterns import BULLET_ITEM_RE, NUMBERED_ITEM_RE

TERMINAL_PUNCTUATION = (".", "!", "?", ")")


def _starts_item(line: str) -> bool:
    return bool(NUMBERED_ITEM_RE.match(line) or BULLET_ITEM_RE.match(line))


def _fold(paragraphs: List[str], line: str) -> List[str]:
    if not paragraphs or paragraphs[-1].endswith(TERMINAL_PUNCTUATION) or _starts_item(line):
        return [*paragraphs, line]
    return [*paragraphs[:-1], f"{paragraphs[-1]} {line}"]


def repair_paragraphs(content: str) -> str:
    """Rejoin lines broken mid-sentence into blank-line separated paragraphs.

    >>> repair_paragraphs("The employee performs\\ncomplex duties.\\n1. First duty")
    'The employee performs complex duties.\\n\\n1. First duty'
    """
    lines = [line.strip() for line in content.splitlines() if line.strip()]
    return "\n\n".join(reduce(_fold, lines, []))
