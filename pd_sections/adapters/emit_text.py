from __future__ import annotations

import json
import re
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from pd_sections.document import Document
from pd_sections.section_patterns import MAJOR_DUTIES, NUMBERED_ITEM_RE

_BLOCK_BREAK_RE = re.compile(r"\n\s*\n")
_ITEM_SPLIT_RE = re.compile(r"\s+(?=\d{1,2}\.\s)")


def _rows(doc: Document) -> Iterator[dict[str, Any]]:
    """Yield one ``{"title", "content"}`` row per section in document order."""
    return ({"title": t, "content": c} for t, c in doc.as_dict().items())


def _serialize(rows: Iterable[dict[str, Any]]) -> Iterator[str]:
    return (json.dumps(r, ensure_ascii=False) for r in rows)


def _write(path: str | Path, lines: Iterable[str]) -> None:
    """Write ``lines`` to ``path`` with trailing newlines."""
    path_obj = Path(path)
    path_obj.parent.mkdir(parents=True, exist_ok=True)
    with path_obj.open("w", encoding="utf-8") as f:
        f.writelines(f"{line}\n" for line in lines)


def write_text(text: str, path: str | Path) -> None:
    path_obj = Path(path)
    path_obj.parent.mkdir(parents=True, exist_ok=True)
    path_obj.write_text(text if text.endswith("\n") else f"{text}\n", encoding="utf-8")


def write_sections_jsonl(doc: Document, path: str | Path | None) -> None:
    """Write ``doc`` as JSONL rows at ``path`` when provided."""
    if not path:
        return
    _write(path, _serialize(_rows(doc)))


def sections_jsonl(doc: Document) -> str:
    return "\n".join(_serialize(_rows(doc)))


def _explode_items(block: str) -> list[str]:
    parts = [p.strip() for p in _ITEM_SPLIT_RE.split(block) if p.strip()]
    return parts if any(NUMBERED_ITEM_RE.match(p) for p in parts) else [block]


def docx_blocks(text: str) -> list[str]:
    """Split canonical text into export paragraphs.

    Blocks are separated by blank lines. Inside ``MAJOR DUTIES`` every
    numbered item becomes its own paragraph.
    """
    blocks = [b.strip() for b in _BLOCK_BREAK_RE.split(text) if b.strip()]
    out: list[str] = []
    in_duties = False
    for block in blocks:
        if block.startswith("**") and block.endswith("**"):
            in_duties = block.strip("*").strip() == MAJOR_DUTIES
            out.append(block)
            continue
        out.extend(_explode_items(block) if in_duties else [block])
    return out
