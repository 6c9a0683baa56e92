"""Raw text extraction for uploaded PD files (PDF, DOCX, TXT)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict

logger = logging.getLogger(__name__)


def _read_pdf(path: Path) -> str:
    import fitz  # PyMuPDF

    with fitz.open(str(path)) as doc:
        return "\n".join(page.get_text() for page in doc)


def _read_docx(path: Path) -> str:
    import docx  # python-docx

    return "\n".join(p.text for p in docx.Document(str(path)).paragraphs)


def _read_plain(path: Path) -> str:
    return path.read_text(encoding="utf-8")


_READERS: Dict[str, Callable[[Path], str]] = {
    ".pdf": _read_pdf,
    ".docx": _read_docx,
    ".txt": _read_plain,
    ".md": _read_plain,
}


def supported_suffixes() -> tuple[str, ...]:
    return tuple(_READERS)


def read_text(path: str | Path) -> str:
    """Return the raw text of ``path``, choosing the reader by suffix."""
    p = Path(path)
    reader = _READERS.get(p.suffix.lower())
    if reader is None:
        raise ValueError(
            f"unsupported file type {p.suffix or '(none)'!r}; "
            f"expected one of {', '.join(supported_suffixes())}"
        )
    if not p.exists():
        raise FileNotFoundError(f"input file not found: {p}")
    text = reader(p)
    logger.debug("read %d chars from %s", len(text), p.name)
    return text
