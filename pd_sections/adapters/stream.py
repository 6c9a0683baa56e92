"""Accumulate a server-sent generation stream into the full document text.

Each event line looks like ``data: {"response": "..."}``. A ``fullPD``
payload replaces everything received so far; an ``error`` payload aborts.
Lines that are not complete JSON are skipped, as partial writes are expected
while the producer is still flushing.
"""

from __future__ import annotations

import codecs
import json
import logging
from typing import Iterable, Iterator

from pd_sections.errors import StreamError

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "


def iter_lines(chunks: Iterable[str | bytes]) -> Iterator[str]:
    """Yield complete lines from ``chunks``, buffering partial lines across chunks."""
    decoder = codecs.getincrementaldecoder("utf-8")()
    buffer = ""
    for chunk in chunks:
        buffer += decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
        *lines, buffer = buffer.split("\n")
        yield from lines
    buffer += decoder.decode(b"", final=True)
    if buffer:
        yield buffer


def _event(line: str) -> dict | None:
    stripped = line.strip()
    if not stripped.startswith(DATA_PREFIX):
        return None
    try:
        payload = json.loads(stripped[len(DATA_PREFIX) :])
    except json.JSONDecodeError:
        logger.debug("skipping undecodable stream line: %r", stripped[:80])
        return None
    return payload if isinstance(payload, dict) else None


def accumulate_stream(chunks: Iterable[str | bytes]) -> str:
    """Return the generated text carried by a finished stream."""
    text = ""
    for line in iter_lines(chunks):
        event = _event(line)
        if event is None:
            continue
        if event.get("error"):
            raise StreamError(str(event["error"]))
        if event.get("fullPD"):
            text = str(event["fullPD"])
        elif event.get("response"):
            text += str(event["response"])
    return text
