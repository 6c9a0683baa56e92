"""Per-section edit/undo state and the factor recompute cascade.

A :class:`SectionRegistry` owns the current :class:`Document` together with
its satellite edit state: an undo stack and an append-only history for every
section, keyed by the section's *current* title. When a cascade renames
factor or summary titles the satellite entries follow the new titles and
entries for titles that no longer exist are discarded.

:class:`EditingSession` bundles one registry with the raw text it was parsed
from, so a whole document can be reset without module-level state.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping

from pd_sections.document import Document
from pd_sections.errors import CascadeError, RegistryError, SaveError
from pd_sections.grading import RecomputeResult, factor_title
from pd_sections.section_patterns import (
    SUMMARY_LABELS,
    factor_id,
    factor_key,
    factor_sub_title,
    parse_factor_id,
    summary_label,
    summary_title,
)

logger = logging.getLogger(__name__)

Recompute = Callable[[Mapping[str, str]], RecomputeResult]
"""Collaborator contract: ``{"Factor N": content}`` in, scores and summaries out.

Lettered factors keep their letter (``Factor 4A``, ``Factor 4B``).
"""

CASCADE_KINDS = frozenset({"factor", "major_duties", "major_duty"})

_BLANK_RUN_RE = re.compile(r"\n{3,}")
_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]")


class State(str, Enum):
    VIEWING = "viewing"
    EDITING = "editing"


@dataclass(frozen=True)
class HistoryEntry:
    content: str
    header: str
    timestamp: float


def section_id(title: str) -> str:
    """Identifier form of a title: alphanumerics only, lower-cased."""
    return _NON_ALNUM_RE.sub("", title).lower()


def clean_saved_content(content: str) -> str:
    text = content.replace("\r\n", "\n").replace("\r", "\n").strip()
    return _BLANK_RUN_RE.sub("\n\n", text)


def _factor_title_for(titles: Iterable[str], key: tuple[str, str]) -> str | None:
    """Title whose factor key is exactly ``key``; ``Factor 4`` never matches 4A/4B."""
    return next((t for t in titles if factor_key(t) == key), None)


def _rebuilt_factor_title(key: tuple[str, str], level: str, points: int) -> str:
    number, sub = key
    if sub:
        return factor_sub_title(sub, level, points)
    return factor_title(number, level, points)


class SectionRegistry:
    """Edit/undo state machine over one document."""

    def __init__(
        self,
        document: Document,
        recompute: Recompute | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.document = document
        self.recompute = recompute
        self.stacks: Dict[str, List[str]] = {}
        self.history: Dict[str, List[HistoryEntry]] = {}
        self._states: Dict[str, State] = {}
        self._clock = clock

    # -- lookup ---------------------------------------------------------------

    def resolve_title(self, title: str) -> str | None:
        """Current key for ``title``: exact, id form, case, factor number, summary kind."""
        if not title:
            return None
        if title in self.document:
            return title
        titles = list(self.document)
        wanted_id = section_id(title)
        lowered = title.lower()
        key = factor_key(title)
        label = summary_label(title) or (title if title in SUMMARY_LABELS else None)
        candidates = (
            next((t for t in titles if section_id(t) == wanted_id), None),
            next((t for t in titles if t.lower() == lowered), None),
            _factor_title_for(self.document, key) if key else None,
            next((t for t in titles if label and summary_label(t) == label), None),
        )
        return next((c for c in candidates if c is not None), None)

    def _require(self, title: str) -> str:
        key = self.resolve_title(title)
        if key is None:
            raise RegistryError(f"no section titled {title!r}")
        return key

    def state(self, title: str) -> State:
        key = self.resolve_title(title)
        return self._states.get(key or title, State.VIEWING)

    def _stack(self, key: str) -> List[str]:
        return self.stacks.setdefault(key, [self.document.content(key)])

    # -- transitions ----------------------------------------------------------

    def begin_edit(self, title: str) -> str:
        """VIEWING -> EDITING; returns the content to show in the editor."""
        key = self._require(title)
        stack = self._stack(key)
        self._states[key] = State.EDITING
        return stack[-1]

    def stage(self, title: str, content: str) -> None:
        """Record an in-progress snapshot for later undo."""
        key = self._require(title)
        stack = self._stack(key)
        if stack[-1] != content:
            stack.append(content)
        self._states[key] = State.EDITING

    def cancel(self, title: str) -> str:
        """Drop the in-progress edit and return the last saved content."""
        key = self._require(title)
        self._states[key] = State.VIEWING
        return self.document.content(key)

    def undo(self, title: str) -> str:
        """Pop the latest snapshot (keeping at least one) and return the new top."""
        key = self._require(title)
        stack = self._stack(key)
        if len(stack) > 1:
            stack.pop()
        self._states[key] = State.VIEWING
        return stack[-1]

    def reset_section(self, title: str) -> str:
        """Collapse the undo stack to its original entry and return it."""
        key = self._require(title)
        first = self._stack(key)[0]
        self.stacks[key] = [first]
        self._states[key] = State.VIEWING
        return first

    def save(self, title: str, content: str) -> str:
        """Commit ``content`` and return the section's title after any cascade.

        Summary sections are derived values and cannot be saved. Saving a
        factor or duties section runs the recompute cascade when a collaborator
        is configured; its failure raises :class:`CascadeError` after the edit
        itself has been committed.
        """
        key = self._require(title)
        if summary_label(key):
            raise SaveError(f"summary section {key!r} is read-only")
        text = clean_saved_content(content)
        self.history.setdefault(key, []).append(HistoryEntry(text, key, self._clock()))
        self.stacks[key] = [text]
        self.document[key] = text
        self._states[key] = State.VIEWING
        logger.debug("saved %r (%d chars)", key, len(text))

        if self.recompute is None or self.document[key].kind not in CASCADE_KINDS:
            return key
        renamed = self._cascade(key, self.recompute)
        return renamed.get(key, key)

    # -- cascade --------------------------------------------------------------

    def factor_contents(self) -> Dict[str, str]:
        """``{"Factor 1": ..., "Factor 4A": ...}`` for every factor with content."""
        contents: Dict[str, str] = {}
        for title in self.document:
            key = factor_key(title)
            content = self.document.content(title)
            if key and content.strip():
                contents.setdefault(f"Factor {factor_id(key)}", content)
        return contents

    def _cascade(self, saved: str, recompute: Recompute) -> Dict[str, str]:
        try:
            result = recompute(self.factor_contents())
        except Exception as exc:
            logger.warning("factor recompute failed after saving %r: %s", saved, exc)
            raise CascadeError(saved, f"recompute failed: {exc}") from exc

        updated, renamed = apply_recompute(self.document, result)
        self.document = updated
        self._migrate(renamed)
        logger.debug("cascade renamed %s", renamed)
        return renamed

    def _migrate(self, renamed: Mapping[str, str]) -> None:
        """Re-key satellite state to new titles and discard orphans."""

        def rekey(store: Dict[str, List]) -> Dict[str, List]:
            moved = {renamed.get(t, t): entries for t, entries in store.items()}
            return {t: entries for t, entries in moved.items() if t in self.document}

        self.stacks = rekey(self.stacks)
        self.history = rekey(self.history)
        self._states = {
            renamed.get(t, t): s
            for t, s in self._states.items()
            if renamed.get(t, t) in self.document
        }


def apply_recompute(doc: Document, result: RecomputeResult) -> tuple[Document, Dict[str, str]]:
    """Return a new document with factor and summary titles from ``result``.

    The second value maps every old title that changed to its new title.
    """
    updated = doc.copy()
    renamed: Dict[str, str] = {}

    for name, score in result.factors.items():
        key = parse_factor_id(name)
        if key is None:
            logger.warning("recompute returned unknown factor %r", name)
            continue
        title = _rebuilt_factor_title(key, score.level, score.points)
        current = _factor_title_for(updated, key)
        if current is None:
            updated[title] = score.content or ""
            continue
        content = score.content if score.content is not None else updated.content(current)
        updated.rename(current, title, content)
        if current != title:
            renamed[current] = title

    values = (result.total_points, result.final_grade, result.grade_range)
    for label, value in zip(SUMMARY_LABELS, values):
        title = summary_title(label, str(value))
        existing = [t for t in updated if summary_label(t) == label]
        if not existing:
            updated[title] = ""
            continue
        updated.rename(existing[0], title, "")
        for stale in existing[1:]:
            del updated[stale]
        renamed.update({old: title for old in existing if old != title})
    return updated, renamed


@dataclass
class EditingSession:
    """One document being edited, plus the text it was parsed from."""

    source: str
    parse: Callable[[str], Document]
    recompute: Recompute | None = None
    registry: SectionRegistry = field(init=False)

    def __post_init__(self) -> None:
        self.registry = SectionRegistry(self.parse(self.source), self.recompute)

    @property
    def document(self) -> Document:
        return self.registry.document

    def reset(self, source: str | None = None) -> Document:
        """Re-parse ``source`` (or the original text) and drop all edit state."""
        if source is not None:
            self.source = source
        self.registry = SectionRegistry(self.parse(self.source), self.recompute)
        return self.document
