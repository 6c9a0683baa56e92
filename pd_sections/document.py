from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any, Dict

from pd_sections.section_patterns import (
    FACTOR_EVALUATION,
    HEADER,
    INTRODUCTION,
    TRAILING_SECTIONS,
    factor_key,
    is_major_duty_title,
    major_duty_number,
    summary_label,
)


@dataclass(frozen=True)
class Section:
    """Immutable title/content record owned by a :class:`Document`."""

    title: str
    content: str = ""

    @property
    def kind(self) -> str:
        title = self.title.strip()
        if title == HEADER:
            return "header"
        if title == INTRODUCTION:
            return "introduction"
        if summary_label(title):
            return "summary"
        if factor_key(title):
            return "factor"
        if is_major_duty_title(title):
            return "major_duty" if major_duty_number(title) is not None else "major_duties"
        if title in TRAILING_SECTIONS or title == FACTOR_EVALUATION:
            return "standard"
        return "other"

    @property
    def number(self) -> int | None:
        key = factor_key(self.title)
        if key:
            return int(key[0])
        return major_duty_number(self.title)

    @property
    def sub(self) -> str | None:
        key = factor_key(self.title)
        return (key[1] or None) if key else None


def _coerce(title: str, value: Any) -> Section:
    """Normalize the accepted value shapes into one ``Section``."""
    if isinstance(value, Section):
        return value if value.title == title else Section(title, value.content)
    if isinstance(value, Mapping):
        return Section(title, str(value.get("content") or ""))
    return Section(title, "" if value is None else str(value))


class Document(MutableMapping[str, Section]):
    """Ordered ``title -> Section`` mapping.

    Values may be assigned as ``Section`` records, bare strings or
    ``{"content": ..., "header": ...}`` mappings; they are stored as
    ``Section`` either way. Equality compares titles, content and order.
    """

    def __init__(self, sections: Mapping[str, Any] | None = None) -> None:
        self._sections: Dict[str, Section] = {}
        for title, value in (sections or {}).items():
            self[title] = value

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Document":
        """Build a document from bare strings or ``{"content", "header"}`` values."""
        return cls(data)

    def __getitem__(self, title: str) -> Section:
        return self._sections[title]

    def __setitem__(self, title: str, value: Any) -> None:
        self._sections[title] = _coerce(title, value)

    def __delitem__(self, title: str) -> None:
        del self._sections[title]

    def __iter__(self) -> Iterator[str]:
        return iter(self._sections)

    def __len__(self) -> int:
        return len(self._sections)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Document):
            return NotImplemented
        return list(self._sections.items()) == list(other._sections.items())

    def __repr__(self) -> str:
        return f"Document({list(self._sections)!r})"

    def content(self, title: str) -> str:
        return self._sections[title].content

    def copy(self) -> "Document":
        return Document(self._sections)

    def as_dict(self) -> Dict[str, str]:
        return {title: s.content for title, s in self._sections.items()}

    def rename(self, old: str, new: str, content: str | None = None) -> None:
        """Replace ``old`` with ``new`` in place, keeping its position.

        An unrelated section already titled ``new`` is dropped so titles stay
        unique.
        """
        section = self._sections[old]
        body = section.content if content is None else content
        self._sections = {
            (new if title == old else title): (Section(new, body) if title == old else s)
            for title, s in self._sections.items()
            if title == old or title != new
        }
