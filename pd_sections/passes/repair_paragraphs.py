from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from pd_sections.document import Document
from pd_sections.framework import Artifact, register
from pd_sections.paragraphs import repair_paragraphs as _repair
from pd_sections.section_patterns import FULL_DOCUMENT, HEADER


@dataclass
class _RepairParagraphsPass:
    name: str = field(default="repair_paragraphs", init=False)
    input_type: type = field(default=Document, init=False)
    output_type: type = field(default=Document, init=False)
    # line-structured sections whose breaks are meaningful
    skip_titles: Tuple[str, ...] = (HEADER, FULL_DOCUMENT)

    def __post_init__(self) -> None:
        self.skip_titles = tuple(self.skip_titles)

    def _skip(self, title: str, kind: str) -> bool:
        return kind == "summary" or title in self.skip_titles

    def __call__(self, a: Artifact) -> Artifact:
        if not isinstance(a.payload, Document):
            return a
        doc = Document(
            {
                title: s if self._skip(title, s.kind) else _repair(s.content)
                for title, s in a.payload.items()
            }
        )
        changed = sum(1 for t in doc if doc[t] != a.payload[t])
        return a.advance(doc, self.name, {"sections_changed": changed})


repair_paragraphs = register(_RepairParagraphsPass())
