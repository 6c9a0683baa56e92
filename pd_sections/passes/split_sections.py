from __future__ import annotations

from dataclasses import dataclass, field

from pd_sections import splitter
from pd_sections.document import Document
from pd_sections.framework import Artifact, register
from pd_sections.section_patterns import FULL_DOCUMENT


@dataclass
class _SplitSectionsPass:
    name: str = field(default="split_sections", init=False)
    input_type: type = field(default=str, init=False)
    output_type: type = field(default=Document, init=False)
    header_fallback_lines: int = splitter.HEADER_FALLBACK_LINES

    def __call__(self, a: Artifact) -> Artifact:
        if not isinstance(a.payload, str):
            return a
        doc = splitter.split(a.payload, header_fallback_lines=self.header_fallback_lines)
        metrics = {"sections": len(doc), "fallback": list(doc) == [FULL_DOCUMENT]}
        return a.advance(doc, self.name, metrics)


split_sections = register(_SplitSectionsPass())
