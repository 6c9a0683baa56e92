from __future__ import annotations

from pd_sections.document import Document
from pd_sections.framework import Artifact, register
from pd_sections.heuristics import should_split_major_duties, split_major_duties


class _SplitDutiesPass:
    name = "split_duties"
    input_type = Document
    output_type = Document

    def __call__(self, a: Artifact) -> Artifact:
        if not isinstance(a.payload, Document) or not should_split_major_duties(a.payload):
            return a
        doc = split_major_duties(a.payload)
        duties = sum(1 for s in doc.values() if s.kind == "major_duty")
        return a.advance(doc, self.name, {"duties": duties})


split_duties = register(_SplitDutiesPass())
