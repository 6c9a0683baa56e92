from __future__ import annotations

from pd_sections.document import Document
from pd_sections.framework import Artifact, register
from pd_sections.heuristics import ensure_basic_sections


class _IdentifySectionsPass:
    """Heuristic split, applied only to the single ``Full Document`` fallback."""

    name = "identify_sections"
    input_type = Document
    output_type = Document

    def __call__(self, a: Artifact) -> Artifact:
        if not isinstance(a.payload, Document):
            return a
        doc = ensure_basic_sections(a.payload)
        return a.advance(doc, self.name, {"identified": doc is not a.payload})


identify_sections = register(_IdentifySectionsPass())
