from __future__ import annotations

import logging

from pd_sections.dedupe import dedupe as _dedupe_doc, duplicate_factors
from pd_sections.document import Document
from pd_sections.framework import Artifact, register

logger = logging.getLogger(__name__)


class _DedupePass:
    name = "dedupe"
    input_type = Document
    output_type = Document

    def __call__(self, a: Artifact) -> Artifact:
        if not isinstance(a.payload, Document):
            return a
        doc = _dedupe_doc(a.payload)
        flagged = duplicate_factors(doc)
        for factor, titles in flagged.items():
            logger.warning("%s has %d competing titles: %s", factor, len(titles), titles)
        metrics = {
            "dropped": len(a.payload) - len(doc),
            "duplicate_factors": flagged,
        }
        warnings = ["duplicate_factors"] if flagged else None
        return a.advance(doc, self.name, metrics, warnings)


dedupe = register(_DedupePass())
