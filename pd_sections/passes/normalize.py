from __future__ import annotations

from pd_sections import normalizer
from pd_sections.framework import Artifact, register


class _NormalizePass:
    name = "normalize"
    input_type = str
    output_type = str

    def __call__(self, a: Artifact) -> Artifact:
        if not isinstance(a.payload, str):
            return a
        text = normalizer.normalize(a.payload)
        metrics = {"chars_in": len(a.payload), "chars_out": len(text)}
        return a.advance(text, self.name, metrics)


normalize = register(_NormalizePass())
