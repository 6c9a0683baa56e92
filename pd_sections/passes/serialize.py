from __future__ import annotations

from dataclasses import dataclass, field

from pd_sections import serializer
from pd_sections.document import Document
from pd_sections.framework import Artifact, register


@dataclass
class _SerializePass:
    name: str = field(default="serialize", init=False)
    input_type: type = field(default=Document, init=False)
    output_type: type = field(default=str, init=False)
    mode: str = serializer.GENERATED

    def __post_init__(self) -> None:
        if self.mode not in serializer.MODES:
            raise ValueError(f"unknown serialize mode: {self.mode!r}")

    def __call__(self, a: Artifact) -> Artifact:
        if not isinstance(a.payload, Document):
            return a
        text = serializer.serialize(a.payload, self.mode)
        return a.advance(text, self.name, {"mode": self.mode, "chars": len(text)})


serialize = register(_SerializePass())
