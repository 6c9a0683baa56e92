# Auto-register passes on package import (e.g., when importing any submodule)
from . import passes  # noqa: F401
from .document import Document, Section
from .normalizer import normalize
from .paragraphs import repair_paragraphs
from .registry import EditingSession, SectionRegistry
from .serializer import serialize
from .splitter import split

__all__ = [
    "Document",
    "EditingSession",
    "Section",
    "SectionRegistry",
    "normalize",
    "repair_paragraphs",
    "serialize",
    "split",
]
