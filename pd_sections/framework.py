from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Protocol, Type, runtime_checkable


@dataclass(frozen=True)
class Artifact:
    """Immutable carrier of a payload (text or Document) plus run metadata."""

    payload: Any
    meta: Dict[str, Any] | None = None

    def advance(
        self,
        payload: Any,
        step: str,
        metrics: Mapping[str, Any] | None = None,
        warnings: List[str] | None = None,
    ) -> "Artifact":
        """Return a new artifact carrying ``payload`` and ``step`` metrics."""
        meta = dict(self.meta or {})
        meta["metrics"] = {**meta.get("metrics", {}), step: dict(metrics or {})}
        if warnings:
            meta["warnings"] = [*meta.get("warnings", []), *warnings]
        return Artifact(payload=payload, meta=meta)


@runtime_checkable
class Pass(Protocol):
    name: str
    input_type: Type
    output_type: Type

    def __call__(self, a: Artifact) -> Artifact:
        """Execute the pass."""
        ...


_REGISTRY: Mapping[str, Pass] = MappingProxyType({})


def register(p: Pass) -> Pass:
    """Register a pass under ``p.name``; re-registering replaces it."""
    global _REGISTRY
    _REGISTRY = MappingProxyType({**dict(_REGISTRY), p.name: p})
    return p


def run_step(name: str, a: Artifact) -> Artifact:
    return _REGISTRY[name](a)


def run_pipeline(steps: List[str], a: Artifact) -> Artifact:
    """Apply registered steps in order."""
    return reduce(lambda acc, s: run_step(s, acc), steps, a)


def registry() -> Dict[str, Pass]:
    """Shallow copy of the registry for inspection/testing."""
    return dict(_REGISTRY)
