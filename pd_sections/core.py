from __future__ import annotations

import logging
import time
from collections.abc import Mapping, Sequence
from dataclasses import fields, is_dataclass, replace
from typing import Any

import pd_sections.passes  # noqa: F401  # registers passes
from pd_sections.config import PipelineSpec
from pd_sections.document import Document
from pd_sections.framework import Artifact, Pass, registry

logger = logging.getLogger(__name__)

NORMALIZE = "normalize"
SPLIT = "split_sections"
SERIALIZE = "serialize"


def _pass_steps(spec: PipelineSpec) -> list[str]:
    """Return the pipeline steps; error on unknown ones."""
    regs = registry()
    unknown = [s for s in spec.pipeline if s not in regs]
    if unknown:
        raise KeyError(f"unknown steps: {unknown}")
    return list(spec.pipeline)


def _ensure_normalize_precedes_split(steps: Sequence[str]) -> None:
    if SPLIT not in steps:
        return
    split_index = steps.index(SPLIT)
    norm_index = steps.index(NORMALIZE) if NORMALIZE in steps else None
    if norm_index is None or norm_index > split_index:
        raise ValueError(f"{SPLIT} requires {NORMALIZE} to run beforehand")


def _ensure_serialize_last(steps: Sequence[str]) -> None:
    if SERIALIZE in steps and steps[-1] != SERIALIZE:
        raise ValueError(f"{SERIALIZE} must be the last step")


def _enforce_invariants(spec: PipelineSpec) -> list[str]:
    """Return validated steps while enforcing ordering invariants."""
    steps = _pass_steps(spec)
    _ensure_normalize_precedes_split(steps)
    _ensure_serialize_last(steps)
    return steps


def configure_pass(pass_obj: Pass, opts: Mapping[str, Any]) -> Pass:
    """Return a new pass with ``opts`` applied without mutating ``pass_obj``.

    Only dataclass passes take options; keys that are not fields are ignored.
    """
    if not opts or not is_dataclass(pass_obj):
        return pass_obj
    names = {f.name for f in fields(pass_obj) if f.init}
    updates = {k: v for k, v in opts.items() if k in names}
    return replace(pass_obj, **updates) if updates else pass_obj


def _timed(p: Pass, a: Artifact, timings: dict[str, float]) -> Artifact:
    """Run ``p`` while recording its execution duration."""
    t0 = time.time()
    try:
        return p(a)
    finally:
        timings[p.name] = time.time() - t0


def run_passes(
    spec: PipelineSpec, a: Artifact, *, steps: Sequence[str] | None = None
) -> tuple[Artifact, dict[str, float]]:
    """Run declared passes over ``a`` capturing per-pass timings."""
    names = _enforce_invariants(spec) if steps is None else list(steps)
    passes = [configure_pass(registry()[s], spec.options.get(s, {})) for s in names]
    a = Artifact(payload=a.payload, meta={**(a.meta or {}), "options": dict(spec.options)})
    timings: dict[str, float] = {}
    for p in passes:
        a = _timed(p, a, timings)
        logger.debug("%s -> %s", p.name, type(a.payload).__name__)
    return a, timings


def run_format(text: str, spec: PipelineSpec) -> tuple[Artifact, dict[str, float]]:
    """Run the full pipeline over raw ``text``; the payload ends as canonical text."""
    return run_passes(spec, Artifact(payload=text, meta={"metrics": {}}))


def parse_document(text: str, spec: PipelineSpec) -> Document:
    """Run every step before ``serialize`` and return the resulting document."""
    steps = [s for s in _enforce_invariants(spec) if s != SERIALIZE]
    a, _ = run_passes(spec, Artifact(payload=text, meta={"metrics": {}}), steps=steps)
    if not isinstance(a.payload, Document):
        raise TypeError(f"pipeline {steps} did not produce a Document")
    return a.payload


def run_inspect() -> dict[str, dict[str, str]]:
    """Return a lightweight view of the registry for CLI/tests."""
    return {
        name: {"input": str(p.input_type), "output": str(p.output_type)}
        for name, p in registry().items()
    }
