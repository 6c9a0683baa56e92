from __future__ import annotations

import os
import pathlib
import warnings
from functools import reduce
from importlib import import_module
from typing import Any, Dict, Iterable, List, Mapping, cast

from pydantic import BaseModel, Field

yaml = cast(Any, import_module("yaml"))

DEFAULT_PIPELINE = [
    "normalize",
    "split_sections",
    "identify_sections",
    "dedupe",
    "repair_paragraphs",
    "serialize",
]

DEFAULT_MODEL = "gpt-4o-mini"


class PipelineSpec(BaseModel):
    """Declarative pipeline specification."""

    pipeline: List[str] = Field(default_factory=lambda: list(DEFAULT_PIPELINE))
    options: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


def _read_yaml(path: str | os.PathLike | None) -> Dict[str, Any]:
    """Return a dict from YAML or {} if path is None/missing/empty."""
    if not path:
        return {}
    p = pathlib.Path(path)
    if not p.exists():
        return {}
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise TypeError("pipeline.yaml must contain a top-level mapping")
    return data


def _coerce(value: str) -> Any:
    try:
        return yaml.safe_load(value)
    except yaml.YAMLError:
        return value


def _env_overrides(steps: Iterable[str]) -> Dict[str, Dict[str, Any]]:
    """
    Map STEP__key=value -> options[step][key]=value for known ``steps``.
    Values are YAML-coerced (so 'true', '42' etc. become bool/int).
    """
    known = set(steps)
    out: Dict[str, Dict[str, Any]] = {}
    for k, v in os.environ.items():
        if "__" not in k:
            continue
        step, key = k.lower().split("__", 1)
        if step in known and key:
            out.setdefault(step, {})[key] = _coerce(v)
    return out


def _merge_options(
    base: Dict[str, Dict[str, Any]], override: Dict[str, Dict[str, Any]]
) -> Dict[str, Dict[str, Any]]:
    """Shallow-merge per-step options; override wins."""
    sources = set(base) | set(override)
    return {s: {**base.get(s, {}), **override.get(s, {})} for s in sources}


def _warn_unknown_options(pipeline: Iterable[str], opts: Mapping[str, Any]) -> None:
    """Emit a warning when options name steps absent from the pipeline."""
    steps = set(pipeline)
    unknown = [step for step in opts if step and step not in steps]
    if unknown:
        warnings.warn(
            f"Unknown pipeline options: {', '.join(sorted(unknown))}",
            stacklevel=2,
        )


def load_spec(
    path: str | os.PathLike | None = "pipeline.yaml",
    overrides: Dict[str, Dict[str, Any]] | None = None,
) -> PipelineSpec:
    """Load YAML + env/CLI overrides into a validated PipelineSpec."""
    data = _read_yaml(path)
    pipeline = data.get("pipeline") or list(DEFAULT_PIPELINE)
    sources: Iterable[Dict[str, Dict[str, Any]]] = (
        d for d in (data.get("options", {}), _env_overrides(pipeline), overrides) if d
    )
    merged = reduce(_merge_options, sources, cast(Dict[str, Dict[str, Any]], {}))
    _warn_unknown_options(pipeline, merged)
    return PipelineSpec.model_validate({**data, "pipeline": pipeline, "options": merged})


def llm_settings() -> Dict[str, str | None]:
    """Read AI collaborator settings from ``.env`` and the environment."""
    from dotenv import load_dotenv  # lazy import

    load_dotenv()
    return {
        "api_key": os.environ.get("OPENAI_API_KEY"),
        "model": os.environ.get("PD_SECTIONS_MODEL", DEFAULT_MODEL),
    }
