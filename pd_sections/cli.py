from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable, Iterator, Mapping
from pathlib import Path
from typing import Any

import typer

from pd_sections.config import load_spec
from pd_sections.serializer import MODES


def _spec_path_candidates(path: str | Path) -> Iterator[Path]:
    """Yield potential spec locations without hitting the filesystem."""
    candidate = Path(path)
    pkg_dir = Path(__file__).resolve().parent
    yield from (
        candidate,
        pkg_dir.parent / candidate,
        pkg_dir / candidate,
    )


def _resolve_spec_path(path: str | Path) -> Path:
    """Pick the first existing pipeline spec from candidate locations."""
    return next((p for p in _spec_path_candidates(path) if p.exists()), Path(path))


def _format_timings(timings: Mapping[str, float]) -> str:
    """Return ``timings`` as newline-delimited ``name: seconds`` strings."""
    return "\n".join(f"{n}: {t:.2f}s" for n, t in timings.items())


def _exit_with_error(exc: Exception) -> None:
    """Print ``exc`` to stderr and exit with status 1."""
    print(f"error: {exc}", file=sys.stderr)
    raise typer.Exit(1)


def _safe(func: Callable[[], None]) -> None:
    """Invoke ``func`` and exit non-zero on any exception."""
    try:
        func()
    except Exception as exc:
        _exit_with_error(exc)


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _cli_overrides(mode: str | None) -> dict[str, dict[str, Any]]:
    if mode is None:
        return {}
    if mode not in MODES:
        raise ValueError(f"unknown mode {mode!r}; expected one of {', '.join(MODES)}")
    return {"serialize": {"mode": mode}}


def _run_format(
    input_path: Path, mode: str | None, out: Path | None, spec: str, verbose: bool
) -> None:
    from pd_sections.adapters.emit_text import write_text
    from pd_sections.adapters.io_text import read_text
    from pd_sections.core import run_format

    _configure_logging(verbose)
    s = load_spec(_resolve_spec_path(spec), overrides=_cli_overrides(mode))
    a, timings = run_format(read_text(input_path), s)
    if out:
        write_text(a.payload, out)
    else:
        print(a.payload)
    if verbose:
        print(_format_timings(timings), file=sys.stderr)
        for warning in (a.meta or {}).get("warnings", []):
            print(f"warning: {warning}", file=sys.stderr)


def _run_sections(input_path: Path, out: Path | None, spec: str) -> None:
    from pd_sections.adapters.emit_text import sections_jsonl, write_sections_jsonl
    from pd_sections.adapters.io_text import read_text
    from pd_sections.core import parse_document

    doc = parse_document(read_text(input_path), load_spec(_resolve_spec_path(spec)))
    if out:
        write_sections_jsonl(doc, out)
        print(f"sections: {len(doc)} written")
    else:
        print(sections_jsonl(doc))


def _run_inspect() -> None:
    from pd_sections.core import run_inspect

    print(json.dumps(run_inspect(), indent=2))


app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.command("format")
def format_(
    input_path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    mode: str | None = typer.Option(None, "--mode", help="generated or updated"),
    out: Path | None = typer.Option(None, "--out"),
    spec: str = typer.Option("pipeline.yaml", "--spec"),
    verbose: bool = typer.Option(False, "--verbose"),
) -> None:
    """Print (or write) the canonical text of a position description."""
    _safe(lambda: _run_format(input_path, mode, out, spec, verbose))


@app.command()
def sections(
    input_path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    out: Path | None = typer.Option(None, "--out"),
    spec: str = typer.Option("pipeline.yaml", "--spec"),
) -> None:
    """Emit the parsed sections as JSONL."""
    _safe(lambda: _run_sections(input_path, out, spec))


@app.command()
def inspect() -> None:
    _run_inspect()


if __name__ == "__main__":
    app()
