"""
renderer.py

Responsibility: render a single template file end to end.

load (frontmatter + body) -> compile -> build render function -> execute ->
flatten -> optionally write to a destination file.

Assigns from the caller override those declared in the frontmatter. Every
assign whose name is a valid Python identifier is available to the
template's expressions as a local name.

This module does NOT parse command lines; see `cli.py`.
"""

from __future__ import annotations

import keyword
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ioview.codegen import build_render_function
from ioview.compiler import compile_string
from ioview.engine import EngineOptions
from ioview.errors import IoviewError
from ioview.fragments import flatten, write_fragments
from ioview.loader import load_template

logger = logging.getLogger(__name__)


class RenderError(IoviewError, RuntimeError):
    pass


@dataclass(frozen=True)
class RenderResult:
    text: str
    bindings: int
    destination: Path | None = None


def assign_params(assigns: dict[str, Any]) -> list[str]:
    return sorted(k for k in assigns if k.isidentifier() and not keyword.iskeyword(k))


def render_file(
    template_path: str | Path,
    *,
    assigns: dict[str, Any] | None = None,
    destination: str | Path | None = None,
    trim: bool = False,
) -> RenderResult:
    source = load_template(template_path)
    merged = {**source.assigns, **(assigns or {})}

    program = compile_string(source.body, EngineOptions(line=source.line, trim=trim))
    func = build_render_function(
        program,
        params=assign_params(merged),
        filename=str(source.path or "<ioview>"),
    )

    dst_path: Path | None = None
    try:
        tree = func(**merged)
        text = flatten(tree)
        if destination is not None:
            dst_path = Path(destination).resolve()
            dst_path.parent.mkdir(parents=True, exist_ok=True)
            # Normalize newlines for stable cross-platform output.
            with dst_path.open("w", encoding="utf-8", newline="\n") as fh:
                written = write_fragments(tree, fh)
            logger.debug("Wrote %d characters to %s", written, dst_path)
    except Exception as e:  # noqa: BLE001 - surface as RenderError
        raise RenderError(f"Failed rendering template file: {template_path}: {e}") from e

    bindings = sum(1 for _ in program.identifiers())
    return RenderResult(text=text, bindings=bindings, destination=dst_path)
