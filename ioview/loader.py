"""
loader.py

Responsibility: read a template file into its body and default assigns.

A template file may begin with YAML frontmatter delimited by '---' lines:

    ---
    name: Eric
    ---
    Hello, <%= name %>

The frontmatter must be a mapping; it supplies default assigns. The body keeps
its position in the file (`TemplateSource.line`) so diagnostics report real
file lines.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ioview.errors import IoviewError

_DELIMITER = "---\n"
_CLOSING = "\n---\n"


class TemplateFileError(IoviewError, ValueError):
    pass


@dataclass(frozen=True)
class TemplateSource:
    """A template body plus the assigns declared in its frontmatter."""

    body: str
    assigns: dict[str, Any] = field(default_factory=dict)
    line: int = 1
    path: Path | None = None


def _split_frontmatter(text: str) -> tuple[dict[str, Any] | None, str, int]:
    """
    Returns (frontmatter_or_none, body, body_start_line).
    """
    if not text.startswith(_DELIMITER):
        return None, text, 1

    end = text.find(_CLOSING, len(_DELIMITER) - 1)
    if end == -1:
        raise TemplateFileError("YAML frontmatter starts with '---' but no closing '---' was found.")

    fm_text = text[len(_DELIMITER) : end]
    body_start = end + len(_CLOSING)
    try:
        data = yaml.safe_load(fm_text) if fm_text.strip() else {}
    except yaml.YAMLError as e:
        raise TemplateFileError(f"Invalid YAML frontmatter: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise TemplateFileError("YAML frontmatter must be a mapping/object at the top level.")
    return data, text[body_start:], text.count("\n", 0, body_start) + 1


def parse_template(text: str, *, path: Path | None = None) -> TemplateSource:
    data, body, line = _split_frontmatter(text)
    assigns = {str(k): v for k, v in (data or {}).items()}
    return TemplateSource(body=body, assigns=assigns, line=line, path=path)


def load_template(path: str | Path) -> TemplateSource:
    p = Path(path)
    if not p.is_file():
        raise TemplateFileError(f"Template file does not exist: {p}")
    return parse_template(p.read_text(encoding="utf-8"), path=p)


def load_context(path: str | Path) -> dict[str, Any]:
    """Load assigns from a standalone YAML file (a mapping, or empty)."""
    p = Path(path)
    if not p.is_file():
        raise TemplateFileError(f"Context file does not exist: {p}")
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise TemplateFileError(f"Invalid YAML in {p}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise TemplateFileError(f"Context file must contain a mapping: {p}")
    return {str(k): v for k, v in data.items()}
