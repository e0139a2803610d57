"""
segmenter.py

Responsibility: split template text into ordered literal and expression chunks.

Tag syntax:
- `<%= code %>`   output expression
- `<% code %>`    effect-only expression
- `<%| code %>`, `<%/ code %>`  expressions with a custom marker
- `<%# text %>`   comment, dropped
- `<%%`           literal `<%`

Chunks carry no meaning beyond their tag; the engine decides what a marker does.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Union

from ioview.errors import IoviewError
from ioview.program import OUTPUT

logger = logging.getLogger(__name__)

_OPEN = "<%"
_CLOSE = "%>"
_MARKERS = ("=", "|", "/")
_LINE_END = re.compile(r"[ \t]*\r?\n")


class TemplateSyntaxError(IoviewError, ValueError):
    def __init__(self, message: str, *, line: int, column: int) -> None:
        super().__init__(f"{message} (line {line}, column {column})")
        self.line = line
        self.column = column


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Expression:
    marker: str
    code: str
    line: int = 1


Chunk = Union[Literal, Expression]


@dataclass(frozen=True)
class _Comment:
    line: int


def _position(source: str, index: int, first_line: int) -> tuple[int, int]:
    line = first_line + source.count("\n", 0, index)
    column = index - (source.rfind("\n", 0, index) + 1) + 1
    return line, column


def _tokenize(source: str, first_line: int) -> list[Union[Literal, Expression, _Comment]]:
    tokens: list[Union[Literal, Expression, _Comment]] = []
    pos = 0
    while True:
        start = source.find(_OPEN, pos)
        if start == -1:
            tokens.append(Literal(source[pos:]))
            return tokens

        tokens.append(Literal(source[pos:start]))
        if source.startswith("<%%", start):
            tokens.append(Literal(_OPEN))
            pos = start + 3
            continue

        end = source.find(_CLOSE, start + len(_OPEN))
        line, column = _position(source, start, first_line)
        if end == -1:
            raise TemplateSyntaxError("Missing closing '%>' for tag", line=line, column=column)

        inner = source[start + len(_OPEN) : end]
        if inner.startswith("#"):
            tokens.append(_Comment(line))
        elif inner[:1] in _MARKERS:
            tokens.append(Expression(inner[0], inner[1:].strip(), line))
        else:
            tokens.append(Expression("", inner.strip(), line))
        pos = end + len(_CLOSE)


def _is_standalone_tag(token: object) -> bool:
    if isinstance(token, _Comment):
        return True
    return isinstance(token, Expression) and token.marker != OUTPUT


def _trim_standalone_lines(tokens: list) -> list:
    """
    Remove lines holding nothing but a single non-output tag.

    The indentation before the tag and the line break after it are dropped
    with it, so control tags leave no blank lines behind.
    """
    out = list(tokens)
    # Index of literals whose text begins at the start of a source line.
    line_starts = {0}
    for i, tok in enumerate(out):
        if not _is_standalone_tag(tok):
            continue
        before = out[i - 1] if i > 0 else None
        after = out[i + 1] if i + 1 < len(out) else None
        if not isinstance(before, (Literal, type(None))) or not isinstance(after, (Literal, type(None))):
            continue

        head = before.text if before is not None else ""
        nl = head.rfind("\n")
        if head[nl + 1 :].strip(" \t"):
            continue
        if nl == -1 and before is not None and (i - 1) not in line_starts:
            continue

        tail = after.text if after is not None else ""
        m = _LINE_END.match(tail)
        if m:
            consumed = m.end()
        elif not tail.strip(" \t") and i + 2 >= len(out):
            consumed = len(tail)
        else:
            continue

        if before is not None:
            out[i - 1] = Literal(head[: nl + 1])
        if after is not None:
            out[i + 1] = Literal(tail[consumed:])
            line_starts.add(i + 1)
    return out


def _merge(tokens: list) -> list[Chunk]:
    chunks: list[Chunk] = []
    for tok in tokens:
        if isinstance(tok, _Comment):
            continue
        if isinstance(tok, Literal):
            if not tok.text:
                continue
            if chunks and isinstance(chunks[-1], Literal):
                chunks[-1] = Literal(chunks[-1].text + tok.text)
                continue
        chunks.append(tok)
    return chunks


def segment(source: str, *, line: int = 1, trim: bool = False) -> list[Chunk]:
    """
    Split `source` into chunks in source order.

    `line` is the source line the template text starts on; expression chunks
    and syntax errors report lines relative to it.
    """
    tokens = _tokenize(source, line)
    if trim:
        tokens = _trim_standalone_lines(tokens)
        if isinstance(tokens[0], Literal):
            tokens[0] = Literal(tokens[0].text.lstrip())
        if isinstance(tokens[-1], Literal):
            tokens[-1] = Literal(tokens[-1].text.rstrip())

    chunks = _merge(tokens)
    logger.debug("Segmented template into %d chunks", len(chunks))
    return chunks
