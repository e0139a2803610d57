"""
engine.py

Responsibility: the compilation state machine that turns tagged template
chunks into an `OutputProgram`.

Operations, issued in source order by a segmenter-driven compiler:
- `init`: fresh state, empty buffers, identifier counter at zero
- `begin_block` / `end_block`: compile an isolated sub-region and embed its
  result into the parent as a single value
- `handle_text`: literal text becomes a fragment
- `handle_expression`: output expressions are bound to a fresh identifier and
  referenced by a fragment; effect-only expressions become statements; any
  other marker goes to the configured default handler
- `finalize`: terminal; returns the program in append order

The state is a plain local object threaded through these calls. Nothing here
touches module-level state, so independent compilations can run in parallel.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from ioview.errors import IoviewError
from ioview.program import (
    EFFECT,
    OUTPUT,
    Bind,
    Effect,
    Fragment,
    LiteralText,
    OutputProgram,
    Statement,
    ValueRef,
)

logger = logging.getLogger(__name__)


class EngineError(IoviewError):
    pass


class UnsupportedMarkerError(EngineError):
    def __init__(self, marker: str, line: int) -> None:
        super().__init__(f"Unsupported expression marker <%{marker} %> on line {line}")
        self.marker = marker
        self.line = line


@dataclass
class IdentifierPool:
    """Source of fresh identifiers; shared by a state and its nested blocks."""

    prefix: str = "arg"
    count: int = 0

    def fresh(self) -> str:
        name = f"{self.prefix}{self.count}"
        self.count += 1
        return name


DefaultHandler = Callable[["CompilationState", str, str], None]


@dataclass(frozen=True)
class EngineOptions:
    """
    Compilation options.

    - line: source line the template starts on (diagnostics only)
    - trim: strip whitespace around non-output tags (used by the segmenter)
    - default_handler: called for markers other than output/effect-only
    """

    line: int = 1
    trim: bool = False
    default_handler: Optional[DefaultHandler] = None


@dataclass
class CompilationState:
    options: EngineOptions
    pool: IdentifierPool
    fragments: list[Fragment] = field(default_factory=list)
    statements: list[Statement] = field(default_factory=list)
    line: int = 1
    finalized: bool = False

    @property
    def counter(self) -> int:
        return self.pool.count


def _ensure_open(state: CompilationState) -> None:
    if state.finalized:
        raise EngineError("Compilation state has already been finalized")


def init(options: EngineOptions | None = None) -> CompilationState:
    opts = options or EngineOptions()
    return CompilationState(options=opts, pool=IdentifierPool(), line=opts.line)


def begin_block(state: CompilationState) -> CompilationState:
    """
    Return a state for an isolated sub-region.

    The block starts with empty buffers but draws identifiers from the same
    pool as `state`, so names stay unique across the whole compilation. The
    parent's buffers are left as they are.
    """
    _ensure_open(state)
    return CompilationState(options=state.options, pool=state.pool, line=state.line)


def end_block(parent: CompilationState, block: CompilationState) -> str:
    """
    Finalize `block` and embed its program into `parent` as one value.

    Returns the identifier the block's fragments are bound to.
    """
    _ensure_open(parent)
    program = finalize(block)
    identifier = parent.pool.fresh()
    parent.statements.append(Bind(identifier, program))
    parent.fragments.append(ValueRef(identifier))
    logger.debug("Embedded block as %s (%d statements)", identifier, len(program.statements))
    return identifier


def handle_text(state: CompilationState, text: str) -> None:
    _ensure_open(state)
    if text:
        state.fragments.append(LiteralText(text))


def handle_expression(state: CompilationState, marker: str, expr: str, *, line: int | None = None) -> None:
    _ensure_open(state)
    if line is not None:
        state.line = line

    if marker == OUTPUT:
        identifier = state.pool.fresh()
        state.statements.append(Bind(identifier, expr))
        state.fragments.append(ValueRef(identifier))
    elif marker == EFFECT:
        state.statements.append(Effect(expr))
    else:
        handler = state.options.default_handler or handle_default_expression
        handler(state, marker, expr)


def handle_default_expression(state: CompilationState, marker: str, expr: str) -> None:
    """
    Built-in handler for markers the engine does not special-case.

    Supports none of them. Pass a `default_handler` in `EngineOptions` to give
    markers such as `|` or `/` a meaning.
    """
    raise UnsupportedMarkerError(marker, state.line)


def finalize(state: CompilationState) -> OutputProgram:
    _ensure_open(state)
    state.finalized = True
    return OutputProgram(statements=tuple(state.statements), fragments=tuple(state.fragments))
