"""
compiler.py

Responsibility: drive the engine over a chunk sequence.

`compile_chunks` feeds already-segmented chunks to the state machine in
source order; `compile_string` segments template text first. Neither knows
how the resulting program is executed (see `codegen.py`).
"""

from __future__ import annotations

import logging
from typing import Iterable

from ioview.engine import EngineOptions, finalize, handle_expression, handle_text, init
from ioview.program import OutputProgram
from ioview.segmenter import Chunk, Literal, segment

logger = logging.getLogger(__name__)


def compile_chunks(chunks: Iterable[Chunk], options: EngineOptions | None = None) -> OutputProgram:
    state = init(options)
    for chunk in chunks:
        if isinstance(chunk, Literal):
            handle_text(state, chunk.text)
        else:
            handle_expression(state, chunk.marker, chunk.code, line=chunk.line)

    program = finalize(state)
    logger.debug(
        "Compiled %d statements, %d fragments, %d identifiers",
        len(program.statements),
        len(program.fragments),
        state.counter,
    )
    return program


def compile_string(source: str, options: EngineOptions | None = None) -> OutputProgram:
    opts = options or EngineOptions()
    return compile_chunks(segment(source, line=opts.line, trim=opts.trim), opts)
