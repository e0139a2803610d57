"""
ioview package

Compiles `<% %>` templates into programs that build nested fragment trees
instead of concatenated strings. Each output expression is bound once to a
fresh identifier and referenced by position; the tree is flattened (or
streamed) only when text is finally needed.

Key responsibilities are split across modules:
- `program.py`: fragments, statements and the compiled `OutputProgram`
- `engine.py`: the compilation state machine (init / blocks / text / expressions / finalize)
- `segmenter.py`: template text -> ordered literal and expression chunks
- `compiler.py`: drives the engine over chunks
- `codegen.py`: `OutputProgram` -> Python render function
- `fragments.py`: flatten, streaming write and plain interpolation
- `views.py`: named templates that render each other
- `loader.py` / `renderer.py` / `cli.py`: template files and the command line
"""

from __future__ import annotations

from ioview.codegen import build_render_function
from ioview.compiler import compile_chunks, compile_string
from ioview.fragments import flatten, interpolate
from ioview.views import View

__all__ = [
    "__version__",
    "View",
    "build_render_function",
    "compile_chunks",
    "compile_string",
    "flatten",
    "interpolate",
]

__version__ = "0.1.0"
