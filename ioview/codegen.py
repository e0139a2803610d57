"""
codegen.py

Responsibility: turn an `OutputProgram` into a Python render function.

The generated function takes the template's assigns as keyword arguments,
runs the program's statements in order and returns the fragment list:

    def render(*, name, **_assigns):
        _ioview_arg0 = (name.upper()
        )
        return ['Hello, ', _ioview_arg0]

Source text is rendered from a Jinja2 template and compiled with `compile()`.
Nested programs (embedded blocks) are inlined: their statements run in place
and their fragments are bound as one list.

Generated identifiers live in the function under a reserved `_ioview_` prefix,
so template code cannot rebind them by writing `arg0`. Parameters and helpers
using that prefix are rejected.
"""

from __future__ import annotations

import keyword
import logging
import textwrap
from typing import Any, Callable, Iterable, Mapping, Sequence

from jinja2 import Environment, StrictUndefined

from ioview.errors import IoviewError
from ioview.program import Bind, LiteralText, OutputProgram

logger = logging.getLogger(__name__)

_EXTRA_ASSIGNS = "_assigns"
_RESERVED_PREFIX = "_ioview_"

_FUNCTION_TEMPLATE = (
    "def {{ name }}({{ signature }}):\n"
    "{% for line in body %}    {{ line }}\n{% endfor %}"
    "    return [{{ fragments | join(', ') }}]\n"
)


class CodegenError(IoviewError):
    pass


def _check_name(name: str, what: str) -> None:
    if not name.isidentifier() or keyword.iskeyword(name):
        raise CodegenError(f"Invalid {what}: {name!r}")


def _local(identifier: str) -> str:
    return f"{_RESERVED_PREFIX}{identifier}"


def _check_unreserved(names: Iterable[str], what: str) -> None:
    reserved = sorted(n for n in names if n.startswith(_RESERVED_PREFIX))
    if reserved:
        raise CodegenError(f"{what} use the reserved prefix {_RESERVED_PREFIX!r}: {', '.join(reserved)}")


def _fragment_exprs(program: OutputProgram) -> list[str]:
    return [repr(f.text) if isinstance(f, LiteralText) else _local(f.identifier) for f in program.fragments]


def _body_lines(program: OutputProgram) -> list[str]:
    lines: list[str] = []
    for stmt in program.statements:
        if isinstance(stmt, Bind):
            if isinstance(stmt.expression, OutputProgram):
                lines.extend(_body_lines(stmt.expression))
                lines.append(f"{_local(stmt.identifier)} = [{', '.join(_fragment_exprs(stmt.expression))}]")
            else:
                # Closing paren on its own line so a trailing comment stays valid.
                lines.append(f"{_local(stmt.identifier)} = ({stmt.expression}\n)")
        else:
            lines.extend(textwrap.dedent(stmt.expression).strip("\n").splitlines())
    return lines


def _signature(params: Sequence[str]) -> str:
    if not params:
        return f"**{_EXTRA_ASSIGNS}"
    return f"*, {', '.join(params)}, **{_EXTRA_ASSIGNS}"


def generate_source(program: OutputProgram, *, name: str = "render", params: Sequence[str] = ()) -> str:
    """
    Render the Python source of a function executing `program`.

    `params` are the assign names the template's expressions refer to; they
    become keyword-only parameters. Unlisted assigns are accepted and ignored.
    """
    _check_name(name, "function name")
    for p in params:
        _check_name(p, "parameter name")

    _check_unreserved([name, *params], "Function and parameter names")
    if _EXTRA_ASSIGNS in params:
        raise CodegenError(f"Parameter name {_EXTRA_ASSIGNS!r} is reserved")

    env = Environment(
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )
    source = env.from_string(_FUNCTION_TEMPLATE).render(
        name=name,
        signature=_signature(params),
        body=_body_lines(program),
        fragments=_fragment_exprs(program),
    )
    logger.debug("Generated %d characters of source for %s", len(source), name)
    return source


def build_render_function(
    program: OutputProgram,
    *,
    name: str = "render",
    params: Sequence[str] = (),
    helpers: Mapping[str, Any] | None = None,
    filename: str = "<ioview>",
) -> Callable[..., list]:
    """
    Compile `program` into a callable returning its fragment tree.

    `helpers` become the function's globals (for example a `render` callable
    for sub-templates).
    """
    helpers = dict(helpers or {})
    if name in helpers:
        raise CodegenError(f"Function name {name!r} shadows a helper")
    _check_unreserved(helpers, "Helper names")

    source = generate_source(program, name=name, params=params)
    try:
        code = compile(source, filename, "exec")
    except SyntaxError as e:
        raise CodegenError(f"Generated source for {name!r} does not compile: {e.msg} (line {e.lineno})") from e

    exec(code, helpers)
    return helpers[name]
