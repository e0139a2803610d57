"""End-to-end properties of compiled templates: chunks -> program -> tree -> text."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from ioview.codegen import build_render_function
from ioview.compiler import compile_chunks, compile_string
from ioview.engine import EngineOptions, UnsupportedMarkerError
from ioview.fragments import flatten
from ioview.program import LiteralText, ValueRef
from ioview.segmenter import Expression, Literal

CHUNK_CASES = [
    [],
    [Literal("only text")],
    [Expression("=", "a")],
    [Literal("Hello, "), Expression("=", "a")],
    [Expression("=", "a"), Literal(" and "), Expression("=", "b"), Literal(".")],
    [Literal("x"), Expression("", "c = a * 2"), Expression("=", "c"), Literal("y"), Expression("=", "b")],
]

ASSIGNS = {"a": 21, "b": "bee"}


def _naive(chunks, assigns):
    """Concatenate literals and expression values directly, in source order."""
    scope = dict(assigns)
    out = []
    for chunk in chunks:
        if isinstance(chunk, Literal):
            out.append(chunk.text)
        elif chunk.marker == "=":
            out.append(str(eval(chunk.code, {}, scope)))
        else:
            exec(chunk.code, {}, scope)
    return "".join(out)


def test_scenario_greeting():
    program = compile_chunks([Literal("Hello, "), Expression("=", "name")])
    render = build_render_function(program, params=("name",))

    assert flatten(render(name="Eric")) == "Hello, Eric"


def test_scenario_item_list_keeps_order():
    """Each item renders through a sub-template; the list is embedded as one value."""
    item = build_render_function(
        compile_chunks([Literal("- "), Expression("=", "item.name")]),
        name="item_template",
        params=("item",),
    )
    listing = build_render_function(
        compile_chunks([Expression("=", "[render_item(item=i) for i in items]")]),
        params=("items",),
        helpers={"render_item": item},
    )

    items = [SimpleNamespace(name="Potion"), SimpleNamespace(name="Sword")]

    assert flatten(listing(items=items)) == "- Potion- Sword"


@pytest.mark.parametrize("chunks", CHUNK_CASES)
def test_fragment_order_matches_chunk_order(chunks):
    program = compile_chunks(chunks)

    expected = [
        c.text if isinstance(c, Literal) else "=" for c in chunks if isinstance(c, Literal) or c.marker == "="
    ]
    actual = [f.text if isinstance(f, LiteralText) else "=" for f in program.fragments]
    assert actual == expected

    bound = [s.expression for s in program.statements]
    assert bound == [c.code for c in chunks if isinstance(c, Expression)]


@pytest.mark.parametrize("chunks", CHUNK_CASES)
def test_equivalent_to_naive_concatenation(chunks):
    render = build_render_function(compile_chunks(chunks), params=("a", "b"))

    assert flatten(render(**ASSIGNS)) == _naive(chunks, ASSIGNS)


def test_output_expression_is_evaluated_once():
    calls = []

    def tick():
        calls.append(1)
        return len(calls)

    program = compile_string("<%= tick() %>,<%= 'x' %>")
    render = build_render_function(program, helpers={"tick": tick})

    tree = render()
    first = flatten(tree)
    second = flatten(tree)

    assert first == second == "1,x"
    assert len(calls) == 1


def test_value_is_referenced_by_position():
    program = compile_string("<%= a %>-<%= a %>")

    assert program.fragments == (ValueRef("arg0"), LiteralText("-"), ValueRef("arg1"))


def test_compile_string_empty():
    program = compile_string("")

    assert program.is_empty()


def test_compile_string_with_trim_and_effects():
    source = "<% total = sum(values) %>\nTotal: <%= total %>\n"
    render = build_render_function(
        compile_string(source, EngineOptions(trim=True)),
        params=("values",),
    )

    assert flatten(render(values=[1, 2, 3])) == "Total: 6"


def test_unsupported_marker_reports_template_line():
    with pytest.raises(UnsupportedMarkerError) as exc:
        compile_string("a\n\n<%| x %>", EngineOptions(line=10))

    assert exc.value.line == 12
