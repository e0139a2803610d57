"""
fragments.py

Responsibility: consume fragment trees.

A fragment tree is a text leaf, any other value, or a list/tuple of trees.
Nothing is concatenated until `flatten` (or `write_fragments`) walks the tree
depth-first, left to right. Walking never mutates the tree, so a tree can be
flattened any number of times.
"""

from __future__ import annotations

from typing import Any, Iterator, TextIO


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def iter_fragments(tree: Any) -> Iterator[str]:
    """Yield the text pieces of `tree` in output order."""
    # Explicit stack of iterators; deep nesting must not hit the recursion limit.
    stack: list[Iterator[Any]] = [iter((tree,))]
    while stack:
        for item in stack[-1]:
            if isinstance(item, (list, tuple)):
                stack.append(iter(item))
                break
            if isinstance(item, str):
                if item:
                    yield item
            else:
                piece = _text(item)
                if piece:
                    yield piece
        else:
            stack.pop()


def flatten(tree: Any) -> str:
    return "".join(iter_fragments(tree))


def write_fragments(tree: Any, stream: TextIO) -> int:
    """Write `tree` piece by piece to `stream`; returns characters written."""
    written = 0
    for piece in iter_fragments(tree):
        stream.write(piece)
        written += len(piece)
    return written


def interpolate(*parts: Any) -> list[Any]:
    """
    Build a fragment list from already-evaluated parts, in order.

    The lightweight sibling of compiled templates: no bindings, no deferred
    work. Each part is evaluated by the caller exactly once, before the call.

        interpolate("Hello, ", name)  ->  ["Hello, ", name]
    """
    return [part for part in parts if not (isinstance(part, str) and not part)]
