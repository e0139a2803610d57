"""
program.py

Responsibility: the immutable values produced by template compilation.

- Fragments are the leaves of the output structure: literal text, or a
  reference to a value bound once by a statement.
- Statements are what runs before the output is produced: a binding of an
  expression to a fresh identifier, or an expression run only for effect.
- An `OutputProgram` is the ordered statements followed by the ordered
  fragments. Executing it means running the statements in order; the
  fragments, read in order, are the value to return.

Expressions are Python source text. A `Bind` may also hold a nested
`OutputProgram`: a finalized block embedded into its parent as one value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Union

# Expression markers understood by the engine. Anything else is forwarded to
# the default expression handler.
OUTPUT = "="
EFFECT = ""


@dataclass(frozen=True)
class LiteralText:
    text: str


@dataclass(frozen=True)
class ValueRef:
    identifier: str


Fragment = Union[LiteralText, ValueRef]


@dataclass(frozen=True)
class Bind:
    """Evaluate `expression` once and store it under `identifier`."""

    identifier: str
    expression: Union[str, "OutputProgram"]

    @property
    def nested(self) -> bool:
        return isinstance(self.expression, OutputProgram)


@dataclass(frozen=True)
class Effect:
    """Run `expression` for its side effects; produces no output."""

    expression: str


Statement = Union[Bind, Effect]


@dataclass(frozen=True)
class OutputProgram:
    statements: tuple[Statement, ...] = field(default_factory=tuple)
    fragments: tuple[Fragment, ...] = field(default_factory=tuple)

    def identifiers(self) -> Iterator[str]:
        """
        Yield every identifier bound by this program, nested blocks included,
        in the order the bindings execute.
        """
        for stmt in self.statements:
            if isinstance(stmt, Bind):
                if isinstance(stmt.expression, OutputProgram):
                    yield from stmt.expression.identifiers()
                yield stmt.identifier

    def is_empty(self) -> bool:
        return not self.statements and not self.fragments
