"""
views.py

Responsibility: a registry of named templates that can render each other.

    view = View()
    view.template("item", "- <%= item['name'] %>", params=("item",))
    view.template(
        "inventory",
        "Items:\\n<%= [render('item', item=i) for i in items] %>",
        params=("items",),
    )
    view.render_to_string("inventory", items=[{"name": "Potion"}])

Every compiled template sees `render` bound to its view, so a sub-render is an
ordinary output expression and its fragment tree is embedded as one value.
"""

from __future__ import annotations

from typing import Any, Callable, Sequence

from ioview.codegen import build_render_function
from ioview.compiler import compile_string
from ioview.engine import EngineOptions
from ioview.errors import IoviewError
from ioview.fragments import flatten


class ViewError(IoviewError):
    pass


class View:
    def __init__(self, helpers: dict[str, Any] | None = None) -> None:
        self._helpers = dict(helpers or {})
        self._renderers: dict[str, Callable[..., Any]] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._renderers

    def names(self) -> list[str]:
        return sorted(self._renderers)

    def register(self, name: str, func: Callable[..., Any] | None = None):
        """
        Register a plain render function under `name`.

        Works as a call (`view.register("x", fn)`) or a decorator
        (`@view.register("x")`).
        """
        if func is None:

            def decorator(f: Callable[..., Any]) -> Callable[..., Any]:
                self._renderers[name] = f
                return f

            return decorator
        self._renderers[name] = func
        return func

    def template(
        self,
        name: str,
        source: str,
        *,
        params: Sequence[str] = (),
        options: EngineOptions | None = None,
    ) -> Callable[..., Any]:
        """Compile `source` and register the resulting render function."""
        program = compile_string(source, options)
        func = build_render_function(
            program,
            name="template",
            params=params,
            helpers={**self._helpers, "render": self.render},
            filename=f"<ioview:{name}>",
        )
        self._renderers[name] = func
        return func

    def render(self, name: str, /, **assigns: Any) -> Any:
        try:
            func = self._renderers[name]
        except KeyError:
            raise ViewError(f"Unknown template: {name!r}") from None
        return func(**assigns)

    def render_to_string(self, name: str, /, **assigns: Any) -> str:
        return flatten(self.render(name, **assigns))
