"""
cli.py

Responsibility: CLI entrypoint for ioview.

Commands:
- `render`: load a template file, merge assigns (frontmatter < --context
  file < --set), render, print or write the result
- `compile`: print the Python source generated for a template

This module orchestrates only; the work lives in:
- Template files: `loader.py`
- Rendering: `renderer.py`
- Compilation and code generation: `compiler.py`, `codegen.py`
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any

import yaml

from ioview.codegen import generate_source
from ioview.compiler import compile_string
from ioview.engine import EngineOptions
from ioview.errors import IoviewError
from ioview.loader import load_context, load_template
from ioview.renderer import assign_params, render_file


class CLIError(IoviewError, RuntimeError):
    pass


def _parse_set(pairs: list[str]) -> dict[str, Any]:
    """
    Parse `key=value` overrides. Values are read as YAML scalars, so
    `hp=50` is an int and `name=Eric` a string.
    """
    out: dict[str, Any] = {}
    for raw in pairs:
        if "=" not in raw:
            raise CLIError(f"--set expects key=value, got: {raw!r}")
        k, v = raw.split("=", 1)
        k = k.strip()
        if not k:
            raise CLIError(f"--set expects key=value, got: {raw!r}")
        try:
            out[k] = yaml.safe_load(v) if v else ""
        except yaml.YAMLError:
            out[k] = v
    return out


def render_cmd(args: argparse.Namespace) -> int:
    assigns: dict[str, Any] = {}
    if args.context:
        assigns.update(load_context(args.context))
    assigns.update(_parse_set(args.set or []))

    result = render_file(args.template_path, assigns=assigns, destination=args.output, trim=bool(args.trim))
    if result.destination is None:
        sys.stdout.write(result.text)
    return 0


def compile_cmd(args: argparse.Namespace) -> int:
    source = load_template(args.template_path)
    program = compile_string(source.body, EngineOptions(line=source.line, trim=bool(args.trim)))
    sys.stdout.write(generate_source(program, name=args.name, params=assign_params(source.assigns)))
    return 0


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ioview", description="ioview - compile <% %> templates to fragment trees")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    r = sub.add_parser("render", help="Render a template file")
    r.add_argument("template_path", help="Path to the template file")
    r.add_argument("--context", default=None, help="YAML file with assigns")
    r.add_argument("--set", action="append", metavar="KEY=VALUE", help="Set an assign (repeatable)")
    r.add_argument("--output", default=None, help="Write to this file instead of stdout")
    r.add_argument("--trim", action="store_true", help="Drop lines holding only a non-output tag")
    r.set_defaults(func=render_cmd)

    c = sub.add_parser("compile", help="Print the generated Python source for a template")
    c.add_argument("template_path", help="Path to the template file")
    c.add_argument("--name", default="render", help="Generated function name (default: render)")
    c.add_argument("--trim", action="store_true", help="Drop lines holding only a non-output tag")
    c.set_defaults(func=compile_cmd)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return int(args.func(args))
    except IoviewError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
