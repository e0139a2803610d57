"""Tests for rendering template files end to end."""

from __future__ import annotations

import pytest

from ioview.renderer import RenderError, assign_params, render_file
from ioview.segmenter import TemplateSyntaxError


def _write(tmp_path, text, name="t.eex"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_render_uses_frontmatter_assigns(tmp_path):
    path = _write(tmp_path, "---\nname: Eric\n---\nHello, <%= name %>")

    result = render_file(path)

    assert result.text == "Hello, Eric"
    assert result.bindings == 1
    assert result.destination is None


def test_caller_assigns_override_frontmatter(tmp_path):
    path = _write(tmp_path, "---\nname: Eric\n---\nHello, <%= name %>")

    assert render_file(path, assigns={"name": "Ada"}).text == "Hello, Ada"


def test_render_writes_destination(tmp_path):
    path = _write(tmp_path, "<% xs = [1, 2] %>\nsum=<%= sum(xs) %>\n")
    out = tmp_path / "out" / "result.txt"

    result = render_file(path, destination=out, trim=True)

    assert result.destination == out.resolve()
    assert out.read_text(encoding="utf-8") == "sum=3"
    assert result.text == "sum=3"


def test_runtime_failure_is_wrapped(tmp_path):
    path = _write(tmp_path, "<%= 1 / zero %>")

    with pytest.raises(RenderError, match="Failed rendering") as exc:
        render_file(path, assigns={"zero": 0})

    assert isinstance(exc.value.__cause__, ZeroDivisionError)


def test_syntax_errors_report_file_lines(tmp_path):
    path = _write(tmp_path, "---\nname: Eric\n---\nok\n<%= name")

    with pytest.raises(TemplateSyntaxError) as exc:
        render_file(path)

    assert exc.value.line == 5


def test_assign_params_skips_unusable_names():
    assert assign_params({"b": 1, "a": 2, "not-valid": 3, "class": 4}) == ["a", "b"]


def test_flatten_failure_is_wrapped(tmp_path):
    """A bytes leaf that is not UTF-8 fails while flattening, not while executing."""
    path = _write(tmp_path, "<%= b'\\xff' %>")

    with pytest.raises(RenderError, match="Failed rendering") as exc:
        render_file(path)

    assert isinstance(exc.value.__cause__, UnicodeDecodeError)


def test_write_failure_is_wrapped(tmp_path):
    path = _write(tmp_path, "<%= b'\\xff' %>")

    with pytest.raises(RenderError):
        render_file(path, destination=tmp_path / "out.txt")
