"""
errors.py

Responsibility: the shared base for every error raised by ioview.

Each module defines its own subclasses next to the code that raises them
(engine, segmenter, codegen, views, loader, renderer, cli); callers that only
care about "something in ioview failed" catch `IoviewError`.
"""

from __future__ import annotations


class IoviewError(Exception):
    pass
