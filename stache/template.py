from __future__ import annotations

from typing import Optional

from .ast import Block
from .context import Context
from .interp import RenderOptions, render
from .parser import parse


class Template:
    """A template parsed once and rendered any number of times.

    Also satisfies the partial contract (`call_with_context`), so instances
    can be registered as partials directly.
    """

    def __init__(self, source: str, name: Optional[str] = None) -> None:
        self.source = source
        self.name = name
        self.ast: Block = parse(source)

    def render(self, data: object = None, options: RenderOptions | None = None) -> str:
        # Anything without the context surface is data for a fresh Context.
        if hasattr(data, "get_helper") and hasattr(data, "escaper"):
            context = data
        else:
            context = Context(data)
        return render(self.ast, context, options)

    def call_with_context(self, context) -> str:
        return render(self.ast, context)

    def __repr__(self) -> str:
        label = self.name or self.source[:20]
        return f"Template({label!r})"
