from __future__ import annotations

from typing import Iterable, Optional, Tuple


class TemplateError(Exception):
    pass


class TemplateParseError(TemplateError):
    """Malformed template source.

    `position` is a 0-based offset into the source, `line`/`column` are
    1-based. `expected` lists what could have matched at that point.
    """

    def __init__(
        self,
        message: str,
        position: int,
        line: int,
        column: int,
        expected: Iterable[str] = (),
        found: Optional[str] = None,
    ) -> None:
        self.position = position
        self.line = line
        self.column = column
        self.expected: Tuple[str, ...] = tuple(sorted(set(expected)))
        self.found = found
        detail = f"{line}:{column}: {message}"
        if self.expected:
            detail += f" (expected one of: {', '.join(self.expected)})"
        super().__init__(detail)


class RenderError(TemplateError):
    pass


class BuilderError(TemplateError):
    """Raised when a parse tree shape has no AST counterpart."""
