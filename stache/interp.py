from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Iterator, List, Optional

from . import ast
from .errors import RenderError

logger = logging.getLogger(__name__)

HELPER_MISSING = "helperMissing"


@dataclass(frozen=True)
class RenderOptions:
    # Counts nested render calls, not template levels: a block helper costs
    # two (the helper and its block), a partial two (the tag and its body).
    max_depth: int = 100
    # When False, partial arguments are written into the caller's scope and
    # stay bound after the partial returns.
    isolate_partial_arguments: bool = True


DEFAULT_OPTIONS = RenderOptions()

# Helpers re-enter rendering through Block.render(); they continue the
# renderer (and depth count) of the call that invoked them.
_ACTIVE: ContextVar[Optional["Renderer"]] = ContextVar("stache_renderer", default=None)


class Renderer:
    def __init__(self, options: RenderOptions | None = None) -> None:
        self.options = options or DEFAULT_OPTIONS
        self.depth = 0

    def render(self, node: ast.Node, context) -> str:
        with self._enter():
            return self._render(node, context)

    def evaluate(self, param: ast.Parameter, context) -> object:
        """Resolve a helper parameter to the value handed to the helper."""
        with self._enter():
            target = param.target
            if isinstance(target, str):
                return context.get(target)
            if isinstance(target, ast.StringLiteral):
                return target.text
            return self._render(target, context)

    @contextmanager
    def _enter(self) -> Iterator[None]:
        if self.depth >= self.options.max_depth:
            raise RenderError(f"more than {self.options.max_depth} nested render calls")
        token = _ACTIVE.set(self)
        self.depth += 1
        try:
            yield
        finally:
            self.depth -= 1
            _ACTIVE.reset(token)

    def _render(self, node: ast.Node, context) -> str:
        if isinstance(node, (ast.TemplateContent, ast.StringLiteral)):
            return node.text
        if isinstance(node, ast.Block):
            return "".join(self.render(item, context) for item in node.items)
        if isinstance(node, ast.EscapedReplacement):
            return context.escaper.escape(self._replace(node, context))
        if isinstance(node, ast.Replacement):
            return self._replace(node, context)
        if isinstance(node, ast.EscapedHelper):
            return context.escaper.escape(self._call_helper(node, context))
        if isinstance(node, ast.Helper):
            return self._call_helper(node, context)
        if isinstance(node, ast.AsHelper):
            return self._call_as_helper(node, context)
        if isinstance(node, ast.PartialWithArgs):
            return self._call_partial_with_args(node, context)
        if isinstance(node, ast.Partial):
            output = self._call_partial(node.name, context)
            return _trim(output, node.trim_left, node.trim_right)
        if isinstance(node, ast.Parameter):
            return to_text(self.evaluate(node, context))
        raise RenderError(f"Unsupported node {node!r}")

    def _replace(self, node: ast.Replacement, context) -> str:
        helper = context.get_helper(node.target)
        if helper is not None:
            value = helper.apply(context, [], None, None)
        else:
            value = context.get(node.target)
        return _trim(to_text(value), node.trim_left, node.trim_right)

    def _call_helper(self, node: ast.Helper, context) -> str:
        helper = context.get_helper(node.name)
        if helper is None:
            output = self._helper_missing(node.name, context)
        else:
            params = self._evaluate_all(node.params, context)
            output = helper.apply(context, params, node.block, node.else_block)
        output = to_text(output)
        if node.block is None:
            output = _trim(output, node.trim_left, node.trim_right)
        return output

    def _call_as_helper(self, node: ast.AsHelper, context) -> str:
        helper = context.get_as_helper(node.name)
        if helper is None:
            # Falls back to the plain registry's helperMissing on purpose.
            return to_text(self._helper_missing(node.name, context))
        params = self._evaluate_all(node.params, context)
        return to_text(helper.apply_as(context, params, node.block_params, node.block, node.else_block))

    def _helper_missing(self, name: str, context) -> object:
        missing = context.get_helper(HELPER_MISSING)
        if missing is None:
            raise RenderError(f"no helper named '{name}' and no '{HELPER_MISSING}' helper registered")
        logger.debug("helper %r is not registered, calling %s", name, HELPER_MISSING)
        return missing.apply(context, [name], None, None)

    def _call_partial(self, name: str, context) -> str:
        partial = context.get_partial(name)
        if partial is None:
            raise RenderError(f"no partial named '{name}'")
        return to_text(partial.call_with_context(context))

    def _call_partial_with_args(self, node: ast.PartialWithArgs, context) -> str:
        if self.options.isolate_partial_arguments:
            with context.scope():
                self._bind_arguments(node, context)
                output = self._call_partial(node.name, context)
        else:
            logger.debug("binding arguments of partial %r into the caller's scope", node.name)
            self._bind_arguments(node, context)
            output = self._call_partial(node.name, context)
        return _trim(output, node.trim_left, node.trim_right)

    def _bind_arguments(self, node: ast.PartialWithArgs, context) -> None:
        for argument in node.arguments:
            context.add_item(argument.key, self.evaluate(argument.value, context))

    def _evaluate_all(self, params, context) -> List[object]:
        return [self.evaluate(param, context) for param in params]


def render(node: ast.Node, context, options: RenderOptions | None = None) -> str:
    return _renderer(options).render(node, context)


def evaluate(param: ast.Parameter, context, options: RenderOptions | None = None) -> object:
    return _renderer(options).evaluate(param, context)


def _renderer(options: RenderOptions | None) -> Renderer:
    active = _ACTIVE.get()
    if active is not None and (options is None or options is active.options):
        return active
    return Renderer(options)


def to_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def _trim(text: str, left: bool, right: bool) -> str:
    if left:
        text = text.lstrip()
    if right:
        text = text.rstrip()
    return text
