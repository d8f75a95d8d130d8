"""Reference rendering context.

The evaluator only needs the capability surface below (variable lookup,
three registries, a binding operation and an escaper); hosts may pass any
object that provides it. `Context` is the implementation shipped with the
package.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Optional, Protocol

from .ast import Block
from .escaper import HtmlEscaper

logger = logging.getLogger(__name__)

_MISSING = object()
_SCALARS = (str, bytes, int, float, bool)


class Escaper(Protocol):
    def escape(self, value: str) -> str: ...


class HelperLike(Protocol):
    def apply(
        self,
        context: Any,
        params: Sequence[object],
        block: Optional[Block] = None,
        else_block: Optional[Block] = None,
    ) -> object: ...


class AsHelperLike(Protocol):
    def apply_as(
        self,
        context: Any,
        params: Sequence[object],
        block_params: Sequence[str],
        block: Optional[Block] = None,
        else_block: Optional[Block] = None,
    ) -> object: ...


class PartialLike(Protocol):
    def call_with_context(self, context: Any) -> str: ...


HelperImpl = Callable[[Any, Sequence[object], Optional[Block], Optional[Block]], object]
AsHelperImpl = Callable[[Any, Sequence[object], Sequence[str], Optional[Block], Optional[Block]], object]


@dataclass
class FunctionHelper:
    impl: HelperImpl

    def apply(self, context, params, block=None, else_block=None) -> object:
        return self.impl(context, params, block, else_block)


@dataclass
class FunctionAsHelper:
    impl: AsHelperImpl

    def apply_as(self, context, params, block_params, block=None, else_block=None) -> object:
        return self.impl(context, params, block_params, block, else_block)


class Scope:
    def __init__(self, parent: Scope | None = None, this: object = _MISSING) -> None:
        self.parent = parent
        self.this = this
        self.values: Dict[str, object] = {}

    def define(self, name: str, value: object) -> None:
        self.values[name] = value

    def lookup(self, name: str) -> object:
        scope: Scope | None = self
        while scope is not None:
            if name in scope.values:
                return scope.values[name]
            if scope.this is not _MISSING:
                value = _step(scope.this, name)
                if value is not _MISSING:
                    return value
            scope = scope.parent
        return _MISSING

    def subject(self) -> object:
        scope: Scope | None = self
        while scope is not None:
            if scope.this is not _MISSING:
                return scope.this
            scope = scope.parent
        return None


class Context:
    def __init__(
        self,
        data: object = None,
        *,
        helpers: Mapping[str, object] | None = None,
        as_helpers: Mapping[str, object] | None = None,
        partials: Mapping[str, object] | None = None,
        escaper: Escaper | None = None,
    ) -> None:
        self._scope = Scope(this={} if data is None else data)
        self._helpers: Dict[str, HelperLike] = {}
        self._as_helpers: Dict[str, AsHelperLike] = {}
        self._partials: Dict[str, PartialLike] = {}
        self.escaper: Escaper = escaper or HtmlEscaper()
        for name, helper in (helpers or {}).items():
            self.register_helper(name, helper)
        for name, helper in (as_helpers or {}).items():
            self.register_as_helper(name, helper)
        for name, partial in (partials or {}).items():
            self.register_partial(name, partial)

    # Variables

    def get(self, path: str) -> object:
        """Resolve a dotted path; anything missing resolves to None."""
        head, *rest = path.split(".")
        if head == "this":
            value = self._scope.subject()
        else:
            value = self._scope.lookup(head)
        for segment in rest:
            if value is _MISSING:
                break
            value = _step(value, segment)
        return None if value is _MISSING else value

    def add_item(self, key: str, value: object) -> None:
        self._scope.define(key, value)

    @contextmanager
    def scope(self, this: object = _MISSING, bindings: Mapping[str, object] | None = None) -> Iterator[Context]:
        """Push a child scope for the duration of the block."""
        self._scope = Scope(parent=self._scope, this=this)
        for key, value in (bindings or {}).items():
            self._scope.define(key, value)
        try:
            yield self
        finally:
            self._scope = self._scope.parent

    # Registries

    def register_helper(self, name: str, helper: HelperLike | HelperImpl) -> None:
        if not hasattr(helper, "apply"):
            helper = FunctionHelper(helper)
        self._helpers[name] = helper
        logger.debug("registered helper %r", name)

    def register_as_helper(self, name: str, helper: AsHelperLike | AsHelperImpl) -> None:
        if not hasattr(helper, "apply_as"):
            helper = FunctionAsHelper(helper)
        self._as_helpers[name] = helper
        logger.debug("registered block-parameter helper %r", name)

    def register_partial(self, name: str, partial: PartialLike | str) -> None:
        if isinstance(partial, str):
            from .template import Template

            partial = Template(partial, name=name)
        self._partials[name] = partial
        logger.debug("registered partial %r", name)

    def get_helper(self, name: str) -> Optional[HelperLike]:
        return self._helpers.get(name)

    def get_as_helper(self, name: str) -> Optional[AsHelperLike]:
        return self._as_helpers.get(name)

    def get_partial(self, name: str) -> Optional[PartialLike]:
        return self._partials.get(name)


def _step(value: object, segment: str) -> object:
    if isinstance(value, Mapping):
        return value[segment] if segment in value else _MISSING
    if isinstance(value, Sequence) and not isinstance(value, str) and segment.isdigit():
        index = int(segment)
        return value[index] if index < len(value) else _MISSING
    if segment.startswith("_") or isinstance(value, _SCALARS):
        return _MISSING
    return getattr(value, segment, _MISSING)
