from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union


class Node:
    def render(self, context) -> str:
        from .interp import render

        return render(self, context)


@dataclass(frozen=True)
class TemplateContent(Node):
    text: str


@dataclass(frozen=True)
class StringLiteral(Node):
    text: str


@dataclass(frozen=True)
class Parameter(Node):
    # A dotted variable path, or a nested node for subexpressions and literals.
    target: Union[str, Node]

    def evaluate(self, context) -> object:
        from .interp import evaluate

        return evaluate(self, context)


@dataclass(frozen=True)
class Replacement(Node):
    target: str
    trim_left: bool = False
    trim_right: bool = False


@dataclass(frozen=True)
class EscapedReplacement(Replacement):
    pass


@dataclass(frozen=True)
class Helper(Node):
    name: str
    params: Tuple[Parameter, ...] = ()
    block: Optional["Block"] = None
    else_block: Optional["Block"] = None
    trim_left: bool = False
    trim_right: bool = False

    @property
    def is_block(self) -> bool:
        return self.block is not None


@dataclass(frozen=True)
class EscapedHelper(Helper):
    pass


@dataclass(frozen=True)
class AsHelper(Node):
    name: str
    params: Tuple[Parameter, ...]
    block_params: Tuple[str, ...]
    block: Optional["Block"] = None
    else_block: Optional["Block"] = None
    trim_open_left: bool = False
    trim_open_right: bool = False
    trim_close_left: bool = False
    trim_close_right: bool = False
    # Trim markers are not accepted on the else tag; kept for shape parity.
    trim_else_left: bool = False
    trim_else_right: bool = False


@dataclass(frozen=True)
class Partial(Node):
    name: str
    trim_left: bool = False
    trim_right: bool = False


@dataclass(frozen=True)
class Argument:
    key: str
    value: Parameter


@dataclass(frozen=True)
class PartialWithArgs(Node):
    name: str
    arguments: Tuple[Argument, ...]
    trim_left: bool = False
    trim_right: bool = False


@dataclass(eq=True, unsafe_hash=False)
class Block(Node):
    # Not frozen: `items` grows through add_item, so blocks (and nodes that
    # hold them) compare by value but are unhashable.
    items: List[Node] = field(default_factory=list)

    def fn(self, context) -> str:
        return self.render(context)

    def add_item(self, item: Node) -> None:
        """Append a node to this block in place.

        The block belongs to the parsed template, so the node is also
        rendered by every later render of that template.
        """
        self.items.append(item)

    def __iter__(self):
        return iter(self.items)
