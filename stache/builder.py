from __future__ import annotations

from typing import Callable, Dict, Optional, Tuple

from lark import Token, Tree

from .ast import (
    Argument,
    AsHelper,
    Block,
    EscapedHelper,
    EscapedReplacement,
    Helper,
    Node,
    Parameter,
    Partial,
    PartialWithArgs,
    Replacement,
    StringLiteral,
    TemplateContent,
)
from .errors import BuilderError


def build(tree: Tree) -> Block:
    """Convert a concrete parse tree into the AST. Evaluates nothing."""
    if rule_name(tree) == "start":
        tree = tree.children[0]
    return _build_body(tree)


def _build_body(tree: Tree) -> Block:
    if rule_name(tree) != "body":
        raise BuilderError(f"expected body, got {rule_name(tree)}")
    return Block(items=[_build_item(child) for child in tree.children])


def _build_item(tree: Tree) -> Node:
    builder = _ITEM_DISPATCH.get(rule_name(tree))
    if builder is None:
        raise BuilderError(f"no AST node for parse tree {rule_name(tree)!r}")
    return builder(tree)


def _build_content(tree: Tree) -> TemplateContent:
    return TemplateContent(text=tree.children[0].value)


def _build_escaped_replacement(tree: Tree) -> EscapedReplacement:
    open_tok, path, close_tok = tree.children
    return EscapedReplacement(
        target=_build_path(path),
        trim_left=_trims(open_tok),
        trim_right=_trims(close_tok),
    )


def _build_replacement(tree: Tree) -> Replacement:
    open_tok, path, close_tok, _rbrace = tree.children
    return Replacement(
        target=_build_path(path),
        trim_left=_trims(open_tok),
        trim_right=_trims(close_tok),
    )


def _build_escaped_helper(tree: Tree) -> EscapedHelper:
    open_tok, name, params, close_tok = tree.children
    return EscapedHelper(
        name=name.value,
        params=_build_params(params),
        trim_left=_trims(open_tok),
        trim_right=_trims(close_tok),
    )


def _build_helper(tree: Tree) -> Helper:
    open_tok, name, params, close_tok, _rbrace = tree.children
    return Helper(
        name=name.value,
        params=_build_params(params),
        trim_left=_trims(open_tok),
        trim_right=_trims(close_tok),
    )


def _build_partial(tree: Tree) -> Partial | PartialWithArgs:
    open_tok, directory = tree.children[0], tree.children[1]
    close_tok = tree.children[-1]
    arguments = _child(tree, "arguments")
    if arguments is None:
        return Partial(
            name=directory.value,
            trim_left=_trims(open_tok),
            trim_right=_trims(close_tok),
        )
    return PartialWithArgs(
        name=directory.value,
        arguments=tuple(_build_argument(arg) for arg in arguments.children),
        trim_left=_trims(open_tok),
        trim_right=_trims(close_tok),
    )


def _build_argument(tree: Tree) -> Argument:
    key, _equals, value = tree.children
    return Argument(key=key.value, value=_build_param(value))


def _build_block_helper(tree: Tree) -> Helper | AsHelper:
    open_tok, name = tree.children[0], tree.children[1]
    open_close = next(child for child in tree.children if isinstance(child, Token) and child.type == "CLOSE")
    params_node = _child(tree, "params")
    params = _build_params(params_node) if params_node is not None else ()
    block = _build_body(_child(tree, "body"))
    else_node = _child(tree, "else_branch")
    else_block = _build_body(else_node.children[1]) if else_node is not None else None
    end_open, _end_name, end_close = _child(tree, "end_tag").children

    block_params = _child(tree, "block_params")
    if block_params is None:
        return Helper(
            name=name.value,
            params=params,
            block=block,
            else_block=else_block,
            trim_left=_trims(open_tok),
            trim_right=_trims(end_close),
        )
    return AsHelper(
        name=name.value,
        params=params,
        block_params=tuple(tok.value for tok in block_params.children),
        block=block,
        else_block=else_block,
        trim_open_left=_trims(open_tok),
        trim_open_right=_trims(open_close),
        trim_close_left=_trims(end_open),
        trim_close_right=_trims(end_close),
    )


def _build_params(tree: Tree) -> Tuple[Parameter, ...]:
    return tuple(_build_param(child) for child in tree.children)


def _build_param(tree: Tree) -> Parameter:
    kind = rule_name(tree)
    if kind == "path":
        return Parameter(target=_build_path(tree))
    if kind == "string":
        return Parameter(target=StringLiteral(text=tree.children[0].value[1:-1]))
    if kind == "subexpression":
        params_node = _child(tree, "params")
        return Parameter(
            target=Helper(
                name=tree.children[1].value,
                params=_build_params(params_node) if params_node is not None else (),
            )
        )
    raise BuilderError(f"no parameter shape for parse tree {kind!r}")


def _build_path(tree: Tree) -> str:
    if rule_name(tree) != "path":
        raise BuilderError(f"expected path, got {rule_name(tree)}")
    return "".join(tok.value for tok in tree.children)


def _trims(token: Token) -> bool:
    return "~" in token.value


def _child(tree: Tree, kind: str) -> Optional[Tree]:
    return next(
        (child for child in tree.children if isinstance(child, Tree) and rule_name(child) == kind),
        None,
    )


def rule_name(node: Tree | Token) -> str:
    """Rule of a tree or terminal type of a token, as a plain str."""
    if isinstance(node, Token):
        return node.type
    return str(node.data)


_ITEM_DISPATCH: Dict[str, Callable[[Tree], Node]] = {
    "content": _build_content,
    "escaped_replacement": _build_escaped_replacement,
    "replacement": _build_replacement,
    "escaped_helper": _build_escaped_helper,
    "helper": _build_helper,
    "partial": _build_partial,
    "block_helper": _build_block_helper,
    "as_block_helper": _build_block_helper,
}
