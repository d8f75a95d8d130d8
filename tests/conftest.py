from __future__ import annotations

import pytest

from stache import Context


def each(context, params, block, else_block):
    items = params[0] if params else None
    if not items:
        return else_block.render(context) if else_block is not None else ""
    parts = []
    last = len(items) - 1
    for index, item in enumerate(items):
        bindings = {"@index": index, "@first": index == 0, "@last": index == last}
        with context.scope(this=item, bindings=bindings):
            parts.append(block.render(context))
    return "".join(parts)


def each_as(context, params, block_params, block, else_block):
    items = params[0] if params else None
    if not items:
        return else_block.render(context) if else_block is not None else ""
    parts = []
    for index, item in enumerate(items):
        bindings = {block_params[0]: item}
        if len(block_params) > 1:
            bindings[block_params[1]] = index
        with context.scope(bindings=bindings):
            parts.append(block.render(context))
    return "".join(parts)


def if_(context, params, block, else_block):
    if params and params[0]:
        return block.render(context)
    return else_block.render(context) if else_block is not None else ""


def upper(context, params, block, else_block):
    if block is not None:
        return block.render(context).upper()
    return str(params[0]).upper()


def concat(context, params, block, else_block):
    return "".join(str(param) for param in params)


def helper_missing(context, params, block, else_block):
    return f"missing:{params[0]}"


@pytest.fixture
def make_context():
    def factory(data=None, **kwargs) -> Context:
        ctx = Context(data, **kwargs)
        ctx.register_helper("each", each)
        ctx.register_helper("if", if_)
        ctx.register_helper("upper", upper)
        ctx.register_helper("concat", concat)
        ctx.register_helper("helperMissing", helper_missing)
        ctx.register_as_helper("each", each_as)
        return ctx

    return factory
