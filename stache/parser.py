from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Optional

from lark import Lark, Tree, UnexpectedInput
from lark.exceptions import UnexpectedCharacters, UnexpectedToken

from .ast import Block
from .builder import build, rule_name
from .errors import TemplateParseError

logger = logging.getLogger(__name__)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
    _GRAMMAR_SRC,
    parser="lalr",
    lexer="contextual",
    start="start",
    propagate_positions=True,
    maybe_placeholders=False,
)

BLOCK_RULES = frozenset({"block_helper", "as_block_helper"})

_TERMINAL_DESCRIPTIONS = {
    "TEXT": "template text",
    "ELSE": "'{{else}}'",
    "OPEN": "'{{'",
    "OPEN_RAW": "'{{{'",
    "OPEN_BLOCK": "'{{#'",
    "OPEN_END": "'{{/'",
    "OPEN_PARTIAL": "'{{>'",
    "CLOSE": "'}}'",
    "RBRACE": "'}'",
    "AS_PIPE": "'as |'",
    "PIPE": "'|'",
    "LPAR": "'('",
    "RPAR": "')'",
    "EQUALS": "'='",
    "NAME": "identifier",
    "DIRECTORY": "partial name",
    "SEGMENT": "'.segment'",
    "STRING": "quoted string",
    "_WS": "whitespace",
    "$END": "end of input",
}


def parse(text: str) -> Block:
    """Parse template source into its AST (a top-level `Block`)."""
    tree = parse_tree(text)
    block = build(tree)
    logger.debug("parsed %d chars into %d top-level nodes", len(text), len(block.items))
    return block


def parse_tree(text: str) -> Tree:
    """Parse template source into the concrete Lark tree.

    Raises TemplateParseError on malformed input, including a block whose
    closing tag does not repeat its opening name.
    """
    if not isinstance(text, str):
        raise TypeError(f"template source must be str, got {type(text).__name__}")
    try:
        tree = _PARSER.parse(text)
    except UnexpectedInput as exc:
        raise _translate_error(exc, text) from exc
    _check_closing_tags(tree, text)
    return tree


def closing_tag(name: str) -> re.Pattern[str]:
    """Build the parser for the one closing tag that may end block `name`."""
    return re.compile(r"\{\{~?/" + re.escape(name) + r"\s*~?\}\}")


def _check_closing_tags(tree: Tree, text: str) -> None:
    mismatches: List[TemplateParseError] = []
    for node in tree.iter_subtrees():
        if rule_name(node) not in BLOCK_RULES:
            continue
        name = node.children[1]
        end_tag = node.children[-1]
        open_end, found, close = end_tag.children
        if closing_tag(name.value).fullmatch(text, open_end.start_pos, close.end_pos):
            continue
        logger.debug("block %r at %d:%d closed by %r", name.value, name.line, name.column, found.value)
        mismatches.append(
            TemplateParseError(
                f"block '{name.value}' closed by '{found.value}'",
                position=found.start_pos,
                line=found.line,
                column=found.column,
                expected=[f"{{{{/{name.value}}}}}"],
                found=found.value,
            )
        )
    if mismatches:
        raise min(mismatches, key=lambda err: err.position)


def _translate_error(exc: UnexpectedInput, text: str) -> TemplateParseError:
    found: Optional[str] = None
    position = exc.pos_in_stream if exc.pos_in_stream is not None and exc.pos_in_stream >= 0 else len(text)
    if isinstance(exc, UnexpectedToken):
        expected = exc.expected or ()
        if exc.token.type == "$END":
            position = len(text)
            message = "unexpected end of template"
        else:
            found = exc.token.value
            message = f"unexpected {_describe(exc.token.type)} {found!r}"
    elif isinstance(exc, UnexpectedCharacters):
        expected = exc.allowed or ()
        found = exc.char
        message = f"unexpected character {found!r}"
    else:
        expected = getattr(exc, "expected", None) or ()
        message = "unexpected end of template"
    line, column = _line_column(text, position)
    return TemplateParseError(
        message,
        position=position,
        line=line,
        column=column,
        expected=[_describe(name) for name in expected],
        found=found,
    )


def _describe(terminal: str) -> str:
    return _TERMINAL_DESCRIPTIONS.get(terminal, terminal)


def _line_column(text: str, position: int) -> tuple[int, int]:
    line = text.count("\n", 0, position) + 1
    column = position - (text.rfind("\n", 0, position) + 1) + 1
    return line, column

