from __future__ import annotations

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
from .context import Context, FunctionAsHelper, FunctionHelper, Scope
from .errors import BuilderError, RenderError, TemplateError, TemplateParseError
from .escaper import HtmlEscaper, PassthroughEscaper
from .interp import DEFAULT_OPTIONS, HELPER_MISSING, RenderOptions, Renderer, render
from .parser import parse, parse_tree
from .template import Template

__all__ = [
    "Argument",
    "AsHelper",
    "Block",
    "BuilderError",
    "Context",
    "DEFAULT_OPTIONS",
    "EscapedHelper",
    "EscapedReplacement",
    "FunctionAsHelper",
    "FunctionHelper",
    "HELPER_MISSING",
    "Helper",
    "HtmlEscaper",
    "Node",
    "Parameter",
    "Partial",
    "PartialWithArgs",
    "PassthroughEscaper",
    "RenderError",
    "RenderOptions",
    "Renderer",
    "Replacement",
    "Scope",
    "StringLiteral",
    "Template",
    "TemplateContent",
    "TemplateError",
    "TemplateParseError",
    "parse",
    "parse_tree",
    "render",
]
