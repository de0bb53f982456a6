"""Lox: a small tree-walking scripting language interpreter."""

#makes package exports explicit for downstream imports
from . import ast, environment, interpreter, lexer, natives, parser, printer, runtime, semantic, token

__all__ = [
    "ast",
    "environment",
    "interpreter",
    "lexer",
    "natives",
    "parser",
    "printer",
    "runtime",
    "semantic",
    "token",
]
