"""Error types and diagnostics shared by every interpreter stage."""
from __future__ import annotations

from dataclasses import dataclass

from .token import Token, TokenType


#host-visible record for a single reported problem
@dataclass(frozen=True, slots=True)
class Diagnostic:
    """One reported problem: `kind` is "static" or "runtime"."""

    kind: str
    line: int
    where: str
    message: str

    def __str__(self) -> str:
        if self.kind == "runtime":
            return f"[line {self.line}] {self.message}"
        if self.where:
            return f"[line {self.line}] Error at {self.where}: {self.message}"
        return f"[line {self.line}] Error: {self.message}"


#normalizes the base exception for all lexer/parser/interpreter layers
class LoxError(Exception):
    """Base class for Lox-related errors."""


#static errors stop the program from ever reaching the interpreter
class StaticError(LoxError):
    def __init__(self, message: str, line: int, where: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.where = where

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(kind="static", line=self.line, where=self.where, message=self.message)


#lexer records this for invalid characters and unterminated strings
class LexError(StaticError):
    """Raised when the lexer encounters an invalid character sequence."""


#parser uses this to surface syntax errors at the offending token
class ParseError(StaticError):
    """Raised when the parser encounters an invalid construct."""

    @classmethod
    def at(cls, token: Token, message: str) -> "ParseError":
        return cls(message, token.line, _where(token))


#resolver checks funnel through this to provide context-rich diagnostics
class ResolveError(StaticError):
    """Raised for variable-resolution failures."""

    @classmethod
    def at(cls, token: Token, message: str) -> "ResolveError":
        return cls(message, token.line, _where(token))


#runtime failures carry the token that was being evaluated
class LoxRuntimeError(LoxError):
    def __init__(self, token: Token, message: str) -> None:
        super().__init__(message)
        self.token = token
        self.message = message

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(kind="runtime", line=self.token.line, where=self.token.lexeme, message=self.message)


def _where(token: Token) -> str:
    if token.type is TokenType.EOF:
        return "end"
    return f"'{token.lexeme}'"
