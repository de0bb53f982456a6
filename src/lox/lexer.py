"""Lexical analysis for the Lox language."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .errors import LexError
from .token import KEYWORDS, Literal, Token, TokenType


#characters whose token kind is fully decided by the character itself
_SINGLE_CHAR_TOKENS = {
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    "-": TokenType.MINUS,
    "+": TokenType.PLUS,
    ";": TokenType.SEMICOLON,
    "*": TokenType.STAR,
}


#transforms raw characters into a stream of tokens consumed by the parser
@dataclass(slots=True)
class Lexer:
    source: str
    errors: List[LexError] = field(init=False, default_factory=list)
    _length: int = field(init=False)
    _start: int = field(init=False, default=0)
    _index: int = field(init=False, default=0)
    _line: int = field(init=False, default=1)

    def __post_init__(self) -> None:
        self._length = len(self.source)
        self._start = 0
        self._index = 0
        self._line = 1

    def lex(self) -> List[Token]:
        """Scan the whole source; problems are collected on `errors`, never raised."""
        tokens: List[Token] = []
        while not self._is_at_end():
            self._start = self._index
            token = self._scan_token()
            if token is not None:
                tokens.append(token)
        tokens.append(Token(type=TokenType.EOF, lexeme="", line=self._line))
        return tokens

    def _scan_token(self) -> Optional[Token]:
        char = self._advance()

        if char in _SINGLE_CHAR_TOKENS:
            return self._make_token(_SINGLE_CHAR_TOKENS[char])

        match char:
            case "!":
                return self._make_token(TokenType.BANG_EQUAL if self._match("=") else TokenType.BANG)
            case "=":
                return self._make_token(TokenType.EQUAL_EQUAL if self._match("=") else TokenType.EQUAL)
            case "<":
                return self._make_token(TokenType.LESS_EQUAL if self._match("=") else TokenType.LESS)
            case ">":
                return self._make_token(TokenType.GREATER_EQUAL if self._match("=") else TokenType.GREATER)
            case "/":
                if self._match("/"):
                    self._line_comment()
                    return None
                return self._make_token(TokenType.SLASH)
            case " " | "\r" | "\t":
                return None
            case "\n":
                self._line += 1
                return None
            case '"':
                return self._string()

        if _is_digit(char):
            return self._number()
        if char.isalpha():
            return self._identifier()

        self.errors.append(LexError(f"Unexpected character {char!r}.", self._line))
        return None

    # Internal helpers -------------------------------------------------

    def _is_at_end(self) -> bool:
        return self._index >= self._length

    def _advance(self) -> str:
        char = self.source[self._index]
        self._index += 1
        return char

    def _peek(self) -> str:
        if self._is_at_end():
            return "\0"
        return self.source[self._index]

    def _peek_next(self) -> str:
        if self._index + 1 >= self._length:
            return "\0"
        return self.source[self._index + 1]

    def _match(self, expected: str) -> bool:
        if self._is_at_end():
            return False
        if self.source[self._index] != expected:
            return False
        self._index += 1
        return True

    def _make_token(self, token_type: TokenType, literal: Optional[Literal] = None) -> Token:
        lexeme = self.source[self._start:self._index]
        return Token(token_type, lexeme, self._line, literal)

    #keywords match case-insensitively, so `PRINT` and `Print` are both keywords
    def _identifier(self) -> Token:
        while self._peek().isalnum():
            self._advance()
        lexeme = self.source[self._start:self._index]
        token_type = KEYWORDS.get(lexeme.lower(), TokenType.IDENTIFIER)
        return self._make_token(token_type)

    #a trailing '.' is left for the next token unless a digit follows it
    def _number(self) -> Token:
        while _is_digit(self._peek()):
            self._advance()
        if self._peek() == "." and _is_digit(self._peek_next()):
            self._advance()
            while _is_digit(self._peek()):
                self._advance()
        lexeme = self.source[self._start:self._index]
        return self._make_token(TokenType.NUMBER, float(lexeme))

    def _string(self) -> Optional[Token]:
        start_line = self._line
        while not self._is_at_end() and self._peek() != '"':
            if self._peek() == "\n":
                self._line += 1
            self._advance()

        if self._is_at_end():
            self.errors.append(LexError("Unterminated string.", start_line))
            return None

        self._advance()  # closing quote
        value = self.source[self._start + 1:self._index - 1]
        return self._make_token(TokenType.STRING, value)

    def _line_comment(self) -> None:
        while not self._is_at_end() and self._peek() != "\n":
            self._advance()


#ascii only; str.isdigit also accepts superscripts that float() rejects
def _is_digit(char: str) -> bool:
    return "0" <= char <= "9"
