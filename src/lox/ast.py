"""Abstract syntax tree definitions for Lox.

Every expression gets a session-unique `node_id` when it is built; the
resolver keys hop distances on it rather than on structural equality.
"""
from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import List, Optional

from .token import Literal as LiteralValue
from .token import Token


# Expressions ------------------------------------------------------------------


_node_ids = itertools.count(1)


#common base for all expressions allowing polymorphic handling
@dataclass(eq=False, slots=True)
class Expr:
    node_id: int = field(init=False, default_factory=lambda: next(_node_ids))


#numbers, strings, booleans and nil all evaluate to their stored value
@dataclass(eq=False, slots=True)
class Literal(Expr):
    value: LiteralValue | bool


#parenthesized expression kept so the printer can show the grouping
@dataclass(eq=False, slots=True)
class Grouping(Expr):
    expression: Expr


@dataclass(eq=False, slots=True)
class Unary(Expr):
    operator: Token
    right: Expr


#arithmetic, comparison and equality operators
@dataclass(eq=False, slots=True)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


#short-circuiting `and` / `or`
@dataclass(eq=False, slots=True)
class Logical(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(eq=False, slots=True)
class Variable(Expr):
    name: Token


@dataclass(eq=False, slots=True)
class Assign(Expr):
    name: Token
    value: Expr


#`paren` is the closing parenthesis, used to locate runtime call errors
@dataclass(eq=False, slots=True)
class Call(Expr):
    callee: Expr
    paren: Token
    arguments: List[Expr] = field(default_factory=list)


#property read `object.name`
@dataclass(eq=False, slots=True)
class Get(Expr):
    object: Expr
    name: Token


#property write `object.name = value`
@dataclass(eq=False, slots=True)
class Set(Expr):
    object: Expr
    name: Token
    value: Expr


@dataclass(eq=False, slots=True)
class This(Expr):
    keyword: Token


# Statements -------------------------------------------------------------------


#common base for all statements allowing polymorphic handling
@dataclass(eq=False, slots=True)
class Stmt:
    pass


#expression statements preserve results solely for side effects
@dataclass(eq=False, slots=True)
class Expression(Stmt):
    expression: Expr


#represents `print` commands in the language
@dataclass(eq=False, slots=True)
class Print(Stmt):
    expression: Expr


#captures `var` declarations with an optional initializer
@dataclass(eq=False, slots=True)
class Var(Stmt):
    name: Token
    initializer: Optional[Expr] = None


#container for zero or more statements with its own scope
@dataclass(eq=False, slots=True)
class Block(Stmt):
    statements: List[Stmt] = field(default_factory=list)


#classic `if` syntax with optional `else` branch
@dataclass(eq=False, slots=True)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt] = None


#`while` loops hold the condition and body statement; `for` desugars into these
@dataclass(eq=False, slots=True)
class While(Stmt):
    condition: Expr
    body: Stmt


#named function or method; `is_initializer` is set for a class's `init`
@dataclass(eq=False, slots=True)
class Function(Stmt):
    name: Token
    params: List[Token] = field(default_factory=list)
    body: List[Stmt] = field(default_factory=list)
    is_initializer: bool = False


@dataclass(eq=False, slots=True)
class Return(Stmt):
    keyword: Token
    value: Optional[Expr] = None


@dataclass(eq=False, slots=True)
class Class(Stmt):
    name: Token
    methods: List[Function] = field(default_factory=list)
