"""Static variable resolution for Lox programs."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional

from . import ast
from .errors import ResolveError
from .token import Token


#what kind of callable body the resolver is currently inside
class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    METHOD = auto()
    INITIALIZER = auto()


class ClassType(Enum):
    NONE = auto()
    CLASS = auto()


#hop distances keyed by `node_id` of the Variable/Assign/This node
@dataclass(slots=True)
class Resolution:
    statements: List[ast.Stmt]
    depths: Dict[int, int] = field(default_factory=dict)

    def depth_of(self, expr: ast.Expr) -> Optional[int]:
        """Return the hop distance for `expr`, or None for a global reference."""
        return self.depths.get(expr.node_id)


#individual lexical scopes map names to "initializer finished" flags
@dataclass(slots=True)
class _Scope:
    names: Dict[str, bool] = field(default_factory=dict)


#walks the tree once, recording how far each local reference sits from its declaration
class Resolver:
    def __init__(self, statements: List[ast.Stmt]) -> None:
        self._statements = statements
        self._scopes: List[_Scope] = []
        self._depths: Dict[int, int] = {}
        self._function = FunctionType.NONE
        self._class = ClassType.NONE
        self._line = 0
        self.errors: List[ResolveError] = []

    def resolve(self) -> Resolution:
        for stmt in self._statements:
            try:
                self._resolve_stmt(stmt)
            except RecursionError:
                self.errors.append(ResolveError("Too much nesting.", self._line))
                self._scopes.clear()
                self._function = FunctionType.NONE
                self._class = ClassType.NONE
        return Resolution(statements=self._statements, depths=self._depths)

    # Statements ----------------------------------------------------------------

    #dispatches to the appropriate resolver based on statement type
    def _resolve_stmt(self, stmt: ast.Stmt) -> None:
        if isinstance(stmt, ast.Block):
            self._push_scope()
            for inner in stmt.statements:
                self._resolve_stmt(inner)
            self._pop_scope()
        elif isinstance(stmt, ast.Var):
            self._declare(stmt.name)
            if stmt.initializer is not None:
                self._resolve_expr(stmt.initializer)
            self._define(stmt.name)
        elif isinstance(stmt, ast.Function):
            self._declare(stmt.name)
            self._define(stmt.name)
            self._resolve_function(stmt, FunctionType.FUNCTION)
        elif isinstance(stmt, ast.Class):
            self._resolve_class(stmt)
        elif isinstance(stmt, ast.Expression):
            self._resolve_expr(stmt.expression)
        elif isinstance(stmt, ast.Print):
            self._resolve_expr(stmt.expression)
        elif isinstance(stmt, ast.If):
            self._resolve_expr(stmt.condition)
            self._resolve_stmt(stmt.then_branch)
            if stmt.else_branch is not None:
                self._resolve_stmt(stmt.else_branch)
        elif isinstance(stmt, ast.While):
            self._resolve_expr(stmt.condition)
            self._resolve_stmt(stmt.body)
        elif isinstance(stmt, ast.Return):
            self._resolve_return(stmt)
        else:
            raise AssertionError(f"unexpected statement {stmt!r}")

    def _resolve_return(self, stmt: ast.Return) -> None:
        if self._function is FunctionType.NONE:
            self._error(stmt.keyword, "Can't return from top-level code.")
        if stmt.value is not None:
            if self._function is FunctionType.INITIALIZER:
                self._error(stmt.keyword, "Can't return a value from an initializer.")
            self._resolve_expr(stmt.value)

    #methods see an extra scope holding `this` between the class and their parameters
    def _resolve_class(self, stmt: ast.Class) -> None:
        enclosing_class = self._class
        self._class = ClassType.CLASS
        self._declare(stmt.name)
        self._define(stmt.name)

        self._push_scope()
        self._scopes[-1].names["this"] = True
        for method in stmt.methods:
            kind = FunctionType.INITIALIZER if method.is_initializer else FunctionType.METHOD
            self._resolve_function(method, kind)
        self._pop_scope()

        self._class = enclosing_class

    #parameters and body share one scope, matching the runtime call frame
    def _resolve_function(self, function: ast.Function, kind: FunctionType) -> None:
        enclosing_function = self._function
        self._function = kind
        self._push_scope()
        for param in function.params:
            self._declare(param)
            self._define(param)
        for stmt in function.body:
            self._resolve_stmt(stmt)
        self._pop_scope()
        self._function = enclosing_function

    # Expressions ---------------------------------------------------------------

    def _resolve_expr(self, expr: ast.Expr) -> None:
        if isinstance(expr, ast.Variable):
            if self._scopes and self._scopes[-1].names.get(expr.name.lexeme) is False:
                self._error(expr.name, "Can't read local variable in its own initializer.")
            self._resolve_local(expr, expr.name)
        elif isinstance(expr, ast.Assign):
            self._resolve_expr(expr.value)
            self._resolve_local(expr, expr.name)
        elif isinstance(expr, ast.This):
            if self._class is ClassType.NONE:
                self._error(expr.keyword, "Can't use 'this' outside of a class.")
                return
            self._resolve_local(expr, expr.keyword)
        elif isinstance(expr, (ast.Binary, ast.Logical)):
            self._resolve_expr(expr.left)
            self._resolve_expr(expr.right)
        elif isinstance(expr, ast.Unary):
            self._resolve_expr(expr.right)
        elif isinstance(expr, ast.Grouping):
            self._resolve_expr(expr.expression)
        elif isinstance(expr, ast.Call):
            self._resolve_expr(expr.callee)
            for argument in expr.arguments:
                self._resolve_expr(argument)
        elif isinstance(expr, ast.Get):
            self._resolve_expr(expr.object)
        elif isinstance(expr, ast.Set):
            self._resolve_expr(expr.value)
            self._resolve_expr(expr.object)
        elif isinstance(expr, ast.Literal):
            return
        else:
            raise AssertionError(f"unexpected expression {expr!r}")

    #nested lookup walking from innermost scope outwards; misses stay global
    def _resolve_local(self, expr: ast.Expr, name: Token) -> None:
        self._line = name.line
        for hops, scope in enumerate(reversed(self._scopes)):
            if name.lexeme in scope.names:
                self._depths[expr.node_id] = hops
                return

    # Scope bookkeeping ---------------------------------------------------------

    def _push_scope(self) -> None:
        self._scopes.append(_Scope())

    def _pop_scope(self) -> None:
        self._scopes.pop()

    #globals are untracked, so redeclaring at top level is allowed
    def _declare(self, name: Token) -> None:
        self._line = name.line
        if not self._scopes:
            return
        scope = self._scopes[-1]
        if name.lexeme in scope.names:
            self._error(name, "Already a variable with this name in this scope.")
        scope.names[name.lexeme] = False

    def _define(self, name: Token) -> None:
        if not self._scopes:
            return
        self._scopes[-1].names[name.lexeme] = True

    def _error(self, token: Token, message: str) -> None:
        self.errors.append(ResolveError.at(token, message))
