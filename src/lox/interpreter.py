"""Tree-walking evaluator for resolved Lox programs."""
from __future__ import annotations

import math
import sys
import time
from typing import Any, Dict, List, Optional, TextIO

from . import ast, natives
from .environment import Environment
from .errors import LoxRuntimeError
from .runtime import (
    LoxCallable,
    LoxClass,
    LoxFunction,
    LoxInstance,
    ReturnSignal,
    is_equal,
    is_truthy,
    stringify,
)
from .semantic import Resolution
from .token import Token, TokenType


#each Lox call costs a handful of Python frames; the default limit stops near 170 calls
RECURSION_LIMIT = 10_000


def raise_recursion_limit() -> None:
    if sys.getrecursionlimit() < RECURSION_LIMIT:
        sys.setrecursionlimit(RECURSION_LIMIT)


#one interpreter session: globals, natives, printed output and assertion log
class Interpreter:
    def __init__(self, stream: Optional[TextIO] = None, trace: bool = False) -> None:
        self.globals = Environment()
        self.started_at = time.perf_counter()
        self.output: List[str] = []
        self.assertions: List[natives.AssertionRecord] = []
        self.runtime_error: Optional[LoxRuntimeError] = None
        self.trace = trace
        self._stream = stream
        self._environment = self.globals
        self._depths: Dict[int, int] = {}
        #last source line touched by a lookup or call, for errors raised outside any call
        self._line = 0
        raise_recursion_limit()
        natives.install(self)

    def interpret(self, resolution: Resolution) -> None:
        """Run a resolved program; the first runtime error stops it and is kept on `runtime_error`."""
        self._depths.update(resolution.depths)
        self.runtime_error = None
        try:
            for stmt in resolution.statements:
                self.execute(stmt)
        except LoxRuntimeError as error:
            self.runtime_error = error
        except RecursionError:
            self.runtime_error = LoxRuntimeError(Token(TokenType.EOF, "", self._line), "Stack overflow.")
        finally:
            self._environment = self.globals

    # Statements ----------------------------------------------------------------

    def execute(self, stmt: ast.Stmt) -> None:
        if self.trace:
            self._log(f"stmt={type(stmt).__name__}")
        match stmt:
            case ast.Expression(expression=expression):
                self.evaluate(expression)
            case ast.Print(expression=expression):
                self._emit(stringify(self.evaluate(expression)))
            case ast.Var(name=name, initializer=initializer):
                value = None if initializer is None else self.evaluate(initializer)
                self._environment.define(name.lexeme, value)
            case ast.Block(statements=statements):
                self.execute_block(statements, Environment(enclosing=self._environment))
            case ast.If(condition=condition, then_branch=then_branch, else_branch=else_branch):
                if is_truthy(self.evaluate(condition)):
                    self.execute(then_branch)
                elif else_branch is not None:
                    self.execute(else_branch)
            case ast.While(condition=condition, body=body):
                while is_truthy(self.evaluate(condition)):
                    self.execute(body)
            case ast.Function():
                function = LoxFunction(stmt, self._environment)
                self._environment.define(stmt.name.lexeme, function)
            case ast.Return(value=value):
                raise ReturnSignal(None if value is None else self.evaluate(value))
            case ast.Class():
                self._execute_class(stmt)
            case _:
                raise AssertionError(f"unexpected statement {stmt!r}")

    #runs statements in `environment`, restoring the previous frame however the block exits
    def execute_block(self, statements: List[ast.Stmt], environment: Environment) -> None:
        previous = self._environment
        try:
            self._environment = environment
            for stmt in statements:
                self.execute(stmt)
        finally:
            self._environment = previous

    def _execute_class(self, stmt: ast.Class) -> None:
        self._environment.define(stmt.name.lexeme, None)
        methods = {
            method.name.lexeme: LoxFunction(method, self._environment, is_initializer=method.is_initializer)
            for method in stmt.methods
        }
        klass = LoxClass(stmt.name.lexeme, methods)
        self._environment.assign(stmt.name, klass)

    # Expressions ---------------------------------------------------------------

    def evaluate(self, expr: ast.Expr) -> Any:
        match expr:
            case ast.Literal(value=value):
                return value
            case ast.Grouping(expression=expression):
                return self.evaluate(expression)
            case ast.Unary():
                return self._unary(expr)
            case ast.Binary():
                return self._binary(expr)
            case ast.Logical(left=left, operator=operator, right=right):
                value = self.evaluate(left)
                if operator.type is TokenType.OR:
                    if is_truthy(value):
                        return value
                elif not is_truthy(value):
                    return value
                return self.evaluate(right)
            case ast.Variable(name=name):
                return self._look_up(name, expr)
            case ast.Assign(name=name, value=value_expr):
                value = self.evaluate(value_expr)
                distance = self._depths.get(expr.node_id)
                if distance is None:
                    self.globals.assign(name, value)
                else:
                    self._environment.assign_at(distance, name, value)
                return value
            case ast.Call():
                return self._call(expr)
            case ast.Get(object=object_expr, name=name):
                instance = self.evaluate(object_expr)
                if not isinstance(instance, LoxInstance):
                    raise LoxRuntimeError(name, f"Only instances have properties, cannot read '{name.lexeme}'.")
                return instance.get(name)
            case ast.Set(object=object_expr, name=name, value=value_expr):
                instance = self.evaluate(object_expr)
                if not isinstance(instance, LoxInstance):
                    raise LoxRuntimeError(name, f"Only instances have fields, cannot set '{name.lexeme}'.")
                value = self.evaluate(value_expr)
                instance.set(name, value)
                return value
            case ast.This(keyword=keyword):
                return self._look_up(keyword, expr)
            case _:
                raise AssertionError(f"unexpected expression {expr!r}")

    #resolved names walk a fixed number of frames; unresolved ones are globals
    def _look_up(self, name: Token, expr: ast.Expr) -> Any:
        self._line = name.line
        distance = self._depths.get(expr.node_id)
        if distance is None:
            return self.globals.get(name)
        return self._environment.get_at(distance, name)

    def _unary(self, expr: ast.Unary) -> Any:
        right = self.evaluate(expr.right)
        match expr.operator.type:
            case TokenType.MINUS:
                _check_number(expr.operator, right)
                return -right
            case TokenType.BANG:
                return not is_truthy(right)
        raise AssertionError(f"unexpected unary operator {expr.operator.type}")

    def _binary(self, expr: ast.Binary) -> Any:
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        operator = expr.operator

        match operator.type:
            case TokenType.PLUS:
                if _is_number(left) and _is_number(right):
                    return left + right
                if isinstance(left, str) and isinstance(right, str):
                    return left + right
                raise LoxRuntimeError(
                    operator,
                    f"Operands must be two numbers or two strings, not {_describe(left)} + {_describe(right)}.",
                )
            case TokenType.MINUS:
                _check_numbers(operator, left, right)
                return left - right
            case TokenType.STAR:
                _check_numbers(operator, left, right)
                return left * right
            case TokenType.SLASH:
                _check_numbers(operator, left, right)
                return _divide(left, right)
            case TokenType.GREATER:
                _check_numbers(operator, left, right)
                return left > right
            case TokenType.GREATER_EQUAL:
                _check_numbers(operator, left, right)
                return left >= right
            case TokenType.LESS:
                _check_numbers(operator, left, right)
                return left < right
            case TokenType.LESS_EQUAL:
                _check_numbers(operator, left, right)
                return left <= right
            case TokenType.EQUAL_EQUAL:
                return is_equal(left, right)
            case TokenType.BANG_EQUAL:
                return not is_equal(left, right)
        raise AssertionError(f"unexpected binary operator {operator.type}")

    #arguments are evaluated left to right before the arity check
    def _call(self, expr: ast.Call) -> Any:
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]
        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(expr.paren, f"Can only call functions and classes, not {_describe(callee)}.")
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(expr.paren, f"Expected {callee.arity()} arguments but got {len(arguments)}.")
        self._line = expr.paren.line
        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise LoxRuntimeError(expr.paren, "Stack overflow.") from None

    # Helpers -------------------------------------------------------------------

    def _emit(self, line: str) -> None:
        self.output.append(line)
        if self._stream is not None:
            self._stream.write(line + "\n")

    def _log(self, message: str) -> None:
        print(f"[trace] {message}")


def _is_number(value: Any) -> bool:
    return isinstance(value, float)


def _check_number(operator: Token, operand: Any) -> None:
    if not _is_number(operand):
        raise LoxRuntimeError(operator, f"Operand must be a number, not {_describe(operand)}.")


def _check_numbers(operator: Token, left: Any, right: Any) -> None:
    if not _is_number(left):
        raise LoxRuntimeError(operator, f"Left operand must be a number, not {_describe(left)}.")
    if not _is_number(right):
        raise LoxRuntimeError(operator, f"Right operand must be a number, not {_describe(right)}.")


#real-valued division; a zero divisor yields inf or nan rather than an error
def _divide(left: float, right: float) -> float:
    if right == 0.0:
        if left == 0.0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


#names the offending operand in runtime error messages
def _describe(value: Any) -> str:
    if isinstance(value, str):
        return f'"{value}"'
    return stringify(value)


__all__ = ["Interpreter"]
