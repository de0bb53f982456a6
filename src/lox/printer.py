"""Human-readable parenthesized rendering of Lox syntax trees."""
from __future__ import annotations

from typing import List

from . import ast
from .runtime import stringify


#nice string formatter used by the CLI and REPL for debugging
def print_program(statements: List[ast.Stmt]) -> str:
    return "\n".join(print_stmt(stmt) for stmt in statements)


def print_stmt(stmt: ast.Stmt) -> str:
    match stmt:
        case ast.Expression(expression=expression):
            return f"(; {print_expr(expression)})"
        case ast.Print(expression=expression):
            return f"(print {print_expr(expression)})"
        case ast.Var(name=name, initializer=None):
            return f"(var {name.lexeme})"
        case ast.Var(name=name, initializer=initializer):
            return f"(var {name.lexeme} = {print_expr(initializer)})"
        case ast.Block(statements=statements):
            return _parenthesize("block", *(print_stmt(inner) for inner in statements))
        case ast.If(condition=condition, then_branch=then_branch, else_branch=None):
            return _parenthesize("if", print_expr(condition), print_stmt(then_branch))
        case ast.If(condition=condition, then_branch=then_branch, else_branch=else_branch):
            return _parenthesize("if-else", print_expr(condition), print_stmt(then_branch), print_stmt(else_branch))
        case ast.While(condition=condition, body=body):
            return _parenthesize("while", print_expr(condition), print_stmt(body))
        case ast.Function():
            return _function(stmt, "fun")
        case ast.Return(value=None):
            return "(return)"
        case ast.Return(value=value):
            return f"(return {print_expr(value)})"
        case ast.Class(name=name, methods=methods):
            return _parenthesize(f"class {name.lexeme}", *(_function(method, "method") for method in methods))
    raise AssertionError(f"unexpected statement {stmt!r}")


def print_expr(expr: ast.Expr) -> str:
    match expr:
        case ast.Literal(value=str() as value):
            return f'"{value}"'
        case ast.Literal(value=value):
            return stringify(value)
        case ast.Grouping(expression=expression):
            return _parenthesize("group", print_expr(expression))
        case ast.Unary(operator=operator, right=right):
            return _parenthesize(operator.lexeme, print_expr(right))
        case ast.Binary(left=left, operator=operator, right=right) | ast.Logical(
            left=left, operator=operator, right=right
        ):
            return _parenthesize(operator.lexeme, print_expr(left), print_expr(right))
        case ast.Variable(name=name):
            return name.lexeme
        case ast.Assign(name=name, value=value):
            return _parenthesize(f"= {name.lexeme}", print_expr(value))
        case ast.Call(callee=callee, arguments=arguments):
            return _parenthesize("call", print_expr(callee), *(print_expr(argument) for argument in arguments))
        case ast.Get(object=object_expr, name=name):
            return _parenthesize(f".{name.lexeme}", print_expr(object_expr))
        case ast.Set(object=object_expr, name=name, value=value):
            return _parenthesize(f"= .{name.lexeme}", print_expr(object_expr), print_expr(value))
        case ast.This():
            return "this"
    raise AssertionError(f"unexpected expression {expr!r}")


def _function(function: ast.Function, keyword: str) -> str:
    params = " ".join(param.lexeme for param in function.params)
    body = (print_stmt(stmt) for stmt in function.body)
    return _parenthesize(f"{keyword} {function.name.lexeme}({params})", *body)


def _parenthesize(name: str, *parts: str) -> str:
    if not parts:
        return f"({name})"
    return f"({name} {' '.join(parts)})"


__all__ = ["print_expr", "print_program", "print_stmt"]
