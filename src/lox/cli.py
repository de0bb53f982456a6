"""Command-line entry point for Lox."""
from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, TextIO

from .errors import Diagnostic
from .interpreter import Interpreter, raise_recursion_limit
from .lexer import Lexer
from .parser import Parser
from .printer import print_program
from .semantic import Resolver

EXIT_OK = 0
EXIT_STATIC_ERROR = 65
EXIT_RUNTIME_ERROR = 70


#everything one run reports back to the host
@dataclass(slots=True)
class RunResult:
    static_errors: List[Diagnostic] = field(default_factory=list)
    runtime_error: Optional[Diagnostic] = None
    output: List[str] = field(default_factory=list)

    @property
    def diagnostics(self) -> List[Diagnostic]:
        if self.runtime_error is None:
            return list(self.static_errors)
        return [*self.static_errors, self.runtime_error]

    @property
    def exit_code(self) -> int:
        if self.static_errors:
            return EXIT_STATIC_ERROR
        if self.runtime_error is not None:
            return EXIT_RUNTIME_ERROR
        return EXIT_OK


#pipelines lexing->parsing->resolution->evaluation; static errors skip evaluation
#a clean parse is written to `echo` as a tree before anything runs
def run_source(source: str, interpreter: Optional[Interpreter] = None, echo: Optional[TextIO] = None) -> RunResult:
    if interpreter is None:
        interpreter = Interpreter()
    lexer = Lexer(source)
    tokens = lexer.lex()
    parser = Parser(tokens)
    statements = parser.parse()
    result = RunResult()
    result.static_errors.extend(error.to_diagnostic() for error in lexer.errors)
    result.static_errors.extend(error.to_diagnostic() for error in parser.errors)
    if result.static_errors:
        return result
    if echo is not None:
        echo.write(print_program(statements) + "\n")

    resolver = Resolver(statements)
    resolution = resolver.resolve()
    result.static_errors.extend(error.to_diagnostic() for error in resolver.errors)
    if result.static_errors:
        return result

    printed_before = len(interpreter.output)
    interpreter.interpret(resolution)
    result.output = interpreter.output[printed_before:]
    if interpreter.runtime_error is not None:
        result.runtime_error = interpreter.runtime_error.to_diagnostic()
    return result


def _report(result: RunResult) -> None:
    for diagnostic in result.diagnostics:
        print(diagnostic, file=sys.stderr)


#handles `lox run` for a file, or starts the REPL when no path is given
def cmd_run(args: argparse.Namespace) -> int:
    interpreter = Interpreter(stream=sys.stdout, trace=args.trace)
    if args.source is None:
        return repl(interpreter)
    source = Path(args.source).read_text(encoding="utf-8")
    result = run_source(source, interpreter)
    _report(result)
    return result.exit_code


#the session persists across lines; each line is echoed as a tree, and a missing trailing ';' is supplied
def repl(interpreter: Interpreter) -> int:
    while True:
        try:
            line = input("> ")
        except EOFError:
            print()
            return EXIT_OK
        stripped = line.strip()
        if not stripped:
            continue
        if not stripped.endswith((";", "}")):
            line = line + ";"
        _report(run_source(line, interpreter, echo=sys.stdout))


#prints the parenthesized tree of each top-level statement
def cmd_ast(args: argparse.Namespace) -> int:
    source = Path(args.source).read_text(encoding="utf-8")
    lexer = Lexer(source)
    parser = Parser(lexer.lex())
    statements = parser.parse()
    errors = [*lexer.errors, *parser.errors]
    for error in errors:
        print(error.to_diagnostic(), file=sys.stderr)
    if errors:
        return EXIT_STATIC_ERROR
    print(print_program(statements))
    return EXIT_OK


#dumps the token stream one token per line
def cmd_tokens(args: argparse.Namespace) -> int:
    source = Path(args.source).read_text(encoding="utf-8")
    lexer = Lexer(source)
    for token in lexer.lex():
        print(token)
    for error in lexer.errors:
        print(error.to_diagnostic(), file=sys.stderr)
    return EXIT_STATIC_ERROR if lexer.errors else EXIT_OK


#configures the CLI surface across run/ast/tokens
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lox", description="Lox language tools")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_run = subparsers.add_parser("run", help="run a source file, or start a REPL without one")
    p_run.add_argument("source", nargs="?", help="path to source file")
    p_run.add_argument("--trace", action="store_true", help="print each statement as it executes")
    p_run.set_defaults(func=cmd_run)

    p_ast = subparsers.add_parser("ast", help="print the syntax tree of a source file")
    p_ast.add_argument("source", help="path to source file")
    p_ast.set_defaults(func=cmd_ast)

    p_tokens = subparsers.add_parser("tokens", help="print the token stream of a source file")
    p_tokens.add_argument("source", help="path to source file")
    p_tokens.set_defaults(func=cmd_tokens)

    return parser


#entry point used by both console script and module execution
def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    raise_recursion_limit()
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
