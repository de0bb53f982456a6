"""Parser that turns Lox tokens into a list of statements."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from . import ast
from .errors import ParseError
from .token import Token, TokenType


MAX_ARGUMENTS = 8

#tokens that start a fresh declaration or statement, used by error recovery
_STATEMENT_STARTS = frozenset(
    {
        TokenType.CLASS,
        TokenType.FUN,
        TokenType.VAR,
        TokenType.FOR,
        TokenType.IF,
        TokenType.WHILE,
        TokenType.PRINT,
        TokenType.RETURN,
    }
)


#navigates the token stream via recursive descent
@dataclass(slots=True)
class Parser:
    tokens: List[Token]
    errors: List[ParseError] = field(init=False, default_factory=list)
    _current: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        self._current = 0

    def parse(self) -> List[ast.Stmt]:
        """Parse a whole program.

        Malformed declarations are skipped after recording a `ParseError`
        in `errors`, so several independent mistakes surface in one pass.
        """
        statements: List[ast.Stmt] = []
        while not self._is_at_end():
            try:
                stmt = self._declaration()
            except RecursionError:
                #nesting deeper than the host stack allows; the rest of the input is dropped
                self._report(self._peek(), "Too much nesting.")
                self._current = len(self.tokens) - 1
                continue
            if stmt is not None:
                statements.append(stmt)
        return statements

    # Declarations ---------------------------------------------------------------

    #recovery boundary: any ParseError below lands here
    def _declaration(self) -> Optional[ast.Stmt]:
        try:
            if self._match(TokenType.CLASS):
                return self._class_decl()
            if self._match(TokenType.FUN):
                return self._function("function")
            if self._match(TokenType.VAR):
                return self._var_decl()
            return self._statement()
        except ParseError as error:
            self.errors.append(error)
            self._synchronize()
            return None

    def _class_decl(self) -> ast.Class:
        name = self._consume(TokenType.IDENTIFIER, "Expect class name.")
        self._consume(TokenType.LEFT_BRACE, "Expect '{' before class body.")
        methods: List[ast.Function] = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            methods.append(self._function("method"))
        self._consume(TokenType.RIGHT_BRACE, "Expect '}' after class body.")
        return ast.Class(name=name, methods=methods)

    #parses function headers and delegates to block parsing for body
    def _function(self, kind: str) -> ast.Function:
        name = self._consume(TokenType.IDENTIFIER, f"Expect {kind} name.")
        self._consume(TokenType.LEFT_PAREN, f"Expect '(' after {kind} name.")
        params: List[Token] = []
        if not self._check(TokenType.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGUMENTS:
                    self._report(self._peek(), f"Can't have more than {MAX_ARGUMENTS} parameters.")
                params.append(self._consume(TokenType.IDENTIFIER, "Expect parameter name."))
                if not self._match(TokenType.COMMA):
                    break
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")
        self._consume(TokenType.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        body = self._block()
        is_initializer = kind == "method" and name.lexeme == "init"
        return ast.Function(name=name, params=params, body=body, is_initializer=is_initializer)

    def _var_decl(self) -> ast.Var:
        name = self._consume(TokenType.IDENTIFIER, "Expect variable name.")
        initializer = None
        if self._match(TokenType.EQUAL):
            initializer = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return ast.Var(name=name, initializer=initializer)

    # Statements ----------------------------------------------------------------

    #directs statements based on leading token kind
    def _statement(self) -> ast.Stmt:
        if self._match(TokenType.FOR):
            return self._for_stmt()
        if self._match(TokenType.IF):
            return self._if_stmt()
        if self._match(TokenType.PRINT):
            return self._print_stmt()
        if self._match(TokenType.RETURN):
            return self._return_stmt()
        if self._match(TokenType.WHILE):
            return self._while_stmt()
        if self._match(TokenType.LEFT_BRACE):
            return ast.Block(statements=self._block())
        return self._expr_stmt()

    #consumes declarations up to the closing brace; the '{' is already consumed
    def _block(self) -> List[ast.Stmt]:
        statements: List[ast.Stmt] = []
        while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
            stmt = self._declaration()
            if stmt is not None:
                statements.append(stmt)
        self._consume(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    #`for` has no node of its own: it becomes a block wrapping a while loop
    def _for_stmt(self) -> ast.Stmt:
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")
        initializer: Optional[ast.Stmt]
        if self._match(TokenType.SEMICOLON):
            initializer = None
        elif self._match(TokenType.VAR):
            initializer = self._var_decl()
        else:
            initializer = self._expr_stmt()

        condition: Optional[ast.Expr] = None
        if not self._check(TokenType.SEMICOLON):
            condition = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment: Optional[ast.Expr] = None
        if not self._check(TokenType.RIGHT_PAREN):
            increment = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self._statement()
        if increment is not None:
            body = ast.Block(statements=[body, ast.Expression(expression=increment)])
        if condition is None:
            condition = ast.Literal(value=True)
        body = ast.While(condition=condition, body=body)
        if initializer is not None:
            body = ast.Block(statements=[initializer, body])
        return body

    #if/else nests arbitrary statements for branches
    def _if_stmt(self) -> ast.If:
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after if condition.")
        then_branch = self._statement()
        else_branch = None
        if self._match(TokenType.ELSE):
            else_branch = self._statement()
        return ast.If(condition=condition, then_branch=then_branch, else_branch=else_branch)

    def _print_stmt(self) -> ast.Print:
        value = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after value.")
        return ast.Print(expression=value)

    #the value is optional; a bare `return;` yields nil
    def _return_stmt(self) -> ast.Return:
        keyword = self._previous()
        value = None
        if not self._check(TokenType.SEMICOLON):
            value = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after return value.")
        return ast.Return(keyword=keyword, value=value)

    def _while_stmt(self) -> ast.While:
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after condition.")
        body = self._statement()
        return ast.While(condition=condition, body=body)

    #plain expressions become expression statements
    def _expr_stmt(self) -> ast.Expression:
        expr = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after expression.")
        return ast.Expression(expression=expr)

    # Expressions ---------------------------------------------------------------

    def _expression(self) -> ast.Expr:
        return self._assignment()

    #assignment is right-associative and validates the left side
    def _assignment(self) -> ast.Expr:
        expr = self._or()
        if self._match(TokenType.EQUAL):
            equals = self._previous()
            value = self._assignment()
            if isinstance(expr, ast.Variable):
                return ast.Assign(name=expr.name, value=value)
            if isinstance(expr, ast.Get):
                return ast.Set(object=expr.object, name=expr.name, value=value)
            self._report(equals, "Invalid assignment target.")
        return expr

    def _or(self) -> ast.Expr:
        expr = self._and()
        while self._match(TokenType.OR):
            operator = self._previous()
            right = self._and()
            expr = ast.Logical(left=expr, operator=operator, right=right)
        return expr

    def _and(self) -> ast.Expr:
        expr = self._equality()
        while self._match(TokenType.AND):
            operator = self._previous()
            right = self._equality()
            expr = ast.Logical(left=expr, operator=operator, right=right)
        return expr

    def _equality(self) -> ast.Expr:
        expr = self._comparison()
        while self._match(TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL):
            operator = self._previous()
            right = self._comparison()
            expr = ast.Binary(left=expr, operator=operator, right=right)
        return expr

    def _comparison(self) -> ast.Expr:
        expr = self._addition()
        while self._match(TokenType.GREATER, TokenType.GREATER_EQUAL, TokenType.LESS, TokenType.LESS_EQUAL):
            operator = self._previous()
            right = self._addition()
            expr = ast.Binary(left=expr, operator=operator, right=right)
        return expr

    #handles `+` and `-` with left-associativity
    def _addition(self) -> ast.Expr:
        expr = self._multiplication()
        while self._match(TokenType.MINUS, TokenType.PLUS):
            operator = self._previous()
            right = self._multiplication()
            expr = ast.Binary(left=expr, operator=operator, right=right)
        return expr

    #handles `*` and `/` precedence level
    def _multiplication(self) -> ast.Expr:
        expr = self._unary()
        while self._match(TokenType.SLASH, TokenType.STAR):
            operator = self._previous()
            right = self._unary()
            expr = ast.Binary(left=expr, operator=operator, right=right)
        return expr

    def _unary(self) -> ast.Expr:
        if self._match(TokenType.BANG, TokenType.MINUS):
            operator = self._previous()
            right = self._unary()
            return ast.Unary(operator=operator, right=right)
        return self._call()

    #calls and property access chain in any order: `a.b(c).d`
    def _call(self) -> ast.Expr:
        expr = self._primary()
        while True:
            if self._match(TokenType.LEFT_PAREN):
                expr = self._finish_call(expr)
            elif self._match(TokenType.DOT):
                name = self._consume(TokenType.IDENTIFIER, "Expect property name after '.'.")
                expr = ast.Get(object=expr, name=name)
            else:
                break
        return expr

    def _finish_call(self, callee: ast.Expr) -> ast.Call:
        arguments: List[ast.Expr] = []
        if not self._check(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGUMENTS:
                    self._report(self._peek(), f"Can't have more than {MAX_ARGUMENTS} arguments.")
                arguments.append(self._expression())
                if not self._match(TokenType.COMMA):
                    break
        paren = self._consume(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
        return ast.Call(callee=callee, paren=paren, arguments=arguments)

    #primary expressions include literals, identifiers, `this`, and parenthesized forms
    def _primary(self) -> ast.Expr:
        if self._match(TokenType.FALSE):
            return ast.Literal(value=False)
        if self._match(TokenType.TRUE):
            return ast.Literal(value=True)
        if self._match(TokenType.NIL):
            return ast.Literal(value=None)
        if self._match(TokenType.NUMBER, TokenType.STRING):
            return ast.Literal(value=self._previous().literal)
        if self._match(TokenType.THIS):
            return ast.This(keyword=self._previous())
        if self._match(TokenType.IDENTIFIER):
            return ast.Variable(name=self._previous())
        if self._match(TokenType.LEFT_PAREN):
            expr = self._expression()
            self._consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return ast.Grouping(expression=expr)
        raise ParseError.at(self._peek(), "Expect expression.")

    # Utilities ----------------------------------------------------------------

    #records an error without unwinding; parsing carries on from here
    def _report(self, token: Token, message: str) -> None:
        self.errors.append(ParseError.at(token, message))

    #skips to the next likely statement boundary after an error
    def _synchronize(self) -> None:
        self._advance()
        while not self._is_at_end():
            if self._previous().type is TokenType.SEMICOLON:
                return
            if self._peek().type in _STATEMENT_STARTS:
                return
            self._advance()

    #helper for multi-token lookahead checks
    def _match(self, *types: TokenType) -> bool:
        for token_type in types:
            if self._check(token_type):
                self._advance()
                return True
        return False

    #convenience to assert the upcoming token type
    def _consume(self, token_type: TokenType, message: str) -> Token:
        if self._check(token_type):
            return self._advance()
        raise ParseError.at(self._peek(), message)

    #safely checks the current token without consuming it
    def _check(self, token_type: TokenType) -> bool:
        if self._is_at_end():
            return False
        return self._peek().type is token_type

    #moves the cursor forward returning the previous token
    def _advance(self) -> Token:
        if not self._is_at_end():
            self._current += 1
        return self._previous()

    #EOF tokens guard termination
    def _is_at_end(self) -> bool:
        return self._peek().type is TokenType.EOF

    def _peek(self) -> Token:
        return self.tokens[self._current]

    #returns the token immediately before `_current`
    def _previous(self) -> Token:
        return self.tokens[self._current - 1]
