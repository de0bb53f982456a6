from lox import ast
from lox.lexer import Lexer
from lox.parser import Parser
from lox.printer import print_expr, print_program
from lox.token import TokenType


#parses helper sources for parser assertions
def parse(source: str) -> tuple[Parser, list[ast.Stmt]]:
    parser = Parser(Lexer(source).lex())
    statements = parser.parse()
    return parser, statements


def parse_ok(source: str) -> list[ast.Stmt]:
    parser = Parser(Lexer(source).lex())
    statements = parser.parse()
    assert not parser.errors, [str(error.to_diagnostic()) for error in parser.errors]
    return statements


def expr_of(source: str) -> ast.Expr:
    (stmt,) = parse_ok(source)
    assert isinstance(stmt, ast.Expression)
    return stmt.expression


#multiplication binds tighter than addition, grouping overrides it
def test_precedence() -> None:
    assert print_expr(expr_of("1 + 2 * 3;")) == "(+ 1 (* 2 3))"
    assert print_expr(expr_of("3 * (2 + 2);")) == "(* 3 (group (+ 2 2)))"
    assert print_expr(expr_of("-a == !b;")) == "(== (- a) (! b))"
    assert print_expr(expr_of("1 < 2 == 3 >= 4;")) == "(== (< 1 2) (>= 3 4))"


#binary operators fold left-associatively
def test_left_associativity() -> None:
    assert print_expr(expr_of("1 - 2 - 3;")) == "(- (- 1 2) 3)"
    assert print_expr(expr_of("8 / 4 / 2;")) == "(/ (/ 8 4) 2)"


#`or` binds looser than `and` and both chain over any number of operands
def test_logical_chains() -> None:
    assert print_expr(expr_of("a or b or c;")) == "(or (or a b) c)"
    assert print_expr(expr_of("a and b and c;")) == "(and (and a b) c)"
    assert print_expr(expr_of("a or b and c;")) == "(or a (and b c))"


#assignment is right-associative and property targets become Set
def test_assignment_targets() -> None:
    expr = expr_of("a = b = 1;")
    assert isinstance(expr, ast.Assign)
    assert isinstance(expr.value, ast.Assign)

    expr = expr_of("point.x = 3;")
    assert isinstance(expr, ast.Set)
    assert expr.name.lexeme == "x"
    assert isinstance(expr.object, ast.Variable)


def test_call_and_property_chain() -> None:
    expr = expr_of("a.b(1, 2).c;")
    assert isinstance(expr, ast.Get)
    call = expr.object
    assert isinstance(call, ast.Call)
    assert call.paren.type is TokenType.RIGHT_PAREN
    assert len(call.arguments) == 2
    assert isinstance(call.callee, ast.Get)


#classes hold methods and tag `init` as the initializer
def test_class_declaration() -> None:
    (stmt,) = parse_ok("class Point { init(x, y) { this.x = x; } norm() { return this.x; } }")
    assert isinstance(stmt, ast.Class)
    assert [method.name.lexeme for method in stmt.methods] == ["init", "norm"]
    assert stmt.methods[0].is_initializer is True
    assert stmt.methods[1].is_initializer is False


#a top-level function named init is not an initializer
def test_function_named_init_is_plain_function() -> None:
    (stmt,) = parse_ok("fun init() {}")
    assert isinstance(stmt, ast.Function)
    assert stmt.is_initializer is False


#`for` desugars into a block holding the initializer and a while loop
def test_for_desugars_to_while() -> None:
    (stmt,) = parse_ok("for (var i = 0; i < 3; i = i + 1) print i;")
    assert isinstance(stmt, ast.Block)
    initializer, loop = stmt.statements
    assert isinstance(initializer, ast.Var)
    assert isinstance(loop, ast.While)
    assert isinstance(loop.body, ast.Block)
    body, increment = loop.body.statements
    assert isinstance(body, ast.Print)
    assert isinstance(increment, ast.Expression)


#omitted condition defaults to true and no wrapper block is added
def test_for_without_clauses() -> None:
    (stmt,) = parse_ok("for (;;) print 1;")
    assert isinstance(stmt, ast.While)
    assert isinstance(stmt.condition, ast.Literal)
    assert stmt.condition.value is True
    assert isinstance(stmt.body, ast.Print)


def test_return_value_is_optional() -> None:
    (stmt,) = parse_ok("fun f() { return; }")
    assert isinstance(stmt, ast.Function)
    (ret,) = stmt.body
    assert isinstance(ret, ast.Return)
    assert ret.value is None


#assignment should reject non-lvalue targets without stopping the parse
def test_invalid_assignment_target_is_reported() -> None:
    parser, statements = parse("(1 + 2) = 3; print 4;")
    assert [error.message for error in parser.errors] == ["Invalid assignment target."]
    assert len(statements) == 2


#two unrelated mistakes are both reported in one pass
def test_recovers_and_reports_multiple_errors() -> None:
    parser, statements = parse(
        """
        var = 1;
        print "fine";
        print (2 + ;
        print "also fine";
        """
    )
    assert len(parser.errors) == 2
    assert [error.line for error in parser.errors] == [2, 4]
    assert [type(stmt) for stmt in statements] == [ast.Print, ast.Print]


#the parameter cap is reported but parsing continues
def test_too_many_parameters() -> None:
    parser, statements = parse("fun f(a, b, c, d, e, f, g, h, i) {} print 1;")
    assert [error.message for error in parser.errors] == ["Can't have more than 8 parameters."]
    assert len(statements) == 2


def test_too_many_arguments() -> None:
    parser, _ = parse("f(1, 2, 3, 4, 5, 6, 7, 8, 9);")
    assert [error.message for error in parser.errors] == ["Can't have more than 8 arguments."]


def test_missing_semicolon_at_end() -> None:
    parser, _ = parse("print 1")
    (error,) = parser.errors
    assert error.where == "end"
    assert str(error.to_diagnostic()) == "[line 1] Error at end: Expect ';' after value."


def test_printer_renders_statements() -> None:
    statements = parse_ok('var a = "hi"; if (a) print a; else { a = nil; }')
    assert print_program(statements) == '(var a = "hi")\n(if-else a (print a) (block (; (= a nil))))'


#input nested past the host stack is one diagnostic, not a crash
def test_excessive_nesting_is_reported() -> None:
    parser, statements = parse("print " + "(" * 50_000 + "1" + ")" * 50_000 + ";\nprint 2;")
    assert [error.message for error in parser.errors] == ["Too much nesting."]
    assert statements == []
