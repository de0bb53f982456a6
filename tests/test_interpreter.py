import sys

import pytest

from lox import ast
from lox.cli import RunResult, run_source
from lox.environment import Environment
from lox.errors import LoxError, LoxRuntimeError
from lox.interpreter import Interpreter
from lox.semantic import Resolution


#runs a program that must not hit any static or runtime error
def run_ok(source: str) -> list[str]:
    result = run_source(source)
    assert not result.diagnostics, [str(diagnostic) for diagnostic in result.diagnostics]
    return result.output


#runs a script that uses the `assert` native and checks every assertion passed
def run_assertions(source: str) -> Interpreter:
    interpreter = Interpreter()
    result = run_source(source, interpreter)
    assert not result.diagnostics, [str(diagnostic) for diagnostic in result.diagnostics]
    assert interpreter.assertions, "script recorded no assertions"
    failures = [str(record) for record in interpreter.assertions if not record.passed]
    assert not failures
    return interpreter


def runtime_message(source: str) -> str:
    result = run_source(source)
    assert not result.static_errors
    assert result.runtime_error is not None
    return result.runtime_error.message


def test_math_operators() -> None:
    run_assertions(
        """
        assert("Basic Addition", 5, 2 + 3);
        assert("Basic Subtraction", 1, 2 - 1);
        assert("Basic Multiplication", 9, 3 * 3);
        assert("Basic Division", 3, 6 / 2);
        assert("Basic Negation", 7, 8 + -1);
        """
    )


#division is real-valued, so these products come back to whole numbers
def test_precedence_of_math_operators() -> None:
    run_assertions(
        """
        assert("grouping", 12, 3 * (2 + 2));
        assert("negative division", -2, 3 * (2 / -3));
        assert("division", 2, 3 * (2 / 3));
        """
    )
    assert run_ok("print 7 / 2;") == ["3.5"]


#a closure keeps seeing the binding that existed where it was declared
def test_closure_not_shadowed_by_later_local_declaration() -> None:
    run_assertions(
        """
        var a = "global";
        {
          fun showA(expected) {
            assert("The closure contains the expected value for surrounding data", expected, a);
          }

          showA("global");
          var a = "block";
          showA("global");
        }
        """
    )


#assignment to a captured variable is seen by every closure sharing the frame
def test_closures_share_assigned_variables() -> None:
    output = run_ok(
        """
        fun makeCounter() {
            var count = 0;
            fun increment() { count = count + 1; return count; }
            fun peek() { return count; }
            var pair = Pair(increment, peek);
            return pair;
        }
        class Pair { init(a, b) { this.a = a; this.b = b; } }
        var counter = makeCounter();
        counter.a();
        counter.a();
        print counter.b();
        """
    )
    assert output == ["2"]


def test_independent_closures() -> None:
    output = run_ok(
        """
        fun makeCounter() {
            var i = 0;
            fun count() { i = i + 1; return i; }
            return count;
        }
        var first = makeCounter();
        var second = makeCounter();
        first();
        first();
        print first();
        print second();
        """
    )
    assert output == ["3", "1"]


def test_string_concatenation() -> None:
    assert run_ok('print "foo" + "bar";') == ["foobar"]


def test_string_plus_number_is_runtime_error() -> None:
    message = runtime_message('print "one" + 1;')
    assert "two numbers or two strings" in message


def test_truthiness_and_equality() -> None:
    output = run_ok(
        """
        print nil == nil;
        print nil == false;
        print 1 == 1.0;
        print "a" == "a";
        print "1" == 1;
        print true == 1;
        print !nil;
        print !0;
        print !"";
        if (0) print "zero is truthy";
        if ("") print "empty is truthy";
        if (false) print "unreachable"; else print "false is falsey";
        """
    )
    assert output == [
        "true",
        "false",
        "true",
        "true",
        "false",
        "false",
        "true",
        "false",
        "false",
        "zero is truthy",
        "empty is truthy",
        "false is falsey",
    ]


#the value of and/or is the operand that decided the result
def test_logical_operators_short_circuit() -> None:
    output = run_ok(
        """
        var calls = 0;
        fun touch(value) { calls = calls + 1; return value; }
        print nil or "fallback";
        print "first" or touch("second");
        print nil and touch("never");
        print 1 and 2 and 3;
        print false or nil or "third";
        print calls;
        """
    )
    assert output == ["fallback", "first", "nil", "3", "third", "0"]


def test_print_rendering() -> None:
    output = run_ok(
        """
        print 1;
        print 2.5;
        print -0.5;
        print nil;
        print true;
        print "text";
        fun f() {}
        print f;
        print clock;
        class Box {}
        print Box;
        print Box();
        print stringify(4.0) + "!";
        """
    )
    assert output == ["1", "2.5", "-0.5", "nil", "true", "text", "<fn f>", "<native fn>", "Box", "<Box instance>", "4!"]


def test_control_flow() -> None:
    output = run_ok(
        """
        var total = 0;
        for (var i = 1; i <= 4; i = i + 1) {
            if (i == 3) total = total + 100; else total = total + i;
        }
        print total;
        var n = 3;
        while (n > 0) { print n; n = n - 1; }
        """
    )
    assert output == ["107", "3", "2", "1"]


#block variables live in their own frame and vanish afterwards
def test_block_scoping() -> None:
    output = run_ok(
        """
        var a = "outer";
        {
            var a = "inner";
            print a;
        }
        print a;
        """
    )
    assert output == ["inner", "outer"]


def test_recursion_and_return() -> None:
    output = run_ok(
        """
        fun fib(n) {
            if (n < 2) return n;
            return fib(n - 1) + fib(n - 2);
        }
        print fib(15);
        fun early() {
            while (true) { return "out"; }
        }
        print early();
        fun nothing() { return; }
        print nothing();
        """
    )
    assert output == ["610", "out", "nil"]


def test_class_initializer_sets_fields() -> None:
    output = run_ok(
        """
        class Point {
            init(x, y) { this.x = x; this.y = y; }
            sum() { return this.x + this.y; }
        }
        var p = Point(3, 4);
        print p.x;
        print p.sum();
        p.y = 10;
        print p.sum();
        """
    )
    assert output == ["3", "7", "13"]


#init always yields the instance, even with a bare return or when called again
def test_initializer_returns_instance() -> None:
    output = run_ok(
        """
        class Thing {
            init() { this.ready = true; return; }
        }
        var t = Thing();
        print t.init() == t;
        print t.ready;
        """
    )
    assert output == ["true", "true"]


#a method pulled off an instance stays bound to it
def test_bound_method_keeps_receiver() -> None:
    output = run_ok(
        """
        class Person {
            init(name) { this.name = name; }
            greet() { return "hi " + this.name; }
        }
        var method = Person("ada").greet;
        print method();
        """
    )
    assert output == ["hi ada"]


#reading one method twice off one instance gives equal values
def test_bound_methods_compare_by_receiver() -> None:
    output = run_ok(
        """
        class A { m() { return 1; } }
        var a = A();
        var b = A();
        print a.m == a.m;
        print a.m == b.m;
        print a.m != a.m;
        """
    )
    assert output == ["true", "false", "false"]


#fields shadow methods of the same name
def test_fields_take_priority_over_methods() -> None:
    output = run_ok(
        """
        class A { value() { return "method"; } }
        var a = A();
        print a.value();
        a.value = "field";
        print a.value;
        """
    )
    assert output == ["method", "field"]


def test_undefined_property_is_runtime_error() -> None:
    message = runtime_message("class A {} var a = A(); a.missing();")
    assert message == "Undefined property 'missing'."


def test_property_on_non_instance_is_runtime_error() -> None:
    assert "cannot read 'x'" in runtime_message("var n = 1; print n.x;")
    assert "cannot set 'x'" in runtime_message('"s".x = 1;')


@pytest.mark.parametrize(
    "source, expected",
    [
        ('"text"();', "Can only call functions and classes"),
        ("fun f(a) {} f();", "Expected 1 arguments but got 0."),
        ("class A { init(a, b) {} } A(1);", "Expected 2 arguments but got 1."),
        ("class A {} A(1);", "Expected 0 arguments but got 1."),
        ("print undefined;", "Undefined variable 'undefined'."),
        ("missing = 1;", "Undefined variable 'missing'."),
        ("print -\"a\";", "Operand must be a number"),
        ("print 1 < nil;", "Right operand must be a number"),
    ],
)
def test_runtime_errors(source: str, expected: str) -> None:
    assert expected in runtime_message(source)


#the first runtime error halts the program, even inside loops
def test_runtime_error_stops_execution() -> None:
    result = run_source(
        """
        print "before";
        var i = 0;
        while (true) {
            i = i + 1;
            if (i == 3) print nil + 1;
        }
        print "after";
        """
    )
    assert result.output == ["before"]
    assert result.runtime_error is not None
    assert result.runtime_error.line == 6
    assert result.exit_code == 70


def test_unbounded_recursion_is_runtime_error() -> None:
    message = runtime_message("fun loop() { return loop(); } loop();")
    assert message == "Stack overflow."


#recursion a thousand calls deep runs to completion
def test_deep_recursion_succeeds() -> None:
    output = run_ok(
        """
        fun count(n) {
            if (n > 0) return count(n - 1);
            return "done";
        }
        print count(1000);
        """
    )
    assert output == ["done"]


def test_deeply_nested_grouping_evaluates() -> None:
    assert run_ok("print " + "(" * 200 + "1" + ")" * 200 + ";") == ["1"]


#expressions too deep to evaluate outside any call still surface as a runtime error
def test_evaluation_overflow_outside_calls_is_runtime_error() -> None:
    expr: ast.Expr = ast.Literal(1.0)
    for _ in range(50_000):
        expr = ast.Grouping(expr)
    interpreter = Interpreter()
    interpreter.interpret(Resolution(statements=[ast.Print(expr)]))
    assert interpreter.runtime_error is not None
    assert interpreter.runtime_error.message == "Stack overflow."
    assert interpreter.output == []


#a distance past the outermost frame is an internal fault, not a Lox error
def test_ancestor_past_globals_raises() -> None:
    environment = Environment(enclosing=Environment())
    assert environment.ancestor(1) is environment.enclosing
    with pytest.raises(LoxError, match="exceeds the environment chain") as info:
        environment.ancestor(2)
    assert not isinstance(info.value, LoxRuntimeError)


#static errors keep the interpreter from running anything
def test_static_errors_prevent_execution() -> None:
    result = run_source('print "ran"; var = 2; print (;')
    assert isinstance(result, RunResult)
    assert len(result.static_errors) == 2
    assert result.output == []
    assert result.exit_code == 65


def test_resolver_errors_prevent_execution() -> None:
    result = run_source('print "ran"; return;')
    assert [diagnostic.message for diagnostic in result.static_errors] == ["Can't return from top-level code."]
    assert result.output == []


#an interpreter keeps its globals across runs, like the REPL does
def test_session_persists_between_runs() -> None:
    interpreter = Interpreter()
    run_source("var count = 1; fun bump() { count = count + 1; }", interpreter)
    run_source("bump(); bump();", interpreter)
    result = run_source("print count;", interpreter)
    assert result.output == ["3"]


def test_assert_native_records_failures() -> None:
    interpreter = Interpreter()
    run_source('assert("wrong", 1, 2); assert("right", "x", "x");', interpreter)
    assert [record.passed for record in interpreter.assertions] == [False, True]
    assert interpreter.assertions[0].message == "wrong"


def test_clock_is_monotonic_milliseconds() -> None:
    output = run_ok("var a = clock(); var b = clock(); print b >= a; print a >= 0;")
    assert output == ["true", "true"]


def test_division_by_zero_is_infinite() -> None:
    assert run_ok("print 1 / 0 > 1000000;") == ["true"]


def test_stream_receives_printed_lines(capsys: pytest.CaptureFixture[str]) -> None:
    interpreter = Interpreter(stream=sys.stdout)
    run_source('print "streamed";', interpreter)
    assert capsys.readouterr().out == "streamed\n"
