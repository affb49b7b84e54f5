from io import StringIO

import pytest

from gejang.lexing.scanner import Scanner
from gejang.parsing.parser import Parser
from gejang.parsing.stmt import ExpressionStmt
from gejang.runtime.interpreter import Interpreter
from gejang.runtime.natives import native_functions
from gejang.runtime.resolver import Resolver
from gejang.utilities.error import EX_DATAERR, EX_SOFTWARE, LoxErrorHandler, Unimplemented


@pytest.mark.parametrize("source, expected", [
    ("1 + 2", "3"),
    ("1 - 2", "-1"),
    ("2 * 3.5", "7"),
    ("1 / 0", "inf"),
    ("-1 / 0", "-inf"),
    ("0 / 0", "NaN"),
    ("0.1 + 0.2", "0.30000000000000004"),
    ("1000000000000000000000", "1000000000000000000000"),
    ('"foo" + "bar"', "foobar"),
    ("!1", "false"),
    ("!nil", "true"),
    ("-(3)", "-3"),
    ("1 < 2", "true"),
    ("2 <= 1", "false"),
    ("1 == 1", "true"),
    ('"a" == "a"', "true"),
    ('1 == "1"', "false"),
    ("nil == false", "false"),
    ("0 / 0 == 0 / 0", "false"),
    ("nil != nil", "false"),
    ('"hi" or 2', "hi"),
    ('nil and "yes"', "nil"),
    ('false or "yes"', "yes"),
    ("clock", "<native fun clock/0>"),
    ("tsp2cup(96)", "2"),
])
def test_expressions(run, source, expected):
    result = run(f"print {source};")
    assert result.out == [expected]
    assert result.err == []
    assert result.exit_code is None


@pytest.mark.parametrize("source, message", [
    ('"foo" + 1', "Binary operation not implemented: String + Number"),
    ('"foo" > "bar"', "Binary operation not implemented: String > String"),
    ("nil * true", "Binary operation not implemented: Nil * Boolean"),
    ("clock - 1", "Binary operation not implemented: NativeFunction - Number"),
    ('-"a"', "Unary operation not implemented: -String"),
    ('tsp2cup("a")', "Native function tsp2cup: expected Number, got String"),
    ("undefined", "Undefined variable undefined"),
    ('"x"()', "Can only call functions and classes."),
    ("clock(1)", "Expected 0 arguments but got 1."),
    ("(1).field", "Only instances have attributes."),
])
def test_runtime_errors(run, source, message):
    result = run(f"print {source};")
    assert result.out == []
    assert result.err == [f"[line 1] LoxRuntimeError: {message}"]
    assert result.exit_code == EX_SOFTWARE


def test_runtime_error_reports_line(run):
    result = run('print 1;\nprint 2;\nprint "a" - 1;\nprint 4;')
    assert result.out == ["1", "2"]
    assert result.err == ["[line 3] LoxRuntimeError: Binary operation not implemented: String - Number"]


def test_uninitialized_variable_is_nil(run):
    assert run("var a; print a;").out == ["nil"]
    assert run("var a; print a = 2;").out == ["2"]


def test_assignment_is_right_associative(run):
    assert run("var a; var b; a = b = 3; print a; print b;").out == ["3", "3"]


def test_block_shadows_and_restores(run):
    source = """
    var a = "outer";
    {
        var a = "inner";
        print a;
    }
    print a;
    """
    assert run(source).out == ["inner", "outer"]


def test_initializer_reads_enclosing_variable(run):
    assert run("var a = 1; { var a = a + 2; print a; }").out == ["3"]


def test_closures_capture_declaration_scope(run):
    source = """
    var a = "global";
    {
        fun showA() {
            print a;
        }

        showA();
        var a = "block";
        showA();
    }
    """
    assert run(source).out == ["global", "global"]


def test_recursion(run):
    source = """
    fun count(n) {
        if (n > 1) count(n - 1);
        print n;
    }
    count(3);
    """
    assert run(source).out == ["1", "2", "3"]


def test_counter_closure(run):
    source = """
    fun makeCounter() {
        var i = 0;
        fun count() {
            i = i + 1;
            print i;
        }
        return count;
    }

    var counter = makeCounter();
    counter();
    counter();
    counter();
    """
    assert run(source).out == ["1", "2", "3"]


def test_closures_share_frames(run):
    source = """
    fun pair() {
        var value = "before";
        fun get() { return value; }
        fun set(v) { value = v; }
        print get();
        set("after");
        print get();
        return get;
    }
    print pair()();
    """
    assert run(source).out == ["before", "after", "after"]


def test_function_without_return_is_nil(run):
    assert run("fun f() {} print f(); print f;").out == ["nil", "<fun f/0>"]


def test_early_return_from_loop(run):
    source = """
    fun first(limit) {
        var i = 0;
        while (true) {
            if (i == limit) return i;
            i = i + 1;
        }
    }
    print first(4);
    """
    assert run(source).out == ["4"]


def test_for_and_while_loops(run):
    assert run("for (var i = 0; i < 3; i = i + 1) print i;").out == ["0", "1", "2"]
    assert run("var i = 0; while (i < 3) { print i; i = i + 1; }").out == ["0", "1", "2"]


def test_break_ends_innermost_loop(run):
    source = """
    for (var i = 0; i < 3; i = i + 1) {
        for (var j = 0; j < 3; j = j + 1) {
            if (j == 1) break;
            print j;
        }
        print i;
    }
    """
    assert run(source).out == ["0", "0", "0", "1", "0", "2"]


def test_break_skips_increment(run):
    assert run("var i; for (i = 0; i < 5; i = i + 1) if (i == 2) break; print i;").out == ["2"]


def test_wrong_number_of_args(run):
    result = run("fun f(a, b) {}\nf(1);")
    assert result.err == ["[line 2] LoxRuntimeError: Expected 2 arguments but got 1."]
    assert result.exit_code == EX_SOFTWARE


def test_runtime_error_inside_function_unwinds_scopes(run):
    assert run("fun f() { var a = 1; return a + nil; } f();").exit_code == EX_SOFTWARE
    # The global scope is intact afterwards.
    assert run("var b = 2; print b;").out == ["2"]


class TestClasses:
    def test_display(self, run):
        assert run("class A {} print A; print A();").out == ["<cls A>", "<instance of A>"]

    def test_fields(self, run):
        source = """
        class Foo {}
        var foo = Foo();
        foo.field = "hello";
        foo.field = "goodbye";
        print(foo.field);
        """
        assert run(source).out == ["goodbye"]

    def test_fields_are_per_instance(self, run):
        source = """
        class Foo {}
        var a = Foo();
        var b = Foo();
        a.x = 1;
        b.x = 2;
        print a.x;
        print b.x;
        """
        assert run(source).out == ["1", "2"]

    def test_undefined_property(self, run):
        result = run("class A {}\nprint A().missing;")
        assert result.err == ["[line 2] LoxRuntimeError: Undefined property 'missing'."]

    def test_set_on_non_instance(self, run):
        result = run('var a = "str"; a.x = 1;')
        assert result.err == ["[line 1] LoxRuntimeError: Only instances have attributes."]

    def test_initializer(self, run):
        source = """
        class Point {
            init(x, y) {
                this.x = x;
                this.y = y;
            }
            sum() {
                return this.x + this.y;
            }
        }
        var p = Point(1, 2);
        print p.sum();
        print Point;
        """
        assert run(source).out == ["3", "<cls Point>"]

    def test_class_arity_follows_initializer(self, run):
        result = run("class A { init(a) {} }\nA();")
        assert result.err == ["[line 2] LoxRuntimeError: Expected 1 arguments but got 0."]

    def test_initializer_returns_instance(self, run):
        source = """
        class A {
            init() {
                this.count = 0;
                return;
            }
        }
        var a = A();
        print a.init() == a;
        """
        assert run(source).out == ["true"]

    def test_this_in_method(self, run):
        source = """
        class Egotist {
            speak() {
                print this.name;
            }
        }
        var e = Egotist();
        e.name = "me";
        e.speak();
        var method = e.speak;
        method();
        """
        assert run(source).out == ["me", "me"]

    def test_this_in_nested_function(self, run):
        source = """
        class Thing {
            getCallback() {
                fun localFunction() {
                    print this;
                }
                return localFunction;
            }
        }
        var callback = Thing().getCallback();
        callback();
        """
        assert run(source).out == ["<instance of Thing>"]

    def test_bound_method_keeps_receiver(self, run):
        source = """
        class Box {
            init(n) { this.n = n; }
            get() { return this.n; }
        }
        var a = Box(1);
        var b = Box(2);
        b.stolen = a.get;
        print b.stolen();
        print b.get();
        """
        assert run(source).out == ["1", "2"]

    def test_function_stored_in_field(self, run):
        source = """
        class Box {}
        fun seven() { return 7; }
        var box = Box();
        box.fn = seven;
        print box.fn();
        """
        assert run(source).out == ["7"]

    def test_instances_compare_by_identity(self, run):
        source = """
        class A {}
        var a = A();
        print a == a;
        print a == A();
        """
        assert run(source).out == ["true", "false"]


def test_evaluate(parse, error_handler):
    stmt, = parse("(1 + 2) * 3;")
    assert isinstance(stmt, ExpressionStmt)
    assert Interpreter(error_handler).evaluate(stmt.expression) == 9.0


def test_evaluate_raises(parse, error_handler):
    stmt, = parse('1 + "a";')
    with pytest.raises(Unimplemented):
        Interpreter(error_handler).evaluate(stmt.expression)


def test_print_failure():
    output = StringIO()
    output.close()
    error_handler = LoxErrorHandler(StringIO())
    interpreter = Interpreter(error_handler, output=output)
    ast = Parser(Scanner("print 1;", error_handler).scan_tokens(), error_handler).parse()
    interpreter.interpret(ast, {})
    assert [str(error) for error in error_handler.errors] == ["[line 1] LoxRuntimeError: Print failed."]


def test_static_errors_stop_before_running(run):
    result = run('print "unreachable";\nprint 1 +;')
    assert result.out == []
    assert result.exit_code == EX_DATAERR


def test_depth_tables_belong_to_their_program(parse, error_handler):
    output = StringIO()
    resolver = Resolver(native_functions())
    interpreter = Interpreter(error_handler, output=output)

    declarations = parse(
        "fun counter() { var n = 0; fun inc() { n = n + 1; return n; } return inc; }\n"
        "var c = counter();\n"
        "class Box { init(x) { this.x = x; } get() { var y = this.x; return y; } }"
    )
    declaration_depths = resolver.resolve(declarations)
    interpreter.interpret(declarations, declaration_depths)

    uses = parse("{ var first = c(); print first; }\nprint c();\nprint Box(5).get();")
    interpreter.interpret(uses, resolver.resolve(uses))

    assert output.getvalue().splitlines() == ["1", "2", "5"]
    assert error_handler.errors == []
    # Nothing from either program is kept once it has finished running.
    assert interpreter._locals == {}  # pylint: disable=protected-access
    assert declaration_depths


def test_functions_from_earlier_runs(run):
    run("fun counter() { var n = 0; fun inc() { n = n + 1; return n; } return inc; }")
    run("var c = counter();")
    result = run("{ var a = c(); var b = c(); print a + b; }")
    assert result.out == ["3"]
