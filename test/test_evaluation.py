"""
Evaluation tests for minilisp
Self-evaluation, quoting, primitive application and error propagation
"""

import pytest
from interpreter import eval_value, apply_primitive, interpret, run
from values import Atom, List, DottedList, Number, String, Bool
from error_handling import (
    NumArgsError,
    TypeMismatchError,
    BadSpecialFormError,
    UnknownFunctionError,
    LispRuntimeError
)


def evaluate(interpreter, text):
    return interpreter.evaluate(interpreter.read(text))


class TestSelfEvaluation:
    """Literals evaluate to themselves"""

    @pytest.mark.parametrize("value", [String("s"), Number(7), Bool(True), Bool(False)])
    def test_literal(self, value):
        assert eval_value(value) is value


class TestQuote:
    """Quoting suppresses evaluation of exactly one sub-tree"""

    def test_quote_returns_list_unevaluated(self):
        form = List((Atom("+"), Number(1), Number(2)))
        assert eval_value(List((Atom("quote"), form))) == form

    def test_quote_atom(self, interpreter):
        assert evaluate(interpreter, "'x") == Atom("x")

    def test_quote_dotted_list(self, interpreter):
        assert evaluate(interpreter, "'(1 . 2)") == DottedList((Number(1),), Number(2))

    def test_quoted_argument(self, interpreter):
        # '(4) is a singleton list, which numeric primitives unwrap
        assert evaluate(interpreter, "(+ '(4) 1)") == Number(5)


class TestArithmetic:
    """Test the variadic integer primitives"""

    @pytest.mark.parametrize("text, expected", [
            ("(+ 1 2 3)", 6),
            ("(- 10 3 2)", 5),
            ("(* 2 3 4)", 24),
            ("(- 0 5)", -5),
            ("(+ 1 (* 2 3))", 7),
            ("(/ 7 2)", 3),
            ('(/ "-7" 2)', -4),
            ('(mod "-7" 2)', 1),
            ('(quotient "-7" 2)', -3),
            ('(remainder "-7" 2)', -1),
            ('(remainder 7 "-2")', 1),
            ("(mod 7 2 2)", 1),
    ])
    def test_fold(self, interpreter, text, expected):
        assert evaluate(interpreter, text) == Number(expected)

    def test_arbitrary_precision(self, interpreter):
        result = evaluate(interpreter, "(* 100000000000000000000 100000000000000000000)")
        assert result == Number(10 ** 40)

    def test_string_prefix_coercion(self, interpreter):
        assert evaluate(interpreter, '(+ "12abc" 1)') == Number(13)

    def test_non_numeric_string(self, interpreter):
        with pytest.raises(TypeMismatchError) as exc_info:
            evaluate(interpreter, '(+ "abc" 1)')
        assert exc_info.value.expected == "number"
        assert exc_info.value.found == String("abc")

    def test_too_few_arguments(self, interpreter):
        with pytest.raises(NumArgsError) as exc_info:
            evaluate(interpreter, "(+ 1)")
        assert exc_info.value.expected == 2
        assert exc_info.value.found == (Number(1),)

    def test_no_arguments(self, interpreter):
        with pytest.raises(NumArgsError) as exc_info:
            evaluate(interpreter, "(*)")
        assert exc_info.value.found == ()

    def test_type_mismatch(self, interpreter):
        with pytest.raises(TypeMismatchError) as exc_info:
            evaluate(interpreter, "(+ 1 #t)")
        assert exc_info.value.expected == "number"
        assert exc_info.value.found == Bool(True)

    def test_multi_element_list_is_not_a_number(self, interpreter):
        with pytest.raises(TypeMismatchError):
            evaluate(interpreter, "(+ '(4 5) 1)")

    @pytest.mark.parametrize("text", ["(/ 1 0)", "(mod 1 0)", "(quotient 1 0)", "(remainder 1 0)"])
    def test_division_by_zero(self, interpreter, text):
        with pytest.raises(LispRuntimeError):
            evaluate(interpreter, text)


class TestComparison:
    """Test numeric, boolean and string predicates"""

    @pytest.mark.parametrize("text, expected", [
            ("(< 1 2)", True),
            ("(= 3 3)", True),
            ("(> 1 2)", False),
            ("(/= 1 2)", True),
            ("(>= 2 2)", True),
            ("(<= 3 2)", False),
            ('(= "5" 5)', True),
            ("(&& #t #f)", False),
            ("(|| #t #f)", True),
            ('(string=? "a" "a")', True),
            ('(string<? "abc" "abd")', True),
            ('(string>? "a" "b")', False),
            ('(string<=? "a" "a")', True),
            ('(string>=? "a" "b")', False),
            ('(string=? 1 "1")', True),
            ('(string=? #t "True")', True),
    ])
    def test_predicate(self, interpreter, text, expected):
        assert evaluate(interpreter, text) == Bool(expected)

    def test_comparison_needs_exactly_two(self, interpreter):
        with pytest.raises(NumArgsError) as exc_info:
            evaluate(interpreter, "(< 1 2 3)")
        assert exc_info.value.found == (Number(1), Number(2), Number(3))

    def test_boolean_operand_type(self, interpreter):
        with pytest.raises(TypeMismatchError) as exc_info:
            evaluate(interpreter, "(&& 1 #t)")
        assert exc_info.value.expected == "boolean"

    def test_string_operand_type(self, interpreter):
        with pytest.raises(TypeMismatchError) as exc_info:
            evaluate(interpreter, "(string=? 'a \"a\")")
        assert exc_info.value.expected == "string"
        assert exc_info.value.found == Atom("a")


class TestBadForms:
    """Shapes the evaluator does not understand"""

    @pytest.mark.parametrize("text", ["x", "()", "(1 2)", "(1 . 2)", '("f" 1)'])
    def test_bad_special_form(self, interpreter, text):
        with pytest.raises(BadSpecialFormError):
            evaluate(interpreter, text)

    def test_unknown_function(self, interpreter):
        with pytest.raises(UnknownFunctionError) as exc_info:
            evaluate(interpreter, "(foo 1 2)")
        assert exc_info.value.name == "foo"

    def test_apply_unknown_primitive(self):
        with pytest.raises(UnknownFunctionError):
            apply_primitive("nope", [])


class TestErrorPropagation:
    """The first error anywhere aborts the whole evaluation"""

    def test_arguments_evaluated_before_lookup(self, interpreter):
        with pytest.raises(NumArgsError):
            evaluate(interpreter, "(foo (+ 1))")

    def test_left_to_right(self, interpreter):
        with pytest.raises(UnknownFunctionError) as exc_info:
            evaluate(interpreter, "(+ (bar) (+ 1))")
        assert exc_info.value.name == "bar"

    def test_nested_error_unchanged(self, interpreter):
        with pytest.raises(TypeMismatchError) as exc_info:
            evaluate(interpreter, "(+ 1 (* 2 (- 3 #f)))")
        assert exc_info.value.found == Bool(False)


class TestTopLevel:
    """interpret/run turn every failure into data"""

    @pytest.mark.parametrize("text, expected", [
            ("(+ 1 2)", "3"),
            ('"hi"', '"hi"'),
            ("#t", "True"),
            ("'(1 \"a\" #f)", '(1 "a" False)'),
            ("'(a . b)", "(a . b)"),
            ("'(quote x)", "(quote x)"),
            ("(+ 1)", "Expected 2 args; found values 1"),
            ("(foo 1 2)", 'Unrecognized primitive function args: "foo"'),
            ("(+ 1 #t)", "Invalid type: expected number, found True"),
            ("(1 . 2)", "Unrecognized special form: (1 . 2)"),
            ("(/ 1 0)", "Division by zero"),
    ])
    def test_run(self, text, expected):
        assert run(text) == expected

    def test_parse_failure_is_an_outcome(self):
        outcome = interpret("(1 2")
        assert not outcome.ok
        assert outcome.value is None
        assert outcome.render().startswith("Parse error at line 1")

    def test_success_outcome(self, interpreter):
        outcome = interpreter.interpret("(* 6 7)")
        assert outcome.ok
        assert outcome.value == Number(42)
        assert interpreter.run("(* 6 7)") == "42"

    def test_nested_arithmetic(self):
        depth = 200
        outcome = interpret("(+ 1 " * depth + "1" + ")" * depth)
        assert outcome.value == Number(depth + 1)

    def test_nested_arithmetic_through_interpreter(self, interpreter):
        depth = 500
        assert interpreter.run("(* 1 " * depth + "7" + ")" * depth) == "7"

    def test_pathologically_nested_input_is_an_error(self):
        depth = 20000
        outcome = interpret("(+ 1 " * depth + "1" + ")" * depth)
        assert not outcome.ok

    def test_debug_trace(self, capsys):
        outcome = interpret("(+ 1 2)", debug=True)
        assert outcome.value == Number(3)
        out = capsys.readouterr().out
        assert "Evaluating: (+ 1 2)" in out
        assert "Applying: + to (1 2)" in out
