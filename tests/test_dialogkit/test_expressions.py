import pytest
from dialogkit.expressions import (
    ExpressionEvaluator,
    split_binary,
    parse_number,
    format_number,
    try_execute_math_f,
    try_execute_math_i,
    try_compare_math_f,
    try_compare_math_i,
    ARITHMETIC_OPERATORS,
    COMPARISON_OPERATORS,
)

@pytest.fixture
def evaluator(variables):
    return ExpressionEvaluator(variables)

def test_compare_literals(variables):
    assert try_compare_math_f("5>=2", variables) == (True, True)
    assert try_compare_math_f("2>=5", variables) == (True, False)

@pytest.mark.parametrize("expression,expected", [
    ("3 == 3", True),
    ("3 = 3.0000001", True),
    ("3 != 4", True),
    ("3 <> 3", False),
    ("2 <= 2", True),
    ("2 < 2", False),
    ("-1 > -2", True),
])
def test_comparison_operators(evaluator, expression, expected):
    assert evaluator.try_compare_math_f(expression) == (True, expected)

def test_compare_with_variables(evaluator, variables):
    variables.set("gold", "12")

    assert evaluator.try_compare_math_f("gold > 10") == (True, True)
    assert evaluator.try_compare_math_f("gold < 10") == (True, False)

def test_compare_integer_mode_rounds(evaluator):
    assert evaluator.try_compare_math_f("2.6 == 3") == (True, False)
    assert evaluator.try_compare_math_i("2.6 == 3") == (True, True)

def test_compare_fails_on_unknown_operand(evaluator):
    assert evaluator.try_compare_math_f("gold > 10") == (False, False)
    assert evaluator.try_compare_math_f("5") == (False, False)

def test_compound_requires_existing_variable(variables):
    ok, _ = try_execute_math_f("gold+=5", variables)

    assert not ok
    assert "gold" not in variables

def test_compound_assignment(evaluator, variables):
    variables.set("gold", "10")

    assert evaluator.try_execute_math_f("gold += 5") == (True, 15.0)
    assert variables.get("gold") == "15"

    assert evaluator.try_execute_math_f("gold -= 20") == (True, -5.0)
    assert evaluator.try_execute_math_f("gold *= -2") == (True, 10.0)
    assert evaluator.try_execute_math_f("gold /= 4") == (True, 2.5)
    assert variables.get("gold") == "2.5"
    assert evaluator.try_execute_math_f("gold ^= 2") == (True, 6.25)
    assert evaluator.try_execute_math_f("gold %= 4") == (True, 2.25)

def test_compound_right_side_may_be_variable(evaluator, variables):
    variables.set("gold", "10")
    variables.set("reward", "7")

    assert evaluator.try_execute_math_f("gold += reward") == (True, 17.0)

def test_target_assignment_creates_variable(variables):
    ok, result = try_execute_math_f("gold = 3+4", variables)

    assert ok
    assert result == 7
    assert variables.get("gold") == "7"

def test_target_assignment_with_variables(evaluator, variables):
    variables.set("a", "6")
    variables.set("b", "4")

    assert evaluator.try_execute_math_f("total = a * b") == (True, 24.0)
    assert evaluator.try_execute_math_f("diff = a - -4") == (True, 10.0)
    assert variables.get("diff") == "10"

def test_integer_mode_rounds_before_and_after(variables):
    ok, result = try_execute_math_i("x = 2.6+2.6", variables)

    assert ok
    assert result == 6
    assert variables.get("x") == "6"

def test_integer_mode_division(variables):
    ok, result = try_execute_math_i("x = 7/2", variables)

    assert ok
    # 3.5 rounds to the even neighbour
    assert result == 4
    assert variables.get("x") == "4"

def test_float_mode_keeps_fraction(variables):
    ok, result = try_execute_math_f("x = 7/2", variables)

    assert ok
    assert result == 3.5
    assert variables.get("x") == "3.5"

def test_division_by_zero_fails_without_mutation(evaluator, variables):
    variables.set("gold", "10")

    assert evaluator.try_execute_math_f("gold /= 0") == (False, 0.0)
    assert evaluator.try_execute_math_f("x = 1 % 0") == (False, 0.0)
    assert variables.get("gold") == "10"
    assert "x" not in variables

def test_overflow_fails(evaluator):
    assert evaluator.try_execute_math_f("x = 10 ^ 400") == (False, 0.0)

def test_malformed_expressions_fail(evaluator, variables):
    for expression in ["", "x = ", "= 3+4", "x = 3", "x = 1+2+3", "x = a+1", "a = b = 1+2"]:
        assert evaluator.try_execute_math_f(expression) == (False, 0.0), expression
    assert len(variables) == 0

def test_non_numeric_variable_is_not_an_operand(evaluator, variables):
    variables.set("name", "Ada")

    assert evaluator.try_execute_math_f("name += 1") == (False, 0.0)
    assert variables.get("name") == "Ada"

def test_split_binary_maximal_munch():
    split = split_binary("a>=b", COMPARISON_OPERATORS)

    assert (split.left, split.operator, split.right) == ("a", ">=", "b")

def test_split_binary_signs():
    assert split_binary("-3 - -2", ARITHMETIC_OPERATORS).right == "-2"
    assert split_binary("1e-3+2", ARITHMETIC_OPERATORS).left == "1e-3"
    assert split_binary("-3", ARITHMETIC_OPERATORS) is None

def test_parse_and_format_number():
    assert parse_number(" 2.5 ") == 2.5
    assert parse_number(".5") == 0.5
    assert parse_number("1e3") == 1000.0
    assert parse_number("abc") is None
    assert parse_number("nan") is None
    assert parse_number("1e400") is None

    assert format_number(7.0) == "7"
    assert format_number(-0.0) == "0"
    assert format_number(2.25) == "2.25"

def test_out_of_range_literals_fail_in_integer_mode(variables):
    assert try_execute_math_i("x = 1e400 + 1", variables) == (False, 0)
    assert try_compare_math_i("1e400 > 1", variables) == (False, False)
    assert "x" not in variables

def test_out_of_range_variable_is_not_an_operand(evaluator, variables):
    variables.set("huge", "1e400")

    assert evaluator.try_execute_math_i("huge += 1") == (False, 0)
    assert evaluator.try_compare_math_i("huge > 1") == (False, False)
    assert variables.get("huge") == "1e400"
