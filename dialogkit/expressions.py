"""
Expression evaluator for dialog math and comparisons.

Expressions are single binary operations over literals or variable names:

    gold += 5          compound assignment (left side must be a variable)
    total = gold * 2   target assignment (target is created if missing)
    gold >= 10         comparison

Two numeric modes share the same parsing. Float mode computes directly;
integer mode rounds both operands to the nearest integer first and rounds
the result again.

Every entry point returns ``(success, value)``. On failure the variable store
is never modified.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Optional

from dialogkit.variables import VariableStore

logger = logging.getLogger(__name__)


# Operator families, in priority order
COMPOUND_OPERATORS = ("+=", "-=", "/=", "*=", "%=", "^=")
ARITHMETIC_OPERATORS = ("+", "-", "/", "*", "%", "^")
COMPARISON_OPERATORS = ("==", "<=", ">=", "!=", "<>", "=", "<", ">")

NUMBER_PATTERN = re.compile(r'[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?')
EXPONENT_PREFIX = re.compile(r'[+-]?(\d+(\.\d*)?|\.\d+)[eE]')

# Relative tolerance for "=" / "!=" comparisons
EQUALITY_TOLERANCE = 1e-6


@dataclass
class Operand:
    """One resolved side of a binary expression."""
    value: float
    name: str
    is_variable: bool


@dataclass
class BinaryExpression:
    """A split ``left OP right`` expression, operands not yet resolved."""
    left: str
    operator: str
    right: str


def parse_number(text: str) -> Optional[float]:
    """Parse a plain decimal literal, or return None."""
    text = text.strip()
    if not NUMBER_PATTERN.fullmatch(text):
        return None
    value = float(text)
    # Literals too large for a float overflow to inf
    if not math.isfinite(value):
        return None
    return value


def format_number(value: float) -> str:
    """Format a result for storage: integral values lose their ``.0``."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _is_sign(buffer: str, char: str) -> bool:
    """True if ``char`` at this point is a numeric sign, not an operator."""
    if char not in "+-":
        return False
    pending = buffer.strip()
    return not pending or EXPONENT_PREFIX.fullmatch(pending) is not None


def split_binary(expression: str, operators: tuple[str, ...]) -> Optional[BinaryExpression]:
    """
    Split an expression around exactly one operator from a family.

    Longer operators are matched first at each position, so ``>=`` is never
    read as ``>`` followed by ``=``. A ``+`` or ``-`` at the start of an
    operand, or inside an exponent, is a sign.

    Returns:
        The split expression, or None if there is not exactly one operator
        or either side is empty
    """
    # Stable sort keeps priority order among same-length operators
    candidates = sorted(operators, key=len, reverse=True)

    left: Optional[str] = None
    found: Optional[str] = None
    buffer: list[str] = []
    i = 0

    while i < len(expression):
        matched = None
        if not _is_sign("".join(buffer), expression[i]):
            for candidate in candidates:
                if expression.startswith(candidate, i):
                    matched = candidate
                    break

        if matched is None:
            buffer.append(expression[i])
            i += 1
            continue

        if found is not None:
            return None

        left = "".join(buffer)
        found = matched
        buffer = []
        i += len(matched)

    if found is None or left is None:
        return None

    left = left.strip()
    right = "".join(buffer).strip()
    if not left or not right:
        return None

    return BinaryExpression(left, found, right)


def _apply(operator: str, a: float, b: float) -> float:
    if operator == "+":
        return a + b
    if operator == "-":
        return a - b
    if operator == "*":
        return a * b
    if operator == "/":
        return a / b
    if operator == "%":
        return math.fmod(a, b)
    if operator == "^":
        return math.pow(a, b)
    raise ValueError(f"Unknown operator: {operator}")


class ExpressionEvaluator:
    """
    Evaluates dialog expressions against a VariableStore.

    Usage:
        evaluator = ExpressionEvaluator(variables)
        ok, value = evaluator.try_execute_math_f("gold = 3+4")
        ok, result = evaluator.try_compare_math_i("gold >= 7")
    """

    def __init__(self, variables: VariableStore):
        self.variables = variables

    # Operands

    def resolve_operand(self, side: str) -> Optional[Operand]:
        """
        Resolve one side of an expression.

        A name that exists in the store with a numeric value wins; otherwise
        the side must be a numeric literal.
        """
        name = side.strip()
        stored = self.variables.get(name)
        if stored is not None:
            value = parse_number(stored)
            if value is not None:
                return Operand(value, name, True)

        value = parse_number(name)
        if value is not None:
            return Operand(value, name, False)
        return None

    def _resolve_pair(
        self,
        expression: str,
        operators: tuple[str, ...],
    ) -> Optional[tuple[Operand, str, Operand]]:
        split = split_binary(expression.strip(), operators)
        if split is None:
            return None

        a = self.resolve_operand(split.left)
        if a is None:
            return None
        b = self.resolve_operand(split.right)
        if b is None:
            return None
        return a, split.operator, b

    def _compute(self, operator: str, a: float, b: float, round_to_int: bool) -> Optional[float]:
        if round_to_int:
            a = float(round(a))
            b = float(round(b))

        try:
            result = _apply(operator, a, b)
        except (ZeroDivisionError, OverflowError, ValueError) as e:
            logger.debug(f"Math failed for {a} {operator} {b}: {e}")
            return None

        if not math.isfinite(result):
            return None

        if round_to_int:
            result = float(round(result))
        return result

    # Assignment

    def _execute_compound(self, expression: str, round_to_int: bool) -> Optional[float]:
        resolved = self._resolve_pair(expression, COMPOUND_OPERATORS)
        if resolved is None:
            return None

        a, operator, b = resolved
        if not a.is_variable:
            return None

        result = self._compute(operator[0], a.value, b.value, round_to_int)
        if result is None:
            return None

        self.variables.set(a.name, format_number(result))
        return result

    def _execute_target(self, expression: str, round_to_int: bool) -> Optional[float]:
        parts = expression.split("=")
        if len(parts) != 2:
            return None

        target = parts[0].strip()
        if not target:
            return None

        resolved = self._resolve_pair(parts[1], ARITHMETIC_OPERATORS)
        if resolved is None:
            return None

        a, operator, b = resolved
        result = self._compute(operator, a.value, b.value, round_to_int)
        if result is None:
            return None

        self.variables.set(target, format_number(result))
        return result

    def _execute(self, expression: str, round_to_int: bool) -> Optional[float]:
        result = self._execute_compound(expression, round_to_int)
        if result is None:
            result = self._execute_target(expression, round_to_int)
        return result

    def try_execute_math_f(self, expression: str) -> tuple[bool, float]:
        """
        Run an assignment in float mode.

        Returns:
            ``(True, result)`` on success, ``(False, 0.0)`` otherwise
        """
        result = self._execute(expression, round_to_int=False)
        if result is None:
            return False, 0.0
        return True, result

    def try_execute_math_i(self, expression: str) -> tuple[bool, int]:
        """Run an assignment in integer mode."""
        result = self._execute(expression, round_to_int=True)
        if result is None:
            return False, 0
        return True, int(result)

    # Comparison

    def _compare(self, expression: str, round_to_int: bool) -> Optional[bool]:
        resolved = self._resolve_pair(expression, COMPARISON_OPERATORS)
        if resolved is None:
            return None

        left, operator, right = resolved
        a, b = left.value, right.value
        if round_to_int:
            a = float(round(a))
            b = float(round(b))

        if operator in ("==", "="):
            return math.isclose(a, b, rel_tol=EQUALITY_TOLERANCE)
        if operator in ("!=", "<>"):
            return not math.isclose(a, b, rel_tol=EQUALITY_TOLERANCE)
        if operator == "<=":
            return a <= b
        if operator == ">=":
            return a >= b
        if operator == "<":
            return a < b
        if operator == ">":
            return a > b
        return None

    def try_compare_math_f(self, expression: str) -> tuple[bool, bool]:
        """
        Compare in float mode.

        Returns:
            ``(parsed, result)``; ``result`` is False whenever ``parsed`` is
        """
        result = self._compare(expression, round_to_int=False)
        if result is None:
            return False, False
        return True, result

    def try_compare_math_i(self, expression: str) -> tuple[bool, bool]:
        """Compare in integer mode."""
        result = self._compare(expression, round_to_int=True)
        if result is None:
            return False, False
        return True, result


def try_execute_math_f(expression: str, variables: VariableStore) -> tuple[bool, float]:
    return ExpressionEvaluator(variables).try_execute_math_f(expression)


def try_execute_math_i(expression: str, variables: VariableStore) -> tuple[bool, int]:
    return ExpressionEvaluator(variables).try_execute_math_i(expression)


def try_compare_math_f(expression: str, variables: VariableStore) -> tuple[bool, bool]:
    return ExpressionEvaluator(variables).try_compare_math_f(expression)


def try_compare_math_i(expression: str, variables: VariableStore) -> tuple[bool, bool]:
    return ExpressionEvaluator(variables).try_compare_math_i(expression)
