"""
Utilities module for the Rinha interpreter
Shared checks and error builders used by the operators and the evaluator
"""

from typing import Any, Callable, Dict, Tuple

from error_handling import ArityMismatch, TypeMismatch
from values import BOOLEAN, CLOSURE, NUMBER, STRING, TUPLE, make_boolean, make_number, tuple_components


# ==================== ERROR MESSAGE BUILDERS ====================

def type_mismatch_error(expected: str) -> TypeMismatch:
  """
  Generate type mismatch error

  Args:
    expected: Description of the kind that was required

  Returns:
    TypeMismatch carrying the description
  """
  return TypeMismatch(expected)


def arity_error(expected: int, got: int) -> ArityMismatch:
  """
  Generate arity mismatch error

  Args:
    expected: Number of parameters the closure declares
    got: Number of arguments at the call site

  Returns:
    ArityMismatch with both counts
  """
  return ArityMismatch(expected, got)


# ==================== TYPE CHECKING UTILITIES ====================

def assert_number(value: Dict) -> int:
  if value['type'] != NUMBER:
    raise type_mismatch_error("int")
  return value['value']


def assert_boolean(value: Dict) -> bool:
  if value['type'] != BOOLEAN:
    raise type_mismatch_error("boolean")
  return value['value']


def assert_tuple(value: Dict) -> Tuple[Dict, Dict]:
  if value['type'] != TUPLE:
    raise type_mismatch_error("tuple")
  return tuple_components(value)


def assert_closure(value: Dict) -> Dict:
  if value['type'] != CLOSURE:
    raise type_mismatch_error("closure")
  return value


def cast_to_string(value: Dict) -> str:
  """
  Coerce a value to text for string concatenation

  Only numbers and strings have a textual form; anything else is a type error.
  """
  if value['type'] == NUMBER:
    return str(value['value'])
  if value['type'] == STRING:
    return value['value']
  raise type_mismatch_error("string or int")


def is_equal(left: Dict, right: Dict) -> bool:
  """
  Compare two values of the same primitive kind

  Raises:
    TypeMismatch when the kinds differ or are not number, string or boolean
  """
  if left['type'] == right['type'] and left['type'] in (NUMBER, STRING, BOOLEAN):
    return left['value'] == right['value']
  raise type_mismatch_error("number or string or boolean")


# ==================== BINARY OPERATION FACTORIES ====================

def binary_arithmetic_op(op: Callable[[int, int], int]) -> Callable[[Dict, Dict], Dict]:
  """
  Factory for binary arithmetic operations over numbers

  Args:
    op: Python operator function (e.g., operator.sub)

  Returns:
    Function taking two values and producing a number value

  Examples:
    rinha_sub = binary_arithmetic_op(operator.sub)
    rinha_sub(make_number(3), make_number(1)) -> {"type": "Number", "value": 2}
  """
  def arithmetic(x: Dict, y: Dict) -> Dict:
    left = assert_number(x)
    right = assert_number(y)
    return make_number(op(left, right))

  return arithmetic


def binary_comparison_op(op: Callable[[int, int], bool]) -> Callable[[Dict, Dict], Dict]:
  """
  Factory for numeric comparisons

  Args:
    op: Python operator function (e.g., operator.lt)

  Returns:
    Function taking two values and producing a boolean value
  """
  def comparison(x: Dict, y: Dict) -> Dict:
    left = assert_number(x)
    right = assert_number(y)
    return make_boolean(op(left, right))

  return comparison


def binary_logical_op(op: Callable[[bool, bool], Any]) -> Callable[[Dict, Dict], Dict]:
  """Factory for boolean connectives; both operands are already evaluated"""
  def logical(x: Dict, y: Dict) -> Dict:
    left = assert_boolean(x)
    right = assert_boolean(y)
    return make_boolean(bool(op(left, right)))

  return logical
