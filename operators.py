"""
Rinha binary operators
Pure functions over already-evaluated operand values
"""

from typing import Callable, Dict
import operator

from error_handling import RinhaRuntimeError
from utilities import (
  binary_arithmetic_op,
  binary_comparison_op,
  binary_logical_op,
  cast_to_string,
  is_equal,
)
from values import NUMBER, make_boolean, make_number, make_string


# ============================================================================
# ARITHMETIC
# ============================================================================

def rinha_add(x: Dict, y: Dict) -> Dict:
  """Numeric sum, or concatenation of the display text of both operands"""
  if x['type'] == NUMBER and y['type'] == NUMBER:
    return make_number(x['value'] + y['value'])
  left = cast_to_string(x)
  right = cast_to_string(y)
  return make_string(left + right)


# Floor division and remainder: Rem(a, b) == a - b * Div(a, b).
# A zero divisor raises ZeroDivisionError straight from Python.
rinha_sub = binary_arithmetic_op(operator.sub)
rinha_mul = binary_arithmetic_op(operator.mul)
rinha_div = binary_arithmetic_op(operator.floordiv)
rinha_rem = binary_arithmetic_op(operator.mod)


# ============================================================================
# COMPARISON
# ============================================================================

def rinha_eq(x: Dict, y: Dict) -> Dict:
  """Equality between two values of the same primitive kind"""
  return make_boolean(is_equal(x, y))


def rinha_neq(x: Dict, y: Dict) -> Dict:
  """Inequality between two values of the same primitive kind"""
  return make_boolean(not is_equal(x, y))


rinha_lt = binary_comparison_op(operator.lt)
rinha_gt = binary_comparison_op(operator.gt)
rinha_lte = binary_comparison_op(operator.le)
rinha_gte = binary_comparison_op(operator.ge)


# ============================================================================
# LOGIC
# ============================================================================

rinha_and = binary_logical_op(operator.and_)
rinha_or = binary_logical_op(operator.or_)


# ============================================================================
# OPERATOR TABLE
# ============================================================================

BINARY_OPERATORS: Dict[str, Callable[[Dict, Dict], Dict]] = {
    'Add': rinha_add,
    'Sub': rinha_sub,
    'Mul': rinha_mul,
    'Div': rinha_div,
    'Rem': rinha_rem,
    'Eq': rinha_eq,
    'Neq': rinha_neq,
    'Lt': rinha_lt,
    'Gt': rinha_gt,
    'Lte': rinha_lte,
    'Gte': rinha_gte,
    'And': rinha_and,
    'Or': rinha_or,
}


def apply_binary(left: Dict, right: Dict, op: str) -> Dict:
  """Apply a named binary operator to two evaluated operands"""
  op_func = BINARY_OPERATORS.get(op)
  if op_func is None:
    raise RinhaRuntimeError(f"Unknown operation: {op}")
  return op_func(left, right)
