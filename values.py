"""
Rinha runtime values
Plain dictionaries tagged by 'type'; never mutated once built
"""

from typing import Any, Dict, List, Tuple


NUMBER = "Number"
STRING = "String"
BOOLEAN = "Boolean"
TUPLE = "Tuple"
CLOSURE = "Closure"


# ============================================================================
# CONSTRUCTORS
# ============================================================================

def make_value(value: Any, type_name: str) -> Dict:
  """Create a runtime value"""
  return {
      'value': value,
      'type': type_name
  }


def make_number(value: int) -> Dict:
  return make_value(value, NUMBER)


def make_string(value: str) -> Dict:
  return make_value(value, STRING)


def make_boolean(value: bool) -> Dict:
  return make_value(value, BOOLEAN)


def make_tuple(first: Dict, second: Dict) -> Dict:
  """Create a pair owning both component values"""
  return make_value((first, second), TUPLE)


def make_closure(params: List[str], body: Dict, closure_env: Dict) -> Dict:
  """Create a function value capturing the environment it was defined in"""
  return {
      'type': CLOSURE,
      'params': tuple(params),
      'body': body,
      'closure_env': closure_env
  }


# ============================================================================
# INSPECTION
# ============================================================================

def kind_of(value: Dict) -> str:
  return value['type']


def tuple_components(value: Dict) -> Tuple[Dict, Dict]:
  return value['value']


def show_value(value: Dict) -> str:
  """Render a value to its canonical display text"""
  value_type = value['type']
  if value_type == NUMBER:
    return str(value['value'])
  elif value_type == BOOLEAN:
    return "true" if value['value'] else "false"
  elif value_type == STRING:
    return value['value']
  elif value_type == CLOSURE:
    return "<#closure>"
  elif value_type == TUPLE:
    first, second = tuple_components(value)
    return f"({show_value(first)},{show_value(second)})"
  raise ValueError(f"Unknown value type: {value_type}")
