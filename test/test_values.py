"""
Tests for runtime values and the environment model
"""

import pytest

from environment import env_bind_value, env_bind_values, env_lookup_value, make_runtime_env
from error_handling import UnboundVariable
from values import (
  make_boolean,
  make_closure,
  make_number,
  make_string,
  make_tuple,
  kind_of,
  show_value,
  tuple_components,
)


class TestShowValue:
  """Canonical display text"""

  def test_numbers_are_decimal(self):
    assert show_value(make_number(42)) == "42"
    assert show_value(make_number(-7)) == "-7"

  def test_booleans_are_lowercase(self):
    assert show_value(make_boolean(True)) == "true"
    assert show_value(make_boolean(False)) == "false"

  def test_strings_are_verbatim(self):
    assert show_value(make_string('say "hi"')) == 'say "hi"'
    assert show_value(make_string("")) == ""

  def test_nested_tuples(self):
    inner = make_tuple(make_number(2), make_boolean(False))
    outer = make_tuple(make_string("a"), inner)
    assert show_value(outer) == "(a,(2,false))"

  def test_tuple_components(self):
    pair = make_tuple(make_number(1), make_string("b"))
    assert tuple_components(pair) == (make_number(1), make_string("b"))

  def test_closures_are_opaque(self):
    closure = make_closure(["x"], {"kind": "Var", "text": "x"}, make_runtime_env())
    assert show_value(closure) == "<#closure>"
    assert kind_of(closure) == "Closure"


class TestEnvironment:
  """Copy-on-extend environments"""

  def test_empty_environment_has_no_bindings(self):
    with pytest.raises(UnboundVariable) as excinfo:
      env_lookup_value(make_runtime_env(), "y")
    assert excinfo.value.name == "y"

  def test_extend_leaves_original_untouched(self):
    base = make_runtime_env()
    extended = env_bind_value(base, "x", make_number(1))

    assert env_lookup_value(extended, "x") == make_number(1)
    with pytest.raises(UnboundVariable):
      env_lookup_value(base, "x")

  def test_shadowing_produces_new_snapshot(self):
    first = env_bind_value(make_runtime_env(), "x", make_number(1))
    second = env_bind_value(first, "x", make_number(100))

    assert env_lookup_value(first, "x")['value'] == 1
    assert env_lookup_value(second, "x")['value'] == 100

  def test_bind_values_in_order(self):
    env = env_bind_values(make_runtime_env(), ["a", "b", "a"],
                          [make_number(1), make_number(2), make_number(3)])
    assert env_lookup_value(env, "a")['value'] == 3
    assert env_lookup_value(env, "b")['value'] == 2

  def test_make_runtime_env_copies_bindings(self):
    bindings = {"x": make_number(1)}
    env = make_runtime_env(bindings)
    bindings["y"] = make_number(2)
    with pytest.raises(UnboundVariable):
      env_lookup_value(env, "y")
