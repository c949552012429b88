"""
Tests for the core evaluator, driven by hand-built AST terms
"""

import io

import pytest

from environment import env_bind_value, make_runtime_env
from error_handling import ArityMismatch, RinhaRuntimeError, TypeMismatch, UnboundVariable
from interpreter import (
  create_debug_interpreter,
  create_interpreter,
  eval_ast,
  interpret,
  interpret_file,
  make_execution_context,
)
from values import make_number, make_string, show_value


LOC = {"start": 0, "end": 0, "filename": "<test>"}


def Int(value):
  return {"kind": "Int", "value": value, "location": LOC}


def Str(value):
  return {"kind": "Str", "value": value, "location": LOC}


def Bool(value):
  return {"kind": "Bool", "value": value, "location": LOC}


def Var(text):
  return {"kind": "Var", "text": text, "location": LOC}


def Let(name, value, next_term):
  return {"kind": "Let", "name": {"text": name, "location": LOC},
          "value": value, "next": next_term, "location": LOC}


def Fn(params, body):
  return {"kind": "Function", "parameters": [{"text": p, "location": LOC} for p in params],
          "value": body, "location": LOC}


def Call(callee, *arguments):
  return {"kind": "Call", "callee": callee, "arguments": list(arguments), "location": LOC}


def Bin(lhs, op, rhs):
  return {"kind": "Binary", "lhs": lhs, "op": op, "rhs": rhs, "location": LOC}


def If(condition, then, otherwise):
  return {"kind": "If", "condition": condition, "then": then, "otherwise": otherwise, "location": LOC}


def Tuple(first, second):
  return {"kind": "Tuple", "first": first, "second": second, "location": LOC}


def First(value):
  return {"kind": "First", "value": value, "location": LOC}


def Second(value):
  return {"kind": "Second", "value": value, "location": LOC}


def Print(value):
  return {"kind": "Print", "value": value, "location": LOC}


@pytest.fixture
def output():
  return io.StringIO()


@pytest.fixture
def evaluate(output):
  def run(term, recursive_let=False):
    return interpret(term, context=make_execution_context(output, recursive_let))
  return run


class TestLiteralsAndVariables:

  def test_literals(self, evaluate):
    assert evaluate(Int(7)) == make_number(7)
    assert evaluate(Str("hi")) == make_string("hi")
    assert show_value(evaluate(Bool(False))) == "false"

  def test_unbound_variable(self, evaluate):
    with pytest.raises(UnboundVariable) as excinfo:
      evaluate(Var("y"))
    assert excinfo.value.name == "y"

  def test_variable_from_given_environment(self):
    env = env_bind_value(make_runtime_env(), "x", make_number(5))
    assert eval_ast(Var("x"), env) == make_number(5)

  def test_unknown_kind(self, evaluate):
    with pytest.raises(RinhaRuntimeError):
      evaluate({"kind": "While", "location": LOC})


class TestLet:

  def test_let_binds_for_next(self, evaluate):
    assert evaluate(Let("x", Int(1), Bin(Var("x"), "Add", Int(2)))) == make_number(3)

  def test_let_value_cannot_see_its_own_name(self, evaluate):
    with pytest.raises(UnboundVariable):
      evaluate(Let("x", Var("x"), Var("x")))

  def test_let_bound_function_cannot_recurse_by_default(self, evaluate):
    loop = Let("f", Fn(["n"], Call(Var("f"), Var("n"))), Call(Var("f"), Int(1)))
    with pytest.raises(UnboundVariable) as excinfo:
      evaluate(loop)
    assert excinfo.value.name == "f"

  def test_recursive_let_opt_in(self, evaluate):
    # let sum = fn (n) { if (n == 0) { 0 } else { n + sum(n - 1) } }; sum(10)
    body = If(Bin(Var("n"), "Eq", Int(0)),
              Int(0),
              Bin(Var("n"), "Add", Call(Var("sum"), Bin(Var("n"), "Sub", Int(1)))))
    program = Let("sum", Fn(["n"], body), Call(Var("sum"), Int(10)))
    assert evaluate(program, recursive_let=True) == make_number(55)

  def test_recursive_let_leaves_non_functions_alone(self, evaluate):
    with pytest.raises(UnboundVariable):
      evaluate(Let("x", Var("x"), Int(0)), recursive_let=True)

  def test_recursive_let_only_patches_function_literals(self, evaluate):
    # let f = if (true) { fn (n) { f(n) } } else { 0 }; f(1)
    indirect = If(Bool(True), Fn(["n"], Call(Var("f"), Var("n"))), Int(0))
    with pytest.raises(UnboundVariable) as excinfo:
      evaluate(Let("f", indirect, Call(Var("f"), Int(1))), recursive_let=True)
    assert excinfo.value.name == "f"


class TestClosures:

  def test_closure_captures_definition_environment(self, evaluate):
    # let x = 1; let f = fn(y) { x + y }; let x = 100; f(2)
    program = Let("x", Int(1),
                  Let("f", Fn(["y"], Bin(Var("x"), "Add", Var("y"))),
                      Let("x", Int(100),
                          Call(Var("f"), Int(2)))))
    assert evaluate(program) == make_number(3)

  def test_function_literal_does_not_evaluate_body(self, evaluate, output):
    closure = evaluate(Fn([], Print(Str("never"))))
    assert closure['type'] == "Closure"
    assert output.getvalue() == ""

  def test_arguments_resolve_in_caller_environment(self, evaluate):
    # let f = (let y = 10; fn(a) { a + y }); let y = 1; f(y)  -> 1 + 10
    program = Let("f", Let("y", Int(10), Fn(["a"], Bin(Var("a"), "Add", Var("y")))),
                  Let("y", Int(1), Call(Var("f"), Var("y"))))
    assert evaluate(program) == make_number(11)

  def test_caller_bindings_do_not_leak_into_callee(self, evaluate):
    program = Let("f", Fn([], Var("secret")),
                  Let("secret", Int(42), Call(Var("f"))))
    with pytest.raises(UnboundVariable):
      evaluate(program)

  def test_parameters_bind_in_order(self, evaluate):
    program = Call(Fn(["a", "b"], Bin(Var("a"), "Sub", Var("b"))), Int(10), Int(3))
    assert evaluate(program) == make_number(7)

  def test_arity_mismatch(self, evaluate):
    program = Call(Fn(["a", "b"], Var("a")), Int(1))
    with pytest.raises(ArityMismatch) as excinfo:
      evaluate(program)
    assert (excinfo.value.expected, excinfo.value.actual) == (2, 1)

  def test_arity_checked_before_arguments_run(self, evaluate, output):
    program = Call(Fn([], Int(0)), Print(Str("arg")))
    with pytest.raises(ArityMismatch):
      evaluate(program)
    assert output.getvalue() == ""

  def test_calling_a_non_closure(self, evaluate):
    with pytest.raises(TypeMismatch) as excinfo:
      evaluate(Call(Int(1)))
    assert excinfo.value.expected == "closure"

  def test_higher_order_functions(self, evaluate):
    # let twice = fn(f, x) { f(f(x)) }; twice(fn(n) { n * 3 }, 2)
    twice = Fn(["f", "x"], Call(Var("f"), Call(Var("f"), Var("x"))))
    program = Let("twice", twice, Call(Var("twice"), Fn(["n"], Bin(Var("n"), "Mul", Int(3))), Int(2)))
    assert evaluate(program) == make_number(18)


class TestControlFlowAndEffects:

  def test_if_requires_boolean(self, evaluate):
    with pytest.raises(TypeMismatch) as excinfo:
      evaluate(If(Int(1), Int(2), Int(3)))
    assert excinfo.value.expected == "boolean"

  def test_if_evaluates_one_branch(self, evaluate, output):
    result = evaluate(If(Bool(True), Print(Str("then")), Print(Str("else"))))
    assert result == make_string("then")
    assert output.getvalue().splitlines() == ["then"]

  @pytest.mark.parametrize("op, left", [("And", False), ("Or", True)])
  def test_logic_evaluates_both_operands(self, evaluate, output, op, left):
    evaluate(Bin(Bool(left), op, Print(Bool(True))))
    assert output.getvalue().splitlines() == ["true"]

  def test_print_returns_its_value(self, evaluate, output):
    result = evaluate(Print(Bin(Str("a"), "Add", Int(1))))
    assert result == make_string("a1")
    assert output.getvalue() == "a1\n"

  def test_print_order_is_left_to_right(self, evaluate, output):
    evaluate(Bin(Print(Int(1)), "Add", Print(Int(2))))
    evaluate(Tuple(Print(Str("first")), Print(Str("second"))))
    assert output.getvalue().splitlines() == ["1", "2", "first", "second"]

  def test_projections(self, evaluate):
    pair = Tuple(Int(1), Int(2))
    assert evaluate(First(pair)) == make_number(1)
    assert evaluate(Second(pair)) == make_number(2)

  @pytest.mark.parametrize("projection", [First, Second])
  def test_projection_of_non_tuple(self, evaluate, projection):
    with pytest.raises(TypeMismatch) as excinfo:
      evaluate(projection(Int(1)))
    assert excinfo.value.expected == "tuple"

  def test_errors_abort_before_later_effects(self, evaluate, output):
    program = Let("_", Print(Str("before")), Let("_", Var("missing"), Print(Str("after"))))
    with pytest.raises(UnboundVariable):
      evaluate(program)
    assert output.getvalue().splitlines() == ["before"]

  def test_division_by_zero_propagates(self, evaluate):
    with pytest.raises(ZeroDivisionError):
      evaluate(Bin(Int(1), "Div", Int(0)))


class TestEntryPoints:

  def test_interpret_file_starts_from_empty_environment(self, output):
    program = {"name": "t.rinha", "expression": Print(Int(3)), "location": LOC}
    result = interpret_file(program, context=make_execution_context(output))
    assert result == make_number(3)
    assert output.getvalue() == "3\n"

  def test_interpreter_factory(self, output):
    interpreter = create_interpreter(output=output, recursive_let=True)
    program = Let("f", Fn(["n"], If(Bin(Var("n"), "Lte", Int(0)), Str("done"), Call(Var("f"), Bin(Var("n"), "Sub", Int(1))))),
                  Call(Var("f"), Int(3)))
    assert interpreter.interpret(program) == make_string("done")
    assert interpreter.interpret_file({"name": "x", "expression": Print(Str("ok")), "location": LOC}) == make_string("ok")
    assert output.getvalue() == "ok\n"

  def test_print_defaults_to_stdout(self, capsys):
    interpret(Print(Tuple(Int(1), Bool(True))))
    assert capsys.readouterr().out == "(1,true)\n"

  def test_debug_traces_go_to_stderr(self, capsys):
    interpret(Print(Int(1)), debug=True)
    captured = capsys.readouterr()
    assert captured.out == "1\n"
    assert "Evaluating: Print" in captured.err

  def test_debug_interpreter_factory(self, output, capsys):
    interpreter = create_debug_interpreter(output=output)
    assert interpreter.debug is True
    interpreter.interpret(Let("x", Int(2), Print(Var("x"))))
    assert output.getvalue() == "2\n"
    assert "Binding x = 2" in capsys.readouterr().err
