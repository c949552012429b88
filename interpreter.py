"""
Rinha Interpreter - Tree-walking evaluator
Environments are immutable snapshots; the only side effect is print, at the boundary
"""

from typing import Dict, List, Optional, TextIO
import sys

from environment import env_bind_value, env_bind_values, env_lookup_value, make_runtime_env
from error_handling import RinhaRuntimeError
from operators import apply_binary
from utilities import arity_error, assert_boolean, assert_closure, assert_tuple
from values import (
  make_boolean,
  make_closure,
  make_number,
  make_string,
  make_tuple,
  show_value,
)


# ============================================================================
# EXECUTION CONTEXT
# ============================================================================

def make_execution_context(output: Optional[TextIO] = None, recursive_let: bool = False) -> Dict:
  """
  Create the host settings threaded through evaluation

  Args:
    output: Stream receiving print lines (stdout when omitted)
    recursive_let: Let a let-bound function literal see its own name

  Only a Let whose value is written directly as a Function literal is patched.
  A closure produced indirectly (returned from an if, a call or an inner let)
  still cannot see the name it is bound to.
  """
  return {
      'output': output if output is not None else sys.stdout,
      'recursive_let': recursive_let
  }


def trace(message: str) -> None:
  print(f"[rinha] {message}", file=sys.stderr)


# ============================================================================
# EVALUATION FUNCTIONS
# ============================================================================

def eval_ast(term: Dict, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """
  Evaluate a term in an environment and return its value.
  Errors propagate to the caller and abort the whole evaluation.
  """
  if context is None:
    context = make_execution_context()

  kind = term['kind']

  if debug:
    trace(f"Evaluating: {kind}")

  if kind == "Int":
    return make_number(term['value'])
  elif kind == "Str":
    return make_string(term['value'])
  elif kind == "Bool":
    return make_boolean(term['value'])
  elif kind == "Var":
    return env_lookup_value(env, term['text'])
  elif kind == "If":
    return eval_if(term, env, debug, context)
  elif kind == "Let":
    return eval_let(term, env, debug, context)
  elif kind == "Binary":
    return eval_binary(term, env, debug, context)
  elif kind == "Call":
    return eval_call(term, env, debug, context)
  elif kind == "Function":
    return eval_function(term, env, debug, context)
  elif kind == "Tuple":
    return eval_tuple(term, env, debug, context)
  elif kind == "First":
    first, _ = assert_tuple(eval_ast(term['value'], env, debug, context))
    return first
  elif kind == "Second":
    _, second = assert_tuple(eval_ast(term['value'], env, debug, context))
    return second
  elif kind == "Print":
    return eval_print(term, env, debug, context)
  raise RinhaRuntimeError(f"Unknown term kind: {kind}")


def eval_if(term: Dict, env: Dict, debug: bool, context: Dict) -> Dict:
  """Evaluate the condition, then exactly one branch"""
  condition = assert_boolean(eval_ast(term['condition'], env, debug, context))
  branch = term['then'] if condition else term['otherwise']
  return eval_ast(branch, env, debug, context)


def eval_let(term: Dict, env: Dict, debug: bool, context: Dict) -> Dict:
  """Bind a value and evaluate the rest of the program under the new binding"""
  name = term['name']['text']
  value_term = term['value']

  # The value sees env as it was before this binding.
  value = eval_ast(value_term, env, debug, context)

  if context.get('recursive_let') and value_term['kind'] == "Function":
    # Point the fresh closure at an environment that includes itself,
    # before anything else can observe it.
    value['closure_env'] = env_bind_value(value['closure_env'], name, value)

  if debug:
    trace(f"Binding {name} = {show_value(value)}")

  new_env = env_bind_value(env, name, value)
  return eval_ast(term['next'], new_env, debug, context)


def eval_binary(term: Dict, env: Dict, debug: bool, context: Dict) -> Dict:
  """Evaluate both operands, left first, then apply the operator"""
  left = eval_ast(term['lhs'], env, debug, context)
  right = eval_ast(term['rhs'], env, debug, context)
  return apply_binary(left, right, term['op'])


def eval_function(term: Dict, env: Dict, debug: bool, context: Dict) -> Dict:
  """Capture the current environment in a closure"""
  param_names = [param['text'] for param in term['parameters']]
  return make_closure(param_names, term['value'], env)


def eval_call(term: Dict, env: Dict, debug: bool, context: Dict) -> Dict:
  """Apply a closure to arguments evaluated in the caller's environment"""
  closure = assert_closure(eval_ast(term['callee'], env, debug, context))
  params = closure['params']
  arguments: List[Dict] = term['arguments']

  if len(params) != len(arguments):
    raise arity_error(len(params), len(arguments))

  args = [eval_ast(argument, env, debug, context) for argument in arguments]

  if debug:
    shown = ', '.join(f"{name}={show_value(arg)}" for name, arg in zip(params, args))
    trace(f"Calling closure ({shown})")

  call_env = env_bind_values(closure['closure_env'], params, args)
  return eval_ast(closure['body'], call_env, debug, context)


def eval_tuple(term: Dict, env: Dict, debug: bool, context: Dict) -> Dict:
  first = eval_ast(term['first'], env, debug, context)
  second = eval_ast(term['second'], env, debug, context)
  return make_tuple(first, second)


def eval_print(term: Dict, env: Dict, debug: bool, context: Dict) -> Dict:
  """Write the value's display text as one line and hand the value back"""
  value = eval_ast(term['value'], env, debug, context)
  print(show_value(value), file=context['output'], flush=True)
  return value


# ============================================================================
# PROGRAM EVALUATION
# ============================================================================

def interpret(term: Dict, env: Optional[Dict] = None, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """Evaluate a single term, in an empty environment unless one is given"""
  if env is None:
    env = make_runtime_env()
  return eval_ast(term, env, debug, context)


def interpret_file(file: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """Evaluate the expression of a whole program file"""
  if debug:
    trace(f"Interpreting {file.get('name', '<input>')}")
  return interpret(file['expression'], make_runtime_env(), debug, context)


# ============================================================================
# FACTORY FUNCTIONS (for main.py)
# ============================================================================

def create_interpreter(debug: bool = False, output: Optional[TextIO] = None, recursive_let: bool = False):
  """Factory function returning an interpreter"""
  def context():
    return make_execution_context(output, recursive_let)

  return type('Interpreter', (), {
      'debug': debug,
      'recursive_let': recursive_let,
      'interpret': lambda self, term: interpret(term, None, debug, context()),
      'interpret_file': lambda self, file: interpret_file(file, debug, context()),
  })()


def create_debug_interpreter(output: Optional[TextIO] = None, recursive_let: bool = False):
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True, output=output, recursive_let=recursive_let)
