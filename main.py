"""
Rinha Programming Language - Main Entry Point
Runs Rinha source files or pre-parsed JSON AST files
"""

import sys
import argparse
from pathlib import Path
from typing import Dict, List, Optional

from parsing import create_parser, create_debug_parser, load_ast_file, ast_to_json
from interpreter import create_interpreter, create_debug_interpreter
from error_handling import RinhaParseError, RinhaRuntimeError
from values import show_value


VERSION = "Rinha v0.1.0"
DEFAULT_RECURSION_LIMIT = 10000


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='rinha',
      description='Rinha tree-walking interpreter',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s fib.rinha                     # Run a Rinha program
  %(prog)s --ast fib.json                # Run a program already parsed to JSON
  %(prog)s --parse fib.rinha             # Print the JSON AST of a program
  %(prog)s --recursive-let fib.rinha     # Let-bound functions may call themselves
  %(prog)s --debug fib.rinha             # Trace evaluation on stderr
        """
  )

  parser.add_argument(
      'script',
      help='Rinha source file (.rinha) or JSON AST file (.json)'
  )

  parser.add_argument(
      '--ast',
      action='store_true',
      help='Treat the script as a JSON AST file regardless of its suffix'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse the file and print its JSON AST instead of running it'
  )

  parser.add_argument(
      '--result',
      action='store_true',
      help='Print the final value of the program after it runs'
  )

  parser.add_argument(
      '--recursive-let',
      action='store_true',
      help='Bind a let-bound function inside its own closure so it can recurse'
  )

  parser.add_argument(
      '--recursion-limit',
      type=int,
      default=DEFAULT_RECURSION_LIMIT,
      help=f'Python recursion limit while evaluating (default: {DEFAULT_RECURSION_LIMIT})'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for all stages'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def load_program(script_path: str, as_ast: bool = False, debug: bool = False) -> Dict:
  """Load a program File node from source text or from a JSON AST file"""
  if as_ast or Path(script_path).suffix == '.json':
    return load_ast_file(script_path)
  parser = create_debug_parser() if debug else create_parser()
  return parser.parse_file(script_path)


def report_error(script_path: str, title: str, message: str) -> None:
  print(f"\n{'='*70}", file=sys.stderr)
  print(f"{title} in '{script_path}'", file=sys.stderr)
  print(f"{'='*70}", file=sys.stderr)
  print(f"\nError: {message}", file=sys.stderr)
  print(f"\n{'='*70}\n", file=sys.stderr)


def parse_file(script_path: str, as_ast: bool = False, debug: bool = False) -> int:
  """Parse a Rinha file and print its JSON AST"""
  try:
    program = load_program(script_path, as_ast, debug)
  except FileNotFoundError:
    print(f"Error: Script file '{script_path}' not found", file=sys.stderr)
    return 1
  except RinhaParseError as e:
    print(str(e), file=sys.stderr)
    return 1

  print(ast_to_json(program))
  return 0


def run_script_file(script_path: str, as_ast: bool = False, show_result: bool = False,
                    recursive_let: bool = False, debug: bool = False) -> int:
  """Run a Rinha program, returning the process exit status"""
  try:
    program = load_program(script_path, as_ast, debug)
  except FileNotFoundError:
    print(f"Error: Script file '{script_path}' not found", file=sys.stderr)
    print("  Hint: Check the file path and make sure the file exists", file=sys.stderr)
    return 1
  except PermissionError:
    print(f"Error: Permission denied reading '{script_path}'", file=sys.stderr)
    return 1
  except RinhaParseError as e:
    print(str(e), file=sys.stderr)
    return 1

  if debug:
    interpreter = create_debug_interpreter(recursive_let=recursive_let)
  else:
    interpreter = create_interpreter(recursive_let=recursive_let)

  try:
    result = interpreter.interpret_file(program)
  except RinhaRuntimeError as e:
    report_error(script_path, "Runtime Error", f"{type(e).__name__}: {e.message}")
    return 1
  except ZeroDivisionError:
    report_error(script_path, "Runtime Error", "division by zero")
    return 1
  except RecursionError:
    report_error(script_path, "Runtime Error",
                 "stack overflow (raise --recursion-limit for deeper programs)")
    return 1

  if show_result:
    print(show_value(result))
  return 0


def main(argv: Optional[List[str]] = None) -> None:
  """Main entry point for Rinha"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  if args.parse:
    sys.exit(parse_file(args.script, as_ast=args.ast, debug=args.debug))

  previous_limit = sys.getrecursionlimit()
  sys.setrecursionlimit(max(previous_limit, args.recursion_limit))
  try:
    status = run_script_file(
        args.script,
        as_ast=args.ast,
        show_result=args.result,
        recursive_let=args.recursive_let,
        debug=args.debug,
    )
  finally:
    sys.setrecursionlimit(previous_limit)
  sys.exit(status)


if __name__ == "__main__":
  main()
