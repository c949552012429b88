"""
Test configuration for Rinha interpreter tests
"""

import io
import sys
from pathlib import Path

import pytest

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from parsing import create_parser
from interpreter import interpret_file, make_execution_context


@pytest.fixture
def parser():
  """Provide a fresh parser for each test"""
  return create_parser()


@pytest.fixture
def examples_dir():
  return project_root / "examples"


@pytest.fixture
def run(parser):
  """Parse and evaluate source text, returning (value, printed lines)"""
  def run_source(code: str, recursive_let: bool = False):
    output = io.StringIO()
    program = parser.parse_string(code, "<test>")
    context = make_execution_context(output, recursive_let)
    value = interpret_file(program, context=context)
    return value, output.getvalue().splitlines()

  return run_source
