"""
Error types for the Rinha interpreter
Runtime errors raised by the evaluator and detailed parse errors for the front end
"""

from typing import List, Optional, Dict
from pyparsing import ParseBaseException
import re


# ============================================================================
# RUNTIME ERRORS
# ============================================================================

class RinhaRuntimeError(Exception):
    """Base class for errors that abort an evaluation"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UnboundVariable(RinhaRuntimeError):
    """A variable was referenced that no environment binds"""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"cannot find variable {name}")


class TypeMismatch(RinhaRuntimeError):
    """A value was used as a kind it is not"""
    def __init__(self, expected: str):
        self.expected = expected
        super().__init__(f"not a {expected}")


class ArityMismatch(RinhaRuntimeError):
    """A closure was called with the wrong number of arguments"""
    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"expected {expected} arguments but instead got {actual}")


# ============================================================================
# PARSE ERROR REPORTS
# ============================================================================

def make_parse_error(message: str, filename: str = "<input>", location: int = 0, line: int = 0,
                     column: int = 0, expected: Optional[List[str]] = None, got: Optional[str] = None,
                     context: Optional[str] = None, suggestions: Optional[List[str]] = None) -> Dict:
    """
    Build the report for one syntax error

    A line of 0 means the position is unknown (empty programs, unreadable files).
    """
    return {
        'message': message,
        'filename': filename,
        'location': location,
        'line': line,
        'column': column,
        'expected': list(expected or []),
        'got': got,
        'context': context,
        'suggestions': list(suggestions or [])
    }


def format_parse_error(error: Dict) -> str:
    """Render a parse error report for the terminal"""
    if not error['line']:
        return f"Parse error in {error['filename']}: {error['message']}"

    parts = [
        f"Parse error in {error['filename']} at line {error['line']}, column {error['column']}:",
        f"  {error['message']}",
    ]
    if error['expected']:
        parts.append("  Expected: " + ", ".join(error['expected']))
    if error['got']:
        parts.append(f"  Got: {error['got']}")
    if error['context']:
        parts.append("  Context:")
        parts.append(error['context'])
    if error['suggestions']:
        parts.append("  Suggestions:")
        parts.extend(f"    - {hint}" for hint in error['suggestions'])
    return "\n".join(parts) + "\n"


def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 2) -> str:
    """Number the lines around line_num and put a caret under col_num"""
    lines = source_text.split('\n')
    first = max(1, line_num - context_lines)
    last = min(len(lines), line_num + context_lines)

    rendered = []
    for number in range(first, last + 1):
        rendered.append(f"{number:4d} | {lines[number - 1]}")
        if number == line_num:
            rendered.append(" " * (7 + col_num - 1) + "^")
    return "\n".join(rendered)


# ============================================================================
# PYPARSING EXCEPTIONS
# ============================================================================

def extract_expected(exc: ParseBaseException) -> List[str]:
    """Pull the 'Expected ...' clause out of a pyparsing message"""
    expected_match = re.search(r"Expected\s+(.+?)(?:,\s+found|\s+\(at|$)", exc.msg or str(exc))
    if expected_match:
        return [expected_match.group(1)]
    return ["valid syntax"]


def extract_got(source_text: str, line_num: int, col_num: int) -> str:
    """Describe the text sitting at the failure position"""
    lines = source_text.split('\n')
    if line_num > len(lines):
        return "end of input"

    snippet = lines[line_num - 1][max(0, col_num - 1):col_num + 10].strip()
    return f"'{snippet}'" if snippet else "end of line"


def generate_suggestions(got: str, expected: List[str]) -> List[str]:
    """Hints for the mistakes Rinha programs make most often"""
    suggestions = []

    if got.startswith("'let") or "';'" in str(expected):
        suggestions.append("Every let needs a value and a ';' before the rest of the program: let x = 1; x")

    if got.startswith("'fn"):
        suggestions.append("Functions are written fn (a, b) => { body }")

    if got.startswith("'if"):
        suggestions.append("Conditionals need both branches: if (c) { a } else { b }")

    if "'='" in got and "==" not in got:
        suggestions.append("Use '==' to compare values; '=' only appears in let bindings")

    if got.startswith("'}") or got.startswith("')"):
        suggestions.append("Check for an unbalanced or empty '{ }' / '( )' pair")

    return suggestions


class RinhaParseError(Exception):
    """Syntax error in Rinha source, or a malformed AST file"""
    def __init__(self, message: str, filename: str = "<input>", location: int = 0, line: int = 0,
                 column: int = 0, **details):
        self.report = make_parse_error(message, filename, location, line, column, **details)
        super().__init__(message)

    message = property(lambda self: self.report['message'])
    filename = property(lambda self: self.report['filename'])
    line = property(lambda self: self.report['line'])
    column = property(lambda self: self.report['column'])
    suggestions = property(lambda self: self.report['suggestions'])

    def __str__(self) -> str:
        return format_parse_error(self.report)

    @classmethod
    def from_parse_exception(cls, exc: ParseBaseException, source_text: str,
                             filename: str = "<input>") -> "RinhaParseError":
        """Wrap a pyparsing failure with source context and hints"""
        line_num, col_num = exc.lineno, exc.column
        expected = extract_expected(exc)
        got = extract_got(source_text, line_num, col_num)
        return cls(
            exc.msg or str(exc),
            filename,
            location=exc.loc,
            line=line_num,
            column=col_num,
            expected=expected,
            got=got,
            context=get_context_lines(source_text, line_num, col_num),
            suggestions=generate_suggestions(got, expected)
        )
