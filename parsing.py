"""
Rinha Programming Language Parser
Turns Rinha source text into the standard JSON-shaped AST, with source locations
"""

from typing import Any, Dict, List
import json
import re
import sys

# Import pyparsing with error handling
try:
    from pyparsing import (
        DelimitedList, Forward, Group, Keyword, Located, OpAssoc, Optional as PyParsingOptional,
        ParseBaseException, ParserElement, QuotedString, Regex, Suppress, ZeroOrMore,
        cpp_style_comment, infix_notation, one_of
    )
    # Enable packrat parsing for performance
    ParserElement.enable_packrat()
except ImportError:
    raise ImportError("pyparsing library not found. Install with: pip install pyparsing")

from error_handling import RinhaParseError


LEADING_TRIVIA = re.compile(r'(?:\s+|//[^\n]*|/\*.*?\*/)*', re.DOTALL)

KEYWORDS = ("let", "fn", "if", "else", "true", "false", "print", "first", "second")

BINARY_OP_NAMES = {
    '+': 'Add',
    '-': 'Sub',
    '*': 'Mul',
    '/': 'Div',
    '%': 'Rem',
    '==': 'Eq',
    '!=': 'Neq',
    '<': 'Lt',
    '>': 'Gt',
    '<=': 'Lte',
    '>=': 'Gte',
    '&&': 'And',
    '||': 'Or',
}


class RinhaGrammar:
    """Rinha grammar definition using pyparsing"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.filename = "<input>"
        self._setup_grammar()

    # -- Node builders ---------------------------------------------------

    def _location(self, start: int, end: int) -> Dict[str, Any]:
        return {"start": start, "end": end, "filename": self.filename}

    def _node(self, kind: str, start: int, end: int, **fields) -> Dict[str, Any]:
        return {"kind": kind, **fields, "location": self._location(start, end)}

    def _located(self, build):
        """Parse action for a Located element: build(start, tokens, end)"""
        def action(s, loc, tokens):
            start, inner, end = tokens[0], tokens[1], tokens[2]
            # Located reports the offset before any skipped whitespace or comments.
            start = LEADING_TRIVIA.match(s, start).end()
            return build(start, inner, end)
        return action

    def _make_calls(self, tokens):
        node = tokens[0]
        for arguments, end in tokens[1:]:
            node = self._node("Call", node["location"]["start"], end,
                              callee=node, arguments=arguments)
        return node

    def _make_binary(self, tokens):
        operands = tokens[0]
        node = operands[0]
        for i in range(1, len(operands), 2):
            rhs = operands[i + 1]
            node = self._node("Binary", node["location"]["start"], rhs["location"]["end"],
                              lhs=node, op=BINARY_OP_NAMES[operands[i]], rhs=rhs)
        return node

    def _make_paren(self, start, inner, end):
        if len(inner) == 2:
            return self._node("Tuple", start, end, first=inner[0], second=inner[1])
        return inner[0]

    # -- Grammar ---------------------------------------------------------

    def _setup_grammar(self):
        """Setup the Rinha grammar"""

        # Forward declarations for recursive structures
        term = Forward()
        if_expr = Forward()

        # Keywords
        let_kw, fn_kw, if_kw, else_kw, true_kw, false_kw, print_kw, first_kw, second_kw = (
            Keyword(word) for word in KEYWORDS
        )
        any_keyword = let_kw | fn_kw | if_kw | else_kw | true_kw | false_kw | print_kw | first_kw | second_kw

        lpar, rpar = Suppress("("), Suppress(")")
        lbrace, rbrace = Suppress("{"), Suppress("}")

        identifier = ~any_keyword + Regex(r'[a-zA-Z_][a-zA-Z0-9_]*')

        # Literals
        integer = Located(Regex(r'-?\d+')).set_parse_action(self._located(
            lambda start, t, end: self._node("Int", start, end, value=int(t[0]))
        ))
        string = Located(QuotedString('"', esc_char='\\')).set_parse_action(self._located(
            lambda start, t, end: self._node("Str", start, end, value=t[0])
        ))
        boolean = Located(true_kw | false_kw).set_parse_action(self._located(
            lambda start, t, end: self._node("Bool", start, end, value=t[0] == "true")
        ))
        variable = Located(identifier.copy()).set_parse_action(self._located(
            lambda start, t, end: self._node("Var", start, end, text=t[0])
        ))
        parameter = Located(identifier.copy()).set_parse_action(self._located(
            lambda start, t, end: {"text": t[0], "location": self._location(start, end)}
        ))

        block = lbrace + term + rbrace

        # let name = value; next
        let_expr = Located(
            Suppress(let_kw) + parameter + Suppress("=") + term + Suppress(";") + term
        ).set_parse_action(self._located(
            lambda start, t, end: self._node("Let", start, end, name=t[0], value=t[1], next=t[2])
        ))

        # fn (a, b) => { body }
        function = Located(
            Suppress(fn_kw) + lpar + Group(PyParsingOptional(DelimitedList(parameter))) + rpar
            + PyParsingOptional(Suppress("=>")) + block
        ).set_parse_action(self._located(
            lambda start, t, end: self._node("Function", start, end, parameters=list(t[0]), value=t[1])
        ))

        # if (cond) { then } else { otherwise }, with else-if chains
        if_expr <<= Located(
            Suppress(if_kw) + term + block + Suppress(else_kw) + (block | if_expr)
        ).set_parse_action(self._located(
            lambda start, t, end: self._node("If", start, end, condition=t[0], then=t[1], otherwise=t[2])
        ))

        def unary_builtin(keyword, kind):
            return Located(Suppress(keyword) + lpar + term + rpar).set_parse_action(self._located(
                lambda start, t, end: self._node(kind, start, end, value=t[0])
            ))

        print_expr = unary_builtin(print_kw, "Print")
        first_expr = unary_builtin(first_kw, "First")
        second_expr = unary_builtin(second_kw, "Second")

        # (term) or (first, second)
        parenthesized = Located(
            lpar + term + PyParsingOptional(Suppress(",") + term) + rpar
        ).set_parse_action(self._located(self._make_paren))

        primary = (
            let_expr | function | if_expr | print_expr | first_expr | second_expr |
            boolean | integer | string | parenthesized | variable
        )

        # f(a, b)(c) ...
        call_arguments = Located(
            lpar + Group(PyParsingOptional(DelimitedList(term))) + rpar
        ).set_parse_action(lambda t: [(list(t[1][0]), t[2])])
        postfix = (primary + ZeroOrMore(call_arguments)).set_parse_action(self._make_calls)

        term <<= infix_notation(postfix, [
            (one_of("* / %"), 2, OpAssoc.LEFT, self._make_binary),
            (one_of("+ -"), 2, OpAssoc.LEFT, self._make_binary),
            (one_of("<= >= < >"), 2, OpAssoc.LEFT, self._make_binary),
            (one_of("== !="), 2, OpAssoc.LEFT, self._make_binary),
            (one_of("&&"), 2, OpAssoc.LEFT, self._make_binary),
            (one_of("||"), 2, OpAssoc.LEFT, self._make_binary),
        ])

        term.ignore(cpp_style_comment)
        self.term = term

    # -- Entry points ----------------------------------------------------

    def parse_program(self, text: str, filename: str = "<input>") -> Dict[str, Any]:
        """Parse a complete Rinha program into a File node"""
        expression = self._parse(self.term, text, filename)
        return {
            "name": filename,
            "expression": expression,
            "location": self._location(0, len(text)),
        }

    def parse_expression(self, text: str, filename: str = "<input>") -> Dict[str, Any]:
        """Parse a single Rinha term"""
        return self._parse(self.term, text, filename)

    def _parse(self, element, text: str, filename: str) -> Dict[str, Any]:
        self.filename = filename
        if not text.strip():
            raise RinhaParseError("empty program", filename)
        try:
            result = element.parse_string(text, parse_all=True)
        except ParseBaseException as e:
            raise RinhaParseError.from_parse_exception(e, text, filename) from e
        if self.debug:
            print(pretty_print_ast(result[0]), file=sys.stderr)
        return result[0]


class RinhaParser:
    """Main Rinha parser reading source files and JSON AST files"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.grammar = RinhaGrammar(debug)

    def parse_file(self, filepath: str) -> Dict[str, Any]:
        """Parse a Rinha source file"""
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                content = f.read()
        except UnicodeDecodeError as e:
            raise RinhaParseError(f"Cannot decode file: {e}", str(filepath))
        return self.grammar.parse_program(content, str(filepath))

    def parse_string(self, text: str, filename: str = "<input>") -> Dict[str, Any]:
        """Parse Rinha source code from string"""
        return self.grammar.parse_program(text, filename)

    def parse_expression(self, text: str, filename: str = "<input>") -> Dict[str, Any]:
        """Parse a single Rinha expression"""
        return self.grammar.parse_expression(text, filename)


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> RinhaParser:
    """Create a Rinha parser"""
    return RinhaParser(debug=debug)


def create_debug_parser() -> RinhaParser:
    """Create a Rinha parser with debug enabled"""
    return RinhaParser(debug=True)


# ============================================================================
# JSON AST FILES
# ============================================================================

def load_ast_file(filepath: str) -> Dict[str, Any]:
    """Load a program already parsed into the JSON AST format"""
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise RinhaParseError(f"Invalid JSON AST: {e}", str(filepath),
                              location=e.pos, line=e.lineno, column=e.colno)
    if not isinstance(data, dict) or not isinstance(data.get("expression"), dict):
        raise RinhaParseError("JSON AST must be an object with an 'expression' term", str(filepath))
    data.setdefault("name", str(filepath))
    return data


def ast_to_json(file_ast: Dict[str, Any], indent: int = 2) -> str:
    """Serialize a File node to the JSON AST format"""
    return json.dumps(file_ast, ensure_ascii=False, indent=indent)


# Utility functions for working with the AST
def find_nodes_by_kind(term: Dict[str, Any], kind: str) -> List[Dict[str, Any]]:
    """Find all nodes of a specific kind in a term"""
    result = []

    def search(node: Any):
        if isinstance(node, dict):
            if node.get("kind") == kind:
                result.append(node)
            for key, value in node.items():
                if key != "location":
                    search(value)
        elif isinstance(node, list):
            for item in node:
                search(item)

    search(term)
    return result


def pretty_print_ast(term: Dict[str, Any], indent: int = 0) -> str:
    """Pretty print a term for debugging"""
    result = "  " * indent + term["kind"]
    for key in ("value", "text", "op"):
        if key in term and not isinstance(term[key], dict):
            result += f"({term[key]!r})"
    if term["kind"] == "Let":
        result += f"({term['name']['text']!r})"
    if term["kind"] == "Function":
        result += f"({', '.join(p['text'] for p in term['parameters'])})"
    result += "\n"

    for key, value in term.items():
        if isinstance(value, dict) and "kind" in value:
            result += pretty_print_ast(value, indent + 1)
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, dict) and "kind" in item:
                    result += pretty_print_ast(item, indent + 1)

    return result
