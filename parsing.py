"""
minilisp Parser
Recursive-descent s-expression grammar built from pyparsing combinators
"""

from typing import Optional
import re

from pyparsing import (
    Forward, Regex, Suppress, ZeroOrMore, Group, Opt, StringEnd,
    ParseBaseException, ParserElement
)

# Enable unbounded packrat parsing: the dotted-list alternative re-reads the
# elements the proper-list attempt already matched
ParserElement.enable_packrat(None)

from values import (
    Atom, List, DottedList, Number, String, Bool, Value,
    parse_integer, show_val, pretty_print_value
)
from error_handling import LispParseError, enhance_parse_exception
from utilities import call_with_deep_stack


SYMBOL_CHARS = "!$%&|*+-:/<=>?@^_~"

_LETTER = r"[^\W\d_]"
_SYMBOL = "[" + re.escape(SYMBOL_CHARS) + "]"
ATOM_PATTERN = f"(?:{_LETTER}|{_SYMBOL})(?:{_LETTER}|[0-9]|{_SYMBOL})*"

STRING_BODY_PATTERN = r'(?:\\[\\"nrt ]|[^"\\])*'

ESCAPES = {
    '\\': '\\', '"': '"', 'n': '\n', 'r': '\r', 't': '\t', ' ': ' '
}


def make_atom(tokens) -> Value:
    text = tokens[0]
    if text == "#t":
        return Bool(True)
    if text == "#f":
        return Bool(False)
    return Atom(text)


def letters_are_alphabetic(tokens) -> bool:
    """Letters in an atom must be alphabetic; the regex letter class also admits '²'"""
    return all(ch.isalpha() for ch in tokens[0]
               if ch not in SYMBOL_CHARS and ch not in "0123456789")


def make_string(tokens) -> Value:
    return String(re.sub(r'\\(.)', lambda m: ESCAPES[m.group(1)], tokens[0], flags=re.DOTALL))


def exact(text: str) -> ParserElement:
    """Suppressed literal matched where it stands, without skipping whitespace"""
    return Suppress(text).leave_whitespace()


class LispGrammar:
    """minilisp grammar definition using pyparsing"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self._setup_grammar()

    def _setup_grammar(self):
        """Setup the s-expression grammar"""

        # Whitespace is significant (it separates list elements), so every
        # element leaves it alone; composites inherit that from their parts.
        expression = Forward().leave_whitespace().set_name("expression")
        spaces = Regex(r"\s+").leave_whitespace().set_name("whitespace")

        atom = (
            Regex(ATOM_PATTERN).leave_whitespace()
            .set_name("atom")
            .add_condition(letters_are_alphabetic, message="Expected atom")
            .add_parse_action(make_atom)
        )

        string_literal = (
            exact('"') + Regex(STRING_BODY_PATTERN).leave_whitespace() + exact('"')
        ).set_name("string").set_parse_action(make_string)

        boolean = (
            exact("#") + Regex("[tf]").leave_whitespace()
        ).set_name("boolean").set_parse_action(lambda t: Bool(t[0] == "t"))

        number = Regex(r"[0-9]+").leave_whitespace().set_name("number").set_parse_action(
            lambda t: Number(parse_integer(t[0]))
        )

        quoted = (
            exact("'") + expression
        ).set_name("quoted expression").set_parse_action(lambda t: List((Atom("quote"), t[0])))

        proper_list = (
            Opt(expression + ZeroOrMore(Suppress(spaces) + expression)) + exact(")")
        ).set_name("list").set_parse_action(lambda t: List(tuple(t)))

        dotted_list = (
            Group(ZeroOrMore(expression + Suppress(spaces))) +
            exact(".") + Suppress(spaces) + expression + exact(")")
        ).set_name("dotted list").set_parse_action(lambda t: DottedList(tuple(t[0]), t[1]))

        # The single backtracking point: the proper list, closing paren
        # included, has to fail before the dotted list is tried from the
        # position right after "(".
        parenthesized = exact("(") + (proper_list | dotted_list)

        expression <<= atom | string_literal | number | boolean | quoted | parenthesized

        program = (
            Suppress(Opt(spaces)) + expression + Suppress(Opt(spaces)) +
            StringEnd().leave_whitespace()
        ).parse_with_tabs()

        self.expression = expression
        self.program = program
        self.atom = atom
        self.string_literal = string_literal
        self.number = number
        self.boolean = boolean
        self.quoted = quoted
        self.parenthesized = parenthesized

    def parse_expression(self, text: str) -> Value:
        """Parse exactly one expression, surrounding whitespace allowed"""
        if self.debug:
            print(f"Parsing: {text!r}")
        try:
            result = call_with_deep_stack(self.program.parse_string, text)
        except ParseBaseException as e:
            raise enhance_parse_exception(e, text) from e
        except RecursionError:
            raise LispParseError("Expression nested too deeply", line=1, column=1,
                                 suggestions=["Reduce the nesting depth of the expression"])

        value = result[0]
        if self.debug:
            print(f"Parsed: {show_val(value)}")
        return value


class LispParser:
    """Main minilisp parser"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.grammar = LispGrammar(debug)

    def parse_expression(self, text: str) -> Value:
        """Parse a single minilisp expression"""
        return self.grammar.parse_expression(text)


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> LispParser:
    """Create a minilisp parser"""
    return LispParser(debug=debug)


def create_debug_parser() -> LispParser:
    """Create a minilisp parser with debug enabled"""
    return LispParser(debug=True)


_default_parser: Optional[LispParser] = None


def read_expr(text: str) -> Value:
    """Parse text with a shared parser"""
    global _default_parser
    if _default_parser is None:
        _default_parser = create_parser()
    return _default_parser.parse_expression(text)


if __name__ == "__main__":
    parser = create_debug_parser()

    for sample in ["(+ 1 2)", "'(a b . c)", '"tab\\tstop"', "(1 2"]:
        try:
            print(pretty_print_value(parser.parse_expression(sample)))
        except LispParseError as e:
            print(e)
