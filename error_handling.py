"""
Error taxonomy for minilisp and detailed parse error messages
Every failure is raised at its detection site as a LispError and travels
unchanged to the top level
"""

from typing import List, Optional, Dict, Sequence
from pyparsing import ParseBaseException
import re

from values import Value, show_val, unwords_list


# ============================================================================
# EVALUATION ERRORS
# ============================================================================

class LispError(Exception):
    """Base class for every error the interpreter reports"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class NumArgsError(LispError):
    """A primitive received the wrong number of arguments"""
    def __init__(self, expected: int, found: Sequence[Value]):
        self.expected = expected
        self.found = tuple(found)
        super().__init__(f"Expected {expected} args; found values {unwords_list(self.found)}")


class TypeMismatchError(LispError):
    """An argument could not be coerced to the kind a primitive needs"""
    def __init__(self, expected: str, found: Value):
        self.expected = expected
        self.found = found
        super().__init__(f"Invalid type: expected {expected}, found {show_val(found)}")


class BadSpecialFormError(LispError):
    def __init__(self, message: str, form: Value):
        self.form = form
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.message}: {show_val(self.form)}"


class UnknownFunctionError(LispError):
    def __init__(self, message: str, name: str):
        self.name = name
        super().__init__(message)

    def __str__(self) -> str:
        return f'{self.message}: "{self.name}"'


class UnboundVariableError(LispError):
    """Reserved: the language has no bindings yet"""
    def __init__(self, message: str, name: str):
        self.name = name
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.message}: {self.name}"


class LispRuntimeError(LispError):
    """Any other evaluation failure"""
    pass


# ============================================================================
# PARSE ERRORS (Immutable Dictionaries)
# ============================================================================

def make_parse_error(
    message: str,
    location: int,
    line: int,
    column: int,
    expected: Optional[List[str]] = None,
    got: Optional[str] = None,
    context: Optional[str] = None,
    suggestions: Optional[List[str]] = None
) -> Dict:
    """Create an immutable parse error structure"""
    return {
        'message': message,
        'location': location,
        'line': line,
        'column': column,
        'expected': expected or [],
        'got': got,
        'context': context,
        'suggestions': suggestions or []
    }


def format_parse_error(error: Dict) -> str:
    """Format parse error as string"""
    lines = [f"Parse error at line {error['line']}, column {error['column']}:"]
    lines.append(f"  {error['message']}")

    if error['expected']:
        lines.append(f"  Expected: {', '.join(error['expected'])}")

    if error['got']:
        lines.append(f"  Got: {error['got']}")

    if error['context']:
        lines.append("  Context:")
        lines.extend(f"  {context_line}" for context_line in error['context'].split('\n'))

    if error['suggestions']:
        lines.append("  Suggestions:")
        for suggestion in error['suggestions']:
            lines.append(f"    - {suggestion}")

    return '\n'.join(lines)


def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 1) -> str:
    """Get context lines around the error, with a caret under the error column"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        context_parts.append(f"{line_prefix}{lines[i]}")
        if i == line_num - 1:
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^")

    return '\n'.join(context_parts)


def extract_expected(exc: ParseBaseException) -> List[str]:
    """Extract expected tokens from exception"""
    expected_match = re.match(r"Expected\s+(.+)", exc.msg or "")
    if expected_match:
        return [expected_match.group(1)]
    return ["valid syntax"]


def extract_got(source_text: str, location: int) -> str:
    """Extract what was actually found at the error location"""
    if location >= len(source_text):
        return "end of input"

    got_text = source_text[location:location + 10].split('\n')[0]
    if not got_text.strip():
        return "whitespace"
    return f"'{got_text}'"


ESCAPE_PATTERN = re.compile(r'\\(.)')
VALID_ESCAPES = '\\"nrt '


def generate_suggestions(source_text: str, location: int) -> List[str]:
    """Generate helpful suggestions based on the error"""
    suggestions = []

    if not source_text.strip():
        suggestions.append("Enter one expression, for example (+ 1 2)")
        return suggestions

    opened = source_text.count("(")
    closed = source_text.count(")")
    if opened > closed:
        suggestions.append("Close every '(' with a matching ')'")
    elif closed > opened:
        suggestions.append("Remove the unmatched ')'")

    if any(ch not in VALID_ESCAPES for ch in ESCAPE_PATTERN.findall(source_text)):
        suggestions.append("Strings only allow the escapes \\\\ \\\" \\n \\r \\t and '\\ '")

    if re.search(r"#(?![tf])", source_text):
        suggestions.append("Booleans are written #t and #f")

    if re.search(r"\(\s|\s\)", source_text):
        suggestions.append("Do not put spaces directly inside parentheses")

    # Trailing input after a complete expression
    consumed = source_text[:location]
    if (location < len(source_text) and consumed.strip() and consumed[-1].isspace()
            and consumed.count("(") == consumed.count(")")):
        suggestions.append("Only one expression is allowed; wrap several in a list")

    return suggestions


def enhance_parse_exception_dict(exc: ParseBaseException, source_text: str) -> Dict:
    """Convert pyparsing exception to an enhanced error dict"""
    line_num = exc.lineno
    col_num = exc.col
    got = extract_got(source_text, exc.loc)

    return make_parse_error(
        message=exc.msg,
        location=exc.loc,
        line=line_num,
        column=col_num,
        expected=extract_expected(exc),
        got=got,
        context=get_context_lines(source_text, line_num, col_num),
        suggestions=generate_suggestions(source_text, exc.loc)
    )


class LispParseError(LispError):
    """Input text did not match the grammar"""
    def __init__(self, message: str, location: int = 0, line: int = 0, column: int = 0,
                 expected: Optional[List[str]] = None, got: Optional[str] = None,
                 context: Optional[str] = None, suggestions: Optional[List[str]] = None):
        self.location = location
        self.line = line
        self.column = column
        self.expected = expected or []
        self.got = got
        self.context = context
        self.suggestions = suggestions or []
        super().__init__(message)

    def __str__(self) -> str:
        error_dict = make_parse_error(
            self.message, self.location, self.line, self.column,
            self.expected, self.got, self.context, self.suggestions
        )
        return format_parse_error(error_dict)


def enhance_parse_exception(exc: ParseBaseException, source_text: str) -> LispParseError:
    """Convert pyparsing exception to an enhanced minilisp error"""
    error_dict = enhance_parse_exception_dict(exc, source_text)
    return LispParseError(
        message=error_dict['message'],
        location=error_dict['location'],
        line=error_dict['line'],
        column=error_dict['column'],
        expected=error_dict['expected'],
        got=error_dict['got'],
        context=error_dict['context'],
        suggestions=error_dict['suggestions']
    )
