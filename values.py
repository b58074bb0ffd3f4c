"""
minilisp value model
The closed set of values produced by the parser and consumed by the evaluator,
plus the printer that renders them back to text
"""

from typing import Tuple, Union
from dataclasses import dataclass


@dataclass(frozen=True)
class Atom:
    """A bare symbol"""
    name: str


@dataclass(frozen=True)
class List:
    """Proper list"""
    elements: Tuple['Value', ...] = ()


@dataclass(frozen=True)
class DottedList:
    """Improper list: head elements followed by a distinguished tail"""
    head: Tuple['Value', ...]
    tail: 'Value'


@dataclass(frozen=True)
class Number:
    value: int


@dataclass(frozen=True)
class String:
    value: str


@dataclass(frozen=True)
class Bool:
    value: bool


Value = Union[Atom, List, DottedList, Number, String, Bool]


# ============================================================================
# INTEGER TEXT CONVERSION
# ============================================================================

# int() and str() refuse very long decimal strings by default, so large
# literals and results are converted in chunks of this many digits.
_CHUNK_DIGITS = 1000
_CHUNK_BASE = 10 ** _CHUNK_DIGITS


def parse_integer(digits: str) -> int:
    """Convert a string of decimal digits (optionally signed) to an int of any size"""
    if digits.startswith("-"):
        return -parse_integer(digits[1:])
    if len(digits) <= _CHUNK_DIGITS:
        return int(digits)

    result = 0
    for start in range(0, len(digits), _CHUNK_DIGITS):
        chunk = digits[start:start + _CHUNK_DIGITS]
        result = result * 10 ** len(chunk) + int(chunk)
    return result


def format_integer(n: int) -> str:
    """Decimal text of an int of any size"""
    if n < 0:
        return "-" + format_integer(-n)
    if n < _CHUNK_BASE:
        return str(n)

    parts = []
    while n >= _CHUNK_BASE:
        n, low = divmod(n, _CHUNK_BASE)
        parts.append(str(low).zfill(_CHUNK_DIGITS))
    parts.append(str(n))
    return "".join(reversed(parts))


# ============================================================================
# PRINTER
# ============================================================================

def show_val(value: Value) -> str:
    """Render a value as source-like text"""
    if isinstance(value, String):
        return f'"{value.value}"'
    elif isinstance(value, Atom):
        return value.name
    elif isinstance(value, Number):
        return format_integer(value.value)
    elif isinstance(value, Bool):
        return "True" if value.value else "False"
    elif isinstance(value, List):
        return f"({unwords_list(value.elements)})"
    elif isinstance(value, DottedList):
        return f"({unwords_list(value.head)} . {show_val(value.tail)})"
    raise TypeError(f"Not a minilisp value: {value!r}")


def unwords_list(values) -> str:
    return " ".join(show_val(v) for v in values)


def pretty_print_value(value: Value, indent: int = 0) -> str:
    """Pretty print a value tree, one node per line, for debugging"""
    prefix = "  " * indent
    if isinstance(value, List):
        result = f"{prefix}List\n"
        for element in value.elements:
            result += pretty_print_value(element, indent + 1)
        return result
    if isinstance(value, DottedList):
        result = f"{prefix}DottedList\n"
        for element in value.head:
            result += pretty_print_value(element, indent + 1)
        result += f"{prefix}  .\n"
        result += pretty_print_value(value.tail, indent + 1)
        return result
    return f"{prefix}{type(value).__name__}({show_val(value)})\n"
