"""
Utilities module for the minilisp interpreter
Argument coercion, integer division variants, primitive factories and
the deep-stack runner used by the parser and the evaluator
"""

from typing import Any, Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
import re
import sys
import threading

from values import Value, Number, String, Bool, List, parse_integer, format_integer
from error_handling import NumArgsError, TypeMismatchError, LispRuntimeError


Primitive = Callable[[Sequence[Value]], Value]

LEADING_INTEGER = re.compile(r"\s*(-?[0-9]+)")


# ==================== ARGUMENT COERCION ====================

def unpack_num(value: Value) -> int:
  """
  Coerce an argument to an integer

  Accepts numbers, strings that start with an integer (trailing text is
  ignored) and singleton lists wrapping something acceptable.

  Raises:
    TypeMismatchError("number", value) otherwise
  """
  if isinstance(value, Number):
    return value.value
  elif isinstance(value, String):
    match = LEADING_INTEGER.match(value.value)
    if match is None:
      raise TypeMismatchError("number", value)
    return parse_integer(match.group(1))
  elif isinstance(value, List) and len(value.elements) == 1:
    return unpack_num(value.elements[0])
  raise TypeMismatchError("number", value)


def unpack_bool(value: Value) -> bool:
  if isinstance(value, Bool):
    return value.value
  raise TypeMismatchError("boolean", value)


def unpack_str(value: Value) -> str:
  """Coerce an argument to a string; numbers and booleans are stringified"""
  if isinstance(value, String):
    return value.value
  elif isinstance(value, Number):
    return format_integer(value.value)
  elif isinstance(value, Bool):
    return "True" if value.value else "False"
  raise TypeMismatchError("string", value)


# ==================== INTEGER DIVISION ====================

def _check_divisor(divisor: int) -> None:
  if divisor == 0:
    raise LispRuntimeError("Division by zero")


def floor_div(x: int, y: int) -> int:
  """Division rounding toward negative infinity"""
  _check_divisor(y)
  return x // y


def floor_mod(x: int, y: int) -> int:
  """Modulo taking the sign of the divisor"""
  _check_divisor(y)
  return x % y


def truncating_quotient(x: int, y: int) -> int:
  """Division rounding toward zero"""
  _check_divisor(y)
  quotient = abs(x) // abs(y)
  return quotient if (x < 0) == (y < 0) else -quotient


def truncating_remainder(x: int, y: int) -> int:
  """Remainder taking the sign of the dividend"""
  return x - y * truncating_quotient(x, y)


# ==================== PRIMITIVE FACTORIES ====================

def numeric_binop(op: Callable[[int, int], int]) -> Primitive:
  """
  Factory for variadic integer operations

  Args:
    op: Binary integer function, folded left over the arguments

  Returns:
    Primitive that needs at least two numeric arguments

  Examples:
    add = numeric_binop(operator.add)
    add([Number(1), Number(2), Number(3)]) -> Number(6)
  """
  def arithmetic(args: Sequence[Value]) -> Value:
    if len(args) < 2:
      raise NumArgsError(2, args)
    numbers = [unpack_num(arg) for arg in args]
    result = numbers[0]
    for n in numbers[1:]:
      result = op(result, n)
    return Number(result)

  return arithmetic


def bool_binop(unpacker: Callable[[Value], Any], op: Callable[[Any, Any], bool]) -> Primitive:
  """
  Factory for binary predicates

  Args:
    unpacker: Coercion applied to both arguments (left first)
    op: Comparison on the coerced values

  Returns:
    Primitive that needs exactly two arguments and returns a Bool
  """
  def comparison(args: Sequence[Value]) -> Value:
    if len(args) != 2:
      raise NumArgsError(2, args)
    left = unpacker(args[0])
    right = unpacker(args[1])
    return Bool(bool(op(left, right)))

  return comparison


def num_bool_binop(op: Callable[[int, int], bool]) -> Primitive:
  return bool_binop(unpack_num, op)


def str_bool_binop(op: Callable[[str, str], bool]) -> Primitive:
  return bool_binop(unpack_str, op)


def bool_bool_binop(op: Callable[[bool, bool], bool]) -> Primitive:
  return bool_binop(unpack_bool, op)


# ==================== STACK DEPTH ====================

# The packrat parser spends a few dozen Python frames per level of nesting,
# so realistic programs need far more than the default recursion limit.
RECURSION_LIMIT = 100_000
DEEP_STACK_SIZE = 512 * 1024 * 1024

_deep_stack = threading.local()
_stack_size_lock = threading.Lock()


def call_with_deep_stack(func: Callable[..., Any], *args) -> Any:
  """
  Call func(*args) on a thread with a large stack and a raised recursion limit

  Calls made from such a thread run directly. Whatever func returns or
  raises is passed through to the caller, RecursionError included.

  Args:
    func: Function to run
    *args: Its positional arguments

  Returns:
    The result of func(*args)
  """
  if getattr(_deep_stack, 'active', False):
    return func(*args)

  if sys.getrecursionlimit() < RECURSION_LIMIT:
    sys.setrecursionlimit(RECURSION_LIMIT)

  def deep_call():
    _deep_stack.active = True
    return func(*args)

  with ThreadPoolExecutor(max_workers=1) as executor:
    # threading.stack_size applies to threads started after the call, and
    # submit() starts the worker thread
    with _stack_size_lock:
      previous = threading.stack_size(DEEP_STACK_SIZE)
      try:
        future = executor.submit(deep_call)
      finally:
        threading.stack_size(previous)
    return future.result()
