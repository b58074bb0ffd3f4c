"""
minilisp Standard Library
The fixed table of primitive functions, keyed by operator name
"""

from typing import Dict
import operator

from utilities import (
  Primitive,
  numeric_binop,
  num_bool_binop,
  str_bool_binop,
  bool_bool_binop,
  floor_div,
  floor_mod,
  truncating_quotient,
  truncating_remainder
)


# ============================================================================
# BUILT-IN OPERATIONS
# ============================================================================

PRIMITIVES: Dict[str, Primitive] = {
    # Arithmetic (at least two arguments, folded left)
    '+': numeric_binop(operator.add),
    '-': numeric_binop(operator.sub),
    '*': numeric_binop(operator.mul),
    '/': numeric_binop(floor_div),
    'mod': numeric_binop(floor_mod),
    'quotient': numeric_binop(truncating_quotient),
    'remainder': numeric_binop(truncating_remainder),
    # Numeric comparison
    '=': num_bool_binop(operator.eq),
    '<': num_bool_binop(operator.lt),
    '>': num_bool_binop(operator.gt),
    '/=': num_bool_binop(operator.ne),
    '>=': num_bool_binop(operator.ge),
    '<=': num_bool_binop(operator.le),
    # Boolean logic (both operands are always evaluated)
    '&&': bool_bool_binop(lambda x, y: x and y),
    '||': bool_bool_binop(lambda x, y: x or y),
    # String comparison
    'string=?': str_bool_binop(operator.eq),
    'string<?': str_bool_binop(operator.lt),
    'string>?': str_bool_binop(operator.gt),
    'string<=?': str_bool_binop(operator.le),
    'string>=?': str_bool_binop(operator.ge),
}


def lookup_primitive(name: str):
  """Primitive registered under name, or None"""
  return PRIMITIVES.get(name)
