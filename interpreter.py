"""
minilisp Interpreter
Tree-walking evaluation over immutable values
Errors are raised where they are detected and turned into data at the boundary
"""

from typing import Iterable, List as ListOf, Optional, Sequence
from dataclasses import dataclass
from concurrent.futures import ThreadPoolExecutor

from values import Value, Atom, List, Number, String, Bool, show_val, unwords_list
from error_handling import (
  LispError,
  BadSpecialFormError,
  UnknownFunctionError,
  LispRuntimeError
)
from parsing import LispParser, create_parser
from stdlib import lookup_primitive
from utilities import call_with_deep_stack


QUOTE = Atom("quote")


# ============================================================================
# EVALUATION FUNCTIONS
# ============================================================================

def eval_value(value: Value, debug: bool = False) -> Value:
  """
  Evaluate a value tree.
  Literals evaluate to themselves, (quote x) yields x untouched and
  (name args...) applies a primitive to the evaluated arguments.
  """
  if debug:
    print(f"Evaluating: {show_val(value)}")

  if isinstance(value, (String, Number, Bool)):
    return value

  if isinstance(value, List) and value.elements:
    head, args = value.elements[0], value.elements[1:]
    if head == QUOTE and len(args) == 1:
      return args[0]
    if isinstance(head, Atom):
      evaluated = [eval_value(arg, debug) for arg in args]
      return apply_primitive(head.name, evaluated, debug)

  raise BadSpecialFormError("Unrecognized special form", value)


def apply_primitive(name: str, args: Sequence[Value], debug: bool = False) -> Value:
  """Apply the primitive registered under name to already evaluated arguments"""
  primitive = lookup_primitive(name)
  if primitive is None:
    raise UnknownFunctionError("Unrecognized primitive function args", name)

  if debug:
    print(f"Applying: {name} to ({unwords_list(args)})")
  return primitive(args)


# ============================================================================
# TOP LEVEL
# ============================================================================

@dataclass(frozen=True)
class Outcome:
  """Result of interpreting one expression: exactly one of value and error is set"""
  value: Optional[Value] = None
  error: Optional[LispError] = None

  @property
  def ok(self) -> bool:
    return self.error is None

  def render(self) -> str:
    return call_with_deep_stack(self._render)

  def _render(self) -> str:
    if self.error is not None:
      return str(self.error)
    return show_val(self.value)


def interpret(text: str, debug: bool = False, parser: Optional[LispParser] = None) -> Outcome:
  """Parse and evaluate one expression. Never raises for malformed input."""
  if parser is None:
    parser = create_parser(debug)
  try:
    return call_with_deep_stack(_read_and_eval, text, debug, parser)
  except LispError as e:
    if debug:
      print(f"Error: {type(e).__name__}")
    return Outcome(error=e)
  except RecursionError:
    return Outcome(error=LispRuntimeError("Expression nested too deeply"))


def _read_and_eval(text: str, debug: bool, parser: LispParser) -> Outcome:
  value = parser.parse_expression(text)
  return Outcome(value=eval_value(value, debug))


def run(text: str, debug: bool = False) -> str:
  """Interpret text and render the result or the error message"""
  return interpret(text, debug).render()


# ============================================================================
# PARALLEL EVALUATION
# ============================================================================

def evaluate_all(sources: Iterable[str], workers: Optional[int] = None,
                 debug: bool = False) -> ListOf[Outcome]:
  """
  Interpret independent expressions concurrently.
  Evaluation shares no mutable state, so no locking is needed; outcomes
  come back in input order.
  """
  sources = list(sources)
  if not sources:
    return []

  parser = create_parser(debug)
  with ThreadPoolExecutor(max_workers=workers) as executor:
    futures = [executor.submit(interpret, source, debug, parser) for source in sources]
    return [future.result() for future in futures]


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

class LispInterpreter:
  """Parser and evaluator bundled behind one object"""

  def __init__(self, debug: bool = False):
    self.debug = debug
    self.parser = create_parser(debug)

  def read(self, text: str) -> Value:
    return self.parser.parse_expression(text)

  def evaluate(self, value: Value) -> Value:
    return call_with_deep_stack(eval_value, value, self.debug)

  def interpret(self, text: str) -> Outcome:
    return interpret(text, self.debug, self.parser)

  def run(self, text: str) -> str:
    return self.interpret(text).render()

  def run_all(self, sources: Iterable[str], workers: Optional[int] = None) -> ListOf[Outcome]:
    return evaluate_all(sources, workers, self.debug)


def create_interpreter(debug: bool = False) -> LispInterpreter:
  """Factory function returning an interpreter"""
  return LispInterpreter(debug=debug)


def create_debug_interpreter() -> LispInterpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True)
