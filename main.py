"""
minilisp - Main Entry Point
Evaluates expressions given on the command line
"""

import sys
import argparse
from typing import List, Optional

from parsing import create_parser
from values import pretty_print_value
from error_handling import LispParseError
from interpreter import evaluate_all
from utilities import call_with_deep_stack


VERSION = "minilisp 0.1.0"


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='minilisp',
      description='minilisp - evaluate a Lisp expression over integer, boolean and string primitives',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s "(+ 1 2 3)"                 # Evaluate one expression
  %(prog)s "(< 1 2)" "(* 6 7)"         # Evaluate several, one result per line
  %(prog)s --parse "'(a b . c)"        # Show the parsed tree
  %(prog)s --debug "(- 10 (* 2 3))"    # Trace parsing and evaluation
        """
  )

  parser.add_argument(
      'expressions',
      nargs='+',
      metavar='EXPR',
      help='Expression to evaluate'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse only and show the value tree (for debugging)'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for all stages'
  )

  parser.add_argument(
      '--workers',
      type=int,
      default=None,
      help='Number of threads used when several expressions are given'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def parse_expressions(expressions: List[str], debug: bool = False) -> bool:
  """Parse each expression and print its tree. Returns True if all parsed."""
  parser = create_parser(debug)
  all_ok = True

  for text in expressions:
    try:
      value = parser.parse_expression(text)
      print(call_with_deep_stack(pretty_print_value, value), end='')
    except LispParseError as e:
      print(e)
      all_ok = False

  return all_ok


def run_expressions(expressions: List[str], workers: Optional[int] = None, debug: bool = False) -> bool:
  """Evaluate each expression and print its result. Returns True if all succeeded."""
  outcomes = evaluate_all(expressions, workers=workers, debug=debug)
  for outcome in outcomes:
    print(outcome.render())
  return all(outcome.ok for outcome in outcomes)


def main(argv: Optional[List[str]] = None) -> None:
  """Main entry point for minilisp"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  if args.workers is not None and args.workers < 1:
    arg_parser.error("--workers must be at least 1")

  if args.parse:
    succeeded = parse_expressions(args.expressions, debug=args.debug)
  else:
    succeeded = run_expressions(args.expressions, workers=args.workers, debug=args.debug)

  if not succeeded:
    sys.exit(1)


if __name__ == "__main__":
  main()
