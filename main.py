"""
typesig - command line entry point
Check JSON values against type expressions and inspect parsed signatures
"""

import sys
import json
import logging
import argparse
from typing import List, Optional

from parsing import create_parser, create_debug_parser, pretty_print_node
from compiler import compile_node
from signatures import Signature
from templates import resolve_template
from error_handling import GrammarError, DefinitionError
from typesig import __version__

EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_ERROR = 2


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='typesig',
      description='Check values against type expressions',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s 'number[]' '[1, 2, 3]'             # Check a JSON value
  %(prog)s '{ message: ?string }' '{}' 'null' # Check several values
  %(prog)s --parse '?string | number'         # Show the syntax tree
  %(prog)s --signature '(string, number) => string'
        """
  )

  parser.add_argument(
      'expression',
      help='Type expression to compile'
  )

  parser.add_argument(
      'values',
      nargs='*',
      metavar='VALUE',
      help='JSON encoded values to check against the expression'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse the expression and show its syntax tree'
  )

  parser.add_argument(
      '--signature',
      action='store_true',
      help='Treat the expression as a function signature and show its parts'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug logging for all stages'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=f'typesig v{__version__}'
  )

  return parser


def show_tree(expression: str, debug: bool = False) -> int:
  """Parse an expression and print its syntax tree"""
  parser = create_debug_parser() if debug else create_parser()
  node = parser.parse(expression)
  print(pretty_print_node(node), end='')
  return EXIT_OK


def show_signature(expression: str, debug: bool = False) -> int:
  """Compile a signature and print its parameter and return types"""
  parser = create_debug_parser() if debug else create_parser()
  text, environment = resolve_template([expression])
  signature = Signature(parser.parse(text), environment)

  print(f"Signature: {signature.description}")
  print(f"Arity: {signature.arity}")
  for i, predicate in enumerate(signature.param_predicates, 1):
    print(f"  {i}. {predicate.description}")
  print(f"Returns: {signature.return_predicate.description}")
  return EXIT_OK


def check_values(expression: str, values: List[str], debug: bool = False) -> int:
  """Check each JSON value against the expression, one report line per value"""
  parser = create_debug_parser() if debug else create_parser()
  text, environment = resolve_template([expression])
  predicate = compile_node(parser.parse(text), environment)

  decoded = []
  for raw in values:
    try:
      decoded.append(json.loads(raw))
    except json.JSONDecodeError as e:
      print(f"Error: Cannot decode value {raw!r}: {e}", file=sys.stderr)
      print("  Hint: Values are JSON, so strings need double quotes, e.g. '\"text\"'", file=sys.stderr)
      return EXIT_ERROR

  status = EXIT_OK
  for raw, value in zip(values, decoded):
    if predicate(value):
      print(f"ok       {raw}")
    else:
      print(f"rejected {raw}  (expected {predicate.description})")
      status = EXIT_REJECTED

  if not values:
    print(f"Compiled: {predicate.description}")

  return status


def run(argv: Optional[List[str]] = None) -> int:
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  if args.debug:
    logging.basicConfig(
        level=logging.DEBUG,
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr
    )

  try:
    if args.parse:
      return show_tree(args.expression, debug=args.debug)
    if args.signature:
      return show_signature(args.expression, debug=args.debug)
    return check_values(args.expression, args.values, debug=args.debug)
  except GrammarError as e:
    print(f"Grammar error in '{args.expression}':\n{e}")
    return EXIT_ERROR
  except DefinitionError as e:
    print(f"Definition error in '{args.expression}': {e}")
    return EXIT_ERROR


def main() -> None:
  """Main entry point for typesig"""
  sys.exit(run())


if __name__ == "__main__":
  main()
