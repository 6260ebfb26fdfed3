"""
typesig - runtime contracts from type expressions

  >>> is_point = compile_type("{ x: number, y: number }")
  >>> is_point({"x": 1, "y": 2})
  True
  >>> add = compile_signature("(number, number) => number")(lambda a, b: a + b)
  >>> add(2, 3)
  5

Earlier predicates can be embedded by passing them between text fragments:

  >>> is_path = compile_type(is_point, "[]")
"""

from typing import Any, Callable, Mapping, Optional

from parsing import TypeExpressionParser, parse_type_expression
from compiler import Predicate, compile_node
from signatures import Signature, ValidatedFunction
from stringify import stringify_node
from templates import resolve_template
from error_handling import (
  TypesigError,
  GrammarError,
  DefinitionError,
  UnsupportedFeatureError,
  UnsupportedTypeError,
  NotAFunctionSignatureError,
  ValidationError,
  ArityMismatchError,
  ArgumentCountMismatchError,
  ArgumentTypeError,
  ReturnTypeError
)
from utilities import UNDEFINED

__version__ = "0.3.0"

__all__ = [
  "compile_type", "compile_signature", "parse_type_expression", "stringify_node",
  "Predicate", "Signature", "ValidatedFunction", "UNDEFINED",
  "TypesigError", "GrammarError", "DefinitionError", "UnsupportedFeatureError",
  "UnsupportedTypeError", "NotAFunctionSignatureError", "ValidationError",
  "ArityMismatchError", "ArgumentCountMismatchError", "ArgumentTypeError",
  "ReturnTypeError",
]


def compile_type(*parts: Any, refs: Optional[Mapping[str, Callable]] = None,
                 parser: Optional[TypeExpressionParser] = None) -> Predicate:
  """Compile a type expression into a Predicate"""
  text, environment = resolve_template(parts, refs)
  node = parse_type_expression(text, parser)
  return compile_node(node, environment)


def compile_signature(*parts: Any, refs: Optional[Mapping[str, Callable]] = None,
                      parser: Optional[TypeExpressionParser] = None) -> Signature:
  """Compile a function type expression into a Signature"""
  text, environment = resolve_template(parts, refs)
  node = parse_type_expression(text, parser)
  return Signature(node, environment)
