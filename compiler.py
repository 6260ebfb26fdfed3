"""
Type Expression Compiler
Recursively turns a TypeNode tree into a Predicate, a pure value -> bool check
"""

from typing import Any, Callable, Dict, Mapping, Optional
from dataclasses import dataclass, field
import logging

from parsing import (
  TypeNode, LiteralType, PrimitiveType, NullType, VoidType, AnyType,
  NullableType, ArrayType, TupleType, ObjectType, UnionType,
  IntersectionType, GenericType
)
from stringify import stringify_node
from error_handling import DefinitionError, UnsupportedFeatureError, UnsupportedTypeError
from utilities import (
  is_string, is_number, is_boolean, is_null, is_void, is_nullish,
  is_array, is_callable, is_object, class_name, read_property
)

logger = logging.getLogger(__name__)

Check = Callable[[Any], bool]
ReferenceEnvironment = Dict[str, Callable[[Any], Any]]


@dataclass(frozen=True)
class Predicate:
  """
  Compiled type expression

  Calling the predicate with any value answers whether the value
  satisfies the expression. `node` is the tree it was compiled from and
  `description` its rendered text, with embedded references expanded.
  """
  node: TypeNode
  check: Check = field(repr=False, compare=False)
  description: str = ""

  def __call__(self, value: Any) -> bool:
    return self.check(value)

  def __str__(self) -> str:
    return self.description


# ============================================================================
# LEAF CHECKS
# ============================================================================

_PRIMITIVE_CHECKS: Dict[str, Check] = {
  "string": is_string,
  "number": is_number,
  "boolean": is_boolean,
}


def _always(value: Any) -> bool:
  return True


def _same_literal(expected: Any) -> Check:
  """Strict equality, so 1 never matches True and "1" never matches 1"""
  if isinstance(expected, bool):
    return lambda value: value is expected
  if isinstance(expected, str):
    return lambda value: is_string(value) and value == expected
  return lambda value: is_number(value) and value == expected


def _reference_check(name: str, ref: Any) -> Check:
  if isinstance(ref, Predicate):
    return ref.check
  if isinstance(ref, type):
    return lambda value: isinstance(value, ref)
  if callable(ref):
    return lambda value: bool(ref(value))
  raise DefinitionError(f"Reference {name} must be a predicate or a class, got {type(ref).__name__}")


def _nominal_check(name: str) -> Check:
  # Class names are matched exactly; subclasses and renamed classes do not match
  return lambda value: is_object(value) and class_name(value) == name


# ============================================================================
# NODE COMPILERS
# ============================================================================

def _compile_literal(node: LiteralType, refs: Mapping) -> Check:
  return _same_literal(node.value)


def _compile_primitive(node: PrimitiveType, refs: Mapping) -> Check:
  check = _PRIMITIVE_CHECKS.get(node.kind)
  if check is None:
    raise UnsupportedTypeError(f"PrimitiveType({node.kind})")
  return check


def _compile_null(node: NullType, refs: Mapping) -> Check:
  return is_null


def _compile_void(node: VoidType, refs: Mapping) -> Check:
  return is_void


def _compile_any(node: AnyType, refs: Mapping) -> Check:
  return _always


def _compile_nullable(node: NullableType, refs: Mapping) -> Check:
  inner = _compile(node.inner, refs)
  return lambda value: is_nullish(value) or inner(value)


def _compile_array(node: ArrayType, refs: Mapping) -> Check:
  inner = _compile(node.element, refs)
  return lambda value: is_array(value) and all(inner(item) for item in value)


def _compile_tuple(node: TupleType, refs: Mapping) -> Check:
  inner = [_compile(element, refs) for element in node.elements]
  size = len(inner)

  def check(value: Any) -> bool:
    if not is_array(value) or len(value) != size:
      return False
    return all(element_check(item) for element_check, item in zip(inner, value))

  return check


def _compile_object(node: ObjectType, refs: Mapping) -> Check:
  for prop in node.properties:
    if prop.optional:
      raise UnsupportedFeatureError(
        "optional-field",
        f"Object type optional fields are unsupported (field {prop.key!r})"
      )

  fields = [(prop.key, _compile(prop.value, refs)) for prop in node.properties]

  # A missing key reads as UNDEFINED, so ?T fields accept it
  def check(value: Any) -> bool:
    if not is_object(value):
      return False
    return all(field_check(read_property(value, key)) for key, field_check in fields)

  return check


def _compile_union(node: UnionType, refs: Mapping) -> Check:
  inner = [_compile(member, refs) for member in node.members]
  return lambda value: any(member_check(value) for member_check in inner)


def _compile_intersection(node: IntersectionType, refs: Mapping) -> Check:
  inner = [_compile(member, refs) for member in node.members]
  return lambda value: all(member_check(value) for member_check in inner)


def _compile_generic(node: GenericType, refs: Mapping) -> Check:
  name = node.name
  if name == "Function":
    return is_callable
  if name == "Object":
    return is_object
  if name in refs:
    return _reference_check(name, refs[name])
  return _nominal_check(name)


# FunctionType is deliberately absent: signatures go through signatures.py
_NODE_COMPILERS: Dict[type, Callable[[Any, Mapping], Check]] = {
  LiteralType: _compile_literal,
  PrimitiveType: _compile_primitive,
  NullType: _compile_null,
  VoidType: _compile_void,
  AnyType: _compile_any,
  NullableType: _compile_nullable,
  ArrayType: _compile_array,
  TupleType: _compile_tuple,
  ObjectType: _compile_object,
  UnionType: _compile_union,
  IntersectionType: _compile_intersection,
  GenericType: _compile_generic,
}


def _compile(node: TypeNode, refs: Mapping) -> Check:
  compiler = _NODE_COMPILERS.get(type(node))
  if compiler is None:
    raise UnsupportedTypeError(type(node).__name__)
  return compiler(node, refs)


def compile_node(node: TypeNode, refs: Optional[Mapping[str, Callable]] = None) -> Predicate:
  """Compile a type tree into a Predicate, resolving named references from refs"""
  refs = refs or {}
  check = _compile(node, refs)
  description = stringify_node(node, refs)
  logger.debug("Compiled predicate for %s", description)
  return Predicate(node, check, description)


def compiled_node_classes():
  """TypeNode classes compile_node accepts"""
  return frozenset(_NODE_COMPILERS)
