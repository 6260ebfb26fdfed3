"""
Stringifier - renders a TypeNode back to compact type expression text
Used to build diagnostics for rejected arguments and return values
"""

from typing import Any, Callable, Dict, Mapping, Optional
import json

from parsing import (
  TypeNode, LiteralType, PrimitiveType, NullType, VoidType, AnyType,
  NullableType, ArrayType, TupleType, ObjectType, UnionType,
  IntersectionType, GenericType, FunctionType
)


# Binding strength, loosest first
FUNCTION_LEVEL = 0
UNION_LEVEL = 1
INTERSECTION_LEVEL = 2
PREFIX_LEVEL = 3
PRIMARY_LEVEL = 4

_PRIMITIVE_NAMES = {
  "string": "string",
  "number": "number",
  "boolean": "bool",
}


def precedence(node: Any) -> int:
  if isinstance(node, FunctionType):
    return FUNCTION_LEVEL
  if isinstance(node, UnionType):
    return UNION_LEVEL
  if isinstance(node, IntersectionType):
    return INTERSECTION_LEVEL
  if isinstance(node, NullableType):
    return PREFIX_LEVEL
  return PRIMARY_LEVEL


def _render_literal(value: Any) -> str:
  if isinstance(value, bool):
    return "true" if value else "false"
  if isinstance(value, str):
    return json.dumps(value)
  return repr(value)


def _render_reference(ref: Any, min_level: int) -> str:
  """Embedded references render as the type they were compiled from"""
  description = getattr(ref, "description", None)
  if description is None:
    return getattr(ref, "__name__", type(ref).__name__)
  if precedence(getattr(ref, "node", None)) < min_level:
    return f"({description})"
  return description


class _Renderer:
  def __init__(self, refs: Optional[Mapping[str, Callable]]):
    self.refs = refs or {}

  def render(self, node: TypeNode, min_level: int = FUNCTION_LEVEL) -> str:
    method = self._DISPATCH.get(type(node))
    if method is None:
      return "<unknown>"
    text = method(self, node)
    if isinstance(node, GenericType):
      if node.name in self.refs:
        return _render_reference(self.refs[node.name], min_level)
      return text
    if precedence(node) < min_level:
      return f"({text})"
    return text

  def _literal(self, node: LiteralType) -> str:
    return _render_literal(node.value)

  def _primitive(self, node: PrimitiveType) -> str:
    return _PRIMITIVE_NAMES.get(node.kind, node.kind)

  def _null(self, node: NullType) -> str:
    return "null"

  def _void(self, node: VoidType) -> str:
    return "void"

  def _any(self, node: AnyType) -> str:
    return "any"

  def _nullable(self, node: NullableType) -> str:
    return "?" + self.render(node.inner, PREFIX_LEVEL)

  def _array(self, node: ArrayType) -> str:
    return f"Array<{self.render(node.element)}>"

  def _tuple(self, node: TupleType) -> str:
    return "[" + ", ".join(self.render(e) for e in node.elements) + "]"

  def _object(self, node: ObjectType) -> str:
    if not node.properties:
      return "{}"
    entries = []
    for prop in node.properties:
      marker = "?" if prop.optional else ""
      entries.append(f"{json.dumps(prop.key)}{marker}: {self.render(prop.value)}")
    return "{ " + ", ".join(entries) + " }"

  def _union(self, node: UnionType) -> str:
    return " | ".join(self.render(m, INTERSECTION_LEVEL) for m in node.members)

  def _intersection(self, node: IntersectionType) -> str:
    return " & ".join(self.render(m, PREFIX_LEVEL) for m in node.members)

  def _generic(self, node: GenericType) -> str:
    return node.name

  def _function(self, node: FunctionType) -> str:
    params = ", ".join(self.render(p) for p in node.params)
    return f"({params}) => {self.render(node.return_type)}"

  _DISPATCH: Dict[type, Callable[['_Renderer', Any], str]] = {
    LiteralType: _literal,
    PrimitiveType: _primitive,
    NullType: _null,
    VoidType: _void,
    AnyType: _any,
    NullableType: _nullable,
    ArrayType: _array,
    TupleType: _tuple,
    ObjectType: _object,
    UnionType: _union,
    IntersectionType: _intersection,
    GenericType: _generic,
    FunctionType: _function,
  }


def stringify_node(node: TypeNode, refs: Optional[Mapping[str, Callable]] = None) -> str:
  """Render a type tree as text, e.g. `?Array<string>` or `{ "x": number }`"""
  return _Renderer(refs).render(node)


def rendered_node_classes():
  """TypeNode classes the stringifier knows how to render"""
  return frozenset(_Renderer._DISPATCH)
