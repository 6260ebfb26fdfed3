"""
Stringifier tests - diagnostic text for type trees
"""

import pytest

from parsing import parse_type_expression, GenericType, LiteralType
from stringify import stringify_node


class TestStringify:

  @pytest.mark.parametrize("text, expected", [
    ("string", "string"),
    ("number", "number"),
    ("boolean", "bool"),
    ("null", "null"),
    ("void", "void"),
    ("any", "any"),
    ("'hi'", '"hi"'),
    ("1.5", "1.5"),
    ("true", "true"),
    ("?number", "?number"),
    ("number[]", "Array<number>"),
    ("[string, number]", "[string, number]"),
    ("{ x: number, y: ?string }", '{ "x": number, "y": ?string }'),
    ("{}", "{}"),
    ("string | number", "string | number"),
    ("A & B", "A & B"),
    ("Widget", "Widget"),
    ("(string, number) => void", "(string, number) => void"),
  ])
  def test_render(self, text, expected):
    assert stringify_node(parse_type_expression(text)) == expected

  @pytest.mark.parametrize("text, expected", [
    ("?(string | number)", "?(string | number)"),
    ("(A | B) & C", "(A | B) & C"),
    ("A | B & C", "A | B & C"),
    ("?string | number", "?string | number"),
    ("(() => void) | null", "(() => void) | null"),
  ])
  def test_parenthesizes_by_precedence(self, text, expected):
    assert stringify_node(parse_type_expression(text)) == expected

  @pytest.mark.parametrize("text", [
    "?(string | number)[]",
    "{ a: [number, ?A & B], b: 'x' | 2 }",
    "((string) => void, number) => any",
  ])
  def test_output_parses_back_to_same_tree(self, text):
    node = parse_type_expression(text)
    assert parse_type_expression(stringify_node(node)) == node

  def test_string_literal_escaping(self):
    assert stringify_node(LiteralType('say "hi"')) == '"say \\"hi\\""'

  def test_unknown_node(self):
    assert stringify_node(object()) == "<unknown>"

  def test_unresolved_placeholder_keeps_name(self):
    assert stringify_node(GenericType("$Ref0")) == "$Ref0"
