"""
Type expression parser
Turns type expression text into an immutable TypeNode tree
"""

from typing import Tuple, Union, Optional, List
from dataclasses import dataclass
import logging

from pyparsing import (
    Forward, Keyword, Literal, Opt, ParseException, ParserElement,
    QuotedString, Regex, StringEnd, Suppress, ZeroOrMore, DelimitedList,
    one_of
)

from error_handling import GrammarError

# Enable packrat parsing for performance
ParserElement.enable_packrat()

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = r'\$Ref[0-9]+'


# ============================================================================
# TYPE NODES
# ============================================================================

@dataclass(frozen=True)
class LiteralType:
    """Exact string, number or boolean value"""
    value: Union[str, int, float, bool]


@dataclass(frozen=True)
class PrimitiveType:
    """One of 'string', 'number' or 'boolean'"""
    kind: str


@dataclass(frozen=True)
class NullType:
    pass


@dataclass(frozen=True)
class VoidType:
    pass


@dataclass(frozen=True)
class AnyType:
    pass


@dataclass(frozen=True)
class NullableType:
    inner: 'TypeNode'


@dataclass(frozen=True)
class ArrayType:
    element: 'TypeNode'


@dataclass(frozen=True)
class TupleType:
    elements: Tuple['TypeNode', ...]


@dataclass(frozen=True)
class ObjectProperty:
    """A single `key: T` entry of an object type; `optional` marks `key?: T`"""
    key: str
    value: 'TypeNode'
    optional: bool = False


@dataclass(frozen=True)
class ObjectType:
    properties: Tuple[ObjectProperty, ...]


@dataclass(frozen=True)
class UnionType:
    members: Tuple['TypeNode', ...]


@dataclass(frozen=True)
class IntersectionType:
    members: Tuple['TypeNode', ...]


@dataclass(frozen=True)
class GenericType:
    """Named type: Function, Object, an embedded reference or a class name"""
    name: str


@dataclass(frozen=True)
class FunctionType:
    params: Tuple['TypeNode', ...]
    return_type: 'TypeNode'


TypeNode = Union[
    LiteralType, PrimitiveType, NullType, VoidType, AnyType, NullableType,
    ArrayType, TupleType, ObjectType, UnionType, IntersectionType,
    GenericType, FunctionType,
]

TYPE_NODE_CLASSES = (
    LiteralType, PrimitiveType, NullType, VoidType, AnyType, NullableType,
    ArrayType, TupleType, ObjectType, UnionType, IntersectionType,
    GenericType, FunctionType,
)


# ============================================================================
# GRAMMAR
# ============================================================================

def _parse_number(tokens) -> LiteralType:
    text = tokens[0]
    if any(c in text for c in '.eE'):
        return LiteralType(float(text))
    return LiteralType(int(text))


def _fold_members(node_class):
    """Build a parse action that only wraps two or more members"""
    def action(tokens):
        members = tuple(tokens)
        if len(members) == 1:
            return members[0]
        return node_class(members)
    return action


def _wrap_array_suffixes(tokens):
    node = tokens[0]
    for _ in tokens[1:]:
        node = ArrayType(node)
    return node


def _make_property(tokens) -> ObjectProperty:
    tokens = list(tokens)
    key = tokens[0]
    optional = len(tokens) == 3
    return ObjectProperty(key, tokens[-1], optional)


class TypeExpressionGrammar:
    """Type expression grammar definition using pyparsing"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self._setup_grammar()

    def _setup_grammar(self):
        """Setup the type expression grammar, loosest binding rule first"""

        # Forward declarations for recursive structures
        type_expr = Forward()
        prefix_type = Forward()

        LPAREN, RPAREN = Suppress("("), Suppress(")")
        LBRACKET, RBRACKET = Suppress("["), Suppress("]")
        LBRACE, RBRACE = Suppress("{"), Suppress("}")
        COLON = Suppress(":")
        ARROW = Suppress("=>")

        # Keywords
        string_kw = Keyword("string").set_parse_action(lambda: PrimitiveType("string"))
        number_kw = Keyword("number").set_parse_action(lambda: PrimitiveType("number"))
        boolean_kw = (Keyword("boolean") | Keyword("bool")).set_parse_action(
            lambda: PrimitiveType("boolean")
        )
        null_kw = Keyword("null").set_parse_action(lambda: NullType())
        void_kw = Keyword("void").set_parse_action(lambda: VoidType())
        any_kw = Keyword("any").set_parse_action(lambda: AnyType())
        keyword_type = string_kw | number_kw | boolean_kw | null_kw | void_kw | any_kw

        # Literals
        true_kw = Keyword("true").set_parse_action(lambda: LiteralType(True))
        false_kw = Keyword("false").set_parse_action(lambda: LiteralType(False))
        number_literal = Regex(r'-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?')
        number_literal.set_parse_action(_parse_number)
        quoted_string = QuotedString('"', esc_char='\\') | QuotedString("'", esc_char='\\')
        string_literal = quoted_string.copy().set_parse_action(lambda t: LiteralType(t[0]))
        literal_type = true_kw | false_kw | number_literal | string_literal

        # Identifiers; placeholders are only ever written by the template resolver
        identifier = Regex(r'[A-Za-z_][A-Za-z0-9_]*')
        placeholder = Regex(PLACEHOLDER_PATTERN)
        generic_type = (placeholder | identifier).set_parse_action(lambda t: GenericType(t[0]))

        # Array<T>, same node as T[]
        array_generic = (
            Keyword("Array") + Suppress("<") + type_expr + Suppress(">")
        ).set_parse_action(lambda t: ArrayType(t[1]))

        # Tuples [A, B]
        tuple_type = (
            LBRACKET + Opt(DelimitedList(type_expr, ",")) + RBRACKET
        ).set_parse_action(lambda t: TupleType(tuple(t)))

        # Object types { key: T, "other key": T; flag?: T }
        property_key = identifier | quoted_string
        object_property = (
            property_key + Opt(Literal("?")) + COLON + type_expr
        ).set_parse_action(_make_property)
        object_type = (
            LBRACE +
            Opt(DelimitedList(object_property, one_of(", ;"), allow_trailing_delim=True)) +
            RBRACE
        ).set_parse_action(lambda t: ObjectType(tuple(t)))

        parenthesized = LPAREN + type_expr + RPAREN

        primary_type = (
            literal_type |
            keyword_type |
            array_generic |
            tuple_type |
            object_type |
            generic_type |
            parenthesized
        )

        # number[][]
        array_suffix = Regex(r'\[\s*\]')
        postfix_type = (primary_type + ZeroOrMore(array_suffix)).set_parse_action(_wrap_array_suffixes)

        # ?T binds looser than T[]
        nullable_type = (Suppress("?") + prefix_type).set_parse_action(lambda t: NullableType(t[0]))
        prefix_type <<= nullable_type | postfix_type

        intersection_type = (
            Opt(Suppress("&")) + DelimitedList(prefix_type, "&")
        ).set_parse_action(_fold_members(IntersectionType))

        union_type = (
            Opt(Suppress("|")) + DelimitedList(intersection_type, "|")
        ).set_parse_action(_fold_members(UnionType))

        # (a: string, number) => R; parameter names are dropped
        function_param = Opt(identifier + COLON).suppress() + type_expr
        function_type = (
            LPAREN + Opt(DelimitedList(function_param, ",")) + RPAREN + ARROW + type_expr
        ).set_parse_action(lambda t: FunctionType(tuple(t[:-1]), t[-1]))

        type_expr <<= function_type | union_type

        # Store the main parsers
        self.type_expr = type_expr
        self.expression = type_expr + StringEnd()

        if self.debug:
            self.type_expr.set_debug(True)

    def parse_type(self, text: str) -> TypeNode:
        """Parse a complete type expression"""
        if not text.strip():
            raise GrammarError("Expected valid type expression, got empty text")

        try:
            result = self.expression.parse_string(text, parse_all=True)
        except ParseException as e:
            raise GrammarError.from_parse_exception(e, text) from e

        node = result[0]
        logger.debug("Parsed %r into %s", text, type(node).__name__)
        return node


class TypeExpressionParser:
    """Entry point wrapping the grammar"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.grammar = TypeExpressionGrammar(debug)

    def parse(self, text: str) -> TypeNode:
        return self.grammar.parse_type(text)


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> TypeExpressionParser:
    """Create a type expression parser"""
    return TypeExpressionParser(debug=debug)


def create_debug_parser() -> TypeExpressionParser:
    """Create a type expression parser with pyparsing debug output enabled"""
    return TypeExpressionParser(debug=True)


_default_parser: Optional[TypeExpressionParser] = None


def get_default_parser() -> TypeExpressionParser:
    """Shared parser, built on first use"""
    global _default_parser
    if _default_parser is None:
        _default_parser = create_parser()
    return _default_parser


def parse_type_expression(text: str, parser: Optional[TypeExpressionParser] = None) -> TypeNode:
    """Parse type expression text with the given or the shared parser"""
    return (parser or get_default_parser()).parse(text)


# ============================================================================
# TREE UTILITIES
# ============================================================================

def iter_children(node: TypeNode) -> List[TypeNode]:
    """Direct child nodes, in source order"""
    if isinstance(node, NullableType):
        return [node.inner]
    if isinstance(node, ArrayType):
        return [node.element]
    if isinstance(node, TupleType):
        return list(node.elements)
    if isinstance(node, ObjectType):
        return [prop.value for prop in node.properties]
    if isinstance(node, (UnionType, IntersectionType)):
        return list(node.members)
    if isinstance(node, FunctionType):
        return list(node.params) + [node.return_type]
    return []


def find_nodes_by_type(node: TypeNode, node_class: type) -> List[TypeNode]:
    """Find all nodes of a specific class in a tree"""
    result = []

    def search(current: TypeNode):
        if isinstance(current, node_class):
            result.append(current)
        for child in iter_children(current):
            search(child)

    search(node)
    return result


def _node_label(node: TypeNode) -> str:
    if isinstance(node, LiteralType):
        return f"LiteralType({node.value!r})"
    if isinstance(node, PrimitiveType):
        return f"PrimitiveType({node.kind})"
    if isinstance(node, GenericType):
        return f"GenericType({node.name})"
    return type(node).__name__


def pretty_print_node(node: TypeNode, indent: int = 0) -> str:
    """Pretty print a type tree for debugging"""
    result = "  " * indent + _node_label(node) + "\n"

    if isinstance(node, ObjectType):
        for prop in node.properties:
            marker = "?" if prop.optional else ""
            result += "  " * (indent + 1) + f"{prop.key}{marker}:\n"
            result += pretty_print_node(prop.value, indent + 2)
        return result

    if isinstance(node, FunctionType):
        for param in node.params:
            result += pretty_print_node(param, indent + 1)
        result += "  " * (indent + 1) + "=>\n"
        result += pretty_print_node(node.return_type, indent + 2)
        return result

    for child in iter_children(node):
        result += pretty_print_node(child, indent + 1)

    return result
