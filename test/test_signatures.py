"""
Signature extraction and invocation guard tests
"""

import functools
import pytest

from parsing import parse_type_expression, PrimitiveType
from signatures import Signature, ValidatedFunction, extract_signature
from typesig import compile_signature, compile_type
from error_handling import (
  NotAFunctionSignatureError,
  ArityMismatchError,
  ArgumentCountMismatchError,
  ArgumentTypeError,
  ReturnTypeError,
  ValidationError
)


class TestExtractSignature:

  def test_returns_params_and_return_node(self):
    params, return_type = extract_signature(parse_type_expression("(string, number) => bool"))
    assert params == (PrimitiveType("string"), PrimitiveType("number"))
    assert return_type == PrimitiveType("boolean")

  @pytest.mark.parametrize("text", ["string", "number[]", "{ f: Function }", "Function"])
  def test_rejects_non_function_types(self, text):
    with pytest.raises(NotAFunctionSignatureError):
      extract_signature(parse_type_expression(text))

  def test_compile_signature_rejects_non_function(self):
    with pytest.raises(NotAFunctionSignatureError):
      compile_signature("string")


class TestArity:

  def test_matching_arity(self):
    guarded = compile_signature("(string, number) => string")(lambda s, n: s + str(n))
    assert isinstance(guarded, ValidatedFunction)
    assert guarded.arity == 2

  def test_arity_mismatch_is_eager(self):
    calls = []

    def three(a, b, c):
      calls.append((a, b, c))

    with pytest.raises(ArityMismatchError) as info:
      compile_signature("(string, number) => string")(three)
    assert info.value.expected == 2
    assert info.value.received == 3
    assert calls == []

  def test_defaults_and_varargs_not_counted(self):
    def func(a, b=1, *args, **kwargs):
      return a

    assert compile_signature("(any) => any")(func)("x") == "x"
    with pytest.raises(ArityMismatchError):
      compile_signature("(any, any) => any")(func)

  def test_bound_method_excludes_self(self):
    class Greeter:
      def greet(self, name):
        return "hi " + name

    guarded = compile_signature("(string) => string")(Greeter().greet)
    assert guarded("bob") == "hi bob"

  def test_uninspectable_callable(self):
    class Opaque:
      __signature__ = "not a signature"

      def __call__(self, value):
        return value

    with pytest.raises(ArityMismatchError) as info:
      compile_signature("(any) => any")(Opaque())
    assert info.value.received is None


class TestInvocation:

  @pytest.fixture
  def concat(self):
    calls = []

    def concat(s, a):
      calls.append((s, a))
      return s + str(a)

    guarded = compile_signature("(string, number) => string")(concat)
    return guarded, calls

  def test_valid_call(self, concat):
    guarded, calls = concat
    assert guarded("x", 1) == "x1"
    assert calls == [("x", 1)]

  def test_argument_type_error(self, concat):
    guarded, calls = concat
    with pytest.raises(ArgumentTypeError) as info:
      guarded("x", "y")
    assert info.value.index == 2
    assert info.value.expected == "number"
    assert info.value.value == "y"
    assert str(info.value) == "Invalid 2. argument, expected number."
    assert calls == []

  def test_first_failing_argument_wins(self, concat):
    guarded, calls = concat
    with pytest.raises(ArgumentTypeError) as info:
      guarded(1, "y")
    assert info.value.index == 1
    assert calls == []

  @pytest.mark.parametrize("args", [(), ("x",), ("x", 1, 2)])
  def test_argument_count_mismatch(self, concat, args):
    guarded, calls = concat
    with pytest.raises(ArgumentCountMismatchError) as info:
      guarded(*args)
    assert info.value.expected == 2
    assert info.value.received == len(args)
    assert calls == []

  def test_return_type_error_after_side_effects(self):
    effects = []

    def broken(name):
      effects.append(name)
      return None

    guarded = compile_signature("(string) => string")(broken)
    with pytest.raises(ReturnTypeError) as info:
      guarded("a")
    assert effects == ["a"]
    assert info.value.value is None
    assert str(info.value) == "Invalid return value, expected string."

  def test_guard_reusable_after_failure(self, concat):
    guarded, calls = concat
    with pytest.raises(ValidationError):
      guarded("x", "y")
    assert guarded("y", 2) == "y2"

  def test_result_returned_unchanged(self):
    payload = {"items": [1, 2]}
    guarded = compile_signature("() => { items: number[] }")(lambda: payload)
    assert guarded() is payload

  def test_keyword_arguments_rejected(self, concat):
    guarded, _ = concat
    with pytest.raises(TypeError):
      guarded("x", a=1)


class TestSignatureObject:

  def test_decorator_usage(self):
    @compile_signature("(number, number) => number")
    def add(a, b):
      """Add two numbers"""
      return a + b

    assert add(2, 3) == 5
    assert add.__name__ == "add"
    assert add.__doc__ == "Add two numbers"
    assert add.__wrapped__(2, 3) == 5

  def test_description(self):
    signature = compile_signature("(a: ?string, b: number[]) => void")
    assert isinstance(signature, Signature)
    assert signature.arity == 2
    assert signature.description == "(?string, Array<number>) => void"

  def test_diagnostics_expand_embedded_predicates(self):
    point = compile_type("{ x: number, y: number }")
    guarded = compile_signature("(", point, ") => number")(lambda p: p["x"])
    with pytest.raises(ArgumentTypeError) as info:
      guarded({"x": 1})
    assert info.value.expected == '{ "x": number, "y": number }'
    assert "$Ref" not in str(info.value)

  def test_partial_callable(self):
    guarded = compile_signature("(number) => number")(functools.partial(pow, 2))
    assert guarded(3) == 8
    assert "partial" in repr(guarded)

  def test_void_return_requires_absent_sentinel(self):
    guarded = compile_signature("() => void")(lambda: None)
    with pytest.raises(ReturnTypeError):
      guarded()
    assert compile_signature("() => ?void")(lambda: None)() is None

  def test_stacked_signatures_check_both_contracts(self):
    inner = compile_signature("(string) => any")(lambda v: v)
    outer = compile_signature("(any) => number")(inner)
    assert isinstance(outer, ValidatedFunction)
    assert outer.param_predicates[0].description == "any"
    with pytest.raises(ArgumentTypeError) as info:
      outer(1)
    assert info.value.expected == "string"

    inner = compile_signature("(any) => any")(lambda v: v)
    outer = compile_signature("(number) => number")(inner)
    with pytest.raises(ArgumentTypeError) as info:
      outer("not a number")
    assert info.value.expected == "number"
    assert outer(4) == 4

  def test_diagnostics_name_embedded_plain_callables(self):
    def positive(value):
      return isinstance(value, int) and value > 0

    guarded = compile_signature("(", positive, ") => any")(lambda v: v)
    with pytest.raises(ArgumentTypeError) as info:
      guarded(-1)
    assert "$Ref" not in str(info.value)
    assert info.value.expected == "positive"

    class AtLeast:
      def __init__(self, low):
        self.low = low

      def __call__(self, value):
        return isinstance(value, int) and value >= self.low

    guarded = compile_signature("(", AtLeast(0), ") => any")(lambda v: v)
    with pytest.raises(ArgumentTypeError) as info:
      guarded(-1)
    assert info.value.expected == "AtLeast"
