"""
Runtime value classification for typesig
Small named checks shared by the compiled predicates and the invocation guard
"""

from typing import Any, Callable
from collections.abc import Mapping
import inspect
import numbers


# ==================== ABSENT VALUE ====================

class _Undefined:
  """Singleton marking an absent value, distinct from None"""

  _instance = None

  def __new__(cls):
    if cls._instance is None:
      cls._instance = super().__new__(cls)
    return cls._instance

  def __repr__(self) -> str:
    return "UNDEFINED"

  def __bool__(self) -> bool:
    return False

  def __reduce__(self):
    return (_Undefined, ())


UNDEFINED = _Undefined()


# ==================== TYPE CHECKING UTILITIES ====================

def is_string(value: Any) -> bool:
  return isinstance(value, str)


def is_number(value: Any) -> bool:
  """
  Check for a real number

  bool is an int subclass in Python but never counts as a number here.
  """
  return isinstance(value, numbers.Real) and not isinstance(value, bool)


def is_boolean(value: Any) -> bool:
  return isinstance(value, bool)


def is_null(value: Any) -> bool:
  return value is None


def is_void(value: Any) -> bool:
  return value is UNDEFINED


def is_nullish(value: Any) -> bool:
  return value is None or value is UNDEFINED


def is_array(value: Any) -> bool:
  return isinstance(value, (list, tuple))


def is_callable(value: Any) -> bool:
  return callable(value)


def is_object(value: Any) -> bool:
  """
  Check for a structured value

  Args:
    value: Value to check

  Returns:
    True unless value is None, UNDEFINED, a string, number or boolean,
    or something callable

  Examples:
    is_object({}) -> True
    is_object([1, 2]) -> True
    is_object("text") -> False
    is_object(len) -> False
  """
  if is_nullish(value) or isinstance(value, (str, bool, numbers.Number)):
    return False
  return not callable(value)


def class_name(value: Any) -> str:
  """Name of the class a value was constructed from"""
  return type(value).__name__


# ==================== VALUE EXTRACTION UTILITIES ====================

def read_property(value: Any, key: str) -> Any:
  """
  Read a named field from a structured value

  Mappings are read by key, anything else by attribute. A missing field
  reads as UNDEFINED rather than raising.

  Examples:
    read_property({"x": 1}, "x") -> 1
    read_property({}, "x") -> UNDEFINED
    read_property(point, "x") -> point.x
  """
  if isinstance(value, Mapping):
    return value[key] if key in value else UNDEFINED
  return getattr(value, key, UNDEFINED)


# ==================== CALLABLE INSPECTION ====================

_POSITIONAL_KINDS = (
  inspect.Parameter.POSITIONAL_ONLY,
  inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def declared_arity(func: Callable) -> int:
  """
  Count the positional parameters a callable declares

  Counting stops at the first parameter with a default value or at the
  first non-positional parameter, so *args, keyword-only parameters and
  **kwargs never add to the count.

  Raises:
    ValueError, TypeError: when the callable has no inspectable signature
  """
  arity = 0
  for parameter in inspect.signature(func).parameters.values():
    if parameter.kind not in _POSITIONAL_KINDS:
      break
    if parameter.default is not inspect.Parameter.empty:
      break
    arity += 1
  return arity
