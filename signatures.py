"""
Signature Extractor and Invocation Guard
Checks a function type expression and wraps callables with its contract
"""

from typing import Any, Callable, Mapping, Optional, Sequence, Tuple
import functools
import logging

from parsing import TypeNode, FunctionType
from compiler import Predicate, compile_node
from error_handling import (
  NotAFunctionSignatureError,
  ArityMismatchError,
  ArgumentCountMismatchError,
  ArgumentTypeError,
  ReturnTypeError
)
from utilities import declared_arity

logger = logging.getLogger(__name__)


def extract_signature(node: TypeNode) -> Tuple[Tuple[TypeNode, ...], TypeNode]:
  """Split a function type into its parameter nodes and return node"""
  if not isinstance(node, FunctionType):
    raise NotAFunctionSignatureError(type(node).__name__)
  return node.params, node.return_type


class ValidatedFunction:
  """
  Callable wrapper enforcing a signature around one function

  Arguments are checked in order before the function runs; the first
  failing one raises ArgumentTypeError and the function is not invoked.
  The return value is checked after the function has run, so a
  ReturnTypeError never undoes its side effects.
  """

  def __init__(self, func: Callable, param_predicates: Sequence[Predicate],
               return_predicate: Predicate):
    self._arity = len(param_predicates)
    self._param_predicates = tuple(param_predicates)
    self._return_predicate = return_predicate
    self._func = func
    self._name = getattr(func, "__name__", type(func).__name__)

    try:
      received = declared_arity(func)
    except (TypeError, ValueError) as e:
      raise ArityMismatchError(
        self._arity, None,
        f"sig expected function of arity {self._arity} but could not inspect {func!r}"
      ) from e

    if received != self._arity:
      raise ArityMismatchError(self._arity, received)

    # Keep the guard's own state when wrapping another guard
    functools.update_wrapper(self, func, updated=())

  @property
  def arity(self) -> int:
    return self._arity

  @property
  def param_predicates(self) -> Tuple[Predicate, ...]:
    return self._param_predicates

  @property
  def return_predicate(self) -> Predicate:
    return self._return_predicate

  def __call__(self, *args: Any) -> Any:
    if len(args) != self._arity:
      raise ArgumentCountMismatchError(self._arity, len(args))

    for index, (predicate, arg) in enumerate(zip(self._param_predicates, args), 1):
      if not predicate(arg):
        logger.debug("Rejected argument %d of %s: %r", index, self._name, arg)
        raise ArgumentTypeError(index, predicate.description, arg)

    result = self._func(*args)

    if not self._return_predicate(result):
      logger.debug("Rejected return value of %s: %r", self._name, result)
      raise ReturnTypeError(self._return_predicate.description, result)

    return result

  def __repr__(self) -> str:
    return f"<ValidatedFunction {self._name}>"


class Signature:
  """
  Compiled function type expression

  Call it with a function to get a ValidatedFunction, or use it as a
  decorator.
  """

  def __init__(self, node: TypeNode, refs: Optional[Mapping[str, Callable]] = None):
    params, return_type = extract_signature(node)
    self.node = node
    self.param_predicates = tuple(compile_node(param, refs) for param in params)
    self.return_predicate = compile_node(return_type, refs)
    self.description = "({}) => {}".format(
      ", ".join(p.description for p in self.param_predicates),
      self.return_predicate.description
    )
    logger.debug("Compiled signature %s", self.description)

  @property
  def arity(self) -> int:
    return len(self.param_predicates)

  def __call__(self, func: Callable) -> ValidatedFunction:
    return ValidatedFunction(func, self.param_predicates, self.return_predicate)

  def __repr__(self) -> str:
    return f"<Signature {self.description}>"
