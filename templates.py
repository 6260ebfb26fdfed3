"""
Template Embedding Resolver
Lets a type expression embed previously compiled predicates by splicing in
reserved placeholder names
"""

from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple
import re
import logging

from error_handling import DefinitionError

logger = logging.getLogger(__name__)

# The grammar accepts `$` only as part of a whole placeholder token
PLACEHOLDER_PREFIX = "$Ref"

_NAME_PATTERN = re.compile(r'[A-Za-z_][A-Za-z0-9_]*\Z')


def placeholder_name(index: int) -> str:
  return f"{PLACEHOLDER_PREFIX}{index}"


def _check_reference(label: str, ref: Any) -> None:
  if not callable(ref):
    raise DefinitionError(
      f"Embedded reference {label} must be a predicate or a class, got {type(ref).__name__}"
    )


def resolve_template(
  parts: Iterable[Any],
  refs: Optional[Mapping[str, Callable]] = None
) -> Tuple[str, Dict[str, Callable]]:
  """
  Join literal fragments and embedded references into one expression

  Args:
    parts: str items are literal text; anything else is an embedded
      predicate (or class) and is replaced by a fresh placeholder
    refs: named references the expression may mention by identifier

  Returns:
    (expression text, reference environment for this compilation)

  Examples:
    resolve_template(["{ user: ", User, " }"])
      -> ('{ user: $Ref0 }', {'$Ref0': User})
  """
  environment: Dict[str, Callable] = {}

  for name, ref in (refs or {}).items():
    if not isinstance(name, str) or not _NAME_PATTERN.match(name):
      raise DefinitionError(f"Reference name {name!r} is not a valid identifier")
    _check_reference(name, ref)
    environment[name] = ref

  fragments = []
  # Literal text as written, with a space standing in for each embed
  literal = []
  embedded = 0
  for part in parts:
    if isinstance(part, str):
      fragments.append(part)
      literal.append(part)
      continue

    name = placeholder_name(embedded)
    _check_reference(name, part)
    environment[name] = part
    fragments.append(name)
    literal.append(" ")
    embedded += 1

  if PLACEHOLDER_PREFIX in "".join(literal):
    raise DefinitionError(
      f"Identifiers starting with {PLACEHOLDER_PREFIX} are reserved for embedded references"
    )

  text = "".join(fragments)
  logger.debug("Resolved template %r with %d embedded references", text, embedded)
  return text, environment
