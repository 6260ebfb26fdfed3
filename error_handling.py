"""
Error taxonomy for typesig
Grammar errors carry detailed parse context; definition and validation
errors keep the plain diagnostic message
"""

from typing import Any, List, Optional, Dict
from pyparsing import ParseException
import re


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_parse_error(
    message: str,
    location: int,
    line: int,
    column: int,
    expected: Optional[List[str]] = None,
    got: Optional[str] = None,
    context: Optional[str] = None,
    suggestions: Optional[List[str]] = None
) -> Dict:
    """Create an immutable parse error structure"""
    return {
        'message': message,
        'location': location,
        'line': line,
        'column': column,
        'expected': expected or [],
        'got': got,
        'context': context,
        'suggestions': suggestions or []
    }


def format_parse_error(error: Dict) -> str:
    """Format parse error as string"""
    error_msg = f"Invalid type expression at line {error['line']}, column {error['column']}:\n"
    error_msg += f"  {error['message']}\n"

    if error['expected']:
        error_msg += f"  Expected: {', '.join(error['expected'])}\n"

    if error['got']:
        error_msg += f"  Got: {error['got']}\n"

    if error['context']:
        error_msg += f"  Context:\n{error['context']}\n"

    if error['suggestions']:
        error_msg += "  Suggestions:\n"
        for suggestion in error['suggestions']:
            error_msg += f"    - {suggestion}\n"

    return error_msg.rstrip('\n')


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 1) -> str:
    """Get context lines around the error"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        context_parts.append(f"{line_prefix}{lines[i]}")
        if i == line_num - 1:
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^")

    return '\n'.join(context_parts)


def extract_expected(exc: ParseException) -> List[str]:
    """Extract expected tokens from exception"""
    expected = []

    # pyparsing keeps the expectation only inside the message
    msg = str(exc)
    if "Expected" in msg:
        expected_match = re.search(r"Expected\s+(.+?)(?:,\s+found|\s+\(|$)", msg)
        if expected_match:
            expected.append(expected_match.group(1))

    return expected if expected else ["a type expression"]


def extract_got(source_text: str, line_num: int, col_num: int) -> str:
    """Extract what was actually found at the error location"""
    lines = source_text.split('\n')

    if line_num <= len(lines):
        error_line = lines[line_num - 1]
        if col_num <= len(error_line):
            start = max(0, col_num - 1)
            end = min(len(error_line), col_num + 10)
            got_text = error_line[start:end].strip()
            if got_text:
                return f"'{got_text}'"
        return "end of expression"
    return "unknown"


def generate_suggestions(source_text: str, got: str, expected: List[str]) -> List[str]:
    """Generate helpful suggestions based on the error"""
    suggestions = []

    if "->" in source_text:
        suggestions.append("Function types use '=>' between parameters and return type")

    if "..." in source_text:
        suggestions.append("Variadic parameters are unsupported")

    if re.search(r"\w\s*\(", source_text):
        suggestions.append("Object methods are unsupported, use a Function property instead")

    if "<" in source_text and not re.search(r"\bArray\s*<", source_text):
        suggestions.append("Only Array<T> accepts a type argument")

    if "'" in got or '"' in got:
        suggestions.append("String literals must be closed with the same quote they open with")

    return suggestions


def enhance_parse_exception_dict(exc: ParseException, source_text: str) -> Dict:
    """Convert pyparsing exception to an enhanced error dict"""
    line_num = exc.lineno
    col_num = exc.column

    context = get_context_lines(source_text, line_num, col_num)
    expected = extract_expected(exc)
    got = extract_got(source_text, line_num, col_num)
    suggestions = generate_suggestions(source_text, got, expected)

    return make_parse_error(
        message=exc.msg,
        location=exc.loc,
        line=line_num,
        column=col_num,
        expected=expected,
        got=got,
        context=context,
        suggestions=suggestions
    )


# ============================================================================
# EXCEPTION CLASSES
# ============================================================================

class TypesigError(Exception):
    """Base class of every typesig failure"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class GrammarError(TypesigError, ValueError):
    """Type expression text that does not follow the grammar"""
    def __init__(self, message: str, location: int = 0, line: int = 0, column: int = 0,
                 expected: Optional[List[str]] = None, got: Optional[str] = None,
                 context: Optional[str] = None, suggestions: Optional[List[str]] = None):
        self.location = location
        self.line = line
        self.column = column
        self.expected = expected or []
        self.got = got
        self.context = context
        self.suggestions = suggestions or []
        super().__init__(message)

    def __str__(self) -> str:
        if not self.line:
            return self.message
        error_dict = make_parse_error(
            self.message, self.location, self.line, self.column,
            self.expected, self.got, self.context, self.suggestions
        )
        return format_parse_error(error_dict)

    @classmethod
    def from_parse_exception(cls, exc: ParseException, source_text: str) -> 'GrammarError':
        error_dict = enhance_parse_exception_dict(exc, source_text)
        return cls(
            message=error_dict['message'],
            location=error_dict['location'],
            line=error_dict['line'],
            column=error_dict['column'],
            expected=error_dict['expected'],
            got=error_dict['got'],
            context=error_dict['context'],
            suggestions=error_dict['suggestions']
        )


class DefinitionError(TypesigError, TypeError):
    """Well-formed expression that cannot be turned into a predicate"""
    pass


class UnsupportedFeatureError(DefinitionError):
    def __init__(self, feature: str, message: str):
        self.feature = feature
        super().__init__(message)


class UnsupportedTypeError(DefinitionError):
    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Unsupported type annotation {kind}")


class NotAFunctionSignatureError(DefinitionError):
    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Expected valid function type definition, got {kind}")


class ValidationError(TypesigError, TypeError):
    """A guarded function or one of its calls broke the signature"""
    pass


class ArityMismatchError(ValidationError):
    def __init__(self, expected: int, received: Optional[int], message: Optional[str] = None):
        self.expected = expected
        self.received = received
        super().__init__(
            message or f"sig expected function of arity {expected} but received arity {received}"
        )


class ArgumentCountMismatchError(ValidationError):
    def __init__(self, expected: int, received: int):
        self.expected = expected
        self.received = received
        super().__init__(
            f"Expected function to be called with {expected} arguments but received {received}"
        )


class ArgumentTypeError(ValidationError):
    """Argument at 1-based ``index`` did not satisfy its parameter type"""
    def __init__(self, index: int, expected: str, value: Any = None):
        self.index = index
        self.expected = expected
        self.value = value
        super().__init__(f"Invalid {index}. argument, expected {expected}.")


class ReturnTypeError(ValidationError):
    """The wrapped function already ran; ``value`` holds what it returned"""
    def __init__(self, expected: str, value: Any = None):
        self.expected = expected
        self.value = value
        super().__init__(f"Invalid return value, expected {expected}.")
