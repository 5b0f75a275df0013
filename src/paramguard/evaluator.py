"""Type-spec evaluation.

`check_key` decides whether one raw request value satisfies one TypeSpec. It
is pure and total: it never raises and never mutates its input.

Raw values come from a query-string or body parser and are classified into a
closed set of kinds before any rule looks at them. A key that was not present
in the input is represented by the `MISSING` sentinel, which is distinct from
``None`` (an explicit JSON ``null``).
"""

import enum
import logging
import math
import re
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from .errors import TypeSpecError
from .models import AlternationSpec, PatternSpec, PrimitiveSpec, parse_type_spec

logger = logging.getLogger(__name__)


class _Missing:
    """Sentinel for a key that is not present in the input mapping."""

    _instance = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class ValueKind(enum.Enum):
    ABSENT = "absent"
    NULL = "null"
    EMPTY = "empty"
    TEXT = "text"
    LIST = "list"
    MAP = "map"
    BOOL = "bool"
    OTHER = "other"


def classify(value: Any) -> ValueKind:
    """Classify a raw value into its ValueKind."""
    if value is MISSING:
        return ValueKind.ABSENT
    if value is None:
        return ValueKind.NULL
    if isinstance(value, str):
        return ValueKind.TEXT if value else ValueKind.EMPTY
    # bool before anything numeric, bool is an int subclass
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, (list, tuple)):
        return ValueKind.LIST
    if isinstance(value, Mapping):
        return ValueKind.MAP
    return ValueKind.OTHER


# U+0000-U+0008, U+000E-U+001F and U+007F-U+009F are control characters
# (NUL, BACKSPACE, DEL, C1 controls...). Tab, LF, VT, FF and CR are allowed.
_CONTROL_CHARACTERS = re.compile("[\x00-\x08\x0e-\x1f\x7f-\x9f]")

# ASCII digits only. No hex/octal/binary prefixes, no digit separators, no inf/nan.
_NUMBER_LITERAL = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

_WHITESPACE = " \t\n\v\f\r"


def parse_number(text: str) -> Decimal | None:
    """Parse a decimal literal, or return None.

    The whole string must be numeric, surrounding whitespace aside. The result
    is returned only if it is finite as a float: ``"1e400"`` overflows and is
    rejected just like ``"Infinity"``.
    """
    literal = text.strip(_WHITESPACE)
    if not _NUMBER_LITERAL.fullmatch(literal):
        return None
    number = Decimal(literal)
    if not math.isfinite(float(number)):
        return None
    return number


def _is_integral(number: Decimal) -> bool:
    return number == number.to_integral_value()


def _check_primitive(value: Any, spec: PrimitiveSpec) -> bool:
    kind = classify(value)

    if spec.optional and kind in (ValueKind.ABSENT, ValueKind.EMPTY, ValueKind.NULL):
        return True

    name = spec.name
    if name == "null":
        return kind is ValueKind.NULL
    if name == "array":
        return kind is ValueKind.LIST
    if name == "string":
        return kind is ValueKind.TEXT and _CONTROL_CHARACTERS.search(value) is None
    if name == "boolean":
        # a checkbox is either present ("1") or absent; native booleans are
        # accepted for API clients
        return kind in (ValueKind.ABSENT, ValueKind.EMPTY, ValueKind.BOOL) or (
            kind is ValueKind.TEXT and value == "1"
        )
    if name == "number":
        return kind is ValueKind.TEXT and parse_number(value) is not None
    if name == "integer":
        if kind is not ValueKind.TEXT:
            return False
        number = parse_number(value)
        return number is not None and _is_integral(number)
    if name == "object":
        return kind is ValueKind.MAP

    logger.debug(f"Unknown primitive type '{name}' never accepts")
    return False


def _check_pattern(value: Any, spec: PatternSpec) -> bool:
    if value is MISSING:
        value = ""
    if not isinstance(value, str):
        return False
    return spec.pattern.search(value) is not None


def check_key(value: Any, spec: Any) -> bool:
    """Check whether a raw value satisfies a type declaration.

    Args:
        value: The raw value, or MISSING when the key is not present
        spec: A parsed TypeSpec, or a raw declaration (parsed on the fly)

    Returns:
        True if the value is accepted
    """
    if not isinstance(spec, (PrimitiveSpec, PatternSpec, AlternationSpec)):
        try:
            spec = parse_type_spec(spec)
        except TypeSpecError as e:
            logger.debug(f"Rejecting value for malformed declaration: {e}")
            return False

    if isinstance(spec, AlternationSpec):
        return any(check_key(value, option) for option in spec.options)
    if isinstance(spec, PatternSpec):
        return _check_pattern(value, spec)
    return _check_primitive(value, spec)
