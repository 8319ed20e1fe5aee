"""
Literal value handling for the converter.

Literals are the only values the converter ever evaluates. This module maps
them to JSON values, coerces them to strings for template text, and folds
unary operators applied to them. Conversions follow HCL's type rules:
strings holding numbers or booleans convert to those types, nothing
converts to or from null.

Numbers are ``int`` when integral and ``Decimal`` otherwise, so no digits
written in the source are lost on the way to JSON.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from hcljson.core.errors import ConversionError, EvaluationError
from hcljson.core.ir.syntax import UnaryOperator

Number = int | Decimal
Scalar = int | Decimal | str | bool | None


def _normalize(value: Decimal) -> Number:
    if value == value.to_integral_value():
        return int(value)
    return value


def to_json_value(value: Scalar) -> Any:
    """Map a literal value to its JSON-compatible Python value."""
    if isinstance(value, Decimal):
        return _normalize(value)
    return value


def format_number(value: int | float | Decimal) -> str:
    """Canonical decimal text for a number, never in exponent form."""
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        value = Decimal(repr(value))
    if value == value.to_integral_value():
        return str(int(value))
    return format(value, "f").rstrip("0")


def to_string(value: Scalar) -> str:
    """Coerce a literal value to template text.

    Raises:
        ConversionError: If the value is null.
    """
    if value is None:
        raise ConversionError("Invalid template interpolation value: null cannot be converted to string")
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | Decimal):
        return format_number(value)
    return value


def to_number(value: Scalar) -> Number:
    """Convert a literal to a number, as required by arithmetic operators.

    Raises:
        EvaluationError: If the value has no numeric interpretation.
    """
    if isinstance(value, bool) or value is None:
        raise EvaluationError(f"Invalid operand: a number is required, got {_type_name(value)}")
    if isinstance(value, int):
        return value
    if isinstance(value, Decimal):
        return _normalize(value)
    try:
        parsed = Decimal(value.strip())
    except InvalidOperation:
        raise EvaluationError(f"Invalid operand: cannot convert {value!r} to number") from None
    if not parsed.is_finite():
        raise EvaluationError(f"Invalid operand: cannot convert {value!r} to number")
    return _normalize(parsed)


def to_bool(value: Scalar) -> bool:
    """Convert a literal to a bool, as required by logical operators.

    Raises:
        EvaluationError: If the value has no boolean interpretation.
    """
    if isinstance(value, bool):
        return value
    if value == "true":
        return True
    if value == "false":
        return False
    raise EvaluationError(f"Invalid operand: a bool is required, got {_type_name(value)}")


def apply_unary(op: UnaryOperator, value: Scalar) -> Scalar:
    """Fold a unary operator over a literal operand."""
    if op == UnaryOperator.NEGATE:
        number = to_number(value)
        if isinstance(number, Decimal):
            # copy_negate is exact; unary minus would round to the context precision
            return number.copy_negate()
        return -number
    if op == UnaryOperator.NOT:
        return not to_bool(value)
    raise EvaluationError(f"Unsupported unary operator: {op}")


def _type_name(value: Scalar) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int | Decimal):
        return "number"
    return "string"
