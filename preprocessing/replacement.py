# preprocessing/replacement.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  CleanMissingData — Replacement Values                                    ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Tagged Union: DoubleValue | TextValue | BooleanValue                  ║
║  ✓ Custom Literal Interpretation per Column Type                         ║
║  ✓ Fill-Time Coercion to the Declared Column Type                        ║
╚════════════════════════════════════════════════════════════════════════════╝

Coercion at fill time:
```
    DoubleValue  → FLOAT/DOUBLE as float, INTEGER/LONG truncated toward zero
    TextValue    → STRING verbatim, exact integer or numeric parse, boolean token parse
    BooleanValue → BOOLEAN verbatim, STRING as "true"/"false"
```
A NaN double leaves the cells missing. DATE, TIMESTAMP and OTHER columns
never receive a value.
"""

from __future__ import annotations

import math
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr

from config.constants import (
    FALSE_TOKENS,
    INTEGRAL_TYPES,
    NUMERIC_TYPES,
    TRUE_TOKENS,
    ColumnType,
)
from core.exceptions import ConfigurationError, UnsupportedTypeError
from core.utils import is_nan

__all__ = [
    "DoubleValue",
    "TextValue",
    "BooleanValue",
    "ReplacementValue",
    "ReplacementRecord",
    "parse_number",
    "parse_integer",
    "parse_boolean",
    "from_literal",
    "coerce_for_column",
    "values_equal",
]


# ═══════════════════════════════════════════════════════════════════════════
# Tagged Union
# ═══════════════════════════════════════════════════════════════════════════

class DoubleValue(BaseModel):
    """Numeric replacement (mean, median, or a custom literal on a numeric column)."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["double"] = "double"
    value: float


class TextValue(BaseModel):
    """Text replacement for string columns."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    value: StrictStr


class BooleanValue(BaseModel):
    """Boolean replacement for boolean columns."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["boolean"] = "boolean"
    value: StrictBool


ReplacementValue = Annotated[
    Union[DoubleValue, TextValue, BooleanValue],
    Field(discriminator="kind")
]


class ReplacementRecord(BaseModel):
    """One entry of the persisted ``replacementValues`` part."""
    model_config = ConfigDict(frozen=True)

    column: StrictStr
    replacement: ReplacementValue


# ═══════════════════════════════════════════════════════════════════════════
# Literal Parsing
# ═══════════════════════════════════════════════════════════════════════════

def parse_number(text: str, column: str) -> float:
    try:
        return float(text.strip())
    except (AttributeError, ValueError) as e:
        raise ConfigurationError(
            f"Value '{text}' is not a valid number for column '{column}'",
            details={"column": column, "value": text},
            cause=e
        ) from e


def parse_integer(text: str) -> Optional[int]:
    """Exact integer value of ``text``, or None when it is not an integer token."""
    try:
        return int(str(text).strip())
    except ValueError:
        return None


def parse_boolean(text: str, column: str) -> bool:
    token = str(text).strip().lower()

    if token in TRUE_TOKENS:
        return True
    if token in FALSE_TOKENS:
        return False

    raise ConfigurationError(
        f"Value '{text}' is not a valid boolean for column '{column}'",
        details={
            "column": column,
            "value": text,
            "accepted": sorted(TRUE_TOKENS | FALSE_TOKENS),
        }
    )


def from_literal(literal: str, dtype: ColumnType, column: str) -> ReplacementValue:
    """
    Interpret a custom literal for a column of type ``dtype``.

    Raises:
        ConfigurationError: literal does not parse as the column type
        UnsupportedTypeError: column type cannot take a custom value
    """
    if dtype in INTEGRAL_TYPES and parse_integer(literal) is not None:
        # Kept as text so integers beyond float precision fill exactly
        return TextValue(value=literal.strip())

    if dtype in NUMERIC_TYPES:
        return DoubleValue(value=parse_number(literal, column))

    if dtype == ColumnType.BOOLEAN:
        return BooleanValue(value=parse_boolean(literal, column))

    if dtype == ColumnType.STRING:
        return TextValue(value=literal)

    raise UnsupportedTypeError(
        f"Column '{column}' of type {dtype.value} cannot be filled with a custom value",
        details={"column": column, "type": dtype.value}
    )


# ═══════════════════════════════════════════════════════════════════════════
# Fill-Time Coercion
# ═══════════════════════════════════════════════════════════════════════════

def _unsupported(value: ReplacementValue, dtype: ColumnType, column: str) -> UnsupportedTypeError:
    return UnsupportedTypeError(
        f"Cannot fill column '{column}' of type {dtype.value} with a {value.kind} value",
        details={"column": column, "type": dtype.value, "kind": value.kind}
    )


def _numeric_for(number: float, dtype: ColumnType, column: str) -> Optional[Union[int, float]]:
    if math.isnan(number):
        return None

    if dtype in INTEGRAL_TYPES:
        if math.isinf(number):
            raise ConfigurationError(
                f"Infinite value cannot fill integral column '{column}'",
                details={"column": column, "value": number}
            )
        return math.trunc(number)

    return float(number)


def coerce_for_column(value: ReplacementValue, dtype: ColumnType, column: str) -> Any:
    """
    Scalar to write into the null cells of ``column``.

    Returns None when the cells must stay missing (NaN double).
    """
    if isinstance(value, DoubleValue):
        if dtype not in NUMERIC_TYPES:
            raise _unsupported(value, dtype, column)
        return _numeric_for(value.value, dtype, column)

    if isinstance(value, TextValue):
        if dtype == ColumnType.STRING:
            return value.value
        if dtype in INTEGRAL_TYPES and parse_integer(value.value) is not None:
            return parse_integer(value.value)
        if dtype in NUMERIC_TYPES:
            return _numeric_for(parse_number(value.value, column), dtype, column)
        if dtype == ColumnType.BOOLEAN:
            return parse_boolean(value.value, column)
        raise _unsupported(value, dtype, column)

    if isinstance(value, BooleanValue):
        if dtype == ColumnType.BOOLEAN:
            return value.value
        if dtype == ColumnType.STRING:
            return "true" if value.value else "false"
        raise _unsupported(value, dtype, column)

    raise TypeError(f"Not a replacement value: {value!r}")


# ═══════════════════════════════════════════════════════════════════════════
# Comparison
# ═══════════════════════════════════════════════════════════════════════════

def values_equal(left: ReplacementValue, right: ReplacementValue) -> bool:
    """Equality where a NaN double equals a NaN double."""
    if left.kind != right.kind:
        return False
    if is_nan(left.value) and is_nan(right.value):
        return True
    return left.value == right.value
