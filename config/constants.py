# config/constants.py
"""
Constants shared by the estimator, the model and the artifact format.
"""

from __future__ import annotations

from enum import Enum
from typing import FrozenSet, Tuple


# ═══════════════════════════════════════════════════════════════════════════
# Cleaning Modes
# ═══════════════════════════════════════════════════════════════════════════

class CleaningMode(str, Enum):
    """How a replacement value is derived for each column."""
    MEAN = "Mean"
    MEDIAN = "Median"
    CUSTOM = "Custom"

    @classmethod
    def parse(cls, value: "str | CleaningMode") -> "CleaningMode":
        """Resolve a mode from its name, case-insensitively."""
        if isinstance(value, CleaningMode):
            return value
        normalized = str(value).strip().lower()
        for mode in cls:
            if mode.value.lower() == normalized:
                return mode
        raise ValueError(
            f"Unsupported cleaning mode '{value}'. "
            f"Allowed: {', '.join(m.value for m in cls)}"
        )


# ═══════════════════════════════════════════════════════════════════════════
# Column Types
# ═══════════════════════════════════════════════════════════════════════════

class ColumnType(str, Enum):
    """Declared type of a dataset column."""
    INTEGER = "integer"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    STRING = "string"
    BOOLEAN = "boolean"
    DATE = "date"
    TIMESTAMP = "timestamp"
    OTHER = "other"


NUMERIC_TYPES: FrozenSet[ColumnType] = frozenset({
    ColumnType.INTEGER,
    ColumnType.LONG,
    ColumnType.FLOAT,
    ColumnType.DOUBLE,
})

INTEGRAL_TYPES: FrozenSet[ColumnType] = frozenset({
    ColumnType.INTEGER,
    ColumnType.LONG,
})

# Types a custom literal can be reinterpreted into
CUSTOM_FILL_TYPES: FrozenSet[ColumnType] = NUMERIC_TYPES | {ColumnType.STRING, ColumnType.BOOLEAN}

TRUE_TOKENS: FrozenSet[str] = frozenset({"true", "t", "yes", "y", "1"})
FALSE_TOKENS: FrozenSet[str] = frozenset({"false", "f", "no", "n", "0"})


# ═══════════════════════════════════════════════════════════════════════════
# Artifact Layout
# ═══════════════════════════════════════════════════════════════════════════

METADATA_PART = "metadata"
REPLACEMENT_VALUES_PART = "replacementValues"
INPUT_COLS_PART = "inputCols"
OUTPUT_COLS_PART = "outputCols"
DATA_PART = "data"

ARTIFACT_PARTS: Tuple[str, ...] = (
    METADATA_PART,
    REPLACEMENT_VALUES_PART,
    INPUT_COLS_PART,
    OUTPUT_COLS_PART,
    DATA_PART,
)

# DataFrame.attrs key holding per-column metadata dicts
COLUMN_METADATA_ATTR = "column_metadata"

UID_HEX_LENGTH = 12
