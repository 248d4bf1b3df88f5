"""
CleanMissingData - Utility Functions
Common helpers used by the estimator, the model and the persistence layer
"""

from __future__ import annotations

import math
from typing import Any, Iterable, List, Optional, Tuple
from uuid import uuid4

from config.constants import UID_HEX_LENGTH
from core.exceptions import ConfigurationError


# ---------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------
def random_uid(prefix: str) -> str:
    """Generate an identifier such as ``CleanMissingData_4f1c2a9b0d3e``."""
    return f"{prefix}_{uuid4().hex[:UID_HEX_LENGTH]}"


# ---------------------------------------------------------------------
# Column lists
# ---------------------------------------------------------------------
def as_column_tuple(columns: Optional[Iterable[str]], label: str) -> Tuple[str, ...]:
    """
    Normalize a column list parameter.

    A bare string is treated as a single column name.
    """
    if columns is None:
        raise ConfigurationError(f"{label} must be set")

    if isinstance(columns, str):
        columns = [columns]

    result = tuple(columns)

    if not result:
        raise ConfigurationError(f"{label} must contain at least one column")

    bad = [c for c in result if not isinstance(c, str) or not c]
    if bad:
        raise ConfigurationError(
            f"{label} must contain non-empty column names",
            details={"invalid": [repr(c) for c in bad]}
        )

    return result


def duplicates(values: Iterable[str]) -> List[str]:
    """Return values occurring more than once, in first-seen order."""
    seen: set = set()
    dupes: List[str] = []
    for v in values:
        if v in seen and v not in dupes:
            dupes.append(v)
        seen.add(v)
    return dupes


# ---------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------
def is_nan(value: Any) -> bool:
    """True for float NaN (and numpy floating NaN), False for everything else."""
    return isinstance(value, float) and math.isnan(value)
