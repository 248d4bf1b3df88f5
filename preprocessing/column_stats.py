# preprocessing/column_stats.py
"""
Per-column replacement statistics.

Every mode issues at most one engine call for all requested columns, so a
partitioned dataset is scanned once per fit.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

from config.constants import CleaningMode
from config.logging_config import get_logger
from config.settings import settings
from core.engine import DataFrameEngine
from preprocessing.replacement import DoubleValue, ReplacementValue, from_literal
from utils.schema_utils import Schema


class ColumnStatEngine:
    """
    Computes one replacement value per column for a cleaning mode.

    Args:
        engine: Dataframe engine used for the aggregation
        relative_error: Median sketch accuracy (defaults to settings)
    """

    def __init__(self, engine: DataFrameEngine, relative_error: Optional[float] = None):
        self.engine = engine
        self.relative_error = float(
            settings.MEDIAN_RELATIVE_ERROR if relative_error is None else relative_error
        )
        self._log = get_logger(__name__, component="ColumnStatEngine")

    def _as_doubles(self, columns: Sequence[str], values: Sequence[float], stat: str) -> List[ReplacementValue]:
        result: List[ReplacementValue] = []
        for col, value in zip(columns, values):
            if math.isnan(value):
                self._log.warning(f"Column '{col}' has no non-null values, {stat} is NaN")
            result.append(DoubleValue(value=value))
        return result

    def means(self, dataset, columns: Sequence[str]) -> List[ReplacementValue]:
        """Exact mean of the non-null values of each column."""
        values = self.engine.scan_aggregate(dataset, columns)
        return self._as_doubles(columns, values, "mean")

    def approx_medians(self, dataset, columns: Sequence[str]) -> List[ReplacementValue]:
        """Approximate median of each column within ``relative_error``."""
        values = self.engine.approx_quantile(dataset, columns, 0.5, self.relative_error)
        return self._as_doubles(columns, values, "median")

    @staticmethod
    def custom_values(literal: str, columns: Sequence[str], schema: Schema) -> List[ReplacementValue]:
        """The custom literal interpreted per column type (no scan)."""
        return [from_literal(literal, schema[col].dtype, col) for col in columns]

    def compute(
        self,
        dataset,
        columns: Sequence[str],
        mode: CleaningMode,
        custom_value: Optional[str] = None,
        schema: Optional[Schema] = None
    ) -> List[ReplacementValue]:
        """Replacement values for ``columns``, in the same order."""
        if mode == CleaningMode.MEAN:
            return self.means(dataset, columns)

        if mode == CleaningMode.MEDIAN:
            return self.approx_medians(dataset, columns)

        if schema is None:
            schema = self.engine.schema(dataset)
        return self.custom_values(custom_value, columns, schema)
