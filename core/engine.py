# core/engine.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  CleanMissingData — Dataframe Engine                                      ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Narrow Capability Interface                                           ║
║  ✓ Partitioned pandas Implementation                                     ║
║  ✓ Mergeable Per-Partition Partials                                      ║
╚════════════════════════════════════════════════════════════════════════════╝

Capabilities:
```
    DataFrameEngine (ABC)
    ├── schema(dataset)                       → Schema
    ├── scan_aggregate(dataset, cols)         → means, one pass
    ├── approx_quantile(dataset, cols, p, ε)  → sketch-based quantiles
    ├── project_columns(dataset, aliases)     → copy columns under new names
    └── fill_nulls(dataset, values)           → replace null cells
```

``PandasEngine`` splits the rows into contiguous partitions, computes
partial results per partition (sum/count, quantile summaries) and merges
them, the way a distributed engine combines its workers' results.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from functools import reduce
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from config.constants import COLUMN_METADATA_ATTR
from config.logging_config import get_logger
from config.settings import settings
from core.quantile_sketch import QuantileSummary
from core.utils import is_nan
from utils.schema_utils import Schema, infer_schema

__all__ = ["DataFrameEngine", "PandasEngine", "get_default_engine"]


# ═══════════════════════════════════════════════════════════════════════════
# Interface
# ═══════════════════════════════════════════════════════════════════════════

class DataFrameEngine(ABC):
    """
    🔌 **Dataframe Engine Interface**

    Everything the imputer needs from the tabular engine. Implementations
    must not mutate the datasets they receive.
    """

    @abstractmethod
    def schema(self, dataset: Any) -> Schema:
        """Declared schema of ``dataset``."""

    @abstractmethod
    def scan_aggregate(self, dataset: Any, columns: Sequence[str]) -> List[float]:
        """Mean of the non-null values of each column (NaN when none)."""

    @abstractmethod
    def approx_quantile(
        self,
        dataset: Any,
        columns: Sequence[str],
        probability: float,
        relative_error: float
    ) -> List[float]:
        """Approximate quantile of each column (NaN when no values)."""

    @abstractmethod
    def project_columns(self, dataset: Any, aliases: Sequence[Tuple[str, str]]) -> Any:
        """All columns of ``dataset`` plus a copy of ``src`` named ``alias`` per pair."""

    @abstractmethod
    def fill_nulls(self, dataset: Any, values: Mapping[str, Any]) -> Any:
        """Replace null cells of each named column with its value."""


# ═══════════════════════════════════════════════════════════════════════════
# pandas Implementation
# ═══════════════════════════════════════════════════════════════════════════

class PandasEngine(DataFrameEngine):
    """
    🐼 **Partitioned pandas Engine**

    Args:
        num_partitions: Number of row partitions (defaults to settings)
        compress_threshold: Quantile summary compress threshold
        head_size: Quantile summary insert buffer size
    """

    def __init__(
        self,
        num_partitions: Optional[int] = None,
        compress_threshold: Optional[int] = None,
        head_size: Optional[int] = None
    ):
        self.num_partitions = int(num_partitions or settings.DEFAULT_NUM_PARTITIONS)
        if self.num_partitions < 1:
            raise ValueError(f"num_partitions must be >= 1, got {self.num_partitions}")

        self.compress_threshold = compress_threshold
        self.head_size = head_size

    @property
    def _log(self):
        return get_logger(__name__, component="PandasEngine")

    def __repr__(self) -> str:
        return f"PandasEngine(num_partitions={self.num_partitions})"

    # ───────────────────────────────────────────────────────────────────
    # Partitioning
    # ───────────────────────────────────────────────────────────────────

    def partitions(self, df: pd.DataFrame) -> Iterator[pd.DataFrame]:
        """Yield contiguous, non-empty row partitions."""
        n_rows = len(df)
        if n_rows == 0:
            return

        n_parts = min(self.num_partitions, n_rows)
        bounds = np.linspace(0, n_rows, n_parts + 1, dtype=int)

        for start, stop in zip(bounds[:-1], bounds[1:]):
            if stop > start:
                yield df.iloc[start:stop]

    @staticmethod
    def _as_float(series: pd.Series) -> np.ndarray:
        return series.to_numpy(dtype="float64", na_value=np.nan)

    # ───────────────────────────────────────────────────────────────────
    # Capabilities
    # ───────────────────────────────────────────────────────────────────

    def schema(self, dataset: pd.DataFrame) -> Schema:
        return infer_schema(dataset)

    def scan_aggregate(self, dataset: pd.DataFrame, columns: Sequence[str]) -> List[float]:
        columns = list(columns)
        sums = np.zeros(len(columns), dtype="float64")
        counts = np.zeros(len(columns), dtype="int64")
        n_parts = 0

        for part in self.partitions(dataset):
            n_parts += 1
            for i, col in enumerate(columns):
                values = self._as_float(part[col])
                present = values[~np.isnan(values)]
                sums[i] += present.sum()
                counts[i] += present.size

        means = [
            float(total / count) if count > 0 else float("nan")
            for total, count in zip(sums, counts)
        ]

        self._log.debug(
            f"Mean aggregation | cols={len(columns)} | partitions={n_parts} | "
            f"non_null={counts.tolist()}"
        )
        return means

    def approx_quantile(
        self,
        dataset: pd.DataFrame,
        columns: Sequence[str],
        probability: float,
        relative_error: float
    ) -> List[float]:
        columns = list(columns)
        per_column: List[List[QuantileSummary]] = [[] for _ in columns]

        for part in self.partitions(dataset):
            for i, col in enumerate(columns):
                summary = QuantileSummary(
                    relative_error=relative_error,
                    compress_threshold=self.compress_threshold,
                    head_size=self.head_size
                )
                per_column[i].append(summary.update(self._as_float(part[col])))

        results: List[float] = []
        for summaries in per_column:
            if not summaries:
                results.append(float("nan"))
                continue

            merged = reduce(lambda a, b: a.merge(b), summaries)
            value = merged.query(probability)
            results.append(float("nan") if value is None else float(value))

        self._log.debug(
            f"Quantile aggregation | p={probability} | eps={relative_error} | "
            f"cols={len(columns)}"
        )
        return results

    def project_columns(
        self,
        dataset: pd.DataFrame,
        aliases: Sequence[Tuple[str, str]]
    ) -> pd.DataFrame:
        out = dataset.copy()
        metadata: Dict[str, Any] = dict(dataset.attrs.get(COLUMN_METADATA_ATTR, {}) or {})

        for src, alias in aliases:
            # Always read from the untouched input
            out[alias] = dataset[src].copy()
            if src in metadata:
                metadata[alias] = dict(metadata[src])
            else:
                metadata.pop(alias, None)

        if metadata:
            out.attrs[COLUMN_METADATA_ATTR] = metadata

        return out

    def fill_nulls(self, dataset: pd.DataFrame, values: Mapping[str, Any]) -> pd.DataFrame:
        out = dataset.copy()
        filled: Dict[str, int] = {}

        for col, value in values.items():
            if col not in out.columns or value is None or is_nan(value):
                continue

            series = out[col]
            mask = series.isna()
            n_missing = int(mask.sum())
            if not n_missing:
                continue

            series = series.copy()
            series.loc[mask] = value
            out[col] = series
            filled[col] = n_missing

        self._log.debug(f"Filled null cells | {filled}")
        return out


def get_default_engine() -> PandasEngine:
    """Engine configured from settings."""
    return PandasEngine()
