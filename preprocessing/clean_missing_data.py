# preprocessing/clean_missing_data.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  CleanMissingData — Estimator & Model                                     ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Mean / Approximate Median / Custom Literal Replacement                ║
║  ✓ Type Validation Before Any Aggregation                                ║
║  ✓ Copy-or-Rename Column Mapping                                         ║
║  ✓ Null-Only Fill, Other Cells Untouched                                 ║
║  ✓ Persistable, Immutable Fitted Model                                   ║
╚════════════════════════════════════════════════════════════════════════════╝

Architecture:
    ┌─────────────────────────────────────────────────────────────┐
    │  CleanMissingData (estimator)                               │
    ├─────────────────────────────────────────────────────────────┤
    │  1. Validate column mapping and mode                        │
    │  2. Validate column types for the mode                      │
    │  3. One aggregation call (ColumnStatEngine)                 │
    │  4. Build CleanMissingDataModel                             │
    └─────────────────────────────────────────────────────────────┘
    ┌─────────────────────────────────────────────────────────────┐
    │  CleanMissingDataModel (fitted)                             │
    ├─────────────────────────────────────────────────────────────┤
    │  1. Coerce replacement values to output column types        │
    │  2. Copy input columns to output columns                    │
    │  3. Fill null cells of the output columns                   │
    │  4. Save / load                                             │
    └─────────────────────────────────────────────────────────────┘

Usage:
```python
    from preprocessing import CleanMissingData, CleanMissingDataModel

    imputer = CleanMissingData(
        input_cols=["age", "income"],
        output_cols=["age_clean", "income_clean"],
        cleaning_mode="Median"
    )
    model = imputer.fit(train_df)
    test_clean = model.transform(test_df)

    model.save("models/cleaner")
    restored = CleanMissingDataModel.load("models/cleaner")
```
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import TypeAdapter, ValidationError
from sklearn.base import BaseEstimator

from config.constants import CUSTOM_FILL_TYPES, NUMERIC_TYPES, CleaningMode
from config.logging_config import get_logger, log_execution_time
from config.settings import settings
from core.engine import DataFrameEngine, get_default_engine
from core.exceptions import ConfigurationError, UnsupportedTypeError
from core.utils import as_column_tuple, duplicates, random_uid
from preprocessing.column_stats import ColumnStatEngine
from preprocessing.replacement import (
    ReplacementValue,
    coerce_for_column,
    values_equal,
)
from utils.schema_utils import Schema, project_schema

__all__ = ["CleanMissingData", "CleanMissingDataModel"]

_REPLACEMENT_ADAPTER = TypeAdapter(ReplacementValue)


# ═══════════════════════════════════════════════════════════════════════════
# Shared Validation
# ═══════════════════════════════════════════════════════════════════════════

def _column_mapping(
    input_cols: Any,
    output_cols: Any
) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    inputs = as_column_tuple(input_cols, "inputCols")
    outputs = as_column_tuple(output_cols, "outputCols")

    if len(inputs) != len(outputs):
        raise ConfigurationError(
            "inputCols and outputCols must have the same length",
            details={"input_cols": list(inputs), "output_cols": list(outputs)}
        )

    dupes = duplicates(outputs)
    if dupes:
        raise ConfigurationError(
            "outputCols must not contain duplicates",
            details={"duplicates": dupes}
        )

    return inputs, outputs


def _require_columns(schema: Schema, columns: Sequence[str]) -> None:
    missing = [c for c in columns if c not in schema]
    if missing:
        raise ConfigurationError(
            f"Columns not found in dataset: {missing}",
            details={"missing": missing, "available": list(schema.names)}
        )


# ═══════════════════════════════════════════════════════════════════════════
# Estimator
# ═══════════════════════════════════════════════════════════════════════════

class CleanMissingData(BaseEstimator):
    """
    🧹 **Missing Value Imputer**

    Learns one replacement value per input column and returns a
    :class:`CleanMissingDataModel` that fills the null cells.

    Modes:
      • Mean   → exact mean of the non-null values (numeric columns)
      • Median → approximate median within ``relative_error`` (numeric columns)
      • Custom → ``custom_value`` parsed per column type
                 (numeric, string and boolean columns)

    Args:
        input_cols: Columns to read
        output_cols: Columns to write, paired by position with ``input_cols``
        cleaning_mode: "Mean", "Median" or "Custom" (case-insensitive)
        custom_value: Literal used in Custom mode
        relative_error: Median accuracy (defaults to settings)
        engine: Dataframe engine (defaults to a PandasEngine)
        uid: Identifier (generated when omitted)
    """

    def __init__(
        self,
        input_cols: Optional[Sequence[str]] = None,
        output_cols: Optional[Sequence[str]] = None,
        cleaning_mode: str = CleaningMode.MEAN.value,
        custom_value: Optional[str] = None,
        relative_error: Optional[float] = None,
        engine: Optional[DataFrameEngine] = None,
        uid: Optional[str] = None
    ):
        self.input_cols = input_cols
        self.output_cols = output_cols
        self.cleaning_mode = cleaning_mode
        self.custom_value = custom_value
        self.relative_error = relative_error
        self.engine = engine
        self.uid = uid or random_uid(type(self).__name__)

    @property
    def _log(self):
        return get_logger(__name__, component="CleanMissingData", uid=self.uid)

    # ───────────────────────────────────────────────────────────────────
    # Parameter Resolution
    # ───────────────────────────────────────────────────────────────────

    def _resolve_mode(self) -> CleaningMode:
        try:
            mode = CleaningMode.parse(self.cleaning_mode)
        except ValueError as e:
            raise ConfigurationError(
                str(e),
                details={"cleaning_mode": self.cleaning_mode},
                cause=e
            ) from e

        if mode == CleaningMode.CUSTOM:
            if self.custom_value is None:
                raise ConfigurationError("customValue must be set in Custom mode")
            if not isinstance(self.custom_value, str):
                raise ConfigurationError(
                    "customValue must be a string literal",
                    details={"custom_value": repr(self.custom_value)}
                )

        return mode

    def _resolve_relative_error(self) -> float:
        eps = settings.MEDIAN_RELATIVE_ERROR if self.relative_error is None else self.relative_error
        if not 0.0 < float(eps) < 1.0:
            raise ConfigurationError(
                "relativeError must be in (0, 1)",
                details={"relative_error": eps}
            )
        return float(eps)

    def _resolve_engine(self) -> DataFrameEngine:
        return self.engine if self.engine is not None else get_default_engine()

    @staticmethod
    def _verify_types(schema: Schema, columns: Sequence[str], mode: CleaningMode) -> None:
        """All columns are checked before any aggregation runs."""
        allowed = NUMERIC_TYPES if mode != CleaningMode.CUSTOM else CUSTOM_FILL_TYPES
        bad = {c: schema[c].dtype.value for c in columns if schema[c].dtype not in allowed}

        if not bad:
            return

        if mode == CleaningMode.CUSTOM:
            message = "Only numeric, string and boolean types supported for custom values"
        else:
            message = "Only numeric types supported for numeric imputation"

        raise UnsupportedTypeError(message, details={"columns": bad, "mode": mode.value})

    # ───────────────────────────────────────────────────────────────────
    # Fit
    # ───────────────────────────────────────────────────────────────────

    @log_execution_time
    def fit(self, dataset, y=None) -> "CleanMissingDataModel":
        """
        Compute replacement values and return the fitted model.

        Raises:
            ConfigurationError: bad column mapping, unknown mode or column,
                missing or unparseable custom value
            UnsupportedTypeError: column type not allowed for the mode
        """
        input_cols, output_cols = _column_mapping(self.input_cols, self.output_cols)
        mode = self._resolve_mode()
        relative_error = self._resolve_relative_error()
        engine = self._resolve_engine()

        schema = engine.schema(dataset)
        _require_columns(schema, input_cols)
        self._verify_types(schema, input_cols, mode)

        self._log.info(f"Fitting | mode={mode.value} | columns={list(input_cols)}")

        stats = ColumnStatEngine(engine, relative_error=relative_error)
        values = stats.compute(
            dataset,
            input_cols,
            mode,
            custom_value=self.custom_value,
            schema=schema
        )

        model = CleanMissingDataModel(
            uid=self.uid,
            replacement_values=dict(zip(output_cols, values)),
            input_cols=input_cols,
            output_cols=output_cols,
            engine=engine
        )

        self._log.success(f"Fitted {len(values)} replacement value(s)")
        return model

    def fit_transform(self, dataset, y=None):
        return self.fit(dataset).transform(dataset)

    # ───────────────────────────────────────────────────────────────────
    # Schema / Copy
    # ───────────────────────────────────────────────────────────────────

    def transform_schema(self, schema: Schema) -> Schema:
        input_cols, output_cols = _column_mapping(self.input_cols, self.output_cols)
        return project_schema(schema, input_cols, output_cols)

    def copy(self, **overrides: Any) -> "CleanMissingData":
        """New estimator with the same uid and parameters, ``overrides`` applied."""
        params = self.get_params(deep=False)
        unknown = sorted(set(overrides) - set(params))
        if unknown:
            raise ConfigurationError(
                f"Unknown parameters: {unknown}",
                details={"valid": sorted(params)}
            )
        params.update(overrides)
        return type(self)(**params)


# ═══════════════════════════════════════════════════════════════════════════
# Fitted Model
# ═══════════════════════════════════════════════════════════════════════════

class CleanMissingDataModel:
    """
    📦 **Fitted Missing Value Model**

    Immutable. Holds one replacement value per output column and applies
    them to any dataset that has the input columns.
    """

    def __init__(
        self,
        uid: str,
        replacement_values: Mapping[str, Any],
        input_cols: Sequence[str],
        output_cols: Sequence[str],
        engine: Optional[DataFrameEngine] = None
    ):
        if not isinstance(uid, str) or not uid:
            raise ConfigurationError("uid must be a non-empty string")

        inputs, outputs = _column_mapping(input_cols, output_cols)

        keys = set(replacement_values)
        if keys != set(outputs):
            raise ConfigurationError(
                "replacement values must cover exactly the output columns",
                details={
                    "missing": sorted(set(outputs) - keys),
                    "unexpected": sorted(str(k) for k in keys - set(outputs)),
                }
            )

        values: Dict[str, ReplacementValue] = {}
        for col in outputs:
            try:
                values[col] = _REPLACEMENT_ADAPTER.validate_python(replacement_values[col])
            except ValidationError as e:
                raise ConfigurationError(
                    f"Invalid replacement value for column '{col}'",
                    details={"column": col, "value": repr(replacement_values[col])},
                    cause=e
                ) from e

        self._uid = uid
        self._input_cols = inputs
        self._output_cols = outputs
        self._replacement_values = MappingProxyType(values)
        self._engine = engine

    # ───────────────────────────────────────────────────────────────────
    # Accessors
    # ───────────────────────────────────────────────────────────────────

    @property
    def uid(self) -> str:
        return self._uid

    @property
    def input_cols(self) -> Tuple[str, ...]:
        return self._input_cols

    @property
    def output_cols(self) -> Tuple[str, ...]:
        return self._output_cols

    @property
    def replacement_values(self) -> Mapping[str, ReplacementValue]:
        """Read-only mapping output column → replacement value."""
        return self._replacement_values

    @property
    def fill_values(self) -> Dict[str, Any]:
        """Plain scalars of the replacement values."""
        return {col: rv.value for col, rv in self._replacement_values.items()}

    @property
    def engine(self) -> DataFrameEngine:
        return self._engine if self._engine is not None else get_default_engine()

    @property
    def _log(self):
        return get_logger(__name__, component="CleanMissingDataModel", uid=self._uid)

    # ───────────────────────────────────────────────────────────────────
    # Transform
    # ───────────────────────────────────────────────────────────────────

    def transform_schema(self, schema: Schema) -> Schema:
        return project_schema(schema, self._input_cols, self._output_cols)

    def _fill_scalars(self, out_schema: Schema) -> Dict[str, Any]:
        scalars: Dict[str, Any] = {}
        for col in self._output_cols:
            scalar = coerce_for_column(self._replacement_values[col], out_schema[col].dtype, col)
            if scalar is not None:
                scalars[col] = scalar
        return scalars

    @log_execution_time
    def transform(self, dataset):
        """
        Copy input columns to output columns and fill their null cells.

        The input dataset is never modified.

        Raises:
            ConfigurationError: an input column is missing, or a text value
                does not parse as its column type
            UnsupportedTypeError: a value cannot fill its column type
        """
        engine = self.engine
        schema = engine.schema(dataset)
        _require_columns(schema, self._input_cols)

        out_schema = self.transform_schema(schema)
        scalars = self._fill_scalars(out_schema)

        aliases: List[Tuple[str, str]] = [
            (i, o) for i, o in zip(self._input_cols, self._output_cols) if i != o
        ]
        projected = engine.project_columns(dataset, aliases)

        self._log.info(
            f"Transforming | copied={len(aliases)} | filling={list(scalars)}"
        )
        return engine.fill_nulls(projected, scalars)

    # ───────────────────────────────────────────────────────────────────
    # Copy / Equality
    # ───────────────────────────────────────────────────────────────────

    def copy(self) -> "CleanMissingDataModel":
        return CleanMissingDataModel(
            uid=self._uid,
            replacement_values=dict(self._replacement_values),
            input_cols=self._input_cols,
            output_cols=self._output_cols,
            engine=self._engine
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CleanMissingDataModel):
            return NotImplemented
        return (
            self._uid == other._uid
            and self._input_cols == other._input_cols
            and self._output_cols == other._output_cols
            and all(
                values_equal(self._replacement_values[c], other._replacement_values[c])
                for c in self._output_cols
            )
        )

    def __hash__(self) -> int:
        return hash((self._uid, self._input_cols, self._output_cols))

    def __repr__(self) -> str:
        values = ", ".join(f"{c}={rv.kind}:{rv.value}" for c, rv in self._replacement_values.items())
        return f"CleanMissingDataModel(uid='{self._uid}', {values})"

    # ───────────────────────────────────────────────────────────────────
    # Persistence
    # ───────────────────────────────────────────────────────────────────

    def write(self, store=None):
        """Writer for this model; call ``.overwrite()`` then ``.save(path)``."""
        from preprocessing.persistence import CleanMissingDataModelWriter
        return CleanMissingDataModelWriter(self, store=store)

    def save(self, path: str, overwrite: bool = False, store=None) -> str:
        writer = self.write(store=store)
        if overwrite:
            writer.overwrite()
        return writer.save(path)

    @classmethod
    def load(cls, path: str, store=None) -> "CleanMissingDataModel":
        from preprocessing.persistence import CleanMissingDataModelReader
        return CleanMissingDataModelReader(store=store).load(path)
