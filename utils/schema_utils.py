from __future__ import annotations

from dataclasses import dataclass, field, replace
from functools import reduce
from typing import Any, Dict, Iterator, Mapping, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from config.constants import COLUMN_METADATA_ATTR, ColumnType
from core.exceptions import ConfigurationError


@dataclass(frozen=True)
class StructField:
    """Declared schema of a single column"""
    name: str
    dtype: ColumnType
    nullable: bool = True
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def renamed(self, name: str) -> "StructField":
        return replace(self, name=name, metadata=dict(self.metadata))


@dataclass(frozen=True)
class Schema:
    """Ordered, immutable list of fields"""
    fields: Tuple[StructField, ...] = ()

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __iter__(self) -> Iterator[StructField]:
        return iter(self.fields)

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def __getitem__(self, key: Union[str, int]) -> StructField:
        if isinstance(key, int):
            return self.fields[key]
        return self.fields[self.index_of(key)]

    def index_of(self, name: str) -> int:
        """Position of a field, ConfigurationError if absent"""
        try:
            return self.names.index(name)
        except ValueError:
            raise ConfigurationError(
                f"Column '{name}' does not exist",
                details={"column": name, "available": list(self.names)}
            ) from None

    def add(self, struct_field: StructField) -> "Schema":
        return Schema(self.fields + (struct_field,))

    def replace_at(self, index: int, struct_field: StructField) -> "Schema":
        fields = list(self.fields)
        fields[index] = struct_field
        return Schema(tuple(fields))


_OBJECT_INFERRED_TYPES: Dict[str, ColumnType] = {
    "string": ColumnType.STRING,
    "empty": ColumnType.STRING,
    "boolean": ColumnType.BOOLEAN,
    "integer": ColumnType.LONG,
    "floating": ColumnType.DOUBLE,
    "mixed-integer-float": ColumnType.DOUBLE,
    "date": ColumnType.DATE,
    "datetime": ColumnType.TIMESTAMP,
    "datetime64": ColumnType.TIMESTAMP,
}


def infer_column_type(series: pd.Series) -> ColumnType:
    """Maps a pandas column onto its declared ColumnType"""
    dtype = series.dtype

    if pd.api.types.is_bool_dtype(dtype):
        return ColumnType.BOOLEAN

    if pd.api.types.is_datetime64_any_dtype(dtype):
        return ColumnType.TIMESTAMP

    if pd.api.types.is_integer_dtype(dtype):
        # uint32 does not fit a 32-bit signed integer
        if dtype.itemsize < 4 or (dtype.itemsize == 4 and dtype.kind == "i"):
            return ColumnType.INTEGER
        return ColumnType.LONG

    if pd.api.types.is_float_dtype(dtype):
        return ColumnType.FLOAT if dtype.itemsize <= 4 else ColumnType.DOUBLE

    if isinstance(dtype, pd.StringDtype):
        return ColumnType.STRING

    if dtype == np.dtype(object):
        inferred = pd.api.types.infer_dtype(series, skipna=True)
        return _OBJECT_INFERRED_TYPES.get(inferred, ColumnType.OTHER)

    return ColumnType.OTHER


def _can_hold_null(series: pd.Series) -> bool:
    # numpy integer and bool arrays have no null representation
    return not (isinstance(series.dtype, np.dtype) and series.dtype.kind in "iub")


def infer_schema(df: pd.DataFrame) -> Schema:
    """Builds the declared schema of a DataFrame"""
    column_metadata = df.attrs.get(COLUMN_METADATA_ATTR, {}) or {}
    fields = []

    for col_name in df.columns:
        series = df[col_name]
        fields.append(StructField(
            name=str(col_name),
            dtype=infer_column_type(series),
            nullable=_can_hold_null(series),
            metadata=dict(column_metadata.get(col_name, {})),
        ))

    return Schema(tuple(fields))


def project_schema(
    schema: Schema,
    input_cols: Sequence[str],
    output_cols: Sequence[str],
) -> Schema:
    """
    Schema after mapping every input column onto its output column.

    Pairs are folded left to right. Input fields are always looked up in the
    original schema, matching transform, which copies from the untouched
    input, so a field added by an earlier pair is not a valid input for a
    later one. An existing output field keeps its name and position and takes
    the input field's type, nullability and metadata; a new output field is
    appended as a clone of the input field.
    """
    if len(input_cols) != len(output_cols):
        raise ConfigurationError(
            "inputCols and outputCols must have the same length",
            details={"input_cols": list(input_cols), "output_cols": list(output_cols)}
        )

    def _apply(current: Schema, pair: Tuple[str, str]) -> Schema:
        in_col, out_col = pair
        source = schema[in_col]

        if out_col in current:
            return current.replace_at(current.index_of(out_col), source.renamed(out_col))
        return current.add(source.renamed(out_col))

    return reduce(_apply, zip(input_cols, output_cols), schema)
