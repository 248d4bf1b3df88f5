# preprocessing/persistence.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  CleanMissingData — Model Persistence                                     ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Multi-Part Artifact (JSON + Parquet)                                  ║
║  ✓ Staged Writes Published by Rename                                     ║
║  ✓ Fail-if-Exists or Overwrite                                           ║
║  ✓ Strict Validation on Load                                             ║
╚════════════════════════════════════════════════════════════════════════════╝

Artifact Layout:
```
    <path>/
    ├── metadata            {class, timestamp, version, uid, paramMap}
    ├── replacementValues   [{column, replacement: {kind, value}}, ...]
    ├── inputCols           ["age", ...]
    ├── outputCols          ["age_clean", ...]
    └── data                one-row parquet table {uid}
```

Usage:
```python
    from preprocessing.persistence import save_model, load_model

    save_model(model, "models/cleaner", overwrite=True)
    model = load_model("models/cleaner")
```
"""

from __future__ import annotations

import io
import json
import time
from typing import Any, Dict, List, Optional

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, StrictStr, TypeAdapter

from config import __version__
from config.constants import (
    ARTIFACT_PARTS,
    DATA_PART,
    INPUT_COLS_PART,
    METADATA_PART,
    OUTPUT_COLS_PART,
    REPLACEMENT_VALUES_PART,
)
from config.logging_config import get_logger, log_execution_time
from core.blob_store import BlobStore, get_default_store
from core.exceptions import (
    AlreadyExistsError,
    ArtifactNotFoundError,
    ConfigurationError,
    CorruptArtifactError,
    exception_context,
)
from core.utils import duplicates
from preprocessing.clean_missing_data import CleanMissingDataModel
from preprocessing.replacement import ReplacementRecord

__all__ = [
    "ModelMetadata",
    "CleanMissingDataModelWriter",
    "CleanMissingDataModelReader",
    "save_model",
    "load_model",
]

MODEL_CLASS_NAME = f"{CleanMissingDataModel.__module__}.{CleanMissingDataModel.__name__}"

_RECORDS_ADAPTER = TypeAdapter(List[ReplacementRecord])
_COLUMNS_ADAPTER = TypeAdapter(List[StrictStr])


# ═══════════════════════════════════════════════════════════════════════════
# Metadata Schema
# ═══════════════════════════════════════════════════════════════════════════

class ParamMap(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    input_cols: List[StrictStr] = Field(alias="inputCols")
    output_cols: List[StrictStr] = Field(alias="outputCols")


class ModelMetadata(BaseModel):
    """📋 Content of the ``metadata`` part."""
    model_config = ConfigDict(populate_by_name=True)

    class_name: StrictStr = Field(alias="class")
    timestamp: int
    version: StrictStr
    uid: StrictStr
    param_map: ParamMap = Field(alias="paramMap")


def _dump_json(obj: Any) -> bytes:
    # NaN is written as a bare token so double values keep their kind
    return json.dumps(obj, indent=2).encode("utf-8")


# ═══════════════════════════════════════════════════════════════════════════
# Writer
# ═══════════════════════════════════════════════════════════════════════════

class CleanMissingDataModelWriter:
    """
    💾 **Model Writer**

    Without ``overwrite()`` an existing target raises AlreadyExistsError and
    nothing is written. Parts are staged next to the target and published
    with a single rename.
    """

    def __init__(self, model: CleanMissingDataModel, store: Optional[BlobStore] = None):
        self.model = model
        self.store = store if store is not None else get_default_store()
        self.should_overwrite = False
        self._log = get_logger(__name__, component="ModelWriter", uid=model.uid)

    def overwrite(self) -> "CleanMissingDataModelWriter":
        self.should_overwrite = True
        return self

    def render(self) -> Dict[str, bytes]:
        """Serialized parts keyed by part name."""
        model = self.model

        metadata = ModelMetadata(
            class_name=MODEL_CLASS_NAME,
            timestamp=int(time.time() * 1000),
            version=__version__,
            uid=model.uid,
            param_map=ParamMap(
                input_cols=list(model.input_cols),
                output_cols=list(model.output_cols)
            )
        )

        records = [
            ReplacementRecord(column=col, replacement=model.replacement_values[col]).model_dump()
            for col in model.output_cols
        ]

        buffer = io.BytesIO()
        pd.DataFrame({"uid": [model.uid]}).to_parquet(buffer, engine="pyarrow", index=False)

        return {
            METADATA_PART: _dump_json(metadata.model_dump(by_alias=True)),
            REPLACEMENT_VALUES_PART: _dump_json(records),
            INPUT_COLS_PART: _dump_json(list(model.input_cols)),
            OUTPUT_COLS_PART: _dump_json(list(model.output_cols)),
            DATA_PART: buffer.getvalue(),
        }

    @log_execution_time
    def save(self, path: str) -> str:
        """
        Write the artifact under ``path``.

        Returns:
            Qualified artifact path
        """
        store = self.store
        target = store.qualify(path)

        if store.exists(target) and not self.should_overwrite:
            raise AlreadyExistsError(
                f"Path {target} already exists. Use write().overwrite().save(path) to replace it",
                details={"path": target}
            )

        parts = self.render()
        staging = store.staging_path(target)

        try:
            for name, blob in parts.items():
                store.write_bytes(store.join(staging, name), blob)
            self._publish(staging, target)
        except Exception:
            store.delete(staging)
            raise

        self._log.info(f"💾 Model saved to {target}")
        return target

    def _publish(self, staging: str, target: str) -> None:
        store = self.store

        if not self.should_overwrite:
            store.rename(staging, target)
            return

        backup = None
        if store.exists(target):
            backup = store.staging_path(target)
            store.rename(target, backup)

        try:
            store.rename(staging, target)
        except Exception:
            if backup is not None:
                store.rename(backup, target)
            raise

        if backup is not None:
            store.delete(backup)


# ═══════════════════════════════════════════════════════════════════════════
# Reader
# ═══════════════════════════════════════════════════════════════════════════

class CleanMissingDataModelReader:
    """
    📂 **Model Reader**

    Every part is validated before the model is built; a damaged artifact
    raises CorruptArtifactError and never yields a partial model.
    """

    def __init__(self, store: Optional[BlobStore] = None):
        self.store = store if store is not None else get_default_store()
        self._log = get_logger(__name__, component="ModelReader")

    def _read_parts(self, target: str) -> Dict[str, bytes]:
        blobs: Dict[str, bytes] = {}
        for part in ARTIFACT_PARTS:
            try:
                blobs[part] = self.store.read_bytes(self.store.join(target, part))
            except ArtifactNotFoundError as e:
                raise CorruptArtifactError(
                    f"Artifact component '{part}' is missing",
                    details={"path": target, "part": part},
                    cause=e
                ) from e
        return blobs

    @staticmethod
    def _decode_json(blob: bytes, part: str) -> Any:
        with exception_context(to=CorruptArtifactError, message=f"Cannot decode '{part}'"):
            return json.loads(blob.decode("utf-8"))

    @staticmethod
    def _decode_uid(blob: bytes) -> str:
        with exception_context(to=CorruptArtifactError, message=f"Cannot decode '{DATA_PART}'"):
            table = pd.read_parquet(io.BytesIO(blob), engine="pyarrow")

        if list(table.columns) != ["uid"] or len(table) != 1 or not isinstance(table["uid"].iloc[0], str):
            raise CorruptArtifactError(
                f"'{DATA_PART}' must be a one-row table with a string uid column",
                details={"columns": [str(c) for c in table.columns], "rows": len(table)}
            )
        return table["uid"].iloc[0]

    @log_execution_time
    def load(self, path: str) -> CleanMissingDataModel:
        store = self.store
        target = store.qualify(path)

        if not store.exists(target):
            raise ArtifactNotFoundError(f"No model found at {target}", details={"path": target})

        blobs = self._read_parts(target)

        with exception_context(to=CorruptArtifactError, message="Invalid artifact content"):
            metadata = ModelMetadata.model_validate(self._decode_json(blobs[METADATA_PART], METADATA_PART))
            records = _RECORDS_ADAPTER.validate_python(
                self._decode_json(blobs[REPLACEMENT_VALUES_PART], REPLACEMENT_VALUES_PART)
            )
            input_cols = _COLUMNS_ADAPTER.validate_python(
                self._decode_json(blobs[INPUT_COLS_PART], INPUT_COLS_PART)
            )
            output_cols = _COLUMNS_ADAPTER.validate_python(
                self._decode_json(blobs[OUTPUT_COLS_PART], OUTPUT_COLS_PART)
            )

        if metadata.class_name != MODEL_CLASS_NAME:
            raise CorruptArtifactError(
                "Artifact holds a different model class",
                details={"expected": MODEL_CLASS_NAME, "found": metadata.class_name}
            )

        uid = self._decode_uid(blobs[DATA_PART])
        if uid != metadata.uid:
            raise CorruptArtifactError(
                "uid in data and metadata disagree",
                details={"data": uid, "metadata": metadata.uid}
            )

        if len(input_cols) != len(output_cols):
            raise CorruptArtifactError(
                "inputCols and outputCols differ in length",
                details={"input_cols": input_cols, "output_cols": output_cols}
            )

        columns = [r.column for r in records]
        if duplicates(columns) or set(columns) != set(output_cols):
            raise CorruptArtifactError(
                "replacementValues do not match outputCols",
                details={"replacement_columns": columns, "output_cols": output_cols}
            )

        try:
            model = CleanMissingDataModel(
                uid=uid,
                replacement_values={r.column: r.replacement for r in records},
                input_cols=input_cols,
                output_cols=output_cols
            )
        except ConfigurationError as e:
            raise CorruptArtifactError(
                "Artifact does not describe a valid model",
                details={"path": target},
                cause=e
            ) from e

        self._log.info(f"📂 Model {uid} loaded from {target}")
        return model


# ═══════════════════════════════════════════════════════════════════════════
# Convenience Functions
# ═══════════════════════════════════════════════════════════════════════════

def save_model(
    model: CleanMissingDataModel,
    path: str,
    overwrite: bool = False,
    store: Optional[BlobStore] = None
) -> str:
    """💾 Save a fitted model."""
    return model.save(path, overwrite=overwrite, store=store)


def load_model(path: str, store: Optional[BlobStore] = None) -> CleanMissingDataModel:
    """📂 Load a fitted model."""
    return CleanMissingDataModelReader(store=store).load(path)
