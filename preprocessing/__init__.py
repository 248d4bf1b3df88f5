# preprocessing/__init__.py
"""
CleanMissingData — Preprocessing Package

Lazy exports of the imputer, its fitted model and the persistence helpers.

```python
    from preprocessing import CleanMissingData

    model = CleanMissingData(input_cols=["age"], output_cols=["age"]).fit(df)
    df_clean = model.transform(df)
```
"""

from __future__ import annotations

from importlib import import_module
from types import ModuleType
from typing import Any, Dict, List, Tuple


_LAZY_EXPORTS: Dict[str, Tuple[str, str]] = {
    # Imputer
    "CleanMissingData": ("preprocessing.clean_missing_data", "CleanMissingData"),
    "CleanMissingDataModel": ("preprocessing.clean_missing_data", "CleanMissingDataModel"),
    "ColumnStatEngine": ("preprocessing.column_stats", "ColumnStatEngine"),

    # Replacement values
    "DoubleValue": ("preprocessing.replacement", "DoubleValue"),
    "TextValue": ("preprocessing.replacement", "TextValue"),
    "BooleanValue": ("preprocessing.replacement", "BooleanValue"),

    # Persistence
    "CleanMissingDataModelWriter": ("preprocessing.persistence", "CleanMissingDataModelWriter"),
    "CleanMissingDataModelReader": ("preprocessing.persistence", "CleanMissingDataModelReader"),
    "save_model": ("preprocessing.persistence", "save_model"),
    "load_model": ("preprocessing.persistence", "load_model"),
}

__all__ = tuple(_LAZY_EXPORTS)


def __getattr__(name: str) -> Any:
    if name in _LAZY_EXPORTS:
        module_name, symbol_name = _LAZY_EXPORTS[name]

        try:
            module: ModuleType = import_module(module_name)
            obj = getattr(module, symbol_name)
        except (ImportError, AttributeError) as e:
            raise AttributeError(
                f"Failed to load '{name}' from '{module_name}': {e}"
            ) from e

        globals()[name] = obj
        return obj

    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


def __dir__() -> List[str]:
    return sorted(set(list(globals().keys()) + list(_LAZY_EXPORTS.keys())))
