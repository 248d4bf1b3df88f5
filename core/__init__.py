# core/__init__.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  CleanMissingData — Core Package                                          ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Lazy Module Loading                                                   ║
║  ✓ Engine, Sketch, Blob Store and Error Taxonomy                         ║
╚════════════════════════════════════════════════════════════════════════════╝

Core Package Structure:
```
    core/
    ├── __init__.py          # Lazy exports (this file)
    ├── exceptions.py        # Error taxonomy
    ├── quantile_sketch.py   # Mergeable approximate quantile summary
    ├── engine.py            # Dataframe engine interface + pandas engine
    ├── blob_store.py        # Artifact storage
    └── utils.py             # uid and column list helpers
```

Usage:
```python
    from core import PandasEngine, InMemoryBlobStore

    engine = PandasEngine(num_partitions=8)
    store = InMemoryBlobStore()
```
"""

from __future__ import annotations

from importlib import import_module
from types import ModuleType
from typing import Any, Dict, List, Tuple

from config import __version__


_LAZY_EXPORTS: Dict[str, Tuple[str, str]] = {
    # Errors
    "CleaningError": ("core.exceptions", "CleaningError"),
    "ConfigurationError": ("core.exceptions", "ConfigurationError"),
    "UnsupportedTypeError": ("core.exceptions", "UnsupportedTypeError"),
    "AlreadyExistsError": ("core.exceptions", "AlreadyExistsError"),
    "ArtifactNotFoundError": ("core.exceptions", "ArtifactNotFoundError"),
    "CorruptArtifactError": ("core.exceptions", "CorruptArtifactError"),

    # Engine
    "DataFrameEngine": ("core.engine", "DataFrameEngine"),
    "PandasEngine": ("core.engine", "PandasEngine"),
    "QuantileSummary": ("core.quantile_sketch", "QuantileSummary"),

    # Storage
    "BlobStore": ("core.blob_store", "BlobStore"),
    "LocalBlobStore": ("core.blob_store", "LocalBlobStore"),
    "InMemoryBlobStore": ("core.blob_store", "InMemoryBlobStore"),
}

__all__ = ("__version__",) + tuple(_LAZY_EXPORTS)


def __getattr__(name: str) -> Any:
    """Resolve lazy exports on first access and cache them in globals."""
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
