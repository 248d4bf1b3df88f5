# config/__init__.py
"""
CleanMissingData — Configuration Package

Lazy exports so that importing ``config`` does not build the settings object
until it is actually needed.

```python
    from config import settings, CleaningMode
```
"""

from __future__ import annotations

from importlib import import_module
from importlib.metadata import PackageNotFoundError, version as _pkg_version
from types import ModuleType
from typing import Any, Dict, List, Tuple

try:
    __version__ = _pkg_version("clean-missing-data")
except PackageNotFoundError:
    # Development mode / uninstalled package
    __version__ = "1.0.0-dev"


_LAZY_EXPORTS: Dict[str, Tuple[str, str]] = {
    # Settings
    "settings": ("config.settings", "settings"),
    "Settings": ("config.settings", "Settings"),
    "get_settings": ("config.settings", "get_settings"),

    # Constants
    "CleaningMode": ("config.constants", "CleaningMode"),
    "ColumnType": ("config.constants", "ColumnType"),

    # Logging
    "setup_logging": ("config.logging_config", "setup_logging"),
    "get_logger": ("config.logging_config", "get_logger"),
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
