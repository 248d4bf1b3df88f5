# config/settings.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  CleanMissingData — Settings                                              ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Pydantic v2 Settings                                                  ║
║  ✓ Environment Variable Support (.env)                                   ║
║  ✓ Type Safety & Validation                                              ║
║  ✓ Sketch / Partitioning Knobs                                           ║
╚════════════════════════════════════════════════════════════════════════════╝

Configuration Structure:
```
    Settings
    ├── Application (name, version, environment)
    ├── Logging (level, rotation, retention, JSON sink)
    ├── Storage (artifact root, logs)
    └── Engine (partitions, quantile sketch accuracy)
```

Usage:
```python
    from config.settings import settings

    print(settings.MEDIAN_RELATIVE_ERROR)   # 0.0001
    print(settings.DEFAULT_NUM_PARTITIONS)  # 4
```

Every field can be overridden with an environment variable of the same
name, e.g. ``MEDIAN_RELATIVE_ERROR=0.001``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ═══════════════════════════════════════════════════════════════════════════
# Module Metadata
# ═══════════════════════════════════════════════════════════════════════════

__all__ = ["Settings", "settings", "get_settings"]


# Load environment variables
load_dotenv()

# Project root directory
ROOT_DIR = Path(__file__).resolve().parent.parent


# ═══════════════════════════════════════════════════════════════════════════
# Settings Class
# ═══════════════════════════════════════════════════════════════════════════

class Settings(BaseSettings):
    """
    🔧 **Central Configuration**

    Type-safe configuration with Pydantic v2.

    Usage:
```python
        from config.settings import settings

        if settings.TEST_MODE:
            ...
```
    """

    # ───────────────────────────────────────────────────────────────────
    # Application
    # ───────────────────────────────────────────────────────────────────

    APP_NAME: str = "CleanMissingData"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"
    TEST_MODE: bool = False

    # ───────────────────────────────────────────────────────────────────
    # Logging
    # ───────────────────────────────────────────────────────────────────

    LOG_LEVEL: str = "INFO"
    LOG_JSON_ENABLED: bool = False
    LOG_ROTATION: str = "10 MB"
    LOG_RETENTION: str = "30 days"
    LOG_CONSOLE_COMPACT: bool = False

    # ───────────────────────────────────────────────────────────────────
    # Storage
    # ───────────────────────────────────────────────────────────────────

    LOGS_PATH: Path = ROOT_DIR / "logs"
    ARTIFACTS_PATH: Path = ROOT_DIR / "artifacts"

    # ───────────────────────────────────────────────────────────────────
    # Engine
    # ───────────────────────────────────────────────────────────────────

    DEFAULT_NUM_PARTITIONS: int = 4

    # Accuracy of the approximate median: the returned value has a rank
    # within MEDIAN_RELATIVE_ERROR * n of the exact median rank.
    MEDIAN_RELATIVE_ERROR: float = 1e-4
    SKETCH_COMPRESS_THRESHOLD: int = 10_000
    SKETCH_HEAD_SIZE: int = 50_000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # ───────────────────────────────────────────────────────────────────
    # Computed Fields
    # ───────────────────────────────────────────────────────────────────

    @computed_field  # type: ignore[misc]
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == "production"

    # ───────────────────────────────────────────────────────────────────
    # Field Validators
    # ───────────────────────────────────────────────────────────────────

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}
        normalized = (v or "").upper()

        if normalized not in allowed:
            raise ValueError(
                f"Invalid LOG_LEVEL '{v}'. "
                f"Allowed: {', '.join(sorted(allowed))}"
            )

        return normalized

    @field_validator("LOGS_PATH", "ARTIFACTS_PATH", mode="before")
    @classmethod
    def expand_paths(cls, v: Path | str) -> Path:
        """Expand user home and resolve paths."""
        return Path(v).expanduser().resolve()

    @field_validator("DEFAULT_NUM_PARTITIONS")
    @classmethod
    def validate_partitions(cls, v: int) -> int:
        """Validate partition count."""
        if v < 1:
            raise ValueError("DEFAULT_NUM_PARTITIONS must be >= 1")
        return v

    @field_validator("MEDIAN_RELATIVE_ERROR")
    @classmethod
    def validate_relative_error(cls, v: float) -> float:
        """Validate sketch relative error."""
        if not 0.0 < v < 1.0:
            raise ValueError("MEDIAN_RELATIVE_ERROR must be in range (0.0, 1.0)")
        return v

    @field_validator("SKETCH_COMPRESS_THRESHOLD", "SKETCH_HEAD_SIZE")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate sketch buffer sizes."""
        if v < 1:
            raise ValueError("Sketch buffer sizes must be >= 1")
        return v


# ═══════════════════════════════════════════════════════════════════════════
# Global Instance
# ═══════════════════════════════════════════════════════════════════════════

settings = Settings()


def get_settings() -> Settings:
    """
    📋 **Get Settings Instance**

    Returns the global settings instance.
    """
    return settings
