# config/logging_config.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  CleanMissingData — Logging Configuration                                 ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Loguru Sinks (Console, Rotating File, JSONL)                          ║
║  ✓ Stdlib Interception                                                   ║
║  ✓ Bound Component Loggers                                               ║
║  ✓ Execution Time Decorator                                              ║
╚════════════════════════════════════════════════════════════════════════════╝

Logging Flow:
```
    Application Code
         ├─→ loguru.logger (bound per component)
         └─→ stdlib logging → InterceptHandler → loguru

    Sinks:
    ├── Console (stderr, colorized)
    ├── cleaning.log (rotated, skipped in TEST_MODE)
    └── cleaning.jsonl (structured, optional)
```

Usage:
```python
    from config.logging_config import setup_logging, get_logger

    setup_logging(log_level="DEBUG")
    log = get_logger(__name__, component="engine")
    log.info("Scanning partitions")
```
"""

from __future__ import annotations

import logging
import sys
import time
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from loguru import logger

from config.settings import settings

__all__ = [
    "setup_logging",
    "get_logger",
    "set_log_level",
    "log_execution_time",
    "InterceptHandler",
]


# ═══════════════════════════════════════════════════════════════════════════
# Stdlib Logging Interception
# ═══════════════════════════════════════════════════════════════════════════

class InterceptHandler(logging.Handler):
    """
    🔌 **Stdlib Logging Interceptor**

    Routes standard library logging records to loguru.
    """

    def emit(self, record: logging.LogRecord) -> None:
        """Emit log record to loguru."""
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _patch_record(record: Dict[str, Any]) -> None:
    """Guarantee the extra keys referenced by the formats."""
    record["extra"].setdefault("component", record.get("name") or "-")


# ═══════════════════════════════════════════════════════════════════════════
# Log Formats
# ═══════════════════════════════════════════════════════════════════════════

LOG_FORMAT_HUMAN = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

LOG_FORMAT_COMPACT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}"


_INITIALIZED_FLAG = False
_SINK_IDS: List[int] = []


# ═══════════════════════════════════════════════════════════════════════════
# Main Setup
# ═══════════════════════════════════════════════════════════════════════════

def setup_logging(
    log_level: Optional[str] = None,
    *,
    enable_json: Optional[bool] = None,
    console_compact: Optional[bool] = None,
    logs_path: Optional[Union[str, Path]] = None,
    reset_existing: bool = False
) -> None:
    """
    🔧 **Setup Centralized Logging**

    Idempotent; pass ``reset_existing=True`` to rebuild the sinks.

    Args:
        log_level: Log level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        enable_json: Enable JSONL sink
        console_compact: Use compact console format
        logs_path: Directory for log files
        reset_existing: Force re-initialization
    """
    global _INITIALIZED_FLAG

    if _INITIALIZED_FLAG and not reset_existing:
        return

    log_level = (log_level or settings.LOG_LEVEL).upper()
    logs_dir = Path(logs_path or settings.LOGS_PATH).resolve()
    enable_json = settings.LOG_JSON_ENABLED if enable_json is None else enable_json
    console_compact = (
        settings.LOG_CONSOLE_COMPACT if console_compact is None else console_compact
    )

    logger.remove()
    _SINK_IDS.clear()
    logger.configure(patcher=_patch_record)

    # Console sink
    _SINK_IDS.append(
        logger.add(
            sys.stderr,
            format=LOG_FORMAT_COMPACT if console_compact else LOG_FORMAT_HUMAN,
            level=log_level,
            colorize=True,
            backtrace=(log_level == "DEBUG"),
            diagnose=False,
        )
    )

    if not settings.TEST_MODE:
        logs_dir.mkdir(parents=True, exist_ok=True)

        _SINK_IDS.append(
            logger.add(
                logs_dir / "cleaning.log",
                format=LOG_FORMAT_HUMAN,
                level=log_level,
                rotation=settings.LOG_ROTATION,
                retention=settings.LOG_RETENTION,
                compression="zip",
                encoding="utf-8",
                enqueue=True,
            )
        )

        if enable_json:
            _SINK_IDS.append(
                logger.add(
                    logs_dir / "cleaning.jsonl",
                    serialize=True,
                    level=log_level,
                    rotation=settings.LOG_ROTATION,
                    retention=settings.LOG_RETENTION,
                    encoding="utf-8",
                    enqueue=True,
                )
            )

    # Intercept stdlib logging (pyarrow, fsspec, ...)
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    logger.info(
        f"✓ Logging initialized: app={settings.APP_NAME}, level={log_level}, "
        f"json={enable_json}, test_mode={settings.TEST_MODE}"
    )

    _INITIALIZED_FLAG = True


def set_log_level(level: str) -> None:
    """🎚️ Change log level at runtime."""
    setup_logging(log_level=level, reset_existing=True)


# ═══════════════════════════════════════════════════════════════════════════
# Utilities
# ═══════════════════════════════════════════════════════════════════════════

def get_logger(name: Optional[str] = None, **binds: Any):
    """
    📝 **Get Bound Logger**

    Args:
        name: Logger name (usually __name__)
        **binds: Additional bindings (component, uid, ...)

    Returns:
        Bound loguru logger
    """
    lgr = logger

    if name:
        lgr = lgr.bind(name=name)

    if binds:
        lgr = lgr.bind(**binds)

    return lgr


def log_execution_time(func: Callable) -> Callable:
    """
    ⏱️ **Log Execution Time Decorator**

    Logs duration at DEBUG on success and at ERROR on failure, then re-raises.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            duration = time.perf_counter() - start
            logger.error(f"✗ Failed {func.__qualname__} after {duration:.3f}s: {e}")
            raise

        duration = time.perf_counter() - start
        logger.debug(f"✓ Completed {func.__qualname__} in {duration:.3f}s")
        return result

    return wrapper
