# core/blob_store.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  CleanMissingData — Blob Store                                            ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Abstract Key → Bytes Store Keyed by Path                              ║
║  ✓ Local Filesystem Implementation                                       ║
║  ✓ In-Memory Implementation                                              ║
║  ✓ Staging Paths + Rename Publish                                        ║
╚════════════════════════════════════════════════════════════════════════════╝

Paths are "/"-separated. A path "exists" when a blob is stored at it or
under it, so an artifact directory exists as soon as one of its parts does.

``rename`` is the publish step of every multi-part write: parts go under a
staging path first and become visible under the final path in one move.
"""

from __future__ import annotations

import os
import shutil
import threading
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional, Union
from uuid import uuid4

from config.logging_config import get_logger
from config.settings import settings
from core.exceptions import AlreadyExistsError, ArtifactNotFoundError, ConfigurationError

__all__ = ["BlobStore", "LocalBlobStore", "InMemoryBlobStore", "get_default_store"]


# ═══════════════════════════════════════════════════════════════════════════
# Interface
# ═══════════════════════════════════════════════════════════════════════════

class BlobStore(ABC):
    """🗄️ Abstract blob store keyed by path."""

    @abstractmethod
    def qualify(self, path: str) -> str:
        """Fully qualified form of ``path``."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """True if a blob is stored at or under ``path``."""

    @abstractmethod
    def read_bytes(self, path: str) -> bytes:
        """Read a blob; ArtifactNotFoundError if absent."""

    @abstractmethod
    def write_bytes(self, path: str, data: bytes) -> None:
        """Write (or replace) a blob."""

    @abstractmethod
    def delete(self, path: str) -> None:
        """Delete the blob at ``path`` and everything under it (no-op if absent)."""

    @abstractmethod
    def rename(self, src: str, dst: str) -> None:
        """Move ``src`` and everything under it to ``dst``; AlreadyExistsError if ``dst`` exists."""

    def join(self, base: str, *parts: str) -> str:
        return str(PurePosixPath(base, *parts))

    def staging_path(self, path: str) -> str:
        """Hidden sibling path used while a multi-part write is in progress."""
        qualified = PurePosixPath(self.qualify(path))
        return str(qualified.with_name(f".{qualified.name}.staging-{uuid4().hex[:8]}"))


# ═══════════════════════════════════════════════════════════════════════════
# Local Filesystem
# ═══════════════════════════════════════════════════════════════════════════

class LocalBlobStore(BlobStore):
    """
    📁 **Filesystem Blob Store**

    Relative paths resolve under ``root``; absolute paths are used as given.
    """

    def __init__(self, root: Optional[Union[str, Path]] = None):
        self.root = Path(root or settings.ARTIFACTS_PATH).expanduser().resolve()
        self._lock = threading.RLock()
        self._log = get_logger(__name__, component="LocalBlobStore")

    def __repr__(self) -> str:
        return f"LocalBlobStore(root='{self.root}')"

    def qualify(self, path: str) -> str:
        if not path:
            raise ConfigurationError("Blob path must be non-empty")
        p = Path(path).expanduser()
        if not p.is_absolute():
            p = self.root / p
        return p.resolve().as_posix()

    def exists(self, path: str) -> bool:
        return Path(self.qualify(path)).exists()

    def read_bytes(self, path: str) -> bytes:
        target = Path(self.qualify(path))
        if not target.is_file():
            raise ArtifactNotFoundError(f"Blob not found: {target}", details={"path": str(target)})
        return target.read_bytes()

    def write_bytes(self, path: str, data: bytes) -> None:
        target = Path(self.qualify(path))
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

    def delete(self, path: str) -> None:
        target = Path(self.qualify(path))
        with self._lock:
            if target.is_dir():
                shutil.rmtree(target)
            elif target.exists():
                target.unlink()

    def rename(self, src: str, dst: str) -> None:
        source = Path(self.qualify(src))
        target = Path(self.qualify(dst))

        with self._lock:
            if not source.exists():
                raise ArtifactNotFoundError(f"Blob not found: {source}", details={"path": str(source)})
            if target.exists():
                raise AlreadyExistsError(f"Path already exists: {target}", details={"path": str(target)})

            target.parent.mkdir(parents=True, exist_ok=True)
            try:
                os.rename(source, target)
            except OSError as e:
                # Another writer published first
                if target.exists():
                    raise AlreadyExistsError(
                        f"Path already exists: {target}",
                        details={"path": str(target)},
                        cause=e
                    ) from e
                raise

        self._log.debug(f"Renamed {source} → {target}")


# ═══════════════════════════════════════════════════════════════════════════
# In-Memory
# ═══════════════════════════════════════════════════════════════════════════

class InMemoryBlobStore(BlobStore):
    """🧠 Dictionary-backed blob store (tests, ephemeral pipelines)."""

    def __init__(self):
        self._blobs: Dict[str, bytes] = {}
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return f"InMemoryBlobStore(blobs={len(self._blobs)})"

    def qualify(self, path: str) -> str:
        if not path or not path.strip("/"):
            raise ConfigurationError("Blob path must be non-empty")
        return "/" + str(PurePosixPath("/", path)).strip("/")

    def _under(self, qualified: str) -> List[str]:
        prefix = qualified.rstrip("/") + "/"
        return [k for k in self._blobs if k == qualified or k.startswith(prefix)]

    def exists(self, path: str) -> bool:
        with self._lock:
            return bool(self._under(self.qualify(path)))

    def read_bytes(self, path: str) -> bytes:
        qualified = self.qualify(path)
        with self._lock:
            if qualified not in self._blobs:
                raise ArtifactNotFoundError(f"Blob not found: {qualified}", details={"path": qualified})
            return self._blobs[qualified]

    def write_bytes(self, path: str, data: bytes) -> None:
        with self._lock:
            self._blobs[self.qualify(path)] = bytes(data)

    def delete(self, path: str) -> None:
        with self._lock:
            for key in self._under(self.qualify(path)):
                del self._blobs[key]

    def rename(self, src: str, dst: str) -> None:
        source = self.qualify(src)
        target = self.qualify(dst)

        with self._lock:
            keys = self._under(source)
            if not keys:
                raise ArtifactNotFoundError(f"Blob not found: {source}", details={"path": source})
            if self._under(target):
                raise AlreadyExistsError(f"Path already exists: {target}", details={"path": target})

            for key in keys:
                self._blobs[target + key[len(source):]] = self._blobs.pop(key)

    def keys(self) -> List[str]:
        with self._lock:
            return sorted(self._blobs)


def get_default_store() -> LocalBlobStore:
    """Filesystem store rooted at ``settings.ARTIFACTS_PATH``."""
    return LocalBlobStore()
