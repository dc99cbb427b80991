"""Key/value storage backends used by the session and statistics stores.

Values are serialized JSON strings. Backends raise
:class:`~cluegrid.core.exceptions.StorageQuotaError` when a write does not fit
and :class:`~cluegrid.core.exceptions.StorageError` for any other failure;
recovery is the stores' job.
"""

from __future__ import annotations

import errno
import re
from pathlib import Path
from typing import Dict, Optional, Protocol

from ..core.exceptions import StorageError, StorageQuotaError
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)

DEFAULT_STORE_DIR = Path("local_db/cluegrid")

_UNSAFE_KEY_RE = re.compile(r"[^A-Za-z0-9_.-]")
_QUOTA_ERRNOS = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)}


class StorageBackend(Protocol):
    def get(self, key: str) -> Optional[str]:
        """Return the stored value or ``None`` when missing."""

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    def remove(self, key: str) -> None:
        """Delete ``key``; missing keys are ignored."""


class MemoryStorage:
    """In-process storage with an optional total byte quota."""

    def __init__(self, max_bytes: Optional[int] = None) -> None:
        self.max_bytes = max_bytes
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.max_bytes is not None:
            used = sum(len(v.encode("utf-8")) for k, v in self._data.items() if k != key)
            if used + len(value.encode("utf-8")) > self.max_bytes:
                raise StorageQuotaError(
                    f"Writing {key} would exceed the {self.max_bytes} byte quota"
                )
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage:
    """One JSON document per key under ``store_dir``."""

    def __init__(self, store_dir: Path | str = DEFAULT_STORE_DIR) -> None:
        self.store_dir = Path(store_dir)
        self.store_dir.mkdir(parents=True, exist_ok=True)

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Cannot read {path.name}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        try:
            tmp_path.write_text(value, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            if exc.errno in _QUOTA_ERRNOS:
                raise StorageQuotaError(f"No space left writing {path.name}") from exc
            raise StorageError(f"Cannot write {path.name}: {exc}") from exc
        LOGGER.debug("Stored %s (%d bytes)", path.name, len(value))

    def remove(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot remove {key}: {exc}") from exc

    def _path(self, key: str) -> Path:
        return self.store_dir / f"{_UNSAFE_KEY_RE.sub('_', key)}.json"
