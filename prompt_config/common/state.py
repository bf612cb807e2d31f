"""
Persistent State Store

Key-value stores backing the config cache.
JsonFileStore keeps every key in one JSON document so a multi-key write
lands in a single atomic file replace.
"""

import json
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator, Protocol, runtime_checkable

from prompt_config.common.exceptions import StoreError
from prompt_config.common.logging_setup import get_service_logger

logger = get_service_logger("state")


@runtime_checkable
class KeyValueStore(Protocol):
    """Associative read/write over a handful of fixed keys"""

    def get(self, keys: Iterable[str]) -> dict[str, Any]:
        """Return a mapping of the requested keys that exist"""
        ...

    def set(self, items: dict[str, Any]) -> None:
        """Write all items together, overwriting prior values"""
        ...

    def delete(self, keys: Iterable[str]) -> None:
        """Remove keys if present"""
        ...


class MemoryStore:
    """In-process dict-backed store"""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, keys: Iterable[str]) -> dict[str, Any]:
        with self._lock:
            return {k: self._data[k] for k in keys if k in self._data}

    def set(self, items: dict[str, Any]) -> None:
        with self._lock:
            self._data.update(items)

    def delete(self, keys: Iterable[str]) -> None:
        with self._lock:
            for key in keys:
                self._data.pop(key, None)


class JsonFileStore:
    """
    File-backed store holding all keys in one JSON object.

    Writes go to a temp file which replaces the target, so readers see
    either the old document or the new one. Each write uses its own temp
    file; on Unix read-modify-write cycles hold an exclusive flock on a
    sidecar lock file.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def _ensure_dir(self) -> None:
        """Ensure parent directory exists"""
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StoreError(f"Corrupt state file: {e}", path=str(self.path)) from e
        except OSError as e:
            raise StoreError(f"Cannot read state file: {e}", path=str(self.path)) from e

        if not isinstance(data, dict):
            raise StoreError("State file is not a JSON object", path=str(self.path))
        return data

    @contextmanager
    def _file_lock(self) -> Iterator[None]:
        """Exclusive cross-process lock for read-modify-write (Unix only)"""
        if os.name == "nt":
            yield
            return

        import fcntl
        lock_path = self.path.with_suffix(self.path.suffix + ".lock")
        try:
            self._ensure_dir()
            lock_file = open(lock_path, "a", encoding="utf-8")
        except OSError as e:
            raise StoreError(f"Cannot open lock file: {e}", path=str(lock_path)) from e

        with lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def _write_all(self, data: dict[str, Any]) -> None:
        temp_path: str | None = None

        try:
            self._ensure_dir()
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                temp_path = f.name
                json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.path)
        except OSError as e:
            if temp_path is not None and os.path.exists(temp_path):
                os.unlink(temp_path)
            logger.error(f"Failed to write state file {self.path}: {e}", exc_info=True)
            raise StoreError(f"Cannot write state file: {e}", path=str(self.path)) from e

    def get(self, keys: Iterable[str]) -> dict[str, Any]:
        with self._lock:
            data = self._read_all()
        return {k: data[k] for k in keys if k in data}

    def set(self, items: dict[str, Any]) -> None:
        with self._lock, self._file_lock():
            try:
                data = self._read_all()
            except StoreError as e:
                # Unreadable document gets replaced by the new write
                logger.warning(f"Overwriting unreadable state: {e.message}")
                data = {}
            data.update(items)
            self._write_all(data)

    def delete(self, keys: Iterable[str]) -> None:
        with self._lock, self._file_lock():
            data = self._read_all()
            removed = [k for k in keys if k in data]
            if removed:
                for key in removed:
                    del data[key]
                self._write_all(data)
                logger.debug(f"Removed state keys: {', '.join(removed)}")
