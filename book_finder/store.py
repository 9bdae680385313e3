"""Key-value stores backing the favorites list."""
import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

from book_finder.errors import PersistenceError

logger = logging.getLogger(__name__)


class KeyValueStore:
    """
    Scoped string key-value surface.

    Every key is prefixed with ``scope`` so several applications can share one
    backing store. Subclasses implement ``_get`` and ``_set`` on the scoped key
    and raise PersistenceError when the backend fails.
    """

    def __init__(self, scope: str = "book-finder"):
        self.scope = scope

    def scoped_key(self, key: str) -> str:
        return f"{self.scope}:{key}"

    def get(self, key: str) -> Optional[str]:
        return self._get(self.scoped_key(key))

    def set(self, key: str, value: str) -> None:
        self._set(self.scoped_key(key), value)

    def _get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def _set(self, key: str, value: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """Dict-backed store that lives as long as the process."""

    def __init__(self, scope: str = "book-finder", data: Optional[Dict[str, str]] = None):
        super().__init__(scope)
        self.data: Dict[str, str] = data if data is not None else {}

    def _get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def _set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStore(KeyValueStore):
    """All keys kept in a single JSON object on disk."""

    def __init__(self, path, scope: str = "book-finder"):
        super().__init__(scope)
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Ignoring unreadable store file {self.path}: {e}")
            return {}
        except OSError as e:
            raise PersistenceError(f"Cannot read {self.path}: {e}") from e

        if not isinstance(data, dict):
            logger.warning(f"Ignoring store file {self.path}: not a JSON object")
            return {}
        return data

    def _get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def _set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value

        # Write to a sibling file first so a crash never truncates the store
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                json.dumps(data, indent=2, ensure_ascii=False),
                encoding="utf-8"
            )
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise PersistenceError(f"Cannot write {self.path}: {e}") from e


def build_store(config) -> KeyValueStore:
    """Create the store selected by ``config.STORE_BACKEND``."""
    backend = config.STORE_BACKEND.lower()

    if backend == "memory":
        return MemoryStore(scope=config.STORE_SCOPE)

    if backend == "file":
        return JsonFileStore(config.STORE_PATH, scope=config.STORE_SCOPE)

    if backend == "postgres":
        from book_finder.database import PostgresStore

        store = PostgresStore(config.DATABASE_URL, scope=config.STORE_SCOPE)
        store.init_schema()
        return store

    raise ValueError(f"Unknown store backend: {config.STORE_BACKEND!r}")
