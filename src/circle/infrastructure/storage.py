"""KeyValueStorage adapters: a JSON file on disk and an in-memory dict."""

import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class JsonFileStorage:
    """String values in one JSON object file, rewritten on every change.

    An unreadable or malformed file reads as empty; it is replaced on the next write.
    Non-string values already in the file are kept but never returned.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _read(self) -> dict | None:
        """The JSON object in the file: {} when there is no file, None when it is unreadable."""
        try:
            if not self.path.exists():
                return {}
            obj = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, exc)
            return None
        if not isinstance(obj, dict):
            logger.warning("Ignoring session file %s: expected a JSON object", self.path)
            return None
        return obj

    def _save(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data), encoding="utf-8")
        os.replace(tmp, self.path)

    def get(self, key: str) -> str | None:
        value = (self._read() or {}).get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read() or {}
        data[key] = value
        self._save(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if data is None:
            # Unreadable: nothing in it can be kept.
            self.path.unlink(missing_ok=True)
            return
        if key not in data:
            return
        del data[key]
        if data:
            self._save(data)
        else:
            self.path.unlink(missing_ok=True)


class InMemoryStorage:
    """Stores values in memory (tests, or a session that must not touch disk)."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data
