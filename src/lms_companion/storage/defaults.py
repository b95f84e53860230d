"""Local key-value persistence used for offline bootstrap."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Mapping, Protocol

logger = logging.getLogger(__name__)


class DefaultsStore(Protocol):
    """Protocol for the minimal key-value API the companion receiver uses."""

    def get(self, key: str) -> Any | None:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def update(self, values: Mapping[str, Any]) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class FileDefaultsStore:
    """JSON-document key-value store written atomically to a single file.

    Values must be JSON-serializable. A missing or unreadable file starts the
    store empty.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._values: dict[str, Any] = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error("Error reading defaults file", extra={"path": str(self._path), "error": str(exc)})
            return {}
        if not isinstance(document, dict):
            logger.error("Defaults file is not a JSON object", extra={"path": str(self._path)})
            return {}
        return document

    def _flush(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=str(self._path.parent), prefix=".defaults-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(self._values, handle)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> Any | None:
        return self._values.get(key)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value
        self._flush()

    def update(self, values: Mapping[str, Any]) -> None:
        """Write several keys with a single flush."""

        self._values.update(values)
        self._flush()

    def remove(self, key: str) -> None:
        if self._values.pop(key, None) is not None:
            self._flush()

    def keys(self) -> list[str]:
        return sorted(self._values)


__all__ = ["DefaultsStore", "FileDefaultsStore"]
