"""Key-value storage backends.

A backend stores opaque text values under string keys, the way a browser's
local storage does. Serialisation is the persistence bridge's job.
"""

from __future__ import annotations

import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, Optional


class KeyValueBackend(ABC):
    name: str

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def get(self, key: str) -> Optional[str]: ...

    @abstractmethod
    def set(self, key: str, value: str) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> None: ...

    @abstractmethod
    def keys(self) -> Iterable[str]: ...

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


class MemoryBackend(KeyValueBackend):
    def __init__(self, initial: Optional[Dict[str, str]] = None, name: str = "memory"):
        super().__init__(name)
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> Iterable[str]:
        return list(self._data)


class JsonFileBackend(KeyValueBackend):
    """One ``<key>.json`` file per key inside ``directory``."""

    suffix = ".json"

    def __init__(self, directory: str | Path, name: str = "file"):
        super().__init__(name)
        self.directory = Path(directory).expanduser()

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"invalid storage key {key!r}")
        return self.directory / f"{key}{self.suffix}"

    def get(self, key: str) -> Optional[str]:
        p = self._path(key)
        if not p.exists():
            return None
        return p.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        p = self._path(key)
        p.parent.mkdir(parents=True, exist_ok=True)
        # write to a sibling temp file then swap, so a failed write never truncates the entry
        fd, tmp = tempfile.mkstemp(dir=p.parent, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp, p)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def delete(self, key: str) -> None:
        p = self._path(key)
        if p.exists():
            p.unlink()

    def keys(self) -> Iterable[str]:
        if not self.directory.is_dir():
            return []
        return sorted(p.stem for p in self.directory.glob(f"*{self.suffix}"))
