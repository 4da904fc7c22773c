"""
State Storage
=============

The persisted state lives in a single opaque key-value slot. Writers win
in arrival order; there is no versioning or locking.
"""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)


class StateStore(ABC):
    """Key-value slot holding serialized state strings."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Stored value, or None when the key was never written."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass


class MemoryStore(StateStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class FileStore(StateStore):
    """
    Slot backed by one JSON file mapping keys to strings.

    The file is rewritten on every ``set``, through a temporary sibling
    and a rename.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Store file is not a JSON object: {self.path}")
        return data

    def _write_all(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp.replace(self.path)
        logger.debug(f"Wrote store file: {self.path}")

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)
