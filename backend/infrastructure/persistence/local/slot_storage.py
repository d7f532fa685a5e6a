from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol, Union


class QuotaExceededError(OSError):
    """Raised when a write would exceed the storage quota."""


class SlotStorage(Protocol):
    """String-keyed string slots (the browser localStorage contract)."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class MemorySlotStorage:
    def __init__(self, *, quota_bytes: Optional[int] = None) -> None:
        self._slots: Dict[str, str] = {}
        self._quota_bytes = quota_bytes

    def get_item(self, key: str) -> Optional[str]:
        return self._slots.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._quota_bytes is not None:
            others = sum(len(k) + len(v) for k, v in self._slots.items() if k != key)
            if others + len(key) + len(value) > self._quota_bytes:
                raise QuotaExceededError(f"storage quota of {self._quota_bytes} bytes exceeded")
        self._slots[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._slots.pop(key, None)


class JsonFileSlotStorage:
    """All slots in one JSON object file; every write replaces the file atomically."""

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except RecursionError as exc:
            raise ValueError(f"{self._path} is nested too deeply to decode") from exc
        if not isinstance(data, dict):
            raise ValueError(f"{self._path} does not hold a JSON object")
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _dump(self, slots: Dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".slots-", suffix=".json", dir=str(self._path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(slots, fh, ensure_ascii=False, indent=2)
            os.replace(tmp, self._path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        try:
            slots = self._load()
        except ValueError:
            # A corrupt file must not block writes; start over.
            slots = {}
        slots[key] = str(value)
        self._dump(slots)

    def remove_item(self, key: str) -> None:
        try:
            slots = self._load()
        except ValueError:
            slots = {}
        if key in slots:
            del slots[key]
            self._dump(slots)
