"""Key-value persistence for the bearer token.

The API client never talks to a concrete store directly; it receives one of
these through its constructor so token handling can be exercised without a
real durable backend.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol, Union

logger = logging.getLogger(__name__)


class TokenStorage(Protocol):
    """Synchronous ``get`` / ``set`` / ``remove`` over string keys."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryTokenStorage:
    """Process-local store. Survives client re-construction, not process exit."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._values


class FileTokenStorage:
    """JSON file store, one object of ``{key: value}`` pairs.

    The file is rewritten on every change and created with ``0600`` permissions.
    A missing or corrupt file reads as empty.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path).expanduser()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Ignoring unreadable token file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _save(self, values: dict[str, str]) -> None:
        if not values:
            if self.path.exists():
                self.path.unlink()
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = dict(values)
        payload["saved_at"] = datetime.now().isoformat()
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(payload), encoding="utf-8")
        os.chmod(tmp, 0o600)
        tmp.replace(self.path)

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        values = self._load()
        values.pop("saved_at", None)
        values[key] = value
        self._save(values)

    def remove(self, key: str) -> None:
        values = self._load()
        values.pop("saved_at", None)
        if values.pop(key, None) is None and not self.path.exists():
            return
        self._save(values)
