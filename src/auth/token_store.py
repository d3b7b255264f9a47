"""
Token Store
Explicit key-value storage for OAuth tokens so persistence is injectable and testable.
"""
import json
import threading
from pathlib import Path
from typing import Any, Dict, Optional


class InMemoryTokenStore:
    """Process-local store; tokens vanish with the process"""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Optional[Any]:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value


class JsonFileTokenStore:
    """
    Store backed by a single JSON file.

    The file is re-read on every ``get`` so separate processes sharing the
    path see each other's writes; writes replace the file atomically.
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding='utf-8') or '{}')
        except json.JSONDecodeError:
            print(f"[TokenStore] Warning: ignoring unreadable token file {self.path}")
            return {}

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._read().get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
            tmp_path.write_text(json.dumps(data, indent=2), encoding='utf-8')
            tmp_path.replace(self.path)
