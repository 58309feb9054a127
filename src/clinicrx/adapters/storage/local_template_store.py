"""
JSON-file implementation of the template key-value store.

The whole file is rewritten on every put. There is no merge or version
check: two writers racing on the same key both succeed and the later
write wins.
"""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Dict, Optional

from ...application.ports.services.template_store import TemplateStore
from ...domain.errors import PersistenceError

logger = logging.getLogger(__name__)


class LocalTemplateStore(TemplateStore):
    """Key-value slots persisted to a single JSON object on disk."""

    def __init__(self, path: str):
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError:
            logger.warning(f"Template store {self._path} is corrupt, treating as empty")
            return {}
        except OSError as e:
            raise PersistenceError(str(e)) from e
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: Dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise PersistenceError(str(e)) from e

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read_all().get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read_all()
            data[key] = value
            self._write_all(data)
        logger.debug(f"Template store: wrote '{key}' ({len(value)} chars)")

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._read_all()
            if data.pop(key, None) is not None:
                self._write_all(data)
