"""File storage helpers."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class StorageService:
    """Named string records kept in a single JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s: expected an object", self.path)
            return {}
        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    def _write_all(self, records: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp_path.write_text(json.dumps(records, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value or None."""
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        records = self._read_all()
        records[key] = value
        self._write_all(records)

    def remove_item(self, key: str) -> None:
        """Delete ``key`` if present."""
        records = self._read_all()
        if records.pop(key, None) is not None:
            self._write_all(records)
