"""Generation history tracking."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List, Optional

from modules.errors import PersistedStateCorrupt
from modules.services.storage_service import StorageService

logger = logging.getLogger(__name__)

HISTORY_STORAGE_KEY = "imagen-4-history"
DEFAULT_HISTORY_LIMIT = 12


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """Metadata describing a successful generation or edit."""

    id: str
    prompt: str
    aspect_ratio: str
    image_size: str
    image_url: str

    @classmethod
    def from_dict(cls, data: Any) -> "HistoryEntry":
        if not isinstance(data, dict):
            raise PersistedStateCorrupt(f"History entry must be an object, got {type(data).__name__}")
        try:
            values = {name: data[name] for name in ("id", "prompt", "aspect_ratio", "image_size", "image_url")}
        except KeyError as exc:
            raise PersistedStateCorrupt(f"History entry is missing {exc}") from exc
        if not all(isinstance(value, str) for value in values.values()):
            raise PersistedStateCorrupt("History entry fields must be strings")
        return cls(**values)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _format_id(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_id(value: str) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo is not None else None


class GenerationHistoryService:
    """Bounded, most-recent-first history persisted as one JSON record."""

    def __init__(
        self,
        storage: StorageService,
        limit: int = DEFAULT_HISTORY_LIMIT,
        key: str = HISTORY_STORAGE_KEY,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.storage = storage
        self.limit = limit
        self.key = key
        self._clock = clock
        self._entries: List[HistoryEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def _deserialize(self, raw: str) -> List[HistoryEntry]:
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise PersistedStateCorrupt(str(exc)) from exc
        if not isinstance(data, list):
            raise PersistedStateCorrupt(f"History must be a list, got {type(data).__name__}")
        return [HistoryEntry.from_dict(item) for item in data]

    def _persist(self, entries: List[HistoryEntry]) -> None:
        payload = json.dumps([asdict(entry) for entry in entries], ensure_ascii=False)
        self.storage.set_item(self.key, payload)

    def load(self) -> List[HistoryEntry]:
        """Rehydrate history from storage, discarding corrupted data."""
        raw = self.storage.get_item(self.key)
        if raw is None:
            self._entries = []
            return self.list()

        try:
            entries = self._deserialize(raw)
        except PersistedStateCorrupt as exc:
            logger.error("Failed to parse history from storage: %s", exc)
            self.storage.remove_item(self.key)
            entries = []

        self._entries = entries[: self.limit]
        return self.list()

    def create_entry(self, prompt: str, aspect_ratio: str, image_size: str, image_url: str) -> HistoryEntry:
        """Build an entry whose id is later than every recorded one."""
        moment = self._clock()
        if self._entries:
            latest = _parse_id(self._entries[0].id)
            if latest is not None and moment <= latest:
                moment = latest + timedelta(milliseconds=1)
        return HistoryEntry(
            id=_format_id(moment),
            prompt=prompt,
            aspect_ratio=aspect_ratio,
            image_size=image_size,
            image_url=image_url,
        )

    def record(self, entry: HistoryEntry) -> List[HistoryEntry]:
        """Prepend an entry, drop anything past the limit and persist."""
        entries = [entry, *self._entries][: self.limit]
        self._persist(entries)
        self._entries = entries
        return self.list()

    def list(self, limit: Optional[int] = None) -> List[HistoryEntry]:
        """Return the most recent records."""
        if limit is None:
            return list(self._entries)
        return self._entries[:limit]
