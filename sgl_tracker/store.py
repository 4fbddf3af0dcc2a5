"""Key-value persistence for the four record collections."""
from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Protocol, TypeVar

from .errors import StoreError
from .models import CheckInRecord, Lead, OnboardedLeader, Salesperson

LOGGER = logging.getLogger(__name__)

SALES_TEAM_KEY = "salesTeam"
LEADS_KEY = "leads"
ONBOARDED_LEADERS_KEY = "onboardedLeaders"
CHECK_INS_KEY = "checkIns"

Record = Dict[str, Any]
T = TypeVar("T")


class RecordStore(Protocol):
    """Synchronous storage of whole collections, keyed by collection name."""

    def load(self, key: str, default: List[Record]) -> List[Record]:  # pragma: no cover - runtime protocol
        """Return the stored collection for ``key`` or ``default`` when absent."""

    def save(self, key: str, value: List[Record]) -> None:  # pragma: no cover - runtime protocol
        """Replace the collection stored under ``key``."""


class MemoryStore:
    """In-process store, mostly useful for tests and embedding."""

    def __init__(self, initial: Dict[str, List[Record]] | None = None) -> None:
        self._data: Dict[str, List[Record]] = copy.deepcopy(initial or {})

    def load(self, key: str, default: List[Record]) -> List[Record]:
        if key not in self._data:
            return list(default)
        return copy.deepcopy(self._data[key])

    def save(self, key: str, value: List[Record]) -> None:
        self._data[key] = copy.deepcopy(list(value))


class JsonFileStore:
    """All collections in a single JSON document, rewritten on every save."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self, key: str, default: List[Record]) -> List[Record]:
        document = self._read()
        if key not in document:
            return list(default)
        value = document[key]
        if not isinstance(value, list):
            raise StoreError(f"Collection '{key}' in {self._path} is not a list")
        return value

    def save(self, key: str, value: List[Record]) -> None:
        document = self._read()
        document[key] = list(value)
        self._write(document)

    def _read(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"Could not read data file {self._path}: {exc}") from exc
        if not text.strip():
            return {}
        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StoreError(f"Data file {self._path} is not valid JSON: {exc}") from exc
        if not isinstance(document, dict):
            raise StoreError(f"Data file {self._path} must contain a JSON object")
        return document

    def _write(self, document: Dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        handle, temp_name = tempfile.mkstemp(prefix=".sgl_tracker-", dir=self._path.parent)
        try:
            with os.fdopen(handle, "w", encoding="utf-8") as stream:
                json.dump(document, stream, ensure_ascii=False, indent=2)
            os.replace(temp_name, self._path)
        except OSError as exc:
            Path(temp_name).unlink(missing_ok=True)
            raise StoreError(f"Could not write data file {self._path}: {exc}") from exc
        LOGGER.debug("Wrote %s", self._path)


class TrackerRepository:
    """Typed access to the record store: loads and saves model objects."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    @property
    def store(self) -> RecordStore:
        return self._store

    def sales_team(self) -> List[Salesperson]:
        return self._load(SALES_TEAM_KEY, Salesperson.from_record)

    def save_sales_team(self, team: List[Salesperson]) -> None:
        self._store.save(SALES_TEAM_KEY, [person.to_record() for person in team])

    def leads(self) -> List[Lead]:
        return self._load(LEADS_KEY, Lead.from_record)

    def save_leads(self, leads: List[Lead]) -> None:
        self._store.save(LEADS_KEY, [lead.to_record() for lead in leads])

    def onboarded_leaders(self) -> List[OnboardedLeader]:
        return self._load(ONBOARDED_LEADERS_KEY, OnboardedLeader.from_record)

    def save_onboarded_leaders(self, leaders: List[OnboardedLeader]) -> None:
        self._store.save(ONBOARDED_LEADERS_KEY, [leader.to_record() for leader in leaders])

    def check_ins(self) -> List[CheckInRecord]:
        return self._load(CHECK_INS_KEY, CheckInRecord.from_record)

    def save_check_ins(self, records: List[CheckInRecord]) -> None:
        self._store.save(CHECK_INS_KEY, [record.to_record() for record in records])

    def _load(self, key: str, factory: Callable[[Record], T]) -> List[T]:
        items: List[T] = []
        for index, record in enumerate(self._store.load(key, [])):
            try:
                items.append(factory(record))
            except (KeyError, TypeError, ValueError) as exc:
                raise StoreError(f"Malformed record #{index} in '{key}': {exc}") from exc
        return items


__all__ = [
    "SALES_TEAM_KEY",
    "LEADS_KEY",
    "ONBOARDED_LEADERS_KEY",
    "CHECK_INS_KEY",
    "RecordStore",
    "MemoryStore",
    "JsonFileStore",
    "TrackerRepository",
]
