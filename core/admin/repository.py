# =============================================================================
# core/admin/repository.py - In-Memory Record Store
# =============================================================================
# Holds the records behind one admin screen. Records are immutable pydantic
# models; an edit stores a copy that replaces the old record under its id.
# Insertion order is preserved so unsorted listings are stable.
#
# Contents live for the life of the process and are re-seeded on restart.
# =============================================================================

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Generic, Iterable, TypeVar

from pydantic import BaseModel

from app.exceptions import RecordNotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class InMemoryRepository(Generic[T]):
    """
    Thread-safe id -> record map.

    Example:
        members = InMemoryRepository("Member", seed_members())
        member = members.update("mem_001", status="Suspended")
    """

    def __init__(self, kind: str, records: Iterable[T] = ()):
        self.kind = kind
        self._records: dict[str, T] = {}
        self._lock = threading.RLock()
        for record in records:
            self._records[record.id] = record

    def __len__(self) -> int:
        return len(self._records)

    def list(self) -> list[T]:
        with self._lock:
            return list(self._records.values())

    def get(self, record_id: str) -> T:
        """
        Raises:
            RecordNotFoundError: If no record has this id
        """
        with self._lock:
            record = self._records.get(record_id)
        if record is None:
            raise RecordNotFoundError(self.kind, record_id)
        return record

    def add(self, record: T) -> T:
        with self._lock:
            self._records[record.id] = record
        logger.debug(f"Added {self.kind} {record.id}")
        return record

    def replace(self, record: T) -> T:
        """
        Store a new version of an existing record.

        Raises:
            RecordNotFoundError: If the id is unknown
        """
        with self._lock:
            if record.id not in self._records:
                raise RecordNotFoundError(self.kind, record.id)
            self._records[record.id] = record
        return record

    def update(self, record_id: str, **changes: Any) -> T:
        """Copy a record with `changes` applied and store it."""
        with self._lock:
            current = self.get(record_id)
            return self.replace(current.model_copy(update=changes))

    def update_many(self, record_ids: Iterable[str], change: Callable[[T], T]) -> list[T]:
        """
        Apply `change` to several records in one pass.

        Every id is checked before anything is written, so an unknown id
        leaves the store untouched.

        Raises:
            RecordNotFoundError: If any id is unknown
        """
        with self._lock:
            current = [self.get(record_id) for record_id in record_ids]
            return [self.replace(change(record)) for record in current]


class RecordHolder(Generic[T]):
    """Single-record variant for screens that manage one object."""

    def __init__(self, record: T):
        self._record = record
        self._lock = threading.Lock()

    def get(self) -> T:
        return self._record

    def update(self, **changes: Any) -> T:
        with self._lock:
            self._record = self._record.model_copy(update=changes)
            return self._record
