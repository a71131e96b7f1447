from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Generic, Optional, TypeVar

import pandas as pd

from pos_core.db import load_store, save_store
from pos_core.errors import NotFound
from pos_core.models import update_values
from pos_core.utils import iso_now

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EntityStore(Generic[T]):
    """
    In-memory collection over one named persisted store.

    All rows are loaded once on construction; the whole sequence is written
    back after every mutation, so a reader never sees stale data.
    Subclasses set `record_cls`, `store_name` and `search_fields`.
    """

    record_cls: Any = None
    store_name: str = ""
    search_fields: tuple[str, ...] = ()
    label: str = "Record"

    def __init__(self, conn):
        self.conn = conn
        self._records: list[T] = [self.record_cls.from_dict(d) for d in load_store(conn, self.store_name, []) or []]

    # -------------------------
    # persistence helpers
    # -------------------------

    def _persist(self) -> None:
        save_store(self.conn, self.store_name, [r.to_dict() for r in self._records])

    def _next_id(self) -> int:
        return max((int(r.id) for r in self._records), default=0) + 1

    def _index(self, record_id: int) -> Optional[int]:
        for i, r in enumerate(self._records):
            if int(r.id) == int(record_id):
                return i
        return None

    def _check(self, record: T) -> None:
        """Hook for per-entity field rules; raise PosError subclasses."""

    def _replace(self, record_id: int, values: dict) -> T:
        i = self._index(record_id)
        if i is None:
            raise NotFound(f"{self.label} {record_id} not found.", details={"id": record_id})
        updated = replace(self._records[i], **values, last_updated=iso_now())
        self._check(updated)
        self._records[i] = updated
        self._persist()
        return updated

    # -------------------------
    # public operations
    # -------------------------

    def add(self, **fields: Any) -> T:
        fields.pop("id", None)
        fields.pop("created_at", None)
        fields.pop("last_updated", None)
        record = self.record_cls(id=self._next_id(), created_at=iso_now(), last_updated=None, **fields)
        self._check(record)
        self._records.append(record)
        self._persist()
        logger.info("%s %s created", self.label, record.id)
        return record

    def update(self, record_id: int, changes) -> T:
        updated = self._replace(record_id, update_values(changes))
        logger.info("%s %s updated", self.label, record_id)
        return updated

    def delete(self, record_id: int) -> None:
        i = self._index(record_id)
        if i is None:
            return
        del self._records[i]
        self._persist()
        logger.info("%s %s deleted", self.label, record_id)

    def find(self, record_id: int) -> Optional[T]:
        i = self._index(record_id)
        return self._records[i] if i is not None else None

    def get(self, record_id: int) -> T:
        record = self.find(record_id)
        if record is None:
            raise NotFound(f"{self.label} {record_id} not found.", details={"id": record_id})
        return record

    def all(self) -> list[T]:
        return list(self._records)

    def search(self, term: str | None) -> list[T]:
        if not term or not str(term).strip():
            return sorted(self._records, key=lambda r: str(r.created_at or ""), reverse=True)

        needle = str(term).strip().lower()
        out: list[T] = []
        for r in self._records:
            for f in self.search_fields:
                value = getattr(r, f, None)
                if value and needle in str(value).lower():
                    out.append(r)
                    break
        return out

    def to_frame(self, records: Optional[list[T]] = None) -> pd.DataFrame:
        rows = [r.to_dict() for r in (self._records if records is None else records)]
        return pd.DataFrame(rows)

    def __len__(self) -> int:
        return len(self._records)
