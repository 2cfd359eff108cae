"""Whole-collection persistence for books, members and loans.

A store exposes ``get(collection)`` returning the ordered list of records and
``put(collection, records)`` replacing that list. There are no partial
updates. Writes that must land together are wrapped in ``transaction()``:
everything put inside the block is committed at the end or not at all.
"""

import copy
from contextlib import contextmanager
from typing import Dict, List

from sqlalchemy.orm import Session

from library_app.models.models import EntityCollection

BOOKS = "books"
MEMBERS = "members"
LOANS = "loans"
COLLECTIONS = (BOOKS, MEMBERS, LOANS)


def _check_name(collection: str) -> None:
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection!r}")


class EntityStore:
    def get(self, collection: str) -> List[dict]:
        raise NotImplementedError

    def put(self, collection: str, records: List[dict]) -> None:
        raise NotImplementedError

    def transaction(self):
        raise NotImplementedError


class SqlEntityStore(EntityStore):
    """Keeps each collection as a JSON array in the ``entity_collections`` table."""

    def __init__(self, db: Session):
        self.db = db
        self._depth = 0

    def get(self, collection: str) -> List[dict]:
        _check_name(collection)
        row = self.db.get(EntityCollection, collection)
        if row is None:
            return []
        return copy.deepcopy(row.records)

    def put(self, collection: str, records: List[dict]) -> None:
        _check_name(collection)
        payload = copy.deepcopy(list(records))
        row = self.db.get(EntityCollection, collection)
        if row is None:
            self.db.add(EntityCollection(name=collection, records=payload))
        else:
            row.records = payload
        if self._depth == 0:
            self.db.commit()
        else:
            self.db.flush()

    @contextmanager
    def transaction(self):
        self._depth += 1
        try:
            yield self
        except BaseException:
            self._depth -= 1
            if self._depth == 0:
                self.db.rollback()
            raise
        self._depth -= 1
        if self._depth == 0:
            self.db.commit()


class MemoryEntityStore(EntityStore):
    """Process-local store; records are copied in and out."""

    def __init__(self, initial: Dict[str, List[dict]] = None):
        self._data = {name: [] for name in COLLECTIONS}
        for name, records in (initial or {}).items():
            self.put(name, records)

    def get(self, collection: str) -> List[dict]:
        _check_name(collection)
        return copy.deepcopy(self._data[collection])

    def put(self, collection: str, records: List[dict]) -> None:
        _check_name(collection)
        self._data[collection] = copy.deepcopy(list(records))

    @contextmanager
    def transaction(self):
        snapshot = copy.deepcopy(self._data)
        try:
            yield self
        except BaseException:
            self._data = snapshot
            raise
