"""
DB-backed round store, same API as the stores in persistence.py.

Public methods:
- save(state, expected=...) -> int    upsert the row for this key, one commit; returns the new version
- load() / load_versioned()           None when missing or corrupt
- clear() -> None
- exists() -> bool                    "was this key ever created?" (even if corrupt)

Why: lets the FastAPI routes keep one player's round in MySQL/SQLite
without knowing anything about the snapshot format.

Only single columns are selected, never whole rows: the JSON column is decoded
while the result is read, so a bad payload must only ever break _read().
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError, StatementError
from sqlalchemy.orm import Session

from .errors import PersistenceCorrupt, RoundChanged
from .models import RoundSnapshotRow
from .persistence import DEFAULT_KEY, UNCHECKED, RoundStore
from .schemas import RoundSnapshot


class DBRoundStore(RoundStore):
    """Stores the snapshot as JSON in round_snapshots, keyed by self.key; version is an int."""

    def __init__(self, db: Session, key: str = DEFAULT_KEY) -> None:
        super().__init__(key)
        self.db = db

    def exists(self) -> bool:
        found = self.db.execute(
            select(RoundSnapshotRow.key).where(RoundSnapshotRow.key == self.key)
        ).scalar_one_or_none()
        return found is not None

    def _version(self) -> Optional[int]:
        return self.db.execute(
            select(RoundSnapshotRow.version).where(RoundSnapshotRow.key == self.key)
        ).scalar_one_or_none()

    def _read(self) -> Optional[dict]:
        try:
            return self.db.execute(
                select(RoundSnapshotRow.payload).where(RoundSnapshotRow.key == self.key)
            ).scalar_one_or_none()
        except (ValueError, StatementError) as exc:
            # ex. json.JSONDecodeError from the JSON column's result processor
            raise PersistenceCorrupt(f"Saved round is not JSON: {exc}") from exc

    def _write(self, snapshot: RoundSnapshot, expected: Any) -> int:
        payload = snapshot.model_dump(mode="json")
        by_key = RoundSnapshotRow.key == self.key

        if expected is UNCHECKED:
            # overwrite whatever is there, or create the row
            result = self.db.execute(
                update(RoundSnapshotRow)
                .where(by_key)
                .values(payload=payload, version=RoundSnapshotRow.version + 1)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                self.db.execute(insert(RoundSnapshotRow).values(key=self.key, payload=payload, version=1))

        elif expected is None:
            # caller saw nothing stored; somebody else may have created it since
            try:
                self.db.execute(insert(RoundSnapshotRow).values(key=self.key, payload=payload, version=1))
                self.db.flush()
            except IntegrityError:
                self.db.rollback()
                raise RoundChanged()

        else:
            # compare-and-swap on the version the caller loaded
            result = self.db.execute(
                update(RoundSnapshotRow)
                .where(by_key, RoundSnapshotRow.version == expected)
                .values(payload=payload, version=expected + 1)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                self.db.rollback()
                raise RoundChanged()

        self.db.commit()
        return self._version()

    def _delete(self) -> None:
        self.db.execute(delete(RoundSnapshotRow).where(RoundSnapshotRow.key == self.key))
        self.db.commit()
