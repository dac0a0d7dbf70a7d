"""
SQLAlchemy ORM models.

Tables:
- round_snapshots: one row per storage key, holding the latest RoundSnapshot as JSON

Why JSON?
- A snapshot is tiny (a secret, a flag, a short history) and is always read whole.
- Its shape is owned by schemas.RoundSnapshot, so the table does not repeat it.

Why version?
- Every write bumps it; a guess only saves if the version is still the one it
  loaded, so two overlapping requests can't overwrite each other.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base

# naive UTC, like the DateTime column
def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)

class RoundSnapshotRow(Base):
    __tablename__ = "round_snapshots"

    # Storage key (the API's game_id)
    key: Mapped[str] = mapped_column(String(64), primary_key=True)

    # {"secret": "0123", "finished": false, "history": [...]}
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
