"""
Round persistence.

A store is bound to one storage key and keeps exactly one snapshot there:
- save(state) overwrites whatever was stored before;
  save(state, expected=version) only does so if nobody saved since that load
- load() returns the stored RoundState, or None if nothing usable is stored
- load_versioned() also returns the version token to pass back to save()
- clear() forgets the snapshot

Missing and malformed data look the same to callers: both give None, and the
caller starts a new round. A broken snapshot is logged, never raised.

Implementations here: MemoryRoundStore (tests / embedding), JsonFileRoundStore.
The SQLAlchemy one lives in repository.py.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError as SchemaError

from .errors import PersistenceCorrupt, RoundChanged
from .schemas import RoundSnapshot
from .store import RoundState

logger = logging.getLogger(__name__)

DEFAULT_KEY = "mastermind"
_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

# save(state) without a version check
UNCHECKED = object()


def check_key(key: str) -> str:
    if not _KEY_PATTERN.match(key):
        raise ValueError(f"Invalid storage key {key!r}: use 1-64 letters, digits, '-' or '_'.")
    return key


def decode_snapshot(payload: Any) -> RoundState:
    """
    payload is whatever the backend hands back: JSON text/bytes or an already
    parsed dict (JSON columns). Raises PersistenceCorrupt on anything unusable.
    """
    try:
        if isinstance(payload, (str, bytes)):
            snapshot = RoundSnapshot.model_validate_json(payload)
        else:
            snapshot = RoundSnapshot.model_validate(payload)
    except SchemaError as exc:
        raise PersistenceCorrupt(f"Saved round is unreadable: {exc.error_count()} problem(s).") from exc
    return RoundState.from_snapshot(snapshot)


class RoundStore:
    """
    Base class: subclasses only move raw payloads in and out of storage.

    Every stored snapshot has a version token (whatever the backend can compare
    cheaply). save(state, expected=token) only writes if the stored token is
    still the one the caller loaded; otherwise it raises RoundChanged.
    save(state) without expected always overwrites.
    """

    def __init__(self, key: str = DEFAULT_KEY) -> None:
        self.key = check_key(key)

    # --- Public API ---

    def save(self, state: RoundState, expected: Any = UNCHECKED) -> Any:
        """Returns the new version token."""
        return self._write(state.to_snapshot(), expected)

    def load(self) -> Optional[RoundState]:
        return self.load_versioned()[0]

    def load_versioned(self) -> Tuple[Optional[RoundState], Any]:
        """(state or None, version token). The token is None when nothing is stored."""
        version = self._version()
        if version is None:
            return None, None
        try:
            payload = self._read()
            if payload is None:
                return None, version
            return decode_snapshot(payload), version
        except PersistenceCorrupt as exc:
            logger.warning("Ignoring saved round %r: %s", self.key, exc)
            return None, version

    def clear(self) -> None:
        self._delete()

    # --- Backend hooks ---

    def _version(self) -> Any:
        raise NotImplementedError

    def _read(self) -> Any:
        raise NotImplementedError

    def _write(self, snapshot: RoundSnapshot, expected: Any) -> Any:
        raise NotImplementedError

    def _delete(self) -> None:
        raise NotImplementedError

    def _check_expected(self, expected: Any) -> None:
        if expected is not UNCHECKED and self._version() != expected:
            raise RoundChanged()


class MemoryRoundStore(RoundStore):
    """
    Keeps JSON text in a dict, so a loaded round never shares objects with
    the one that was saved. Pass the same dict to several stores to share it.
    The stored text doubles as the version token.
    """

    def __init__(self, key: str = DEFAULT_KEY, data: Optional[Dict[str, str]] = None) -> None:
        super().__init__(key)
        self.data: Dict[str, str] = {} if data is None else data

    def _version(self) -> Optional[str]:
        return self.data.get(self.key)

    def _read(self) -> Optional[str]:
        return self.data.get(self.key)

    def _write(self, snapshot: RoundSnapshot, expected: Any) -> str:
        self._check_expected(expected)
        text = snapshot.model_dump_json()
        self.data[self.key] = text
        return text

    def _delete(self) -> None:
        self.data.pop(self.key, None)


class JsonFileRoundStore(RoundStore):
    """
    One <key>.json file per key inside directory.
    The file's bytes are the version token; one process per directory.
    """

    def __init__(self, directory: Path, key: str = DEFAULT_KEY) -> None:
        super().__init__(key)
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.path = self.directory / f"{self.key}.json"

    def _version(self) -> Optional[bytes]:
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return None

    def _read(self) -> Optional[bytes]:
        return self._version()

    def _write(self, snapshot: RoundSnapshot, expected: Any) -> bytes:
        self._check_expected(expected)
        data = snapshot.model_dump_json(indent=2).encode("utf-8")

        # write next to the target, then swap it in so readers never see half a file
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{self.key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return data

    def _delete(self) -> None:
        self.path.unlink(missing_ok=True)
