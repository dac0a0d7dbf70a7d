# tests/test_repository.py
import pytest
from sqlalchemy import text

from mastermind.errors import RoundChanged
from mastermind.models import RoundSnapshotRow
from mastermind.repository import DBRoundStore
from mastermind.session import GameSession
from mastermind.store import RoundState

def _break_payload(db_session, key):
    # raw text that the JSON column cannot decode
    db_session.execute(
        text("UPDATE round_snapshots SET payload = 'not json{' WHERE key = :key"), {"key": key}
    )
    db_session.commit()

def test_repository_round_trip(db_session):
    repo = DBRoundStore(db_session, key="game-1")
    assert repo.exists() is False
    assert repo.load() is None

    state = RoundState(secret="0123")
    state.submit("4567")
    repo.save(state)

    assert repo.exists() is True
    assert repo.load() == state

    # Win and save again: same row, new payload
    state.submit("0123")
    repo.save(state)

    loaded = DBRoundStore(db_session, key="game-1").load()
    assert loaded == state
    assert loaded.finished is True
    assert db_session.query(RoundSnapshotRow).count() == 1

def test_repository_keys_are_independent(db_session):
    DBRoundStore(db_session, key="a").save(RoundState(secret="0123"))
    DBRoundStore(db_session, key="b").save(RoundState(secret="4567"))

    assert DBRoundStore(db_session, key="a").load().secret == "0123"
    assert DBRoundStore(db_session, key="b").load().secret == "4567"

def test_repository_corrupt_row_loads_as_none(db_session):
    db_session.add(RoundSnapshotRow(key="broken", payload={"secret": "11", "finished": "maybe"}))
    db_session.commit()

    repo = DBRoundStore(db_session, key="broken")
    # the row is there, it just cannot be used
    assert repo.exists() is True
    assert repo.load() is None

def test_repository_non_json_payload_loads_as_none(db_session):
    repo = DBRoundStore(db_session, key="broken")
    repo.save(RoundState(secret="0123"))
    _break_payload(db_session, "broken")

    assert repo.exists() is True
    state, version = repo.load_versioned()
    assert state is None
    assert version is not None

    # and the slot can be written over with a fresh round
    repo.save(RoundState(secret="4567"), expected=version)
    assert repo.load() == RoundState(secret="4567")

def test_repository_version_check(db_session):
    repo = DBRoundStore(db_session, key="game-2")
    first = repo.save(RoundState(secret="0123"))
    assert first == 1

    state = RoundState(secret="0123")
    state.submit("4567")
    assert repo.save(state, expected=first) == 2

    with pytest.raises(RoundChanged):
        repo.save(RoundState(secret="0123"), expected=first)
    with pytest.raises(RoundChanged):
        repo.save(RoundState(secret="0123"), expected=None)

    assert repo.load() == state

def test_two_sessions_on_one_key_keep_the_win(db_session):
    first = GameSession.resume(DBRoundStore(db_session, key="shared"), generate=lambda: "0123")
    second = GameSession.resume(DBRoundStore(db_session, key="shared"), generate=lambda: "9876")

    assert first.submit_guess("0123").status == "won"
    assert second.submit_guess("4567").error == "RoundAlreadyFinished"

    saved = DBRoundStore(db_session, key="shared").load()
    assert saved.finished is True
    assert [h.guess for h in saved.history] == ["0123"]

def test_repository_clear(db_session):
    repo = DBRoundStore(db_session, key="gone")
    repo.save(RoundState(secret="0123"))
    repo.clear()

    assert repo.exists() is False
    assert repo.load() is None
