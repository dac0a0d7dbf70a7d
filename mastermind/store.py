"""
Round state
Holds one round in memory: the secret, the guesses so far, and whether it is over.
The only ways to change it are start() and submit().
"""

from dataclasses import dataclass, field
from typing import Callable, List

from .engine import ScoreResult, is_win, score_guess
from .errors import RoundAlreadyFinished
from .random_client import generate_secret
from .schemas import HistoryEntryOut, ResultOut, RoundSnapshot, RoundView
from .types import Code, RoundStatus


@dataclass(frozen=True)
class HistoryEntry:
    guess: Code
    result: ScoreResult


@dataclass
class RoundState:
    secret: Code
    history: List[HistoryEntry] = field(default_factory=list)
    finished: bool = False

    @classmethod
    def start(cls, generate: Callable[[], Code] = generate_secret) -> "RoundState":
        """Fresh, playable round."""
        return cls(secret=generate())

    @property
    def status(self) -> RoundStatus:
        return "won" if self.finished else "active"

    @property
    def attempts(self) -> int:
        return len(self.history)

    def submit(self, guess: Code) -> HistoryEntry:
        """
        Score a validated guess and append it.
        Raises RoundAlreadyFinished (and changes nothing) once the round is won.
        """
        if self.finished:
            raise RoundAlreadyFinished()

        entry = HistoryEntry(guess=guess, result=score_guess(guess, self.secret))
        self.history.append(entry)
        if is_win(entry.result):
            self.finished = True
        return entry

    def copy(self) -> "RoundState":
        # entries are frozen, so a new list is enough
        return RoundState(secret=self.secret, history=list(self.history), finished=self.finished)

    # --- Snapshot conversion ---

    def to_snapshot(self) -> RoundSnapshot:
        return RoundSnapshot(
            secret=self.secret,
            finished=self.finished,
            history=[_to_entry_out(h) for h in self.history],
        )

    @classmethod
    def from_snapshot(cls, snapshot: RoundSnapshot) -> "RoundState":
        return cls(
            secret=snapshot.secret,
            finished=snapshot.finished,
            history=[
                HistoryEntry(guess=h.guess, result=ScoreResult(h.result.exact, h.result.value))
                for h in snapshot.history
            ],
        )

    def to_view(self) -> RoundView:
        """Public view: the secret is only included once the round is won."""
        return RoundView(
            status=self.status,
            finished=self.finished,
            attempts=self.attempts,
            history=[_to_entry_out(h) for h in self.history],
            secret=self.secret if self.finished else None,
        )


def _to_entry_out(entry: HistoryEntry) -> HistoryEntryOut:
    return HistoryEntryOut(
        guess=entry.guess,
        result=ResultOut(exact=entry.result.exact, value=entry.result.value),
    )
