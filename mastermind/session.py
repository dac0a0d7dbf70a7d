"""
One player's game session.

GameSession owns the current RoundState (there is no module-level game state)
and exposes the two commands the UI calls:

    session = GameSession.resume(MemoryRoundStore())
    session.subscribe(render)            # called with a RoundView after every change
    session.submit_guess("0123")         # -> SubmitResult(status="accepted" | "rejected" | "won", ...)
    session.start_new_round()

Every state change is saved to the store before render hooks run, so a reload
always resumes where the player left off.

Several sessions may point at the same stored round (ex. two overlapping HTTP
requests). A guess is only saved if nobody saved since this session loaded;
otherwise the session reloads and plays the guess against the newer round,
as if the two requests had arrived one after the other.
"""

import logging
from typing import Any, Callable, List, Optional

from .engine import format_result, is_win, validate_guess
from .errors import RoundAlreadyFinished, RoundChanged, ValidationError
from .persistence import RoundStore
from .random_client import generate_secret
from .schemas import HistoryEntryOut, ResultOut, RoundView, SubmitResult
from .store import RoundState
from .types import Code

logger = logging.getLogger(__name__)

RenderHook = Callable[[RoundView], None]
SecretHook = Callable[[Code], None]

SAVE_ATTEMPTS = 3


def log_secret(secret: Code) -> None:
    """Debug-only on_secret hook. Never wire this up in production."""
    logger.debug("Secret answer (debug): %s", secret)


class GameSession:
    def __init__(
        self,
        store: RoundStore,
        generate: Callable[[], Code] = generate_secret,
        on_secret: Optional[SecretHook] = None,
    ) -> None:
        self.store = store
        self._generate = generate
        self._on_secret = on_secret
        self._listeners: List[RenderHook] = []
        self._state: Optional[RoundState] = None
        # version token of the snapshot self._state was loaded from / saved as
        self._version: Any = None

    @classmethod
    def resume(cls, store: RoundStore, **kwargs) -> "GameSession":
        """Pick up the saved round, or start a new one if there is none (or it is unreadable)."""
        session = cls(store, **kwargs)
        session.ensure_round()
        return session

    def ensure_round(self) -> RoundView:
        if self._state is None:
            if not self._reload():
                return self.start_new_round()
            logger.info("Resumed round %r after %d guess(es)", self.store.key, self._state.attempts)
        return self._state.to_view()

    # --- Read access ---

    @property
    def state(self) -> RoundState:
        """A copy; the session's own state only changes through the commands below."""
        return self._require_state().copy()

    def view(self) -> RoundView:
        return self._require_state().to_view()

    # --- Render hooks ---

    def subscribe(self, hook: RenderHook) -> Callable[[], None]:
        self._listeners.append(hook)

        def unsubscribe() -> None:
            if hook in self._listeners:
                self._listeners.remove(hook)

        return unsubscribe

    # --- Commands ---

    def start_new_round(self) -> RoundView:
        """Throw away the current round (won or not) and start a fresh one."""
        previous = self._state
        if previous is not None and not previous.finished and previous.history:
            logger.info("Round %r abandoned after %d guess(es)", self.store.key, previous.attempts)

        state = RoundState.start(self._generate)
        if self._on_secret is not None:
            self._on_secret(state.secret)

        # a new round replaces whatever is stored, so no version check here
        self._version = self.store.save(state)
        self._state = state
        logger.info("New round started for %r", self.store.key)
        return self._render()

    def submit_guess(self, raw: str) -> SubmitResult:
        self._require_state()

        for _ in range(SAVE_ATTEMPTS):
            state = self._state
            try:
                # a finished round rejects everything, even input that would not validate
                if state.finished:
                    raise RoundAlreadyFinished()
                updated = state.copy()
                entry = updated.submit(validate_guess(raw))
            except (ValidationError, RoundAlreadyFinished) as exc:
                return SubmitResult(status="rejected", message=exc.detail, error=exc.code)

            try:
                self._version = self.store.save(updated, expected=self._version)
            except RoundChanged:
                logger.info("Round %r changed since it was loaded; reloading", self.store.key)
                if not self._reload():
                    self.start_new_round()
                continue

            self._state = updated
            return self._accepted(updated, entry)

        exc = RoundChanged()
        return SubmitResult(status="rejected", message=exc.detail, error=exc.code)

    # --- Helpers ---

    def _accepted(self, state: RoundState, entry) -> SubmitResult:
        self._render()

        entry_out = HistoryEntryOut(
            guess=entry.guess,
            result=ResultOut(exact=entry.result.exact, value=entry.result.value),
        )
        if is_win(entry.result):
            logger.info("Round %r won in %d guess(es)", self.store.key, state.attempts)
            return SubmitResult(
                status="won",
                message=f"Correct! The answer is {state.secret}.",
                result=entry_out,
            )
        return SubmitResult(
            status="accepted",
            message=f"Result: {format_result(entry.result)}",
            result=entry_out,
        )

    def _reload(self) -> bool:
        """Load the stored round into the session. False if nothing usable is stored."""
        saved, version = self.store.load_versioned()
        self._version = version
        if saved is None:
            return False
        self._state = saved
        return True

    def _require_state(self) -> RoundState:
        if self._state is None:
            self.ensure_round()
        return self._state

    def _render(self) -> RoundView:
        view = self._state.to_view()
        for hook in list(self._listeners):
            hook(view)
        return view
