"""
Error taxonomy.

None of these are fatal:
- ValidationError subclasses are shown to the player as-is; the round is untouched.
- RoundAlreadyFinished means the guess is ignored until a new round starts.
- PersistenceCorrupt never leaves the persistence layer; it is turned into "no saved state".
- RoundChanged is raised by a store when a save lost a race; the session reloads and retries.
"""


class MastermindError(Exception):
    """Base class for every error raised by the game core."""

    code = "MastermindError"
    message = "Something went wrong."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)

    @property
    def detail(self) -> str:
        return str(self)


class ValidationError(MastermindError, ValueError):
    """Raw input does not describe a legal code."""


class WrongLength(ValidationError):
    code = "WrongLength"
    message = "Enter exactly 4 digits."


class NonNumeric(ValidationError):
    code = "NonNumeric"
    message = "Digits only."


class DuplicateDigits(ValidationError):
    code = "DuplicateDigits"
    message = "Digits must not repeat."


class RoundAlreadyFinished(MastermindError):
    code = "RoundAlreadyFinished"
    message = "Round already finished. Start a new round."


class PersistenceCorrupt(MastermindError):
    code = "PersistenceCorrupt"
    message = "Saved round is unreadable."


class RoundChanged(MastermindError):
    """The stored round moved on since it was loaded (another request saved first)."""

    code = "RoundChanged"
    message = "Round changed while saving. Try again."
