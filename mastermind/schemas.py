"""
Explicit validation & Pydantic models
- RoundSnapshot is the persisted shape of a round; it must round-trip exactly.
- RoundView is what the UI gets to see (the secret stays hidden until a win).
- The rest describe API requests and responses.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .engine import score_guess, validate_guess
from .types import CODE_LENGTH


# 1. Feedback for one guess, as stored
class ResultOut(BaseModel):
    exact: int = Field(..., ge=0, description="Digits right in value and position (the A)")
    value: int = Field(..., ge=0, description="Digits in the secret but in the wrong position (the B)")

    @model_validator(mode="after")
    def check_total(self) -> "ResultOut":
        if self.exact + self.value > CODE_LENGTH:
            raise ValueError(f"exact + value cannot exceed {CODE_LENGTH}.")
        return self


# 2. One history row
class HistoryEntryOut(BaseModel):
    guess: str = Field(..., description="The player's guess, 4 unique digits")
    result: ResultOut

    @field_validator("guess")
    @classmethod
    def validate_code(cls, guess: str) -> str:
        # our ValidationError is a ValueError, so pydantic reports it like any other
        return validate_guess(guess)


# 3. Persisted snapshot:
#    { secret, finished, history: [ { guess, result: { exact, value } }, ... ] }
class RoundSnapshot(BaseModel):
    secret: str = Field(..., description="The secret code")
    finished: bool = Field(..., description="True once the secret was guessed")
    history: List[HistoryEntryOut] = Field(default_factory=list, description="Oldest guess first")

    @field_validator("secret")
    @classmethod
    def validate_secret(cls, secret: str) -> str:
        return validate_guess(secret)

    @model_validator(mode="after")
    def check_consistency(self) -> "RoundSnapshot":
        """
        A snapshot we would never have written is treated as corrupt:
        - every stored result must match what the scorer says today
        - only the last entry may be a win, and finished must agree with it
        """
        last = len(self.history) - 1
        for index, entry in enumerate(self.history):
            expected = score_guess(entry.guess, self.secret)
            if (entry.result.exact, entry.result.value) != tuple(expected):
                raise ValueError(f"History entry {index} does not match its secret.")
            if expected.exact == CODE_LENGTH and index != last:
                raise ValueError("Guesses recorded after a winning guess.")

        won = last >= 0 and self.history[last].result.exact == CODE_LENGTH
        if self.finished != won:
            raise ValueError("finished flag disagrees with history.")
        return self


# 4. What the UI renders
class RoundView(BaseModel):
    status: Literal["active", "won"] = Field(..., description="Current state of the round")
    finished: bool = Field(..., description="No more guesses accepted until a new round")
    attempts: int = Field(..., description="How many guesses were made so far")
    history: List[HistoryEntryOut] = Field(..., description="All guesses so far, oldest first")
    secret: Optional[str] = Field(None, description="The secret code (only revealed after a win)")


# 5. API: a round plus the key it is stored under
class GameState(RoundView):
    game_id: str = Field(..., description="Storage key for this player's round")


# 6. API: free text, passed verbatim to the validator
class GuessRequest(BaseModel):
    guess: str = Field(..., description="Raw guess text, ex. '0123'")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"guess": "0123"},
                {"guess": "9876"},
            ]
        }
    }


# 7. Outcome of submit_guess
class SubmitResult(BaseModel):
    status: Literal["accepted", "rejected", "won"] = Field(..., description="What happened to the guess")
    message: str = Field(..., description="Message for the player")
    error: Optional[str] = Field(
        None, description="WrongLength | NonNumeric | DuplicateDigits | RoundAlreadyFinished | RoundChanged"
    )
    result: Optional[HistoryEntryOut] = Field(None, description="The new history row, if the guess was scored")
