"""
Pure game logic (no HTTP, no storage).
We compute two feedback numbers for each guess:
- exact (the "A"): digits that are right in both value and position
- value (the "B"): digits that are in the secret but sit in the wrong position

Both codes always have 4 unique digits, which is what makes the
"overlap minus exact" shortcut below correct.
"""

from typing import NamedTuple

from .errors import DuplicateDigits, NonNumeric, WrongLength
from .types import ALPHABET, CODE_LENGTH, Code


class ScoreResult(NamedTuple):
    exact: int
    value: int


def validate_guess(raw: str) -> Code:
    """
    Turn raw player input into a Code, or raise.

    The checks run in a fixed order so the player always sees the same message
    for the same input: length first, then charset, then repeats.
    Nothing is stripped; " 123" is the wrong length, not a valid guess.
    """
    if len(raw) != CODE_LENGTH:
        raise WrongLength()

    # str.isdigit() would also accept things like "١٢٣٤" or "²"
    for char in raw:
        if char not in ALPHABET:
            raise NonNumeric()

    if len(set(raw)) != CODE_LENGTH:
        raise DuplicateDigits()

    return raw


def score_guess(guess: Code, secret: Code) -> ScoreResult:
    """
    Example:
      guess  = "1234"
      secret = "1357"
      exact = 1  (the "1" in front)
      value = 1  (the "3" is in the secret, but not at index 2)
      Returns ScoreResult(exact=1, value=1), shown as "1A1B"
    """

    # 1. Count exact position matches
    exact = 0
    for g, s in zip(guess, secret):
        if g == s:
            exact += 1

    # 2. Count guess digits that appear anywhere in the secret.
    #    Each digit is unique, so every exact match is counted here exactly once too.
    overlap = 0
    for g in guess:
        if g in secret:
            overlap += 1

    return ScoreResult(exact=exact, value=overlap - exact)


def is_win(result: ScoreResult) -> bool:
    """Win = every position is an exact match."""
    return result.exact == CODE_LENGTH


def format_result(result: ScoreResult) -> str:
    return f"{result.exact}A{result.value}B"
