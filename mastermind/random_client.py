"""
Secret generation.

- generate_secret(): local Fisher-Yates shuffle of 0..9, keep the first 4.
- fetch_secret(): ask random.org for a shuffled 0..9 sequence instead. If anything
  goes wrong (no internet, timeout, bad response), we fall back to generate_secret()
  so the game still works.

Neither function logs the secret. See session.log_secret for the opt-in debug hook.
"""

import logging
from secrets import randbelow
from typing import Callable

import requests

from .types import ALPHABET, CODE_LENGTH, Code

logger = logging.getLogger(__name__)

SEQUENCES_URL = "https://www.random.org/sequences/"


def generate_secret(rand_below: Callable[[int], int] = randbelow) -> Code:
    """
    Unbiased shuffle, so each of the 10*9*8*7 ordered outcomes is equally likely.
    rand_below(n) must return an int in [0, n); tests pass a scripted one.
    """
    digits = list(ALPHABET)

    i = len(digits) - 1
    while i > 0:
        j = rand_below(i + 1)
        digits[i], digits[j] = digits[j], digits[i]
        i -= 1

    return "".join(digits[:CODE_LENGTH])


def fetch_secret(timeout: float = 3.0) -> Code:
    # random.org returns a random permutation of [min, max], one number per line
    params = {
        "min": 0,
        "max": len(ALPHABET) - 1,
        "col": 1,
        "format": "plain",
        "rnd": "new",
    }

    try:
        response = requests.get(SEQUENCES_URL, params=params, timeout=timeout)
        response.raise_for_status()

        # The body looks like:
        #   7\n0\n3\n9\n...
        digits = [line.strip() for line in response.text.splitlines() if line.strip()]

        if sorted(digits) != list(ALPHABET):
            raise ValueError(f"random.org returned {digits!r}, expected a permutation of 0..9.")

        return "".join(digits[:CODE_LENGTH])

    except (requests.RequestException, ValueError) as exc:
        logger.warning("random.org unavailable (%s); using local shuffle", exc)
        return generate_secret()


def secret_source(name: str) -> Callable[[], Code]:
    """Map the MASTERMIND_SECRET_SOURCE setting to a generator."""
    if name == "random_org":
        return fetch_secret
    if name == "local":
        return generate_secret
    raise ValueError(f"Unknown secret source {name!r}; expected 'local' or 'random_org'.")
