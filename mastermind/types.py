"""
Labels for clarity.
"""

from typing import Literal

Digit = str  # "0" -> "9"
Code = str  # 4 unique digits, ex. "0123"
RoundStatus = Literal["active", "won"]
SubmitStatus = Literal["accepted", "rejected", "won"]

ALPHABET = "0123456789"
CODE_LENGTH = 4
