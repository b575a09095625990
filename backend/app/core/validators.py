"""
core/validators.py

Reusable field validators:
- Password strength (ASCII only, mixed case, digit, special character)
- Catalog weights (question weight 1..100, answer weight 0..100)
- Optional free text where blank input means "not provided"
"""

import string
from collections.abc import Callable
from typing import Final


# -------------------------------
# Constants
# -------------------------------
MIN_PASSWORD_LENGTH: Final[int] = 8
MAX_PASSWORD_LENGTH: Final[int] = 128

MIN_QUESTION_WEIGHT: Final[int] = 1
MAX_QUESTION_WEIGHT: Final[int] = 100
MIN_ANSWER_WEIGHT: Final[int] = 0
MAX_ANSWER_WEIGHT: Final[int] = 100

_PASSWORD_RULES: Final[list[tuple[Callable[[str], bool], str]]] = [
    (lambda p: p.isascii(), "Password must contain only ASCII characters."),
    (
        lambda p: any(c in string.ascii_uppercase for c in p),
        "Password must contain at least one uppercase letter.",
    ),
    (
        lambda p: any(c in string.ascii_lowercase for c in p),
        "Password must contain at least one lowercase letter.",
    ),
    (lambda p: any(c.isdigit() for c in p), "Password must contain at least one digit."),
    (
        lambda p: any(c in string.punctuation for c in p),
        "Password must contain at least one special character.",
    ),
]


# -------------------------------
# Validator Functions
# -------------------------------
def password_validator(password: str) -> str:
    """
    Validates password strength for new accounts.

    Raises:
        ValueError: On the first rule the password breaks.
    """
    if not MIN_PASSWORD_LENGTH <= len(password) <= MAX_PASSWORD_LENGTH:
        raise ValueError(
            f"Password must be between {MIN_PASSWORD_LENGTH} and {MAX_PASSWORD_LENGTH} characters long."
        )
    for check, message in _PASSWORD_RULES:
        if not check(password):
            raise ValueError(message)
    return password


def question_weight_validator(weight: int) -> int:
    if not MIN_QUESTION_WEIGHT <= weight <= MAX_QUESTION_WEIGHT:
        raise ValueError(
            f"Question weight must be between {MIN_QUESTION_WEIGHT} and {MAX_QUESTION_WEIGHT}."
        )
    return weight


def answer_weight_validator(weight: int) -> int:
    if not MIN_ANSWER_WEIGHT <= weight <= MAX_ANSWER_WEIGHT:
        raise ValueError(
            f"Answer weight must be between {MIN_ANSWER_WEIGHT} and {MAX_ANSWER_WEIGHT}."
        )
    return weight


def optional_text_validator(value: str | None) -> str | None:
    """Strips optional text; blank input becomes None."""
    if value is None:
        return None
    value = value.strip()
    return value or None
