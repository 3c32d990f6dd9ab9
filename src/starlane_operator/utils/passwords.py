"""Generation of credential values for managed services."""

from __future__ import annotations

import secrets
import string

_SYMBOLS = "~!@#$%^&*()_+`-={}|[]\\:\"<>?,./"


def generate_password(length: int = 16, num_digits: int = 4, num_symbols: int = 4) -> str:
    """Generate a random password without repeated characters.

    Args:
        length: Total number of characters
        num_digits: How many of them are digits
        num_symbols: How many of them are symbols

    Returns:
        Generated password
    """
    num_letters = length - num_digits - num_symbols
    if num_letters < 0:
        raise ValueError("digits and symbols exceed the password length")

    rng = secrets.SystemRandom()
    chars = (
        rng.sample(string.ascii_letters, num_letters)
        + rng.sample(string.digits, num_digits)
        + rng.sample(_SYMBOLS, num_symbols)
    )
    rng.shuffle(chars)
    return "".join(chars)
