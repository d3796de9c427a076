"""
Base62 Short Code Codec

Pure conversion between link identities (non-negative 64-bit integers) and
short codes. No I/O and no shared state.

Design Decisions:
- Alphabet is digits, then uppercase, then lowercase: [0-9A-Za-z]
- Positional numeral system, most significant symbol first, no padding
- Identity 0 encodes to "0"; the empty string is never a valid code
- Codes are collision-free because identities are never reissued

Example:
    encode_base62(1)    -> "1"
    encode_base62(62)   -> "10"
    encode_base62(1000) -> "G8"
"""

import string
from typing import Optional

from shortener.core.exceptions import InvalidCodeError

BASE62_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase
BASE62_BASE = len(BASE62_ALPHABET)

# Largest identity a signed 64-bit sequence can issue
MAX_IDENTITY = 2 ** 63 - 1

_ALPHABET_INDEX = {char: index for index, char in enumerate(BASE62_ALPHABET)}


def encode_base62(number: int) -> str:
    """
    Encode an identity as a base62 short code.

    Args:
        number: Identity in the range [0, 2^63 - 1]

    Returns:
        Base62 encoded string, at least one character long

    Raises:
        ValueError: If number is not an int or is out of range
    """
    if not isinstance(number, int) or isinstance(number, bool):
        raise ValueError(f"Identity must be an integer, got {type(number).__name__}")
    if number < 0 or number > MAX_IDENTITY:
        raise ValueError(f"Identity out of range [0, {MAX_IDENTITY}]: {number}")

    if number == 0:
        return BASE62_ALPHABET[0]

    digits = []
    while number > 0:
        number, remainder = divmod(number, BASE62_BASE)
        digits.append(BASE62_ALPHABET[remainder])

    return "".join(reversed(digits))


def decode_base62(code: Optional[str]) -> int:
    """
    Decode a base62 short code back to its identity.

    Args:
        code: The base62 encoded string

    Returns:
        The decoded identity

    Raises:
        InvalidCodeError: If the code is empty, contains characters outside
            the alphabet, or exceeds the 64-bit identity range
    """
    if not code or not isinstance(code, str):
        raise InvalidCodeError(code, reason="Short code cannot be null or empty")

    number = 0
    for char in code:
        index = _ALPHABET_INDEX.get(char)
        if index is None:
            raise InvalidCodeError(code, reason=f"Invalid character {char!r} in short code")
        number = number * BASE62_BASE + index

    if number > MAX_IDENTITY:
        raise InvalidCodeError(code, reason="Short code exceeds the identity range")

    return number


def is_valid_syntax(code: Optional[str]) -> bool:
    """Return True if code is a non-empty string made only of base62 characters."""
    if not code or not isinstance(code, str):
        return False
    return all(char in _ALPHABET_INDEX for char in code)


def is_canonical(code: Optional[str]) -> bool:
    """
    Return True if code is exactly what encode_base62 produces for some identity.

    Leading zeros decode fine but never come out of the encoder, so "007"
    is valid syntax without being canonical.
    """
    if not is_valid_syntax(code):
        return False
    if len(code) > 1 and code[0] == BASE62_ALPHABET[0]:
        return False
    try:
        decode_base62(code)
    except InvalidCodeError:
        return False
    return True
