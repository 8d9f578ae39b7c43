"""Hexadecimal identifier value used for every Matter numeric code.

Cluster codes, attribute/command/event codes, field ids, device and profile
ids are always displayed and persisted as ``0x``-prefixed hex. HexString keeps
one canonical lowercase spelling so that values read from XML, typed by a
user, or built from integers compare and serialize identically.

Public API:
    HexString           — canonical ``0x`` hex value (compares by string)
    sanitize_hex_string — pure filter usable on every keystroke
    is_valid_hex_char   — single-character check
"""

from __future__ import annotations

import re
from typing import Any, Callable

_NON_HEX_RE = re.compile(r"[^0-9a-fA-F]")
_LEADING_ZEROS_RE = re.compile(r"^0+(?=.)")
_HEX_CHAR_RE = re.compile(r"^[0-9a-fA-F]$")


def is_valid_hex_char(char: str) -> bool:
    """Return True if char is exactly one of 0-9, a-f, A-F."""
    return bool(_HEX_CHAR_RE.match(char))


def sanitize_hex_string(value: str) -> str:
    """Filter arbitrary text down to a canonical ``0x`` hex string.

    Strips an optional ``0x``/``0X`` prefix, discards every non-hex character,
    removes leading zeros (keeping at least one digit) and lower-cases the
    result. Never raises: input without any hex digit yields ``0x0``.

    Example::

        sanitize_hex_string("0xABG")     # '0xab'
        sanitize_hex_string("abcXYZ123") # '0xabc123'
        sanitize_hex_string("#$%")       # '0x0'
    """
    if value.startswith(("0x", "0X")):
        value = value[2:]
    digits = _NON_HEX_RE.sub("", value)
    if not digits:
        return "0x0"
    digits = _LEADING_ZEROS_RE.sub("", digits)
    return f"0x{digits.lower()}"


class HexString:
    """Canonical ``0x``-prefixed lowercase hex identifier.

    Built from an int, the value is zero-padded to at least four digits
    (4660 -> ``0x1234``, 1 -> ``0x0001``); wider values keep their natural
    length. Built from a string, the text goes through sanitize_hex_string.

    Equality and hashing use the canonical string, so two independently
    constructed instances for the same code are interchangeable in sets and
    dict keys. A HexString also equals a plain str with the same canonical
    text.
    """

    __slots__ = ("_value",)

    def __init__(self, value: int | str | HexString) -> None:
        if isinstance(value, HexString):
            self._value = value._value
        elif isinstance(value, bool):
            raise TypeError("HexString does not accept bool values")
        elif isinstance(value, int):
            if value < 0:
                raise ValueError(f"HexString requires a non-negative integer, got {value}")
            self._value = f"0x{format(value, 'X').zfill(4)}".lower()
        else:
            self._value = sanitize_hex_string(value)

    @classmethod
    def from_number(cls, value: int) -> HexString:
        return cls(value)

    @classmethod
    def from_string(cls, value: str) -> HexString:
        return cls(value)

    def to_number(self) -> int:
        return int(self._value, 16)

    def __int__(self) -> int:
        return self.to_number()

    def __index__(self) -> int:
        return self.to_number()

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"HexString({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, HexString):
            return self._value == other._value
        if isinstance(other, str):
            return self._value == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    # Immutable: copies share the instance, pickling restores the stored text
    # without sanitizing it again (int-built values keep their padding).
    def __copy__(self) -> HexString:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> HexString:
        return self

    def __reduce__(self) -> tuple[Callable[[str], HexString], tuple[str]]:
        return (_restore_hex_string, (self._value,))


def _restore_hex_string(canonical: str) -> HexString:
    value = HexString.__new__(HexString)
    value._value = canonical
    return value
