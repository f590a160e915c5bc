"""
Hex string helpers for the JSON-style parameter form.

Numeric values are rendered as 0x-prefixed lowercase hex with leading
zeros stripped; byte payloads keep every nibble.
"""

import re
from typing import Any, Optional

_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")


def add_hex_prefix(s: str) -> str:
    """Return s with a 0x prefix, adding one if missing."""
    if s.startswith("0x") or s.startswith("0X"):
        return s
    return "0x" + s


def strip_hex_prefix(s: str) -> str:
    """Return s without its 0x prefix."""
    if s.startswith("0x") or s.startswith("0X"):
        return s[2:]
    return s


def strip_leading_zeroes(s: str) -> str:
    """
    Strip leading zero nibbles from a hex string.

    An all-zero (or empty) string collapses to "0x0".

    Args:
        s: Hex string, with or without 0x prefix

    Returns:
        0x-prefixed hex string without leading zeros
    """
    stripped = strip_hex_prefix(s).lstrip("0")
    return "0x" + (stripped or "0")


def is_hex(s: str) -> bool:
    """Whether s (prefix ignored) consists only of hex digits."""
    return bool(_HEX_RE.match(strip_hex_prefix(s)))


def int_to_hex(value: int) -> str:
    """Encode a non-negative integer as stripped 0x-prefixed hex."""
    if value < 0:
        raise ValueError(f"Cannot hex-encode a negative integer: {value}")
    return hex(value)


def hex_to_int(value: Any) -> Optional[int]:
    """
    Decode a hex-encoded unsigned integer.

    Accepts 0x-prefixed or bare hex strings ("0x" and "" decode to zero)
    and non-negative Python ints.

    Returns:
        The integer, or None if the value is not a valid unsigned quantity
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if not isinstance(value, str):
        return None
    digits = strip_hex_prefix(value.strip())
    if not _HEX_RE.match(digits):
        return None
    if not digits:
        return 0
    return int(digits, 16)


def bytes_to_hex(data: bytes) -> str:
    """Encode bytes as 0x-prefixed lowercase hex ("0x" when empty)."""
    return "0x" + bytes(data).hex()


def hex_to_bytes(value: Any) -> Optional[bytes]:
    """
    Decode a hex string into bytes.

    Returns:
        Decoded bytes, or None for odd-length or non-hex input
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if not isinstance(value, str):
        return None
    digits = strip_hex_prefix(value.strip())
    if len(digits) % 2 == 1 or not _HEX_RE.match(digits):
        return None
    return bytes.fromhex(digits)


__all__ = [
    "add_hex_prefix",
    "strip_hex_prefix",
    "strip_leading_zeroes",
    "is_hex",
    "int_to_hex",
    "hex_to_int",
    "bytes_to_hex",
    "hex_to_bytes",
]
