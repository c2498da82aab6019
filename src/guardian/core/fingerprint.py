"""
Content fingerprinting for analysis caches.

Computes the same 32-bit rolling hash editors use for quick content
identity checks: ``hash = hash * 31 + code_unit`` over UTF-16 code units,
wrapped to a signed 32-bit integer at every step.
"""

import struct

_UINT32_MASK = 0xFFFFFFFF
_INT32_SIGN = 0x80000000


def _to_int32(value: int) -> int:
    """Reinterpret an unsigned 32-bit value as signed."""
    return value - (1 << 32) if value & _INT32_SIGN else value


def fingerprint(text: str) -> int:
    """
    Compute the content fingerprint of a text buffer.

    Args:
        text: Text to hash

    Returns:
        Signed 32-bit integer; 0 for the empty string
    """
    if not text:
        return 0

    value = 0
    encoded = text.encode("utf-16-le", "surrogatepass")
    for (code_unit,) in struct.iter_unpack("<H", encoded):
        value = (value * 31 + code_unit) & _UINT32_MASK
    return _to_int32(value)
