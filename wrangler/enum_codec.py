"""
Offset-style enum values.

Extension enum constants are encoded as
``1_000_000_000 + extension_id * 1000 + offset``.
"""

from typing import Tuple

ENUM_BASE = 1_000_000_000
EXTENSION_BLOCK_SIZE = 1000


def _trunc_divmod(n: int, d: int) -> Tuple[int, int]:
    # C division truncates toward zero
    q = abs(n) // d
    if n < 0:
        q = -q
    return q, n - q * d


def decode_enum_value(value: int) -> Tuple[int, int]:
    """Split an enum value into ``(extension_id, offset)``."""
    return _trunc_divmod(value - ENUM_BASE, EXTENSION_BLOCK_SIZE)


def encode_enum_value(extension_id: int, offset: int) -> int:
    return ENUM_BASE + extension_id * EXTENSION_BLOCK_SIZE + offset
