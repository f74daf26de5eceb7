"""
Deterministic bucket assignment.

    hash = (hash << 5) − hash + code      truncated to signed 32 bits each step
    slot = |hash| mod 1000
    bucket = variant if slot < traffic_split × 1000 else control

Codes are UTF-16 code units so identifiers outside the BMP hash the same way
they do in browser-side clients.
"""

from typing import Iterator

from quote_scoring.models.enumerations import Bucket

HASH_SLOTS = 1000


def _utf16_code_units(value: str) -> Iterator[int]:
    for char in value:
        code_point = ord(char)
        if code_point > 0xFFFF:
            code_point -= 0x10000
            yield 0xD800 + (code_point >> 10)
            yield 0xDC00 + (code_point & 0x3FF)
        else:
            yield code_point


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def rolling_hash(value: str) -> int:
    """Signed 32-bit polynomial (×31) rolling hash."""
    h = 0
    for code in _utf16_code_units(value):
        h = _to_int32((h << 5) - h + code)
    return h


def hash_slot(subject_id: str) -> int:
    """Slot in [0, 1000) for a subject identifier."""
    return abs(rolling_hash(subject_id)) % HASH_SLOTS


def assign_bucket(subject_id: str, traffic_split: float) -> Bucket:
    """Bucket for a subject under a given split; pure in its arguments."""
    if hash_slot(subject_id) < traffic_split * HASH_SLOTS:
        return Bucket.VARIANT
    return Bucket.CONTROL
