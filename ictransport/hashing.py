"""Representation-independent hashing of structured data.

Values are hashed as follows:

* ``None`` is omitted from the containing map or sequence.
* Non-negative ints use unsigned LEB128; negative ints and :class:`SignedInt`
  use signed LEB128. Both are limited to 64 bits.
* ``str`` is hashed as its UTF-8 bytes; bytes-like values as-is, as is any
  object that supports ``bytes()``.
* Sequences hash the concatenation of their element hashes.
* Mappings and dataclass instances hash the sorted concatenation of their
  (key hash, value hash) pairs.
* :class:`Variant` is hashed as a one-entry map from its name to its value.
* Booleans and floats are not supported.
"""

from __future__ import annotations

import dataclasses
import enum
import hashlib
from collections.abc import Mapping
from typing import Any

from .errors import KeyWasNoneError, RequestIdError, UnsupportedTypeError

_U64_MAX = 2**64 - 1
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


@dataclasses.dataclass(frozen=True)
class SignedInt:
    """An integer to be hashed with signed LEB128 encoding."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError("SignedInt requires an int")
        if not _I64_MIN <= self.value <= _I64_MAX:
            raise RequestIdError(f"signed integer out of 64-bit range: {self.value}")


@dataclasses.dataclass(frozen=True)
class Variant:
    """A named enum variant carrying a value; hashed as ``{name: value}``."""

    name: str
    value: Any


def leb128_unsigned(value: int) -> bytes:
    """Encode a non-negative integer as unsigned LEB128."""
    if value < 0:
        raise ValueError("unsigned LEB128 requires a non-negative value")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def leb128_signed(value: int) -> bytes:
    """Encode an integer as signed LEB128."""
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        done = (value == 0 and not byte & 0x40) or (value == -1 and byte & 0x40)
        if done:
            out.append(byte)
            return bytes(out)
        out.append(byte | 0x80)


def _sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def _hash_int(value: int) -> bytes:
    if value >= 0:
        if value > _U64_MAX:
            raise RequestIdError(f"integer out of 64-bit range: {value}")
        return _sha256(leb128_unsigned(value))
    if value < _I64_MIN:
        raise RequestIdError(f"integer out of 64-bit range: {value}")
    return _sha256(leb128_signed(value))


def _hash_pairs(pairs: list[tuple[bytes, bytes]]) -> bytes:
    hasher = hashlib.sha256()
    for key, value in sorted(pairs):
        hasher.update(key)
        hasher.update(value)
    return hasher.digest()


def _hash_map(items) -> bytes:
    pairs = []
    for key, value in items:
        key_hash = hash_of(key)
        if key_hash is None:
            raise KeyWasNoneError()
        value_hash = hash_of(value)
        if value_hash is not None:
            pairs.append((key_hash, value_hash))
    return _hash_pairs(pairs)


def _hash_seq(items) -> bytes:
    hasher = hashlib.sha256()
    for item in items:
        item_hash = hash_of(item)
        if item_hash is not None:
            hasher.update(item_hash)
    return hasher.digest()


def hash_of(value: Any) -> bytes | None:
    """Return the 32-byte hash of ``value``, or None if ``value`` is None."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise UnsupportedTypeError("Bool")
    if isinstance(value, SignedInt):
        return _sha256(leb128_signed(value.value))
    if isinstance(value, Variant):
        return _hash_map([(value.name, value.value)])
    if isinstance(value, int):
        return _hash_int(int(value))
    if isinstance(value, float):
        raise UnsupportedTypeError("f64")
    if isinstance(value, str):
        return _sha256(value.encode("utf-8"))
    if isinstance(value, (bytes, bytearray, memoryview)):
        return _sha256(bytes(value))
    if isinstance(value, enum.Enum):
        return hash_of(value.value)
    if hasattr(value, "__bytes__"):
        return _sha256(bytes(value))
    if isinstance(value, Mapping):
        return _hash_map(value.items())
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _hash_map(
            (field.name, getattr(value, field.name)) for field in dataclasses.fields(value)
        )
    if isinstance(value, (list, tuple)):
        return _hash_seq(value)
    raise UnsupportedTypeError(type(value).__name__)