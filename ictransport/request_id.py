"""Request IDs: the SHA-256 hash of a request's content."""

from __future__ import annotations

import dataclasses
import re
from typing import Any

from .errors import EmptySerializerError, RequestIdFromStringError
from .hashing import hash_of

IC_REQUEST_DOMAIN_SEPARATOR = b"\x0aic-request"

_HEX_RE = re.compile(r"[0-9a-fA-F]*")


@dataclasses.dataclass(frozen=True, order=True)
class RequestId:
    """A 32-byte request ID."""

    digest: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.digest, (bytes, bytearray, memoryview)):
            raise TypeError("RequestId requires a bytes-like digest")
        digest = bytes(self.digest)
        if len(digest) != 32:
            raise ValueError(f"must be 32 bytes long, was {len(digest)}")
        object.__setattr__(self, "digest", digest)

    def __bytes__(self) -> bytes:
        return self.digest

    def __str__(self) -> str:
        return self.to_hex()

    def signable(self) -> bytes:
        """Return the ID prefixed with the ``\\x0Aic-request`` domain separator."""
        return IC_REQUEST_DOMAIN_SEPARATOR + self.digest

    @classmethod
    def from_hex(cls, text: str) -> RequestId:
        """Parse a request ID from 64 hexadecimal digits, in either case."""
        if len(text) % 2 or not _HEX_RE.fullmatch(text):
            raise RequestIdFromStringError.invalid_hex(f"invalid hex string {text!r}")
        raw = bytes.fromhex(text)
        if len(raw) != 32:
            raise RequestIdFromStringError.invalid_size(len(raw))
        return cls(raw)

    def to_hex(self) -> str:
        """Return the ID as 64 lower-case hexadecimal digits."""
        return self.digest.hex()


def to_request_id(value: Any) -> RequestId:
    """Compute the request ID of a structured value.

    Raises :class:`EmptySerializerError` if there is nothing to hash.
    """
    digest = hash_of(value)
    if digest is None:
        raise EmptySerializerError()
    return RequestId(digest)