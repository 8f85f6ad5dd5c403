"""Signed request messages, ready to be sent later or elsewhere.

The JSON form follows the human-readable conventions: principals are written
as their text form, request IDs as 64 hexadecimal digits, and byte strings as
arrays of numbers. A nonce that is absent is left out.
"""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping
from typing import Any, Callable, ClassVar

from .request_id import RequestId
from .types import Principal

_U64_MAX = 2**64 - 1


def _check_u64(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _U64_MAX:
        raise ValueError(f"{name} must be an unsigned 64-bit integer, got {value!r}")
    return value


def _check_str(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string, got {type(value).__name__}")
    return value


def _coerce_bytes(value: Any, name: str) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"{name} must be bytes-like, not {type(value).__name__}")


def _coerce_principal(value: Any, name: str) -> Principal:
    if isinstance(value, Principal):
        return value
    if isinstance(value, str):
        return Principal.from_text(value)
    return Principal(_coerce_bytes(value, name))


def _coerce_request_id(value: Any, name: str) -> RequestId:
    if isinstance(value, RequestId):
        return value
    if isinstance(value, str):
        return RequestId.from_hex(value)
    return RequestId(_coerce_bytes(value, name))


def _bytes_from_json(value: Any, name: str) -> bytes:
    if not isinstance(value, list):
        raise ValueError(f"{name} must be an array of bytes")
    for item in value:
        if isinstance(item, bool) or not isinstance(item, int) or not 0 <= item <= 255:
            raise ValueError(f"{name} holds an invalid byte {item!r}")
    return bytes(value)


def _principal_from_json(value: Any, name: str) -> Principal:
    return Principal.from_text(_check_str(value, name))


def _request_id_from_json(value: Any, name: str) -> RequestId:
    text = _check_str(value, name)
    if len(text) != 64:
        raise ValueError(f"must be 32 bytes long, was {len(text) // 2}")
    return RequestId.from_hex(text)


@dataclasses.dataclass(frozen=True)
class _Codec:
    optional: bool
    coerce: Callable[[Any, str], Any]
    dump: Callable[[Any], Any]
    load: Callable[[Any, str], Any]


_U64 = _Codec(False, _check_u64, lambda v: v, _check_u64)
_STR = _Codec(False, _check_str, lambda v: v, _check_str)
_PRINCIPAL = _Codec(False, _coerce_principal, lambda v: v.to_text(), _principal_from_json)
_BYTES = _Codec(False, _coerce_bytes, list, _bytes_from_json)
_OPT_BYTES = _Codec(True, _coerce_bytes, list, _bytes_from_json)
_REQUEST_ID = _Codec(False, _coerce_request_id, lambda v: v.to_hex(), _request_id_from_json)


def _coerce_fields(message: Any, codecs: Mapping[str, _Codec]) -> None:
    for field in dataclasses.fields(message):
        codec = codecs[field.name]
        value = getattr(message, field.name)
        if value is None and codec.optional:
            continue
        setattr(message, field.name, codec.coerce(value, field.name))


def _dump_json(message: Any, codecs: Mapping[str, _Codec]) -> str:
    data: dict[str, Any] = {}
    for field in dataclasses.fields(message):
        value = getattr(message, field.name)
        if value is None:
            continue
        data[field.name] = codecs[field.name].dump(value)
    return json.dumps(data, separators=(",", ":"))


def _load_json(cls: Any, codecs: Mapping[str, _Codec], text: str) -> dict[str, Any]:
    data = json.loads(text)
    if not isinstance(data, Mapping):
        raise ValueError(f"expected a JSON object for {cls.__name__}")
    values: dict[str, Any] = {}
    for field in dataclasses.fields(cls):
        codec = codecs[field.name]
        raw = data.get(field.name)
        if raw is None:
            if codec.optional:
                values[field.name] = None
                continue
            raise ValueError(f"missing field {field.name!r}")
        values[field.name] = codec.load(raw, field.name)
    return values


@dataclasses.dataclass(kw_only=True)
class SignedQuery:
    """A signed query request."""

    _CODECS: ClassVar[dict[str, _Codec]] = {
        "ingress_expiry": _U64,
        "sender": _PRINCIPAL,
        "canister_id": _PRINCIPAL,
        "method_name": _STR,
        "arg": _BYTES,
        "effective_canister_id": _PRINCIPAL,
        "signed_query": _BYTES,
        "nonce": _OPT_BYTES,
    }

    ingress_expiry: int
    sender: Principal
    canister_id: Principal
    method_name: str
    arg: bytes
    effective_canister_id: Principal
    signed_query: bytes
    nonce: bytes | None = None

    def __post_init__(self) -> None:
        _coerce_fields(self, self._CODECS)

    def to_json(self) -> str:
        """Return the compact JSON form, leaving out an absent nonce."""
        return _dump_json(self, self._CODECS)

    @classmethod
    def from_json(cls, text: str) -> SignedQuery:
        """Build the message from its JSON form."""
        return cls(**_load_json(cls, cls._CODECS, text))


@dataclasses.dataclass(kw_only=True)
class SignedUpdate:
    """A signed update request."""

    _CODECS: ClassVar[dict[str, _Codec]] = {
        "nonce": _OPT_BYTES,
        "ingress_expiry": _U64,
        "sender": _PRINCIPAL,
        "canister_id": _PRINCIPAL,
        "method_name": _STR,
        "arg": _BYTES,
        "effective_canister_id": _PRINCIPAL,
        "signed_update": _BYTES,
        "request_id": _REQUEST_ID,
    }

    nonce: bytes | None = None
    ingress_expiry: int
    sender: Principal
    canister_id: Principal
    method_name: str
    arg: bytes
    effective_canister_id: Principal
    signed_update: bytes
    request_id: RequestId

    def __post_init__(self) -> None:
        _coerce_fields(self, self._CODECS)

    def to_json(self) -> str:
        """Return the compact JSON form, leaving out an absent nonce."""
        return _dump_json(self, self._CODECS)

    @classmethod
    def from_json(cls, text: str) -> SignedUpdate:
        """Build the message from its JSON form."""
        return cls(**_load_json(cls, cls._CODECS, text))


@dataclasses.dataclass(kw_only=True)
class SignedRequestStatus:
    """A signed request-status request."""

    _CODECS: ClassVar[dict[str, _Codec]] = {
        "ingress_expiry": _U64,
        "sender": _PRINCIPAL,
        "effective_canister_id": _PRINCIPAL,
        "request_id": _REQUEST_ID,
        "signed_request_status": _BYTES,
    }

    ingress_expiry: int
    sender: Principal
    effective_canister_id: Principal
    request_id: RequestId
    signed_request_status: bytes

    def __post_init__(self) -> None:
        _coerce_fields(self, self._CODECS)

    def to_json(self) -> str:
        """Return the compact JSON form."""
        return _dump_json(self, self._CODECS)

    @classmethod
    def from_json(cls, text: str) -> SignedRequestStatus:
        """Build the message from its JSON form."""
        return cls(**_load_json(cls, cls._CODECS, text))