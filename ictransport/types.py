"""Transport types for requests, responses, envelopes and delegations."""

from __future__ import annotations

import base64
import binascii
import dataclasses
import enum
import functools
import hashlib
import zlib
from collections.abc import Mapping
from typing import Any, ClassVar

from .request_id import RequestId, to_request_id

IC_REQUEST_DELEGATION_DOMAIN_SEPARATOR = b"\x1aic-request-auth-delegation"
IC_RESPONSE_DOMAIN_SEPARATOR = b"\x0bic-response"

_MAX_PRINCIPAL_LENGTH = 29
_U64_MAX = 2**64 - 1
_U128_LIMIT = 2**128


def _as_bytes(value: Any, name: str) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"{name} must be bytes-like, not {type(value).__name__}")


def _require(data: Mapping, key: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise ValueError(f"missing field {key!r}") from None


@dataclasses.dataclass(frozen=True, order=True)
class Principal:
    """An identifier of a user, canister or node."""

    raw: bytes = b""

    def __post_init__(self) -> None:
        raw = _as_bytes(self.raw, "Principal")
        if len(raw) > _MAX_PRINCIPAL_LENGTH:
            raise ValueError(
                f"principal is {len(raw)} bytes long, at most {_MAX_PRINCIPAL_LENGTH} allowed"
            )
        object.__setattr__(self, "raw", raw)

    def __bytes__(self) -> bytes:
        return self.raw

    def __str__(self) -> str:
        return self.to_text()

    @classmethod
    def from_text(cls, text: str) -> Principal:
        """Parse the dashed, checksummed base32 text form."""
        compact = text.replace("-", "").upper()
        padded = compact + "=" * (-len(compact) % 8)
        try:
            decoded = base64.b32decode(padded)
        except (binascii.Error, ValueError) as exc:
            raise ValueError(f"invalid principal text {text!r}: {exc}") from None
        if len(decoded) < 4:
            raise ValueError(f"principal text {text!r} is too short")
        checksum, raw = decoded[:4], decoded[4:]
        if zlib.crc32(raw).to_bytes(4, "big") != checksum:
            raise ValueError(f"principal text {text!r} has an invalid checksum")
        principal = cls(raw)
        if principal.to_text() != text.lower():
            raise ValueError(f"principal text {text!r} is not in canonical form")
        return principal

    def to_text(self) -> str:
        """Return the dashed, checksummed base32 text form."""
        checksum = zlib.crc32(self.raw).to_bytes(4, "big")
        encoded = base64.b32encode(checksum + self.raw).decode("ascii").lower().rstrip("=")
        return "-".join(encoded[start : start + 5] for start in range(0, len(encoded), 5))

    @classmethod
    def anonymous(cls) -> Principal:
        """The anonymous principal."""
        return cls(b"\x04")

    @classmethod
    def management_canister(cls) -> Principal:
        """The management canister's principal."""
        return cls(b"")

    @classmethod
    def self_authenticating(cls, public_key: bytes) -> Principal:
        """The principal derived from a DER-encoded public key."""
        return cls(hashlib.sha224(_as_bytes(public_key, "public_key")).digest() + b"\x02")


def _principal(value: Any) -> Principal:
    if isinstance(value, Principal):
        return value
    if isinstance(value, str):
        return Principal.from_text(value)
    return Principal(_as_bytes(value, "principal"))


class InvalidRejectCodeError(ValueError):
    """A number that is not a known reject code."""

    def __init__(self, code: int) -> None:
        self.code = code
        super().__init__(f"Invalid reject code {code}")


class RejectCode(enum.IntEnum):
    """Reject codes returned by the replica."""

    SYS_FATAL = 1
    SYS_TRANSIENT = 2
    DESTINATION_INVALID = 3
    CANISTER_REJECT = 4
    CANISTER_ERROR = 5

    @classmethod
    def parse(cls, value: int) -> RejectCode:
        """Return the reject code for ``value`` or raise InvalidRejectCodeError."""
        try:
            return cls(value)
        except ValueError:
            raise InvalidRejectCodeError(value) from None


@functools.total_ordering
@dataclasses.dataclass(frozen=True)
class RejectResponse:
    """An execution error received from the replica."""

    reject_code: RejectCode
    reject_message: str
    error_code: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "reject_code", RejectCode.parse(self.reject_code))

    def _sort_key(self) -> tuple:
        return (
            int(self.reject_code),
            self.reject_message,
            self.error_code is not None,
            self.error_code or "",
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RejectResponse):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def _to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "reject_code": int(self.reject_code),
            "reject_message": self.reject_message,
        }
        if self.error_code is not None:
            data["error_code"] = self.error_code
        return data

    @classmethod
    def _from_dict(cls, data: Mapping) -> RejectResponse:
        return cls(
            reject_code=RejectCode.parse(_require(data, "reject_code")),
            reject_message=_require(data, "reject_message"),
            error_code=data.get("error_code"),
        )


@dataclasses.dataclass(frozen=True, order=True)
class ReplyResponse:
    """A successful reply to a canister call."""

    arg: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "arg", _as_bytes(self.arg, "arg"))


@dataclasses.dataclass(frozen=True, order=True)
class NodeSignature:
    """A response signature from one node."""

    timestamp: int
    signature: bytes
    identity: Principal

    def __post_init__(self) -> None:
        object.__setattr__(self, "signature", _as_bytes(self.signature, "signature"))
        object.__setattr__(self, "identity", _principal(self.identity))

    def _to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "signature": self.signature,
            "identity": bytes(self.identity),
        }

    @classmethod
    def _from_dict(cls, data: Mapping) -> NodeSignature:
        return cls(
            timestamp=_require(data, "timestamp"),
            signature=_require(data, "signature"),
            identity=_require(data, "identity"),
        )


@dataclasses.dataclass
class Delegation:
    """A delegation from one key to another, optionally limited to some canisters."""

    pubkey: bytes
    expiration: int
    targets: list[Principal] | None = None

    def __post_init__(self) -> None:
        self.pubkey = _as_bytes(self.pubkey, "pubkey")
        if self.targets is not None:
            self.targets = [_principal(target) for target in self.targets]

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form, leaving out absent targets."""
        data: dict[str, Any] = {"pubkey": self.pubkey, "expiration": self.expiration}
        if self.targets is not None:
            data["targets"] = [bytes(target) for target in self.targets]
        return data

    def signable(self) -> bytes:
        """Return the request ID prefixed with the delegation domain separator."""
        return IC_REQUEST_DELEGATION_DOMAIN_SEPARATOR + to_request_id(self.to_dict()).digest

    @classmethod
    def _from_dict(cls, data: Mapping) -> Delegation:
        targets = data.get("targets")
        return cls(
            pubkey=_require(data, "pubkey"),
            expiration=_require(data, "expiration"),
            targets=None if targets is None else list(targets),
        )


@dataclasses.dataclass
class SignedDelegation:
    """A delegation together with its signature."""

    delegation: Delegation
    signature: bytes

    def __post_init__(self) -> None:
        self.signature = _as_bytes(self.signature, "signature")

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form."""
        return {"delegation": self.delegation.to_dict(), "signature": self.signature}

    @classmethod
    def _from_dict(cls, data: Mapping) -> SignedDelegation:
        return cls(
            delegation=Delegation._from_dict(_require(data, "delegation")),
            signature=_require(data, "signature"),
        )


@dataclasses.dataclass
class EnvelopeContent:
    """The content of an ingress message, without signature information."""

    REQUEST_TYPE: ClassVar[str] = ""

    ingress_expiry: int
    sender: Principal

    def __post_init__(self) -> None:
        if not self.REQUEST_TYPE:
            raise TypeError("use CallContent, QueryContent or ReadStateContent")
        if not 0 <= self.ingress_expiry <= _U64_MAX:
            raise ValueError(f"ingress_expiry out of range: {self.ingress_expiry}")
        self.sender = _principal(self.sender)

    def _body(self) -> dict[str, Any]:
        raise NotImplementedError

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form, tagged with ``request_type``."""
        return {"request_type": self.REQUEST_TYPE, **self._body()}

    def to_request_id(self) -> RequestId:
        """Return the request ID of this content."""
        return to_request_id(self.to_dict())

    @classmethod
    def from_dict(cls, data: Mapping) -> EnvelopeContent:
        """Build the content variant named by the ``request_type`` tag."""
        tag = _require(data, "request_type")
        variants = {sub.REQUEST_TYPE: sub for sub in (CallContent, QueryContent, ReadStateContent)}
        variant = variants.get(tag)
        if variant is None:
            raise ValueError(f"unknown request_type {tag!r}")
        if cls is not EnvelopeContent and variant is not cls:
            raise ValueError(f"expected request_type {cls.REQUEST_TYPE!r}, got {tag!r}")
        return variant._parse(data)

    @classmethod
    def _parse(cls, data: Mapping) -> EnvelopeContent:
        raise NotImplementedError


@dataclasses.dataclass
class _CanisterCall(EnvelopeContent):
    canister_id: Principal
    method_name: str
    arg: bytes
    nonce: bytes | None = None

    def __post_init__(self) -> None:
        super().__post_init__()
        self.canister_id = _principal(self.canister_id)
        self.arg = _as_bytes(self.arg, "arg")
        if self.nonce is not None:
            self.nonce = _as_bytes(self.nonce, "nonce")

    def _body(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "ingress_expiry": self.ingress_expiry,
            "sender": bytes(self.sender),
            "canister_id": bytes(self.canister_id),
            "method_name": self.method_name,
            "arg": self.arg,
        }
        if self.nonce is not None:
            body["nonce"] = self.nonce
        return body

    @classmethod
    def _parse(cls, data: Mapping) -> EnvelopeContent:
        return cls(
            ingress_expiry=_require(data, "ingress_expiry"),
            sender=_require(data, "sender"),
            canister_id=_require(data, "canister_id"),
            method_name=_require(data, "method_name"),
            arg=_require(data, "arg"),
            nonce=data.get("nonce"),
        )


@dataclasses.dataclass
class CallContent(_CanisterCall):
    """A replicated call to a canister method."""

    REQUEST_TYPE: ClassVar[str] = "call"


@dataclasses.dataclass
class QueryContent(_CanisterCall):
    """An unreplicated call to a canister query method."""

    REQUEST_TYPE: ClassVar[str] = "query"


@dataclasses.dataclass
class ReadStateContent(EnvelopeContent):
    """A request for paths in the state tree."""

    REQUEST_TYPE: ClassVar[str] = "read_state"

    paths: list[list[bytes]] = dataclasses.field(default_factory=list)

    def __post_init__(self) -> None:
        super().__post_init__()
        self.paths = [
            [label.encode("utf-8") if isinstance(label, str) else _as_bytes(label, "label")
             for label in path]
            for path in self.paths
        ]

    def _body(self) -> dict[str, Any]:
        return {
            "ingress_expiry": self.ingress_expiry,
            "sender": bytes(self.sender),
            "paths": [list(path) for path in self.paths],
        }

    @classmethod
    def _parse(cls, data: Mapping) -> EnvelopeContent:
        return cls(
            ingress_expiry=_require(data, "ingress_expiry"),
            sender=_require(data, "sender"),
            paths=[list(path) for path in _require(data, "paths")],
        )


@dataclasses.dataclass
class Envelope:
    """An authentication envelope: content and its signature."""

    content: EnvelopeContent
    sender_pubkey: bytes | None = None
    sender_sig: bytes | None = None
    sender_delegation: list[SignedDelegation] | None = None

    def __post_init__(self) -> None:
        if self.sender_pubkey is not None:
            self.sender_pubkey = _as_bytes(self.sender_pubkey, "sender_pubkey")
        if self.sender_sig is not None:
            self.sender_sig = _as_bytes(self.sender_sig, "sender_sig")
        if self.sender_delegation is not None:
            self.sender_delegation = list(self.sender_delegation)

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form, leaving out absent fields."""
        data: dict[str, Any] = {"content": self.content.to_dict()}
        if self.sender_pubkey is not None:
            data["sender_pubkey"] = self.sender_pubkey
        if self.sender_sig is not None:
            data["sender_sig"] = self.sender_sig
        if self.sender_delegation is not None:
            data["sender_delegation"] = [item.to_dict() for item in self.sender_delegation]
        return data

    @classmethod
    def from_dict(cls, data: Mapping) -> Envelope:
        """Build an envelope from its wire form."""
        delegations = data.get("sender_delegation")
        return cls(
            content=EnvelopeContent.from_dict(_require(data, "content")),
            sender_pubkey=data.get("sender_pubkey"),
            sender_sig=data.get("sender_sig"),
            sender_delegation=None
            if delegations is None
            else [SignedDelegation._from_dict(item) for item in delegations],
        )


@dataclasses.dataclass(frozen=True)
class ReadStateResponse:
    """The response to a read_state request: an encoded certificate."""

    certificate: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "certificate", _as_bytes(self.certificate, "certificate"))


def _signable(body: dict[str, Any], request_id: RequestId, timestamp: int) -> bytes:
    body["request_id"] = bytes(request_id)
    body["timestamp"] = timestamp
    return IC_RESPONSE_DOMAIN_SEPARATOR + to_request_id(body).digest


@dataclasses.dataclass
class QueryReplied:
    """A query that was replied to."""

    reply: ReplyResponse
    signatures: list[NodeSignature] = dataclasses.field(default_factory=list)

    def signable(self, request_id: RequestId, timestamp: int) -> bytes:
        """Return the bytes that node signatures over this response sign."""
        return _signable(
            {"status": "replied", "reply": {"arg": self.reply.arg}}, request_id, timestamp
        )


@dataclasses.dataclass
class QueryRejected:
    """A query that was rejected."""

    reject: RejectResponse
    signatures: list[NodeSignature] = dataclasses.field(default_factory=list)

    def signable(self, request_id: RequestId, timestamp: int) -> bytes:
        """Return the bytes that node signatures over this response sign."""
        return _signable({"status": "rejected", **self.reject._to_dict()}, request_id, timestamp)


def query_response_from_dict(data: Mapping) -> QueryReplied | QueryRejected:
    """Build a query response from its wire form, tagged with ``status``."""
    status = _require(data, "status")
    signatures = [NodeSignature._from_dict(item) for item in data.get("signatures") or []]
    if status == "replied":
        reply = _require(data, "reply")
        return QueryReplied(ReplyResponse(_require(reply, "arg")), signatures)
    if status == "rejected":
        return QueryRejected(RejectResponse._from_dict(data), signatures)
    raise ValueError(f"unknown query status {status!r}")


class RequestStatusKind(enum.Enum):
    """The states a call passes through."""

    UNKNOWN = "unknown"
    RECEIVED = "received"
    PROCESSING = "processing"
    REPLIED = "replied"
    REJECTED = "rejected"
    DONE = "done"


_STATUS_ORDER = {kind: index for index, kind in enumerate(RequestStatusKind)}


@functools.total_ordering
@dataclasses.dataclass(frozen=True)
class RequestStatusResponse:
    """The status of a call; replied and rejected states carry their payload."""

    kind: RequestStatusKind
    reply: ReplyResponse | None = None
    reject: RejectResponse | None = None

    def __post_init__(self) -> None:
        kind = RequestStatusKind(self.kind)
        object.__setattr__(self, "kind", kind)
        if (kind is RequestStatusKind.REPLIED) != (self.reply is not None):
            raise ValueError("a reply is given exactly when the status is replied")
        if (kind is RequestStatusKind.REJECTED) != (self.reject is not None):
            raise ValueError("a reject is given exactly when the status is rejected")

    def _sort_key(self) -> tuple:
        if self.reply is not None:
            return (_STATUS_ORDER[self.kind], self.reply.arg)
        if self.reject is not None:
            return (_STATUS_ORDER[self.kind], self.reject._sort_key())
        return (_STATUS_ORDER[self.kind],)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RequestStatusResponse):
            return NotImplemented
        return self._sort_key() < other._sort_key()


def _u64(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _U64_MAX:
        raise ValueError(f"{name} must be an unsigned 64-bit integer, got {value!r}")
    return value


@dataclasses.dataclass(frozen=True)
class SubnetMetrics:
    """Metrics of one subnet."""

    num_canisters: int
    canister_state_bytes: int
    consumed_cycles_total: int
    update_transactions_total: int

    def __post_init__(self) -> None:
        _u64(self.num_canisters, "num_canisters")
        _u64(self.canister_state_bytes, "canister_state_bytes")
        _u64(self.update_transactions_total, "update_transactions_total")
        total = self.consumed_cycles_total
        if isinstance(total, bool) or not isinstance(total, int) or not 0 <= total < _U128_LIMIT:
            raise ValueError(f"consumed_cycles_total must be an unsigned 128-bit integer")

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form; the cycle total is a map of low and high 64-bit halves."""
        high = self.consumed_cycles_total >> 64
        return {
            "num_canisters": self.num_canisters,
            "canister_state_bytes": self.canister_state_bytes,
            "consumed_cycles_total": {
                0: self.consumed_cycles_total & _U64_MAX,
                1: high if high else None,
            },
            "update_transactions_total": self.update_transactions_total,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> SubnetMetrics:
        """Build metrics from the wire form."""
        entries = list(_require(data, "consumed_cycles_total").items())
        if not entries:
            raise ValueError("missing field '0'")
        low = _u64(entries[0][1], "low half of consumed_cycles_total")
        high = entries[1][1] if len(entries) > 1 else None
        high = 0 if high is None else _u64(high, "high half of consumed_cycles_total")
        return cls(
            num_canisters=_require(data, "num_canisters"),
            canister_state_bytes=_require(data, "canister_state_bytes"),
            consumed_cycles_total=high << 64 | low,
            update_transactions_total=_require(data, "update_transactions_total"),
        )