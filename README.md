# ictransport

Data types for Internet Computer HTTP messages, and the representation-independent
hashing that turns them into request IDs.

## Installation

```
pip install ictransport
```

To run the test suite:

```
pip install "ictransport[test]"
pytest
```

## Modules

- `ictransport.hashing`: `hash_of(value)` returns the 32-byte
  representation-independent hash of nested Python values, or `None` for `None`.
  Dicts and dataclass instances are hashed as maps, lists and tuples as sequences,
  bytes-like values (and anything supporting `bytes()`) as blobs, `str` as UTF-8
  text, non-negative `int` as unsigned LEB128 and negative `int` as signed LEB128,
  both limited to 64 bits. Enum members are hashed by their value. `SignedInt`
  wraps a value to be hashed as signed LEB128, and `Variant(name, value)` is hashed
  as the one-entry map `{name: value}`. Entries holding `None` are left out.
  `leb128_unsigned` and `leb128_signed` expose the integer encodings.
- `ictransport.request_id`: `RequestId`, a 32-byte hash with `signable()` (the
  hash prefixed with `b"\x0aic-request"`), `from_hex()` and `to_hex()`, and
  `to_request_id(value)`.
- `ictransport.types`: `Principal` (with `from_text`, `to_text`, `anonymous`,
  `management_canister` and `self_authenticating`), `EnvelopeContent` with its
  variants `CallContent`, `QueryContent` and `ReadStateContent`, `Envelope`,
  `Delegation`, `SignedDelegation`, `RejectCode` and `InvalidRejectCodeError`,
  `RejectResponse`, `ReplyResponse`, `NodeSignature`, `ReadStateResponse`, the
  query responses `QueryReplied` and `QueryRejected` with
  `query_response_from_dict`, `RequestStatusKind`, `RequestStatusResponse` and
  `SubnetMetrics`. Types with a wire form offer `to_dict()` and, where it applies,
  `from_dict()`.
- `ictransport.signed`: `SignedQuery`, `SignedUpdate` and `SignedRequestStatus`,
  each with a JSON round trip through `to_json()` and `from_json()`. Principals are
  written as text, request IDs as hex, byte strings as arrays of numbers.
- `ictransport.expiry`: `Expiry`, which is unspecified, a delay after the moment
  of the call (`Expiry.after`), or a fixed point in time (`Expiry.at`).
  `ingress_expiry(now)` gives nanoseconds since the Unix epoch, or `None`.
- `ictransport.errors`: `RequestIdError` with its subclasses
  `UnsupportedTypeError`, `KeyWasNoneError` and `EmptySerializerError`, and
  `RequestIdFromStringError`.

## Example

```python
from ictransport.request_id import RequestId, to_request_id
from ictransport.types import CallContent, Principal

content = {
    "request_type": "call",
    "canister_id": bytes(Principal.from_text("aaaaa-aa")),
    "method_name": "hello",
    "arg": b"DIDL\x00\xfd*",
    "sender": None,  # left out of the hash
}
request_id = to_request_id(content)
print(request_id.to_hex())
signable = request_id.signable()  # b"\x0aic-request" followed by the 32 hash bytes

assert RequestId.from_hex(request_id.to_hex()) == request_id

call = CallContent(
    ingress_expiry=1685570400000000000,
    sender=Principal.anonymous(),
    canister_id=Principal.management_canister(),
    method_name="hello",
    arg=b"DIDL\x00\xfd*",
)
print(call.to_request_id())
```

Hashing only accepts values the scheme supports: booleans and floats raise
`UnsupportedTypeError`, and `to_request_id(None)` raises `EmptySerializerError`;
both are `RequestIdError`s.

## What it does not do

This package holds data types and hashing only. It does not send requests to a
replica, poll for call results, sign messages with a key, verify certificates or
node signatures, or encode messages as CBOR: `to_dict()` returns plain Python
dicts for the caller to encode.