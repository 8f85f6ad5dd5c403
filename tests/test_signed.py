import json

import pytest

from ictransport.errors import RequestIdFromStringError
from ictransport.request_id import RequestId
from ictransport.signed import SignedQuery, SignedRequestStatus, SignedUpdate
from ictransport.types import Principal


def _mgmt():
    return Principal.management_canister()


def _query(nonce=None):
    return SignedQuery(
        ingress_expiry=1,
        sender=_mgmt(),
        canister_id=_mgmt(),
        method_name="greet",
        arg=bytes([0, 1]),
        effective_canister_id=_mgmt(),
        signed_query=bytes([0, 1, 2, 3]),
        nonce=nonce,
    )


def _update():
    return SignedUpdate(
        nonce=None,
        ingress_expiry=1,
        sender=_mgmt(),
        canister_id=_mgmt(),
        method_name="greet",
        arg=bytes([0, 1]),
        effective_canister_id=_mgmt(),
        signed_update=bytes([0, 1, 2, 3]),
        request_id=RequestId(bytes(32)),
    )


def _status():
    return SignedRequestStatus(
        ingress_expiry=1,
        sender=_mgmt(),
        effective_canister_id=_mgmt(),
        request_id=RequestId(bytes(32)),
        signed_request_status=bytes([0, 1, 2, 3]),
    )


def test_query_serde():
    query = _query()
    assert SignedQuery.from_json(query.to_json()) == query


def test_update_serde():
    update = _update()
    assert SignedUpdate.from_json(update.to_json()) == update


def test_request_status_serde():
    status = _status()
    assert SignedRequestStatus.from_json(status.to_json()) == status


def test_request_status_json_form():
    expected = (
        '{"ingress_expiry":1,"sender":"aaaaa-aa","effective_canister_id":"aaaaa-aa",'
        '"request_id":"' + "0" * 64 + '","signed_request_status":[0,1,2,3]}'
    )
    assert _status().to_json() == expected


def test_absent_nonce_left_out():
    data = json.loads(_query().to_json())
    assert "nonce" not in data
    assert data["arg"] == [0, 1]
    assert data["method_name"] == "greet"


def test_nonce_round_trip():
    query = _query(nonce=b"\x07\x08")
    data = json.loads(query.to_json())
    assert data["nonce"] == [7, 8]
    assert SignedQuery.from_json(query.to_json()).nonce == b"\x07\x08"


def test_update_field_order_starts_with_nonce():
    update = _update()
    update.nonce = b"\x01"
    assert list(json.loads(update.to_json()))[0] == "nonce"


def test_principal_given_as_text_is_parsed():
    status = SignedRequestStatus(
        ingress_expiry=5,
        sender="aaaaa-aa",
        effective_canister_id="2vxsx-fae",
        request_id=RequestId(bytes(32)),
        signed_request_status=b"",
    )
    assert status.effective_canister_id == Principal.anonymous()


def test_missing_field_raises():
    data = json.loads(_status().to_json())
    del data["request_id"]
    with pytest.raises(ValueError, match="request_id"):
        SignedRequestStatus.from_json(json.dumps(data))


def test_request_id_wrong_length_raises():
    data = json.loads(_status().to_json())
    data["request_id"] = "00" * 31
    with pytest.raises(ValueError, match="must be 32 bytes long, was 31"):
        SignedRequestStatus.from_json(json.dumps(data))


def test_request_id_bad_hex_raises():
    data = json.loads(_status().to_json())
    data["request_id"] = "zz" * 32
    with pytest.raises(RequestIdFromStringError):
        SignedRequestStatus.from_json(json.dumps(data))


def test_invalid_byte_raises():
    data = json.loads(_query().to_json())
    data["arg"] = [0, 256]
    with pytest.raises(ValueError, match="invalid byte"):
        SignedQuery.from_json(json.dumps(data))


def test_negative_expiry_raises():
    data = json.loads(_query().to_json())
    data["ingress_expiry"] = -1
    with pytest.raises(ValueError, match="ingress_expiry"):
        SignedQuery.from_json(json.dumps(data))


def test_non_object_json_raises():
    with pytest.raises(ValueError, match="JSON object"):
        SignedUpdate.from_json("[1, 2]")