import pytest

from ictransport.errors import (
    EmptySerializerError,
    KeyWasNoneError,
    RequestIdError,
    RequestIdFromStringError,
    UnsupportedTypeError,
)


def test_unsupported_type_message():
    err = UnsupportedTypeError("Bool")
    assert str(err) == "Unsupported type: Bool"
    assert err.type_name == "Bool"


def test_unsupported_type_is_request_id_error_and_type_error():
    err = UnsupportedTypeError("f64")
    assert str(err) == "Unsupported type: f64"
    assert err.type_name == "f64"
    assert isinstance(err, RequestIdError)
    assert isinstance(err, TypeError)


@pytest.mark.parametrize("type_name", ["f32", "()", "unit struct"])
def test_unsupported_type_names_carried_into_message(type_name):
    err = UnsupportedTypeError(type_name)
    assert str(err) == f"Unsupported type: {type_name}"
    assert err.type_name == type_name


def test_key_was_none_message():
    err = KeyWasNoneError()
    assert str(err) == "Struct serializer received a key of None"
    assert isinstance(err, RequestIdError)


def test_empty_serializer_message():
    err = EmptySerializerError()
    assert str(err) == "Need to provide data to serialize"
    assert isinstance(err, RequestIdError)


def test_request_id_error_carries_message():
    err = RequestIdError("custom failure")
    assert str(err) == "custom failure"


def test_from_string_invalid_size():
    err = RequestIdFromStringError.invalid_size(5)
    assert err.size == 5
    assert str(err) == "Invalid string size: 5. Must be even."
    assert isinstance(err, ValueError)


def test_from_string_invalid_hex():
    err = RequestIdFromStringError.invalid_hex("bad digit")
    assert str(err) == "Error while decoding hex: bad digit"
    assert err.size is None


def test_from_string_error_is_not_request_id_error():
    err = RequestIdFromStringError.invalid_size(3)
    assert str(err) == "Invalid string size: 3. Must be even."
    assert isinstance(err, RequestIdError) is False