"""Exceptions raised while computing or parsing request IDs."""

from __future__ import annotations


class RequestIdError(Exception):
    """A value could not be hashed into a request ID."""


class UnsupportedTypeError(RequestIdError, TypeError):
    """The value, or part of it, has a type the hashing scheme does not support."""

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f"Unsupported type: {type_name}")


class KeyWasNoneError(RequestIdError):
    """A map was hashed with a key of None."""

    def __init__(self) -> None:
        super().__init__("Struct serializer received a key of None")


class EmptySerializerError(RequestIdError):
    """There was no data to hash."""

    def __init__(self) -> None:
        super().__init__("Need to provide data to serialize")


class RequestIdFromStringError(ValueError):
    """A request ID could not be read from a hexadecimal string."""

    def __init__(self, message: str, *, size: int | None = None) -> None:
        self.size = size
        super().__init__(message)

    @classmethod
    def invalid_size(cls, size: int) -> RequestIdFromStringError:
        """The decoded string did not have the expected length."""
        return cls(f"Invalid string size: {size}. Must be even.", size=size)

    @classmethod
    def invalid_hex(cls, detail: object) -> RequestIdFromStringError:
        """The string was not valid hexadecimal."""
        return cls(f"Error while decoding hex: {detail}")