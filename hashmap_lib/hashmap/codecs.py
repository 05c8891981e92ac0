"""Value codecs used by `PersistentHashMap` to move values to and from bytes.

A codec has three jobs:
- `check` validates (and normalizes) a value before it enters the map
- `encode` turns an accepted value into the bytes written to the backend
- `decode` rebuilds a value from stored bytes at load time

`encode` raises `RecordEncodeError` and `decode` raises `RecordDecodeError`;
`check` raises `TypeError` for values the map must not accept at all.
"""
from __future__ import annotations
from typing import Any, Generic, Optional, Protocol, Type, TypeVar

from hashmap_lib.exceptions import RecordDecodeError, RecordEncodeError
from hashmap_lib.storage.serializer import JSONSerializer, Serializer

V = TypeVar("V")
D = TypeVar("D")


class ValueCodec(Protocol[V]):
    def check(self, value: Any) -> V: ...

    def encode(self, key: str, value: V) -> bytes: ...

    def decode(self, key: str, data: bytes) -> V: ...


class BytesCodec:
    """Identity codec: values are raw bytes and stored unchanged."""

    def check(self, value: Any) -> bytes:
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value)
        raise TypeError(f"expected a bytes-like value, got {type(value).__name__}")

    def encode(self, key: str, value: bytes) -> bytes:
        return value

    def decode(self, key: str, data: bytes) -> bytes:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise RecordDecodeError(key, f"expected bytes, got {type(data).__name__}")
        return bytes(data)


class ObjectCodec(Generic[D]):
    """Codec for typed objects implementing `decode_from`.

    Values are encoded with their own `encode()` when they have one,
    otherwise with `serializer`. Decoding always goes through the declared
    `value_type`: an empty instance is created and asked to fill itself.
    """

    def __init__(self, value_type: Type[D], serializer: Optional[Serializer] = None) -> None:
        if not isinstance(value_type, type) or not callable(getattr(value_type, "decode_from", None)):
            raise TypeError(f"{value_type!r} does not implement decode_from(data) -> str")
        self.value_type = value_type
        self.serializer = serializer or JSONSerializer()

    def check(self, value: Any) -> D:
        if not isinstance(value, self.value_type):
            raise TypeError(f"expected {self.value_type.__name__}, got {type(value).__name__}")
        return value

    def encode(self, key: str, value: D) -> bytes:
        try:
            encode = getattr(value, "encode", None)
            data = encode() if callable(encode) else self.serializer.dump(value)
        except Exception as exc:
            raise RecordEncodeError(key, str(exc)) from exc
        if not isinstance(data, (bytes, bytearray)):
            raise RecordEncodeError(key, f"encoder returned {type(data).__name__}, expected bytes")
        return bytes(data)

    def decode(self, key: str, data: bytes) -> D:
        try:
            obj = self.value_type()
            message = obj.decode_from(data)  # type: ignore[attr-defined]
        except Exception as exc:
            raise RecordDecodeError(key, str(exc)) from exc
        if message:
            raise RecordDecodeError(key, message)
        return obj
