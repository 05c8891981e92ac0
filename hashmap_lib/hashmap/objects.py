"""Value types that can be stored in a `PersistentObjectMap`.

A storable type must be constructible without arguments and implement
`decode_from`: fill the (empty) instance from its stored bytes and return
an empty string, or return a non-empty error message if the bytes cannot be
decoded. The map builds one empty instance per stored record at load time.

Types may also provide `encode() -> bytes`; when they don't, the map falls
back to its configured serializer.
"""
from __future__ import annotations
from typing import Any, ClassVar, Dict, Protocol, runtime_checkable

from pydantic import BaseModel, ValidationError

from hashmap_lib.storage.serializer import JSONSerializer, Serializer


@runtime_checkable
class Decodable(Protocol):
    def decode_from(self, data: bytes) -> str: ...


class JSONObject:
    """Plain attribute object persisted as a mapping of its attributes.

    Subclasses give every `__init__` argument a default so that an empty
    instance can be created for decoding:

        class Subscriber(JSONObject):
            def __init__(self, topic: str = "", offset: int = 0):
                self.topic = topic
                self.offset = offset
    """

    serializer: ClassVar[Serializer] = JSONSerializer()

    def to_dict(self) -> Dict[str, Any]:
        return dict(vars(self))

    def encode(self) -> bytes:
        return self.serializer.dump(self.to_dict())

    def decode_from(self, data: bytes) -> str:
        try:
            payload = self.serializer.load(data)
        except Exception as exc:
            return f"cannot parse {type(self).__name__}: {exc}"
        if not isinstance(payload, dict):
            return f"cannot decode {type(self).__name__}: expected a mapping, got {type(payload).__name__}"
        vars(self).update(payload)
        return ""

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"{type(self).__name__}({fields})"


class ModelObject(BaseModel):
    """pydantic model persisted as its JSON representation.

    Every field needs a default so the map can create an empty instance.
    """

    def encode(self) -> bytes:
        return self.model_dump_json().encode("utf-8")

    def decode_from(self, data: bytes) -> str:
        try:
            decoded = self.model_validate_json(data)
        except ValidationError as exc:
            return f"cannot decode {type(self).__name__}: {exc}"
        self.__dict__.update(decoded.__dict__)
        object.__setattr__(self, "__pydantic_fields_set__", set(decoded.model_fields_set))
        return ""
