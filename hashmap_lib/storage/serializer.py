from typing import Any, Protocol
import pickle
import json
import yaml


class Serializer(Protocol):
    """Serialize/deserialize Python values for backends that store bytes.

    Implementations should be symmetric: `dump` -> bytes, `load` <- bytes.
    """

    def dump(self, value: Any) -> bytes: ...

    def load(self, data: bytes) -> Any: ...


def _jsonable(o: Any) -> Any:
    # pydantic models first: their __dict__ is not the public field view
    if hasattr(o, "model_dump"):
        return o.model_dump(mode="json")
    if hasattr(o, "__dict__"):
        return o.__dict__
    raise TypeError(f"Object of type {type(o).__name__} is not serializable")


def _plain(value: Any) -> Any:
    """Recursively turn objects into dict/list/scalar structures."""
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if value is None or isinstance(value, (str, int, float, bool, bytes)):
        return value
    return _plain(_jsonable(value))


class JSONSerializer:
    """Serializer using JSON (text). Objects are stored as their attribute dict."""

    def dump(self, value: Any) -> bytes:
        return json.dumps(value, default=_jsonable).encode("utf-8")

    def load(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))


class YAMLSerializer:
    """Serializer using YAML (text). Objects are stored as plain mappings."""

    def dump(self, value: Any) -> bytes:
        return yaml.safe_dump(_plain(value), sort_keys=False).encode("utf-8")

    def load(self, data: bytes) -> Any:
        return yaml.safe_load(data.decode("utf-8"))


class PickleSerializer:
    """Serializer using pickle (binary).

    Handy when stored values are arbitrary Python objects. Only load data
    you trust: unpickling can execute arbitrary code.
    """

    def dump(self, value: Any) -> bytes:
        return pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)

    def load(self, data: bytes) -> Any:
        return pickle.loads(data)


SERIALIZERS = {
    "json": JSONSerializer,
    "yaml": YAMLSerializer,
    "pickle": PickleSerializer,
}


def get_serializer(name: str) -> Serializer:
    try:
        return SERIALIZERS[name.lower()]()
    except KeyError:
        raise ValueError(f"unknown serializer {name!r}; expected one of {sorted(SERIALIZERS)}") from None
