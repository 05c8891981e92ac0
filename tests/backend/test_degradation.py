"""Persistence latch behaviour, driven by a fault-injecting backend."""
import pytest

from hashmap_lib.exceptions import (
    BackendUnavailableError,
    NamespaceCreateError,
    RecordWriteError,
)
from hashmap_lib.hashmap import JSONObject, PersistentBytesMap, PersistentObjectMap
from hashmap_lib.storage.base import StorageBackend


class FlakyBackend(StorageBackend):
    """Dict-backed backend that records calls and fails on demand."""

    def __init__(self, records=None, fail_on=()):
        self.data = {}
        for (ns, key), value in (records or {}).items():
            self.data.setdefault(ns, {})[key] = value
        self.fail_on = set(fail_on)
        self.crash_on = set()
        self.calls = []
        self.open_handles = 0
        self.dir_exists = True

    def _call(self, name):
        self.calls.append(name)
        if name in self.crash_on:
            raise RuntimeError("unexpected backend bug")
        if name in self.fail_on:
            if name == "open":
                raise BackendUnavailableError("open", "injected")
            if name == "ensure_namespace":
                raise NamespaceCreateError("ensure_namespace", "injected")
            if name == "io":
                raise OSError("injected")
            raise RecordWriteError(name, "injected")

    def directory_exists(self):
        self.calls.append("directory_exists")
        return self.dir_exists

    def open(self):
        self._call("open")
        self.open_handles += 1
        return object()

    def ensure_namespace(self, handle, namespace):
        self._call("ensure_namespace")
        self.data.setdefault(namespace, {})

    def read_all(self, handle, namespace):
        self._call("read_all")
        yield from list(self.data[namespace].items())

    def put(self, handle, namespace, key, data):
        self._call("put")
        self._call("io")
        self.data[namespace][key] = data

    def delete(self, handle, namespace, key):
        self._call("delete")
        self.data[namespace].pop(key, None)

    def close(self, handle):
        self.calls.append("close")
        self.open_handles -= 1


def make_map(backend, namespace="default"):
    return PersistentBytesMap("unused", "unused.db", namespace, backend=backend)


def test_every_mutation_opens_and_closes():
    b = FlakyBackend()
    m = make_map(b)
    b.calls.clear()
    m.add_update("a", b"1")
    assert b.calls == ["directory_exists", "open", "ensure_namespace", "put", "io", "close"]
    b.calls.clear()
    m.delete("a")
    assert b.calls == ["directory_exists", "open", "ensure_namespace", "delete", "close"]
    assert b.open_handles == 0


def test_reads_never_touch_backend():
    b = FlakyBackend(records={("default", "a"): b"1"})
    m = make_map(b)
    b.calls.clear()
    assert m.find_by_key("a") == b"1"
    assert m.count() == 1
    assert m.get_all() == {"a": b"1"}
    assert "a" in m
    assert b.calls == []


@pytest.mark.parametrize("step", ["open", "ensure_namespace", "put", "io"])
def test_put_failure_latches_off(step):
    b = FlakyBackend()
    m = make_map(b)
    b.fail_on = {step}
    m.add_update("a", b"1")
    assert m.persistence_available is False
    assert m.find_by_key("a") == b"1"
    # handle is released even when the failing step ran inside the session
    assert b.open_handles == 0

    # the backend is healthy again, but it is never consulted any more
    b.fail_on = set()
    b.calls.clear()
    m.add_update("b", b"2")
    m.delete("a")
    assert b.calls == []
    assert m.get_all() == {"b": b"2"}
    assert m.persistence_available is False


def test_delete_failure_latches_off():
    b = FlakyBackend(records={("default", "a"): b"1", ("default", "b"): b"2"})
    m = make_map(b)
    b.fail_on = {"delete"}
    m.delete("a")
    assert m.persistence_available is False
    assert m.find_by_key("a") is None
    # the backend lags behind memory after the failure
    assert b.data["default"] == {"a": b"1", "b": b"2"}


@pytest.mark.parametrize(
    "step, error",
    [
        ("open", BackendUnavailableError),
        ("ensure_namespace", NamespaceCreateError),
        ("read_all", RecordWriteError),
    ],
)
def test_startup_failures_are_memory_only(step, error):
    b = FlakyBackend(records={("default", "a"): b"1"}, fail_on={step})
    m = make_map(b)
    assert isinstance(m.load_error, error)
    assert m.count() == 0
    assert m.persistence_available is False
    assert b.open_handles == 0
    b.fail_on = set()
    b.calls.clear()
    m.add_update("x", b"y")
    assert b.calls == []
    assert m.find_by_key("x") == b"y"


def test_startup_loads_existing_records():
    b = FlakyBackend(records={("ns", "a"): b"1", ("ns", "b"): b"2", ("other", "c"): b"3"})
    m = make_map(b, "ns")
    assert m.load_error is None
    assert m.get_all() == {"a": b"1", "b": b"2"}
    assert b.open_handles == 0


def test_failure_is_logged(caplog):
    b = FlakyBackend()
    m = make_map(b)
    b.fail_on = {"put"}
    with caplog.at_level("WARNING", logger="hashmap_lib.hashmap.persistent"):
        m.add_update("a", b"1")
    assert "Persistence disabled" in caplog.text
    assert "injected" in caplog.text


class Item(JSONObject):
    def __init__(self, name: str = ""):
        self.name = name


def test_object_map_latch_and_encode_policy():
    b = FlakyBackend()
    m = PersistentObjectMap(Item, "unused", "unused.db", backend=b)

    # bad value: skipped write, backend not even opened
    b.calls.clear()
    m.add_update("bad", Item({"not", "json"}))
    assert b.calls == []
    assert m.persistence_available is True

    m.add_update("ok", Item("fine"))
    assert b.data["default"] == {"ok": b'{"name": "fine"}'}

    b.fail_on = {"put"}
    m.add_update("lost", Item("x"))
    assert m.persistence_available is False
    assert set(m.get_all()) == {"bad", "ok", "lost"}


@pytest.mark.parametrize("step", ["open", "read_all"])
def test_unexpected_startup_exception_is_memory_only(step, caplog):
    b = FlakyBackend(records={("default", "a"): b"1"})
    b.crash_on = {step}
    with caplog.at_level("WARNING", logger="hashmap_lib.hashmap.persistent"):
        m = make_map(b)
    assert isinstance(m.load_error, BackendUnavailableError)
    assert "RuntimeError" in str(m.load_error)
    assert "unexpected backend bug" in caplog.text
    assert m.count() == 0
    assert m.persistence_available is False
    m.add_update("x", b"y")
    assert m.find_by_key("x") == b"y"


@pytest.mark.parametrize("step", ["put", "delete"])
def test_unexpected_mutation_exception_latches_off(step):
    b = FlakyBackend(records={("default", "a"): b"1"})
    m = make_map(b)
    b.crash_on = {step}
    m.add_update("b", b"2")
    m.delete("a")
    assert m.persistence_available is False
    assert m.get_all() == {"b": b"2"}
    assert b.open_handles == 0

    b.crash_on = set()
    b.calls.clear()
    m.add_update("c", b"3")
    assert b.calls == []
