import json

from sqlalchemy.exc import OperationalError

from checklist.core.catalog_cache import RemoteTaskCatalogCache
from checklist.db.repositories.blobs_repo import CATALOG_KEY, read_blob, write_blob
from checklist.db.session import session_scope


def test_empty_when_never_populated(session_factory) -> None:
    assert RemoteTaskCatalogCache(session_factory).get() == {}


def test_set_persists_and_reloads(session_factory) -> None:
    cache = RemoteTaskCatalogCache(session_factory)
    cache.set({"John": {2: ["Run", "Read"], 7: []}})

    assert cache.get() == {"John": {2: ["Run", "Read"], 7: []}}
    with session_scope(session_factory) as session:
        assert json.loads(read_blob(session, CATALOG_KEY)) == {"John": {"2": ["Run", "Read"], "7": []}}
    assert RemoteTaskCatalogCache(session_factory).get() == {"John": {2: ["Run", "Read"], 7: []}}


def test_set_replaces_wholesale(session_factory) -> None:
    cache = RemoteTaskCatalogCache(session_factory)
    cache.set({"John": {2: ["Run"]}, "Mary": {3: ["Swim"]}})
    cache.set({"Mary": {4: ["Walk"]}})

    assert cache.get() == {"Mary": {4: ["Walk"]}}


def test_set_does_not_alias_caller_lists(session_factory) -> None:
    cache = RemoteTaskCatalogCache(session_factory)
    names = ["Run"]
    cache.set({"John": {2: names}})
    names.append("Read")

    assert cache.get()["John"][2] == ["Run"]


def test_corrupt_blob_loads_empty(session_factory) -> None:
    with session_scope(session_factory) as session:
        write_blob(session, CATALOG_KEY, "\x00garbage")

    assert RemoteTaskCatalogCache(session_factory).get() == {}


def test_non_integer_weekdays_dropped_on_load(session_factory) -> None:
    with session_scope(session_factory) as session:
        write_blob(session, CATALOG_KEY, json.dumps({"John": {"2": ["Run"], "monday": ["Read"]}}))

    assert RemoteTaskCatalogCache(session_factory).get() == {"John": {2: ["Run"]}}


def test_clear(session_factory) -> None:
    cache = RemoteTaskCatalogCache(session_factory)
    cache.set({"John": {2: ["Run"]}})
    cache.clear()

    assert cache.get() == {}
    assert RemoteTaskCatalogCache(session_factory).get() == {}


def test_unreadable_database_starts_empty(unmigrated_session_factory) -> None:
    assert RemoteTaskCatalogCache(unmigrated_session_factory).get() == {}


def test_write_failure_keeps_memory_state(session_factory, monkeypatch) -> None:
    cache = RemoteTaskCatalogCache(session_factory)
    cache.set({"John": {2: ["Run"]}})

    def broken_write(session, key, payload) -> None:
        raise OperationalError("UPDATE stored_blobs", {}, Exception("disk I/O error"))

    monkeypatch.setattr("checklist.core.catalog_cache.write_blob", broken_write)

    cache.set({"Mary": {3: ["Swim"]}})
    assert cache.get() == {"Mary": {3: ["Swim"]}}

    cache.clear()
    assert cache.get() == {}

    assert RemoteTaskCatalogCache(session_factory).get() == {"John": {2: ["Run"]}}


def test_only_ascii_weekdays_one_to_seven_survive_load(session_factory) -> None:
    raw = {"John": {"1_0": ["a"], "٣": ["b"], "+2": ["c"], "0": ["d"], "8": ["e"], " 5 ": ["f"]}}
    with session_scope(session_factory) as session:
        write_blob(session, CATALOG_KEY, json.dumps(raw))

    assert RemoteTaskCatalogCache(session_factory).get() == {"John": {5: ["f"]}}
