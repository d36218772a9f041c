from datetime import date

from checklist.core.resolver import TaskResolver
from checklist.core.user_keys import UserKeyMapper
from checklist.core.weekly_config import StaticWeeklyConfig

MONDAY = date(2025, 6, 9)  # weekday ordinal 2
TUESDAY = date(2025, 6, 10)  # weekday ordinal 3


class _FakeCache:
    def __init__(self, catalog) -> None:
        self.catalog = catalog

    def get(self):
        return self.catalog


class _RecordingStatic:
    def __init__(self) -> None:
        self.calls: list[tuple[date, str | None]] = []

    def tasks_for(self, day, user_name):
        self.calls.append((day, user_name))
        return ["Static", user_name or "anon"]


def test_catalog_entry_wins() -> None:
    resolver = TaskResolver(_FakeCache({"John": {2: ["Run", "Read"]}}), _RecordingStatic(), UserKeyMapper())
    assert resolver.resolve(MONDAY, "John") == ["Run", "Read"]


def test_alias_maps_local_name_to_catalog_key() -> None:
    resolver = TaskResolver(
        _FakeCache({"John": {2: ["Run", "Read"]}}),
        _RecordingStatic(),
        UserKeyMapper({"Johnny": "John"}),
    )
    assert resolver.resolve(MONDAY, "  Johnny B. ") == ["Run", "Read"]


def test_missing_weekday_is_empty_not_fallback() -> None:
    static = _RecordingStatic()
    resolver = TaskResolver(_FakeCache({"John": {2: ["Run"]}}), static, UserKeyMapper())

    assert resolver.resolve(TUESDAY, "John") == []
    assert static.calls == []


def test_unknown_user_falls_back_to_static() -> None:
    static = StaticWeeklyConfig()
    resolver = TaskResolver(_FakeCache({"John": {2: ["Run"]}}), static, UserKeyMapper())

    for name in ("Mary", "", None):
        assert resolver.resolve(MONDAY, name) == static.tasks_for(MONDAY, name)


def test_alias_to_key_absent_from_catalog_falls_back() -> None:
    static = _RecordingStatic()
    resolver = TaskResolver(_FakeCache({}), static, UserKeyMapper({"Jo": "John"}))

    assert resolver.resolve(MONDAY, "Jo") == ["Static", "Jo"]
    assert static.calls == [(MONDAY, "Jo")]


def test_resolve_returns_a_copy() -> None:
    catalog = {"John": {2: ["Run"]}}
    resolver = TaskResolver(_FakeCache(catalog), _RecordingStatic(), UserKeyMapper())
    resolver.resolve(MONDAY, "John").append("Extra")

    assert catalog["John"][2] == ["Run"]
