from __future__ import annotations

from datetime import date
from typing import Protocol

from checklist.core.catalog import RemoteCatalog
from checklist.core.dates import weekday_ordinal
from checklist.core.user_keys import UserKeyMapper


class CatalogSource(Protocol):
    def get(self) -> RemoteCatalog: ...


class StaticTasksSource(Protocol):
    def tasks_for(self, day: date, user_name: str | None) -> list[str]: ...


class TaskResolver:
    """Picks the task list for a day: remote catalog first, static config otherwise."""

    def __init__(self, catalog: CatalogSource, static_config: StaticTasksSource, user_keys: UserKeyMapper) -> None:
        self._catalog = catalog
        self._static_config = static_config
        self._user_keys = user_keys

    def resolve(self, day: date, local_user_name: str | None) -> list[str]:
        weekday = weekday_ordinal(day)
        catalog = self._catalog.get()
        key = self._user_keys.map(local_user_name, catalog.keys())
        if key is not None and key in catalog:
            # an explicitly empty weekday stays empty
            return list(catalog[key].get(weekday, []))
        return list(self._static_config.tasks_for(day, local_user_name))
