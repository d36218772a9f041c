from __future__ import annotations

import threading
from datetime import date, datetime, tzinfo
from typing import Callable, Iterable, Mapping, Protocol

from loguru import logger

from checklist.core.catalog import RemoteCatalog
from checklist.core.catalog_cache import RemoteTaskCatalogCache
from checklist.core.dates import normalize_day, week_window
from checklist.core.identity import UserIdentityStore
from checklist.core.records import CompletionRecord, RecordStore
from checklist.core.resolver import TaskResolver
from checklist.remote.catalog_client import CatalogFetchError

ChangeCallback = Callable[[int], None]
Dispatch = Callable[[Callable[[], None]], object]


class CatalogFetcher(Protocol):
    async def fetch(self, endpoint: str) -> RemoteCatalog: ...


def clean_task_names(names: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for raw in names:
        name = (raw or "").strip()
        if not name or name in seen:
            continue
        seen.add(name)
        out.append(name)
    return out


class ReconciliationFacade:
    """The only surface presentation code talks to.

    Built once at startup (see ``checklist.bootstrap.build_facade``) and
    passed to consumers explicitly. Every mutation bumps ``version`` and
    notifies subscribers after the new state is in place.
    """

    def __init__(
        self,
        *,
        records: RecordStore,
        catalog_cache: RemoteTaskCatalogCache,
        resolver: TaskResolver,
        fetcher: CatalogFetcher,
        identity: UserIdentityStore,
        catalog_url: str = "",
        tz: tzinfo | None = None,
        week_cutoff: date | None = None,
    ) -> None:
        self._records = records
        self._catalog_cache = catalog_cache
        self._resolver = resolver
        self._fetcher = fetcher
        self._identity = identity
        self._catalog_url = catalog_url
        self._tz = tz
        self._week_cutoff = week_cutoff
        self._lock = threading.RLock()
        self._version = 0
        self._subscribers: list[ChangeCallback] = []

    # ---- change notification ----

    @property
    def version(self) -> int:
        return self._version

    def subscribe(self, callback: ChangeCallback) -> Callable[[], None]:
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _bump(self, reason: str) -> None:
        with self._lock:
            self._version += 1
            version = self._version
            subscribers = list(self._subscribers)
        logger.debug("state changed reason={} version={}", reason, version)
        for callback in subscribers:
            try:
                callback(version)
            except Exception:
                logger.exception("change subscriber failed reason={}", reason)

    # ---- user identity ----

    def get_user_name(self) -> str:
        return self._identity.get()

    def set_user_name(self, name: str) -> None:
        self._identity.set(name)
        self._bump("user_name")

    def has_user_name(self) -> bool:
        return bool(self._identity.get())

    # ---- reads ----

    def _day(self, value: date | datetime) -> date:
        return normalize_day(value, self._tz)

    def today(self) -> date:
        return datetime.now(self._tz).date()

    def get_tasks_for_date(self, day: date | datetime) -> list[str]:
        target = self._day(day)
        with self._lock:
            raw = self._resolver.resolve(target, self._identity.get())
        return clean_task_names(raw)

    def get_effective_state(self, day: date | datetime) -> dict[str, bool]:
        target = self._day(day)
        with self._lock:
            tasks = self.get_tasks_for_date(target)
            record = self._records.get(target)
        state = {name: False for name in tasks}
        if record is not None:
            for name, done in record.tasks.items():
                if name in state:
                    state[name] = done
        return state

    def get_record(self, day: date | datetime) -> CompletionRecord | None:
        return self._records.get(self._day(day))

    def all_records(self) -> list[CompletionRecord]:
        return self._records.all_records()

    def week_window(self, today: date | datetime | None = None) -> list[date]:
        anchor = self.today() if today is None else self._day(today)
        return week_window(anchor, self._week_cutoff)

    # ---- writes ----

    def record_completion(self, day: date | datetime, state: Mapping[str, bool]) -> CompletionRecord:
        with self._lock:
            record = self._records.upsert(self._day(day), state)
        self._bump("record_completion")
        return record

    async def refresh_remote_catalog(
        self,
        *,
        on_complete: Callable[[bool], None] | None = None,
        dispatch: Dispatch | None = None,
    ) -> bool:
        """Fetch the catalog and write it through to the cache.

        On failure the cached catalog is left untouched. ``on_complete`` is
        handed the outcome via ``dispatch`` (for example
        ``loop.call_soon_threadsafe``) or called inline when no dispatcher
        is given.
        """
        try:
            catalog = await self._fetcher.fetch(self._catalog_url)
        except CatalogFetchError as exc:
            logger.warning("catalog refresh failed kind={} err={}", type(exc).__name__, exc)
            ok = False
        else:
            with self._lock:
                self._catalog_cache.set(catalog)
            self._bump("refresh_remote_catalog")
            ok = True

        if on_complete is not None:
            if dispatch is None:
                on_complete(ok)
            else:
                dispatch(lambda: on_complete(ok))
        return ok

    def clear_all_data(self) -> None:
        with self._lock:
            self._records.clear()
            self._catalog_cache.clear()
        logger.info("all checklist data cleared")
        self._bump("clear_all_data")
