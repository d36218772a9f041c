from __future__ import annotations

from zoneinfo import ZoneInfo

import httpx
from loguru import logger

from checklist.config import Settings
from checklist.core.catalog_cache import RemoteTaskCatalogCache
from checklist.core.identity import UserIdentityStore
from checklist.core.records import RecordStore
from checklist.core.resolver import TaskResolver
from checklist.core.user_keys import UserKeyMapper
from checklist.core.weekly_config import StaticWeeklyConfig
from checklist.db.session import create_db_engine, make_session_factory, run_migrations
from checklist.facade import ReconciliationFacade
from checklist.remote.catalog_client import CatalogClient


def load_static_config(settings: Settings) -> StaticWeeklyConfig:
    if not settings.static_tasks_path:
        return StaticWeeklyConfig()
    try:
        return StaticWeeklyConfig.from_yaml(settings.static_tasks_path)
    except (OSError, ValueError):
        logger.exception("static tasks file unusable path={}; using built-in week", settings.static_tasks_path)
        return StaticWeeklyConfig()


def build_facade(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ReconciliationFacade:
    run_migrations(settings.sqlite_path)
    session_factory = make_session_factory(create_db_engine(settings.sqlite_path))
    tz = ZoneInfo(settings.timezone)

    catalog_cache = RemoteTaskCatalogCache(session_factory)
    resolver = TaskResolver(
        catalog_cache,
        load_static_config(settings),
        UserKeyMapper(settings.user_key_aliases),
    )
    facade = ReconciliationFacade(
        records=RecordStore(session_factory, tz=tz),
        catalog_cache=catalog_cache,
        resolver=resolver,
        fetcher=CatalogClient(
            timeout_sec=settings.catalog_timeout_sec,
            tasks_field=settings.catalog_tasks_field,
            transport=transport,
        ),
        identity=UserIdentityStore(session_factory),
        catalog_url=settings.catalog_url,
        tz=tz,
        week_cutoff=settings.week_cutoff_date,
    )
    logger.info("checklist core ready db={} tz={}", settings.sqlite_path, settings.timezone)
    return facade
