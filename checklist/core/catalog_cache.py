from __future__ import annotations

import json
import threading

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from checklist.core.catalog import RemoteCatalog, catalog_from_wire, catalog_to_wire
from checklist.db.repositories.blobs_repo import CATALOG_KEY, read_blob, write_blob
from checklist.db.session import session_scope


class RemoteTaskCatalogCache:
    """Write-through local copy of the last catalog fetched from the server.

    ``get()`` hands out the current snapshot; treat it as read-only, it is
    replaced (never mutated) by ``set()`` and ``clear()``.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory
        self._lock = threading.RLock()
        self._catalog: RemoteCatalog = {}
        self._load()
        logger.info("RemoteTaskCatalogCache ready users={}", len(self._catalog))

    def _load(self) -> None:
        try:
            with session_scope(self._session_factory) as session:
                raw = read_blob(session, CATALOG_KEY)
        except SQLAlchemyError:
            logger.exception("catalog cache read failed, starting empty")
            raw = None
        catalog: RemoteCatalog = {}
        if raw:
            try:
                catalog = catalog_from_wire(json.loads(raw))
            except ValueError as exc:
                logger.warning("catalog cache blob is corrupt, starting empty err={}", exc)
        with self._lock:
            self._catalog = catalog

    def get(self) -> RemoteCatalog:
        return self._catalog

    def set(self, catalog: RemoteCatalog) -> None:
        fresh = {user: {day: list(names) for day, names in days.items()} for user, days in catalog.items()}
        with self._lock:
            self._catalog = fresh
            self._persist(fresh)
        logger.info("catalog cache updated users={}", len(fresh))

    def clear(self) -> None:
        with self._lock:
            self._catalog = {}
            self._persist({})

    def _persist(self, catalog: RemoteCatalog) -> None:
        try:
            payload = json.dumps(catalog_to_wire(catalog), ensure_ascii=False)
        except (TypeError, ValueError):
            logger.exception("catalog cache encode failed; persisted state left as is")
            return
        try:
            with session_scope(self._session_factory) as session:
                write_blob(session, CATALOG_KEY, payload)
        except SQLAlchemyError:
            logger.exception("catalog cache write failed; persisted state left as is")
