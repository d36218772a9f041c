from __future__ import annotations

import json
import threading

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from checklist.db.repositories.blobs_repo import USER_NAME_KEY, read_blob, write_blob
from checklist.db.session import session_scope


class UserIdentityStore:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory
        self._lock = threading.Lock()
        try:
            with session_scope(session_factory) as session:
                raw = read_blob(session, USER_NAME_KEY)
        except SQLAlchemyError:
            logger.exception("user name read failed, starting unset")
            raw = None
        self._user_name = ""
        if raw:
            try:
                value = json.loads(raw)
            except ValueError:
                logger.warning("stored user name is corrupt, ignoring it")
                value = ""
            self._user_name = value if isinstance(value, str) else ""

    def get(self) -> str:
        return self._user_name

    def set(self, name: str) -> None:
        name = (name or "").strip()
        with self._lock:
            self._user_name = name
            try:
                with session_scope(self._session_factory) as session:
                    write_blob(session, USER_NAME_KEY, json.dumps(name, ensure_ascii=False))
            except SQLAlchemyError:
                logger.exception("user name write failed")
        logger.info("user name set name={!r}", name)
