from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from typing import Any, Mapping

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from checklist.core.dates import normalize_day
from checklist.db.repositories.blobs_repo import RECORDS_KEY, read_blob, write_blob
from checklist.db.session import session_scope


@dataclass(frozen=True, slots=True)
class CompletionRecord:
    day: date
    tasks: dict[str, bool] = field(default_factory=dict)

    @property
    def completed_count(self) -> int:
        return sum(1 for done in self.tasks.values() if done)

    @property
    def total_count(self) -> int:
        return len(self.tasks)

    @property
    def score(self) -> int:
        if self.total_count == 0:
            return 0
        # half-up: 1 of 8 -> 13
        return int(self.completed_count * 100 / self.total_count + 0.5)


def _encode_records(records: Mapping[date, CompletionRecord]) -> str:
    rows = [
        {"date": record.day.isoformat(), "tasks": dict(record.tasks)}
        for record in sorted(records.values(), key=lambda r: r.day, reverse=True)
    ]
    return json.dumps(rows, ensure_ascii=False)


def _decode_record(row: Any) -> CompletionRecord | None:
    if not isinstance(row, dict):
        return None
    tasks = row.get("tasks")
    if not isinstance(tasks, dict):
        return None
    try:
        day = date.fromisoformat(str(row.get("date") or ""))
    except ValueError:
        return None
    clean: dict[str, bool] = {}
    for name, done in tasks.items():
        if not isinstance(done, bool):
            logger.warning("skipping non-bool task state day={} task={!r} value={!r}", day, name, done)
            continue
        clean[str(name)] = done
    return CompletionRecord(day=day, tasks=clean)


class RecordStore:
    """Durable per-day completion records.

    The in-memory collection is an immutable snapshot that writers replace
    wholesale under ``_lock`` together with the blob write, so a reader
    never sees a half-applied upsert or clear.
    """

    def __init__(self, session_factory: sessionmaker[Session], *, tz: tzinfo | None = None) -> None:
        self._session_factory = session_factory
        self._tz = tz
        self._lock = threading.RLock()
        self._records: dict[date, CompletionRecord] = {}
        loaded = self.load_all()
        logger.info("RecordStore ready records={}", len(loaded))

    def load_all(self) -> list[CompletionRecord]:
        try:
            with session_scope(self._session_factory) as session:
                raw = read_blob(session, RECORDS_KEY)
        except SQLAlchemyError:
            logger.exception("completion records read failed, starting empty")
            raw = None

        records: dict[date, CompletionRecord] = {}
        if raw:
            try:
                rows = json.loads(raw)
            except ValueError as exc:
                logger.warning("completion records blob is corrupt, starting empty err={}", exc)
                rows = []
            if not isinstance(rows, list):
                logger.warning("completion records blob is not a list, starting empty")
                rows = []
            for row in rows:
                record = _decode_record(row)
                if record is None:
                    logger.warning("skipping malformed completion record row={!r}", row)
                    continue
                records[record.day] = record

        with self._lock:
            self._records = records
        return sorted(records.values(), key=lambda r: r.day, reverse=True)

    def all_records(self) -> list[CompletionRecord]:
        return sorted(self._records.values(), key=lambda r: r.day, reverse=True)

    def get(self, day: date | datetime) -> CompletionRecord | None:
        return self._records.get(normalize_day(day, self._tz))

    def upsert(self, day: date | datetime, tasks: Mapping[str, bool]) -> CompletionRecord:
        record = CompletionRecord(
            day=normalize_day(day, self._tz),
            tasks={str(name): bool(done) for name, done in tasks.items()},
        )
        with self._lock:
            records = dict(self._records)
            records[record.day] = record
            self._records = records
            self._persist(records)
        logger.debug(
            "completion record saved day={} done={}/{}",
            record.day.isoformat(),
            record.completed_count,
            record.total_count,
        )
        return record

    def clear(self) -> None:
        with self._lock:
            self._records = {}
            self._persist({})

    def _persist(self, records: Mapping[date, CompletionRecord]) -> None:
        try:
            payload = _encode_records(records)
        except (TypeError, ValueError):
            logger.exception("completion records encode failed; persisted state left as is")
            return
        try:
            with session_scope(self._session_factory) as session:
                write_blob(session, RECORDS_KEY, payload)
        except SQLAlchemyError:
            logger.exception("completion records write failed; persisted state left as is")
