from datetime import datetime, timezone

from sqlalchemy.orm import Session

from checklist.db.models import StoredBlob

RECORDS_KEY = "completion_records"
CATALOG_KEY = "remote_catalog"
USER_NAME_KEY = "user_name"


def read_blob(session: Session, key: str) -> str | None:
    row = session.get(StoredBlob, key)
    if row is None:
        return None
    return row.payload


def write_blob(session: Session, key: str, payload: str) -> None:
    now = datetime.now(timezone.utc)
    row = session.get(StoredBlob, key)
    if row is None:
        session.add(StoredBlob(key=key, payload=payload, updated_at=now))
    else:
        row.payload = payload
        row.updated_at = now
    session.flush()
