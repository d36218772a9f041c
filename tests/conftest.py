from datetime import timezone
from pathlib import Path

import pytest

from checklist.db.session import create_db_engine, make_session_factory, run_migrations


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    path = tmp_path / "checklist.db"
    run_migrations(path)
    return path


@pytest.fixture()
def session_factory(db_path: Path):
    engine = create_db_engine(db_path)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture()
def tz():
    return timezone.utc


@pytest.fixture()
def unmigrated_session_factory(tmp_path: Path):
    engine = create_db_engine(tmp_path / "unmigrated.db")
    yield make_session_factory(engine)
    engine.dispose()
