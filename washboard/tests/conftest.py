from __future__ import annotations

import os
import tempfile
from pathlib import Path

# Must run before washboard.infrastructure.config builds its Settings
_TEST_DB_DIR = Path(tempfile.mkdtemp(prefix="washboard-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+pysqlite:///{_TEST_DB_DIR / 'washboard.db'}"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
from sqlalchemy import delete  # noqa: E402


@pytest.fixture(autouse=True)
def _empty_tables_before_each_test() -> None:
    """
    Ensure tests don't leak rows into each other via the shared SQLite file.
    """
    from washboard.main import app  # noqa: F401  (creates tables)
    from washboard.infrastructure.database import SessionLocal
    from washboard.infrastructure.models.models import AccessLogModel, ProfileModel, ReservationModel

    db = SessionLocal()
    try:
        for model in (ReservationModel, ProfileModel, AccessLogModel):
            db.execute(delete(model))
        db.commit()
    finally:
        db.close()
