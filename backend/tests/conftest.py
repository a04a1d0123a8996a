import os
import tempfile
from pathlib import Path

import pytest

# Settings are read at import time, so point the app at a throwaway
# SQLite file and upload folder before anything imports `edubridge`.
_TMP = Path(tempfile.mkdtemp(prefix="edubridge-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["UPLOAD_DIR"] = str(_TMP / "uploads")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from sqlmodel import Session  # noqa: E402

from edubridge.database import engine  # noqa: E402
from edubridge import models  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def seed_organizations():
    """Organizations are managed outside the API; insert a couple for tests."""
    from edubridge import main  # noqa: F401  creates the tables

    with Session(engine) as session:
        session.add(models.Organization(name="Acme Labs"))
        session.add(models.Organization(name="Bright Futures"))
        session.commit()
    yield


@pytest.fixture
def upload_dir():
    return Path(os.environ["UPLOAD_DIR"])
