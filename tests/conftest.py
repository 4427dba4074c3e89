# tests/conftest.py
import logging
import os
import tempfile
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

from app.main import app
from app.db import Base, get_db
from app.migrators import MigratorDependencies


# --- Temporary SQLite DB file for the whole test session ---
@pytest.fixture(scope="session")
def tmp_db_url():
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    url = f"sqlite:///{path}"
    yield url
    try:
        os.remove(path)
    except OSError:
        pass


@pytest.fixture(scope="session")
def engine(tmp_db_url):
    eng = create_engine(tmp_db_url, connect_args={"check_same_thread": False}, future=True)
    Base.metadata.create_all(bind=eng)
    return eng


@pytest.fixture(scope="function")
def db_session(engine):
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
    db = TestingSession()
    _clear_all(db)
    try:
        yield db
    finally:
        db.rollback()
        db.close()


# --- Override FastAPI's DB dependency to use our test session ---
@pytest.fixture(autouse=True)
def override_get_db(db_session):
    def _get_db():
        try:
            yield db_session
        finally:
            pass
    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def _clear_all(db):
    db.execute(text("DELETE FROM applications"))
    db.execute(text("DELETE FROM institutions"))
    db.commit()


# --- Migrator dependencies with mocked lookups and a mock log sink ---
@pytest.fixture
def get_institutions():
    return AsyncMock(return_value={"institutions": []})


@pytest.fixture
def get_last_application():
    return AsyncMock(return_value={"questionnaireData": None})


@pytest.fixture
def logger():
    return Mock(spec=logging.Logger)


@pytest.fixture
def deps(get_institutions, get_last_application, logger):
    return MigratorDependencies(
        get_institutions=get_institutions,
        get_last_application=get_last_application,
        new_institutions=[],
        logger=logger,
    )
