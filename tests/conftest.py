"""
Shared pytest fixtures — in-memory SQLite + FastAPI TestClient.
"""
import random
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import settings
from app.pos.database import Base, get_db
from app.pos.models import CompanyModel, StoreModel  # noqa: F401  (registers models)
from app.main import app

# StaticPool ensures all connections share the same in-memory database
_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_Session = sessionmaker(autocommit=False, autoflush=False, bind=_ENGINE)


@pytest.fixture(autouse=True)
def _reset_tables():
    Base.metadata.create_all(bind=_ENGINE)
    yield
    Base.metadata.drop_all(bind=_ENGINE)


@pytest.fixture(autouse=True)
def _receipts_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "RECEIPTS_DIR", str(tmp_path / "receipts"))
    return tmp_path / "receipts"


@pytest.fixture()
def db():
    session = _Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db):
    def _override():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = _override
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def now():
    return datetime(2025, 3, 14, 9, 26, 53)


@pytest.fixture()
def rng():
    return random.Random(1234)


@pytest.fixture()
def fuel_item():
    return {"name": "Diesel", "quantity": "10", "price": "3.50", "pump": 4}
