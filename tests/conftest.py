# tests/conftest.py
import os
import tempfile

# point the package at a throwaway SQLite file before homescore.db is imported
_tmpdir = tempfile.mkdtemp(prefix="homescore-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_tmpdir, "test.db")
os.environ["PRICE_CHECK_INTERVAL_HOURS"] = "0"
os.environ.pop("OPENAI_API_KEY", None)

import pytest
from homescore import models  # noqa: F401
from homescore.db import Base, engine, SessionLocal
from homescore.domain import Listing

@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def client(db):
    from fastapi.testclient import TestClient
    from homescore.main import app
    with TestClient(app) as c:
        yield c

@pytest.fixture
def make_listing():
    counter = {"id": 0}

    def factory(**fields):
        counter["id"] += 1
        fields.setdefault("id", counter["id"])
        fields.setdefault("url", f"https://www.zillow.com/homedetails/{fields['id']}_zpid/")
        return Listing(**fields)
    return factory
