import os

# Settings are read at import time and require a database URL
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.core import signals
from app.core.database import get_store
from app.core.store import DocumentStore
from app.main import app
from app.models import models  # noqa: F401


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def store(engine):
    with Session(engine) as session:
        yield DocumentStore(session)


@pytest.fixture
def client(engine):
    def override_get_store():
        with Session(engine) as session:
            yield DocumentStore(session)

    app.dependency_overrides[get_store] = override_get_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def no_dictionary_calls(monkeypatch):
    import requests

    def fail(*args, **kwargs):
        raise AssertionError("Unexpected network call in tests")

    monkeypatch.setattr(requests, "get", fail)


@pytest.fixture
def sent_events():
    """Collect every challenge_sent signal emitted during a test."""
    events = []

    def record(challenge, **kwargs):
        events.append((challenge.id, kwargs.get("recipient_ids")))

    with signals.subscribe(signals.challenge_sent, record):
        yield events
