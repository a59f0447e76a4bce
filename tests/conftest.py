import os

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault('DATABASE_URL', 'sqlite://')

from quizapi.database import Base, create_session_factory, create_store_engine, ensure_schema  # noqa: E402
from quizapi.main import create_app  # noqa: E402


@pytest.fixture
def store_db():
    engine = create_store_engine('sqlite://')
    ensure_schema(engine)
    db = create_session_factory(engine)()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client():
    app = create_app('sqlite://')
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def app_db(client):
    db = client.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
