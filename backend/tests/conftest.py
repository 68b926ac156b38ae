import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker


ROOT = Path(__file__).resolve().parents[1]
DB_PATH = (ROOT / "test.db").resolve()
SQLITE_URL = f"sqlite:///{DB_PATH.as_posix()}"
sys.path.append(str(ROOT))
sys.path.append(str(Path(__file__).resolve().parent))

os.environ["DATABASE_URL"] = SQLITE_URL
os.environ["STORAGE_BACKEND"] = "sql"
os.environ["NODE_ENV"] = "test"
os.environ.pop("MONGODB_URI", None)
os.environ.pop("REDIS_URL", None)

from events_api.db import session as db_session  # noqa: E402
from events_api.db.base import Base  # noqa: E402
import events_api.models  # noqa: E402
from events_api.api.deps import get_repo  # noqa: E402
from events_api.main import app  # noqa: E402
from events_api.repositories.event_repo import SqlAlchemyRepo  # noqa: E402
from events_api.repositories.memory_repo import MemoryRepo  # noqa: E402
from events_api.repositories.mongo_repo import MongoRepo  # noqa: E402
from fake_mongo import FakeCollection  # noqa: E402


engine = create_engine(
    SQLITE_URL,
    connect_args={"check_same_thread": False},
)

db_session.engine = engine
db_session.SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
)


@pytest.fixture()
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = db_session.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def memory_repo():
    return MemoryRepo()


@pytest.fixture()
def mongo_collection():
    return FakeCollection()


@pytest.fixture()
def mongo_repo(mongo_collection):
    return MongoRepo(mongo_collection)


def _client_with(override):
    app.dependency_overrides[get_repo] = override
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(get_repo, None)


@pytest.fixture()
def client(memory_repo):
    yield from _client_with(lambda: memory_repo)


@pytest.fixture()
def sql_client(db):
    def _sql_repo():
        session = db_session.SessionLocal()
        try:
            yield SqlAlchemyRepo(session)
        finally:
            session.close()

    yield from _client_with(_sql_repo)


@pytest.fixture()
def mongo_client(mongo_repo):
    yield from _client_with(lambda: mongo_repo)


@pytest.fixture(params=["memory", "sql", "mongo"])
def any_client(request):
    fixture_name = {"memory": "client", "sql": "sql_client", "mongo": "mongo_client"}[request.param]
    return request.getfixturevalue(fixture_name)
