import pytest
from bson import ObjectId

from events_api.core.config import Settings
from events_api.core.errors import StorageError
from events_api.repositories import build_repo
from events_api.repositories.event_repo import SqlAlchemyRepo
from events_api.repositories.memory_repo import MemoryRepo
from events_api.repositories.mongo_repo import MongoRepo
from events_api.schemas.event import EventCreate
from fake_mongo import BrokenCollection


def _data(**overrides) -> dict:
    payload = {
        "title": "Book fair",
        "shortDescription": "Second-hand books",
        "fullDescription": "Stalls with second-hand books and zines.",
        "date": "2026-12-05",
        "location": "Central Library",
        "price": "0",
        "createdBy": "librarian@example.com",
    }
    payload.update(overrides)
    return EventCreate.model_validate(payload).model_dump()


def test_memory_repo_assigns_incrementing_ids():
    repo = MemoryRepo()
    first = repo.create_event(_data())
    second = repo.create_event(_data())
    assert (first["id"], second["id"]) == (1, 2)

    repo.delete_event(2)
    third = repo.create_event(_data())
    assert third["id"] == 3


def test_memory_repo_returns_copies():
    repo = MemoryRepo()
    created = repo.create_event(_data())
    created["title"] = "mutated"
    assert repo.get_event(created["id"])["title"] == "Book fair"


def test_memory_repo_accepts_string_ids():
    repo = MemoryRepo()
    created = repo.create_event(_data())
    assert repo.get_event(str(created["id"]))["id"] == created["id"]
    assert repo.get_event("nope") is None


def test_sql_repo_round_trip(db):
    repo = SqlAlchemyRepo(db)
    created = repo.create_event(_data())
    assert created.id == 1
    assert created.time == "09:00"

    replaced = repo.replace_event(str(created.id), _data(title="Book fair II"))
    assert replaced.title == "Book fair II"
    assert replaced.created_at == created.created_at

    assert [ev.id for ev in repo.list_by_owner("librarian@example.com")] == [1]
    deleted = repo.delete_event("1")
    assert deleted["title"] == "Book fair II"
    assert repo.get_event("1") is None
    assert repo.get_event(str(2**80)) is None


def test_mongo_repo_stores_camel_case_documents(mongo_collection, mongo_repo):
    created = mongo_repo.create_event(_data())

    stored = mongo_collection.docs[0]
    assert stored["shortDescription"] == "Second-hand books"
    assert stored["createdBy"] == "librarian@example.com"
    assert "short_description" not in stored
    assert ObjectId(created["id"]) == stored["_id"]
    assert created["short_description"] == "Second-hand books"


def test_mongo_repo_replace_keeps_created_at(mongo_repo):
    created = mongo_repo.create_event(_data())
    replaced = mongo_repo.replace_event(created["id"], _data(price="5"))
    assert replaced["price"] == "5"
    assert replaced["created_at"] == created["created_at"]
    assert replaced["id"] == created["id"]


def test_mongo_repo_unknown_ids(mongo_repo):
    assert mongo_repo.get_event("not-an-object-id") is None
    assert mongo_repo.delete_event(str(ObjectId())) is None
    assert mongo_repo.replace_event("123", _data()) is None


def test_mongo_repo_wraps_driver_errors():
    repo = MongoRepo(BrokenCollection())
    with pytest.raises(StorageError) as excinfo:
        repo.list_events()
    assert excinfo.value.operation == "list_events"
    with pytest.raises(StorageError):
        repo.ping()


def test_build_repo_picks_backend():
    assert isinstance(build_repo(Settings(storage_backend="memory")), MemoryRepo)
    with pytest.raises(ValueError):
        build_repo(Settings(storage_backend="sql"))
    with pytest.raises(ValueError):
        build_repo(Settings(storage_backend="mongo", mongodb_uri=None))

def test_build_repo_sql_uses_session(db):
    repo = build_repo(Settings(storage_backend="sql"), db=db)
    assert isinstance(repo, SqlAlchemyRepo)
    assert repo.ping() is True


def test_mongo_repo_created_at_survives_round_trip(mongo_repo):
    created = mongo_repo.create_event(_data())
    assert created["created_at"].microsecond % 1000 == 0
    assert mongo_repo.get_event(created["id"]) == created
    assert mongo_repo.list_events() == [created]


@pytest.mark.parametrize("event_id", ["1_0", "+10", " 10 ", "10.0", "١٠"])
def test_memory_repo_rejects_loose_numeric_ids(event_id):
    repo = MemoryRepo()
    for _ in range(10):
        repo.create_event(_data())
    assert repo.get_event("10")["id"] == 10
    assert repo.get_event(event_id) is None
    assert repo.delete_event(event_id) is None


@pytest.mark.parametrize("event_id", ["1_0", "+10", " 10 "])
def test_sql_repo_rejects_loose_numeric_ids(db, event_id):
    repo = SqlAlchemyRepo(db)
    for _ in range(10):
        repo.create_event(_data())
    assert repo.get_event("10").id == 10
    assert repo.get_event(event_id) is None
