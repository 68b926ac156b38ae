import logging
from datetime import datetime, timezone
from typing import List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, MongoClient, ReturnDocument
from pymongo.errors import PyMongoError
from pymongo.server_api import ServerApi

from events_api.core.errors import StorageError


logger = logging.getLogger("events_api.repositories")

COLLECTION = "events"
NEWEST_FIRST = [("createdAt", DESCENDING), ("_id", DESCENDING)]

# python attribute -> stored document key
FIELD_KEYS = {
    "title": "title",
    "short_description": "shortDescription",
    "full_description": "fullDescription",
    "date": "date",
    "time": "time",
    "location": "location",
    "price": "price",
    "category": "category",
    "image_url": "imageUrl",
    "created_by": "createdBy",
}


def _bson_now() -> datetime:
    # BSON datetimes keep milliseconds only
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def _object_id(event_id) -> Optional[ObjectId]:
    try:
        return ObjectId(str(event_id))
    except (InvalidId, TypeError):
        return None


def _to_document(data: dict) -> dict:
    return {FIELD_KEYS[name]: value for name, value in data.items() if name in FIELD_KEYS}


def _from_document(doc: Optional[dict]) -> Optional[dict]:
    if doc is None:
        return None
    record = {name: doc.get(key) for name, key in FIELD_KEYS.items()}
    record["id"] = str(doc["_id"])
    record["created_at"] = doc.get("createdAt")
    return record


class MongoRepo:
    """Event store backed by a MongoDB collection. Documents keep the camelCase JSON keys."""

    def __init__(self, collection):
        self.collection = collection

    @classmethod
    def from_uri(cls, uri: str, default_db: str) -> "MongoRepo":
        client = MongoClient(uri, server_api=ServerApi("1"), tz_aware=True, serverSelectionTimeoutMS=5000)
        database = client.get_default_database(default=default_db)
        return cls(database[COLLECTION])

    def _fail(self, operation: str, exc: PyMongoError) -> StorageError:
        logger.error("Mongo %s failed: %s", operation, exc)
        return StorageError(operation, exc)

    def ping(self) -> bool:
        try:
            self.collection.database.command("ping")
        except PyMongoError as exc:
            raise self._fail("ping", exc) from exc
        return True

    def list_events(self) -> List[dict]:
        try:
            return [_from_document(doc) for doc in self.collection.find().sort(NEWEST_FIRST)]
        except PyMongoError as exc:
            raise self._fail("list_events", exc) from exc

    def list_by_owner(self, email: str) -> List[dict]:
        try:
            cursor = self.collection.find({"createdBy": email}).sort(NEWEST_FIRST)
            return [_from_document(doc) for doc in cursor]
        except PyMongoError as exc:
            raise self._fail("list_by_owner", exc) from exc

    def get_event(self, event_id) -> Optional[dict]:
        oid = _object_id(event_id)
        if oid is None:
            return None
        try:
            return _from_document(self.collection.find_one({"_id": oid}))
        except PyMongoError as exc:
            raise self._fail("get_event", exc) from exc

    def create_event(self, data: dict) -> dict:
        doc = _to_document(data)
        doc["createdAt"] = _bson_now()
        try:
            result = self.collection.insert_one(doc)
        except PyMongoError as exc:
            raise self._fail("create_event", exc) from exc
        doc["_id"] = result.inserted_id
        logger.info("Created event id=%s owner=%s", result.inserted_id, doc.get("createdBy"))
        return _from_document(doc)

    def replace_event(self, event_id, data: dict) -> Optional[dict]:
        oid = _object_id(event_id)
        if oid is None:
            return None
        try:
            doc = self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": _to_document(data)},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as exc:
            raise self._fail("replace_event", exc) from exc
        return _from_document(doc)

    def delete_event(self, event_id) -> Optional[dict]:
        oid = _object_id(event_id)
        if oid is None:
            return None
        try:
            doc = self.collection.find_one_and_delete({"_id": oid})
        except PyMongoError as exc:
            raise self._fail("delete_event", exc) from exc
        if doc is not None:
            logger.info("Deleted event id=%s", oid)
        return _from_document(doc)
