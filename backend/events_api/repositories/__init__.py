from sqlalchemy.orm import Session

from events_api.core.config import Settings
from events_api.repositories.event_repo import SqlAlchemyRepo
from events_api.repositories.memory_repo import MemoryRepo
from events_api.repositories.mongo_repo import MongoRepo


BACKENDS = ("memory", "sql", "mongo")


def build_repo(settings: Settings, *, db: Session | None = None):
    backend = settings.resolved_backend
    if backend == "memory":
        return MemoryRepo()
    if backend == "mongo":
        if not settings.mongodb_uri:
            raise ValueError("MONGODB_URI is required for the mongo backend")
        return MongoRepo.from_uri(settings.mongodb_uri, settings.mongodb_db)
    if backend == "sql":
        if db is None:
            raise ValueError("A database session is required for the sql backend")
        return SqlAlchemyRepo(db)
    raise ValueError(f"Unknown storage backend {backend!r}, expected one of {', '.join(BACKENDS)}")
