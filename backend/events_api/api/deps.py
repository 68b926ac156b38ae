import threading
from typing import Generator

from events_api.core.config import settings
from events_api.db import session as db_session
from events_api.repositories import build_repo

_shared_repo = None
_shared_repo_lock = threading.Lock()


def get_shared_repo():
    """Process-wide store for the memory and mongo backends."""
    global _shared_repo
    if _shared_repo is None:
        with _shared_repo_lock:
            if _shared_repo is None:
                _shared_repo = build_repo(settings)
    return _shared_repo


def get_repo() -> Generator:
    if settings.resolved_backend != "sql":
        yield get_shared_repo()
        return

    db = db_session.SessionLocal()
    try:
        yield build_repo(settings, db=db)
    finally:
        db.close()
