from events_api.core.config import settings
from events_api.db import session as db_session
from events_api.db.base import Base
from events_api.repositories import build_repo
from events_api.core.errors import StorageError
from events_api.schemas.event import EventCreate
import events_api.models  # noqa: F401


SAMPLE_EVENTS = [
    {
        "title": "Jazz Night",
        "shortDescription": "Live jazz by the river",
        "fullDescription": "An evening of live jazz with three local bands.",
        "date": "2026-11-20",
        "time": "19:30",
        "location": "Riverside Park",
        "price": "15",
        "category": "Music",
        "imageUrl": "🎷",
        "createdBy": "host@demo.local",
    },
    {
        "title": "Python Meetup",
        "shortDescription": "Talks and pizza",
        "fullDescription": "Two short talks on packaging and typing, then pizza.",
        "date": "2026-11-25",
        "location": "Tech Hub, Room 2",
        "price": "Free",
        "category": "Technology",
        "imageUrl": "🐍",
        "createdBy": "organizer@demo.local",
    },
    {
        "title": "Farmers Market",
        "shortDescription": "Local produce",
        "fullDescription": "Fruit, vegetables and bread from farms in the region.",
        "date": "2026-12-05",
        "time": "08:00",
        "location": "Market Square",
        "price": "0",
        "createdBy": "host@demo.local",
    },
]


def run_seed():
    backend = settings.resolved_backend
    if backend == "memory":
        print("❌ Storage is in-memory; set DATABASE_URL or MONGODB_URI to seed a persistent store")
        return

    db = None
    if backend == "sql":
        Base.metadata.create_all(bind=db_session.engine)
        db = db_session.SessionLocal()

    try:
        repo = build_repo(settings, db=db)
        for raw in SAMPLE_EVENTS:
            payload = EventCreate.model_validate(raw)
            repo.create_event(payload.model_dump())
            print("✅ Event created:", payload.title)

        print(f"📅 Events in {backend}:")
        for ev in repo.list_events():
            title = ev["title"] if isinstance(ev, dict) else ev.title
            print("-", title)
    except StorageError as e:
        print("❌ ERROR:", e)
    finally:
        if db is not None:
            db.close()


if __name__ == "__main__":
    run_seed()
