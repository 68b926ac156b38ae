import logging
from typing import Sequence

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from events_api.core.errors import StorageError
from events_api.models.event import Event
from events_api.repositories.ids import parse_counter_id


logger = logging.getLogger("events_api.repositories")


def get(db: Session, event_id) -> Event | None:
    pk = parse_counter_id(event_id)
    if pk is None:
        return None
    return db.get(Event, pk)


def list_events(db: Session, *, created_by: str | None = None) -> Sequence[Event]:
    filters = []
    if created_by is not None:
        filters.append(Event.created_by == created_by)
    stmt = select(Event).where(*filters).order_by(Event.created_at.desc(), Event.id.desc())
    return db.scalars(stmt).all()


def create_event(db: Session, data: dict) -> Event:
    event = Event(**data)
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def replace_event(db: Session, event: Event, data: dict) -> Event:
    for field, value in data.items():
        setattr(event, field, value)
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def _snapshot(event: Event) -> dict:
    return {column.key: getattr(event, column.key) for column in Event.__table__.columns}


def delete_event(db: Session, event: Event) -> dict:
    snapshot = _snapshot(event)
    db.delete(event)
    db.commit()
    return snapshot


class SqlAlchemyRepo:
    """Event store backed by the `events` table; one instance per request session."""

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, operation: str, exc: SQLAlchemyError):
        self.db.rollback()
        logger.error("SQL %s failed: %s", operation, exc)
        return StorageError(operation, exc)

    def ping(self) -> bool:
        try:
            self.db.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise self._fail("ping", exc) from exc
        return True

    def list_events(self):
        try:
            return list_events(self.db)
        except SQLAlchemyError as exc:
            raise self._fail("list_events", exc) from exc

    def list_by_owner(self, email: str):
        try:
            return list_events(self.db, created_by=email)
        except SQLAlchemyError as exc:
            raise self._fail("list_by_owner", exc) from exc

    def get_event(self, event_id):
        try:
            return get(self.db, event_id)
        except SQLAlchemyError as exc:
            raise self._fail("get_event", exc) from exc

    def create_event(self, data: dict):
        try:
            event = create_event(self.db, data)
        except SQLAlchemyError as exc:
            raise self._fail("create_event", exc) from exc
        logger.info("Created event id=%s owner=%s", event.id, event.created_by)
        return event

    def replace_event(self, event_id, data: dict):
        try:
            event = get(self.db, event_id)
            if event is None:
                return None
            return replace_event(self.db, event, data)
        except SQLAlchemyError as exc:
            raise self._fail("replace_event", exc) from exc

    def delete_event(self, event_id):
        try:
            event = get(self.db, event_id)
            if event is None:
                return None
            deleted = delete_event(self.db, event)
        except SQLAlchemyError as exc:
            raise self._fail("delete_event", exc) from exc
        logger.info("Deleted event id=%s", deleted["id"])
        return deleted
