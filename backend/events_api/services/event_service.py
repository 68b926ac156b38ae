from fastapi import HTTPException, status

from events_api.cache.redis_cache import cache_get, cache_invalidate_prefix, cache_set, make_key
from events_api.schemas.event import EventCreate, EventResponse


CACHE_PREFIX = "events:"
NOT_FOUND = "Event not found"


def _to_response(record) -> EventResponse:
    return EventResponse.model_validate(record)


def _invalidate() -> None:
    cache_invalidate_prefix(CACHE_PREFIX)


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)


def list_events(repo) -> list[EventResponse]:
    cache_key = make_key(f"{CACHE_PREFIX}list", {})
    cached = cache_get(cache_key)
    if cached is not None:
        return [EventResponse.model_validate(item) for item in cached]

    items = [_to_response(record) for record in repo.list_events()]
    cache_set(cache_key, items)
    return items


def list_events_by_owner(repo, email: str) -> list[EventResponse]:
    cache_key = make_key(f"{CACHE_PREFIX}owner", {"email": email})
    cached = cache_get(cache_key)
    if cached is not None:
        return [EventResponse.model_validate(item) for item in cached]

    items = [_to_response(record) for record in repo.list_by_owner(email)]
    cache_set(cache_key, items)
    return items


def get_event(repo, event_id: str) -> EventResponse:
    cache_key = make_key(f"{CACHE_PREFIX}detail", {"id": event_id})
    cached = cache_get(cache_key)
    if cached is not None:
        return EventResponse.model_validate(cached)

    record = repo.get_event(event_id)
    if record is None:
        raise _not_found()
    event = _to_response(record)
    cache_set(cache_key, event)
    return event


def create_event(repo, payload: EventCreate) -> EventResponse:
    record = repo.create_event(payload.model_dump())
    _invalidate()
    return _to_response(record)


def replace_event(repo, event_id: str, payload: EventCreate) -> EventResponse:
    record = repo.replace_event(event_id, payload.model_dump())
    if record is None:
        raise _not_found()
    _invalidate()
    return _to_response(record)


def delete_event(repo, event_id: str) -> EventResponse:
    record = repo.delete_event(event_id)
    if record is None:
        raise _not_found()
    _invalidate()
    return _to_response(record)
