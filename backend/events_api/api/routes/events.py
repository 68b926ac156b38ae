from fastapi import APIRouter, Depends, status

from events_api.api.deps import get_repo
from events_api.schemas.event import EventCreate, EventResponse
from events_api.services import event_service


router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("", response_model=list[EventResponse])
def list_events(repo=Depends(get_repo)):
    return event_service.list_events(repo)


@router.get("/user/{email}", response_model=list[EventResponse])
def list_events_by_owner(email: str, repo=Depends(get_repo)):
    return event_service.list_events_by_owner(repo, email)


@router.get("/{event_id}", response_model=EventResponse)
def get_event(event_id: str, repo=Depends(get_repo)):
    return event_service.get_event(repo, event_id)


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_event(payload: EventCreate, repo=Depends(get_repo)):
    return event_service.create_event(repo, payload)


@router.put("/{event_id}", response_model=EventResponse)
def replace_event(event_id: str, payload: EventCreate, repo=Depends(get_repo)):
    return event_service.replace_event(repo, event_id, payload)


@router.delete("/{event_id}", response_model=EventResponse)
def delete_event(event_id: str, repo=Depends(get_repo)):
    return event_service.delete_event(repo, event_id)
