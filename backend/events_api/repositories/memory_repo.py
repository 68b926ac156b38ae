import logging
import threading
from datetime import datetime, timezone
from typing import List, Optional

from events_api.repositories.ids import parse_counter_id


logger = logging.getLogger("events_api.repositories")


class MemoryRepo:
    """
    Keeps events in a process-local list.
    Ids come from a counter and are never reused after a delete.
    Swappable with SqlAlchemyRepo / MongoRepo without touching the routes.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._next_id = 1
        self.events: List[dict] = []

    def _find_index(self, event_id) -> Optional[int]:
        wanted = parse_counter_id(event_id)
        if wanted is None:
            return None
        for index, ev in enumerate(self.events):
            if ev["id"] == wanted:
                return index
        return None

    @staticmethod
    def _newest_first(items: List[dict]) -> List[dict]:
        return sorted(items, key=lambda ev: (ev["created_at"], ev["id"]), reverse=True)

    def ping(self) -> bool:
        return True

    def list_events(self) -> List[dict]:
        with self._lock:
            return [dict(ev) for ev in self._newest_first(self.events)]

    def list_by_owner(self, email: str) -> List[dict]:
        with self._lock:
            owned = [ev for ev in self.events if ev["created_by"] == email]
            return [dict(ev) for ev in self._newest_first(owned)]

    def get_event(self, event_id) -> Optional[dict]:
        with self._lock:
            index = self._find_index(event_id)
            return dict(self.events[index]) if index is not None else None

    def create_event(self, data: dict) -> dict:
        with self._lock:
            ev = {
                **data,
                "id": self._next_id,
                "created_at": datetime.now(timezone.utc),
            }
            self._next_id += 1
            self.events.append(ev)
        logger.info("Created event id=%s owner=%s", ev["id"], ev.get("created_by"))
        return dict(ev)

    def replace_event(self, event_id, data: dict) -> Optional[dict]:
        with self._lock:
            index = self._find_index(event_id)
            if index is None:
                return None
            current = self.events[index]
            ev = {**data, "id": current["id"], "created_at": current["created_at"]}
            self.events[index] = ev
            return dict(ev)

    def delete_event(self, event_id) -> Optional[dict]:
        with self._lock:
            index = self._find_index(event_id)
            if index is None:
                return None
            ev = self.events.pop(index)
        logger.info("Deleted event id=%s", ev["id"])
        return ev
