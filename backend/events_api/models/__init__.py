from events_api.models.event import Event

__all__ = ["Event"]
