from timeline.models.event import Event
from timeline.models.message import EventMessage
from timeline.models.event_log import EventLog

__all__ = ["Event", "EventMessage", "EventLog"]
