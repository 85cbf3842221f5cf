from studymate.realtime.channel import BroadcastHub, hub, owner_topic
from studymate.realtime.events import (
    DashboardEvent,
    EVENT_DOUBT_CREATED,
    EVENT_DOUBT_UPDATED,
    EVENT_SCHEMAS,
    EVENT_SESSION_COMPLETED,
    EVENT_SESSION_CREATED,
    EVENT_SESSION_DELETED,
    EVENT_SESSION_RESTORED,
    EVENT_SESSION_UPDATED,
)

__all__ = [
    "BroadcastHub",
    "hub",
    "owner_topic",
    "DashboardEvent",
    "EVENT_SCHEMAS",
    "EVENT_SESSION_CREATED",
    "EVENT_SESSION_UPDATED",
    "EVENT_SESSION_COMPLETED",
    "EVENT_SESSION_DELETED",
    "EVENT_SESSION_RESTORED",
    "EVENT_DOUBT_CREATED",
    "EVENT_DOUBT_UPDATED",
]
