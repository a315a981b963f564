"""Event source adapters.

Adapters turn an upstream feed into a stream of ConflictEvent objects
handed, one at a time, to an async handler.
"""

from modules.war_alerts.adapters.base import EventHandler, EventSourceAdapter
from modules.war_alerts.adapters.polling import PollingAdapter
from modules.war_alerts.adapters.push import PushAdapter

__all__ = [
    "EventHandler",
    "EventSourceAdapter",
    "PollingAdapter",
    "PushAdapter",
]
