"""Event source adapter abstract base class."""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict

from modules.war_alerts.models import ConflictEvent

EventHandler = Callable[[ConflictEvent], Awaitable[Any]]


class EventSourceAdapter(ABC):
    """A source of conflict events.

    Implementations call the handler once per new event, in feed order,
    and absorb transport failures themselves.
    """

    name: str

    @abstractmethod
    async def start(self, handler: EventHandler) -> None:
        """Begin delivering events to ``handler``."""
        pass

    @abstractmethod
    async def stop(self) -> None:
        """Stop delivering events.

        Idempotent, and safe to call before or while ``start`` runs.
        """
        pass

    @abstractmethod
    def status(self) -> Dict[str, Any]:
        """Adapter health for the /health endpoint."""
        pass
