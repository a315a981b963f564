"""Watermark store for event deduplication.

Remembers the newest processed event id per adapter so that a poll tick
only emits events it has not seen. Process lifetime only: after a restart
the polling adapter seeds from the feed again.
"""

from typing import Dict, Optional

from infrastructure.logging import get_module_logger

logger = get_module_logger()


def compare_event_ids(a: str, b: str) -> int:
    """Compare two event ids.

    Decimal integer ids compare numerically ("99" < "100"); anything else
    falls back to plain string comparison.

    Returns:
        Negative when a < b, zero when equal, positive when a > b.
    """
    if a.isdigit() and b.isdigit():
        return (int(a) > int(b)) - (int(a) < int(b))
    return (a > b) - (a < b)


class WatermarkStore:
    """In-memory, forward-only watermarks keyed by adapter name."""

    def __init__(self):
        self._watermarks: Dict[str, str] = {}

    def get(self, name: str) -> Optional[str]:
        """Get the watermark of an adapter, None when never set."""
        return self._watermarks.get(name)

    def advance(self, name: str, event_id: str) -> bool:
        """Move the watermark forward.

        Writes when no watermark exists or when ``event_id`` is strictly
        greater than the current one. A smaller or equal id is ignored, so
        concurrent ticks can never move the watermark backwards.

        Args:
            name: Adapter name
            event_id: Candidate watermark

        Returns:
            True if the watermark was written
        """
        current = self._watermarks.get(name)
        if current is not None and compare_event_ids(event_id, current) <= 0:
            return False

        self._watermarks[name] = event_id
        logger.debug(
            "watermark_advanced",
            adapter=name,
            previous=current,
            watermark=event_id,
        )
        return True

    def reset(self, name: str) -> None:
        """Forget the watermark of an adapter."""
        self._watermarks.pop(name, None)
