"""Custom exceptions for the war alert pipeline.

Provides the error taxonomy shared by the upstream feed integration, the
event source adapters and the chat delivery layer. Routing misses, channel
resolution failures and reconnect exhaustion are reported as data, not
raised.
"""

from typing import Optional


class WarAlertError(Exception):
    """Base exception for all war alert errors.

    Example:
        try:
            events = await feed.fetch_recent(10)
        except WarAlertError as e:
            logger.error("war_alert_error", error=str(e))
    """

    pass


class TransportError(WarAlertError):
    """Raised when the upstream feed cannot be reached or answers badly.

    Covers connection failures, non-2xx responses, malformed JSON, GraphQL
    ``errors`` arrays, a subscription handshake without a channel and
    websocket protocol errors. The adapters absorb it at the tick or
    message boundary.

    Attributes:
        status_code: HTTP status code when the failure came from a response
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(WarAlertError):
    """Raised when a war payload cannot become a ConflictEvent.

    Only a payload that is not an object or lacks the war id is fatal;
    missing optional fields fall back to defaults.

    Example:
        >>> parse_war({"reason": "no id"})
        Traceback (most recent call last):
        ...
        ParseError: War payload is missing 'id'
    """

    pass


class DeliveryError(WarAlertError):
    """Raised inside chat channel helpers when a post is rejected.

    The notification dispatcher converts it into a failed DeliveryResult;
    it never escapes a fan-out.

    Attributes:
        error_code: Platform error code (e.g. ``channel_not_found``)
    """

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.error_code = error_code
