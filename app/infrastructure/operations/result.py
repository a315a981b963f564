"""Result type returned by chat, feed and directory calls."""

from dataclasses import dataclass
from typing import Any, Optional

from infrastructure.operations.status import OperationStatus


@dataclass
class OperationResult:
    """Outcome of one call to an external system.

    ``data`` carries the useful part of a successful response, e.g.
    ``{"ts": ..., "channel": ...}`` for a posted chat message or a list of
    channels. ``retry_after`` is set when the platform rate limited us.
    """

    status: OperationStatus
    message: str
    data: Optional[Any] = None
    error_code: Optional[str] = None
    retry_after: Optional[int] = None

    @property
    def is_success(self) -> bool:
        return self.status == OperationStatus.SUCCESS

    @classmethod
    def success(
        cls, data: Optional[Any] = None, message: str = "ok"
    ) -> "OperationResult":
        return cls(OperationStatus.SUCCESS, message, data=data)

    @classmethod
    def error(
        cls,
        status: OperationStatus,
        message: str,
        error_code: Optional[str] = None,
        retry_after: Optional[int] = None,
        data: Optional[Any] = None,
    ) -> "OperationResult":
        return cls(status, message, data, error_code, retry_after)

    @classmethod
    def transient_error(
        cls,
        message: str,
        error_code: Optional[str] = None,
        retry_after: Optional[int] = None,
    ) -> "OperationResult":
        """Timeouts, rate limits, 5xx responses."""
        return cls(
            OperationStatus.TRANSIENT_ERROR,
            message,
            error_code=error_code,
            retry_after=retry_after,
        )

    @classmethod
    def permanent_error(
        cls, message: str, error_code: Optional[str] = None
    ) -> "OperationResult":
        """Archived or unknown channels, rejected payloads."""
        return cls(OperationStatus.PERMANENT_ERROR, message, error_code=error_code)
