"""Operation status enumeration.

Status codes for operation results, used to classify outcomes of calls to
the chat platform, the upstream feed and the directory store.
"""

from enum import Enum


class OperationStatus(Enum):
    """Status codes for operation results.

    Attributes:
        SUCCESS: Operation completed successfully
        TRANSIENT_ERROR: Retryable error (network, timeout, rate limit)
        PERMANENT_ERROR: Non-retryable error (invalid channel, bad input)
        UNAUTHORIZED: Authentication or permission failure
        NOT_FOUND: Resource (channel, workspace, table) not found
    """

    SUCCESS = "success"
    TRANSIENT_ERROR = "transient_error"
    PERMANENT_ERROR = "permanent_error"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
