"""Error classifiers for integration exceptions.

Converts integration-specific exceptions (Slack Web API, httpx, AWS SDK)
into standardized OperationResult objects so callers can report a failure
as data instead of propagating it.

Key Functions:
- classify_slack_error(): Slack Web API errors -> OperationResult
- classify_http_error(): httpx errors -> OperationResult
- classify_aws_error(): AWS SDK errors -> OperationResult

Usage:
    from infrastructure.operations.classifiers import classify_slack_error

    try:
        response = await client.chat_postMessage(channel=channel_id, text=text)
    except Exception as exc:
        return classify_slack_error(exc)
"""

import asyncio
from typing import Optional

import httpx
from botocore.exceptions import ClientError
from slack_sdk.errors import SlackApiError

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

# Slack error codes that will not succeed on retry
SLACK_NOT_FOUND_ERRORS = frozenset(
    {"channel_not_found", "thread_not_found", "message_not_found", "team_not_found"}
)
SLACK_PERMISSION_ERRORS = frozenset(
    {
        "not_in_channel",
        "is_archived",
        "missing_scope",
        "not_authed",
        "invalid_auth",
        "account_inactive",
        "restricted_action",
        "access_denied",
    }
)


def classify_slack_error(exc: Exception) -> OperationResult:
    """Classify Slack Web API errors into OperationResult.

    Error Mapping:
    - ratelimited: TRANSIENT_ERROR with retry_after from the Retry-After header
    - channel_not_found and similar: NOT_FOUND
    - not_in_channel, is_archived, auth errors: UNAUTHORIZED
    - other Slack errors: PERMANENT_ERROR
    - timeouts and connection errors: TRANSIENT_ERROR

    Args:
        exc: Exception raised by slack_sdk or the underlying transport

    Returns:
        OperationResult describing the failure
    """
    if isinstance(exc, asyncio.TimeoutError):
        return OperationResult.transient_error(
            "Slack API call timed out", error_code="TIMEOUT"
        )

    if not isinstance(exc, SlackApiError):
        return OperationResult.transient_error(
            f"Connection error: {type(exc).__name__}: {str(exc)}",
            error_code="CONNECTION_ERROR",
        )

    error = "unknown_error"
    if exc.response is not None:
        error = exc.response.get("error") or error

    if error == "ratelimited":
        retry_after = 30
        headers = getattr(exc.response, "headers", None) or {}
        header_value = headers.get("Retry-After") or headers.get("retry-after")
        if header_value:
            try:
                retry_after = int(header_value)
            except (ValueError, TypeError):
                pass
        return OperationResult.error(
            OperationStatus.TRANSIENT_ERROR,
            "Slack API rate limited",
            error_code="RATE_LIMITED",
            retry_after=retry_after,
        )

    if error in SLACK_NOT_FOUND_ERRORS:
        return OperationResult.error(
            OperationStatus.NOT_FOUND,
            f"Invalid channel: {error}",
            error_code=error,
        )

    if error in SLACK_PERMISSION_ERRORS:
        return OperationResult.error(
            OperationStatus.UNAUTHORIZED,
            f"Permission denied: {error}",
            error_code=error,
        )

    return OperationResult.permanent_error(
        f"Slack API error: {error}", error_code=error
    )


def classify_http_error(exc: Exception) -> OperationResult:
    """Classify httpx errors into OperationResult.

    Status Code Mapping:
    - 429: Rate limiting -> TRANSIENT_ERROR with retry_after
    - 401/403: UNAUTHORIZED (bad or revoked API key)
    - 404: NOT_FOUND
    - 5xx: TRANSIENT_ERROR
    - other 4xx: PERMANENT_ERROR
    - timeouts, connection errors: TRANSIENT_ERROR

    Args:
        exc: Exception raised by httpx

    Returns:
        OperationResult describing the failure
    """
    if not isinstance(exc, httpx.HTTPStatusError):
        return OperationResult.transient_error(
            f"Connection error: {type(exc).__name__}: {str(exc)}",
            error_code="CONNECTION_ERROR",
        )

    status_code: Optional[int] = exc.response.status_code

    if status_code == 429:
        retry_after = 60
        header_value = exc.response.headers.get("retry-after")
        if header_value:
            try:
                retry_after = int(header_value)
            except (ValueError, TypeError):
                pass
        return OperationResult.error(
            OperationStatus.TRANSIENT_ERROR,
            "Upstream API rate limited",
            error_code="RATE_LIMITED",
            retry_after=retry_after,
        )

    if status_code in (401, 403):
        return OperationResult.error(
            OperationStatus.UNAUTHORIZED,
            f"Upstream API rejected credentials ({status_code})",
            error_code="UNAUTHORIZED",
        )

    if status_code == 404:
        return OperationResult.error(
            OperationStatus.NOT_FOUND,
            "Upstream resource not found",
            error_code="NOT_FOUND",
        )

    if 500 <= status_code < 600:
        return OperationResult.transient_error(
            f"Upstream API server error ({status_code})",
            error_code="SERVER_ERROR",
        )

    return OperationResult.permanent_error(
        f"Upstream API client error ({status_code})",
        error_code="HTTP_ERROR",
    )


def classify_aws_error(exc: Exception) -> OperationResult:
    """Classify AWS SDK errors into OperationResult.

    Error Code Mapping:
    - ThrottlingException / ProvisionedThroughputExceededException:
      TRANSIENT_ERROR with retry_after
    - AccessDeniedException: UNAUTHORIZED
    - ResourceNotFoundException: NOT_FOUND (missing table)
    - ValidationException: PERMANENT_ERROR
    - Other: TRANSIENT_ERROR (AWS convention)

    Args:
        exc: Exception raised by AWS SDK (boto3/botocore)

    Returns:
        OperationResult describing the failure
    """
    if not isinstance(exc, ClientError):
        return OperationResult.transient_error(
            f"AWS connection error: {type(exc).__name__}: {str(exc)}",
            error_code="CONNECTION_ERROR",
        )

    error_code = "Unknown"
    if exc.response:
        error_code = exc.response.get("Error", {}).get("Code", "Unknown")

    if error_code in ("ThrottlingException", "ProvisionedThroughputExceededException"):
        return OperationResult.error(
            OperationStatus.TRANSIENT_ERROR,
            "AWS API throttled",
            error_code="RATE_LIMITED",
            retry_after=60,
        )

    if error_code == "AccessDeniedException":
        return OperationResult.error(
            OperationStatus.UNAUTHORIZED,
            "AWS API access denied",
            error_code="FORBIDDEN",
        )

    if error_code == "ResourceNotFoundException":
        return OperationResult.error(
            OperationStatus.NOT_FOUND,
            "AWS resource not found",
            error_code="NOT_FOUND",
        )

    if error_code == "ValidationException":
        return OperationResult.permanent_error(
            f"AWS validation error: {error_code}",
            error_code="INVALID_REQUEST",
        )

    return OperationResult.transient_error(
        f"AWS client error: {error_code}",
        error_code="AWS_CLIENT_ERROR",
    )
