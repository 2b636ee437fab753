"""
Docker API status classification

The only place that knows what Docker daemon HTTP statuses mean.
"""

from ..engine.exceptions import BugError, EngineError, RetryableError, UserActionableError

PERMISSION_HINT = "Check Docker socket permissions or authentication"
NOT_FOUND_HINT = "The resource may have been removed; refresh and try again"
CONFLICT_HINT = "The resource is in use; retry with force or stop it first"

# 304: container already started/stopped, request accepted without change
ACCEPTED_NO_CHANGE = frozenset({304})


def classify_status(status: int, body: str) -> EngineError:
    """
    Map a non-2xx Docker response to the error taxonomy

    Args:
        status: HTTP status code
        body: Raw response body text

    Returns:
        Classified engine error (not raised)
    """
    body = body.strip()
    if status == 404:
        return UserActionableError(f"Resource not found: {body}", hint=NOT_FOUND_HINT,
                                   status_code=status)
    if status in (401, 403):
        return UserActionableError(f"Permission denied: {body}", hint=PERMISSION_HINT,
                                   status_code=status)
    if status == 409:
        return UserActionableError(f"Conflict: {body}", hint=CONFLICT_HINT,
                                   status_code=status)
    if status == 500:
        return RetryableError(f"Docker daemon error: {body}", status_code=status)
    return BugError(f"Unexpected status {status}: {body}", status_code=status)
