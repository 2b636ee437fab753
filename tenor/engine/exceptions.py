"""
Engine error taxonomy

Every failure surfaced by an engine adapter is one of three kinds:

* UserActionableError - the caller can fix it (bad id, permission, conflict,
  unsupported capability). Never retried by the engine layer.
* RetryableError - transient (daemon 5xx, connection refused, read failure).
  Safe to retry with a caller-chosen backoff.
* BugError - invariant violation (malformed response after a success status,
  request that could not be built). Must be surfaced, not retried.
"""

from typing import Optional


class EngineError(Exception):
    """Base engine exception"""

    kind = 'engine'

    def __init__(self, message: str, cause: Optional[BaseException] = None,
                 status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.status_code = status_code
        if cause is not None:
            self.__cause__ = cause

    @property
    def hint(self) -> Optional[str]:
        return None

    @property
    def retryable(self) -> bool:
        return False

    def display(self) -> str:
        """Message followed by the remediation hint, if any"""
        if self.hint:
            return f"{self.message}\nHint: {self.hint}"
        return self.message

    def __repr__(self):
        return f"<{type(self).__name__}: {self.message!r}>"


class UserActionableError(EngineError):
    """Condition the user can fix"""

    kind = 'user_actionable'

    def __init__(self, message: str, hint: Optional[str] = None,
                 cause: Optional[BaseException] = None,
                 status_code: Optional[int] = None):
        super().__init__(message, cause=cause, status_code=status_code)
        self._hint = hint

    @property
    def hint(self) -> Optional[str]:
        return self._hint


class RetryableError(EngineError):
    """Transient condition, safe to retry"""

    kind = 'retryable'

    @property
    def retryable(self) -> bool:
        return True


class BugError(EngineError):
    """Internal invariant violation or unexpected protocol change"""

    kind = 'bug'
