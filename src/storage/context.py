"""Request-scoped cancellation carrier passed through every storage call."""

from __future__ import annotations

import time

from forumstore.errors import OperationCancelledError


class RequestContext:
    """Cancellation flag plus an optional deadline.

    Stores call :meth:`check` before each operation and before yielding
    each scanned row, so a cancelled request stops an in-flight scan at
    the next row.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._cancelled = False

    @classmethod
    def background(cls) -> RequestContext:
        """Return a context that is never cancelled and has no deadline."""
        return cls()

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        if self._cancelled:
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def check(self) -> None:
        """Raise OperationCancelledError if the request should stop."""
        if self._cancelled:
            raise OperationCancelledError("request cancelled")
        if self._deadline is not None and time.monotonic() >= self._deadline:
            raise OperationCancelledError("request deadline exceeded")
