"""Exception hierarchy for racing one request across several endpoints.

Per-target failures (``TransportError``, ``BodyReadError``) never escape a race
on their own; they are carried inside outcomes and, when every target fails,
surfaced together through ``CombinedFailure``.
"""

from __future__ import annotations

from typing import List, Optional, Sequence


class FastestRequestError(Exception):
    """Base class for every error raised by this package."""


class AttemptError(FastestRequestError):
    """A single attempt against one target failed."""

    def __init__(self, target: str, cause: Optional[BaseException] = None, message: Optional[str] = None) -> None:
        self.target = target
        self.cause = cause
        if message is None:
            if cause is None:
                message = "attempt failed"
            else:
                message = str(cause) or type(cause).__name__
        super().__init__(f"{target}: {message}")


class TransportError(AttemptError):
    """Request construction or network-level failure."""


class BodyReadError(AttemptError):
    """The connection succeeded but the response body could not be drained."""


class CombinedFailure(FastestRequestError):
    """Every target failed before the deadline."""

    def __init__(self, errors: Sequence[BaseException]) -> None:
        self.errors: List[BaseException] = list(errors)
        message = "\n".join(str(e) for e in self.errors) or "all attempts failed"
        super().__init__(message)


class ContextDone(FastestRequestError):
    """The deadline context ended before an operation could finish."""


class DeadlineExceeded(ContextDone, TimeoutError):
    def __init__(self, message: str = "context deadline exceeded") -> None:
        super().__init__(message)


class ContextCancelled(ContextDone):
    def __init__(self, message: str = "context canceled") -> None:
        super().__init__(message)


class InvalidInput(FastestRequestError, ValueError):
    """Caller-supplied input was rejected before any network dispatch.

    ``usage`` is filled in by the command line front-end so the caller can show
    it next to the error.
    """

    default_message = "invalid input"

    def __init__(self, message: Optional[str] = None, usage: str = "") -> None:
        self.usage = usage
        super().__init__(message or self.default_message)


class InvalidIdentifier(InvalidInput):
    default_message = "invalid cep"


class InvalidTimeout(InvalidInput):
    default_message = "invalid timeout"


class InvalidFlags(InvalidInput):
    default_message = "failed to parse flags"
