"""
Error taxonomy for Learnify client calls.

Every failure a caller can see is one ``LearnifyError`` subclass.  The
``category`` attribute discriminates them without isinstance chains, and
``describe()`` gives the message a UI layer can show as-is.
"""

from __future__ import annotations


class ErrorCategory:
    """
    Category constants and the retry split used by the executor.

    Only connection loss is transient; everything else is surfaced on the
    attempt that produced it.
    """

    INVALID_REQUEST = "invalid_request"
    CONNECTIVITY = "connectivity"
    NETWORK_EXHAUSTED = "network_exhausted"
    TRANSPORT = "transport"
    SERVER_STATUS = "server_status"
    DECODE = "decode"
    CANCELLED = "cancelled"

    RETRIABLE: frozenset[str] = frozenset({CONNECTIVITY})
    FATAL: frozenset[str] = frozenset({INVALID_REQUEST, TRANSPORT, SERVER_STATUS, DECODE, CANCELLED})


class LearnifyError(Exception):
    """Base class for all classified client failures."""

    category: str = "other"

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def describe(self) -> str:
        return f"An unexpected error occurred: {self.message}"


class InvalidRequestError(LearnifyError):
    """The request could not be formed; nothing was sent."""

    category = ErrorCategory.INVALID_REQUEST

    def describe(self) -> str:
        return "The server URL is invalid."


class ConnectivityError(LearnifyError):
    """
    The connection dropped mid-transfer.

    Used as the retryable cause inside the executor; callers only ever see it
    wrapped in :class:`NetworkExhaustedError`.
    """

    category = ErrorCategory.CONNECTIVITY

    def describe(self) -> str:
        return f"A network error occurred: {self.message}"


class NetworkExhaustedError(LearnifyError):
    """Every attempt lost its connection; carries the last connectivity cause."""

    category = ErrorCategory.NETWORK_EXHAUSTED

    def __init__(self, message: str, *, attempts: int, cause: BaseException | None = None) -> None:
        super().__init__(message, cause=cause)
        self.attempts = attempts

    def describe(self) -> str:
        return f"A network error occurred: {self.message}"


class TransportError(LearnifyError):
    """Non-retryable transport failure: DNS, TLS, refused connection, timeout."""

    category = ErrorCategory.TRANSPORT

    def describe(self) -> str:
        return f"A network error occurred: {self.message}"


class ServerStatusError(LearnifyError):
    """The server answered with a non-2xx status."""

    category = ErrorCategory.SERVER_STATUS

    def __init__(self, status: int, *, body: bytes | None = None) -> None:
        super().__init__(f"HTTP {status}")
        self.status = status
        self.body = body

    def describe(self) -> str:
        return f"The server returned an error with status code: {self.status}."


class DecodeError(LearnifyError):
    """The response body was not the JSON shape the operation expects."""

    category = ErrorCategory.DECODE

    def describe(self) -> str:
        return "Failed to decode the server's response. The data format may be incorrect."


class CallCancelledError(LearnifyError):
    """The caller's cancel event was set while the call was in flight."""

    category = ErrorCategory.CANCELLED

    def describe(self) -> str:
        return "The request was cancelled."
