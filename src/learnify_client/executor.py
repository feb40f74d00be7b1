"""
Resilient request execution: send, classify, back off, retry.

One ``ResilientExecutor.execute`` call walks the state machine

    IDLE → SENDING → SUCCEEDED
                   → RETRYING → SENDING ...
                   → EXHAUSTED
                   → FAILED

Retry policy:
- Only a connection lost mid-transfer is retried (``RetryableFailure``),
  up to ``max_attempts`` attempts in total.
- Any other transport error, any non-2xx status, and cancellation are
  surfaced on the attempt that produced them (``FatalFailure``).
- The wait before attempt n+1 is ``n × backoff_unit`` seconds (linear).
- ``request_timeout_seconds`` bounds connecting and any silence while
  reading; ``resource_timeout_seconds`` bounds one attempt's whole transfer.
  Bodies are streamed so that deadline is checked between chunks, and each
  retry starts a fresh one.

Each invocation builds and closes its own ``requests.Session``; nothing is
shared between calls, so concurrent calls fail independently.
"""

from __future__ import annotations

import http.client
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Iterator, Union

import requests
import urllib3
from requests.adapters import HTTPAdapter

from .config import (
    BACKOFF_UNIT_SECONDS,
    MAX_ATTEMPTS,
    READ_CHUNK_BYTES,
    TransportConfig,
    load_transport_config,
)
from .errors import (
    CallCancelledError,
    ConnectivityError,
    ErrorCategory,
    LearnifyError,
    NetworkExhaustedError,
    ServerStatusError,
    TransportError,
)
from .request import CallDescriptor


# ---------------------------------------------------------------------------
# States and outcomes
# ---------------------------------------------------------------------------

class ExecutorState(Enum):
    IDLE = "idle"
    SENDING = "sending"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


@dataclass(frozen=True)
class Success:
    status: int
    content: bytes


@dataclass(frozen=True)
class RetryableFailure:
    cause: ConnectivityError


@dataclass(frozen=True)
class FatalFailure:
    cause: LearnifyError


Outcome = Union[Success, RetryableFailure, FatalFailure]


@dataclass(frozen=True)
class Attempt:
    number: int
    started_at: datetime
    outcome: Outcome
    latency_seconds: float


@dataclass(frozen=True)
class AttemptEvent:
    """What the observer receives after every attempt."""

    operation: str
    url: str
    attempt: Attempt
    max_attempts: int
    next_state: ExecutorState
    delay_seconds: float | None = None


AttemptObserver = Callable[[AttemptEvent], None]


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

# Exception types that mean "the connection dropped under us" somewhere in
# the cause chain.  RemoteDisconnected is also a ConnectionResetError.
CONNECTION_LOSS_TYPES: tuple[type[BaseException], ...] = (
    requests.exceptions.ChunkedEncodingError,
    urllib3.exceptions.ProtocolError,
    http.client.RemoteDisconnected,
    http.client.IncompleteRead,
    ConnectionResetError,
    ConnectionAbortedError,
    BrokenPipeError,
)


def iter_causes(exc: BaseException) -> Iterator[BaseException]:
    """
    Yield ``exc`` and every exception reachable from it.

    Follows ``__cause__``, ``__context__``, urllib3's ``reason`` attribute,
    and exceptions passed as constructor args (how requests wraps urllib3).
    """
    stack = [exc]
    seen: set[int] = set()
    while stack:
        current = stack.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current

        linked = [current.__cause__, current.__context__, getattr(current, "reason", None)]
        linked.extend(current.args)
        stack.extend(item for item in linked if isinstance(item, BaseException))


def is_connection_loss(exc: BaseException) -> bool:
    """True if the failure is a dropped connection rather than a setup or timeout error."""
    if isinstance(exc, (requests.exceptions.Timeout, requests.exceptions.SSLError)):
        return False
    return any(isinstance(cause, CONNECTION_LOSS_TYPES) for cause in iter_causes(exc))


def classify_exception(exc: requests.exceptions.RequestException) -> Outcome:
    """
    Map a transport exception to an outcome.

    Returns:
        ``RetryableFailure`` for connection loss, ``FatalFailure`` with a
        ``TransportError`` for everything else (DNS, refused, TLS, timeouts).
    """
    if isinstance(exc, requests.exceptions.Timeout):
        error: LearnifyError = TransportError(f"Request timed out: {exc}", cause=exc)
    elif isinstance(exc, requests.exceptions.SSLError):
        error = TransportError(f"TLS handshake failed: {exc}", cause=exc)
    elif is_connection_loss(exc):
        error = ConnectivityError(f"Network connection lost: {exc}", cause=exc)
    else:
        error = TransportError(str(exc) or type(exc).__name__, cause=exc)

    if error.category in ErrorCategory.RETRIABLE:
        return RetryableFailure(error)
    return FatalFailure(error)


def classify_response(status: int, content: bytes) -> Outcome:
    """2xx → ``Success``; anything else → ``FatalFailure(ServerStatusError)``."""
    if 200 <= status <= 299:
        return Success(status=status, content=content)
    return FatalFailure(ServerStatusError(status, body=content))


def backoff_delay(attempt: int, unit: float = BACKOFF_UNIT_SECONDS) -> float:
    """
    Return the wait in seconds after failed attempt ``attempt``.

    Linear schedule: attempt 1 → 1 unit, attempt 2 → 2 units, ...

    Args:
        attempt: 1-based number of the attempt that just failed.
        unit: Seconds per step.
    """
    return attempt * unit


def should_retry(category: str, attempt: int, max_attempts: int = MAX_ATTEMPTS) -> bool:
    """
    Decide whether a failed attempt is followed by another one.

    Args:
        category: ``category`` of the attempt's error.
        attempt: The 1-based attempt number that just failed.
        max_attempts: Total attempts allowed.

    Returns:
        True if the category is transient and attempts remain.
    """
    if attempt >= max_attempts:
        return False
    if category in ErrorCategory.FATAL:
        return False
    return category in ErrorCategory.RETRIABLE


# ---------------------------------------------------------------------------
# Transport session
# ---------------------------------------------------------------------------

def build_session(transport: TransportConfig) -> requests.Session:
    """
    Create a session for a single call.

    The adapter disables urllib3's own retries so that every retry decision
    is made by the executor, and blocks instead of opening more than
    ``max_connections_per_host`` connections.
    """
    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=1,
        pool_maxsize=transport.max_connections_per_host,
        pool_block=True,
        max_retries=0,
    )
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def print_attempt(event: AttemptEvent) -> None:
    """
    Default observer: report failed attempts and pending retries on stdout.

    Successful attempts are silent.
    """
    outcome = event.attempt.outcome
    if isinstance(outcome, Success):
        return

    cause = outcome.cause
    print(
        f"  [{event.operation}] Attempt {event.attempt.number}/{event.max_attempts} "
        f"failed [{cause.category}]: {str(cause)[:120]}"
    )
    if event.delay_seconds is not None:
        print(f"  Retrying in {event.delay_seconds:g}s...")


# ---------------------------------------------------------------------------
# Executor
# ---------------------------------------------------------------------------

class ResilientExecutor:
    """
    Executes ``CallDescriptor``s with bounded, linearly backed-off retries.

    Holds only immutable settings; safe to share between threads.

    Args:
        transport: Timeouts, cache policy and connection limits.
        max_attempts: Total attempts allowed (initial call + retries).
        backoff_unit: Seconds per backoff step.
        observer: Called with an ``AttemptEvent`` after every attempt, or
                  ``None`` to stay silent.
        session_factory: Builds the per-call session from ``transport``.
        sleep: Blocking sleep used when the caller passes no cancel event.
        clock: Monotonic clock for latency and the per-attempt resource deadline.
    """

    def __init__(
        self,
        transport: TransportConfig | None = None,
        max_attempts: int = MAX_ATTEMPTS,
        backoff_unit: float = BACKOFF_UNIT_SECONDS,
        observer: AttemptObserver | None = print_attempt,
        session_factory: Callable[[TransportConfig], requests.Session] = build_session,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self.transport = transport or load_transport_config()
        self.max_attempts = max_attempts
        self.backoff_unit = backoff_unit
        self.observer = observer
        self._session_factory = session_factory
        self._sleep = sleep
        self._clock = clock

    def execute(
        self,
        call: CallDescriptor,
        cancel_event: threading.Event | None = None,
    ) -> bytes:
        """
        Run ``call`` until success, a fatal failure, or the attempt budget is spent.

        Args:
            call: Descriptor from :func:`request.build_call`.
            cancel_event: Set by the caller to abandon the call.  Checked
                          around every send and waited on during backoff.

        Returns:
            Body bytes of the 2xx response.

        Raises:
            NetworkExhaustedError: Every attempt lost its connection.
            TransportError: Non-retryable transport failure, or an attempt
                            outran the resource timeout.
            ServerStatusError: Non-2xx response.
            CallCancelledError: ``cancel_event`` was set.
        """
        state = ExecutorState.IDLE
        attempt_number = 0
        outcome: Outcome | None = None
        last_connectivity: ConnectivityError | None = None

        session = self._session_factory(self.transport)
        try:
            state = ExecutorState.SENDING
            while True:
                if state is ExecutorState.SENDING:
                    attempt_number += 1
                    self._raise_if_cancelled(cancel_event, call, attempt_number)
                    attempt = self._attempt(session, call, attempt_number)
                    self._raise_if_cancelled(cancel_event, call, attempt_number)

                    outcome = attempt.outcome
                    delay = None
                    if isinstance(outcome, Success):
                        state = ExecutorState.SUCCEEDED
                    elif isinstance(outcome, RetryableFailure):
                        last_connectivity = outcome.cause
                        if should_retry(outcome.cause.category, attempt_number, self.max_attempts):
                            state = ExecutorState.RETRYING
                            delay = backoff_delay(attempt_number, self.backoff_unit)
                        else:
                            state = ExecutorState.EXHAUSTED
                    else:
                        state = ExecutorState.FAILED
                    self._notify(call, attempt, state, delay)

                elif state is ExecutorState.RETRYING:
                    self._wait(backoff_delay(attempt_number, self.backoff_unit), cancel_event, call, attempt_number)
                    state = ExecutorState.SENDING

                elif state is ExecutorState.SUCCEEDED:
                    return outcome.content

                elif state is ExecutorState.EXHAUSTED:
                    raise NetworkExhaustedError(
                        f"{call.operation} failed after {attempt_number} attempts: {last_connectivity}",
                        attempts=attempt_number,
                        cause=last_connectivity,
                    ) from last_connectivity

                else:
                    raise outcome.cause
        finally:
            session.close()

    # -- single attempt ------------------------------------------------------

    def _attempt(
        self,
        session: requests.Session,
        call: CallDescriptor,
        number: int,
    ) -> Attempt:
        started_at = datetime.now()
        attempt_start = self._clock()
        deadline = attempt_start + self.transport.resource_timeout_seconds
        timeout = min(self.transport.request_timeout_seconds, self.transport.resource_timeout_seconds)

        outcome: Outcome
        try:
            response = session.request(
                call.method,
                call.url,
                headers=dict(call.headers),
                data=call.body,
                timeout=timeout,
                stream=True,
            )
            try:
                content = self._read_body(response, deadline, number)
            finally:
                response.close()
            outcome = classify_response(response.status_code, content)
        except requests.exceptions.RequestException as exc:
            outcome = classify_exception(exc)
        except TransportError as exc:
            outcome = FatalFailure(exc)

        latency = round(self._clock() - attempt_start, 3)
        return Attempt(number, started_at, outcome, latency)

    def _read_body(self, response: requests.Response, deadline: float, number: int) -> bytes:
        """
        Stream the body, giving up once ``deadline`` has passed.

        The read timeout only bounds the gap between received bytes, so a
        peer trickling data would otherwise hold the attempt open indefinitely.

        Raises:
            TransportError: The resource timeout elapsed before the body ended.
        """
        chunks: list[bytes] = []
        self._check_deadline(deadline, number)
        for chunk in response.iter_content(chunk_size=READ_CHUNK_BYTES):
            chunks.append(chunk)
            self._check_deadline(deadline, number)
        return b"".join(chunks)

    def _check_deadline(self, deadline: float, number: int) -> None:
        if self._clock() > deadline:
            raise TransportError(
                f"Resource timeout of {self.transport.resource_timeout_seconds:g}s "
                f"exceeded during attempt {number}"
            )

    # -- suspension points and reporting -------------------------------------

    def _wait(
        self,
        seconds: float,
        cancel_event: threading.Event | None,
        call: CallDescriptor,
        attempt_number: int,
    ) -> None:
        if cancel_event is None:
            self._sleep(seconds)
            return
        if cancel_event.wait(seconds):
            raise CallCancelledError(
                f"{call.operation} cancelled during backoff after attempt {attempt_number}"
            )

    @staticmethod
    def _raise_if_cancelled(
        cancel_event: threading.Event | None,
        call: CallDescriptor,
        attempt_number: int,
    ) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise CallCancelledError(f"{call.operation} cancelled at attempt {attempt_number}")

    def _notify(
        self,
        call: CallDescriptor,
        attempt: Attempt,
        state: ExecutorState,
        delay: float | None,
    ) -> None:
        if self.observer is None:
            return
        self.observer(AttemptEvent(
            operation=call.operation,
            url=call.url,
            attempt=attempt,
            max_attempts=self.max_attempts,
            next_state=state,
            delay_seconds=delay,
        ))
