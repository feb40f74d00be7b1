"""
Shared pytest fixtures for the Learnify client tests.

Transport is faked at the session boundary: ``FakeSession`` replays a
scripted list of steps (an exception to raise, a ``(status, body)`` pair,
a ``FakeResponse``, or a callable returning one of those) so the real
executor, builder and decoder run unmodified.  Apart from the loopback
socket tests in test_executor.py, no test touches the network, and none
sleeps for real.
"""

from __future__ import annotations

import http.client
import json

import pytest
import requests
import urllib3

from src.learnify_client.config import TransportConfig
from src.learnify_client.executor import ResilientExecutor

BASE_URL = "https://learnify.test"


# ---------------------------------------------------------------------------
# Transport exceptions as requests raises them
# ---------------------------------------------------------------------------

def connection_lost() -> requests.exceptions.ConnectionError:
    """Server dropped the connection mid-request (retryable)."""
    return requests.exceptions.ConnectionError(
        urllib3.exceptions.ProtocolError(
            "Connection aborted.",
            http.client.RemoteDisconnected("Remote end closed connection without response"),
        )
    )


def connection_refused() -> requests.exceptions.ConnectionError:
    """Nothing listening on the port (fatal)."""
    return requests.exceptions.ConnectionError(ConnectionRefusedError(111, "Connection refused"))


def dns_failure() -> requests.exceptions.ConnectionError:
    """Host name did not resolve (fatal)."""
    return requests.exceptions.ConnectionError(
        urllib3.exceptions.MaxRetryError(
            None,
            "/api/auto/students",
            reason=urllib3.exceptions.NewConnectionError(
                None, "Failed to resolve 'learnify.test' ([Errno -2] Name or service not known)"
            ),
        )
    )


# ---------------------------------------------------------------------------
# Fake transport
# ---------------------------------------------------------------------------

class FakeResponse:
    """
    Streams ``content`` in ``chunk_size`` slices, or replays ``chunks``.

    ``chunks`` may be any iterable, so a generator can advance a fake clock
    between pieces of the body.
    """

    def __init__(self, status_code: int, content: bytes = b"", chunks=None) -> None:
        self.status_code = status_code
        self.content = content
        self.chunks = chunks
        self.closed = False

    def iter_content(self, chunk_size: int = 1):
        if self.chunks is not None:
            yield from self.chunks
            return
        for start in range(0, len(self.content), chunk_size):
            yield self.content[start:start + chunk_size]

    def close(self) -> None:
        self.closed = True


class FakeClock:
    """Monotonic clock that only moves when a test advances it."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSession:
    """Replays scripted steps; records every request it receives."""

    def __init__(self, script=()) -> None:
        self.script = list(script)
        self.calls: list[dict] = []
        self.closed = False

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.script:
            raise AssertionError(f"Unexpected request #{len(self.calls)}: {method} {url}")
        step = self.script.pop(0)
        if callable(step) and not isinstance(step, BaseException):
            step = step()
        if isinstance(step, BaseException):
            raise step
        if isinstance(step, FakeResponse):
            return step
        status, content = step
        return FakeResponse(status, content)

    def close(self) -> None:
        self.closed = True


def make_executor(session: FakeSession, **kwargs) -> tuple[ResilientExecutor, list[float]]:
    """Executor wired to ``session`` whose sleeps are recorded instead of slept."""
    sleeps: list[float] = []
    options = {
        "transport": TransportConfig(),
        "observer": None,
        "session_factory": lambda transport: session,
        "sleep": sleeps.append,
    }
    options.update(kwargs)
    return ResilientExecutor(**options), sleeps


# ---------------------------------------------------------------------------
# Envelope builders
# ---------------------------------------------------------------------------

def envelope(data, success: bool = True, message: str | None = None) -> bytes:
    document = {"success": success, "data": data}
    if message is not None:
        document["message"] = message
    return json.dumps(document).encode("utf-8")


CHECK_IN_DATA = {
    "check_in_id": 42,
    "student_id": "STUDENT2025",
    "student_name": "Ada Lovelace",
    "checked_in_at": "2025-07-01T09:00:00Z",
    "is_new_student": False,
}

STUDENTS_DATA = {
    "students": [
        {
            "id": "0b7c",
            "student_id": "STUDENT2025",
            "full_name": "Ada Lovelace",
            "created_at": "2025-06-30T08:00:00Z",
        },
        {
            "id": "9f1a",
            "student_id": "STUDENT2026",
            "full_name": "Alan Turing",
            "created_at": "2025-06-30T08:05:00Z",
        },
    ],
    "total": 2,
}

CHECK_INS_DATA = {
    "check_ins": [
        {"id": 7, "created_at": "2025-07-01T09:00:00Z"},
        {"id": 8, "created_at": "2025-07-01T13:30:00Z"},
        {"id": 9, "created_at": "2025-07-02T09:02:00Z"},
    ],
}

REVIEW_DATA = {
    "review_id": 3,
    "student_id": "STUDENT2025",
    "student_name": "Ada Lovelace",
    "mobile_app_name": "Notes",
    "review_text": "Fast and simple.",
    "submitted_at": "2025-07-01T10:00:00Z",
}

REVIEWS_DATA = {
    "reviews": [
        {
            "id": 3,
            "student_id": "STUDENT2025",
            "mobile_app_name": "Notes",
            "review_text": "Fast and simple.",
            "created_at": "2025-07-01T10:00:00Z",
            "students": {"full_name": "Ada Lovelace"},
        },
        {
            "id": 4,
            "student_id": "STUDENT2026",
            "mobile_app_name": "Notes",
            "review_text": "Crashes on rotate.",
            "created_at": "2025-07-01T11:00:00Z",
            "students": None,
        },
    ],
    "total_reviews": 2,
    "showing": {"limit": 20, "offset": 0, "app_name_filter": "Notes"},
}

LEADERBOARD_DATA = {
    "leaderboard": [
        {
            "student_id": "STUDENT2026",
            "full_name": "Alan Turing",
            "total_marks": 12,
            "total_check_ins": 6,
            "latest_check_in": None,
            "rank": 2,
        },
        {
            "student_id": "STUDENT2025",
            "full_name": "Ada Lovelace",
            "total_marks": 15,
            "total_check_ins": 7,
            "latest_check_in": "2025-07-02T09:02:00Z",
            "rank": 1,
        },
    ],
    "total_students": 2,
    "showing": {"limit": 50, "offset": 0, "total_pages": 1, "current_page": 1},
}


@pytest.fixture
def students_body() -> bytes:
    return envelope(STUDENTS_DATA)


@pytest.fixture
def leaderboard_body() -> bytes:
    return envelope(LEADERBOARD_DATA)
