"""
Domain client: one method per Learnify remote operation.

Each method is the same three steps: build the call descriptor, run it
through the resilient executor, decode the body.  There is no business
logic here and no shared mutable state, so one ``LearnifyClient`` can serve
concurrent callers from several threads.

Typical use::

    client = LearnifyClient()
    receipt = client.check_in("STUDENT2025", "Ada Lovelace")
    board = client.leaderboard(limit=10)
"""

from __future__ import annotations

import threading
from typing import Any, Mapping

from .config import (
    LEADERBOARD_DEFAULT_LIMIT,
    LEADERBOARD_DEFAULT_OFFSET,
    TransportConfig,
    load_transport_config,
    resolve_base_url,
)
from .decoder import decode_response
from .errors import InvalidRequestError
from .executor import AttemptObserver, ResilientExecutor, print_attempt
from .models import (
    CheckInReceipt,
    LeaderboardPage,
    ReviewReceipt,
    ReviewsPage,
    StudentCheckIn,
    StudentsPage,
)
from .request import build_call


def _require_text(name: str, value: Any) -> str:
    """Non-empty check for body fields; path parameters are checked by the builder."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequestError(f"'{name}' must be a non-empty string.")
    return value


class LearnifyClient:
    """
    Typed access to the Learnify attendance, review and leaderboard API.

    Args:
        base_url: Service root.  Defaults to ``LEARNIFY_BASE_URL`` or the
                  production endpoint.
        transport: Transport settings.  Defaults to the profile named by
                   ``LEARNIFY_ENV`` (``conservative`` if unset).
        executor: Pre-built executor; overrides ``transport`` and ``observer``.
        observer: Per-attempt callback passed to a newly built executor.
    """

    def __init__(
        self,
        base_url: str | None = None,
        transport: TransportConfig | None = None,
        executor: ResilientExecutor | None = None,
        observer: AttemptObserver | None = print_attempt,
    ) -> None:
        self.base_url = base_url if base_url is not None else resolve_base_url()
        if executor is None:
            executor = ResilientExecutor(
                transport=transport or load_transport_config(),
                observer=observer,
            )
        self.executor = executor

    def _call(
        self,
        operation: str,
        *,
        path_params: Mapping[str, Any] | None = None,
        query: Mapping[str, Any] | None = None,
        body: Mapping[str, Any] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> Any:
        call = build_call(
            operation,
            self.base_url,
            path_params=path_params,
            query=query,
            body=body,
            transport=self.executor.transport,
        )
        content = self.executor.execute(call, cancel_event=cancel_event)
        return decode_response(content, call.schema)

    # -- attendance ----------------------------------------------------------

    def check_in(
        self,
        student_id: str,
        full_name: str,
        cancel_event: threading.Event | None = None,
    ) -> CheckInReceipt:
        """Record a check-in; the service creates the student on first sight."""
        body = {
            "student_id": _require_text("student_id", student_id),
            "full_name": _require_text("full_name", full_name),
        }
        return self._call("check_in", body=body, cancel_event=cancel_event)

    def list_students(self, cancel_event: threading.Event | None = None) -> StudentsPage:
        return self._call("list_students", cancel_event=cancel_event)

    def list_check_ins(
        self,
        student_id: str,
        cancel_event: threading.Event | None = None,
    ) -> tuple[StudentCheckIn, ...]:
        return self._call(
            "list_check_ins",
            path_params={"student_id": student_id},
            cancel_event=cancel_event,
        )

    # -- reviews -------------------------------------------------------------

    def submit_review(
        self,
        student_id: str,
        mobile_app_name: str,
        review_text: str,
        cancel_event: threading.Event | None = None,
    ) -> ReviewReceipt:
        body = {
            "student_id": _require_text("student_id", student_id),
            "mobile_app_name": _require_text("mobile_app_name", mobile_app_name),
            "review_text": _require_text("review_text", review_text),
        }
        return self._call("submit_review", body=body, cancel_event=cancel_event)

    def list_reviews(
        self,
        filters: Mapping[str, Any] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> ReviewsPage:
        """
        Fetch reviews across all students.

        Args:
            filters: Query parameters passed through unchanged, e.g.
                     ``{'limit': 20, 'offset': 0, 'app_name': 'Notes'}``.
                     The applied window comes back in ``ReviewsPage.showing``.
        """
        return self._call("list_reviews", query=filters, cancel_event=cancel_event)

    def list_student_reviews(
        self,
        student_id: str,
        filters: Mapping[str, Any] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> ReviewsPage:
        return self._call(
            "list_student_reviews",
            path_params={"student_id": student_id},
            query=filters,
            cancel_event=cancel_event,
        )

    # -- leaderboard ---------------------------------------------------------

    def leaderboard(
        self,
        limit: int = LEADERBOARD_DEFAULT_LIMIT,
        offset: int = LEADERBOARD_DEFAULT_OFFSET,
        cancel_event: threading.Event | None = None,
    ) -> LeaderboardPage:
        return self._call(
            "leaderboard",
            query={"limit": limit, "offset": offset},
            cancel_event=cancel_event,
        )
