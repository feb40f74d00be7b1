"""
Response decoding: envelope validation and payload-to-record conversion.

No I/O occurs here; all functions are pure transformations of bytes/dicts to
support easy unit testing.  Every response arrives wrapped as::

    {"success": true, "data": {...}, "message": "optional"}

The decoder is strict: a missing field, a wrong type, or ``success: false``
raises ``DecodeError``.  Nothing is defaulted or coerced, except that
optional fields may be absent or ``null``.
"""

from __future__ import annotations

import json
from typing import Any, Callable

from .errors import DecodeError
from .models import (
    CheckInReceipt,
    LeaderboardEntry,
    LeaderboardPage,
    LeaderboardWindow,
    ReviewReceipt,
    ReviewsPage,
    ReviewWindow,
    Student,
    StudentCheckIn,
    StudentReview,
    StudentsPage,
)


# ---------------------------------------------------------------------------
# Field access helpers
# ---------------------------------------------------------------------------

def _type_name(expected: type | tuple[type, ...]) -> str:
    if isinstance(expected, tuple):
        return " or ".join(t.__name__ for t in expected)
    return expected.__name__


def _matches(value: Any, expected: type | tuple[type, ...]) -> bool:
    # bool is an int subclass; JSON true/false must never pass as a number
    if isinstance(value, bool):
        return expected is bool or (isinstance(expected, tuple) and bool in expected)
    return isinstance(value, expected)


def require(obj: dict, key: str, expected: type | tuple[type, ...], where: str) -> Any:
    """Return ``obj[key]``, raising ``DecodeError`` if absent or mistyped."""
    if key not in obj:
        raise DecodeError(f"{where}: missing required field '{key}'")
    value = obj[key]
    if not _matches(value, expected):
        raise DecodeError(
            f"{where}: field '{key}' should be {_type_name(expected)}, "
            f"got {type(value).__name__}"
        )
    return value


def optional(obj: dict, key: str, expected: type | tuple[type, ...], where: str) -> Any:
    """Return ``obj[key]`` or ``None``; a present non-null value must match ``expected``."""
    value = obj.get(key)
    if value is None:
        return None
    if not _matches(value, expected):
        raise DecodeError(
            f"{where}: field '{key}' should be {_type_name(expected)} or null, "
            f"got {type(value).__name__}"
        )
    return value


def require_object(obj: dict, key: str, where: str) -> dict:
    return require(obj, key, dict, where)


def require_list(obj: dict, key: str, where: str) -> list:
    return require(obj, key, list, where)


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------

def parse_json(content: bytes | str) -> Any:
    """
    Parse a UTF-8 JSON body.

    Raises:
        DecodeError: The body is empty, not UTF-8, malformed, or nested
                     deeper than the parser can follow.
    """
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"Response body is not UTF-8: {exc}", cause=exc) from exc

    if not content.strip():
        raise DecodeError("Response body is empty")

    try:
        return json.loads(content)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"Response body is not valid JSON: {exc}", cause=exc) from exc
    except RecursionError as exc:
        raise DecodeError("Response body is nested too deeply to decode", cause=exc) from exc


def unwrap_envelope(document: Any) -> tuple[dict, str | None]:
    """
    Validate the ``{success, data, message?}`` envelope.

    Returns:
        Tuple of ``(data, message)``.

    Raises:
        DecodeError: Envelope shape is wrong or ``success`` is not ``true``.
    """
    if not isinstance(document, dict):
        raise DecodeError(f"envelope: expected a JSON object, got {type(document).__name__}")

    success = require(document, "success", bool, "envelope")
    message = optional(document, "message", str, "envelope")
    if not success:
        detail = f": {message}" if message else ""
        raise DecodeError(f"envelope: service reported success=false{detail}")

    data = require_object(document, "data", "envelope")
    return data, message


# ---------------------------------------------------------------------------
# Record builders (one per payload shape)
# ---------------------------------------------------------------------------

def decode_student(obj: Any, where: str = "student") -> Student:
    if not isinstance(obj, dict):
        raise DecodeError(f"{where}: expected an object")
    return Student(
        id=require(obj, "id", str, where),
        student_id=require(obj, "student_id", str, where),
        full_name=require(obj, "full_name", str, where),
        created_at=require(obj, "created_at", str, where),
    )


def decode_student_check_in(obj: Any, where: str = "check_in") -> StudentCheckIn:
    if not isinstance(obj, dict):
        raise DecodeError(f"{where}: expected an object")
    return StudentCheckIn(
        id=require(obj, "id", int, where),
        created_at=require(obj, "created_at", str, where),
    )


def decode_student_review(obj: Any, where: str = "review") -> StudentReview:
    if not isinstance(obj, dict):
        raise DecodeError(f"{where}: expected an object")

    student_name = None
    reviewer = optional(obj, "students", dict, where)
    if reviewer is not None:
        student_name = require(reviewer, "full_name", str, f"{where}.students")

    return StudentReview(
        id=require(obj, "id", int, where),
        student_id=require(obj, "student_id", str, where),
        mobile_app_name=require(obj, "mobile_app_name", str, where),
        review_text=require(obj, "review_text", str, where),
        created_at=require(obj, "created_at", str, where),
        student_name=student_name,
    )


def decode_leaderboard_entry(obj: Any, where: str = "leaderboard") -> LeaderboardEntry:
    if not isinstance(obj, dict):
        raise DecodeError(f"{where}: expected an object")
    return LeaderboardEntry(
        student_id=require(obj, "student_id", str, where),
        full_name=require(obj, "full_name", str, where),
        total_marks=require(obj, "total_marks", int, where),
        total_check_ins=require(obj, "total_check_ins", int, where),
        rank=require(obj, "rank", int, where),
        latest_check_in=optional(obj, "latest_check_in", str, where),
    )


def _decode_items(items: list, builder: Callable[[Any, str], Any], where: str) -> tuple:
    return tuple(builder(item, f"{where}[{i}]") for i, item in enumerate(items))


# ---------------------------------------------------------------------------
# Payload decoders, keyed by schema tag
# ---------------------------------------------------------------------------

def decode_check_in_payload(data: dict, message: str | None) -> CheckInReceipt:
    where = "data"
    return CheckInReceipt(
        check_in_id=require(data, "check_in_id", int, where),
        student_id=require(data, "student_id", str, where),
        student_name=require(data, "student_name", str, where),
        checked_in_at=require(data, "checked_in_at", str, where),
        is_new_student=require(data, "is_new_student", bool, where),
        message=message,
    )


def decode_students_payload(data: dict, message: str | None) -> StudentsPage:  # noqa: ARG001
    return StudentsPage(
        students=_decode_items(require_list(data, "students", "data"), decode_student, "data.students"),
        total=require(data, "total", int, "data"),
    )


def decode_check_ins_payload(data: dict, message: str | None) -> tuple[StudentCheckIn, ...]:  # noqa: ARG001
    return _decode_items(
        require_list(data, "check_ins", "data"), decode_student_check_in, "data.check_ins"
    )


def decode_review_payload(data: dict, message: str | None) -> ReviewReceipt:
    where = "data"
    return ReviewReceipt(
        review_id=require(data, "review_id", int, where),
        student_id=require(data, "student_id", str, where),
        student_name=require(data, "student_name", str, where),
        mobile_app_name=require(data, "mobile_app_name", str, where),
        review_text=require(data, "review_text", str, where),
        submitted_at=require(data, "submitted_at", str, where),
        message=message,
    )


def decode_reviews_payload(data: dict, message: str | None) -> ReviewsPage:  # noqa: ARG001
    showing = require_object(data, "showing", "data")
    return ReviewsPage(
        reviews=_decode_items(require_list(data, "reviews", "data"), decode_student_review, "data.reviews"),
        total_reviews=require(data, "total_reviews", int, "data"),
        showing=ReviewWindow(
            limit=require(showing, "limit", int, "data.showing"),
            offset=require(showing, "offset", int, "data.showing"),
            app_name_filter=optional(showing, "app_name_filter", str, "data.showing"),
        ),
    )


def decode_leaderboard_payload(data: dict, message: str | None) -> LeaderboardPage:  # noqa: ARG001
    showing = require_object(data, "showing", "data")
    return LeaderboardPage(
        entries=_decode_items(
            require_list(data, "leaderboard", "data"), decode_leaderboard_entry, "data.leaderboard"
        ),
        total_students=require(data, "total_students", int, "data"),
        showing=LeaderboardWindow(
            limit=require(showing, "limit", int, "data.showing"),
            offset=require(showing, "offset", int, "data.showing"),
            total_pages=optional(showing, "total_pages", int, "data.showing"),
            current_page=optional(showing, "current_page", int, "data.showing"),
        ),
    )


PAYLOAD_DECODERS: dict[str, Callable[[dict, str | None], Any]] = {
    "check_in": decode_check_in_payload,
    "students": decode_students_payload,
    "check_ins": decode_check_ins_payload,
    "review": decode_review_payload,
    "reviews": decode_reviews_payload,
    "leaderboard": decode_leaderboard_payload,
}


def decode_response(content: bytes | str, schema: str) -> Any:
    """
    Decode a 2xx response body into the record for ``schema``.

    Args:
        content: Raw response body.
        schema: Schema tag from the call descriptor.

    Returns:
        The decoded record (type depends on ``schema``).

    Raises:
        DecodeError: Malformed JSON, bad envelope, or payload shape mismatch.
        KeyError: ``schema`` has no registered decoder (programming error).
    """
    decoder = PAYLOAD_DECODERS[schema]
    data, message = unwrap_envelope(parse_json(content))
    return decoder(data, message)
