"""
Domain records returned by the client.

Plain frozen value records.  Instances are produced only by the decoder and
mirror the ``data`` payload of each response envelope field for field.
"""

from __future__ import annotations

from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Attendance
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Student:
    id: str
    student_id: str
    full_name: str
    created_at: str


@dataclass(frozen=True)
class StudentsPage:
    students: tuple[Student, ...]
    total: int


@dataclass(frozen=True)
class StudentCheckIn:
    id: int
    created_at: str


@dataclass(frozen=True)
class CheckInReceipt:
    check_in_id: int
    student_id: str
    student_name: str
    checked_in_at: str
    is_new_student: bool
    message: str | None = None


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ReviewReceipt:
    review_id: int
    student_id: str
    student_name: str
    mobile_app_name: str
    review_text: str
    submitted_at: str
    message: str | None = None


@dataclass(frozen=True)
class StudentReview:
    id: int
    student_id: str
    mobile_app_name: str
    review_text: str
    created_at: str
    # Joined from the reviewer's student row when the service includes it
    student_name: str | None = None


@dataclass(frozen=True)
class ReviewWindow:
    limit: int
    offset: int
    app_name_filter: str | None = None


@dataclass(frozen=True)
class ReviewsPage:
    reviews: tuple[StudentReview, ...]
    total_reviews: int
    showing: ReviewWindow


# ---------------------------------------------------------------------------
# Leaderboard
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LeaderboardEntry:
    student_id: str
    full_name: str
    total_marks: int
    total_check_ins: int
    rank: int
    latest_check_in: str | None = None


@dataclass(frozen=True)
class LeaderboardWindow:
    limit: int
    offset: int
    total_pages: int | None = None
    current_page: int | None = None


@dataclass(frozen=True)
class LeaderboardPage:
    entries: tuple[LeaderboardEntry, ...]
    total_students: int
    showing: LeaderboardWindow
