"""
Tests for src/learnify_client/tables.py DataFrame views.
"""

from __future__ import annotations

import datetime as dt

import pandas as pd

from src.learnify_client.decoder import decode_response
from src.learnify_client.models import StudentCheckIn, StudentsPage
from src.learnify_client.tables import (
    check_in_counts_by_day,
    check_ins_frame,
    leaderboard_frame,
    reviews_frame,
    students_frame,
)

from .conftest import CHECK_INS_DATA, REVIEWS_DATA, envelope


def _check_ins():
    return decode_response(envelope(CHECK_INS_DATA), "check_ins")


class TestFrames:

    def test_students_frame_columns(self, students_body):
        df = students_frame(decode_response(students_body, "students"))
        assert list(df.columns) == ["id", "student_id", "full_name", "created_at"]
        assert len(df) == 2

    def test_empty_page_keeps_columns(self):
        df = students_frame(StudentsPage(students=(), total=0))
        assert df.empty
        assert list(df.columns) == ["id", "student_id", "full_name", "created_at"]

    def test_check_ins_frame_parses_timestamps(self):
        df = check_ins_frame(_check_ins())
        assert pd.api.types.is_datetime64_any_dtype(df["created_at"])

    def test_unparseable_timestamp_becomes_nat(self):
        df = check_ins_frame([StudentCheckIn(id=1, created_at="yesterday-ish")])
        assert df["created_at"].isna().all()

    def test_reviews_frame_includes_joined_name(self):
        df = reviews_frame(decode_response(envelope(REVIEWS_DATA), "reviews"))
        assert df["student_name"].tolist()[0] == "Ada Lovelace"

    def test_leaderboard_frame_sorted_by_rank(self, leaderboard_body):
        df = leaderboard_frame(decode_response(leaderboard_body, "leaderboard"))
        assert df["rank"].tolist() == [1, 2]
        assert df.loc[0, "full_name"] == "Ada Lovelace"


class TestCheckInCountsByDay:

    def test_counts_per_day(self):
        counts = check_in_counts_by_day(_check_ins())
        assert counts["date"].tolist() == [dt.date(2025, 7, 1), dt.date(2025, 7, 2)]
        assert counts["check_ins"].tolist() == [2, 1]

    def test_no_check_ins(self):
        counts = check_in_counts_by_day([])
        assert counts.empty
        assert list(counts.columns) == ["date", "check_ins"]
