"""
Tabular views of decoded records for display layers.

Converts pages returned by ``LearnifyClient`` into ``pandas`` DataFrames
with stable column orders.  Pure transformations: nothing is written to disk.
"""

from __future__ import annotations

from dataclasses import asdict, fields
from typing import Iterable

import pandas as pd

from .models import (
    LeaderboardEntry,
    LeaderboardPage,
    ReviewsPage,
    Student,
    StudentCheckIn,
    StudentReview,
    StudentsPage,
)


def _frame(records: Iterable, record_type: type) -> pd.DataFrame:
    """Build a DataFrame whose columns follow the dataclass field order, even when empty."""
    columns = [f.name for f in fields(record_type)]
    return pd.DataFrame([asdict(r) for r in records], columns=columns)


def students_frame(page: StudentsPage) -> pd.DataFrame:
    return _frame(page.students, Student)


def check_ins_frame(check_ins: Iterable[StudentCheckIn]) -> pd.DataFrame:
    """
    One row per check-in with ``created_at`` parsed to timestamps.

    Unparseable timestamps become ``NaT`` rather than raising.
    """
    df = _frame(check_ins, StudentCheckIn)
    df["created_at"] = pd.to_datetime(df["created_at"], errors="coerce", utc=True)
    return df


def check_in_counts_by_day(check_ins: Iterable[StudentCheckIn]) -> pd.DataFrame:
    """
    Count check-ins per calendar day (UTC), oldest first.

    Returns:
        DataFrame with columns ``date`` and ``check_ins``.
    """
    df = check_ins_frame(check_ins).dropna(subset=["created_at"])
    if df.empty:
        return pd.DataFrame({"date": pd.Series(dtype="object"), "check_ins": pd.Series(dtype="int64")})

    counts = (
        df.assign(date=df["created_at"].dt.date)
        .groupby("date")
        .size()
        .rename("check_ins")
        .reset_index()
        .sort_values("date", ignore_index=True)
    )
    return counts


def reviews_frame(page: ReviewsPage) -> pd.DataFrame:
    return _frame(page.reviews, StudentReview)


def leaderboard_frame(page: LeaderboardPage) -> pd.DataFrame:
    """Leaderboard rows ordered by ``rank`` as reported by the service."""
    df = _frame(page.entries, LeaderboardEntry)
    return df.sort_values("rank", kind="stable", ignore_index=True)
