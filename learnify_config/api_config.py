"""
Remote endpoint configuration for the Learnify service.

This is the AUTHORITATIVE source for endpoint configuration.
src/learnify_client/config.py imports from here; do not maintain parallel copies.

ENVIRONMENT VARIABLES (optional):
    LEARNIFY_BASE_URL  : override the production base URL (staging, local mock)
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Base endpoint
# ---------------------------------------------------------------------------

DEFAULT_BASE_URL: str = "https://learnify-api.zeabur.app"
BASE_URL_ENV: str = "LEARNIFY_BASE_URL"

# ---------------------------------------------------------------------------
# Endpoint table: one entry per remote operation
# ---------------------------------------------------------------------------
#
# Fields:
#   method  : HTTP method
#   path    : path template relative to the base URL; {name} placeholders
#              are filled from path parameters by the request builder
#   schema  : response schema tag consumed by the decoder

ENDPOINTS: dict[str, dict[str, str]] = {
    # ── Attendance ─────────────────────────────────────────────────────────
    "check_in": {
        "method": "POST",
        "path": "/api/auto/check-in",
        "schema": "check_in",
    },
    "list_students": {
        "method": "GET",
        "path": "/api/auto/students",
        "schema": "students",
    },
    "list_check_ins": {
        "method": "GET",
        "path": "/api/auto/check-ins/{student_id}",
        "schema": "check_ins",
    },
    # ── Reviews ────────────────────────────────────────────────────────────
    "submit_review": {
        "method": "POST",
        "path": "/api/reviews",
        "schema": "review",
    },
    "list_reviews": {
        "method": "GET",
        "path": "/api/reviews",
        "schema": "reviews",
    },
    "list_student_reviews": {
        "method": "GET",
        "path": "/api/reviews/{student_id}",
        "schema": "reviews",
    },
    # ── Leaderboard ────────────────────────────────────────────────────────
    "leaderboard": {
        "method": "GET",
        "path": "/api/leaderboard",
        "schema": "leaderboard",
    },
}

# Leaderboard paging defaults used when the caller passes none
LEADERBOARD_DEFAULT_LIMIT: int = 50
LEADERBOARD_DEFAULT_OFFSET: int = 0
