"""
src/learnify_client: data-access layer for the Learnify attendance service.

Module layout
-------------
config.py   : endpoint table, transport profiles, retry constants
request.py  : call descriptor construction (URL, query, headers, JSON body)
executor.py : transport session, outcome classification, linear backoff, retry loop
decoder.py  : envelope validation and payload-to-record decoding
models.py   : frozen domain records
errors.py   : classified error taxonomy
client.py   : LearnifyClient, one method per remote operation
tables.py   : pandas views of decoded pages

Public interface
----------------
Build a client and call the service:
    client = LearnifyClient()
    client.check_in(student_id, full_name)
    client.list_students()
    client.list_check_ins(student_id)
    client.submit_review(student_id, mobile_app_name, review_text)
    client.list_reviews(filters)
    client.list_student_reviews(student_id, filters)
    client.leaderboard(limit, offset)

Every failure raises a LearnifyError subclass; switch on ``error.category``.
"""

from .client import LearnifyClient
from .config import TransportConfig, load_transport_config
from .errors import (
    CallCancelledError,
    DecodeError,
    ErrorCategory,
    InvalidRequestError,
    LearnifyError,
    NetworkExhaustedError,
    ServerStatusError,
    TransportError,
)
from .executor import AttemptEvent, ResilientExecutor, print_attempt
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

__all__ = [
    # Client
    "LearnifyClient",
    "ResilientExecutor",
    "AttemptEvent",
    "print_attempt",
    "TransportConfig",
    "load_transport_config",
    # Errors
    "ErrorCategory",
    "LearnifyError",
    "InvalidRequestError",
    "NetworkExhaustedError",
    "TransportError",
    "ServerStatusError",
    "DecodeError",
    "CallCancelledError",
    # Records
    "Student",
    "StudentsPage",
    "StudentCheckIn",
    "CheckInReceipt",
    "ReviewReceipt",
    "StudentReview",
    "ReviewWindow",
    "ReviewsPage",
    "LeaderboardEntry",
    "LeaderboardWindow",
    "LeaderboardPage",
]
