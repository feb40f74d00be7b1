"""
Per-environment transport settings (timeouts, cache policy, connection limits).

This is the AUTHORITATIVE source for transport settings.
src/learnify_client/config.py imports from here; do not maintain parallel copies.

The "conservative" profile is the one every call used in practice: no local
cache, a single connection per host, 30 s per request and 60 s for each
attempt's whole transfer (connect, headers and body). "default" keeps the
timeouts but lifts the connection cap and lets intermediaries serve cached
responses.

ENVIRONMENT VARIABLES (optional):
    LEARNIFY_ENV  : profile name from TRANSPORT_PROFILES (default: conservative)
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Transport profiles
# ---------------------------------------------------------------------------
#
# Fields:
#   request_timeout_seconds  : per-request timeout (connect + read)
#   resource_timeout_seconds : wall-clock limit on one attempt's whole transfer;
#                              each retry starts a fresh limit
#   cache_policy             : 'reload_ignoring_cache' → Cache-Control: no-cache
#                               'use_protocol_cache'    → no cache header
#   max_connections_per_host : size of the per-call connection pool

TRANSPORT_PROFILES: dict[str, dict] = {
    "conservative": {
        "request_timeout_seconds": 30.0,
        "resource_timeout_seconds": 60.0,
        "cache_policy": "reload_ignoring_cache",
        "max_connections_per_host": 1,
    },
    "default": {
        "request_timeout_seconds": 30.0,
        "resource_timeout_seconds": 60.0,
        "cache_policy": "use_protocol_cache",
        "max_connections_per_host": 6,
    },
}

DEFAULT_PROFILE: str = "conservative"
PROFILE_ENV: str = "LEARNIFY_ENV"

# ---------------------------------------------------------------------------
# Retry policy
# ---------------------------------------------------------------------------

MAX_ATTEMPTS: int = 3             # initial attempt + 2 retries
BACKOFF_UNIT_SECONDS: float = 1.0 # linear: attempt n waits n × unit

# Response bodies are streamed in chunks of this size; the resource deadline
# is checked between chunks.
READ_CHUNK_BYTES: int = 1024
