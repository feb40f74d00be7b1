"""
Client configuration: endpoint table, transport profiles, retry constants.

Constants live in the top-level ``learnify_config`` package; this module re-exports
them and turns a named transport profile into a typed ``TransportConfig``
so that the executor never reads raw dicts or environment variables itself.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from learnify_config.api_config import (
    BASE_URL_ENV,
    DEFAULT_BASE_URL,
    ENDPOINTS,
    LEADERBOARD_DEFAULT_LIMIT,
    LEADERBOARD_DEFAULT_OFFSET,
)
from learnify_config.transport_config import (
    BACKOFF_UNIT_SECONDS,
    DEFAULT_PROFILE,
    MAX_ATTEMPTS,
    PROFILE_ENV,
    READ_CHUNK_BYTES,
    TRANSPORT_PROFILES,
)

__all__ = [
    "BACKOFF_UNIT_SECONDS",
    "DEFAULT_BASE_URL",
    "ENDPOINTS",
    "LEADERBOARD_DEFAULT_LIMIT",
    "LEADERBOARD_DEFAULT_OFFSET",
    "MAX_ATTEMPTS",
    "READ_CHUNK_BYTES",
    "TransportConfig",
    "load_transport_config",
    "resolve_base_url",
]

CACHE_POLICIES: frozenset[str] = frozenset({"reload_ignoring_cache", "use_protocol_cache"})


@dataclass(frozen=True)
class TransportConfig:
    """Connection settings applied to every session the executor builds."""

    request_timeout_seconds: float = 30.0
    resource_timeout_seconds: float = 60.0
    cache_policy: str = "reload_ignoring_cache"
    max_connections_per_host: int = 1

    def cache_headers(self) -> dict[str, str]:
        """Headers that enforce the cache policy on the wire."""
        if self.cache_policy == "reload_ignoring_cache":
            return {"Cache-Control": "no-cache", "Pragma": "no-cache"}
        return {}


def load_transport_config(profile: str | None = None) -> TransportConfig:
    """
    Build a ``TransportConfig`` from a named profile.

    Args:
        profile: Key of ``TRANSPORT_PROFILES``.  When ``None``, the
                 ``LEARNIFY_ENV`` environment variable is consulted, then
                 ``DEFAULT_PROFILE``.

    Returns:
        Frozen ``TransportConfig``.

    Raises:
        ValueError: Unknown profile name or an invalid value in the profile.
    """
    name = profile or os.getenv(PROFILE_ENV) or DEFAULT_PROFILE
    if name not in TRANSPORT_PROFILES:
        raise ValueError(
            f"Unknown transport profile '{name}'. "
            f"Expected one of: {sorted(TRANSPORT_PROFILES)}"
        )

    settings = TRANSPORT_PROFILES[name]
    config = TransportConfig(
        request_timeout_seconds=float(settings["request_timeout_seconds"]),
        resource_timeout_seconds=float(settings["resource_timeout_seconds"]),
        cache_policy=settings["cache_policy"],
        max_connections_per_host=int(settings["max_connections_per_host"]),
    )

    if config.cache_policy not in CACHE_POLICIES:
        raise ValueError(f"Unknown cache_policy '{config.cache_policy}' in profile '{name}'.")
    if config.request_timeout_seconds <= 0 or config.resource_timeout_seconds <= 0:
        raise ValueError(f"Timeouts must be positive in profile '{name}'.")
    if config.max_connections_per_host < 1:
        raise ValueError(f"max_connections_per_host must be >= 1 in profile '{name}'.")

    return config


def resolve_base_url() -> str:
    """Return ``LEARNIFY_BASE_URL`` if set, else the production endpoint."""
    return os.getenv(BASE_URL_ENV) or DEFAULT_BASE_URL
