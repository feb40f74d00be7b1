"""
Request construction: endpoint lookup, URL assembly, headers, JSON body.

No I/O occurs here.  Everything that can make a request unsendable (unknown
operation, bad base URL, unsafe path parameter, unserialisable body) is
caught in :func:`build_call` and raised as ``InvalidRequestError`` so the
executor never starts an attempt for it.
"""

from __future__ import annotations

import json
import re
import string
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping
from urllib.parse import quote, urlencode, urlsplit

from .config import ENDPOINTS, TransportConfig
from .errors import InvalidRequestError

JSON_CONTENT_TYPE = "application/json"

_PLACEHOLDER = re.compile(r"\{(\w+)\}")
# Whitespace, control characters, and characters that would change the URL structure
_UNSAFE_SEGMENT_CHARS = frozenset("/\\?#%") | frozenset(string.whitespace) | {
    chr(c) for c in range(0x20)
} | {"\x7f"}


@dataclass(frozen=True)
class CallDescriptor:
    """A fully specified outbound request, built once per client call."""

    operation: str
    method: str
    url: str
    path: str
    query: tuple[tuple[str, str], ...]
    headers: Mapping[str, str]
    body: bytes | None
    schema: str


# ---------------------------------------------------------------------------
# Component helpers
# ---------------------------------------------------------------------------

def validate_base_url(base_url: str) -> str:
    """
    Check that ``base_url`` is an absolute http(s) URL with a host.

    Returns:
        The base URL without a trailing slash.

    Raises:
        InvalidRequestError: The URL cannot anchor a request.
    """
    if not isinstance(base_url, str) or not base_url.strip():
        raise InvalidRequestError("Base URL is empty.")

    try:
        parts = urlsplit(base_url.strip())
        port = parts.port
    except ValueError as exc:
        raise InvalidRequestError(f"Base URL '{base_url}' is malformed: {exc}", cause=exc) from exc

    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise InvalidRequestError(f"Base URL '{base_url}' is not an absolute http(s) URL.")
    if parts.query or parts.fragment:
        raise InvalidRequestError(f"Base URL '{base_url}' must not carry a query or fragment.")
    if port == 0:
        raise InvalidRequestError(f"Base URL '{base_url}' has an unusable port.")

    return base_url.strip().rstrip("/")


def encode_path_segment(name: str, value: Any) -> str:
    """
    Percent-encode one path parameter after rejecting unsafe values.

    Raises:
        InvalidRequestError: Empty value, traversal segment, or a character
                             that would alter the URL structure.
    """
    if value is None:
        raise InvalidRequestError(f"Path parameter '{name}' is missing.")

    text = str(value)
    if not text:
        raise InvalidRequestError(f"Path parameter '{name}' is empty.")
    if text in (".", ".."):
        raise InvalidRequestError(f"Path parameter '{name}' is a traversal segment.")

    bad = sorted({ch for ch in text if ch in _UNSAFE_SEGMENT_CHARS})
    if bad:
        raise InvalidRequestError(
            f"Path parameter '{name}' contains characters not allowed in a URL "
            f"segment: {bad!r}"
        )

    return quote(text, safe="")


def render_path(template: str, path_params: Mapping[str, Any]) -> str:
    """Fill ``{name}`` placeholders; every placeholder must be supplied."""

    def _substitute(match: re.Match) -> str:
        name = match.group(1)
        if name not in path_params:
            raise InvalidRequestError(f"Path parameter '{name}' is missing.")
        return encode_path_segment(name, path_params[name])

    return _PLACEHOLDER.sub(_substitute, template)


def normalize_query(query: Mapping[str, Any] | None) -> tuple[tuple[str, str], ...]:
    """
    Turn a query mapping into ordered ``(key, value)`` pairs.

    ``None`` values are dropped and booleans are sent as ``true``/``false``.
    An empty or ``None`` mapping yields no pairs (and so no query string).
    """
    if not query:
        return ()

    pairs: list[tuple[str, str]] = []
    for key, value in query.items():
        if value is None:
            continue
        if not isinstance(key, str) or not key:
            raise InvalidRequestError(f"Query parameter name {key!r} is not a non-empty string.")
        if isinstance(value, bool):
            value = "true" if value else "false"
        pairs.append((key, str(value)))
    return tuple(pairs)


def serialize_body(body: Mapping[str, Any]) -> bytes:
    """
    Serialise a body to canonical UTF-8 JSON (sorted keys, compact).

    Raises:
        InvalidRequestError: The body holds values JSON cannot represent.
    """
    try:
        text = json.dumps(body, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise InvalidRequestError(f"Request body is not JSON-serialisable: {exc}", cause=exc) from exc
    return text.encode("utf-8")


def build_headers(has_body: bool, transport: TransportConfig | None = None) -> dict[str, str]:
    """Accept JSON always; declare a JSON content type only for bodies."""
    headers = {"Accept": JSON_CONTENT_TYPE}
    if has_body:
        headers["Content-Type"] = f"{JSON_CONTENT_TYPE}; charset=utf-8"
    if transport is not None:
        headers.update(transport.cache_headers())
    return headers


# ---------------------------------------------------------------------------
# Descriptor construction
# ---------------------------------------------------------------------------

def build_call(
    operation: str,
    base_url: str,
    path_params: Mapping[str, Any] | None = None,
    query: Mapping[str, Any] | None = None,
    body: Mapping[str, Any] | None = None,
    transport: TransportConfig | None = None,
) -> CallDescriptor:
    """
    Build the ``CallDescriptor`` for one invocation of ``operation``.

    Args:
        operation: Key of ``ENDPOINTS`` (e.g. ``'check_in'``).
        base_url: Absolute service URL.
        path_params: Values for the ``{name}`` placeholders of the path template.
        query: Query parameters; order is preserved, ``None`` values dropped.
        body: JSON object payload, or ``None`` for body-less requests.
        transport: Transport config whose cache policy adds headers.

    Returns:
        Frozen ``CallDescriptor``.

    Raises:
        InvalidRequestError: The request cannot be formed.
    """
    endpoint = ENDPOINTS.get(operation)
    if endpoint is None:
        raise InvalidRequestError(f"Unknown operation '{operation}'.")

    root = validate_base_url(base_url)
    path = render_path(endpoint["path"], path_params or {})
    pairs = normalize_query(query)

    url = root + path
    if pairs:
        url = f"{url}?{urlencode(pairs)}"

    payload = serialize_body(body) if body is not None else None

    return CallDescriptor(
        operation=operation,
        method=endpoint["method"],
        url=url,
        path=path,
        query=pairs,
        headers=MappingProxyType(build_headers(payload is not None, transport)),
        body=payload,
        schema=endpoint["schema"],
    )
