"""
net_guardrails.py - Shared HTTP limits for the snapshot fetch and webhook calls.

The snapshot fetch follows a page URL assembled from request input, so the
target must be a public http(s) host and the body is read under a size cap.
"""

from __future__ import annotations

import ipaddress
import socket
from typing import Any, Mapping, Optional
from urllib.parse import urlparse

import config

DEFAULT_USER_AGENT = "SendForReview/1.0"
DEFAULT_HEADERS = {"User-Agent": DEFAULT_USER_AGENT}
JSON_HEADERS = {**DEFAULT_HEADERS, "Content-Type": "application/json"}
DEFAULT_TIMEOUT = config.HTTP_TIMEOUT
MAX_HTML_BYTES = config.MAX_HTML_BYTES
MAX_REDIRECTS = 10
CHUNK_SIZE = 16384

SENSITIVE_HEADERS = {"authorization", "cookie", "set-cookie", "x-api-key"}


def redact_headers(headers: Mapping[str, Any]) -> dict[str, str]:
    """Header copy safe for log lines (Basic-Auth and cookies masked)."""
    return {
        str(k): "[REDACTED]" if str(k).lower() in SENSITIVE_HEADERS else str(v)
        for k, v in (headers or {}).items()
    }


def _is_internal(address: str) -> bool:
    ip = ipaddress.ip_address(address.split("%", 1)[0])
    return ip.is_private or ip.is_loopback or ip.is_link_local


def validate_url(url: str) -> None:
    """Raise ValueError unless `url` is http(s) and every resolved address is public."""
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise ValueError(f"Unsafe scheme: {parsed.scheme}")
    host = parsed.hostname
    if not host:
        raise ValueError("Missing hostname")

    try:
        addresses = {info[4][0] for info in socket.getaddrinfo(host, None)}
    except socket.gaierror:
        raise ValueError(f"DNS resolution failed for {host}")

    internal = sorted(a for a in addresses if _is_internal(a))
    if internal:
        raise ValueError(f"Target resolves to private IP: {internal[0]}")


def _declared_length(resp: Any) -> Optional[int]:
    try:
        return int(resp.headers.get("Content-Length") or "")
    except ValueError:
        return None


def _decode(data: bytes, encoding: Optional[str]) -> str:
    try:
        return data.decode(encoding or "utf-8", errors="replace")
    except LookupError:
        return data.decode("utf-8", errors="replace")


def read_limited_text(resp: Any, max_bytes: Optional[int]) -> tuple[str, bool]:
    """
    Body of a streamed response as text. Returns ("", True) as soon as the
    declared or received size passes `max_bytes`.
    """
    declared = _declared_length(resp)
    if max_bytes is not None and declared is not None and declared > max_bytes:
        return "", True

    body = bytearray()
    for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
        body.extend(chunk or b"")
        if max_bytes is not None and len(body) > max_bytes:
            return "", True
    return _decode(bytes(body), resp.encoding), False
