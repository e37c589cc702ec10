"""
page_context.py - Deployment context (org/site/branch/env) from ambient URLs.

Usage:
    ctx = resolve_context(location_url, referrer=document_referrer)

No I/O. Malformed or missing URLs never raise; they fall back to defaults.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import parse_qs, urlparse

import config

DA_EDIT_PATTERN = re.compile(r"da\.live/edit#/([^/]+)/([^/]+)/?(.*)$")


def host_pattern(platform: str = config.PLATFORM_DOMAIN) -> re.Pattern:
    # branch--site--org.<platform>.(page|live)
    return re.compile(rf"^([^-]+)--([^-]+)--([^.]+)\.{re.escape(platform)}\.(page|live)$")


def to_iso(now: datetime) -> str:
    """Millisecond UTC timestamp, e.g. 2024-05-01T10:00:00.000Z."""
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


@dataclass(frozen=True)
class PageContext:
    ref: str
    site: str
    org: str
    host: str
    env: str
    path: str
    name: str
    iso_now: str

    @property
    def clean_path(self) -> str:
        return self.path.lstrip("/")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _safe_urlparse(url: Optional[str]):
    if not url or not isinstance(url, str):
        return None
    try:
        parsed = urlparse(url.strip())
        # .port raises on a malformed netloc
        parsed.port
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc:
        return None
    return parsed


def _first_param(params: dict[str, list[str]], key: str) -> str:
    values = params.get(key) or []
    return values[0] if values else ""


def _env_from_suffix(host: str, default_env: str) -> str:
    host = host.lower()
    for suffix in ("page", "live"):
        if host.endswith(f".{suffix}"):
            return suffix
    return default_env


def page_name(path: str) -> str:
    """Last non-empty path segment without its extension; "index" for the root."""
    segments = [s for s in (path or "").lstrip("/").split("/") if s]
    last = segments[-1] if segments else "index"
    return re.sub(r"\.[^.]+$", "", last) or "index"


def resolve_context(
    location_url: str,
    referrer: Optional[str] = None,
    now: Optional[datetime] = None,
    default_env: str = config.DEFAULT_PAGE_ENV,
    platform: str = config.PLATFORM_DOMAIN,
) -> PageContext:
    location = _safe_urlparse(location_url)
    ref_url = _safe_urlparse(referrer)
    params = parse_qs(location.query) if location else {}

    host = (
        _first_param(params, "host")
        or (ref_url.netloc if ref_url else "")
        or (location.netloc if location else "")
    )
    match = host_pattern(platform).match(host)

    ref = _first_param(params, "ref") or (match.group(1) if match else "") or config.DEFAULT_REF
    site = _first_param(params, "repo") or (match.group(2) if match else "")
    org = _first_param(params, "owner") or (match.group(3) if match else "")
    env = match.group(4) if match else _env_from_suffix(host, default_env)

    if ref_url is not None:
        raw_path = ref_url.path
    elif location is not None:
        raw_path = location.path
    else:
        raw_path = ""
    clean_path = (raw_path or "").lstrip("/")

    return PageContext(
        ref=ref,
        site=site,
        org=org,
        host=host,
        env=env,
        path=f"/{clean_path}",
        name=page_name(clean_path),
        iso_now=to_iso(now or datetime.now(timezone.utc)),
    )


def parse_da_url(url: str) -> Optional[dict[str, str]]:
    """https://da.live/edit#/owner/repo/path -> {owner, repo, path, source}."""
    m = DA_EDIT_PATTERN.search(url or "")
    if not m:
        return None
    return {
        "owner": m.group(1),
        "repo": m.group(2),
        "path": m.group(3) or "index",
        "source": "da.live",
    }


def parse_aem_url(url: str, platform: str = config.PLATFORM_DOMAIN) -> Optional[dict[str, str]]:
    parsed = _safe_urlparse(url)
    if parsed is None:
        return None
    m = host_pattern(platform).match(parsed.netloc)
    if not m:
        return None
    return {
        "ref": m.group(1),
        "repo": m.group(2),
        "owner": m.group(3),
        "path": parsed.path.lstrip("/") or "index",
        "env": m.group(4),
        "source": "aem",
    }
