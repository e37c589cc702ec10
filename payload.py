# payload.py
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup

import config
from net_guardrails import (
    DEFAULT_HEADERS,
    DEFAULT_TIMEOUT,
    MAX_HTML_BYTES,
    MAX_REDIRECTS,
    read_limited_text,
    validate_url,
)
from page_analysis import analyze_page, page_title
from page_context import PageContext, to_iso

logger = logging.getLogger(__name__)

SOURCE_EDITOR = "DA.live"
SOURCE_LIBRARY = "DA.live Library"


def _toggle_suffix(host: str) -> tuple[str, str]:
    if host.endswith(".live"):
        return f"{host[:-len('.live')]}.page", host
    if host.endswith(".page"):
        return host, f"{host[:-len('.page')]}.live"
    return host, host


def derive_urls(ctx: PageContext, platform: str = config.PLATFORM_DOMAIN) -> tuple[str, str]:
    """(previewUrl, liveUrl) for the page described by `ctx`.

    With ref/site/org known the fixed host templates are used; otherwise the
    already-known host has its page/live suffix toggled.
    """
    clean_path = ctx.clean_path
    if ctx.site and ctx.org:
        base_host = f"{ctx.ref}--{ctx.site}--{ctx.org}"
        return (
            f"https://{base_host}.{platform}.page/{clean_path}",
            f"https://{base_host}.{platform}.live/{clean_path}",
        )
    if not ctx.host:
        return f"/{clean_path}", f"/{clean_path}"
    preview_host, live_host = _toggle_suffix(ctx.host)
    return f"https://{preview_host}/{clean_path}", f"https://{live_host}/{clean_path}"


def fetch_snapshot(url: str, session: Optional[requests.Session] = None) -> Optional[BeautifulSoup]:
    """
    Fetch and parse the published page. Returns None (and logs) on any failure;
    callers fall back to the document they already have.
    """
    if not url or not url.startswith(("http://", "https://")):
        return None
    session = session or requests.Session()
    session.max_redirects = MAX_REDIRECTS
    try:
        validate_url(url)
        with session.get(url, headers=DEFAULT_HEADERS, timeout=DEFAULT_TIMEOUT, stream=True) as resp:
            if not 200 <= resp.status_code < 300:
                logger.warning(f"Snapshot fetch returned {resp.status_code} for {url}, using current document")
                return None
            text, too_large = read_limited_text(resp, MAX_HTML_BYTES)
        if too_large:
            logger.warning(f"Snapshot too large for {url}, using current document")
            return None
        return BeautifulSoup(text, "html.parser")
    except ValueError as e:
        logger.warning(f"Snapshot URL rejected ({e}), using current document")
    except requests.RequestException as e:
        logger.warning(f"Could not fetch page for analysis ({e}), using current document")
    return None


def analysis_document(
    preview_url: str,
    current_doc: Any,
    fetch: Callable[[str], Optional[BeautifulSoup]] = fetch_snapshot,
):
    try:
        snapshot = fetch(preview_url)
    except Exception as e:
        # Never block the submission on the snapshot
        logger.warning(f"Snapshot fetch failed ({e}), using current document")
        snapshot = None
    return snapshot if snapshot is not None else current_doc


def build_payload(
    ctx: PageContext,
    doc: Any,
    submitted_by: str = config.UNKNOWN,
    notes: str = "",
    full: bool = True,
    analytics: Optional[Mapping[str, Any]] = None,
    action: Optional[str] = None,
    source: str = SOURCE_EDITOR,
) -> dict[str, Any]:
    """
    One submission payload: context + analysis report + identity + URLs.

    The same (ctx, doc, submitted_by, notes, analytics) always produces the
    same payload, key order included.
    """
    preview_url, live_url = derive_urls(ctx)
    origin = urlparse(preview_url).netloc or ctx.host
    report = analyze_page(doc, origin, full=full)

    payload: dict[str, Any] = {
        "title": page_title(doc, fallback=ctx.name),
        "name": ctx.name,
        "path": ctx.path,
        "url": live_url,
        "previewUrl": preview_url,
        "liveUrl": live_url,
        "reviewSubmissionDate": ctx.iso_now,
        "submittedBy": submitted_by or config.UNKNOWN,
        "host": ctx.host,
        "env": ctx.env,
        "org": ctx.org,
        "site": ctx.site,
        "ref": ctx.ref,
        "source": source,
    }
    payload.update(report)
    if analytics is not None:
        payload["analytics"] = dict(analytics)
    payload["notes"] = notes or ""
    if action:
        payload["action"] = action
    return payload


def build_library_payload(context: Mapping[str, Any], now: Optional[datetime] = None) -> dict[str, Any]:
    """Minimal payload for submissions started from the editor library: no analysis."""
    owner = context.get("owner") or ""
    repo = context.get("repo") or ""
    ref = context.get("ref") or config.DEFAULT_REF
    clean_path = (context.get("path") or "").lstrip("/")
    # Last segment as-is, extension included
    name = next((s for s in reversed(clean_path.split("/")) if s), "index")

    base_host = f"{ref}--{repo}--{owner}"
    return {
        "title": name,
        "name": name,
        "path": f"/{clean_path}",
        "previewUrl": f"https://{base_host}.{config.PLATFORM_DOMAIN}.page/{clean_path}",
        "liveUrl": f"https://{base_host}.{config.PLATFORM_DOMAIN}.live/{clean_path}",
        "reviewSubmissionDate": to_iso(now or datetime.now(timezone.utc)),
        "source": SOURCE_LIBRARY,
        "org": owner,
        "site": repo,
        "ref": ref,
    }


def payload_json(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False)
