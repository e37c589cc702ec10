# share_meta.py
from __future__ import annotations

from typing import Any

from html_doc import ensure_soup

OG_PREFIX = "og:"
TWITTER_PREFIX = "twitter:"
REQUIRED_OG_KEYS = ["title", "description", "image"]


def _collect_prefixed(soup, key_attr: str, prefix: str) -> dict[str, str]:
    """Map `<meta key_attr="prefix:x" content="...">` to {x: content}; last one wins."""
    vals: dict[str, str] = {}
    for meta in soup.find_all("meta"):
        k = meta.get(key_attr)
        if not isinstance(k, str) or not k.startswith(prefix):
            continue
        content = meta.get("content")
        vals[k[len(prefix):]] = content if isinstance(content, str) else ""
    return vals


def calculate_og_score(has_social_meta: bool, issue_count: int) -> int:
    if not has_social_meta:
        return 0
    if issue_count == 0:
        return 100
    return 50


def analyze_open_graph(doc) -> dict[str, Any]:
    """Extract Open Graph and Twitter card metadata from a page.

    Open Graph is read from `property`, Twitter cards from `name`.
    """
    soup = ensure_soup(doc)

    og = _collect_prefixed(soup, "property", OG_PREFIX)
    twitter = _collect_prefixed(soup, "name", TWITTER_PREFIX)

    issues = [f"Missing og:{key}" for key in REQUIRED_OG_KEYS if not og.get(key)]

    has_social_meta = bool(og) or bool(twitter)

    return {
        "openGraph": og,
        "twitter": twitter,
        "issues": issues,
        "score": calculate_og_score(has_social_meta, len(issues)),
        "hasSocialMeta": has_social_meta,
    }
