# page_analysis.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from accessibility_heuristic import analyze_accessibility
from block_structure import analyze_blocks
from content_metrics import analyze_content
from heading_structure import analyze_headings
from html_doc import ensure_soup
from link_signals import analyze_interactive_elements, analyze_links
from page_context import to_iso
from seo_meta import analyze_seo
from share_meta import analyze_open_graph

# Payload key -> analyzer. Every pass reads the same snapshot and nothing else.
FULL_PASSES = {
    "contentMetrics": lambda soup, origin: analyze_content(soup),
    "headingStructure": lambda soup, origin: analyze_headings(soup),
    "blocks": lambda soup, origin: analyze_blocks(soup),
    "seo": lambda soup, origin: analyze_seo(soup),
    "openGraph": lambda soup, origin: analyze_open_graph(soup),
    "accessibility": lambda soup, origin: analyze_accessibility(soup),
    "links": lambda soup, origin: analyze_links(soup, origin),
    "interactiveElements": lambda soup, origin: analyze_interactive_elements(soup),
}

# What the lightweight submission card needs
REDUCED_KEYS = ("seo", "blocks")


def analyze_page(doc, current_origin: str = "", full: bool = True) -> dict[str, Any]:
    """
    Run the analysis passes over one document snapshot.

    `full=False` returns only the reduced subset used by lightweight
    submissions.
    """
    soup = ensure_soup(doc)
    keys = FULL_PASSES.keys() if full else REDUCED_KEYS
    return {key: FULL_PASSES[key](soup, current_origin) for key in keys}


def page_title(doc, fallback: str = "") -> str:
    soup = ensure_soup(doc)
    for tag in ("title", "h1"):
        el = soup.find(tag)
        if el is not None:
            text = el.get_text().strip()
            if text:
                return text
    return fallback


def _int_or_zero(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def collect_analytics(ambient: Mapping[str, Any] | None = None, now: datetime | None = None) -> dict[str, Any]:
    """Client metadata supplied by the host: agent, language, screen and viewport."""
    ambient = ambient or {}
    now = now or datetime.now(timezone.utc)
    screen = ambient.get("screen") or {}
    viewport = ambient.get("viewport") or {}
    return {
        "timestamp": to_iso(now),
        "timezone": ambient.get("timezone") or (now.tzname() or ""),
        "userAgent": ambient.get("userAgent") or "",
        "language": ambient.get("language") or "",
        "screen": {
            "width": _int_or_zero(screen.get("width")),
            "height": _int_or_zero(screen.get("height")),
            "colorDepth": _int_or_zero(screen.get("colorDepth")),
        },
        "viewport": {
            "width": _int_or_zero(viewport.get("width")),
            "height": _int_or_zero(viewport.get("height")),
        },
    }
