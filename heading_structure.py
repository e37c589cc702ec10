# heading_structure.py
from __future__ import annotations

from typing import Any

from html_doc import ensure_soup

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]


def analyze_headings(doc) -> dict[str, Any]:
    """Heading outline in document order plus hierarchy issues.

    Skipped levels are only reported once a first heading has been seen, so a
    page that opens on an <h3> is not flagged for skipping from "H0".
    """
    soup = ensure_soup(doc)

    headings: list[dict[str, Any]] = []
    counts = {tag: 0 for tag in HEADING_TAGS}
    issues: list[str] = []

    for h in soup.find_all(HEADING_TAGS):
        tag = h.name.lower()
        counts[tag] += 1
        headings.append({
            "level": int(tag[1]),
            "tag": tag,
            "text": h.get_text().strip(),
            "id": h.get("id") or "",
        })

    if counts["h1"] == 0:
        issues.append("Missing H1 heading")
    elif counts["h1"] > 1:
        issues.append(f"Multiple H1 headings found ({counts['h1']})")

    last_level = 0
    for h in headings:
        if last_level > 0 and h["level"] > last_level + 1:
            issues.append(f"Skipped heading level: H{last_level} to H{h['level']}")
        last_level = h["level"]

    return {
        "headings": headings,
        "counts": counts,
        "total": len(headings),
        "issues": issues,
        "isValid": not issues,
    }
