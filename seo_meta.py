# seo_meta.py
from __future__ import annotations

from typing import Any

from html_doc import ensure_soup

TITLE_MIN = 30
TITLE_MAX = 60
DESCRIPTION_MIN = 120
DESCRIPTION_MAX = 160


def _meta_content(soup, name: str) -> str:
    for meta in soup.find_all("meta"):
        k = meta.get("name")
        if not isinstance(k, str) or k.strip().lower() != name:
            continue
        content = meta.get("content")
        return content if isinstance(content, str) else ""
    return ""


def _extract_canonical(soup) -> str:
    for link in soup.find_all("link"):
        rel = link.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        if "canonical" not in [r.lower() for r in rel]:
            continue
        href = link.get("href")
        return href.strip() if isinstance(href, str) else ""
    return ""


def _root_lang(soup) -> str:
    html_el = soup.find("html")
    if html_el is None:
        return ""
    lang = html_el.get("lang")
    return lang.strip() if isinstance(lang, str) else ""


def analyze_seo(doc) -> dict[str, Any]:
    soup = ensure_soup(doc)
    issues: list[str] = []

    title_el = soup.find("title")
    title = title_el.get_text().strip() if title_el is not None else ""
    title_length = len(title)

    if not title:
        issues.append("Missing page title")
    elif title_length < TITLE_MIN:
        issues.append(f"Title too short (< {TITLE_MIN} chars)")
    elif title_length > TITLE_MAX:
        issues.append(f"Title too long (> {TITLE_MAX} chars)")

    description = _meta_content(soup, "description").strip()
    desc_length = len(description)

    if not description:
        issues.append("Missing meta description")
    elif desc_length < DESCRIPTION_MIN:
        issues.append(f"Meta description too short (< {DESCRIPTION_MIN} chars)")
    elif desc_length > DESCRIPTION_MAX:
        issues.append(f"Meta description too long (> {DESCRIPTION_MAX} chars)")

    canonical = _extract_canonical(soup)
    if not canonical:
        issues.append("Missing canonical URL")

    # Reported as-is, no validation
    robots = _meta_content(soup, "robots")

    lang = _root_lang(soup)
    if not lang:
        issues.append("Missing lang attribute")

    return {
        "title": {"content": title, "length": title_length},
        "metaDescription": {"content": description, "length": desc_length},
        "canonical": canonical,
        "robots": robots,
        "lang": lang,
        "issues": issues,
    }
