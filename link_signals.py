# link_signals.py
from __future__ import annotations

from urllib.parse import urlparse

from html_doc import ensure_soup

BUTTON_SELECTOR = "button, a.button, .button"


def _host_of(value: str) -> str:
    value = (value or "").strip().lower()
    if "://" in value:
        return (urlparse(value).netloc or "").lower()
    return value


def _is_external(href: str, current_host: str) -> bool:
    if not href.lower().startswith(("http://", "https://")):
        return False
    return urlparse(href).netloc.lower() != current_host


def analyze_links(doc, current_origin: str = "") -> dict:
    """
    Classify every <a href>: mailto, tel, external (absolute URL on another
    host) or internal (same host or relative). `current_origin` may be a bare
    host or a full origin URL.
    """
    soup = ensure_soup(doc)
    current_host = _host_of(current_origin)

    links = soup.find_all("a", href=True)
    internal = 0
    external = 0
    mailto = 0
    tel = 0
    external_links: list[dict[str, str]] = []

    for a in links:
        href = a.get("href")
        if not isinstance(href, str) or not href:
            continue

        if href.startswith("mailto:"):
            mailto += 1
        elif href.startswith("tel:"):
            tel += 1
        elif _is_external(href, current_host):
            external += 1
            external_links.append({
                "href": href,
                "text": a.get_text().strip(),
            })
        else:
            internal += 1

    # Counted independently of link classification
    buttons = len(soup.select(BUTTON_SELECTOR))

    return {
        "total": len(links),
        "internal": internal,
        "external": external,
        "buttons": buttons,
        "mailto": mailto,
        "tel": tel,
        "externalLinks": external_links,
    }


def analyze_interactive_elements(doc) -> dict:
    soup = ensure_soup(doc)
    return {
        "forms": len(soup.find_all("form")),
        "buttons": len(soup.find_all("button")),
        "inputs": len(soup.find_all(["input", "textarea", "select"])),
        "videos": len(soup.find_all("video")),
        "iframes": len(soup.find_all("iframe")),
    }
