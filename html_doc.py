# html_doc.py
from __future__ import annotations

import math
from typing import Union

from bs4 import BeautifulSoup, Tag

Document = Union[BeautifulSoup, Tag, str, None]


def ensure_soup(doc: Document) -> BeautifulSoup | Tag:
    """Accept a parsed tree or raw HTML; always hand back something queryable."""
    if isinstance(doc, (BeautifulSoup, Tag)):
        return doc
    return BeautifulSoup(doc or "", "html.parser")


def content_region(doc: BeautifulSoup | Tag) -> BeautifulSoup | Tag:
    # <main> landmark, else <body>, else the whole tree (fragments)
    return doc.find("main") or doc.find("body") or doc


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
