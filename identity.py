"""
identity.py - Who is submitting? Layered, bounded discovery of the user's email.

Order:
    1. profile objects from the identity integration in the current context
    2. the same integration on enclosing frames (cross-origin access may be blocked)
    3. email-shaped text in profile/description elements, searched depth-first
       across the document and its shadow roots, retried while the host UI mounts
    4. a cached profile in local storage

Nothing here raises to the caller: every miss degrades to the sentinel.
"""

from __future__ import annotations

import json
import logging
import re
import threading
import time
from typing import Any, Callable, Iterable, Mapping, Optional

from bs4 import Tag
from bs4.element import NavigableString, TemplateString

import config
from html_doc import ensure_soup

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
DESCRIPTION_SELECTOR = ", ".join([
    '[class*="description"]',
    '[class*="email"]',
    '[class*="profile"]',
    '[class*="user"]',
    '[slot="description"]',
])
SHADOW_ROOT_ATTRS = ("shadowrootmode", "shadowroot")
CACHED_PROFILE_KEY = "adobeid_ims_profile"

# Errors a foreign profile object or a blocked frame may throw at us
ACCESS_ERRORS = (PermissionError, AttributeError, KeyError, TypeError)
# Declarative shadow-root content parses as TemplateString, skipped by get_text() by default
TEXT_TYPES = (NavigableString, TemplateString)

ProfileSource = Callable[[], Any]


def email_from_profile(profile: Any) -> Optional[str]:
    if not profile:
        return None
    if isinstance(profile, Mapping):
        email = profile.get("email")
    else:
        email = getattr(profile, "email", None)
    if isinstance(email, str) and email.strip():
        return email.strip()
    return None


def _is_shadow_template(el: Any) -> bool:
    return isinstance(el, Tag) and el.name == "template" and any(el.has_attr(a) for a in SHADOW_ROOT_ATTRS)


def _owner_root(el: Tag) -> Optional[Tag]:
    """Nearest enclosing shadow-root template, or None for the light DOM."""
    for parent in el.parents:
        if _is_shadow_template(parent):
            return parent
    return None


def _belongs_to(el: Tag, root) -> bool:
    owner = _owner_root(el)
    if _is_shadow_template(root):
        return owner is root
    return owner is None


def shadow_roots(root) -> list[Tag]:
    """Declarative shadow roots directly owned by `root` (not nested deeper)."""
    return [
        t for t in root.find_all("template")
        if _is_shadow_template(t) and _belongs_to(t, root)
    ]


def _is_visible(el: Tag) -> bool:
    for node in [el, *el.parents]:
        if not isinstance(node, Tag):
            continue
        if node.has_attr("hidden") or node.get("aria-hidden") == "true":
            return False
    return True


def _scan_root(root) -> Optional[str]:
    for el in root.select(DESCRIPTION_SELECTOR):
        if not _belongs_to(el, root) or not _is_visible(el):
            continue
        m = EMAIL_PATTERN.search(el.get_text(" ", strip=True, types=TEXT_TYPES))
        if m:
            return m.group(0)
    return None


def find_email_in_tree(
    doc,
    get_roots: Callable[[Any], Iterable[Any]] = shadow_roots,
    budget: int = config.IDENTITY_SEARCH_BUDGET,
) -> Optional[str]:
    """
    Depth-first over the document and every searchable sub-root, using an
    explicit stack. Visits at most `budget` roots; first match wins.
    """
    stack = [doc]
    visited = 0
    while stack and visited < budget:
        root = ensure_soup(stack.pop())
        visited += 1
        email = _scan_root(root)
        if email:
            return email
        # reversed so the first child root is searched next
        stack.extend(reversed(list(get_roots(root))))
    return None


class IdentityResolver:
    def __init__(
        self,
        profile_sources: Iterable[ProfileSource] = (),
        frame_sources: Iterable[ProfileSource] = (),
        document_provider: Optional[Callable[[], Any]] = None,
        storage: Optional[Mapping[str, str]] = None,
        get_roots: Callable[[Any], Iterable[Any]] = shadow_roots,
        attempts: int = config.IDENTITY_ATTEMPTS,
        delay: float = config.IDENTITY_DELAY_MS / 1000,
        search_budget: int = config.IDENTITY_SEARCH_BUDGET,
        sentinel: str = config.UNKNOWN,
        sleep: Callable[[float], None] = time.sleep,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.profile_sources = list(profile_sources)
        self.frame_sources = list(frame_sources)
        self.document_provider = document_provider
        self.storage = storage
        self.get_roots = get_roots
        self.attempts = max(0, attempts)
        self.delay = delay
        self.search_budget = search_budget
        self.sentinel = sentinel
        self.sleep = sleep
        self.cancel_event = cancel_event
        self.search_attempts = 0

    def _from_sources(self, sources: list[ProfileSource], label: str) -> Optional[str]:
        for source in sources:
            try:
                email = email_from_profile(source())
            except ACCESS_ERRORS as e:
                logger.debug(f"Identity {label} source unavailable: {e}")
                continue
            if email:
                logger.debug(f"Identity found via {label} profile")
                return email
        return None

    def _cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def search_document(self) -> Optional[str]:
        """Retry the tree search until a match, cancellation or the attempt ceiling."""
        if self.document_provider is None:
            return None
        for attempt in range(1, self.attempts + 1):
            if self._cancelled():
                logger.debug("Identity search cancelled")
                return None
            self.search_attempts = attempt
            try:
                doc = self.document_provider()
                email = find_email_in_tree(doc, self.get_roots, self.search_budget) if doc is not None else None
            except PermissionError as e:
                logger.debug(f"Identity search blocked: {e}")
                email = None
            except Exception as e:
                # A broken host document must never stop the submission
                logger.warning(f"Identity search failed on attempt {attempt}: {e}")
                email = None
            if email:
                logger.debug(f"Identity found in document on attempt {attempt}")
                return email
            if attempt < self.attempts:
                self.sleep(self.delay)
        return None

    def from_storage(self) -> Optional[str]:
        if self.storage is None:
            return None
        try:
            cached = self.storage.get(CACHED_PROFILE_KEY)
            if not cached:
                return None
            return email_from_profile(json.loads(cached))
        except (ValueError, TypeError, PermissionError) as e:
            logger.debug(f"Cached profile unreadable: {e}")
            return None

    def resolve(self) -> str:
        email = (
            self._from_sources(self.profile_sources, "local")
            or self._from_sources(self.frame_sources, "frame")
            or self.search_document()
            or self.from_storage()
        )
        if email:
            return email
        logger.info(f"No submitter identity found, using '{self.sentinel}'")
        return self.sentinel
