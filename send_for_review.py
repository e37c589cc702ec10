# send_for_review.py
"""
Send For Review - analyze a page, attach provenance and route the submission.

Pipeline (strictly sequential, one outbound call per submission):
    resolve context -> fetch + analyze -> resolve identity -> build payload -> dispatch

Usage:
    python send_for_review.py --url "https://tools.example/sfr?host=main--site--org.aem.page" \
        --referrer "https://main--site--org.aem.page/dev/products/item" --notes "ready"
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from bs4 import BeautifulSoup

import config
from identity import IdentityResolver
from page_analysis import collect_analytics
from page_context import parse_aem_url, parse_da_url, resolve_context
from payload import analysis_document, build_library_payload, build_payload, derive_urls, fetch_snapshot
from review_router import DispatchOutcome, ReviewRouter, destination_table, input_error, to_response

logger = logging.getLogger(__name__)


def prepare_submission(
    location_url: str,
    referrer: Optional[str] = None,
    current_doc: Any = None,
    notes: str = "",
    action: Optional[str] = None,
    identity: Optional[IdentityResolver] = None,
    full_analysis: bool = True,
    ambient: Optional[Mapping[str, Any]] = None,
    fetch: Callable[[str], Any] = fetch_snapshot,
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """Build the payload. Snapshot and identity failures degrade, they never raise."""
    ctx = resolve_context(location_url, referrer, now=now)
    preview_url, _ = derive_urls(ctx)

    doc = analysis_document(preview_url, current_doc, fetch=fetch)
    submitted_by = identity.resolve() if identity is not None else config.UNKNOWN

    return build_payload(
        ctx,
        doc,
        submitted_by=submitted_by,
        notes=notes,
        full=full_analysis,
        analytics=collect_analytics(ambient, now) if full_analysis else None,
        action=action,
    )


def send_for_review(
    location_url: str,
    referrer: Optional[str] = None,
    current_doc: Any = None,
    notes: str = "",
    action: Optional[str] = None,
    identity: Optional[IdentityResolver] = None,
    router: Optional[ReviewRouter] = None,
    full_analysis: bool = True,
    ambient: Optional[Mapping[str, Any]] = None,
    fetch: Callable[[str], Any] = fetch_snapshot,
    now: Optional[datetime] = None,
) -> tuple[dict[str, Any], DispatchOutcome]:
    payload = prepare_submission(
        location_url,
        referrer,
        current_doc=current_doc,
        notes=notes,
        action=action,
        identity=identity,
        full_analysis=full_analysis,
        ambient=ambient,
        fetch=fetch,
        now=now,
    )
    router = router or ReviewRouter(table=destination_table(doc=current_doc))
    outcome = router.dispatch(payload, action)
    if outcome.ok:
        logger.info(f"Review request submitted for {payload['path']} ({outcome.environment})")
    else:
        logger.warning(f"Review request for {payload['path']} failed: {outcome.status_code}")
    return payload, outcome


def submit_from_library(
    context: Optional[Mapping[str, Any]] = None,
    location_url: str = "",
    router: Optional[ReviewRouter] = None,
    now: Optional[datetime] = None,
) -> tuple[Optional[dict[str, Any]], DispatchOutcome]:
    """Library plugin path: minimal payload, context from the plugin or the editor URL."""
    page_context = context if context and context.get("repo") else None
    if page_context is None:
        page_context = parse_da_url(location_url) or parse_aem_url(location_url)
    if page_context is None:
        logger.error("Could not determine page context")
        return None, input_error("Could not determine page context")

    payload = build_library_payload(page_context, now=now)
    router = router or ReviewRouter()
    return payload, router.dispatch(payload)


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Analyze a page and send it for review")
    p.add_argument("--url", required=True, help="Current location URL (tool or editor URL)")
    p.add_argument("--referrer", default=None, help="Referrer URL (the page being reviewed)")
    p.add_argument("--html", default=None, help="HTML file used when the published page cannot be fetched")
    p.add_argument("--notes", default="", help="Free-text notes for the reviewer")
    p.add_argument("--action", default=None, help='Action discriminator, e.g. "check-status"')
    p.add_argument("--submitter", default=None, help="Submitter email (skips identity discovery)")
    p.add_argument("--webhook", default=None, help="Send everything to this single webhook")
    p.add_argument("--library", action="store_true", help="Minimal library submission (no analysis)")
    p.add_argument("--reduced", action="store_true", help="Reduced analysis report")
    p.add_argument("--dry-run", action="store_true", help="Print the payload instead of sending it")
    return p.parse_args(argv)


def _read_document(path: Optional[str]) -> Optional[BeautifulSoup]:
    if not path:
        return None
    with open(path, "r", encoding="utf-8") as f:
        return BeautifulSoup(f.read(), "html.parser")


def main(argv=None) -> int:
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    args = parse_args(argv)
    current_doc = _read_document(args.html)
    table = destination_table(override_url=args.webhook, doc=current_doc)
    router = ReviewRouter(table=table)

    if args.library:
        if args.dry_run:
            library_context = parse_da_url(args.url) or parse_aem_url(args.url) or {}
            payload, outcome = build_library_payload(library_context), None
        else:
            payload, outcome = submit_from_library(location_url=args.url, router=router)
    else:
        if args.submitter:
            identity = IdentityResolver(profile_sources=[lambda: {"email": args.submitter}])
        else:
            # A file on disk will not mount anything later: one search is enough.
            identity = IdentityResolver(document_provider=lambda: current_doc, attempts=1)

        if args.dry_run:
            payload = prepare_submission(
                args.url, args.referrer, current_doc=current_doc, notes=args.notes,
                action=args.action, identity=identity, full_analysis=not args.reduced,
            )
            outcome = None
        else:
            payload, outcome = send_for_review(
                args.url, args.referrer, current_doc=current_doc, notes=args.notes,
                action=args.action, identity=identity, router=router, full_analysis=not args.reduced,
            )

    if outcome is None:
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return 0

    print(json.dumps(to_response(outcome), indent=2, ensure_ascii=False))
    return 0 if outcome.ok else 1


if __name__ == "__main__":
    sys.exit(main())
