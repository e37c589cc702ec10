import json
from datetime import datetime, timezone

from bs4 import BeautifulSoup

import payload as payload_mod
import send_for_review
from identity import IdentityResolver
from review_router import ReviewRouter

NOW = datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc)
TABLE = {
    "dev": {"submit": "TODO_DEV_SUBMIT", "status": "TODO_DEV_STATUS"},
    "qa": {"submit": "https://hooks.example/qa-submit", "status": "https://hooks.example/qa-status"},
    "production": {"submit": "https://hooks.example/prod-submit", "status": "https://hooks.example/prod-status"},
}
PUBLISHED = """
<html lang="en"><head><title>Published page title for the review flow</title></head>
<body><main><div><div class="hero"><h1>Published</h1></div></div></main></body></html>
"""
CURRENT = """
<html><head><title>Editor shell</title></head>
<body><div class="user-profile">Logged in: editor@example.com</div></body></html>
"""


class _Resp:
    def __init__(self, status_code, text=""):
        self.status_code = status_code
        self.text = text
        self.reason = ""


class _Session:
    def __init__(self, resp):
        self._resp = resp
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        return self._resp


def _router(status=200, text='{"reviewId": "r-1"}'):
    session = _Session(_Resp(status, text))
    return ReviewRouter(table=TABLE, session=session), session


def test_full_pipeline_routes_to_qa():
    router, session = _router()
    fetched = []

    def _fetch(url):
        fetched.append(url)
        return BeautifulSoup(PUBLISHED, "html.parser")

    payload, outcome = send_for_review.send_for_review(
        "https://tools.example/sfr",
        referrer="https://main--site--org.aem.page/qa/products",
        current_doc=CURRENT,
        notes="first pass",
        identity=IdentityResolver(profile_sources=[lambda: {"email": "jane@example.com"}]),
        router=router,
        fetch=_fetch,
        now=NOW,
    )

    assert fetched == ["https://main--site--org.aem.page/qa/products"]
    assert payload["title"] == "Published page title for the review flow"
    assert payload["submittedBy"] == "jane@example.com"
    assert payload["notes"] == "first pass"
    assert payload["analytics"]["timestamp"] == "2024-05-01T10:00:00.000Z"

    assert outcome.ok is True
    assert outcome.environment == "qa"
    assert outcome.body["reviewId"] == "r-1"
    assert len(session.calls) == 1
    assert session.calls[0][0] == "https://hooks.example/qa-submit"


def test_failed_fetch_analyzes_current_document():
    router, _ = _router()
    identity = IdentityResolver(document_provider=lambda: CURRENT, attempts=1)
    payload, outcome = send_for_review.send_for_review(
        "https://tools.example/sfr",
        referrer="https://main--site--org.aem.page/products",
        current_doc=CURRENT,
        identity=identity,
        router=router,
        fetch=lambda _u: None,
        now=NOW,
    )
    assert payload["title"] == "Editor shell"
    assert payload["submittedBy"] == "editor@example.com"
    assert outcome.environment == "production"
    assert outcome.ok is True


def test_status_check_action_is_carried():
    router, session = _router()
    payload, outcome = send_for_review.send_for_review(
        "https://tools.example/sfr",
        referrer="https://main--site--org.aem.page/qa/products",
        action="check-status",
        router=router,
        fetch=lambda _u: None,
        now=NOW,
    )
    assert payload["action"] == "check-status"
    assert payload["submittedBy"] == "unknown"
    assert outcome.action == "status"
    assert session.calls[0][0] == "https://hooks.example/qa-status"


def test_unprovisioned_environment_sends_nothing():
    router, session = _router()
    _, outcome = send_for_review.send_for_review(
        "https://tools.example/sfr",
        referrer="https://main--site--org.aem.page/dev/products",
        router=router,
        fetch=lambda _u: None,
        now=NOW,
    )
    assert outcome.status_code == 503
    assert session.calls == []


def test_reduced_submission():
    payload = send_for_review.prepare_submission(
        "https://tools.example/sfr",
        referrer="https://main--site--org.aem.page/qa/products",
        full_analysis=False,
        fetch=lambda _u: PUBLISHED,
        now=NOW,
    )
    assert "seo" in payload and "blocks" in payload
    assert "contentMetrics" not in payload
    assert "analytics" not in payload


def test_library_submission_from_editor_url():
    router, session = _router()
    payload, outcome = send_for_review.submit_from_library(
        location_url="https://da.live/edit#/acme/website/qa/products",
        router=router,
        now=NOW,
    )
    assert payload["source"] == "DA.live Library"
    assert payload["path"] == "/qa/products"
    assert outcome.environment == "qa"
    assert len(session.calls) == 1


def test_library_submission_without_context():
    router, session = _router()
    payload, outcome = send_for_review.submit_from_library(location_url="https://example.com/", router=router)
    assert payload is None
    assert outcome.status_code == 400
    assert session.calls == []


def test_cli_dry_run(monkeypatch, tmp_path, capsys):
    def _no_fetch(_u):
        raise ValueError("offline")

    monkeypatch.setattr(payload_mod, "validate_url", _no_fetch)
    html_file = tmp_path / "page.html"
    html_file.write_text(CURRENT, encoding="utf-8")

    code = send_for_review.main([
        "--url", "https://tools.example/sfr",
        "--referrer", "https://main--site--org.aem.page/qa/products",
        "--html", str(html_file),
        "--submitter", "cli@example.com",
        "--dry-run",
    ])

    assert code == 0
    printed = json.loads(capsys.readouterr().out)
    assert printed["submittedBy"] == "cli@example.com"
    assert printed["title"] == "Editor shell"
    assert printed["path"] == "/qa/products"


def test_analysis_and_identity_failures_do_not_block_dispatch():
    def _broken_roots(_root):
        raise AttributeError("shadowRoot")

    def _reset(_u):
        raise OSError("connection reset")

    router, session = _router()
    payload, outcome = send_for_review.send_for_review(
        "https://tools.example/sfr",
        referrer="https://main--site--org.aem.page/qa/products",
        current_doc=CURRENT,
        identity=IdentityResolver(document_provider=lambda: "<div></div>", get_roots=_broken_roots, attempts=1),
        router=router,
        fetch=_reset,
        now=NOW,
    )
    assert payload["title"] == "Editor shell"
    assert payload["submittedBy"] == "unknown"
    assert outcome.ok is True
    assert len(session.calls) == 1
