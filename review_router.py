"""
review_router.py - Routes review submissions and status checks to the right webhook.

The environment comes from the page's folder (dev/qa/production), the action
type from the `action` discriminator ("check-status" -> status, else submit).
Destinations are an environment x action table; a `TODO_` entry means the
webhook is not provisioned yet and nothing is sent.

Usage:
    router = ReviewRouter()
    outcome = router.dispatch(payload)
    response = to_response(outcome)
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import requests
from requests.auth import HTTPBasicAuth

import config
from html_doc import ensure_soup
from net_guardrails import DEFAULT_TIMEOUT, JSON_HEADERS, redact_headers

logger = logging.getLogger(__name__)

SUBMIT = "submit"
STATUS = "status"
CHECK_STATUS_ACTION = "check-status"
ENVIRONMENTS = ("dev", "qa", "production")
WEBHOOK_META_NAME = "sfr:webhook"
DIRECT_PARAM_FIELDS = ("action", "pageIdentifier", "org", "site", "ref", "path")


class WebhookError(Exception):
    def __init__(self, status_code: int, reason: str = ""):
        super().__init__(f"Webhook failed: {status_code} {reason}".strip())
        self.status_code = status_code
        self.reason = reason


@dataclass(frozen=True)
class RouteDecision:
    environment: str
    action_type: str
    target_url: str

    @property
    def is_configured(self) -> bool:
        return bool(self.target_url) and not is_placeholder(self.target_url)


@dataclass(frozen=True)
class DispatchOutcome:
    ok: bool
    status_code: int
    body: dict[str, Any] = field(default_factory=dict)
    environment: Optional[str] = None
    action: Optional[str] = None
    error_kind: Optional[str] = None  # input | configuration | upstream | transport


def is_placeholder(url: str) -> bool:
    return (url or "").startswith(config.PLACEHOLDER_PREFIX)


def webhook_from_document(doc) -> str:
    soup = ensure_soup(doc)
    meta = soup.find("meta", attrs={"name": WEBHOOK_META_NAME})
    if meta is None:
        return ""
    content = meta.get("content")
    return content.strip() if isinstance(content, str) else ""


def destination_table(
    override_url: Optional[str] = None,
    doc=None,
    base: Optional[Mapping[str, Mapping[str, str]]] = None,
) -> dict[str, dict[str, str]]:
    """
    Resolve the environment x action table.

    A single override (argument, then SFR_WEBHOOK_URL, then the document's
    <meta name="sfr:webhook">) replaces every cell.
    """
    base = base if base is not None else config.WEBHOOKS
    single = override_url or config.WEBHOOK_URL or (webhook_from_document(doc) if doc is not None else "")
    if single:
        return {env: {SUBMIT: single, STATUS: single} for env in base}
    return {env: dict(actions) for env, actions in base.items()}


def get_environment(payload: Mapping[str, Any], default: str = config.DEFAULT_ENVIRONMENT) -> str:
    path = str(payload.get("path") or payload.get("pageIdentifier") or "")
    normalized = path.lower().lstrip("/")

    for env in ENVIRONMENTS:
        if normalized == env or normalized.startswith(f"{env}/"):
            return env

    # pageIdentifier format: org/site/folder/path
    page_identifier = payload.get("pageIdentifier")
    if isinstance(page_identifier, str):
        parts = page_identifier.split("/")
        if len(parts) >= 3 and parts[2].lower() in ENVIRONMENTS:
            return parts[2].lower()

    return default


def get_action_type(payload: Mapping[str, Any], action: Optional[str] = None) -> str:
    requested = action if action is not None else payload.get("action")
    return STATUS if requested == CHECK_STATUS_ACTION else SUBMIT


def classify(
    payload: Mapping[str, Any],
    table: Mapping[str, Mapping[str, str]],
    action: Optional[str] = None,
    default_environment: str = config.DEFAULT_ENVIRONMENT,
) -> RouteDecision:
    env = get_environment(payload, default_environment)
    action_type = get_action_type(payload, action)
    target = (table.get(env) or {}).get(action_type, "")
    return RouteDecision(environment=env, action_type=action_type, target_url=target)


def _decode_body(body: str) -> str:
    try:
        return base64.b64decode(body, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return body


def extract_payload(params: Mapping[str, Any]) -> Optional[dict[str, Any]]:
    """
    Pull the submission payload out of inbound action parameters.

    Raises ValueError when a body is present but is not valid JSON.
    """
    if not isinstance(params, Mapping):
        return None

    data = params.get("data")
    if data:
        if isinstance(data, str):
            data = json.loads(data)
        return dict(data) if isinstance(data, Mapping) else None

    body = params.get("__ow_body") or params.get("body")
    if body:
        if isinstance(body, (bytes, bytearray)):
            body = body.decode("utf-8", errors="replace")
        parsed = json.loads(_decode_body(body))
        if isinstance(parsed, Mapping):
            inner = parsed.get("data")
            return dict(inner) if isinstance(inner, Mapping) and inner else dict(parsed)
        return None

    if params.get("action"):
        return {k: params.get(k) for k in DIRECT_PARAM_FIELDS}

    return None


def _parse_response_body(text: str) -> dict[str, Any]:
    try:
        parsed = json.loads(text)
    except ValueError:
        return {"message": text}
    if isinstance(parsed, dict):
        return parsed
    return {"message": text}


def input_error(message: str) -> DispatchOutcome:
    return DispatchOutcome(ok=False, status_code=400, body={"error": message}, error_kind="input")


class ReviewRouter:
    def __init__(
        self,
        table: Optional[Mapping[str, Mapping[str, str]]] = None,
        session: Optional[requests.Session] = None,
        credentials: tuple[str, str] = (config.WEBHOOK_USER, config.WEBHOOK_PASSWORD),
        default_environment: str = config.DEFAULT_ENVIRONMENT,
        timeout: int = DEFAULT_TIMEOUT,
    ):
        self.table = table if table is not None else destination_table()
        self.session = session
        self.credentials = credentials
        self.default_environment = default_environment
        self.timeout = timeout

    def route(self, payload: Mapping[str, Any], action: Optional[str] = None) -> RouteDecision:
        return classify(payload, self.table, action, self.default_environment)

    def dispatch(self, payload: Any, action: Optional[str] = None) -> DispatchOutcome:
        if payload is None or not isinstance(payload, Mapping):
            return input_error("No payload provided")

        decision = self.route(payload, action)
        env, action_type = decision.environment, decision.action_type
        logger.info(
            f"[Router] Env: {env}, Action: {action_type}, "
            f"Path: {payload.get('path') or payload.get('pageIdentifier')}"
        )

        if not decision.is_configured:
            logger.warning(f"[Router] Webhook not configured for {env} {action_type}")
            return DispatchOutcome(
                ok=False,
                status_code=503,
                body={
                    "error": f"Webhook not configured for {env} environment",
                    "environment": env,
                    "action": action_type,
                    "message": f"Please configure the {env} {action_type} webhook URL",
                },
                environment=env,
                action=action_type,
                error_kind="configuration",
            )

        try:
            body = json.dumps(dict(payload), ensure_ascii=False)
        except (TypeError, ValueError) as e:
            return input_error(f"Malformed payload: {e}")

        session = self.session or requests.Session()
        logger.debug(f"[Router] POST {decision.target_url} headers={redact_headers(JSON_HEADERS)}")
        try:
            resp = session.post(
                decision.target_url,
                data=body.encode("utf-8"),
                headers=JSON_HEADERS,
                auth=HTTPBasicAuth(*self.credentials),
                timeout=self.timeout,
            )
            data = _parse_response_body(resp.text)
        except requests.RequestException as e:
            logger.error(f"[Router] Error: {e}")
            return DispatchOutcome(
                ok=False,
                status_code=500,
                body={"error": str(e)},
                environment=env,
                action=action_type,
                error_kind="transport",
            )

        ok = 200 <= resp.status_code < 300
        return DispatchOutcome(
            ok=ok,
            status_code=200 if ok else resp.status_code,
            body={"success": ok, "environment": env, "action": action_type, **data},
            environment=env,
            action=action_type,
            error_kind=None if ok else "upstream",
        )

    def handle(self, params: Mapping[str, Any], action: Optional[str] = None) -> DispatchOutcome:
        """Inbound parameters -> outcome. Unparseable bodies are input errors."""
        try:
            payload = extract_payload(params)
        except ValueError as e:
            return input_error(f"Unparseable payload: {e}")
        return self.dispatch(payload, action)


def to_response(outcome: DispatchOutcome) -> dict[str, Any]:
    return {"statusCode": outcome.status_code, "body": dict(outcome.body)}


def post_to_webhook(
    payload: Mapping[str, Any],
    url: Optional[str] = None,
    session: Optional[requests.Session] = None,
) -> requests.Response:
    """Single-endpoint post without routing. Raises WebhookError on a non-2xx reply."""
    target = url or config.WEBHOOK_URL or config.DEFAULT_WEBHOOK
    session = session or requests.Session()
    resp = session.post(
        target,
        data=json.dumps(dict(payload), ensure_ascii=False).encode("utf-8"),
        headers=JSON_HEADERS,
        timeout=DEFAULT_TIMEOUT,
    )
    if not 200 <= resp.status_code < 300:
        raise WebhookError(resp.status_code, getattr(resp, "reason", "") or "")
    return resp
