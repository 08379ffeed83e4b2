from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import requests

from .models import (
    CONTRACT,
    REMOTE,
    TRANSPORT,
    CIContext,
    ProofConfig,
    ProofResponse,
    StageResult,
)
from .timeutil import iso, utc_now


EVENT_TAG = "github_publish"


def build_payload(ci: CIContext, timestamp: str) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"event": EVENT_TAG}
    payload.update(ci.as_dict())
    payload["timestamp"] = timestamp
    return payload


def _body_field(field: str) -> Callable[[Optional[requests.Response], Optional[BaseException]], str]:
    def rule(response: Optional[requests.Response], exc: Optional[BaseException]) -> str:
        if response is None:
            return ""
        try:
            data = response.json()
        except ValueError:
            return ""
        if not isinstance(data, dict):
            return ""
        value = data.get(field)
        return str(value).strip() if value else ""

    return rule


def _exception_text(response: Optional[requests.Response], exc: Optional[BaseException]) -> str:
    return str(exc).strip() if exc is not None else ""


def _exception_name(response: Optional[requests.Response], exc: Optional[BaseException]) -> str:
    return exc.__class__.__name__ if exc is not None else ""


# Tried in order; the first non-empty result wins.
MESSAGE_RULES: List[Callable[[Optional[requests.Response], Optional[BaseException]], str]] = [
    _body_field("error"),
    _body_field("message"),
    _exception_text,
    _exception_name,
]


def error_message(
    response: Optional[requests.Response] = None,
    exc: Optional[BaseException] = None,
) -> str:
    for rule in MESSAGE_RULES:
        message = rule(response, exc)
        if message:
            return message
    if response is not None:
        return f"proof endpoint returned status {response.status_code}"
    return "unknown error"


def request_proof(
    config: ProofConfig,
    session: Any = None,
    now: Optional[datetime] = None,
) -> StageResult:
    """
    POST one proof request to the attestation service.

    Exactly one attempt is made; a re-run of the CI job is the retry.
    `session` is anything with a requests-compatible ``post`` (a
    requests.Session, or the requests module itself by default).
    """
    http = session if session is not None else requests
    url = f"{config.api_base}/proof"
    payload = build_payload(config.ci, iso(now or utc_now()))

    headers = {
        "Authorization": f"Bearer {config.api_key}",
        "Content-Type": "application/json",
    }

    print(f"[IntegrityProof] Requesting proof for {config.ci.repository or '(unknown repo)'}@{config.ci.commit or '(unknown commit)'}")

    try:
        response = http.post(
            url,
            headers=headers,
            json=payload,
            timeout=config.timeout_seconds,
        )
    except requests.Timeout as exc:
        return StageResult.failure(
            TRANSPORT,
            f"proof request timed out after {config.timeout_seconds:g}s: {error_message(exc=exc)}",
        )
    except requests.RequestException as exc:
        return StageResult.failure(TRANSPORT, error_message(exc=exc))

    if response.status_code >= 400:
        return StageResult.failure(REMOTE, error_message(response=response))

    try:
        data = response.json()
    except ValueError:
        data = None

    if not isinstance(data, dict) or not str(data.get("proof_id") or "").strip():
        snippet = (response.text or "")[:200]
        return StageResult.failure(
            CONTRACT,
            f"invalid response from proof endpoint: missing proof_id ({json.dumps(snippet)})",
        )

    print(f"[IntegrityProof] Proof issued: {data['proof_id']}")
    return StageResult.success(ProofResponse(data=data, raw=response.content))
