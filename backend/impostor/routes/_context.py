from __future__ import annotations

from flask import current_app, request

from ..security.credentials import Credential, issue_participant_id
from ..security.gate import ActionGate, ActionRequest
from ..utils.ip import get_client_ip


PARTICIPANT_HEADER = "X-Participant-Id"
CREDENTIAL_HEADER = "X-Participant-Credential"


def get_gate() -> ActionGate:
    return current_app.extensions["impostor"]["gate"]


def build_action_request(action: str, payload: dict, issue_missing_id: bool = False) -> ActionRequest:
    participant_id = request.headers.get(PARTICIPANT_HEADER, "").strip() or None
    if participant_id is None and issue_missing_id:
        participant_id = issue_participant_id()

    secret = request.headers.get(CREDENTIAL_HEADER, "").strip()
    credential = Credential(participant_id or "", secret) if secret else None

    return ActionRequest(
        participant_id=participant_id,
        credential=credential,
        action=action,
        payload=payload,
        client_ip=get_client_ip(request, current_app.config.get("TRUST_PROXY_HEADERS", False)),
    )
