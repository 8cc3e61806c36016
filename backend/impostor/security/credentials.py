from __future__ import annotations

import hmac
import secrets
import uuid
from dataclasses import dataclass


CREDENTIAL_BYTES = 24


def issue_participant_id() -> str:
    return str(uuid.uuid4())


def issue_room_id() -> str:
    return str(uuid.uuid4())


def issue_credential() -> str:
    return secrets.token_urlsafe(CREDENTIAL_BYTES)


@dataclass(frozen=True)
class Credential:
    """Bearer secret presented by a participant with each request."""

    participant_id: str
    secret: str

    def matches(self, stored_secret: str) -> bool:
        if not self.secret or not stored_secret:
            return False
        return hmac.compare_digest(self.secret.encode("utf-8"), stored_secret.encode("utf-8"))

    def __repr__(self) -> str:
        # Never leak the secret into logs or tracebacks.
        return f"Credential(participant_id={self.participant_id!r}, secret='***')"
