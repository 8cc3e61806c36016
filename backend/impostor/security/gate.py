from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from ..game.errors import (
    CredentialRequired,
    InvalidCredential,
    ValidationError,
)
from ..game.service import RoomService
from .credentials import Credential
from .ratelimit import RateLimiter
from .validation import (
    clean_impostor_count,
    clean_name,
    clean_word,
    clean_words,
    normalize_join_code,
    validate_uuid,
)


logger = logging.getLogger(__name__)

# Actions that run without a credential.
OPEN_ACTIONS = frozenset({"create_room", "join_room", "find_room", "register_participant", "get_players"})
HOST_ACTIONS = frozenset({"start_round", "new_round", "update_room", "add_word", "remove_word", "delete_room"})
# Actions that do not target an existing room.
ROOMLESS_ACTIONS = frozenset({"create_room", "join_room", "find_room"})


@dataclass(frozen=True)
class ActionRequest:
    participant_id: str | None
    credential: Credential | None
    action: str
    payload: dict[str, Any] = field(default_factory=dict)
    client_ip: str | None = None

    @property
    def room_id(self) -> Any:
        return self.payload.get("roomId")


class ActionGate:
    """Checks every request before it reaches the room service.

    Order: known action, identifier formats, rate limit, credential, host,
    payload. The service is only called once all of them pass.
    """

    def __init__(self, service: RoomService, limiter: RateLimiter) -> None:
        self.service = service
        self.limiter = limiter
        self._handlers: dict[str, Callable[[str, str, dict], dict]] = {
            "register_participant": self._register_participant,
            "start_round": self._start_round,
            "new_round": self._new_round,
            "update_room": self._update_room,
            "add_word": self._add_word,
            "remove_word": self._remove_word,
            "delete_room": self._delete_room,
            "leave_room": self._leave_room,
            "get_my_role": self._get_my_role,
            "get_players": self._get_players,
            "get_room": self._get_room,
        }

    @property
    def actions(self) -> frozenset[str]:
        return frozenset(self._handlers) | ROOMLESS_ACTIONS

    def dispatch(self, request: ActionRequest) -> dict:
        if request.action not in self.actions:
            raise ValidationError("Unknown action", code="unknown_action")

        participant_id = validate_uuid(request.participant_id, "participant")
        payload = request.payload or {}

        if request.action in ROOMLESS_ACTIONS:
            # Fresh ids are free to mint, so these are counted per address.
            self.limiter.hit(request.action, request.client_ip or participant_id)
            if request.action == "create_room":
                return self._create_room(participant_id, payload)
            if request.action == "find_room":
                return self._find_room(payload)
            return self._join_room(participant_id, payload)

        room_id = validate_uuid(request.room_id, "room")
        self.limiter.hit(request.action, participant_id)

        if request.action not in OPEN_ACTIONS:
            self.authenticate(room_id, participant_id, request.credential)
        if request.action in HOST_ACTIONS:
            self.service.require_host(room_id, participant_id)

        return self._handlers[request.action](room_id, participant_id, payload)

    def authenticate(self, room_id: str, participant_id: str, credential: Credential | None) -> None:
        if credential is None or not credential.secret:
            raise CredentialRequired()

        participant = self.service.find_participant(room_id, participant_id)
        if (
            participant is None
            or credential.participant_id.lower() != participant_id
            or not credential.matches(participant.credential)
        ):
            # Same answer whether the room, the participant or the secret is wrong.
            logger.warning(
                "Rejected credential (possible impersonation): room=%s participant=%s",
                room_id,
                participant_id,
            )
            raise InvalidCredential()

    # -- handlers ------------------------------------------------------------

    def _create_room(self, participant_id: str, payload: dict) -> dict:
        name = clean_name(payload.get("hostName", payload.get("displayName")))
        room, host = self.service.create_room(name, participant_id=participant_id)
        return {
            "roomId": room.id,
            "joinCode": room.join_code,
            "participantId": host.participant_id,
            "credential": host.credential,
            "isHost": True,
        }

    def _join_room(self, participant_id: str, payload: dict) -> dict:
        code = normalize_join_code(payload.get("joinCode"))
        name = clean_name(payload.get("displayName"))
        room, participant = self.service.join_room(code, name, participant_id=participant_id)
        return {
            "roomId": room.id,
            "joinCode": room.join_code,
            "participantId": participant.participant_id,
            "credential": participant.credential,
            "isHost": participant.participant_id == room.host_id,
        }

    def _find_room(self, payload: dict) -> dict:
        room = self.service.find_room_by_code(normalize_join_code(payload.get("joinCode")))
        return self.service.get_room_state(room.id)

    def _register_participant(self, room_id: str, participant_id: str, payload: dict) -> dict:
        # A client-supplied isHost is ignored; host status comes from the room.
        name = clean_name(payload.get("displayName"))
        participant = self.service.register_participant(room_id, participant_id, name)
        return {
            "participantId": participant.participant_id,
            "credential": participant.credential,
            "isHost": participant.is_host,
        }

    def _start_round(self, room_id: str, participant_id: str, payload: dict) -> dict:
        words = clean_words(payload["words"]) if payload.get("words") is not None else None
        count = (
            clean_impostor_count(payload["impostorCount"])
            if payload.get("impostorCount") is not None
            else None
        )
        assignment = self.service.start_round(room_id, participant_id, words=words, impostor_count=count)
        # The caller is a participant too; it learns only its own role via get_my_role.
        return {"success": True, "players": len(assignment.roles)}

    def _new_round(self, room_id: str, participant_id: str, payload: dict) -> dict:
        reset = self.service.new_round(room_id, participant_id)
        return {"success": True, "reset": reset}

    def _update_room(self, room_id: str, participant_id: str, payload: dict) -> dict:
        words = clean_words(payload["words"]) if payload.get("words") is not None else None
        count = (
            clean_impostor_count(payload["impostorCount"])
            if payload.get("impostorCount") is not None
            else None
        )
        if words is None and count is None:
            raise ValidationError("Nothing to update", code="invalid_payload")
        result = self.service.update_room(room_id, participant_id, words=words, impostor_count=count)
        return {"success": True, **result}

    def _add_word(self, room_id: str, participant_id: str, payload: dict) -> dict:
        added = self.service.add_word(room_id, participant_id, clean_word(payload.get("word")))
        return {"success": True, "added": added}

    def _remove_word(self, room_id: str, participant_id: str, payload: dict) -> dict:
        removed = self.service.remove_word(room_id, participant_id, clean_word(payload.get("word")))
        return {"success": True, "removed": removed}

    def _delete_room(self, room_id: str, participant_id: str, payload: dict) -> dict:
        self.service.delete_room(room_id, participant_id)
        return {"success": True}

    def _leave_room(self, room_id: str, participant_id: str, payload: dict) -> dict:
        deleted = self.service.leave_room(room_id, participant_id)
        return {"success": True, "roomDeleted": deleted}

    def _get_my_role(self, room_id: str, participant_id: str, payload: dict) -> dict:
        return self.service.get_my_role(room_id, participant_id).to_dict()

    def _get_players(self, room_id: str, participant_id: str, payload: dict) -> dict:
        return {"players": self.service.get_players(room_id)}

    def _get_room(self, room_id: str, participant_id: str, payload: dict) -> dict:
        return self.service.get_room_state(room_id, viewer_id=participant_id)
