from __future__ import annotations

import logging

from flask import request
from flask_socketio import SocketIO, emit, join_room, leave_room

from ..game.errors import GameError
from ..security.credentials import Credential
from ..security.gate import ActionGate
from ..security.validation import validate_uuid
from .events import ROOM_ERROR, ROOM_STATE


logger = logging.getLogger(__name__)


def register_socketio_handlers(socketio: SocketIO, gate: ActionGate) -> None:
    def _fail(err: GameError) -> dict:
        emit(ROOM_ERROR, err.to_dict())
        return {"ok": False, "error": err.code}

    def _authenticated_room(payload: dict) -> tuple[str, str]:
        room_id = validate_uuid(payload.get("roomId"), "room")
        participant_id = validate_uuid(payload.get("participantId"), "participant")
        gate.limiter.hit("subscribe", participant_id)
        secret = str(payload.get("credential", "") or "")
        gate.authenticate(room_id, participant_id, Credential(participant_id, secret) if secret else None)
        return room_id, participant_id

    @socketio.on("room:subscribe")
    def room_subscribe(data):
        payload = data or {}
        try:
            room_id, participant_id = _authenticated_room(payload)
            state = gate.service.get_room_state(room_id, viewer_id=participant_id)
        except GameError as err:
            return _fail(err)

        join_room(room_id)
        # Initial fetch for (re)connecting clients; later pushes may be missed.
        emit(ROOM_STATE, state, to=request.sid)
        return {"ok": True}

    @socketio.on("room:refresh")
    def room_refresh(data):
        payload = data or {}
        try:
            room_id, participant_id = _authenticated_room(payload)
            state = gate.service.get_room_state(room_id, viewer_id=participant_id)
        except GameError as err:
            return _fail(err)

        emit(ROOM_STATE, state, to=request.sid)
        return {"ok": True}

    @socketio.on("room:unsubscribe")
    def room_unsubscribe(data):
        payload = data or {}
        room_id = str(payload.get("roomId", "")).strip()
        if not room_id:
            return {"ok": False, "error": "invalid_room"}

        leave_room(room_id)
        return {"ok": True}

    @socketio.on("disconnect")
    def on_disconnect(*args):
        # Room membership is not tied to the socket; a dropped connection
        # only ends the subscription.
        logger.debug("Socket %s disconnected", request.sid)
