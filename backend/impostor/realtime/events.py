from __future__ import annotations

from flask_socketio import SocketIO


ROOM_STATE = "room:state"
ROUND_STARTED = "round:started"
ROUND_RESET = "round:reset"
ROOM_DELETED = "room:deleted"
ROOM_PLAYERS = "room:players"
ROOM_ERROR = "room:error"


def make_socketio_notifier(socketio: SocketIO):
    """Fan room events out to every socket subscribed to the room channel."""

    def notify(room_id: str, event: str, payload: dict) -> None:
        socketio.emit(event, payload, to=room_id)

    return notify
