from __future__ import annotations

import random

import pytest

from impostor.game.service import RoomService
from impostor.security.gate import ActionGate, ActionRequest
from impostor.security.credentials import Credential
from impostor.security.ratelimit import RateLimiter
from impostor.server import create_app


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class Recorder:
    """Notifier double that keeps every published event."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict]] = []

    def __call__(self, room_id: str, event: str, payload: dict) -> None:
        self.events.append((room_id, event, payload))

    def names(self) -> list[str]:
        return [e[1] for e in self.events]


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def service(rng, recorder) -> RoomService:
    return RoomService(rng=rng, notifier=recorder, min_participants=3, max_participants=30)


@pytest.fixture
def limiter(clock) -> RateLimiter:
    return RateLimiter(limits={"get_my_role": 3}, window_sec=60, default_limit=100, clock=clock)


@pytest.fixture
def gate(service, limiter) -> ActionGate:
    return ActionGate(service, limiter)


@pytest.fixture
def room_with_players(service):
    """Room with a host and two guests, waiting, word bank ["sol", "luna"]."""
    room, host = service.create_room("Ana")
    _, bea = service.join_room(room.join_code, "Bea")
    _, caro = service.join_room(room.join_code, "Caro")
    service.update_room(room.id, host.participant_id, words=["sol", "luna"], impostor_count=1)
    return room, host, [bea, caro]


def _make_request(participant, action: str, room_id: str | None = None, **payload) -> ActionRequest:
    if room_id is not None:
        payload["roomId"] = room_id
    return ActionRequest(
        participant_id=participant.participant_id,
        credential=Credential(participant.participant_id, participant.credential),
        action=action,
        payload=payload,
    )


@pytest.fixture
def make_request():
    return _make_request


@pytest.fixture
def app():
    app, socketio = create_app(
        {
            "TESTING": True,
            "SOCKETIO_ASYNC_MODE": "threading",
            "RANDOM": random.Random(99),
            "LOG_LEVEL": "WARNING",
        }
    )
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def socketio(app):
    return app.extensions["impostor"]["socketio"]
