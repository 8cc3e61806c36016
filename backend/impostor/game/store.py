from __future__ import annotations

from contextlib import contextmanager
from threading import RLock
from typing import Iterator

from .errors import RoomNotFound
from .models import Room


class RoomStore:
    """In-memory room storage.

    All reads and writes go through one re-entrant lock, so a caller holding
    :meth:`atomic` sees and mutates a room without interleaving with any
    other request.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._rooms: dict[str, Room] = {}
        self._codes: dict[str, str] = {}

    @contextmanager
    def locked(self) -> Iterator[None]:
        with self._lock:
            yield

    @contextmanager
    def atomic(self, room_id: str) -> Iterator[Room]:
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                raise RoomNotFound()
            yield room

    def insert(self, room: Room) -> Room:
        with self._lock:
            if room.join_code in self._codes:
                raise ValueError(f"join code already in use: {room.join_code}")
            self._rooms[room.id] = room
            self._codes[room.join_code] = room.id
            return room

    def get(self, room_id: str) -> Room | None:
        with self._lock:
            return self._rooms.get(room_id)

    def get_by_code(self, join_code: str) -> Room | None:
        with self._lock:
            room_id = self._codes.get(join_code)
            return self._rooms.get(room_id) if room_id else None

    def code_in_use(self, join_code: str) -> bool:
        with self._lock:
            return join_code in self._codes

    def delete(self, room_id: str) -> bool:
        with self._lock:
            room = self._rooms.pop(room_id, None)
            if room is None:
                return False
            self._codes.pop(room.join_code, None)
            room.roster.clear()
            return True

    def list(self) -> list[Room]:
        with self._lock:
            return list(self._rooms.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)
