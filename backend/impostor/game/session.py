from __future__ import annotations

from typing import Literal, Protocol, runtime_checkable

from .errors import RoomNotFound
from .models import RoleView, RoundAssignment
from .service import RoomService


RemotePhase = Literal["lobby", "waiting", "role_reveal", "playing", "closed"]


@runtime_checkable
class RoundController(Protocol):
    """What both the single-device and the networked game offer."""

    @property
    def participant_count(self) -> int: ...

    @property
    def phase(self) -> str: ...

    def add_word(self, word: str) -> bool: ...

    def remove_word(self, word: str) -> bool: ...

    def set_impostor_count(self, count: int) -> None: ...

    def start_round(self) -> RoundAssignment: ...

    def new_round(self) -> None: ...


class RemoteRoom:
    """One participant's handle on a shared room.

    Room-level state lives in the :class:`RoomService`; the reveal sub-state
    (``role_reveal`` until :meth:`confirm_role`) is tracked here only.
    """

    def __init__(self, service: RoomService, participant_id: str) -> None:
        self.service = service
        self.participant_id = participant_id
        self.room_id: str | None = None
        self.join_code: str | None = None
        self.credential: str | None = None
        self._phase: RemotePhase = "lobby"
        self._seen_round = 0

    @classmethod
    def create(cls, service: RoomService, host_name: str, participant_id: str | None = None) -> "RemoteRoom":
        room, host = service.create_room(host_name, participant_id=participant_id)
        handle = cls(service, host.participant_id)
        handle._attach(room.id, room.join_code, host.credential, room.round)
        return handle

    @classmethod
    def join(
        cls,
        service: RoomService,
        join_code: str,
        display_name: str,
        participant_id: str | None = None,
    ) -> "RemoteRoom":
        room, participant = service.join_room(join_code, display_name, participant_id=participant_id)
        handle = cls(service, participant.participant_id)
        handle._attach(room.id, room.join_code, participant.credential, room.round)
        handle.refresh()
        return handle

    def _attach(self, room_id: str, join_code: str, credential: str, round_no: int) -> None:
        self.room_id = room_id
        self.join_code = join_code
        self.credential = credential
        self._seen_round = round_no
        self._phase = "waiting"

    def _require_room(self) -> str:
        if self.room_id is None:
            raise RoomNotFound()
        return self.room_id

    @property
    def phase(self) -> RemotePhase:
        return self._phase

    @property
    def participant_count(self) -> int:
        return len(self.service.get_players(self._require_room()))

    @property
    def is_host(self) -> bool:
        room = self.service.get_room(self._require_room())
        return room.host_id == self.participant_id

    # -- host configuration ------------------------------------------------

    def add_word(self, word: str) -> bool:
        return self.service.add_word(self._require_room(), self.participant_id, word)

    def remove_word(self, word: str) -> bool:
        return self.service.remove_word(self._require_room(), self.participant_id, word)

    def set_impostor_count(self, count: int) -> None:
        self.service.set_impostor_count(self._require_room(), self.participant_id, count)

    # -- rounds ------------------------------------------------------------

    def start_round(self) -> RoundAssignment:
        room_id = self._require_room()
        assignment = self.service.start_round(room_id, self.participant_id)
        self._seen_round = self.service.get_room(room_id).round
        self._phase = "role_reveal"
        return assignment

    def new_round(self) -> None:
        self.service.new_round(self._require_room(), self.participant_id)
        self._phase = "waiting"

    def my_role(self) -> RoleView:
        return self.service.get_my_role(self._require_room(), self.participant_id)

    def confirm_role(self) -> None:
        if self._phase == "role_reveal":
            self._phase = "playing"

    def refresh(self) -> RemotePhase:
        """Re-read room status, e.g. after a missed notification."""
        if self.room_id is None:
            return self._phase
        try:
            room = self.service.get_room(self.room_id)
        except RoomNotFound:
            self._phase = "closed"
            return self._phase

        if room.status == "waiting":
            self._phase = "waiting"
        elif self._phase == "waiting" or room.round != self._seen_round:
            # A round we have not revealed yet, possibly after a missed reset.
            self._phase = "role_reveal"
        self._seen_round = room.round
        return self._phase

    def leave(self) -> None:
        self.service.leave_room(self._require_room(), self.participant_id)
        self.room_id = None
        self.join_code = None
        self.credential = None
        self._phase = "lobby"
