from __future__ import annotations

import logging
import random
import secrets
import time
import uuid
from typing import Callable

from ..config import Config
from ..security.credentials import issue_credential, issue_participant_id, issue_room_id
from ..security.validation import JOIN_CODE_ALPHABET, clean_name, normalize_join_code
from .assignment import assign
from .errors import (
    NotHost,
    ParticipantNotFound,
    RoomAlreadyPlaying,
    RoomFull,
    RoomNotFound,
    ValidationError,
)
from .models import Participant, RoleView, Room, RoundAssignment
from .store import RoomStore
from .words import WordBank


logger = logging.getLogger(__name__)

Notifier = Callable[[str, str, dict], None]


def now_ms() -> int:
    return int(time.time() * 1000)


def _no_notify(room_id: str, event: str, payload: dict) -> None:
    return None


def generate_join_code(length: int | None = None) -> str:
    n = length or Config.JOIN_CODE_LENGTH
    return "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(n))


class RoomService:
    def __init__(
        self,
        store: RoomStore | None = None,
        rng: random.Random | None = None,
        notifier: Notifier | None = None,
        min_participants: int | None = None,
        max_participants: int | None = None,
    ) -> None:
        self.store = store or RoomStore()
        self.rng = rng or random.SystemRandom()
        self.notifier = notifier or _no_notify
        self.min_participants = min_participants or Config.MIN_ONLINE_PARTICIPANTS
        self.max_participants = max_participants or Config.MAX_PARTICIPANTS

    # -- notifications -------------------------------------------------

    def _publish(self, room_id: str, event: str, payload: dict | None = None) -> None:
        try:
            self.notifier(room_id, event, payload or {"roomId": room_id})
        except Exception:
            # Push is best effort; clients re-fetch on reconnect.
            logger.exception("Failed to publish %s for room %s", event, room_id)

    def _publish_state(self, room_id: str) -> None:
        room = self.store.get(room_id)
        if room is not None:
            self._publish(room_id, "room:state", self.room_public_state(room))

    def _publish_roster(self, room_id: str) -> None:
        with self.store.locked():
            room = self.store.get(room_id)
            if room is None:
                return
            players = [self._public_participant(p) for p in room.ordered_roster()]
        self._publish(room_id, "room:players", {"roomId": room_id, "players": players})
        self._publish_state(room_id)

    # -- guards --------------------------------------------------------

    @staticmethod
    def _check_impostor_count(value) -> int:
        try:
            count = int(value)
        except (TypeError, ValueError):
            count = 0
        if isinstance(value, bool) or count < 1:
            raise ValidationError("impostorCount must be at least 1", code="invalid_impostor_count")
        return count

    @staticmethod
    def _require_host(room: Room, actor_id: str) -> None:
        if actor_id != room.host_id:
            logger.warning("Host-only action refused: room=%s participant=%s", room.id, actor_id)
            raise NotHost()

    @staticmethod
    def _require_waiting(room: Room) -> None:
        if room.status != "waiting":
            raise RoomAlreadyPlaying()

    def require_host(self, room_id: str, actor_id: str) -> None:
        with self.store.atomic(room_id) as room:
            self._require_host(room, actor_id)

    # -- lookups -------------------------------------------------------

    def get_room(self, room_id: str) -> Room:
        room = self.store.get(room_id)
        if room is None:
            raise RoomNotFound()
        return room

    def find_room_by_code(self, join_code: str) -> Room:
        room = self.store.get_by_code(normalize_join_code(join_code))
        if room is None:
            raise RoomNotFound()
        return room

    def find_participant(self, room_id: str, participant_id: str) -> Participant | None:
        with self.store.locked():
            room = self.store.get(room_id)
            if room is None:
                return None
            return room.roster.get(participant_id)

    # -- lifecycle -----------------------------------------------------

    def create_room(self, host_name: str, participant_id: str | None = None) -> tuple[Room, Participant]:
        name = clean_name(host_name)
        pid = participant_id or issue_participant_id()

        with self.store.locked():
            code = generate_join_code()
            while self.store.code_in_use(code):
                code = generate_join_code()

            created = now_ms()
            room = Room(
                id=issue_room_id(),
                join_code=code,
                host_id=pid,
                created_at_ms=created,
            )
            host = Participant(
                id=uuid.uuid4().hex,
                participant_id=pid,
                display_name=name,
                is_host=True,
                credential=issue_credential(),
                joined_at_ms=created,
            )
            room.roster[pid] = host
            self.store.insert(room)

        logger.info("Room %s created (code %s)", room.id, room.join_code)
        return room, host

    def join_room(
        self, join_code: str, display_name: str, participant_id: str | None = None
    ) -> tuple[Room, Participant]:
        room = self.find_room_by_code(join_code)
        participant = self.register_participant(room.id, participant_id or issue_participant_id(), display_name)
        return room, participant

    def register_participant(self, room_id: str, participant_id: str, display_name: str) -> Participant:
        name = clean_name(display_name)

        with self.store.atomic(room_id) as room:
            existing = room.roster.get(participant_id)
            if existing is not None:
                # Reconnect: same record, same credential.
                return existing

            self._require_waiting(room)
            if len(room.roster) >= self.max_participants:
                raise RoomFull()

            participant = Participant(
                id=uuid.uuid4().hex,
                participant_id=participant_id,
                display_name=name,
                is_host=False,
                credential=issue_credential(),
                joined_at_ms=now_ms(),
            )
            room.roster[participant_id] = participant

        logger.info("Participant %s joined room %s", participant.id, room_id)
        self._publish_roster(room_id)
        return participant

    def leave_room(self, room_id: str, participant_id: str) -> bool:
        """Remove a participant; returns True when the room was destroyed."""
        with self.store.atomic(room_id) as room:
            participant = room.roster.get(participant_id)
            if participant is None:
                raise ParticipantNotFound()

            if participant_id == room.host_id:
                self.store.delete(room_id)
                deleted = True
            else:
                del room.roster[participant_id]
                deleted = False

        if deleted:
            logger.info("Host left, room %s deleted", room_id)
            self._publish(room_id, "room:deleted")
        else:
            logger.info("Participant %s left room %s", participant.id, room_id)
            self._publish_roster(room_id)
        return deleted

    def delete_room(self, room_id: str, actor_id: str) -> None:
        with self.store.atomic(room_id) as room:
            self._require_host(room, actor_id)
            self.store.delete(room_id)

        logger.info("Room %s deleted by host", room_id)
        self._publish(room_id, "room:deleted")

    # -- configuration (host only, waiting only) -------------------------

    def set_word_bank(self, room_id: str, actor_id: str, words: list[str]) -> list[str]:
        return self.update_room(room_id, actor_id, words=words)["words"]

    def add_word(self, room_id: str, actor_id: str, word: str) -> bool:
        with self.store.atomic(room_id) as room:
            self._require_host(room, actor_id)
            self._require_waiting(room)
            added = room.word_bank.add(word)

        if added:
            self._publish_state(room_id)
        return added

    def remove_word(self, room_id: str, actor_id: str, word: str) -> bool:
        with self.store.atomic(room_id) as room:
            self._require_host(room, actor_id)
            self._require_waiting(room)
            removed = room.word_bank.remove(word)

        if removed:
            self._publish_state(room_id)
        return removed

    def set_impostor_count(self, room_id: str, actor_id: str, count: int) -> int:
        return self.update_room(room_id, actor_id, impostor_count=count)["impostorCount"]

    def update_room(
        self,
        room_id: str,
        actor_id: str,
        words: list[str] | None = None,
        impostor_count: int | None = None,
    ) -> dict:
        with self.store.atomic(room_id) as room:
            self._require_host(room, actor_id)
            self._require_waiting(room)

            # Build everything before touching the room.
            bank = WordBank(words) if words is not None else room.word_bank
            count = room.impostor_count
            if impostor_count is not None:
                count = self._check_impostor_count(impostor_count)

            room.word_bank = bank
            room.impostor_count = count
            result = {"words": bank.as_list(), "impostorCount": count}

        self._publish_state(room_id)
        return result

    # -- rounds ----------------------------------------------------------

    def start_round(
        self,
        room_id: str,
        actor_id: str,
        words: list[str] | None = None,
        impostor_count: int | None = None,
    ) -> RoundAssignment:
        with self.store.atomic(room_id) as room:
            self._require_host(room, actor_id)
            self._require_waiting(room)

            bank = WordBank(words) if words is not None else room.word_bank
            count = room.impostor_count if impostor_count is None else self._check_impostor_count(impostor_count)

            players = room.ordered_roster()
            assignment = assign(
                len(players),
                count,
                bank,
                min_participants=self.min_participants,
                rng=self.rng,
            )

            # Nothing above writes; from here on the round is applied in full.
            room.word_bank = bank
            room.impostor_count = count
            for index, participant in enumerate(players):
                view = assignment.slot(index)
                participant.role = view.role
                participant.assigned_word = view.word
            room.current_word = assignment.word
            room.status = "playing"
            room.round += 1
            round_no = room.round

        logger.info(
            "Round %d started in room %s (%d players, %d impostors)",
            round_no,
            room_id,
            len(assignment.roles),
            assignment.impostor_count,
        )
        self._publish(room_id, "round:started", {"roomId": room_id, "round": round_no})
        self._publish_state(room_id)
        return assignment

    def new_round(self, room_id: str, actor_id: str) -> bool:
        """Return the room to ``waiting``; False when it already was."""
        with self.store.atomic(room_id) as room:
            self._require_host(room, actor_id)
            if room.status == "waiting":
                return False
            for participant in room.roster.values():
                participant.clear_round()
            room.current_word = None
            room.status = "waiting"

        logger.info("Room %s reset for a new round", room_id)
        self._publish(room_id, "round:reset")
        self._publish_state(room_id)
        return True

    # -- reads -----------------------------------------------------------

    def get_my_role(self, room_id: str, participant_id: str) -> RoleView:
        with self.store.atomic(room_id) as room:
            participant = room.roster.get(participant_id)
            if participant is None:
                raise ParticipantNotFound()
            return RoleView(role=participant.role, word=participant.assigned_word)

    def get_players(self, room_id: str) -> list[dict]:
        with self.store.atomic(room_id) as room:
            return [self._public_participant(p) for p in room.ordered_roster()]

    def get_room_state(self, room_id: str, viewer_id: str | None = None) -> dict:
        with self.store.atomic(room_id) as room:
            return self.room_public_state(room, viewer_id=viewer_id)

    @staticmethod
    def _public_participant(p: Participant) -> dict:
        # Do NOT expose credential, participant id or the assigned word.
        return {
            "id": p.id,
            "displayName": p.display_name,
            "isHost": p.is_host,
            "hasRole": p.role is not None,
        }

    def room_public_state(self, room: Room, viewer_id: str | None = None) -> dict:
        with self.store.locked():
            payload = {
                "roomId": room.id,
                "joinCode": room.join_code,
                "status": room.status,
                "round": room.round,
                "impostorCount": room.impostor_count,
                "wordCount": len(room.word_bank),
                "minPlayers": self.min_participants,
                "maxPlayers": self.max_participants,
                "players": [self._public_participant(p) for p in room.ordered_roster()],
            }

            viewer = room.roster.get(viewer_id) if viewer_id else None
            if viewer is not None:
                payload["me"] = viewer.id
                payload["isHost"] = viewer.participant_id == room.host_id
                # The candidate list would narrow an impostor's guess.
                if payload["isHost"]:
                    payload["words"] = room.word_bank.as_list()

            return payload
