from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from .words import WordBank


RoomStatus = Literal["waiting", "playing"]
Role = Literal["word_holder", "impostor"]

WORD_HOLDER: Role = "word_holder"
IMPOSTOR: Role = "impostor"


@dataclass
class Participant:
    id: str
    participant_id: str
    display_name: str
    is_host: bool = False
    credential: str = ""
    role: Role | None = None
    assigned_word: str | None = None
    joined_at_ms: int = 0

    def clear_round(self) -> None:
        self.role = None
        self.assigned_word = None


@dataclass
class Room:
    id: str
    join_code: str
    host_id: str
    word_bank: WordBank = field(default_factory=WordBank)
    impostor_count: int = 1
    status: RoomStatus = "waiting"
    # Kept server-side only, never serialised to clients.
    current_word: str | None = None
    round: int = 0
    created_at_ms: int = 0
    roster: dict[str, Participant] = field(default_factory=dict)

    @property
    def host(self) -> Participant | None:
        return self.roster.get(self.host_id)

    def ordered_roster(self) -> list[Participant]:
        # Join order; dicts keep insertion order.
        return list(self.roster.values())


@dataclass(frozen=True)
class RoundAssignment:
    """Roles per slot plus the round word.

    ``words[i]`` is the word handed to slot ``i``: the round word for a
    word holder and ``None`` for an impostor.
    """

    roles: tuple[Role, ...]
    word: str

    @property
    def words(self) -> tuple[str | None, ...]:
        return tuple(self.word if r == WORD_HOLDER else None for r in self.roles)

    @property
    def impostor_count(self) -> int:
        return sum(1 for r in self.roles if r == IMPOSTOR)

    def slot(self, index: int) -> "RoleView":
        role = self.roles[index]
        return RoleView(role=role, word=self.word if role == WORD_HOLDER else None)


@dataclass(frozen=True)
class RoleView:
    role: Role | None
    word: str | None

    def to_dict(self) -> dict:
        return {"role": self.role, "word": self.word}
