from __future__ import annotations

import random
from typing import Iterable, Literal

from ..config import Config
from .assignment import assign, effective_impostor_count
from .errors import ValidationError
from .models import RoleView, RoundAssignment
from .words import WordBank


LocalPhase = Literal["setup", "reveal", "playing"]


class LocalSession:
    """Pass-the-phone game: every player shares one device in turn."""

    def __init__(
        self,
        player_count: int = 4,
        impostor_count: int = 1,
        words: Iterable[str] | None = None,
        rng: random.Random | None = None,
        min_players: int | None = None,
    ) -> None:
        self.words = WordBank(words)
        self.rng = rng or random.SystemRandom()
        self.min_players = min_players or Config.MIN_OFFLINE_PARTICIPANTS
        self.player_count = 0
        self.impostor_count = impostor_count
        self._clear_round()
        self.set_player_count(player_count)

    def _clear_round(self) -> None:
        self.roles: list[str] = []
        self.current_word: str | None = None
        self.current_player_index = 0
        self.phase: LocalPhase = "setup"
        self._assignment: RoundAssignment | None = None

    @property
    def participant_count(self) -> int:
        return self.player_count

    # -- setup -----------------------------------------------------------

    def add_word(self, word: str) -> bool:
        return self.words.add(word)

    def add_words(self, words: Iterable[str]) -> list[str]:
        return self.words.extend(words)

    def remove_word(self, word: str) -> bool:
        return self.words.remove(word)

    def _require_setup(self) -> None:
        if self.phase != "setup":
            raise ValidationError("Settings can only change before the round", code="not_in_setup")

    def set_player_count(self, count: int) -> None:
        self._require_setup()
        if count < 1:
            raise ValidationError("playerCount must be at least 1", code="invalid_player_count")
        self.player_count = count
        self.impostor_count = min(self.impostor_count, max(1, count // 2))

    def set_impostor_count(self, count: int) -> None:
        self._require_setup()
        if count < 1:
            raise ValidationError("impostorCount must be at least 1", code="invalid_impostor_count")
        self.impostor_count = count

    @property
    def can_start(self) -> bool:
        return (
            len(self.words) > 0
            and self.player_count >= self.min_players
            and 1 <= self.impostor_count < self.player_count
        )

    # -- rounds ----------------------------------------------------------

    def start_round(self) -> RoundAssignment:
        assignment = assign(
            self.player_count,
            self.impostor_count,
            self.words,
            min_participants=self.min_players,
            rng=self.rng,
        )
        self._assignment = assignment
        self.roles = list(assignment.roles)
        self.current_word = assignment.word
        self.current_player_index = 0
        self.phase = "reveal"
        return assignment

    def current_view(self) -> RoleView:
        if self.phase != "reveal" or self._assignment is None:
            raise ValidationError("No role to reveal right now", code="not_revealing")
        return self._assignment.slot(self.current_player_index)

    def next_player(self) -> bool:
        """Hand the device on; returns True once every player has seen a role."""
        if self.phase != "reveal":
            raise ValidationError("No role to reveal right now", code="not_revealing")
        if self.current_player_index + 1 >= len(self.roles):
            self.phase = "playing"
            return True
        self.current_player_index += 1
        return False

    def new_round(self) -> None:
        self.start_round()

    def reset(self) -> None:
        # Words survive a reset so they can be reused.
        self._clear_round()

    @property
    def effective_impostor_count(self) -> int:
        return effective_impostor_count(self.player_count, self.impostor_count)
