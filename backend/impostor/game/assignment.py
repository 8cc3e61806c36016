from __future__ import annotations

import random
from typing import Iterable

from ..config import Config
from .errors import InsufficientParticipants, NoWordsAvailable
from .models import IMPOSTOR, WORD_HOLDER, Role, RoundAssignment


MIN_OFFLINE_PARTICIPANTS = Config.MIN_OFFLINE_PARTICIPANTS
MIN_ONLINE_PARTICIPANTS = Config.MIN_ONLINE_PARTICIPANTS

_system_rng = random.SystemRandom()


def effective_impostor_count(participant_count: int, requested: int) -> int:
    """Cap the request at half the table, never below one."""
    return max(1, min(int(requested), participant_count // 2))


def _pick_impostor_slots(participant_count: int, count: int, rng: random.Random) -> set[int]:
    slots: set[int] = set()
    while len(slots) < count:
        slots.add(rng.randrange(participant_count))
    return slots


def _shuffle(roles: list[Role], rng: random.Random) -> None:
    # Fisher-Yates; slot indices map onto a stable roster order on the caller side.
    for i in range(len(roles) - 1, 0, -1):
        j = rng.randint(0, i)
        roles[i], roles[j] = roles[j], roles[i]


def assign(
    participant_count: int,
    requested_impostor_count: int,
    words: Iterable[str],
    *,
    min_participants: int = MIN_ONLINE_PARTICIPANTS,
    rng: random.Random | None = None,
) -> RoundAssignment:
    rng = rng or _system_rng

    pool = list(words)
    if not pool:
        raise NoWordsAvailable()
    if participant_count < max(min_participants, 2):
        raise InsufficientParticipants(max(min_participants, 2))

    word = rng.choice(pool)
    impostors = _pick_impostor_slots(
        participant_count,
        effective_impostor_count(participant_count, requested_impostor_count),
        rng,
    )

    roles: list[Role] = [IMPOSTOR if i in impostors else WORD_HOLDER for i in range(participant_count)]
    _shuffle(roles, rng)

    return RoundAssignment(roles=tuple(roles), word=word)
