from __future__ import annotations

from collections import Counter

import pytest

from impostor.game.errors import NoWordsAvailable, NotHost, RoomNotFound
from impostor.game.local import LocalSession
from impostor.game.models import IMPOSTOR, WORD_HOLDER
from impostor.game.session import RemoteRoom, RoundController


def _local(rng, service):
    return LocalSession(player_count=4, rng=rng)


def _remote(rng, service):
    host = RemoteRoom.create(service, "Ana")
    for name in ("Bea", "Caro", "Dani"):
        RemoteRoom.join(service, host.join_code, name)
    return host


@pytest.fixture(params=[_local, _remote], ids=["local", "remote"])
def controller(request, rng, service):
    return request.param(rng, service)


def test_both_variants_satisfy_the_contract(controller):
    assert isinstance(controller, RoundController)
    assert controller.participant_count == 4


def test_round_rules_hold_for_both_variants(controller):
    with pytest.raises(NoWordsAvailable):
        controller.start_round()

    controller.add_word("sol")
    controller.add_word("luna")
    controller.set_impostor_count(5)

    for _ in range(20):
        assignment = controller.start_round()
        counts = Counter(assignment.roles)
        assert counts[IMPOSTOR] == 2
        assert counts[WORD_HOLDER] == 2
        assert assignment.word in {"sol", "luna"}
        assert all(w is None for r, w in zip(assignment.roles, assignment.words) if r == IMPOSTOR)
        controller.new_round()
        if isinstance(controller, LocalSession):
            controller.reset()


def test_remote_participant_phases(service):
    host = RemoteRoom.create(service, "Ana")
    bea = RemoteRoom.join(service, host.join_code, "Bea")
    caro = RemoteRoom.join(service, host.join_code, "Caro")
    assert host.is_host and not bea.is_host
    assert bea.phase == "waiting"

    host.add_word("sol")
    host.start_round()
    assert host.phase == "role_reveal"

    # Guests learn about the round on their next refresh.
    assert bea.phase == "waiting"
    assert bea.refresh() == "role_reveal"
    bea.confirm_role()
    assert bea.phase == "playing"
    # Confirming is local bookkeeping only.
    assert service.get_room(host.room_id).status == "playing"

    view = caro.my_role()
    assert view == caro.my_role()
    assert (view.word is None) == (view.role == IMPOSTOR)

    with pytest.raises(NotHost):
        bea.new_round()

    host.new_round()
    assert bea.refresh() == "waiting"


def test_remote_leave_and_close(service):
    host = RemoteRoom.create(service, "Ana")
    bea = RemoteRoom.join(service, host.join_code, "Bea")

    bea.leave()
    assert bea.phase == "lobby"
    assert bea.room_id is None
    with pytest.raises(RoomNotFound):
        bea.add_word("sol")

    caro = RemoteRoom.join(service, host.join_code, "Caro")
    host.leave()
    assert caro.refresh() == "closed"


def test_remote_refresh_catches_a_missed_reset(service):
    host = RemoteRoom.create(service, "Ana")
    bea = RemoteRoom.join(service, host.join_code, "Bea")
    RemoteRoom.join(service, host.join_code, "Caro")
    host.add_word("sol")

    host.start_round()
    assert bea.refresh() == "role_reveal"
    bea.confirm_role()
    assert bea.refresh() == "playing"

    # Bea misses both the reset and the next start.
    host.new_round()
    host.start_round()
    assert bea.refresh() == "role_reveal"
    bea.confirm_role()
    assert bea.phase == "playing"
