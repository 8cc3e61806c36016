from __future__ import annotations

from collections import Counter

import pytest

from impostor.game.errors import InsufficientParticipants, NoWordsAvailable, ValidationError
from impostor.game.local import LocalSession
from impostor.game.models import IMPOSTOR, WORD_HOLDER


@pytest.fixture
def session(rng):
    return LocalSession(player_count=4, impostor_count=1, words=["sol", "luna"], rng=rng)


def test_defaults():
    s = LocalSession()
    assert s.player_count == 4
    assert s.impostor_count == 1
    assert s.phase == "setup"
    assert not s.can_start


def test_word_bank_dedup(session):
    assert not session.add_word(" sol ")
    assert session.add_word("mar")
    assert session.remove_word("luna")
    assert session.words.as_list() == ["sol", "mar"]
    assert session.add_words(["mar", "río", "nube"]) == ["río", "nube"]


def test_player_count_clamps_impostors(session):
    session.set_impostor_count(2)
    session.set_player_count(3)
    assert session.impostor_count == 1
    session.set_player_count(8)
    assert session.impostor_count == 1
    with pytest.raises(ValidationError):
        session.set_player_count(0)


def test_can_start(session):
    assert session.can_start
    session.set_player_count(2)
    assert session.can_start
    session.words.clear()
    assert not session.can_start


def test_two_players_is_enough_offline(rng):
    s = LocalSession(player_count=2, words=["sol"], rng=rng)
    assignment = s.start_round()
    assert Counter(assignment.roles) == {IMPOSTOR: 1, WORD_HOLDER: 1}


def test_start_requires_words_and_players(rng):
    with pytest.raises(NoWordsAvailable):
        LocalSession(player_count=4, rng=rng).start_round()
    with pytest.raises(InsufficientParticipants):
        LocalSession(player_count=1, words=["sol"], rng=rng).start_round()


def test_pass_the_phone_walkthrough(session):
    assignment = session.start_round()
    assert session.phase == "reveal"
    assert session.current_word in {"sol", "luna"}

    seen = []
    done = False
    while not done:
        view = session.current_view()
        seen.append(view)
        done = session.next_player()

    assert session.phase == "playing"
    assert len(seen) == 4
    assert [v.role for v in seen] == list(assignment.roles)
    for v in seen:
        assert v.word == (None if v.role == IMPOSTOR else session.current_word)

    with pytest.raises(ValidationError):
        session.current_view()
    with pytest.raises(ValidationError):
        session.next_player()


def test_new_round_redeals(session):
    session.start_round()
    session.next_player()
    session.new_round()
    assert session.phase == "reveal"
    assert session.current_player_index == 0
    assert len(session.roles) == 4


def test_reset_keeps_words(session):
    session.start_round()
    session.reset()
    assert session.phase == "setup"
    assert session.roles == []
    assert session.current_word is None
    assert session.words.as_list() == ["sol", "luna"]


def test_settings_are_frozen_during_a_round(rng):
    s = LocalSession(player_count=4, words=["sol"], rng=rng)
    s.start_round()

    with pytest.raises(ValidationError) as exc:
        s.set_player_count(6)
    assert exc.value.code == "not_in_setup"
    with pytest.raises(ValidationError):
        s.set_impostor_count(2)
    assert s.player_count == 4

    seen = [s.current_view()]
    while not s.next_player():
        seen.append(s.current_view())
    assert len(seen) == 4
    assert s.phase == "playing"

    s.reset()
    s.set_player_count(6)
    assert len(s.start_round().roles) == 6
