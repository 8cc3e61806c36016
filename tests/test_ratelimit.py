from __future__ import annotations

import pytest

from impostor.game.errors import RateLimited
from impostor.security.ratelimit import RateLimiter


def test_quota_per_action_and_participant(limiter):
    assert limiter.hit("get_my_role", "p1") == 2
    limiter.hit("get_my_role", "p1")
    limiter.hit("get_my_role", "p1")
    with pytest.raises(RateLimited):
        limiter.hit("get_my_role", "p1")

    # Other participants and other actions have their own counters.
    limiter.hit("get_my_role", "p2")
    limiter.hit("start_round", "p1")


def test_retry_after_reports_remaining_window(limiter, clock):
    for _ in range(3):
        limiter.hit("get_my_role", "p1")
    clock.advance(20)
    with pytest.raises(RateLimited) as exc:
        limiter.hit("get_my_role", "p1")
    assert exc.value.retry_after == 40
    assert exc.value.to_dict()["retryAfter"] == 40


def test_window_expiry_resets_counter(limiter, clock):
    for _ in range(3):
        limiter.hit("get_my_role", "p1")
    clock.advance(60)
    assert limiter.hit("get_my_role", "p1") == 2


def test_sweep_evicts_expired_windows(clock):
    limiter = RateLimiter(limits={}, window_sec=10, default_limit=5, clock=clock)
    limiter.hit("a", "p1")
    limiter.hit("b", "p2")
    clock.advance(5)
    limiter.hit("c", "p3")
    assert len(limiter) == 3

    clock.advance(6)
    assert limiter.sweep() == 2
    assert len(limiter) == 1


def test_sweep_runs_on_its_own_once_per_window(clock):
    limiter = RateLimiter(limits={}, window_sec=10, default_limit=5, clock=clock)
    for i in range(5):
        limiter.hit("a", f"p{i}")
    clock.advance(11)
    limiter.hit("a", "fresh")
    assert len(limiter) == 1
