"""Tests for the in-memory session registry."""

from __future__ import annotations

import threading

import pytest

from kingpile.actions import EndPhase
from kingpile.events import Event
from kingpile.sessions import SessionError, SessionRegistry
from kingpile.state import GameConfig, TurnPhase


def test_create_session_returns_hex_id() -> None:
    registry = SessionRegistry()

    session_id = registry.create_session(1)

    assert len(session_id) == 16
    int(session_id, 16)
    assert registry.session_ids() == [session_id]
    assert not registry.get_session(session_id).started


@pytest.mark.parametrize("humans", [0, 5])
def test_create_session_validates_human_count(humans: int) -> None:
    with pytest.raises(SessionError):
        SessionRegistry().create_session(humans)


def test_joining_last_seat_starts_game_and_runs_automated_seats() -> None:
    registry = SessionRegistry(GameConfig(seed=5))
    session_id = registry.create_session(1)

    token = registry.join_session(session_id)

    session = registry.get_session(session_id)
    assert token.startswith("3:")
    assert session.started
    assert session.game.active_player == 3
    assert session.game.phase is TurnPhase.ATTACKING
    assert session.game.table.turn_index == 3
    with pytest.raises(SessionError):
        registry.join_session(session_id)


def test_submit_routes_action_codes_to_the_seat() -> None:
    registry = SessionRegistry(GameConfig(seed=5))
    session_id = registry.create_session(1)
    token = registry.join_session(session_id)

    registry.submit(session_id, token, "next:")

    game = registry.get_session(session_id).game
    assert game.phase is TurnPhase.BUILDING
    assert registry.view(session_id, token).player_index == 3


def test_finishing_human_turn_lets_automated_seats_play() -> None:
    registry = SessionRegistry(GameConfig(seed=8))
    session_id = registry.create_session(1)
    token = registry.join_session(session_id)
    seen: list[Event] = []
    registry.subscribe(session_id, seen.append)

    for _ in range(3):
        registry.submit(session_id, token, EndPhase())

    game = registry.get_session(session_id).game
    assert game.is_over or game.active_player == 3
    assert seen


def test_submit_validates_session_state() -> None:
    registry = SessionRegistry()
    session_id = registry.create_session(2)
    token = registry.join_session(session_id)

    with pytest.raises(SessionError):
        registry.submit(session_id, token, EndPhase())
    with pytest.raises(SessionError):
        registry.submit("deadbeef", token, EndPhase())

    registry.join_session(session_id)
    with pytest.raises(SessionError):
        registry.submit(session_id, "0:bogus", EndPhase())


def test_test_game_runs_up_to_turn_cap() -> None:
    registry = SessionRegistry(max_automated_turns=5)

    session_id = registry.add_test_game(seed=1)

    game = registry.get_session(session_id).game
    assert game.is_over or game.table.turn_index == 5
    registry.advance(session_id)
    assert game.is_over or game.table.turn_index == 10

    registry.remove_session(session_id)
    with pytest.raises(SessionError):
        registry.get_session(session_id)


def test_concurrent_joins_get_distinct_seats() -> None:
    registry = SessionRegistry(GameConfig(seed=2))
    session_id = registry.create_session(4)
    tokens: list[str] = []

    def join() -> None:
        tokens.append(registry.join_session(session_id))

    threads = [threading.Thread(target=join) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(token.split(":")[0] for token in tokens) == ["0", "1", "2", "3"]
    assert registry.get_session(session_id).started


def test_caller_supplied_ids_are_case_insensitive() -> None:
    registry = SessionRegistry(max_automated_turns=1)

    session_id = registry.add_test_game("AB12CD", seed=3)

    assert session_id == "ab12cd"
    assert registry.get_session("AB12CD") is registry.get_session("ab12cd")
    with pytest.raises(SessionError):
        registry.add_test_game("ab12CD")
    registry.remove_session("Ab12Cd")
    assert len(registry) == 0


def test_prune_sessions_drops_old_sessions() -> None:
    registry = SessionRegistry()
    old_id = registry.create_session(1)
    new_id = registry.create_session(1)
    registry.get_session(old_id).created_at = 100.0
    registry.get_session(new_id).created_at = 250.0

    assert registry.prune_sessions(60.0, now=200.0) == [old_id]
    assert registry.session_ids() == [new_id]
    with pytest.raises(ValueError):
        registry.prune_sessions(-1.0)
