"""Tests for saving and restoring games."""

from __future__ import annotations

import pytest

from kingpile import persistence
from kingpile.game import Game
from kingpile.policy import HeuristicPolicy, play_automated_turn
from kingpile.state import GameConfig


def _played_game(turns: int) -> Game:
    game = Game(GameConfig(seed=21))
    policy = HeuristicPolicy()
    for _ in range(turns):
        play_automated_turn(game, policy)
    return game


def test_round_trip_restores_full_state() -> None:
    game = _played_game(6)

    restored = persistence.load_game(persistence.dump_game(game))

    assert restored.state == game.state
    assert restored.card_count() == 96
    assert restored.rng.getstate() == game.rng.getstate()


def test_restored_game_continues_identically() -> None:
    game = _played_game(4)
    restored = persistence.game_from_dict(persistence.game_to_dict(game))
    policy = HeuristicPolicy()

    for _ in range(20):
        if game.is_over:
            break
        play_automated_turn(game, policy)
        play_automated_turn(restored, policy)

    assert persistence.game_to_dict(restored) == persistence.game_to_dict(game)


def test_snapshot_records_schema_version() -> None:
    data = persistence.game_to_dict(Game(GameConfig(seed=1)))

    assert data["schema_version"] == persistence.SCHEMA_VERSION
    assert data["table"]["phase"] == "attacking"
    assert len(data["players"]) == 4


def test_unknown_schema_version_is_rejected() -> None:
    data = persistence.game_to_dict(Game(GameConfig(seed=1)))
    data["schema_version"] = 99

    with pytest.raises(ValueError):
        persistence.game_from_dict(data)


def test_snapshot_with_missing_cards_is_rejected() -> None:
    data = persistence.game_to_dict(Game(GameConfig(seed=1)))
    data["table"]["stock"].pop()

    with pytest.raises(ValueError):
        persistence.game_from_dict(data)
