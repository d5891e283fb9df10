from __future__ import annotations

import pytest

from kingpile import scoreboard
from kingpile.game import Game
from kingpile.state import GameConfig


def _score(player_index: int, king: int, strength: int, won: bool) -> scoreboard.PlayerGameScore:
    return scoreboard.PlayerGameScore(
        player_index=player_index,
        king_cards=king,
        house_strength=strength,
        hand_cards=0,
        won_game=won,
    )


def test_match_history_accumulates_totals() -> None:
    history = scoreboard.MatchHistory(num_players=2)
    history.record(
        scoreboard.GameSummary(
            game_number=1,
            winner_index=0,
            turns=40,
            aborted=False,
            scores=[_score(0, king=9, strength=4, won=True), _score(1, king=3, strength=6, won=False)],
        )
    )
    history.record(
        scoreboard.GameSummary(
            game_number=2,
            winner_index=None,
            turns=400,
            aborted=False,
            scores=[_score(0, king=5, strength=1, won=False), _score(1, king=6, strength=2, won=False)],
        )
    )

    totals = history.totals()
    assert len(history.games) == 2
    assert history.undecided == 1
    assert totals[0].wins == 1
    assert totals[1].wins == 0
    assert totals[0].king_cards == 14
    assert totals[1].king_cards == 9
    assert totals[1].house_strength == 8


def test_match_history_validates_player_count() -> None:
    history = scoreboard.MatchHistory(num_players=2)
    summary = scoreboard.GameSummary(
        game_number=1,
        winner_index=0,
        turns=1,
        aborted=False,
        scores=[_score(0, king=0, strength=0, won=True)],
    )
    with pytest.raises(ValueError):
        history.record(summary)


def test_summarize_game_reads_the_board() -> None:
    game = Game(GameConfig(seed=3))

    summary = scoreboard.summarize_game(1, game)

    assert summary.winner_index is None
    assert summary.turns == 0
    assert [entry.hand_cards for entry in summary.scores] == [5, 0, 0, 0]
    assert not any(entry.won_game for entry in summary.scores)
