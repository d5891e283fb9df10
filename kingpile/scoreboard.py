"""Helpers for tracking King Pile results across many games."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .game import Game
from .piles import score

__all__ = ["PlayerGameScore", "GameSummary", "PlayerMatchTotal", "MatchHistory", "summarize_game"]


@dataclass(frozen=True, slots=True)
class PlayerGameScore:
    """Board statistics captured for one seat when a game ends."""

    player_index: int
    king_cards: int
    house_strength: int
    hand_cards: int
    won_game: bool


@dataclass(frozen=True, slots=True)
class GameSummary:
    """Summary of a single finished (or capped) game."""

    game_number: int
    winner_index: int | None
    turns: int
    aborted: bool
    scores: Sequence[PlayerGameScore]


@dataclass(frozen=True, slots=True)
class PlayerMatchTotal:
    """Aggregate totals accumulated across all recorded games."""

    player_index: int
    wins: int
    king_cards: int
    house_strength: int


def summarize_game(game_number: int, game: Game, *, aborted: bool = False) -> GameSummary:
    """Capture the end-of-game board of every seat."""

    scores = [
        PlayerGameScore(
            player_index=idx,
            king_cards=len(player.king_pile.cards),
            house_strength=sum(score(pile) for _, pile in player.seeded_piles()),
            hand_cards=len(player.hand),
            won_game=game.winner == idx,
        )
        for idx, player in enumerate(game.players)
    ]
    return GameSummary(
        game_number=game_number,
        winner_index=game.winner,
        turns=game.table.turn_index,
        aborted=aborted,
        scores=scores,
    )


@dataclass(slots=True)
class MatchHistory:
    """Mutable tracker that accumulates game summaries."""

    num_players: int
    games: list[GameSummary] = field(default_factory=list)
    _wins: list[int] = field(init=False, repr=False)
    _king: list[int] = field(init=False, repr=False)
    _strength: list[int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.num_players <= 0:
            raise ValueError("num_players must be positive")
        self._wins = [0 for _ in range(self.num_players)]
        self._king = [0 for _ in range(self.num_players)]
        self._strength = [0 for _ in range(self.num_players)]

    def record(self, summary: GameSummary) -> None:
        """Record ``summary`` and update cumulative totals."""

        if len(summary.scores) != self.num_players:
            raise ValueError("score count does not match number of players")
        self.games.append(summary)
        for entry in summary.scores:
            idx = entry.player_index
            if idx < 0 or idx >= self.num_players:
                raise ValueError("player index out of range")
            self._king[idx] += entry.king_cards
            self._strength[idx] += entry.house_strength
            if entry.won_game:
                self._wins[idx] += 1

    @property
    def undecided(self) -> int:
        """Games that ended without a winner (turn cap or exhausted deck)."""

        return sum(1 for summary in self.games if summary.winner_index is None)

    def totals(self) -> list[PlayerMatchTotal]:
        """Return the cumulative totals for each player in seating order."""

        return [
            PlayerMatchTotal(
                player_index=idx,
                wins=self._wins[idx],
                king_cards=self._king[idx],
                house_strength=self._strength[idx],
            )
            for idx in range(self.num_players)
        ]
