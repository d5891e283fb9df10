"""Simulation harness that plays fully automated King Pile games."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Sequence

import numpy as np

from . import scoreboard
from .errors import DeckExhausted
from .game import Game
from .policy import HeuristicPolicy, PlayerPolicy, RandomPolicy, play_automated_turn
from .state import GameConfig

__all__ = [
    "POLICY_NAMES",
    "SimulationConfig",
    "SimulationReport",
    "make_policy",
    "play_game",
    "run_simulation",
]

logger = logging.getLogger(__name__)

POLICY_NAMES = ("heuristic", "random")


def make_policy(name: str, seed: int | None = None) -> PlayerPolicy:
    """Build a policy from its CLI name."""

    if name == "heuristic":
        return HeuristicPolicy()
    if name == "random":
        return RandomPolicy(seed=seed)
    raise ValueError(f"unknown policy '{name}' (expected one of {', '.join(POLICY_NAMES)})")


@dataclass(slots=True)
class SimulationConfig:
    """Parameters of a batch of automated games."""

    games: int = 10
    num_players: int = 4
    seed: int = 123
    turn_limit: int = 400
    policies: Sequence[str] = field(default_factory=lambda: ("heuristic",))

    def __post_init__(self) -> None:
        if self.games <= 0:
            raise ValueError("games must be positive")
        if self.turn_limit <= 0:
            raise ValueError("turn_limit must be positive")
        if not self.policies:
            raise ValueError("at least one policy is required")
        for name in self.policies:
            if name not in POLICY_NAMES:
                raise ValueError(f"unknown policy '{name}'")

    def policy_for(self, seat: int) -> str:
        """Policies are assigned to seats round-robin."""

        return self.policies[seat % len(self.policies)]


@dataclass(frozen=True, slots=True)
class SimulationReport:
    """Outcome of ``run_simulation`` with numpy-backed summary statistics."""

    history: scoreboard.MatchHistory
    turns: np.ndarray
    king_cards: np.ndarray

    @property
    def win_rates(self) -> np.ndarray:
        """Fraction of games won by each seat."""

        wins = np.array([total.wins for total in self.history.totals()], dtype=np.float64)
        return wins / max(len(self.history.games), 1)

    @property
    def mean_turns(self) -> float:
        return float(np.mean(self.turns)) if self.turns.size else 0.0

    @property
    def median_turns(self) -> float:
        return float(np.median(self.turns)) if self.turns.size else 0.0

    @property
    def mean_king_cards(self) -> np.ndarray:
        """Average King pile size per seat at the end of a game."""

        if not self.king_cards.size:
            return np.zeros(self.history.num_players)
        return self.king_cards.mean(axis=0)


def play_game(
    game: Game,
    policies: Sequence[PlayerPolicy],
    turn_limit: int,
) -> bool:
    """Drive ``game`` with one policy per seat until it ends or hits ``turn_limit``.

    Returns ``True`` when the game aborted because the deck ran out.
    """

    if len(policies) != len(game.players):
        raise ValueError("one policy per seat is required")
    try:
        while not game.is_over and game.table.turn_index < turn_limit:
            play_automated_turn(game, policies[game.active_player])
    except DeckExhausted as exc:
        logger.warning("game aborted on turn %d: %s", game.table.turn_index, exc)
        return True
    return False


def run_simulation(
    config: SimulationConfig,
    *,
    on_game: Callable[[scoreboard.GameSummary], None] | None = None,
) -> SimulationReport:
    """Play ``config.games`` automated games and collect their statistics."""

    rng = random.Random(config.seed)
    history = scoreboard.MatchHistory(num_players=config.num_players)
    turns: list[int] = []
    king_cards: list[list[int]] = []

    for game_number in range(1, config.games + 1):
        game_seed = rng.randrange(2**32)
        game = Game(GameConfig(num_players=config.num_players, seed=game_seed))
        policies = [
            make_policy(config.policy_for(seat), seed=game_seed + seat)
            for seat in range(config.num_players)
        ]
        aborted = play_game(game, policies, config.turn_limit)
        summary = scoreboard.summarize_game(game_number, game, aborted=aborted)
        history.record(summary)
        turns.append(summary.turns)
        king_cards.append([entry.king_cards for entry in summary.scores])
        logger.debug(
            "game %d finished after %d turn(s), winner %s",
            game_number,
            summary.turns,
            summary.winner_index,
        )
        if on_game is not None:
            on_game(summary)

    return SimulationReport(
        history=history,
        turns=np.asarray(turns, dtype=np.int64),
        king_cards=np.asarray(king_cards, dtype=np.int64).reshape(len(king_cards), config.num_players),
    )
