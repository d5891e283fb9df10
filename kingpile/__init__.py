"""Top-level package for the King Pile game engine."""

from . import actions, attack, cards, deck, errors, events, game, piles, rules, state
from .game import Game
from .state import GameConfig

__all__ = [
    "actions",
    "attack",
    "cards",
    "deck",
    "errors",
    "events",
    "game",
    "piles",
    "rules",
    "state",
    "Game",
    "GameConfig",
]
