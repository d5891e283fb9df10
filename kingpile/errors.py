"""Exceptions raised by the King Pile rules engine."""

from __future__ import annotations

__all__ = [
    "GameRuleError",
    "InvalidPlacement",
    "OutOfPhaseAction",
    "GameFinished",
    "IllegalAttackTarget",
    "DeckExhausted",
    "MalformedAction",
]


class GameRuleError(RuntimeError):
    """Base class for every rejected action or broken game invariant."""


class InvalidPlacement(GameRuleError):
    """Raised when a card does not fit the pile it was placed on."""


class OutOfPhaseAction(GameRuleError):
    """Raised for actions submitted in the wrong phase or by a non-active player."""


class GameFinished(OutOfPhaseAction):
    """Raised for any action submitted after the game has ended."""


class IllegalAttackTarget(GameRuleError):
    """Raised when an attack names an unusable attacking pile or target."""


class DeckExhausted(GameRuleError):
    """Raised when stock and discard are both empty during a required draw.

    ``drawn`` holds the cards already taken before the piles ran out, so the
    caller can hand them out and keep every card accounted for.
    """

    def __init__(self, message: str, drawn: list | None = None) -> None:
        super().__init__(message)
        self.drawn = list(drawn or [])
        self.events: list = []


class MalformedAction(GameRuleError, ValueError):
    """Raised for protocol errors such as unknown pile indices or card codes."""
