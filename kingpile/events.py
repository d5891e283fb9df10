"""Outbound events emitted after every state change."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .actions import KING_PILE
from .attack import Side
from .cards import Card

__all__ = [
    "CardsDealt",
    "AttackResolved",
    "CardPlaced",
    "PilesReordered",
    "HandDiscarded",
    "TurnAdvanced",
    "GameWon",
    "GameAborted",
    "Event",
    "describe_event",
]


@dataclass(frozen=True, slots=True)
class CardsDealt:
    player: int
    cards: tuple[Card, ...]
    recycled: bool = False


@dataclass(frozen=True, slots=True)
class AttackResolved:
    attacker: int
    attacking_slot: int
    defender: int
    defending_slot: int
    winner: Side
    attack_score: int
    defence_score: int
    transferred_cards: tuple[Card, ...]

    @property
    def winning_player(self) -> int:
        return self.attacker if self.winner is Side.ATTACKER else self.defender


@dataclass(frozen=True, slots=True)
class CardPlaced:
    player: int
    card: Card
    pile_index: int
    seeded: bool = False


@dataclass(frozen=True, slots=True)
class PilesReordered:
    player: int
    permutation: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class HandDiscarded:
    player: int
    cards: tuple[Card, ...]


@dataclass(frozen=True, slots=True)
class TurnAdvanced:
    player: int
    turn_index: int


@dataclass(frozen=True, slots=True)
class GameWon:
    player: int


@dataclass(frozen=True, slots=True)
class GameAborted:
    reason: str


Event = Union[
    CardsDealt,
    AttackResolved,
    CardPlaced,
    PilesReordered,
    HandDiscarded,
    TurnAdvanced,
    GameWon,
    GameAborted,
]


def _pile_name(pile_index: int) -> str:
    return "king pile" if pile_index == KING_PILE else f"house {pile_index + 1}"


def describe_event(event: Event) -> str:
    """Return a one-line plain-text description used by logs and the CLI."""

    if isinstance(event, CardsDealt):
        suffix = " after recycling the discard" if event.recycled else ""
        return f"P{event.player} is dealt {len(event.cards)} card(s){suffix}"
    if isinstance(event, AttackResolved):
        outcome = "wins" if event.winner is Side.ATTACKER else "is repelled"
        return (
            f"P{event.attacker} attacks P{event.defender} "
            f"({event.attack_score} vs {event.defence_score}) and {outcome}; "
            f"{len(event.transferred_cards)} card(s) to P{event.winning_player}"
        )
    if isinstance(event, CardPlaced):
        verb = "seeds" if event.seeded else "places"
        return f"P{event.player} {verb} {event.card.code} on {_pile_name(event.pile_index)}"
    if isinstance(event, PilesReordered):
        order = ",".join(str(index + 1) for index in event.permutation)
        return f"P{event.player} reorders house piles to {order}"
    if isinstance(event, HandDiscarded):
        return f"P{event.player} discards {len(event.cards)} card(s)"
    if isinstance(event, TurnAdvanced):
        return f"Turn {event.turn_index}: P{event.player} to act"
    if isinstance(event, GameWon):
        return f"P{event.player} completes their King pile and wins"
    if isinstance(event, GameAborted):
        return f"Game aborted: {event.reason}"
    raise TypeError(f"unknown event {event!r}")
