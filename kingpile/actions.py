"""Inbound player actions and their compact text codes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Union

from .cards import Card
from .errors import MalformedAction

__all__ = [
    "KING_PILE",
    "Attack",
    "Place",
    "Reorder",
    "EndPhase",
    "Action",
    "parse_action",
    "action_code",
]

KING_PILE: Final[int] = -1


@dataclass(frozen=True)
class Attack:
    """Attack ``target_player`` with the house pile at ``pile_index``."""

    pile_index: int
    target_player: int


@dataclass(frozen=True)
class Place:
    """Put ``card`` from the hand onto ``pile_index`` (``KING_PILE`` or a house slot)."""

    card: Card
    pile_index: int


@dataclass(frozen=True)
class Reorder:
    """Rearrange the house slots; ``permutation[i]`` is the old slot moved to ``i``."""

    permutation: tuple[int, ...]


@dataclass(frozen=True)
class EndPhase:
    """Close the current optional phase."""


Action = Union[Attack, Place, Reorder, EndPhase]


def _pile_token(pile_index: int) -> str:
    return "k" if pile_index == KING_PILE else str(pile_index + 1)


def _parse_pile_token(token: str) -> int:
    if token.lower() == "k":
        return KING_PILE
    if not token.isdigit() or token == "0":
        raise MalformedAction(f"invalid pile '{token}'")
    return int(token) - 1


def action_code(action: Action) -> str:
    """Render ``action`` as a text code, e.g. ``atck:12`` or ``actp:k7H``."""

    if isinstance(action, Attack):
        return f"atck:{action.pile_index + 1}{action.target_player}"
    if isinstance(action, Place):
        return f"actp:{_pile_token(action.pile_index)}{action.card.code}"
    if isinstance(action, Reorder):
        return "rord:" + "".join(str(index + 1) for index in action.permutation)
    if isinstance(action, EndPhase):
        return "next:"
    raise TypeError(f"unknown action {action!r}")


def parse_action(code: str) -> Action:
    """Parse a text code produced by ``action_code``."""

    text = code.strip()
    if len(text) < 5 or text[4] != ":":
        raise MalformedAction(f"invalid action code '{code}'")
    verb, payload = text[:4].lower(), text[5:]

    if verb == "atck":
        if len(payload) != 2 or not payload.isdigit():
            raise MalformedAction(f"invalid attack code '{code}'")
        return Attack(pile_index=_parse_pile_token(payload[0]), target_player=int(payload[1]))
    if verb == "actp":
        if len(payload) < 3:
            raise MalformedAction(f"invalid placement code '{code}'")
        pile_index = _parse_pile_token(payload[0])
        try:
            card = Card.from_code(payload[1:])
        except ValueError as exc:
            raise MalformedAction(str(exc)) from exc
        return Place(card=card, pile_index=pile_index)
    if verb == "rord":
        if not payload:
            raise MalformedAction(f"invalid reorder code '{code}'")
        return Reorder(permutation=tuple(_parse_pile_token(token) for token in payload))
    if verb == "next":
        if payload:
            raise MalformedAction(f"invalid end-phase code '{code}'")
        return EndPhase()
    raise MalformedAction(f"unknown action verb '{verb}'")
