"""Pure attack resolution between two house piles."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from .cards import Card
from .piles import Pile, score

__all__ = ["Side", "AttackOutcome", "find_defending_pile", "resolve_attack"]


class Side(str, Enum):
    ATTACKER = "attacker"
    DEFENDER = "defender"


@dataclass(frozen=True, slots=True)
class AttackOutcome:
    """Result of comparing an attacking pile with a defending pile.

    ``transferred`` lists the number cards that move into the winner's hand;
    it is empty when the defender holds on a tie.
    """

    winner: Side
    attack_score: int
    defence_score: int
    transferred: tuple[Card, ...]

    @property
    def is_tie(self) -> bool:
        return self.attack_score == self.defence_score


def find_defending_pile(slots: Sequence[Pile | None]) -> int | None:
    """Return the index of the first seeded slot, closest to the King pile first.

    A pile holding only its special card is still a valid defender.
    """

    for index, pile in enumerate(slots):
        if pile is not None:
            return index
    return None


def resolve_attack(attacking: Pile, defending: Pile) -> AttackOutcome:
    """Compare the two piles without mutating either of them."""

    attack_score = score(attacking)
    defence_score = score(defending)
    if attack_score > defence_score:
        return AttackOutcome(Side.ATTACKER, attack_score, defence_score, tuple(defending.cards))
    if attack_score < defence_score:
        return AttackOutcome(Side.DEFENDER, attack_score, defence_score, tuple(attacking.cards))
    return AttackOutcome(Side.DEFENDER, attack_score, defence_score, ())
