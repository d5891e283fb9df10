"""Pile archetypes with their acceptance predicates and scoring rules."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Final, Sequence

from .cards import NUMBER_RANKS, Card, Rank, Suit
from .errors import InvalidPlacement

__all__ = [
    "PileKind",
    "Pile",
    "new_king_pile",
    "seed_pile",
    "can_accept",
    "score",
    "place_cards",
    "strip_pile",
    "queen_pending_rank",
    "is_complete_king_pile",
]


class PileKind(str, Enum):
    """Closed set of pile archetypes."""

    KING = "king"
    QUEEN = "queen"
    JACK = "jack"
    ACE = "ace"


SEED_KINDS: Final[dict[Rank, PileKind]] = {
    Rank.QUEEN: PileKind.QUEEN,
    Rank.JACK: PileKind.JACK,
    Rank.ACE: PileKind.ACE,
}


@dataclass(slots=True)
class Pile:
    """A stack of number cards resting on an optional special card.

    ``accepted_suit`` is fixed when the pile is created: the owner's suit for a
    King pile, the seeding card's suit for a Jack pile, ``None`` (any suit) for
    Queen and Ace piles.
    """

    kind: PileKind
    accepted_suit: Suit | None = None
    special_card: Card | None = None
    cards: list[Card] = field(default_factory=list)

    @property
    def size(self) -> int:
        """Number of physical cards in the pile, special card included."""

        return len(self.cards) + (1 if self.special_card is not None else 0)

    def all_cards(self) -> list[Card]:
        """Return every card bottom-first."""

        bottom = [self.special_card] if self.special_card is not None else []
        return bottom + list(self.cards)

    def copy(self) -> "Pile":
        return Pile(
            kind=self.kind,
            accepted_suit=self.accepted_suit,
            special_card=self.special_card,
            cards=list(self.cards),
        )


def new_king_pile(suit: Suit) -> Pile:
    if suit is Suit.BLANK:
        raise ValueError("a King pile must be bound to a real suit")
    return Pile(kind=PileKind.KING, accepted_suit=suit)


def seed_pile(card: Card) -> Pile:
    """Create a house pile from a Queen, Jack or Ace."""

    kind = SEED_KINDS.get(card.rank)
    if kind is None:
        raise InvalidPlacement(f"{card.code} cannot seed a house pile")
    accepted_suit = card.suit if kind is PileKind.JACK else None
    return Pile(kind=kind, accepted_suit=accepted_suit, special_card=card)


def _normalise(cards: Card | Sequence[Card]) -> tuple[Card, ...]:
    if isinstance(cards, Card):
        return (cards,)
    return tuple(cards)


def queen_pending_rank(pile: Pile) -> Rank | None:
    """Return the rank waiting for its pair on a Queen pile, if any."""

    if pile.kind is not PileKind.QUEEN:
        return None
    counts = Counter(card.rank for card in pile.cards)
    for rank, count in counts.items():
        if count == 1:
            return rank
    return None


def _queen_accepts(pile: Pile, cards: tuple[Card, ...]) -> bool:
    ranks = {card.rank for card in cards}
    if len(ranks) != 1:
        return False
    pending = queen_pending_rank(pile)
    if pending is not None:
        return ranks == {pending}
    return True


def _ace_accepts(pile: Pile, cards: tuple[Card, ...]) -> bool:
    # The Ace sits at rank 1, so the number ranks must read 2, 3, ... with no gaps.
    ranks = [card.rank.value for card in pile.cards] + [card.rank.value for card in cards]
    if len(set(ranks)) != len(ranks):
        return False
    return set(ranks) == set(range(2, 2 + len(ranks)))


def can_accept(pile: Pile, cards: Card | Sequence[Card]) -> bool:
    """Return ``True`` when ``cards`` may be appended to ``pile`` as one placement."""

    incoming = _normalise(cards)
    if not incoming:
        return False
    if any(card.rank not in NUMBER_RANKS for card in incoming):
        return False

    if pile.kind is PileKind.KING or pile.kind is PileKind.JACK:
        return all(card.suit is pile.accepted_suit for card in incoming)
    if pile.kind is PileKind.QUEEN:
        return _queen_accepts(pile, incoming)
    if pile.kind is PileKind.ACE:
        return _ace_accepts(pile, incoming)
    raise ValueError(f"unknown pile kind {pile.kind!r}")


def score(pile: Pile) -> int:
    """Return the attack/defence strength of ``pile``."""

    count = len(pile.cards)
    if pile.kind is PileKind.KING:
        return 0
    if pile.kind is PileKind.QUEEN:
        return count * 2
    if pile.kind is PileKind.JACK:
        return count
    if pile.kind is PileKind.ACE:
        has_two = any(card.rank is Rank.TWO for card in pile.cards)
        return count + 1 if has_two else count
    raise ValueError(f"unknown pile kind {pile.kind!r}")


def place_cards(pile: Pile, cards: Card | Sequence[Card]) -> None:
    """Validate and append ``cards`` to ``pile``."""

    incoming = _normalise(cards)
    if not can_accept(pile, incoming):
        codes = " ".join(card.code for card in incoming) or "nothing"
        raise InvalidPlacement(f"{pile.kind.value} pile does not accept {codes}")
    pile.cards.extend(incoming)


def strip_pile(pile: Pile) -> list[Card]:
    """Remove and return the number cards, leaving only the special card."""

    removed = list(pile.cards)
    pile.cards.clear()
    return removed


def is_complete_king_pile(pile: Pile) -> bool:
    """Return ``True`` when a King pile holds every number rank of its suit."""

    if pile.kind is not PileKind.KING:
        return False
    ranks = {card.rank for card in pile.cards if card.suit is pile.accepted_suit}
    return ranks == NUMBER_RANKS
