"""Card abstractions and helpers for King Pile."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Iterable, Iterator, Sequence

BLANK_COPIES: Final[int] = 4


class Suit(str, Enum):
    """The four player suits plus the suitless ``BLANK`` marker."""

    HEARTS = "H"
    SPADES = "S"
    DIAMONDS = "D"
    CLUBS = "C"
    BLANK = "B"

    @classmethod
    def playable(cls) -> tuple["Suit", ...]:
        """Return the suits that can be bound to a player, in seating order."""

        return (cls.HEARTS, cls.SPADES, cls.DIAMONDS, cls.CLUBS)

    @property
    def symbol(self) -> str:
        return _SUIT_SYMBOLS[self]


_SUIT_SYMBOLS: Final[dict[Suit, str]] = {
    Suit.HEARTS: "♥",
    Suit.SPADES: "♠",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
    Suit.BLANK: "□",
}


class Rank(int, Enum):
    """Ranks in play. Kings are removed from the deck entirely."""

    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12

    @classmethod
    def numbers(cls) -> tuple["Rank", ...]:
        """Return the number ranks 2-10 in ascending order."""

        return tuple(rank for rank in cls if 2 <= rank.value <= 10)

    @classmethod
    def specials(cls) -> tuple["Rank", ...]:
        return (cls.ACE, cls.JACK, cls.QUEEN)

    @property
    def label(self) -> str:
        return _RANK_LABELS.get(self, str(self.value))

    @classmethod
    def from_label(cls, label: str) -> "Rank":
        for rank in cls:
            if rank.label == label.upper():
                return rank
        raise ValueError(f"unknown rank label '{label}'")


_RANK_LABELS: Final[dict[Rank, str]] = {Rank.ACE: "A", Rank.JACK: "J", Rank.QUEEN: "Q"}

NUMBER_RANKS: Final[frozenset[Rank]] = frozenset(Rank.numbers())
SPECIAL_RANKS: Final[frozenset[Rank]] = frozenset(Rank.specials())


@dataclass(frozen=True, slots=True)
class Card:
    """Value object describing one physical card.

    Suited cards exist once per deck and always carry ``copy == 0``; Blank
    cards come in several copies per rank which ``copy`` tells apart.
    """

    rank: Rank
    suit: Suit
    copy: int = 0

    def __post_init__(self) -> None:
        if self.suit is Suit.BLANK:
            if not 0 <= self.copy < BLANK_COPIES:
                raise ValueError(f"blank copy index out of range: {self.copy}")
        elif self.copy != 0:
            raise ValueError("suited cards have a single copy")

    @property
    def is_special(self) -> bool:
        """Return ``True`` for Ace, Jack and Queen."""

        return self.rank in SPECIAL_RANKS

    @property
    def is_number(self) -> bool:
        return self.rank in NUMBER_RANKS

    @property
    def is_blank(self) -> bool:
        return self.suit is Suit.BLANK

    @property
    def code(self) -> str:
        """Return the compact text code, e.g. ``10S`` or ``QB#2``."""

        base = f"{self.rank.label}{self.suit.value}"
        if self.is_blank:
            return f"{base}#{self.copy}"
        return base

    @classmethod
    def from_code(cls, code: str) -> "Card":
        text = code.strip().upper()
        copy = 0
        if "#" in text:
            text, copy_str = text.split("#", maxsplit=1)
            if not copy_str.isdigit():
                raise ValueError(f"invalid card code '{code}'")
            copy = int(copy_str)
        if len(text) < 2:
            raise ValueError(f"invalid card code '{code}'")
        try:
            suit = Suit(text[-1])
            rank = Rank.from_label(text[:-1])
        except ValueError as exc:
            raise ValueError(f"invalid card code '{code}'") from exc
        return cls(rank=rank, suit=suit, copy=copy)

    def label(self) -> str:
        """Create a display label suitable for CLI representations."""

        return f"{self.rank.label}{self.suit.symbol}"

    def __str__(self) -> str:
        return self.code


def iter_full_deck(blank_copies: int = BLANK_COPIES) -> Iterator[Card]:
    """Yield every physical card of a fresh deck in a fixed order."""

    for rank in Rank:
        for suit in Suit.playable():
            yield Card(rank=rank, suit=suit)
    for rank in Rank:
        for copy in range(blank_copies):
            yield Card(rank=rank, suit=Suit.BLANK, copy=copy)


def sort_cards(cards: Iterable[Card]) -> list[Card]:
    suit_order = {suit: idx for idx, suit in enumerate(Suit)}
    return sorted(cards, key=lambda c: (suit_order[c.suit], c.rank.value, c.copy))


def format_cards(cards: Sequence[Card]) -> str:
    return " ".join(card.code for card in cards)
