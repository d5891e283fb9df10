"""Deck construction, shuffling, dealing and discard recycling."""

from __future__ import annotations

import logging
import random
from typing import Final, MutableSequence

from .cards import BLANK_COPIES, Card, iter_full_deck
from .errors import DeckExhausted

__all__ = ["DECK_CARD_COUNT", "build_deck", "shuffle", "deal", "recycle"]

logger = logging.getLogger(__name__)

DECK_CARD_COUNT: Final[int] = 96


def build_deck(blank_copies: int = BLANK_COPIES) -> list[Card]:
    """Return the full deck in a deterministic order (48 suited + 48 Blank)."""

    return list(iter_full_deck(blank_copies))


def shuffle(cards: MutableSequence[Card], rng: random.Random) -> None:
    """Shuffle ``cards`` in place with the injected random source."""

    rng.shuffle(cards)


def recycle(stock: list[Card], discard: list[Card], rng: random.Random) -> bool:
    """Turn the shuffled discard into the new stock when the stock is empty.

    Returns ``True`` when a recycle actually happened.
    """

    if stock or not discard:
        return False
    pool = discard[:]
    discard.clear()
    shuffle(pool, rng)
    stock.extend(pool)
    logger.debug("recycled %d discarded card(s) into the stock", len(pool))
    return True


def deal(stock: list[Card], discard: list[Card], count: int, rng: random.Random) -> list[Card]:
    """Draw ``count`` cards from the top (end) of ``stock``.

    The discard is recycled whenever the stock runs dry mid-deal. When both are
    exhausted ``DeckExhausted`` is raised carrying the partial draw.
    """

    if count < 0:
        raise ValueError("count must be non-negative")

    drawn: list[Card] = []
    while len(drawn) < count:
        if not stock:
            recycle(stock, discard, rng)
        if not stock:
            raise DeckExhausted(
                f"stock and discard exhausted after drawing {len(drawn)} of {count} card(s)",
                drawn=drawn,
            )
        drawn.append(stock.pop())
    return drawn
