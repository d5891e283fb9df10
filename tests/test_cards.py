"""Tests for the card model and card codes."""

from __future__ import annotations

from collections import Counter

import pytest

from kingpile.cards import Card, Rank, Suit, format_cards, iter_full_deck, sort_cards


def test_full_deck_has_every_physical_card_once() -> None:
    cards = list(iter_full_deck())

    assert len(cards) == 96
    assert len(set(cards)) == 96
    suits = Counter(card.suit for card in cards)
    assert suits[Suit.BLANK] == 48
    for suit in Suit.playable():
        assert suits[suit] == 12


def test_playable_suits_follow_seating_order() -> None:
    assert Suit.playable() == (Suit.HEARTS, Suit.SPADES, Suit.DIAMONDS, Suit.CLUBS)


@pytest.mark.parametrize(
    ("code", "expected"),
    [
        ("2H", Card(Rank.TWO, Suit.HEARTS)),
        ("10S", Card(Rank.TEN, Suit.SPADES)),
        ("ad", Card(Rank.ACE, Suit.DIAMONDS)),
        ("QB#2", Card(Rank.QUEEN, Suit.BLANK, copy=2)),
    ],
)
def test_from_code_parses_compact_codes(code: str, expected: Card) -> None:
    assert Card.from_code(code) == expected


@pytest.mark.parametrize("code", ["", "H", "1H", "KH", "2X", "QB#x", "QB#7", "2H#1"])
def test_from_code_rejects_garbage(code: str) -> None:
    with pytest.raises(ValueError):
        Card.from_code(code)


def test_code_distinguishes_blank_copies() -> None:
    first = Card(Rank.FIVE, Suit.BLANK, copy=0)
    second = Card(Rank.FIVE, Suit.BLANK, copy=1)

    assert first != second
    assert first.code == "5B#0"
    assert second.code == "5B#1"
    assert Card.from_code(second.code) == second


@pytest.mark.parametrize(
    ("rank", "special"),
    [(Rank.ACE, True), (Rank.JACK, True), (Rank.QUEEN, True), (Rank.TWO, False), (Rank.TEN, False)],
)
def test_special_and_number_ranks(rank: Rank, special: bool) -> None:
    card = Card(rank, Suit.CLUBS)
    assert card.is_special is special
    assert card.is_number is not special


def test_sort_and_format_cards() -> None:
    cards = [Card.from_code(code) for code in ("3S", "QH", "2H", "4B#1")]

    assert format_cards(sort_cards(cards)) == "2H QH 3S 4B#1"
