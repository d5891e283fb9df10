"""Tests for automated player policies."""

from __future__ import annotations

from kingpile import deck, piles
from kingpile.actions import KING_PILE
from kingpile.cards import Card, Suit
from kingpile.game import Game
from kingpile.policy import HeuristicPolicy, RandomPolicy, play_automated_turn
from kingpile.rules import can_place
from kingpile.state import GameConfig, GameState, PlayerState, new_game_state, view_for


def c(code: str) -> Card:
    return Card.from_code(code)


def _pile(special: str, *codes: str) -> piles.Pile:
    pile = piles.seed_pile(c(special))
    pile.cards.extend(c(code) for code in codes)
    return pile


def test_heuristic_places_own_suit_on_king_and_seeds_slots() -> None:
    board = PlayerState.initial(Suit.HEARTS)
    hand = [c("3H"), c("QS"), c("4S"), c("7B#0")]

    plan = HeuristicPolicy().choose_placements(hand, board)

    assert plan[:3] == [(c("3H"), KING_PILE), (c("QS"), 0), (c("4S"), 0)]
    assert len(plan) == 3
    assert board.house == [None, None, None]


def test_heuristic_skips_cards_without_a_home() -> None:
    board = PlayerState.initial(Suit.CLUBS)
    board.house[0] = _pile("JH", "2H")

    assert HeuristicPolicy().choose_placements([c("5S"), c("6B#1")], board) == []


def test_heuristic_reorders_strongest_pile_to_front() -> None:
    board = PlayerState.initial(Suit.SPADES)
    board.house = [None, _pile("JD", "2D"), _pile("QC", "8H", "8S")]

    assert HeuristicPolicy().choose_reorder(board) == (2, 1, 0)

    board.house = [_pile("QC", "8H", "8S"), _pile("JD", "2D"), None]
    assert HeuristicPolicy().choose_reorder(board) is None


def _attack_state() -> GameState:
    state = new_game_state(GameConfig(), deck.build_deck())
    state.players[0].house[0] = _pile("JH", "2H", "3H")
    state.players[1].house[0] = _pile("QS", "5S", "5D")
    state.players[2].house[1] = _pile("AD")
    return state


def test_heuristic_attacks_weakest_front_pile() -> None:
    state = _attack_state()

    assert HeuristicPolicy().choose_attack(view_for(state, 0)) == (0, 2)


def test_heuristic_does_not_attack_without_targets() -> None:
    state = _attack_state()
    state.players[1].house[0] = None
    state.players[2].house[1] = None

    assert HeuristicPolicy().choose_attack(view_for(state, 0)) is None


def test_random_policy_plans_only_legal_placements() -> None:
    board = PlayerState.initial(Suit.DIAMONDS)
    board.house[1] = _pile("AS", "2S")
    hand = [c(code) for code in ("4D", "3C", "QH", "9B#0", "JB#2", "5S")]
    policy = RandomPolicy(seed=9)

    plan = policy.choose_placements(hand, board)

    scratch = board.copy()
    for card, pile_index in plan:
        assert can_place(scratch, card, pile_index)
        if card.is_special:
            scratch.house[pile_index] = piles.seed_pile(card)
        elif pile_index == KING_PILE:
            scratch.king_pile.cards.append(card)
        else:
            scratch.house[pile_index].cards.append(card)


def test_automated_turn_hands_over_to_next_player() -> None:
    game = Game(GameConfig(seed=3))

    events = play_automated_turn(game, HeuristicPolicy())

    assert game.active_player == 1
    assert game.table.turn_index == 1
    assert len(game.players[0].hand) == 0
    assert events
    assert game.card_count() == 96
