"""Turn state machine and rule enforcement for King Pile."""

from __future__ import annotations

import itertools
import logging
import random
from typing import Sequence

from . import deck, piles
from .actions import KING_PILE, Action, Attack, EndPhase, Place, Reorder
from .attack import Side, find_defending_pile, resolve_attack
from .cards import Card
from .errors import (
    DeckExhausted,
    GameFinished,
    IllegalAttackTarget,
    InvalidPlacement,
    MalformedAction,
    OutOfPhaseAction,
)
from .events import (
    AttackResolved,
    CardPlaced,
    CardsDealt,
    Event,
    GameAborted,
    GameWon,
    HandDiscarded,
    PilesReordered,
    TurnAdvanced,
)
from .state import HOUSE_SLOTS, GameState, PlayerState, TurnPhase

__all__ = [
    "start_turn",
    "attack",
    "place_card",
    "reorder_piles",
    "end_phase",
    "apply_action",
    "check_winner",
    "legal_actions",
    "can_place",
]

logger = logging.getLogger(__name__)

_NEXT_OPTIONAL_PHASE = {
    TurnPhase.ATTACKING: TurnPhase.BUILDING,
    TurnPhase.BUILDING: TurnPhase.REORDERING,
}


def _require_turn(state: GameState, player_index: int, *phases: TurnPhase) -> PlayerState:
    """Return the acting player or raise if they may not act right now."""

    table = state.table
    if table.phase is TurnPhase.FINISHED:
        raise GameFinished(f"game already won by P{table.winner}")
    if table.phase is TurnPhase.ABORTED:
        raise GameFinished("game was aborted")
    if player_index < 0 or player_index >= len(state.players):
        raise MalformedAction(f"invalid player index {player_index}")
    if table.active_player != player_index:
        raise OutOfPhaseAction(f"not P{player_index}'s turn (P{table.active_player} is active)")
    if table.phase not in phases:
        expected = "/".join(phase.value for phase in phases)
        raise OutOfPhaseAction(f"action needs the {expected} phase, game is in {table.phase.value}")
    return state.players[player_index]


def _require_slot(slot: int) -> None:
    if not 0 <= slot < HOUSE_SLOTS:
        raise MalformedAction(f"invalid house pile index {slot}")


def start_turn(state: GameState, rng: random.Random) -> list[Event]:
    """Deal the active player's cards and open their attack phase."""

    table = state.table
    if table.phase is not TurnPhase.DEALING:
        raise OutOfPhaseAction(f"cannot deal during {table.phase.value}")

    player = state.players[table.active_player]
    recycled = len(table.stock) < state.config.deal_size and bool(table.discard)
    try:
        cards = deck.deal(table.stock, table.discard, state.config.deal_size, rng)
    except DeckExhausted as exc:
        player.hand.extend(exc.drawn)
        table.phase = TurnPhase.ABORTED
        logger.error(
            "deck exhausted dealing to P%d on turn %d; %d card(s) accounted for: %s",
            table.active_player,
            table.turn_index,
            state.card_count(),
            exc,
        )
        raise

    player.hand.extend(cards)
    table.attack_used = False
    table.phase = TurnPhase.ATTACKING
    logger.debug("dealt %d card(s) to P%d", len(cards), table.active_player)
    return [CardsDealt(player=table.active_player, cards=tuple(cards), recycled=recycled)]


def check_winner(state: GameState) -> list[Event]:
    """Finish the game if any King pile is complete. Fires at most once."""

    table = state.table
    if table.winner is not None:
        return []
    for idx, player in enumerate(state.players):
        if piles.is_complete_king_pile(player.king_pile):
            table.winner = idx
            table.phase = TurnPhase.FINISHED
            logger.info("P%d wins on turn %d", idx, table.turn_index)
            return [GameWon(player=idx)]
    return []


def attack(state: GameState, player_index: int, pile_index: int, target_player: int) -> list[Event]:
    """Attack the first seeded house pile of ``target_player``."""

    attacker = _require_turn(state, player_index, TurnPhase.ATTACKING)
    if state.table.attack_used:
        raise OutOfPhaseAction("only one attack is allowed per turn")
    _require_slot(pile_index)
    if target_player < 0 or target_player >= len(state.players):
        raise MalformedAction(f"invalid target player {target_player}")
    if target_player == player_index:
        raise IllegalAttackTarget("a player cannot attack themselves")

    attacking = attacker.house[pile_index]
    if attacking is None or not attacking.cards:
        raise IllegalAttackTarget(f"house pile {pile_index + 1} holds no number cards")

    defender = state.players[target_player]
    defending_slot = find_defending_pile(defender.house)
    if defending_slot is None:
        raise IllegalAttackTarget(f"P{target_player} has no house pile to attack")
    defending = defender.house[defending_slot]
    assert defending is not None

    outcome = resolve_attack(attacking, defending)
    if outcome.transferred:
        if outcome.winner is Side.ATTACKER:
            attacker.hand.extend(piles.strip_pile(defending))
        else:
            defender.hand.extend(piles.strip_pile(attacking))

    state.table.attack_used = True
    state.table.phase = TurnPhase.BUILDING
    logger.debug(
        "P%d attacked P%d slot %d: %d vs %d, %s wins, %d card(s) moved",
        player_index,
        target_player,
        defending_slot,
        outcome.attack_score,
        outcome.defence_score,
        outcome.winner.value,
        len(outcome.transferred),
    )
    events: list[Event] = [
        AttackResolved(
            attacker=player_index,
            attacking_slot=pile_index,
            defender=target_player,
            defending_slot=defending_slot,
            winner=outcome.winner,
            attack_score=outcome.attack_score,
            defence_score=outcome.defence_score,
            transferred_cards=outcome.transferred,
        )
    ]
    events.extend(check_winner(state))
    return events


def can_place(player: PlayerState, card: Card, pile_index: int) -> bool:
    """Return ``True`` if ``card`` may go onto ``pile_index`` of ``player``."""

    if pile_index == KING_PILE:
        return piles.can_accept(player.king_pile, card)
    if not 0 <= pile_index < HOUSE_SLOTS:
        return False
    pile = player.house[pile_index]
    if card.is_special:
        return pile is None
    return pile is not None and piles.can_accept(pile, card)


def place_card(state: GameState, player_index: int, card: Card, pile_index: int) -> list[Event]:
    """Move ``card`` from the hand onto one of the player's piles."""

    player = _require_turn(state, player_index, TurnPhase.BUILDING)
    if card not in player.hand:
        raise MalformedAction(f"{card.code} is not in P{player_index}'s hand")
    if pile_index != KING_PILE:
        _require_slot(pile_index)

    seeded = False
    if card.is_special:
        if pile_index == KING_PILE:
            raise InvalidPlacement("special cards cannot go on the King pile")
        if player.house[pile_index] is not None:
            raise InvalidPlacement(f"house pile {pile_index + 1} is already seeded")
        player.house[pile_index] = piles.seed_pile(card)
        seeded = True
    else:
        if pile_index == KING_PILE:
            target = player.king_pile
        else:
            house_pile = player.house[pile_index]
            if house_pile is None:
                raise InvalidPlacement(f"house pile {pile_index + 1} has no special card yet")
            target = house_pile
        piles.place_cards(target, card)

    player.hand.remove(card)
    logger.debug("P%d put %s on pile %d", player_index, card.code, pile_index)
    events: list[Event] = [
        CardPlaced(player=player_index, card=card, pile_index=pile_index, seeded=seeded)
    ]
    events.extend(check_winner(state))
    return events


def reorder_piles(state: GameState, player_index: int, permutation: Sequence[int]) -> list[Event]:
    """Permute the player's house slots without touching their contents."""

    player = _require_turn(state, player_index, TurnPhase.REORDERING)
    order = tuple(permutation)
    if sorted(order) != list(range(HOUSE_SLOTS)):
        raise MalformedAction(f"{order} is not a permutation of the house piles")
    player.house = [player.house[index] for index in order]
    logger.debug("P%d reordered house piles to %s", player_index, order)
    return [PilesReordered(player=player_index, permutation=order)]


def _discard_and_advance(state: GameState, rng: random.Random) -> list[Event]:
    table = state.table
    player_index = table.active_player
    player = state.players[player_index]

    table.phase = TurnPhase.DISCARDING
    discarded = tuple(player.hand)
    table.discard.extend(discarded)
    player.hand.clear()
    events: list[Event] = [HandDiscarded(player=player_index, cards=discarded)]

    table.active_player = (player_index + 1) % len(state.players)
    table.turn_index += 1
    table.phase = TurnPhase.DEALING
    logger.info("turn %d: P%d to act", table.turn_index, table.active_player)
    events.append(TurnAdvanced(player=table.active_player, turn_index=table.turn_index))
    try:
        events.extend(start_turn(state, rng))
    except DeckExhausted as exc:
        events.append(GameAborted(reason=str(exc)))
        exc.events[:0] = events
        raise
    return events


def end_phase(state: GameState, player_index: int, rng: random.Random) -> list[Event]:
    """Close the current optional phase; ending reordering finishes the turn."""

    _require_turn(
        state,
        player_index,
        TurnPhase.ATTACKING,
        TurnPhase.BUILDING,
        TurnPhase.REORDERING,
    )
    current = state.table.phase
    if current is TurnPhase.REORDERING:
        return _discard_and_advance(state, rng)
    state.table.phase = _NEXT_OPTIONAL_PHASE[current]
    logger.debug("P%d moved from %s to %s", player_index, current.value, state.table.phase.value)
    return []


def apply_action(state: GameState, player_index: int, action: Action, rng: random.Random) -> list[Event]:
    """Dispatch ``action`` to the matching rule."""

    if isinstance(action, Attack):
        return attack(state, player_index, action.pile_index, action.target_player)
    if isinstance(action, Place):
        return place_card(state, player_index, action.card, action.pile_index)
    if isinstance(action, Reorder):
        return reorder_piles(state, player_index, action.permutation)
    if isinstance(action, EndPhase):
        return end_phase(state, player_index, rng)
    raise MalformedAction(f"unknown action {action!r}")


def legal_actions(state: GameState, player_index: int) -> list[Action]:
    """Enumerate every action ``player_index`` may submit right now."""

    table = state.table
    if table.phase.is_terminal or table.active_player != player_index:
        return []
    player = state.players[player_index]
    result: list[Action] = []

    if table.phase is TurnPhase.ATTACKING and not table.attack_used:
        for slot, pile in player.seeded_piles():
            if not pile.cards:
                continue
            for target, opponent in enumerate(state.players):
                if target == player_index:
                    continue
                if find_defending_pile(opponent.house) is not None:
                    result.append(Attack(pile_index=slot, target_player=target))
    elif table.phase is TurnPhase.BUILDING:
        seen: set[Card] = set()
        for card in player.hand:
            if card in seen:
                continue
            seen.add(card)
            for pile_index in (KING_PILE, *range(HOUSE_SLOTS)):
                if can_place(player, card, pile_index):
                    result.append(Place(card=card, pile_index=pile_index))
    elif table.phase is TurnPhase.REORDERING:
        identity = tuple(range(HOUSE_SLOTS))
        for order in itertools.permutations(range(HOUSE_SLOTS)):
            if order != identity:
                result.append(Reorder(permutation=order))

    if table.phase in (TurnPhase.ATTACKING, TurnPhase.BUILDING, TurnPhase.REORDERING):
        result.append(EndPhase())
    return result
