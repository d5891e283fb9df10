"""Decision policies for automated seats and the turn driver that runs them."""

from __future__ import annotations

import itertools
import logging
import random
from dataclasses import dataclass, field
from typing import Protocol, Sequence

from . import piles
from .actions import KING_PILE, Attack, EndPhase, Place, Reorder
from .attack import find_defending_pile
from .cards import Card
from .errors import IllegalAttackTarget, InvalidPlacement, MalformedAction
from .events import Event
from .game import Game
from .rules import can_place
from .state import HOUSE_SLOTS, PlayerState, PlayerView, TurnPhase

__all__ = [
    "PlayerPolicy",
    "HeuristicPolicy",
    "RandomPolicy",
    "play_automated_turn",
]

logger = logging.getLogger(__name__)

Placement = tuple[Card, int]


class PlayerPolicy(Protocol):
    """Decision interface shared by every automated seat."""

    def choose_attack(self, view: PlayerView) -> tuple[int, int] | None:
        """Return ``(pile_index, target_player)`` or ``None`` to skip attacking."""

    def choose_placements(self, hand: Sequence[Card], board: PlayerState) -> list[Placement]:
        """Return placements in the order they should be submitted."""

    def choose_reorder(self, board: PlayerState) -> tuple[int, ...] | None:
        """Return a slot permutation or ``None`` to keep the current order."""


def _apply_placement(board: PlayerState, card: Card, pile_index: int) -> None:
    """Mirror a placement on a scratch board so later choices see it."""

    if card.is_special:
        board.house[pile_index] = piles.seed_pile(card)
    elif pile_index == KING_PILE:
        board.king_pile.cards.append(card)
    else:
        pile = board.house[pile_index]
        assert pile is not None
        pile.cards.append(card)


def _targets(view: PlayerView) -> list[tuple[int, piles.Pile]]:
    """Return ``(player, defending pile)`` for every opponent that can be attacked."""

    result = []
    for idx, opponent in sorted(view.opponents.items()):
        slot = find_defending_pile(opponent.house)
        if slot is not None:
            pile = opponent.house[slot]
            assert pile is not None
            result.append((idx, pile))
    return result


def _strongest_first(board: PlayerState) -> tuple[int, ...] | None:
    def strength(slot: int) -> tuple[int, int]:
        pile = board.house[slot]
        if pile is None:
            return (1, 0)
        return (0, -piles.score(pile))

    order = tuple(sorted(range(HOUSE_SLOTS), key=strength))
    if order == tuple(range(HOUSE_SLOTS)):
        return None
    return order


@dataclass(slots=True)
class HeuristicPolicy:
    """Greedy rule-of-thumb player.

    A house pile is sent to attack when its cards are worth less to the owner
    than to the rest of the table, measured against the pile's own strength.
    Number cards of the owner's suit go to the King pile, everything else to
    the first house pile that takes it; special cards fill empty slots.
    """

    def card_value(self, players: dict[int, PlayerState], card: Card) -> dict[int, float]:
        """Return how useful ``card`` would be to each seat."""

        values: dict[int, float] = {}
        for idx, player in players.items():
            value = 0.0
            if card.suit is player.suit:
                value += len(player.king_pile.cards) / 2.0 + 2.0
            for pile in player.house:
                if pile is not None and piles.can_accept(pile, card):
                    value += 1.0
            values[idx] = value
        return values

    def pile_value(self, view: PlayerView, pile: piles.Pile) -> float:
        players = dict(view.opponents)
        players[view.player_index] = view.board
        total = 0.0
        for card in pile.cards:
            for idx, value in self.card_value(players, card).items():
                total += -value if idx == view.player_index else value
        return total

    def choose_attack(self, view: PlayerView) -> tuple[int, int] | None:
        targets = _targets(view)
        if not targets:
            return None
        for slot, pile in view.board.seeded_piles():
            if not pile.cards:
                continue
            if self.pile_value(view, pile) < piles.score(pile):
                target, _ = min(targets, key=lambda item: piles.score(item[1]))
                return slot, target
        return None

    def _target_for(self, board: PlayerState, card: Card) -> int | None:
        if card.is_special:
            for slot, pile in enumerate(board.house):
                if pile is None:
                    return slot
            return None
        if card.suit is board.suit:
            return KING_PILE
        for slot, pile in board.seeded_piles():
            if piles.can_accept(pile, card):
                return slot
        return None

    def choose_placements(self, hand: Sequence[Card], board: PlayerState) -> list[Placement]:
        scratch = board.copy()
        remaining = list(hand)
        plan: list[Placement] = []
        while True:
            for card in remaining:
                target = self._target_for(scratch, card)
                if target is not None:
                    break
            else:
                return plan
            _apply_placement(scratch, card, target)
            remaining.remove(card)
            plan.append((card, target))

    def choose_reorder(self, board: PlayerState) -> tuple[int, ...] | None:
        return _strongest_first(board)


@dataclass(slots=True)
class RandomPolicy:
    """Baseline that picks uniformly among legal choices.

    Usage:
        policy = RandomPolicy(seed=42)
    """

    seed: int | None = None
    attack_rate: float = 0.5
    _rng: random.Random = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not 0.0 <= self.attack_rate <= 1.0:
            raise ValueError("attack_rate must be within [0, 1]")
        self._rng = random.Random(self.seed)

    def choose_attack(self, view: PlayerView) -> tuple[int, int] | None:
        targets = _targets(view)
        attackers = [slot for slot, pile in view.board.seeded_piles() if pile.cards]
        if not targets or not attackers or self._rng.random() >= self.attack_rate:
            return None
        target, _ = self._rng.choice(targets)
        return self._rng.choice(attackers), target

    def choose_placements(self, hand: Sequence[Card], board: PlayerState) -> list[Placement]:
        scratch = board.copy()
        remaining = list(hand)
        self._rng.shuffle(remaining)
        plan: list[Placement] = []
        for card in remaining:
            options = [idx for idx in (KING_PILE, *range(HOUSE_SLOTS)) if can_place(scratch, card, idx)]
            if not options:
                continue
            target = self._rng.choice(options)
            _apply_placement(scratch, card, target)
            plan.append((card, target))
        return plan

    def choose_reorder(self, board: PlayerState) -> tuple[int, ...] | None:
        order = self._rng.choice(list(itertools.permutations(range(HOUSE_SLOTS))))
        if order == tuple(range(HOUSE_SLOTS)):
            return None
        return order


def play_automated_turn(game: Game, policy: PlayerPolicy) -> list[Event]:
    """Play the active seat's whole turn with ``policy`` through ``Game.submit``.

    Returns every event produced, including the next player's deal. Stops early
    when the game finishes mid-turn.
    """

    player = game.active_player
    events: list[Event] = []

    if game.phase is TurnPhase.ATTACKING:
        choice = policy.choose_attack(game.view_for(player))
        if choice is not None:
            pile_index, target = choice
            try:
                events.extend(game.submit(player, Attack(pile_index=pile_index, target_player=target)))
            except (IllegalAttackTarget, MalformedAction) as exc:
                logger.debug("P%d attack rejected: %s", player, exc)
        if game.is_over:
            return events
        if game.phase is TurnPhase.ATTACKING:
            events.extend(game.submit(player, EndPhase()))

    if game.phase is TurnPhase.BUILDING:
        board = game.players[player]
        for card, pile_index in policy.choose_placements(tuple(board.hand), board.copy()):
            try:
                events.extend(game.submit(player, Place(card=card, pile_index=pile_index)))
            except (InvalidPlacement, MalformedAction) as exc:
                logger.debug("P%d placement of %s rejected: %s", player, card.code, exc)
            if game.is_over:
                return events
        events.extend(game.submit(player, EndPhase()))

    if game.phase is TurnPhase.REORDERING:
        order = policy.choose_reorder(game.players[player].copy())
        if order is not None:
            events.extend(game.submit(player, Reorder(permutation=order)))
        events.extend(game.submit(player, EndPhase()))

    return events
