"""Game session object: the public entry point that drives the rules engine."""

from __future__ import annotations

import logging
import random
from typing import Callable, List, Sequence

from . import deck, rules
from .actions import Action
from .cards import Card
from .errors import DeckExhausted
from .events import Event
from .state import (
    GameConfig,
    GameState,
    PlayerState,
    PlayerView,
    TableState,
    TurnPhase,
    new_game_state,
    view_for,
)

__all__ = ["Game", "Listener"]

logger = logging.getLogger(__name__)

Listener = Callable[[Event], None]


class Game:
    """One game of King Pile.

    The game owns its stock, discard and every seat; all mutation goes through
    ``submit``. A fresh game deals to player 0 straight away unless
    ``start=False`` is passed.
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        *,
        rng: random.Random | None = None,
        deck_cards: Sequence[Card] | None = None,
        start: bool = True,
    ) -> None:
        self.config = config or GameConfig()
        self.rng = rng if rng is not None else random.Random(self.config.seed)
        if deck_cards is None:
            cards = deck.build_deck(self.config.blank_copies)
            deck.shuffle(cards, self.rng)
        else:
            cards = list(deck_cards)
        self.state: GameState = new_game_state(self.config, cards)
        self.events: List[Event] = []
        self._listeners: List[Listener] = []
        if start:
            self.start()

    @classmethod
    def from_state(cls, state: GameState, rng: random.Random) -> "Game":
        """Wrap an existing state, e.g. one restored from persistence."""

        game = cls.__new__(cls)
        game.config = state.config
        game.rng = rng
        game.state = state
        game.events = []
        game._listeners = []
        return game

    # ------------------------------------------------------------------
    # accessors

    @property
    def table(self) -> TableState:
        return self.state.table

    @property
    def players(self) -> list[PlayerState]:
        return self.state.players

    @property
    def phase(self) -> TurnPhase:
        return self.state.table.phase

    @property
    def active_player(self) -> int:
        return self.state.table.active_player

    @property
    def winner(self) -> int | None:
        return self.state.table.winner

    @property
    def is_over(self) -> bool:
        return self.state.table.phase.is_terminal

    def card_count(self) -> int:
        return self.state.card_count()

    def view_for(self, player_index: int) -> PlayerView:
        return view_for(self.state, player_index)

    def legal_actions(self, player_index: int) -> list[Action]:
        return rules.legal_actions(self.state, player_index)

    # ------------------------------------------------------------------
    # events

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for every future event; returns an unsubscribe hook."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, events: Sequence[Event]) -> None:
        for event in events:
            self.events.append(event)
            for listener in list(self._listeners):
                listener(event)

    # ------------------------------------------------------------------
    # mutation

    def start(self) -> list[Event]:
        """Deal the opening hand if the game has not started yet."""

        if self.state.table.phase is not TurnPhase.DEALING:
            return []
        return self._run(lambda: rules.start_turn(self.state, self.rng))

    def submit(self, player_index: int, action: Action) -> list[Event]:
        """Apply ``action`` for ``player_index`` and return the resulting events.

        Rejected actions raise a ``GameRuleError`` subclass and leave the game
        untouched.
        """

        logger.debug("P%d submits %s", player_index, action)
        return self._run(lambda: rules.apply_action(self.state, player_index, action, self.rng))

    def _run(self, step: Callable[[], list[Event]]) -> list[Event]:
        try:
            events = step()
        except DeckExhausted as exc:
            self._emit(exc.events)
            raise
        self._emit(events)
        return events
