"""Core game state data structures for King Pile."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Sequence

from .cards import BLANK_COPIES, Card, Suit
from .piles import Pile, new_king_pile

MIN_PLAYERS = 2
MAX_PLAYERS = 4
HOUSE_SLOTS = 3


class TurnPhase(str, Enum):
    """Phases of the active player's turn, plus the two terminal states."""

    DEALING = "dealing"
    ATTACKING = "attacking"
    BUILDING = "building"
    REORDERING = "reordering"
    DISCARDING = "discarding"
    FINISHED = "finished"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (TurnPhase.FINISHED, TurnPhase.ABORTED)


@dataclass(slots=True)
class GameConfig:
    """Runtime configuration for a single game."""

    num_players: int = MAX_PLAYERS
    deal_size: int = 5
    blank_copies: int = BLANK_COPIES
    seed: int | None = None

    def __post_init__(self) -> None:
        if not MIN_PLAYERS <= self.num_players <= MAX_PLAYERS:
            raise ValueError(f"num_players must be between {MIN_PLAYERS} and {MAX_PLAYERS}")
        if self.deal_size <= 0:
            raise ValueError("deal_size must be positive")
        if not 0 <= self.blank_copies <= BLANK_COPIES:
            raise ValueError(f"blank_copies must be between 0 and {BLANK_COPIES}")

    @property
    def total_cards(self) -> int:
        return 12 * (len(Suit.playable()) + self.blank_copies)


@dataclass(slots=True)
class PlayerState:
    """State tracked for each seat at the table."""

    suit: Suit
    king_pile: Pile
    house: List[Pile | None] = field(default_factory=lambda: [None] * HOUSE_SLOTS)
    hand: List[Card] = field(default_factory=list)

    @classmethod
    def initial(cls, suit: Suit) -> "PlayerState":
        return cls(suit=suit, king_pile=new_king_pile(suit))

    def seeded_piles(self) -> list[tuple[int, Pile]]:
        """Return ``(slot, pile)`` pairs for every seeded house slot in order."""

        return [(index, pile) for index, pile in enumerate(self.house) if pile is not None]

    def iter_piles(self) -> Iterator[Pile]:
        yield self.king_pile
        for pile in self.house:
            if pile is not None:
                yield pile

    def card_count(self) -> int:
        return len(self.hand) + sum(pile.size for pile in self.iter_piles())

    def copy(self) -> "PlayerState":
        """Return a deep enough copy for branching or snapshots."""

        return PlayerState(
            suit=self.suit,
            king_pile=self.king_pile.copy(),
            house=[pile.copy() if pile is not None else None for pile in self.house],
            hand=list(self.hand),
        )


@dataclass(slots=True)
class TableState:
    """Shared table state that is visible to all players."""

    stock: List[Card]
    discard: List[Card] = field(default_factory=list)
    active_player: int = 0
    phase: TurnPhase = TurnPhase.DEALING
    turn_index: int = 0
    attack_used: bool = False
    winner: int | None = None

    def copy(self) -> "TableState":
        return TableState(
            stock=list(self.stock),
            discard=list(self.discard),
            active_player=self.active_player,
            phase=self.phase,
            turn_index=self.turn_index,
            attack_used=self.attack_used,
            winner=self.winner,
        )


@dataclass(slots=True)
class GameState:
    """Aggregate of configuration, table and seats."""

    config: GameConfig
    table: TableState
    players: List[PlayerState]

    def clone(self) -> "GameState":
        return GameState(
            config=self.config,
            table=self.table.copy(),
            players=[player.copy() for player in self.players],
        )

    def card_count(self) -> int:
        """Total cards across stock, discard, hands and piles."""

        return (
            len(self.table.stock)
            + len(self.table.discard)
            + sum(player.card_count() for player in self.players)
        )


@dataclass(frozen=True, slots=True)
class PlayerView:
    """Read-only snapshot handed to decision policies.

    Opponent hands are withheld; only their sizes are visible.
    """

    player_index: int
    phase: TurnPhase
    hand: tuple[Card, ...]
    board: PlayerState
    opponents: dict[int, PlayerState]
    opponent_hand_sizes: dict[int, int]
    stock_size: int
    discard_size: int


def view_for(state: GameState, player_index: int) -> PlayerView:
    """Build the ``PlayerView`` of ``player_index`` from ``state``."""

    me = state.players[player_index].copy()
    opponents: dict[int, PlayerState] = {}
    hand_sizes: dict[int, int] = {}
    for idx, player in enumerate(state.players):
        if idx == player_index:
            continue
        masked = player.copy()
        hand_sizes[idx] = len(masked.hand)
        masked.hand = []
        opponents[idx] = masked
    return PlayerView(
        player_index=player_index,
        phase=state.table.phase,
        hand=tuple(me.hand),
        board=me,
        opponents=opponents,
        opponent_hand_sizes=hand_sizes,
        stock_size=len(state.table.stock),
        discard_size=len(state.table.discard),
    )


def new_game_state(config: GameConfig, deck_cards: Sequence[Card]) -> GameState:
    """Seat the players and place ``deck_cards`` face down as the stock.

    The stock is drawn from its end, so the last card of ``deck_cards`` is the
    top of the stock.
    """

    suits = Suit.playable()[: config.num_players]
    players = [PlayerState.initial(suit) for suit in suits]
    table = TableState(stock=list(deck_cards))
    return GameState(config=config, table=table, players=players)
