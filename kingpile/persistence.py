"""
Game serialization for saving and restoring.

Exports and imports a Game to/from JSON-compatible dicts. Every card location,
the turn state and the random generator state are captured, so a restored game
continues exactly like the saved one would have.
"""
from __future__ import annotations

import json
import random
from typing import Any, Dict, List

from .cards import Card, Suit
from .game import Game
from .piles import Pile, PileKind
from .state import GameConfig, GameState, PlayerState, TableState, TurnPhase

SCHEMA_VERSION = 1


def _cards_to_list(cards: List[Card]) -> List[str]:
    return [card.code for card in cards]


def _cards_from_list(codes: List[str]) -> List[Card]:
    return [Card.from_code(code) for code in codes]


def _pile_to_dict(pile: Pile) -> Dict[str, Any]:
    return {
        "kind": pile.kind.value,
        "accepted_suit": pile.accepted_suit.value if pile.accepted_suit is not None else None,
        "special_card": pile.special_card.code if pile.special_card is not None else None,
        "cards": _cards_to_list(pile.cards),
    }


def _pile_from_dict(d: Dict[str, Any]) -> Pile:
    suit = d.get("accepted_suit")
    special = d.get("special_card")
    return Pile(
        kind=PileKind(d["kind"]),
        accepted_suit=Suit(suit) if suit is not None else None,
        special_card=Card.from_code(special) if special is not None else None,
        cards=_cards_from_list(d.get("cards", [])),
    )


def _player_to_dict(player: PlayerState) -> Dict[str, Any]:
    return {
        "suit": player.suit.value,
        "king_pile": _pile_to_dict(player.king_pile),
        "house": [_pile_to_dict(pile) if pile is not None else None for pile in player.house],
        "hand": _cards_to_list(player.hand),
    }


def _player_from_dict(d: Dict[str, Any]) -> PlayerState:
    return PlayerState(
        suit=Suit(d["suit"]),
        king_pile=_pile_from_dict(d["king_pile"]),
        house=[_pile_from_dict(pile) if pile is not None else None for pile in d["house"]],
        hand=_cards_from_list(d.get("hand", [])),
    )


def _rng_state_to_list(rng: random.Random) -> List[Any]:
    version, internal, gauss = rng.getstate()
    return [version, list(internal), gauss]


def _rng_from_list(state: List[Any]) -> random.Random:
    rng = random.Random()
    version, internal, gauss = state
    rng.setstate((version, tuple(internal), gauss))
    return rng


def game_to_dict(game: Game) -> Dict[str, Any]:
    """
    Serialize a Game to a JSON-compatible dict.

    The event log and listeners are not part of the snapshot.
    """
    state = game.state
    config = state.config
    table = state.table
    return {
        "schema_version": SCHEMA_VERSION,
        "config": {
            "num_players": config.num_players,
            "deal_size": config.deal_size,
            "blank_copies": config.blank_copies,
            "seed": config.seed,
        },
        "table": {
            "stock": _cards_to_list(table.stock),
            "discard": _cards_to_list(table.discard),
            "active_player": table.active_player,
            "phase": table.phase.value,
            "turn_index": table.turn_index,
            "attack_used": table.attack_used,
            "winner": table.winner,
        },
        "players": [_player_to_dict(player) for player in state.players],
        "rng_state": _rng_state_to_list(game.rng),
    }


def game_from_dict(d: Dict[str, Any]) -> Game:
    """
    Deserialize a Game from a dict produced by ``game_to_dict``.

    Raises ValueError for unsupported schema versions and for snapshots whose
    cards do not add up to a full deck.
    """
    version = d.get("schema_version")
    if version != SCHEMA_VERSION:
        raise ValueError(f"unsupported schema_version {version!r}")

    config_d = d["config"]
    config = GameConfig(
        num_players=int(config_d["num_players"]),
        deal_size=int(config_d.get("deal_size", 5)),
        blank_copies=int(config_d.get("blank_copies", 4)),
        seed=config_d.get("seed"),
    )
    table_d = d["table"]
    table = TableState(
        stock=_cards_from_list(table_d["stock"]),
        discard=_cards_from_list(table_d.get("discard", [])),
        active_player=int(table_d["active_player"]),
        phase=TurnPhase(table_d["phase"]),
        turn_index=int(table_d.get("turn_index", 0)),
        attack_used=bool(table_d.get("attack_used", False)),
        winner=table_d.get("winner"),
    )
    players = [_player_from_dict(player) for player in d["players"]]
    if len(players) != config.num_players:
        raise ValueError("player count does not match config")
    state = GameState(config=config, table=table, players=players)
    if state.card_count() != config.total_cards:
        raise ValueError(
            f"snapshot holds {state.card_count()} card(s), expected {config.total_cards}"
        )
    return Game.from_state(state, _rng_from_list(d["rng_state"]))


def dump_game(game: Game) -> str:
    """Serialize a Game to a JSON string."""
    return json.dumps(game_to_dict(game), indent=2)


def load_game(s: str) -> Game:
    """Deserialize a Game from a JSON string."""
    return game_from_dict(json.loads(s))


__all__ = [
    "SCHEMA_VERSION",
    "game_to_dict",
    "game_from_dict",
    "dump_game",
    "load_game",
]
