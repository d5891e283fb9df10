"""Rendering helpers dedicated to the CLI experience."""

from __future__ import annotations

from typing import Iterable, Sequence

from rich.console import RenderableType
from rich.panel import Panel

from ..cards import Card, Suit
from ..piles import Pile, PileKind, score
from ..state import GameState
from .views import StateSummaryView

_SUIT_COLORS = {
    Suit.HEARTS: "red",
    Suit.SPADES: "cyan",
    Suit.DIAMONDS: "magenta",
    Suit.CLUBS: "green",
    Suit.BLANK: "white",
}

_PILE_TAGS = {
    PileKind.QUEEN: "Q",
    PileKind.JACK: "J",
    PileKind.ACE: "A",
}


def format_card(card: Card) -> str:
    """Return a Rich-rendered label for ``card``."""

    color = _SUIT_COLORS[card.suit]
    return f"[{color}]{card.label()}[/{color}]"


def format_pile(pile: Pile | None) -> str:
    """Return a compact label such as ``Q(4): 3♥ 3□``."""

    if pile is None:
        return "[dim]empty[/dim]"
    cards = " ".join(format_card(card) for card in pile.cards) or "[dim]-[/dim]"
    if pile.kind is PileKind.KING:
        return cards
    head = format_card(pile.special_card) if pile.special_card is not None else _PILE_TAGS[pile.kind]
    return f"{head}({score(pile)}): {cards}"


def render_state(
    state: GameState,
    roles: Sequence[str],
    *,
    reveal_players: Iterable[int] | None = None,
    title: str = "King Pile",
) -> RenderableType:
    """Return a Rich panel describing the current table state."""

    view = StateSummaryView(
        state=state,
        roles=roles,
        reveal_players=set(reveal_players or set()),
        card_formatter=format_card,
        pile_formatter=format_pile,
    )
    return Panel(view.render(), title=title, padding=(0, 1), border_style="cyan")
