"""Composable view primitives for the King Pile CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence, Set

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table

from ..cards import Card, sort_cards
from ..piles import Pile
from ..state import GameState, TableState


@dataclass(slots=True)
class StateSummaryView:
    """Renderable summarising the current table state."""

    state: GameState
    roles: Sequence[str]
    reveal_players: Set[int]
    card_formatter: Callable[[Card], str]
    pile_formatter: Callable[[Pile | None], str]

    def _hand_markup(self, cards: list[Card], visible: bool) -> str:
        if not visible:
            return f"{len(cards)} cards"
        if not cards:
            return "—"
        return " ".join(self.card_formatter(card) for card in sort_cards(cards))

    def _metadata_panel(self, table: TableState) -> Panel:
        grid = Table.grid(expand=True)
        grid.add_column(justify="left")
        grid.add_row(f"[cyan]Turn[/cyan]: {table.turn_index}")
        grid.add_row(f"[cyan]Phase[/cyan]: {table.phase.value.title()}")
        grid.add_row(f"[cyan]Stock[/cyan]: {len(table.stock)} card(s)")
        grid.add_row(f"[cyan]Discard[/cyan]: {len(table.discard)} card(s)")
        return Panel(grid, title="Table State", box=box.SQUARE, border_style="blue")

    def render(self) -> RenderableType:
        table_state = self.state.table

        table = Table(box=box.ROUNDED, expand=True)
        table.add_column("Player", justify="left", style="bold")
        table.add_column("Role", justify="left")
        table.add_column("Hand", justify="left")
        table.add_column("King", justify="left")
        for slot in range(1, 4):
            table.add_column(f"House {slot}", justify="left")

        for idx, player in enumerate(self.state.players):
            role = self.roles[idx] if idx < len(self.roles) else "AI"
            visible = idx in self.reveal_players
            name = f"P{idx} {player.suit.symbol}"
            if table_state.winner == idx:
                name = f"[bold green]{name} ★[/bold green]"
            elif idx == table_state.active_player:
                name = f"[bold yellow]{name}[/bold yellow]"
            table.add_row(
                name,
                role,
                self._hand_markup(player.hand, visible),
                self.pile_formatter(player.king_pile),
                *(self.pile_formatter(pile) for pile in player.house),
            )

        components: list[RenderableType] = [table, self._metadata_panel(table_state)]
        return Group(*components)
