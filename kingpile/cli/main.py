"""Typer entry-point wiring for the King Pile CLI."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import typer
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .. import benchmark, persistence, scoreboard
from ..actions import Action, Place, action_code, parse_action
from ..errors import DeckExhausted, GameRuleError
from ..events import Event, describe_event
from ..game import Game
from ..policy import PlayerPolicy, play_automated_turn
from ..state import GameConfig, TurnPhase
from .render import format_card, render_state


@dataclass(slots=True)
class PlayerContext:
    """Runtime metadata describing each seated player."""

    label: str
    role: str  # "Human" or "AI"
    policy: PlayerPolicy | None = None


app = typer.Typer(add_completion=False, rich_markup_mode="rich")
console = Console()

MAX_EVENT_LOG = 12


@app.callback()
def configure(
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level for engine diagnostics."),
) -> None:
    """King Pile: collect your suit on your King pile."""

    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise typer.BadParameter(f"unknown log level '{log_level}'")
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _append_event(log: list[str], message: str) -> None:
    """Append ``message`` to ``log`` maintaining a bounded log length."""

    log.append(message)
    excess = len(log) - MAX_EVENT_LOG
    if excess > 0:
        del log[:excess]


def _event_panel(events: Sequence[str]) -> Panel:
    log_table = Table.grid(expand=True)
    log_table.add_column(justify="left")
    if events:
        for line in events[-MAX_EVENT_LOG:]:
            log_table.add_row(line)
    else:
        log_table.add_row("[dim]Event log will appear here[/dim]")
    return Panel(log_table, title="Event Log", border_style="magenta", box=box.SIMPLE)


def _describe_action(action: Action) -> str:
    code = action_code(action)
    if isinstance(action, Place):
        return f"{code} ({format_card(action.card)})"
    return code


def _format_action_entries(legal: Sequence[Action]) -> list[str]:
    """Return numbered entries describing the available actions."""

    return [f"[bold]{idx}[/bold] {_describe_action(action)}" for idx, action in enumerate(legal, start=1)]


def _parse_choice(text: str, legal: Sequence[Action]) -> Action:
    """Resolve a menu number or an action code typed by the user."""

    text = text.strip()
    if text.isdigit():
        index = int(text) - 1
        if not 0 <= index < len(legal):
            raise typer.BadParameter(f"choose a number between 1 and {len(legal)}")
        return legal[index]
    return parse_action(text)


def _record(log: list[str], events: Sequence[Event]) -> None:
    for event in events:
        _append_event(log, describe_event(event))


def _human_turn(game: Game, seat: int, log: list[str], players_ctx: Sequence[PlayerContext]) -> None:
    roles = [ctx.role for ctx in players_ctx]
    while not game.is_over and game.active_player == seat:
        console.print(render_state(game.state, roles, reveal_players=[seat]))
        console.print(_event_panel(log))
        legal = game.legal_actions(seat)
        console.print(
            Panel(
                "\n".join(_format_action_entries(legal)),
                title=f"{players_ctx[seat].label}: {game.phase.value}",
                border_style="yellow",
                box=box.ROUNDED,
            )
        )
        text = typer.prompt("Action (number or code, 'save:<path>' to save)")
        if text.startswith("save:"):
            path = Path(text[5:].strip())
            path.write_text(persistence.dump_game(game), encoding="utf-8")
            console.print(f"[green]Saved game to {path}[/green]")
            continue
        try:
            action = _parse_choice(text, legal)
            _record(log, game.submit(seat, action))
        except DeckExhausted:
            raise
        except (GameRuleError, typer.BadParameter) as exc:
            console.print(f"[red]{exc}[/red]")


def _run_game(game: Game, players_ctx: Sequence[PlayerContext]) -> None:
    log: list[str] = []
    _record(log, game.events)
    roles = [ctx.role for ctx in players_ctx]
    try:
        while not game.is_over:
            seat = game.active_player
            ctx = players_ctx[seat]
            if ctx.policy is None:
                _human_turn(game, seat, log, players_ctx)
            else:
                _record(log, play_automated_turn(game, ctx.policy))
    except DeckExhausted as exc:
        _record(log, exc.events)
        console.print(f"[red]Deck exhausted: {exc}[/red]")

    console.print(render_state(game.state, roles, reveal_players=range(len(players_ctx))))
    console.print(_event_panel(log))
    if game.phase is TurnPhase.FINISHED:
        console.print(f"[bold green]{players_ctx[game.winner].label} wins![/bold green]")
    else:
        console.print("[yellow]Game aborted without a winner.[/yellow]")


@app.command()
def play(
    players: int = typer.Option(4, min=2, max=4, help="Number of seated players."),
    humans: int = typer.Option(1, min=0, help="Human-controlled seats starting from P0."),
    seed: int | None = typer.Option(None, help="Random seed for reproducible games (omit for randomness)."),
    opponent: str = typer.Option("heuristic", help="Policy for automated seats: heuristic or random."),
    load: Path | None = typer.Option(None, "--load", help="Resume a game saved with 'save:<path>'."),
) -> None:
    """Play a game in the terminal against automated seats."""

    if humans > players:
        raise typer.BadParameter("Humans cannot exceed the total number of players.")

    if load is not None:
        game = persistence.load_game(load.read_text(encoding="utf-8"))
        players = game.config.num_players
        humans = min(humans, players)
    else:
        game = Game(GameConfig(num_players=players, seed=seed))

    players_ctx: list[PlayerContext] = []
    for idx in range(players):
        if idx < humans:
            players_ctx.append(PlayerContext(label=f"P{idx}", role="Human"))
        else:
            policy = benchmark.make_policy(opponent, seed=None if seed is None else seed + idx)
            players_ctx.append(PlayerContext(label=f"P{idx}", role="AI", policy=policy))

    _run_game(game, players_ctx)


def _render_match_summary(report: benchmark.SimulationReport, config: benchmark.SimulationConfig) -> Table:
    """Return the aggregated simulation summary table."""

    history: scoreboard.MatchHistory = report.history
    totals = history.totals()
    win_rates = report.win_rates
    king_means = report.mean_king_cards

    table = Table(title="Simulation Summary", box=box.DOUBLE_EDGE)
    table.add_column("Player", justify="center")
    table.add_column("Policy", justify="center")
    table.add_column("Wins", justify="right")
    table.add_column("Win rate", justify="right")
    table.add_column("Avg King", justify="right")

    best = max((total.wins for total in totals), default=0)
    for total in totals:
        idx = total.player_index
        label = f"P{idx}"
        wins = str(total.wins)
        if total.wins == best and best > 0:
            label = f"[bold blue]{label}[/bold blue]"
            wins = f"[bold blue]{wins}[/bold blue]"
        table.add_row(
            label,
            config.policy_for(idx),
            wins,
            f"{win_rates[idx]:.0%}",
            f"{king_means[idx]:.1f}",
        )
    return table


@app.command()
def simulate(
    games: int = typer.Option(10, min=1, help="Number of automated games."),
    players: int = typer.Option(4, min=2, max=4, help="Number of seated players."),
    seed: int = typer.Option(123, help="Random seed for the simulation."),
    turn_limit: int = typer.Option(400, min=1, help="Turns after which a game counts as undecided."),
    policy: list[str] = typer.Option(
        ["heuristic"],
        "--policy",
        help="Seat policies assigned round-robin (repeat the option to mix).",
    ),
) -> None:
    """Run automated games and summarise the results."""

    try:
        config = benchmark.SimulationConfig(
            games=games,
            num_players=players,
            seed=seed,
            turn_limit=turn_limit,
            policies=tuple(policy),
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    report = benchmark.run_simulation(config)
    console.print(_render_match_summary(report, config))
    console.print(
        f"[cyan]{len(report.history.games)} game(s) simulated; "
        f"{report.history.undecided} undecided; "
        f"turns mean {report.mean_turns:.1f}, median {report.median_turns:.1f}.[/cyan]"
    )


def main() -> None:
    """Entry-point for the ``kingpile`` console script."""

    app()


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    main()
