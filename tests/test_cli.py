from __future__ import annotations

import pytest
import typer
from rich.console import Console
from typer.testing import CliRunner

from kingpile.actions import EndPhase, Place
from kingpile.cards import Card
from kingpile.cli.main import _append_event, _parse_choice, app
from kingpile.cli.render import format_card, format_pile, render_state
from kingpile.errors import MalformedAction
from kingpile.game import Game
from kingpile.piles import seed_pile
from kingpile.state import GameConfig


def test_parse_choice_accepts_numbers_and_codes() -> None:
    legal = [Place(card=Card.from_code("4H"), pile_index=-1), EndPhase()]

    assert _parse_choice("2", legal) == EndPhase()
    assert _parse_choice(" actp:k4H ", legal) == legal[0]
    with pytest.raises(typer.BadParameter):
        _parse_choice("3", legal)
    with pytest.raises(MalformedAction):
        _parse_choice("bogus", legal)


def test_append_event_bounds_log() -> None:
    log: list[str] = []
    for idx in range(20):
        _append_event(log, f"event {idx}")

    assert len(log) == 12
    assert log[-1] == "event 19"


def test_format_helpers() -> None:
    assert format_card(Card.from_code("7H")) == "[red]7♥[/red]"
    pile = seed_pile(Card.from_code("QS"))
    pile.cards.append(Card.from_code("3D"))
    assert format_pile(pile).endswith("[magenta]3♦[/magenta]")
    assert "empty" in format_pile(None)


def test_render_state_prints() -> None:
    game = Game(GameConfig(seed=1))
    console = Console(record=True, width=160)

    console.print(render_state(game.state, ["Human", "AI", "AI", "AI"], reveal_players=[0]))

    text = console.export_text()
    assert "P0" in text
    assert "Stock" in text


def test_simulate_command() -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["simulate", "--games", "1", "--turn-limit", "5", "--seed", "3"])

    assert result.exit_code == 0, result.output
    assert "Simulation Summary" in result.output


def test_simulate_rejects_unknown_policy() -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["simulate", "--games", "1", "--policy", "oracle"])

    assert result.exit_code != 0


def test_render_state_sorts_visible_hand() -> None:
    game = Game(GameConfig(seed=1))
    game.players[0].hand = [Card.from_code("3S"), Card.from_code("2H")]
    console = Console(record=True, width=160)

    console.print(render_state(game.state, ["Human", "AI", "AI", "AI"], reveal_players=[0]))

    text = console.export_text()
    assert text.index("2♥") < text.index("3♠")
