from __future__ import annotations

import pytest

from kingpile.benchmark import SimulationConfig, make_policy, run_simulation
from kingpile.policy import HeuristicPolicy, RandomPolicy


def test_run_simulation_returns_report() -> None:
    config = SimulationConfig(games=2, seed=7, turn_limit=30, policies=("heuristic", "random"))
    seen: list[int] = []

    report = run_simulation(config, on_game=lambda summary: seen.append(summary.game_number))

    assert seen == [1, 2]
    assert len(report.history.games) == 2
    assert report.turns.shape == (2,)
    assert report.king_cards.shape == (2, 4)
    assert (report.turns <= 30).all()
    assert report.win_rates.sum() <= 1.0
    assert report.mean_turns > 0
    assert report.mean_king_cards.shape == (4,)


def test_simulation_is_reproducible() -> None:
    config = SimulationConfig(games=2, seed=11, turn_limit=25)

    first = run_simulation(config)
    second = run_simulation(config)

    assert first.turns.tolist() == second.turns.tolist()
    assert first.king_cards.tolist() == second.king_cards.tolist()


def test_policies_are_assigned_round_robin() -> None:
    config = SimulationConfig(policies=("heuristic", "random"))

    assert [config.policy_for(seat) for seat in range(4)] == ["heuristic", "random", "heuristic", "random"]


@pytest.mark.parametrize(
    "kwargs",
    [{"games": 0}, {"turn_limit": 0}, {"policies": ()}, {"policies": ("mcts",)}],
)
def test_simulation_config_validation(kwargs: dict[str, object]) -> None:
    with pytest.raises(ValueError):
        SimulationConfig(**kwargs)  # type: ignore[arg-type]


def test_make_policy() -> None:
    assert isinstance(make_policy("heuristic"), HeuristicPolicy)
    assert isinstance(make_policy("random", seed=1), RandomPolicy)
    with pytest.raises(ValueError):
        make_policy("oracle")
