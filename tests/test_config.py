"""Tests for the annealing configuration and its temperature schedule."""

from __future__ import annotations

import json

import pytest

from roomjuggler.config import JuggleConfig, temperature_history
from roomjuggler.errors import ConfigurationError


def test_defaults() -> None:
    config = JuggleConfig()

    assert config.n_iter == 300
    assert config.beta == 0.999
    assert config.t_0 == 1.0
    assert config.t_min == 1e-7


def test_temperature_history_stops_at_first_value_below_t_min() -> None:
    config = JuggleConfig(beta=0.5, t_0=1.0, t_min=0.1)

    assert config.t_history == (1.0, 0.5, 0.25, 0.125, 0.0625)
    assert config.n_total_iter == 300 * 5


def test_default_schedule_is_strictly_decreasing() -> None:
    config = JuggleConfig()
    t = config.t_history

    assert t[0] == config.t_0
    assert all(a > b for a, b in zip(t, t[1:]))
    assert t[-1] <= config.t_min
    assert t[-2] > config.t_min
    assert config.n_total_iter == config.n_iter * len(t)


def test_start_below_t_min_gives_single_temperature() -> None:
    assert temperature_history(1e-8, 1e-7, 0.9) == [1e-8]


@pytest.mark.parametrize("beta", [0.0, 1.0, -0.5, 1.5])
def test_beta_outside_open_unit_interval_raises(beta: float) -> None:
    with pytest.raises(ConfigurationError):
        JuggleConfig(beta=beta)


@pytest.mark.parametrize(
    "options",
    [{"n_iter": 0}, {"t_0": 0.0}, {"t_min": -1.0}, {"p_relocate": 1.5}, {"p_targeted": -0.1}],
)
def test_invalid_options_raise(options) -> None:
    with pytest.raises(ConfigurationError):
        JuggleConfig(**options)


def test_replace_recomputes_schedule() -> None:
    config = JuggleConfig(n_iter=10).replace(beta=0.5, t_min=0.1)

    assert config.n_iter == 10
    assert len(config.t_history) == 5
    assert config.n_total_iter == 50


def test_from_file(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"n_iter": 20, "beta": 0.9, "seed": 3}))

    config = JuggleConfig.from_file(str(path))

    assert config.n_iter == 20
    assert config.beta == 0.9
    assert config.seed == 3


def test_from_file_rejects_unknown_options(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"n_iter": 20, "cooling_rate": 0.9}))

    with pytest.raises(ConfigurationError):
        JuggleConfig.from_file(str(path))


def test_from_dict_rejects_derived_fields() -> None:
    with pytest.raises(ConfigurationError):
        JuggleConfig.from_dict({"n_total_iter": 5})


@pytest.mark.parametrize("n_iter", [2.0, 300.5, "300", True, None])
def test_non_integer_n_iter_raises(n_iter) -> None:
    with pytest.raises(ConfigurationError):
        JuggleConfig(n_iter=n_iter)


@pytest.mark.parametrize("option", ["beta", "t_0", "t_min", "p_relocate", "p_targeted"])
def test_non_numeric_options_raise(option: str) -> None:
    with pytest.raises(ConfigurationError):
        JuggleConfig(**{option: "0.5"})


def test_non_integer_seed_raises() -> None:
    with pytest.raises(ConfigurationError):
        JuggleConfig(seed=1.5)


def test_integer_temperatures_are_stored_as_floats() -> None:
    config = JuggleConfig(t_0=2, t_min=1, beta=0.5)

    assert isinstance(config.t_0, float)
    assert config.t_history == (2.0, 1.0)


def test_from_file_rejects_float_n_iter(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"n_iter": 300.0}))

    with pytest.raises(ConfigurationError):
        JuggleConfig.from_file(str(path))
