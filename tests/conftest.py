"""
Shared fixtures for room juggler tests.

Provides small single-gender problems and a fast annealing config.
"""

from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import pytest

from roomjuggler.config import JuggleConfig
from roomjuggler.models import Gender, Guest, Room, Wish
from roomjuggler.problem import RoomOccupancyProblem


def make_guests(n: int, gender: Gender = Gender.F) -> list[Guest]:
    return [Guest(f"{gender.value}{i}", gender) for i in range(1, n + 1)]


def make_rooms(capacities: list[int], gender: Gender = Gender.F) -> list[Room]:
    return [Room(f"Room {i}", c, gender) for i, c in enumerate(capacities, start=1)]


def make_wishes(groups: list[tuple[int, ...]], gender: Gender = Gender.F) -> list[Wish]:
    return [Wish(f"wish{i}@example.org", g, gender) for i, g in enumerate(groups, start=1)]


def make_problem(
    n_guests: int, groups: list[tuple[int, ...]], capacities: list[int]
) -> RoomOccupancyProblem:
    return RoomOccupancyProblem(make_guests(n_guests), make_wishes(groups), make_rooms(capacities))


@pytest.fixture
def fast_config() -> JuggleConfig:
    return JuggleConfig(n_iter=50, beta=0.9, t_0=1.0, t_min=1e-3, seed=7)


@pytest.fixture
def mixed_problem() -> RoomOccupancyProblem:
    """10 guests in 4 rooms with 12 beds, so both swaps and relocates are possible."""
    return make_problem(
        10,
        [(1, 2, 3), (3, 4), (5, 6, 7), (8, 9), (1, 10), (2,), (6, 9)],
        [3, 3, 2, 4],
    )
