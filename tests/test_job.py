"""Tests for gender splitting and the end-to-end room juggler job."""

from __future__ import annotations

import logging

import pytest

from roomjuggler.errors import CapacityError
from roomjuggler.job import RoomJugglerJob, filter_genders
from roomjuggler.models import Gender, Guest, Room, Wish


def small_event():
    guests = [
        Guest("Anna", Gender.F),
        Guest("Bob", Gender.M),
        Guest("Carla", Gender.F),
        Guest("Dan", Gender.M),
    ]
    wishes = [Wish("anna@example.org", (1, 3), Gender.F)]
    rooms = [Room("F1", 2, Gender.F), Room("M1", 2, Gender.M)]
    return guests, wishes, rooms


def test_filter_genders_renumbers_guest_ids() -> None:
    guests, _, _ = small_event()
    wishes = [
        Wish("anna@example.org", (1, 3), Gender.F),
        Wish("bob@example.org", (2, 4), Gender.M),
        Wish("dan@example.org", (4,), Gender.M),
    ]

    guests_f, wishes_f = filter_genders(guests, wishes, Gender.F)
    guests_m, wishes_m = filter_genders(guests, wishes, Gender.M)

    assert [g.name for g in guests_f] == ["Anna", "Carla"]
    assert [w.guest_ids for w in wishes_f] == [(1, 2)]
    assert [g.name for g in guests_m] == ["Bob", "Dan"]
    assert [w.guest_ids for w in wishes_m] == [(1, 2), (2,)]


def test_filter_genders_drops_mixed_wishes() -> None:
    guests, _, _ = small_event()
    wishes = [Wish("anna@example.org", (1, 2), Gender.F)]

    guests_f, wishes_f = filter_genders(guests, wishes, Gender.F)

    assert len(guests_f) == 2
    assert wishes_f == []


def test_filter_genders_warns_about_wrong_gender_tag(caplog) -> None:
    guests, _, _ = small_event()
    wishes = [Wish("anna@example.org", (1, 3), Gender.M)]

    with caplog.at_level(logging.WARNING, logger="roomjuggler.job"):
        _, wishes_f = filter_genders(guests, wishes, Gender.F)
        _, wishes_m = filter_genders(guests, wishes, Gender.M)

    assert wishes_f == []
    assert wishes_m == []
    assert "gender tag M disagrees" in caplog.text


def test_filter_genders_warns_about_mixed_guests(caplog) -> None:
    guests, _, _ = small_event()
    wishes = [Wish("anna@example.org", (1, 2), Gender.F)]

    with caplog.at_level(logging.WARNING, logger="roomjuggler.job"):
        filter_genders(guests, wishes, Gender.F)

    assert "not all of its guests are F" in caplog.text


def test_job_builds_one_problem_per_gender() -> None:
    job = RoomJugglerJob(*small_event())

    assert job.n_guests == 4
    assert job.n_beds == 4
    assert job.ropf.n_guests == job.ropm.n_guests == 2
    assert job.ropf.n_wishes == 1
    assert job.ropm.n_wishes == 0
    assert job.statef is None
    assert job.stats()["F"]["max_happiness"] == 1


def test_two_female_guests_share_their_room(fast_config) -> None:
    job = RoomJugglerJob(*small_event())

    statef, statem = job.juggle(fast_config)

    assert statef.room_id_of_guest == {1: 1, 2: 1}
    assert statef.happiness == 1 == job.ropf.max_happiness
    assert statef.fulfilled_wishes == [True]
    assert statem.room_id_of_guest == {1: 1, 2: 1}
    assert statem.happiness == 0


def test_more_guests_than_beds_fails_before_juggling() -> None:
    guests = [Guest(name, Gender.F) for name in ("Anna", "Berta", "Carla")]
    rooms = [Room("F1", 2, Gender.F)]

    with pytest.raises(CapacityError):
        RoomJugglerJob(guests, [], rooms)


@pytest.mark.parametrize("parallel", [False, True])
def test_juggle_both_genders(fast_config, parallel: bool) -> None:
    guests = [Guest(f"F{i}", Gender.F) for i in range(1, 7)] + [
        Guest(f"M{i}", Gender.M) for i in range(1, 5)
    ]
    wishes = [
        Wish("f1@example.org", (1, 2, 3), Gender.F),
        Wish("f4@example.org", (4, 5), Gender.F),
        Wish("m1@example.org", (7, 10), Gender.M),
    ]
    rooms = [
        Room("F1", 3, Gender.F),
        Room("F2", 2, Gender.F),
        Room("F3", 2, Gender.F),
        Room("M1", 2, Gender.M),
        Room("M2", 2, Gender.M),
    ]
    job = RoomJugglerJob(guests, wishes, rooms)

    statef, statem = job.juggle(fast_config, parallel=parallel)

    statef.check_invariants()
    statem.check_invariants()
    assert statef.happiness == job.ropf.max_happiness == 4
    assert statem.happiness == job.ropm.max_happiness == 1
    stats = job.stats()
    assert stats["F"]["fulfilled_wishes"] == 2
    assert stats["M"]["fulfilled_wishes"] == 1
    assert set(job.jugglers) == {Gender.F, Gender.M}
