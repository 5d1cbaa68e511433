"""
A room juggler job: all guests, wishes and rooms, split into one problem per gender.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple
from concurrent.futures import ThreadPoolExecutor
import logging

from roomjuggler.annealing import RoomJuggler
from roomjuggler.config import JuggleConfig
from roomjuggler.models import Gender, Guest, Room, Wish
from roomjuggler.problem import AssignmentState, RoomOccupancyProblem

logger = logging.getLogger(__name__)


def filter_genders(
    guests: List[Guest], wishes: List[Wish], gender: Gender
) -> Tuple[List[Guest], List[Wish]]:
    """
    Restrict guests and wishes to one gender.

    Guest ids in the returned wishes are renumbered to dense 1-based ids into
    the returned guest list. Wishes that mix genders are dropped with a warning.
    """
    new_id_of_guest: Dict[int, int] = {}
    filtered_guests: List[Guest] = []
    for guest_id, guest in enumerate(guests, start=1):
        if guest.gender == gender:
            filtered_guests.append(guest)
            new_id_of_guest[guest_id] = len(filtered_guests)

    filtered_wishes: List[Wish] = []
    for wish in wishes:
        if wish.gender != gender:
            continue
        members = [g for g in wish.guest_ids if g in new_id_of_guest]
        if not members:
            logger.warning(
                f"Dropping {wish!r}: its gender tag {gender.value} disagrees with "
                f"the gender of all of its guests"
            )
            continue
        if len(members) < len(wish.guest_ids):
            logger.warning(f"Dropping {wish!r}: not all of its guests are {gender.value}")
            continue
        filtered_wishes.append(
            Wish(wish.mail, tuple(new_id_of_guest[g] for g in wish.guest_ids), wish.gender)
        )
    return filtered_guests, filtered_wishes


class RoomJugglerJob:
    """
    Guests, rooms and wishes of an event, a problem that needs juggling!

    Attributes:
        n_guests, n_wishes, n_rooms, n_beds: totals over both genders
        ropf, ropm: room occupancy problems of the female and male guests
        statef, statem: their assignments, None until `juggle()` ran
    """

    def __init__(self, guests: List[Guest], wishes: List[Wish], rooms: List[Room]):
        self.n_guests = len(guests)
        self.n_wishes = len(wishes)
        self.n_rooms = len(rooms)
        self.n_beds = sum(r.capacity for r in rooms)

        guests_f, wishes_f = filter_genders(guests, wishes, Gender.F)
        guests_m, wishes_m = filter_genders(guests, wishes, Gender.M)
        rooms_f = [r for r in rooms if r.gender == Gender.F]
        rooms_m = [r for r in rooms if r.gender == Gender.M]

        self.ropf = RoomOccupancyProblem(guests_f, wishes_f, rooms_f)
        self.ropm = RoomOccupancyProblem(guests_m, wishes_m, rooms_m)

        self.statef: Optional[AssignmentState] = None
        self.statem: Optional[AssignmentState] = None
        self.jugglers: Dict[Gender, RoomJuggler] = {}

    def problem(self, gender: Gender) -> RoomOccupancyProblem:
        return self.ropf if gender == Gender.F else self.ropm

    def state(self, gender: Gender) -> Optional[AssignmentState]:
        return self.statef if gender == Gender.F else self.statem

    def juggle(
        self,
        config: JuggleConfig = JuggleConfig(),
        parallel: bool = False,
        should_stop: Optional[Callable[[], bool]] = None,
        show_progress: bool = False,
    ) -> Tuple[AssignmentState, AssignmentState]:
        """
        Optimize both problems and return (statef, statem).

        The problems share no state, so with `parallel=True` they are solved on
        two worker threads.
        """
        self.jugglers = {
            gender: RoomJuggler(
                self.problem(gender),
                config,
                should_stop=should_stop,
                show_progress=show_progress,
                label=gender.value,
            )
            for gender in (Gender.F, Gender.M)
        }
        if parallel:
            with ThreadPoolExecutor(max_workers=2) as pool:
                futures = {g: pool.submit(j.juggle) for g, j in self.jugglers.items()}
                states = {g: f.result() for g, f in futures.items()}
        else:
            states = {g: j.juggle() for g, j in self.jugglers.items()}

        self.statef = states[Gender.F]
        self.statem = states[Gender.M]
        return self.statef, self.statem

    def stats(self) -> Dict[str, Any]:
        """Totals of the job plus per-gender results of the last `juggle()` run."""
        stats: Dict[str, Any] = {
            "n_guests": self.n_guests,
            "n_wishes": self.n_wishes,
            "n_rooms": self.n_rooms,
            "n_beds": self.n_beds,
        }
        for gender in (Gender.F, Gender.M):
            state = self.state(gender)
            juggler = self.jugglers.get(gender)
            if state is not None and juggler is not None:
                stats[gender.value] = juggler.stats(state)
            else:
                problem = self.problem(gender)
                stats[gender.value] = {
                    "n_guests": problem.n_guests,
                    "n_wishes": problem.n_wishes,
                    "n_rooms": problem.n_rooms,
                    "n_beds": problem.n_beds,
                    "max_happiness": problem.max_happiness,
                }
        return stats

    def __repr__(self):
        return (
            f"RoomJugglerJob(rooms={self.n_rooms} (F {self.ropf.n_rooms}, M {self.ropm.n_rooms}), "
            f"beds={self.n_beds} (F {self.ropf.n_beds}, M {self.ropm.n_beds}), "
            f"guests={self.n_guests} (F {self.ropf.n_guests}, M {self.ropm.n_guests}), "
            f"wishes={self.n_wishes} (F {self.ropf.n_wishes}, M {self.ropm.n_wishes}))"
        )
