"""
Room occupancy problem and its assignment state.

`RoomOccupancyProblem` is the read-only problem definition for one gender. The
mutable solution lives in an `AssignmentState` created by
`RoomOccupancyProblem.new_state()` and owned by whoever is optimizing it.
"""

from typing import Dict, List, Mapping, Optional, Set, Tuple
import logging

from roomjuggler.errors import CapacityError, ConfigurationError, InvariantViolation
from roomjuggler.models import Guest, Room, Wish, find_relations

logger = logging.getLogger(__name__)


class RoomOccupancyProblem:
    """
    Guests, wishes and rooms of one gender together with their relation matrix.

    Raises:
        CapacityError: if there are more guests than beds.
        ConfigurationError: if a wish references an unknown guest id or
            guests and rooms do not share a single gender.
    """

    def __init__(self, guests: List[Guest], wishes: List[Wish], rooms: List[Room]):
        self.guests: Tuple[Guest, ...] = tuple(guests)
        self.wishes: Tuple[Wish, ...] = tuple(wishes)
        self.rooms: Tuple[Room, ...] = tuple(rooms)

        self.n_guests = len(self.guests)
        self.n_wishes = len(self.wishes)
        self.n_rooms = len(self.rooms)
        self.n_beds = sum(r.capacity for r in self.rooms)

        if self.n_guests > self.n_beds:
            raise CapacityError(self.n_guests, self.n_beds)

        genders = {g.gender for g in self.guests} | {r.gender for r in self.rooms}
        if len(genders) > 1:
            raise ConfigurationError(
                f"Guests and rooms of one problem must share a gender, got {sorted(x.value for x in genders)}"
            )

        self.wish_ids_of_guest: Dict[int, List[int]] = {
            g: [] for g in range(1, self.n_guests + 1)
        }
        for wish_id, wish in enumerate(self.wishes):
            for guest_id in wish.guest_ids:
                if guest_id not in self.wish_ids_of_guest:
                    raise ConfigurationError(
                        f"{wish!r} references guest id {guest_id} (valid ids: 1..{self.n_guests})"
                    )
                self.wish_ids_of_guest[guest_id].append(wish_id)

        self.relations = find_relations(list(self.wishes), self.n_guests)
        self.max_happiness = self.relations.nnz()
        self.total_relation_weight = self.relations.total_weight()

        logger.debug(
            "Built problem with %d guests, %d wishes, %d rooms, %d beds, max happiness %d",
            self.n_guests,
            self.n_wishes,
            self.n_rooms,
            self.n_beds,
            self.max_happiness,
        )

    @property
    def guest_ids(self) -> range:
        return range(1, self.n_guests + 1)

    @property
    def room_ids(self) -> range:
        return range(1, self.n_rooms + 1)

    def capacity(self, room_id: int) -> int:
        return self.rooms[room_id - 1].capacity

    def new_state(self) -> "AssignmentState":
        """Return an empty assignment state for this problem."""
        return AssignmentState(self)

    def __repr__(self):
        return (
            f"RoomOccupancyProblem(guests={self.n_guests}, wishes={self.n_wishes}, "
            f"rooms={self.n_rooms}, beds={self.n_beds}, max_happiness={self.max_happiness})"
        )


def compute_happiness(problem: RoomOccupancyProblem, room_id_of_guest: Mapping[int, int]) -> int:
    """Sum of relation weights over all guest pairs sharing a room, each pair once."""
    total = 0
    for (i, j), weight in problem.relations.items():
        room_i = room_id_of_guest.get(i, 0)
        if room_i != 0 and room_i == room_id_of_guest.get(j, 0):
            total += weight
    return total


def is_wish_fulfilled(wish: Wish, room_id_of_guest: Mapping[int, int]) -> bool:
    rooms = {room_id_of_guest.get(g, 0) for g in wish.guest_ids}
    return len(rooms) == 1 and 0 not in rooms


class AssignmentState:
    """
    Mutable room assignment of one problem.

    `room_id_of_guest` and `guest_ids_of_room` are kept as exact inverses and
    `happiness` / `fulfilled_wishes` are updated incrementally on every move.
    """

    def __init__(self, problem: RoomOccupancyProblem):
        self.problem = problem
        self.room_id_of_guest: Dict[int, int] = {g: 0 for g in problem.guest_ids}
        self.guest_ids_of_room: Dict[int, Set[int]] = {r: set() for r in problem.room_ids}
        self.fulfilled_wishes: List[bool] = [False] * problem.n_wishes
        self.happiness = 0

    def copy(self) -> "AssignmentState":
        other = AssignmentState.__new__(AssignmentState)
        other.problem = self.problem
        other.room_id_of_guest = dict(self.room_id_of_guest)
        other.guest_ids_of_room = {r: set(gs) for r, gs in self.guest_ids_of_room.items()}
        other.fulfilled_wishes = list(self.fulfilled_wishes)
        other.happiness = self.happiness
        return other

    @property
    def n_fulfilled_wishes(self) -> int:
        return sum(self.fulfilled_wishes)

    def free_beds(self, room_id: int) -> int:
        return self.problem.capacity(room_id) - len(self.guest_ids_of_room[room_id])

    def unassigned_guests(self) -> List[int]:
        return [g for g, r in self.room_id_of_guest.items() if r == 0]

    def affinity(self, guest_id: int, room_id: int, exclude: Optional[int] = None) -> int:
        """Sum of relations between `guest_id` and the other occupants of `room_id`."""
        total = 0
        for other, weight in self.problem.relations.neighbors(guest_id).items():
            if other != exclude and self.room_id_of_guest[other] == room_id:
                total += weight
        return total

    def relocate_delta(self, guest_id: int, room_id: int) -> int:
        current = self.room_id_of_guest[guest_id]
        return self.affinity(guest_id, room_id) - self.affinity(guest_id, current)

    def swap_delta(self, guest_a: int, guest_b: int) -> int:
        room_a = self.room_id_of_guest[guest_a]
        room_b = self.room_id_of_guest[guest_b]
        delta_a = self.affinity(guest_a, room_b, exclude=guest_b) - self.affinity(guest_a, room_a)
        delta_b = self.affinity(guest_b, room_a, exclude=guest_a) - self.affinity(guest_b, room_b)
        return delta_a + delta_b

    def place(self, guest_id: int, room_id: int) -> None:
        """Assign a still unassigned guest to a room with a free bed."""
        if self.room_id_of_guest[guest_id] != 0:
            raise InvariantViolation(
                f"Guest {guest_id} is already in room {self.room_id_of_guest[guest_id]}"
            )
        self._check_free_bed(guest_id, room_id)
        self.happiness += self.affinity(guest_id, room_id)
        self._move(guest_id, room_id)
        self._update_wishes((guest_id,))

    def relocate(self, guest_id: int, room_id: int, delta: Optional[int] = None) -> None:
        """Move an assigned guest into another room with a free bed."""
        current = self.room_id_of_guest[guest_id]
        if current == 0:
            raise InvariantViolation(f"Guest {guest_id} cannot be relocated, not assigned yet")
        if current == room_id:
            raise InvariantViolation(f"Guest {guest_id} is already in room {room_id}")
        self._check_free_bed(guest_id, room_id)
        if delta is None:
            delta = self.relocate_delta(guest_id, room_id)
        self.guest_ids_of_room[current].discard(guest_id)
        self._move(guest_id, room_id)
        self.happiness += delta
        self._update_wishes((guest_id,))

    def swap(self, guest_a: int, guest_b: int, delta: Optional[int] = None) -> None:
        """Exchange the rooms of two guests in different rooms."""
        room_a = self.room_id_of_guest[guest_a]
        room_b = self.room_id_of_guest[guest_b]
        if room_a == 0 or room_b == 0 or room_a == room_b:
            raise InvariantViolation(
                f"Cannot swap guest {guest_a} (room {room_a}) with guest {guest_b} (room {room_b})"
            )
        if delta is None:
            delta = self.swap_delta(guest_a, guest_b)
        self.guest_ids_of_room[room_a].discard(guest_a)
        self.guest_ids_of_room[room_b].discard(guest_b)
        self._move(guest_a, room_b)
        self._move(guest_b, room_a)
        self.happiness += delta
        self._update_wishes((guest_a, guest_b))

    def _check_free_bed(self, guest_id: int, room_id: int) -> None:
        if room_id not in self.guest_ids_of_room:
            raise InvariantViolation(f"Room {room_id} does not exist")
        if self.free_beds(room_id) <= 0:
            raise InvariantViolation(
                f"Room {room_id} is full ({self.problem.capacity(room_id)} beds), "
                f"cannot take guest {guest_id}"
            )

    def _move(self, guest_id: int, room_id: int) -> None:
        self.room_id_of_guest[guest_id] = room_id
        self.guest_ids_of_room[room_id].add(guest_id)

    def _update_wishes(self, guest_ids) -> None:
        wish_ids = set()
        for guest_id in guest_ids:
            wish_ids.update(self.problem.wish_ids_of_guest[guest_id])
        for wish_id in wish_ids:
            self.fulfilled_wishes[wish_id] = is_wish_fulfilled(
                self.problem.wishes[wish_id], self.room_id_of_guest
            )

    def check_invariants(self) -> None:
        """Raise InvariantViolation if the state is not a consistent, feasible assignment."""
        problem = self.problem
        for guest_id, room_id in self.room_id_of_guest.items():
            if room_id == 0:
                raise InvariantViolation(f"Guest {guest_id} is not assigned to any room")
            if guest_id not in self.guest_ids_of_room.get(room_id, ()):
                raise InvariantViolation(
                    f"Guest {guest_id} maps to room {room_id} but the room does not list the guest"
                )
            if problem.guests[guest_id - 1].gender != problem.rooms[room_id - 1].gender:
                raise InvariantViolation(f"Guest {guest_id} is in a room of another gender")

        for room_id, guest_ids in self.guest_ids_of_room.items():
            if len(guest_ids) > problem.capacity(room_id):
                raise InvariantViolation(
                    f"Room {room_id} holds {len(guest_ids)} guests "
                    f"(capacity {problem.capacity(room_id)})"
                )
            for guest_id in guest_ids:
                if self.room_id_of_guest.get(guest_id) != room_id:
                    raise InvariantViolation(
                        f"Room {room_id} lists guest {guest_id} who maps to "
                        f"room {self.room_id_of_guest.get(guest_id)}"
                    )

        expected = compute_happiness(problem, self.room_id_of_guest)
        if expected != self.happiness:
            raise InvariantViolation(
                f"Running happiness {self.happiness} drifted from recomputed {expected}"
            )

        for wish_id, wish in enumerate(problem.wishes):
            if self.fulfilled_wishes[wish_id] != is_wish_fulfilled(wish, self.room_id_of_guest):
                raise InvariantViolation(f"Fulfillment flag of wish {wish_id} is out of date")

    def __repr__(self):
        return (
            f"AssignmentState(happiness={self.happiness}/{self.problem.max_happiness}, "
            f"fulfilled_wishes={self.n_fulfilled_wishes}/{self.problem.n_wishes})"
        )
