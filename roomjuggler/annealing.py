"""
Simulated annealing over room assignments.

Starting from a capacity-feasible seed assignment, guests are swapped between
rooms or relocated into free beds. Moves are scored incrementally against the
relation matrix and accepted by the Metropolis criterion on a geometric
temperature schedule.
"""

from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass
from enum import Enum
import logging
import math
import random

import tqdm

from roomjuggler.config import JuggleConfig
from roomjuggler.problem import AssignmentState, RoomOccupancyProblem

logger = logging.getLogger(__name__)


class MoveType(Enum):
    SWAP = "swap"
    RELOCATE = "relocate"


@dataclass(frozen=True)
class Move:
    """A proposed move. `target` is a room id for relocates and a guest id for swaps."""

    move_type: MoveType
    guest_id: int
    target: int
    delta: int


class RoomJuggler:
    """
    Simulated annealing optimizer for a single `RoomOccupancyProblem`.

    All random draws go through `rng`, which defaults to a `random.Random`
    seeded with `config.seed`. The optimizer owns the assignment state it
    produces; the problem itself is never mutated.
    """

    def __init__(
        self,
        problem: RoomOccupancyProblem,
        config: JuggleConfig = JuggleConfig(),
        rng: Optional[random.Random] = None,
        should_stop: Optional[Callable[[], bool]] = None,
        show_progress: bool = False,
        label: str = "",
    ):
        self.problem = problem
        self.config = config
        self.rng = rng if rng is not None else random.Random(config.seed)
        self.should_stop = should_stop
        self.show_progress = show_progress
        self.label = label

        self._guest_ids = list(problem.guest_ids)
        self._related_guests: Dict[int, List[int]] = {
            g: sorted(problem.relations.neighbors(g)) for g in problem.guest_ids
        }

        # Per-temperature history for logging/plotting
        self.happiness_history: List[int] = []
        self.temperature_history: List[float] = []
        self.n_attempted_moves = 0
        self.n_accepted_moves = 0
        self.cancelled = False

    def greedy_assignment(self) -> AssignmentState:
        """
        Seed an assignment that keeps wish groups together where possible.

        Wishes are placed largest first, each into the fullest room that still
        holds all of its unplaced guests (a room already hosting part of the
        group is preferred). Everyone left over fills the remaining free beds.
        """
        state = self.problem.new_state()
        order = sorted(
            range(self.problem.n_wishes),
            key=lambda w: len(self.problem.wishes[w].guest_ids),
            reverse=True,
        )
        for wish_id in order:
            wish = self.problem.wishes[wish_id]
            pending = [g for g in dict.fromkeys(wish.guest_ids) if state.room_id_of_guest[g] == 0]
            if not pending:
                continue
            hosting = {state.room_id_of_guest[g] for g in wish.guest_ids} - {0}
            candidates = [r for r in self.problem.room_ids if state.free_beds(r) >= len(pending)]
            if not candidates:
                continue
            preferred = [r for r in candidates if r in hosting]
            room_id = min(preferred or candidates, key=lambda r: (state.free_beds(r), r))
            for guest_id in pending:
                state.place(guest_id, room_id)

        self._fill_free_beds(state, state.unassigned_guests())
        return state

    def random_assignment(self) -> AssignmentState:
        """Seed an assignment by shuffling all guests into the available beds."""
        state = self.problem.new_state()
        beds = [r for r in self.problem.room_ids for _ in range(self.problem.capacity(r))]
        self.rng.shuffle(beds)
        for guest_id, room_id in zip(self._guest_ids, beds):
            state.place(guest_id, room_id)
        return state

    def _fill_free_beds(self, state: AssignmentState, guest_ids: List[int]) -> None:
        room_ids = list(self.problem.room_ids)
        idx = 0
        for guest_id in guest_ids:
            while state.free_beds(room_ids[idx]) == 0:
                idx += 1
            state.place(guest_id, room_ids[idx])

    def propose_move(self, state: AssignmentState) -> Optional[Move]:
        """
        Propose a capacity-feasible move with its happiness delta.

        With probability `p_targeted` the guest is moved towards the room of a
        randomly chosen related guest, otherwise towards a random other room.
        If the target room has a free bed the guest is relocated with
        probability `p_relocate`; otherwise it is swapped with one of the target
        room's occupants (never with the related guest that motivated the move).
        Returns None when no move exists for the drawn guest.
        """
        rng = self.rng
        guest_id = rng.choice(self._guest_ids)
        current = state.room_id_of_guest[guest_id]

        target_room = 0
        partner = None
        related = self._related_guests[guest_id]
        if related and rng.random() < self.config.p_targeted:
            partner = rng.choice(related)
            target_room = state.room_id_of_guest[partner]
            if target_room == current:
                target_room = 0
                partner = None
        if target_room == 0:
            target_room = rng.randrange(1, self.problem.n_rooms)
            if target_room >= current:
                target_room += 1

        occupants = sorted(g for g in state.guest_ids_of_room[target_room] if g != partner)
        if state.free_beds(target_room) > 0 and (
            not occupants or rng.random() < self.config.p_relocate
        ):
            delta = state.relocate_delta(guest_id, target_room)
            return Move(MoveType.RELOCATE, guest_id, target_room, delta)
        if not occupants:
            return None
        other = rng.choice(occupants)
        return Move(MoveType.SWAP, guest_id, other, state.swap_delta(guest_id, other))

    def accept(self, delta: int, temperature: float) -> bool:
        """Metropolis criterion: always take improvements, worse moves with exp(delta / t)."""
        return delta >= 0 or self.rng.random() < math.exp(delta / temperature)

    @staticmethod
    def apply_move(state: AssignmentState, move: Move) -> None:
        if move.move_type == MoveType.RELOCATE:
            state.relocate(move.guest_id, move.target, move.delta)
        else:
            state.swap(move.guest_id, move.target, move.delta)

    def juggle(self) -> AssignmentState:
        """
        Run the full annealing schedule and return the best assignment found.

        Raises:
            InvariantViolation: if the seeded or final state is inconsistent.
        """
        if self.config.start_from_random:
            logger.info("%sSeeding assignment randomly...", self._prefix())
            state = self.random_assignment()
        else:
            logger.info("%sSeeding assignment greedily from wishes...", self._prefix())
            state = self.greedy_assignment()
        state.check_invariants()

        best = state.copy()
        self.happiness_history = [state.happiness]
        self.temperature_history = [self.config.t_history[0]]

        if self.problem.n_rooms < 2 or self.problem.n_guests == 0:
            logger.info(
                "%sNothing to juggle with %d guests in %d rooms",
                self._prefix(),
                self.problem.n_guests,
                self.problem.n_rooms,
            )
            return state

        logger.info(
            "%sJuggling %d guests over %d temperatures (%d iterations)...",
            self._prefix(),
            self.problem.n_guests,
            len(self.config.t_history),
            self.config.n_total_iter,
        )
        bar = tqdm.tqdm(
            self.config.t_history,
            desc=f"{self._prefix()}Simulated annealing",
            disable=not self.show_progress,
        )
        for temperature in bar:
            if self.should_stop is not None and self.should_stop():
                self.cancelled = True
                logger.warning(
                    "%sJuggling cancelled after %d of %d iterations",
                    self._prefix(),
                    self.n_attempted_moves,
                    self.config.n_total_iter,
                )
                break

            for _ in range(self.config.n_iter):
                self.n_attempted_moves += 1
                move = self.propose_move(state)
                if move is None or not self.accept(move.delta, temperature):
                    continue
                self.apply_move(state, move)
                self.n_accepted_moves += 1
                if state.happiness > best.happiness:
                    best = state.copy()

            self.happiness_history.append(state.happiness)
            self.temperature_history.append(temperature)
            bar.set_postfix(
                happiness=state.happiness, best=best.happiness, temp=f"{temperature:.2e}"
            )
        bar.close()

        if best.happiness > state.happiness:
            state = best
        state.check_invariants()
        logger.info(
            "%sFinished with happiness %d/%d, %d/%d wishes fulfilled",
            self._prefix(),
            state.happiness,
            self.problem.max_happiness,
            state.n_fulfilled_wishes,
            self.problem.n_wishes,
        )
        return state

    def stats(self, state: AssignmentState) -> Dict[str, Any]:
        return {
            "n_guests": self.problem.n_guests,
            "n_wishes": self.problem.n_wishes,
            "n_rooms": self.problem.n_rooms,
            "n_beds": self.problem.n_beds,
            "happiness": state.happiness,
            "max_happiness": self.problem.max_happiness,
            "total_relation_weight": self.problem.total_relation_weight,
            "fulfilled_wishes": state.n_fulfilled_wishes,
            "attempted_moves": self.n_attempted_moves,
            "accepted_moves": self.n_accepted_moves,
            "cancelled": self.cancelled,
        }

    def _prefix(self) -> str:
        return f"[{self.label}] " if self.label else ""


def juggle(
    problem: RoomOccupancyProblem,
    config: JuggleConfig = JuggleConfig(),
    rng: Optional[random.Random] = None,
    should_stop: Optional[Callable[[], bool]] = None,
) -> AssignmentState:
    """Optimize `problem` with simulated annealing and return the assignment."""
    return RoomJuggler(problem, config, rng=rng, should_stop=should_stop).juggle()
