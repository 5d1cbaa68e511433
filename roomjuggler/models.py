"""
Data model of the room juggler: guests, wishes, rooms and the relation matrix.

Guests and rooms are referenced everywhere by dense 1-based ids, i.e. their
position in the guest or room list. Room id 0 means "not assigned yet".
"""

from typing import Dict, Iterable, Iterator, List, Tuple
from dataclasses import dataclass, field
from collections import defaultdict
from enum import Enum
from itertools import combinations

from roomjuggler.errors import ConfigurationError


class Gender(Enum):
    F = "F"
    M = "M"


def _coerce_gender(value, owner: str) -> Gender:
    if isinstance(value, Gender):
        return value
    try:
        return Gender(value)
    except ValueError:
        raise ConfigurationError(f"Unknown gender {value!r} for {owner}") from None


@dataclass(frozen=True)
class Guest:
    name: str
    gender: Gender

    def __post_init__(self):
        object.__setattr__(self, "gender", _coerce_gender(self.gender, f"guest {self.name}"))

    def __repr__(self):
        return f"Guest({self.name}, gender={self.gender.value})"


@dataclass(frozen=True)
class Wish:
    """A group of guests that want to share the same room."""

    mail: str
    guest_ids: Tuple[int, ...]
    gender: Gender

    def __post_init__(self):
        object.__setattr__(self, "guest_ids", tuple(self.guest_ids))
        object.__setattr__(self, "gender", _coerce_gender(self.gender, f"wish from {self.mail}"))
        if not self.guest_ids:
            raise ConfigurationError(f"Wish from {self.mail} contains no guests")

    def __repr__(self):
        return f"{len(self.guest_ids)}-person Wish(from={self.mail}, guests={list(self.guest_ids)})"


@dataclass(frozen=True)
class Room:
    name: str
    capacity: int
    gender: Gender

    def __post_init__(self):
        object.__setattr__(self, "gender", _coerce_gender(self.gender, f"room {self.name}"))
        if int(self.capacity) < 1:
            raise ConfigurationError(
                f"Room {self.name} has capacity {self.capacity} (minimum 1 required)"
            )
        object.__setattr__(self, "capacity", int(self.capacity))

    def __repr__(self):
        return f"{self.capacity}-person Room({self.name}, gender={self.gender.value})"


def _pair(i: int, j: int) -> Tuple[int, int]:
    return (i, j) if i < j else (j, i)


@dataclass
class RelationMatrix:
    """
    Sparse symmetric matrix of relation weights between guests.

    The weight of a pair is the number of wishes both guests appear in. Only
    nonzero pairs are stored, keyed by the ordered pair (smaller id first), and
    mirrored into a per-guest adjacency index for fast delta computations.
    """

    n_guests: int
    _weights: Dict[Tuple[int, int], int] = field(default_factory=dict)
    _neighbors: Dict[int, Dict[int, int]] = field(default_factory=lambda: defaultdict(dict))

    def add(self, i: int, j: int, weight: int = 1) -> None:
        if i == j:
            return
        key = _pair(i, j)
        value = self._weights.get(key, 0) + weight
        self._weights[key] = value
        self._neighbors[i][j] = value
        self._neighbors[j][i] = value

    def __getitem__(self, key: Tuple[int, int]) -> int:
        i, j = key
        if i == j:
            return 0
        return self._weights.get(_pair(i, j), 0)

    def __len__(self) -> int:
        return len(self._weights)

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        return iter(self._weights)

    def items(self) -> Iterable[Tuple[Tuple[int, int], int]]:
        return self._weights.items()

    def neighbors(self, guest_id: int) -> Dict[int, int]:
        """Return {other guest id: weight} for every guest related to `guest_id`."""
        return self._neighbors.get(guest_id, {})

    def nnz(self) -> int:
        """Number of related guest pairs, each unordered pair counted once."""
        return sum(1 for w in self._weights.values() if w != 0)

    def total_weight(self) -> int:
        return sum(self._weights.values())


def find_relations(wishes: List[Wish], n_guests: int) -> RelationMatrix:
    """Build the relation matrix: +1 for every pair of guests sharing a wish."""
    relations = RelationMatrix(n_guests)
    for wish in wishes:
        for i, j in combinations(sorted(set(wish.guest_ids)), 2):
            relations.add(i, j)
    return relations
