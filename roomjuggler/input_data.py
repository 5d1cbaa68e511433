"""
Loading of guests, wishes and rooms from a JSON input file.

The file is validated with Pydantic models and converted into the typed
`Guest`, `Wish` and `Room` lists of the room juggler. Wishes name their guests,
the names are resolved to dense 1-based guest ids here.

Example:

    {
      "guests": [{"name": "Anna", "gender": "F"}, {"name": "Berta", "gender": "F"}],
      "wishes": [{"mail": "anna@example.org", "guests": ["Anna", "Berta"]}],
      "rooms": [{"name": "Room 1", "capacity": 2, "gender": "F"}]
    }
"""

from __future__ import annotations

import json
import logging
from typing import Dict, List, Tuple

from pydantic import BaseModel, Field, ValidationError

from roomjuggler.errors import ConfigurationError
from roomjuggler.models import Gender, Guest, Room, Wish

logger = logging.getLogger(__name__)


class GuestInfo(BaseModel):
    """Information about a single guest."""

    name: str = Field(description="Unique name of the guest")
    gender: Gender = Field(description="Gender of the guest, M or F")


class WishInfo(BaseModel):
    """Guests that want to share a room."""

    mail: str = Field(default="", description="E-mail the wish was sent with")
    guests: list[str] = Field(min_length=1, description="Names of the guests in this wish")


class RoomInfo(BaseModel):
    """Information about a single room."""

    name: str = Field(description="Name of the room")
    capacity: int = Field(ge=1, description="Number of beds in the room")
    gender: Gender = Field(description="Gender of the guests in the room, M or F")


class JugglerInput(BaseModel):
    """All guests, wishes and rooms of an event."""

    guests: list[GuestInfo] = Field(description="List of guests")
    wishes: list[WishInfo] = Field(default_factory=list, description="List of wishes")
    rooms: list[RoomInfo] = Field(description="List of rooms")


def to_models(data: JugglerInput) -> Tuple[List[Guest], List[Wish], List[Room]]:
    """Convert validated input into guests, wishes (with guest ids) and rooms."""
    guests = [Guest(g.name, g.gender) for g in data.guests]

    id_of_name: Dict[str, int] = {}
    for guest_id, guest in enumerate(guests, start=1):
        if guest.name in id_of_name:
            raise ConfigurationError(f"Guest name {guest.name!r} is not unique")
        id_of_name[guest.name] = guest_id

    wishes: List[Wish] = []
    for info in data.wishes:
        unknown = [name for name in info.guests if name not in id_of_name]
        if unknown:
            raise ConfigurationError(f"Wish from {info.mail!r} names unknown guests {unknown}")
        guest_ids = tuple(id_of_name[name] for name in info.guests)
        genders = {guests[g - 1].gender for g in guest_ids}
        if len(genders) > 1:
            raise ConfigurationError(
                f"Wish from {info.mail!r} mixes genders: {', '.join(info.guests)}"
            )
        wishes.append(Wish(info.mail, guest_ids, genders.pop()))

    rooms = [Room(r.name, r.capacity, r.gender) for r in data.rooms]
    return guests, wishes, rooms


def load_input(filename: str) -> Tuple[List[Guest], List[Wish], List[Room]]:
    """Load guests, wishes and rooms from a JSON file."""
    logger.info("Loading guests, wishes and rooms from %s", filename)
    with open(filename, "r", encoding="utf-8") as f:
        raw = json.load(f)
    try:
        data = JugglerInput.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid input file {filename}:\n{e}") from e

    guests, wishes, rooms = to_models(data)
    logger.info(
        "Loaded %d guests, %d wishes and %d rooms", len(guests), len(wishes), len(rooms)
    )
    return guests, wishes, rooms
