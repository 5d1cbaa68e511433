"""Exception classes for room juggling.

Configuration errors are raised while building problems and configs, before any
optimization starts. Invariant violations mean the optimizer corrupted its own
state and must never be caught and ignored.
"""


class RoomJugglerError(Exception):
    """Base exception for room juggling errors."""

    pass


class ConfigurationError(RoomJugglerError, ValueError):
    """Raised when guests, rooms, wishes or the optimizer config are invalid."""

    pass


class CapacityError(ConfigurationError):
    """Raised when a problem has more guests than beds."""

    def __init__(self, n_guests: int, n_beds: int):
        self.n_guests = n_guests
        self.n_beds = n_beds
        super().__init__(
            "More guests than beds!"
            f"\n  number of guests = {n_guests}"
            f"\n  number of beds = {n_beds}"
        )


class InvariantViolation(RoomJugglerError, RuntimeError):
    """Raised when an assignment state breaks capacity or consistency rules."""

    pass
