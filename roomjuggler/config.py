"""Configuration of the simulated annealing optimization."""

from typing import Any, Dict, List, Optional, Tuple
from dataclasses import dataclass, field, fields, asdict
import json
import logging
from numbers import Real

from roomjuggler.errors import ConfigurationError

logger = logging.getLogger(__name__)


def temperature_history(t_0: float, t_min: float, beta: float) -> List[float]:
    """Temperatures t_0, t_0*beta, t_0*beta**2, ... up to the first one <= t_min."""
    temperatures = [t_0]
    t = t_0
    while t > t_min:
        t *= beta
        temperatures.append(t)
    return temperatures


@dataclass(frozen=True)
class JuggleConfig:
    """
    Configuration of the underlying simulated annealing optimization.

    Attributes:
        n_iter: number of move attempts per temperature
        beta: temperature decrease factor, 0 < beta < 1
        t_0: starting temperature
        t_min: minimum temperature, the schedule stops at the first value below it
        p_relocate: probability of trying a relocate (instead of a swap) when the
            target room has a free bed
        p_targeted: probability of moving a guest towards a related guest instead
            of towards a random room
        seed: seed for the random number generator, None for a random run
        start_from_random: seed the assignment randomly instead of greedily
        t_history: temperature steps (derived)
        n_total_iter: total number of move attempts, n_iter * len(t_history) (derived)
    """

    n_iter: int = 300
    beta: float = 0.999
    t_0: float = 1.0
    t_min: float = 1e-7
    p_relocate: float = 0.5
    p_targeted: float = 0.5
    seed: Optional[int] = None
    start_from_random: bool = False
    t_history: Tuple[float, ...] = field(init=False, repr=False)
    n_total_iter: int = field(init=False)

    def __post_init__(self):
        if isinstance(self.n_iter, bool) or not isinstance(self.n_iter, int):
            raise ConfigurationError(f"n_iter must be an integer, got {self.n_iter!r}")
        for name in ("beta", "t_0", "t_min", "p_relocate", "p_targeted"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Real):
                raise ConfigurationError(f"{name} must be a number, got {value!r}")
            object.__setattr__(self, name, float(value))
        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int)):
            raise ConfigurationError(f"seed must be an integer or null, got {self.seed!r}")

        if not 0 < self.beta < 1:
            raise ConfigurationError(f"Condition 0 < beta < 1 violated with beta = {self.beta}")
        if self.n_iter < 1:
            raise ConfigurationError(f"n_iter must be at least 1, got {self.n_iter}")
        if self.t_0 <= 0 or self.t_min <= 0:
            raise ConfigurationError(
                f"Temperatures must be positive, got t_0 = {self.t_0}, t_min = {self.t_min}"
            )
        for name in ("p_relocate", "p_targeted"):
            value = getattr(self, name)
            if not 0 <= value <= 1:
                raise ConfigurationError(f"{name} must be within [0, 1], got {value}")

        t_history = tuple(temperature_history(self.t_0, self.t_min, self.beta))
        object.__setattr__(self, "t_history", t_history)
        object.__setattr__(self, "n_total_iter", self.n_iter * len(t_history))

    def options(self) -> Dict[str, Any]:
        """Constructor options of this config, without the derived fields."""
        data = asdict(self)
        data.pop("t_history")
        data.pop("n_total_iter")
        return data

    def replace(self, **changes: Any) -> "JuggleConfig":
        return JuggleConfig(**{**self.options(), **changes})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JuggleConfig":
        allowed = {f.name for f in fields(cls) if f.init}
        unknown = set(data) - allowed
        if unknown:
            raise ConfigurationError(f"Unknown config options: {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def from_file(cls, path: str) -> "JuggleConfig":
        """Load a config from a JSON file with the constructor options as keys."""
        with open(path, "r") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a JSON object")
        config = cls.from_dict(data)
        logger.info(f"Loaded juggle configuration from {path}")
        return config
