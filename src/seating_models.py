"""
Records and configuration for the genetic table seating optimizer.

Guests, tables and preferences come from the persistence layer either as the
dataclasses below or as plain mappings (camelCase or snake_case keys). The
optimizer only ever returns Assignment rows plus its convergence history.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Mapping, Optional


# --- Errors ---
class SeatingError(Exception):
    """Base class for every error raised by the seating optimizer."""


class SeatingInputError(SeatingError, ValueError):
    """Guest, table or preference records cannot be used as given."""


class CapacityExceededError(SeatingInputError):
    def __init__(self, guest_count: int, total_capacity: int):
        self.guest_count = guest_count
        self.total_capacity = total_capacity
        self.shortfall = guest_count - total_capacity
        super().__init__(
            f"{guest_count} guests but only {total_capacity} seats "
            f"(short by {self.shortfall})"
        )


class MalformedPreferenceError(SeatingInputError):
    def __init__(self, preference: "Preference", reason: str):
        self.preference = preference
        self.reason = reason
        super().__init__(f"preference {preference.id!r}: {reason}")


class ConfigError(SeatingError, ValueError):
    """A SeatingConfig field is out of range."""


# --- Helpers ---
def _pick(record: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in record:
            return record[key]
    return default


# --- Data Models ---
class PreferenceType:
    MUST_SIT_TOGETHER = "must_sit_together"
    CANNOT_SIT_TOGETHER = "cannot_sit_together"

    SCORED = (MUST_SIT_TOGETHER, CANNOT_SIT_TOGETHER)


@dataclass(frozen=True)
class Guest:
    id: str
    name: str = ""
    event_id: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Guest":
        return cls(
            id=record["id"],
            name=_pick(record, "name", default=""),
            event_id=_pick(record, "eventId", "event_id"),
        )


@dataclass(frozen=True)
class Table:
    id: str
    capacity: int
    name: str = ""
    layout_id: Optional[str] = None
    shape: Optional[str] = None
    x: float = 0.0
    y: float = 0.0

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Table":
        return cls(
            id=record["id"],
            capacity=record["capacity"],
            name=_pick(record, "name", default=""),
            layout_id=_pick(record, "layoutId", "layout_id"),
            shape=_pick(record, "shape"),
            x=_pick(record, "x", default=0.0),
            y=_pick(record, "y", default=0.0),
        )


@dataclass(frozen=True)
class Preference:
    guest_id1: str
    guest_id2: str
    preference_type: str
    priority: int = 1
    id: Optional[str] = None
    layout_id: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Preference":
        return cls(
            guest_id1=_pick(record, "guestId1", "guest_id1"),
            guest_id2=_pick(record, "guestId2", "guest_id2"),
            preference_type=_pick(record, "preferenceType", "preference_type"),
            priority=_pick(record, "priority", default=1),
            id=_pick(record, "id"),
            layout_id=_pick(record, "layoutId", "layout_id"),
        )


@dataclass(frozen=True)
class Assignment:
    guest_id: str
    table_id: str
    seat_number: int

    def to_record(self) -> Dict[str, Any]:
        return {"guestId": self.guest_id, "tableId": self.table_id, "seatNumber": self.seat_number}


@dataclass(frozen=True)
class GenerationRecord:
    generation: int
    best_fitness: float
    avg_fitness: float

    def to_record(self) -> Dict[str, Any]:
        return {
            "generation": self.generation,
            "bestFitness": self.best_fitness,
            "avgFitness": self.avg_fitness,
        }


@dataclass
class OptimizationResult:
    solution: List[Assignment]
    fitness: float
    generations: int
    convergence_history: List[GenerationRecord] = field(default_factory=list)
    termination: str = "converged"

    def to_record(self) -> Dict[str, Any]:
        return {
            "solution": [a.to_record() for a in self.solution],
            "fitness": self.fitness,
            "generations": self.generations,
            "convergenceHistory": [r.to_record() for r in self.convergence_history],
            "termination": self.termination,
        }

    def table_of(self) -> Dict[str, str]:
        """Map guest id -> table id."""
        return {a.guest_id: a.table_id for a in self.solution}


def coerce_records(records, cls) -> list:
    return [r if isinstance(r, cls) else cls.from_record(r) for r in records]


# --- Configuration ---
UNKNOWN_GUEST_POLICIES = ("ignore", "warn", "raise")

_CAMEL_CONFIG_KEYS = {
    "populationSize": "population_size",
    "maxGenerations": "max_generations",
    "mutationRate": "mutation_rate",
    "eliteSize": "elite_size",
    "tournamentSize": "tournament_size",
    "crossoverRate": "crossover_rate",
    "targetFitness": "target_fitness",
    "maxStagnation": "max_stagnation",
    "timeLimit": "time_limit",
    "unknownGuestPolicy": "unknown_guest_policy",
}


@dataclass(frozen=True)
class SeatingConfig:
    """
    Tuning knobs of the genetic search.

    Parameters:
    - population_size: chromosomes per generation (> 0)
    - max_generations: hard cap on evolved generations (> 0)
    - mutation_rate: probability that a child gets one guest relocated
    - elite_size: best chromosomes copied unchanged (0 <= n < population_size)
    - tournament_size: chromosomes sampled per tournament (>= 1)
    - crossover_rate: probability of uniform crossover instead of a plain copy
    - target_fitness: stop as soon as the best fitness reaches this value
    - max_stagnation: stop after this many generations without improvement
    - time_limit: optional wall-clock budget in seconds
    - unknown_guest_policy: "ignore", "warn" or "raise" for malformed preferences
    """

    population_size: int = 100
    max_generations: int = 200
    mutation_rate: float = 0.05
    elite_size: int = 10
    tournament_size: int = 5
    crossover_rate: float = 0.8
    target_fitness: float = 1.0
    max_stagnation: int = 20
    time_limit: Optional[float] = None
    unknown_guest_policy: str = "warn"

    def __post_init__(self):
        for name in ("population_size", "max_generations", "max_stagnation"):
            value = getattr(self, name)
            if not _is_int(value) or value <= 0:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        if not _is_int(self.tournament_size) or self.tournament_size < 1:
            raise ConfigError(f"tournament_size must be >= 1, got {self.tournament_size!r}")
        if not _is_int(self.elite_size) or not 0 <= self.elite_size < self.population_size:
            raise ConfigError(
                f"elite_size must be in [0, {self.population_size}), got {self.elite_size!r}"
            )
        for name in ("mutation_rate", "crossover_rate", "target_fitness"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0.0 <= value <= 1.0:
                raise ConfigError(f"{name} must be a number in [0, 1], got {value!r}")
        if self.time_limit is not None and (
            isinstance(self.time_limit, bool)
            or not isinstance(self.time_limit, (int, float))
            or self.time_limit <= 0
        ):
            raise ConfigError(f"time_limit must be None or > 0, got {self.time_limit!r}")
        if self.unknown_guest_policy not in UNKNOWN_GUEST_POLICIES:
            raise ConfigError(
                f"unknown_guest_policy must be one of {UNKNOWN_GUEST_POLICIES}, "
                f"got {self.unknown_guest_policy!r}"
            )

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]]) -> "SeatingConfig":
        if not values:
            return cls()
        kwargs = {}
        for key, value in values.items():
            name = _CAMEL_CONFIG_KEYS.get(key, key)
            if name not in cls.__dataclass_fields__:
                raise ConfigError(f"unknown config option {key!r}")
            kwargs[name] = value
        return cls(**kwargs)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
