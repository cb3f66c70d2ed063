import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import numpy as np

from seating_models import (
    CapacityExceededError,
    Guest,
    MalformedPreferenceError,
    Preference,
    PreferenceType,
    SeatingInputError,
    Table,
)

logger = logging.getLogger(__name__)


# --- Capacity Validation ---
def validate_capacity(guests: Sequence[Guest], tables: Sequence[Table]) -> int:
    """
    Check the instance before any search work happens and return the total
    number of seats. Raises CapacityExceededError when the guests cannot all
    be seated and SeatingInputError for unusable records.
    """
    _check_unique("guest", [g.id for g in guests])
    _check_unique("table", [t.id for t in tables])
    for table in tables:
        if isinstance(table.capacity, bool) or not isinstance(table.capacity, int) or table.capacity <= 0:
            raise SeatingInputError(
                f"table {table.id!r} needs a positive integer capacity, got {table.capacity!r}"
            )

    total_capacity = sum(t.capacity for t in tables)
    if guests and total_capacity < len(guests):
        raise CapacityExceededError(len(guests), total_capacity)
    return total_capacity


def _check_unique(kind: str, ids: List[str]) -> None:
    seen = set()
    for record_id in ids:
        if record_id in seen:
            raise SeatingInputError(f"duplicate {kind} id {record_id!r}")
        seen.add(record_id)


# --- Preference Compilation ---
@dataclass
class PreferenceIndex:
    """Preferences resolved to guest indices, ready for vectorised scoring."""

    first: np.ndarray
    second: np.ndarray
    priority: np.ndarray
    together: np.ndarray
    dropped: int = 0

    def __len__(self):
        return len(self.first)

    @property
    def total_priority(self) -> float:
        return float(self.priority.sum())

    @classmethod
    def build(cls, guests: Sequence[Guest], preferences: Sequence[Preference],
              policy: str = "warn") -> "PreferenceIndex":
        position = {g.id: i for i, g in enumerate(guests)}
        rows: List[Tuple[int, int, int, bool]] = []
        kinds_by_pair: Dict[Tuple[int, int], set] = defaultdict(set)
        dropped = 0

        for pref in preferences:
            if pref.preference_type not in PreferenceType.SCORED:
                logger.debug("Skipping unscored preference type %r (%s)", pref.preference_type, pref.id)
                dropped += 1
                continue
            reason = _malformed_reason(pref, position)
            if reason:
                if policy == "raise":
                    raise MalformedPreferenceError(pref, reason)
                log = logger.warning if policy == "warn" else logger.debug
                log("Ignoring preference %r: %s", pref.id, reason)
                dropped += 1
                continue

            a, b = position[pref.guest_id1], position[pref.guest_id2]
            together = pref.preference_type == PreferenceType.MUST_SIT_TOGETHER
            rows.append((a, b, pref.priority, together))
            kinds_by_pair[(min(a, b), max(a, b))].add(together)

        for (a, b), kinds in kinds_by_pair.items():
            if len(kinds) > 1:
                logger.info(
                    "Guests %r and %r have both must- and cannot-sit-together preferences; "
                    "both are scored", guests[a].id, guests[b].id,
                )

        if not rows:
            empty = np.zeros(0, dtype=np.intp)
            return cls(empty, empty.copy(), np.zeros(0, dtype=float), np.zeros(0, dtype=bool), dropped)
        first, second, priority, together = zip(*rows)
        return cls(
            first=np.array(first, dtype=np.intp),
            second=np.array(second, dtype=np.intp),
            priority=np.array(priority, dtype=float),
            together=np.array(together, dtype=bool),
            dropped=dropped,
        )


def _malformed_reason(pref: Preference, position: Dict[str, int]) -> str:
    for guest_id in (pref.guest_id1, pref.guest_id2):
        if guest_id not in position:
            return f"unknown guest id {guest_id!r}"
    if pref.guest_id1 == pref.guest_id2:
        return "both sides reference the same guest"
    if isinstance(pref.priority, bool) or not isinstance(pref.priority, int) or pref.priority <= 0:
        return f"priority must be a positive integer, got {pref.priority!r}"
    return ""


# --- Fitness ---
def table_loads(individual: Sequence[int], n_tables: int) -> np.ndarray:
    return np.bincount(np.asarray(individual, dtype=np.intp), minlength=n_tables)


def evaluate(individual: Sequence[int], preferences: PreferenceIndex, capacities: np.ndarray) -> Tuple[float]:
    """Weighted share of satisfied preferences; 0 for an over-capacity seating."""
    loads = table_loads(individual, len(capacities))
    if len(loads) > len(capacities) or np.any(loads > capacities):
        return (0.0,)
    if len(preferences) == 0:
        return (1.0,)

    genes = np.asarray(individual, dtype=np.intp)
    same_table = genes[preferences.first] == genes[preferences.second]
    satisfied = same_table == preferences.together
    return (float(preferences.priority[satisfied].sum()) / preferences.total_priority,)
