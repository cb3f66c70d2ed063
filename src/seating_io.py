import json
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

from seating_models import (
    Guest,
    OptimizationResult,
    Preference,
    SeatingConfig,
    SeatingInputError,
    Table,
    coerce_records,
)


def load_instance(path) -> Tuple[List[Guest], List[Table], List[Preference], SeatingConfig]:
    """
    Read a seating instance from a JSON file.

    Expected layout:
        {"guests": [...], "tables": [...], "preferences": [...], "config": {...}}
    "preferences" and "config" may be omitted.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise SeatingInputError(f"{path}: expected a JSON object at the top level")
    try:
        guests = coerce_records(data.get("guests", []), Guest)
        tables = coerce_records(data.get("tables", []), Table)
        preferences = coerce_records(data.get("preferences", []), Preference)
    except (KeyError, TypeError) as exc:
        raise SeatingInputError(f"{path}: malformed record ({exc})") from exc
    config = data.get("config")
    if config is not None and not isinstance(config, dict):
        raise SeatingInputError(f"{path}: \"config\" must be a JSON object")
    config = SeatingConfig.from_mapping(config)
    return guests, tables, preferences, config


def save_result(result: OptimizationResult, path) -> Path:
    path = Path(path)
    path.write_text(json.dumps(result.to_record(), indent=2), encoding="utf-8")
    return path


def group_by_table(result: OptimizationResult, guests: Sequence[Guest],
                   tables: Sequence[Table]) -> Dict[str, List[str]]:
    """Guest names per table id, in seat order. Empty tables map to []."""
    names = {g.id: g.name or g.id for g in guests}
    groups: Dict[str, List[str]] = {t.id: [] for t in tables}
    for assignment in sorted(result.solution, key=lambda a: (a.table_id, a.seat_number)):
        groups[assignment.table_id].append(names[assignment.guest_id])
    return groups
