import matplotlib

matplotlib.use("Agg")

import pytest

from seating_models import Guest, Preference, PreferenceType, SeatingConfig, Table


@pytest.fixture
def make_guests():
    def _make(n):
        return [Guest(id=f"g{i}", name=f"Guest {i}", event_id="event-1") for i in range(1, n + 1)]
    return _make


@pytest.fixture
def make_tables():
    def _make(*capacities):
        return [
            Table(id=f"t{i}", name=f"Table {i}", capacity=cap, layout_id="layout-1")
            for i, cap in enumerate(capacities, start=1)
        ]
    return _make


@pytest.fixture
def must():
    def _make(a, b, priority=1):
        return Preference(a, b, PreferenceType.MUST_SIT_TOGETHER, priority, id=f"must-{a}-{b}")
    return _make


@pytest.fixture
def cannot():
    def _make(a, b, priority=1):
        return Preference(a, b, PreferenceType.CANNOT_SIT_TOGETHER, priority, id=f"cannot-{a}-{b}")
    return _make


@pytest.fixture
def small_config():
    """Small population for fast tests."""
    return SeatingConfig(
        population_size=40,
        max_generations=80,
        mutation_rate=0.3,
        elite_size=4,
        tournament_size=3,
        crossover_rate=0.8,
        max_stagnation=30,
    )


@pytest.fixture
def loads():
    def _loads(result):
        counts = {}
        for a in result.solution:
            counts[a.table_id] = counts.get(a.table_id, 0) + 1
        return counts
    return _loads
