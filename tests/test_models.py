import dataclasses

import pytest

from seating_models import (
    Assignment,
    CapacityExceededError,
    ConfigError,
    GenerationRecord,
    Guest,
    OptimizationResult,
    Preference,
    SeatingConfig,
    SeatingInputError,
    Table,
    coerce_records,
)


class TestSeatingConfig:
    def test_defaults(self):
        config = SeatingConfig()
        assert config.population_size == 100
        assert config.max_generations == 200
        assert config.mutation_rate == 0.05
        assert config.elite_size == 10
        assert config.tournament_size == 5
        assert config.crossover_rate == 0.8
        assert config.target_fitness == 1.0
        assert config.max_stagnation == 20
        assert config.time_limit is None
        assert config.unknown_guest_policy == "warn"

    @pytest.mark.parametrize("overrides", [
        {"population_size": 0},
        {"population_size": 2.5},
        {"max_generations": -1},
        {"max_stagnation": 0},
        {"tournament_size": 0},
        {"elite_size": 10, "population_size": 10},
        {"elite_size": -1},
        {"mutation_rate": 1.5},
        {"crossover_rate": -0.1},
        {"target_fitness": 2},
        {"mutation_rate": True},
        {"time_limit": 0},
        {"unknown_guest_policy": "explode"},
    ])
    def test_rejects_out_of_range_values(self, overrides):
        with pytest.raises(ConfigError):
            SeatingConfig(**overrides)

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            SeatingConfig(population_size=-5)

    def test_from_mapping_accepts_camel_case(self):
        config = SeatingConfig.from_mapping({
            "populationSize": 30, "eliteSize": 2, "targetFitness": 0.9, "max_stagnation": 7,
        })
        assert config.population_size == 30
        assert config.elite_size == 2
        assert config.target_fitness == 0.9
        assert config.max_stagnation == 7

    def test_from_mapping_none_gives_defaults(self):
        assert SeatingConfig.from_mapping(None) == SeatingConfig()

    def test_from_mapping_rejects_unknown_option(self):
        with pytest.raises(ConfigError, match="unknown config option"):
            SeatingConfig.from_mapping({"populationSize": 30, "islands": 4})

    def test_replace_revalidates(self):
        with pytest.raises(ConfigError):
            dataclasses.replace(SeatingConfig(), elite_size=500)


class TestRecords:
    def test_guest_from_camel_case_record(self):
        guest = Guest.from_record({"id": "g1", "name": "Uncle Joe", "eventId": "e1"})
        assert guest == Guest("g1", "Uncle Joe", "e1")

    def test_table_keeps_geometry(self):
        table = Table.from_record({
            "id": "t1", "name": "Head", "capacity": 8, "layoutId": "l1",
            "shape": "round", "x": 120.5, "y": 40,
        })
        assert table.capacity == 8
        assert table.layout_id == "l1"
        assert (table.shape, table.x, table.y) == ("round", 120.5, 40)

    def test_preference_from_snake_and_camel_case(self):
        camel = Preference.from_record({
            "id": "p1", "layoutId": "l1", "guestId1": "a", "guestId2": "b",
            "preferenceType": "must_sit_together", "priority": 10,
        })
        snake = Preference.from_record({
            "id": "p1", "layout_id": "l1", "guest_id1": "a", "guest_id2": "b",
            "preference_type": "must_sit_together", "priority": 10,
        })
        assert camel == snake
        assert camel.priority == 10

    def test_preference_priority_defaults_to_one(self):
        pref = Preference.from_record({"guestId1": "a", "guestId2": "b", "preferenceType": "cannot_sit_together"})
        assert pref.priority == 1

    def test_coerce_records_keeps_instances(self):
        guest = Guest("g1")
        coerced = coerce_records([guest, {"id": "g2"}], Guest)
        assert coerced[0] is guest
        assert coerced[1] == Guest("g2")

    def test_result_to_record(self):
        result = OptimizationResult(
            solution=[Assignment("g1", "t1", 1)],
            fitness=0.75,
            generations=3,
            convergence_history=[GenerationRecord(0, 0.5, 0.25)],
            termination="stagnated",
        )
        assert result.to_record() == {
            "solution": [{"guestId": "g1", "tableId": "t1", "seatNumber": 1}],
            "fitness": 0.75,
            "generations": 3,
            "convergenceHistory": [{"generation": 0, "bestFitness": 0.5, "avgFitness": 0.25}],
            "termination": "stagnated",
        }
        assert result.table_of() == {"g1": "t1"}


def test_capacity_error_names_shortfall():
    error = CapacityExceededError(10, 2)
    assert error.shortfall == 8
    assert "short by 8" in str(error)
    assert isinstance(error, SeatingInputError)
