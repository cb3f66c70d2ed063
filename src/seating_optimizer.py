"""
Genetic seating optimizer.

Assigns guests to tables so that no table is over capacity while as much of
the weighted "must sit together" / "cannot sit together" preferences as
possible is satisfied. The search is a generational GA built on DEAP:

    validate -> random feasible population -> repeat
        (evaluate -> record -> elitism -> tournament, uniform crossover
         with capacity repair, relocation mutation)
    until the target fitness, the generation cap, stagnation or the
    time limit stops it.

Every run owns its random source and its DEAP toolbox, so separate runs can
execute concurrently without sharing state.
"""

import logging
import random
import time
from enum import Enum
from typing import Callable, Iterable, List, Optional

import numpy as np
from deap import base, creator, tools

from seating_fitness import PreferenceIndex, evaluate, validate_capacity
from seating_models import (
    Assignment,
    GenerationRecord,
    Guest,
    OptimizationResult,
    Preference,
    SeatingConfig,
    Table,
    coerce_records,
)
from seating_operators import (
    crossover_uniform,
    mutate_relocate,
    random_seating,
    select_tournament,
)

logger = logging.getLogger(__name__)


class OptimizerState(Enum):
    INITIALIZED = "initialized"
    EVOLVING = "evolving"
    CONVERGED = "converged"
    MAX_GENERATIONS_REACHED = "max_generations_reached"
    STAGNATED = "stagnated"
    TIME_LIMIT_REACHED = "time_limit_reached"


class SeatingOptimizer:
    def __init__(self, guests: Iterable, tables: Iterable, preferences: Iterable = (),
                 config=None, rng: Optional[random.Random] = None, seed=None,
                 map_func: Optional[Callable] = None):
        self.guests: List[Guest] = coerce_records(guests, Guest)
        self.tables: List[Table] = coerce_records(tables, Table)
        self.preferences: List[Preference] = coerce_records(preferences, Preference)
        if isinstance(config, SeatingConfig):
            self.config = config
        else:
            self.config = SeatingConfig.from_mapping(config)
        self.rng = rng if rng is not None else random.Random(seed)

        self.capacities = [t.capacity for t in self.tables]
        self.preference_index = None
        if self.guests:
            validate_capacity(self.guests, self.tables)
            self.preference_index = PreferenceIndex.build(
                self.guests, self.preferences, self.config.unknown_guest_policy
            )
        self.toolbox = self._build_toolbox(map_func)
        self.state = OptimizerState.INITIALIZED
        self.logbook = tools.Logbook()
        self.population = []

    def _build_toolbox(self, map_func) -> base.Toolbox:
        cfg, rng, caps = self.config, self.rng, self.capacities
        toolbox = base.Toolbox()
        toolbox.register("map", map_func or map)
        toolbox.register("seating", random_seating, len(self.guests), caps, rng)
        toolbox.register("individual", tools.initIterate, creator.SeatingChromosome, toolbox.seating)
        toolbox.register("population", tools.initRepeat, list, toolbox.individual)
        toolbox.register("evaluate", evaluate, preferences=self.preference_index,
                         capacities=np.array(caps, dtype=np.intp))
        toolbox.register("select", select_tournament, tournsize=cfg.tournament_size, rng=rng)
        toolbox.register("mate", crossover_uniform, crossover_rate=cfg.crossover_rate,
                         capacities=caps, rng=rng)
        toolbox.register("mutate", mutate_relocate, mutation_rate=cfg.mutation_rate,
                         capacities=caps, rng=rng)
        return toolbox

    # --- Evolution ---
    def run(self) -> OptimizationResult:
        if not self.guests:
            self.state = OptimizerState.CONVERGED
            return OptimizationResult(solution=[], fitness=1.0, generations=0,
                                      convergence_history=[], termination=self.state.value)

        cfg, toolbox = self.config, self.toolbox
        logger.info(
            "Seating %d guests at %d tables (%d seats) with %d scored preferences, %d ignored",
            len(self.guests), len(self.tables), sum(self.capacities),
            len(self.preference_index), self.preference_index.dropped,
        )
        logger.debug("Config: %s", cfg.as_dict())
        started = time.perf_counter()

        population = toolbox.population(n=cfg.population_size)
        hof = tools.HallOfFame(1)
        stats = tools.Statistics(lambda ind: ind.fitness.values[0])
        stats.register("avg", np.mean)
        stats.register("max", np.max)
        self.logbook = tools.Logbook()
        self.logbook.header = ["gen", "nevals", "best", "avg", "max"]

        history: List[GenerationRecord] = []
        best = float("-inf")
        stagnation = 0
        generation = 0
        self.state = OptimizerState.EVOLVING

        while self.state is OptimizerState.EVOLVING:
            nevals = self._evaluate(population)
            hof.update(population)
            record = stats.compile(population)
            if record["max"] > best:
                best = float(record["max"])
                stagnation = 0
            else:
                stagnation += 1
            self.logbook.record(gen=generation, nevals=nevals, best=best, **record)
            history.append(GenerationRecord(generation, best, float(record["avg"])))
            logger.debug(self.logbook.stream)

            elite = list(map(toolbox.clone, tools.selBest(population, cfg.elite_size)))
            offspring = [self._breed(population) for _ in range(cfg.population_size - len(elite))]
            population = elite + offspring
            generation += 1
            self.state = self._check_termination(generation, best, stagnation, started)

        self._evaluate(population)
        hof.update(population)
        self.population = population
        champion = hof[0]
        fitness = champion.fitness.values[0]
        logger.info("Stopped after %d generations (%s), best fitness %.4f",
                    generation, self.state.value, fitness)
        return OptimizationResult(
            solution=self._assign_seats(champion),
            fitness=fitness,
            generations=generation,
            convergence_history=history,
            termination=self.state.value,
        )

    def _evaluate(self, population) -> int:
        invalid = [ind for ind in population if not ind.fitness.valid]
        for ind, fit in zip(invalid, self.toolbox.map(self.toolbox.evaluate, invalid)):
            ind.fitness.values = fit
        return len(invalid)

    def _breed(self, population):
        mother = self.toolbox.select(population)
        father = self.toolbox.select(population)
        child = self.toolbox.mate(mother, father)
        child, = self.toolbox.mutate(child)
        return child

    def _check_termination(self, generation: int, best: float, stagnation: int,
                           started: float) -> OptimizerState:
        cfg = self.config
        if best >= cfg.target_fitness:
            return OptimizerState.CONVERGED
        if generation >= cfg.max_generations:
            return OptimizerState.MAX_GENERATIONS_REACHED
        if stagnation >= cfg.max_stagnation:
            return OptimizerState.STAGNATED
        if cfg.time_limit is not None and time.perf_counter() - started >= cfg.time_limit:
            return OptimizerState.TIME_LIMIT_REACHED
        return OptimizerState.EVOLVING

    def _assign_seats(self, chromosome) -> List[Assignment]:
        """Number seats per table from 1, following the original guest order."""
        next_seat = [1] * len(self.tables)
        solution = []
        for guest, table in zip(self.guests, chromosome):
            solution.append(Assignment(guest.id, self.tables[table].id, next_seat[table]))
            next_seat[table] += 1
        return solution


def optimize(guests, tables, preferences=(), config=None, *, rng=None, seed=None,
             map_func=None) -> OptimizationResult:
    """
    Run one seating optimization and return the best assignment found.

    Raises CapacityExceededError before any search when the tables cannot
    hold every guest.
    """
    return SeatingOptimizer(guests, tables, preferences, config,
                            rng=rng, seed=seed, map_func=map_func).run()
