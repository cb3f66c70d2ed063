import random
from collections import defaultdict
from operator import attrgetter
from typing import List, Sequence, Tuple

from deap import base, creator

from seating_fitness import table_loads

# --- DEAP Setup ---
# A chromosome is a flat list of table indices keyed by guest index.
creator.create("SeatingFitness", base.Fitness, weights=(1.0,))
creator.create("SeatingChromosome", list, fitness=creator.SeatingFitness)


# --- Initialisation ---
def random_seating(n_guests: int, capacities: Sequence[int], rng: random.Random) -> List[int]:
    """
    Seat guests in random order, each at a random table that still has a free
    seat. The result never exceeds any capacity.
    """
    order = list(range(n_guests))
    rng.shuffle(order)
    remaining = list(capacities)
    open_tables = [t for t, free in enumerate(remaining) if free > 0]

    seating = [0] * n_guests
    for guest in order:
        slot = rng.randrange(len(open_tables))
        table = open_tables[slot]
        seating[guest] = table
        remaining[table] -= 1
        if remaining[table] == 0:
            open_tables[slot] = open_tables[-1]
            open_tables.pop()
    return seating


# --- Selection ---
def select_tournament(individuals, tournsize: int, rng: random.Random):
    aspirants = [rng.choice(individuals) for _ in range(tournsize)]
    return max(aspirants, key=attrgetter("fitness"))


# --- Crossover ---
def repair_capacity(individual, capacities: Sequence[int], rng: random.Random):
    """
    Move guests out of over-full tables, worst overflow first. Each moved
    guest goes to the table with the most free seats (lowest index on ties).
    """
    n_tables = len(capacities)
    loads = table_loads(individual, n_tables).tolist()
    overfull = [t for t in range(n_tables) if loads[t] > capacities[t]]
    if not overfull:
        return individual
    overfull.sort(key=lambda t: (capacities[t] - loads[t], t))

    seated = defaultdict(list)
    for guest, table in enumerate(individual):
        if loads[table] > capacities[table]:
            seated[table].append(guest)

    for table in overfull:
        excess = loads[table] - capacities[table]
        for guest in rng.sample(seated[table], excess):
            target = max(
                (t for t in range(n_tables) if loads[t] < capacities[t]),
                key=lambda t: (capacities[t] - loads[t], -t),
            )
            individual[guest] = target
            loads[table] -= 1
            loads[target] += 1
    return individual


def crossover_uniform(parent_a, parent_b, crossover_rate: float,
                      capacities: Sequence[int], rng: random.Random):
    """Build one child from two parents, gene by gene, then repair capacity."""
    if rng.random() < crossover_rate:
        genes = [a if rng.random() < 0.5 else b for a, b in zip(parent_a, parent_b)]
    else:
        genes = list(rng.choice((parent_a, parent_b)))
    child = type(parent_a)(genes)
    return repair_capacity(child, capacities, rng)


# --- Mutation ---
def mutate_relocate(individual, mutation_rate: float,
                    capacities: Sequence[int], rng: random.Random) -> Tuple[list]:
    if rng.random() >= mutation_rate:
        return (individual,)

    guest = rng.randrange(len(individual))
    current = individual[guest]
    loads = table_loads(individual, len(capacities)).tolist()
    spare = [t for t in range(len(capacities)) if t != current and loads[t] < capacities[t]]

    if spare:
        individual[guest] = rng.choice(spare)
    else:
        # every other table is full: swap with someone seated elsewhere
        others = [g for g, table in enumerate(individual) if table != current]
        if not others:
            return (individual,)
        partner = rng.choice(others)
        individual[guest], individual[partner] = individual[partner], individual[guest]

    del individual.fitness.values
    return (individual,)
