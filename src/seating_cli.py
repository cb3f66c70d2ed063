import argparse
import dataclasses
import logging
import sys

from seating_io import group_by_table, load_instance, save_result
from seating_models import SeatingError
from seating_optimizer import optimize


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="seating-optimize",
        description="Assign guests to tables with a genetic algorithm.",
    )
    parser.add_argument("instance", help="JSON file with guests, tables and preferences")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--population-size", type=int)
    parser.add_argument("--max-generations", type=int)
    parser.add_argument("--time-limit", type=float, help="wall-clock budget in seconds")
    parser.add_argument("--output", help="write the result as JSON to this file")
    parser.add_argument("--plot", action="store_true", help="show convergence and seating plots")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        guests, tables, preferences, config = load_instance(args.instance)
        overrides = {
            "population_size": args.population_size,
            "max_generations": args.max_generations,
            "time_limit": args.time_limit,
        }
        config = dataclasses.replace(config, **{k: v for k, v in overrides.items() if v is not None})
        result = optimize(guests, tables, preferences, config, seed=args.seed)
    except (OSError, ValueError, SeatingError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(f"Fitness: {result.fitness:.4f} after {result.generations} generations ({result.termination})\n")
    groups = group_by_table(result, guests, tables)
    for table in tables:
        print(f"{table.name or table.id}: {groups[table.id]}")

    if args.output:
        print(f"\nResult written to {save_result(result, args.output)}")
    if args.plot:
        from seating_plot import plot_convergence, plot_tables
        plot_convergence(result.convergence_history)
        plot_tables(groups, tables, show=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
