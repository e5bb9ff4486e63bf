import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from thomson_sphere import (
    ConfigError,
    SimulationConfig,
    ThomsonSimulation,
    threshold_from_exponent,
)

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    defaults = SimulationConfig()
    parser = argparse.ArgumentParser(description="Search for minimum-energy point sets on the sphere")
    parser.add_argument(
        "--points",
        type=int,
        default=defaults.n_points,
        help=f"Number of electrons (default: {defaults.n_points})",
    )
    parser.add_argument(
        "--population",
        type=int,
        default=defaults.population_size,
        help=f"Population size (default: {defaults.population_size})",
    )
    parser.add_argument(
        "--mutation-rate",
        type=float,
        default=defaults.mutation_rate,
        help=f"Probability of mutating a child (default: {defaults.mutation_rate})",
    )
    parser.add_argument(
        "--learning-rate",
        type=float,
        default=defaults.learning_rate,
        help=f"Gradient descent step size (default: {defaults.learning_rate})",
    )
    parser.add_argument(
        "--threshold-exponent",
        type=int,
        default=8,
        help="Convergence threshold as 10^-k (default: 8)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed (default: unseeded)",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=None,
        help="Stop after this many steps even if not converged",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--output-path",
        help="Write a JSON report of the best configuration to the given path",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    config = SimulationConfig(
        n_points=args.points,
        population_size=args.population,
        mutation_rate=args.mutation_rate,
        learning_rate=args.learning_rate,
        convergence_threshold=threshold_from_exponent(args.threshold_exponent),
        random_seed=args.seed,
    )
    try:
        simulation = ThomsonSimulation(config)
    except ConfigError as exc:
        logger.error("Invalid parameters: %s", exc)
        raise SystemExit(2)

    logger.info(
        "Running simulation for %d point(s) with population %d", config.n_points, config.population_size
    )
    simulation.run(max_steps=args.max_steps)
    snapshot = simulation.snapshot()

    print(f"Status: {snapshot.status.value}")
    print(f"Steps: {snapshot.steps}")
    print(f"Energy: {snapshot.best_energy:.6f}")
    print("Edge groups:")
    if snapshot.edge_groups:
        for group in snapshot.edge_groups:
            print(f"  length={group.length:.6f} count={group.count}")
    else:
        print("  (none)")

    if args.output_path:
        output_path = Path(args.output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Writing report to %s", output_path)
        output_path.write_text(json.dumps(snapshot.to_dict(), indent=2), encoding="utf-8")
        print(f"Report written to {output_path}")


if __name__ == "__main__":
    main(sys.argv[1:])
