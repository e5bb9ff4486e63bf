"""Configuration for Thomson problem simulations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class ConfigError(ValueError):
    """Raised when simulation parameters are out of range."""


@dataclass
class SimulationConfig:
    """Parameters for one simulation run.

    ``n_points`` and ``population_size`` define the shape of the population;
    changing either requires a fresh population. The remaining knobs may be
    adjusted between steps.
    """

    n_points: int = 12
    population_size: int = 20
    mutation_rate: float = 0.2
    learning_rate: float = 0.01
    convergence_threshold: float = 1e-8
    seed_learning_rate: float = 0.1
    child_learning_rate_factor: float = 5.0
    tournament_size: int = 3
    mutation_scale: float = 0.2
    max_relax_iterations: int = 10000
    relax_tolerance: Optional[float] = None
    edge_tolerance: float = 1e-2
    edge_key_decimals: int = 4
    random_seed: Optional[int] = None

    @property
    def effective_relax_tolerance(self) -> float:
        if self.relax_tolerance is None:
            return self.convergence_threshold
        return self.relax_tolerance

    @property
    def child_learning_rate(self) -> float:
        return self.learning_rate * self.child_learning_rate_factor


def threshold_from_exponent(exponent: int) -> float:
    """Return ``10 ** -exponent``."""

    return 10.0 ** (-int(exponent))


def validate_config(config: SimulationConfig) -> None:
    if config.n_points < 1:
        raise ConfigError(f"n_points must be >= 1 (got {config.n_points})")
    if config.population_size < 2:
        raise ConfigError(f"population_size must be >= 2 (got {config.population_size})")
    if not 0.0 <= config.mutation_rate <= 1.0:
        raise ConfigError(f"mutation_rate must lie in [0, 1] (got {config.mutation_rate})")
    for name in ("learning_rate", "seed_learning_rate", "child_learning_rate_factor", "convergence_threshold"):
        value = getattr(config, name)
        if not value > 0.0:
            raise ConfigError(f"{name} must be positive (got {value})")
    if config.relax_tolerance is not None and not config.relax_tolerance > 0.0:
        raise ConfigError(f"relax_tolerance must be positive (got {config.relax_tolerance})")
    if config.tournament_size < 1:
        raise ConfigError(f"tournament_size must be >= 1 (got {config.tournament_size})")
    if config.max_relax_iterations < 1:
        raise ConfigError(f"max_relax_iterations must be >= 1 (got {config.max_relax_iterations})")
    if config.mutation_scale < 0.0:
        raise ConfigError(f"mutation_scale must be non-negative (got {config.mutation_scale})")
    if not config.edge_tolerance > 0.0:
        raise ConfigError(f"edge_tolerance must be positive (got {config.edge_tolerance})")
    if config.edge_key_decimals < 0:
        raise ConfigError(f"edge_key_decimals must be non-negative (got {config.edge_key_decimals})")


__all__ = [
    "ConfigError",
    "SimulationConfig",
    "threshold_from_exponent",
    "validate_config",
]
