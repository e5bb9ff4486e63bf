"""Genetic algorithm over point configurations on the sphere."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .config import SimulationConfig, validate_config
from .energy import energy
from .geometry import (
    as_configuration,
    normalize,
    normalize_rows,
    pairwise_distances,
    random_point_on_sphere,
    random_points_on_sphere,
)
from .logging_utils import apply_debug_logging
from .relax import relax

logger = logging.getLogger(__name__)


@dataclass
class Individual:
    """A configuration paired with its current energy."""

    points: np.ndarray
    energy: float

    def copy(self) -> "Individual":
        return Individual(points=self.points.copy(), energy=self.energy)


class GeneticOptimizer:
    """Population of relaxed configurations improved by crossover and mutation.

    Every individual is kept at (approximately) a local minimum: the
    population is relaxed before selection and every child is relaxed before
    it enters the population. The best configuration ever seen is held as an
    independent copy and only ever improves.
    """

    def __init__(
        self,
        config: SimulationConfig,
        rng: Optional[np.random.Generator] = None,
        *,
        initial_population: Optional[Sequence[np.ndarray]] = None,
    ) -> None:
        validate_config(config)
        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng(config.random_seed)
        self.n_points = config.n_points
        self.population_size = config.population_size
        self.population: List[Individual] = []
        self.best: Optional[Individual] = None

        self._init_population(initial_population if initial_population is not None else [])

    @property
    def best_energy(self) -> float:
        return self.best.energy if self.best is not None else math.inf

    @property
    def best_points(self) -> np.ndarray:
        if self.best is None:
            return np.zeros((0, 3))
        return self.best.points.copy()

    def _relax(self, points: np.ndarray, learning_rate: float) -> None:
        relax(
            points,
            learning_rate,
            tol=self.config.effective_relax_tolerance,
            max_iter=self.config.max_relax_iterations,
        )

    def _init_population(self, seeds: Sequence[np.ndarray]) -> None:
        if len(seeds) > self.population_size:
            raise ValueError(
                f"got {len(seeds)} initial configurations for a population of {self.population_size}"
            )
        for seed in seeds:
            points = as_configuration(seed).copy()
            if points.shape[0] != self.n_points:
                raise ValueError(f"initial configuration has {points.shape[0]} points, expected {self.n_points}")
            self.population.append(self._seed_individual(normalize_rows(points)))
        while len(self.population) < self.population_size:
            points = random_points_on_sphere(self.rng, self.n_points)
            self.population.append(self._seed_individual(points))

        self._update_best()
        logger.info(
            "Created population of %d configuration(s) with %d point(s); best energy=%.9f",
            self.population_size,
            self.n_points,
            self.best_energy,
        )

    def _seed_individual(self, points: np.ndarray) -> Individual:
        self._relax(points, self.config.seed_learning_rate)
        return Individual(points=points, energy=energy(points))

    def _update_best(self) -> None:
        # list.sort is stable, so equal energies keep their relative order.
        self.population.sort(key=lambda ind: ind.energy)
        leader = self.population[0]
        if leader.energy < self.best_energy:
            self.best = leader.copy()

    def tournament_select(self, pool: Sequence[Individual]) -> Individual:
        """Return the lowest-energy of ``tournament_size`` draws from ``pool``.

        Draws are uniform and with replacement.
        """

        picks = self.rng.integers(0, len(pool), size=self.config.tournament_size)
        winner = pool[int(picks[0])]
        for idx in picks[1:]:
            candidate = pool[int(idx)]
            if candidate.energy < winner.energy:
                winner = candidate
        return winner

    def crossover(
        self,
        parent_a: np.ndarray,
        parent_b: np.ndarray,
        *,
        normal: Optional[np.ndarray] = None,
    ) -> np.ndarray:
        """Combine two parents across a random plane through the origin.

        The child takes the points of ``parent_a`` on the non-negative side of
        ``normal`` and the points of ``parent_b`` on the negative side. Missing
        points are sampled at random; surplus points are removed one at a time,
        always the lower-index member of the closest remaining pair.
        """

        if normal is None:
            normal = random_point_on_sphere(self.rng)
        normal = normalize(normal)

        side_a = parent_a @ normal >= 0.0
        side_b = parent_b @ normal < 0.0
        child = np.concatenate((parent_a[side_a], parent_b[side_b]), axis=0)

        shortfall = self.n_points - child.shape[0]
        if shortfall > 0:
            child = np.concatenate((child, random_points_on_sphere(self.rng, shortfall)), axis=0)

        while child.shape[0] > self.n_points:
            child = np.delete(child, _crowded_index(child), axis=0)
        return child

    def mutate(self, points: np.ndarray) -> bool:
        """With probability ``mutation_rate`` kick one point off its position.

        Returns ``True`` when a point was displaced.
        """

        if self.rng.random() >= self.config.mutation_rate:
            return False
        idx = int(self.rng.integers(0, points.shape[0]))
        kick = random_point_on_sphere(self.rng) * self.config.mutation_scale
        points[idx] = normalize(points[idx] + kick)
        return True

    def _breed(self, pool: Sequence[Individual]) -> Individual:
        parent_a = self.tournament_select(pool)
        parent_b = self.tournament_select(pool)
        child = self.crossover(parent_a.points, parent_b.points)
        self.mutate(child)
        self._relax(child, self.config.child_learning_rate)
        return Individual(points=child, energy=energy(child))

    def step(self) -> float:
        """Run one generation and return how much the best energy changed."""

        previous_best = self.best_energy

        for individual in self.population:
            self._relax(individual.points, self.config.learning_rate)
            individual.energy = energy(individual.points)
        self._update_best()

        num_to_replace = self.population_size // 2
        pool = list(self.population)
        children = [self._breed(pool) for _ in range(num_to_replace)]
        for offset, child in enumerate(children):
            self.population[self.population_size - 1 - offset] = child
        self._update_best()

        delta = abs(previous_best - self.best_energy)
        logger.debug("step: best energy=%.12f delta=%.3e", self.best_energy, delta)
        return delta


def _crowded_index(points: np.ndarray) -> int:
    """Lower index of the closest pair in ``points``; ties resolve row-major."""

    n = points.shape[0]
    dist = pairwise_distances(points)
    dist[np.tril_indices(n)] = np.inf
    flat = int(np.argmin(dist))
    return flat // n


apply_debug_logging(globals(), logger=logger, skip={"GeneticOptimizer.tournament_select"})


__all__ = ["GeneticOptimizer", "Individual"]
