"""Step-driven Thomson problem simulation with convergence tracking."""

from __future__ import annotations

import dataclasses
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

import numpy as np

from .config import ConfigError, SimulationConfig, validate_config
from .hull import EdgeGroup, edge_groups
from .population import GeneticOptimizer

logger = logging.getLogger(__name__)

_SHAPE_FIELDS = frozenset({"n_points", "population_size"})


class SimulationStatus(enum.Enum):
    RUNNING = "running"
    CONVERGED = "converged"


class EdgeVisibility:
    """Visibility flags for edge groups keyed by quantized length.

    Lengths are keyed as ``round(length * 10**decimals)`` so that groups whose
    lengths agree to ``decimals`` places share a flag. Unknown lengths are
    visible.
    """

    def __init__(self, decimals: int = 6) -> None:
        self.decimals = decimals
        self._flags: Dict[int, bool] = {}

    def __len__(self) -> int:
        return len(self._flags)

    def key(self, length: float) -> int:
        return int(round(float(length) * 10**self.decimals))

    def is_visible(self, length: float) -> bool:
        return self._flags.get(self.key(length), True)

    def set_visible(self, length: float, visible: bool) -> None:
        self._flags[self.key(length)] = bool(visible)

    def toggle(self, length: float) -> bool:
        visible = not self.is_visible(length)
        self.set_visible(length, visible)
        return visible

    def visible_groups(self, groups: Iterable[EdgeGroup]) -> List[EdgeGroup]:
        return [group for group in groups if self.is_visible(group.length)]

    def clear(self) -> None:
        self._flags.clear()


@dataclass
class SimulationSnapshot:
    status: SimulationStatus
    steps: int
    best_energy: float
    points: np.ndarray
    edge_groups: List[EdgeGroup] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "steps": self.steps,
            "best_energy": self.best_energy,
            "points": self.points.tolist(),
            "edge_groups": [
                {
                    "length": group.length,
                    "count": group.count,
                    "edges": [[edge.start.tolist(), edge.end.tolist()] for edge in group.edges],
                }
                for group in self.edge_groups
            ],
        }


class ThomsonSimulation:
    """Owns a population optimizer and advances it until the best energy settles.

    The simulation starts in :attr:`SimulationStatus.RUNNING`. Each
    :meth:`advance` runs one optimizer step; once a step changes the best
    energy by less than ``convergence_threshold`` the status becomes
    :attr:`SimulationStatus.CONVERGED` and further calls do nothing until
    :meth:`reset`.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        *,
        rng: Optional[np.random.Generator] = None,
        initial_population: Optional[Sequence[np.ndarray]] = None,
    ) -> None:
        self.config = config if config is not None else SimulationConfig()
        validate_config(self.config)
        self.rng = rng if rng is not None else np.random.default_rng(self.config.random_seed)
        self.visibility = EdgeVisibility()
        self.status = SimulationStatus.RUNNING
        self.steps = 0
        self.last_delta: Optional[float] = None
        # Seeds apply to this first population only; reset() samples afresh.
        self.optimizer = GeneticOptimizer(self.config, self.rng, initial_population=initial_population)

    @property
    def running(self) -> bool:
        return self.status is SimulationStatus.RUNNING

    @property
    def converged(self) -> bool:
        return self.status is SimulationStatus.CONVERGED

    @property
    def best_energy(self) -> float:
        return self.optimizer.best_energy

    @property
    def best_points(self) -> np.ndarray:
        return self.optimizer.best_points

    def reset(self) -> None:
        """Discard the population and start a fresh run."""

        self.optimizer = GeneticOptimizer(self.config, self.rng)
        self.visibility.clear()
        self.status = SimulationStatus.RUNNING
        self.steps = 0
        self.last_delta = None
        logger.info(
            "Simulation reset: n_points=%d population_size=%d",
            self.config.n_points,
            self.config.population_size,
        )

    def configure(self, **changes: Any) -> None:
        """Update parameters.

        Population shape changes trigger :meth:`reset`. A new ``random_seed``
        rebuilds the generator from that seed and also resets, so the run is
        reproducible from the seed.
        """

        if not changes:
            return
        known = {f.name for f in dataclasses.fields(SimulationConfig)}
        unknown = set(changes) - known
        if unknown:
            raise ConfigError(f"unknown simulation parameter(s): {', '.join(sorted(unknown))}")

        updated = dataclasses.replace(self.config, **changes)
        validate_config(updated)
        reshaped = any(
            getattr(updated, name) != getattr(self.config, name) for name in _SHAPE_FIELDS
        )
        reseeded = updated.random_seed != self.config.random_seed
        self.config = updated
        if reseeded:
            self.rng = np.random.default_rng(updated.random_seed)
        if reshaped or reseeded:
            self.reset()
            return

        # Takes effect from the next step.
        self.optimizer.config = updated
        logger.info(
            "Simulation parameters updated: %s",
            ", ".join(f"{key}={changes[key]}" for key in sorted(changes)),
        )

    def advance(self) -> Optional[float]:
        """Run one step while running; return its energy delta or ``None``."""

        if not self.running:
            return None
        delta = self.optimizer.step()
        self.steps += 1
        self.last_delta = delta
        logger.debug("Step %d: best energy=%.9f delta=%.3e", self.steps, self.best_energy, delta)
        if delta < self.config.convergence_threshold:
            self.status = SimulationStatus.CONVERGED
            logger.info(
                "Converged after %d step(s): best energy=%.9f", self.steps, self.best_energy
            )
        return delta

    def run(self, max_steps: Optional[int] = None) -> SimulationStatus:
        """Advance until converged or ``max_steps`` steps have been taken."""

        taken = 0
        while self.running and (max_steps is None or taken < max_steps):
            self.advance()
            taken += 1
        if self.running:
            logger.info(
                "Stopped after %d step(s) without converging (last delta=%s)", taken, self.last_delta
            )
        return self.status

    def edge_groups(self) -> List[EdgeGroup]:
        return edge_groups(
            self.best_points,
            tolerance=self.config.edge_tolerance,
            decimals=self.config.edge_key_decimals,
        )

    def snapshot(self) -> SimulationSnapshot:
        return SimulationSnapshot(
            status=self.status,
            steps=self.steps,
            best_energy=self.best_energy,
            points=self.best_points,
            edge_groups=self.edge_groups(),
        )


__all__ = [
    "EdgeVisibility",
    "SimulationSnapshot",
    "SimulationStatus",
    "ThomsonSimulation",
]
