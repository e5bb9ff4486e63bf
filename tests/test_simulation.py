import json

import numpy as np
import pytest

from thomson_sphere.config import ConfigError, SimulationConfig
from thomson_sphere.geometry import pairwise_distances
from thomson_sphere.hull import EdgeGroup
from thomson_sphere.simulation import EdgeVisibility, SimulationStatus, ThomsonSimulation

from _shapes import TETRAHEDRON_EDGE, TETRAHEDRON_ENERGY, tetrahedron


def _tetra_simulation(**overrides) -> ThomsonSimulation:
    params = dict(n_points=4, population_size=4, random_seed=11, relax_tolerance=1e-12)
    params.update(overrides)
    return ThomsonSimulation(SimulationConfig(**params))


def test_simulation_starts_running():
    sim = _tetra_simulation()
    assert sim.status is SimulationStatus.RUNNING
    assert sim.running and not sim.converged
    assert sim.steps == 0
    assert np.isfinite(sim.best_energy)


def test_four_points_converge_to_tetrahedron():
    sim = _tetra_simulation()

    status = sim.run(max_steps=50)

    assert status is SimulationStatus.CONVERGED
    assert sim.best_energy == pytest.approx(TETRAHEDRON_ENERGY, abs=1e-6)
    rows, cols = np.triu_indices(4, k=1)
    dists = pairwise_distances(sim.best_points)[rows, cols]
    assert np.max(dists) - np.min(dists) < 1e-3
    assert np.allclose(dists, TETRAHEDRON_EDGE, atol=1e-3)


def test_best_energy_never_increases_across_steps():
    sim = ThomsonSimulation(SimulationConfig(n_points=9, population_size=6, random_seed=4, convergence_threshold=1e-6))
    energies = [sim.best_energy]
    for _ in range(4):
        if sim.advance() is None:
            break
        energies.append(sim.best_energy)
    assert all(later <= earlier for earlier, later in zip(energies, energies[1:]))


def test_converged_simulation_stops_advancing():
    sim = _tetra_simulation()
    sim.run(max_steps=50)
    assert sim.converged
    steps = sim.steps
    energy_before = sim.best_energy

    assert sim.advance() is None
    assert sim.steps == steps
    assert sim.best_energy == energy_before
    assert sim.run() is SimulationStatus.CONVERGED


def test_run_respects_step_budget():
    sim = ThomsonSimulation(SimulationConfig(n_points=6, population_size=4, random_seed=2, convergence_threshold=1e-6))
    sim.run(max_steps=1)
    assert sim.steps == 1
    assert sim.last_delta is not None


def test_live_parameters_keep_population():
    sim = _tetra_simulation()
    optimizer = sim.optimizer

    sim.configure(mutation_rate=0.5, learning_rate=0.02, convergence_threshold=1e-6)

    assert sim.optimizer is optimizer
    assert sim.optimizer.config.mutation_rate == 0.5
    assert sim.optimizer.config.learning_rate == 0.02
    assert sim.config.convergence_threshold == 1e-6
    assert sim.running


def test_changing_population_shape_resets_run():
    sim = _tetra_simulation()
    sim.run(max_steps=50)
    sim.visibility.set_visible(1.0, False)
    optimizer = sim.optimizer

    sim.configure(n_points=5)

    assert sim.optimizer is not optimizer
    assert sim.status is SimulationStatus.RUNNING
    assert sim.steps == 0
    assert sim.best_points.shape == (5, 3)
    assert len(sim.visibility) == 0


def test_reset_always_starts_fresh():
    sim = _tetra_simulation()
    sim.run(max_steps=50)
    sim.reset()
    assert sim.running
    assert sim.steps == 0
    assert sim.last_delta is None


def test_new_seed_restarts_run_reproducibly():
    params = dict(n_points=5, population_size=4, convergence_threshold=1e-6)
    sim = ThomsonSimulation(SimulationConfig(random_seed=1, **params))
    sim.advance()

    sim.configure(random_seed=99)
    fresh = ThomsonSimulation(SimulationConfig(random_seed=99, **params))

    assert sim.running
    assert sim.steps == 0
    assert np.array_equal(sim.best_points, fresh.best_points)
    assert sim.rng.random() == fresh.rng.random()


def test_population_at_global_optimum_converges():
    config = SimulationConfig(n_points=4, population_size=6, random_seed=0)
    sim = ThomsonSimulation(config, initial_population=[tetrahedron() for _ in range(6)])

    assert sim.best_energy == pytest.approx(TETRAHEDRON_ENERGY, abs=1e-9)
    status = sim.run(max_steps=5)

    assert status is SimulationStatus.CONVERGED
    assert sim.last_delta < config.convergence_threshold
    assert sim.best_energy == pytest.approx(TETRAHEDRON_ENERGY, abs=1e-9)


def test_configure_rejects_bad_parameters():
    sim = _tetra_simulation()
    with pytest.raises(ConfigError):
        sim.configure(colour="red")
    with pytest.raises(ConfigError):
        sim.configure(mutation_rate=1.5)
    assert sim.config.mutation_rate == 0.2


def test_snapshot_reports_edges_and_serializes():
    sim = _tetra_simulation()
    sim.run(max_steps=50)

    snapshot = sim.snapshot()

    assert snapshot.status is SimulationStatus.CONVERGED
    assert len(snapshot.edge_groups) == 1
    assert snapshot.edge_groups[0].count == 6
    payload = json.loads(json.dumps(snapshot.to_dict()))
    assert payload["status"] == "converged"
    assert len(payload["points"]) == 4
    assert payload["edge_groups"][0]["count"] == 6
    assert payload["edge_groups"][0]["length"] == pytest.approx(TETRAHEDRON_EDGE, abs=1e-3)


def test_edge_visibility_defaults_and_toggles():
    visibility = EdgeVisibility()
    assert visibility.is_visible(1.2345678)

    visibility.set_visible(1.2345678, False)
    assert not visibility.is_visible(1.2345678)
    assert not visibility.is_visible(1.23456781)
    assert visibility.is_visible(1.234569)
    assert visibility.key(1.2345678) == 1234568

    assert visibility.toggle(1.2345678)
    assert visibility.is_visible(1.2345678)

    groups = [EdgeGroup(length=1.0), EdgeGroup(length=1.5)]
    visibility.set_visible(1.5, False)
    assert visibility.visible_groups(groups) == [groups[0]]

    visibility.clear()
    assert len(visibility) == 0
