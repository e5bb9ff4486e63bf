"""Coulomb energy and forces for point configurations on the sphere."""

from __future__ import annotations

import numpy as np

from .geometry import as_configuration, pairwise_differences

COLLISION_DISTANCE = 1e-9
COLLISION_PENALTY = 1e9


def energy(points: np.ndarray) -> float:
    """Return the sum of ``1 / distance`` over all unordered pairs.

    Pairs closer than ``COLLISION_DISTANCE`` contribute ``COLLISION_PENALTY``
    instead, so coincident points never produce ``inf`` or ``nan``.
    """

    arr = as_configuration(points)
    n = arr.shape[0]
    if n < 2:
        return 0.0

    rows, cols = np.triu_indices(n, k=1)
    dist = np.linalg.norm(arr[rows] - arr[cols], axis=1)
    collided = dist <= COLLISION_DISTANCE
    safe = np.where(collided, 1.0, dist)
    contributions = np.where(collided, COLLISION_PENALTY, 1.0 / safe)
    return float(np.sum(contributions))


def repulsive_forces(points: np.ndarray) -> np.ndarray:
    """Return the per-point force ``sum_j (p_i - p_j) / |p_i - p_j|**3``.

    This is the negative gradient of :func:`energy`. Pairs closer than
    ``COLLISION_DISTANCE`` are skipped.
    """

    arr = as_configuration(points)
    diff = pairwise_differences(arr)
    dist = np.linalg.norm(diff, axis=-1)
    active = dist > COLLISION_DISTANCE
    inv_cube = np.zeros_like(dist)
    inv_cube[active] = 1.0 / (dist[active] ** 3)
    return np.einsum("ijk,ij->ik", diff, inv_cube)


__all__ = [
    "COLLISION_DISTANCE",
    "COLLISION_PENALTY",
    "energy",
    "repulsive_forces",
]
