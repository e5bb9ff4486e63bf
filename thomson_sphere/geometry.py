"""Vector helpers for points on the unit sphere.

Points are ``float64`` arrays of shape ``(3,)``; configurations are arrays of
shape ``(N, 3)``.
"""

from __future__ import annotations

import math

import numpy as np

_ZERO_NORM = 1e-12


def as_configuration(points: object) -> np.ndarray:
    """Return ``points`` as an ``(N, 3)`` float array, raising on bad shapes."""

    arr = np.asarray(points, dtype=float)
    if arr.size == 0:
        return arr.reshape(0, 3)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(f"expected an (N, 3) point array, got shape {arr.shape}")
    return arr


def dot(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.dot(a, b))


def norm(v: np.ndarray) -> float:
    return math.sqrt(max(dot(v, v), 0.0))


def distance(a: np.ndarray, b: np.ndarray) -> float:
    return norm(np.asarray(a, dtype=float) - np.asarray(b, dtype=float))


def normalize(v: np.ndarray) -> np.ndarray:
    """Return ``v`` scaled to unit length; zero vectors are returned unchanged."""

    length = norm(v)
    if length <= _ZERO_NORM:
        return np.array(v, dtype=float)
    return np.asarray(v, dtype=float) / length


def normalize_rows(points: np.ndarray) -> np.ndarray:
    """Normalise every row of ``points`` in place and return it."""

    lengths = np.linalg.norm(points, axis=1, keepdims=True)
    np.maximum(lengths, _ZERO_NORM, out=lengths)
    points /= lengths
    return points


def tangential_component(vectors: np.ndarray, positions: np.ndarray) -> np.ndarray:
    """Remove from each row of ``vectors`` its component along ``positions``.

    ``positions`` must hold unit vectors, so the result lies in the tangent
    plane of the sphere at each position.
    """

    radial = np.einsum("ij,ij->i", vectors, positions)
    return vectors - radial[:, None] * positions


def pairwise_differences(points: np.ndarray) -> np.ndarray:
    """``diff[i, j] = points[i] - points[j]``."""

    return points[:, None, :] - points[None, :, :]


def pairwise_distances(points: np.ndarray) -> np.ndarray:
    return np.linalg.norm(pairwise_differences(points), axis=-1)


def random_point_on_sphere(rng: np.random.Generator) -> np.ndarray:
    """Sample one area-uniform point on the unit sphere.

    The azimuth is uniform in ``[0, 2*pi)`` and the polar angle is the arccos
    of a value uniform in ``[-1, 1]``; sampling both angles uniformly would
    crowd the poles.
    """

    return random_points_on_sphere(rng, 1)[0]


def random_points_on_sphere(rng: np.random.Generator, count: int) -> np.ndarray:
    u = rng.random(count)
    v = rng.random(count)
    theta = 2.0 * math.pi * u
    phi = np.arccos(2.0 * v - 1.0)
    sin_phi = np.sin(phi)
    return np.column_stack((sin_phi * np.cos(theta), sin_phi * np.sin(theta), np.cos(phi)))


__all__ = [
    "as_configuration",
    "distance",
    "dot",
    "norm",
    "normalize",
    "normalize_rows",
    "pairwise_differences",
    "pairwise_distances",
    "random_point_on_sphere",
    "random_points_on_sphere",
    "tangential_component",
]
