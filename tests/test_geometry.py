import numpy as np
import pytest

from thomson_sphere.geometry import (
    as_configuration,
    distance,
    normalize,
    normalize_rows,
    pairwise_distances,
    random_point_on_sphere,
    random_points_on_sphere,
    tangential_component,
)


def test_random_points_lie_on_unit_sphere():
    rng = np.random.default_rng(0)
    pts = random_points_on_sphere(rng, 500)

    assert pts.shape == (500, 3)
    assert np.allclose(np.linalg.norm(pts, axis=1), 1.0, atol=1e-12)
    assert np.linalg.norm(random_point_on_sphere(rng)) == pytest.approx(1.0)


def test_random_points_are_area_uniform():
    rng = np.random.default_rng(2024)
    z = random_points_on_sphere(rng, 40000)[:, 2]

    # Area-uniform sampling makes z uniform on [-1, 1].
    assert abs(float(np.mean(z))) < 0.02
    assert abs(float(np.mean(np.abs(z) <= 0.5)) - 0.5) < 0.02
    # Uniform polar angles would put ~14% of samples in this cap instead of 5%.
    assert abs(float(np.mean(z > 0.9)) - 0.05) < 0.01


def test_random_points_deterministic_for_seed():
    a = random_points_on_sphere(np.random.default_rng(5), 10)
    b = random_points_on_sphere(np.random.default_rng(5), 10)
    assert np.allclose(a, b)


def test_normalize_and_distance():
    v = normalize(np.array([3.0, 0.0, 4.0]))
    assert np.allclose(v, [0.6, 0.0, 0.8])
    assert np.allclose(normalize(np.zeros(3)), np.zeros(3))
    assert distance([1.0, 0.0, 0.0], [-1.0, 0.0, 0.0]) == pytest.approx(2.0)


def test_normalize_rows_updates_in_place():
    pts = np.array([[2.0, 0.0, 0.0], [0.0, 0.0, -5.0]])
    out = normalize_rows(pts)
    assert out is pts
    assert np.allclose(pts, [[1.0, 0.0, 0.0], [0.0, 0.0, -1.0]])


def test_tangential_component_is_orthogonal_to_position():
    rng = np.random.default_rng(3)
    positions = random_points_on_sphere(rng, 20)
    vectors = rng.normal(size=(20, 3))

    tangent = tangential_component(vectors, positions)

    assert np.allclose(np.einsum("ij,ij->i", tangent, positions), 0.0, atol=1e-12)


def test_pairwise_distances_symmetric_with_zero_diagonal():
    pts = random_points_on_sphere(np.random.default_rng(1), 7)
    dist = pairwise_distances(pts)
    assert np.allclose(dist, dist.T)
    assert np.allclose(np.diag(dist), 0.0)
    assert dist[0, 1] == pytest.approx(distance(pts[0], pts[1]))


def test_as_configuration_rejects_bad_shapes():
    assert as_configuration([]).shape == (0, 3)
    with pytest.raises(ValueError):
        as_configuration([1.0, 0.0, 0.0])
    with pytest.raises(ValueError):
        as_configuration(np.zeros((4, 2)))
