"""Example pipeline: relax twelve random points and group their hull edges."""

import numpy as np

from thomson_sphere import edge_groups, energy, random_points_on_sphere, relax


def main() -> None:
    rng = np.random.default_rng(7)
    points = random_points_on_sphere(rng, 12)
    result = relax(points, 0.05, tol=1e-12)
    print(f"Relaxed in {result.iterations} iteration(s), converged={result.converged}")
    print(f"Energy: {energy(points):.6f}")

    print("Edge groups:")
    for group in edge_groups(points):
        print(f"  length={group.length:.6f} count={group.count}")


if __name__ == "__main__":
    main()
