"""Example pipeline: run the genetic search for four electrons until it settles."""

from thomson_sphere import SimulationConfig, ThomsonSimulation


def main() -> None:
    config = SimulationConfig(n_points=4, population_size=8, random_seed=123)
    simulation = ThomsonSimulation(config)
    status = simulation.run(max_steps=50)

    print("Status:", status.value)
    print("Steps:", simulation.steps)
    print(f"Best energy: {simulation.best_energy:.9f}")
    for idx, (x, y, z) in enumerate(simulation.best_points):
        print(f"P{idx}: ({x:.6f}, {y:.6f}, {z:.6f})")


if __name__ == "__main__":
    main()
