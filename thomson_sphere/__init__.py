from .config import ConfigError, SimulationConfig, threshold_from_exponent, validate_config
from .energy import COLLISION_DISTANCE, COLLISION_PENALTY, energy, repulsive_forces
from .geometry import (
    distance,
    dot,
    norm,
    normalize,
    normalize_rows,
    pairwise_distances,
    random_point_on_sphere,
    random_points_on_sphere,
    tangential_component,
)
from .hull import Edge, EdgeGroup, edge_groups, group_edges, hull_edges
from .population import GeneticOptimizer, Individual
from .relax import MAX_RELAX_ITERATIONS, RelaxResult, relax
from .simulation import EdgeVisibility, SimulationSnapshot, SimulationStatus, ThomsonSimulation

__all__ = [
    'ConfigError',
    'SimulationConfig',
    'threshold_from_exponent',
    'validate_config',
    'COLLISION_DISTANCE',
    'COLLISION_PENALTY',
    'energy',
    'repulsive_forces',
    'distance',
    'dot',
    'norm',
    'normalize',
    'normalize_rows',
    'pairwise_distances',
    'random_point_on_sphere',
    'random_points_on_sphere',
    'tangential_component',
    'Edge',
    'EdgeGroup',
    'edge_groups',
    'group_edges',
    'hull_edges',
    'GeneticOptimizer',
    'Individual',
    'MAX_RELAX_ITERATIONS',
    'RelaxResult',
    'relax',
    'EdgeVisibility',
    'SimulationSnapshot',
    'SimulationStatus',
    'ThomsonSimulation',
]
