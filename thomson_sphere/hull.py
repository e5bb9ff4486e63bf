"""Convex hull edge extraction and grouping by length."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import numpy as np
from scipy.spatial import ConvexHull, QhullError

from .geometry import as_configuration, distance
from .logging_utils import apply_debug_logging

logger = logging.getLogger(__name__)

DEFAULT_EDGE_TOLERANCE = 1e-2
DEFAULT_KEY_DECIMALS = 4

VertexKey = Tuple[float, float, float]


@dataclass
class Edge:
    start: np.ndarray
    end: np.ndarray
    length: float


@dataclass
class EdgeGroup:
    """Hull edges whose lengths lie within tolerance of ``length``.

    ``length`` is the length of the first edge assigned to the group.
    """

    length: float
    edges: List[Edge] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.edges)


def _vertex_key(vertex: np.ndarray, decimals: int) -> VertexKey:
    # +0.0 folds negative zero into positive zero.
    x, y, z = (round(float(c), decimals) + 0.0 for c in vertex)
    return (x, y, z)


def hull_edges(points: np.ndarray, *, decimals: int = DEFAULT_KEY_DECIMALS) -> List[Edge]:
    """Return the unique edges of the triangulated convex hull of ``points``.

    Each triangle contributes three edges; an edge shared by two triangles is
    kept once, matched by endpoint coordinates rounded to ``decimals``. Fewer
    than four points, or a degenerate (flat) point set, yields no edges.
    """

    arr = as_configuration(points)
    if arr.shape[0] < 4:
        return []
    try:
        hull = ConvexHull(arr)
    except QhullError as exc:
        logger.warning("Convex hull skipped for %d degenerate point(s): %s", arr.shape[0], exc)
        return []

    unique: Dict[Tuple[VertexKey, VertexKey], Edge] = {}
    for simplex in hull.simplices:
        i, j, k = (int(idx) for idx in simplex)
        for a, b in ((i, j), (j, k), (k, i)):
            key_a = _vertex_key(arr[a], decimals)
            key_b = _vertex_key(arr[b], decimals)
            if key_a == key_b:
                continue
            key = (key_a, key_b) if key_a < key_b else (key_b, key_a)
            if key not in unique:
                start = arr[a].copy()
                end = arr[b].copy()
                unique[key] = Edge(start=start, end=end, length=distance(start, end))
    return list(unique.values())


def group_edges(
    edges: List[Edge],
    *,
    tolerance: float = DEFAULT_EDGE_TOLERANCE,
    sort_edges: bool = True,
) -> List[EdgeGroup]:
    """Greedy first-fit clustering of ``edges`` by length."""

    ordered = sorted(edges, key=lambda edge: edge.length) if sort_edges else list(edges)
    groups: List[EdgeGroup] = []
    for edge in ordered:
        for group in groups:
            if abs(group.length - edge.length) < tolerance:
                group.edges.append(edge)
                break
        else:
            groups.append(EdgeGroup(length=edge.length, edges=[edge]))
    groups.sort(key=lambda group: group.length)
    return groups


def edge_groups(
    points: np.ndarray,
    *,
    tolerance: float = DEFAULT_EDGE_TOLERANCE,
    decimals: int = DEFAULT_KEY_DECIMALS,
    sort_edges: bool = True,
) -> List[EdgeGroup]:
    """Group the convex hull edges of ``points`` into length classes."""

    edges = hull_edges(points, decimals=decimals)
    groups = group_edges(edges, tolerance=tolerance, sort_edges=sort_edges)
    logger.debug("edge_groups: %d edge(s) in %d group(s)", len(edges), len(groups))
    return groups


apply_debug_logging(globals(), logger=logger, wrap_methods=False)


__all__ = [
    "DEFAULT_EDGE_TOLERANCE",
    "DEFAULT_KEY_DECIMALS",
    "Edge",
    "EdgeGroup",
    "edge_groups",
    "group_edges",
    "hull_edges",
]
