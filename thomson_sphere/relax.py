"""Projected gradient descent on the unit sphere."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List

import numpy as np

from .energy import energy, repulsive_forces
from .geometry import normalize_rows, tangential_component

logger = logging.getLogger(__name__)

MAX_RELAX_ITERATIONS = 10000
DEFAULT_TOLERANCE = 1e-8
# Relative to the initial learning rate; below this no descent step exists in float64.
MIN_STEP_FRACTION = 1e-12


@dataclass
class RelaxResult:
    energy: float
    iterations: int
    converged: bool
    trace: List[float] = field(default_factory=list)


def relax(
    points: np.ndarray,
    learning_rate: float,
    *,
    tol: float = DEFAULT_TOLERANCE,
    max_iter: int = MAX_RELAX_ITERATIONS,
    record_trace: bool = False,
) -> RelaxResult:
    """Drive ``points`` in place towards a local energy minimum.

    Each iteration moves every point along its tangential force and
    renormalises it onto the sphere. The first trial step is
    ``learning_rate``; a step that would raise the energy is rejected and the
    step size halved, so the energy never increases within one call. The loop
    stops once an accepted step changes the energy by less than ``tol``, once
    the step size has collapsed, or after ``max_iter`` iterations; hitting the
    cap is not an error.

    With ``record_trace`` the energy after every iteration is recorded,
    rejected iterations repeating the previous value.
    """

    if not (isinstance(points, np.ndarray) and points.dtype == np.float64 and points.ndim == 2 and points.shape[1] == 3):
        raise ValueError("relax() updates in place and needs a float64 (N, 3) ndarray")
    arr = points

    current = energy(arr)
    trace: List[float] = [current] if record_trace else []
    delta = math.inf
    iterations = 0
    step = learning_rate
    min_step = learning_rate * MIN_STEP_FRACTION

    while delta >= tol and iterations < max_iter:
        forces = tangential_component(repulsive_forces(arr), arr)
        trial = normalize_rows(arr + step * forces)
        updated = energy(trial)
        iterations += 1

        if updated > current:
            step *= 0.5
            if step < min_step:
                logger.debug("relax: step size collapsed at energy=%.9f", current)
                delta = 0.0
        else:
            arr[:] = trial
            delta = current - updated
            current = updated
        if record_trace:
            trace.append(current)

    converged = delta < tol
    if not converged:
        logger.debug(
            "relax: iteration cap %d reached with last delta=%.3e energy=%.9f",
            max_iter,
            delta,
            current,
        )
    else:
        logger.debug("relax: converged after %d iteration(s) energy=%.9f", iterations, current)
    return RelaxResult(energy=current, iterations=iterations, converged=converged, trace=trace)


__all__ = [
    "DEFAULT_TOLERANCE",
    "MAX_RELAX_ITERATIONS",
    "RelaxResult",
    "relax",
]
