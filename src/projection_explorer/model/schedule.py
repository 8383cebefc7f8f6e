"""
Schedule ILP for a fixed projection vector.

Finds an affine schedule ``l`` that respects every dependency with at least
S cycles of delay, has positive rate along the projection vector, and
minimises ``W * t + s`` where ``t >= l.u`` bounds the array utilization and
``s`` bounds the latency over all pairs of polytope vertices.

The solver only handles non-negative unknowns, so every schedule
coefficient is written ``l = l' - B`` with B the big parameter. The solver
answer for each ``l'`` must carry a B coefficient of exactly one.
"""

from typing import Sequence

import numpy as np

from projection_explorer.model.program import (
    INEQUALITY,
    ParametricProgram,
    frozen_matrix,
)


# Weight of utilization against latency in the objective q >= W t + s.
# Tunable; larger values favour low utilization over low latency.
DEFAULT_UTILIZATION_WEIGHT = 2048

# Column offsets
Q_COL = 1
T_COL = 2
S_COL = 3
L_START = 4


def _l_row(n_cols: int, dimensions: int, coeffs: Sequence[int]) -> np.ndarray:
    """
    Row fragment for ``coeffs . l`` rewritten as ``coeffs . l' - (sum coeffs) B``.
    """
    row = np.zeros(n_cols, dtype=np.int64)
    row[0] = INEQUALITY
    row[L_START:L_START + dimensions] = coeffs
    row[L_START + dimensions] = -int(np.sum(coeffs))
    return row


def build_schedule_program(
    vector: Sequence[int],
    dependencies: np.ndarray,
    vertices: np.ndarray,
    pipeline_stages: int = 1,
    weight: int = DEFAULT_UTILIZATION_WEIGHT,
) -> ParametricProgram:
    """
    Build the schedule ILP.

    Column layout:
        flag | q | t | s | l' (D) | B | const

    Rows, in order:
        1. t - l.u >= 0               (utilization bound)
        2. l.u - 1 >= 0               (positive rate along u)
        3. q - W t - s >= 0           (objective)
        4. -l.d - S >= 0              (one per dependency d)
        5. s - l.(Vi - Vj) >= 0       (one per ordered vertex pair, i != j)

    When no schedule exists for u the caller builds a fresh program for -u.

    Args:
        vector: Projection vector u (length D)
        dependencies: Dependency matrix, one dependency vector per row
        vertices: Vertex matrix, one extreme point per row
        pipeline_stages: Minimum delay S on every dependency
        weight: Utilization weight W

    Returns:
        ParametricProgram with no symbolic parameters and big parameter
        column D + 4
    """
    u = np.asarray(vector, dtype=np.int64)
    dimensions = len(u)
    dependencies = np.asarray(dependencies, dtype=np.int64).reshape(-1, dimensions)
    vertices = np.asarray(vertices, dtype=np.int64).reshape(-1, dimensions)

    n_unknowns = 3 + dimensions
    n_cols = n_unknowns + 3
    big_col = L_START + dimensions
    const_col = big_col + 1

    rows = []

    # 1. t >= l.u
    row = _l_row(n_cols, dimensions, -u)
    row[T_COL] = 1
    rows.append(row)

    # 2. l.u >= 1
    row = _l_row(n_cols, dimensions, u)
    row[const_col] = -1
    rows.append(row)

    # 3. q >= W t + s
    row = np.zeros(n_cols, dtype=np.int64)
    row[0] = INEQUALITY
    row[Q_COL] = 1
    row[T_COL] = -weight
    row[S_COL] = -1
    rows.append(row)

    # 4. l.d <= -S
    for d in dependencies:
        row = _l_row(n_cols, dimensions, -d)
        row[const_col] = -int(pipeline_stages)
        rows.append(row)

    # 5. l.(Vi - Vj) <= s
    for i, vi in enumerate(vertices):
        for j, vj in enumerate(vertices):
            if i == j:
                continue
            row = _l_row(n_cols, dimensions, -(vi - vj))
            row[S_COL] = 1
            rows.append(row)

    # Context: B >= 0
    context = [[INEQUALITY, 1, 0]]

    return ParametricProgram(
        constraints=frozen_matrix(rows, n_cols),
        context=frozen_matrix(context, 3),
        n_unknowns=n_unknowns,
        n_parameters=0,
        big_parameter=big_col,
    )
