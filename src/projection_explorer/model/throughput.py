"""
Throughput ILP for a fixed projection vector.

For a projection vector u the block pipelining period is the largest k such
that two points x1, x2 of the domain satisfy ``x1 - x2 = k u``, i.e. the
longest run of index points projected onto the same processing element.

The parametric solver only minimises, so k is replaced by ``k' = B - k``
with B the big parameter: minimising k' maximises k. The solver answer for
k' must then carry a B coefficient of exactly one.
"""

from typing import Sequence

import numpy as np

from projection_explorer.model.program import (
    EQUALITY,
    ParametricProgram,
    frozen_matrix,
)


def build_throughput_program(
    domain: np.ndarray,
    context: np.ndarray,
    dimensions: int,
    parameters: int,
    vector: Sequence[int],
    parameter_names: Sequence[str] = (),
) -> ParametricProgram:
    """
    Build the throughput ILP.

    Column layout:
        flag | k' | x1 (D) | x2 (D) | params (P) | B | const

    Rows:
        A x1 + C p + c >= 0        (domain rows on x1)
        A x2 + C p + c >= 0        (domain rows on x2)
        x1 - x2 + u k' - u B = 0   (one equality per dimension)

    Args:
        domain: Domain matrix, columns flag | x (D) | params (P) | const
        context: Parameter context, columns flag | params (P) | const
        dimensions: Number of loop dimensions D
        parameters: Number of symbolic parameters P
        vector: Projection vector u (length D)
        parameter_names: Optional parameter names

    Returns:
        ParametricProgram with big parameter column 2D + P + 2
    """
    domain = np.asarray(domain, dtype=np.int64).reshape(-1, dimensions + parameters + 2)
    context = np.asarray(context, dtype=np.int64).reshape(-1, parameters + 2)
    u = [int(v) for v in vector]
    if len(u) != dimensions:
        raise ValueError(f"Projection vector must have {dimensions} coordinates")

    n_unknowns = 1 + 2 * dimensions
    n_cols = n_unknowns + parameters + 3
    k_col = 1
    x1_cols = slice(2, 2 + dimensions)
    x2_cols = slice(2 + dimensions, 2 + 2 * dimensions)
    param_cols = slice(2 + 2 * dimensions, 2 + 2 * dimensions + parameters)
    big_col = 2 + 2 * dimensions + parameters
    const_col = big_col + 1

    rows = []

    # =========================================
    # Domain constraints, once for x1 and once for x2
    # =========================================
    for x_cols in (x1_cols, x2_cols):
        for constraint in domain:
            row = np.zeros(n_cols, dtype=np.int64)
            row[0] = constraint[0]
            row[x_cols] = constraint[1:1 + dimensions]
            row[param_cols] = constraint[1 + dimensions:1 + dimensions + parameters]
            row[const_col] = constraint[-1]
            rows.append(row)

    # =========================================
    # x1 - x2 = k u  with  k = B - k'
    # =========================================
    for i in range(dimensions):
        row = np.zeros(n_cols, dtype=np.int64)
        row[0] = EQUALITY
        row[k_col] = u[i]
        row[x1_cols.start + i] = 1
        row[x2_cols.start + i] = -1
        row[big_col] = -u[i]
        rows.append(row)

    # Context gains an all-zero column for B, placed before the constant
    context_rows = [
        np.concatenate([c[:-1], [0], c[-1:]]) for c in context
    ]

    return ParametricProgram(
        constraints=frozen_matrix(rows, n_cols),
        context=frozen_matrix(context_rows, parameters + 3),
        n_unknowns=n_unknowns,
        n_parameters=parameters,
        big_parameter=big_col,
        parameter_names=tuple(parameter_names),
    )
