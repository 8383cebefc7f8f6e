"""
Space-time geometry of a projection.

The allocation matrix maps an index point onto its processing element and
the schedule maps it onto its time step. Stacked together they form the
change of basis used to count processing elements.
"""

import logging
from math import lcm
from typing import Sequence

import islpy as isl
import numpy as np
import sympy
from sympy.core.intfunc import igcdex

from projection_explorer.errors import EncodingViolation
from projection_explorer.solver import solver_session

logger = logging.getLogger(__name__)


# =========================================
# Allocation
# =========================================

def integer_kernel(vector: Sequence[int]) -> sympy.Matrix:
    """
    Basis of the integer kernel of a row vector.

    Reduces ``u`` to ``(g, 0, ..., 0)`` with unimodular column operations
    built from extended gcds. The accumulated transform U is unimodular, so
    its last D-1 columns form a basis of ``{x in Z^D : u . x = 0}``.

    Args:
        vector: Projection vector u

    Returns:
        D x (D-1) sympy Matrix
    """
    row = [int(v) for v in vector]
    dimensions = len(row)
    if not any(row):
        raise EncodingViolation("Projection vector must be non-zero")

    transform = sympy.eye(dimensions)
    for j in range(1, dimensions):
        a, b = row[0], row[j]
        if b == 0:
            continue
        x, y, g = igcdex(a, b)
        col0 = transform[:, 0]
        colj = transform[:, j]
        # [[x, -b/g], [y, a/g]] has determinant one
        transform[:, 0] = x * col0 + y * colj
        transform[:, j] = (-b // g) * col0 + (a // g) * colj
        row[0], row[j] = g, 0

    return transform[:, 1:]


def compute_allocation(vector: Sequence[int]) -> tuple[tuple[int, ...], ...]:
    """
    Allocation matrix for a projection vector.

    Returns:
        (D-1) x D matrix as a tuple of rows; each row is orthogonal to u

    Raises:
        EncodingViolation: If the kernel basis does not have shape D x (D-1)
    """
    dimensions = len(vector)
    kernel = integer_kernel(vector)

    if kernel.shape != (dimensions, dimensions - 1):
        raise EncodingViolation(
            f"Nullspace basis has shape {kernel.shape}, "
            f"expected {(dimensions, dimensions - 1)}"
        )
    if not (sympy.Matrix([list(vector)]) * kernel).is_zero_matrix:
        raise EncodingViolation(f"Nullspace basis is not orthogonal to {tuple(vector)}")

    return tuple(
        tuple(int(v) for v in kernel[:, i])
        for i in range(dimensions - 1)
    )


def is_unimodular(allocation, schedule: Sequence[int]) -> bool:
    """True if ``[allocation; schedule]`` has determinant +1 or -1."""
    change = sympy.Matrix([list(r) for r in allocation] + [list(schedule)])
    return abs(change.det()) == 1


# =========================================
# Processing element count
# =========================================

class PECount:
    """
    Parametric processing element count.

    ``formula`` is the Ehrhart quasi-polynomial of the processing element
    set, e.g. ``[N] -> { (1 + N) : N >= 0 }``. Every integer point of
    ``pe_set`` is one processing element.
    """

    def __init__(self, pe_set: isl.Set, parameter_names: Sequence[str]):
        self.pe_set = pe_set
        self.parameter_names = tuple(parameter_names)
        self.formula = pe_set.card()

    def evaluate(self, instantiation: Sequence[int]) -> int:
        """
        Number of processing elements at a fixed parameter instantiation.

        Raises:
            EncodingViolation: If the formula is not an integer there
        """
        if len(instantiation) != len(self.parameter_names):
            raise ValueError(
                f"Expected {len(self.parameter_names)} parameter values, "
                f"got {len(instantiation)}"
            )
        point = isl.Point.zero(self.formula.get_domain_space())
        for i, value in enumerate(instantiation):
            point = point.set_coordinate_val(isl.dim_type.param, i, int(value))

        count = self.formula.eval(point)
        if not count.is_int():
            raise EncodingViolation(f"Processing element count is not an integer: {count}")
        return int(count.to_python())

    def __str__(self) -> str:
        return str(self.formula)

    def __repr__(self) -> str:
        return f"PECount({self})"


def change_of_basis(allocation, schedule: Sequence[int], parameters: int) -> sympy.Matrix:
    """
    Square change of basis of size D + P + 1.

    Allocation rows and the schedule row act on the index space; the
    parameters and the constant are left unchanged.
    """
    dimensions = len(schedule)
    size = dimensions + parameters + 1
    cob = sympy.zeros(size, size)
    for i, row in enumerate(list(allocation) + [schedule]):
        for j, v in enumerate(row):
            cob[i, j] = int(v)
    for i in range(dimensions, size):
        cob[i, i] = 1
    return cob


def count_pes(
    domain: np.ndarray,
    allocation,
    schedule: Sequence[int],
    parameters: int,
    parameter_names: Sequence[str] = (),
    ctx: isl.Context = None,
) -> PECount:
    """
    Parametric set of processing elements for one projection.

    Each domain row ``r . (x, p, 1) >= 0`` becomes ``r . COB^-1 . (y, p, 1) >= 0``
    in the space-time coordinates ``y = [allocation; schedule] x``. The last
    coordinate of y is time and is projected out.

    Args:
        domain: Domain matrix, columns flag | x (D) | params (P) | const
        allocation: (D-1) x D allocation matrix
        schedule: Schedule vector l
        parameters: Number of symbolic parameters P
        parameter_names: Parameter names (default p0, p1, ...)
        ctx: isl context; a fresh session is opened when omitted

    Returns:
        PECount
    """
    dimensions = len(schedule)
    domain = np.asarray(domain, dtype=np.int64).reshape(-1, dimensions + parameters + 2)
    if not parameter_names:
        parameter_names = [f"p{i}" for i in range(parameters)]
    if ctx is None:
        with solver_session() as session:
            return count_pes(domain, allocation, schedule, parameters, parameter_names, session)

    cob = change_of_basis(allocation, schedule, parameters)
    if cob.det() == 0:
        raise EncodingViolation("Allocation and schedule are linearly dependent")
    cob_inverse = cob.inv()

    space = isl.Space.create_from_names(
        ctx,
        set=[f"y{i}" for i in range(dimensions)],
        params=list(parameter_names),
    )
    local_space = isl.LocalSpace.from_space(space)
    bset = isl.BasicSet.universe(space)

    for constraint in domain:
        transformed = sympy.Matrix([[int(v) for v in constraint[1:]]]) * cob_inverse
        scale = lcm(*(int(sympy.fraction(v)[1]) for v in transformed))
        coefficients = [int(v * scale) for v in transformed]

        if int(constraint[0]) == 0:
            c = isl.Constraint.equality_alloc(local_space)
        else:
            c = isl.Constraint.inequality_alloc(local_space)
        for i in range(dimensions):
            c = c.set_coefficient_val(isl.dim_type.set, i, coefficients[i])
        for j in range(parameters):
            c = c.set_coefficient_val(isl.dim_type.param, j, coefficients[dimensions + j])
        c = c.set_constant_val(coefficients[-1])
        bset = bset.add_constraint(c)

    pe_set = isl.Set.from_basic_set(bset).project_out(isl.dim_type.set, dimensions - 1, 1)
    logger.debug(f"Processing element set: {pe_set}")
    return PECount(pe_set, parameter_names)
