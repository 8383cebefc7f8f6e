"""
Parametric ILP solving on top of isl.

A ParametricProgram is turned into an isl basic set whose set dimensions are
the unknowns and whose parameters are the symbolic parameters followed by
the big parameter B. isl computes the parametric lexicographic minimum as a
piecewise multi-affine function; this module resolves B by keeping only the
pieces that remain valid as B grows without bound.
"""

import contextlib
import logging
from fractions import Fraction
from typing import Iterator

import islpy as isl

from projection_explorer.errors import EncodingViolation
from projection_explorer.model.program import EQUALITY, ParametricProgram
from projection_explorer.solver.tree import ParametricSolutionTree, RawAffine

logger = logging.getLogger(__name__)

BIG_PARAMETER_NAME = "_B"


@contextlib.contextmanager
def solver_session() -> Iterator[isl.Context]:
    """
    Context manager providing one isl context shared by a group of solves.

    Objects built in the session must not be combined with objects from
    another session.

    Usage:
        with solver_session() as ctx:
            tree = solve(program, ctx)
    """
    yield isl.Context()


def _to_fraction(val: isl.Val) -> Fraction:
    return Fraction(str(val))


# =========================================
# Program -> isl
# =========================================

def _column_map(program: ParametricProgram) -> list:
    """(dim_type, position) for every non-flag, non-constant column."""
    columns = [(isl.dim_type.set, i) for i in range(program.n_unknowns)]
    columns += [(isl.dim_type.param, i) for i in range(program.n_parameters)]
    columns.append((isl.dim_type.param, program.n_parameters))
    return columns


def _make_constraint(space: isl.Space, row, columns) -> isl.Constraint:
    local_space = isl.LocalSpace.from_space(space)
    if int(row[0]) == EQUALITY:
        constraint = isl.Constraint.equality_alloc(local_space)
    else:
        constraint = isl.Constraint.inequality_alloc(local_space)

    for (dim_type, pos), value in zip(columns, row[1:-1]):
        if value != 0:
            constraint = constraint.set_coefficient_val(dim_type, pos, int(value))
    return constraint.set_constant_val(int(row[-1]))


def build_isl_set(program: ParametricProgram, ctx: isl.Context) -> isl.BasicSet:
    """
    Translate the program into an isl basic set.

    Unknowns are constrained to be non-negative, B to be non-negative, and
    the context rows are added as constraints on the parameters.
    """
    space = isl.Space.create_from_names(
        ctx,
        set=[f"_x{i}" for i in range(program.n_unknowns)],
        params=list(program.parameter_names) + [BIG_PARAMETER_NAME],
    )
    columns = _column_map(program)
    bset = isl.BasicSet.universe(space)

    for row in program.constraints:
        bset = bset.add_constraint(_make_constraint(space, row, columns))

    # unknowns >= 0
    local_space = isl.LocalSpace.from_space(space)
    for i in range(program.n_unknowns):
        bset = bset.add_constraint(
            isl.Constraint.inequality_alloc(local_space)
            .set_coefficient_val(isl.dim_type.set, i, 1)
        )

    # B >= 0
    bset = bset.add_constraint(
        isl.Constraint.inequality_alloc(local_space)
        .set_coefficient_val(isl.dim_type.param, program.n_parameters, 1)
    )

    # context rows skip the unknown columns
    param_columns = columns[program.n_unknowns:]
    for row in program.context:
        bset = bset.add_constraint(_make_constraint(space, row, param_columns))

    return bset


def _context_set(program: ParametricProgram, ctx: isl.Context) -> isl.Set:
    """Parameter context with B projected out."""
    space = isl.Space.create_from_names(
        ctx,
        set=[],
        params=list(program.parameter_names) + [BIG_PARAMETER_NAME],
    )
    columns = [(isl.dim_type.param, i) for i in range(program.n_parameters + 1)]
    bset = isl.BasicSet.universe(space)
    for row in program.context:
        bset = bset.add_constraint(_make_constraint(space, row, columns))
    return (
        isl.Set.from_basic_set(bset)
        .project_out(isl.dim_type.param, program.n_parameters, 1)
        .params()
    )


# =========================================
# Big parameter resolution
# =========================================

def _div_uses(local_space: isl.LocalSpace, big: int) -> bool:
    """True if any integer division of the local space involves B."""
    for k in range(local_space.dim(isl.dim_type.div)):
        div = local_space.get_div(k)
        if not div.get_coefficient_val(isl.dim_type.param, big).is_zero():
            return True
    return False


def _survives_big_limit(bset: isl.BasicSet, big: int) -> bool:
    """
    True if the basic set stays non-empty as B grows without bound.

    That holds when no equality pins B and no inequality bounds it from
    above.
    """
    if _div_uses(bset.get_local_space(), big):
        raise EncodingViolation(
            "Solution domain contains an integer division of the big parameter"
        )
    for constraint in bset.get_constraints():
        coeff = constraint.get_coefficient_val(isl.dim_type.param, big)
        if coeff.is_zero():
            continue
        if constraint.is_equality() or coeff.is_neg():
            return False
    return True


def _limit_domain(domain: isl.Set, big: int):
    """Part of a piece domain valid for arbitrarily large B, B projected out."""
    kept = None
    for bset in domain.get_basic_sets():
        if not _survives_big_limit(bset, big):
            continue
        limited = isl.Set.from_basic_set(
            bset.project_out(isl.dim_type.param, big, 1)
        )
        kept = limited if kept is None else kept.union(limited)
    return kept


# =========================================
# isl -> RawAffine
# =========================================

def _read_aff(aff: isl.Aff, n_parameters: int, n_divs: int = None) -> RawAffine:
    """
    Read an affine expression. Integer divisions become new parameters whose
    definitions may only refer to earlier divisions (the first ``n_divs``).
    """
    if n_divs is None:
        n_divs = aff.dim(isl.dim_type.div)

    parameters = tuple(
        _to_fraction(aff.get_coefficient_val(isl.dim_type.param, j))
        for j in range(n_parameters)
    )
    big = _to_fraction(aff.get_coefficient_val(isl.dim_type.param, n_parameters))
    constant = _to_fraction(aff.get_constant_val())

    new_parameters = []
    for k in range(aff.dim(isl.dim_type.div)):
        multiplier = _to_fraction(aff.get_coefficient_val(isl.dim_type.div, k))
        if multiplier == 0:
            continue
        if k >= n_divs:
            raise EncodingViolation("Integer division refers to itself")
        new_parameters.append(
            (multiplier, _read_aff(aff.get_div(k), n_parameters, n_divs=k))
        )

    return RawAffine(
        parameters=parameters,
        big=big,
        constant=constant,
        new_parameters=tuple(new_parameters),
    )


def _read_multi_aff(maff: isl.MultiAff, n_parameters: int) -> tuple[RawAffine, ...]:
    return tuple(
        _read_aff(maff.get_at(i), n_parameters)
        for i in range(maff.dim(isl.dim_type.out))
    )


# =========================================
# Entry point
# =========================================

def solve(program: ParametricProgram, ctx: isl.Context = None) -> ParametricSolutionTree:
    """
    Parametric lexicographic minimum of the program's unknowns.

    Args:
        program: Program to solve
        ctx: isl context; a fresh session is opened when omitted

    Returns:
        ParametricSolutionTree: empty when infeasible for large B,
        unconditioned when a single expression covers the whole context,
        conditioned otherwise.
    """
    if ctx is None:
        with solver_session() as session:
            return solve(program, session)

    big = program.n_parameters
    feasible = isl.Set.from_basic_set(build_isl_set(program, ctx))
    if feasible.is_empty():
        logger.debug("Program is infeasible")
        return ParametricSolutionTree()

    pieces = []
    feasible.lexmin_pw_multi_aff().coalesce().foreach_piece(
        lambda domain, maff: pieces.append((domain, maff))
    )
    logger.debug(f"Solver returned {len(pieces)} piece(s)")

    # keep the B -> infinity pieces and merge identical expressions
    merged = []
    for domain, maff in pieces:
        limit = _limit_domain(domain, big)
        if limit is None or limit.is_empty():
            continue
        for i, (other_domain, other_maff) in enumerate(merged):
            if other_maff.plain_is_equal(maff):
                merged[i] = (other_domain.union(limit), other_maff)
                break
        else:
            merged.append((limit, maff))
    logger.debug(f"{len(merged)} piece(s) valid for large big parameter")

    if not merged:
        return ParametricSolutionTree()

    domain, maff = merged[0]
    solutions = _read_multi_aff(maff, program.n_parameters)

    if len(merged) == 1 and _context_set(program, ctx).is_subset(domain.coalesce()):
        return ParametricSolutionTree(solutions=solutions)

    condition = " ; ".join(f"{d} -> {m}" for d, m in merged)
    return ParametricSolutionTree(solutions=solutions, condition=condition)
