"""
Turn solver answers into true values.

Both ILPs encode their unknowns relative to the big parameter B. Before a
value leaves this module the B term must cancel exactly; anything else means
the encoding has been violated and the run cannot be trusted.
"""

from dataclasses import dataclass
from typing import Optional

from projection_explorer.affine import AffineFunction
from projection_explorer.errors import EncodingViolation
from projection_explorer.solver.tree import ParametricSolutionTree, RawAffine


@dataclass(frozen=True)
class ThroughputResult:
    """
    Attributes:
        bpp: Block pipelining period, affine in the parameters
        x1: First extreme point, one affine function per dimension
        x2: Second extreme point, ``x1 - x2 = bpp * u``
    """
    bpp: AffineFunction
    x1: tuple[AffineFunction, ...]
    x2: tuple[AffineFunction, ...]


@dataclass(frozen=True)
class ScheduleResult:
    """
    Attributes:
        utilization: t, the bound on ``l . u``
        latency: s, the bound on ``l . (Vi - Vj)`` over all vertex pairs
        schedule: l, one integer per dimension
    """
    utilization: int
    latency: int
    schedule: tuple[int, ...]


def fold_new_parameters(value: RawAffine) -> RawAffine:
    """
    Fold every solver-introduced parameter into the regular terms.

    Each ``(multiplier, definition)`` contributes ``multiplier * definition``
    to the parameter, big-parameter and constant coefficients. Nested
    definitions are folded first.
    """
    if not value.new_parameters:
        return value

    parameters = list(value.parameters)
    big = value.big
    constant = value.constant

    for multiplier, definition in value.new_parameters:
        definition = fold_new_parameters(definition)
        if len(definition.parameters) != len(parameters):
            raise EncodingViolation(
                "New parameter definition does not match the parameter count"
            )
        for i, coeff in enumerate(definition.parameters):
            parameters[i] += multiplier * coeff
        big += multiplier * definition.big
        constant += multiplier * definition.constant

    return RawAffine(
        parameters=tuple(parameters),
        big=big,
        constant=constant,
    )


def _check_tree(tree: ParametricSolutionTree, expected: int, what: str):
    if tree.is_conditional:
        raise EncodingViolation(
            f"{what} solution depends on a parameter condition: {tree.condition}"
        )
    if len(tree.solutions) != expected:
        raise EncodingViolation(
            f"{what} solution has {len(tree.solutions)} elements, expected {expected}"
        )


def _as_affine(value: RawAffine, parameters: int) -> AffineFunction:
    if len(value.parameters) != parameters:
        raise EncodingViolation(
            f"Solution element has {len(value.parameters)} parameter "
            f"coefficients, expected {parameters}"
        )
    return AffineFunction(coefficients=value.parameters, constant=value.constant)


def extract_throughput(
    tree: ParametricSolutionTree,
    dimensions: int,
    parameters: int,
) -> ThroughputResult:
    """
    Read bpp, x1 and x2 from the throughput ILP answer.

    Args:
        tree: Solver answer for the throughput program
        dimensions: Number of loop dimensions D
        parameters: Number of symbolic parameters P

    Returns:
        ThroughputResult

    Raises:
        EncodingViolation: If the answer is empty, conditional, or the big
            parameter does not cancel.
    """
    if tree.is_empty:
        raise EncodingViolation("Throughput program has no solution")
    _check_tree(tree, 1 + 2 * dimensions, "Throughput")

    values = [fold_new_parameters(v) for v in tree.solutions]

    # k' = B - k, so k carries the negated terms and B must cancel
    k_prime = values[0]
    if 1 - k_prime.big != 0:
        raise EncodingViolation(
            f"Big parameter does not cancel in the period (coefficient {k_prime.big})"
        )
    bpp = _as_affine(k_prime, parameters).negate()

    points = []
    for value in values[1:]:
        if value.big != 0:
            raise EncodingViolation(
                f"Big parameter appears in an extreme point (coefficient {value.big})"
            )
        points.append(_as_affine(value, parameters))

    return ThroughputResult(
        bpp=bpp,
        x1=tuple(points[:dimensions]),
        x2=tuple(points[dimensions:]),
    )


def _as_integer(value: RawAffine, big: int, what: str) -> int:
    if value.big != big:
        raise EncodingViolation(
            f"Big parameter coefficient of {what} is {value.big}, expected {big}"
        )
    if any(c != 0 for c in value.parameters):
        raise EncodingViolation(f"{what} depends on a parameter")
    if value.constant.denominator != 1:
        raise EncodingViolation(f"{what} is not integral: {value.constant}")
    return int(value.constant)


def extract_schedule(
    tree: ParametricSolutionTree,
    dimensions: int,
) -> Optional[ScheduleResult]:
    """
    Read utilization, latency and schedule from the schedule ILP answer.

    Returns None when the program is infeasible, which tells the caller to
    retry with the negated projection vector.

    Raises:
        EncodingViolation: If the answer is conditional, non-integral, or
            the big parameter does not cancel.
    """
    if tree.is_empty:
        return None
    _check_tree(tree, 3 + dimensions, "Schedule")

    values = [fold_new_parameters(v) for v in tree.solutions]

    # values[0] is the objective q
    utilization = _as_integer(values[1], 0, "utilization")
    latency = _as_integer(values[2], 0, "latency")
    schedule = tuple(
        _as_integer(v, 1, f"schedule coefficient {i}")
        for i, v in enumerate(values[3:])
    )

    return ScheduleResult(
        utilization=utilization,
        latency=latency,
        schedule=schedule,
    )
