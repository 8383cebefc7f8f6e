"""
Solver-independent view of a parametric ILP answer.
"""

from dataclasses import dataclass, field
from fractions import Fraction
from typing import Optional


@dataclass(frozen=True)
class RawAffine:
    """
    One element of a solver answer, still in terms of the big parameter.

    Value = parameters . p + big * B + constant + sum(m * floor(d)) for every
    ``(m, d)`` in ``new_parameters``. Each ``d`` is itself a RawAffine over
    the same parameters, possibly with further nested new parameters.

    Attributes:
        parameters: Coefficient per symbolic parameter
        big: Coefficient of the big parameter B
        constant: Constant term
        new_parameters: Solver-introduced parameters as (multiplier, definition)
    """
    parameters: tuple[Fraction, ...] = ()
    big: Fraction = Fraction(0)
    constant: Fraction = Fraction(0)
    new_parameters: tuple[tuple[Fraction, "RawAffine"], ...] = ()

    @classmethod
    def of(cls, parameters=(), big=0, constant=0, new_parameters=()) -> "RawAffine":
        """Build from plain numbers."""
        return cls(
            parameters=tuple(Fraction(p) for p in parameters),
            big=Fraction(big),
            constant=Fraction(constant),
            new_parameters=tuple((Fraction(m), d) for m, d in new_parameters),
        )


@dataclass(frozen=True)
class ParametricSolutionTree:
    """
    Answer of a parametric ILP.

    Attributes:
        solutions: One RawAffine per unknown, in unknown order. Empty when
            the program has no feasible point.
        condition: Printable branch condition when the answer differs
            across the parameter context, else None.
    """
    solutions: tuple[RawAffine, ...] = field(default=())
    condition: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return len(self.solutions) == 0

    @property
    def is_conditional(self) -> bool:
        return self.condition is not None
