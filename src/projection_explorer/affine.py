"""
Rational affine functions of the symbolic loop parameters.

The throughput ILP answers in closed form: the block pipelining period and
the two extreme points are affine in the parameters with rational
coefficients, e.g. ``1/2 N + 3``.
"""

from dataclasses import dataclass
from fractions import Fraction
from typing import Sequence


@dataclass(frozen=True)
class AffineFunction:
    """
    Affine function ``sum(coefficients[i] * p_i) + constant``.

    Attributes:
        coefficients: One rational coefficient per parameter
        constant: Rational constant term
    """
    coefficients: tuple[Fraction, ...] = ()
    constant: Fraction = Fraction(0)

    @classmethod
    def from_values(cls, coefficients: Sequence, constant=0) -> "AffineFunction":
        """Build from ints, strings or Fractions."""
        return cls(
            coefficients=tuple(Fraction(c) for c in coefficients),
            constant=Fraction(constant),
        )

    @property
    def num_parameters(self) -> int:
        return len(self.coefficients)

    @property
    def is_integral(self) -> bool:
        """True if every coefficient and the constant are integers."""
        return all(c.denominator == 1 for c in (*self.coefficients, self.constant))

    def negate(self) -> "AffineFunction":
        return AffineFunction(
            coefficients=tuple(-c for c in self.coefficients),
            constant=-self.constant,
        )

    def evaluate(self, instantiation: Sequence[int]) -> Fraction:
        """
        Evaluate at a fixed parameter instantiation.

        Args:
            instantiation: One integer value per parameter

        Returns:
            Exact rational value
        """
        if len(instantiation) != len(self.coefficients):
            raise ValueError(
                f"Expected {len(self.coefficients)} parameter values, "
                f"got {len(instantiation)}"
            )
        value = self.constant
        for coeff, p in zip(self.coefficients, instantiation):
            value += coeff * p
        return value

    def format(self, names: Sequence[str] = None) -> str:
        """Human-readable form, e.g. ``'N + 1/2'``."""
        if names is None:
            names = [f"p{i}" for i in range(len(self.coefficients))]

        terms = []
        for coeff, name in zip(self.coefficients, names):
            if coeff == 0:
                continue
            if coeff == 1:
                terms.append(name)
            elif coeff == -1:
                terms.append(f"-{name}")
            else:
                terms.append(f"{coeff}{name}" if coeff.denominator == 1 else f"({coeff}){name}")
        if self.constant != 0 or not terms:
            terms.append(str(self.constant))

        return " + ".join(terms).replace("+ -", "- ")

    def __str__(self) -> str:
        return self.format()
