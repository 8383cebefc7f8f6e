"""
Enumeration of candidate projection vectors.

Vectors are produced by an odometer over the box ``[-M, M]^D``. By default
the walk starts at ``(0, ..., 0, 1)`` so that only one vector of every
``u``/``-u`` pair is visited; the sign is recovered later by the schedule
search, which retries with the negated vector.
"""

from math import gcd
from typing import Iterator, Optional, Sequence


class VectorEnumerator:
    """
    Lexicographic odometer over integer vectors in ``[-bound, bound]^dimensions``.

    Usage:
        enum = VectorEnumerator(dimensions=3, bound=2)
        while not enum.end():
            if enum.gcd() == 1 and not enum.is_over_bound():
                evaluate(enum.index)
            enum.next()
    """

    def __init__(
        self,
        dimensions: int,
        bound: int,
        start: Optional[Sequence[int]] = None,
    ):
        """
        Args:
            dimensions: Number of coordinates D (must be >= 1)
            bound: Magnitude bound M (must be >= 1)
            start: First vector. Defaults to (0, ..., 0, 1).
        """
        if dimensions < 1:
            raise ValueError(f"dimensions must be >= 1, got {dimensions}")
        if bound < 1:
            raise ValueError(f"bound must be >= 1, got {bound}")

        self.dimensions = dimensions
        self.bound = bound

        if start is None:
            self._index = [0] * dimensions
            self._index[-1] = 1
        else:
            if len(start) != dimensions:
                raise ValueError(f"start vector must have {dimensions} coordinates")
            self._index = [int(v) for v in start]

    @classmethod
    def full_box(cls, dimensions: int, bound: int) -> "VectorEnumerator":
        """Enumerator visiting all (2M+1)^D vectors, starting at (-M, ..., -M)."""
        return cls(dimensions, bound, start=[-bound] * dimensions)

    @property
    def index(self) -> tuple[int, ...]:
        """Current vector."""
        return tuple(self._index)

    def next(self):
        """Advance to the lexicographically next vector."""
        self._index[-1] += 1

        # carry leftward while the inner coordinate overflows
        for i in range(self.dimensions - 2, -1, -1):
            if self._index[i + 1] > self.bound:
                self._index[i + 1] = -self.bound
                self._index[i] += 1
            else:
                break

    def end(self) -> bool:
        """True once the first coordinate has passed the bound."""
        return self._index[0] > self.bound

    def gcd(self) -> int:
        """GCD of the non-zero coordinates (0 for the zero vector)."""
        g = 0
        for v in self._index:
            if v != 0:
                g = gcd(g, v)
        return g

    def is_over_bound(self) -> bool:
        """True if the squared Euclidean norm exceeds M^2."""
        return sum(v * v for v in self._index) > self.bound * self.bound

    def is_candidate(self) -> bool:
        """Primitive (gcd 1) and within the magnitude bound."""
        return self.gcd() == 1 and not self.is_over_bound()

    def __iter__(self) -> Iterator[tuple[int, ...]]:
        while not self.end():
            yield self.index
            self.next()

    def candidates(self) -> Iterator[tuple[int, ...]]:
        """Yield only the vectors worth scoring."""
        while not self.end():
            if self.is_candidate():
                yield self.index
            self.next()
