"""
Tests for projection vector enumeration.
"""

import pytest


class TestVectorEnumerator:
    """Tests for VectorEnumerator class."""

    def test_default_start(self):
        """Default walk starts at (0, ..., 0, 1)."""
        from projection_explorer.enumerator import VectorEnumerator

        enum = VectorEnumerator(dimensions=3, bound=2)
        assert enum.index == (0, 0, 1)

    def test_half_space_order(self):
        """D=2, M=1 visits the four vectors after the origin."""
        from projection_explorer.enumerator import VectorEnumerator

        visited = list(VectorEnumerator(dimensions=2, bound=1))
        assert visited == [(0, 1), (1, -1), (1, 0), (1, 1)]

    def test_half_space_count(self):
        """Default walk visits ((2M+1)^D - 1) / 2 vectors."""
        from projection_explorer.enumerator import VectorEnumerator

        for dims, bound in [(1, 3), (2, 2), (3, 1), (3, 2)]:
            visited = list(VectorEnumerator(dims, bound))
            assert len(visited) == ((2 * bound + 1) ** dims - 1) // 2

    def test_full_box_count(self):
        """Full box visits (2M+1)^D vectors without repeats."""
        from projection_explorer.enumerator import VectorEnumerator

        for dims, bound in [(1, 1), (2, 1), (3, 2), (4, 1)]:
            visited = list(VectorEnumerator.full_box(dims, bound))
            assert len(visited) == (2 * bound + 1) ** dims
            assert len(set(visited)) == len(visited)

    def test_carry(self):
        """Carry resets overflowing coordinates to -M."""
        from projection_explorer.enumerator import VectorEnumerator

        enum = VectorEnumerator(dimensions=3, bound=1, start=(0, 1, 1))
        enum.next()
        assert enum.index == (1, -1, -1)

    def test_end(self):
        """Enumeration ends once the first coordinate exceeds M."""
        from projection_explorer.enumerator import VectorEnumerator

        enum = VectorEnumerator(dimensions=2, bound=1, start=(1, 1))
        assert not enum.end()
        enum.next()
        assert enum.end()

    def test_gcd(self):
        """GCD ignores zero coordinates."""
        from projection_explorer.enumerator import VectorEnumerator

        assert VectorEnumerator(3, 6, start=(0, 0, 0)).gcd() == 0
        assert VectorEnumerator(3, 6, start=(2, 4, 6)).gcd() == 2
        assert VectorEnumerator(3, 6, start=(1, 0, 3)).gcd() == 1
        assert VectorEnumerator(2, 6, start=(-4, 6)).gcd() == 2

    def test_over_bound(self):
        """Norm equal to M^2 is within bound."""
        from projection_explorer.enumerator import VectorEnumerator

        assert not VectorEnumerator(2, 2, start=(2, 0)).is_over_bound()
        assert VectorEnumerator(2, 2, start=(2, 1)).is_over_bound()
        assert VectorEnumerator(2, 2, start=(1, 1)).is_over_bound() is False

    def test_candidates_unit_bound(self):
        """With M=1 only the unit vectors survive."""
        from projection_explorer.enumerator import VectorEnumerator

        assert list(VectorEnumerator(2, 1).candidates()) == [(0, 1), (1, 0)]
        assert len(list(VectorEnumerator.full_box(2, 1).candidates())) == 4

    def test_candidates_are_primitive(self):
        """Candidates are primitive and inside the norm bound."""
        from math import gcd
        from projection_explorer.enumerator import VectorEnumerator

        for vector in VectorEnumerator(3, 3).candidates():
            g = 0
            for v in vector:
                g = gcd(g, v)
            assert g == 1
            assert sum(v * v for v in vector) <= 9

    def test_invalid_arguments(self):
        """Dimensions and bound must be positive."""
        from projection_explorer.enumerator import VectorEnumerator

        with pytest.raises(ValueError):
            VectorEnumerator(0, 1)
        with pytest.raises(ValueError):
            VectorEnumerator(2, 0)
        with pytest.raises(ValueError):
            VectorEnumerator(2, 1, start=(0, 0, 1))
