"""
Tests for allocation, change of basis and PE counting.
"""

import pytest


UNIT_SQUARE = [
    [1, 1, 0, 0],
    [1, -1, 0, 1],
    [1, 0, 1, 0],
    [1, 0, -1, 1],
]

BOX_DOMAIN = [
    [1, 1, 0, 0, 0],
    [1, -1, 0, 1, 0],
    [1, 0, 1, 0, 0],
    [1, 0, -1, 1, 0],
]


class TestAllocation:
    """Tests for compute_allocation."""

    def test_unit_vectors(self):
        """Allocation of a unit vector picks the other axis."""
        from projection_explorer.geometry import compute_allocation

        assert compute_allocation((0, -1)) == ((1, 0),)
        assert compute_allocation((1, 0)) == ((0, 1),)

    @pytest.mark.parametrize("vector", [
        (1, 1), (1, 2), (2, -3), (1, 1, 1), (1, 2, 3), (3, 0, -2), (0, 0, 1), (2, -3, 5, 7),
    ])
    def test_orthogonal_basis(self, vector):
        """Rows are orthogonal to u and form a lattice basis of its kernel."""
        from itertools import combinations
        from math import gcd
        import sympy
        from projection_explorer.geometry import compute_allocation

        allocation = compute_allocation(vector)
        assert len(allocation) == len(vector) - 1
        for row in allocation:
            assert len(row) == len(vector)
            assert sum(a * u for a, u in zip(row, vector)) == 0

        # lattice basis: the maximal minors are coprime
        matrix = sympy.Matrix(allocation)
        g = 0
        for cols in combinations(range(len(vector)), len(vector) - 1):
            g = gcd(g, int(matrix[:, list(cols)].det()))
        assert g == 1

    def test_one_dimension(self):
        """A 1-D vector has an empty allocation."""
        from projection_explorer.geometry import compute_allocation

        assert compute_allocation((1,)) == ()

    def test_zero_vector(self):
        """The zero vector has no projection."""
        from projection_explorer.errors import EncodingViolation
        from projection_explorer.geometry import compute_allocation

        with pytest.raises(EncodingViolation):
            compute_allocation((0, 0))


class TestUnimodular:
    """Tests for is_unimodular."""

    def test_unimodular(self):
        from projection_explorer.geometry import is_unimodular

        assert is_unimodular(((1, 0),), (-1, -1))
        assert is_unimodular(((0, 1),), (-1, -1))

    def test_not_unimodular(self):
        from projection_explorer.geometry import is_unimodular

        assert not is_unimodular(((1, 0),), (0, -2))
        assert not is_unimodular(((1, 1),), (1, -1))


class TestChangeOfBasis:
    """Tests for change_of_basis."""

    def test_shape_and_identity(self):
        """Allocation, schedule, then identity on parameters and constant."""
        from projection_explorer.geometry import change_of_basis

        cob = change_of_basis(((0, 1),), (-1, -1), parameters=1)

        assert cob.shape == (4, 4)
        assert cob.row(0).tolist() == [[0, 1, 0, 0]]
        assert cob.row(1).tolist() == [[-1, -1, 0, 0]]
        assert cob.row(2).tolist() == [[0, 0, 1, 0]]
        assert cob.row(3).tolist() == [[0, 0, 0, 1]]


class TestCountPEs:
    """Tests for count_pes."""

    def test_unit_square(self):
        """Projecting the unit square along y leaves two PEs."""
        from projection_explorer.geometry import count_pes

        pe_count = count_pes(UNIT_SQUARE, ((1, 0),), (-1, -1), parameters=0)
        assert pe_count.evaluate([]) == 2

    def test_parametric_box(self):
        """The N x N box along x needs N + 1 PEs."""
        from projection_explorer.geometry import count_pes

        pe_count = count_pes(BOX_DOMAIN, ((0, 1),), (-1, -1), parameters=1,
                             parameter_names=["N"])

        assert pe_count.evaluate([4]) == 5
        assert pe_count.evaluate([10]) == 11

    def test_formula(self):
        """The count is a quasi-polynomial in N, not a set of PEs."""
        import islpy as isl
        from projection_explorer.geometry import count_pes

        pe_count = count_pes(BOX_DOMAIN, ((0, 1),), (-1, -1), parameters=1,
                             parameter_names=["N"])

        assert isinstance(pe_count.formula, isl.PwQPolynomial)
        text = str(pe_count)
        assert "N" in text
        assert "y0" not in text

    def test_diagonal(self):
        """Along (1, 1) the 3 x 3 square uses 5 PEs."""
        from projection_explorer.geometry import compute_allocation, count_pes

        square = [
            [1, 1, 0, 0],
            [1, -1, 0, 2],
            [1, 0, 1, 0],
            [1, 0, -1, 2],
        ]
        allocation = compute_allocation((1, 1))
        pe_count = count_pes(square, allocation, (-1, 0), parameters=0)
        assert pe_count.evaluate([]) == 5

    def test_shared_session(self):
        """A caller-provided session is used for the PE set."""
        from projection_explorer.geometry import count_pes
        from projection_explorer.solver import solver_session

        with solver_session() as ctx:
            pe_count = count_pes(UNIT_SQUARE, ((1, 0),), (-1, -1), parameters=0, ctx=ctx)
            assert pe_count.evaluate([]) == 2

    def test_instantiation_length(self):
        """One value per parameter is required."""
        from projection_explorer.geometry import count_pes

        pe_count = count_pes(BOX_DOMAIN, ((0, 1),), (-1, -1), parameters=1)
        with pytest.raises(ValueError):
            pe_count.evaluate([])

    def test_singular_change_of_basis(self):
        """Schedule parallel to the allocation is rejected."""
        from projection_explorer.errors import EncodingViolation
        from projection_explorer.geometry import count_pes

        with pytest.raises(EncodingViolation):
            count_pes(UNIT_SQUARE, ((1, 1),), (1, 1), parameters=0)
