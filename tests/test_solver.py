"""
Tests for the isl-backed parametric ILP solver.
"""

from fractions import Fraction

import pytest


BOX_DOMAIN = [
    [1, 1, 0, 0, 0],
    [1, -1, 0, 1, 0],
    [1, 0, 1, 0, 0],
    [1, 0, -1, 1, 0],
]
BOX_CONTEXT = [[1, 1, 0]]

# 0 <= x <= N, 0 <= y <= M
RECTANGLE_DOMAIN = [
    [1, 1, 0, 0, 0, 0],
    [1, -1, 0, 1, 0, 0],
    [1, 0, 1, 0, 0, 0],
    [1, 0, -1, 0, 1, 0],
]
RECTANGLE_CONTEXT = [[1, 1, 0, -1], [1, 0, 1, -1]]

UNIT_SQUARE_DEPS = [[1, 0], [0, 1]]
UNIT_SQUARE_VERTICES = [[0, 0], [0, 1], [1, 0], [1, 1]]


class TestSolve:
    """Tests for solve on throughput programs."""

    def test_box_period_along_x(self):
        """The box 0 <= x, y <= N has period N along (1, 0)."""
        from projection_explorer.model import build_throughput_program
        from projection_explorer.solver import extract_throughput, solve

        program = build_throughput_program(
            BOX_DOMAIN, BOX_CONTEXT, 2, 1, (1, 0), parameter_names=["N"]
        )
        tree = solve(program)

        assert tree.condition is None
        result = extract_throughput(tree, 2, 1)
        assert result.bpp.coefficients == (Fraction(1),)
        assert result.bpp.constant == 0
        assert result.bpp.evaluate([16]) == 16

    def test_box_points_realise_period(self):
        """x1 - x2 = bpp * u."""
        from projection_explorer.model import build_throughput_program
        from projection_explorer.solver import extract_throughput, solve

        program = build_throughput_program(
            BOX_DOMAIN, BOX_CONTEXT, 2, 1, (1, 1), parameter_names=["N"]
        )
        result = extract_throughput(solve(program), 2, 1)

        n = 7
        bpp = result.bpp.evaluate([n])
        assert bpp == n
        for i in range(2):
            assert result.x1[i].evaluate([n]) - result.x2[i].evaluate([n]) == bpp

    def test_steep_vector(self):
        """Along (2, 1) the 4 x 4 square holds 3 collinear points."""
        from projection_explorer.model import build_throughput_program
        from projection_explorer.solver import extract_throughput, solve

        domain = [
            [1, 1, 0, 0],
            [1, -1, 0, 4],
            [1, 0, 1, 0],
            [1, 0, -1, 4],
        ]
        program = build_throughput_program(domain, [], 2, 0, (2, 1))
        result = extract_throughput(solve(program), 2, 0)

        assert result.bpp.constant == 2

    def test_session(self):
        """A shared session can serve several solves."""
        import islpy as isl
        from projection_explorer.model import build_throughput_program
        from projection_explorer.solver import solve, solver_session

        program = build_throughput_program(
            BOX_DOMAIN, BOX_CONTEXT, 2, 1, (0, 1), parameter_names=["N"]
        )
        with solver_session() as ctx:
            assert isinstance(ctx, isl.Context)
            first = solve(program, ctx)
            second = solve(program, ctx)
        assert first == second

    def test_division_of_big_parameter(self):
        """Pieces whose domain divides B cannot be resolved."""
        import islpy as isl
        from projection_explorer.errors import EncodingViolation
        from projection_explorer.solver.pip import _survives_big_limit

        bset = isl.BasicSet("[N, _B] -> { [x] : (x + _B) mod 2 = 0 and 0 <= x <= N }")
        with pytest.raises(EncodingViolation):
            _survives_big_limit(bset, 1)

    def test_period_depends_on_case(self):
        """On the N x M box the period along (1, 1) is min(N, M)."""
        from projection_explorer.errors import EncodingViolation
        from projection_explorer.model import build_throughput_program
        from projection_explorer.solver import extract_throughput, solve

        program = build_throughput_program(
            RECTANGLE_DOMAIN, RECTANGLE_CONTEXT, 2, 2, (1, 1),
            parameter_names=["N", "M"],
        )
        tree = solve(program)

        assert tree.is_conditional
        with pytest.raises(EncodingViolation):
            extract_throughput(tree, 2, 2)


class TestScheduleSolve:
    """Tests for solve on schedule programs."""

    def test_infeasible_sign(self):
        """(0, 1) cannot be scheduled against dependency (0, 1)."""
        from projection_explorer.model import build_schedule_program
        from projection_explorer.solver import extract_schedule, solve

        program = build_schedule_program((0, 1), UNIT_SQUARE_DEPS, UNIT_SQUARE_VERTICES)
        tree = solve(program)

        assert tree.is_empty
        assert extract_schedule(tree, 2) is None

    def test_negated_sign(self):
        """(0, -1) gets the schedule (-1, -1)."""
        from projection_explorer.model import build_schedule_program
        from projection_explorer.solver import extract_schedule, solve

        program = build_schedule_program((0, -1), UNIT_SQUARE_DEPS, UNIT_SQUARE_VERTICES)
        result = extract_schedule(solve(program), 2)

        assert result.schedule == (-1, -1)
        assert result.utilization == 1
        assert result.latency == 2

    @pytest.mark.parametrize("stages", [1, 2, 5])
    def test_dependencies_respected(self, stages):
        """Every dependency gets at least S cycles of delay."""
        from projection_explorer.model import build_schedule_program
        from projection_explorer.solver import extract_schedule, solve

        deps = [[1, 0], [0, 1], [1, -1]]
        vertices = [[0, 0], [0, 3], [3, 0], [3, 3]]
        program = build_schedule_program(
            (1, 1), deps, vertices, pipeline_stages=stages
        )
        result = extract_schedule(solve(program), 2)
        if result is None:
            program = build_schedule_program(
                (-1, -1), deps, vertices, pipeline_stages=stages
            )
            result = extract_schedule(solve(program), 2)

        assert result is not None
        delays = [-(result.schedule[0] * d[0] + result.schedule[1] * d[1]) for d in deps]
        assert min(delays) >= stages
