"""
Tests for throughput and schedule ILP construction.
"""

import pytest
import numpy as np


# 0 <= x, y <= N
BOX_DOMAIN = [
    [1, 1, 0, 0, 0],
    [1, -1, 0, 1, 0],
    [1, 0, 1, 0, 0],
    [1, 0, -1, 1, 0],
]
BOX_CONTEXT = [[1, 1, 0]]

UNIT_SQUARE_DEPS = [[1, 0], [0, 1]]
UNIT_SQUARE_VERTICES = [[0, 0], [0, 1], [1, 0], [1, 1]]


class TestParametricProgram:
    """Tests for ParametricProgram validation."""

    def test_column_counts(self):
        """Mismatched column counts are rejected."""
        from projection_explorer.model.program import ParametricProgram, frozen_matrix

        with pytest.raises(ValueError):
            ParametricProgram(
                constraints=frozen_matrix([[1, 0, 0, 0]], 4),
                context=frozen_matrix([], 3),
                n_unknowns=2,
                n_parameters=0,
                big_parameter=3,
            )

    def test_big_parameter_position(self):
        """B must sit right after the parameters."""
        from projection_explorer.model.program import ParametricProgram, frozen_matrix

        with pytest.raises(ValueError):
            ParametricProgram(
                constraints=frozen_matrix([[1, 0, 0, 0, 0]], 5),
                context=frozen_matrix([], 3),
                n_unknowns=2,
                n_parameters=0,
                big_parameter=2,
            )

    def test_default_names_and_read_only(self):
        """Parameter names default to p0.. and matrices are frozen."""
        from projection_explorer.model.program import ParametricProgram, frozen_matrix

        program = ParametricProgram(
            constraints=frozen_matrix([[1, 1, 0, 0, 0]], 5),
            context=frozen_matrix([[1, 1, 0, 0]], 4),
            n_unknowns=1,
            n_parameters=1,
            big_parameter=3,
        )
        assert program.parameter_names == ("p0",)
        assert program.num_rows == 1
        with pytest.raises(ValueError):
            program.constraints[0, 0] = 0

    def test_empty_matrix_keeps_columns(self):
        """An empty row list still has the requested column count."""
        from projection_explorer.model.program import frozen_matrix

        assert frozen_matrix([], 3).shape == (0, 3)


class TestThroughputProgram:
    """Tests for build_throughput_program."""

    def test_layout(self):
        """Columns are flag | k' | x1 | x2 | N | B | const."""
        from projection_explorer.model.throughput import build_throughput_program

        program = build_throughput_program(BOX_DOMAIN, BOX_CONTEXT, 2, 1, (1, 0))

        assert program.n_unknowns == 5
        assert program.constraints.shape == (10, 9)
        assert program.big_parameter == 7

    def test_domain_rows(self):
        """Domain rows are duplicated on x1 and then on x2."""
        from projection_explorer.model.throughput import build_throughput_program

        program = build_throughput_program(BOX_DOMAIN, BOX_CONTEXT, 2, 1, (1, 0))
        rows = program.constraints

        assert rows[0].tolist() == [1, 0, 1, 0, 0, 0, 0, 0, 0]
        assert rows[1].tolist() == [1, 0, -1, 0, 0, 0, 1, 0, 0]
        assert rows[4].tolist() == [1, 0, 0, 0, 1, 0, 0, 0, 0]
        assert rows[5].tolist() == [1, 0, 0, 0, -1, 0, 1, 0, 0]

    def test_collinearity_rows(self):
        """x1 - x2 + u k' - u B = 0 for every dimension."""
        from projection_explorer.model.throughput import build_throughput_program

        program = build_throughput_program(BOX_DOMAIN, BOX_CONTEXT, 2, 1, (2, -1))
        rows = program.constraints

        assert rows[8].tolist() == [0, 2, 1, 0, -1, 0, 0, -2, 0]
        assert rows[9].tolist() == [0, -1, 0, 1, 0, -1, 0, 1, 0]

    def test_context_gains_big_column(self):
        """A zero column for B is inserted before the constant."""
        from projection_explorer.model.throughput import build_throughput_program

        program = build_throughput_program(BOX_DOMAIN, [[1, 1, -1]], 2, 1, (1, 0))
        assert program.context.tolist() == [[1, 1, 0, -1]]

    def test_vector_length(self):
        """The vector must have one coordinate per dimension."""
        from projection_explorer.model.throughput import build_throughput_program

        with pytest.raises(ValueError):
            build_throughput_program(BOX_DOMAIN, BOX_CONTEXT, 2, 1, (1, 0, 0))


class TestScheduleProgram:
    """Tests for build_schedule_program."""

    def test_layout(self):
        """Columns are flag | q | t | s | l' | B | const."""
        from projection_explorer.model.schedule import build_schedule_program

        program = build_schedule_program((0, 1), UNIT_SQUARE_DEPS, UNIT_SQUARE_VERTICES)

        assert program.n_unknowns == 5
        assert program.n_parameters == 0
        assert program.big_parameter == 6
        # 3 fixed rows + 2 dependencies + 4 * 3 vertex pairs
        assert program.constraints.shape == (17, 8)
        assert program.context.tolist() == [[1, 1, 0]]

    def test_fixed_rows(self):
        """Utilization, rate and objective rows."""
        from projection_explorer.model.schedule import build_schedule_program

        program = build_schedule_program((0, 1), UNIT_SQUARE_DEPS, UNIT_SQUARE_VERTICES)
        rows = program.constraints

        assert rows[0].tolist() == [1, 0, 1, 0, 0, -1, 1, 0]
        assert rows[1].tolist() == [1, 0, 0, 0, 0, 1, -1, -1]
        assert rows[2].tolist() == [1, 1, -2048, -1, 0, 0, 0, 0]

    def test_dependency_rows(self):
        """l . d <= -S with the pipeline stage count in the constant."""
        from projection_explorer.model.schedule import build_schedule_program

        program = build_schedule_program(
            (0, 1), UNIT_SQUARE_DEPS, UNIT_SQUARE_VERTICES, pipeline_stages=3
        )
        rows = program.constraints

        assert rows[3].tolist() == [1, 0, 0, 0, -1, 0, 1, -3]
        assert rows[4].tolist() == [1, 0, 0, 0, 0, -1, 1, -3]

    def test_vertex_rows(self):
        """One row per ordered pair of distinct vertices."""
        from projection_explorer.model.schedule import build_schedule_program

        program = build_schedule_program((0, 1), UNIT_SQUARE_DEPS, UNIT_SQUARE_VERTICES)
        rows = program.constraints

        # V0 - V1 = (0, -1)
        assert rows[5].tolist() == [1, 0, 0, 1, 0, 1, -1, 0]
        assert np.all(rows[5:, 3] == 1)

    def test_weight(self):
        """The utilization weight is configurable."""
        from projection_explorer.model.schedule import build_schedule_program

        program = build_schedule_program(
            (1, 0), UNIT_SQUARE_DEPS, UNIT_SQUARE_VERTICES, weight=7
        )
        assert program.constraints[2, 2] == -7

    def test_negated_program_is_new(self):
        """Building for -u leaves the program for u untouched."""
        from projection_explorer.model.schedule import build_schedule_program

        positive = build_schedule_program((0, 1), UNIT_SQUARE_DEPS, UNIT_SQUARE_VERTICES)
        before = positive.constraints.copy()
        negative = build_schedule_program((0, -1), UNIT_SQUARE_DEPS, UNIT_SQUARE_VERTICES)

        assert np.array_equal(positive.constraints, before)
        assert negative.constraints[0].tolist() == [1, 0, 1, 0, 0, 1, -1, 0]
