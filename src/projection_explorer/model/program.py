"""
Parametric integer program in PIP matrix layout.
"""

from dataclasses import dataclass, field

import numpy as np


# Column 0 of every constraint row
EQUALITY = 0
INEQUALITY = 1


def frozen_matrix(rows, num_columns: int) -> np.ndarray:
    """
    Build a read-only int64 matrix.

    An empty row list still yields a (0, num_columns) matrix so that column
    counts survive for programs without parameter constraints.
    """
    matrix = np.array(rows, dtype=np.int64).reshape(-1, num_columns)
    matrix.setflags(write=False)
    return matrix


@dataclass(frozen=True)
class ParametricProgram:
    """
    Parametric ILP handed to the solver.

    Column layout of ``constraints``:
        flag | unknowns (n_unknowns) | parameters (n_parameters) | B | const

    Column layout of ``context``:
        flag | parameters (n_parameters) | B | const

    A row with flag 1 means ``row . (x, p, B, 1) >= 0``, flag 0 means ``== 0``.
    Unknowns are non-negative integers and the solver minimises them
    lexicographically in column order. ``B`` is the big parameter, assumed
    larger than any affine expression of the other parameters.

    Attributes:
        constraints: Constraint matrix
        context: Parameter context matrix
        n_unknowns: Number of unknown columns
        n_parameters: Number of symbolic parameters (B excluded)
        big_parameter: Column index of B in ``constraints`` (flag column is 0)
        parameter_names: Names of the symbolic parameters
    """
    constraints: np.ndarray
    context: np.ndarray
    n_unknowns: int
    n_parameters: int
    big_parameter: int
    parameter_names: tuple[str, ...] = field(default=())

    def __post_init__(self):
        expected_cols = self.n_unknowns + self.n_parameters + 3
        if self.constraints.shape[1] != expected_cols:
            raise ValueError(
                f"Constraint matrix has {self.constraints.shape[1]} columns, "
                f"expected {expected_cols}"
            )
        if self.context.shape[1] != self.n_parameters + 3:
            raise ValueError(
                f"Context matrix has {self.context.shape[1]} columns, "
                f"expected {self.n_parameters + 3}"
            )
        if self.big_parameter != 1 + self.n_unknowns + self.n_parameters:
            raise ValueError(
                f"Big parameter column {self.big_parameter} must follow the "
                f"parameter columns"
            )
        if not self.parameter_names:
            object.__setattr__(
                self, "parameter_names",
                tuple(f"p{i}" for i in range(self.n_parameters)),
            )
        elif len(self.parameter_names) != self.n_parameters:
            raise ValueError("One name per parameter is required")

    @property
    def num_rows(self) -> int:
        return self.constraints.shape[0]

    def unknown_columns(self) -> slice:
        return slice(1, 1 + self.n_unknowns)

    def parameter_columns(self) -> slice:
        return slice(1 + self.n_unknowns, self.big_parameter)

    def pretty_print(self) -> str:
        """Matrix dump in the PIP text format (rows cols, then rows)."""
        lines = [f"{self.constraints.shape[0]} {self.constraints.shape[1]}"]
        for row in self.constraints:
            lines.append(" ".join(f"{int(v):4d}" for v in row))
        lines.append(f"{self.context.shape[0]} {self.context.shape[1]}")
        for row in self.context:
            lines.append(" ".join(f"{int(v):4d}" for v in row))
        lines.append(f"Big parameter column: {self.big_parameter}")
        return "\n".join(lines)
