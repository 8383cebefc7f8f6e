"""
Parametric ILP solving and interpretation of solver answers.
"""

from projection_explorer.solver.tree import ParametricSolutionTree, RawAffine
from projection_explorer.solver.extract import (
    ScheduleResult,
    ThroughputResult,
    extract_schedule,
    extract_throughput,
)
from projection_explorer.solver.pip import solve, solver_session

__all__ = [
    "ParametricSolutionTree",
    "RawAffine",
    "ScheduleResult",
    "ThroughputResult",
    "extract_schedule",
    "extract_throughput",
    "solve",
    "solver_session",
]
