"""
Parametric ILP construction for throughput and schedule.
"""

from projection_explorer.model.program import (
    EQUALITY,
    INEQUALITY,
    ParametricProgram,
)
from projection_explorer.model.throughput import build_throughput_program
from projection_explorer.model.schedule import (
    DEFAULT_UTILIZATION_WEIGHT,
    build_schedule_program,
)

__all__ = [
    "EQUALITY",
    "INEQUALITY",
    "ParametricProgram",
    "build_throughput_program",
    "build_schedule_program",
    "DEFAULT_UTILIZATION_WEIGHT",
]
