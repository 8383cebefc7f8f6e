"""
Projection Explorer - space-time mapping exploration for polyhedral loop nests.

For every primitive projection vector of a loop nest this package solves a
parametric throughput ILP and a schedule ILP, derives the allocation matrix,
interconnect and delay metrics and the processing element count, then ranks
all candidates.

Main components:
- ProjectionExplorer: Exploration driver
- LoopNest: Problem definition
- ProjectionSolution: Per-candidate result
- evaluate / rank: Core scoring and ordering

Quick Start:
    from projection_explorer import LoopNest, ProjectionExplorer

    problem = LoopNest.from_yaml("problem.yaml")
    result = ProjectionExplorer(problem).run()
    result.print_summary()
"""

__version__ = "0.1.0"

from projection_explorer.affine import AffineFunction
from projection_explorer.enumerator import VectorEnumerator
from projection_explorer.errors import (
    EncodingViolation,
    InputError,
    ProjectionExplorerError,
    ScheduleInfeasible,
)
from projection_explorer.explorer import (
    ExplorationResult,
    ProjectionExplorer,
    evaluate,
    run_exploration,
)
from projection_explorer.problem import ExplorationOptions, LoopNest
from projection_explorer.ranking import rank
from projection_explorer.solution import ProjectionSolution

__all__ = [
    # Main classes
    "ProjectionExplorer",
    "LoopNest",
    "ExplorationOptions",
    "ProjectionSolution",
    "ExplorationResult",

    # Helper classes
    "AffineFunction",
    "VectorEnumerator",

    # Errors
    "ProjectionExplorerError",
    "EncodingViolation",
    "ScheduleInfeasible",
    "InputError",

    # Functions
    "evaluate",
    "rank",
    "run_exploration",
]
