"""
Main exploration entry point.
"""

import contextlib
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

import islpy as isl

from projection_explorer.enumerator import VectorEnumerator
from projection_explorer.errors import ScheduleInfeasible
from projection_explorer.geometry import compute_allocation, count_pes, is_unimodular
from projection_explorer.model import (
    DEFAULT_UTILIZATION_WEIGHT,
    build_schedule_program,
    build_throughput_program,
)
from projection_explorer.network import (
    compute_interconnection_network,
    compute_schedule_network,
)
from projection_explorer.problem import ExplorationOptions, LoopNest
from projection_explorer.ranking import rank
from projection_explorer.solution import ProjectionSolution, compute_instance_bpp
from projection_explorer.solver import (
    ScheduleResult,
    extract_schedule,
    extract_throughput,
    solve,
    solver_session,
)

logger = logging.getLogger(__name__)


class ScheduleSearch(Enum):
    """States of the schedule search for one candidate."""
    TRY_POSITIVE = "try_positive"
    TRY_NEGATIVE = "try_negative"
    FOUND = "found"
    INFEASIBLE = "infeasible"


def find_schedule(
    vector: Sequence[int],
    problem: LoopNest,
    pipeline_stages: int = 1,
    weight: int = DEFAULT_UTILIZATION_WEIGHT,
    ctx: isl.Context = None,
) -> tuple[ScheduleResult, tuple[int, ...]]:
    """
    Solve the schedule ILP for u, then for -u if u has no schedule.

    Returns:
        (schedule result, vector it was found for)

    Raises:
        ScheduleInfeasible: If neither sign admits a schedule
    """
    vector = tuple(int(v) for v in vector)
    state = ScheduleSearch.TRY_POSITIVE
    result = None
    attempt = vector

    while state not in (ScheduleSearch.FOUND, ScheduleSearch.INFEASIBLE):
        attempt = vector if state is ScheduleSearch.TRY_POSITIVE else tuple(-v for v in vector)
        program = build_schedule_program(
            attempt,
            problem.dependencies,
            problem.vertices,
            pipeline_stages=pipeline_stages,
            weight=weight,
        )
        result = extract_schedule(solve(program, ctx), problem.dimensions)

        if result is not None:
            state = ScheduleSearch.FOUND
        elif state is ScheduleSearch.TRY_POSITIVE:
            logger.debug(f"No schedule for {vector}, retrying with negated vector")
            state = ScheduleSearch.TRY_NEGATIVE
        else:
            state = ScheduleSearch.INFEASIBLE

    if state is ScheduleSearch.INFEASIBLE:
        raise ScheduleInfeasible(vector)
    return result, attempt


def evaluate(
    vector: Sequence[int],
    problem: LoopNest,
    pipeline_stages: int = 1,
    weight: int = DEFAULT_UTILIZATION_WEIGHT,
) -> ProjectionSolution:
    """
    Score one projection vector.

    Args:
        vector: Primitive candidate projection vector
        problem: Loop nest
        pipeline_stages: Minimum delay on every dependency
        weight: Utilization weight of the schedule objective

    Returns:
        ProjectionSolution

    Raises:
        EncodingViolation: If a solver answer cannot be interpreted
        ScheduleInfeasible: If no schedule exists for either sign
    """
    vector = tuple(int(v) for v in vector)
    D, P = problem.dimensions, problem.parameters

    with solver_session() as ctx:
        # =========================================
        # Step 1: Throughput
        # =========================================
        program = build_throughput_program(
            problem.domain,
            problem.context,
            D,
            P,
            vector,
            parameter_names=problem.parameter_names,
        )
        throughput = extract_throughput(solve(program, ctx), D, P)

        # =========================================
        # Step 2: Schedule, negating u if needed
        # =========================================
        schedule, effective = find_schedule(
            vector, problem, pipeline_stages=pipeline_stages, weight=weight, ctx=ctx
        )
        negated = effective != vector
        x1, x2 = (throughput.x2, throughput.x1) if negated else (throughput.x1, throughput.x2)

        # =========================================
        # Step 3: Allocation and networks
        # =========================================
        allocation = compute_allocation(effective)
        sum_delays, max_delay, avg_delay = compute_schedule_network(
            schedule.schedule, problem.dependencies
        )
        max_length, avg_length = compute_interconnection_network(
            allocation, problem.dependencies
        )

        # =========================================
        # Step 4: Processing elements
        # =========================================
        pe_count = count_pes(
            problem.domain,
            allocation,
            schedule.schedule,
            P,
            parameter_names=problem.parameter_names,
            ctx=ctx,
        )
        instance_pe_count = pe_count.evaluate(problem.parameter_instantiations)

    return ProjectionSolution(
        projection_vector=effective,
        bpp=throughput.bpp,
        x1=x1,
        x2=x2,
        instance_bpp=compute_instance_bpp(throughput.bpp, problem.parameter_instantiations),
        schedule=schedule.schedule,
        utilization=schedule.utilization,
        latency=schedule.latency,
        allocation=allocation,
        network_sum_delays=sum_delays,
        network_max_delay=max_delay,
        network_avg_delay=avg_delay,
        network_max_length=max_length,
        network_avg_length=avg_length,
        pe_count=pe_count,
        instance_pe_count=instance_pe_count,
        unimodular=is_unimodular(allocation, schedule.schedule),
        negated=negated,
    )


@dataclass
class ExplorationResult:
    """
    Outcome of one exploration run.

    Attributes:
        solutions: Every explored solution, in enumeration order
        ranked: Solutions sorted best first, inefficient ones dropped
        candidates_explored: Number of vectors scored
        solve_time: Wall-clock time of the run in seconds
        problem: Explored loop nest
        options: Settings of the run
    """
    solutions: list = field(default_factory=list)
    ranked: list = field(default_factory=list)
    candidates_explored: int = 0
    solve_time: float = 0.0
    problem: Optional[LoopNest] = None
    options: Optional[ExplorationOptions] = None

    @property
    def best(self) -> Optional[ProjectionSolution]:
        return self.ranked[0] if self.ranked else None

    def print_summary(self):
        """Print exploration summary."""
        print("\n" + "=" * 60)
        print("EXPLORATION SUMMARY")
        print("=" * 60)
        if self.problem is not None:
            print(f"Problem: {self.problem.path}")
        if self.options is not None:
            print(f"Magnitude bound: {self.options.magnitude_bound}")
            print(f"PE inefficiency: {self.options.pe_inefficiency}")
            print(f"Pipeline stages: {self.options.pipeline_stages}")
        print(f"Candidates explored: {self.candidates_explored}")
        print(f"Solutions kept: {len(self.ranked)}")
        print(f"Solve Time: {self.solve_time:.2f}s")
        if self.best is not None:
            names = self.problem.parameter_names if self.problem is not None else None
            print(f"Best vector: {self.best.projection_vector} "
                  f"(bpp {self.best.bpp.format(names)}, "
                  f"{self.best.instance_pe_count} PEs)")
        print("=" * 60)


class ProjectionExplorer:
    """
    Explores every primitive projection vector of a loop nest.

    Usage:
        explorer = ProjectionExplorer(LoopNest.from_yaml("problem.yaml"))
        result = explorer.run()
        result.print_summary()
    """

    def __init__(self, problem: LoopNest, options: ExplorationOptions = None):
        """
        Args:
            problem: Loop nest to explore
            options: Exploration settings (defaults when omitted)
        """
        self.problem = problem
        self.options = options if options is not None else ExplorationOptions()
        self.options.validate()

        self.timings = {}
        self.candidates_explored = 0

    @contextlib.contextmanager
    def _timed(self, name: str):
        start = time.perf_counter()
        try:
            yield
        finally:
            self.timings[name] = self.timings.get(name, 0.0) + time.perf_counter() - start

    def timing_report(self) -> str:
        lines = ["Timing Report:"]
        for name, elapsed in sorted(self.timings.items(), key=lambda x: -x[1]):
            lines.append(f"  {name}: {elapsed:.3f}s")
        return "\n".join(lines)

    def enumerator(self) -> VectorEnumerator:
        if self.options.full_box:
            return VectorEnumerator.full_box(self.problem.dimensions, self.options.magnitude_bound)
        return VectorEnumerator(self.problem.dimensions, self.options.magnitude_bound)

    def evaluate(self, vector: Sequence[int]) -> ProjectionSolution:
        """Score a single projection vector with this explorer's settings."""
        return evaluate(
            vector,
            self.problem,
            pipeline_stages=self.options.pipeline_stages,
            weight=self.options.utilization_weight,
        )

    def explore(self) -> list[ProjectionSolution]:
        """
        Score every candidate in enumeration order.

        Any fatal error aborts the whole exploration.
        """
        solutions = []
        self.candidates_explored = 0

        with self._timed("explore"):
            for vector in self.enumerator().candidates():
                logger.debug(f"Evaluating projection vector {vector}")
                solution = self.evaluate(vector)
                solutions.append(solution)
                self.candidates_explored += 1
                logger.debug(
                    f"  bpp={solution.bpp} schedule={solution.schedule} "
                    f"utilization={solution.utilization} PEs={solution.instance_pe_count}"
                )

        logger.info(
            f"Explored {self.candidates_explored} candidates in "
            f"{self.timings['explore']:.2f}s"
        )
        return solutions

    def run(self) -> ExplorationResult:
        """Explore, then rank and filter."""
        solutions = self.explore()

        with self._timed("rank"):
            ranked = rank(solutions, self.options.pe_inefficiency)
        logger.info(f"{len(ranked)} of {len(solutions)} solutions within inefficiency bound")

        return ExplorationResult(
            solutions=solutions,
            ranked=ranked,
            candidates_explored=self.candidates_explored,
            solve_time=self.timings["explore"] + self.timings["rank"],
            problem=self.problem,
            options=self.options,
        )


def run_exploration(
    config_file: str,
    options: ExplorationOptions = None,
) -> ExplorationResult:
    """
    Convenience function to run an exploration.

    Args:
        config_file: Path to problem YAML file
        options: Exploration settings

    Returns:
        ExplorationResult
    """
    problem = LoopNest.from_yaml(config_file)
    return ProjectionExplorer(problem, options).run()
