"""
Ordering and filtering of explored projections.
"""

from typing import Iterable

from projection_explorer.solution import ProjectionSolution


def sort_key(solution: ProjectionSolution) -> tuple:
    """
    Lexicographic key, best first.

    Smaller instance bpp first; ties go to larger PE count, then larger
    utilization, latency, max interconnect length and avg interconnect
    length.
    """
    return (
        solution.instance_bpp,
        -solution.instance_pe_count,
        -solution.utilization,
        -solution.latency,
        -solution.network_max_length,
        -solution.network_avg_length,
    )


def sort_solutions(results: Iterable[ProjectionSolution]) -> list[ProjectionSolution]:
    """Stable sort; full ties keep their exploration order."""
    return sorted(results, key=sort_key)


def rank(
    results: Iterable[ProjectionSolution],
    inefficiency_threshold: int,
) -> list[ProjectionSolution]:
    """
    Sort and drop every solution whose utilization exceeds the threshold.

    Args:
        results: Explored solutions
        inefficiency_threshold: Largest acceptable utilization

    Returns:
        Ordered, filtered list
    """
    return [
        s for s in sort_solutions(results)
        if s.utilization <= inefficiency_threshold
    ]
