"""
CSV and YAML rendering of exploration results.
"""

import csv
from pathlib import Path
from typing import Iterable, Sequence

import yaml

from projection_explorer.solution import ProjectionSolution


CSV_HEADER = [
    "projection_vector",
    "bpp",
    "pe_count",
    "instance_pe_count",
    "schedule",
    "utilization",
    "sum_delays",
    "avg_delay",
    "max_delay",
    "latency",
    "allocation",
    "avg_length",
    "max_length",
]


def _join(values) -> str:
    return " ".join(str(v) for v in values)


def format_csv_row(
    solution: ProjectionSolution,
    parameter_names: Sequence[str] = None,
) -> list[str]:
    """One CSV row, in CSV_HEADER order."""
    return [
        _join(solution.projection_vector),
        solution.bpp.format(parameter_names),
        str(solution.pe_count),
        str(solution.instance_pe_count),
        _join(solution.schedule),
        str(solution.utilization),
        str(solution.network_sum_delays),
        f"{float(solution.network_avg_delay):g}",
        str(solution.network_max_delay),
        str(solution.latency),
        "; ".join(_join(row) for row in solution.allocation),
        f"{float(solution.network_avg_length):g}",
        str(solution.network_max_length),
    ]


def write_csv(
    solutions: Iterable[ProjectionSolution],
    filepath: str | Path,
    parameter_names: Sequence[str] = None,
):
    """
    Export solutions to a CSV file.

    Args:
        solutions: Solutions in the order they should appear
        filepath: Output CSV file path
        parameter_names: Names used when printing affine functions
    """
    with open(filepath, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)
        for solution in solutions:
            writer.writerow(format_csv_row(solution, parameter_names))


def write_yaml(result, filepath: str | Path):
    """
    Export an ExplorationResult to YAML.

    Args:
        result: ExplorationResult
        filepath: Output YAML file path
    """
    names = result.problem.parameter_names if result.problem is not None else None
    output_data = {
        "problem": result.problem.path if result.problem is not None else None,
        "candidates_explored": result.candidates_explored,
        "solve_time": result.solve_time,
        "solutions": [s.to_dict(names) for s in result.ranked],
    }
    with open(filepath, "w") as f:
        yaml.dump(output_data, f, default_flow_style=False, sort_keys=False)
