#!/usr/bin/env python3
"""
Simple example demonstrating projection explorer usage.

This example shows:
1. Loading a loop nest from YAML
2. Scoring one projection vector
3. Running the full exploration and ranking
"""

from pathlib import Path

from projection_explorer import (
    ExplorationOptions,
    LoopNest,
    ProjectionExplorer,
)


def main():
    print("=" * 60)
    print("Projection Explorer - Simple Example")
    print("=" * 60)

    # =========================================
    # Step 1: Load problem
    # =========================================
    print("\n1. Loading problem...")

    problem = LoopNest.from_yaml(Path(__file__).parent / "problems" / "box.yaml")
    print(problem.summary())

    # =========================================
    # Step 2: Score a single vector
    # =========================================
    print("\n2. Scoring projection vector (1, 1)...")

    explorer = ProjectionExplorer(problem, ExplorationOptions(magnitude_bound=2))
    solution = explorer.evaluate((1, 1))
    print(solution.pretty_print(problem.parameter_names))

    # =========================================
    # Step 3: Explore and rank
    # =========================================
    print("\n3. Exploring all candidates...")

    result = explorer.run()
    result.print_summary()

    print("\nTop candidates:")
    for solution in result.ranked[:3]:
        print(f"  {solution.projection_vector}: "
              f"bpp={solution.bpp.format(problem.parameter_names)}, "
              f"PEs={solution.instance_pe_count}, "
              f"utilization={solution.utilization}")

    print(explorer.timing_report())


if __name__ == "__main__":
    main()
