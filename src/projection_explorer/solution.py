"""
Per-candidate result record.
"""

from dataclasses import dataclass
from fractions import Fraction
from math import ceil
from typing import Optional, Sequence

from projection_explorer.affine import AffineFunction
from projection_explorer.geometry import PECount


def compute_instance_bpp(bpp: AffineFunction, instantiation: Sequence[int]) -> int:
    """
    Block pipelining period at a fixed parameter instantiation.

    The exact rational value is rounded up; an integral value is returned
    unchanged.
    """
    return ceil(bpp.evaluate(instantiation))


@dataclass(frozen=True)
class ProjectionSolution:
    """
    Everything known about one projection vector.

    Attributes:
        projection_vector: Vector u the schedule was found for (the explored
            candidate, or its negation when ``negated`` is set)
        bpp: Block pipelining period, affine in the parameters
        x1: First extreme point realising bpp
        x2: Second extreme point, ``x1 - x2 = bpp * u``
        instance_bpp: bpp at the parameter instantiation, rounded up
        schedule: Linear schedule l
        utilization: Bound t on ``l . u``
        latency: Bound s on ``l . (Vi - Vj)``
        allocation: (D-1) x D allocation matrix
        network_sum_delays: Sum of ``-(l . d)`` over dependencies
        network_max_delay: Maximum delay
        network_avg_delay: Average delay
        network_max_length: Maximum interconnect length
        network_avg_length: Average interconnect length per dependency
        pe_count: Parametric processing element count
        instance_pe_count: Processing elements at the instantiation
        unimodular: ``[allocation; schedule]`` has determinant +-1
        negated: The schedule was found for -u only
    """
    projection_vector: tuple[int, ...]
    bpp: AffineFunction
    x1: tuple[AffineFunction, ...]
    x2: tuple[AffineFunction, ...]
    instance_bpp: int
    schedule: tuple[int, ...]
    utilization: int
    latency: int
    allocation: tuple[tuple[int, ...], ...]
    network_sum_delays: int
    network_max_delay: int
    network_avg_delay: Fraction
    network_max_length: int
    network_avg_length: Fraction
    pe_count: Optional[PECount]
    instance_pe_count: int
    unimodular: bool = False
    negated: bool = False

    @property
    def dimensions(self) -> int:
        return len(self.projection_vector)

    def to_dict(self, parameter_names: Sequence[str] = None) -> dict:
        """Convert solution to dictionary format."""
        return {
            "projection_vector": list(self.projection_vector),
            "bpp": self.bpp.format(parameter_names),
            "x1": [f.format(parameter_names) for f in self.x1],
            "x2": [f.format(parameter_names) for f in self.x2],
            "instance_bpp": self.instance_bpp,
            "schedule": list(self.schedule),
            "utilization": self.utilization,
            "latency": self.latency,
            "allocation": [list(row) for row in self.allocation],
            "network": {
                "sum_delays": self.network_sum_delays,
                "max_delay": self.network_max_delay,
                "avg_delay": float(self.network_avg_delay),
                "max_length": self.network_max_length,
                "avg_length": float(self.network_avg_length),
            },
            "pe_count": str(self.pe_count) if self.pe_count is not None else None,
            "instance_pe_count": self.instance_pe_count,
            "unimodular": self.unimodular,
            "negated": self.negated,
        }

    def pretty_print(self, parameter_names: Sequence[str] = None) -> str:
        """Generate human-readable solution representation."""
        def point(funcs):
            return "(" + ", ".join(f.format(parameter_names) for f in funcs) + ")"

        lines = []
        lines.append(f"Projection vector: {self.projection_vector}")
        lines.append("=" * 50)

        lines.append(f"BPP: {self.bpp.format(parameter_names)} (instance: {self.instance_bpp})")
        lines.append(f"  x1 = {point(self.x1)}")
        lines.append(f"  x2 = {point(self.x2)}")

        lines.append(f"\nSchedule: {self.schedule}" + ("  (vector negated)" if self.negated else ""))
        lines.append(f"  Utilization: {self.utilization}")
        lines.append(f"  Latency: {self.latency}")

        lines.append("\nAllocation:")
        for row in self.allocation:
            lines.append(f"  {list(row)}")
        lines.append(f"  Unimodular: {self.unimodular}")

        lines.append("\nSchedule network:")
        lines.append(f"  Sum of delays: {self.network_sum_delays}")
        lines.append(f"  Max delay: {self.network_max_delay}")
        lines.append(f"  Avg delay: {float(self.network_avg_delay):.3f}")

        lines.append("\nInterconnect:")
        lines.append(f"  Max length: {self.network_max_length}")
        lines.append(f"  Avg length: {float(self.network_avg_length):.3f}")

        lines.append(f"\nPE count: {self.pe_count}")
        lines.append(f"  Instance: {self.instance_pe_count}")

        return "\n".join(lines)
