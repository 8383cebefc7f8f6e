"""
Delay and wire-length metrics of a projection.
"""

from fractions import Fraction
from typing import Sequence

import numpy as np


def compute_schedule_network(
    schedule: Sequence[int],
    dependencies: np.ndarray,
) -> tuple[int, int, Fraction]:
    """
    Delays introduced on every dependency by the schedule.

    The delay of dependency d is ``-(l . d)``, the number of cycles between
    producing and consuming a value.

    Args:
        schedule: Schedule vector l
        dependencies: One dependency vector per row

    Returns:
        (sum of delays, maximum delay, average delay). The maximum is taken
        against a starting value of 0.
    """
    l = np.asarray(schedule, dtype=np.int64)
    dependencies = np.asarray(dependencies, dtype=np.int64).reshape(-1, len(l))

    delays = [-int(l @ d) for d in dependencies]
    total = sum(delays)
    max_delay = max([0] + delays)
    avg_delay = Fraction(total, len(delays)) if delays else Fraction(0)

    return total, max_delay, avg_delay


def compute_interconnection_network(
    allocation,
    dependencies: np.ndarray,
) -> tuple[int, Fraction]:
    """
    Interconnect lengths between processing elements.

    Every allocation row contributes ``|a . d|`` for every dependency d.

    Args:
        allocation: (D-1) x D allocation matrix
        dependencies: One dependency vector per row

    Returns:
        (maximum length, average length). The average divides the sum over
        all rows and dependencies by the number of dependencies.
    """
    dependencies = np.asarray(dependencies, dtype=np.int64)
    if dependencies.ndim == 1:
        dependencies = dependencies.reshape(1, -1)
    n_deps = dependencies.shape[0]

    lengths = []
    for row in allocation:
        a = np.asarray(row, dtype=np.int64)
        for d in dependencies:
            lengths.append(abs(int(a @ d)))

    max_length = max([0] + lengths)
    avg_length = Fraction(sum(lengths), n_deps) if n_deps else Fraction(0)

    return max_length, avg_length
