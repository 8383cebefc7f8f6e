"""
Utility functions for the projection explorer.
"""

import logging

from projection_explorer.errors import InputError


def setup_logging(verbose: bool = False):
    """Configure root logging for command-line use."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )


def parse_vector(text: str, dimensions: int = None) -> tuple[int, ...]:
    """
    Parse a projection vector such as ``"1,0,-1"``.

    Args:
        text: Comma-separated integers
        dimensions: Expected number of coordinates, if known

    Returns:
        Tuple of ints
    """
    try:
        vector = tuple(int(v) for v in text.replace(" ", "").split(",") if v)
    except ValueError as e:
        raise InputError(f"Invalid projection vector {text!r}") from e
    if not vector:
        raise InputError("Projection vector is empty")
    if dimensions is not None and len(vector) != dimensions:
        raise InputError(
            f"Projection vector {vector} has {len(vector)} coordinates, "
            f"expected {dimensions}"
        )
    return vector

