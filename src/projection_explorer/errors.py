"""
Exception hierarchy for the projection explorer.
"""


class ProjectionExplorerError(Exception):
    """Base class for all errors raised by the explorer."""


class EncodingViolation(ProjectionExplorerError):
    """
    The ILP encoding and the solver answer disagree.
    
    Raised when the big parameter fails to cancel, when a solution tree
    carries a branch condition, or when a geometry result has an
    unexpected shape. The numbers of the candidate cannot be trusted.
    """


class ScheduleInfeasible(ProjectionExplorerError):
    """No schedule exists for either sign of the projection vector."""
    
    def __init__(self, vector):
        self.vector = tuple(vector)
        super().__init__(
            f"Unable to find schedule for projection vector {self.vector} "
            f"(tried both signs)"
        )


class InputError(ProjectionExplorerError, ValueError):
    """Malformed or missing input matrices and options."""
