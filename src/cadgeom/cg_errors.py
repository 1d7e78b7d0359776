"""
Error taxonomy for cadgeom.

Solvers raise these for invalid or degenerate input. The entry points in
cg_engine catch CGError and hand the instance back inside a CGResult, so a
host can turn any of them into a user-facing message and abort its own
transaction.
"""


class CGError(Exception):
    """Base class for all recoverable geometry errors."""


class InsufficientInputError(CGError, ValueError):
    """Fewer curves, lines, edges or points than the operation needs."""


class MismatchedLengthError(CGError, ValueError):
    """Paths meant to be lofted together have differing point counts."""

    def __init__(self, message, lengths=None):
        super().__init__(message)
        self.lengths = list(lengths) if lengths is not None else []


class DegenerateInputError(CGError, ValueError):
    """No non-degenerate triple or direction exists (collinear points, zero-length vectors)."""


class InsufficientPointsError(InsufficientInputError, DegenerateInputError):
    """Fewer than three unique points were supplied to a plane fit."""


class NoSolutionFound(CGError):
    """The search completed without producing a result within tolerance."""

    def __init__(self, message, partial=None):
        super().__init__(message)
        # Whatever the solver did compute (e.g. a PlaneFit with no plane)
        self.partial = partial


class ToleranceMisconfigured(CGError, ValueError):
    """A negative or non-finite tolerance was supplied."""
