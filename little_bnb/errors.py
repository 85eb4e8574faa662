class LittleError(Exception):
    """Base class for every failure raised by the solver."""


class MatrixError(LittleError, ValueError):
    """Malformed cost matrix or start city, rejected before solving."""


class NoTourError(LittleError):
    """The matrix admits no Hamiltonian cycle through the start city."""


class InvariantViolation(LittleError, AssertionError):
    """Internal defect, e.g. a reduced matrix with no zero cell."""


class SolveCancelled(LittleError):
    """The caller cancelled the search or its time limit ran out."""
