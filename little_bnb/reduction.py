import math
import numpy as np

from .errors import MatrixError

# stands for "no arc"; finite costs must stay below SENTINEL / n
SENTINEL = 1e9


def prepare_matrix(costs, start=0):
    """
    Validates a square cost matrix and returns it as a float array.
    The diagonal is forced to SENTINEL. None, inf and values >= SENTINEL
    mean a forbidden arc.
    """
    try:
        rows = [list(row) for row in costs]
    except TypeError:
        raise MatrixError("Cost matrix must be a sequence of rows.")

    n = len(rows)
    if n < 2:
        raise MatrixError(f"Need at least 2 cities, got {n}.")
    for i, row in enumerate(rows):
        if len(row) != n:
            raise MatrixError(f"Matrix is not square: row {i} has {len(row)} entries, expected {n}.")

    if isinstance(start, bool) or not isinstance(start, (int, np.integer)) or not 0 <= start < n:
        raise MatrixError(f"Start city must be an index in [0, {n - 1}], got {start!r}.")

    limit = SENTINEL / n
    mat = np.full((n, n), SENTINEL)
    for i in range(n):
        for j in range(n):
            if i == j:
                continue
            val = rows[i][j]
            if val is None:
                continue
            try:
                val = float(val)
            except (TypeError, ValueError):
                raise MatrixError(f"Cost ({i},{j}) is not a number: {rows[i][j]!r}.")
            if math.isnan(val):
                raise MatrixError(f"Cost ({i},{j}) is NaN.")
            if val < 0:
                raise MatrixError(f"Cost ({i},{j}) is negative: {val}.")
            if val >= SENTINEL:
                continue
            if val >= limit:
                raise MatrixError(f"Cost ({i},{j}) = {val} is out of range, costs must be < {limit:g} for {n} cities.")
            mat[i, j] = val
    return mat


def reduce_matrix(matrix):
    """
    Row then column reduction.

    Subtracts the smallest finite entry of every row, then of every column
    of the row-reduced matrix. Sentinel cells are never touched and an
    all-sentinel line contributes nothing.
    Returns (reduced copy, total amount subtracted).
    """
    mat = np.array(matrix, dtype=float)
    n = mat.shape[0]
    total = 0.0

    # subtract from rows
    for i in range(n):
        finite = mat[i] < SENTINEL
        if not finite.any():
            continue
        min_val = mat[i, finite].min()
        if min_val > 0:
            mat[i, finite] -= min_val
            total += min_val

    # subtract from columns
    for j in range(n):
        finite = mat[:, j] < SENTINEL
        if not finite.any():
            continue
        min_val = mat[finite, j].min()
        if min_val > 0:
            mat[finite, j] -= min_val
            total += min_val

    return mat, total


def frozen(matrix):
    """Read-only copy, used for node snapshots and trace payloads."""
    snap = np.array(matrix, dtype=float)
    snap.setflags(write=False)
    return snap
