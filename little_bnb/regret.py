from dataclasses import dataclass

from .errors import InvariantViolation
from .reduction import SENTINEL


@dataclass(frozen=True)
class Regret:
    i: int
    j: int
    regret: float

    @property
    def arc(self):
        return (self.i, self.j)


def _min_other(values, skip):
    best = SENTINEL
    for k, val in enumerate(values):
        if k != skip and val < best:
            best = val
    return 0.0 if best >= SENTINEL else float(best)


def calculate_regrets(matrix):
    """
    Regret of every zero cell (i, j): smallest finite value of row i outside
    column j plus smallest finite value of column j outside row i.
    Returns (regrets in row-major order, max regret). Ties go to the first
    cell in row-major order.
    """
    n = matrix.shape[0]
    regrets = []
    for i in range(n):
        for j in range(n):
            if matrix[i, j] != 0:
                continue
            regret = _min_other(matrix[i, :], j) + _min_other(matrix[:, j], i)
            regrets.append(Regret(i, j, regret))

    if not regrets:
        raise InvariantViolation("Reduced matrix has no zero cell to branch on.")

    max_regret = regrets[0]
    for item in regrets[1:]:
        if item.regret > max_regret.regret:
            max_regret = item
    return regrets, max_regret
