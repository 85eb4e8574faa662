import numpy as np
from scipy.optimize import linear_sum_assignment

from .reduction import SENTINEL


def nearest_neighbor_tour(costs, start=0):
    """
    Greedy tour from start, ties broken by city index.
    Returns (cost, tour) or (inf, []) when the walk gets stuck.
    """
    n = costs.shape[0]
    path = [start]
    visited = {start}
    curr = start
    total_cost = 0.0

    while len(path) < n:
        # find nearest not visited
        candidates = [(costs[curr, c], c) for c in range(n) if c not in visited and costs[curr, c] < SENTINEL]
        if not candidates:
            return float('inf'), []
        best_d, best_n = min(candidates)
        visited.add(best_n)
        path.append(best_n)
        total_cost += float(best_d)
        curr = best_n

    # close cycle
    if costs[curr, start] >= SENTINEL:
        return float('inf'), []
    total_cost += float(costs[curr, start])
    path.append(start)
    return total_cost, path


def assignment_bound(costs):
    """
    Minimum cost assignment (every city one successor, one predecessor).
    Returns (cost, successor list) or (inf, None) when no finite assignment exists.
    """
    row_ind, col_ind = linear_sum_assignment(np.asarray(costs, dtype=float))
    if (costs[row_ind, col_ind] >= SENTINEL).any():
        return float('inf'), None
    ap_cost = float(costs[row_ind, col_ind].sum())
    succ = [0] * len(row_ind)
    for r, c in zip(row_ind, col_ind):
        succ[r] = int(c)
    return ap_cost, succ


def subtours(succ):
    """Cycles of a successor list, each as a list of cities."""
    visited = set()
    cycles = []
    for n in range(len(succ)):
        if n in visited:
            continue
        curr = n
        cycle = []
        while curr not in visited:
            visited.add(curr)
            cycle.append(curr)
            curr = succ[curr]
        cycles.append(cycle)
    return cycles
