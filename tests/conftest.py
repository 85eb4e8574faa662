import itertools

import numpy as np
import pytest

from little_bnb.reduction import SENTINEL, prepare_matrix

INF = float('inf')

FOUR_CITIES = [
    [INF, 10, 15, 20],
    [10, INF, 35, 25],
    [15, 35, INF, 30],
    [20, 25, 30, INF],
]


def brute_force(costs, start=0):
    """Cheapest Hamiltonian cycle from start by enumeration, None if there is none."""
    mat = prepare_matrix(costs, start)
    n = mat.shape[0]
    others = [c for c in range(n) if c != start]
    best = None
    for perm in itertools.permutations(others):
        tour = [start, *perm, start]
        legs = [mat[u, v] for u, v in zip(tour, tour[1:])]
        if any(leg >= SENTINEL for leg in legs):
            continue
        cost = sum(legs)
        if best is None or cost < best:
            best = cost
    return best


def random_matrix(n, seed, low=1, high=50, forbidden=0.0):
    rng = np.random.default_rng(seed)
    mat = rng.integers(low, high, size=(n, n)).astype(float).tolist()
    for i in range(n):
        for j in range(n):
            if i == j or rng.random() < forbidden:
                mat[i][j] = None
    return mat


@pytest.fixture
def four_cities():
    return [row[:] for row in FOUR_CITIES]
