import numpy as np

from .errors import InvariantViolation
from .reduction import SENTINEL, frozen, reduce_matrix


def _links(arcs):
    succ = {}
    pred = {}
    for u, v in arcs:
        succ[u] = v
        pred[v] = u
    return succ, pred


def _subtour_arc(arcs, n):
    """
    Arc that would close the chain holding the last committed arc into a
    cycle, or None once that chain already spans every city.
    """
    succ, pred = _links(arcs)
    head = arcs[-1][0]
    while head in pred:
        head = pred[head]
    tail = head
    cities = 1
    while tail in succ:
        tail = succ[tail]
        cities += 1
    if cities >= n:
        return None
    return (tail, head)


class Node:
    """
    Subproblem of the search tree.

    arcs are the committed arcs, matrix is the reduced cost matrix after every
    decision leading here, lower_bound the sum of all reductions on the way.
    Matrices are read-only snapshots, siblings never share one. A node is
    not changed once built, trace records hold it by reference.
    """

    def __init__(self, arcs, matrix, lower_bound, path_cost, start, reduction=0.0,
                 arc=None, included=None, parent_matrix=None, blocked_matrix=None, depth=0,
                 node_id=None, parent_id=None):
        self.node_id = node_id
        self.parent_id = parent_id
        self.arcs = tuple(arcs)
        self.matrix = frozen(matrix)
        self.lower_bound = float(lower_bound)
        self.path_cost = float(path_cost)
        self.start = start
        self.reduction = float(reduction)
        self.arc = arc                  # arc branched on to create this node
        self.included = included        # True: arc committed, False: arc forbidden
        self.parent_matrix = None if parent_matrix is None else frozen(parent_matrix)
        self.blocked_matrix = None if blocked_matrix is None else frozen(blocked_matrix)
        self.depth = depth
        self.feasible = self._check_feasible()

    @classmethod
    def root(cls, costs, start, node_id=0):
        reduced, amount = reduce_matrix(costs)
        return cls((), reduced, amount, 0.0, start, reduction=amount, blocked_matrix=costs, node_id=node_id)

    @property
    def size(self):
        return self.matrix.shape[0]

    @property
    def total_estimate(self):
        # committed arcs are already paid for by the reductions
        return self.lower_bound

    @property
    def remaining_bound(self):
        return self.lower_bound - self.path_cost

    @property
    def path(self):
        """Committed chain followed from the start city."""
        succ, _ = _links(self.arcs)
        path = [self.start]
        curr = self.start
        while curr in succ and succ[curr] != self.start:
            curr = succ[curr]
            path.append(curr)
        return path

    @property
    def is_complete(self):
        return len(self.arcs) == self.size - 1

    def _check_feasible(self):
        # every city still missing an outgoing (incoming) arc needs a finite cell
        succ, pred = _links(self.arcs)
        finite = self.matrix < SENTINEL
        for r in range(self.size):
            if r not in succ and not finite[r, :].any():
                return False
        for c in range(self.size):
            if c not in pred and not finite[:, c].any():
                return False
        return True

    def closing_arc(self):
        succ, pred = _links(self.arcs)
        tail = next(r for r in range(self.size) if r not in succ)
        head = next(c for c in range(self.size) if c not in pred)
        return (tail, head)

    def close_tour(self, costs):
        """
        Closes a complete node into a tour starting and ending at the start
        city. Returns (tour, cost) or None when the closing arc is blocked.
        """
        if not self.is_complete:
            raise InvariantViolation(f"Node {self.node_id} has {len(self.arcs)} arcs, cannot close a tour.")
        tail, head = self.closing_arc()
        if self.matrix[tail, head] >= SENTINEL:
            return None
        succ, _ = _links(self.arcs + ((tail, head),))
        tour = [self.start]
        curr = self.start
        for _ in range(self.size):
            curr = succ[curr]
            tour.append(curr)
        cost = sum(float(costs[u, v]) for u, v in zip(tour, tour[1:]))
        return tour, cost

    def as_dict(self):
        return {
            "id": self.node_id,
            "parent": self.parent_id,
            "depth": self.depth,
            "arc": None if self.arc is None else list(self.arc),
            "included": self.included,
            "arcs": [list(a) for a in self.arcs],
            "path": self.path,
            "path_cost": self.path_cost,
            "lower_bound": self.lower_bound,
            "total_estimate": self.total_estimate,
            "reduction": self.reduction,
            "feasible": self.feasible,
            "matrix": self.matrix.tolist(),
        }

    def __repr__(self):
        return f"Node(id={self.node_id}, arcs={list(self.arcs)}, bound={self.lower_bound:g})"


def branch(node, arc, costs, ids=(None, None)):
    """
    Builds the two children of node on arc (i, j), ids gives their node ids.

    include: row i and column j removed, the arc closing a premature subtour
             blocked, then reduced.
    exclude: cell (i, j) blocked, then reduced.
    Both bounds are the parent bound plus what the new reduction subtracts.
    """
    i, j = arc
    succ, pred = _links(node.arcs)
    if node.matrix[i, j] >= SENTINEL or i in succ or j in pred:
        raise InvariantViolation(f"Arc ({i},{j}) is not available in node {node.node_id}.")

    inc_matrix = np.array(node.matrix)
    inc_matrix[i, :] = SENTINEL
    inc_matrix[:, j] = SENTINEL
    arcs = node.arcs + ((i, j),)
    closing = _subtour_arc(arcs, node.size)
    if closing is not None:
        inc_matrix[closing] = SENTINEL
    inc_reduced, inc_amount = reduce_matrix(inc_matrix)
    include = Node(
        arcs, inc_reduced,
        node.lower_bound + float(node.matrix[i, j]) + inc_amount,
        node.path_cost + float(costs[i, j]),
        node.start, reduction=inc_amount, arc=(i, j), included=True,
        parent_matrix=node.matrix, blocked_matrix=inc_matrix, depth=node.depth + 1,
        node_id=ids[0], parent_id=node.node_id,
    )

    exc_matrix = np.array(node.matrix)
    exc_matrix[i, j] = SENTINEL
    exc_reduced, exc_amount = reduce_matrix(exc_matrix)
    exclude = Node(
        node.arcs, exc_reduced,
        node.lower_bound + exc_amount,
        node.path_cost,
        node.start, reduction=exc_amount, arc=(i, j), included=False,
        parent_matrix=node.matrix, blocked_matrix=exc_matrix, depth=node.depth + 1,
        node_id=ids[1], parent_id=node.node_id,
    )
    return include, exclude
