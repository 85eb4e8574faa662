import heapq
import itertools
import time
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .data import city_label, format_path
from .errors import NoTourError, SolveCancelled
from .node import Node, branch
from .reduction import prepare_matrix
from .regret import calculate_regrets
from .report import format_cost
from .trace import (
    ArcBlocking,
    BranchDevelopment,
    FinalResult,
    MatrixReduction,
    RegretCalculation,
    RootNode,
    TourFound,
    Trace,
)


@dataclass(frozen=True)
class TSPResult:
    steps: Tuple[object, ...]
    best_path: List[int]
    best_cost: float
    nodes_explored: int


class LittleSolver:
    """
    Little's branch and bound, best-first.

    The frontier is a heap keyed on (total estimate, node id) so equal bounds
    come out in insertion order. Every phase appends one record to the trace.
    """

    def __init__(self, costs, start=0, labels=None, cancel_event=None, time_limit=None):
        self.costs = prepare_matrix(costs, start)
        self.n = self.costs.shape[0]
        self.start = int(start)
        self.labels = labels
        self.cancel_event = cancel_event
        self.time_limit = time_limit

        self._reset()

    def _reset(self):
        # every solve starts from scratch
        self.trace = Trace()
        self.frontier = []
        self.ids = itertools.count()
        self.best_cost: Optional[float] = None
        self.best_path: Optional[List[int]] = None
        self.nodes_explored = 0

    def _arc_str(self, arc):
        i, j = arc
        return f"({city_label(i, self.labels)}, {city_label(j, self.labels)})"

    def _check_interrupt(self, started):
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise SolveCancelled(f"Solve cancelled after {self.nodes_explored} nodes.")
        if self.time_limit is not None and time.perf_counter() - started > self.time_limit:
            raise SolveCancelled(f"Time limit of {self.time_limit}s reached after {self.nodes_explored} nodes.")

    def _push(self, node):
        heapq.heappush(self.frontier, (node.total_estimate, node.node_id, node))

    def _child_status(self, child):
        if not child.feasible:
            return "infeasible"
        if self.best_cost is not None and child.total_estimate >= self.best_cost:
            return "pruned"
        self._push(child)
        return "open"

    def _start_root(self):
        root = Node.root(self.costs, self.start, node_id=next(self.ids))
        self.trace.append(MatrixReduction(
            original=root.blocked_matrix,
            reduced=root.matrix,
            amount=root.reduction,
            description=f"Row and column reduction of the cost matrix. Lower bound b = {format_cost(root.reduction)}",
        ))
        if not root.feasible:
            raise NoTourError("Some city has no usable outgoing or incoming arc, no tour exists.")
        self.trace.append(RootNode(
            node=root,
            description=f"Root node R: path [{city_label(self.start, self.labels)}], bound = {format_cost(root.lower_bound)}",
        ))
        self._push(root)

    def _select(self):
        estimate, _, node = heapq.heappop(self.frontier)
        if node.arc is not None:
            verb = "Include" if node.included else "Block"
            self.trace.append(ArcBlocking(
                node=node,
                arc=node.arc,
                included=node.included,
                parent_matrix=node.parent_matrix,
                blocked_matrix=node.blocked_matrix,
                reduced_matrix=node.matrix,
                amount=node.reduction,
                frontier_size=len(self.frontier),
                description=(
                    f"{verb} arc {self._arc_str(node.arc)}, reduce by {format_cost(node.reduction)}: "
                    f"node {node.node_id} selected with bound {format_cost(estimate)}"
                ),
            ))
        return node

    def _complete(self, node):
        closed = node.close_tour(self.costs)
        if closed is None:
            return
        tour, cost = closed
        improved = self.best_cost is None or cost < self.best_cost
        if improved:
            self.best_cost = cost
            self.best_path = tour
        self.trace.append(TourFound(
            node_id=node.node_id,
            path=tuple(tour),
            cost=cost,
            improved=improved,
            description=f"Complete tour {format_path(tour, self.labels)}: cost = {format_cost(cost)}",
        ))

    def _expand(self, node):
        regrets, max_regret = calculate_regrets(node.matrix)
        self.trace.append(RegretCalculation(
            node_id=node.node_id,
            matrix=node.matrix,
            regrets=tuple(regrets),
            max_regret=max_regret,
            description=f"Regrets of node {node.node_id}: max rho{self._arc_str(max_regret.arc)} = {format_cost(max_regret.regret)}",
        ))

        ids = (next(self.ids), next(self.ids))
        include, exclude = branch(node, max_regret.arc, self.costs, ids)
        inc_status = self._child_status(include)
        exc_status = self._child_status(exclude)
        self.trace.append(BranchDevelopment(
            parent_id=node.node_id,
            arc=max_regret.arc,
            regret=max_regret.regret,
            include=include,
            exclude=exclude,
            include_status=inc_status,
            exclude_status=exc_status,
            description=(
                f"Branch on arc {self._arc_str(max_regret.arc)}: "
                f"with arc b = {format_cost(include.total_estimate)} ({inc_status}), "
                f"without arc b = {format_cost(exclude.total_estimate)} ({exc_status})"
            ),
        ))

    def solve(self):
        self._reset()
        started = time.perf_counter()
        self._start_root()

        while self.frontier:
            self._check_interrupt(started)
            if self.best_cost is not None and self.frontier[0][0] >= self.best_cost:
                break
            node = self._select()
            self.nodes_explored += 1
            if node.is_complete:
                self._complete(node)
            else:
                self._expand(node)

        if self.best_path is None:
            raise NoTourError(f"No Hamiltonian cycle through city {city_label(self.start, self.labels)}.")

        self.trace.append(FinalResult(
            best_path=tuple(self.best_path),
            best_cost=self.best_cost,
            nodes_explored=self.nodes_explored,
            description=f"Optimal tour {format_path(self.best_path, self.labels)}, cost = {format_cost(self.best_cost)}",
        ))
        return TSPResult(
            steps=self.trace.steps,
            best_path=list(self.best_path),
            best_cost=self.best_cost,
            nodes_explored=self.nodes_explored,
        )


def solve_tsp(costs, start=0, labels=None, cancel_event=None, time_limit=None):
    return LittleSolver(costs, start, labels, cancel_event, time_limit).solve()
