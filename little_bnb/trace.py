import json
from dataclasses import dataclass, fields
from typing import ClassVar, Tuple

import numpy as np

from .node import Node
from .regret import Regret


@dataclass(frozen=True, eq=False)
class MatrixReduction:
    kind: ClassVar[str] = "matrix_reduction"
    original: np.ndarray
    reduced: np.ndarray
    amount: float
    description: str = ""


@dataclass(frozen=True, eq=False)
class RootNode:
    kind: ClassVar[str] = "root_node"
    node: Node
    description: str = ""


@dataclass(frozen=True, eq=False)
class RegretCalculation:
    kind: ClassVar[str] = "regret_calculation"
    node_id: int
    matrix: np.ndarray
    regrets: Tuple[Regret, ...]
    max_regret: Regret
    description: str = ""


@dataclass(frozen=True, eq=False)
class BranchDevelopment:
    kind: ClassVar[str] = "branch_development"
    parent_id: int
    arc: Tuple[int, int]
    regret: float
    include: Node
    exclude: Node
    include_status: str          # open | pruned | infeasible
    exclude_status: str
    description: str = ""


@dataclass(frozen=True, eq=False)
class ArcBlocking:
    kind: ClassVar[str] = "arc_blocking"
    node: Node
    arc: Tuple[int, int]
    included: bool
    parent_matrix: np.ndarray
    blocked_matrix: np.ndarray
    reduced_matrix: np.ndarray
    amount: float
    frontier_size: int
    description: str = ""


@dataclass(frozen=True, eq=False)
class TourFound:
    kind: ClassVar[str] = "tour_found"
    node_id: int
    path: Tuple[int, ...]
    cost: float
    improved: bool
    description: str = ""


@dataclass(frozen=True, eq=False)
class FinalResult:
    kind: ClassVar[str] = "final_result"
    best_path: Tuple[int, ...]
    best_cost: float
    nodes_explored: int
    description: str = ""


def _plain(value):
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, Node):
        return value.as_dict()
    if isinstance(value, Regret):
        return {"i": value.i, "j": value.j, "regret": value.regret}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, np.generic):
        return value.item()
    return value


def as_dict(step):
    out = {"kind": step.kind}
    for f in fields(step):
        out[f.name] = _plain(getattr(step, f.name))
    return out


class Trace:
    """Append-only, ordered log of the steps of one solve."""

    def __init__(self):
        self._steps = []

    def append(self, step):
        self._steps.append(step)
        return step

    @property
    def steps(self):
        return tuple(self._steps)

    def of_kind(self, kind):
        return [s for s in self._steps if s.kind == kind]

    def to_list(self):
        return [as_dict(s) for s in self._steps]

    def to_json(self, indent=None):
        return json.dumps(self.to_list(), indent=indent)

    def __len__(self):
        return len(self._steps)

    def __iter__(self):
        return iter(self._steps)

    def __getitem__(self, idx):
        return self._steps[idx]
