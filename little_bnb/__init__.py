from .errors import InvariantViolation, LittleError, MatrixError, NoTourError, SolveCancelled
from .node import Node, branch
from .reduction import SENTINEL, prepare_matrix, reduce_matrix
from .regret import Regret, calculate_regrets
from .solver import LittleSolver, TSPResult, solve_tsp
from .trace import Trace
