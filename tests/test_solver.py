import json
import threading

import pytest

from little_bnb.data import EXAMPLE_MATRIX
from little_bnb.errors import NoTourError, SolveCancelled
from little_bnb.reduction import SENTINEL, prepare_matrix, reduce_matrix
from little_bnb.report import format_cost
from little_bnb.solver import LittleSolver, solve_tsp

from conftest import brute_force, random_matrix

STEP_KINDS = {
    "matrix_reduction", "root_node", "regret_calculation", "branch_development",
    "arc_blocking", "tour_found", "final_result",
}


def check_tour(costs, path, cost, start=0):
    mat = prepare_matrix(costs, start)
    n = mat.shape[0]
    assert path[0] == start and path[-1] == start
    assert sorted(path[:-1]) == list(range(n))
    legs = [mat[u, v] for u, v in zip(path, path[1:])]
    assert all(leg < SENTINEL for leg in legs)
    assert sum(legs) == pytest.approx(cost)


def test_four_cities(four_cities):
    result = solve_tsp(four_cities)
    assert result.best_cost == 80
    assert result.best_path in ([0, 1, 3, 2, 0], [0, 2, 3, 1, 0])


def test_example_matches_brute_force():
    result = solve_tsp(EXAMPLE_MATRIX)
    assert result.best_cost == brute_force(EXAMPLE_MATRIX)
    check_tour(EXAMPLE_MATRIX, result.best_path, result.best_cost)


@pytest.mark.parametrize("n", [2, 3, 4, 5, 6, 7, 8])
@pytest.mark.parametrize("seed", range(4))
def test_optimal_against_brute_force(n, seed):
    costs = random_matrix(n, seed=100 * n + seed)
    result = solve_tsp(costs)
    assert result.best_cost == pytest.approx(brute_force(costs))
    check_tour(costs, result.best_path, result.best_cost)


@pytest.mark.parametrize("seed", range(12))
def test_forbidden_arcs(seed):
    costs = random_matrix(6, seed=seed, forbidden=0.4)
    expected = brute_force(costs)
    if expected is None:
        with pytest.raises(NoTourError):
            solve_tsp(costs)
    else:
        result = solve_tsp(costs)
        assert result.best_cost == pytest.approx(expected)
        check_tour(costs, result.best_path, result.best_cost)


@pytest.mark.parametrize("start", [1, 3, 5])
def test_other_start_city(start):
    costs = random_matrix(6, seed=42)
    result = solve_tsp(costs, start=start)
    assert result.best_cost == pytest.approx(brute_force(costs, start))
    check_tour(costs, result.best_path, result.best_cost, start)


def test_real_valued_costs():
    costs = [[None, 1.5, 2.25, 7.1], [0.3, None, 4.4, 1.2], [2.0, 3.3, None, 0.7], [1.1, 6.6, 0.9, None]]
    result = solve_tsp(costs)
    assert result.best_cost == pytest.approx(brute_force(costs))


def test_deterministic():
    costs = random_matrix(7, seed=5)
    first = solve_tsp(costs)
    second = solve_tsp(costs)
    assert first.best_path == second.best_path
    assert first.best_cost == second.best_cost
    assert [s.kind for s in first.steps] == [s.kind for s in second.steps]


def test_start_without_exit_has_no_tour():
    costs = [[None, None, None], [1, None, 2], [3, 4, None]]
    with pytest.raises(NoTourError):
        solve_tsp(costs)


def test_infeasible_after_branching():
    # both cities 1 and 2 can only return to 0
    costs = [[None, 1, 1], [1, None, None], [1, None, None]]
    solver = LittleSolver(costs)
    with pytest.raises(NoTourError):
        solver.solve()
    statuses = [(s.include_status, s.exclude_status) for s in solver.trace.of_kind("branch_development")]
    assert statuses == [("infeasible", "infeasible")]


def test_cancel_event():
    event = threading.Event()
    event.set()
    with pytest.raises(SolveCancelled):
        solve_tsp(random_matrix(6, seed=1), cancel_event=event)


def test_time_limit():
    with pytest.raises(SolveCancelled):
        solve_tsp(random_matrix(6, seed=1), time_limit=0)


def test_trace_shape():
    result = solve_tsp(EXAMPLE_MATRIX)
    kinds = [s.kind for s in result.steps]
    assert set(kinds) <= STEP_KINDS
    assert kinds[0] == "matrix_reduction"
    assert kinds[1] == "root_node"
    assert kinds[-1] == "final_result"
    assert kinds.count("final_result") == 1
    assert "tour_found" in kinds
    final = result.steps[-1]
    assert list(final.best_path) == result.best_path
    assert final.best_cost == result.best_cost
    assert final.nodes_explored == result.nodes_explored


def test_trace_bounds_are_monotone():
    result = solve_tsp(random_matrix(7, seed=9))
    nodes = {result.steps[1].node.node_id: result.steps[1].node}
    for step in result.steps:
        if step.kind == "branch_development":
            parent = nodes[step.parent_id]
            for child in (step.include, step.exclude):
                assert child.parent_id == parent.node_id
                assert child.total_estimate >= parent.total_estimate
                nodes[child.node_id] = child


def test_incumbent_only_improves():
    result = solve_tsp(random_matrix(8, seed=2))
    costs = [s.cost for s in result.steps if s.kind == "tour_found" and s.improved]
    assert costs
    assert costs == sorted(costs, reverse=True)
    assert costs[-1] == result.best_cost


def test_trace_replays_without_recomputing_search():
    result = solve_tsp(random_matrix(6, seed=7))
    for step in result.steps:
        if step.kind == "matrix_reduction":
            reduced, amount = reduce_matrix(step.original)
            assert (reduced == step.reduced).all()
            assert amount == step.amount
        elif step.kind == "arc_blocking":
            reduced, amount = reduce_matrix(step.blocked_matrix)
            assert (reduced == step.reduced_matrix).all()
            assert amount == step.amount
            assert step.parent_matrix[step.arc] < SENTINEL
            assert step.blocked_matrix[step.arc] == SENTINEL
        elif step.kind == "regret_calculation":
            assert step.max_regret in step.regrets
            assert step.max_regret.regret == max(r.regret for r in step.regrets)


def test_trace_is_read_only():
    result = solve_tsp(EXAMPLE_MATRIX)
    step = result.steps[0]
    assert not step.reduced.flags.writeable
    with pytest.raises(ValueError):
        step.reduced[0, 0] = 1
    with pytest.raises(AttributeError):
        step.amount = 0


def test_trace_to_json():
    solver = LittleSolver(EXAMPLE_MATRIX)
    solver.solve()
    data = json.loads(solver.trace.to_json())
    assert len(data) == len(solver.trace)
    assert data[0]["kind"] == "matrix_reduction"
    assert data[1]["node"]["path"] == [0]
    assert data[-1]["best_path"] == solver.best_path


def test_solve_twice_starts_fresh():
    solver = LittleSolver(random_matrix(5, seed=3))
    first = solver.solve()
    second = solver.solve()
    assert [s.kind for s in second.steps] == [s.kind for s in first.steps]
    assert second.best_cost == first.best_cost
    assert second.best_path == first.best_path
    assert second.nodes_explored == first.nodes_explored
    assert len(solver.trace) == len(first.steps)
    assert len(solver.trace.of_kind("root_node")) == 1
    assert len(solver.trace.of_kind("final_result")) == 1


def test_descriptions_use_report_formatting():
    costs = [[None, 1.5, 2.25, 7.1], [0.3, None, 4.4, 1.2], [2.0, 3.3, None, 0.7], [1.1, 6.6, 0.9, None]]
    result = solve_tsp(costs)
    assert result.steps[-1].description.endswith(f"cost = {format_cost(result.best_cost)}")
    root = result.steps[1].node
    assert result.steps[1].description.endswith(f"bound = {format_cost(root.lower_bound)}")


def test_node_ids_are_unique_and_linked():
    result = solve_tsp(random_matrix(6, seed=8))
    seen = {result.steps[1].node.node_id}
    for step in result.steps:
        if step.kind == "branch_development":
            for child in (step.include, step.exclude):
                assert child.node_id not in seen
                assert child.parent_id == step.parent_id
                seen.add(child.node_id)
