import os
import sys

from .bounds import assignment_bound, nearest_neighbor_tour
from .data import EXAMPLE_MATRIX, INPUT_FILE, load_matrix
from .errors import LittleError
from .reduction import prepare_matrix
from .report import OUTPUT_FILE, TRACE_FILE, log, write_report
from .solver import LittleSolver


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    filename = argv[0] if argv else INPUT_FILE

    try:
        if filename == "example" or (not argv and not os.path.exists(filename)):
            labels, rows = None, EXAMPLE_MATRIX
        else:
            labels, rows = load_matrix(filename)
        start = int(argv[1]) if len(argv) > 1 else 0
        costs = prepare_matrix(rows, start)
    except (LittleError, ValueError) as e:
        print(f"Error reading matrix: {e}")
        sys.exit(1)

    with open(OUTPUT_FILE, "w") as f:
        f.write("--- REPORT ---\n")

    bounds = {
        "assignment": assignment_bound(costs),
        "nearest_neighbor": nearest_neighbor_tour(costs, start),
    }
    solver = LittleSolver(rows, start, labels)
    try:
        result = solver.solve()
    except LittleError as e:
        log(f"Error: {e}")
        sys.exit(1)

    write_report(result, costs, start, labels, OUTPUT_FILE, bounds)
    with open(TRACE_FILE, "w") as f:
        f.write(solver.trace.to_json(indent=1))
    print(f"Done. Check: {OUTPUT_FILE}, {TRACE_FILE}")


if __name__ == "__main__":
    main()
